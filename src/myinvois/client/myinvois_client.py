"""
MyInvois client

Single entry point wiring authentication, request execution and the
service modules from one configuration.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from myinvois.auth.authentication_client import AuthClient
from myinvois.auth.intermediary_client import IntermediaryAuthClient
from myinvois.auth.token import Token
from myinvois.cache import CacheStore, MemoryCache
from myinvois.client.api_client import ApiClient
from myinvois.config.config_loader import ConfigLoader
from myinvois.config.myinvois_config import MyInvoisConfig
from myinvois.exceptions import ConfigError
from myinvois.http.retry import RetryPolicy
from myinvois.http.transport import HttpTransport, RequestsTransport
from myinvois.models.document_types import DocumentType, DocumentTypeVersion
from myinvois.models.documents import (
    DocumentDetails,
    DocumentStateResponse,
    DocumentSummary,
    RawDocument,
    RecentDocuments,
    SearchResult,
)
from myinvois.models.enums import DocumentFormat
from myinvois.models.notifications import NotificationPage
from myinvois.models.status import SubmissionStatus
from myinvois.models.submission import SubmissionItem, SubmissionResult
from myinvois.services.document_types import DocumentTypeService
from myinvois.services.documents import DocumentService
from myinvois.services.notifications import NotificationService
from myinvois.services.submission import SubmissionService
from myinvois.services.taxpayer import TaxpayerService


class MyInvoisClient:
    """
    MyInvois API client

    Example:
        >>> client = MyInvoisClient.from_config({
        ...     "client_id": "your-client-id",
        ...     "client_secret": "your-client-secret",
        ... })
        >>> with client:
        ...     result = client.submit_documents([SubmissionItem.from_content(doc, "INV-001")])
        ...     status = client.get_submission_status(result.submission_uid)
    """

    def __init__(
        self,
        config: MyInvoisConfig,
        transport: Optional[HttpTransport] = None,
        cache: Optional[CacheStore] = None,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        rand: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.cache = cache if cache is not None else MemoryCache()
        self._logger = logger or logging.getLogger(__name__)

        timeout = (config.connect_timeout / 1000.0, config.timeout / 1000.0)
        self.transport = transport or RequestsTransport(timeout=timeout)

        auth_class = IntermediaryAuthClient if config.is_intermediary else AuthClient
        self.auth: AuthClient = auth_class.from_config(
            config, self.transport, cache=self.cache, clock=clock, logger=logger
        )

        retry_policy = RetryPolicy(
            max_attempts=config.retry_attempts,
            base_delay=config.retry_delay,
            max_delay=config.max_retry_delay,
        )
        self.api = ApiClient(
            config.get_resolved_base_url(),
            self.auth,
            self.transport,
            timeout=timeout,
            retry_policy=retry_policy,
            sleep=sleep,
            rand=rand,
            enable_logging=config.enable_logging,
            logger=logger,
        )

        self.submissions = SubmissionService(
            self.api, retry_policy=retry_policy, clock=monotonic, sleep=sleep, logger=logger
        )
        self.documents = DocumentService(self.api, portal_url=config.get_portal_url(), logger=logger)
        self.taxpayers = TaxpayerService(self.api, cache=self.cache, logger=logger)
        self.notifications = NotificationService(self.api, logger=logger)
        self.document_types = DocumentTypeService(self.api, logger=logger)

    @classmethod
    def from_config(
        cls,
        config: Union[MyInvoisConfig, Mapping[str, Any]],
        cache: Optional[CacheStore] = None,
        transport: Optional[HttpTransport] = None,
        **kwargs: Any,
    ) -> "MyInvoisClient":
        """
        Create a client, selecting intermediary mode from the configuration

        Args:
            config: Resolved configuration, or a dict resolved with ConfigLoader
            cache: Token and TIN validation cache (defaults to MemoryCache)
            transport: HTTP transport (defaults to RequestsTransport)

        Raises:
            ValidationError: If a dict configuration is invalid
        """
        if not isinstance(config, MyInvoisConfig):
            config = ConfigLoader().resolve(dict(config))
        return cls(config, transport=transport, cache=cache, **kwargs)

    @property
    def is_intermediary(self) -> bool:
        return self.auth.is_intermediary

    # Authentication

    def authenticate(self, taxpayer_tin: Optional[str] = None) -> Token:
        """
        Authenticate, optionally switching the taxpayer in intermediary mode

        Raises:
            ConfigError: taxpayer_tin given without intermediary mode
        """
        if isinstance(self.auth, IntermediaryAuthClient):
            return self.auth.authenticate(taxpayer_tin)
        if taxpayer_tin is not None:
            raise ConfigError("Acting on behalf of a taxpayer requires intermediary mode")
        return self.auth.authenticate()

    def get_access_token(self) -> str:
        return self.auth.get_access_token()

    def on_behalf_of(self, tin: str) -> "MyInvoisClient":
        """
        Act on behalf of a taxpayer (intermediary mode only)

        Raises:
            ConfigError: Client is not in intermediary mode
            ValidationError: Malformed TIN
        """
        if not isinstance(self.auth, IntermediaryAuthClient):
            raise ConfigError("on_behalf_of() requires intermediary mode")
        self.auth.on_behalf_of(tin)
        return self

    # Submissions

    def submit_documents(
        self,
        documents: Iterable[Union[SubmissionItem, Mapping[str, Any]]],
        document_format: DocumentFormat = DocumentFormat.JSON,
    ) -> SubmissionResult:
        return self.submissions.submit_documents(documents, document_format)

    def get_submission_status(
        self,
        submission_uid: str,
        page_no: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> SubmissionStatus:
        return self.submissions.get_submission_status(submission_uid, page_no, page_size)

    def get_all_submission_documents(self, submission_uid: str) -> List[DocumentSummary]:
        return self.submissions.get_all_submission_documents(submission_uid)

    # Documents

    def get_document(self, uuid: str) -> RawDocument:
        return self.documents.get_document(uuid)

    def get_document_details(self, uuid: str) -> DocumentDetails:
        return self.documents.get_document_details(uuid)

    def get_document_share_url(self, uuid: str, long_id: str) -> str:
        return self.documents.get_document_share_url(uuid, long_id)

    def search_documents(self, filters: Optional[Mapping[str, Any]] = None) -> SearchResult:
        return self.documents.search_documents(filters)

    def get_recent_documents(
        self, filters: Optional[Mapping[str, Any]] = None
    ) -> RecentDocuments:
        return self.documents.get_recent_documents(filters)

    def reject_document(self, uuid: str, reason: str) -> DocumentStateResponse:
        return self.documents.reject_document(uuid, reason)

    def cancel_document(self, uuid: str, reason: str) -> DocumentStateResponse:
        return self.documents.cancel_document(uuid, reason)

    # Taxpayers

    def validate_taxpayer_tin(
        self, tin: str, id_type: str, id_value: str, use_cache: bool = True
    ) -> bool:
        return self.taxpayers.validate_taxpayer_tin(tin, id_type, id_value, use_cache)

    # Notifications

    def get_notifications(
        self, filters: Optional[Mapping[str, Any]] = None
    ) -> NotificationPage:
        return self.notifications.get_notifications(filters)

    # Document types

    def get_document_types(self) -> List[DocumentType]:
        return self.document_types.get_document_types()

    def get_document_type(self, document_type_id: int) -> DocumentType:
        return self.document_types.get_document_type(document_type_id)

    def get_document_type_version(
        self, document_type_id: int, version_id: int
    ) -> DocumentTypeVersion:
        return self.document_types.get_document_type_version(document_type_id, version_id)

    def find_document_type_by_code(self, invoice_type_code: int) -> Optional[DocumentType]:
        return self.document_types.find_document_type_by_code(invoice_type_code)

    def get_active_document_types(self, now: Optional[datetime] = None) -> List[DocumentType]:
        return self.document_types.get_active_document_types(now)

    # Lifecycle

    def close(self) -> None:
        """Close the HTTP transport"""
        self._logger.debug("Closing MyInvois client")
        self.transport.close()

    def __enter__(self) -> "MyInvoisClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def get_status(self) -> Dict[str, Any]:
        """Summary of the client's configuration and token state"""
        status: Dict[str, Any] = {
            "environment": self.config.environment.value,
            "base_url": self.config.get_resolved_base_url(),
            "intermediary": self.is_intermediary,
            "has_valid_token": self.auth.has_valid_token(),
        }
        if isinstance(self.auth, IntermediaryAuthClient):
            status["taxpayer_tin"] = self.auth.current_taxpayer
        return status
