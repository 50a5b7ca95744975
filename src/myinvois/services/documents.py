"""
Document retrieval, search and state changes
"""

import logging
import re
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from myinvois.client.api_client import ApiClient, HttpMethod, RequestOptions
from myinvois.exceptions import ApiError, MyInvoisError, ValidationError
from myinvois.models.base import ApiModel
from myinvois.models.documents import (
    DocumentDetails,
    DocumentStateResponse,
    RawDocument,
    RecentDocuments,
    SearchResult,
)
from myinvois.models.enums import DocumentStatus, DocumentTypeCode, InvoiceDirection
from myinvois.validators.date_validator import validate_date_range
from myinvois.validators.filters import build_query, validate_choice
from myinvois.validators.pagination import validate_pagination
from myinvois.validators.uuid_validator import validate_uuid


DOCUMENTS_ENDPOINT = "/api/v1.0/documents"

SEARCH_MAX_DAYS = 30
RECENT_MAX_DAYS = 31
MAX_REASON_LENGTH = 500

SEARCH_QUERY_PATTERN = re.compile(r"[A-Za-z0-9_\- ]+")
LONG_ID_PATTERN = re.compile(r"[A-Z0-9 ]{40,}")

DATE_FILTERS = ("submissionDateFrom", "submissionDateTo", "issueDateFrom", "issueDateTo")
SEARCH_FILTERS = (
    "pageNo", "pageSize", "status", "documentType", "uuid", "searchQuery", "invoiceDirection",
)
RECENT_FILTERS = ("pageNo", "pageSize", "invoiceDirection", "status", "documentType")

NOT_FOUND_DETAILS_MESSAGE = (
    "Document not found or access not authorized. "
    "Note: Receivers can only access Valid or Cancelled documents."
)

# (status, marker in server message, message, field, field message)
STATE_CHANGE_ERROR_RULES = [
    (400, "OperationPeriodOver", "{action} period has expired",
     "time", "Document can no longer be {verb} as the time limit has passed"),
    (400, "IncorrectState", "Document cannot be {verb}",
     "state", "Document must be in valid state to be {verb}"),
    (400, "ActiveReferencingDocuments", "Document has active references",
     "references", "Referenced documents must be {verb} first"),
]

M = TypeVar("M", bound=ApiModel)


class DocumentService:
    """
    Document operations

    Example:
        >>> documents = DocumentService(api_client)
        >>> details = documents.get_document_details("F9D425P6DS7D8IU")
        >>> details.status
        'Valid'
    """

    def __init__(
        self,
        api_client: ApiClient,
        portal_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_client = api_client
        self.portal_url = portal_url.rstrip("/") if portal_url else None
        self._logger = logger or logging.getLogger(__name__)

    def _parse(self, model: Type[M], response: Dict[str, Any], endpoint: str) -> M:
        try:
            return model.model_validate(response)
        except PydanticValidationError as e:
            raise ApiError(
                f"Invalid response format from {endpoint} endpoint",
                cause=e,
                details=response,
            ) from e

    def get_document(self, uuid: str) -> RawDocument:
        """
        Get a document with its original content

        Raises:
            ValidationError: Malformed UUID
            ApiError: Document missing, not yet valid, or not accessible
        """
        validate_uuid(uuid)
        self._logger.debug(f"Retrieving document {uuid}")

        try:
            response = self.api_client.request(HttpMethod.GET, f"{DOCUMENTS_ENDPOINT}/{uuid}/raw")
        except ApiError as e:
            self._logger.error(f"Document retrieval failed for {uuid}: {e}")
            mapped = self._retrieval_error(e)
            if mapped is not None:
                raise mapped from e
            raise

        if "uuid" not in response:
            raise ApiError("Invalid response format from document endpoint", details=response)

        document = self._parse(RawDocument, response, "document")
        self._logger.debug(f"Retrieved document {uuid} (status={document.status})")
        return document

    def _retrieval_error(self, error: ApiError) -> Optional[ApiError]:
        message = error.message
        if error.status_code == 404 and "invalid status" in message:
            return ApiError(
                "Document exists but has invalid status. Use get_document_details() instead.",
                status_code=404, cause=error, details=error.details,
            )
        if error.status_code == 404 and "submitted status" in message:
            return ApiError(
                "Document exists but is still in submitted status.",
                status_code=404, cause=error, details=error.details,
            )
        if error.status_code == 403 and "not authorized" in message:
            return ApiError(
                "Not authorized to access this document.",
                status_code=403, cause=error, details=error.details,
            )
        return None

    def get_document_details(self, uuid: str) -> DocumentDetails:
        """
        Get a document's details including validation results

        Raises:
            ValidationError: Malformed UUID
            ApiError: HTTP 404 when the document is missing or not accessible
        """
        validate_uuid(uuid)

        try:
            response = self.api_client.request(
                HttpMethod.GET, f"{DOCUMENTS_ENDPOINT}/{uuid}/details"
            )
        except ApiError as e:
            self._logger.error(f"Failed to retrieve document details for {uuid}: {e}")
            if e.status_code == 404:
                raise ApiError(
                    NOT_FOUND_DETAILS_MESSAGE, status_code=404, cause=e, details=e.details
                ) from e
            raise

        if "uuid" not in response:
            raise ApiError(
                "Invalid response format from document details endpoint", details=response
            )

        details = self._parse(DocumentDetails, response, "document details")
        self._logger.debug(f"Retrieved document details for {uuid} (status={details.status})")
        return details

    def get_document_share_url(self, uuid: str, long_id: str) -> str:
        """Public portal URL at which a validated document can be viewed"""
        validate_uuid(uuid)
        if not long_id:
            raise ValidationError("Long ID cannot be empty", errors={"longId": ["Long ID is required"]})
        if not LONG_ID_PATTERN.fullmatch(long_id):
            raise ValidationError("Invalid long ID format", errors={"longId": ["Invalid long ID format"]})
        if not self.portal_url:
            raise ValidationError(
                "Portal URL is not configured", errors={"portalUrl": ["Portal URL is required"]}
            )
        return f"{self.portal_url}/{uuid}/share/{long_id}"

    def search_documents(self, filters: Optional[Mapping[str, Any]] = None) -> SearchResult:
        """
        Search documents

        Filters use the API's names: ``submissionDateFrom``/``submissionDateTo``
        or ``issueDateFrom``/``issueDateTo`` (one range is required, at most
        30 days), ``pageNo``, ``pageSize``, ``status``, ``documentType``,
        ``uuid``, ``searchQuery`` and ``invoiceDirection``.

        Raises:
            ValidationError: Invalid filters (raised before any network call)
        """
        filters = filters or {}
        self._validate_filters(filters, SEARCH_MAX_DAYS, require_range=True)

        if filters.get("searchQuery") is not None:
            if not SEARCH_QUERY_PATTERN.fullmatch(str(filters["searchQuery"])):
                message = "Search query contains invalid characters"
                raise ValidationError(message, errors={"searchQuery": [message]})

        query = build_query(filters, DATE_FILTERS, SEARCH_FILTERS)
        self._logger.debug(f"Searching documents with {query}")

        try:
            response = self.api_client.request(
                HttpMethod.GET, f"{DOCUMENTS_ENDPOINT}/search", RequestOptions(params=query)
            )
        except MyInvoisError as e:
            self._logger.error(f"Document search failed: {e}")
            raise

        if "documents" not in response or "metadata" not in response:
            raise ApiError("Invalid response format from search endpoint", details=response)

        result = self._parse(SearchResult, response, "search")
        self._logger.debug(
            f"Document search returned {len(result.documents)} document(s) "
            f"(total_count={result.metadata.total_count})"
        )
        return result

    def get_recent_documents(self, filters: Optional[Mapping[str, Any]] = None) -> RecentDocuments:
        """
        List recent documents

        Accepts the same filters as search, with date ranges of up to 31 days
        and no range required.
        """
        filters = filters or {}
        self._validate_filters(filters, RECENT_MAX_DAYS, require_range=False)

        query = build_query(filters, DATE_FILTERS, RECENT_FILTERS)
        self._logger.debug(f"Retrieving recent documents with {query}")

        try:
            response = self.api_client.request(
                HttpMethod.GET, f"{DOCUMENTS_ENDPOINT}/recent", RequestOptions(params=query)
            )
        except MyInvoisError as e:
            self._logger.error(f"Failed to retrieve recent documents: {e}")
            raise

        if "result" not in response or "metadata" not in response:
            raise ApiError(
                "Invalid response format from recent documents endpoint", details=response
            )

        return self._parse(RecentDocuments, response, "recent documents")

    def _validate_filters(
        self, filters: Mapping[str, Any], max_days: int, require_range: bool
    ) -> None:
        submission_start, _ = validate_date_range(
            filters.get("submissionDateFrom"),
            filters.get("submissionDateTo"),
            "submissionDate",
            max_days,
        )
        issue_start, _ = validate_date_range(
            filters.get("issueDateFrom"),
            filters.get("issueDateTo"),
            "issueDate",
            max_days,
        )

        if require_range and submission_start is None and issue_start is None:
            message = "Either submission dates or issue dates must be provided"
            raise ValidationError(message, errors={"dateRange": [message]})

        validate_pagination(filters.get("pageNo"), filters.get("pageSize"))
        validate_choice(
            filters, "invoiceDirection", [d.value for d in InvoiceDirection],
            "Invalid invoice direction",
        )
        validate_choice(filters, "status", DocumentStatus.values(), "Invalid document status")
        validate_choice(
            filters, "documentType", DocumentTypeCode.codes(), "Invalid document type",
            convert=int,
        )

    def reject_document(self, uuid: str, reason: str) -> DocumentStateResponse:
        """
        Reject a received document

        Raises:
            ValidationError: Invalid input, expired rejection window, wrong
                state, active references, or caller is not the recipient
        """
        return self._change_state(uuid, DocumentStatus.REJECTED, reason)

    def cancel_document(self, uuid: str, reason: str) -> DocumentStateResponse:
        """
        Cancel an issued document

        Raises:
            ValidationError: Invalid input, expired cancellation window, wrong
                state, active references, or caller is not the issuer
        """
        return self._change_state(uuid, DocumentStatus.CANCELLED, reason)

    def _change_state(
        self, uuid: str, status: DocumentStatus, reason: str
    ) -> DocumentStateResponse:
        validate_uuid(uuid)
        self._validate_reason(reason, status)

        self._logger.debug(f"Requesting {status.value} state for document {uuid}")

        try:
            response = self.api_client.request(
                HttpMethod.PUT,
                f"{DOCUMENTS_ENDPOINT}/state/{uuid}/state",
                RequestOptions(json={"status": status.value, "reason": reason}),
            )
        except ApiError as e:
            self._logger.error(f"Document state change failed for {uuid}: {e}")
            mapped = self._state_change_error(e, status)
            if mapped is not None:
                raise mapped from e
            raise

        if "uuid" not in response or "status" not in response:
            raise ApiError(
                "Invalid response format from document state endpoint", details=response
            )

        result = self._parse(DocumentStateResponse, response, "document state")
        self._logger.debug(f"Document {uuid} is now {result.status}")
        return result

    def _validate_reason(self, reason: str, status: DocumentStatus) -> None:
        action = "Rejection" if status == DocumentStatus.REJECTED else "Cancellation"
        if not reason or not reason.strip():
            raise ValidationError(
                f"{action} reason is required",
                errors={"reason": [f"{action} reason cannot be empty"]},
            )
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(
                f"{action} reason is too long",
                errors={"reason": [f"{action} reason must not exceed {MAX_REASON_LENGTH} characters"]},
            )

    def _state_change_error(
        self, error: ApiError, status: DocumentStatus
    ) -> Optional[ValidationError]:
        rejecting = status == DocumentStatus.REJECTED
        action = "Rejection" if rejecting else "Cancellation"
        verb = "rejected" if rejecting else "cancelled"
        text = f"{error.message} {error.details or ''}"

        for code, marker, message, field_name, field_message in STATE_CHANGE_ERROR_RULES:
            if error.status_code == code and marker in text:
                return ValidationError(
                    message.format(action=action, verb=verb),
                    errors={field_name: [field_message.format(verb=verb)]},
                    status_code=code,
                    cause=error,
                )

        if error.status_code == 403:
            party = "recipient" if rejecting else "issuer"
            operation = "reject" if rejecting else "cancel"
            return ValidationError(
                f"Not authorized to {operation} document",
                errors={"auth": [f"Only the document {party} can {operation} the document"]},
                status_code=403,
                cause=error,
            )
        return None
