"""
Document submission and submission status polling
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from myinvois.client.api_client import ApiClient, HttpMethod, RequestOptions
from myinvois.exceptions import ApiError, MyInvoisError, RateLimitError, ValidationError
from myinvois.http.retry import RetryPolicy
from myinvois.models.documents import DocumentSummary
from myinvois.models.enums import COMPLETED_SUBMISSION_STATUSES, DocumentFormat
from myinvois.models.status import SubmissionStatus
from myinvois.models.submission import SubmissionItem, SubmissionResult
from myinvois.submission.validator import SubmissionValidator
from myinvois.validators.pagination import (
    MAX_PAGE_SIZE,
    pagination_params,
    validate_pagination,
    validate_submission_uid,
)


SUBMISSION_ENDPOINT = "/api/v1.0/documentsubmissions"
SUBMISSION_TIMEOUT = 30.0
MIN_POLL_INTERVAL = 3.0

STATUS_REQUIRED_FIELDS = (
    "submissionUid",
    "documentCount",
    "dateTimeReceived",
    "overallStatus",
    "documentSummary",
)

# (status, marker in server message, message, field, field message)
SUBMISSION_ERROR_RULES = [
    (400, "BadStructure", "Invalid submission structure",
     "structure", "Submission must contain valid document data"),
    (400, "MaximumSizeExceeded", "Maximum submission size exceeded",
     "size", "Total submission size must not exceed 5MB"),
    (403, "IncorrectSubmitter", "Invalid submitter",
     "submitter", "Not authorized to submit documents for this taxpayer"),
    (422, "DuplicateSubmission", "Duplicate submission detected",
     "duplicate", "Please wait 10 minutes before resubmitting the same documents"),
]


class SubmissionService:
    """
    Submits document batches and tracks their processing

    Example:
        >>> service = SubmissionService(api_client)
        >>> result = service.submit_documents([SubmissionItem.from_content(doc, "INV-001")])
        >>> status = service.get_submission_status(result.submission_uid)
    """

    def __init__(
        self,
        api_client: ApiClient,
        validator: Optional[SubmissionValidator] = None,
        retry_policy: Optional[RetryPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.api_client = api_client
        self.validator = validator or SubmissionValidator()
        self.retry_policy = retry_policy or RetryPolicy()
        self._clock = clock
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)
        self._last_poll_times: Dict[str, float] = {}
        self._poll_lock = threading.Lock()

    def submit_documents(
        self,
        documents: Iterable[Union[SubmissionItem, Mapping[str, Any]]],
        document_format: DocumentFormat = DocumentFormat.JSON,
    ) -> SubmissionResult:
        """
        Validate, prepare and submit a batch of documents

        Transient failures (network errors, HTTP 429 and 5xx) are retried with
        exponential backoff. Documents rejected by the server are reported in
        the result, not raised.

        Args:
            documents: SubmissionItem objects or mappings with ``document``,
                ``documentHash`` and ``codeNumber``
            document_format: JSON or XML, applied to the whole batch

        Raises:
            ValidationError: Invalid batch (raised before any network call)
            ApiError: Submission failed, or retries were exhausted
        """
        document_format = DocumentFormat(document_format)
        items = self.validator.validate_batch(documents)
        prepared = [self.validator.prepare_item(item, document_format) for item in items]

        self._logger.debug(
            f"Submitting {len(prepared)} document(s) in {document_format.value} format"
        )

        try:
            response = self.api_client.request_with_retry(
                HttpMethod.POST,
                SUBMISSION_ENDPOINT,
                RequestOptions(json={"documents": prepared}, timeout=SUBMISSION_TIMEOUT),
                policy=self.retry_policy,
            )
        except ApiError as e:
            self._logger.error(f"Document submission failed: {e.get_description()}")
            mapped = self._map_submission_error(e)
            if mapped is not None:
                raise mapped from e
            raise

        try:
            result = SubmissionResult.model_validate(response)
        except PydanticValidationError as e:
            raise ApiError(
                "Invalid response format from submission endpoint",
                cause=e,
                details=response,
            ) from e

        self._log_submission_result(result)
        return result

    def _map_submission_error(self, error: ApiError) -> Optional[ValidationError]:
        text = f"{error.message} {error.details or ''}"
        for status, marker, message, field_name, field_message in SUBMISSION_ERROR_RULES:
            if error.status_code == status and marker in text:
                return ValidationError(
                    message,
                    errors={field_name: [field_message]},
                    status_code=status,
                    cause=error,
                    details=error.details,
                )
        return None

    def _log_submission_result(self, result: SubmissionResult) -> None:
        self._logger.debug(
            f"Submission {result.submission_uid}: {result.accepted_count} accepted, "
            f"{result.rejected_count} rejected"
        )
        for rejected in result.rejected_documents:
            self._logger.warning(
                f"Document {rejected.invoice_code_number} rejected in submission "
                f"{result.submission_uid}: {rejected.error_message}"
            )

    def get_submission_status(
        self,
        submission_uid: str,
        page_no: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> SubmissionStatus:
        """
        Get the processing status of a submission

        The same submission may be polled at most once every 3 seconds.

        Raises:
            ValidationError: Malformed submission UID or pagination values
            RateLimitError: Polled again within the minimum interval
            ApiError: Request failed or the response is malformed
        """
        validate_submission_uid(submission_uid)
        validate_pagination(page_no, page_size)
        self._enforce_polling_interval(submission_uid)

        self._logger.debug(
            f"Retrieving submission status for {submission_uid} "
            f"(page_no={page_no}, page_size={page_size})"
        )

        try:
            response = self.api_client.request(
                HttpMethod.GET,
                f"{SUBMISSION_ENDPOINT}/{submission_uid}",
                RequestOptions(params=pagination_params(page_no, page_size)),
            )
        except MyInvoisError as e:
            self._logger.error(f"Failed to retrieve submission status for {submission_uid}: {e}")
            raise

        status = self._parse_status(response)
        self._log_submission_status(status)
        return status

    def _enforce_polling_interval(self, submission_uid: str) -> None:
        now = self._clock()
        with self._poll_lock:
            last_poll = self._last_poll_times.get(submission_uid)
            if last_poll is not None and now - last_poll < MIN_POLL_INTERVAL:
                raise RateLimitError(
                    f"Please wait {MIN_POLL_INTERVAL:g} seconds between status checks "
                    f"for the same submission",
                    retry_after=MIN_POLL_INTERVAL - (now - last_poll),
                )
            self._last_poll_times[submission_uid] = now

    def _parse_status(self, response: Dict[str, Any]) -> SubmissionStatus:
        for field_name in STATUS_REQUIRED_FIELDS:
            if response.get(field_name) is None:
                raise ApiError(f"Invalid response format: missing {field_name}", details=response)

        if not isinstance(response["documentSummary"], list):
            raise ApiError(
                "Invalid response format: documentSummary must be an array", details=response
            )

        try:
            return SubmissionStatus.model_validate(response)
        except PydanticValidationError as e:
            raise ApiError(
                f"Invalid response format from submission status endpoint: {e}",
                cause=e,
                details=response,
            ) from e

    def _log_submission_status(self, status: SubmissionStatus) -> None:
        self._logger.debug(
            f"Submission {status.submission_uid} is {status.overall_status} "
            f"({len(status.document_summary)} of {status.document_count} documents returned)"
        )
        failed = status.invalid_documents
        if failed:
            self._logger.error(
                f"Submission {status.submission_uid} has {len(failed)} invalid document(s): "
                + ", ".join(f"{doc.uuid} ({doc.internal_id})" for doc in failed)
            )

    def get_all_submission_documents(self, submission_uid: str) -> List[DocumentSummary]:
        """
        Collect the documents of a submission across all pages

        Waits the minimum polling interval between pages.
        """
        page_no = 1
        documents: List[DocumentSummary] = []

        while True:
            status = self.get_submission_status(submission_uid, page_no, MAX_PAGE_SIZE)
            documents.extend(status.document_summary)
            if len(status.document_summary) < MAX_PAGE_SIZE:
                return documents
            page_no += 1
            self._sleep(MIN_POLL_INTERVAL)

    @staticmethod
    def is_submission_complete(status: Union[SubmissionStatus, Mapping[str, Any]]) -> bool:
        """True once the submission is valid, partially valid or invalid"""
        if isinstance(status, SubmissionStatus):
            return status.is_complete
        return str(status.get("overallStatus", "")).lower() in COMPLETED_SUBMISSION_STATUSES
