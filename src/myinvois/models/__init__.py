"""Models module initialization"""

from myinvois.models.base import ApiModel
from myinvois.models.enums import (
    COMPLETED_SUBMISSION_STATUSES,
    DocumentFormat,
    DocumentStatus,
    DocumentTypeCode,
    InvoiceDirection,
    NotificationLanguage,
    NotificationStatus,
    NotificationType,
    SubmissionOverallStatus,
)
from myinvois.models.submission import (
    AcceptedDocument,
    RejectedDocument,
    SubmissionItem,
    SubmissionResult,
)
from myinvois.models.documents import (
    DocumentDetails,
    DocumentSearchResult,
    DocumentStateResponse,
    DocumentSummary,
    PageMetadata,
    RawDocument,
    RecentDocuments,
    SearchResult,
    ValidationResults,
    ValidationStep,
)
from myinvois.models.status import SubmissionStatus
from myinvois.models.notifications import DeliveryAttempt, Notification, NotificationPage
from myinvois.models.document_types import (
    DocumentType,
    DocumentTypeVersion,
    WorkflowParameter,
)

__all__ = [
    "ApiModel",
    "COMPLETED_SUBMISSION_STATUSES",
    "DocumentFormat",
    "DocumentStatus",
    "DocumentTypeCode",
    "InvoiceDirection",
    "NotificationLanguage",
    "NotificationStatus",
    "NotificationType",
    "SubmissionOverallStatus",
    "AcceptedDocument",
    "RejectedDocument",
    "SubmissionItem",
    "SubmissionResult",
    "DocumentDetails",
    "DocumentSearchResult",
    "DocumentStateResponse",
    "DocumentSummary",
    "PageMetadata",
    "RawDocument",
    "RecentDocuments",
    "SearchResult",
    "ValidationResults",
    "ValidationStep",
    "SubmissionStatus",
    "DeliveryAttempt",
    "Notification",
    "NotificationPage",
    "DocumentType",
    "DocumentTypeVersion",
    "WorkflowParameter",
]
