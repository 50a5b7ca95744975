"""Enumerations of MyInvois codes"""

from enum import Enum, IntEnum


class DocumentFormat(str, Enum):
    """Wire format of submitted documents"""
    JSON = "JSON"
    XML = "XML"


class DocumentStatus(str, Enum):
    """Lifecycle status of a document"""
    VALID = "Valid"
    INVALID = "Invalid"
    SUBMITTED = "Submitted"
    CANCELLED = "Cancelled"
    PENDING = "Pending"
    REJECTED = "Rejected"

    @property
    def description(self) -> str:
        return f"{self.value} Document"

    @classmethod
    def values(cls) -> list:
        return [status.value for status in cls]


class DocumentTypeCode(IntEnum):
    """e-Invoice type codes accepted by search filters"""
    INVOICE = 4
    CREDIT_NOTE = 11
    DEBIT_NOTE = 12

    @property
    def description(self) -> str:
        return self.name.replace("_", " ").title()

    @classmethod
    def codes(cls) -> list:
        return [code.value for code in cls]


class InvoiceDirection(str, Enum):
    """Direction of a document relative to the authenticated taxpayer"""
    SENT = "Sent"
    RECEIVED = "Received"


class SubmissionOverallStatus(str, Enum):
    """Overall status of a submission"""
    IN_PROGRESS = "in progress"
    VALID = "valid"
    PARTIALLY_VALID = "partially valid"
    INVALID = "invalid"


# Overall statuses after which a submission no longer changes
COMPLETED_SUBMISSION_STATUSES = frozenset({
    SubmissionOverallStatus.VALID.value,
    SubmissionOverallStatus.PARTIALLY_VALID.value,
    SubmissionOverallStatus.INVALID.value,
})


class NotificationType(IntEnum):
    """Notification type codes"""
    PROFILE_DATA_VALIDATION = 3
    DOCUMENT_RECEIVED = 6
    DOCUMENT_VALIDATED = 7
    DOCUMENT_CANCELLED = 8
    USER_PROFILE_CHANGED = 10
    TAXPAYER_PROFILE_CHANGED = 11
    DOCUMENT_REJECTION_INITIATED = 15
    ERP_DATA_VALIDATION = 26
    DOCUMENTS_PROCESSING_SUMMARY = 33
    DOCUMENT_TEMPLATE_PUBLISHED = 34
    DOCUMENT_TEMPLATE_DELETION = 35


class NotificationStatus(IntEnum):
    """Notification delivery status codes"""
    NEW = 1
    PENDING = 2
    BATCHED = 3
    DELIVERED = 4
    ERROR = 5

    @property
    def is_final(self) -> bool:
        return self in (NotificationStatus.DELIVERED, NotificationStatus.ERROR)

    @property
    def is_in_progress(self) -> bool:
        return not self.is_final


class NotificationLanguage(str, Enum):
    MALAY = "ms"
    ENGLISH = "en"
