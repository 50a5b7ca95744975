"""
Service modules for MyInvois API operations
"""

from myinvois.services.submission import SubmissionService
from myinvois.services.documents import DocumentService
from myinvois.services.taxpayer import TaxpayerService
from myinvois.services.notifications import NotificationService
from myinvois.services.document_types import DocumentTypeService

__all__ = [
    "SubmissionService",
    "DocumentService",
    "TaxpayerService",
    "NotificationService",
    "DocumentTypeService",
]
