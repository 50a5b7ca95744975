"""
MyInvois SDK for Python

Client for the Malaysian MyInvois (LHDN) e-invoicing API
"""

from myinvois.client.myinvois_client import MyInvoisClient
from myinvois.exceptions import (
    MyInvoisError,
    MyInvoisErrorCategory,
    ValidationError,
    ConfigError,
    ApiError,
    AuthenticationError,
    NetworkError,
    RateLimitError,
)

# Authentication
from myinvois.auth import (
    AuthClient,
    IntermediaryAuthClient,
    Token,
)

# HTTP
from myinvois.client import (
    ApiClient,
    HttpMethod,
    RequestOptions,
)
from myinvois.http import (
    HttpTransport,
    RequestsTransport,
    TransportResponse,
    RetryPolicy,
)
from myinvois.cache import CacheStore, MemoryCache

# Configuration
from myinvois.config import (
    MyInvoisConfig,
    MyInvoisEnvironment,
    ConfigLoader,
    ConfigValidator,
    MYINVOIS_BASE_URLS,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)

# Submission
from myinvois.submission import SubmissionValidator

# Models
from myinvois.models import (
    DocumentFormat,
    DocumentStatus,
    DocumentTypeCode,
    InvoiceDirection,
    NotificationLanguage,
    NotificationStatus,
    NotificationType,
    SubmissionItem,
    SubmissionResult,
    SubmissionStatus,
    DocumentSummary,
    DocumentDetails,
    RawDocument,
    SearchResult,
    RecentDocuments,
    DocumentStateResponse,
    NotificationPage,
    DocumentType,
    DocumentTypeVersion,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "MyInvoisClient",
    # Exceptions
    "MyInvoisError",
    "MyInvoisErrorCategory",
    "ValidationError",
    "ConfigError",
    "ApiError",
    "AuthenticationError",
    "NetworkError",
    "RateLimitError",
    # Authentication
    "AuthClient",
    "IntermediaryAuthClient",
    "Token",
    # HTTP
    "ApiClient",
    "HttpMethod",
    "RequestOptions",
    "HttpTransport",
    "RequestsTransport",
    "TransportResponse",
    "RetryPolicy",
    "CacheStore",
    "MemoryCache",
    # Configuration
    "MyInvoisConfig",
    "MyInvoisEnvironment",
    "ConfigLoader",
    "ConfigValidator",
    "MYINVOIS_BASE_URLS",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    # Submission
    "SubmissionValidator",
    # Models
    "DocumentFormat",
    "DocumentStatus",
    "DocumentTypeCode",
    "InvoiceDirection",
    "NotificationLanguage",
    "NotificationStatus",
    "NotificationType",
    "SubmissionItem",
    "SubmissionResult",
    "SubmissionStatus",
    "DocumentSummary",
    "DocumentDetails",
    "RawDocument",
    "SearchResult",
    "RecentDocuments",
    "DocumentStateResponse",
    "NotificationPage",
    "DocumentType",
    "DocumentTypeVersion",
]
