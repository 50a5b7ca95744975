"""HTTP transport and retry policy"""

from myinvois.http.transport import (
    HttpTransport,
    RequestsTransport,
    Timeout,
    TransportResponse,
)
from myinvois.http.retry import RETRYABLE_STATUS_CODES, RetryPolicy

__all__ = [
    "HttpTransport",
    "RequestsTransport",
    "Timeout",
    "TransportResponse",
    "RETRYABLE_STATUS_CODES",
    "RetryPolicy",
]
