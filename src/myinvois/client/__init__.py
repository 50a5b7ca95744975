"""
HTTP client module for the MyInvois SDK
"""

from myinvois.client.api_client import ApiClient, HttpMethod, RequestOptions

__all__ = [
    "ApiClient",
    "HttpMethod",
    "RequestOptions",
]
