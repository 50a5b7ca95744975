"""Exception classes for MyInvois SDK"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class MyInvoisErrorCategory(str, Enum):
    """MyInvois error category codes"""
    VALIDATION = "VAL"
    AUTH = "AUTH"
    NETWORK = "NET"
    API = "API"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class MyInvoisError(Exception):
    """
    Base exception for MyInvois errors

    All errors in the SDK extend from this class.
    Provides consistent error handling and categorization.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> MyInvoisErrorCategory:
        """Determine error category from code"""
        if not code:
            return MyInvoisErrorCategory.UNKNOWN

        if code.startswith("VAL"):
            return MyInvoisErrorCategory.VALIDATION
        if code.startswith("AUTH"):
            return MyInvoisErrorCategory.AUTH
        if code.startswith("NET"):
            return MyInvoisErrorCategory.NETWORK
        if code.startswith("API"):
            return MyInvoisErrorCategory.API
        if code.startswith("CONFIG"):
            return MyInvoisErrorCategory.CONFIG

        return MyInvoisErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "status_code": self.status_code,
            "category": self.category.value,
            "timestamp": self.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: MyInvoisErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]

        if self.code:
            parts.insert(0, f"[{self.code}]")

        if self.status_code:
            parts.append(f"(HTTP {self.status_code})")

        return " ".join(parts)


class ValidationError(MyInvoisError):
    """
    Caller input is malformed

    Carries a field -> messages mapping suitable for form-level display.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            status_code=status_code,
            cause=cause,
            details=details,
        )
        self.errors: Dict[str, List[str]] = errors or {}
        self.field = next(iter(self.errors), None)

    def get_errors(self) -> Dict[str, List[str]]:
        """Get field-level error messages"""
        return {key: list(messages) for key, messages in self.errors.items()}

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["errors"] = self.get_errors()
        return data


class ConfigError(MyInvoisError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class ApiError(MyInvoisError):
    """Server-side or business error with HTTP status and message"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: str = "API_ERROR",
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            status_code=status_code,
            cause=cause,
            details=details,
        )


class AuthenticationError(ApiError):
    """Credentials or token problem"""

    def __init__(
        self,
        message: str = "Authentication failed",
        status_code: Optional[int] = 401,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            code="AUTH_ERROR",
            cause=cause,
            details=details,
        )


class RateLimitError(ApiError):
    """Rate limit exceeded (HTTP 429)"""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[float] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            status_code=429,
            code="API_RATE_LIMITED",
            cause=cause,
            details=details,
        )
        self.retry_after = retry_after


class NetworkError(ApiError):
    """
    Network error for HTTP transport layer failures

    Raised when no response was obtained from the server.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        network_code: str = "NET10",
        retryable: bool = True,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message, status_code=status_code, code=network_code, cause=cause
        )
        self.network_code = network_code
        self.retryable = retryable

    @classmethod
    def timeout(
        cls, message: str = "Request timed out", cause: Optional[BaseException] = None
    ) -> "NetworkError":
        """Create a timeout error"""
        return cls(message, network_code="NET01", retryable=True, cause=cause)

    @classmethod
    def connection_refused(
        cls, message: str = "Connection refused", cause: Optional[BaseException] = None
    ) -> "NetworkError":
        """Create a connection refused error"""
        return cls(message, network_code="NET02", retryable=True, cause=cause)

    @classmethod
    def ssl_error(
        cls, message: str = "SSL/TLS error", cause: Optional[BaseException] = None
    ) -> "NetworkError":
        """Create an SSL error"""
        return cls(message, network_code="NET04", retryable=False, cause=cause)
