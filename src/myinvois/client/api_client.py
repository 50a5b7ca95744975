"""
Authenticated request execution for the MyInvois API

Every request carries a bearer token from the auth client, is traced with a
request ID and has its response mapped to a dict or to an SDK error. Retries
only happen through ``request_with_retry``.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from myinvois.auth.authentication_client import AuthClient
from myinvois.exceptions import (
    ApiError,
    AuthenticationError,
    MyInvoisError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from myinvois.http.retry import RetryPolicy
from myinvois.http.transport import HttpTransport, Timeout, TransportResponse


class HttpMethod(str, Enum):
    """HTTP method types supported"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass
class RequestOptions:
    """Per-request options"""
    headers: Optional[Dict[str, str]] = None
    params: Optional[Dict[str, Any]] = None
    json: Optional[Any] = None
    timeout: Optional[Timeout] = None


# Sensitive fields that should be redacted in logs
SENSITIVE_FIELDS = [
    "authorization",
    "client_secret",
    "access_token",
    "password",
    "secret",
]

# Status-specific message prefixes for error responses
STATUS_MESSAGES = {
    400: "Bad request",
    403: "Authorization denied",
    404: "Resource not found",
    422: "Unprocessable entity",
}


class ApiClient:
    """
    Request executor for the MyInvois API

    Example:
        >>> api = ApiClient("https://preprod-api.myinvois.hasil.gov.my", auth, transport)
        >>> api.request("GET", "/api/v1.0/documenttypes")
        {'result': [...]}
    """

    def __init__(
        self,
        base_url: str,
        auth_client: AuthClient,
        transport: HttpTransport,
        timeout: Optional[Timeout] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        rand: Optional[Callable[[], float]] = None,
        enable_logging: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.auth_client = auth_client
        self.transport = transport
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self.enable_logging = enable_logging
        self._sleep = sleep
        self._rand = rand
        self._logger = logger or logging.getLogger(__name__)

    def _generate_request_id(self) -> str:
        """Generate unique request ID for traceability"""
        timestamp = hex(int(time.time() * 1000))[2:]
        unique_id = uuid.uuid4().hex[:8]
        return f"myinvois-{timestamp}-{unique_id}"

    def _redact_sensitive_data(self, obj: Any) -> Any:
        """Redact sensitive data from object for logging"""
        if isinstance(obj, list):
            return [self._redact_sensitive_data(item) for item in obj]

        if isinstance(obj, dict):
            redacted = {}
            for key, value in obj.items():
                lower_key = str(key).lower()
                if any(field in lower_key for field in SENSITIVE_FIELDS):
                    redacted[key] = "[REDACTED]"
                elif isinstance(value, (dict, list)):
                    redacted[key] = self._redact_sensitive_data(value)
                else:
                    redacted[key] = value
            return redacted

        return obj

    def _resolve_method(self, method: Union[HttpMethod, str]) -> HttpMethod:
        if isinstance(method, HttpMethod):
            return method
        try:
            return HttpMethod(str(method).upper())
        except ValueError:
            supported = ", ".join(m.value for m in HttpMethod)
            raise ValidationError(
                f"Unsupported HTTP method: {method}",
                errors={"method": [f"HTTP method must be one of: {supported}"]},
            ) from None

    def _build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _build_headers(
        self,
        auth_headers: Mapping[str, str],
        request_id: str,
        extra: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-Request-ID": request_id,
        }
        headers.update(auth_headers)
        for name, value in (extra or {}).items():
            if name.lower() == "authorization":
                continue
            headers[name] = value
        headers["Authorization"] = auth_headers["Authorization"]
        return headers

    def request(
        self,
        method: Union[HttpMethod, str],
        path: str,
        options: Optional[RequestOptions] = None,
    ) -> Dict[str, Any]:
        """
        Send one authenticated request

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            options: Headers, query parameters, JSON body and timeout

        Returns:
            Decoded JSON object; ``{"status": 200}`` for an empty success body

        Raises:
            NetworkError: No response was obtained
            AuthenticationError: HTTP 401 (the token is invalidated first)
            RateLimitError: HTTP 429
            ValidationError: Success response reporting a validation error
            ApiError: Any other error response or malformed body
        """
        options = options or RequestOptions()
        method = self._resolve_method(method)
        url = self._build_url(path)
        request_id = self._generate_request_id()

        auth_headers = self.auth_client.get_auth_headers()
        headers = self._build_headers(auth_headers, request_id, options.headers)

        if self.enable_logging:
            self._logger.debug(
                f"{method.value} {url} [{request_id}] "
                f"headers={self._redact_sensitive_data(headers)} "
                f"params={options.params} body={self._redact_sensitive_data(options.json)}"
            )

        start_time = time.monotonic()
        try:
            response = self.transport.send(
                method.value,
                url,
                headers=headers,
                params=options.params,
                json=options.json,
                timeout=options.timeout if options.timeout is not None else self.timeout,
            )
        except NetworkError as e:
            self._logger.error(f"{method.value} {url} [{request_id}] failed: {e}")
            raise

        if self.enable_logging:
            duration = int((time.monotonic() - start_time) * 1000)
            self._logger.debug(
                f"{method.value} {url} [{request_id}] -> {response.status} in {duration}ms"
            )

        return self._handle_response(response)

    def request_with_retry(
        self,
        method: Union[HttpMethod, str],
        path: str,
        options: Optional[RequestOptions] = None,
        policy: Optional[RetryPolicy] = None,
    ) -> Dict[str, Any]:
        """
        Send a request, retrying transient failures with exponential backoff

        Network failures, HTTP 429 and 5xx responses are retried; every other
        error propagates unchanged.

        Raises:
            ApiError: "Maximum retry attempts reached" once attempts run out,
                chained from the last failure
        """
        policy = policy or self.retry_policy
        last_error: Optional[MyInvoisError] = None

        for attempt in range(policy.max_attempts):
            try:
                return self.request(method, path, options)
            except MyInvoisError as e:
                if not policy.is_retryable(e):
                    raise
                last_error = e

            if attempt < policy.max_attempts - 1:
                delay = policy.compute_delay(attempt, self._rand)
                self._logger.warning(
                    f"Request failed (attempt {attempt + 1}/{policy.max_attempts}), "
                    f"retrying in {delay:.2f}s: {last_error}"
                )
                self._sleep(delay)

        if last_error is None:
            raise ApiError("Unknown error occurred")

        self._logger.error(
            f"Request failed after {policy.max_attempts} attempts: {last_error}"
        )
        raise ApiError(
            f"Maximum retry attempts reached: {last_error}",
            status_code=last_error.status_code,
            cause=last_error,
            details=last_error.details,
        ) from last_error

    def get(
        self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any
    ) -> Dict[str, Any]:
        """Perform GET request"""
        return self.request(HttpMethod.GET, path, RequestOptions(params=params, **kwargs))

    def post(self, path: str, json: Optional[Any] = None, **kwargs: Any) -> Dict[str, Any]:
        """Perform POST request"""
        return self.request(HttpMethod.POST, path, RequestOptions(json=json, **kwargs))

    def put(self, path: str, json: Optional[Any] = None, **kwargs: Any) -> Dict[str, Any]:
        """Perform PUT request"""
        return self.request(HttpMethod.PUT, path, RequestOptions(json=json, **kwargs))

    def _handle_response(self, response: TransportResponse) -> Dict[str, Any]:
        if not response.ok:
            raise self._error_for_status(response)

        if not response.body.strip():
            return {"status": 200}

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError(
                "Invalid JSON response from API",
                status_code=response.status,
                cause=e,
                details={"body": response.text[:500]},
            ) from e

        if not isinstance(data, dict):
            raise ApiError(
                "Unexpected response format from API: expected a JSON object",
                status_code=response.status,
                details={"body": data},
            )

        if data.get("error"):
            raise self._error_from_body(data, response.status)

        return data

    def _error_from_body(self, data: Dict[str, Any], status: int) -> MyInvoisError:
        """Map an ``error`` field in a success body to an SDK error"""
        error = data["error"]
        kind = error.get("code") if isinstance(error, dict) else error
        message = data.get("message")
        if not message and isinstance(error, dict):
            message = error.get("message")

        if kind == "validation_error":
            return ValidationError(
                str(message or "Validation failed"),
                errors=_field_errors(data.get("errors")),
                status_code=status,
                details=data,
            )
        return ApiError(str(message or "API error occurred"), status_code=status, details=data)

    def _error_for_status(self, response: TransportResponse) -> MyInvoisError:
        """Classify a non-2xx response"""
        status = response.status
        message = response.error_message()
        details = response.json_or_none()

        self._logger.error(f"API request failed with HTTP {status}: {message}")

        if status == 401:
            self.auth_client.invalidate_token()
            return AuthenticationError(message, status_code=401, details=details)
        if status == 429:
            return RateLimitError(
                f"Rate limit exceeded: {message}",
                retry_after=response.retry_after(),
                details=details,
            )

        prefix = STATUS_MESSAGES.get(status, "API request failed")
        return ApiError(f"{prefix}: {message}", status_code=status, details=details)


def _field_errors(raw: Any) -> Dict[str, List[str]]:
    """Normalize a server ``errors`` payload to field -> messages"""
    if isinstance(raw, dict):
        return {
            str(key): [str(m) for m in value] if isinstance(value, list) else [str(value)]
            for key, value in raw.items()
        }
    if isinstance(raw, list):
        return {"errors": [str(item) for item in raw]}
    return {}
