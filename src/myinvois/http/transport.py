"""
HTTP transport layer for the MyInvois API

The transport only moves bytes: it sends one request and returns the raw
response, or raises NetworkError when no response could be obtained. Status
code interpretation belongs to the callers (auth clients and ApiClient).
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, Union, runtime_checkable

import requests
from requests.adapters import HTTPAdapter

from myinvois.exceptions import NetworkError


logger = logging.getLogger(__name__)

# (connect, read) timeout in seconds, or a single value for both
Timeout = Union[float, Tuple[float, float]]


@dataclass
class TransportResponse:
    """Raw HTTP response returned by a transport"""
    status: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup"""
        lower = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lower:
                return value
        return None

    def json(self) -> Any:
        """Decode the body as JSON (raises ValueError on malformed content)"""
        return json.loads(self.body.decode("utf-8"))

    def json_or_none(self) -> Optional[Dict[str, Any]]:
        """Decode the body as a JSON object, or None when it is not one"""
        if not self.body.strip():
            return None
        try:
            data = self.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    def error_message(self) -> str:
        """Best-effort server error message for a failed response"""
        data = self.json_or_none() or {}
        message = data.get("error_description") or data.get("message") or data.get("error")
        if isinstance(message, dict):
            message = message.get("message") or message.get("details")
        if message:
            return str(message)
        return self.text.strip() or f"HTTP {self.status}"

    def retry_after(self) -> Optional[float]:
        """Numeric ``Retry-After`` header in seconds, if present"""
        value = self.header("Retry-After")
        if value is None:
            return None
        try:
            seconds = float(value)
        except ValueError:
            return None
        return seconds if seconds >= 0 else None


@runtime_checkable
class HttpTransport(Protocol):
    """Abstract HTTP capability consumed by the SDK"""

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        json: Optional[Any] = None,
        timeout: Optional[Timeout] = None,
    ) -> TransportResponse: ...

    def close(self) -> None: ...


class RequestsTransport:
    """
    Transport backed by a pooled ``requests.Session``

    Retries are never performed here; the SDK decides when to retry.

    Example:
        >>> transport = RequestsTransport(timeout=(10.0, 30.0))
        >>> response = transport.send("GET", "https://example.com")
        >>> response.status
        200
    """

    def __init__(
        self,
        timeout: Timeout = (10.0, 30.0),
        pool_size: int = 10,
        verify: Union[bool, str] = True,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.verify = verify
        self._session = session or self._create_session(pool_size)

    def _create_session(self, pool_size: int) -> requests.Session:
        """Create requests session with connection pooling"""
        session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=pool_size,
            pool_maxsize=pool_size,
            max_retries=0,
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def send(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
        json: Optional[Any] = None,
        timeout: Optional[Timeout] = None,
    ) -> TransportResponse:
        try:
            response = self._session.request(
                method=method,
                url=url,
                headers=dict(headers or {}),
                params=params,
                data=data,
                json=json,
                timeout=timeout if timeout is not None else self.timeout,
                verify=self.verify,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError.timeout(f"Request timed out: {method} {url}", cause=e) from e
        except requests.exceptions.SSLError as e:
            raise NetworkError.ssl_error(f"SSL/TLS error: {e}", cause=e) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError.connection_refused(f"Connection error: {e}", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request error: {e}", cause=e) from e

        logger.debug(f"{method} {url} -> HTTP {response.status_code}")
        return TransportResponse(
            status=response.status_code,
            body=response.content or b"",
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the HTTP session"""
        self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
