"""
OAuth2 client-credentials authentication for the MyInvois identity service

Tokens are kept in memory and in a shared cache. A token is only handed out
while it has more than ``refresh_buffer`` seconds of life left, so a request
never starts with a token that is about to expire.
"""

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from myinvois.auth.token import AuthContext, Token, TokenState
from myinvois.cache import CacheStore, MemoryCache
from myinvois.config.myinvois_config import ConfigDefaults, MyInvoisConfig
from myinvois.exceptions import (
    AuthenticationError,
    ConfigError,
    MyInvoisError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from myinvois.http.transport import HttpTransport, Timeout, TransportResponse


class AuthClient:
    """
    Token manager for direct (taxpayer) authentication

    Example:
        >>> auth = AuthClient("client-id", "secret", "https://preprod-api.myinvois.hasil.gov.my",
        ...                   transport=RequestsTransport())
        >>> token = auth.get_access_token()
    """

    TOKEN_CACHE_PREFIX = "myinvois_token_"
    DEFAULT_SCOPE = ConfigDefaults.SCOPE
    is_intermediary = False

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        transport: HttpTransport,
        cache: Optional[CacheStore] = None,
        refresh_buffer: int = ConfigDefaults.TOKEN_REFRESH_BUFFER,
        timeout: Optional[Timeout] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        try:
            self.context = AuthContext(client_id, client_secret, base_url)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        self.transport = transport
        self.cache = cache if cache is not None else MemoryCache()
        self.refresh_buffer = refresh_buffer
        self.timeout = timeout
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)
        self._state = TokenState()

    @classmethod
    def from_config(
        cls,
        config: MyInvoisConfig,
        transport: HttpTransport,
        cache: Optional[CacheStore] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> "AuthClient":
        """Create an auth client from a resolved configuration"""
        return cls(
            client_id=config.client_id,
            client_secret=config.client_secret,
            base_url=config.get_resolved_identity_url(),
            transport=transport,
            cache=cache,
            refresh_buffer=config.token_refresh_buffer,
            timeout=(config.connect_timeout / 1000.0, config.timeout / 1000.0),
            clock=clock,
            logger=logger,
        )

    @property
    def cache_key(self) -> Optional[str]:
        """Cache key of the token for the current identity"""
        return self.TOKEN_CACHE_PREFIX + self.context.client_id

    def authenticate(self) -> Token:
        """
        Obtain a token, from cache when possible, otherwise from the identity service

        Returns:
            Token valid for more than ``refresh_buffer`` seconds

        Raises:
            AuthenticationError: Rejected credentials or malformed token response
            ValidationError: The identity service rejected the request (HTTP 400)
            RateLimitError: Too many token requests
            NetworkError: No response from the identity service
        """
        with self._state.lock:
            return self._authenticate()

    def get_access_token(self) -> str:
        """Return a bearer token, authenticating only when needed"""
        token = self._state.valid_token(self._clock(), self.refresh_buffer)
        if token is not None:
            return token.access_token

        with self._state.lock:
            # Another thread may have authenticated while we waited for the lock
            token = self._state.valid_token(self._clock(), self.refresh_buffer)
            if token is None:
                token = self._authenticate()
            return token.access_token

    def has_valid_token(self) -> bool:
        """Whether a usable token is held in memory or in the cache"""
        with self._state.lock:
            if self._state.valid_token(self._clock(), self.refresh_buffer) is not None:
                return True

            key = self.cache_key
            if key is None:
                return False

            cached = self._cached_token(key)
            if cached is None:
                return False

            self._state.replace(cached)
            return True

    def invalidate_token(self) -> None:
        """Drop the current token from memory and cache"""
        with self._state.lock:
            self._state.clear()
            key = self.cache_key
            if key is not None:
                self.cache.forget(key)
        self._logger.debug("Access token invalidated")

    def get_request_headers(self) -> Dict[str, str]:
        """Extra headers every API request must carry for this identity"""
        return {}

    def get_auth_headers(self) -> Dict[str, str]:
        """
        Identity headers plus the ``Authorization`` bearer header

        Both are read under the state lock, so the token always belongs to
        the identity named by the other headers.
        """
        with self._state.lock:
            headers = dict(self.get_request_headers())
            headers["Authorization"] = f"Bearer {self.get_access_token()}"
            return headers

    def _authenticate(self) -> Token:
        self._ensure_ready()
        key = self.cache_key

        cached = self._cached_token(key)
        if cached is not None:
            self._logger.debug("Using cached access token")
            self._state.replace(cached)
            return cached

        data = self._request_token()
        self._validate_auth_response(data)

        token = Token.from_response(data, self._clock())
        ttl = float(data["expires_in"]) - self.refresh_buffer
        if ttl > 0:
            self.cache.put(key, token.to_cache(), ttl)
        else:
            self._logger.warning(
                f"Token lifetime ({data['expires_in']}s) is within the refresh buffer; not caching"
            )

        self._state.replace(token)
        self._logger.debug(f"Authentication successful (expires_in={data['expires_in']})")
        return token

    def _ensure_ready(self) -> None:
        """Hook for variants that need extra context before authenticating"""

    def _cached_token(self, key: str) -> Optional[Token]:
        raw = self.cache.get(key)
        if raw is None:
            return None

        token = Token.from_cache(raw) if isinstance(raw, Mapping) else None
        if token is None or not token.is_valid(self._clock(), self.refresh_buffer):
            self.cache.forget(key)
            return None
        return token

    def _token_request_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }

    def _request_token(self) -> Dict[str, Any]:
        url = self.context.token_url
        form = {
            "grant_type": "client_credentials",
            "client_id": self.context.client_id,
            "client_secret": self.context.client_secret,
            "scope": self.DEFAULT_SCOPE,
        }

        self._logger.debug(
            f"Requesting access token from {url} (client_id={self.context.client_id[:5]}...)"
        )

        try:
            response = self.transport.send(
                "POST",
                url,
                headers=self._token_request_headers(),
                data=form,
                timeout=self.timeout,
            )
        except NetworkError as e:
            self._logger.error(f"Authentication request failed: {e}")
            raise NetworkError(
                f"Network error during authentication: {e.message}",
                network_code=e.network_code,
                retryable=e.retryable,
                cause=e,
            ) from e

        if not response.ok:
            error = self._map_error_response(response)
            self._logger.error(f"Authentication failed: {error.get_description()}")
            raise error

        data = response.json_or_none()
        if data is None:
            self._logger.error("Failed to parse authentication response")
            raise AuthenticationError(
                "Invalid response format: expected a JSON object",
                status_code=response.status,
                details={"body": response.text[:500]},
            )
        return data

    def _map_error_response(self, response: TransportResponse) -> MyInvoisError:
        """Translate a failed token response into an SDK error"""
        message = response.error_message()
        status = response.status
        details = response.json_or_none()

        if status == 400:
            return ValidationError(
                f"Invalid request format or parameters: {message}",
                errors={"auth": [message]},
                status_code=400,
                details=details,
            )
        if status == 429:
            return RateLimitError(
                f"Rate limit exceeded: {message}",
                retry_after=response.retry_after(),
                details=details,
            )

        prefixes = {
            401: "Invalid credentials or expired token",
            403: "Access denied - check permissions",
            404: "Authentication endpoint not found - check URL",
        }
        if status in prefixes:
            prefix = prefixes[status]
        elif status >= 500:
            prefix = "Server error during authentication"
        else:
            prefix = "Authentication failed"

        return AuthenticationError(f"{prefix}: {message}", status_code=status, details=details)

    def _validate_auth_response(self, data: Mapping[str, Any]) -> None:
        """Check the token response carries everything a Token needs"""
        if not data.get("access_token"):
            raise AuthenticationError(
                "Invalid authentication response: missing access_token", status_code=None
            )

        token_type = data.get("token_type")
        if not isinstance(token_type, str) or token_type.lower() != "bearer":
            raise AuthenticationError(
                "Invalid authentication response: invalid token_type", status_code=None
            )

        try:
            expires_in = float(data.get("expires_in"))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise AuthenticationError(
                "Invalid authentication response: missing expires_in", status_code=None
            ) from None
        if expires_in <= 0:
            raise AuthenticationError(
                "Invalid authentication response: expires_in must be positive", status_code=None
            )

        scope = data.get("scope")
        if scope is not None and self.DEFAULT_SCOPE not in str(scope).split():
            raise AuthenticationError(
                f"Missing required scopes: {self.DEFAULT_SCOPE}", status_code=403
            )
