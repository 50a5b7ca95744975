"""
Intermediary (on-behalf-of) authentication

An intermediary holds one set of credentials and acts for many taxpayers.
Each taxpayer gets its own token and its own cache entry, and switching
taxpayer drops the previous taxpayer's token before the next request.
"""

import logging
import time
from typing import Callable, Dict, Optional

from myinvois.auth.authentication_client import AuthClient
from myinvois.auth.token import Token, TokenState
from myinvois.cache import CacheStore
from myinvois.config.myinvois_config import ConfigDefaults, MyInvoisConfig
from myinvois.exceptions import AuthenticationError, MyInvoisError, ValidationError
from myinvois.http.transport import HttpTransport, Timeout, TransportResponse
from myinvois.validators.tin_validator import validate_tin


class IntermediaryAuthClient(AuthClient):
    """
    Token manager for intermediaries acting on behalf of taxpayers

    Example:
        >>> auth = IntermediaryAuthClient("client-id", "secret", identity_url,
        ...                               transport=RequestsTransport())
        >>> auth.on_behalf_of("C1234567890")
        >>> token = auth.get_access_token()
    """

    TOKEN_CACHE_PREFIX = "myinvois_intermediary_token_"
    is_intermediary = True

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
        taxpayer_tin: Optional[str] = None,
    ) -> None:
        super().__init__(
            client_id,
            client_secret,
            base_url,
            transport,
            cache=cache,
            refresh_buffer=refresh_buffer,
            timeout=timeout,
            clock=clock,
            logger=logger,
        )
        if taxpayer_tin is not None:
            validate_tin(taxpayer_tin)
        self._state = TokenState(taxpayer_tin)

    @classmethod
    def from_config(
        cls,
        config: MyInvoisConfig,
        transport: HttpTransport,
        cache: Optional[CacheStore] = None,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> "IntermediaryAuthClient":
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
            taxpayer_tin=config.default_taxpayer_tin,
        )

    @property
    def current_taxpayer(self) -> Optional[str]:
        """TIN of the taxpayer currently acted for"""
        return self._state.taxpayer_tin

    @property
    def cache_key(self) -> Optional[str]:
        tin = self._state.taxpayer_tin
        if tin is None:
            return None
        return f"{self.TOKEN_CACHE_PREFIX}{self.context.client_id}_{tin}"

    def on_behalf_of(self, tin: str) -> "IntermediaryAuthClient":
        """
        Act on behalf of a taxpayer

        Switching to a different taxpayer invalidates the previous taxpayer's
        token in memory and in the cache.

        Args:
            tin: Taxpayer TIN (C followed by 10 digits)

        Raises:
            ValidationError: If the TIN is malformed
        """
        try:
            validate_tin(tin)
        except ValidationError:
            self._logger.error(f"Invalid TIN format provided: {tin!r}")
            raise

        with self._state.lock:
            previous_key = self.cache_key
            if self._state.switch_taxpayer(tin):
                if previous_key is not None:
                    self.cache.forget(previous_key)
                self._logger.debug(f"Switched taxpayer to {tin}")
        return self

    def authenticate(self, taxpayer_tin: Optional[str] = None) -> Token:
        """
        Obtain a token for a taxpayer

        Args:
            taxpayer_tin: Taxpayer to act for; defaults to the current one

        Raises:
            ValidationError: No taxpayer set, or malformed TIN
        """
        with self._state.lock:
            if taxpayer_tin is not None:
                self.on_behalf_of(taxpayer_tin)
            return self._authenticate()

    def get_request_headers(self) -> Dict[str, str]:
        tin = self._state.taxpayer_tin
        return {"onbehalfof": tin} if tin else {}

    def _ensure_ready(self) -> None:
        if self._state.taxpayer_tin is None:
            self._logger.error("Authentication attempted without setting taxpayer TIN")
            raise ValidationError(
                "Taxpayer TIN must be set using on_behalf_of() before authenticating",
                errors={"tin": ["TIN is required"]},
            )

    def _token_request_headers(self) -> Dict[str, str]:
        headers = super()._token_request_headers()
        headers.update(self.get_request_headers())
        return headers

    def _map_error_response(self, response: TransportResponse) -> MyInvoisError:
        message = response.error_message()

        if response.status == 403:
            self._logger.error(
                f"Intermediary authorization failed for taxpayer {self._state.taxpayer_tin}"
            )
            return AuthenticationError(
                f"Intermediary not authorized for this taxpayer: {message}",
                status_code=403,
                details=response.json_or_none(),
            )
        if response.status == 400 and "taxpayer" in message.lower():
            return ValidationError(
                f"Invalid taxpayer TIN: {message}",
                errors={"tin": [message]},
                status_code=400,
                details=response.json_or_none(),
            )

        return super()._map_error_response(response)
