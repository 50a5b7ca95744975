"""
Token and authentication state

All mutable authentication state (current token and current taxpayer) lives
in a single ``TokenState`` object. Every change goes through one of its
transition methods while holding its lock, so a reader never observes a new
taxpayer paired with the previous taxpayer's token.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional


@dataclass(frozen=True)
class Token:
    """
    OAuth2 access token

    Attributes:
        access_token: Bearer token string
        expires_at: Expiry as seconds since the UNIX epoch
        token_type: Always "Bearer"
        scope: Granted scopes
    """
    access_token: str
    expires_at: float
    token_type: str = "Bearer"
    scope: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_response(cls, data: Mapping[str, Any], now: float) -> "Token":
        """Build a token from a validated token endpoint response"""
        scope = data.get("scope") or ""
        return cls(
            access_token=data["access_token"],
            expires_at=now + float(data["expires_in"]),
            token_type="Bearer",
            scope=frozenset(str(scope).split()),
        )

    @classmethod
    def from_cache(cls, data: Mapping[str, Any]) -> Optional["Token"]:
        """Rebuild a token from its cached form, or None if malformed"""
        try:
            return cls(
                access_token=str(data["access_token"]),
                expires_at=float(data["expires_at"]),
                token_type=str(data.get("token_type", "Bearer")),
                scope=frozenset(data.get("scope") or ()),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def to_cache(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "expires_at": self.expires_at,
            "token_type": self.token_type,
            "scope": sorted(self.scope),
        }

    def remaining(self, now: float) -> float:
        """Seconds until the token expires"""
        return self.expires_at - now

    def is_valid(self, now: float, refresh_buffer: float) -> bool:
        """True while the token has more than ``refresh_buffer`` seconds left"""
        return now < self.expires_at - refresh_buffer

    def __repr__(self) -> str:
        return (
            f"Token(access_token='{self.access_token[:6]}...', "
            f"expires_at={self.expires_at}, scope={sorted(self.scope)})"
        )


@dataclass(frozen=True)
class AuthContext:
    """
    Credentials used to obtain tokens

    The taxpayer (on-behalf-of TIN) is held by ``TokenState`` rather than
    here, so that changing it always clears the current token.
    """
    client_id: str
    client_secret: str
    base_url: str

    def __post_init__(self) -> None:
        if not self.client_id:
            raise ValueError("Client ID cannot be empty")
        if not self.client_secret:
            raise ValueError("Client secret cannot be empty")
        if not self.base_url:
            raise ValueError("Base URL cannot be empty")

    @property
    def token_url(self) -> str:
        return self.base_url.rstrip("/") + "/connect/token"

    def __repr__(self) -> str:
        return (
            f"AuthContext(client_id='{self.client_id[:5]}...', "
            f"base_url='{self.base_url}')"
        )


class TokenState:
    """Current token and taxpayer for one auth client"""

    def __init__(self, taxpayer_tin: Optional[str] = None) -> None:
        self.lock = threading.RLock()
        self._token: Optional[Token] = None
        self._taxpayer_tin = taxpayer_tin

    @property
    def token(self) -> Optional[Token]:
        with self.lock:
            return self._token

    @property
    def taxpayer_tin(self) -> Optional[str]:
        with self.lock:
            return self._taxpayer_tin

    def valid_token(self, now: float, refresh_buffer: float) -> Optional[Token]:
        """Return the current token if it is still outside the refresh buffer"""
        with self.lock:
            if self._token is not None and self._token.is_valid(now, refresh_buffer):
                return self._token
            return None

    def replace(self, token: Token) -> None:
        with self.lock:
            self._token = token

    def clear(self) -> Optional[Token]:
        """Drop the current token, returning the one that was dropped"""
        with self.lock:
            previous, self._token = self._token, None
            return previous

    def switch_taxpayer(self, taxpayer_tin: Optional[str]) -> bool:
        """
        Set the taxpayer, clearing the token when it changes

        Returns:
            True if the taxpayer changed
        """
        with self.lock:
            if taxpayer_tin == self._taxpayer_tin:
                return False
            self._taxpayer_tin = taxpayer_tin
            self._token = None
            return True
