"""
Shared fixtures for unit tests

The fake transport and clock keep every test offline and instantaneous.
"""

import json
from collections import deque
from typing import Any, Dict, List, Optional, Union

import pytest

from myinvois.auth import AuthClient, IntermediaryAuthClient
from myinvois.cache import MemoryCache
from myinvois.client import ApiClient
from myinvois.http import RetryPolicy, TransportResponse


BASE_URL = "https://api.test"
IDENTITY_URL = "https://identity.test"
TAXPAYER_TIN = "C1234567890"
OTHER_TIN = "C0987654321"


def json_response(
    data: Any = None, status: int = 200, headers: Optional[Dict[str, str]] = None
) -> TransportResponse:
    body = b"" if data is None else json.dumps(data).encode("utf-8")
    return TransportResponse(status=status, body=body, headers=headers or {})


def token_response(
    access_token: str = "token-1", expires_in: int = 3600, scope: str = "InvoicingAPI"
) -> TransportResponse:
    return json_response({
        "access_token": access_token,
        "token_type": "Bearer",
        "expires_in": expires_in,
        "scope": scope,
    })


Reply = Union[TransportResponse, BaseException]


class FakeTransport:
    """Records requests and replays queued replies in order"""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.token_replies: deque = deque()
        self.api_replies: deque = deque()
        self.closed = False
        self._token_count = 0

    def queue_token(self, *replies: Reply) -> None:
        self.token_replies.extend(replies)

    def queue(self, *replies: Reply) -> None:
        self.api_replies.extend(replies)

    def send(self, method, url, headers=None, params=None, data=None, json=None, timeout=None):
        call = {
            "method": method,
            "url": url,
            "headers": dict(headers or {}),
            "params": dict(params or {}),
            "data": dict(data or {}),
            "json": json,
            "timeout": timeout,
        }
        self.calls.append(call)

        if url.endswith("/connect/token"):
            if self.token_replies:
                reply = self.token_replies.popleft()
            else:
                self._token_count += 1
                reply = token_response(f"token-{self._token_count}")
        else:
            if not self.api_replies:
                raise AssertionError(f"Unexpected request: {method} {url}")
            reply = self.api_replies.popleft()

        if isinstance(reply, BaseException):
            raise reply
        return reply

    def close(self) -> None:
        self.closed = True

    @property
    def token_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["url"].endswith("/connect/token")]

    @property
    def api_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if not c["url"].endswith("/connect/token")]


class FakeClock:
    """Manually advanced clock whose sleep advances time"""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(timer=clock)


@pytest.fixture
def auth_client(transport: FakeTransport, cache: MemoryCache, clock: FakeClock) -> AuthClient:
    return AuthClient(
        client_id="client-id",
        client_secret="client-secret",
        base_url=IDENTITY_URL,
        transport=transport,
        cache=cache,
        clock=clock,
    )


@pytest.fixture
def intermediary_client(
    transport: FakeTransport, cache: MemoryCache, clock: FakeClock
) -> IntermediaryAuthClient:
    return IntermediaryAuthClient(
        client_id="client-id",
        client_secret="client-secret",
        base_url=IDENTITY_URL,
        transport=transport,
        cache=cache,
        clock=clock,
    )


@pytest.fixture
def api_client(auth_client: AuthClient, transport: FakeTransport, clock: FakeClock) -> ApiClient:
    return ApiClient(
        BASE_URL,
        auth_client,
        transport,
        retry_policy=RetryPolicy(),
        sleep=clock.sleep,
        rand=lambda: 0.5,
    )
