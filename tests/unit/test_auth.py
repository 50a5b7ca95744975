"""
Authentication Unit Tests
"""

import threading

import pytest

from myinvois.auth import AuthClient, IntermediaryAuthClient, Token, TokenState
from myinvois.http import TransportResponse
from myinvois.exceptions import (
    AuthenticationError,
    ConfigError,
    NetworkError,
    RateLimitError,
    ValidationError,
)

from tests.unit.conftest import (
    IDENTITY_URL,
    OTHER_TIN,
    TAXPAYER_TIN,
    json_response,
    token_response,
)


class TestToken:
    """Tests for Token"""

    def test_from_response(self):
        """Should compute expiry from expires_in"""
        token = Token.from_response(
            {"access_token": "abc", "expires_in": 3600, "scope": "InvoicingAPI"}, now=1000.0
        )
        assert token.expires_at == 4600.0
        assert token.scope == frozenset({"InvoicingAPI"})

    def test_validity_respects_refresh_buffer(self):
        """Should be invalid once inside the refresh buffer"""
        token = Token(access_token="abc", expires_at=1000.0)
        assert token.is_valid(699.0, 300) is True
        assert token.is_valid(700.0, 300) is False

    def test_cache_round_trip_rejects_malformed(self):
        """Should return None for a malformed cache entry"""
        assert Token.from_cache({"expires_at": 10}) is None
        token = Token(access_token="abc", expires_at=10.0, scope=frozenset({"InvoicingAPI"}))
        assert Token.from_cache(token.to_cache()) == token

    def test_repr_hides_token(self):
        """Should not expose the full access token"""
        token = Token(access_token="supersecrettoken", expires_at=10.0)
        assert "supersecrettoken" not in repr(token)


class TestTokenState:
    """Tests for TokenState"""

    def test_switch_taxpayer_clears_token(self):
        """Should drop the token when the taxpayer changes"""
        state = TokenState(TAXPAYER_TIN)
        state.replace(Token(access_token="abc", expires_at=10_000.0))

        assert state.switch_taxpayer(OTHER_TIN) is True
        assert state.token is None
        assert state.taxpayer_tin == OTHER_TIN

    def test_switch_to_same_taxpayer_keeps_token(self):
        """Should keep the token when the taxpayer is unchanged"""
        state = TokenState(TAXPAYER_TIN)
        token = Token(access_token="abc", expires_at=10_000.0)
        state.replace(token)

        assert state.switch_taxpayer(TAXPAYER_TIN) is False
        assert state.token is token


class TestAuthClient:
    """Tests for AuthClient"""

    def test_missing_credentials(self, transport):
        """Should raise ConfigError for empty credentials"""
        with pytest.raises(ConfigError):
            AuthClient("", "secret", IDENTITY_URL, transport=transport)

    def test_authenticate_posts_client_credentials(self, auth_client, transport):
        """Should request a token with the client credentials grant"""
        token = auth_client.authenticate()

        assert token.access_token == "token-1"
        call = transport.token_calls[0]
        assert call["method"] == "POST"
        assert call["url"] == f"{IDENTITY_URL}/connect/token"
        assert call["data"] == {
            "grant_type": "client_credentials",
            "client_id": "client-id",
            "client_secret": "client-secret",
            "scope": "InvoicingAPI",
        }
        assert call["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        assert "onbehalfof" not in call["headers"]

    def test_token_reused_without_network(self, auth_client, transport):
        """Should reuse a fresh token"""
        first = auth_client.get_access_token()
        second = auth_client.get_access_token()

        assert first == second
        assert len(transport.token_calls) == 1

    def test_token_refreshed_inside_buffer(self, auth_client, transport, clock):
        """Should fetch a new token once inside the refresh buffer"""
        auth_client.get_access_token()
        clock.advance(3600 - 300)

        assert auth_client.get_access_token() == "token-2"
        assert len(transport.token_calls) == 2

    def test_token_cached_with_buffered_ttl(self, auth_client, cache, clock):
        """Should cache the token for expires_in minus the buffer"""
        auth_client.authenticate()
        cached = cache.get("myinvois_token_client-id")
        assert cached["access_token"] == "token-1"

        clock.advance(3200)
        assert cache.get("myinvois_token_client-id") is not None
        clock.advance(101)
        assert cache.get("myinvois_token_client-id") is None

    def test_cached_token_shared_between_instances(self, auth_client, transport, cache, clock):
        """Should serve a cached token to a second client without a request"""
        auth_client.authenticate()
        other = AuthClient(
            "client-id", "client-secret", IDENTITY_URL,
            transport=transport, cache=cache, clock=clock,
        )

        assert other.has_valid_token() is True
        assert other.get_access_token() == "token-1"
        assert len(transport.token_calls) == 1

    def test_stale_cached_token_not_served(self, transport, cache, clock):
        """Should ignore a cached token past its refresh point"""
        cache.put(
            "myinvois_token_client-id",
            Token(access_token="stale", expires_at=clock.now + 100).to_cache(),
        )
        client = AuthClient(
            "client-id", "client-secret", IDENTITY_URL,
            transport=transport, cache=cache, clock=clock,
        )

        assert client.has_valid_token() is False
        assert client.get_access_token() == "token-1"
        assert cache.get("myinvois_token_client-id")["access_token"] == "token-1"

    def test_short_lived_token_not_cached(self, auth_client, transport, cache):
        """Should not cache a token whose lifetime is within the buffer"""
        transport.queue_token(token_response(expires_in=200))
        auth_client.authenticate()
        assert cache.get("myinvois_token_client-id") is None

    def test_invalidate_token(self, auth_client, transport, cache):
        """Should clear memory and cache"""
        auth_client.authenticate()
        auth_client.invalidate_token()

        assert cache.get("myinvois_token_client-id") is None
        assert auth_client.has_valid_token() is False
        auth_client.get_access_token()
        assert len(transport.token_calls) == 2

    def test_request_headers_empty(self, auth_client):
        """Should add no identity headers in direct mode"""
        assert auth_client.get_request_headers() == {}
        assert auth_client.get_auth_headers() == {"Authorization": "Bearer token-1"}

    def test_concurrent_callers_share_one_request(self, auth_client, transport):
        """Should issue a single token request for concurrent callers"""
        results = []

        def fetch():
            results.append(auth_client.get_access_token())

        threads = [threading.Thread(target=fetch) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert set(results) == {"token-1"}
        assert len(transport.token_calls) == 1


class TestAuthResponseValidation:
    """Tests for token response validation and error mapping"""

    @pytest.mark.parametrize("payload", [
        {"token_type": "Bearer", "expires_in": 3600},
        {"access_token": "abc", "token_type": "mac", "expires_in": 3600},
        {"access_token": "abc", "token_type": "Bearer"},
        {"access_token": "abc", "token_type": "Bearer", "expires_in": "soon"},
    ])
    def test_invalid_payload(self, auth_client, transport, payload):
        """Should reject incomplete token responses"""
        transport.queue_token(json_response(payload))
        with pytest.raises(AuthenticationError):
            auth_client.authenticate()

    def test_token_type_case_insensitive(self, auth_client, transport):
        """Should accept a lowercase bearer token type"""
        transport.queue_token(json_response(
            {"access_token": "abc", "token_type": "bearer", "expires_in": 3600}
        ))
        assert auth_client.authenticate().access_token == "abc"

    def test_missing_scope(self, auth_client, transport):
        """Should reject a token without the invoicing scope"""
        transport.queue_token(token_response(scope="OtherAPI"))
        with pytest.raises(AuthenticationError) as exc_info:
            auth_client.authenticate()
        assert exc_info.value.status_code == 403

    def test_non_json_body(self, auth_client, transport):
        """Should raise AuthenticationError for a non-JSON body"""
        transport.queue_token(TransportResponse(status=200, body=b"<html>"))
        with pytest.raises(AuthenticationError):
            auth_client.authenticate()

    def test_bad_request_maps_to_validation_error(self, auth_client, transport):
        """Should map HTTP 400 to ValidationError"""
        transport.queue_token(json_response(
            {"error": "invalid_client", "error_description": "Unknown client"}, status=400
        ))
        with pytest.raises(ValidationError) as exc_info:
            auth_client.authenticate()
        assert exc_info.value.errors == {"auth": ["Unknown client"]}

    @pytest.mark.parametrize("status", [401, 403, 404, 500])
    def test_status_maps_to_authentication_error(self, auth_client, transport, status):
        """Should map other failures to AuthenticationError with the status"""
        transport.queue_token(json_response({"error": "failed"}, status=status))
        with pytest.raises(AuthenticationError) as exc_info:
            auth_client.authenticate()
        assert exc_info.value.status_code == status

    def test_rate_limited(self, auth_client, transport):
        """Should map HTTP 429 to RateLimitError"""
        transport.queue_token(json_response(
            {"error": "slow down"}, status=429, headers={"Retry-After": "30"}
        ))
        with pytest.raises(RateLimitError) as exc_info:
            auth_client.authenticate()
        assert exc_info.value.retry_after == 30

    def test_network_error(self, auth_client, transport):
        """Should raise NetworkError when no response is received"""
        transport.queue_token(NetworkError.timeout("timed out"))
        with pytest.raises(NetworkError) as exc_info:
            auth_client.authenticate()
        assert "authentication" in exc_info.value.message
        assert len(transport.token_calls) == 1


class TestIntermediaryAuthClient:
    """Tests for IntermediaryAuthClient"""

    def test_requires_taxpayer(self, intermediary_client, transport):
        """Should refuse to authenticate without a taxpayer"""
        with pytest.raises(ValidationError) as exc_info:
            intermediary_client.authenticate()
        assert "tin" in exc_info.value.errors
        assert transport.calls == []

    def test_rejects_malformed_tin(self, intermediary_client):
        """Should validate the TIN format"""
        with pytest.raises(ValidationError) as exc_info:
            intermediary_client.on_behalf_of("12345")
        assert exc_info.value.errors["tin"] == ["TIN must start with C followed by 10 digits"]

    def test_rejects_tin_with_trailing_newline(self, intermediary_client, transport):
        """Should reject a TIN that would corrupt the onbehalfof header"""
        with pytest.raises(ValidationError):
            intermediary_client.on_behalf_of(TAXPAYER_TIN + "\n")
        assert intermediary_client.current_taxpayer is None
        assert transport.calls == []

    def test_auth_headers_pair_token_with_taxpayer(self, intermediary_client):
        """Should return the bearer token together with its taxpayer"""
        intermediary_client.on_behalf_of(TAXPAYER_TIN)
        assert intermediary_client.get_auth_headers() == {
            "onbehalfof": TAXPAYER_TIN,
            "Authorization": "Bearer token-1",
        }

    def test_taxpayer_switch_waits_for_auth_headers(self, intermediary_client, transport, monkeypatch):
        """Should not let a taxpayer switch split a token from its taxpayer"""
        intermediary_client.on_behalf_of(TAXPAYER_TIN)
        original = intermediary_client.get_access_token
        switcher = threading.Thread(target=intermediary_client.on_behalf_of, args=(OTHER_TIN,))

        def get_access_token_then_switch():
            token = original()
            switcher.start()
            switcher.join(timeout=0.2)
            return token

        monkeypatch.setattr(intermediary_client, "get_access_token", get_access_token_then_switch)

        headers = intermediary_client.get_auth_headers()
        switcher.join()

        assert headers == {"onbehalfof": TAXPAYER_TIN, "Authorization": "Bearer token-1"}
        assert transport.token_calls[0]["headers"]["onbehalfof"] == TAXPAYER_TIN
        assert intermediary_client.current_taxpayer == OTHER_TIN

    def test_sends_onbehalfof_header(self, intermediary_client, transport):
        """Should send the taxpayer TIN with the token request"""
        intermediary_client.authenticate(TAXPAYER_TIN)

        assert transport.token_calls[0]["headers"]["onbehalfof"] == TAXPAYER_TIN
        assert intermediary_client.get_request_headers() == {"onbehalfof": TAXPAYER_TIN}
        assert intermediary_client.current_taxpayer == TAXPAYER_TIN

    def test_cache_key_per_taxpayer(self, intermediary_client, cache):
        """Should cache tokens under a per-taxpayer key"""
        intermediary_client.authenticate(TAXPAYER_TIN)
        key = f"myinvois_intermediary_token_client-id_{TAXPAYER_TIN}"
        assert intermediary_client.cache_key == key
        assert cache.get(key) is not None

    def test_switching_taxpayer_invalidates_token(self, intermediary_client, transport, cache):
        """Should never reuse a token across taxpayers"""
        first = intermediary_client.authenticate(TAXPAYER_TIN)
        second = intermediary_client.authenticate(OTHER_TIN)

        assert first.access_token != second.access_token
        assert len(transport.token_calls) == 2
        assert transport.token_calls[1]["headers"]["onbehalfof"] == OTHER_TIN
        assert cache.get(f"myinvois_intermediary_token_client-id_{TAXPAYER_TIN}") is None

    def test_same_taxpayer_reuses_token(self, intermediary_client, transport):
        """Should not re-authenticate for the same taxpayer"""
        intermediary_client.authenticate(TAXPAYER_TIN)
        intermediary_client.on_behalf_of(TAXPAYER_TIN)
        intermediary_client.get_access_token()

        assert len(transport.token_calls) == 1

    def test_not_authorized_for_taxpayer(self, intermediary_client, transport):
        """Should map HTTP 403 to an intermediary authorization error"""
        transport.queue_token(json_response({"error": "forbidden"}, status=403))
        with pytest.raises(AuthenticationError) as exc_info:
            intermediary_client.authenticate(TAXPAYER_TIN)
        assert "Intermediary not authorized" in exc_info.value.message

    def test_invalid_taxpayer_rejected_by_server(self, intermediary_client, transport):
        """Should map a taxpayer-related HTTP 400 to a TIN validation error"""
        transport.queue_token(json_response(
            {"error_description": "Unknown taxpayer"}, status=400
        ))
        with pytest.raises(ValidationError) as exc_info:
            intermediary_client.authenticate(TAXPAYER_TIN)
        assert exc_info.value.errors == {"tin": ["Unknown taxpayer"]}

    def test_seeded_taxpayer(self, transport, cache, clock):
        """Should accept the taxpayer at construction time"""
        client = IntermediaryAuthClient(
            "client-id", "client-secret", IDENTITY_URL,
            transport=transport, cache=cache, clock=clock, taxpayer_tin=TAXPAYER_TIN,
        )
        client.authenticate()
        assert transport.token_calls[0]["headers"]["onbehalfof"] == TAXPAYER_TIN
