"""
Tests for single-slot session tokens.

Verifies:
- Issued tokens validate and carry the identity claims
- Access and refresh tokens are signed with different secrets
- A newer session supersedes the older one (TOKEN_EXPIRED)
- Registration TTLs match credential lifetimes
- Expired, tampered and foreign tokens are rejected
- Store failures propagate
"""

from datetime import timedelta
from unittest.mock import Mock, patch

import jwt
import pytest

from mediagate.platform.errors import (
    StoreUnavailableError,
    TokenExpiredError,
    TokenInvalidError,
)
from mediagate.services.session_token_service import (
    SessionTokenConfig,
    SessionTokenService,
)


class TestIssueSession:
    """Issuance and registration."""

    def test_issued_access_token_validates(self, token_service):
        tokens = token_service.issue_session("user-1", "viewer@example.com", False)

        claims = token_service.validate_session(tokens.access_token)

        assert claims.user_id == "user-1"
        assert claims.email == "viewer@example.com"
        assert claims.is_admin is False
        assert claims.iss == "mediagate"

    def test_issued_refresh_token_validates_as_refresh(self, token_service):
        tokens = token_service.issue_session("user-1", "viewer@example.com", True)

        claims = token_service.validate_session(tokens.refresh_token, refresh=True)

        assert claims.user_id == "user-1"
        assert claims.is_admin is True

    def test_tokens_registered_under_namespaced_keys(self, token_service, kv_store):
        tokens = token_service.issue_session("user-1", "viewer@example.com")

        assert kv_store.get("token:user-1") == tokens.access_token
        assert kv_store.get("refresh:user-1") == tokens.refresh_token

    def test_registration_ttls_match_lifetimes(self, token_service, kv_store):
        token_service.issue_session("user-1", "viewer@example.com")

        assert kv_store.ttl("token:user-1") == pytest.approx(3600)
        assert kv_store.ttl("refresh:user-1") == pytest.approx(3600 * 24)

    def test_expiry_timestamps(self, token_service, clock):
        tokens = token_service.issue_session("user-1", "viewer@example.com")

        assert tokens.expires_at == clock.now() + timedelta(hours=1)
        assert tokens.refresh_expires_at == clock.now() + timedelta(hours=24)

    def test_reissue_in_same_instant_produces_different_token(self, token_service):
        first = token_service.issue_session("user-1", "viewer@example.com")
        second = token_service.issue_session("user-1", "viewer@example.com")

        assert first.access_token != second.access_token
        assert first.refresh_token != second.refresh_token

    def test_store_failure_propagates(self, token_config, clock):
        store = Mock()
        store.set.side_effect = StoreUnavailableError()
        service = SessionTokenService(store, config=token_config, now_fn=clock.now)

        with pytest.raises(StoreUnavailableError):
            service.issue_session("user-1", "viewer@example.com")


class TestSingleSlot:
    """A new session silently invalidates the previous one."""

    def test_new_session_supersedes_old_access_token(self, token_service):
        old = token_service.issue_session("user-1", "viewer@example.com")
        new = token_service.issue_session("user-1", "viewer@example.com")

        with pytest.raises(TokenExpiredError):
            token_service.validate_session(old.access_token)
        assert token_service.validate_session(new.access_token).user_id == "user-1"

    def test_new_session_supersedes_old_refresh_token(self, token_service):
        old = token_service.issue_session("user-1", "viewer@example.com")
        token_service.issue_session("user-1", "viewer@example.com")

        with pytest.raises(TokenExpiredError):
            token_service.validate_session(old.refresh_token, refresh=True)

    def test_sessions_of_different_users_are_independent(self, token_service):
        alice = token_service.issue_session("alice", "alice@example.com")
        token_service.issue_session("bob", "bob@example.com")

        assert token_service.validate_session(alice.access_token).user_id == "alice"

    def test_refresh_session_rotates_both_tokens(self, token_service, clock):
        old = token_service.issue_session("user-1", "viewer@example.com")
        clock.advance(minutes=30)

        new = token_service.refresh_session("user-1", "viewer@example.com")

        with pytest.raises(TokenExpiredError):
            token_service.validate_session(old.access_token)
        with pytest.raises(TokenExpiredError):
            token_service.validate_session(old.refresh_token, refresh=True)
        assert token_service.validate_session(new.access_token).user_id == "user-1"

    def test_refresh_session_resets_registration_ttl(self, token_service, kv_store, clock):
        token_service.issue_session("user-1", "viewer@example.com")
        clock.advance(minutes=50)

        token_service.refresh_session("user-1", "viewer@example.com")

        assert kv_store.ttl("token:user-1") == pytest.approx(3600)

    def test_revoke_session_invalidates_both_tokens(self, token_service, kv_store):
        tokens = token_service.issue_session("user-1", "viewer@example.com")

        token_service.revoke_session("user-1")

        assert kv_store.get("token:user-1") is None
        with pytest.raises(TokenExpiredError):
            token_service.validate_session(tokens.access_token)
        with pytest.raises(TokenExpiredError):
            token_service.validate_session(tokens.refresh_token, refresh=True)


class TestValidateSession:
    """Signature, time-bound and structural checks."""

    def test_access_token_rejected_as_refresh(self, token_service):
        tokens = token_service.issue_session("user-1", "viewer@example.com")

        with pytest.raises(TokenInvalidError):
            token_service.validate_session(tokens.access_token, refresh=True)

    def test_refresh_token_rejected_as_access(self, token_service):
        tokens = token_service.issue_session("user-1", "viewer@example.com")

        with pytest.raises(TokenInvalidError):
            token_service.validate_session(tokens.refresh_token)

    def test_expired_access_token(self, token_service, clock):
        tokens = token_service.issue_session("user-1", "viewer@example.com")
        clock.advance(hours=1)

        with pytest.raises(TokenExpiredError):
            token_service.validate_session(tokens.access_token)

    def test_refresh_token_outlives_access_token(self, token_service, clock):
        tokens = token_service.issue_session("user-1", "viewer@example.com")
        clock.advance(hours=2)

        claims = token_service.validate_session(tokens.refresh_token, refresh=True)

        assert claims.user_id == "user-1"

    def test_registration_lapse_expires_token(self, token_service, kv_store):
        tokens = token_service.issue_session("user-1", "viewer@example.com")
        kv_store.delete("token:user-1")

        with pytest.raises(TokenExpiredError):
            token_service.validate_session(tokens.access_token)

    def test_garbage_token_is_invalid(self, token_service):
        with pytest.raises(TokenInvalidError):
            token_service.validate_session("not-a-jwt")

    def test_token_signed_with_other_secret_is_invalid(self, token_service, clock):
        now = int(clock.time())
        forged = jwt.encode(
            {
                "sub": "user-1", "email": "viewer@example.com", "jti": "x",
                "iss": "mediagate", "iat": now, "nbf": now, "exp": now + 3600,
            },
            "attacker-secret-0123456789abcdef0123456789ab",
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            token_service.validate_session(forged)

    def test_missing_claims_are_invalid(self, token_service, token_config, clock):
        now = int(clock.time())
        token = jwt.encode(
            {"sub": "user-1", "iss": "mediagate", "iat": now, "nbf": now, "exp": now + 3600},
            token_config.access_secret,
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            token_service.validate_session(token)

    def test_wrong_issuer_is_invalid(self, token_service, token_config, clock):
        now = int(clock.time())
        token = jwt.encode(
            {
                "sub": "user-1", "email": "viewer@example.com", "jti": "x",
                "iss": "someone-else", "iat": now, "nbf": now, "exp": now + 3600,
            },
            token_config.access_secret,
            algorithm="HS256",
        )

        with pytest.raises(TokenInvalidError):
            token_service.validate_session(token)

    def test_not_yet_valid_token_is_invalid(self, token_service, kv_store, clock):
        tokens = token_service.issue_session("user-1", "viewer@example.com")
        clock.advance(seconds=-120)

        with pytest.raises(TokenInvalidError):
            token_service.validate_session(tokens.access_token)

    def test_store_failure_on_lookup_propagates(self, token_config, clock, kv_store):
        issuer = SessionTokenService(kv_store, config=token_config, now_fn=clock.now)
        tokens = issuer.issue_session("user-1", "viewer@example.com")

        broken = Mock()
        broken.get.side_effect = StoreUnavailableError()
        validator = SessionTokenService(broken, config=token_config, now_fn=clock.now)

        with pytest.raises(StoreUnavailableError):
            validator.validate_session(tokens.access_token)


class TestSessionTokenConfig:
    """Environment loading."""

    @patch.dict("os.environ", {
        "ENVIRONMENT": "development",
        "JWT_SECRET": "",
        "JWT_REFRESH_SECRET": "",
        "JWT_EXPIRATION_HOURS": "2",
    })
    def test_development_falls_back_to_dev_secrets(self):
        config = SessionTokenConfig.from_env()

        assert config.access_secret
        assert config.refresh_secret
        assert config.access_secret != config.refresh_secret
        assert config.refresh_lifetime == timedelta(hours=48)

    @patch.dict("os.environ", {"ENVIRONMENT": "production", "JWT_SECRET": "", "JWT_REFRESH_SECRET": ""})
    def test_production_requires_secrets(self):
        with pytest.raises(ValueError):
            SessionTokenConfig.from_env()

    @patch.dict("os.environ", {
        "ENVIRONMENT": "production",
        "JWT_SECRET": "same-secret-value-0123456789abcdef0123",
        "JWT_REFRESH_SECRET": "same-secret-value-0123456789abcdef0123",
    })
    def test_production_rejects_shared_secret(self):
        with pytest.raises(ValueError):
            SessionTokenConfig.from_env()
