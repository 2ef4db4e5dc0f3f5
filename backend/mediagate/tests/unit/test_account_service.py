"""Tests for registration, login and profile management."""

import pytest

from mediagate.platform.errors import (
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
    UserExistsError,
    UserNotFoundError,
)
from mediagate.services.account_service import (
    AccountService,
    hash_password,
    verify_password,
)


@pytest.fixture
def accounts(repos, token_service):
    return AccountService(repos.users, token_service)


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert hashed.startswith("$2")

    def test_verify(self):
        hashed = hash_password("hunter22")
        assert verify_password("hunter22", hashed) is True
        assert verify_password("wrong-password", hashed) is False

    def test_empty_hash_never_verifies(self):
        assert verify_password("anything", "") is False


class TestRegister:
    def test_register_creates_user_and_session(self, accounts, token_service):
        result = accounts.register("viewer@example.com", "hunter22", "Viewer")

        assert result.user.email == "viewer@example.com"
        assert result.user.is_admin is False
        assert result.user.password_hash != "hunter22"
        claims = token_service.validate_session(result.tokens.access_token)
        assert claims.user_id == result.user.id

    def test_duplicate_email_rejected(self, accounts):
        accounts.register("viewer@example.com", "hunter22", "Viewer")

        with pytest.raises(UserExistsError) as exc_info:
            accounts.register("viewer@example.com", "other-pass", "Someone")

        assert exc_info.value.status_code == 409


class TestLogin:
    def test_login_with_correct_password(self, accounts):
        accounts.register("viewer@example.com", "hunter22", "Viewer")

        result = accounts.login("viewer@example.com", "hunter22")

        assert result.user.email == "viewer@example.com"

    def test_login_supersedes_registration_session(self, accounts, token_service):
        registered = accounts.register("viewer@example.com", "hunter22", "Viewer")

        accounts.login("viewer@example.com", "hunter22")

        with pytest.raises(TokenExpiredError):
            token_service.validate_session(registered.tokens.access_token)

    def test_wrong_password(self, accounts):
        accounts.register("viewer@example.com", "hunter22", "Viewer")

        with pytest.raises(InvalidCredentialsError) as exc_info:
            accounts.login("viewer@example.com", "not-it")

        assert exc_info.value.status_code == 401

    def test_unknown_email(self, accounts):
        with pytest.raises(InvalidCredentialsError):
            accounts.login("nobody@example.com", "hunter22")


class TestSessionLifecycle:
    def test_refresh_reissues_tokens(self, accounts, token_service):
        registered = accounts.register("viewer@example.com", "hunter22", "Viewer")

        refreshed = accounts.refresh(registered.user.id)

        assert refreshed.tokens.access_token != registered.tokens.access_token
        assert token_service.validate_session(refreshed.tokens.access_token).user_id == registered.user.id

    def test_refresh_for_deleted_user_is_invalid(self, accounts):
        with pytest.raises(TokenInvalidError):
            accounts.refresh("no-such-user")

    def test_logout_revokes_session(self, accounts, token_service):
        registered = accounts.register("viewer@example.com", "hunter22", "Viewer")

        accounts.logout(registered.user.id)

        with pytest.raises(TokenExpiredError):
            token_service.validate_session(registered.tokens.access_token)


class TestProfile:
    def test_get_profile(self, accounts):
        registered = accounts.register("viewer@example.com", "hunter22", "Viewer")
        assert accounts.get_profile(registered.user.id).name == "Viewer"

    def test_get_missing_profile(self, accounts):
        with pytest.raises(UserNotFoundError):
            accounts.get_profile("missing")

    def test_update_applies_only_non_empty_fields(self, accounts):
        registered = accounts.register(
            "viewer@example.com", "hunter22", "Viewer", bio="Original bio",
        )

        updated = accounts.update_profile(registered.user.id, name="Renamed", bio="", phone=None)

        assert updated.name == "Renamed"
        assert updated.bio == "Original bio"
        assert updated.phone == ""
