"""
Account lifecycle: registration, login, session refresh/logout, profile.

Passwords are hashed with bcrypt through passlib. Password material and
tokens are never logged.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from passlib.context import CryptContext

from mediagate.models import User
from mediagate.platform.errors import (
    InvalidCredentialsError,
    TokenInvalidError,
    UserExistsError,
    UserNotFoundError,
)
from mediagate.repositories.interfaces import UserRepository
from mediagate.services.session_token_service import SessionTokens, SessionTokenService

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(password, password_hash)


@dataclass
class AuthResult:
    """Session tokens plus the authenticated user."""

    tokens: SessionTokens
    user: User


class AccountService:
    """Registration, login and profile management over the user repository."""

    def __init__(self, users: UserRepository, tokens: SessionTokenService):
        self.users = users
        self.tokens = tokens

    def _email_taken(self, email: str) -> bool:
        try:
            self.users.get_by_email(email)
        except UserNotFoundError:
            return False
        return True

    def register(
        self,
        email: str,
        password: str,
        name: str,
        phone: str = "",
        bio: str = "",
        picture: str = "",
    ) -> AuthResult:
        """
        Create a non-admin user and open a session for them.

        Raises:
            UserExistsError: the email is already registered
        """
        if self._email_taken(email):
            raise UserExistsError()

        user = self.users.create(
            User(
                email=email,
                password_hash=hash_password(password),
                name=name,
                phone=phone or "",
                bio=bio or "",
                picture=picture or "",
                is_admin=False,
            )
        )
        logger.info("User registered", extra={"user_id": user.id})

        tokens = self.tokens.issue_session(user.id, user.email, user.is_admin)
        return AuthResult(tokens=tokens, user=user)

    def login(self, email: str, password: str) -> AuthResult:
        """
        Verify credentials and open a new session, replacing any previous one.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        try:
            user = self.users.get_by_email(email)
        except UserNotFoundError:
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            logger.info("Login rejected", extra={"user_id": user.id})
            raise InvalidCredentialsError()

        tokens = self.tokens.issue_session(user.id, user.email, user.is_admin)
        logger.info("User logged in", extra={"user_id": user.id})
        return AuthResult(tokens=tokens, user=user)

    def refresh(self, user_id: str) -> AuthResult:
        """
        Re-issue both tokens for an identity whose refresh token was validated.

        Raises:
            TokenInvalidError: the identity no longer exists
        """
        try:
            user = self.users.get_by_id(user_id)
        except UserNotFoundError:
            raise TokenInvalidError()

        tokens = self.tokens.refresh_session(user.id, user.email, user.is_admin)
        return AuthResult(tokens=tokens, user=user)

    def logout(self, user_id: str) -> None:
        self.tokens.revoke_session(user_id)

    def get_profile(self, user_id: str) -> User:
        return self.users.get_by_id(user_id)

    def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        bio: Optional[str] = None,
        picture: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> User:
        """Overwrite only the fields given as non-empty strings."""
        user = self.users.get_by_id(user_id)
        if name:
            user.name = name
        if bio:
            user.bio = bio
        if picture:
            user.picture = picture
        if phone:
            user.phone = phone
        return self.users.update(user)
