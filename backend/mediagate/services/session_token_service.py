"""
Session credentials with single-slot registration.

Issues a short-lived access token and a longer-lived refresh token per
identity. Each is a JWT signed with its own secret, so one kind can never
be replayed as the other.

Both tokens are also registered in the key-value store:
- token:{user_id}   -> access token   (TTL = access lifetime)
- refresh:{user_id} -> refresh token  (TTL = access lifetime * 24)

A token is valid only while it equals the registered value. Issuing a new
session overwrites the slot, so any earlier token of the same kind for
that identity stops validating even though its signature and exp are
still good. Revocation is a delete.

Configuration (environment variables):
- JWT_SECRET:           access-token secret (required in production)
- JWT_REFRESH_SECRET:   refresh-token secret (required in production)
- JWT_EXPIRATION_HOURS: access lifetime in hours (default: "1")
"""

import logging
import os
import uuid
from datetime import datetime, timedelta
from typing import Callable, Optional

import jwt
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mediagate.models.base import utc_now
from mediagate.platform.errors import TokenExpiredError, TokenInvalidError
from mediagate.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

ACCESS_KEY_PREFIX = "token"
REFRESH_KEY_PREFIX = "refresh"

_DEV_ACCESS_SECRET = "dev-only-access-secret-change-me-before-deploying"
_DEV_REFRESH_SECRET = "dev-only-refresh-secret-change-me-before-deploying"


class SessionTokenConfig(BaseModel):
    """Configuration for session token issuance."""
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_lifetime_hours: int = 1
    refresh_lifetime_multiplier: int = 24
    issuer: str = "mediagate"

    @property
    def access_lifetime(self) -> timedelta:
        return timedelta(hours=self.access_lifetime_hours)

    @property
    def refresh_lifetime(self) -> timedelta:
        return self.access_lifetime * self.refresh_lifetime_multiplier

    @classmethod
    def from_env(cls) -> "SessionTokenConfig":
        """
        Load configuration from environment variables.

        Raises:
            ValueError: in production when a secret is missing or both
                secrets are identical
        """
        environment = os.getenv("ENVIRONMENT", "development").lower()
        access_secret = os.getenv("JWT_SECRET")
        refresh_secret = os.getenv("JWT_REFRESH_SECRET")

        if environment == "production":
            if not access_secret or not refresh_secret:
                raise ValueError(
                    "JWT_SECRET and JWT_REFRESH_SECRET environment variables are required"
                )
            if access_secret == refresh_secret:
                raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must differ")

        return cls(
            access_secret=access_secret or _DEV_ACCESS_SECRET,
            refresh_secret=refresh_secret or _DEV_REFRESH_SECRET,
            access_lifetime_hours=int(os.getenv("JWT_EXPIRATION_HOURS", "1")),
        )


class SessionClaims(BaseModel):
    """Decoded session token payload."""
    sub: str  # user_id
    email: str
    is_admin: bool = False
    jti: str
    iss: str
    iat: int
    nbf: int
    exp: int

    @property
    def user_id(self) -> str:
        return self.sub


class SessionTokens(BaseModel):
    """Access/refresh token pair returned on login, register and refresh."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    refresh_expires_at: datetime


def _slot_key(prefix: str, user_id: str) -> str:
    return f"{prefix}:{user_id}"


class SessionTokenService:
    """
    Issues, validates, refreshes and revokes single-slot sessions.

    ``now_fn`` returns an aware UTC datetime and drives every time-bound
    check, so expiry can be exercised without sleeping.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        config: Optional[SessionTokenConfig] = None,
        now_fn: Callable[[], datetime] = utc_now,
    ):
        self.kv_store = kv_store
        self.config = config or SessionTokenConfig.from_env()
        self._now = now_fn

    def _encode(
        self,
        user_id: str,
        email: str,
        is_admin: bool,
        issued_at: datetime,
        lifetime: timedelta,
        secret: str,
    ) -> tuple[str, datetime]:
        expires_at = issued_at + lifetime
        payload = {
            "sub": user_id,
            "email": email,
            "is_admin": is_admin,
            # Unique per issuance, so re-issuing within the same second
            # still produces a different token and replaces the slot.
            "jti": str(uuid.uuid4()),
            "iss": self.config.issuer,
            "iat": int(issued_at.timestamp()),
            "nbf": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, secret, algorithm=self.config.algorithm)
        return token, expires_at

    def issue_session(self, user_id: str, email: str, is_admin: bool = False) -> SessionTokens:
        """
        Issue and register a new access/refresh pair for ``user_id``.

        Overwrites any previously registered tokens for the identity.

        Raises:
            StoreUnavailableError: if the registration write fails
        """
        now = self._now()
        access_token, access_exp = self._encode(
            user_id, email, is_admin, now,
            self.config.access_lifetime, self.config.access_secret,
        )
        refresh_token, refresh_exp = self._encode(
            user_id, email, is_admin, now,
            self.config.refresh_lifetime, self.config.refresh_secret,
        )

        self.kv_store.set(
            _slot_key(ACCESS_KEY_PREFIX, user_id),
            access_token,
            int(self.config.access_lifetime.total_seconds()),
        )
        self.kv_store.set(
            _slot_key(REFRESH_KEY_PREFIX, user_id),
            refresh_token,
            int(self.config.refresh_lifetime.total_seconds()),
        )

        logger.info(
            "Issued session",
            extra={
                "user_id": user_id,
                "expires_at": access_exp.isoformat(),
                "refresh_expires_at": refresh_exp.isoformat(),
            },
        )

        return SessionTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=access_exp,
            refresh_expires_at=refresh_exp,
        )

    def validate_session(self, token: str, refresh: bool = False) -> SessionClaims:
        """
        Validate a token of the given kind and return its claims.

        Args:
            token: JWT string as presented by the client
            refresh: True to validate a refresh token, False for access

        Raises:
            TokenInvalidError: bad signature, wrong kind, malformed claims
            TokenExpiredError: past exp, or no longer the registered token
            StoreUnavailableError: registration lookup failed
        """
        secret = self.config.refresh_secret if refresh else self.config.access_secret
        prefix = REFRESH_KEY_PREFIX if refresh else ACCESS_KEY_PREFIX

        try:
            # Time claims are checked below against the injected clock.
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                options={
                    "require": ["sub", "exp", "iat", "nbf"],
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
            claims = SessionClaims(**payload)
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {str(e)}")
        except PydanticValidationError:
            raise TokenInvalidError("Invalid token claims")

        now_ts = int(self._now().timestamp())
        if now_ts >= claims.exp:
            raise TokenExpiredError()
        if claims.nbf > now_ts:
            raise TokenInvalidError("Token is not yet valid")

        registered = self.kv_store.get(_slot_key(prefix, claims.user_id))
        if registered != token:
            logger.info(
                "Rejected superseded session token",
                extra={"user_id": claims.user_id, "key_prefix": prefix},
            )
            raise TokenExpiredError("Token has been superseded or revoked")

        return claims

    def refresh_session(self, user_id: str, email: str, is_admin: bool = False) -> SessionTokens:
        """
        Re-issue both tokens for an identity whose refresh token was
        already validated, resetting their store-level lifetimes.
        """
        return self.issue_session(user_id, email, is_admin)

    def revoke_session(self, user_id: str) -> None:
        """Delete both registrations; outstanding tokens stop validating."""
        self.kv_store.delete(_slot_key(ACCESS_KEY_PREFIX, user_id))
        self.kv_store.delete(_slot_key(REFRESH_KEY_PREFIX, user_id))
        logger.info("Revoked session", extra={"user_id": user_id})
