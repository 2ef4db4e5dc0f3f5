"""
Rate limiting using a fixed-window counter in the key-value store.

Every request increments ``rate_limit:{identity}``. The first increment
in a window sets the key's expiry to the window length; the request is
allowed while the post-increment count is <= the limit. Bursts that
straddle a window boundary can admit up to 2x the limit.

Identity is ``user:{user_id}`` for authenticated callers and the client
address otherwise.

A store failure rejects the request with 500 RATE_LIMIT_CHECK_FAILED,
whether it happens while validating the bearer token or while counting.
The limiter never fails open.

Configuration (environment variables):
- RATE_LIMIT_REQUESTS:       Max requests per window (default: "100")
- RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: "60")
- RATE_LIMIT_ENABLED:        Kill switch (default: "true")

Usage (FastAPI dependency injection):
    from mediagate.middleware.rate_limit import rate_limit_dependency

    @router.get("/api/v1/content")
    def list_content(_rate_limit=Depends(rate_limit_dependency())):
        ...
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from mediagate.api.dependencies.auth import bearer_scheme, get_optional_identity
from mediagate.api.dependencies.services import get_session_token_service
from mediagate.platform.errors import AppError, StoreUnavailableError
from mediagate.services.kv_store import KeyValueStore, get_kv_store
from mediagate.services.session_token_service import SessionClaims, SessionTokenService

logger = logging.getLogger(__name__)

KEY_PREFIX = "rate_limit"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def _is_rate_limit_enabled() -> bool:
    """Check if rate limiting is enabled via environment variable."""
    return os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("true", "1", "yes")


def _get_default_limit() -> int:
    """Get the default rate limit from environment."""
    return int(os.getenv("RATE_LIMIT_REQUESTS", "100"))


def _get_default_window() -> int:
    """Get the default window duration from environment."""
    return int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))


# ---------------------------------------------------------------------------
# Rate limit result dataclass
# ---------------------------------------------------------------------------

@dataclass
class RateLimitResult:
    """
    Result of a rate limit check.

    Attributes:
        allowed:     Whether the request is allowed.
        count:       Post-increment request count in the current window.
        remaining:   Number of requests remaining in the current window.
        limit:       Maximum number of requests allowed per window.
        retry_after: Seconds until the client should retry (0 if allowed).
    """

    allowed: bool
    count: int
    remaining: int
    limit: int
    retry_after: int


class RateLimitCheckFailedError(AppError):
    """The counter store could not be reached (500)."""

    def __init__(self):
        super().__init__(
            code="RATE_LIMIT_CHECK_FAILED",
            message="rate limit check failed",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


# ---------------------------------------------------------------------------
# RateLimiter class
# ---------------------------------------------------------------------------

class RateLimiter:
    """Fixed-window request counter per identity."""

    def __init__(
        self,
        kv_store: KeyValueStore,
        default_limit: int = 100,
        window_seconds: int = 60,
    ):
        self.kv_store = kv_store
        self.default_limit = default_limit
        self.window_seconds = window_seconds

    def check_rate_limit(
        self,
        identity: str,
        limit: Optional[int] = None,
        window: Optional[int] = None,
    ) -> RateLimitResult:
        """
        Count this request against ``identity`` and decide.

        Raises:
            StoreUnavailableError: if the counter store is unreachable
        """
        effective_limit = limit if limit is not None else self.default_limit
        effective_window = window if window is not None else self.window_seconds

        key = f"{KEY_PREFIX}:{identity}"
        count = self.kv_store.increment(key)
        if count == 1:
            self.kv_store.expire(key, effective_window)

        if count > effective_limit:
            return RateLimitResult(
                allowed=False,
                count=count,
                remaining=0,
                limit=effective_limit,
                retry_after=effective_window,
            )

        return RateLimitResult(
            allowed=True,
            count=count,
            remaining=effective_limit - count,
            limit=effective_limit,
            retry_after=0,
        )

    def allow(self, identity: str, max_requests: int, window_seconds: int) -> bool:
        return self.check_rate_limit(identity, max_requests, window_seconds).allowed


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_rate_limiter_instance: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """
    Return the module-level :class:`RateLimiter` singleton.

    Creates the instance on first call over the shared key-value store,
    with the limit from ``RATE_LIMIT_REQUESTS`` and the window from
    ``RATE_LIMIT_WINDOW_SECONDS``.
    """
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = RateLimiter(
            kv_store=get_kv_store(),
            default_limit=_get_default_limit(),
            window_seconds=_get_default_window(),
        )
    return _rate_limiter_instance


def resolve_identity(request: Request, claims: Optional[SessionClaims]) -> str:
    """``user:{id}`` when authenticated, otherwise the client address."""
    if claims is not None:
        return f"user:{claims.user_id}"
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def get_rate_limit_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: SessionTokenService = Depends(get_session_token_service),
) -> Optional[SessionClaims]:
    """
    Optional caller identity for rate limiting.

    A store outage during token validation is reported as a failed rate
    limit check, the same as an outage while counting.
    """
    try:
        return get_optional_identity(credentials, tokens)
    except StoreUnavailableError as exc:
        logger.error("Rate limit identity lookup failed", extra={"error_code": exc.code})
        raise RateLimitCheckFailedError() from exc


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------

def rate_limit_dependency(
    limit: Optional[int] = None,
    window: Optional[int] = None,
) -> Callable:
    """
    Create a FastAPI dependency that enforces rate limiting.

    Args:
        limit:  Override for the per-window request limit. When ``None``
                the limiter default (``RATE_LIMIT_REQUESTS``) is used.
        window: Override for the window duration in seconds. When
                ``None`` the limiter default is used.
    """

    def _dependency(
        request: Request,
        claims: Optional[SessionClaims] = Depends(get_rate_limit_identity),
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> Optional[RateLimitResult]:
        # Kill switch: skip rate limiting entirely when disabled.
        if not _is_rate_limit_enabled():
            return None

        identity = resolve_identity(request, claims)

        try:
            result = limiter.check_rate_limit(identity, limit=limit, window=window)
        except StoreUnavailableError as exc:
            logger.error(
                "Rate limit check failed",
                extra={
                    "identity": identity,
                    "path": request.url.path,
                    "method": request.method,
                },
            )
            raise RateLimitCheckFailedError() from exc

        if not result.allowed:
            logger.warning(
                "Rate limit triggered",
                extra={
                    "action": "rate_limit.triggered",
                    "identity": identity,
                    "limit": result.limit,
                    "count": result.count,
                    "retry_after": result.retry_after,
                    "request_time": time.time(),
                    "path": request.url.path,
                    "method": request.method,
                },
            )

            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=(
                    f"rate limit exceeded: maximum {result.limit} requests "
                    f"per {result.retry_after} seconds allowed"
                ),
                headers={"Retry-After": str(result.retry_after)},
            )

        return result

    return _dependency
