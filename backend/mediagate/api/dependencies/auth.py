"""
Bearer-token identity dependencies.

SECURITY: the user id always comes from a validated token, never from
the request body or query parameters.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from mediagate.api.dependencies.services import get_session_token_service
from mediagate.platform.errors import AuthenticationError
from mediagate.services.session_token_service import SessionClaims, SessionTokenService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _require_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return credentials.credentials


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: SessionTokenService = Depends(get_session_token_service),
) -> SessionClaims:
    """Require a valid, currently registered access token."""
    return tokens.validate_session(_require_credentials(credentials), refresh=False)


def get_refresh_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: SessionTokenService = Depends(get_session_token_service),
) -> SessionClaims:
    """Require a valid, currently registered refresh token."""
    return tokens.validate_session(_require_credentials(credentials), refresh=True)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: SessionTokenService = Depends(get_session_token_service),
) -> Optional[SessionClaims]:
    """
    Identity for routes that also serve anonymous callers.

    A missing header and a rejected token both resolve to anonymous.
    Store failures still propagate.
    """
    if credentials is None or not credentials.credentials:
        return None
    try:
        return tokens.validate_session(credentials.credentials, refresh=False)
    except AuthenticationError as exc:
        logger.debug("Treating caller as anonymous", extra={"error_code": exc.code})
        return None
