"""
Authentication routes.

- POST /api/v1/auth/register: create an account and open a session
- POST /api/v1/auth/login:    open a session (replaces any previous one)
- POST /api/v1/auth/refresh:  exchange the refresh token (as bearer) for a new pair
- POST /api/v1/auth/logout:   revoke both tokens for the caller
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from mediagate.api.dependencies.auth import get_current_identity, get_refresh_identity
from mediagate.api.dependencies.services import get_account_service
from mediagate.api.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from mediagate.middleware.rate_limit import rate_limit_dependency
from mediagate.services.account_service import AccountService, AuthResult
from mediagate.services.session_token_service import SessionClaims

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["auth"],
    dependencies=[Depends(rate_limit_dependency())],
)


def _auth_result_to_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
        token_type=result.tokens.token_type,
        expires_at=result.tokens.expires_at,
        refresh_expires_at=result.tokens.refresh_expires_at,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
):
    result = accounts.register(
        email=body.email,
        password=body.password,
        name=body.name,
        phone=body.phone,
        bio=body.bio,
        picture=body.picture,
    )
    return _auth_result_to_response(result)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    return _auth_result_to_response(accounts.login(body.email, body.password))


@router.post("/refresh", response_model=AuthResponse)
def refresh(
    claims: SessionClaims = Depends(get_refresh_identity),
    accounts: AccountService = Depends(get_account_service),
):
    return _auth_result_to_response(accounts.refresh(claims.user_id))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    claims: SessionClaims = Depends(get_current_identity),
    accounts: AccountService = Depends(get_account_service),
):
    accounts.logout(claims.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
