"""
Profile routes for the authenticated user.

SECURITY: the user id always comes from the access token.
"""

from fastapi import APIRouter, Depends

from mediagate.api.dependencies.auth import get_current_identity
from mediagate.api.dependencies.services import get_account_service, get_entitlement_resolver
from mediagate.api.schemas.auth import UpdateProfileRequest, UserResponse
from mediagate.api.schemas.catalog import SubscriptionHistoryResponse, SubscriptionResponse
from mediagate.entitlements.resolver import EntitlementResolver
from mediagate.middleware.rate_limit import rate_limit_dependency
from mediagate.services.account_service import AccountService
from mediagate.services.session_token_service import SessionClaims

router = APIRouter(
    prefix="/api/v1/users",
    tags=["users"],
    dependencies=[Depends(rate_limit_dependency())],
)


@router.get("/profile", response_model=UserResponse)
def get_profile(
    claims: SessionClaims = Depends(get_current_identity),
    accounts: AccountService = Depends(get_account_service),
):
    return UserResponse.model_validate(accounts.get_profile(claims.user_id))


@router.put("/profile", response_model=UserResponse)
def update_profile(
    body: UpdateProfileRequest,
    claims: SessionClaims = Depends(get_current_identity),
    accounts: AccountService = Depends(get_account_service),
):
    user = accounts.update_profile(
        claims.user_id,
        name=body.name,
        bio=body.bio,
        picture=body.picture,
        phone=body.phone,
    )
    return UserResponse.model_validate(user)


@router.get("/subscription-history", response_model=SubscriptionHistoryResponse)
def subscription_history(
    claims: SessionClaims = Depends(get_current_identity),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
):
    return SubscriptionHistoryResponse(
        subscriptions=[
            SubscriptionResponse.model_validate(s)
            for s in resolver.get_subscription_history(claims.user_id)
        ]
    )
