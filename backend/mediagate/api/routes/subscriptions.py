"""
Subscription routes.

- POST /api/v1/subscriptions:              subscribe to a plan
- GET  /api/v1/subscriptions/active:       live subscription (lazy expiry applies)
- GET  /api/v1/subscriptions/history:      all subscriptions, newest first
- POST /api/v1/subscriptions/{id}/cancel:  owner-only cancel
- POST /api/v1/subscriptions/{id}/renew:   owner-only renew
"""

from fastapi import APIRouter, Depends, status

from mediagate.api.dependencies.auth import get_current_identity
from mediagate.api.dependencies.services import get_entitlement_resolver
from mediagate.api.schemas.catalog import (
    CreateSubscriptionRequest,
    SubscriptionHistoryResponse,
    SubscriptionResponse,
)
from mediagate.entitlements.resolver import EntitlementResolver
from mediagate.middleware.rate_limit import rate_limit_dependency
from mediagate.services.session_token_service import SessionClaims

router = APIRouter(
    prefix="/api/v1/subscriptions",
    tags=["subscriptions"],
    dependencies=[Depends(rate_limit_dependency())],
)


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def create_subscription(
    body: CreateSubscriptionRequest,
    claims: SessionClaims = Depends(get_current_identity),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
):
    return SubscriptionResponse.model_validate(
        resolver.create_subscription(claims.user_id, body.plan_id)
    )


@router.get("/active", response_model=SubscriptionResponse)
def get_active_subscription(
    claims: SessionClaims = Depends(get_current_identity),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
):
    return SubscriptionResponse.model_validate(resolver.get_active_subscription(claims.user_id))


@router.get("/history", response_model=SubscriptionHistoryResponse)
def get_subscription_history(
    claims: SessionClaims = Depends(get_current_identity),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
):
    return SubscriptionHistoryResponse(
        subscriptions=[
            SubscriptionResponse.model_validate(s)
            for s in resolver.get_subscription_history(claims.user_id)
        ]
    )


@router.post("/{subscription_id}/cancel", response_model=SubscriptionResponse)
def cancel_subscription(
    subscription_id: str,
    claims: SessionClaims = Depends(get_current_identity),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
):
    return SubscriptionResponse.model_validate(
        resolver.cancel_subscription(claims.user_id, subscription_id)
    )


@router.post("/{subscription_id}/renew", response_model=SubscriptionResponse)
def renew_subscription(
    subscription_id: str,
    claims: SessionClaims = Depends(get_current_identity),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
):
    return SubscriptionResponse.model_validate(
        resolver.renew_subscription(claims.user_id, subscription_id)
    )
