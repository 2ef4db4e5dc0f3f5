"""
Catalog content routes.

Identity is optional: anonymous callers see free content only. Unpublished
content is hidden from everyone.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from mediagate.api.dependencies.auth import get_optional_identity
from mediagate.api.dependencies.services import get_catalog_service, get_entitlement_resolver
from mediagate.api.schemas.catalog import ContentListResponse, ContentResponse
from mediagate.entitlements.resolver import EntitlementResolver
from mediagate.middleware.rate_limit import rate_limit_dependency
from mediagate.models import AccessLevel
from mediagate.repositories.interfaces import ContentFilter
from mediagate.services.catalog_service import CatalogService
from mediagate.services.session_token_service import SessionClaims

router = APIRouter(
    prefix="/api/v1/content",
    tags=["content"],
    dependencies=[Depends(rate_limit_dependency())],
)


@router.get("", response_model=ContentListResponse)
def list_content(
    access_level: Optional[AccessLevel] = Query(None, description="Filter by required level"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """List published content, newest first."""
    items, total = catalog.list_content(
        ContentFilter(published_only=True, access_level=access_level),
        limit=limit,
        offset=offset,
    )
    return ContentListResponse(
        items=[ContentResponse.model_validate(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{content_id}", response_model=ContentResponse)
def get_content(
    content_id: str,
    claims: Optional[SessionClaims] = Depends(get_optional_identity),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
):
    user_id = claims.user_id if claims is not None else None
    return ContentResponse.model_validate(resolver.get_content(content_id, user_id))
