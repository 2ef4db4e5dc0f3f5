from fastapi import APIRouter, Depends

from mediagate.api.dependencies.services import get_catalog_service
from mediagate.api.schemas.catalog import PlanListResponse, PlanResponse
from mediagate.middleware.rate_limit import rate_limit_dependency
from mediagate.services.catalog_service import CatalogService

router = APIRouter(
    prefix="/api/v1/plans",
    tags=["plans"],
    dependencies=[Depends(rate_limit_dependency())],
)


@router.get("", response_model=PlanListResponse)
def list_plans(catalog: CatalogService = Depends(get_catalog_service)):
    """Active plans, cheapest first."""
    return PlanListResponse(
        plans=[PlanResponse.model_validate(plan) for plan in catalog.list_plans(active_only=True)]
    )


@router.get("/{plan_id}", response_model=PlanResponse)
def get_plan(plan_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    return PlanResponse.model_validate(catalog.get_plan(plan_id))
