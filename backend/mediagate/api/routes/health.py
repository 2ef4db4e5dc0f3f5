from fastapi import APIRouter, Response, status

from mediagate.platform.health import get_health_checker

router = APIRouter(tags=["health"])


@router.get("/health")
def health(response: Response):
    """Liveness and readiness check. 503 when the database or store is unreachable."""
    result = get_health_checker().get_health_status()
    if result["status"] != "ok":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result
