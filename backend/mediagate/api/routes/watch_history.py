from fastapi import APIRouter, Depends, Query

from mediagate.api.dependencies.auth import get_current_identity
from mediagate.api.dependencies.services import get_watch_progress_tracker
from mediagate.api.schemas.watch_history import (
    ContinueWatchingResponse,
    RecordProgressRequest,
    UpdateProgressRequest,
    WatchHistoryListResponse,
    WatchHistoryResponse,
)
from mediagate.middleware.rate_limit import rate_limit_dependency
from mediagate.services.session_token_service import SessionClaims
from mediagate.services.watch_progress import WatchProgressTracker

router = APIRouter(
    prefix="/api/v1/watch-history",
    tags=["watch-history"],
    dependencies=[Depends(rate_limit_dependency())],
)


@router.post("", response_model=WatchHistoryResponse)
def record_progress(
    body: RecordProgressRequest,
    claims: SessionClaims = Depends(get_current_identity),
    tracker: WatchProgressTracker = Depends(get_watch_progress_tracker),
):
    """Create or overwrite progress for a content item."""
    history = tracker.record_progress(claims.user_id, body.content_id, body.watched_seconds)
    return WatchHistoryResponse.model_validate(history)


@router.get("", response_model=WatchHistoryListResponse)
def get_watch_history(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    claims: SessionClaims = Depends(get_current_identity),
    tracker: WatchProgressTracker = Depends(get_watch_progress_tracker),
):
    items, total = tracker.get_watch_history(claims.user_id, limit=limit, offset=offset)
    return WatchHistoryListResponse(
        items=[WatchHistoryResponse.model_validate(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/continue-watching", response_model=ContinueWatchingResponse)
def get_continue_watching(
    claims: SessionClaims = Depends(get_current_identity),
    tracker: WatchProgressTracker = Depends(get_watch_progress_tracker),
):
    return ContinueWatchingResponse(
        items=[
            WatchHistoryResponse.model_validate(item)
            for item in tracker.get_continue_watching(claims.user_id)
        ]
    )


@router.put("/{history_id}", response_model=WatchHistoryResponse)
def update_progress(
    history_id: str,
    body: UpdateProgressRequest,
    claims: SessionClaims = Depends(get_current_identity),
    tracker: WatchProgressTracker = Depends(get_watch_progress_tracker),
):
    history = tracker.update_progress(claims.user_id, history_id, body.watched_seconds)
    return WatchHistoryResponse.model_validate(history)
