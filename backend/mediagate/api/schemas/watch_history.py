"""Pydantic schemas for watch-history endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from mediagate.api.schemas.catalog import ContentResponse
from mediagate.models import WatchStatus


class RecordProgressRequest(BaseModel):
    content_id: str = Field(..., min_length=1, max_length=36)
    watched_seconds: int = Field(..., ge=0, description="Playback position in seconds")


class UpdateProgressRequest(BaseModel):
    watched_seconds: int = Field(..., ge=0, description="Playback position in seconds")


class WatchHistoryResponse(BaseModel):
    id: str
    user_id: str
    content_id: str
    watched_seconds: int
    total_seconds: int
    status: WatchStatus
    progress_percentage: float
    last_watched_at: datetime
    content: Optional[ContentResponse] = None

    model_config = ConfigDict(from_attributes=True)


class WatchHistoryListResponse(BaseModel):
    items: List[WatchHistoryResponse]
    total: int
    limit: int
    offset: int


class ContinueWatchingResponse(BaseModel):
    items: List[WatchHistoryResponse]
