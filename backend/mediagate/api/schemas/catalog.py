"""Pydantic schemas for content, plan and subscription endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from mediagate.models import AccessLevel, SubscriptionStatus


class ContentResponse(BaseModel):
    id: str
    title: str
    description: str
    access_level: AccessLevel
    duration_seconds: int
    thumbnail_url: str
    video_url: str
    published: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ContentListResponse(BaseModel):
    items: List[ContentResponse]
    total: int = Field(..., description="Total count of matching content")
    limit: int
    offset: int


class PlanResponse(BaseModel):
    id: str
    name: str
    price: int = Field(..., description="Price in minor currency units")
    validity_days: int
    access_level: AccessLevel
    max_devices_allowed: int
    resolution: str
    description: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class PlanListResponse(BaseModel):
    plans: List[PlanResponse]


class CreateSubscriptionRequest(BaseModel):
    plan_id: str = Field(..., min_length=1, max_length=36)


class SubscriptionResponse(BaseModel):
    id: str
    user_id: str
    plan_id: str
    start_date: datetime
    end_date: datetime
    is_active: bool
    status: SubscriptionStatus
    plan: Optional[PlanResponse] = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionHistoryResponse(BaseModel):
    subscriptions: List[SubscriptionResponse]
