"""
Database models for users, plans, subscriptions, catalog content and
watch history.
"""

from mediagate.models.access_level import AccessLevel
from mediagate.models.base import TimestampMixin, UTCDateTime
from mediagate.models.user import User
from mediagate.models.plan import Plan
from mediagate.models.subscription import Subscription, SubscriptionStatus
from mediagate.models.content import Content
from mediagate.models.watch_history import (
    COMPLETION_THRESHOLD_PERCENT,
    WatchHistory,
    WatchStatus,
    reaches_completion,
)

__all__ = [
    "AccessLevel",
    "TimestampMixin",
    "UTCDateTime",
    "User",
    "Plan",
    "Subscription",
    "SubscriptionStatus",
    "Content",
    "WatchHistory",
    "WatchStatus",
    "COMPLETION_THRESHOLD_PERCENT",
    "reaches_completion",
]
