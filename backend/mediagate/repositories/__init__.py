from mediagate.repositories.interfaces import (
    ContentFilter,
    ContentRepository,
    PlanRepository,
    Repositories,
    SubscriptionRepository,
    UserRepository,
    WatchHistoryRepository,
)
from mediagate.repositories.sql import build_repositories

__all__ = [
    "ContentFilter",
    "ContentRepository",
    "PlanRepository",
    "Repositories",
    "SubscriptionRepository",
    "UserRepository",
    "WatchHistoryRepository",
    "build_repositories",
]
