"""
Abstract repository facade consumed by the entitlement core.

Every finder either returns the entity or raises the entity's NotFound
error; none of them returns a placeholder object.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from mediagate.models import (
    AccessLevel,
    Content,
    Plan,
    Subscription,
    User,
    WatchHistory,
)


@dataclass(frozen=True)
class ContentFilter:
    """Typed predicate for catalog listing."""

    published_only: bool = True
    access_level: Optional[AccessLevel] = None


class UserRepository(ABC):
    @abstractmethod
    def create(self, user: User) -> User: ...

    @abstractmethod
    def get_by_id(self, user_id: str) -> User: ...

    @abstractmethod
    def get_by_email(self, email: str) -> User: ...

    @abstractmethod
    def update(self, user: User) -> User: ...

    @abstractmethod
    def delete(self, user_id: str) -> None: ...


class PlanRepository(ABC):
    @abstractmethod
    def create(self, plan: Plan) -> Plan: ...

    @abstractmethod
    def get_by_id(self, plan_id: str) -> Plan: ...

    @abstractmethod
    def get_by_name(self, name: str) -> Plan: ...

    @abstractmethod
    def update(self, plan: Plan) -> Plan: ...

    @abstractmethod
    def delete(self, plan_id: str) -> None: ...

    @abstractmethod
    def list(self, active_only: bool = True) -> list[Plan]: ...


class SubscriptionRepository(ABC):
    @abstractmethod
    def create(self, subscription: Subscription) -> Subscription: ...

    @abstractmethod
    def get_by_id(self, subscription_id: str) -> Subscription: ...

    @abstractmethod
    def update(self, subscription: Subscription) -> Subscription: ...

    @abstractmethod
    def delete(self, subscription_id: str) -> None: ...

    @abstractmethod
    def get_active_by_user_id(self, user_id: str) -> Subscription:
        """
        Latest-ending subscription with is_active set and status active.

        Does not look at end_date; expiry is the resolver's decision.
        """

    @abstractmethod
    def get_history_by_user_id(self, user_id: str) -> list[Subscription]: ...

    @abstractmethod
    def cancel(self, subscription_id: str) -> Subscription: ...

    @abstractmethod
    def replace(self, subscription_id: str, replacement: Subscription) -> Subscription:
        """Cancel ``subscription_id`` and insert ``replacement`` in one commit."""


class ContentRepository(ABC):
    @abstractmethod
    def create(self, content: Content) -> Content: ...

    @abstractmethod
    def get_by_id(self, content_id: str) -> Content: ...

    @abstractmethod
    def update(self, content: Content) -> Content: ...

    @abstractmethod
    def delete(self, content_id: str) -> None: ...

    @abstractmethod
    def list(
        self,
        content_filter: ContentFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Content], int]: ...


class WatchHistoryRepository(ABC):
    @abstractmethod
    def create(self, history: WatchHistory) -> WatchHistory: ...

    @abstractmethod
    def get_by_id(self, history_id: str) -> WatchHistory: ...

    @abstractmethod
    def update(self, history: WatchHistory) -> WatchHistory: ...

    @abstractmethod
    def delete(self, history_id: str) -> None: ...

    @abstractmethod
    def get_by_user_and_content(self, user_id: str, content_id: str) -> WatchHistory: ...

    @abstractmethod
    def get_by_user_id(
        self,
        user_id: str,
        limit: int,
        offset: int,
    ) -> tuple[list[WatchHistory], int]: ...

    @abstractmethod
    def get_continue_watching(self, user_id: str, limit: int = 10) -> list[WatchHistory]: ...


@dataclass
class Repositories:
    """Bundle of per-entity repositories handed to the core services."""

    users: UserRepository
    plans: PlanRepository
    subscriptions: SubscriptionRepository
    contents: ContentRepository
    watch_histories: WatchHistoryRepository
