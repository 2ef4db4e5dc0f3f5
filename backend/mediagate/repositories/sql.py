"""
SQLAlchemy implementations of the repository facade.

Each write commits immediately. SQLAlchemy errors other than "no row"
propagate unchanged to the boundary.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mediagate.models import (
    Content,
    Plan,
    Subscription,
    SubscriptionStatus,
    User,
    WatchHistory,
    WatchStatus,
)
from mediagate.platform.errors import (
    ContentNotFoundError,
    PlanNotFoundError,
    SubscriptionNotFoundError,
    UserNotFoundError,
    WatchHistoryNotFoundError,
)
from mediagate.repositories.interfaces import (
    ContentFilter,
    ContentRepository,
    PlanRepository,
    Repositories,
    SubscriptionRepository,
    UserRepository,
    WatchHistoryRepository,
)

logger = logging.getLogger(__name__)


class _SqlRepository:
    """Shared session handling for the SQL repositories."""

    model = None
    not_found = None

    def __init__(self, session: Session):
        self.session = session

    def _save(self, instance):
        self.session.add(instance)
        self.session.commit()
        self.session.refresh(instance)
        return instance

    def create(self, instance):
        return self._save(instance)

    def update(self, instance):
        return self._save(instance)

    def get_by_id(self, entity_id: str):
        instance = self.session.get(self.model, entity_id)
        if instance is None:
            raise self.not_found(entity_id)
        return instance

    def delete(self, entity_id: str) -> None:
        instance = self.get_by_id(entity_id)
        self.session.delete(instance)
        self.session.commit()


class SqlUserRepository(_SqlRepository, UserRepository):
    model = User
    not_found = UserNotFoundError

    def get_by_email(self, email: str) -> User:
        user = self.session.query(User).filter(User.email == email).first()
        if user is None:
            raise UserNotFoundError()
        return user


class SqlPlanRepository(_SqlRepository, PlanRepository):
    model = Plan
    not_found = PlanNotFoundError

    def get_by_name(self, name: str) -> Plan:
        plan = self.session.query(Plan).filter(Plan.name == name).first()
        if plan is None:
            raise PlanNotFoundError()
        return plan

    def list(self, active_only: bool = True) -> list[Plan]:
        query = self.session.query(Plan)
        if active_only:
            query = query.filter(Plan.is_active.is_(True))
        return query.order_by(Plan.price.asc()).all()


class SqlSubscriptionRepository(_SqlRepository, SubscriptionRepository):
    model = Subscription
    not_found = SubscriptionNotFoundError

    def get_active_by_user_id(self, user_id: str) -> Subscription:
        subscription = (
            self.session.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.is_active.is_(True),
                Subscription.status == SubscriptionStatus.ACTIVE,
            )
            .order_by(Subscription.end_date.desc())
            .first()
        )
        if subscription is None:
            raise SubscriptionNotFoundError()
        return subscription

    def get_history_by_user_id(self, user_id: str) -> list[Subscription]:
        return (
            self.session.query(Subscription)
            .filter(Subscription.user_id == user_id)
            .order_by(Subscription.created_at.desc(), Subscription.start_date.desc())
            .all()
        )

    def cancel(self, subscription_id: str) -> Subscription:
        subscription = self.get_by_id(subscription_id)
        subscription.is_active = False
        subscription.status = SubscriptionStatus.CANCELLED
        return self._save(subscription)

    def replace(self, subscription_id: str, replacement: Subscription) -> Subscription:
        current = self.get_by_id(subscription_id)
        current.is_active = False
        current.status = SubscriptionStatus.CANCELLED
        self.session.add(replacement)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.error(
                "Subscription replace rolled back",
                extra={"subscription_id": subscription_id},
                exc_info=True,
            )
            raise
        self.session.refresh(replacement)
        return replacement


class SqlContentRepository(_SqlRepository, ContentRepository):
    model = Content
    not_found = ContentNotFoundError

    def list(
        self,
        content_filter: ContentFilter,
        limit: int,
        offset: int,
    ) -> tuple[list[Content], int]:
        query = self.session.query(Content)
        if content_filter.published_only:
            query = query.filter(Content.published.is_(True))
        if content_filter.access_level is not None:
            query = query.filter(Content.access_level == content_filter.access_level)

        total = query.count()
        items = (
            query.order_by(Content.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total


class SqlWatchHistoryRepository(_SqlRepository, WatchHistoryRepository):
    model = WatchHistory
    not_found = WatchHistoryNotFoundError

    def get_by_user_and_content(self, user_id: str, content_id: str) -> WatchHistory:
        history = (
            self.session.query(WatchHistory)
            .filter(
                WatchHistory.user_id == user_id,
                WatchHistory.content_id == content_id,
            )
            .first()
        )
        if history is None:
            raise WatchHistoryNotFoundError()
        return history

    def get_by_user_id(
        self,
        user_id: str,
        limit: int,
        offset: int,
    ) -> tuple[list[WatchHistory], int]:
        query = self.session.query(WatchHistory).filter(WatchHistory.user_id == user_id)
        total = query.count()
        items = (
            query.order_by(WatchHistory.last_watched_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def get_continue_watching(self, user_id: str, limit: int = 10) -> list[WatchHistory]:
        return (
            self.session.query(WatchHistory)
            .filter(
                WatchHistory.user_id == user_id,
                WatchHistory.status != WatchStatus.COMPLETED,
                WatchHistory.watched_seconds > 0,
            )
            .order_by(WatchHistory.last_watched_at.desc())
            .limit(limit)
            .all()
        )


def build_repositories(session: Session) -> Repositories:
    """Wire every SQL repository onto one session."""
    return Repositories(
        users=SqlUserRepository(session),
        plans=SqlPlanRepository(session),
        subscriptions=SqlSubscriptionRepository(session),
        contents=SqlContentRepository(session),
        watch_histories=SqlWatchHistoryRepository(session),
    )
