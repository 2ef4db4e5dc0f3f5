"""
Entitlement resolver.

Decides whether an identity may view a content item and owns every
subscription state transition:
- lazy expiry: any read of "the active subscription" first compares
  now() with end_date and, on a lapse, writes back is_active=False /
  status=EXPIRED before answering
- at most one live subscription per user, checked on create and renew
- ownership checks on cancel and renew

Plans are re-read by id on every decision, so a plan update is visible to
existing subscriptions on their next access check.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from mediagate.entitlements.errors import (
    ActiveSubscriptionExistsError,
    ContentNotAccessibleError,
    ContentNotPublishedError,
    PlanNotAvailableError,
    SubscriptionExpiredError,
    SubscriptionInactiveError,
)
from mediagate.entitlements.lifecycle import (
    compute_end_date,
    is_live,
    needs_expiry_writeback,
)
from mediagate.models import (
    AccessLevel,
    Content,
    Plan,
    Subscription,
    SubscriptionStatus,
)
from mediagate.models.base import utc_now
from mediagate.platform.errors import (
    PermissionDeniedError,
    SubscriptionNotFoundError,
)
from mediagate.repositories.interfaces import Repositories

logger = logging.getLogger(__name__)


class EntitlementResolver:
    """Subscription lifecycle and access-level decisions."""

    def __init__(
        self,
        repositories: Repositories,
        now_fn: Callable[[], datetime] = utc_now,
    ):
        self.repos = repositories
        self._now = now_fn

    # =========================================================================
    # Active subscription lookup
    # =========================================================================

    def _expire(self, subscription: Subscription) -> None:
        subscription.is_active = False
        subscription.status = SubscriptionStatus.EXPIRED
        self.repos.subscriptions.update(subscription)
        logger.info(
            "Subscription expired",
            extra={
                "action": "subscription.expired",
                "subscription_id": subscription.id,
                "user_id": subscription.user_id,
                "end_date": subscription.end_date.isoformat(),
            },
        )

    def get_active_subscription(self, user_id: str) -> Subscription:
        """
        Return the user's live subscription.

        Raises:
            SubscriptionNotFoundError: no active subscription on record
            SubscriptionExpiredError: the active record has lapsed; it is
                persisted as EXPIRED before this is raised
        """
        subscription = self.repos.subscriptions.get_active_by_user_id(user_id)
        if needs_expiry_writeback(subscription, self._now()):
            self._expire(subscription)
            raise SubscriptionExpiredError(subscription.id)
        return subscription

    def find_live_subscription(self, user_id: str) -> Optional[Subscription]:
        """Like get_active_subscription, but None instead of not-found/expired."""
        try:
            return self.get_active_subscription(user_id)
        except (SubscriptionNotFoundError, SubscriptionExpiredError):
            return None

    # =========================================================================
    # Access decisions
    # =========================================================================

    def can_access(self, user_id: Optional[str], required_level: AccessLevel) -> bool:
        """
        True if ``user_id`` may view content at ``required_level``.

        Free content needs no identity. Anything else needs a live
        subscription whose plan level is >= the required level.
        """
        required_level = AccessLevel(required_level)
        if required_level == AccessLevel.FREE:
            return True
        if user_id is None:
            return False

        subscription = self.find_live_subscription(user_id)
        if subscription is None:
            return False

        plan = self.repos.plans.get_by_id(subscription.plan_id)
        return AccessLevel(plan.access_level).satisfies(required_level)

    def get_content(self, content_id: str, user_id: Optional[str] = None) -> Content:
        """
        Fetch a content item the caller is entitled to.

        The published gate applies to every caller and is checked before
        the access level.

        Raises:
            ContentNotFoundError
            ContentNotPublishedError
            ContentNotAccessibleError
        """
        content = self.repos.contents.get_by_id(content_id)
        if not content.published:
            raise ContentNotPublishedError(content.id)
        if not self.can_access(user_id, content.access_level):
            raise ContentNotAccessibleError(content.id, AccessLevel(content.access_level).value)
        return content

    # =========================================================================
    # Subscription transitions
    # =========================================================================

    def _build_subscription(self, user_id: str, plan: Plan) -> Subscription:
        now = self._now()
        return Subscription(
            user_id=user_id,
            plan_id=plan.id,
            start_date=now,
            end_date=compute_end_date(plan, now),
            is_active=True,
            status=SubscriptionStatus.ACTIVE,
        )

    def create_subscription(self, user_id: str, plan_id: str) -> Subscription:
        """
        Subscribe ``user_id`` to ``plan_id``.

        Raises:
            UserNotFoundError
            ActiveSubscriptionExistsError: a live subscription already exists
            PlanNotFoundError
            PlanNotAvailableError: the plan is inactive
        """
        self.repos.users.get_by_id(user_id)

        live = self.find_live_subscription(user_id)
        if live is not None:
            raise ActiveSubscriptionExistsError(live.id)

        plan = self.repos.plans.get_by_id(plan_id)
        if not plan.is_active:
            raise PlanNotAvailableError(plan.id)

        subscription = self.repos.subscriptions.create(self._build_subscription(user_id, plan))
        logger.info(
            "Subscription created",
            extra={
                "subscription_id": subscription.id,
                "user_id": user_id,
                "plan_id": plan.id,
            },
        )
        return subscription

    def _get_owned(self, user_id: str, subscription_id: str) -> Subscription:
        subscription = self.repos.subscriptions.get_by_id(subscription_id)
        if subscription.user_id != user_id:
            raise PermissionDeniedError("Subscription belongs to another user")
        return subscription

    def cancel_subscription(self, user_id: str, subscription_id: str) -> Subscription:
        """
        Cancel a subscription owned by ``user_id``.

        Raises:
            SubscriptionNotFoundError
            PermissionDeniedError: not the owner
            SubscriptionExpiredError: lapsed (written back as EXPIRED first)
            SubscriptionInactiveError: already expired or cancelled
        """
        subscription = self._get_owned(user_id, subscription_id)
        if needs_expiry_writeback(subscription, self._now()):
            self._expire(subscription)
            raise SubscriptionExpiredError(subscription.id)
        if not subscription.is_active:
            raise SubscriptionInactiveError(subscription.id)

        cancelled = self.repos.subscriptions.cancel(subscription.id)
        logger.info(
            "Subscription cancelled",
            extra={"subscription_id": subscription.id, "user_id": user_id},
        )
        return cancelled

    def renew_subscription(self, user_id: str, subscription_id: str) -> Subscription:
        """
        Replace a subscription with a fresh one on the same plan.

        The new subscription starts now. The old one is cancelled if it is
        still active; renewing an expired or cancelled subscription just
        starts a new one. Cancelling the old row and inserting the new one
        commit together.

        Raises:
            SubscriptionNotFoundError
            PermissionDeniedError: not the owner
            PlanNotAvailableError: the plan has been deactivated
            ActiveSubscriptionExistsError: a different live subscription exists
        """
        old = self._get_owned(user_id, subscription_id)
        now = self._now()
        if needs_expiry_writeback(old, now):
            self._expire(old)

        plan = self.repos.plans.get_by_id(old.plan_id)
        if not plan.is_active:
            raise PlanNotAvailableError(plan.id)

        live = self.find_live_subscription(user_id)
        if live is not None and live.id != old.id:
            raise ActiveSubscriptionExistsError(live.id)

        replacement = self._build_subscription(user_id, plan)
        if is_live(old, now):
            renewed = self.repos.subscriptions.replace(old.id, replacement)
        else:
            renewed = self.repos.subscriptions.create(replacement)

        logger.info(
            "Subscription renewed",
            extra={
                "subscription_id": renewed.id,
                "previous_subscription_id": old.id,
                "user_id": user_id,
                "plan_id": plan.id,
            },
        )
        return renewed

    def get_subscription_history(self, user_id: str) -> list[Subscription]:
        return self.repos.subscriptions.get_history_by_user_id(user_id)
