"""
Subscription lifecycle state machine.

    ACTIVE --(now > end_date)--> EXPIRED
    ACTIVE --(owner cancels)---> CANCELLED
    ACTIVE --(renew)-----------> CANCELLED (a new ACTIVE subscription replaces it)

EXPIRED and CANCELLED are terminal. The functions here are pure: they
compute the effective status for a given instant and never persist
anything. Writing an observed expiry back is the resolver's job.
"""

from datetime import datetime, timedelta

from mediagate.models import Plan, Subscription, SubscriptionStatus


def current_status(subscription: Subscription, now: datetime) -> SubscriptionStatus:
    """Effective status of ``subscription`` at ``now``."""
    status = SubscriptionStatus(subscription.status)
    if status == SubscriptionStatus.ACTIVE and subscription.is_expired(now):
        return SubscriptionStatus.EXPIRED
    return status


def is_live(subscription: Subscription, now: datetime) -> bool:
    """Active flag set, status active, and end_date not yet passed."""
    return (
        bool(subscription.is_active)
        and current_status(subscription, now) == SubscriptionStatus.ACTIVE
    )


def needs_expiry_writeback(subscription: Subscription, now: datetime) -> bool:
    """True when storage still says ACTIVE but the subscription has lapsed."""
    return (
        SubscriptionStatus(subscription.status) == SubscriptionStatus.ACTIVE
        and current_status(subscription, now) == SubscriptionStatus.EXPIRED
    )


def compute_end_date(plan: Plan, start: datetime) -> datetime:
    return start + timedelta(days=plan.validity_days)
