"""Tests for the pure subscription status computation."""

from datetime import timedelta

import pytest

from mediagate.entitlements.lifecycle import (
    compute_end_date,
    current_status,
    is_live,
    needs_expiry_writeback,
)
from mediagate.models import Plan, Subscription, SubscriptionStatus
from mediagate.tests.conftest import T0


def _subscription(status=SubscriptionStatus.ACTIVE, is_active=True, days=30):
    return Subscription(
        user_id="u1",
        plan_id="p1",
        start_date=T0,
        end_date=T0 + timedelta(days=days),
        is_active=is_active,
        status=status,
    )


class TestCurrentStatus:
    def test_active_before_end_date(self):
        assert current_status(_subscription(), T0 + timedelta(days=29)) == SubscriptionStatus.ACTIVE

    def test_active_exactly_at_end_date(self):
        """Expiry requires now to be strictly after end_date."""
        assert current_status(_subscription(), T0 + timedelta(days=30)) == SubscriptionStatus.ACTIVE

    def test_expired_after_end_date(self):
        sub = _subscription()
        assert current_status(sub, T0 + timedelta(days=30, seconds=1)) == SubscriptionStatus.EXPIRED

    def test_pure_computation_does_not_mutate(self):
        sub = _subscription()
        current_status(sub, T0 + timedelta(days=31))
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.is_active is True

    @pytest.mark.parametrize("terminal", [SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED])
    def test_terminal_states_are_sticky(self, terminal):
        sub = _subscription(status=terminal, is_active=False)
        assert current_status(sub, T0) == terminal
        assert current_status(sub, T0 + timedelta(days=365)) == terminal


class TestIsLive:
    def test_live_when_active_and_unexpired(self):
        assert is_live(_subscription(), T0) is True

    def test_not_live_when_flag_cleared(self):
        assert is_live(_subscription(is_active=False), T0) is False

    def test_not_live_after_end_date(self):
        assert is_live(_subscription(), T0 + timedelta(days=31)) is False

    def test_writeback_needed_only_for_lapsed_active(self):
        assert needs_expiry_writeback(_subscription(), T0 + timedelta(days=31)) is True
        assert needs_expiry_writeback(_subscription(), T0) is False
        cancelled = _subscription(status=SubscriptionStatus.CANCELLED, is_active=False)
        assert needs_expiry_writeback(cancelled, T0 + timedelta(days=31)) is False


def test_compute_end_date_adds_validity_days():
    plan = Plan(validity_days=30)
    assert compute_end_date(plan, T0) == T0 + timedelta(days=30)
