"""
Tests for watch-progress tracking.

Verifies:
- First write creates the record with a total_seconds snapshot
- Later writes overwrite in place, lower values included
- Status derivation around the 90% completion boundary
- Non-free content requires a live entitlement
- Ownership on update, continue-watching filter and limit
"""

import pytest

from mediagate.entitlements.errors import ContentNotAccessibleError
from mediagate.models import AccessLevel, WatchStatus
from mediagate.platform.errors import (
    ContentNotFoundError,
    PermissionDeniedError,
    ValidationError,
    WatchHistoryNotFoundError,
)
from mediagate.services.watch_progress import derive_status


class TestDeriveStatus:
    @pytest.mark.parametrize("watched,total,expected", [
        (0, 7200, WatchStatus.STARTED),
        (1, 7200, WatchStatus.PAUSED),
        (6479, 7200, WatchStatus.PAUSED),
        (6480, 7200, WatchStatus.COMPLETED),
        (7200, 7200, WatchStatus.COMPLETED),
        (9000, 7200, WatchStatus.COMPLETED),
        (89, 100, WatchStatus.PAUSED),
        (90, 100, WatchStatus.COMPLETED),
    ])
    def test_threshold(self, watched, total, expected):
        assert derive_status(watched, total) == expected

    def test_zero_duration_never_completes(self):
        assert derive_status(10, 0) == WatchStatus.PAUSED


class TestRecordProgress:
    """Create-or-overwrite on (user, content)."""

    def test_first_write_creates_record_with_snapshot(self, tracker, make_user, make_content, clock):
        user = make_user()
        content = make_content(duration_seconds=7200)

        history = tracker.record_progress(user.id, content.id, 600)

        assert history.user_id == user.id
        assert history.content_id == content.id
        assert history.watched_seconds == 600
        assert history.total_seconds == 7200
        assert history.status == WatchStatus.PAUSED
        assert history.last_watched_at == clock.now()

    def test_first_write_of_zero_is_started(self, tracker, make_user, make_content):
        history = tracker.record_progress(make_user().id, make_content().id, 0)
        assert history.status == WatchStatus.STARTED

    def test_second_write_updates_same_record(self, tracker, make_user, make_content, clock):
        user = make_user()
        content = make_content()
        first = tracker.record_progress(user.id, content.id, 100)
        clock.advance(minutes=5)

        second = tracker.record_progress(user.id, content.id, 400)

        assert second.id == first.id
        assert second.watched_seconds == 400
        assert second.last_watched_at == clock.now()

    def test_lower_value_is_stored_verbatim(self, tracker, make_user, make_content):
        user = make_user()
        content = make_content()
        tracker.record_progress(user.id, content.id, 5000)

        history = tracker.record_progress(user.id, content.id, 1200)

        assert history.watched_seconds == 1200

    def test_rewinding_below_threshold_reverts_to_paused(self, tracker, make_user, make_content):
        user = make_user()
        content = make_content(duration_seconds=7200)
        assert tracker.record_progress(user.id, content.id, 6480).status == WatchStatus.COMPLETED

        history = tracker.record_progress(user.id, content.id, 3000)

        assert history.status == WatchStatus.PAUSED

    def test_total_snapshot_survives_duration_change(self, tracker, repos, make_user, make_content):
        user = make_user()
        content = make_content(duration_seconds=7200)
        tracker.record_progress(user.id, content.id, 100)

        content.duration_seconds = 3600
        repos.contents.update(content)
        history = tracker.record_progress(user.id, content.id, 3300)

        assert history.total_seconds == 7200
        assert history.status == WatchStatus.PAUSED

    def test_completion_boundary(self, tracker, make_user, make_content):
        user = make_user()
        content = make_content(duration_seconds=7200)

        assert tracker.record_progress(user.id, content.id, 6479).status == WatchStatus.PAUSED
        assert tracker.record_progress(user.id, content.id, 6480).status == WatchStatus.COMPLETED

    def test_negative_seconds_rejected(self, tracker, make_user, make_content):
        with pytest.raises(ValidationError):
            tracker.record_progress(make_user().id, make_content().id, -1)

    def test_missing_content(self, tracker, make_user):
        with pytest.raises(ContentNotFoundError):
            tracker.record_progress(make_user().id, "missing", 10)

    def test_premium_content_requires_entitlement(self, tracker, make_user, make_content):
        content = make_content(access_level=AccessLevel.PREMIUM)

        with pytest.raises(ContentNotAccessibleError):
            tracker.record_progress(make_user().id, content.id, 0)

    def test_basic_plan_cannot_record_premium(self, tracker, resolver, make_user, make_plan, make_content):
        user = make_user()
        resolver.create_subscription(user.id, make_plan(access_level=AccessLevel.BASIC).id)
        content = make_content(access_level=AccessLevel.PREMIUM)

        with pytest.raises(ContentNotAccessibleError):
            tracker.record_progress(user.id, content.id, 60)

    def test_premium_plan_records_premium(self, tracker, resolver, make_user, make_plan, make_content):
        user = make_user()
        resolver.create_subscription(user.id, make_plan(access_level=AccessLevel.PREMIUM).id)
        content = make_content(access_level=AccessLevel.PREMIUM, duration_seconds=7200)

        history = tracker.record_progress(user.id, content.id, 6480)

        assert history.status == WatchStatus.COMPLETED

    def test_expired_subscription_blocks_recording(
        self, tracker, resolver, make_user, make_plan, make_content, clock
    ):
        user = make_user()
        resolver.create_subscription(user.id, make_plan(access_level=AccessLevel.BASIC).id)
        content = make_content(access_level=AccessLevel.BASIC)
        tracker.record_progress(user.id, content.id, 60)
        clock.advance(days=31)

        with pytest.raises(ContentNotAccessibleError):
            tracker.record_progress(user.id, content.id, 120)


class TestUpdateProgress:
    def test_update_sets_completed_at_threshold(self, tracker, make_user, make_content):
        user = make_user()
        history = tracker.record_progress(user.id, make_content(duration_seconds=7200).id, 10)

        updated = tracker.update_progress(user.id, history.id, 6480)

        assert updated.status == WatchStatus.COMPLETED
        assert updated.watched_seconds == 6480

    def test_update_with_zero_is_paused(self, tracker, make_user, make_content):
        user = make_user()
        history = tracker.record_progress(user.id, make_content().id, 500)

        updated = tracker.update_progress(user.id, history.id, 0)

        assert updated.status == WatchStatus.PAUSED
        assert updated.watched_seconds == 0

    def test_update_by_other_user_forbidden(self, tracker, make_user, make_content):
        owner = make_user()
        history = tracker.record_progress(owner.id, make_content().id, 500)

        with pytest.raises(PermissionDeniedError):
            tracker.update_progress(make_user().id, history.id, 600)

    def test_update_missing_record(self, tracker, make_user):
        with pytest.raises(WatchHistoryNotFoundError):
            tracker.update_progress(make_user().id, "missing", 10)

    def test_update_negative_rejected(self, tracker, make_user, make_content):
        user = make_user()
        history = tracker.record_progress(user.id, make_content().id, 500)

        with pytest.raises(ValidationError):
            tracker.update_progress(user.id, history.id, -5)


class TestReads:
    def test_history_newest_first_with_total(self, tracker, make_user, make_content, clock):
        user = make_user()
        ids = []
        for _ in range(3):
            ids.append(tracker.record_progress(user.id, make_content().id, 10).id)
            clock.advance(minutes=1)

        items, total = tracker.get_watch_history(user.id, limit=2, offset=0)

        assert total == 3
        assert [h.id for h in items] == [ids[2], ids[1]]

    def test_history_offset(self, tracker, make_user, make_content, clock):
        user = make_user()
        first = tracker.record_progress(user.id, make_content().id, 10)
        clock.advance(minutes=1)
        tracker.record_progress(user.id, make_content().id, 10)

        items, total = tracker.get_watch_history(user.id, limit=10, offset=1)

        assert total == 2
        assert [h.id for h in items] == [first.id]

    def test_history_is_per_user(self, tracker, make_user, make_content):
        content = make_content()
        tracker.record_progress(make_user().id, content.id, 10)

        items, total = tracker.get_watch_history(make_user().id)

        assert items == []
        assert total == 0

    def test_continue_watching_excludes_completed_and_unstarted(
        self, tracker, make_user, make_content, clock
    ):
        user = make_user()
        in_progress = tracker.record_progress(user.id, make_content(duration_seconds=7200).id, 600)
        clock.advance(minutes=1)
        tracker.record_progress(user.id, make_content(duration_seconds=7200).id, 7000)
        clock.advance(minutes=1)
        tracker.record_progress(user.id, make_content().id, 0)

        items = tracker.get_continue_watching(user.id)

        assert [h.id for h in items] == [in_progress.id]

    def test_continue_watching_limit_and_order(self, tracker, make_user, make_content, clock):
        user = make_user()
        ids = []
        for _ in range(12):
            ids.append(tracker.record_progress(user.id, make_content().id, 30).id)
            clock.advance(minutes=1)

        items = tracker.get_continue_watching(user.id)

        assert len(items) == 10
        assert [h.id for h in items] == list(reversed(ids))[:10]
