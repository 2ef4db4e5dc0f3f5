"""
Watch-progress tracking.

One WatchHistory row per (user, content). The first progress write
creates it with total_seconds snapshotted from the content's duration;
later writes overwrite watched_seconds and last_watched_at in place.

Progress is NOT monotonic: a lower watched_seconds than the stored value
is accepted verbatim.

Two concurrent record_progress calls for the same (user, content) race
last-write-wins at the repository. They are not serialized here, and two
first writes racing each other can hit the unique (user_id, content_id)
constraint; the loser surfaces as an IntegrityError.
"""

import logging
from datetime import datetime
from typing import Callable

from mediagate.entitlements.errors import ContentNotAccessibleError
from mediagate.entitlements.resolver import EntitlementResolver
from mediagate.models import AccessLevel, WatchHistory, WatchStatus, reaches_completion
from mediagate.models.base import utc_now
from mediagate.platform.errors import (
    PermissionDeniedError,
    ValidationError,
    WatchHistoryNotFoundError,
)
from mediagate.repositories.interfaces import Repositories

logger = logging.getLogger(__name__)

CONTINUE_WATCHING_LIMIT = 10


def derive_status(watched_seconds: int, total_seconds: int) -> WatchStatus:
    """completed at >= 90%, paused when some progress exists, else started."""
    if reaches_completion(watched_seconds, total_seconds):
        return WatchStatus.COMPLETED
    if watched_seconds > 0:
        return WatchStatus.PAUSED
    return WatchStatus.STARTED


def _validate_watched_seconds(watched_seconds: int) -> None:
    if watched_seconds < 0:
        raise ValidationError(
            "watched_seconds must be zero or greater",
            details={"watched_seconds": watched_seconds},
        )


class WatchProgressTracker:
    """Records and reads per-user playback progress."""

    def __init__(
        self,
        repositories: Repositories,
        resolver: EntitlementResolver,
        now_fn: Callable[[], datetime] = utc_now,
    ):
        self.repos = repositories
        self.resolver = resolver
        self._now = now_fn

    def record_progress(self, user_id: str, content_id: str, watched_seconds: int) -> WatchHistory:
        """
        Create or overwrite the caller's progress on ``content_id``.

        Non-free content requires a live entitlement regardless of how
        much has been watched.

        Raises:
            ValidationError: negative watched_seconds
            ContentNotFoundError
            ContentNotAccessibleError
        """
        _validate_watched_seconds(watched_seconds)

        content = self.repos.contents.get_by_id(content_id)
        if AccessLevel(content.access_level) != AccessLevel.FREE:
            if not self.resolver.can_access(user_id, content.access_level):
                raise ContentNotAccessibleError(content.id, AccessLevel(content.access_level).value)

        now = self._now()
        try:
            history = self.repos.watch_histories.get_by_user_and_content(user_id, content_id)
        except WatchHistoryNotFoundError:
            history = WatchHistory(
                user_id=user_id,
                content_id=content_id,
                watched_seconds=watched_seconds,
                total_seconds=content.duration_seconds,
                status=derive_status(watched_seconds, content.duration_seconds),
                last_watched_at=now,
            )
            history = self.repos.watch_histories.create(history)
            logger.info(
                "Watch history created",
                extra={
                    "watch_history_id": history.id,
                    "user_id": user_id,
                    "content_id": content_id,
                    "status": history.status.value,
                },
            )
            return history

        history.watched_seconds = watched_seconds
        history.last_watched_at = now
        history.status = derive_status(watched_seconds, history.total_seconds)
        history = self.repos.watch_histories.update(history)
        logger.debug(
            "Watch progress recorded",
            extra={
                "watch_history_id": history.id,
                "user_id": user_id,
                "content_id": content_id,
                "status": history.status.value,
            },
        )
        return history

    def update_progress(self, user_id: str, history_id: str, watched_seconds: int) -> WatchHistory:
        """
        Overwrite progress on an existing record owned by ``user_id``.

        Status is completed at >= 90% and paused otherwise, zero included.

        Raises:
            ValidationError: negative watched_seconds
            WatchHistoryNotFoundError
            PermissionDeniedError: record belongs to another user
        """
        _validate_watched_seconds(watched_seconds)

        history = self.repos.watch_histories.get_by_id(history_id)
        if history.user_id != user_id:
            raise PermissionDeniedError("Watch history belongs to another user")

        history.watched_seconds = watched_seconds
        history.last_watched_at = self._now()
        if reaches_completion(watched_seconds, history.total_seconds):
            history.status = WatchStatus.COMPLETED
        else:
            history.status = WatchStatus.PAUSED
        return self.repos.watch_histories.update(history)

    def get_watch_history(
        self,
        user_id: str,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[WatchHistory], int]:
        return self.repos.watch_histories.get_by_user_id(user_id, limit, offset)

    def get_continue_watching(
        self,
        user_id: str,
        limit: int = CONTINUE_WATCHING_LIMIT,
    ) -> list[WatchHistory]:
        return self.repos.watch_histories.get_continue_watching(user_id, limit)
