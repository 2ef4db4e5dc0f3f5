"""
Watch history model.

One row per (user, content) pair. Created on the first progress write and
mutated in place afterwards. ``total_seconds`` is a snapshot of the
content duration taken when the row was created.
"""

import enum

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship

from mediagate.db_base import Base
from mediagate.models.base import TimestampMixin, UTCDateTime, generate_uuid

# Progress at or above this percentage counts as completed.
COMPLETION_THRESHOLD_PERCENT = 90


class WatchStatus(str, enum.Enum):
    """Derived playback state."""
    STARTED = "started"
    PAUSED = "paused"
    COMPLETED = "completed"


class WatchHistory(Base, TimestampMixin):
    """Per-user playback progress for one content item."""

    __tablename__ = "watch_histories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content_id = Column(
        String(36),
        ForeignKey("contents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    watched_seconds = Column(Integer, nullable=False, default=0)
    total_seconds = Column(Integer, nullable=False)
    status = Column(
        SAEnum(
            WatchStatus,
            name="watch_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=WatchStatus.STARTED,
    )
    last_watched_at = Column(UTCDateTime(), nullable=False)

    content = relationship("Content", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "content_id", name="uq_watch_histories_user_content"),
    )

    def __repr__(self) -> str:
        return (
            f"<WatchHistory(id={self.id}, user_id={self.user_id}, "
            f"content_id={self.content_id}, status={self.status})>"
        )

    @property
    def progress_percentage(self) -> float:
        if not self.total_seconds:
            return 0.0
        return (self.watched_seconds / self.total_seconds) * 100


def reaches_completion(watched_seconds: int, total_seconds: int) -> bool:
    """
    True when watched/total >= 90%.

    Integer cross-multiplication keeps the 90% boundary exact.
    """
    if total_seconds <= 0:
        return False
    return watched_seconds * 100 >= total_seconds * COMPLETION_THRESHOLD_PERCENT
