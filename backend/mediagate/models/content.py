"""
Catalog content model.

Read-only from the entitlement core's point of view; the published flag
gates visibility for every caller.
"""

from sqlalchemy import Boolean, Column, Integer, String, Text, Enum as SAEnum

from mediagate.db_base import Base
from mediagate.models.access_level import AccessLevel
from mediagate.models.base import TimestampMixin, generate_uuid


class Content(Base, TimestampMixin):
    """A playable catalog item."""

    __tablename__ = "contents"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    access_level = Column(
        SAEnum(
            AccessLevel,
            name="access_level",
            values_callable=lambda levels: [level.value for level in levels],
        ),
        nullable=False,
        index=True,
    )
    duration_seconds = Column(Integer, nullable=False)
    thumbnail_url = Column(String(1024), nullable=False, default="")
    video_url = Column(String(1024), nullable=False, default="")
    published = Column(Boolean, nullable=False, default=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<Content(id={self.id}, title={self.title}, "
            f"access_level={self.access_level}, published={self.published})>"
        )
