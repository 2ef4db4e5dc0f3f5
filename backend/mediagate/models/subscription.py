"""
Subscription model.

Lifecycle:
1. Created ACTIVE on subscribe or renew (end_date = start_date + validity_days)
2. ACTIVE -> EXPIRED lazily, the first time it is read after end_date
3. ACTIVE -> CANCELLED when the owner cancels, or when it is renewed

At most one subscription per user may be ACTIVE and unexpired. That rule
is enforced by the entitlement resolver, not by a storage constraint.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Enum as SAEnum
from sqlalchemy.orm import relationship

from mediagate.db_base import Base
from mediagate.models.base import TimestampMixin, UTCDateTime, generate_uuid


class SubscriptionStatus(str, enum.Enum):
    """Subscription lifecycle status."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Subscription(Base, TimestampMixin):
    """A user's time-bounded entitlement to a plan."""

    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_id = Column(String(36), ForeignKey("plans.id"), nullable=False)
    start_date = Column(UTCDateTime(), nullable=False)
    end_date = Column(UTCDateTime(), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    status = Column(
        SAEnum(
            SubscriptionStatus,
            name="subscription_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
        index=True,
    )

    plan = relationship("Plan", lazy="joined")

    __table_args__ = (
        Index("ix_subscriptions_user_active", "user_id", "is_active", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Subscription(id={self.id}, user_id={self.user_id}, "
            f"plan_id={self.plan_id}, status={self.status})>"
        )

    def is_expired(self, now: datetime) -> bool:
        return now > self.end_date
