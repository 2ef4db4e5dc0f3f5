"""
Subscription plan model.

Subscriptions reference a plan by id. The entitlement resolver re-reads the
referenced plan on every decision, so a plan update is visible to existing
subscriptions on their next access check.
"""

from sqlalchemy import BigInteger, Boolean, Column, Integer, String, Enum as SAEnum

from mediagate.db_base import Base
from mediagate.models.access_level import AccessLevel
from mediagate.models.base import TimestampMixin, generate_uuid


class Plan(Base, TimestampMixin):
    """Purchasable tier with a validity period and an access level."""

    __tablename__ = "plans"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False, unique=True)
    price = Column(BigInteger, nullable=False, comment="Price in minor currency units")
    validity_days = Column(Integer, nullable=False)
    access_level = Column(
        SAEnum(
            AccessLevel,
            name="access_level",
            values_callable=lambda levels: [level.value for level in levels],
        ),
        nullable=False,
    )
    max_devices_allowed = Column(Integer, nullable=False, default=1)
    resolution = Column(String(32), nullable=False, default="")
    description = Column(String(1024), nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    def __repr__(self) -> str:
        return (
            f"<Plan(id={self.id}, name={self.name}, "
            f"access_level={self.access_level}, is_active={self.is_active})>"
        )
