"""
User model.

Created at registration and mutated by profile updates. The core never
hard-deletes users.
"""

from sqlalchemy import Boolean, Column, String

from mediagate.db_base import Base
from mediagate.models.base import TimestampMixin, generate_uuid


class User(Base, TimestampMixin):
    """Registered identity."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    bio = Column(String(1024), nullable=False, default="")
    picture = Column(String(1024), nullable=False, default="")
    phone = Column(String(64), nullable=False, default="")
    is_admin = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, is_admin={self.is_admin})>"
