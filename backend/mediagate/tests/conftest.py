"""
Shared fixtures: real SQLAlchemy on in-memory SQLite, the in-memory
key-value store and a controllable clock.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mediagate.db_base import Base
from mediagate.entitlements.resolver import EntitlementResolver
from mediagate.models import AccessLevel, Content, Plan, User
from mediagate.repositories.sql import build_repositories
from mediagate.services.kv_store import InMemoryKeyValueStore
from mediagate.services.session_token_service import SessionTokenConfig, SessionTokenService
from mediagate.services.watch_progress import WatchProgressTracker

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def time(self) -> float:
        return self.current.timestamp()

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import mediagate.models  # noqa: F401
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine):
    """autoflush=False session, matching the application session factory."""
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def repos(db_session):
    return build_repositories(db_session)


@pytest.fixture
def kv_store(clock):
    return InMemoryKeyValueStore(time_fn=clock.time)


@pytest.fixture
def token_config():
    return SessionTokenConfig(
        access_secret="test-access-secret-0123456789abcdef0123456789",
        refresh_secret="test-refresh-secret-0123456789abcdef012345678",
        access_lifetime_hours=1,
    )


@pytest.fixture
def token_service(kv_store, token_config, clock):
    return SessionTokenService(kv_store, config=token_config, now_fn=clock.now)


@pytest.fixture
def resolver(repos, clock):
    return EntitlementResolver(repos, now_fn=clock.now)


@pytest.fixture
def tracker(repos, resolver, clock):
    return WatchProgressTracker(repos, resolver, now_fn=clock.now)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(repos):
    def _make_user(email=None, name="Viewer", password_hash="not-a-real-hash"):
        return repos.users.create(
            User(
                email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
                password_hash=password_hash,
                name=name,
            )
        )
    return _make_user


@pytest.fixture
def make_plan(repos):
    def _make_plan(access_level=AccessLevel.BASIC, validity_days=30, is_active=True, price=999):
        return repos.plans.create(
            Plan(
                name=f"{access_level.value}-{uuid.uuid4().hex[:8]}",
                price=price,
                validity_days=validity_days,
                access_level=access_level,
                max_devices_allowed=2,
                resolution="1080p",
                is_active=is_active,
            )
        )
    return _make_plan


@pytest.fixture
def make_content(repos):
    def _make_content(access_level=AccessLevel.FREE, duration_seconds=7200, published=True, title=None):
        return repos.contents.create(
            Content(
                title=title or f"Title {uuid.uuid4().hex[:6]}",
                description="",
                access_level=access_level,
                duration_seconds=duration_seconds,
                published=published,
            )
        )
    return _make_content
