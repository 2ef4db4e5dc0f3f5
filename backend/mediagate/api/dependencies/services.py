"""
FastAPI providers for the core services.

Every provider resolves its collaborators through ``Depends`` so tests
can swap the database session, key-value store, token configuration or
clock with ``app.dependency_overrides``.
"""

from datetime import datetime
from typing import Callable, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from mediagate.database.session import get_db_session
from mediagate.entitlements.resolver import EntitlementResolver
from mediagate.models.base import utc_now
from mediagate.repositories.interfaces import Repositories
from mediagate.repositories.sql import build_repositories
from mediagate.services.account_service import AccountService
from mediagate.services.catalog_service import CatalogService
from mediagate.services.kv_store import KeyValueStore, get_kv_store
from mediagate.services.session_token_service import SessionTokenConfig, SessionTokenService
from mediagate.services.watch_progress import WatchProgressTracker

_token_config: Optional[SessionTokenConfig] = None


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_session_token_config() -> SessionTokenConfig:
    """Module-level config singleton, loaded from the environment once."""
    global _token_config
    if _token_config is None:
        _token_config = SessionTokenConfig.from_env()
    return _token_config


def get_session_token_service(
    kv_store: KeyValueStore = Depends(get_kv_store),
    config: SessionTokenConfig = Depends(get_session_token_config),
    now_fn: Callable[[], datetime] = Depends(get_clock),
) -> SessionTokenService:
    return SessionTokenService(kv_store, config=config, now_fn=now_fn)


def get_repositories(db: Session = Depends(get_db_session)) -> Repositories:
    return build_repositories(db)


def get_entitlement_resolver(
    repos: Repositories = Depends(get_repositories),
    now_fn: Callable[[], datetime] = Depends(get_clock),
) -> EntitlementResolver:
    return EntitlementResolver(repos, now_fn=now_fn)


def get_watch_progress_tracker(
    repos: Repositories = Depends(get_repositories),
    resolver: EntitlementResolver = Depends(get_entitlement_resolver),
    now_fn: Callable[[], datetime] = Depends(get_clock),
) -> WatchProgressTracker:
    return WatchProgressTracker(repos, resolver, now_fn=now_fn)


def get_account_service(
    repos: Repositories = Depends(get_repositories),
    tokens: SessionTokenService = Depends(get_session_token_service),
) -> AccountService:
    return AccountService(repos.users, tokens)


def get_catalog_service(repos: Repositories = Depends(get_repositories)) -> CatalogService:
    return CatalogService(repos)
