"""
Health checks for the API process.

Reports database connectivity and key-value store reachability. Secrets
and connection URLs are never included in the report.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from mediagate.database.session import get_engine
from mediagate.services.kv_store import KeyValueStore, get_kv_store

logger = logging.getLogger(__name__)


class HealthChecker:
    """Health check service for the database and the key-value store."""

    def __init__(
        self,
        engine_fn: Callable[[], Engine] = get_engine,
        kv_store_fn: Callable[[], KeyValueStore] = get_kv_store,
    ):
        self._engine_fn = engine_fn
        self._kv_store_fn = kv_store_fn

    def check_database(self) -> dict:
        try:
            with self._engine_fn().connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            return {"status": "ok", "message": "Database connection successful"}
        except SQLAlchemyError as e:
            logger.error("Database connection failed", extra={"error_type": type(e).__name__})
            return {"status": "error", "message": "Database connection failed"}

    def check_kv_store(self) -> dict:
        if self._kv_store_fn().ping():
            return {"status": "ok", "message": "Key-value store reachable"}
        logger.error("Key-value store unreachable")
        return {"status": "error", "message": "Key-value store unreachable"}

    def get_health_status(self) -> dict:
        """
        Get comprehensive health status.

        Overall status is "ok" only if every check passes.
        """
        checks = {
            "database": self.check_database(),
            "kv_store": self.check_kv_store(),
        }
        overall_status = "ok"
        if any(check["status"] != "ok" for check in checks.values()):
            overall_status = "degraded"

        return {
            "status": overall_status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "mediagate-api",
            "checks": checks,
        }


_health_checker: Optional[HealthChecker] = None


def get_health_checker() -> HealthChecker:
    """Get or create health checker instance."""
    global _health_checker
    if _health_checker is None:
        _health_checker = HealthChecker()
    return _health_checker
