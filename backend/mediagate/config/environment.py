"""
Process-level configuration read from environment variables.

- ENVIRONMENT: "development" (default) or "production"
- LOG_LEVEL:   root log level (default: "INFO")

Component settings (DATABASE_URL, REDIS_URL, JWT_*, RATE_LIMIT_*) are read
by the modules that own them.
"""

import logging
import os

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def get_environment() -> str:
    return os.getenv("ENVIRONMENT", "development").lower()


def is_production() -> bool:
    return get_environment() == "production"


def get_log_level() -> int:
    """Resolve LOG_LEVEL to a logging level, falling back to INFO."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if isinstance(level, int):
        return level
    return logging.INFO


def configure_logging() -> None:
    logging.basicConfig(level=get_log_level(), format=_LOG_FORMAT)
    logger.info(
        "Logging configured",
        extra={"environment": get_environment(), "log_level": logging.getLevelName(get_log_level())},
    )
