"""Configuration module for backend services."""

from mediagate.config.environment import (
    configure_logging,
    get_environment,
    get_log_level,
    is_production,
)

__all__ = [
    "configure_logging",
    "get_environment",
    "get_log_level",
    "is_production",
]
