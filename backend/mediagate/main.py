"""
ASGI entry point.

    uvicorn mediagate.main:app
"""

import logging

from mediagate import __version__
from mediagate.api.app import create_app
from mediagate.config import configure_logging, is_production

logger = logging.getLogger(__name__)

configure_logging()
app = create_app(create_schema=not is_production())
logger.info("Application started", extra={"version": __version__})
