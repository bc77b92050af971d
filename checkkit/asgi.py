"""ASGI entrypoint: ``uvicorn checkkit.asgi:app``."""

import logging

from .application import app, create_app

# Setup logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger("checkkit_asgi")
logger.info("CheckKit ASGI app loaded")

__all__ = ["app", "create_app"]
