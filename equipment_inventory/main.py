"""Entrypoint for running the service."""
from __future__ import annotations

import logging
import sys

from .app import create_app
from .config import get_settings
from .store import InventoryError, InventoryStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


def run() -> None:
    """Convenience wrapper used by ``python -m equipment_inventory``."""

    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        store = InventoryStore(settings.storage_path)
    except InventoryError:
        logger.exception("Failed to initialize inventory store")
        sys.exit(1)
    app = create_app(store=store, settings=settings)
    logger.info(
        "%s running at http://%s:%d (%s)",
        settings.app_name,
        settings.host,
        settings.port,
        settings.environment,
    )
    app.run(
        host=settings.host,
        port=settings.port,
        debug=settings.environment == "development",
        use_reloader=False,
    )


if __name__ == "__main__":
    run()
