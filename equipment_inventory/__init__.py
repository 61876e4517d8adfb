"""Equipment inventory service package."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .store import (
    InventoryError,
    InventoryRecord,
    InventoryStorageError,
    InventoryStore,
    QueryOptions,
    QueryResult,
)

if TYPE_CHECKING:
    from flask import Flask

__all__ = [
    "create_app",
    "InventoryError",
    "InventoryRecord",
    "InventoryStorageError",
    "InventoryStore",
    "QueryOptions",
    "QueryResult",
]


def create_app(*args: Any, **kwargs: Any) -> "Flask":
    """Build the Flask app; see :func:`equipment_inventory.app.create_app`.

    Imported lazily so importing the store does not pull in Flask.
    """

    from .app import create_app as _create_app

    return _create_app(*args, **kwargs)
