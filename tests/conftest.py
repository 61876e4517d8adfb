from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest
from flask import Flask

from equipment_inventory.app import create_app
from equipment_inventory.config import Settings
from equipment_inventory.store import InventoryStore


def make_item(**overrides: Any) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "model": "Laptop X1",
        "currentUser": "Alice",
        "transferDate": "2024-01-10",
        "previousUser": None,
        "condition": "New",
        "notes": None,
    }
    item.update(overrides)
    return item


@pytest.fixture()
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "inventory.json"


@pytest.fixture()
def store(storage_path: Path) -> InventoryStore:
    return InventoryStore(storage_path)


@pytest.fixture()
def settings(storage_path: Path) -> Settings:
    return Settings(
        storage_path=storage_path,
        environment="test",
        access_control_allow_origin="*",
        app_name="Test Inventory Service",
    )


@pytest.fixture()
def app(store: InventoryStore, settings: Settings) -> Flask:
    app = create_app(store=store, settings=settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app: Flask):
    return app.test_client()
