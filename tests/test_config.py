import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from equipment_inventory.config import Settings, default_storage_path


def test_default_storage_path_uses_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delattr(sys, "frozen", raising=False)

    assert default_storage_path() == tmp_path / "inventory.json"


def test_default_storage_path_next_to_frozen_executable(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    executable = tmp_path / "bundle" / "inventory-server"
    monkeypatch.setattr(sys, "frozen", True, raising=False)
    monkeypatch.setattr(sys, "executable", str(executable))

    assert default_storage_path() == executable.resolve().parent / "inventory.json"


def test_settings_read_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = tmp_path / "data.json"
    monkeypatch.setenv("INVENTORY_STORAGE_PATH", str(storage))
    monkeypatch.setenv("INVENTORY_PORT", "8080")

    settings = Settings()

    assert settings.storage_path == storage
    assert settings.port == 8080


def test_storage_path_cannot_be_a_directory(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        Settings(storage_path=tmp_path)


def test_defaults_do_not_enable_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("INVENTORY_ENVIRONMENT", raising=False)

    settings = Settings()

    assert settings.environment == "production"
    assert settings.app_name == "Equipment Inventory Service"
