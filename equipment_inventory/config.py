"""Application configuration objects."""
from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORAGE_FILENAME = "inventory.json"


def default_storage_path() -> Path:
    """Place the data file next to the running process, never inside the package.

    A frozen bundle keeps it beside the executable so the data survives the
    bundle being replaced; otherwise the current working directory is used.
    """

    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent / DEFAULT_STORAGE_FILENAME
    return Path.cwd() / DEFAULT_STORAGE_FILENAME


class Settings(BaseSettings):
    """Pydantic settings used to configure the application."""

    model_config = SettingsConfigDict(
        env_prefix="INVENTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(
        default="Equipment Inventory Service",
        description="Human friendly name for the API.",
    )
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="production",
        description="Deployment environment flag used for logging.",
    )
    storage_path: Path = Field(
        default_factory=default_storage_path,
        description="JSON file holding the inventory table.",
    )
    host: str = Field(default="0.0.0.0", description="Interface the server binds to.")
    port: int = Field(default=3000, ge=1, le=65535)
    access_control_allow_origin: str = Field(
        default="*",
        description="Allowed CORS origins for the API.",
    )
    log_level: str = Field(default="INFO", description="Root logging level.")

    @field_validator("storage_path")
    @classmethod
    def _validate_storage_path(cls, value: Path) -> Path:
        if value.is_dir():
            raise ValueError("storage_path must point to a file, not a directory")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of :class:`Settings`."""

    return Settings()


__all__ = ["DEFAULT_STORAGE_FILENAME", "Settings", "default_storage_path", "get_settings"]
