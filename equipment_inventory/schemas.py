"""Pydantic schemas used by the API."""
from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class InventoryItemPayload(BaseModel):
    """Body accepted when creating or replacing an inventory item."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    model: str = Field(..., min_length=1, description="Model or description of the equipment.")
    current_user: str = Field(..., alias="currentUser", min_length=1)
    transfer_date: str = Field(
        ..., alias="transferDate", min_length=1, description="ISO date, e.g. 2024-01-10."
    )
    previous_user: Optional[str] = Field(default=None, alias="previousUser")
    condition: Optional[str] = Field(
        default=None, description="Usually one of New, Good, Fair or Damaged."
    )
    notes: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        """Return the payload keyed by the stored column names."""

        return self.model_dump(by_alias=True)


class HealthStatus(BaseModel):
    status: Literal["ok"] = "ok"
    environment: str


__all__ = ["HealthStatus", "InventoryItemPayload"]
