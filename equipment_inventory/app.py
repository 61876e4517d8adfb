"""Flask application exposing the inventory API."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError

from . import report
from .config import Settings, get_settings
from .schemas import HealthStatus, InventoryItemPayload
from .store import InventoryStore, QueryOptions

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def create_app(
    store: Optional[InventoryStore] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    settings = settings or get_settings()
    if store is None:
        store = InventoryStore(settings.storage_path)
    app = Flask(__name__)

    def _json_error(message: str, status: int = 500) -> Any:
        return jsonify({"error": message}), status

    def _parse_positive_int(value: Optional[str], default: int) -> int:
        try:
            parsed = int(value) if value is not None else default
        except (TypeError, ValueError):
            return default
        return parsed if parsed > 0 else default

    def _parse_payload() -> InventoryItemPayload:
        return InventoryItemPayload.model_validate(_get_payload(request))

    CORS(
        app,
        origins=settings.access_control_allow_origin,
        expose_headers=["Content-Disposition"],
    )

    @app.get("/health")
    def health_check() -> Any:
        return jsonify(HealthStatus(environment=settings.environment).model_dump())

    @app.get("/api/inventory")
    def list_inventory() -> Any:
        options = QueryOptions(
            search=request.args.get("search"),
            condition=request.args.get("condition"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
            page=_parse_positive_int(request.args.get("page"), DEFAULT_PAGE),
            limit=_parse_positive_int(request.args.get("limit"), DEFAULT_LIMIT),
        )
        try:
            result = store.query(options)
        except Exception:
            logger.exception("Failed to get inventory")
            return _json_error("Failed to retrieve inventory data.")
        return jsonify(result.to_dict())

    @app.get("/api/inventory/export")
    def export_inventory() -> Any:
        try:
            content = report.generate(store.all_records())
        except Exception:
            logger.exception("Failed to export inventory")
            return _json_error("Failed to export inventory data.")
        filename = report.report_filename()
        response = Response(content, mimetype=report.MIMETYPE)
        response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response

    @app.post("/api/inventory")
    def create_item() -> Any:
        try:
            payload = _parse_payload()
        except ValidationError as exc:
            return _json_error(_validation_message(exc), 400)
        fields = payload.to_fields()
        try:
            record_id = store.insert(fields)
        except Exception:
            logger.exception("Failed to add inventory item")
            return _json_error("Failed to add item to inventory.")
        return jsonify({"id": record_id, **fields}), 201

    @app.put("/api/inventory/<int:record_id>")
    def update_item(record_id: int) -> Any:
        try:
            payload = _parse_payload()
        except ValidationError as exc:
            return _json_error(_validation_message(exc), 400)
        try:
            store.update(record_id, payload.to_fields())
        except Exception:
            logger.exception("Failed to update inventory item %s", record_id)
            return _json_error("Failed to update item.")
        return jsonify({"message": "Item updated successfully."})

    @app.delete("/api/inventory/<int:record_id>")
    def delete_item(record_id: int) -> Any:
        try:
            store.delete(record_id)
        except Exception:
            logger.exception("Failed to delete inventory item %s", record_id)
            return _json_error("Failed to delete item from inventory.")
        return jsonify({"message": "Item deleted successfully."})

    return app


_MISSING_ERROR_TYPES = {"missing", "string_too_short"}


def _validation_message(exc: ValidationError) -> str:
    """Tell absent required fields apart from values of the wrong type."""

    for error in exc.errors():
        if error["type"] not in _MISSING_ERROR_TYPES and error.get("input") is not None:
            return "Invalid field values."
    return "Missing required fields."


def _get_payload(req: Any) -> Dict[str, Any]:
    if req.is_json:
        payload = req.get_json(silent=True)
        return payload if isinstance(payload, dict) else {}
    if req.form:
        return req.form.to_dict()
    return {}
