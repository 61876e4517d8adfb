"""Durable inventory store persisted as a JSON snapshot."""
from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional, Tuple
import json
import logging
import math
import re

logger = logging.getLogger(__name__)

_TABLE = "inventory"
_NUMERIC_SEARCH = re.compile(r"[0-9]+")
_MUTABLE_FIELDS = (
    "model",
    "previousUser",
    "currentUser",
    "transferDate",
    "condition",
    "notes",
)
_REQUIRED_FIELDS = ("model", "currentUser", "transferDate")


class InventoryError(Exception):
    """Base class for inventory store failures."""


class InventoryStorageError(InventoryError):
    """Raised when the store cannot be flushed to disk."""


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass
class InventoryRecord:
    """A single piece of equipment and who currently holds it."""

    id: int
    model: str
    current_user: str
    transfer_date: str
    previous_user: Optional[str] = None
    condition: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "model": self.model,
            "previousUser": self.previous_user,
            "currentUser": self.current_user,
            "transferDate": self.transfer_date,
            "condition": self.condition,
            "notes": self.notes,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "InventoryRecord":
        return cls(
            id=int(row["id"]),
            model=str(row["model"]),
            current_user=str(row["currentUser"]),
            transfer_date=str(row["transferDate"]),
            previous_user=_optional_text(row.get("previousUser")),
            condition=_optional_text(row.get("condition")),
            notes=_optional_text(row.get("notes")),
        )


@dataclass
class QueryOptions:
    search: Optional[str] = None
    condition: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    page: int = 1
    limit: int = 10


@dataclass
class QueryResult:
    data: List[InventoryRecord]
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [record.to_dict() for record in self.data],
            "totalPages": self.total_pages,
        }


def _coerce_id(value: Any) -> Optional[int]:
    """Accept ids written as ints, whole floats or digit strings."""

    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and _NUMERIC_SEARCH.fullmatch(value.strip()):
        value = int(value.strip())
    if not isinstance(value, int) or value < 1:
        return None
    return value


def _contains(haystack: Optional[str], needle: str) -> bool:
    if not haystack:
        return False
    return needle in haystack.lower()


@dataclass
class InventoryStore:
    """Keeps the inventory table in memory and snapshots it to ``storage_path``.

    Every mutation rewrites the whole file before returning. The cost is
    proportional to the table size, which is fine for the few thousand rows
    this service is meant for; switching to row-level writes must keep the
    flush-before-return ordering.
    """

    storage_path: Path
    _lock: RLock = field(default_factory=RLock, init=False)
    _state: Dict[str, Any] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self.storage_path = Path(self.storage_path)
        logger.info("Inventory data will be stored at %s", self.storage_path)
        with self._lock:
            raw, loaded = self._read_state_unlocked()
            self._state, lossy = self._upgrade_state(loaded)
            if raw is not None and lossy:
                self._backup_unlocked(raw)
            self._write_state_unlocked(self._state)
        logger.info("Inventory store initialized with %d records", len(self._rows))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def query(self, options: Optional[QueryOptions] = None) -> QueryResult:
        options = options or QueryOptions()
        if options.page < 1:
            raise ValueError("page must be 1 or greater")
        if options.limit < 1:
            raise ValueError("limit must be 1 or greater")
        with self._lock:
            matches = [
                row for row in self._sorted_rows_locked() if self._matches(row, options)
            ]
            offset = (options.page - 1) * options.limit
            window = [
                InventoryRecord.from_row(row)
                for row in matches[offset : offset + options.limit]
            ]
        return QueryResult(data=window, total_pages=math.ceil(len(matches) / options.limit))

    def all_records(self) -> List[InventoryRecord]:
        with self._lock:
            return [InventoryRecord.from_row(row) for row in self._sorted_rows_locked()]

    def get(self, record_id: int) -> Optional[InventoryRecord]:
        with self._lock:
            row = self._find_row_locked(record_id)
            return None if row is None else InventoryRecord.from_row(row)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def insert(self, fields: Mapping[str, Any]) -> int:
        with self._lock:
            snapshot = deepcopy(self._state)
            record_id = self._state["meta"]["next_id"]
            row: Dict[str, Any] = {"id": record_id}
            row.update(self._mutable_values(fields))
            self._rows.append(row)
            self._state["meta"]["next_id"] = record_id + 1
            self._commit_locked(snapshot)
            return record_id

    def update(self, record_id: int, fields: Mapping[str, Any]) -> None:
        """Replace every mutable field of ``record_id``.

        An unknown id is not an error: the call leaves the table untouched,
        matching how a ``0 rows affected`` UPDATE behaves.
        """

        with self._lock:
            snapshot = deepcopy(self._state)
            row = self._find_row_locked(record_id)
            if row is not None:
                row.update(self._mutable_values(fields))
            self._commit_locked(snapshot)

    def delete(self, record_id: int) -> None:
        with self._lock:
            snapshot = deepcopy(self._state)
            self._state[_TABLE] = [row for row in self._rows if row["id"] != record_id]
            self._commit_locked(snapshot)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @property
    def _rows(self) -> List[Dict[str, Any]]:
        return self._state[_TABLE]

    def _sorted_rows_locked(self) -> List[Dict[str, Any]]:
        return sorted(self._rows, key=lambda row: row["id"], reverse=True)

    def _find_row_locked(self, record_id: int) -> Optional[Dict[str, Any]]:
        for row in self._rows:
            if row["id"] == record_id:
                return row
        return None

    @staticmethod
    def _matches(row: Mapping[str, Any], options: QueryOptions) -> bool:
        search = options.search or ""
        if _NUMERIC_SEARCH.fullmatch(search):
            return row["id"] == int(search)
        if search:
            needle = search.lower()
            if not (
                _contains(row.get("model"), needle)
                or _contains(row.get("currentUser"), needle)
                or _contains(row.get("notes"), needle)
            ):
                return False
        if options.condition and row.get("condition") != options.condition:
            return False
        if options.start_date and options.end_date:
            transfer_date = row.get("transferDate") or ""
            if not options.start_date <= transfer_date <= options.end_date:
                return False
        return True

    @staticmethod
    def _mutable_values(fields: Mapping[str, Any]) -> Dict[str, Any]:
        missing = [name for name in _REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")
        return {name: _optional_text(fields.get(name)) for name in _MUTABLE_FIELDS}

    def _commit_locked(self, snapshot: Dict[str, Any]) -> None:
        try:
            self._write_state_unlocked(self._state)
        except InventoryStorageError:
            self._state = snapshot
            raise

    def _read_state_unlocked(self) -> Tuple[Optional[bytes], Any]:
        """Return the file's bytes and its parsed JSON.

        The parsed value is ``None`` when the bytes are not valid JSON; the
        bytes are ``None`` when there is no readable file at all.
        """

        if not self.storage_path.exists():
            logger.info("No inventory file found, starting with an empty table")
            return None, {}
        try:
            raw = self.storage_path.read_bytes()
        except OSError:
            logger.warning(
                "Could not read %s, starting with an empty table",
                self.storage_path,
                exc_info=True,
            )
            return None, {}
        try:
            return raw, json.loads(raw.decode("utf-8") or "{}")
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.warning(
                "Could not parse %s, starting with an empty table",
                self.storage_path,
                exc_info=True,
            )
            return raw, None

    def _backup_unlocked(self, raw: bytes) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        backup_path = self.storage_path.with_name(f"{self.storage_path.name}.{timestamp}.bak")
        try:
            backup_path.write_bytes(raw)
        except OSError as exc:
            logger.exception("Failed to back up inventory file to %s", backup_path)
            raise InventoryStorageError(
                f"Could not back up {self.storage_path} before repairing it"
            ) from exc
        logger.warning("Saved the unrepaired inventory file to %s", backup_path)
        return backup_path

    def _write_state_unlocked(self, state: Dict[str, Any]) -> None:
        temp_path = self.storage_path.with_suffix(".tmp")
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(
                json.dumps(state, indent=2, ensure_ascii=False), encoding="utf-8"
            )
            temp_path.replace(self.storage_path)
        except OSError as exc:
            logger.exception("Failed to write inventory file %s", self.storage_path)
            raise InventoryStorageError(
                f"Could not write inventory data to {self.storage_path}"
            ) from exc

    def _upgrade_state(self, state: Any) -> Tuple[Dict[str, Any], bool]:
        """Repair ``state`` into the current layout.

        The flag is true when something stored could not be carried over, in
        which case the original file is backed up before being rewritten.
        """

        lossy = False
        if not isinstance(state, dict):
            lossy = True
            state = {}
        rows_raw = state.get(_TABLE)
        if not isinstance(rows_raw, list):
            lossy = lossy or rows_raw is not None
            rows_raw = []
        rows: List[Dict[str, Any]] = []
        seen_ids: set[int] = set()
        added_notes = False
        for raw in rows_raw:
            row, notes_added = self._coerce_row(raw)
            if row is None or row["id"] in seen_ids:
                logger.warning("Dropping unreadable inventory row: %r", raw)
                lossy = True
                continue
            added_notes = added_notes or notes_added
            seen_ids.add(row["id"])
            rows.append(row)
        if added_notes:
            logger.info('Added "notes" column to the inventory table.')

        meta = state.get("meta")
        if not isinstance(meta, dict):
            meta = {}
        floor = max(seen_ids, default=0) + 1
        next_id = meta.get("next_id")
        if not isinstance(next_id, int) or isinstance(next_id, bool) or next_id < floor:
            meta["next_id"] = floor
        return {_TABLE: rows, "meta": meta}, lossy

    @staticmethod
    def _coerce_row(raw: Any) -> Tuple[Optional[Dict[str, Any]], bool]:
        if not isinstance(raw, dict):
            return None, False
        record_id = _coerce_id(raw.get("id"))
        if record_id is None:
            return None, False
        if any(not raw.get(name) for name in _REQUIRED_FIELDS):
            return None, False
        notes_added = "notes" not in raw
        row: Dict[str, Any] = {"id": record_id}
        row.update({name: _optional_text(raw.get(name)) for name in _MUTABLE_FIELDS})
        return row, notes_added


__all__ = [
    "InventoryError",
    "InventoryRecord",
    "InventoryStorageError",
    "InventoryStore",
    "QueryOptions",
    "QueryResult",
]
