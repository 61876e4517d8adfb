"""Spreadsheet export of the full inventory."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .store import InventoryRecord

SHEET_NAME = "Inventory Report"
FILENAME_PREFIX = "InventoryReport"
FILE_EXTENSION = "xlsx"
MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_EMPTY_CELL_LENGTH = 10
_WIDTH_PADDING = 4
_MIN_WIDTH = 10


@dataclass(frozen=True)
class ReportColumn:
    label: str
    key: str


COLUMNS: Sequence[ReportColumn] = (
    ReportColumn("ID", "id"),
    ReportColumn("Model/Description", "model"),
    ReportColumn("Current User", "currentUser"),
    ReportColumn("Previous User", "previousUser"),
    ReportColumn("Date of Transfer", "transferDate"),
    ReportColumn("Condition", "condition"),
    ReportColumn("Notes", "notes"),
)

ACCENT_COLOR = "FF4F46E5"
WHITE = "FFFFFFFF"
CONDITION_COLORS: Dict[str, str] = {
    "New": "FFC6EFCE",
    "Good": "FF90CAF9",
    "Fair": "FFFFF9C4",
    "Damaged": "FFFFCDD2",
}

HEADER = "header"
BODY = "body"
ID_BODY = "id_body"

_ALIGNMENTS: Dict[str, Alignment] = {
    HEADER: Alignment(horizontal="center", vertical="center"),
    BODY: Alignment(vertical="center"),
    ID_BODY: Alignment(horizontal="left", vertical="center"),
}
_FONTS: Dict[str, Font] = {
    HEADER: Font(bold=True, color=WHITE),
}


@dataclass(frozen=True)
class ReportCell:
    value: Any
    style: str = BODY
    fill: Optional[str] = None


@dataclass
class ReportLayout:
    """Style-annotated table ready to be written to a worksheet."""

    sheet_name: str
    header: List[ReportCell]
    rows: List[List[ReportCell]]
    widths: List[int]


def condition_color(value: Any) -> str:
    if not isinstance(value, str):
        return WHITE
    return CONDITION_COLORS.get(value, WHITE)


def _cell_length(value: Any) -> int:
    if value is None or value == "":
        return _EMPTY_CELL_LENGTH
    return len(str(value))


def _column_width(label: str, values: Iterable[Any]) -> int:
    longest = max([len(label), *(_cell_length(value) for value in values)])
    return max(longest + _WIDTH_PADDING, _MIN_WIDTH)


def _body_cell(column: ReportColumn, value: Any) -> ReportCell:
    if column.key == "id":
        return ReportCell(value, ID_BODY)
    if column.key == "condition":
        return ReportCell(value, BODY, condition_color(value))
    return ReportCell(value, BODY)


def build_report(records: Sequence[InventoryRecord]) -> ReportLayout:
    """Lay out ``records`` in the order given; the caller decides the sort."""

    header = [ReportCell(column.label, HEADER, ACCENT_COLOR) for column in COLUMNS]
    payloads = [record.to_dict() for record in records]
    rows = [
        [_body_cell(column, payload.get(column.key)) for column in COLUMNS]
        for payload in payloads
    ]
    widths = [
        _column_width(column.label, (payload.get(column.key) for payload in payloads))
        for column in COLUMNS
    ]
    return ReportLayout(sheet_name=SHEET_NAME, header=header, rows=rows, widths=widths)


def _write_cell(sheet: Any, row_index: int, col_index: int, cell: ReportCell) -> None:
    target = sheet.cell(row=row_index, column=col_index, value=cell.value)
    target.alignment = _ALIGNMENTS[cell.style]
    if cell.style in _FONTS:
        target.font = _FONTS[cell.style]
    if cell.fill is not None:
        target.fill = PatternFill(fill_type="solid", start_color=cell.fill, end_color=cell.fill)


def render_workbook(layout: ReportLayout) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = layout.sheet_name

    for col_index, cell in enumerate(layout.header, start=1):
        _write_cell(sheet, 1, col_index, cell)
    for row_index, row in enumerate(layout.rows, start=2):
        for col_index, cell in enumerate(row, start=1):
            _write_cell(sheet, row_index, col_index, cell)
    for col_index, width in enumerate(layout.widths, start=1):
        sheet.column_dimensions[get_column_letter(col_index)].width = width

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def generate(records: Sequence[InventoryRecord]) -> bytes:
    return render_workbook(build_report(records))


def report_filename(now: Optional[datetime] = None) -> str:
    """``InventoryReport-DD-MM-YYYY_HH-MM.xlsx`` in local time."""

    generated_at = now or datetime.now()
    timestamp = generated_at.strftime("%d-%m-%Y_%H-%M")
    return f"{FILENAME_PREFIX}-{timestamp}.{FILE_EXTENSION}"


__all__ = [
    "COLUMNS",
    "CONDITION_COLORS",
    "MIMETYPE",
    "ReportCell",
    "ReportColumn",
    "ReportLayout",
    "SHEET_NAME",
    "build_report",
    "condition_color",
    "generate",
    "render_workbook",
    "report_filename",
]
