from datetime import datetime
from io import BytesIO

from openpyxl import load_workbook

from equipment_inventory import report
from equipment_inventory.store import InventoryRecord


def _records() -> list:
    return [
        InventoryRecord(
            id=2,
            model="Laptop X2",
            current_user="Bob",
            transfer_date="2024-02-15",
            condition="Good",
        ),
        InventoryRecord(
            id=1,
            model="Laptop X1",
            current_user="Alice",
            transfer_date="2024-01-10",
            condition="New",
            notes="Ships with a USB-C docking station and two chargers",
        ),
    ]


def test_layout_columns_and_order() -> None:
    layout = report.build_report(_records())

    assert [cell.value for cell in layout.header] == [
        "ID",
        "Model/Description",
        "Current User",
        "Previous User",
        "Date of Transfer",
        "Condition",
        "Notes",
    ]
    assert [row[0].value for row in layout.rows] == [2, 1]
    assert layout.rows[1][6].value == "Ships with a USB-C docking station and two chargers"


def test_condition_colors() -> None:
    assert report.condition_color("New") == "FFC6EFCE"
    assert report.condition_color("Good") == "FF90CAF9"
    assert report.condition_color("Fair") == "FFFFF9C4"
    assert report.condition_color("Damaged") == "FFFFCDD2"
    assert report.condition_color("Broken") == "FFFFFFFF"
    assert report.condition_color("new") == "FFFFFFFF"
    assert report.condition_color(None) == "FFFFFFFF"


def test_column_widths() -> None:
    layout = report.build_report(_records())

    widths = dict(zip((column.key for column in report.COLUMNS), layout.widths))
    assert widths["id"] == 10
    assert widths["model"] == len("Model/Description") + 4
    assert widths["transferDate"] == len("Date of Transfer") + 4
    # empty previous-user cells count as ten characters
    assert widths["previousUser"] == len("Previous User") + 4
    assert widths["notes"] == len("Ships with a USB-C docking station and two chargers") + 4


def test_empty_inventory_has_only_header() -> None:
    layout = report.build_report([])

    assert layout.rows == []
    assert layout.widths[0] == 10
    assert layout.widths[5] == len("Condition") + 4


def test_rendered_workbook_styles() -> None:
    content = report.generate(_records())
    sheet = load_workbook(BytesIO(content)).active

    assert sheet.title == "Inventory Report"
    assert sheet.max_row == 3

    header = sheet["A1"]
    assert header.value == "ID"
    assert header.font.bold
    assert header.font.color.rgb == "FFFFFFFF"
    assert header.fill.fill_type == "solid"
    assert header.fill.fgColor.rgb == "FF4F46E5"
    assert header.alignment.horizontal == "center"
    assert header.alignment.vertical == "center"

    assert sheet["F1"].fill.fgColor.rgb == "FF4F46E5"
    assert sheet["F2"].value == "Good"
    assert sheet["F2"].fill.fgColor.rgb == "FF90CAF9"
    assert sheet["F3"].value == "New"
    assert sheet["F3"].fill.fgColor.rgb == "FFC6EFCE"

    assert sheet["A2"].value == 2
    assert sheet["A2"].alignment.horizontal == "left"
    assert sheet["A2"].alignment.vertical == "center"
    assert sheet["B2"].alignment.horizontal is None

    assert sheet.column_dimensions["A"].width == 10
    assert sheet.column_dimensions["B"].width == len("Model/Description") + 4


def test_report_filename() -> None:
    generated_at = datetime(2024, 3, 7, 9, 5)

    assert report.report_filename(generated_at) == "InventoryReport-07-03-2024_09-05.xlsx"
