from __future__ import annotations

from datetime import date, datetime

import pytest

from workorder_docs.errors import InvalidFormatError, InvalidQuantityError
from workorder_docs.models.work_order_row import WorkOrderRow, cell_text, coerce_int, format_date


def test_from_cells_defaults_for_missing_cells():
    row = WorkOrderRow.from_cells("2024/03/15", {})

    assert row.received_date == "2024/03/15"
    assert row.barcode == ""
    assert row.product_name == ""
    assert row.color == ""
    assert row.size == ""
    assert row.inbound_qty == 0
    assert row.outbound_date is None
    assert row.manufacturer == ""
    assert row.actual_qty is None
    assert row.total is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (10, 10),
        (10.0, 10),
        ("10", 10),
        (" 12 ", 12),
        ("1,200", 1200),
        ("abc", 0),
        (None, 0),
        ("", 0),
        (float("nan"), 0),
        (-5, 0),
        (True, 0),
    ],
)
def test_inbound_qty_coercion(raw, expected):
    row = WorkOrderRow.from_cells("d", {"inbound_qty": raw})
    assert row.inbound_qty == expected
    assert row.inbound_qty >= 0


def test_strict_mode_rejects_non_numeric_quantity():
    with pytest.raises(InvalidQuantityError) as e:
        WorkOrderRow.from_cells("d", {"inbound_qty": "many"}, row_number=7, strict=True)
    assert e.value.row_number == 7
    assert "row 7" in str(e.value)
    # strict failures are format errors for the request boundary
    assert isinstance(e.value, InvalidFormatError)


def test_strict_mode_still_defaults_blank_quantity():
    row = WorkOrderRow.from_cells("d", {"inbound_qty": None}, strict=True)
    assert row.inbound_qty == 0


def test_outbound_date_preserved_verbatim_or_none():
    assert WorkOrderRow.from_cells("d", {"outbound_date": "3/20 오후"}).outbound_date == "3/20 오후"
    assert WorkOrderRow.from_cells("d", {"outbound_date": "  "}).outbound_date is None
    assert WorkOrderRow.from_cells("d", {"outbound_date": None}).outbound_date is None


def test_extension_fields_only_when_supplied():
    row = WorkOrderRow.from_cells("d", {"actual_qty": "9", "total": 12.0})
    assert row.actual_qty == 9
    assert row.total == 12
    assert row.has_extensions is True

    bad = WorkOrderRow.from_cells("d", {"actual_qty": "n/a"})
    assert bad.actual_qty is None
    assert bad.has_extensions is False


def test_cell_text_formats():
    assert cell_text(None) == ""
    assert cell_text(float("nan")) == ""
    assert cell_text(8801234567890.0) == "8801234567890"
    assert cell_text(1.5) == "1.5"
    assert cell_text(datetime(2024, 3, 15, 0, 0)) == "2024-03-15"
    assert cell_text(date(2024, 3, 15)) == "2024-03-15"
    assert cell_text("  Shirt ") == "Shirt"


@pytest.mark.parametrize(
    "number_format, expected",
    [
        ("yyyy/mm/dd", "2024/03/15"),
        ("yyyy-mm-dd h:mm:ss", "2024-03-15"),
        ("YYYY-MM-DD HH:MM:SS", "2024-03-15"),
        ('yyyy"년" m"월" d"일"', "2024년 3월 15일"),
        ("[$-412]yyyy\\.mm\\.dd", "2024.03.15"),
        ("d-mmm-yy", "15-Mar-24"),
        ("dddd, mmmm d", "Friday, March 15"),
        ("yyyy/mm/dd;@", "2024/03/15"),
        ("General", "2024-03-15"),
        ("@", "2024-03-15"),
        ("", "2024-03-15"),
        (None, "2024-03-15"),
    ],
)
def test_format_date_follows_number_format(number_format, expected):
    assert format_date(datetime(2024, 3, 15, 9, 30), number_format) == expected
    assert format_date(date(2024, 3, 15), number_format) == expected


def test_coerce_int_returns_none_for_unusable_values():
    assert coerce_int("x") is None
    assert coerce_int(float("inf")) is None
    assert coerce_int(False) is None
    assert coerce_int("7.9") == 7


def test_to_dict_keeps_field_order_and_omits_absent_optionals():
    row = WorkOrderRow("2024/03/15", "BC001", "Shirt", "Red", "M", 10, None, "Acme Co.")
    data = row.to_dict()

    assert list(data) == [
        "receivedDate", "barcode", "productName", "color", "size", "inboundQty", "manufacturer",
    ]
    assert data["inboundQty"] == 10
    assert "outboundDate" not in data

    full = WorkOrderRow("d", outbound_date="x", actual_qty=1, total=2).to_dict()
    assert list(full)[-4:] == ["outboundDate", "manufacturer", "actualQty", "total"]


def test_from_dict_accepts_wire_and_field_names():
    wire = {"receivedDate": "2024/03/15", "barcode": "BC001", "productName": "Shirt", "inboundQty": "3"}
    snake = {"received_date": "2024/03/15", "barcode": "BC001", "product_name": "Shirt", "inbound_qty": 3}

    assert WorkOrderRow.from_dict(wire) == WorkOrderRow.from_dict(snake)
    assert WorkOrderRow.from_dict(wire).inbound_qty == 3


def test_row_is_immutable():
    row = WorkOrderRow("d")
    with pytest.raises(AttributeError):
        row.inbound_qty = 5  # type: ignore[misc]
