from __future__ import annotations

import io

import pytest
from openpyxl import load_workbook

from workorder_docs.errors import EmptyDataError
from workorder_docs.excel.writer import COLUMN_WIDTHS, HEADER_ROW, write_work_order
from workorder_docs.models.work_order_row import WorkOrderRow

HEADER = ["바코드번호", "제품명", "컬러", "사이즈", "입고수량", "출고일", "제조사"]


def _sheet(data: bytes):
    return load_workbook(io.BytesIO(data)).active


def test_layout_date_blank_header_rows(sample_rows):
    sheet = _sheet(write_work_order(sample_rows))

    assert sheet.title == "작업지시서"
    assert sheet["A1"].value == "2024/03/15"
    assert all(c.value is None for c in sheet[2])
    assert [c.value for c in sheet[HEADER_ROW]] == HEADER
    assert sheet.max_row == HEADER_ROW + len(sample_rows)


def test_data_rows_in_input_order(sample_rows):
    sheet = _sheet(write_work_order(sample_rows))

    first = [c.value for c in sheet[4]]
    assert first == ["BC001", "Shirt", "Red", "M", 10, None, "Acme Co."]
    second = [c.value for c in sheet[5]]
    assert second[1] == "Pants <slim>"
    assert second[5] == "3/20 출고"
    assert second[6] == "Beta & Sons"
    # barcode stays text, empty color stays empty
    third = [c.value for c in sheet[6]]
    assert third[0] == "8801234567890"
    assert third[2] is None
    assert third[4] == 0


def test_quantity_is_numeric_cell(sample_rows):
    sheet = _sheet(write_work_order(sample_rows))
    assert isinstance(sheet["E4"].value, int)


def test_header_styling_and_widths(sample_rows):
    sheet = _sheet(write_work_order(sample_rows))

    header = sheet["A3"]
    assert header.font.bold is True
    assert header.fill.fill_type == "solid"
    assert header.fill.start_color.rgb.endswith("D3D3D3")
    assert header.alignment.horizontal == "center"

    assert sheet.column_dimensions["A"].width == COLUMN_WIDTHS["barcode"] == 15
    assert sheet.column_dimensions["B"].width == 30
    assert sheet.column_dimensions["G"].width == 20


def test_extension_columns_only_when_present(sample_rows):
    plain = _sheet(write_work_order(sample_rows))
    assert plain.max_column == 7

    rows = [*sample_rows, WorkOrderRow("2024/03/15", "BC004", inbound_qty=3, actual_qty=2, total=2)]
    extended = _sheet(write_work_order(rows))
    assert [c.value for c in extended[HEADER_ROW]] == HEADER + ["실수량", "합계"]
    assert extended.cell(row=4, column=8).value is None
    assert extended.cell(row=7, column=8).value == 2
    assert extended.cell(row=7, column=9).value == 2


def test_empty_batch_rejected():
    with pytest.raises(EmptyDataError):
        write_work_order([])


def test_output_is_xlsx_container(sample_rows):
    data = write_work_order(sample_rows)
    assert data[:2] == b"PK"
