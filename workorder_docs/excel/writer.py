from __future__ import annotations

import io
import logging
from collections.abc import Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from ..errors import EmptyDataError
from ..models.work_order_row import WorkOrderRow
from .columns import BASE_FIELDS, EXTENSION_FIELDS, FIELD_LABELS, SHEET_TITLE

"""Work order spreadsheet writer (openpyxl).

Output layout (fixed, readable back by excel.reader):
- row 1: received date in A1
- row 2: blank separator
- row 3: header labels
- row 4+: one row per WorkOrderRow

실수량 / 합계 columns are appended only when a row in the batch carries them.
"""

__all__ = [
    "HEADER_ROW",
    "COLUMN_WIDTHS",
    "write_work_order",
]

logger = logging.getLogger(__name__)

HEADER_ROW = 3
FIRST_DATA_ROW = HEADER_ROW + 1

# display width in characters per field
COLUMN_WIDTHS: dict[str, int] = {
    "barcode": 15,
    "product_name": 30,
    "color": 12,
    "size": 10,
    "inbound_qty": 12,
    "outbound_date": 12,
    "manufacturer": 20,
    "actual_qty": 10,
    "total": 10,
}

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="D3D3D3", end_color="D3D3D3", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center")


def _fields_for(rows: Sequence[WorkOrderRow]) -> tuple[str, ...]:
    extensions = tuple(f for f in EXTENSION_FIELDS if any(getattr(r, f) is not None for r in rows))
    return BASE_FIELDS + extensions


def write_work_order(rows: Sequence[WorkOrderRow]) -> bytes:
    """Serialize a batch into .xlsx bytes.

    Raises:
        EmptyDataError: rows is empty
    """
    if not rows:
        raise EmptyDataError("no rows to write")

    fields = _fields_for(rows)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    sheet.cell(row=1, column=1, value=rows[0].received_date)

    for col, name in enumerate(fields, 1):
        cell = sheet.cell(row=HEADER_ROW, column=col, value=FIELD_LABELS[name])
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT

    for row_num, row in enumerate(rows, FIRST_DATA_ROW):
        for col, name in enumerate(fields, 1):
            value = getattr(row, name)
            if value == "":
                value = None  # left as an empty cell, same as a missing outbound date
            sheet.cell(row=row_num, column=col, value=value)

    for col, name in enumerate(fields, 1):
        sheet.column_dimensions[get_column_letter(col)].width = COLUMN_WIDTHS[name]

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.debug(f"wrote work order sheet: {len(rows)} rows, columns={len(fields)}")
    return buffer.getvalue()
