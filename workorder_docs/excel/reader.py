from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import PurePath
from typing import Any
from zipfile import BadZipFile

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import EmptyDataError, InvalidFormatError
from ..models.work_order_row import WorkOrderRow, cell_text, format_date
from .columns import FIELD_LABELS, LABEL_FIELDS

"""Work order spreadsheet reader.

Sheet layout:
- A1: received date (one value for the whole batch)
- next non-blank row: header labels (row 2 in uploads, row 3 in files
  produced by excel.writer which insert a blank separator row)
- remaining rows: data, blank rows skipped

Only the first sheet of the workbook is read. pandas is used with the
openpyxl engine (.xlsx) or xlrd (.xls); cells are read raw (dtype=object)
so barcodes and free-text dates are not coerced column-wide.
"""

__all__ = [
    "ALLOWED_EXTENSIONS",
    "SheetData",
    "SheetPreview",
    "validate_upload_name",
    "read_first_sheet",
    "a1_number_format",
    "normalize_sheet",
    "parse_work_order",
    "require_rows",
    "inspect_workbook",
]

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".xlsx", ".xls")


@dataclass
class SheetData:
    sheet_name: str
    received_date: str
    columns: list[str]  # header labels as found (stripped)
    header_row: int  # 1-based sheet row of the header
    rows: list[tuple[int, dict[str, Any]]]  # (1-based sheet row, field name -> raw value)


@dataclass
class SheetPreview:
    sheet_name: str
    received_date: str
    columns: list[str]
    sample_rows: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0


def validate_upload_name(filename: str | None) -> str:
    """Check the upload extension before any parsing.

    Returns the lower-cased extension.

    Raises:
        InvalidFormatError: filename missing or extension not .xlsx / .xls
    """
    if not filename:
        raise InvalidFormatError("no file name given")
    suffix = PurePath(filename).suffix.lower()
    if suffix not in ALLOWED_EXTENSIONS:
        raise InvalidFormatError(f"unsupported file extension: '{suffix or filename}'")
    return suffix


def read_first_sheet(data: bytes) -> tuple[str, pd.DataFrame]:
    """Read the first sheet of a workbook held in memory, without header inference.

    Raises:
        InvalidFormatError: buffer is empty or not a spreadsheet container
    """
    if not data:
        raise InvalidFormatError("empty file")
    try:
        xls = pd.ExcelFile(io.BytesIO(data))
    except Exception as e:
        raise InvalidFormatError(f"not a readable spreadsheet: {e}") from e
    try:
        if not xls.sheet_names:
            raise InvalidFormatError("workbook has no sheets")
        name = str(xls.sheet_names[0])
        if len(xls.sheet_names) > 1:
            logger.debug(f"ignoring {len(xls.sheet_names) - 1} extra sheet(s) after '{name}'")
        try:
            # NA filtering off: text such as "NA" or "None" stays text
            df = xls.parse(
                xls.sheet_names[0], header=None, dtype=object, keep_default_na=False, na_values=[],
            )
        except Exception as e:
            raise InvalidFormatError(f"failed to read sheet '{name}': {e}") from e
    finally:
        xls.close()
    return name, df


def a1_number_format(data: bytes, sheet_name: str) -> str | None:
    """Number format of cell A1, read with openpyxl; None for non-.xlsx containers."""
    if not data.startswith(b"PK"):
        # legacy .xls: no format lookup, dates fall back to YYYY-MM-DD
        return None
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as e:
        logger.debug(f"A1 number format unavailable: {e}")
        return None
    try:
        if sheet_name not in workbook.sheetnames:
            return None
        sheet = workbook[sheet_name]
        for row in sheet.iter_rows(min_row=1, max_row=1, min_col=1, max_col=1):
            return row[0].number_format
        return None
    finally:
        workbook.close()


def _received_date(df: pd.DataFrame, data: bytes, sheet_name: str) -> str:
    if df.shape[0] == 0 or df.shape[1] == 0:
        return ""
    value = _clean(df.iat[0, 0])
    if isinstance(value, date):
        return format_date(value, a1_number_format(data, sheet_name))
    return cell_text(value)


def _row_is_blank(values: Sequence[Any]) -> bool:
    return all(cell_text(v) == "" for v in values)


def _clean(value: Any) -> Any:
    # empty cells arrive as "" (NA filtering off) or NaN depending on the engine
    if value is None or (isinstance(value, str) and value == ""):
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def normalize_sheet(df: pd.DataFrame, sheet_name: str, received_date: str | None = None) -> SheetData:
    """Split a raw sheet into received date, header labels and data rows.

    Steps:
    1. A1 -> received date display string (unless given by the caller)
    2. first non-blank row after row 1 -> header labels
    3. map each remaining non-blank row onto field names via the label table
    """
    if df.shape[0] == 0 or df.shape[1] == 0:
        return SheetData(sheet_name=sheet_name, received_date="", columns=[], header_row=-1, rows=[])

    if received_date is None:
        received_date = cell_text(_clean(df.iat[0, 0]))

    header_idx = None
    for idx in range(1, df.shape[0]):
        if not _row_is_blank([_clean(v) for v in df.iloc[idx].tolist()]):
            header_idx = idx
            break
    if header_idx is None:
        return SheetData(sheet_name=sheet_name, received_date=received_date, columns=[], header_row=-1, rows=[])

    columns = [cell_text(_clean(c)) for c in df.iloc[header_idx].tolist()]
    # label -> column position, first occurrence wins
    positions: dict[str, int] = {}
    for pos, label in enumerate(columns):
        if label in LABEL_FIELDS and LABEL_FIELDS[label] not in positions:
            positions[LABEL_FIELDS[label]] = pos

    if not positions:
        raise InvalidFormatError(
            f"sheet '{sheet_name}' header row {header_idx + 1} has none of the expected labels"
        )
    missing = [FIELD_LABELS[f] for f in FIELD_LABELS if f not in positions and f not in ("actual_qty", "total")]
    if missing:
        logger.warning(f"sheet '{sheet_name}' missing columns {missing}; defaults applied")

    rows: list[tuple[int, dict[str, Any]]] = []
    for idx in range(header_idx + 1, df.shape[0]):
        raw = [_clean(v) for v in df.iloc[idx].tolist()]
        if _row_is_blank(raw):
            continue
        rows.append((idx + 1, {name: raw[pos] for name, pos in positions.items()}))

    return SheetData(
        sheet_name=sheet_name,
        received_date=received_date,
        columns=columns,
        header_row=header_idx + 1,
        rows=rows,
    )


def _load_sheet(data: bytes) -> SheetData:
    sheet_name, df = read_first_sheet(data)
    return normalize_sheet(df, sheet_name, _received_date(df, data, sheet_name))


def parse_work_order(data: bytes, *, strict_quantities: bool = False) -> list[WorkOrderRow]:
    """Parse a spreadsheet buffer into an ordered list of WorkOrderRow.

    An empty list means the sheet has no data rows after the header; callers
    reject it with ``require_rows``.

    Raises:
        InvalidFormatError: buffer is not a spreadsheet, header unusable, or
            (strict mode) a non-numeric inbound quantity
    """
    sheet = _load_sheet(data)
    sheet_name = sheet.sheet_name
    rows = [
        WorkOrderRow.from_cells(sheet.received_date, cells, row_number=row_number, strict=strict_quantities)
        for row_number, cells in sheet.rows
    ]
    logger.debug(f"parsed sheet '{sheet_name}': {len(rows)} rows, received_date={sheet.received_date!r}")
    return rows


def require_rows(rows: Sequence[WorkOrderRow]) -> Sequence[WorkOrderRow]:
    """Reject an empty batch.

    Raises:
        EmptyDataError: no rows
    """
    if not rows:
        raise EmptyDataError("no data rows found")
    return rows


def inspect_workbook(data: bytes, sample_size: int = 3) -> SheetPreview:
    """Return header labels, received date and the first rows of the first sheet."""
    sheet = _load_sheet(data)
    sheet_name = sheet.sheet_name
    samples = [
        WorkOrderRow.from_cells(sheet.received_date, cells, row_number=n).to_dict()
        for n, cells in sheet.rows[:sample_size]
    ]
    return SheetPreview(
        sheet_name=sheet_name,
        received_date=sheet.received_date,
        columns=sheet.columns,
        sample_rows=samples,
        total_rows=len(sheet.rows),
    )
