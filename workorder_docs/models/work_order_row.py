from __future__ import annotations

import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ..errors import InvalidQuantityError

"""WorkOrderRow model: one inbound inventory line item within one batch.

Construction through ``from_cells`` / ``from_dict`` is the only validation
point. Numeric cells that cannot be read fall back to documented defaults
(inbound quantity 0, extension fields None) so that one bad cell never fails
the whole batch. ``strict=True`` turns a non-numeric inbound quantity into
InvalidQuantityError instead.

Wire form (``to_dict``) uses the camelCase keys the upload UI consumes.
"""

__all__ = [
    "WorkOrderRow",
    "WIRE_KEYS",
    "cell_text",
    "format_date",
    "coerce_int",
]

DATE_FMT = "%Y-%m-%d"

# field name -> wire key, in serialization order
WIRE_KEYS: dict[str, str] = {
    "received_date": "receivedDate",
    "barcode": "barcode",
    "product_name": "productName",
    "color": "color",
    "size": "size",
    "inbound_qty": "inboundQty",
    "outbound_date": "outboundDate",
    "manufacturer": "manufacturer",
    "actual_qty": "actualQty",
    "total": "total",
}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


# Excel number format tokens: quoted literal, escaped char, [locale/color],
# padding/fill, date and time parts, any other single char
_FORMAT_TOKENS = re.compile(
    r'"[^"]*"|\\.|\[[^\]]*\]|[_*].|yyyy|yy|mmmmm|mmmm|mmm|mm|m|dddd|ddd|dd|d|am/pm|a/p|[hse]|.',
    re.IGNORECASE,
)
_TIME_TOKENS = {"h", "s", "am/pm", "a/p"}
_DATE_PARTS: dict[str, Callable[[date], str]] = {
    "yyyy": lambda v: f"{v.year:04d}",
    "yy": lambda v: f"{v.year % 100:02d}",
    "mmmmm": lambda v: v.strftime("%B")[:1],
    "mmmm": lambda v: v.strftime("%B"),
    "mmm": lambda v: v.strftime("%b"),
    "mm": lambda v: f"{v.month:02d}",
    "m": lambda v: str(v.month),
    "dddd": lambda v: v.strftime("%A"),
    "ddd": lambda v: v.strftime("%a"),
    "dd": lambda v: f"{v.day:02d}",
    "d": lambda v: str(v.day),
}


def format_date(value: date, number_format: str | None) -> str:
    """Render a date cell the way its Excel number format displays it.

    Only the date part of the format is applied: rendering stops at the first
    time token, since the received date is a calendar day. Formats without a
    date token (``General``, missing) fall back to YYYY-MM-DD.

    >>> format_date(datetime(2024, 3, 15), "yyyy/mm/dd")
    '2024/03/15'
    >>> format_date(datetime(2024, 3, 15), 'yyyy"년" m"월" d"일"')
    '2024년 3월 15일'
    >>> format_date(datetime(2024, 3, 15), "yyyy-mm-dd h:mm:ss")
    '2024-03-15'
    """
    if not number_format or number_format.lower() == "general":
        return value.strftime(DATE_FMT)
    out: list[str] = []
    has_date = False
    for token in _FORMAT_TOKENS.findall(number_format.split(";", 1)[0]):
        lowered = token.lower()
        if lowered in _TIME_TOKENS:
            break
        if lowered in _DATE_PARTS:
            out.append(_DATE_PARTS[lowered](value))
            has_date = True
        elif token.startswith('"'):
            out.append(token[1:-1])
        elif token.startswith("\\"):
            out.append(token[1:])
        elif token[0] in "[_*" or lowered == "e":
            continue
        else:
            out.append(token)
    if not has_date:
        return value.strftime(DATE_FMT)
    return "".join(out).rstrip()


def cell_text(value: Any) -> str:
    """Render a raw cell value as display text ("" for blanks).

    Integral floats lose their ``.0`` suffix (numeric barcodes), dates are
    rendered as YYYY-MM-DD.
    """
    if _is_blank(value):
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime(DATE_FMT)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def coerce_int(value: Any) -> int | None:
    """Coerce a cell value to int, or None when it is blank or not numeric."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)
    try:
        number = float(str(value).strip().replace(",", ""))
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number)


@dataclass(frozen=True)
class WorkOrderRow:
    """Canonical representation of one inventory line item.

    ``received_date`` is a batch attribute copied onto every row; it is read
    once per sheet (cell A1), never per row.
    """
    received_date: str
    barcode: str = ""
    product_name: str = ""
    color: str = ""
    size: str = ""
    inbound_qty: int = 0  # never negative
    outbound_date: str | None = None  # free text, not date-parsed
    manufacturer: str = ""
    actual_qty: int | None = None
    total: int | None = None

    @classmethod
    def from_cells(
        cls,
        received_date: str,
        cells: Mapping[str, Any],
        *,
        row_number: int = -1,
        strict: bool = False,
    ) -> WorkOrderRow:
        """Build a row from raw cell values keyed by field name.

        Args:
            received_date: Batch date already formatted for display
            cells: field name -> raw cell value (missing keys are blanks)
            row_number: 1-based sheet row, used in strict mode errors
            strict: Raise InvalidQuantityError for a non-numeric inbound quantity
        """
        raw_qty = cells.get("inbound_qty")
        qty = coerce_int(raw_qty)
        if qty is None:
            if strict and not _is_blank(raw_qty):
                raise InvalidQuantityError(row_number, raw_qty)
            qty = 0
        outbound = cell_text(cells.get("outbound_date"))
        return cls(
            received_date=received_date,
            barcode=cell_text(cells.get("barcode")),
            product_name=cell_text(cells.get("product_name")),
            color=cell_text(cells.get("color")),
            size=cell_text(cells.get("size")),
            inbound_qty=max(qty, 0),
            outbound_date=outbound or None,
            manufacturer=cell_text(cells.get("manufacturer")),
            actual_qty=coerce_int(cells.get("actual_qty")),
            total=coerce_int(cells.get("total")),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorkOrderRow:
        """Rebuild a row from its wire form (camelCase) or field names."""
        cells: dict[str, Any] = {}
        for field_name, wire_key in WIRE_KEYS.items():
            if wire_key in data:
                cells[field_name] = data[wire_key]
            elif field_name in data:
                cells[field_name] = data[field_name]
        received = cell_text(cells.pop("received_date", None))
        return cls.from_cells(received, cells)

    def to_dict(self) -> dict[str, Any]:
        """Serialize in declared field order, omitting absent optional fields."""
        out: dict[str, Any] = {}
        for field_name, wire_key in WIRE_KEYS.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            out[wire_key] = value
        return out

    @property
    def has_extensions(self) -> bool:
        return self.actual_qty is not None or self.total is not None
