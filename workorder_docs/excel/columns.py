from __future__ import annotations

"""Column label table shared by the reader and the writer.

Uploaded sheets are matched by exact header label, never by position, so the
column order of an upload may vary. Labels must match the existing work order
files byte for byte.
"""

__all__ = [
    "FIELD_LABELS",
    "LABEL_FIELDS",
    "BASE_FIELDS",
    "EXTENSION_FIELDS",
    "SHEET_TITLE",
]

# field name -> header label
FIELD_LABELS: dict[str, str] = {
    "barcode": "바코드번호",
    "product_name": "제품명",
    "color": "컬러",
    "size": "사이즈",
    "inbound_qty": "입고수량",
    "outbound_date": "출고일",
    "manufacturer": "제조사",
    "actual_qty": "실수량",
    "total": "합계",
}

LABEL_FIELDS: dict[str, str] = {label: name for name, label in FIELD_LABELS.items()}

# Writer column order
BASE_FIELDS: tuple[str, ...] = (
    "barcode",
    "product_name",
    "color",
    "size",
    "inbound_qty",
    "outbound_date",
    "manufacturer",
)
EXTENSION_FIELDS: tuple[str, ...] = ("actual_qty", "total")

SHEET_TITLE = "작업지시서"
