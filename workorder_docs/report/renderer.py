from __future__ import annotations

import html
from collections.abc import Sequence

from ..models.work_order_row import WorkOrderRow
from .layout import PageLayout

"""Printable work order renderer.

Produces one HTML document holding a fixed 19-column table meant for a single
landscape page width. Pagination is left to the rasterizer, guided by the CSS
emitted here: the header row repeats on every page and a data row is never
split across pages.
"""

__all__ = [
    "CHECK_COLUMNS",
    "COLUMNS",
    "COLUMN_WIDTHS_PX",
    "escape_text",
    "render_work_order_html",
]

CHECK_COLUMNS = 10

# (header label, td class, width px)
COLUMNS: tuple[tuple[str, str, int], ...] = (
    ("바코드번호", "cell-text", 90),
    ("제품명", "cell-text cell-product", 220),
    ("컬러", "cell-text", 50),
    ("사이즈", "cell-text", 45),
    ("입고수량", "cell-number", 55),
    *((str(n), "cell-qty-narrow", 22) for n in range(1, CHECK_COLUMNS + 1)),
    ("합계", "cell-sum", 50),
    ("불량", "cell-number", 45),
    ("출고일", "cell-text", 70),
    ("제조사", "cell-text", 80),
)

COLUMN_WIDTHS_PX: tuple[int, ...] = tuple(width for _, _, width in COLUMNS)

_BASE_CSS = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    html, body {
      font-family: 'Noto Sans KR', 'Malgun Gothic', '맑은 고딕', sans-serif;
      color: #1a1a1a;
      font-size: 9px;
      line-height: 1.5;
      background: #fff;
    }
    .page { padding: 6mm 5mm; }
    .page-header {
      display: flex;
      justify-content: space-between;
      align-items: center;
      margin-bottom: 5mm;
    }
    .meta-left { font-size: 12px; font-weight: 700; }
    .meta-right { display: flex; gap: 20px; align-items: center; }
    .checkbox-item { display: inline-flex; align-items: center; gap: 5px; font-size: 10px; color: #555; font-weight: 500; }
    .checkbox-item::before { content: '\\25A1'; font-size: 13px; color: #90A4AE; }
    .work-order-table {
      width: 100%;
      border-collapse: collapse;
      table-layout: fixed;
      border: 0.5px solid #E0E0E0;
    }
    thead { display: table-header-group; }
    tr { page-break-inside: avoid; break-inside: avoid; }
    .work-order-table th {
      background: #E8F4F8;
      color: #37474F;
      border: 0.5px solid #CFD8DC;
      padding: 7px 4px;
      font-weight: 600;
      text-align: center;
      font-size: 9.5px;
      white-space: nowrap;
    }
    .work-order-table td {
      border: 0.5px solid #E0E0E0;
      padding: 6px 5px;
      font-size: 9px;
      color: #424242;
      white-space: nowrap;
      overflow: hidden;
      text-overflow: ellipsis;
      vertical-align: middle;
    }
    .work-order-table tbody tr.row-even { background-color: #FFFFFF; }
    .work-order-table tbody tr.row-odd { background-color: #FAFAFA; }
    .cell-text { text-align: left; padding-left: 6px; }
    .cell-product {
      font-weight: 600;
      color: #212121;
      white-space: normal !important;
      word-wrap: break-word;
      line-height: 1.3;
    }
    .cell-number { text-align: right; font-weight: 600; padding-right: 6px; }
    .cell-qty-narrow { text-align: center; background: #F0F8FF; font-size: 8px; }
    .cell-sum { background: #E8F4F8 !important; font-weight: 700; text-align: right; }
    @media print {
      thead { display: table-header-group; }
      tr { page-break-inside: avoid; }
    }
"""


def escape_text(text: str | None) -> str:
    """Escape ``& < > " '`` for embedding in markup."""
    return html.escape(text or "", quote=True)


def _css(layout: PageLayout) -> str:
    parts = [f"    @page {{ size: {layout.css_page_size}; margin: {layout.css_margin}; }}", _BASE_CSS]
    for idx, width in enumerate(COLUMN_WIDTHS_PX, 1):
        parts.append(
            f"    .work-order-table th:nth-child({idx}), "
            f".work-order-table td:nth-child({idx}) {{ width: {width}px; }}"
        )
    return "\n".join(parts)


def _render_row(index: int, row: WorkOrderRow) -> str:
    stripe = "row-even" if index % 2 == 0 else "row-odd"
    values = [
        escape_text(row.barcode),
        escape_text(row.product_name),
        escape_text(row.color),
        escape_text(row.size),
        str(row.inbound_qty),
        *([""] * CHECK_COLUMNS),
        "",  # 합계: filled in by hand
        "",  # 불량
        escape_text(row.outbound_date),
        escape_text(row.manufacturer),
    ]
    cells = "".join(f'<td class="{cls}">{value}</td>' for (_, cls, _), value in zip(COLUMNS, values))
    return f'        <tr class="{stripe}">{cells}</tr>'


def render_work_order_html(rows: Sequence[WorkOrderRow], *, layout: PageLayout | None = None) -> str:
    """Render a batch into a complete HTML document.

    Row-supplied text is always escaped. Striping follows the zero-based row
    index (even -> ``row-even``).
    """
    layout = layout or PageLayout()
    received_date = rows[0].received_date if rows else ""
    header_cells = "".join(f"<th>{escape_text(label)}</th>" for label, _, _ in COLUMNS)
    body = "\n".join(_render_row(i, row) for i, row in enumerate(rows))

    parts = [
        "<!DOCTYPE html>",
        '<html lang="ko">',
        "<head>",
        '  <meta charset="UTF-8">',
        "  <title>작업 지시서</title>",
        "  <style>",
        _css(layout),
        "  </style>",
        "</head>",
        "<body>",
        '  <main class="page">',
        '    <header class="page-header">',
        f'      <div class="meta-left">입고날짜 : {escape_text(received_date)}</div>',
        '      <div class="meta-right">',
        '        <div class="checkbox-item">업체 소통 완료</div>',
        '        <div class="checkbox-item">이관 완료</div>',
        "      </div>",
        "    </header>",
        '    <section class="table-section">',
        '      <table class="work-order-table">',
        f"        <thead><tr>{header_cells}</tr></thead>",
        "        <tbody>",
    ]
    if body:
        parts.append(body)
    parts += [
        "        </tbody>",
        "      </table>",
        "    </section>",
        "  </main>",
        "</body>",
        "</html>",
    ]
    return "\n".join(parts) + "\n"
