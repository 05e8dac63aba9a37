# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from workorder_docs.logging.init import reset_logging
from workorder_docs.models.work_order_row import WorkOrderRow

HEADER = ["바코드번호", "제품명", "컬러", "사이즈", "입고수량", "출고일", "제조사"]


def workbook_bytes(sheets: dict[str, list[list[object]]]) -> bytes:
    """Build an .xlsx in memory; rows are written as-is (no header inference)."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return buf.getvalue()


@pytest.fixture()
def make_workbook() -> Callable[..., bytes]:
    """Factory: make_workbook(rows) or make_workbook(rows, extra_sheets={...})."""
    def _make(rows: list[list[object]], extra_sheets: dict[str, list[list[object]]] | None = None) -> bytes:
        sheets = {"Sheet1": rows}
        sheets.update(extra_sheets or {})
        return workbook_bytes(sheets)
    return _make


@pytest.fixture()
def scenario_workbook(make_workbook) -> bytes:
    return make_workbook([
        ["2024/03/15"],
        HEADER,
        ["BC001", "Shirt", "Red", "M", 10, None, "Acme Co."],
    ])


@pytest.fixture()
def sample_rows() -> list[WorkOrderRow]:
    return [
        WorkOrderRow("2024/03/15", "BC001", "Shirt", "Red", "M", 10, None, "Acme Co."),
        WorkOrderRow("2024/03/15", "BC002", "Pants <slim>", "Navy", "L", 4, "3/20 출고", "Beta & Sons"),
        WorkOrderRow("2024/03/15", "8801234567890", "Cap", "", "FREE", 0, None, ""),
    ]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
output_directory: ./output
output_label: 작업지시서
strict_quantities: false
pdf:
  enabled: true
  runtime: local
  timeout_seconds: 30
  margin:
    top: 10mm
    right: 8mm
    bottom: 10mm
    left: 8mm
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "workorder.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture(autouse=True)
def _fresh_logging(monkeypatch):
    # every test gets a logger bound to the current (captured) stdout
    monkeypatch.delenv("VERCEL", raising=False)
    monkeypatch.delenv("WORKORDER_PDF_RUNTIME", raising=False)
    reset_logging()
    yield
    reset_logging()
