from __future__ import annotations

import base64
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..config.loader import DEFAULT_LABEL
from ..errors import EmptyDataError, InvalidFormatError, WorkOrderError, error_type_of
from ..excel.reader import parse_work_order, require_rows, validate_upload_name
from ..excel.writer import write_work_order
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.results import GenerateResult, ParseResult
from ..models.work_order_row import WorkOrderRow
from ..report.layout import PageLayout
from ..report.rasterizer import Rasterizer, render_pdf

"""Request boundary for the upload UI / HTTP layer.

Each handler runs one pipeline stage and never raises: every failure is
logged, optionally recorded in an ErrorLogBuffer, and returned as a failure
result. Cancellation (asyncio.CancelledError) is not a failure and propagates.
Nothing is retried.
"""

__all__ = [
    "MSG_NO_FILE",
    "MSG_BAD_EXTENSION",
    "MSG_NO_ROWS",
    "MSG_NO_PAYLOAD",
    "output_filename",
    "handle_upload",
    "handle_generate_excel",
    "handle_generate_pdf",
]

logger = logging.getLogger(__name__)

MSG_NO_FILE = "파일이 업로드되지 않았습니다."
MSG_BAD_EXTENSION = "엑셀 파일만 업로드 가능합니다. (.xlsx, .xls)"
MSG_NO_ROWS = "엑셀 파일에 데이터가 없습니다."
MSG_NO_PAYLOAD = "유효한 데이터가 제공되지 않았습니다."


def output_filename(rows: Sequence[WorkOrderRow], ext: str, label: str = DEFAULT_LABEL) -> str:
    """`<label>_<received date, '/' -> '-'>.<ext>`; a missing date becomes `unknown`."""
    received = (rows[0].received_date if rows else "") or "unknown"
    return f"{label}_{received.replace('/', '-')}.{ext.lstrip('.')}"


def _record(error_log: ErrorLogBuffer | None, file: str, stage: str, exc: BaseException) -> None:
    if error_log is not None:
        error_log.append(ErrorRecord.create(file, stage, error_type_of(exc), str(exc)))


def _coerce_rows(rows: Any) -> list[WorkOrderRow]:
    if not rows or not isinstance(rows, Sequence) or isinstance(rows, (str, bytes)):
        raise EmptyDataError(MSG_NO_PAYLOAD)
    out: list[WorkOrderRow] = []
    for row in rows:
        if isinstance(row, WorkOrderRow):
            out.append(row)
        elif isinstance(row, Mapping):
            out.append(WorkOrderRow.from_dict(row))
        else:
            raise InvalidFormatError(f"unsupported row payload: {type(row).__name__}")
    return out


def handle_upload(
    filename: str | None,
    data: bytes | None,
    *,
    strict_quantities: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> ParseResult:
    """Validate and parse one uploaded spreadsheet."""
    name = filename or ""
    if not filename or data is None:
        logger.error(f"upload: {MSG_NO_FILE}")
        _record(error_log, name, "upload", InvalidFormatError(MSG_NO_FILE))
        return ParseResult.fail(MSG_NO_FILE)
    try:
        validate_upload_name(filename)
    except InvalidFormatError as e:
        logger.error(f"upload {name}: {e}")
        _record(error_log, name, "upload", e)
        return ParseResult.fail(MSG_BAD_EXTENSION)

    try:
        rows = parse_work_order(data, strict_quantities=strict_quantities)
        require_rows(rows)
    except EmptyDataError as e:
        logger.error(f"upload {name}: {e}")
        _record(error_log, name, "upload", e)
        return ParseResult.fail(MSG_NO_ROWS)
    except WorkOrderError as e:
        logger.error(f"upload {name}: {e}")
        _record(error_log, name, "upload", e)
        return ParseResult.fail(str(e))
    except Exception as e:
        logger.exception(f"upload {name}: unexpected error")
        _record(error_log, name, "upload", e)
        return ParseResult.fail(str(e) or type(e).__name__)

    logger.info(f"upload {name}: {len(rows)} rows, received_date={rows[0].received_date}")
    return ParseResult.ok(rows)


def handle_generate_excel(
    rows: Sequence[WorkOrderRow] | Sequence[Mapping[str, Any]] | None,
    *,
    label: str = DEFAULT_LABEL,
    error_log: ErrorLogBuffer | None = None,
) -> GenerateResult:
    """Build the cleaned spreadsheet and return it base64-encoded."""
    filename = ""
    try:
        batch = _coerce_rows(rows)
        filename = output_filename(batch, "xlsx", label)
        payload = write_work_order(batch)
    except EmptyDataError as e:
        logger.error(f"generate excel: {e}")
        _record(error_log, filename, "excel", e)
        return GenerateResult.fail(MSG_NO_PAYLOAD)
    except Exception as e:
        logger.exception(f"generate excel {filename}: failed")
        _record(error_log, filename, "excel", e)
        return GenerateResult.fail(str(e) or type(e).__name__)

    logger.info(f"generate excel {filename}: {len(batch)} rows, {len(payload)} bytes")
    return GenerateResult.ok(base64.b64encode(payload).decode("ascii"), filename)


async def handle_generate_pdf(
    rows: Sequence[WorkOrderRow] | Sequence[Mapping[str, Any]] | None,
    rasterizer: Rasterizer,
    *,
    layout: PageLayout | None = None,
    label: str = DEFAULT_LABEL,
    error_log: ErrorLogBuffer | None = None,
) -> GenerateResult:
    """Render and rasterize the printable report, returned base64-encoded."""
    filename = ""
    try:
        batch = _coerce_rows(rows)
        filename = output_filename(batch, "pdf", label)
        payload = await render_pdf(batch, rasterizer, layout)
    except EmptyDataError as e:
        logger.error(f"generate pdf: {e}")
        _record(error_log, filename, "pdf", e)
        return GenerateResult.fail(MSG_NO_PAYLOAD)
    except WorkOrderError as e:
        logger.error(f"generate pdf {filename}: {e}")
        _record(error_log, filename, "pdf", e)
        return GenerateResult.fail(str(e))
    except Exception as e:
        logger.exception(f"generate pdf {filename}: failed")
        _record(error_log, filename, "pdf", e)
        return GenerateResult.fail(str(e) or type(e).__name__)

    logger.info(f"generate pdf {filename}: {len(batch)} rows, {len(payload)} bytes")
    return GenerateResult.ok(base64.b64encode(payload).decode("ascii"), filename)
