from __future__ import annotations

import asyncio
import base64
import logging
import time
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import AppConfig
from ..excel.reader import ALLOWED_EXTENSIONS
from ..errors import error_type_of
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import ErrorRecord
from ..models.processing_result import FileStat, FileStatus, ProcessingResult
from ..models.results import GenerateResult
from ..report.rasterizer import PlaywrightRasterizer, Rasterizer
from .progress import ProgressTracker
from .requests import handle_generate_excel, handle_generate_pdf, handle_upload

"""Batch orchestration for the CLI.

For every upload: parse -> cleaned spreadsheet -> (optional) printable PDF,
written to the configured output directory under the
`<label>_<received date>.<ext>` convention. A failing upload is recorded and
the run moves on to the next file; the run itself only fails fatally when the
source directory cannot be read or the output directory cannot be created.
"""

__all__ = [
    "ProcessingError",
    "scan_excel_files",
    "build_rasterizer",
    "process_files",
    "process_all",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal orchestration error (nothing could be processed)."""


def scan_excel_files(directory: Path) -> list[Path]:
    """List .xlsx / .xls files in a directory (non-recursive, sorted).

    Excel lock files (`~$name.xlsx`) are skipped.

    Raises:
        ProcessingError: directory missing or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in ALLOWED_EXTENSIONS and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def build_rasterizer(config: AppConfig) -> PlaywrightRasterizer:
    return PlaywrightRasterizer(
        runtime=config.pdf.runtime,
        timeout_seconds=config.pdf.timeout_seconds,
        executable_path=config.pdf.executable_path,
    )


def _write_output(out_dir: Path, filename: str, data: str, used: set[str]) -> Path:
    name = filename
    if name in used:
        # two uploads with the same received date in one run
        stem, dot, ext = name.rpartition(".")
        n = 2
        while f"{stem}_{n}{dot}{ext}" in used:
            n += 1
        name = f"{stem}_{n}{dot}{ext}"
        logger.warning(f"output name {filename} already used in this run, writing {name}")
    used.add(name)
    path = out_dir / name
    path.write_bytes(base64.b64decode(data))
    return path


async def process_files(
    files: Iterable[Path],
    config: AppConfig,
    *,
    rasterizer: Rasterizer | None = None,
    generate_pdf: bool = True,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Process uploads one after another and aggregate the outcome.

    Files are processed sequentially; each PDF uses its own browser instance.
    """
    start_time = datetime.now(UTC)
    paths = list(files)
    out_dir = Path(config.output_directory)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProcessingError(f"cannot create output directory {out_dir}: {e}") from e
    generate_pdf = generate_pdf and config.pdf.enabled
    if generate_pdf and rasterizer is None:
        rasterizer = build_rasterizer(config)

    stats: list[FileStat] = []
    used_names: set[str] = set()
    with ProgressTracker(len(paths)) as progress:
        for path in paths:
            progress.start_file(path)
            started = time.perf_counter()
            stat = await _process_one(
                path, config, out_dir, used_names,
                rasterizer=rasterizer if generate_pdf else None,
                error_log=error_log,
                started=started,
            )
            stats.append(stat)
            progress.finish_file(stat.status is FileStatus.SUCCESS)

    end_time = datetime.now(UTC)
    success = [s for s in stats if s.status is FileStatus.SUCCESS]
    return ProcessingResult(
        success_files=len(success),
        failed_files=len(stats) - len(success),
        total_rows=sum(s.rows for s in stats),
        xlsx_files=sum(1 for s in stats if s.xlsx_path),
        pdf_files=sum(1 for s in stats if s.pdf_path),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=stats,
    )


async def _process_one(
    path: Path,
    config: AppConfig,
    out_dir: Path,
    used_names: set[str],
    *,
    rasterizer: Rasterizer | None,
    error_log: ErrorLogBuffer | None,
    started: float,
) -> FileStat:
    def _stat(status: FileStatus, rows: int, error: str | None = None, **paths: str | None) -> FileStat:
        return FileStat(
            file_name=path.name,
            status=status,
            rows=rows,
            elapsed_seconds=time.perf_counter() - started,
            error=error,
            **paths,
        )

    logger.info(f"processing {path.name}")
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"{path.name}: cannot read file: {e}")
        return _stat(FileStatus.FAILED, 0, f"cannot read file: {e}")

    parsed = handle_upload(
        path.name, data,
        strict_quantities=config.strict_quantities,
        error_log=error_log,
    )
    if not parsed.success or not parsed.data:
        return _stat(FileStatus.FAILED, 0, parsed.error)
    rows = parsed.data

    def _save(result: GenerateResult, stage: str) -> tuple[str | None, str | None]:
        """Write one generated document; returns (path, error)."""
        if not result.success or result.data is None or result.filename is None:
            return None, result.error
        try:
            return str(_write_output(out_dir, result.filename, result.data, used_names)), None
        except OSError as e:
            logger.error(f"{path.name}: cannot write {result.filename}: {e}")
            if error_log is not None:
                error_log.append(ErrorRecord.create(result.filename, stage, error_type_of(e), str(e)))
            return None, f"cannot write {result.filename}: {e}"

    excel = handle_generate_excel(rows, label=config.output_label, error_log=error_log)
    xlsx_path, excel_error = _save(excel, "excel")

    pdf_path = None
    pdf_error = None
    if rasterizer is not None:
        pdf = await handle_generate_pdf(
            rows, rasterizer,
            layout=config.pdf.layout,
            label=config.output_label,
            error_log=error_log,
        )
        pdf_path, pdf_error = _save(pdf, "pdf")

    error = excel_error or pdf_error
    status = FileStatus.FAILED if error else FileStatus.SUCCESS
    logger.info(f"{path.name}: {len(rows)} rows -> xlsx={xlsx_path or '-'} pdf={pdf_path or '-'}")
    return _stat(status, len(rows), error, xlsx_path=xlsx_path, pdf_path=pdf_path)


def process_all(
    config: AppConfig,
    files: list[Path] | None = None,
    *,
    rasterizer: Rasterizer | None = None,
    generate_pdf: bool = True,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Process the given files, or every spreadsheet in ``source_directory``.

    Raises:
        ProcessingError: source directory missing or unreadable, or the output
            directory cannot be created
    """
    if files is None:
        files = scan_excel_files(Path(config.source_directory))
    logger.info(f"{len(files)} file(s) to process")
    return asyncio.run(
        process_files(
            files, config,
            rasterizer=rasterizer,
            generate_pdf=generate_pdf,
            error_log=error_log,
        )
    )
