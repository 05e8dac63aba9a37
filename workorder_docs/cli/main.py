from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..errors import WorkOrderError
from ..excel.reader import inspect_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import enable_debug, log_summary, setup_logging
from ..services.orchestrator import ProcessingError, process_all, scan_excel_files
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env (override) then the YAML config
- collect uploads: FILES arguments, or every .xlsx/.xls in source_directory
- per upload: parse -> cleaned spreadsheet -> printable PDF (unless --no-pdf)
- print the SUMMARY line and flush the error log when something failed
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; override=True lets it win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Work order spreadsheet -> cleaned .xlsx + printable PDF")
    p.add_argument("files", nargs="*", type=Path, help="Uploads to process (default: source_directory)")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config file (YAML)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header labels & first rows then exit")
    p.add_argument("--no-pdf", action="store_true", help="Only generate the spreadsheet")
    return p.parse_args(argv)


def _inspect_data(files: list[Path]) -> int:
    if not files:
        print("inspect: no .xlsx/.xls files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            preview = inspect_workbook(f.read_bytes())
        except (OSError, WorkOrderError) as e:
            print(f"  read_error: {e}")
            continue
        print(f"  SHEET: {preview.sheet_name} received_date={preview.received_date!r} rows={preview.total_rows}")
        print(f"    cols={preview.columns}")
        print("    sample_rows=", preview.sample_rows)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        enable_debug()

    if args.files:
        files = list(args.files)
    else:
        directory = Path(cfg.source_directory)
        try:
            files = scan_excel_files(directory)
        except ProcessingError as e:
            logger.error(f"directory not found: {directory} ({e})")
            return EXIT_FATAL
        logger.info(f"Processing files from: {directory}")

    if args.inspect_data:
        return _inspect_data(files)

    error_log = ErrorLogBuffer()
    try:
        result = process_all(cfg, files, generate_pdf=not args.no_pdf, error_log=error_log)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path}")

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
