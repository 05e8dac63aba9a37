from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for the batch CLI.

Format:
SUMMARY files={n} success={s} failed={f} rows={r} xlsx={x} pdf={p} elapsed_sec={e}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(seconds: float) -> str:
    """Integral values without decimals, tiny values without scientific notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 3, 15, tzinfo=timezone.utc)
        >>> r = ProcessingResult(
        ...     success_files=1, failed_files=0, total_rows=12, xlsx_files=1,
        ...     pdf_files=1, start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(r)
        'SUMMARY files=1 success=1 failed=0 rows=12 xlsx=1 pdf=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_rows} "
        f"xlsx={result.xlsx_files} "
        f"pdf={result.pdf_files} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
