from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Processing result models for the batch CLI.

ProcessingResult aggregates one run over a set of uploads; FileStat holds the
outcome of a single upload. Both feed the SUMMARY line (services.summary).
"""

__all__ = [
    "FileStatus",
    "FileStat",
    "ProcessingResult",
]


class FileStatus(Enum):
    """Outcome of one upload.

    - SUCCESS: parsed and every enabled document generated
    - FAILED: parse failed, or a document could not be generated
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    """Per-upload statistics."""
    file_name: str
    status: FileStatus
    rows: int  # parsed rows (0 when parsing failed)
    elapsed_seconds: float
    xlsx_path: str | None = None
    pdf_path: str | None = None
    error: str | None = None  # first failure message


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one batch run."""
    success_files: int
    failed_files: int
    total_rows: int
    xlsx_files: int  # spreadsheets written
    pdf_files: int  # reports written
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
