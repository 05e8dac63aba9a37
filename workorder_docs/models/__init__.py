"""Domain models for the work order document pipeline.

WorkOrderRow is the single canonical row type; the result models carry the
request-boundary and batch-run outcomes.
"""

from .error_record import ErrorRecord
from .processing_result import FileStat, FileStatus, ProcessingResult
from .results import GenerateResult, ParseResult
from .work_order_row import WorkOrderRow

__all__ = [
    # Row model
    "WorkOrderRow",
    # Request results
    "ParseResult",
    "GenerateResult",
    # Batch run
    "FileStat",
    "FileStatus",
    "ProcessingResult",
    "ErrorRecord",
]
