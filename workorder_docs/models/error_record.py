from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the structured failure log.

Every failure caught at the request boundary can be recorded as one JSON
Lines entry with a fixed key set:
{timestamp, file, stage, error_type, message}
"""

__all__ = [
    "ErrorRecord",
    "STAGES",
]

STAGES = ("upload", "excel", "pdf")


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Upload file name, or the output file name for generate stages
        stage: Pipeline stage that failed (upload / excel / pdf)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable failure message
    """
    timestamp: str  # ISO8601 UTC
    file: str
    stage: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, stage: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            stage=stage,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False)
