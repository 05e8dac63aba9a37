from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .work_order_row import WorkOrderRow

"""Request result models returned by services.requests.

Their ``to_dict`` output is the JSON body the upload UI expects:
- parse:    {success, data?: [row...], error?}
- generate: {success, data?: base64, filename?, error?}
Keys whose value is absent are omitted.
"""

__all__ = [
    "ParseResult",
    "GenerateResult",
]


@dataclass(frozen=True)
class ParseResult:
    success: bool
    data: list[WorkOrderRow] | None = None
    error: str | None = None

    @staticmethod
    def ok(rows: list[WorkOrderRow]) -> ParseResult:
        return ParseResult(success=True, data=rows)

    @staticmethod
    def fail(message: str) -> ParseResult:
        return ParseResult(success=False, error=message)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            out["data"] = [row.to_dict() for row in self.data]
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class GenerateResult:
    success: bool
    data: str | None = None  # base64 document
    filename: str | None = None
    error: str | None = None

    @staticmethod
    def ok(data: str, filename: str) -> GenerateResult:
        return GenerateResult(success=True, data=data, filename=filename)

    @staticmethod
    def fail(message: str) -> GenerateResult:
        return GenerateResult(success=False, error=message)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            out["data"] = self.data
        if self.filename is not None:
            out["filename"] = self.filename
        if self.error is not None:
            out["error"] = self.error
        return out
