from __future__ import annotations

"""Error taxonomy for the work order document pipeline.

Cell-level coercion problems are not errors: they resolve to the documented
defaults of WorkOrderRow. Everything below is surfaced to the caller and
mapped to a failure result at the request boundary (services.requests).
"""

__all__ = [
    "WorkOrderError",
    "InvalidFormatError",
    "InvalidQuantityError",
    "EmptyDataError",
    "RenderError",
    "error_type_of",
]


class WorkOrderError(Exception):
    """Base class for every failure raised by the pipeline."""


class InvalidFormatError(WorkOrderError):
    """Raised when the upload is not a readable spreadsheet or has the wrong extension."""


class InvalidQuantityError(InvalidFormatError):
    """Raised in strict mode when an inbound quantity cell is not numeric."""

    def __init__(self, row_number: int, value: object) -> None:
        self.row_number = row_number
        self.value = value
        super().__init__(f"row {row_number}: inbound quantity is not a number: {value!r}")


class EmptyDataError(WorkOrderError):
    """Raised when a batch has no data rows."""


class RenderError(WorkOrderError):
    """Raised when rasterization fails or times out.

    ``engine_message`` keeps the underlying browser message when one exists.
    """

    def __init__(self, message: str, engine_message: str | None = None) -> None:
        self.engine_message = engine_message
        if engine_message:
            message = f"{message}: {engine_message}"
        super().__init__(message)


_ERROR_TYPES: dict[type[BaseException], str] = {
    InvalidQuantityError: "INVALID_QUANTITY",
    InvalidFormatError: "INVALID_FORMAT",
    EmptyDataError: "EMPTY_DATA",
    RenderError: "RENDER_ERROR",
    OSError: "IO_ERROR",
}


def error_type_of(exc: BaseException) -> str:
    """Return the UPPER_SNAKE error classification used in the error log."""
    for cls in type(exc).__mro__:
        if cls in _ERROR_TYPES:
            return _ERROR_TYPES[cls]
    return "UNEXPECTED_ERROR"
