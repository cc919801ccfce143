"""Domain errors raised by the order services and mapped to HTTP status codes by the routes."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    WRITE_FAILED = "WriteFailed"
    CONFLICT = "Conflict"
    INVALID_STATE = "InvalidState"
    INVALID_INPUT = "InvalidInput"


HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.WRITE_FAILED: 500,
}


class OrderError(Exception):
    """A storefront-order operation failed. ``stage`` names the step that failed."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        stage: Optional[str] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.stage = stage
        self.details = details

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]


class ConversionError(OrderError):
    """Terminal failure of a storefront → customer order conversion."""


class OrderStateError(OrderError):
    """Accept / reject / archive refused or failed."""
