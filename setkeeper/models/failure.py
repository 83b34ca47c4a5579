"""
Failure classification for SetKeeper.

Malformed pasted data is never an exception: parse errors live on the
parsed row, duplicates are a count, and unmatched identifiers are a
per-row warning. Exceptions are reserved for failures the caller has to
report: persistence writes that did not go through, unknown ids, and a
second write for an operation that is still in flight.

Every such exception derives from KnownError so the API layer can turn
it into a classified response without guessing.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    # Resource failures
    NOT_FOUND = "not_found"

    # Concurrency
    OPERATION_IN_FLIGHT = "operation_in_flight"

    # Persistence collaborator failures
    PERSISTENCE_FAILED = "persistence_failed"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_failure(self) -> FailureDetail:
        """Convert to a FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )

    def to_detail(self) -> dict[str, Any]:
        """JSON-ready payload for an HTTP error body."""
        return self.to_failure().model_dump(mode="json")


class NotFoundError(KnownError):
    """Raised when a set or checklist item does not exist."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{resource.capitalize()} '{resource_id}' was not found.",
            status_code=404,
        )


class PersistenceError(KnownError):
    """
    A write to the persistence collaborator failed.

    For chunked imports, chunk_index is the 0-based index of the first
    chunk that failed and first_row the 1-based position of its first
    row. Chunks before it were committed and stay committed.
    """

    def __init__(
        self,
        message: str,
        chunk_index: int | None = None,
        first_row: int | None = None,
        inserted_count: int = 0,
        detail: str | None = None,
    ):
        self.chunk_index = chunk_index
        self.first_row = first_row
        self.inserted_count = inserted_count
        super().__init__(
            kind=FailureKind.PERSISTENCE_FAILED,
            message=message,
            detail=detail,
            suggestion="Reload the checklist before retrying; earlier rows may already be saved.",
            status_code=502,
        )

    def to_detail(self) -> dict[str, Any]:
        """Error body plus the chunk position of a failed import."""
        detail = super().to_detail()
        detail["chunk_index"] = self.chunk_index
        detail["first_row"] = self.first_row
        detail["inserted_count"] = self.inserted_count
        return detail


class OperationInFlightError(KnownError):
    """Raised when the same logical write is started twice concurrently."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            kind=FailureKind.OPERATION_IN_FLIGHT,
            message=f"'{operation}' is already in progress.",
            suggestion="Wait for the current operation to finish.",
            status_code=409,
        )
