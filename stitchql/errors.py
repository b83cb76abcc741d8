"""Custom exception hierarchy for stitchQL.

All public errors inherit from StitchQLError so callers can catch the base
class for any stitchQL-specific failure.  Every error carries a
machine-readable ``code`` and a ``details`` dict for diagnostics.
"""
from __future__ import annotations

import json
from typing import Any


class StitchQLError(Exception):
    """Base exception for all stitchQL errors.

    Args:
        message: Human-readable description.
        code: Machine-readable error code.
        details: Extra context describing the failure.
    """

    code: str = "STITCHQL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for logging or APIs."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


class PlaceholderMismatchError(StitchQLError):
    """Raised when a template's ``?`` marker count differs from its values.

    Raised by the call that introduced the mismatch, never deferred to
    render time.
    """

    code = "PLACEHOLDER_MISMATCH"

    def __init__(self, template: str, expected: int, received: int) -> None:
        super().__init__(
            "Number of placeholders does not match number of values "
            f"({expected} placeholder(s), {received} value(s)) in template: {template!r}",
            details={
                "template": template,
                "placeholders": expected,
                "values": received,
            },
        )
        self.template = template


class SchemaPlaceholderOutOfRangeError(StitchQLError):
    """Raised when a ``$schemaN`` token has no matching configured schema."""

    code = "SCHEMA_PLACEHOLDER_OUT_OF_RANGE"

    def __init__(self, index: int, schemas: list[str]) -> None:
        super().__init__(
            f"Schema index {index} out of bounds for provided schemas. "
            f"Provided schemas: {json.dumps(list(schemas))}",
            details={"index": index, "schemas": list(schemas)},
        )
        self.index = index
        self.schemas = list(schemas)


class QueryBuildError(StitchQLError):
    """Raised when a query builder is asked to build an incomplete query.

    Args:
        message: Human-readable description.
        clause: The clause being assembled when the error occurred.
    """

    code = "QUERY_BUILD"

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message, details={"clause": clause} if clause else {})
        self.clause = clause


class UnsupportedFlavorError(StitchQLError):
    """Raised when no dialect is registered for the requested SQL flavor."""

    code = "UNSUPPORTED_FLAVOR"

    def __init__(self, flavor: str, registered: list[str]) -> None:
        super().__init__(
            f"Unsupported SQL flavor: {flavor}",
            details={"flavor": flavor, "registered": registered},
        )


class ExecutorError(StitchQLError):
    """Raised when an executor cannot be resolved or returns an unusable result."""

    code = "INVALID_EXECUTOR"


class RowValidationError(StitchQLError):
    """Raised when executor rows fail validation against the configured model.

    Args:
        message: Human-readable description.
        errors: Structured errors reported by pydantic.
        rows: The rows that failed validation.
    """

    code = "ROW_VALIDATION"

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]],
        rows: list[Any],
    ) -> None:
        super().__init__(message, details={"errors": errors})
        self.errors = errors
        self.rows = rows
