"""Error types for expression evaluation and incremental updates."""

from __future__ import annotations


class ExpressionError(Exception):
    """Base class for all expression-related errors."""


class ReferenceResolutionError(ExpressionError):
    """A reference leaf could not be resolved against a table set."""


class MissingTableError(ReferenceResolutionError):
    """Reference to a table name that is not in the table set.

    Attributes:
        table: The unresolved table name.
        available: Table names that are currently available.
    """

    def __init__(self, table: str, available: list[str] | None = None) -> None:
        self.table = table
        self.available = available or []
        msg = f"Unknown table: {table!r}"
        if self.available:
            msg += f". Available: {self.available}"
        super().__init__(msg)


class MissingCellError(ReferenceResolutionError):
    """Reference to coordinates outside a table's extent.

    Attributes:
        table: Table name.
        x: Column index within the row.
        y: Row index.
    """

    def __init__(self, table: str, x: int, y: int) -> None:
        self.table = table
        self.x = x
        self.y = y
        super().__init__(f"Cell ({x}, {y}) is out of range in table {table!r}")


class UnsupportedEventError(ExpressionError):
    """An expression node received an event kind it has no reaction for."""

    def __init__(self, event: object) -> None:
        self.event = event
        super().__init__(f"Unsupported table event: {type(event).__name__}")


class EventValidationError(ExpressionError):
    """Raw event data failed validation."""


class StateDriftError(ExpressionError):
    """Cached state disagrees with a fresh evaluation.

    Attributes:
        expected: Value of a fresh evaluation.
        actual: Cached root state.
    """

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Cached state {actual} does not match fresh evaluation {expected}")
