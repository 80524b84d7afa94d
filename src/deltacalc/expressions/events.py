"""Table mutation events that drive incremental expression updates.

An event only describes a mutation.  Callers mutate the ``TableSet``
themselves and hand the matching event to ``PersistentExpression.apply``.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from deltacalc.expressions.errors import EventValidationError


class SetValue(BaseModel):
    """Cell ``(x, y)`` of ``table`` has been set to ``value``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["set_value"] = "set_value"
    table: str
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    value: int

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.table, self.x, self.y)


# New event kinds join this union; every node kind must then handle them.
TableEvent = Union[SetValue]

_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(TableEvent)


def parse_event(data: dict[str, Any]) -> TableEvent:
    """Validate a raw mapping into a table event.

    Args:
        data: Mapping such as ``{"kind": "set_value", "table": "t1", ...}``.

    Returns:
        The matching event model.

    Raises:
        EventValidationError: If *data* does not describe a valid event.
    """
    try:
        return _EVENT_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise EventValidationError(f"Invalid table event: {exc}") from exc


def parse_events(items: list[dict[str, Any]]) -> list[TableEvent]:
    """Validate a sequence of raw events, preserving order."""
    return [parse_event(item) for item in items]
