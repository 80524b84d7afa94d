"""Structured event logging for deltacalc.

Provides an event schema, a filesystem NDJSON sink, and emit helpers
that never raise.
"""

from deltacalc.logging.events import (
    CalcEvent,
    EventLevel,
    EventType,
    configure_sink,
    emit,
    emit_error,
    emit_info,
    emit_warning,
)
from deltacalc.logging.sink import EventSink

__all__ = [
    "CalcEvent",
    "EventLevel",
    "EventSink",
    "EventType",
    "configure_sink",
    "emit",
    "emit_error",
    "emit_info",
    "emit_warning",
]
