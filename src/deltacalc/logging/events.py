"""Structured engine event schema and module-level emit helpers.

All timestamps use UTC ISO-8601 with ``Z`` suffix.  The ``emit()``
family of functions is safe to call from any context -- failures are
swallowed and reported on stderr.
"""

from __future__ import annotations

import sys
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EventLevel(str, Enum):
    info = "info"
    warning = "warning"
    error = "error"


class EventType(str, Enum):
    engine_init = "engine_init"
    engine_apply = "engine_apply"
    engine_apply_skipped = "engine_apply_skipped"
    engine_verify_fail = "engine_verify_fail"
    reference_error = "reference_error"


# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

MISSING_TABLE = "missing_table"
MISSING_CELL = "missing_cell"
STATE_DRIFT = "state_drift"


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


def _utc_now() -> str:
    """Return current UTC timestamp in ISO-8601 with Z suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class CalcEvent(BaseModel):
    """A single structured log event."""

    schema_version: int = 1
    ts: str = Field(default_factory=_utc_now)
    level: EventLevel
    event_type: EventType
    context: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    error_code: str | None = None


# ---------------------------------------------------------------------------
# Module-level sink reference
# ---------------------------------------------------------------------------

# Set by ``configure_sink``; ``emit()`` discards events while it is None.
_sink: Any = None  # EventSink | None


def configure_sink(log_dir: Any, *, fsync: bool = False) -> Any:
    """Route events emitted without an explicit sink to *log_dir*.

    This is the single process-wide default; engines with their own
    ``log_dir`` write to their own sink instead.

    Passing ``None`` disables the sink again.

    Returns:
        The new ``EventSink``, or None.
    """
    global _sink
    from pathlib import Path

    from deltacalc.logging.sink import EventSink

    if log_dir is None:
        _sink = None
        return None
    _sink = EventSink(Path(log_dir), fsync=fsync)
    return _sink


def _get_sink() -> Any:
    """Return the module-level sink, or None."""
    return _sink


# ---------------------------------------------------------------------------
# Rate-limited stderr warnings
# ---------------------------------------------------------------------------

_last_stderr_ts: float = 0.0
_STDERR_INTERVAL_SECS = 60.0


def _stderr_warning(msg: str) -> None:
    """Print a warning to stderr, rate-limited to one per 60 seconds."""
    global _last_stderr_ts
    now = time.monotonic()
    if now - _last_stderr_ts < _STDERR_INTERVAL_SECS:
        return
    _last_stderr_ts = now
    try:
        print(f"[deltacalc] {msg}", file=sys.stderr)
    except Exception:
        pass


# ---------------------------------------------------------------------------
# Safe emit helpers
# ---------------------------------------------------------------------------


def emit(event: CalcEvent, *, sink: Any = None) -> None:
    """Write an event to *sink*, or to the module-level sink when omitted.

    **Never raises.**  On failure, prints a rate-limited warning to stderr.
    """
    try:
        if sink is None:
            sink = _get_sink()
        if sink is None:
            return
        sink.write(event)
    except Exception:
        _stderr_warning(f"logging failed: {traceback.format_exc()}")


def emit_info(
    event_type: EventType,
    message: str,
    context: dict[str, Any] | None = None,
    *,
    sink: Any = None,
) -> None:
    """Convenience: emit an info-level event."""
    emit(
        CalcEvent(
            level=EventLevel.info,
            event_type=event_type,
            message=message,
            context=context or {},
        ),
        sink=sink,
    )


def emit_warning(
    event_type: EventType,
    message: str,
    context: dict[str, Any] | None = None,
    *,
    error_code: str | None = None,
    sink: Any = None,
) -> None:
    """Convenience: emit a warning-level event."""
    emit(
        CalcEvent(
            level=EventLevel.warning,
            event_type=event_type,
            message=message,
            context=context or {},
            error_code=error_code,
        ),
        sink=sink,
    )


def emit_error(
    event_type: EventType,
    message: str,
    context: dict[str, Any] | None = None,
    *,
    error_code: str | None = None,
    sink: Any = None,
) -> None:
    """Convenience: emit an error-level event."""
    emit(
        CalcEvent(
            level=EventLevel.error,
            event_type=event_type,
            message=message,
            context=context or {},
            error_code=error_code,
        ),
        sink=sink,
    )
