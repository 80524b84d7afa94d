"""Filesystem NDJSON event sink with locked appends.

Events are appended to ``<log_dir>/events.ndjson``, one JSON line per
event, written with ``json.dumps(sort_keys=True)`` for deterministic
output.  Appends take an exclusive ``fcntl.flock``; reads take a shared
one.  On platforms without ``fcntl`` locking is skipped.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from deltacalc.logging.events import CalcEvent

try:
    import fcntl

    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False

EVENTS_FILENAME = "events.ndjson"


class EventSink:
    """Append-only NDJSON log writer with file locking."""

    def __init__(self, log_dir: Path, *, fsync: bool = False) -> None:
        self.log_dir = log_dir
        self.path = log_dir / EVENTS_FILENAME
        self._fsync = fsync
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, event: CalcEvent) -> None:
        """Append *event* to the log."""
        line = json.dumps(event.model_dump(mode="json"), sort_keys=True, default=str) + "\n"
        self._append(line)

    def read_events(
        self,
        *,
        level: str | None = None,
        event_type: str | None = None,
        limit: int = 200,
    ) -> list[dict[str, Any]]:
        """Read events most-recent-first, optionally filtered."""
        events = self._read_ndjson()
        if level:
            events = [e for e in events if e.get("level") == level]
        if event_type:
            events = [e for e in events if e.get("event_type") == event_type]
        events.reverse()
        return events[:limit]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _append(self, line: str) -> None:
        if _HAS_FCNTL:
            fd = os.open(str(self.path), os.O_WRONLY | os.O_CREAT | os.O_APPEND)
            try:
                fcntl.flock(fd, fcntl.LOCK_EX)
                os.write(fd, line.encode("utf-8"))
                if self._fsync:
                    os.fsync(fd)
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
                os.close(fd)
        else:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
                if self._fsync:
                    f.flush()
                    os.fsync(f.fileno())

    def _read_ndjson(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        if _HAS_FCNTL:
            with open(self.path, encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    raw = f.read()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        else:
            raw = self.path.read_text(encoding="utf-8")

        events: list[dict[str, Any]] = []
        for line in raw.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                continue
        return events
