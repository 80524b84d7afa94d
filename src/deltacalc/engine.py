"""IncrementalEngine: keeps one persistent expression in step with its tables.

The engine owns the pairing the core leaves to its caller: every table
mutation made through ``set_value`` is followed by the matching
``SetValue`` event.  Callers that mutate tables themselves can still feed
events through ``apply``.

The engine is not thread-safe.  Mutations and ``apply`` calls must be
serialized by the caller.
"""

from __future__ import annotations

import logging
from typing import Iterable

from deltacalc.config import EngineConfig, build_config
from deltacalc.expressions.errors import (
    MissingTableError,
    ReferenceResolutionError,
    StateDriftError,
)
from deltacalc.expressions.evaluator import evaluate_expression
from deltacalc.expressions.events import SetValue, TableEvent
from deltacalc.expressions.nodes import Number, Reference, Sum
from deltacalc.expressions.persistent import (
    PersistentExpression,
    check_exclusive,
    to_expression,
    to_persistent,
)
from deltacalc.index import DependencyIndex
from deltacalc.logging.events import (
    MISSING_CELL,
    MISSING_TABLE,
    STATE_DRIFT,
    EventType,
    emit_error,
    emit_info,
)
from deltacalc.logging.sink import EventSink
from deltacalc.tables import TableSet

logger = logging.getLogger(__name__)


class IncrementalEngine:
    """Pairs a ``TableSet`` with a persistent expression over it.

    Usage::

        engine = IncrementalEngine(table_set, Sum(Number(1), Reference("t1", 1, 0)))
        engine.init()
        engine.set_value("t1", 1, 0, 3)
        print(engine.state)

    Attributes:
        applied: Events forwarded to the expression tree.
        skipped: Events the dependency index ruled out.
        changed: Events that changed the root state's subtree.
    """

    def __init__(
        self,
        table_set: TableSet,
        expression: PersistentExpression | Number | Reference | Sum,
        config: EngineConfig | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            table_set: Tables the expression reads from.
            expression: Persistent tree, or a stateless tree to convert.
            config: Engine settings; defaults apply when omitted.
        """
        if isinstance(expression, (Number, Reference, Sum)):
            expression = to_persistent(expression)
        check_exclusive(expression)
        self.table_set = table_set
        self.expression = expression
        self.config = config or build_config()
        self._index: DependencyIndex | None = None
        self._initialized = False
        self.applied = 0
        self.skipped = 0
        self.changed = 0

        # Without its own log_dir the engine falls back to the process-wide
        # sink from ``configure_sink``.
        self._sink: EventSink | None = None
        if self.config.emit_events and self.config.log_dir is not None:
            self._sink = EventSink(self.config.log_dir, fsync=self.config.logging_fsync)

    @property
    def state(self) -> int:
        """Cached value of the whole expression."""
        return self.expression.state

    @property
    def index(self) -> DependencyIndex | None:
        return self._index

    def init(self) -> int:
        """Evaluate the whole tree from the current tables.

        Returns:
            The root state.

        Raises:
            ReferenceResolutionError: If a reference points at a missing
                table or cell.
        """
        try:
            self.expression.init(self.table_set)
        except ReferenceResolutionError as exc:
            self._initialized = False
            if self.config.emit_events:
                code = MISSING_TABLE if isinstance(exc, MissingTableError) else MISSING_CELL
                emit_error(EventType.reference_error, str(exc), error_code=code, sink=self._sink)
            raise

        self._index = DependencyIndex.build(self.expression) if self.config.use_dependency_index else None
        self._initialized = True
        logger.debug("initialized expression, state=%d", self.state)
        if self.config.emit_events:
            emit_info(
                EventType.engine_init,
                "Expression initialized",
                {"state": self.state, "tables": sorted(self.table_set.keys())},
                sink=self._sink,
            )
        return self.state

    def apply(self, event: TableEvent) -> bool:
        """Bring cached states up to date after *event*.

        The caller must already have applied the described mutation to the
        table set.

        Returns:
            True if the root state's subtree changed.

        Raises:
            RuntimeError: If ``init`` has not run.
            StateDriftError: If ``verify_after_apply`` is set and the cached
                state disagrees with a fresh evaluation.
        """
        if not self._initialized:
            raise RuntimeError("IncrementalEngine.init() must be called before apply()")

        if self._index is not None and not self._index.affects(event):
            self.skipped += 1
            logger.debug("skipped %r: no matching reference", event)
            if self.config.emit_events:
                emit_info(
                    EventType.engine_apply_skipped,
                    "Event matched no reference",
                    event.model_dump(),
                    sink=self._sink,
                )
            return False

        before = self.state
        modified = self.expression.apply(event)
        self.applied += 1
        if modified:
            self.changed += 1
        logger.debug("applied %r: modified=%s state %d -> %d", event, modified, before, self.state)
        if self.config.emit_events:
            emit_info(
                EventType.engine_apply,
                "Event applied",
                {"event": event.model_dump(), "modified": modified, "before": before, "after": self.state},
                sink=self._sink,
            )

        if self.config.verify_after_apply:
            self.verify()
        return modified

    def apply_all(self, events: Iterable[TableEvent]) -> list[bool]:
        """Apply events in order and return each result."""
        return [self.apply(event) for event in events]

    def set_value(self, table: str, x: int, y: int, value: int) -> bool:
        """Write one cell and apply the matching ``SetValue`` event.

        Writes outside the table, or to an unknown table, are ignored and
        produce no event.

        Returns:
            True if the expression changed.

        Raises:
            RuntimeError: If ``init`` has not run.  The table is left untouched.
        """
        if not self._initialized:
            raise RuntimeError("IncrementalEngine.init() must be called before set_value()")
        target = self.table_set.get(table)
        if target is None or not target.contains(x, y):
            logger.debug("ignored write to %s(%d, %d): out of range", table, x, y)
            return False
        target.set(x, y, value)
        return self.apply(SetValue(table=table, x=x, y=y, value=value))

    def verify(self) -> int:
        """Compare the cached root state against a fresh evaluation.

        Returns:
            The freshly evaluated value.

        Raises:
            StateDriftError: If the two disagree.
        """
        expected = evaluate_expression(to_expression(self.expression), self.table_set)
        if expected != self.state:
            if self.config.emit_events:
                emit_error(
                    EventType.engine_verify_fail,
                    "Cached state does not match fresh evaluation",
                    {"expected": expected, "actual": self.state},
                    error_code=STATE_DRIFT,
                    sink=self._sink,
                )
            raise StateDriftError(expected, self.state)
        return expected
