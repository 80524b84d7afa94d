"""Stateless and incremental integer expression trees.

Public API::

    from deltacalc.expressions import Sum, Number, Reference, evaluate_expression
    from deltacalc.expressions import PersistentSum, to_persistent
"""

from deltacalc.expressions.errors import (
    EventValidationError,
    ExpressionError,
    MissingCellError,
    MissingTableError,
    ReferenceResolutionError,
    StateDriftError,
    UnsupportedEventError,
)
from deltacalc.expressions.evaluator import evaluate_expression, resolve_reference
from deltacalc.expressions.events import SetValue, TableEvent, parse_event, parse_events
from deltacalc.expressions.nodes import Expression, Number, Reference, Sum
from deltacalc.expressions.persistent import (
    PersistentExpression,
    PersistentNumber,
    PersistentReference,
    PersistentSum,
    check_exclusive,
    iter_states,
    to_expression,
    to_persistent,
)

__all__ = [
    "EventValidationError",
    "Expression",
    "ExpressionError",
    "MissingCellError",
    "MissingTableError",
    "Number",
    "PersistentExpression",
    "PersistentNumber",
    "PersistentReference",
    "PersistentSum",
    "Reference",
    "ReferenceResolutionError",
    "SetValue",
    "StateDriftError",
    "Sum",
    "TableEvent",
    "UnsupportedEventError",
    "evaluate_expression",
    "check_exclusive",
    "iter_states",
    "parse_event",
    "parse_events",
    "resolve_reference",
    "to_expression",
    "to_persistent",
]
