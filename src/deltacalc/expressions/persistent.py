"""Stateful expression trees with incremental updates.

Each node caches the value of its subtree in ``state``.  ``init`` fills
every cache from a table set; ``apply`` then keeps the caches current one
``TableEvent`` at a time without re-evaluating the tree::

    expr = PersistentSum([PersistentNumber(1), PersistentReference("t1", 1, 0)])
    expr.init(table_set)
    table_set["t1"].set(1, 0, 3)
    expr.apply(SetValue(table="t1", x=1, y=0, value=3))   # True
    expr.state                                            # 4

After ``init`` and after every ``apply``, ``state`` of every node equals
what ``evaluate_expression`` would return for the equivalent stateless
tree against the current tables.  Reading ``state`` before ``init`` is
meaningless.

Trees must not share nodes: each child belongs to exactly one parent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Union

from deltacalc.expressions.events import SetValue, TableEvent
from deltacalc.expressions.errors import UnsupportedEventError
from deltacalc.expressions.evaluator import resolve_reference
from deltacalc.expressions.nodes import Expression, Number, Reference, Sum

if TYPE_CHECKING:
    from deltacalc.tables import TableSet


class PersistentNumber:
    """Integer literal.  Its state is the literal and never changes."""

    __slots__ = ("value",)

    def __init__(self, value: int) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"PersistentNumber({self.value!r})"

    @property
    def state(self) -> int:
        return self.value

    def init(self, table_set: TableSet) -> None:
        pass

    def apply(self, event: TableEvent) -> bool:
        if isinstance(event, SetValue):
            return False
        raise UnsupportedEventError(event)


class PersistentReference:
    """Cached value of cell ``(x, y)`` in table ``table``."""

    __slots__ = ("state", "table", "x", "y")

    def __init__(self, table: str, x: int, y: int, state: int = 0) -> None:
        self.table = table
        self.x = x
        self.y = y
        self.state = state

    def __repr__(self) -> str:
        return (
            f"PersistentReference({self.table!r}, {self.x!r}, {self.y!r}, "
            f"state={self.state!r})"
        )

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.table, self.x, self.y)

    def init(self, table_set: TableSet) -> None:
        """Load the referenced cell.

        Raises:
            MissingTableError: If the table is not in *table_set*.
            MissingCellError: If the coordinates are out of range.
        """
        self.state = resolve_reference(table_set, self.table, self.x, self.y)

    def apply(self, event: TableEvent) -> bool:
        """Take the event's value if it targets exactly this cell."""
        if isinstance(event, SetValue):
            if event.table == self.table and event.x == self.x and event.y == self.y:
                self.state = event.value
                return True
            return False
        raise UnsupportedEventError(event)


class PersistentSum:
    """Cached sum of the child expressions."""

    __slots__ = ("state", "args")

    def __init__(self, args: Iterable[PersistentExpression] = (), state: int = 0) -> None:
        self.args: tuple[PersistentExpression, ...] = tuple(args)
        self.state = state
        if len({id(arg) for arg in self.args}) != len(self.args):
            raise ValueError("A child node appears more than once in this sum")

    def __repr__(self) -> str:
        return f"PersistentSum({self.args!r}, state={self.state!r})"

    def init(self, table_set: TableSet) -> None:
        """Initialize every child, then cache their sum."""
        total = 0
        for arg in self.args:
            arg.init(table_set)
            total = total + arg.state
        self.state = total

    def apply(self, event: TableEvent) -> bool:
        """Forward *event* to every child and fold in the deltas.

        Children that report no change contribute nothing.  Every child is
        visited; there is no dependency lookup to skip unrelated subtrees.

        Returns:
            True if any child changed.
        """
        modified = False
        for arg in self.args:
            before = arg.state
            if arg.apply(event):
                self.state += arg.state - before
                modified = True
        return modified


PersistentExpression = Union[PersistentNumber, PersistentReference, PersistentSum]


def check_exclusive(root: PersistentExpression) -> None:
    """Reject trees in which one node object appears more than once.

    Raises:
        ValueError: If some node is reachable along two paths.
    """
    seen: set[int] = set()
    stack: list[PersistentExpression] = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            raise ValueError(f"Node {node!r} appears more than once in the tree")
        seen.add(id(node))
        if isinstance(node, PersistentSum):
            stack.extend(node.args)


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def to_persistent(expr: Expression) -> PersistentExpression:
    """Build the structurally equivalent persistent tree.

    States are placeholders until ``init`` is called on the result.
    """
    if isinstance(expr, Number):
        return PersistentNumber(expr.value)
    if isinstance(expr, Reference):
        return PersistentReference(expr.table, expr.x, expr.y)
    if isinstance(expr, Sum):
        return PersistentSum([to_persistent(arg) for arg in expr.args])
    raise TypeError(f"Not an expression node: {expr!r}")


def to_expression(expr: PersistentExpression) -> Expression:
    """Drop cached state and return the equivalent stateless tree."""
    if isinstance(expr, PersistentNumber):
        return Number(expr.value)
    if isinstance(expr, PersistentReference):
        return Reference(expr.table, expr.x, expr.y)
    if isinstance(expr, PersistentSum):
        return Sum(*(to_expression(arg) for arg in expr.args))
    raise TypeError(f"Not a persistent expression node: {expr!r}")


def iter_states(expr: PersistentExpression) -> Iterable[tuple[PersistentExpression, int]]:
    """Yield ``(node, state)`` for every node, depth first, parents first."""
    yield expr, expr.state
    if isinstance(expr, PersistentSum):
        for arg in expr.args:
            yield from iter_states(arg)
