"""Reverse index from cell keys to the reference leaves that read them."""

from __future__ import annotations

from collections import Counter
from typing import Iterator, Union

from deltacalc.expressions.events import SetValue, TableEvent
from deltacalc.expressions.nodes import Expression, Number, Reference, Sum
from deltacalc.expressions.persistent import (
    PersistentExpression,
    PersistentNumber,
    PersistentReference,
    PersistentSum,
)

CellKey = tuple[str, int, int]

AnyExpression = Union[Expression, PersistentExpression]


def iter_references(expr: AnyExpression) -> Iterator[Reference | PersistentReference]:
    """Yield every reference leaf of *expr*, depth first, left to right.

    Works on both stateless and persistent trees.
    """
    stack: list[AnyExpression] = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, (Reference, PersistentReference)):
            yield node
        elif isinstance(node, (Sum, PersistentSum)):
            stack.extend(reversed(node.args))
        elif not isinstance(node, (Number, PersistentNumber)):
            raise TypeError(f"Not an expression node: {node!r}")


def collect_references(expr: AnyExpression) -> set[CellKey]:
    """Return the set of ``(table, x, y)`` keys referenced by *expr*."""
    return {ref.key for ref in iter_references(expr)}


class DependencyIndex:
    """Counts how many reference leaves read each cell.

    Usage::

        index = DependencyIndex.build(expr)
        if index.affects(event):
            expr.apply(event)
    """

    __slots__ = ("_counts",)

    def __init__(self) -> None:
        # (table, x, y) -> number of leaves reading that cell
        self._counts: Counter[CellKey] = Counter()

    @classmethod
    def build(cls, expr: AnyExpression) -> DependencyIndex:
        index = cls()
        for ref in iter_references(expr):
            index._counts[ref.key] += 1
        return index

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, key: object) -> bool:
        return key in self._counts

    def count(self, key: CellKey) -> int:
        return self._counts.get(key, 0)

    def tables(self) -> list[str]:
        """Sorted names of every table the expression reads."""
        return sorted({table for table, _, _ in self._counts})

    def affects(self, event: TableEvent) -> bool:
        """True if some reference leaf matches the event's target cell.

        Event kinds without a single target cell are assumed to affect
        the tree.
        """
        if isinstance(event, SetValue):
            return event.key in self._counts
        return True
