"""Tree-walking evaluator for stateless expressions.

Every call re-evaluates the whole tree; nothing is cached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from deltacalc.expressions.nodes import Expression, Number, Reference, Sum

if TYPE_CHECKING:
    from deltacalc.tables import TableSet


def resolve_reference(table_set: TableSet, table: str, x: int, y: int) -> int:
    """Strictly resolve one cell.

    Raises:
        MissingTableError: If *table* is not in *table_set*.
        MissingCellError: If ``(x, y)`` is outside the table.
    """
    return table_set.lookup(table, x, y)


def evaluate_expression(expr: Expression, table_set: TableSet) -> int:
    """Evaluate *expr* against *table_set*.

    Args:
        expr: Root of a stateless expression tree.
        table_set: Tables that references resolve against.

    Returns:
        The integer value of the tree.

    Raises:
        ReferenceResolutionError: If any reference points at a missing
            table or cell.
    """
    if isinstance(expr, Number):
        return expr.value
    if isinstance(expr, Reference):
        return resolve_reference(table_set, expr.table, expr.x, expr.y)
    if isinstance(expr, Sum):
        total = 0
        for arg in expr.args:
            total = total + evaluate_expression(arg, table_set)
        return total
    raise TypeError(f"Not an expression node: {expr!r}")
