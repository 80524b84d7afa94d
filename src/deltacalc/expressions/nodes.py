"""Stateless expression trees.

Three node kinds exist: ``Number``, ``Reference`` and ``Sum``.  The set is
closed; code that dispatches on node kind handles all three and rejects
anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Number:
    """Integer literal."""

    value: int


@dataclass(frozen=True)
class Reference:
    """Cell ``(x, y)`` of the table named ``table``."""

    table: str
    x: int
    y: int

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.table, self.x, self.y)


@dataclass(frozen=True)
class Sum:
    """Sum of the child expressions, folded left to right."""

    args: tuple[Expression, ...]

    def __init__(self, *args: Expression) -> None:
        object.__setattr__(self, "args", tuple(args))


Expression = Union[Number, Reference, Sum]
