"""Tests for reference collection and the dependency index."""

from __future__ import annotations

from typing import Literal

import pytest
from pydantic import BaseModel

from deltacalc.expressions import (
    Number,
    PersistentNumber,
    PersistentReference,
    PersistentSum,
    Reference,
    SetValue,
    Sum,
)
from deltacalc.index import DependencyIndex, collect_references, iter_references


class TruncateTable(BaseModel):
    kind: Literal["truncate"] = "truncate"
    table: str


class TestIterReferences:
    def test_order_is_depth_first_left_to_right(self):
        expr = Sum(Reference("a", 0, 0), Sum(Number(1), Reference("b", 1, 0)), Reference("a", 2, 0))
        assert [r.key for r in iter_references(expr)] == [("a", 0, 0), ("b", 1, 0), ("a", 2, 0)]

    def test_persistent_tree(self):
        expr = PersistentSum([PersistentNumber(1), PersistentReference("t1", 1, 0)])
        assert collect_references(expr) == {("t1", 1, 0)}

    def test_number_only(self):
        assert collect_references(Number(3)) == set()

    def test_non_node_rejected(self):
        with pytest.raises(TypeError):
            list(iter_references(Sum(Number(1), "oops")))  # type: ignore[arg-type]


class TestDependencyIndex:
    @pytest.fixture
    def index(self) -> DependencyIndex:
        expr = Sum(Reference("t1", 0, 0), Reference("t1", 0, 0), Reference("t2", 1, 2))
        return DependencyIndex.build(expr)

    def test_counts(self, index):
        assert len(index) == 2
        assert index.count(("t1", 0, 0)) == 2
        assert index.count(("t2", 1, 2)) == 1
        assert index.count(("t3", 0, 0)) == 0
        assert ("t2", 1, 2) in index

    def test_tables(self, index):
        assert index.tables() == ["t1", "t2"]

    def test_affects_exact_match_only(self, index):
        assert index.affects(SetValue(table="t1", x=0, y=0, value=1))
        assert not index.affects(SetValue(table="t1", x=1, y=0, value=1))
        assert not index.affects(SetValue(table="t3", x=0, y=0, value=1))

    def test_other_event_kinds_assumed_relevant(self, index):
        assert index.affects(TruncateTable(table="t9"))  # type: ignore[arg-type]
