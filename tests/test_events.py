"""Tests for table event models and parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from deltacalc.expressions.errors import EventValidationError
from deltacalc.expressions.events import SetValue, parse_event, parse_events


class TestSetValue:
    def test_fields_and_key(self):
        evt = SetValue(table="t1", x=1, y=0, value=3)
        assert evt.kind == "set_value"
        assert evt.key == ("t1", 1, 0)

    def test_is_frozen(self):
        evt = SetValue(table="t1", x=1, y=0, value=3)
        with pytest.raises(ValidationError):
            evt.value = 4

    def test_negative_coordinates_rejected(self):
        with pytest.raises(ValidationError):
            SetValue(table="t1", x=-1, y=0, value=3)
        with pytest.raises(ValidationError):
            SetValue(table="t1", x=0, y=-2, value=3)

    def test_events_compare_by_value(self):
        assert SetValue(table="t1", x=1, y=0, value=3) == SetValue(table="t1", x=1, y=0, value=3)


class TestParseEvent:
    def test_parse_set_value(self):
        evt = parse_event({"kind": "set_value", "table": "t1", "x": 1, "y": 0, "value": 3})
        assert isinstance(evt, SetValue)
        assert evt.key == ("t1", 1, 0)
        assert evt.value == 3

    def test_kind_defaults_to_set_value(self):
        evt = parse_event({"table": "t1", "x": 0, "y": 0, "value": 1})
        assert isinstance(evt, SetValue)

    def test_unknown_kind_rejected(self):
        with pytest.raises(EventValidationError):
            parse_event({"kind": "insert_row", "table": "t1", "y": 0})

    def test_missing_field_rejected(self):
        with pytest.raises(EventValidationError, match="Invalid table event"):
            parse_event({"kind": "set_value", "table": "t1", "x": 0})

    def test_parse_events_preserves_order(self):
        events = parse_events([
            {"table": "t1", "x": 0, "y": 0, "value": 1},
            {"table": "t2", "x": 1, "y": 0, "value": 2},
        ])
        assert [e.table for e in events] == ["t1", "t2"]
