"""Tests for seller goals."""

import pytest

from scripts.lib.errors import ValidationError
from scripts.metrics.goals import (
    DEFAULT_GOALS,
    InMemoryGoalsStore,
    get_goals,
    merge_goals,
    set_goals,
)


class TestMergeGoals:
    def test_shallow_replace(self):
        merged = merge_goals(DEFAULT_GOALS, {"daily": {"calls": 30}})
        assert merged["daily"] == {"calls": 30}
        assert merged["weekly"] == DEFAULT_GOALS["weekly"]

    def test_inputs_untouched(self):
        update = {"monthly": {"sales": 10}}
        merge_goals(DEFAULT_GOALS, update)["monthly"]["sales"] = 99
        assert DEFAULT_GOALS["monthly"]["sales"] == 8
        assert update == {"monthly": {"sales": 10}}

    def test_none_inputs(self):
        assert merge_goals(None, None) == {}


class TestGoalsService:
    def test_defaults_when_nothing_stored(self):
        assert get_goals(InMemoryGoalsStore(), "Ana") == DEFAULT_GOALS

    def test_stored_values_override_defaults(self):
        store = InMemoryGoalsStore({"Ana": {"weekly": {"calls": 150}}})
        goals = get_goals(store, "Ana")
        assert goals["weekly"] == {"calls": 150}
        assert goals["daily"] == DEFAULT_GOALS["daily"]

    def test_set_then_get(self):
        store = InMemoryGoalsStore()
        returned = set_goals(store, "Ana", {"daily": {"calls": 30}})
        assert returned["daily"] == {"calls": 30}
        assert get_goals(store, "Ana") == returned

    def test_later_write_replaces_whole_period(self):
        store = InMemoryGoalsStore()
        set_goals(store, "Ana", {"daily": {"calls": 30, "sales": 1}})
        set_goals(store, "Ana", {"daily": {"calls": 40}, "weekly": {"sales": 3}})
        goals = get_goals(store, "Ana")
        assert goals["daily"] == {"calls": 40}
        assert goals["weekly"] == {"sales": 3}

    def test_sellers_are_independent(self):
        store = InMemoryGoalsStore()
        set_goals(store, "Ana", {"daily": {"calls": 1}})
        assert get_goals(store, "Bruno") == DEFAULT_GOALS

    def test_values_not_range_checked(self):
        store = InMemoryGoalsStore()
        assert set_goals(store, "Ana", {"daily": {"calls": -5}})["daily"]["calls"] == -5

    def test_missing_seller_rejected(self):
        with pytest.raises(ValidationError):
            get_goals(InMemoryGoalsStore(), "")
        with pytest.raises(ValidationError):
            set_goals(InMemoryGoalsStore(), "", {})

    def test_non_object_body_rejected(self):
        with pytest.raises(ValidationError):
            set_goals(InMemoryGoalsStore(), "Ana", ["daily"])
