"""
Seller goals.

Target values per seller and period. Reads merge whatever is stored shallowly
over DEFAULT_GOALS; writes merge the partial update shallowly over what is
stored (last write wins per period). Values are not range-checked.
"""
from __future__ import annotations

import copy
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from scripts.lib.errors import UpstreamReadError, ValidationError
from scripts.lib.logger import setup_logger
from scripts.lib.settings import get_settings
from scripts.lib.supabase_client import select_one, upsert_row

logger = setup_logger(__name__)

GoalSet = Dict[str, Any]

DEFAULT_GOALS: GoalSet = {
    "daily": {"calls": 20, "meetingsScheduled": 2, "sales": 0},
    "weekly": {"calls": 100, "meetingsScheduled": 10, "sales": 2},
    "monthly": {"calls": 400, "meetingsScheduled": 40, "sales": 8},
}


def merge_goals(base: Optional[GoalSet], update: Optional[GoalSet]) -> GoalSet:
    """Shallow merge: top-level keys of update replace those of base."""
    merged = copy.deepcopy(base or {})
    merged.update(copy.deepcopy(update or {}))
    return merged


@runtime_checkable
class GoalsStore(Protocol):
    def get(self, seller: str) -> Optional[GoalSet]:
        """Stored goals, or None when nothing is stored for the seller."""
        ...

    def set_merge(self, seller: str, partial: GoalSet) -> None:
        ...


def get_goals(store: GoalsStore, seller: str) -> GoalSet:
    """Goals for a seller, stored values over the defaults."""
    if not seller:
        raise ValidationError("Parameter seller is required", field="seller")
    return merge_goals(DEFAULT_GOALS, store.get(seller))


def set_goals(store: GoalsStore, seller: str, partial: GoalSet) -> GoalSet:
    """Persist a partial update and return the effective goals."""
    if not seller:
        raise ValidationError("Parameter seller is required", field="seller")
    if not isinstance(partial, dict):
        raise ValidationError("Goals body must be a JSON object", field="goals")
    store.set_merge(seller, partial)
    logger.info("Goals updated for %s: %s", seller, ", ".join(sorted(partial)) or "nothing")
    return get_goals(store, seller)


class SupabaseGoalsStore:
    """One row per seller: (seller, goals jsonb)."""

    def __init__(self, client=None, table: str = None):
        self.client = client
        self.table = table or get_settings().goals_table

    def get(self, seller: str) -> Optional[GoalSet]:
        row = select_one(self.table, "seller", seller, client=self.client)
        if row is None:
            return None
        goals = row.get("goals")
        if goals is not None and not isinstance(goals, dict):
            raise UpstreamReadError(self.table, TypeError(f"goals for {seller} is not an object"))
        return goals

    def set_merge(self, seller: str, partial: GoalSet) -> None:
        stored = self.get(seller)
        upsert_row(
            self.table,
            {"seller": seller, "goals": merge_goals(stored, partial)},
            on_conflict="seller",
            client=self.client,
        )


class InMemoryGoalsStore:
    def __init__(self, goals: Optional[Dict[str, GoalSet]] = None):
        self._goals: Dict[str, GoalSet] = copy.deepcopy(goals or {})

    def get(self, seller: str) -> Optional[GoalSet]:
        stored = self._goals.get(seller)
        return copy.deepcopy(stored) if stored is not None else None

    def set_merge(self, seller: str, partial: GoalSet) -> None:
        self._goals[seller] = merge_goals(self._goals.get(seller), partial)
