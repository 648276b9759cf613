"""
Metrics Aggregator
==================

Pure computation from (leads with their activities, date window) to the six
sales counters. Nothing here reads the store or keeps state between calls.

Stage counters (sales, meetingsCompleted, meetingsScheduled) have two
counting strategies, picked by a StageCountingPolicy and never combined:

    current-state   one increment per lead from the lead's current stage,
                    gated by lastStageChange when both it and a window exist
    event-log       one increment per StageChanged activity inside the window
                    whose outcome names the target stage

Call counters (calls, connections, decisionMakerConnections) always come from
Call activities inside the window.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Union

from models.metrics_models import (
    ActivityKind,
    CallOutcome,
    Lead,
    MetricsCounters,
    StageTarget,
)
from scripts.lib.dates import NO_WINDOW, DateWindow

STAGE_COUNTER = {
    StageTarget.SOLD: "sales",
    StageTarget.MEETING_DONE: "meetings_completed",
    StageTarget.MEETING_SCHEDULED: "meetings_scheduled",
}


class StageCountingPolicy:
    """Decides how a lead contributes to the stage counters."""

    name: str = ""

    def count_stages(self, lead: Lead, window: DateWindow, counts: Dict[str, int]) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class CurrentStatePolicy(StageCountingPolicy):
    """Count the lead's current stage once."""

    name = "current-state"

    def count_stages(self, lead: Lead, window: DateWindow, counts: Dict[str, int]) -> None:
        counter = STAGE_COUNTER.get(lead.stage_target)
        if counter is None:
            return
        # Leads without lastStageChange are counted whatever the window.
        if lead.last_stage_change is not None and not window.contains(lead.last_stage_change):
            return
        counts[counter] += 1


class EventLogPolicy(StageCountingPolicy):
    """Count every in-window StageChanged activity naming a target stage."""

    name = "event-log"

    def count_stages(self, lead: Lead, window: DateWindow, counts: Dict[str, int]) -> None:
        for activity in lead.activities:
            if activity.kind is not ActivityKind.STAGE_CHANGE:
                continue
            if not window.contains(activity.timestamp):
                continue
            for target in activity.stage_targets:
                counts[STAGE_COUNTER[target]] += 1


POLICIES = {
    CurrentStatePolicy.name: CurrentStatePolicy(),
    EventLogPolicy.name: EventLogPolicy(),
}


def get_policy(policy: Union[str, StageCountingPolicy, None] = None) -> StageCountingPolicy:
    """Resolve a policy name (or pass an instance through); default current-state."""
    if isinstance(policy, StageCountingPolicy):
        return policy
    name = policy or CurrentStatePolicy.name
    try:
        return POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown stage counting policy '{name}' (expected one of {', '.join(POLICIES)})"
        )


def _count_calls(lead: Lead, window: DateWindow, counts: Dict[str, int]) -> None:
    for activity in lead.activities:
        if activity.kind is not ActivityKind.CALL:
            continue
        if not window.contains(activity.timestamp):
            continue
        counts["calls"] += 1
        if activity.call_outcome is CallOutcome.CONNECTION:
            counts["connections"] += 1
        elif activity.call_outcome is CallOutcome.DECISION_MAKER:
            counts["connections"] += 1
            counts["decision_maker_connections"] += 1


def aggregate(
    leads: Iterable[Lead],
    window: Optional[DateWindow] = None,
    policy: Union[str, StageCountingPolicy, None] = None,
) -> MetricsCounters:
    """
    Compute the six counters for a set of leads.

    Activities are filtered against the window here as well, so results are
    the same whether or not the repository already pushed the range filter
    down to the store.

    Args:
        leads: Leads with their activities attached.
        window: Inclusive date window (default: no bounds).
        policy: StageCountingPolicy or its name (default "current-state").

    Returns:
        MetricsCounters; all zero for an empty input.
    """
    window = window or NO_WINDOW
    stage_policy = get_policy(policy)
    counts: Dict[str, int] = {name: 0 for name in MetricsCounters.model_fields}

    for lead in leads:
        stage_policy.count_stages(lead, window, counts)
        _count_calls(lead, window, counts)

    return MetricsCounters(**counts)


def conversion_rate(metrics: MetricsCounters) -> float:
    """Sales per completed meeting, as a percentage with one decimal; 0 without meetings."""
    if metrics.meetings_completed <= 0:
        return 0.0
    return round(metrics.sales / metrics.meetings_completed * 100, 1)


# ─── Per-day series ─────────────────────────────────────────

def _is_call(activity) -> bool:
    return activity.kind is ActivityKind.CALL


def _is_connection(activity) -> bool:
    return _is_call(activity) and activity.call_outcome in (
        CallOutcome.CONNECTION, CallOutcome.DECISION_MAKER,
    )


def _is_decision_maker(activity) -> bool:
    return _is_call(activity) and activity.call_outcome is CallOutcome.DECISION_MAKER


def _moved_to(target: StageTarget):
    def predicate(activity) -> bool:
        return activity.kind is ActivityKind.STAGE_CHANGE and target in activity.stage_targets
    return predicate


# Which activities count toward each metric in a per-day series.
EVENT_PREDICATES = {
    "sales": _moved_to(StageTarget.SOLD),
    "meetingsCompleted": _moved_to(StageTarget.MEETING_DONE),
    "meetingsScheduled": _moved_to(StageTarget.MEETING_SCHEDULED),
    "calls": _is_call,
    "connections": _is_connection,
    "decisionMakerConnections": _is_decision_maker,
}


def daily_counts(
    leads: Iterable[Lead],
    metric: str,
    window: Optional[DateWindow] = None,
) -> Dict[str, int]:
    """
    Count qualifying activities per calendar day, keyed "YYYY-MM-DD".

    The day is the timestamp's own date, in whatever zone it was stored with.
    Days without qualifying activities are absent; an unsupported metric gives
    an empty dict.
    """
    window = window or NO_WINDOW
    predicate = EVENT_PREDICATES.get(metric)
    if predicate is None:
        return {}

    by_day: Dict[str, int] = {}
    for lead in leads:
        for activity in lead.activities:
            if activity.timestamp is None or not window.contains(activity.timestamp):
                continue
            if predicate(activity):
                day = activity.timestamp.date().isoformat()
                by_day[day] = by_day.get(day, 0) + 1
    return dict(sorted(by_day.items()))
