"""
Activity and lead classification.

Raw rows from the store carry free text: an activity type label, an outcome
label or a sentence like "Stage moved to Sold". Classification turns them into
the closed variants in models.metrics_models once, when rows are loaded, so
aggregation never inspects strings.

Both the English labels and the legacy Portuguese labels written by the
older CRM front end are recognised.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from models.metrics_models import (
    Activity,
    ActivityKind,
    CallOutcome,
    Lead,
    StageTarget,
)
from scripts.lib.dates import parse_timestamp

DEFAULT_CATEGORY = "Uncategorized"

CALL_TYPES = frozenset({"Call", "Ligação"})
STAGE_CHANGE_TYPES = frozenset({"StageChanged", "Etapa Alterada"})

CONNECTION_OUTCOMES = frozenset({"ConnectionMade", "Conexão Realizada"})
DECISION_MAKER_OUTCOMES = frozenset({"ConnectionWithDecisionMaker", "Conexão com Decisor"})

# Substring matched in a StageChanged outcome sentence.
TRANSITION_PHRASES = (
    ("to Sold", StageTarget.SOLD),
    ("para Vendido", StageTarget.SOLD),
    ("to MeetingScheduled-Done", StageTarget.MEETING_DONE),
    ("para R1 - Feita", StageTarget.MEETING_DONE),
    ("to MeetingScheduled-Scheduled", StageTarget.MEETING_SCHEDULED),
    ("para R1 - Agendada", StageTarget.MEETING_SCHEDULED),
)

# Exact value of a lead's current stage field.
STAGE_VALUES = {
    "Sold": StageTarget.SOLD,
    "Vendido": StageTarget.SOLD,
    "MeetingDone": StageTarget.MEETING_DONE,
    "R1 - Feita": StageTarget.MEETING_DONE,
    "MeetingScheduled": StageTarget.MEETING_SCHEDULED,
    "R1 - Agendada": StageTarget.MEETING_SCHEDULED,
}

LEAD_FIELD_ALIASES = {
    "seller": ("seller", "vendedor"),
    "stage": ("stage", "etapa"),
    "category": ("category", "categoria"),
    "last_stage_change": ("lastStageChange", "last_stage_change"),
}


def _first(row: Mapping[str, Any], names: Iterable[str]) -> Any:
    for name in names:
        value = row.get(name)
        if value not in (None, ""):
            return value
    return None


def classify_call_outcome(outcome: str) -> CallOutcome:
    if outcome in DECISION_MAKER_OUTCOMES:
        return CallOutcome.DECISION_MAKER
    if outcome in CONNECTION_OUTCOMES:
        return CallOutcome.CONNECTION
    return CallOutcome.NO_CONNECTION


def classify_transitions(outcome: str) -> List[StageTarget]:
    """
    Every target stage named in a StageChanged sentence, in phrase order.

    Each phrase is checked on its own, so a sentence naming two targets counts
    toward both. Empty when no phrase matches.
    """
    targets: List[StageTarget] = []
    for phrase, target in TRANSITION_PHRASES:
        if phrase in outcome and target not in targets:
            targets.append(target)
    return targets


def classify_stage(stage: Optional[str]) -> StageTarget:
    return STAGE_VALUES.get((stage or "").strip(), StageTarget.NONE)


def classify_activity(row: Mapping[str, Any]) -> Activity:
    """Build a classified Activity from a raw store row."""
    activity_type = str(row.get("type") or "")
    outcome = str(row.get("outcome") or "")

    kind = ActivityKind.OTHER
    call_outcome = None
    stage_targets: List[StageTarget] = []

    if activity_type in CALL_TYPES:
        kind = ActivityKind.CALL
        call_outcome = classify_call_outcome(outcome)
    elif activity_type in STAGE_CHANGE_TYPES:
        kind = ActivityKind.STAGE_CHANGE
        stage_targets = classify_transitions(outcome)

    activity_id = row.get("id")
    return Activity(
        id=str(activity_id) if activity_id is not None else None,
        type=activity_type,
        outcome=outcome,
        timestamp=parse_timestamp(row.get("timestamp")),
        kind=kind,
        call_outcome=call_outcome,
        stage_targets=stage_targets,
    )


def classify_lead(row: Mapping[str, Any], activities: Iterable[Activity] = ()) -> Lead:
    """Build a classified Lead from a raw store row and its loaded activities."""
    stage = _first(row, LEAD_FIELD_ALIASES["stage"]) or ""
    category = _first(row, LEAD_FIELD_ALIASES["category"]) or DEFAULT_CATEGORY
    lead_id = row.get("id")

    return Lead(
        id=str(lead_id) if lead_id is not None else None,
        seller=_first(row, LEAD_FIELD_ALIASES["seller"]) or "",
        stage=str(stage),
        category=str(category),
        last_stage_change=parse_timestamp(_first(row, LEAD_FIELD_ALIASES["last_stage_change"])),
        stage_target=classify_stage(str(stage)),
        activities=list(activities),
    )

