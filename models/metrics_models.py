"""
CRM Sales Metrics — Pydantic Models
=====================================

Domain records (leads and their activities, already classified) and the
request/response shapes of the report endpoints. JSON keys are camelCase.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ─── Classification Variants ────────────────────────────────

class ActivityKind(str, Enum):
    CALL = "call"
    STAGE_CHANGE = "stage_change"
    OTHER = "other"


class CallOutcome(str, Enum):
    CONNECTION = "connection"
    DECISION_MAKER = "decision_maker"
    NO_CONNECTION = "no_connection"


class StageTarget(str, Enum):
    """Pipeline stage a lead sits in or an activity moved it to."""
    SOLD = "sold"
    MEETING_DONE = "meeting_done"
    MEETING_SCHEDULED = "meeting_scheduled"
    NONE = "none"


# ─── Domain Records ─────────────────────────────────────────

class Activity(CamelModel):
    """A timestamped event on a lead, classified once at load time."""
    id: Optional[str] = None
    type: str = ""
    outcome: str = ""
    timestamp: Optional[datetime] = None
    kind: ActivityKind = ActivityKind.OTHER
    call_outcome: Optional[CallOutcome] = None
    stage_targets: List[StageTarget] = Field(default_factory=list)


class Lead(CamelModel):
    """A lead with its current stage and the activities loaded for it."""
    id: Optional[str] = None
    seller: str = ""
    stage: str = ""
    category: str = "Uncategorized"
    last_stage_change: Optional[datetime] = None
    stage_target: StageTarget = StageTarget.NONE
    activities: List[Activity] = Field(default_factory=list)


# ─── Report Shapes ──────────────────────────────────────────

class MetricsCounters(CamelModel):
    """The six counters every aggregation produces."""
    calls: int = 0
    connections: int = 0
    decision_maker_connections: int = 0
    meetings_scheduled: int = 0
    meetings_completed: int = 0
    sales: int = 0

    def value_of(self, metric: str) -> int:
        """Counter by its public name (e.g. "meetingsCompleted"); unknown names read 0."""
        attr = METRIC_FIELDS.get(metric)
        if attr is None:
            return 0
        return getattr(self, attr)


METRIC_FIELDS: Dict[str, str] = {
    to_camel(name): name for name in MetricsCounters.model_fields
}


class SellerMetrics(CamelModel):
    seller_name: str
    metrics: MetricsCounters


class HistoricalPoint(CamelModel):
    date: str
    value: int


class RankingEntry(CamelModel):
    seller: str
    value: int


class CategoryReport(CamelModel):
    category: str
    total_leads: int
    metrics: MetricsCounters
    conversion_rate: float


class DashboardPayload(CamelModel):
    """Combined view: primary metrics plus the three derived reports."""
    seller_name: str
    metrics: MetricsCounters
    historical: List[HistoricalPoint] = Field(default_factory=list)
    ranking: List[RankingEntry] = Field(default_factory=list)
    categories: List[CategoryReport] = Field(default_factory=list)


# ─── Goals ──────────────────────────────────────────────────

class GoalsResponse(CamelModel):
    seller: str
    goals: Dict[str, Any]


class ErrorResponse(BaseModel):
    error: str
    code: str
