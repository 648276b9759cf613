"""
Lead Repository and Seller Directory.

Read-only access to leads, their activities and the seller roster. Rows are
classified as they are loaded (see scripts.metrics.classifier).

Two implementations of each protocol:
    Supabase*   the live store; seller and timestamp filters are pushed down
    InMemory*   rows held in memory (offline reports from a JSON export, tests)

Usage:
    repo = SupabaseLeadRepository()
    for lead in repo.list_leads(seller="Ana"):
        activities = repo.list_activities(lead, window)
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from models.metrics_models import Activity, Lead
from scripts.lib.dates import NO_WINDOW, DateWindow
from scripts.lib.errors import NotFoundError, UpstreamReadError
from scripts.lib.logger import setup_logger
from scripts.lib.settings import get_settings
from scripts.lib.supabase_client import select_one, select_rows
from scripts.metrics.classifier import LEAD_FIELD_ALIASES, classify_activity, classify_lead

logger = setup_logger(__name__)

ID_COLUMN = "id"
LEAD_ID_COLUMN = "lead_id"
TIMESTAMP_COLUMN = "timestamp"
SELLERS_KEY = "sellers"


@runtime_checkable
class LeadRepository(Protocol):
    def list_leads(self, seller: Optional[str] = None) -> List[Lead]:
        """All leads, or only those whose seller equals `seller`."""
        ...

    def list_activities(self, lead: Lead, window: DateWindow = NO_WINDOW) -> List[Activity]:
        """Activities of one lead with timestamp inside the window."""
        ...


@runtime_checkable
class SellerDirectory(Protocol):
    def list_sellers(self) -> List[str]:
        """Every known seller name, including the no-seller sentinel."""
        ...


def _roster(value: Any) -> List[str]:
    """Seller names from a config value: a list, or an object holding `list`."""
    if isinstance(value, str):
        value = json.loads(value)
    if isinstance(value, Mapping):
        value = value.get("list") or []
    return [str(name) for name in (value or [])]


# ─── Supabase ───────────────────────────────────────────────

class SupabaseLeadRepository:
    """Leads table plus an activities table keyed by lead_id."""

    def __init__(
        self,
        client=None,
        leads_table: str = None,
        activities_table: str = None,
        seller_column: str = None,
    ):
        settings = get_settings()
        self.client = client
        self.leads_table = leads_table or settings.leads_table
        self.activities_table = activities_table or settings.activities_table
        self.seller_column = seller_column or settings.seller_column

    def list_leads(self, seller: Optional[str] = None) -> List[Lead]:
        eq = {self.seller_column: seller} if seller is not None else None
        rows = select_rows(self.leads_table, eq=eq, order_by=ID_COLUMN, client=self.client)
        logger.debug("Loaded %d leads (seller=%s)", len(rows), seller)
        return [classify_lead(row) for row in rows]

    def list_activities(self, lead: Lead, window: DateWindow = NO_WINDOW) -> List[Activity]:
        if lead.id is None:
            return []
        gte, lte = window.as_query_bounds()
        rows = select_rows(
            self.activities_table,
            eq={LEAD_ID_COLUMN: lead.id},
            gte={TIMESTAMP_COLUMN: gte} if gte else None,
            lte={TIMESTAMP_COLUMN: lte} if lte else None,
            order_by=ID_COLUMN,
            client=self.client,
        )
        return [classify_activity(row) for row in rows]


class SupabaseSellerDirectory:
    """Roster stored as the `sellers` row of the key/value config table."""

    def __init__(self, client=None, config_table: str = None):
        self.client = client
        self.config_table = config_table or get_settings().config_table

    def list_sellers(self) -> List[str]:
        row = select_one(self.config_table, "key", SELLERS_KEY, client=self.client)
        if row is None:
            raise NotFoundError("Seller directory document not found", resource=SELLERS_KEY)
        try:
            return _roster(row.get("value"))
        except (ValueError, TypeError) as e:
            raise UpstreamReadError(self.config_table, e) from e


# ─── In-memory ──────────────────────────────────────────────

class InMemoryLeadRepository:
    """Leads and activities held in memory; filters applied on read."""

    def __init__(self, leads: Iterable[Lead] = ()):
        self._leads: List[Lead] = []
        self._activities: Dict[str, List[Activity]] = {}
        for index, lead in enumerate(leads):
            lead_id = lead.id if lead.id is not None else f"lead-{index}"
            self._activities[lead_id] = list(lead.activities)
            self._leads.append(lead.model_copy(update={"id": lead_id, "activities": []}))

    @classmethod
    def from_rows(
        cls,
        lead_rows: Iterable[Mapping[str, Any]],
        activity_rows: Iterable[Mapping[str, Any]] = (),
    ) -> "InMemoryLeadRepository":
        """Build from raw rows; activity rows reference their lead via lead_id."""
        by_lead: Dict[str, List[Activity]] = {}
        for row in activity_rows:
            by_lead.setdefault(str(row.get(LEAD_ID_COLUMN)), []).append(classify_activity(row))

        leads = []
        for row in lead_rows:
            nested = [classify_activity(a) for a in row.get("activities") or []]
            lead_id = str(row.get("id")) if row.get("id") is not None else None
            leads.append(classify_lead(row, nested + by_lead.get(lead_id, [])))
        return cls(leads)

    def list_leads(self, seller: Optional[str] = None) -> List[Lead]:
        if seller is None:
            return list(self._leads)
        return [lead for lead in self._leads if lead.seller == seller]

    def list_activities(self, lead: Lead, window: DateWindow = NO_WINDOW) -> List[Activity]:
        return [a for a in self._activities.get(lead.id, []) if window.contains(a.timestamp)]


class InMemorySellerDirectory:
    """A fixed roster; None means the directory document does not exist."""

    def __init__(self, sellers: Optional[Iterable[str]] = None):
        self._sellers = list(sellers) if sellers is not None else None

    def list_sellers(self) -> List[str]:
        if self._sellers is None:
            raise NotFoundError("Seller directory document not found", resource=SELLERS_KEY)
        return list(self._sellers)


def load_export(path: str | Path):
    """
    Read a JSON export into in-memory repositories.

    Expected shape:
        {"leads": [...], "activities": [...], "sellers": [...]}
    Activities may also be nested under each lead. When "sellers" is absent
    the roster is derived from the leads' seller fields.

    Returns:
        (InMemoryLeadRepository, InMemorySellerDirectory)
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise UpstreamReadError(str(path), e) from e

    lead_rows = data.get("leads") or []
    repo = InMemoryLeadRepository.from_rows(lead_rows, data.get("activities") or [])

    sellers = data.get("sellers")
    if sellers is None:
        seen: Dict[str, None] = {}
        for row in lead_rows:
            for alias in LEAD_FIELD_ALIASES["seller"]:
                if row.get(alias):
                    seen.setdefault(str(row[alias]), None)
                    break
        sellers = list(seen)

    logger.info("Loaded export %s: %d leads, %d sellers", path, len(lead_rows), len(sellers))
    return repo, InMemorySellerDirectory(sellers)
