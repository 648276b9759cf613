"""
Report Composer
===============

Builds the report views by loading lead partitions from the repository and
running the aggregator over each one:

    seller_metrics      one seller (or the whole team) -> {sellerName, metrics}
    historical_series   per-day counts of one metric, ascending by date
    ranking             every rostered seller by one counter, descending
    category_breakdown  leads grouped by category with a conversion rate
    dashboard           all of the above in one payload

Repository calls are blocking, so they run in worker threads and independent
partitions are gathered concurrently. Any failing read fails the whole view.

Usage:
    composer = ReportComposer(SupabaseLeadRepository(), SupabaseSellerDirectory())
    payload = await composer.dashboard("Ana", DateWindow.from_strings("2024-01-01", "2024-01-31"))
"""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

from models.metrics_models import (
    CategoryReport,
    DashboardPayload,
    HistoricalPoint,
    Lead,
    METRIC_FIELDS,
    RankingEntry,
    SellerMetrics,
)
from scripts.lib.dates import NO_WINDOW, DateWindow
from scripts.lib.errors import NotFoundError, ValidationError
from scripts.lib.logger import setup_logger
from scripts.lib.settings import Settings, get_settings
from scripts.metrics.aggregator import (
    EVENT_PREDICATES,
    StageCountingPolicy,
    aggregate,
    conversion_rate,
    daily_counts,
    get_policy,
)
from scripts.metrics.classifier import DEFAULT_CATEGORY
from scripts.metrics.repository import LeadRepository, SellerDirectory

logger = setup_logger(__name__)

DASHBOARD_METRIC = "sales"


class ReportComposer:
    """Composes report views over a lead repository and a seller roster."""

    def __init__(
        self,
        repository: LeadRepository,
        directory: SellerDirectory,
        policy: StageCountingPolicy | str | None = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = repository
        self.directory = directory
        self.policy = get_policy(policy or self.settings.stage_counting_policy)

    # ─── Loading ────────────────────────────────────────────

    def _seller_filter(self, seller_name: Optional[str]) -> Optional[str]:
        if seller_name is None or seller_name == self.settings.team_sentinel:
            return None
        return seller_name

    def _display_name(self, seller_name: Optional[str]) -> str:
        if seller_name is None or seller_name == self.settings.team_sentinel:
            return self.settings.team_display_name
        return seller_name

    async def _attach_activities(self, lead: Lead, window: DateWindow) -> Lead:
        activities = await asyncio.to_thread(self.repository.list_activities, lead, window)
        return lead.model_copy(update={"activities": activities})

    async def load_leads(self, seller_name: Optional[str], window: DateWindow = NO_WINDOW) -> List[Lead]:
        """Leads of one seller (all leads for None or the team sentinel) with in-window activities."""
        leads = await asyncio.to_thread(self.repository.list_leads, self._seller_filter(seller_name))
        return list(await asyncio.gather(*(self._attach_activities(lead, window) for lead in leads)))

    # ─── Validation ─────────────────────────────────────────

    def _check_metric(self, metric: Optional[str], supported) -> str:
        if not metric:
            raise ValidationError("Parameter metric is required", field="metric")
        if self.settings.strict_metrics and metric not in supported:
            raise ValidationError(
                f"Unknown metric '{metric}' (expected one of {', '.join(supported)})",
                field="metric",
            )
        return metric

    @staticmethod
    def _require_window(window: DateWindow) -> None:
        if window.start is None or window.end is None:
            raise ValidationError(
                "Parameters startDate and endDate are required", field="startDate",
            )

    # ─── Views ──────────────────────────────────────────────

    async def seller_metrics(self, seller_name: str, window: DateWindow = NO_WINDOW) -> SellerMetrics:
        if not seller_name:
            raise ValidationError("Parameter sellerName is required", field="sellerName")
        leads = await self.load_leads(seller_name, window)
        metrics = aggregate(leads, window, self.policy)
        logger.info(
            "Metrics for %s %s: %d leads, %d sales",
            seller_name, window.describe(), len(leads), metrics.sales,
        )
        return SellerMetrics(seller_name=self._display_name(seller_name), metrics=metrics)

    def _series(self, leads: List[Lead], metric: str, window: DateWindow) -> List[HistoricalPoint]:
        return [
            HistoricalPoint(date=day, value=value)
            for day, value in daily_counts(leads, metric, window).items()
        ]

    async def historical_series(
        self,
        metric: str,
        window: DateWindow,
        seller_name: Optional[str] = None,
    ) -> List[HistoricalPoint]:
        metric = self._check_metric(metric, EVENT_PREDICATES)
        self._require_window(window)
        leads = await self.load_leads(seller_name, window)
        points = self._series(leads, metric, window)
        logger.info("Historical %s for %s: %d days", metric, self._display_name(seller_name), len(points))
        return points

    async def _seller_value(self, seller: str, metric: str, window: DateWindow) -> RankingEntry:
        leads = await self.load_leads(seller, window)
        return RankingEntry(seller=seller, value=aggregate(leads, window, self.policy).value_of(metric))

    async def ranking(self, metric: str, window: DateWindow = NO_WINDOW) -> List[RankingEntry]:
        metric = self._check_metric(metric, METRIC_FIELDS)
        try:
            roster = await asyncio.to_thread(self.directory.list_sellers)
        except NotFoundError:
            logger.warning("Seller directory missing; ranking is empty")
            return []

        sellers = [s for s in roster if s != self.settings.no_seller_sentinel]
        entries = await asyncio.gather(*(self._seller_value(s, metric, window) for s in sellers))
        # sorted() is stable, ties keep roster order
        ranked = sorted(entries, key=lambda entry: entry.value, reverse=True)
        logger.info("Ranking by %s: %d sellers", metric, len(ranked))
        return ranked

    async def category_breakdown(self, window: DateWindow = NO_WINDOW) -> List[CategoryReport]:
        leads = await self.load_leads(None, window)

        buckets: Dict[str, List[Lead]] = {}
        for lead in leads:
            buckets.setdefault(lead.category or DEFAULT_CATEGORY, []).append(lead)

        reports = []
        for category, bucket in buckets.items():
            metrics = aggregate(bucket, window, self.policy)
            reports.append(CategoryReport(
                category=category,
                total_leads=len(bucket),
                metrics=metrics,
                conversion_rate=conversion_rate(metrics),
            ))

        reports.sort(key=lambda report: report.conversion_rate, reverse=True)
        logger.info("Category breakdown: %d categories over %d leads", len(reports), len(leads))
        return reports

    async def _primary(self, seller_name: str, window: DateWindow):
        leads = await self.load_leads(seller_name, window)
        return aggregate(leads, window, self.policy), self._series(leads, DASHBOARD_METRIC, window)

    async def dashboard(self, seller_name: str, window: DateWindow) -> DashboardPayload:
        """
        Combined view for the dashboard screen.

        Metrics and the sales series follow the requested seller; ranking (by
        sales) and the category breakdown always cover the whole team.
        """
        if not seller_name:
            raise ValidationError("Parameter sellerName is required", field="sellerName")
        self._require_window(window)

        (metrics, historical), ranking, categories = await asyncio.gather(
            self._primary(seller_name, window),
            self.ranking(DASHBOARD_METRIC, window),
            self.category_breakdown(window),
        )
        logger.info("Dashboard composed for %s %s", seller_name, window.describe())
        return DashboardPayload(
            seller_name=self._display_name(seller_name),
            metrics=metrics,
            historical=historical,
            ranking=ranking,
            categories=categories,
        )
