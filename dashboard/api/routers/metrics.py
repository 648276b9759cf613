"""
CRM Sales Metrics — Metrics Router
====================================
Report endpoints computed from leads and their activities.

Endpoints:
  GET /api/metrics          - Counters for one seller or the whole team
  GET /api/historical       - Per-day series of one metric
  GET /api/ranking          - Sellers ranked by one metric
  GET /api/categories       - Conversion rate per lead category
  GET /api/dashboard-data   - All of the above in one payload

Dates are ISO calendar dates (YYYY-MM-DD); endDate covers the whole day.
sellerName=team selects every lead.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from dashboard.api.deps import get_composer
from models.metrics_models import (
    CategoryReport,
    DashboardPayload,
    ErrorResponse,
    HistoricalPoint,
    RankingEntry,
    SellerMetrics,
)
from scripts.lib.dates import DateWindow
from scripts.lib.errors import ValidationError
from scripts.metrics.composer import ReportComposer

router = APIRouter(
    prefix="/api",
    tags=["metrics"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


def _require(**params) -> None:
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise ValidationError(
            f"Missing required parameters: {', '.join(missing)}",
            field=missing[0],
        )


@router.get("/metrics", response_model=SellerMetrics)
async def seller_metrics(
    seller_name: Optional[str] = Query(None, alias="sellerName", description="Seller name or 'team'"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    composer: ReportComposer = Depends(get_composer),
):
    """Six counters for a seller (or the team) over an optional window."""
    _require(sellerName=seller_name)
    window = DateWindow.from_strings(start_date, end_date)
    return await composer.seller_metrics(seller_name, window)


@router.get("/historical", response_model=List[HistoricalPoint])
async def historical(
    metric: Optional[str] = Query(None, description="sales, calls, meetingsCompleted, ..."),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    seller_name: Optional[str] = Query(None, alias="sellerName"),
    composer: ReportComposer = Depends(get_composer),
):
    """Per-day counts of one metric, ascending by date, zero days omitted."""
    _require(metric=metric, startDate=start_date, endDate=end_date)
    window = DateWindow.from_strings(start_date, end_date)
    return await composer.historical_series(metric, window, seller_name)


@router.get("/ranking", response_model=List[RankingEntry])
async def ranking(
    metric: Optional[str] = Query(None, description="Counter to rank by"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    composer: ReportComposer = Depends(get_composer),
):
    """Sellers by the chosen counter, highest first."""
    _require(metric=metric)
    window = DateWindow.from_strings(start_date, end_date)
    return await composer.ranking(metric, window)


@router.get("/categories", response_model=List[CategoryReport])
async def categories(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    composer: ReportComposer = Depends(get_composer),
):
    """Team-wide breakdown by lead category, best conversion rate first."""
    window = DateWindow.from_strings(start_date, end_date)
    return await composer.category_breakdown(window)


@router.get("/dashboard-data", response_model=DashboardPayload)
async def dashboard_data(
    seller_name: Optional[str] = Query(None, alias="sellerName"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    composer: ReportComposer = Depends(get_composer),
):
    """
    Everything the dashboard screen shows.

    Metrics and the sales series follow sellerName; ranking and categories
    always cover the whole team.
    """
    _require(sellerName=seller_name, startDate=start_date, endDate=end_date)
    window = DateWindow.from_strings(start_date, end_date)
    return await composer.dashboard(seller_name, window)
