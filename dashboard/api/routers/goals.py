"""
CRM Sales Metrics — Goals Router
==================================

Endpoints:
  GET /api/goals/{seller}   - Effective goals (stored values over defaults)
  PUT /api/goals/{seller}   - Merge a partial goal set into the stored one
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from dashboard.api.deps import get_goals_store
from models.metrics_models import ErrorResponse, GoalsResponse
from scripts.metrics.goals import GoalsStore, get_goals, set_goals

router = APIRouter(
    prefix="/api/goals",
    tags=["goals"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.get("/{seller}", response_model=GoalsResponse)
async def read_goals(seller: str, store: GoalsStore = Depends(get_goals_store)):
    goals = await asyncio.to_thread(get_goals, store, seller)
    return GoalsResponse(seller=seller, goals=goals)


@router.put("/{seller}", response_model=GoalsResponse)
async def update_goals(
    seller: str,
    partial: Dict[str, Any] = Body(..., examples=[{"daily": {"calls": 30}}]),
    store: GoalsStore = Depends(get_goals_store),
):
    """Shallow merge: each period sent replaces the stored period entirely."""
    goals = await asyncio.to_thread(set_goals, store, seller, partial)
    return GoalsResponse(seller=seller, goals=goals)
