"""
CRM Sales Metrics — Sellers Router
====================================

Endpoints:
  GET /api/sellers   - Seller roster (404 when the directory row is absent)
"""
from __future__ import annotations

import asyncio
from typing import List

from fastapi import APIRouter, Depends

from dashboard.api.deps import get_seller_directory
from models.metrics_models import ErrorResponse
from scripts.lib.logger import setup_logger
from scripts.metrics.repository import SellerDirectory

logger = setup_logger("sellers_router")

router = APIRouter(
    prefix="/api/sellers",
    tags=["sellers"],
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)


@router.get("", response_model=List[str])
async def list_sellers(directory: SellerDirectory = Depends(get_seller_directory)):
    """Every seller name in the directory, including the no-seller entry."""
    sellers = await asyncio.to_thread(directory.list_sellers)
    logger.debug("Seller directory: %d entries", len(sellers))
    return sellers
