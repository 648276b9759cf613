"""
CRM Sales Metrics — Request Dependencies
==========================================
Providers for the collaborators built during startup and stored on
app.state. Tests replace them through app.dependency_overrides.
"""
from __future__ import annotations

from fastapi import Request

from scripts.metrics.composer import ReportComposer
from scripts.metrics.goals import GoalsStore
from scripts.metrics.repository import SellerDirectory


def get_composer(request: Request) -> ReportComposer:
    return request.app.state.composer


def get_seller_directory(request: Request) -> SellerDirectory:
    return request.app.state.seller_directory


def get_goals_store(request: Request) -> GoalsStore:
    return request.app.state.goals_store
