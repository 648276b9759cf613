"""Shared builders for leads and activities."""

import pytest

from scripts.lib.settings import Settings
from scripts.metrics.classifier import classify_activity, classify_lead
from scripts.metrics.composer import ReportComposer
from scripts.metrics.repository import InMemoryLeadRepository, InMemorySellerDirectory


def call(outcome="NoAnswer", ts="2024-01-10T10:00:00"):
    return classify_activity({"type": "Call", "outcome": outcome, "timestamp": ts})


def stage_change(target, ts="2024-01-10T10:00:00"):
    return classify_activity({
        "type": "StageChanged",
        "outcome": f"Stage moved from New to {target}",
        "timestamp": ts,
    })


def lead(seller="Ana", stage="New", category=None, activities=(), last_stage_change=None, id=None):
    row = {"id": id, "seller": seller, "stage": stage, "category": category}
    if last_stage_change is not None:
        row["lastStageChange"] = last_stage_change
    return classify_lead(row, activities)


@pytest.fixture
def settings():
    return Settings(no_seller_sentinel="Unassigned", team_display_name="Whole Team")


@pytest.fixture
def team_leads():
    return [
        lead("Ana", "Sold", "Retail", [
            call("ConnectionMade", "2024-01-02T09:00:00"),
            stage_change("Sold", "2024-01-05T15:00:00"),
        ]),
        lead("Ana", "MeetingDone", "Retail", [
            call("ConnectionWithDecisionMaker", "2024-01-02T11:00:00"),
            stage_change("MeetingScheduled-Done", "2024-01-03T10:00:00"),
        ]),
        lead("Bruno", "Sold", "Industry", [
            call("NoAnswer", "2024-01-03T08:00:00"),
            stage_change("Sold", "2024-01-05T17:30:00"),
        ]),
        lead("Bruno", "Sold", None, [
            stage_change("Sold", "2024-01-07T12:00:00"),
        ]),
        lead("Unassigned", "New", "Retail", [
            call("ConnectionMade", "2024-01-04T14:00:00"),
        ]),
    ]


@pytest.fixture
def composer(team_leads, settings):
    return ReportComposer(
        InMemoryLeadRepository(team_leads),
        InMemorySellerDirectory(["Ana", "Bruno", "Unassigned"]),
        settings=settings,
    )
