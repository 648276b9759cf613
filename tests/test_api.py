"""Tests for the HTTP surface."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from dashboard.api.deps import get_composer, get_goals_store, get_seller_directory
from dashboard.api.main import app, lifespan
from scripts.lib.errors import RepositoryInitError, UpstreamReadError
from scripts.metrics.composer import ReportComposer
from scripts.metrics.goals import InMemoryGoalsStore
from scripts.metrics.repository import InMemoryLeadRepository, InMemorySellerDirectory


class BrokenRepository:
    def list_leads(self, seller=None):
        raise UpstreamReadError("crm_leads", RuntimeError("connection refused"))

    def list_activities(self, lead, window=None):
        return []


class CrashingRepository(BrokenRepository):
    def list_leads(self, seller=None):
        raise RuntimeError("unexpected row shape")


@pytest.fixture
def client(composer):
    goals = InMemoryGoalsStore({"Ana": {"daily": {"calls": 30}}})
    app.dependency_overrides[get_composer] = lambda: composer
    app.dependency_overrides[get_seller_directory] = lambda: composer.directory
    app.dependency_overrides[get_goals_store] = lambda: goals
    yield TestClient(app)
    app.dependency_overrides.clear()


JANUARY = {"startDate": "2024-01-01", "endDate": "2024-01-31"}


class TestSystem:
    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"

    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert "supabase" in body["integrations"]


class TestMetricsEndpoints:
    def test_metrics_camel_case(self, client):
        resp = client.get("/api/metrics", params={"sellerName": "Ana", **JANUARY})
        assert resp.status_code == 200
        assert resp.json() == {
            "sellerName": "Ana",
            "metrics": {
                "calls": 2,
                "connections": 2,
                "decisionMakerConnections": 1,
                "meetingsScheduled": 0,
                "meetingsCompleted": 1,
                "sales": 1,
            },
        }

    def test_metrics_team(self, client):
        body = client.get("/api/metrics", params={"sellerName": "team"}).json()
        assert body["sellerName"] == "Whole Team"
        assert body["metrics"]["sales"] == 3

    def test_metrics_requires_seller(self, client):
        resp = client.get("/api/metrics", params=JANUARY)
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"
        assert "sellerName" in resp.json()["error"]

    def test_malformed_date(self, client):
        resp = client.get("/api/metrics", params={"sellerName": "Ana", "startDate": "January"})
        assert resp.status_code == 400

    def test_reversed_dates(self, client):
        resp = client.get("/api/metrics", params={
            "sellerName": "Ana", "startDate": "2024-02-01", "endDate": "2024-01-01",
        })
        assert resp.status_code == 400

    def test_historical(self, client):
        resp = client.get("/api/historical", params={"metric": "sales", **JANUARY})
        assert resp.json() == [
            {"date": "2024-01-05", "value": 2},
            {"date": "2024-01-07", "value": 1},
        ]

    def test_historical_requires_window(self, client):
        resp = client.get("/api/historical", params={"metric": "sales", "startDate": "2024-01-01"})
        assert resp.status_code == 400
        assert "endDate" in resp.json()["error"]

    def test_ranking(self, client):
        resp = client.get("/api/ranking", params={"metric": "sales", **JANUARY})
        assert resp.json() == [{"seller": "Bruno", "value": 2}, {"seller": "Ana", "value": 1}]

    def test_ranking_requires_metric(self, client):
        assert client.get("/api/ranking", params=JANUARY).status_code == 400

    def test_categories(self, client):
        body = client.get("/api/categories", params=JANUARY).json()
        assert body[0]["category"] == "Retail"
        assert body[0]["totalLeads"] == 3
        assert body[0]["conversionRate"] == 100.0

    def test_dashboard_data(self, client):
        resp = client.get("/api/dashboard-data", params={"sellerName": "Ana", **JANUARY})
        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"sellerName", "metrics", "historical", "ranking", "categories"}
        assert body["historical"] == [{"date": "2024-01-05", "value": 1}]
        assert [r["seller"] for r in body["ranking"]] == ["Bruno", "Ana"]

    def test_dashboard_requires_all_parameters(self, client):
        resp = client.get("/api/dashboard-data", params={"sellerName": "Ana"})
        assert resp.status_code == 400
        assert "startDate" in resp.json()["error"]

    def test_upstream_failure_is_500(self, client, settings):
        broken = ReportComposer(BrokenRepository(), InMemorySellerDirectory([]), settings=settings)
        app.dependency_overrides[get_composer] = lambda: broken
        resp = client.get("/api/dashboard-data", params={"sellerName": "team", **JANUARY})
        assert resp.status_code == 500
        assert resp.json()["code"] == "UPSTREAM_READ"
        assert "connection refused" not in resp.json()["error"]

    def test_unexpected_crash_uses_error_body(self, settings):
        crashing = ReportComposer(CrashingRepository(), InMemorySellerDirectory([]), settings=settings)
        app.dependency_overrides[get_composer] = lambda: crashing
        try:
            client = TestClient(app, raise_server_exceptions=False)
            resp = client.get("/api/dashboard-data", params={"sellerName": "team", **JANUARY})
        finally:
            app.dependency_overrides.clear()
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal error while reading sales data", "code": "INTERNAL_ERROR"}

    @pytest.mark.parametrize("path", ["/api/metrics", "/api/ranking", "/api/sellers", "/api/goals/{seller}"])
    def test_error_shape_documented(self, client, path):
        schema = client.get("/openapi.json").json()
        responses = schema["paths"][path]["get"]["responses"]
        error_codes = {code for code in responses if code.startswith(("4", "5")) and code != "422"}
        assert error_codes
        for code in error_codes:
            assert responses[code]["content"]["application/json"]["schema"] == {
                "$ref": "#/components/schemas/ErrorResponse",
            }


class TestSellersEndpoint:
    def test_roster_includes_sentinel(self, client):
        assert client.get("/api/sellers").json() == ["Ana", "Bruno", "Unassigned"]

    def test_missing_directory_is_404(self, client):
        app.dependency_overrides[get_seller_directory] = lambda: InMemorySellerDirectory(None)
        resp = client.get("/api/sellers")
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"


class TestGoalsEndpoints:
    def test_read_merges_defaults(self, client):
        body = client.get("/api/goals/Ana").json()
        assert body["seller"] == "Ana"
        assert body["goals"]["daily"] == {"calls": 30}
        assert body["goals"]["monthly"]["sales"] == 8

    def test_write_then_read(self, client):
        resp = client.put("/api/goals/Bruno", json={"weekly": {"calls": 120}})
        assert resp.status_code == 200
        assert resp.json()["goals"]["weekly"] == {"calls": 120}
        assert client.get("/api/goals/Bruno").json()["goals"]["weekly"] == {"calls": 120}


class TestStartup:
    @pytest.mark.asyncio
    async def test_unreachable_store_aborts_startup(self):
        state = SimpleNamespace(state=SimpleNamespace())
        with patch("dashboard.api.main.init_client", side_effect=RepositoryInitError("unreachable")):
            with pytest.raises(RepositoryInitError):
                async with lifespan(state):
                    pass
        assert not hasattr(state.state, "composer")
