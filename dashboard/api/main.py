"""
CRM Sales Metrics — API Server
================================

Sales-team performance metrics over leads and their activities, read from
Supabase.

Route groups:
  /                      - Service banner
  /api/health            - Health check
  /api/metrics           - Counters for a seller or the team
  /api/historical        - Per-day series of one metric
  /api/ranking           - Sellers ranked by one metric
  /api/categories        - Conversion rate per lead category
  /api/dashboard-data    - Combined dashboard payload
  /api/sellers           - Seller roster
  /api/goals/{seller}    - Seller goals (GET / PUT)

Startup is fail-fast: if the document store cannot be reached the lifespan
raises and the server never starts accepting requests.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from dashboard.api.routers.goals import router as goals_router
from dashboard.api.routers.metrics import router as metrics_router
from dashboard.api.routers.sellers import router as sellers_router
from models.metrics_models import ErrorResponse
from scripts.lib.errors import SalesMetricsError
from scripts.lib.logger import setup_logger
from scripts.lib.settings import get_settings
from scripts.lib.supabase_client import init_client, is_initialized, reset_client
from scripts.metrics.composer import ReportComposer
from scripts.metrics.goals import SupabaseGoalsStore
from scripts.metrics.repository import SupabaseLeadRepository, SupabaseSellerDirectory

logger = setup_logger("sales_metrics_api")

VERSION = "5.0.0"


# ─── Lifespan ─────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app):
    """Connect to the store, build collaborators, then serve."""
    settings = get_settings()
    logger.info("Starting CRM Sales Metrics API...")

    # Raises RepositoryInitError: startup aborts before any request is accepted.
    init_client()

    app.state.seller_directory = SupabaseSellerDirectory()
    app.state.goals_store = SupabaseGoalsStore()
    app.state.composer = ReportComposer(
        SupabaseLeadRepository(),
        app.state.seller_directory,
        settings=settings,
    )
    logger.info("Stage counting policy: %s", app.state.composer.policy.name)
    logger.info("CRM Sales Metrics API ready")
    yield
    reset_client()
    logger.info("Shutting down CRM Sales Metrics API...")


# ─── App Setup ────────────────────────────────────────────────

app = FastAPI(
    title="CRM Sales Metrics",
    version=VERSION,
    description="Sales-team performance metrics: counters, series, ranking, categories and goals",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "PUT", "OPTIONS"],
    allow_headers=["*"],
)


# ─── Errors ───────────────────────────────────────────────────

INTERNAL_MESSAGE = "Internal error while reading sales data"


def _error_body(message: str, code: str) -> dict:
    return ErrorResponse(error=message, code=code).model_dump()


@app.exception_handler(SalesMetricsError)
async def sales_metrics_error_handler(request: Request, exc: SalesMetricsError):
    """Map the error hierarchy onto HTTP status codes."""
    status = exc.status_code
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content=_error_body(INTERNAL_MESSAGE, exc.code),
        )
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content=_error_body(exc.message, exc.code))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything outside the hierarchy is a 500 with the same body shape."""
    logger.exception("%s %s crashed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=_error_body(INTERNAL_MESSAGE, "INTERNAL_ERROR"))


# ─── Include Routers ──────────────────────────────────────────

app.include_router(metrics_router)
app.include_router(sellers_router)
app.include_router(goals_router)


# ─── Health ───────────────────────────────────────────────────

@app.get("/", tags=["system"])
async def root():
    return {"service": "CRM Sales Metrics", "version": VERSION, "status": "running"}


@app.get("/api/health", tags=["system"])
async def health():
    """Health check with store status."""
    return {
        "status": "healthy",
        "service": "CRM Sales Metrics",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "integrations": {
            "supabase": is_initialized(),
        },
    }
