"""
CRM Sales Metrics — Entry Point
=================================

Run: python main.py

Configuration is validated before uvicorn starts; store connectivity is checked
by the application lifespan.
"""

import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from scripts.lib.errors import ConfigError
from scripts.lib.logger import LOG_FORMAT
from scripts.lib.settings import get_settings

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format=LOG_FORMAT,
)
logger = logging.getLogger("crm-sales-metrics")


def run() -> int:
    import uvicorn

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.critical("Invalid configuration: %s", e)
        return 2

    logger.info("=" * 60)
    logger.info("  CRM SALES METRICS — Team Performance API")
    logger.info("=" * 60)
    logger.info("  Environment : %s", os.getenv("ENVIRONMENT", "development"))
    logger.info("  Server      : http://0.0.0.0:%d", settings.port)
    logger.info("  API Docs    : http://localhost:%d/docs", settings.port)
    logger.info("  Policy      : %s", settings.stage_counting_policy)
    logger.info("  Store       : %s", settings.supabase_url or "(SUPABASE_URL not set)")
    logger.info("=" * 60)

    uvicorn.run(
        "dashboard.api.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )
    return 0


if __name__ == "__main__":
    sys.exit(run())
