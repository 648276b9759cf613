"""
Centralized logging for the CRM Sales Metrics service.
Every module gets a named logger writing to stderr and, when LOG_TO_FILE is
set, to a daily file under logs/.

Usage:
    from scripts.lib.logger import setup_logger
    logger = setup_logger(__name__)
    logger.info("Ranking composed for %d sellers", len(entries))
"""
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

# Project root: crm-sales-metrics/
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_FORMATTER = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

# Loggers created through setup_logger, so set_level can reach all of them.
_managed: dict = {}


def _resolve_level(level) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _console_handler() -> logging.Handler:
    # stderr keeps stdout clean for JSON reports
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_FORMATTER)
    return handler


def _daily_file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{datetime.now().strftime('%Y%m%d')}_sales_metrics.log"
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(_FORMATTER)
    return handler


def setup_logger(
    name: str,
    level: str = None,
    log_to_file: bool = None,
    log_dir: Path = None,
) -> logging.Logger:
    """
    Configure and return a logger instance.

    Args:
        name: Logger name (typically __name__ from calling module).
        level: Logging level name. Defaults to LOG_LEVEL, then INFO.
        log_to_file: Also write a daily file. Defaults to LOG_TO_FILE, then False.
        log_dir: Directory for log files (default: project_root/logs).

    Returns:
        Configured logger instance; repeated calls return it unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "false").lower() == "true"

    logger.setLevel(_resolve_level(level or os.getenv("LOG_LEVEL", "INFO")))
    logger.propagate = False
    logger.addHandler(_console_handler())
    if log_to_file:
        logger.addHandler(_daily_file_handler(Path(log_dir) if log_dir else LOG_DIR))

    _managed[name] = logger
    return logger


def set_level(level) -> None:
    """Change the level of every logger created by setup_logger."""
    resolved = _resolve_level(level)
    for logger in _managed.values():
        logger.setLevel(resolved)
