"""
Utility functions for the CRM Sales Metrics service.

Usage:
    from scripts.lib.utils import write_json_report
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from scripts.lib.logger import setup_logger

logger = setup_logger(__name__)


def write_json_report(report: Any, file_path: str | Path, indent: int = 2) -> Path:
    """
    Write a report as JSON, replacing the target only once the write is complete.

    The temp file lives in the target directory so the final os.replace is a
    rename on the same filesystem.

    Returns:
        The resolved target path.

    Raises:
        OSError: The directory could not be created or the file written.
    """
    target = Path(file_path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(report, f, ensure_ascii=False, indent=indent, default=str)
            f.write("\n")
        os.replace(temp_name, target)
    except OSError:
        Path(temp_name).unlink(missing_ok=True)
        raise

    logger.debug("Report written to %s", target)
    return target
