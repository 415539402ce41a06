"""Logging setup for command-line runs."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILENAME = "serp_check.log"


def resolve_level(level: str) -> int:
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return numeric


def configure_logging(
    level: str, log_dir: Optional[Path] = None, *, filename: str = LOG_FILENAME
) -> Optional[Path]:
    """Send logs to stderr and, when ``log_dir`` is set, to ``log_dir/filename``.

    Replaces any handlers installed by an earlier call so repeated runs in one
    process do not duplicate lines. Returns the log file path, if any.
    """
    numeric = resolve_level(level)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_path: Optional[Path] = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / filename
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=numeric, format=LOG_FORMAT, handlers=handlers, force=True)
    # asyncio selector chatter hides the settle-loop lines at DEBUG
    logging.getLogger("asyncio").setLevel(max(numeric, logging.INFO))
    return log_path
