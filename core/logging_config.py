"""Structured logging configuration for the study-material backend."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger


class JSONFormatter:
    """One JSON object per line.

    Values bound with ``logger.bind`` (``topic``, and the request ``method``
    and ``path`` bound by the API exception handlers) become top-level keys.
    """

    def __call__(self, record: dict[str, Any]) -> str:
        entry: dict[str, Any] = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "logger": record["name"],
            "message": record["message"],
            **record["extra"],
        }

        exception = record["exception"]
        if exception is not None and exception.type is not None:
            entry["exception"] = {"type": exception.type.__name__, "value": str(exception.value)}

        # loguru treats the returned string as a format template
        payload = json.dumps(entry, ensure_ascii=False, default=str)
        return payload.replace("{", "{{").replace("}", "}}") + "\n"


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
) -> None:
    """Replace loguru's handlers with a stderr sink and an optional rotating file.

    Called from ``create_app`` on every app build, so repeated calls must leave
    exactly one set of handlers behind.
    """
    level = level.upper()
    formatter: Any = JSONFormatter() if json_format else CONSOLE_FORMAT

    logger.remove()
    logger.add(sys.stderr, format=formatter, level=level, colorize=not json_format)

    if log_file is None:
        return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        format=formatter,
        level=level,
        rotation="10 MB",
        retention="7 days",
        compression="zip",
    )
