"""
Loguru setup shared by the API server, the CLI and the tests.

Stdlib records (uvicorn, httpx, httpcore) are routed into loguru so one sink
and one format cover everything.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from loguru import logger

_LEVEL_MAP: dict[str, int] = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}
_SOURCE_WIDTH = 34


def _normalize_level(value: str | None, fallback: str = "INFO") -> str:
    candidate = (value or "").strip().upper()
    if candidate in _LEVEL_MAP:
        return candidate
    return fallback


def _patch_record(record: dict[str, Any]) -> None:
    extra = record["extra"]
    module = str(extra.get("py_name") or record.get("name") or "-").split(".")[-1]
    function = extra.get("py_func") or record.get("function")
    line = extra.get("py_line") or record.get("line")
    extra["src"] = f"{module}.{function}:{line}"


def _stderr_sink(message: Any) -> None:
    # resolved per call so a swapped sys.stderr (test runners, CLI capture) is honoured
    sys.stderr.write(message)


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into Loguru with original call-site metadata."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.bind(
            py_name=record.name,
            py_func=record.funcName,
            py_line=record.lineno,
        ).opt(
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_logging(level: str | None = None) -> str:
    """
    Configure loguru + stdlib interception. Returns the effective level name.
    Third-party HTTP loggers are capped at WARNING.
    """
    global_level = _normalize_level(level)

    logger.remove()
    logger.configure(patcher=_patch_record)
    logger.add(
        _stderr_sink,
        level=global_level,
        colorize=sys.stderr.isatty(),
        backtrace=False,
        diagnose=False,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[src]: <" + str(_SOURCE_WIDTH) + "}</cyan> | "
            "<level>{message}</level>"
        ),
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [InterceptHandler()]
    root_logger.setLevel(_LEVEL_MAP[global_level])

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "httpx", "httpcore"):
        logging_logger = logging.getLogger(name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return global_level


def _serialize_field(value: Any) -> str:
    if isinstance(value, str):
        compact = value.replace("\n", "\\n")
        if (not compact) or any(ch in compact for ch in (" ", "|", "'")):
            escaped = compact.replace("'", "\\'")
            return f"'{escaped}'"
        return compact
    if value is None:
        return "None"
    return str(value)


def log_event(event: str, **fields: Any) -> str:
    """Build a consistent `evt=... | key=value` log message."""
    parts = [f"evt={event}"]
    for key, value in fields.items():
        parts.append(f"{key}={_serialize_field(value)}")
    return " | ".join(parts)
