"""Structured logging configuration."""
import datetime
import inspect
import json
import logging
import sys
from typing import Any, List

import structlog
from structlog.types import EventDict, Processor

DEFAULT_LOG_LEVEL = "WARNING"
IGNORED_LOGGERS = [
    "aiohttp",
    "asyncio"
]

_min_level = getattr(logging, DEFAULT_LOG_LEVEL)


def add_timestamp(_, __, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to the event dict."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return event_dict


def add_caller_info(logger: Any, name: str, event_dict: EventDict) -> EventDict:
    """Add caller info to the event dict."""
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    while caller and ("structlog" in caller.f_code.co_filename or caller.f_code.co_filename == __file__):
        caller = caller.f_back
    if caller:
        event_dict.update({
            "module": caller.f_code.co_name,
            "line": caller.f_lineno,
            "file": caller.f_code.co_filename.replace("\\", "/").split("/")[-1]
        })
    return event_dict


def level_filter(logger: Any, name: str, event_dict: EventDict) -> EventDict:
    """Drop events below the configured level or from ignored loggers."""
    logger_name = getattr(logger, "name", "") or ""
    if any(ignored in logger_name for ignored in IGNORED_LOGGERS):
        raise structlog.DropEvent
    level_name = {"exception": "error", "warn": "warning"}.get(name, name)
    level_no = getattr(logging, level_name.upper(), logging.NOTSET)
    if level_no < _min_level:
        raise structlog.DropEvent
    return event_dict


class CompactJSONRenderer:
    """Single-line JSON renderer with minimal output."""
    def __call__(self, _: Any, __: str, event_dict: EventDict) -> str:
        items = {
            "ts": event_dict.pop("timestamp", None),
            "lvl": event_dict.pop("level", "???"),
            "msg": event_dict.pop("event", ""),
            **{k: v for k, v in event_dict.items() if k in ("module", "line", "file")}
        }
        if other := {k: v for k, v in event_dict.items() if k not in ("module", "line", "file")}:
            items["data"] = other
        return json.dumps(items, separators=(",", ":"), default=str)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structured logging for the application.

    All log output goes to STDERR. STDOUT belongs to the CLI and to child
    processes started by ``cppenv run``.
    """
    global _min_level
    _min_level = getattr(logging, level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=_min_level,
        force=True
    )

    if sys.stderr.isatty():
        processors: List[Processor] = [
            level_filter,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = [
            level_filter,
            structlog.stdlib.add_log_level,
            add_timestamp,
            add_caller_info,
            CompactJSONRenderer()
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
