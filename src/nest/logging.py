"""
Structured logging for nest.

Log records carry the cache being worked on and the operation (load, write,
destroy, ...) through contextvars. Console output goes through rich, and an
optional log file receives JSON Lines.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

import orjson
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

_cache_var: ContextVar[str | None] = ContextVar("cache", default=None)
_operation_var: ContextVar[str | None] = ContextVar("operation", default=None)

_configured = False


def get_cache_name() -> str | None:
    return _cache_var.get()


def get_operation() -> str | None:
    return _operation_var.get()


def _current_context() -> dict[str, str]:
    context = {"cache": _cache_var.get(), "operation": _operation_var.get()}
    return {key: value for key, value in context.items() if value}


@contextmanager
def log_context(
    cache: str | None = None,
    operation: str | None = None,
) -> Generator[None, None, None]:
    """Set the cache name and/or operation for log records in this block.

    Values left as None keep whatever the enclosing block set.
    """
    cache_token = _cache_var.set(cache) if cache is not None else None
    operation_token = _operation_var.set(operation) if operation is not None else None
    try:
        yield
    finally:
        if operation_token is not None:
            _operation_var.reset(operation_token)
        if cache_token is not None:
            _cache_var.reset(cache_token)


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, context, extra."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_current_context(),
        }
        if hasattr(record, "extra"):
            entry["extra"] = record.extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return orjson.dumps(entry, default=str).decode("utf-8")


class ContextRichHandler(RichHandler):
    """Shows the cache name and operation next to the level."""

    def get_level_text(self, record: logging.LogRecord) -> Text:
        level_text = super().get_level_text(record)
        context = _current_context()
        if not context:
            return level_text

        prefix = Text(" ")
        if "cache" in context:
            prefix.append(context["cache"], style="cyan")
        if "operation" in context:
            prefix.append(f" {context['operation']}", style="magenta")
        return level_text + prefix


class ContextLogger:
    """Logger wrapper that turns keyword arguments into structured extra fields.

    ``logger.debug("Cache written", entries=3)`` attaches ``{"entries": 3}``
    plus the current cache context to the record as ``record.extra``.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, msg: str, fields: dict[str, Any]) -> None:
        if self._logger.isEnabledFor(level):
            extra = {**_current_context(), **fields}
            self._logger.log(level, msg, extra={"extra": extra})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, fields)


def setup_logging(log_level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure the ``nest`` logger with a rich console handler and an
    optional JSON Lines file handler.
    """
    global _configured

    level = getattr(logging, log_level.upper())
    nest_logger = logging.getLogger("nest")
    nest_logger.setLevel(level)
    nest_logger.handlers.clear()

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        nest_logger.addHandler(file_handler)

    console_handler = ContextRichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(level)
    nest_logger.addHandler(console_handler)

    nest_logger.propagate = False
    _configured = True


def get_logger(name: str) -> ContextLogger:
    """Return a ContextLogger under the ``nest`` namespace."""
    if not _configured:
        setup_logging()

    if not name.startswith("nest"):
        name = f"nest.{name}"
    return ContextLogger(logging.getLogger(name))
