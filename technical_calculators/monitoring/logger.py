"""
Structured logging for the calculator framework.

Records carry a category (validation, calculation, factory), a correlation
ID shared by every logger derived from the same root, the calculator name
when one is known, and free-form ``extra_data``. Two renderings are
available: one JSON object per line for collection, and a compact text line
for terminals.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any
from uuid import uuid4

# Record attributes added by ContextLogger, in rendering order
CONTEXT_FIELDS = ("correlation_id", "calculator", "extra_data")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 30


class LogCategory(str, Enum):
    """Component that emitted a record."""

    SYSTEM = "SYSTEM"
    VALIDATION = "VALIDATION"
    CALCULATION = "CALCULATION"
    FACTORY = "FACTORY"


class LogFormat(str, Enum):
    """Rendering used by the configured handlers."""

    JSON = "json"
    TEXT = "text"


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Context attributes set on a record, skipping empty ones."""
    context = {}
    for field in CONTEXT_FIELDS:
        value = getattr(record, field, None)
        if value:
            context[field] = value
    return context


class _CategoryFormatter(logging.Formatter):
    """Formatter falling back to a fixed category for foreign records."""

    def __init__(self, category: LogCategory = LogCategory.SYSTEM) -> None:
        super().__init__()
        self.category = category

    def category_of(self, record: logging.LogRecord) -> str:
        return getattr(record, "category", self.category.value)


class JsonFormatter(_CategoryFormatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        """Render the record, its source location and its context as JSON."""
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "category": self.category_of(record),
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        payload.update(_record_context(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(_CategoryFormatter):
    """Single-line text rendering for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        context = _record_context(record)

        stamp = f"{created:%Y-%m-%d %H:%M:%S}.{created.microsecond // 1000:03d}"
        line = f"{stamp} [{record.levelname:8s}] [{self.category_of(record):11s}]"
        if "correlation_id" in context:
            line += f" [{context['correlation_id'][:8]}]"
        if "calculator" in context:
            line += f" [{context['calculator']}]"
        line += f" {record.getMessage()}"
        if "extra_data" in context:
            line += f" | {context['extra_data']}"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter stamping category, correlation ID and calculator on records.

    ``extra_data`` given at construction is merged under the per-call
    ``extra_data``; per-call keys win.
    """

    def __init__(
        self,
        logger: logging.Logger,
        category: LogCategory = LogCategory.SYSTEM,
        correlation_id: str | None = None,
        calculator: str | None = None,
        extra_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(logger, {})
        self.category = category
        self.correlation_id = correlation_id or str(uuid4())
        self.calculator = calculator
        self.extra_data = extra_data or {}

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.update(category=self.category.value, correlation_id=self.correlation_id)
        if self.calculator:
            extra.setdefault("calculator", self.calculator)
        if self.extra_data:
            extra["extra_data"] = {**self.extra_data, **extra.get("extra_data", {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, calculator: str | None = None, **extra_data: Any) -> "ContextLogger":
        """Derive a logger for one calculator, keeping the correlation ID.

        Args:
            calculator: Calculator name; the current one is kept when omitted.
            **extra_data: Data added to every record of the derived logger.
        """
        return ContextLogger(
            self.logger,
            category=self.category,
            correlation_id=self.correlation_id,
            calculator=calculator or self.calculator,
            extra_data={**self.extra_data, **extra_data},
        )


def setup_logging(
    level: str = "INFO",
    log_format: LogFormat = LogFormat.JSON,
    log_file: Path | None = None,
) -> None:
    """Replace the root handlers with a stdout handler and an optional rotating file.

    Args:
        level: Root level name.
        log_format: Rendering for every handler.
        log_file: File to rotate into; parent directories are created.
    """
    formatter: logging.Formatter
    if LogFormat(log_format) == LogFormat.TEXT:
        formatter = TextFormatter()
    else:
        formatter = JsonFormatter()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS)
        )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


def setup_logging_from_settings() -> None:
    """Configure logging from the cached package settings."""
    from technical_calculators.config import get_settings

    config = get_settings().logging
    setup_logging(
        level=config.level,
        log_format=LogFormat(config.format),
        log_file=config.file_path,
    )


@lru_cache(maxsize=32)
def get_logger(
    name: str,
    category: LogCategory = LogCategory.SYSTEM,
    correlation_id: str | None = None,
) -> ContextLogger:
    """Shared context logger for a module and category."""
    return ContextLogger(logging.getLogger(name), category, correlation_id)
