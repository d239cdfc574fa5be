"""
Monitoring module: structured logging for calculators and the factory.
"""

from .logger import (
    ContextLogger,
    JsonFormatter,
    LogCategory,
    LogFormat,
    TextFormatter,
    get_logger,
    setup_logging,
    setup_logging_from_settings,
)

__all__ = [
    "ContextLogger",
    "JsonFormatter",
    "LogCategory",
    "LogFormat",
    "TextFormatter",
    "get_logger",
    "setup_logging",
    "setup_logging_from_settings",
]
