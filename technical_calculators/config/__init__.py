"""
Configuration module for the calculator framework.

Provides centralized configuration management using Pydantic settings
and a YAML limits file.
"""

from .settings import LoggingSettings, Settings, ValidationSettings, get_settings

__all__ = ["LoggingSettings", "Settings", "ValidationSettings", "get_settings"]
