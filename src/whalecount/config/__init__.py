"""Whale count configuration package.

This package provides centralized configuration management with:
- Pydantic validation of every setting
- Smart defaults management
- YAML parsing and serialization
"""

from .manager import ConfigManager, get_config
from .models import IngestConfig, LoggingConfig, WhaleCountConfig

__all__ = [
    "ConfigManager",
    "IngestConfig",
    "LoggingConfig",
    "WhaleCountConfig",
    "get_config",
]
