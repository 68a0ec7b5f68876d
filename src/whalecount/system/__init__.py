"""System domain package.

This package contains process-level plumbing:
- PathResolver: Path resolution from environment variables
- StructlogConfigurator: Structured logging configuration
"""

from whalecount.system.path_resolver import PathResolver
from whalecount.system import structlog_configurator

__all__ = [
    "PathResolver",
    "structlog_configurator",
]
