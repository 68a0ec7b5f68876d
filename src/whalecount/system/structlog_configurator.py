"""Structlog-based logging configuration for the whale count service.

Supports different deployment targets:
- Docker: Uses stdout with JSON output
- Development: Configurable JSON or human-readable output
"""

import logging
import os
import sys
from collections.abc import Callable
from typing import Any

import structlog

from whalecount.config.models import WhaleCountConfig


def is_docker_environment() -> bool:
    """Check if running in a Docker container."""
    return os.path.exists("/.dockerenv") or os.environ.get("DOCKER_CONTAINER") == "true"


def is_development_environment() -> bool:
    """Check if WHALECOUNT_ENV marks this as a development run."""
    return os.environ.get("WHALECOUNT_ENV", "production") == "development"


def get_deployment_environment() -> str:
    """Get deployment environment with 'unknown' fallback."""
    if is_docker_environment():
        return "docker"
    elif is_development_environment():
        return "development"
    else:
        return "unknown"


def _add_static_context(extra_fields: dict[str, str]) -> Callable:
    """Processor to add static context fields to all log entries."""

    def processor(
        logger: structlog.BoundLogger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.update(extra_fields)
        return event_dict

    return processor


def _use_json_output(config: WhaleCountConfig, is_docker: bool, is_development: bool) -> bool:
    """Decide between JSON and console rendering."""
    if is_development:
        return os.environ.get("WHALECOUNT_JSON_LOGS", "false").lower() == "true"
    if config.logging.json_logs is not None:
        return config.logging.json_logs
    return is_docker


def _configure_processors(
    config: WhaleCountConfig, is_docker: bool, is_development: bool
) -> list:
    """Configure structlog processors based on environment."""
    extra_fields = {
        "service": "whalecount",
        "deployment": get_deployment_environment(),
        **config.logging.extra_fields,
    }
    if config.site_name:
        extra_fields["site_name"] = config.site_name

    processors = [
        structlog.contextvars.merge_contextvars,
        _add_static_context(extra_fields),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]

    if config.logging.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if _use_json_output(config, is_docker, is_development):
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=not is_docker))

    return processors


def _configure_handlers(config: WhaleCountConfig) -> None:
    """Route standard library logging to stdout at the configured level."""
    root_logger = logging.getLogger()
    log_level = getattr(logging, config.logging.level.upper(), logging.INFO)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)


def configure_structlog(config: WhaleCountConfig) -> None:
    """Configure structlog-based logging system.

    Args:
        config: The WhaleCountConfig instance containing logging settings.
    """
    is_docker = is_docker_environment()
    is_development = is_development_environment()

    processors = _configure_processors(config, is_docker, is_development)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.logging.level.upper(), logging.INFO)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configure_handlers(config)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Structured logging configured",
        log_level=config.logging.level,
        environment=get_deployment_environment(),
        json_output=config.logging.json_logs,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)
