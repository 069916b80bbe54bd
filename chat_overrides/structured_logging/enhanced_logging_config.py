"""
Structlog-based logging configuration for the chat overrides plugin.

This is the main entry point for the logging system. Application code obtains
loggers through get_logger() and logs key/value events.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.stdlib import BoundLogger, LoggerFactory

from chat_overrides.structured_logging.logging_processors import add_correlation_id, sanitize_sensitive_data

# Infrastructure code may use structlog.get_logger() directly; all other
# modules must use get_logger() from this module.
logger = structlog.get_logger(__name__)


class _LoggingState:  # pylint: disable=too-few-public-methods  # Reason: State container class with focused responsibility
    """State container for logging initialization to avoid global statements."""

    initialized: bool = False
    signature: str | None = None


_logging_state = _LoggingState()


def _renderer_for(log_format: str) -> Any:
    """Pick the final structlog renderer for the configured format."""
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "colored":
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])


def configure_structlog(
    log_level: str = "INFO",
    log_format: str = "human",
    log_file: Path | None = None,
) -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Renderer to use (json, human, colored)
        log_file: Optional file that receives a copy of every record
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    structlog.configure(
        processors=[
            # Security first - sanitize sensitive data
            sanitize_sensitive_data,
            add_correlation_id,
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _renderer_for(log_format),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(config: dict[str, Any], *, force_reconfigure: bool = False) -> None:
    """
    Set up logging from the logging section of the application configuration.

    Args:
        config: Logging configuration dictionary (see LoggingConfig.to_dict)
        force_reconfigure: When True, reconfigure even if already initialized
    """
    config_signature = json.dumps(config, sort_keys=True, default=str)

    if _logging_state.initialized and not force_reconfigure:
        logger.debug(
            "setup_logging skipped; logging system already initialized",
            config_signature=_logging_state.signature,
        )
        return

    if config.get("disable_logging", False):
        configure_structlog(log_level="CRITICAL", log_format=config.get("format", "human"))
    else:
        log_file = None
        if config.get("log_file"):
            log_file = Path(config["log_base"]) / config["log_file"]
        configure_structlog(
            log_level=config.get("level", "INFO"),
            log_format=config.get("format", "human"),
            log_file=log_file,
        )

    logger.info(
        "Logging system initialized",
        log_level=config.get("level", "INFO"),
        log_format=config.get("format", "human"),
    )

    _logging_state.initialized = True
    _logging_state.signature = config_signature


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a structlog logger with the specified name.

    This is the public API for obtaining loggers. All application code
    should use this function rather than calling structlog.get_logger()
    directly.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)
