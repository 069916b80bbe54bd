"""
Configuration module for the chat overrides plugin.

Usage:
    from chat_overrides.config import get_config

    config = get_config()
    logger.info("Chat configuration", attributed_mode=config.chat.attributed_mode)
"""

import sys
import threading
from functools import lru_cache
from os import getenv
from pathlib import Path

from ..structured_logging.enhanced_logging_config import get_logger
from .models import AppConfig, ChatConfig, LoggingConfig, StorageConfig

__all__ = [
    "get_config",
    "reset_config",
    "save_config_snapshot",
    "AppConfig",
    "ChatConfig",
    "LoggingConfig",
    "StorageConfig",
]

logger = get_logger(__name__)

# Module-level config cache
_config_instance = None
_config_lock = threading.Lock()


def _is_test_mode() -> bool:
    """Detect if running under pytest."""
    if "pytest" in sys.modules:
        return True
    return bool(getenv("PYTEST_CURRENT_TEST"))


@lru_cache(maxsize=1)
def _get_config_cached() -> AppConfig:
    """Production config loader with caching."""
    global _config_instance  # pylint: disable=global-statement  # Reason: Thread-safe singleton
    with _config_lock:
        if _config_instance is None:
            _config_instance = AppConfig()
    return _config_instance


def get_config() -> AppConfig:
    """
    Get application configuration (singleton in production, fresh in tests).

    Configuration is loaded from environment variables and .env file.

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    if _is_test_mode():
        return AppConfig()
    return _get_config_cached()


def reset_config() -> None:
    """Reset the configuration cache so the next get_config() reloads it."""
    global _config_instance  # pylint: disable=global-statement  # Reason: Thread-safe singleton
    with _config_lock:
        _get_config_cached.cache_clear()
        _config_instance = None


def save_config_snapshot(config: AppConfig, path: str | Path) -> Path:
    """
    Write the active configuration to a JSON file.

    Args:
        config: Configuration to serialize
        path: Destination file; parent directories are created

    Returns:
        The path written
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(config.model_dump_json(indent=2), encoding="utf-8")
    logger.info("Configuration snapshot saved", path=str(target))
    return target
