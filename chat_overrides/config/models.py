"""
Pydantic-based configuration models for the chat overrides plugin.

Each section is a BaseSettings class with its own environment prefix, and
AppConfig aggregates them. Values come from the environment and an optional
.env file.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

# Placeholder values used only to check that a template formats cleanly
_FORMAT_PROBE = ("Group", "[P]", "Name", "[S]", "text")


def _validate_template(template: str, slot_count: int) -> str:
    """Check that a str.format template accepts exactly the positional slots offered."""
    try:
        template.format(*_FORMAT_PROBE[:slot_count])
    except (IndexError, KeyError, ValueError) as e:
        logger.error("Invalid chat template", template=template, slot_count=slot_count, error=str(e))
        raise ValueError(f"Template {template!r} must only use positional slots {{0}}..{{{slot_count - 1}}}") from e
    return template


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str = Field(default="local", description="Logging environment")
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="human", description="Log format")
    log_base: str = Field(default="logs", description="Base log directory")
    log_file: str | None = Field(default=None, description="Optional log file name under log_base")
    disable_logging: bool = Field(default=False, description="Disable all logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate logging environment."""
        valid_environments = ["local", "unit_test", "production"]
        if v not in valid_environments:
            logger.error("Invalid logging environment", environment=v, valid_environments=valid_environments)
            raise ValueError(f"Environment must be one of {valid_environments}, got '{v}'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "human", "colored"]
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}, got '{v}'")
        return v

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dict shape expected by setup_logging()."""
        return {
            "environment": self.environment,
            "level": self.level,
            "format": self.format,
            "log_base": self.log_base,
            "log_file": self.log_file,
            "disable_logging": self.disable_logging,
        }


class ChatConfig(BaseSettings):
    """Chat broadcast configuration."""

    attributed_mode: bool = Field(
        default=False, description="Broadcast chat as speech bubbles above the sender instead of flat lines"
    )
    chat_format: str = Field(
        default="{1}{2}{3}: {4}",
        description="Flat line template: {0} group, {1} prefix, {2} name, {3} suffix, {4} text",
    )
    chat_above_heads_format: str = Field(
        default="{2}",
        description="Speech bubble name template: {0} group, {1} prefix, {2} name, {3} suffix",
    )
    command_specifier: str = Field(default="/", description="Prefix marking a chat line as a command")
    command_silent_specifier: str = Field(default=".", description="Prefix marking a chat line as a silent command")
    chat_permission: str = Field(default="chat.canchat", description="Permission required to send chat")
    resolution_failure_notice: str = Field(
        default="Your message could not be sent: your chat color is invalid. Please contact an administrator.",
        description="Private notice sent when the sender's override color cannot be decoded",
    )

    @field_validator("chat_format")
    @classmethod
    def validate_chat_format(cls, v: str) -> str:
        """Validate the flat line template."""
        return _validate_template(v, 5)

    @field_validator("chat_above_heads_format")
    @classmethod
    def validate_chat_above_heads_format(cls, v: str) -> str:
        """Validate the speech bubble name template."""
        return _validate_template(v, 4)

    @field_validator("command_specifier", "command_silent_specifier")
    @classmethod
    def validate_specifier(cls, v: str) -> str:
        """Command sentinels must be non-empty."""
        if not v:
            raise ValueError("Command specifiers cannot be empty")
        return v

    model_config = {"env_prefix": "CHAT_", "case_sensitive": False, "extra": "ignore"}


class StorageConfig(BaseSettings):
    """Override storage configuration."""

    storage_dir: str = Field(default="data/overrides", description="Directory holding per-account override files")
    config_snapshot_path: str | None = Field(
        default=None, description="File that receives the active configuration at shutdown"
    )

    model_config = {"env_prefix": "OVERRIDES_", "case_sensitive": False, "extra": "ignore"}


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Access via the get_config() function.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}
