"""
Exception hierarchy for the chat overrides plugin.

Every error carries an ErrorContext and a user-friendly message so that the
chat pipeline can surface a short notice to the player while the log keeps
the technical detail.
"""

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any

from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class ErrorContext:
    """Which account, session or admin command an error belongs to."""

    account_id: str | None = None
    session_index: int | None = None
    command: str | None = None
    timestamp: datetime = field(default_factory=_utc_now)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class ChatOverridesError(Exception):
    """
    Base exception for all chat overrides errors.

    The error logs itself once on construction; callers that catch it only
    need to decide what the player sees, usually user_friendly.
    """

    log_level = "warning"

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
        user_friendly: str | None = None,
    ):
        """
        Initialize the error.

        Args:
            message: Technical message for the log
            context: Account, session or command the error belongs to
            details: Extra key/value data for the log
            user_friendly: Message suitable for showing to a player; defaults to message
        """
        super().__init__(message)
        self.message = message
        self.context = context if context is not None else ErrorContext()
        self.details: dict[str, Any] = dict(details or {})
        self.user_friendly = user_friendly if user_friendly is not None else message

        getattr(logger, self.log_level)(
            "Chat overrides error occurred",
            error_type=type(self).__name__,
            message=message,
            context=self.context.to_dict(),
            details=self.details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for admin command responses and structured logs."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "user_friendly": self.user_friendly,
            "context": self.context.to_dict(),
            "details": self.details,
        }


class ValidationError(ChatOverridesError):
    """A value supplied for an override field is not acceptable."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        field: str | None = None,  # pylint: disable=redefined-outer-name  # Reason: Mirrors the validated field name
        **kwargs,
    ):
        super().__init__(message, context, **kwargs)
        self.field = field
        if field:
            self.details["field"] = field


class InvalidColorFormat(ValidationError):
    """A color string is not three comma-separated integers in 0-255."""

    def __init__(self, text: str, context: ErrorContext | None = None, reason: str | None = None):
        details = {"value": text}
        if reason:
            details["reason"] = reason
        super().__init__(
            f"The color provided was not in the correct format: {text!r}",
            context,
            field="color",
            details=details,
            user_friendly="The color provided was not in the correct format (expected r,g,b).",
        )
        self.text = text


class OverrideStoreError(ChatOverridesError):
    """The override store could not be read or written."""

    def __init__(self, message: str, context: ErrorContext | None = None, operation: str = "unknown", **kwargs):
        kwargs["details"] = {**kwargs.get("details", {}), "operation": operation}
        super().__init__(message, context, **kwargs)
        self.operation = operation


class SessionDisconnectedError(ChatOverridesError):
    """A send targeted a session that is no longer connected."""

    # Expected whenever a player leaves mid-broadcast
    log_level = "debug"

    def __init__(self, session_index: int, context: ErrorContext | None = None):
        super().__init__(
            f"Session {session_index} is no longer connected",
            context if context is not None else ErrorContext(session_index=session_index),
        )
        self.session_index = session_index


class ConfigurationError(ChatOverridesError):
    """Settings could not be loaded or are inconsistent."""

    def __init__(self, message: str, context: ErrorContext | None = None, config_key: str | None = None, **kwargs):
        if config_key:
            kwargs["details"] = {**kwargs.get("details", {}), "config_key": config_key}
        super().__init__(message, context, **kwargs)
        self.config_key = config_key
