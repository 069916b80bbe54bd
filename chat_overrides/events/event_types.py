"""
Host event types consumed by the chat overrides plugin.

Chat and permission events carry a mutable handled flag: a subscriber that
consumes the event sets it, later subscribers and the host's default
handling read it.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime


def _default_timestamp() -> datetime:
    """Factory function for default timestamp."""
    return datetime.now(UTC)


@dataclass
class BaseEvent:
    """Base class for all events dispatched through the EventBus."""

    timestamp: datetime = field(default_factory=_default_timestamp, init=False)
    event_type: str = field(default="", init=False)

    def __post_init__(self) -> None:
        self.event_type = type(self).__name__


@dataclass
class ChatReceived(BaseEvent):
    """A player sent a line of chat."""

    session_index: int
    text: str
    handled: bool = False


@dataclass
class PlayerPostLogin(BaseEvent):
    """A session finished authenticating."""

    session_index: int


@dataclass
class PlayerLogout(BaseEvent):
    """A session logged out or disconnected."""

    session_index: int


@dataclass
class PermissionCheck(BaseEvent):
    """The host is about to evaluate a permission for a session."""

    session_index: int
    permission: str
    handled: bool = False
