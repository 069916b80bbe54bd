"""
In-memory session registry.

ConnectionManager implements the SessionRegistry interface for embedding the
plugin in a host without its own transport, and for exercising the chat
pipeline end to end. Delivered lines and packets are kept per session.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import SessionDisconnectedError
from ..models.override_record import GroupDefaults, Rgb
from ..structured_logging.enhanced_logging_config import get_logger
from .host_protocols import AttributedChatPacket, NameChangePacket

logger = get_logger(__name__)


@dataclass
class ConnectedPlayer:
    """A session tracked by ConnectionManager."""

    index: int
    name: str
    group: GroupDefaults
    account_id: str | None = None
    is_logged_in: bool = False
    muted: bool = False
    permissions: set[str] = field(default_factory=set)
    display_name: str = ""
    messages: list[tuple[str, Rgb]] = field(default_factory=list)
    packets: list[NameChangePacket | AttributedChatPacket] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.name

    def has_permission(self, permission: str) -> bool:
        """Group-level permission check; the override gate sits in front of this."""
        return permission in self.permissions


class ConnectionManager:
    """Tracks connected sessions by index and delivers lines and packets to them."""

    def __init__(self) -> None:
        self._sessions: dict[int, ConnectedPlayer] = {}
        self.console: list[tuple[str, Rgb]] = []

    def connect(self, player: ConnectedPlayer) -> None:
        """Register a session; replaces any session already at that index."""
        self._sessions[player.index] = player
        logger.info("Session connected", session_index=player.index, player_name=player.name)

    def disconnect(self, index: int) -> ConnectedPlayer | None:
        """Remove a session. Returns the removed session, if any."""
        player = self._sessions.pop(index, None)
        if player is not None:
            logger.info("Session disconnected", session_index=index, player_name=player.name)
        return player

    def get_session(self, index: int) -> ConnectedPlayer | None:
        return self._sessions.get(index)

    def connected_sessions(self) -> Iterable[ConnectedPlayer]:
        # Snapshot so callers may await between deliveries while sessions come and go
        return list(self._sessions.values())

    def sessions_for_account(self, account_id: str) -> list[ConnectedPlayer]:
        return [s for s in self._sessions.values() if s.account_id == account_id]

    def _require_connected(self, session: Any) -> ConnectedPlayer:
        player = self._sessions.get(session.index)
        if player is None or player is not session:
            raise SessionDisconnectedError(session.index)
        return player

    async def send_message(self, session: Any, text: str, color: Rgb) -> None:
        player = self._require_connected(session)
        player.messages.append((text, color))

    async def send_to_console(self, text: str, color: Rgb) -> None:
        self.console.append((text, color))

    async def send_packet(self, session: Any, packet: NameChangePacket | AttributedChatPacket) -> None:
        player = self._require_connected(session)
        player.packets.append(packet)
