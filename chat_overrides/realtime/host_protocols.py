"""
Interfaces the host game server provides to the chat overrides plugin.

The host owns sessions, groups and packet transport. The plugin only
constructs the two packet payloads below and hands them to the registry.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from ..models.override_record import GroupDefaults, Rgb


@dataclass(frozen=True)
class NameChangePacket:
    """Tells clients to display a player index under a new name."""

    player_index: int
    name: str


@dataclass(frozen=True)
class AttributedChatPacket:
    """Chat text rendered as a speech bubble above the given player index."""

    player_index: int
    text: str
    color: Rgb


class PlayerSession(Protocol):
    """
    A connected player connection as seen by the plugin.

    name is the character name; display_name is what clients currently render
    above the avatar and is the only field the plugin ever writes.
    """

    index: int
    account_id: str | None
    name: str
    display_name: str
    is_logged_in: bool
    muted: bool
    group: GroupDefaults

    def has_permission(self, permission: str) -> bool:
        """Host group-based permission evaluation."""


class SessionRegistry(Protocol):
    """Host session list and transport."""

    def get_session(self, index: int) -> PlayerSession | None:
        """Return the connected session at index, or None."""

    def connected_sessions(self) -> Iterable[PlayerSession]:
        """Iterate the currently connected sessions."""

    async def send_message(self, session: PlayerSession, text: str, color: Rgb) -> None:
        """Send a colored text line to one session. Raises SessionDisconnectedError if it is gone."""

    async def send_to_console(self, text: str, color: Rgb) -> None:
        """Write a colored text line to the server console."""

    async def send_packet(self, session: PlayerSession, packet: NameChangePacket | AttributedChatPacket) -> None:
        """Send a packet to one session. Raises SessionDisconnectedError if it is gone."""


class ChatLogSink(Protocol):
    """Append-only audit log of broadcast chat."""

    def log_broadcast(self, line: str) -> None:
        """Record one broadcast line."""
