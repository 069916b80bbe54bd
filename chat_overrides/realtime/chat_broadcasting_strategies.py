"""
Chat broadcasting strategies.

Two mutually exclusive ways of putting a chat line in front of players:

* FlatBroadcastStrategy sends one formatted line to every session.
* AttributedBroadcastStrategy renders the text as a speech bubble above the
  sender by briefly renaming the sender on every client, sending the bubble,
  and renaming back.

The pipeline picks one from the static attributed_mode configuration flag.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..config.models import ChatConfig
from ..exceptions import SessionDisconnectedError
from ..game.attribute_resolver import ResolvedAttributes
from ..models.override_record import Rgb
from ..structured_logging.enhanced_logging_config import get_logger
from .host_protocols import (
    AttributedChatPacket,
    ChatLogSink,
    NameChangePacket,
    PlayerSession,
    SessionRegistry,
)

logger = get_logger(__name__)


@dataclass
class BroadcastStats:
    """Delivery counts for one fan-out."""

    total_sessions: int = 0
    successful_deliveries: int = 0
    skipped_disconnected: int = 0


async def deliver_to_all(
    registry: SessionRegistry,
    send: Callable[[PlayerSession], Awaitable[None]],
    exclude_index: int | None = None,
) -> BroadcastStats:
    """
    Run send() for every connected session, skipping ones that disconnect mid-broadcast.

    Args:
        registry: Host session registry
        send: Coroutine function delivering to one session
        exclude_index: Session index to leave out

    Returns:
        BroadcastStats for the fan-out
    """
    stats = BroadcastStats()
    for session in list(registry.connected_sessions()):
        if session.index == exclude_index:
            continue
        stats.total_sessions += 1
        try:
            await send(session)
        except SessionDisconnectedError:
            stats.skipped_disconnected += 1
            logger.debug("Skipped disconnected session during broadcast", session_index=session.index)
            continue
        stats.successful_deliveries += 1
    return stats


class ChatBroadcastingStrategy(ABC):
    """Abstract base class for chat broadcasting strategies."""

    def __init__(self, registry: SessionRegistry, log_sink: ChatLogSink, chat_config: ChatConfig) -> None:
        self.registry = registry
        self.log_sink = log_sink
        self.chat_config = chat_config

    @abstractmethod
    async def broadcast(self, session: PlayerSession, text: str, attributes: ResolvedAttributes) -> None:
        """
        Broadcast one chat line from session.

        Args:
            session: Sender
            text: Raw chat text
            attributes: Resolved prefix, suffix and color
        """

    async def _send_private(self, session: PlayerSession, text: str, color: Rgb) -> None:
        try:
            await self.registry.send_message(session, text, color)
        except SessionDisconnectedError:
            logger.debug("Sender disconnected before private message", session_index=session.index)

    async def _echo_to_server(self, line: str, color: Rgb) -> None:
        await self.registry.send_to_console(line, color)
        self.log_sink.log_broadcast(line)


class FlatBroadcastStrategy(ChatBroadcastingStrategy):
    """Formats a single line and sends it to all sessions, the console and the log."""

    def format_line(self, session: PlayerSession, text: str, attributes: ResolvedAttributes) -> str:
        return self.chat_config.chat_format.format(
            session.group.name, attributes.prefix, session.name, attributes.suffix, text
        )

    async def broadcast(self, session: PlayerSession, text: str, attributes: ResolvedAttributes) -> None:
        line = self.format_line(session, text, attributes)
        color = attributes.color

        async def send(target: PlayerSession) -> None:
            await self.registry.send_message(target, line, color)

        stats = await deliver_to_all(self.registry, send)
        await self._echo_to_server(line, color)
        logger.debug(
            "Broadcasted flat chat line",
            session_index=session.index,
            delivered=stats.successful_deliveries,
            skipped=stats.skipped_disconnected,
        )


class AttributedBroadcastStrategy(ChatBroadcastingStrategy):
    """
    Anchors chat text to the sender's avatar.

    The sequence rename -> bubble -> restore must not interleave with another
    message from the same sender; the pipeline holds a per-session lock
    around broadcast().
    """

    def compose_name(self, session: PlayerSession, attributes: ResolvedAttributes) -> str:
        return self.chat_config.chat_above_heads_format.format(
            session.group.name, attributes.prefix, session.name, attributes.suffix
        )

    async def _broadcast_packet(
        self, packet: NameChangePacket | AttributedChatPacket, exclude_index: int | None = None
    ) -> BroadcastStats:
        async def send(target: PlayerSession) -> None:
            await self.registry.send_packet(target, packet)

        return await deliver_to_all(self.registry, send, exclude_index=exclude_index)

    async def broadcast(self, session: PlayerSession, text: str, attributes: ResolvedAttributes) -> None:
        composed = self.compose_name(session, attributes)
        original_name = session.display_name

        session.display_name = composed
        try:
            await self._broadcast_packet(NameChangePacket(session.index, composed))
            # The sender sees its own line through the private confirmation below
            await self._broadcast_packet(
                AttributedChatPacket(session.index, text, attributes.color), exclude_index=session.index
            )
        finally:
            session.display_name = original_name
            await self._broadcast_packet(NameChangePacket(session.index, original_name))

        confirmation = f"<{composed}> {text}"
        await self._send_private(session, confirmation, attributes.color)
        await self._echo_to_server(confirmation, attributes.color)
        logger.debug("Broadcasted attributed chat", session_index=session.index, composed_name=composed)


def create_broadcasting_strategy(
    chat_config: ChatConfig, registry: SessionRegistry, log_sink: ChatLogSink
) -> ChatBroadcastingStrategy:
    """Pick the strategy selected by chat_config.attributed_mode."""
    strategy_class: type[ChatBroadcastingStrategy] = (
        AttributedBroadcastStrategy if chat_config.attributed_mode else FlatBroadcastStrategy
    )
    logger.info("Chat broadcasting strategy selected", strategy=strategy_class.__name__)
    return strategy_class(registry, log_sink, chat_config)
