"""
Chat broadcast pipeline.

Turns one ChatReceived event into output: checks that the line is chat the
plugin should own, resolves the sender's prefix, suffix and color, and hands
it to the configured broadcasting strategy.
"""

import asyncio

from ..config.models import ChatConfig
from ..events.event_types import ChatReceived
from ..exceptions import InvalidColorFormat, SessionDisconnectedError
from ..realtime.chat_broadcasting_strategies import ChatBroadcastingStrategy
from ..realtime.host_protocols import PlayerSession, SessionRegistry
from ..structured_logging.enhanced_logging_config import get_logger
from .attribute_resolver import AttributeResolver
from .permission_gate import PermissionDecision, PermissionOverrideGate

logger = get_logger("communications.chat_pipeline")


class ChatBroadcastPipeline:
    """Orchestrates precondition checks, attribute resolution and broadcast."""

    def __init__(
        self,
        registry: SessionRegistry,
        resolver: AttributeResolver,
        strategy: ChatBroadcastingStrategy,
        chat_config: ChatConfig,
        gate: PermissionOverrideGate | None = None,
    ) -> None:
        self.registry = registry
        self.resolver = resolver
        self.strategy = strategy
        self.chat_config = chat_config
        self.gate = gate
        self._session_locks: dict[int, asyncio.Lock] = {}
        # Chat events holding or waiting on each session lock
        self._lock_users: dict[int, int] = {}
        self._released: set[int] = set()

    def is_command(self, text: str) -> bool:
        return text.startswith(self.chat_config.command_specifier) or text.startswith(
            self.chat_config.command_silent_specifier
        )

    def _can_chat(self, session: PlayerSession) -> bool:
        if session.muted:
            return False
        permission = self.chat_config.chat_permission
        # Override grants apply to the chat permission like to any other
        if self.gate is not None and self.gate.check(session, permission) is PermissionDecision.ALLOWED:
            return True
        return session.has_permission(permission)

    def session_lock(self, session_index: int) -> asyncio.Lock:
        lock = self._session_locks.get(session_index)
        if lock is None:
            lock = self._session_locks[session_index] = asyncio.Lock()
        return lock

    def release_session(self, session_index: int) -> None:
        """
        Forget the per-session lock when the session goes away.

        A lock still held or awaited by a chat event is dropped only once the
        last of those events finishes, so a rename sequence in flight keeps
        excluding later messages from the same session.
        """
        if self._lock_users.get(session_index):
            self._released.add(session_index)
            return
        self._session_locks.pop(session_index, None)

    def _leave_lock(self, session_index: int) -> None:
        remaining = self._lock_users[session_index] - 1
        if remaining:
            self._lock_users[session_index] = remaining
            return
        del self._lock_users[session_index]
        if session_index in self._released:
            self._released.discard(session_index)
            self._session_locks.pop(session_index, None)

    async def handle_chat(self, event: ChatReceived) -> None:
        """
        Handle one chat event.

        Leaves the event unhandled when another consumer already took it, the
        sender may not chat, or the text is a command. Otherwise the event is
        always marked handled, including when color resolution fails.
        """
        if event.handled:
            return

        session = self.registry.get_session(event.session_index)
        if session is None:
            return

        if not self._can_chat(session):
            return

        if self.is_command(event.text):
            return

        index = session.index
        lock = self.session_lock(index)
        self._lock_users[index] = self._lock_users.get(index, 0) + 1
        try:
            async with lock:
                await self._resolve_and_broadcast(event, session)
        finally:
            self._leave_lock(index)

    async def _resolve_and_broadcast(self, event: ChatReceived, session: PlayerSession) -> None:
        try:
            attributes = self.resolver.resolve(session)
        except InvalidColorFormat as e:
            event.handled = True
            logger.warning(
                "Dropped chat message with undecodable override color",
                session_index=session.index,
                account_id=session.account_id,
                color=e.text,
            )
            await self._notify_sender(session)
            return

        try:
            await self.strategy.broadcast(session, event.text, attributes)
        finally:
            # Partial output must not be delivered a second time by the host
            event.handled = True

    async def _notify_sender(self, session: PlayerSession) -> None:
        try:
            await self.registry.send_message(
                session, self.chat_config.resolution_failure_notice, session.group.chat_color
            )
        except SessionDisconnectedError:
            logger.debug("Sender disconnected before resolution notice", session_index=session.index)
