"""
Chat overrides plugin.

OverridesPlugin is the composition root: it receives the host's collaborators
explicitly, builds the cache, resolver, gate and chat pipeline on top of them,
and registers its four event handlers. Every registration is released in
shutdown(), which also runs when the plugin is used as an async context
manager.
"""

from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from .commands.override_commands import OverrideCommandService
from .config import get_config, save_config_snapshot
from .config.models import AppConfig
from .events.event_bus import EventBus, Subscription
from .events.event_types import ChatReceived, PermissionCheck, PlayerLogout, PlayerPostLogin
from .exceptions import ConfigurationError, OverrideStoreError
from .game.attribute_resolver import AttributeResolver
from .game.chat_pipeline import ChatBroadcastPipeline
from .game.permission_gate import PermissionDecision, PermissionOverrideGate
from .game.session_cache import SessionOverrideCache
from .persistence.override_store import JsonOverrideStore, OverrideStore
from .realtime.chat_broadcasting_strategies import create_broadcasting_strategy
from .realtime.host_protocols import ChatLogSink, SessionRegistry
from .services.chat_logger import ChatLogger
from .structured_logging.enhanced_logging_config import get_logger, setup_logging

logger = get_logger(__name__)


class OverridesPlugin:
    """Wires per-account chat overrides into a host server's event stream."""

    name = "Chat Overrides"

    def __init__(
        self,
        store: OverrideStore,
        registry: SessionRegistry,
        event_bus: EventBus,
        chat_logger: ChatLogSink,
        config: AppConfig,
    ) -> None:
        self.store = store
        self.registry = registry
        self.event_bus = event_bus
        self.config = config

        self.cache = SessionOverrideCache(store)
        self.resolver = AttributeResolver(self.cache)
        self.gate = PermissionOverrideGate(self.cache)
        self.pipeline = ChatBroadcastPipeline(
            registry,
            self.resolver,
            create_broadcasting_strategy(config.chat, registry, chat_logger),
            config.chat,
            gate=self.gate,
        )
        self.commands = OverrideCommandService(store, self.cache, registry)
        self._subscriptions: list[Subscription] = []

    @property
    def initialized(self) -> bool:
        return bool(self._subscriptions)

    def initialize(self) -> None:
        """Register the plugin's event handlers."""
        if self._subscriptions:
            return
        self._subscriptions = [
            self.event_bus.subscribe(ChatReceived, self.on_chat),
            self.event_bus.subscribe(PlayerPostLogin, self.on_post_login),
            self.event_bus.subscribe(PlayerLogout, self.on_logout),
            self.event_bus.subscribe(PermissionCheck, self.on_permission),
        ]
        logger.info(
            "Chat overrides plugin initialized",
            attributed_mode=self.config.chat.attributed_mode,
            subscription_count=len(self._subscriptions),
        )

    def shutdown(self) -> None:
        """Release every event registration, drop cached overrides and save the configuration."""
        try:
            for subscription in self._subscriptions:
                subscription.dispose()
        finally:
            self._subscriptions = []
            self.cache.clear()

        snapshot_path = self.config.storage.config_snapshot_path
        if snapshot_path:
            save_config_snapshot(self.config, Path(snapshot_path))
        logger.info("Chat overrides plugin shut down")

    async def __aenter__(self) -> "OverridesPlugin":
        self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.shutdown()

    async def on_chat(self, event: ChatReceived) -> None:
        await self.pipeline.handle_chat(event)

    def on_post_login(self, event: PlayerPostLogin) -> None:
        session = self.registry.get_session(event.session_index)
        if session is None:
            return
        try:
            self.cache.attach(session)
        except OverrideStoreError:
            logger.error(
                "Could not load overrides at login",
                session_index=event.session_index,
                account_id=session.account_id,
            )
            raise

    def on_logout(self, event: PlayerLogout) -> None:
        self.cache.evict(event.session_index)
        self.pipeline.release_session(event.session_index)

    def on_permission(self, event: PermissionCheck) -> None:
        session = self.registry.get_session(event.session_index)
        if self.gate.check(session, event.permission) is PermissionDecision.ALLOWED:
            event.handled = True


def build_plugin(registry: SessionRegistry, event_bus: EventBus, config: AppConfig | None = None) -> OverridesPlugin:
    """
    Build a plugin backed by the JSON override store and the file chat log.

    Args:
        registry: Host session registry
        event_bus: Host event bus
        config: Configuration; loaded with get_config() when omitted

    Returns:
        An uninitialized OverridesPlugin

    Raises:
        ConfigurationError: the environment holds an invalid setting
    """
    if config is None:
        try:
            config = get_config()
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Invalid chat overrides configuration", details={"errors": e.error_count()}
            ) from e
    setup_logging(config.logging.to_dict())

    store = JsonOverrideStore(config.storage.storage_dir)
    chat_logger = ChatLogger(Path(config.logging.log_base) / config.logging.environment)
    return OverridesPlugin(store, registry, event_bus, chat_logger, config)
