"""
Test configuration and fixtures for the chat overrides test suite.

Environment variables are set before any configuration is loaded so that
AppConfig never picks up a developer's .env values.
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

os.environ.setdefault("LOGGING_ENVIRONMENT", "unit_test")
os.environ.setdefault("LOGGING_LEVEL", "DEBUG")
os.environ.setdefault("LOGGING_FORMAT", "human")

from chat_overrides.config import ChatConfig, reset_config  # noqa: E402
from chat_overrides.game.attribute_resolver import AttributeResolver  # noqa: E402
from chat_overrides.game.session_cache import SessionOverrideCache  # noqa: E402
from chat_overrides.models.override_record import GroupDefaults, OverrideRecord, Rgb  # noqa: E402
from chat_overrides.persistence.override_store import JsonOverrideStore  # noqa: E402
from chat_overrides.realtime.connection_manager import ConnectedPlayer, ConnectionManager  # noqa: E402
from chat_overrides.services.chat_logger import ChatLogger  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config() -> Generator[None, None, None]:
    """Drop any cached configuration around every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def default_group() -> GroupDefaults:
    return GroupDefaults(name="Default", prefix="", suffix="", chat_color=Rgb(255, 255, 255))


@pytest.fixture
def vip_group() -> GroupDefaults:
    return GroupDefaults(name="VIP", prefix="[VIP] ", suffix="", chat_color=Rgb(0, 255, 0))


@pytest.fixture
def override_store(tmp_path: Path) -> JsonOverrideStore:
    return JsonOverrideStore(tmp_path / "overrides")


@pytest.fixture
def session_cache(override_store: JsonOverrideStore) -> SessionOverrideCache:
    return SessionOverrideCache(override_store)


@pytest.fixture
def resolver(session_cache: SessionOverrideCache) -> AttributeResolver:
    return AttributeResolver(session_cache)


@pytest.fixture
def registry() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def chat_logger(tmp_path: Path) -> ChatLogger:
    return ChatLogger(tmp_path / "logs")


@pytest.fixture
def chat_config() -> ChatConfig:
    return ChatConfig(chat_format="{0} {1}{2}{3}: {4}")


@pytest.fixture
def make_player(registry: ConnectionManager, default_group: GroupDefaults):
    """Factory that connects a logged-in player with chat permission."""

    def _make_player(
        index: int,
        name: str,
        account_id: str | None = None,
        group: GroupDefaults | None = None,
        **kwargs,
    ) -> ConnectedPlayer:
        kwargs.setdefault("is_logged_in", True)
        kwargs.setdefault("permissions", {"chat.canchat"})
        player = ConnectedPlayer(
            index=index,
            name=name,
            group=group or default_group,
            account_id=account_id if account_id is not None else name.lower(),
            **kwargs,
        )
        registry.connect(player)
        return player

    return _make_player


@pytest.fixture
def stored_override(override_store: JsonOverrideStore):
    """Factory that writes an override record to the store."""

    def _stored_override(account_id: str, **fields) -> OverrideRecord:
        record = OverrideRecord(account_id=account_id, **fields)
        override_store.upsert(record)
        return record

    return _stored_override
