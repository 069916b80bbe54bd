"""
Unit tests for the in-memory session registry.
"""

import pytest

from chat_overrides.exceptions import SessionDisconnectedError
from chat_overrides.models.override_record import Rgb
from chat_overrides.realtime.connection_manager import ConnectedPlayer
from chat_overrides.realtime.host_protocols import NameChangePacket


def test_connected_player_defaults(default_group):
    """Test that the display name starts as the player name."""
    player = ConnectedPlayer(index=0, name="Steve", group=default_group)

    assert player.display_name == "Steve"
    assert player.is_logged_in is False
    assert player.has_permission("chat.canchat") is False


def test_connect_and_disconnect(registry, make_player):
    """Test session bookkeeping."""
    steve = make_player(1, "Steve")
    make_player(2, "Steve2", account_id="steve")

    assert registry.get_session(1) is steve
    assert len(registry.sessions_for_account("steve")) == 2

    assert registry.disconnect(1) is steve
    assert registry.disconnect(1) is None
    assert registry.get_session(1) is None
    assert [s.index for s in registry.connected_sessions()] == [2]


@pytest.mark.asyncio
async def test_send_to_connected_session(registry, make_player):
    """Test delivery of lines and packets."""
    steve = make_player(1, "Steve")

    await registry.send_message(steve, "hi", Rgb(1, 1, 1))
    await registry.send_packet(steve, NameChangePacket(1, "Steve"))
    await registry.send_to_console("hi", Rgb(1, 1, 1))

    assert steve.messages == [("hi", Rgb(1, 1, 1))]
    assert steve.packets == [NameChangePacket(1, "Steve")]
    assert registry.console == [("hi", Rgb(1, 1, 1))]


@pytest.mark.asyncio
async def test_send_to_replaced_session_raises(registry, make_player):
    """Test that a stale session reference is treated as disconnected."""
    stale = make_player(1, "Steve")
    make_player(1, "Alex")

    with pytest.raises(SessionDisconnectedError) as exc_info:
        await registry.send_message(stale, "hi", Rgb(0, 0, 0))
    assert exc_info.value.session_index == 1
    assert stale.messages == []
