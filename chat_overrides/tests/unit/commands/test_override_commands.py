"""
Unit tests for the overrides admin command.
"""

from unittest.mock import MagicMock

import pytest

from chat_overrides.commands.override_commands import USAGE, OverrideCommandService, handle_override_command
from chat_overrides.exceptions import OverrideStoreError


@pytest.fixture
def service(override_store, session_cache, registry):
    return OverrideCommandService(override_store, session_cache, registry)


@pytest.mark.asyncio
async def test_set_prefix_stores_and_refreshes(service, override_store, session_cache, make_player):
    """Test that an edit is stored and reaches the connected session."""
    steve = make_player(1, "Steve")

    result = await handle_override_command(
        {"action": "prefix", "account_id": "steve", "value": "[VIP] "}, service, "Admin"
    )

    assert result["result"] == "Set the chat prefix of steve to '[VIP] '."
    assert override_store.get("steve").prefix == "[VIP] "
    assert session_cache.get(steve.index).prefix == "[VIP] "


@pytest.mark.asyncio
async def test_clear_last_field_deletes_record(service, override_store, stored_override):
    """Test that a record with nothing left is removed from the store."""
    stored_override("steve", suffix="!")

    result = await handle_override_command({"action": "suffix", "account_id": "steve"}, service, "Admin")

    assert result["result"] == "Cleared the chat suffix of steve."
    assert override_store.get("steve") is None


@pytest.mark.asyncio
async def test_set_color_normalizes(service, override_store):
    """Test that colors are stored in canonical form."""
    result = await handle_override_command(
        {"action": "color", "account_id": "steve", "value": " 1, 2,3"}, service, "Admin"
    )

    assert result["result"] == "Set the chat color of steve to 1,2,3."
    assert override_store.get("steve").color == "1,2,3"


@pytest.mark.asyncio
async def test_set_invalid_color_is_rejected(service, override_store):
    """Test that an invalid color never reaches the store."""
    result = await handle_override_command(
        {"action": "color", "account_id": "steve", "value": "256,0,0"}, service, "Admin"
    )

    assert result["result"] == "The color provided was not in the correct format (expected r,g,b)."
    assert override_store.get("steve") is None


@pytest.mark.asyncio
async def test_permission_add_and_remove(service, override_store):
    """Test granting and revoking permissions."""
    grant = {"action": "permission", "permission_action": "add", "account_id": "steve", "permission": "warp.use"}
    revoke = {**grant, "permission_action": "remove"}

    assert (await handle_override_command(grant, service, "Admin"))["result"] == "Granted 'warp.use' to steve."
    assert "already has" in (await handle_override_command(grant, service, "Admin"))["result"]
    assert override_store.get("steve").permissions == {"warp.use"}

    assert (await handle_override_command(revoke, service, "Admin"))["result"] == "Removed 'warp.use' from steve."
    assert "does not have" in (await handle_override_command(revoke, service, "Admin"))["result"]
    assert override_store.get("steve") is None


@pytest.mark.asyncio
async def test_reset_and_show(service, session_cache, make_player, stored_override):
    """Test showing and resetting a record."""
    stored_override("steve", prefix="[S] ", permissions={"b", "a"})
    steve = make_player(1, "Steve")
    session_cache.attach(steve)

    shown = await handle_override_command({"action": "show", "account_id": "steve"}, service, "Admin")
    assert shown["result"] == "Overrides of steve: prefix='[S] ' suffix=None color=None permissions=a, b"

    reset = await handle_override_command({"action": "reset", "account_id": "steve"}, service, "Admin")
    assert reset["result"] == "Removed all overrides of steve."
    assert session_cache.get(steve.index) is None

    again = await handle_override_command({"action": "reset", "account_id": "steve"}, service, "Admin")
    assert again["result"] == "steve has no overrides."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "command_data",
    [
        {},
        {"action": "prefix"},
        {"action": "fly", "account_id": "steve"},
        {"action": "permission", "account_id": "steve", "permission": "x"},
        {"action": "permission", "account_id": "steve", "permission_action": "add"},
    ],
)
async def test_bad_input_returns_usage(service, command_data):
    """Test that malformed commands return usage text."""
    assert await handle_override_command(command_data, service, "Admin") == {"result": USAGE}


@pytest.mark.asyncio
async def test_store_failure_is_reported(session_cache, registry):
    """Test that store errors become a command result."""
    store = MagicMock()
    store.get.return_value = None
    store.upsert.side_effect = OverrideStoreError("disk full", operation="upsert")
    service = OverrideCommandService(store, session_cache, registry)

    result = await handle_override_command({"action": "prefix", "account_id": "steve", "value": "x"}, service, "Admin")

    assert result["result"] == "Error updating overrides of steve: disk full"
