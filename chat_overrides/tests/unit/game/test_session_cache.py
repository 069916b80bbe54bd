"""
Unit tests for the per-session override cache.
"""

from unittest.mock import MagicMock

import pytest

from chat_overrides.exceptions import OverrideStoreError
from chat_overrides.game.session_cache import SessionOverrideCache
from chat_overrides.models.override_record import OverrideRecord


def test_attach_loads_record(session_cache, make_player, stored_override):
    """Test that attach() reads the account's record into the session slot."""
    record = stored_override("steve", prefix="[S] ")
    player = make_player(3, "Steve")

    assert session_cache.attach(player) == record
    assert session_cache.get(3) == record
    assert len(session_cache) == 1


def test_attach_without_record_leaves_slot_empty(session_cache, make_player):
    """Test an account with no overrides."""
    player = make_player(3, "Steve")

    assert session_cache.attach(player) is None
    assert session_cache.get(3) is None


def test_attach_without_account_skips_store(make_player):
    """Test that a session with no account never touches the store."""
    store = MagicMock()
    cache = SessionOverrideCache(store)
    player = make_player(3, "Guest", account_id="")

    assert cache.attach(player) is None
    store.get.assert_not_called()


def test_attach_replaces_previous_slot(session_cache, make_player, stored_override):
    """Test that a reused slot index never keeps the previous occupant's record."""
    stored_override("steve", prefix="[S] ")
    steve = make_player(3, "Steve")
    session_cache.attach(steve)

    alex = make_player(3, "Alex")
    session_cache.attach(alex)

    assert session_cache.get(3) is None


def test_attach_propagates_store_errors(make_player):
    """Test that store failures are not swallowed and leave the slot empty."""
    store = MagicMock()
    store.get.side_effect = OverrideStoreError("boom", operation="get")
    cache = SessionOverrideCache(store)
    player = make_player(3, "Steve")

    with pytest.raises(OverrideStoreError):
        cache.attach(player)
    assert cache.get(3) is None


def test_evict_and_clear(session_cache, make_player, stored_override):
    """Test removing cached records."""
    stored_override("steve", prefix="[S] ")
    stored_override("alex", prefix="[A] ")
    session_cache.attach(make_player(1, "Steve"))
    session_cache.attach(make_player(2, "Alex"))

    session_cache.evict(1)
    session_cache.evict(99)
    assert session_cache.get(1) is None
    assert session_cache.get(2) is not None

    session_cache.clear()
    assert len(session_cache) == 0


def test_refresh_account_reloads_logged_in_sessions(session_cache, override_store, registry, make_player):
    """Test that an edit reaches every logged-in session of the account."""
    first = make_player(1, "Steve")
    second = make_player(2, "Steve2", account_id="steve")
    pending = make_player(3, "Steve3", account_id="steve", is_logged_in=False)
    other = make_player(4, "Alex")

    override_store.upsert(OverrideRecord(account_id="steve", suffix="!"))

    assert session_cache.refresh_account("steve", registry) == 2
    assert session_cache.get(first.index).suffix == "!"
    assert session_cache.get(second.index).suffix == "!"
    assert session_cache.get(pending.index) is None
    assert session_cache.get(other.index) is None
