"""
Unit tests for effective chat attribute resolution.
"""

import pytest

from chat_overrides.exceptions import InvalidColorFormat
from chat_overrides.game.attribute_resolver import ResolvedAttributes
from chat_overrides.models.override_record import Rgb


def test_resolve_without_override_uses_group_defaults(resolver, make_player, vip_group):
    """Test that a session with no cached record gets its group's values."""
    player = make_player(1, "Steve", group=vip_group)

    assert resolver.resolve(player) == ResolvedAttributes("[VIP] ", "", Rgb(0, 255, 0))


def test_resolve_color_only_override(resolver, session_cache, make_player, stored_override, vip_group):
    """Test that each attribute falls back independently."""
    stored_override("steve", color="255,0,0")
    player = make_player(1, "Steve", group=vip_group)
    session_cache.attach(player)

    attributes = resolver.resolve(player)

    assert attributes.prefix == "[VIP] "
    assert attributes.suffix == ""
    assert attributes.color == Rgb(255, 0, 0)


def test_resolve_empty_string_is_a_real_override(resolver, session_cache, make_player, stored_override, vip_group):
    """Test that an empty prefix replaces the group prefix instead of falling back."""
    stored_override("steve", prefix="", suffix=" the Brave")
    player = make_player(1, "Steve", group=vip_group)
    session_cache.attach(player)

    attributes = resolver.resolve(player)

    assert attributes.prefix == ""
    assert attributes.suffix == " the Brave"
    assert attributes.color == Rgb(0, 255, 0)


def test_resolve_invalid_stored_color_raises(resolver, session_cache, make_player, stored_override):
    """Test that an undecodable stored color is surfaced, not replaced by the default."""
    stored_override("steve", color="256,0,0")
    player = make_player(1, "Steve")
    session_cache.attach(player)

    with pytest.raises(InvalidColorFormat):
        resolver.resolve(player)


def test_resolve_reflects_group_change(resolver, make_player, vip_group):
    """Test that group defaults are read at resolution time."""
    player = make_player(1, "Steve")
    assert resolver.resolve(player).prefix == ""

    player.group = vip_group

    assert resolver.resolve(player).prefix == "[VIP] "
