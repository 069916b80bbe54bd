"""
Per-account chat overrides for a multiplayer game server.

Players may carry a personal chat prefix, suffix, color and extra permission
grants layered on top of their group's defaults. The package resolves those
overrides for every chat event and permission check and broadcasts chat in
either a flat line or an avatar-attributed speech bubble.

All imports should use explicit paths like
'from chat_overrides.game.color_codec import parse_color'.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
