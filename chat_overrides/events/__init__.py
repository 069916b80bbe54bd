"""
Events module for the chat overrides plugin.

Provides the host event types the plugin subscribes to and a sequential
async event bus that hands out disposable subscriptions.
"""

from .event_bus import EventBus, Subscription
from .event_types import BaseEvent, ChatReceived, PermissionCheck, PlayerLogout, PlayerPostLogin

__all__ = [
    "EventBus",
    "Subscription",
    "BaseEvent",
    "ChatReceived",
    "PermissionCheck",
    "PlayerLogout",
    "PlayerPostLogin",
]
