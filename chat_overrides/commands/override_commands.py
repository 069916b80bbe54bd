"""
Administrative override command handlers.

Administrators edit an account's override record here. Every edit goes
straight to the store and then refreshes the cached record of any connected
session of that account so the change applies to the next chat line.
"""

from typing import Any

from ..exceptions import InvalidColorFormat, OverrideStoreError
from ..game.color_codec import format_color, parse_color
from ..game.session_cache import SessionOverrideCache
from ..models.override_record import OverrideRecord
from ..persistence.override_store import OverrideStore
from ..realtime.host_protocols import SessionRegistry
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

USAGE = (
    "Usage: overrides <prefix|suffix|color> <account> [value] | "
    "overrides permission <add|remove> <account> <permission> | "
    "overrides <reset|show> <account>"
)


class OverrideCommandService:
    """Applies administrative edits to override records."""

    def __init__(self, store: OverrideStore, cache: SessionOverrideCache, registry: SessionRegistry) -> None:
        self.store = store
        self.cache = cache
        self.registry = registry

    def _load(self, account_id: str) -> OverrideRecord:
        return self.store.get(account_id) or OverrideRecord(account_id=account_id)

    def _save(self, record: OverrideRecord) -> None:
        if record.is_empty():
            self.store.delete(record.account_id)
        else:
            self.store.upsert(record)
        self.cache.refresh_account(record.account_id, self.registry)

    def set_prefix(self, account_id: str, value: str | None) -> dict[str, str]:
        record = self._load(account_id)
        record.prefix = value
        self._save(record)
        if value is None:
            return {"result": f"Cleared the chat prefix of {account_id}."}
        return {"result": f"Set the chat prefix of {account_id} to '{value}'."}

    def set_suffix(self, account_id: str, value: str | None) -> dict[str, str]:
        record = self._load(account_id)
        record.suffix = value
        self._save(record)
        if value is None:
            return {"result": f"Cleared the chat suffix of {account_id}."}
        return {"result": f"Set the chat suffix of {account_id} to '{value}'."}

    def set_color(self, account_id: str, value: str | None) -> dict[str, str]:
        """Validate and store a chat color; invalid colors never reach the store."""
        normalized = None
        if value is not None:
            try:
                normalized = format_color(parse_color(value))
            except InvalidColorFormat as e:
                return {"result": e.user_friendly}

        record = self._load(account_id)
        record.color = normalized
        self._save(record)
        if normalized is None:
            return {"result": f"Cleared the chat color of {account_id}."}
        return {"result": f"Set the chat color of {account_id} to {normalized}."}

    def add_permission(self, account_id: str, permission: str) -> dict[str, str]:
        record = self._load(account_id)
        if record.has_permission(permission):
            return {"result": f"{account_id} already has the permission '{permission}'."}
        record.permissions = record.permissions | {permission}
        self._save(record)
        return {"result": f"Granted '{permission}' to {account_id}."}

    def remove_permission(self, account_id: str, permission: str) -> dict[str, str]:
        record = self.store.get(account_id)
        if record is None or not record.has_permission(permission):
            return {"result": f"{account_id} does not have the permission '{permission}'."}
        record.permissions = record.permissions - {permission}
        self._save(record)
        return {"result": f"Removed '{permission}' from {account_id}."}

    def reset(self, account_id: str) -> dict[str, str]:
        removed = self.store.delete(account_id)
        self.cache.refresh_account(account_id, self.registry)
        if not removed:
            return {"result": f"{account_id} has no overrides."}
        return {"result": f"Removed all overrides of {account_id}."}

    def show(self, account_id: str) -> dict[str, str]:
        record = self.store.get(account_id)
        if record is None:
            return {"result": f"{account_id} has no overrides."}
        permissions = ", ".join(sorted(record.permissions)) or "none"
        return {
            "result": (
                f"Overrides of {account_id}: prefix={record.prefix!r} suffix={record.suffix!r} "
                f"color={record.color!r} permissions={permissions}"
            )
        }


async def handle_override_command(
    command_data: dict[str, Any], service: OverrideCommandService, player_name: str
) -> dict[str, str]:
    """
    Handle the overrides admin command.

    Args:
        command_data: Parsed command with 'action', 'account_id' and optional
            'value' / 'permission_action' / 'permission'
        service: Override command service
        player_name: Administrator name for logging

    Returns:
        dict: Command result
    """
    action = command_data.get("action")
    account_id = command_data.get("account_id")
    logger.debug("Processing overrides command", player_name=player_name, command_data=command_data)

    if not action or not account_id:
        return {"result": USAGE}

    try:
        if action == "prefix":
            result = service.set_prefix(account_id, command_data.get("value"))
        elif action == "suffix":
            result = service.set_suffix(account_id, command_data.get("value"))
        elif action == "color":
            result = service.set_color(account_id, command_data.get("value"))
        elif action == "permission":
            permission = command_data.get("permission")
            permission_action = command_data.get("permission_action")
            if not permission or permission_action not in ("add", "remove"):
                return {"result": USAGE}
            if permission_action == "add":
                result = service.add_permission(account_id, permission)
            else:
                result = service.remove_permission(account_id, permission)
        elif action == "reset":
            result = service.reset(account_id)
        elif action == "show":
            result = service.show(account_id)
        else:
            return {"result": USAGE}
    except OverrideStoreError as e:
        logger.error("Overrides command failed", admin_name=player_name, account_id=account_id, error=str(e))
        return {"result": f"Error updating overrides of {account_id}: {e.user_friendly}"}

    logger.info("Overrides command completed", admin_name=player_name, action=action, account_id=account_id)
    return result
