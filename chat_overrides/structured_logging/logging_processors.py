"""
Structlog processors shared by every logger of the plugin.

sanitize_sensitive_data redacts values whose key looks like a secret before
anything is rendered; add_correlation_id tags each record so the lines of
one chat broadcast can be grouped when a caller binds the id up front.
"""

import re
import uuid
from typing import Any

_SENSITIVE_KEY = re.compile(
    r"\bpassword\b|\btoken\b|\bsecret\b|_key\b|^key$|\bcredential\b|\bauth\b|\bauthorization\b"
)

# Keys that match the pattern above but never carry secrets
_SAFE_FIELDS = frozenset({"account_key", "permission_key"})

REDACTED = "[REDACTED]"


def _is_sensitive(key: str) -> bool:
    key_lower = key.lower()
    return key_lower not in _SAFE_FIELDS and _SENSITIVE_KEY.search(key_lower) is not None


def _redact(data: dict[str, Any]) -> dict[str, Any]:
    return {
        key: REDACTED if _is_sensitive(key) else (_redact(value) if isinstance(value, dict) else value)
        for key, value in data.items()
    }


def sanitize_sensitive_data(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Redact secret-looking keys, including inside nested dictionaries.

    Args:
        _logger: Logger instance (unused)
        _name: Method name (unused)
        event_dict: Event dictionary to sanitize

    Returns:
        A sanitized copy of event_dict
    """
    return _redact(event_dict)


def add_correlation_id(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Attach a fresh correlation_id unless the caller already bound one."""
    event_dict.setdefault("correlation_id", uuid.uuid4().hex)
    return event_dict
