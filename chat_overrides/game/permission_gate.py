"""
Just-in-time permission grants from override records.

The gate sits in front of the host's group-based evaluation and can only
add permissions: a permission missing from the override set defers to the
host rather than denying.
"""

from enum import Enum

from ..realtime.host_protocols import PlayerSession
from ..structured_logging.enhanced_logging_config import get_logger
from .session_cache import SessionOverrideCache

logger = get_logger(__name__)


class PermissionDecision(Enum):
    """Outcome of an override permission check."""

    ALLOWED = "allowed"
    DEFERRED = "deferred"


class PermissionOverrideGate:
    """Grants permissions listed in a session's cached override record."""

    def __init__(self, cache: SessionOverrideCache) -> None:
        self.cache = cache

    def check(self, session: PlayerSession | None, permission: str) -> PermissionDecision:
        if session is None or not session.is_logged_in:
            return PermissionDecision.DEFERRED

        record = self.cache.get(session.index)
        if record is None or not record.has_permission(permission):
            return PermissionDecision.DEFERRED

        logger.debug(
            "Permission granted by override",
            account_id=session.account_id,
            session_index=session.index,
            permission=permission,
        )
        return PermissionDecision.ALLOWED
