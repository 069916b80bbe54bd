"""
Per-session override cache.

At login the account's OverrideRecord is read from the store once and
attached to the session's slot; the resolver and permission gate read it from
here for the rest of the session. An empty slot means "always use group
defaults".
"""

from ..models.override_record import OverrideRecord
from ..persistence.override_store import OverrideStore
from ..realtime.host_protocols import PlayerSession, SessionRegistry
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class SessionOverrideCache:
    """Maps connected session index to its cached OverrideRecord."""

    def __init__(self, store: OverrideStore) -> None:
        self.store = store
        self._slots: dict[int, OverrideRecord] = {}

    def attach(self, session: PlayerSession) -> OverrideRecord | None:
        """
        Load the session's account from the store into its slot.

        Store errors propagate; the slot is left empty in that case.
        """
        self._slots.pop(session.index, None)
        if not session.account_id:
            return None

        record = self.store.get(session.account_id)
        if record is None:
            logger.debug("No overrides for account", account_id=session.account_id, session_index=session.index)
            return None

        self._slots[session.index] = record
        logger.info("Overrides attached to session", account_id=session.account_id, session_index=session.index)
        return record

    def get(self, session_index: int) -> OverrideRecord | None:
        return self._slots.get(session_index)

    def evict(self, session_index: int) -> None:
        if self._slots.pop(session_index, None) is not None:
            logger.debug("Overrides evicted", session_index=session_index)

    def refresh_account(self, account_id: str, registry: SessionRegistry) -> int:
        """
        Re-read the store for every connected, logged-in session of an account.

        Returns:
            Number of sessions refreshed
        """
        refreshed = 0
        for session in registry.connected_sessions():
            if session.account_id == account_id and session.is_logged_in:
                self.attach(session)
                refreshed += 1
        if refreshed:
            logger.info("Overrides refreshed", account_id=account_id, session_count=refreshed)
        return refreshed

    def clear(self) -> None:
        self._slots.clear()

    def __len__(self) -> int:
        return len(self._slots)
