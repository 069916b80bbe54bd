"""
Override record storage.

Each account's overrides live in a separate JSON file:
{storage_dir}/{quoted_account_id}.json

The store is the source of truth. Sessions only ever hold a cached reference
to a record read from here at login.
"""

import json
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ErrorContext, OverrideStoreError
from ..models.override_record import OverrideRecord
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

STORE_FORMAT_VERSION = "1.0"


class OverrideStore(Protocol):
    """Keyed create/read/upsert/delete access to override records."""

    def get(self, account_id: str) -> OverrideRecord | None:
        """Return the record for account_id, or None if it has none."""

    def upsert(self, record: OverrideRecord) -> None:
        """Create or replace the record for record.account_id."""

    def delete(self, account_id: str) -> bool:
        """Remove the record. Returns False if there was none."""


class JsonOverrideStore:
    """Stores one OverrideRecord per account as a JSON file."""

    def __init__(self, storage_dir: str | Path) -> None:
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _get_record_path(self, account_id: str) -> Path:
        """Get the file path for an account's overrides."""
        return self.storage_dir / f"{quote(account_id, safe='')}.json"

    def get(self, account_id: str) -> OverrideRecord | None:
        file_path = self._get_record_path(account_id)
        if not file_path.exists():
            return None

        try:
            with open(file_path, encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)
            record = OverrideRecord.model_validate(data["record"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, PydanticValidationError) as e:
            logger.error("Error loading override record", account_id=account_id, error=str(e))
            raise OverrideStoreError(
                f"Could not read overrides for {account_id}",
                ErrorContext(account_id=account_id),
                operation="get",
            ) from e

        if record.account_id != account_id:
            raise OverrideStoreError(
                f"Override file for {account_id} holds account {record.account_id}",
                ErrorContext(account_id=account_id),
                operation="get",
            )
        return record

    def upsert(self, record: OverrideRecord) -> None:
        file_path = self._get_record_path(record.account_id)
        data = {
            "version": STORE_FORMAT_VERSION,
            # Sets are not JSON serializable; keep a stable order on disk
            "record": {**record.model_dump(), "permissions": sorted(record.permissions)},
        }
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error("Error saving override record", account_id=record.account_id, error=str(e))
            raise OverrideStoreError(
                f"Could not write overrides for {record.account_id}",
                ErrorContext(account_id=record.account_id),
                operation="upsert",
            ) from e
        logger.debug("Override record saved", account_id=record.account_id)

    def delete(self, account_id: str) -> bool:
        file_path = self._get_record_path(account_id)
        try:
            file_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error("Error deleting override record", account_id=account_id, error=str(e))
            raise OverrideStoreError(
                f"Could not delete overrides for {account_id}",
                ErrorContext(account_id=account_id),
                operation="delete",
            ) from e
        logger.debug("Override record deleted", account_id=account_id)
        return True
