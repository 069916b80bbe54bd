"""
Chat audit log.

Every broadcast line is appended as one JSON object per line to a daily file
under the configured log directory, and echoed through structlog.
"""

import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger("communications.chat_logger")


class ChatLogger:
    """Append-only JSON-lines log of broadcast chat."""

    def __init__(self, log_dir: str | Path) -> None:
        """
        Initialize chat logger.

        Args:
            log_dir: Directory for log files
        """
        self.log_dir = Path(log_dir)
        self._write_lock = threading.Lock()
        logger.info("ChatLogger initialized", log_dir=str(self.log_dir))

    def _get_current_log_file(self, log_type: str) -> Path:
        """
        Get the current log file path for the specified type.

        Args:
            log_type: Type of log ('broadcast')

        Returns:
            Path to current log file
        """
        today = datetime.now(UTC).strftime("%Y-%m-%d")
        return self.log_dir / f"chat_{log_type}_{today}.log"

    def _write_log_entry(self, log_type: str, entry: dict[str, Any]) -> None:
        log_file = self._get_current_log_file(log_type)
        entry.setdefault("timestamp", datetime.now(UTC).isoformat())
        content = json.dumps(entry, ensure_ascii=False)

        try:
            with self._write_lock:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                with open(log_file, "a", encoding="utf-8") as f:
                    f.write(content + "\n")
        except OSError as e:
            # The audit file is best effort; the structlog record below still carries the line
            logger.error("Failed to write chat log entry", error=str(e), log_file=str(log_file))

    def log_broadcast(self, line: str) -> None:
        """Record one broadcast line."""
        self._write_log_entry("broadcast", {"event_type": "broadcast", "content": line})
        logger.info("Broadcast", content=line)

    def read_entries(self, log_type: str = "broadcast") -> list[dict[str, Any]]:
        """Return today's entries of a log type, oldest first."""
        log_file = self._get_current_log_file(log_type)
        if not log_file.exists():
            return []
        with open(log_file, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
