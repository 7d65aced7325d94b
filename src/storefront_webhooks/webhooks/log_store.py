"""
Bounded delivery log with whole-snapshot JSON persistence.

Entries are kept most-recent-first and capped at ``max_entries``;
the oldest entries are evicted after each append. Every mutation
rewrites the full snapshot, which is fine at this scale but assumes
a single writer process.
"""

import itertools
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog

from .errors import NotFoundError, StoreUnavailableError, ValidationError
from .models import DeliveryLogEntry

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ENTRIES = 1000


class DeliveryLogStore:
    """
    Append-only record of delivery attempts.

    Args:
        path: JSON file backing the log (memory-only when None)
        max_entries: Retention cap; oldest entries are evicted beyond it
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.path = Path(path).expanduser() if path is not None else None
        self.max_entries = max_entries
        self._entries: List[DeliveryLogEntry] = []
        self._counter = itertools.count(1)

        self._load()

    def __len__(self) -> int:
        return len(self._entries)

    def new_entry_id(self) -> str:
        """Generate a log entry id from a nanosecond timestamp and a counter."""
        return f"{time.time_ns()}-{next(self._counter)}"

    def append(self, entry: DeliveryLogEntry) -> DeliveryLogEntry:
        """
        Record a delivery attempt.

        Raises:
            StoreUnavailableError: If the snapshot could not be written; the
                in-memory log is left unchanged in that case
            ValidationError: If the entry cannot be serialized
        """
        entries = [entry] + self._entries
        evicted = max(len(entries) - self.max_entries, 0)
        if evicted:
            entries = entries[: self.max_entries]

        self._persist(entries)
        self._entries = entries

        logger.debug(
            "Delivery logged",
            entry_id=entry.id,
            subscription_id=entry.subscription_id,
            status=entry.status.value,
            evicted=evicted,
        )
        return entry

    def list(self, subscription_id: Optional[str] = None) -> List[DeliveryLogEntry]:
        """Return entries most-recent-first, optionally for one subscription."""
        if subscription_id is None:
            return list(self._entries)
        return [e for e in self._entries if e.subscription_id == str(subscription_id)]

    def get(self, entry_id: str) -> DeliveryLogEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise NotFoundError(f"Log entry {entry_id} not found", details={"entry_id": entry_id})

    def clear(self) -> int:
        """Remove every entry. Returns the number of entries removed."""
        removed = len(self._entries)
        self._persist([])
        self._entries = []

        logger.info("Delivery log cleared", removed=removed)
        return removed

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise StoreUnavailableError(
                f"Failed to read delivery log: {e}", original_error=e, details={"path": str(self.path)}
            )
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt delivery log", path=str(self.path), error=str(e))
            return

        try:
            entries = [DeliveryLogEntry.from_dict(item) for item in self._raw_entries(data)]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed delivery log", path=str(self.path), error=str(e))
            return

        self._entries = entries[: self.max_entries]
        logger.debug("Delivery log loaded", path=str(self.path), entries=len(self._entries))

    @staticmethod
    def _raw_entries(data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, dict):
            data = data.get("entries", [])
        if not isinstance(data, list):
            raise TypeError("delivery log must be a list of entries")
        return data

    def _persist(self, entries: List[DeliveryLogEntry]) -> None:
        if self.path is None:
            return

        snapshot = {"version": 1, "entries": [entry.to_dict() for entry in entries]}
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f)
            os.replace(tmp_name, self.path)
        except (TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ValidationError(
                f"Delivery log entry is not JSON serializable: {e}",
                details={"path": str(self.path)},
            )
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Failed to persist delivery log", path=str(self.path), error=str(e))
            raise StoreUnavailableError(
                f"Failed to persist delivery log: {e}",
                original_error=e,
                details={"path": str(self.path)},
            )
