"""Run history: the URL pairs and options of recent runs, newest first."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any

from quick_vrt.models.history import History, HistoryEntry
from quick_vrt.models.pair import UrlPair

logger = logging.getLogger(__name__)

HISTORY_FILE = Path.home() / ".quick-vrt-history.json"
MAX_HISTORY_ITEMS = 20


class HistoryManager:
    """Manages the JSON history file shared by all runs of the tool."""

    def __init__(self, history_path: Path = HISTORY_FILE, max_items: int = MAX_HISTORY_ITEMS):
        self.history_path = Path(history_path)
        self.max_items = max_items

    def load(self) -> History:
        """Load history from disk. A missing or unreadable file yields an empty history."""
        if self.history_path.exists():
            try:
                with open(self.history_path) as f:
                    data = json.load(f)
                return History(entries=data)
            except Exception as e:
                logger.warning("Failed to load run history: %s. Starting fresh.", e)
        return History()

    def save(self, history: History) -> None:
        """Persist history to disk."""
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.history_path, "w", encoding="utf-8") as f:
            json.dump([e.model_dump() for e in history.entries], f, indent=2)
        logger.debug("Saved run history to %s", self.history_path)

    def add(self, url_pairs: list[UrlPair], options: dict[str, Any] | None = None) -> HistoryEntry:
        """Record a run at the front of the history, dropping the oldest entries past the limit."""
        history = self.load()
        entry = HistoryEntry(
            id=str(time.time_ns() // 1_000_000),
            timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            url_pairs=list(url_pairs),
            options=dict(options or {}),
        )
        # Ids are millisecond timestamps; two saves in the same millisecond must not collide.
        existing = {e.id for e in history.entries}
        while entry.id in existing:
            entry.id = str(int(entry.id) + 1)

        history.entries.insert(0, entry)
        del history.entries[self.max_items:]
        self.save(history)
        return entry

    def get(self, entry_id: str) -> HistoryEntry | None:
        for entry in self.load().entries:
            if entry.id == entry_id:
                return entry
        return None

    def delete(self, entry_id: str) -> bool:
        """Remove one entry. Returns False if no entry has that id."""
        history = self.load()
        remaining = [e for e in history.entries if e.id != entry_id]
        if len(remaining) == len(history.entries):
            return False
        history.entries = remaining
        self.save(history)
        return True

    def clear(self) -> None:
        self.save(History())
