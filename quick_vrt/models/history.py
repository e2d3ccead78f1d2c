"""Run history data structures."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from quick_vrt.models.pair import UrlPair


class HistoryEntry(BaseModel):
    id: str
    timestamp: str  # ISO timestamp
    url_pairs: list[UrlPair] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)

    def display(self) -> str:
        summary = self.url_pairs[0].before[:30] + "..." if self.url_pairs else "no URLs"
        return f"[{self.timestamp}] {len(self.url_pairs)} pair(s) - {summary}"


class History(BaseModel):
    entries: list[HistoryEntry] = Field(default_factory=list)
