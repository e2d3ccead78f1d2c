"""Locating existing reports on disk for the `open` command."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

REPORT_FILENAME = "report.html"
DEFAULT_SEARCH_PATHS = (
    "./vrt-results",
    "./test-results",
    "./screenshots",
    "./visual-regression",
    ".",
)


@dataclass
class FoundReport:
    path: Path
    modified: float  # mtime, seconds since epoch
    size: int  # bytes

    @property
    def size_mb(self) -> str:
        return f"{self.size / (1024 * 1024):.2f}"


def resolve_report_path(path: str | Path) -> Path:
    """Map a results directory or report file to the report file it names."""
    path = Path(path)
    if path.is_file():
        return path
    return path / REPORT_FILENAME


def find_reports(search_paths: tuple[str, ...] | list[str] = DEFAULT_SEARCH_PATHS) -> list[FoundReport]:
    """Find report files directly in, or one level below, each search path. Newest first."""
    found: dict[Path, FoundReport] = {}

    for search_path in search_paths:
        root = Path(search_path)
        if not root.is_dir():
            continue

        candidates = [root / REPORT_FILENAME]
        try:
            candidates += [entry / REPORT_FILENAME for entry in root.iterdir() if entry.is_dir()]
        except OSError as e:
            logger.debug("Cannot list %s: %s", root, e)
            continue

        for candidate in candidates:
            if not candidate.is_file():
                continue
            resolved = candidate.resolve()
            if resolved in found:
                continue
            stat = resolved.stat()
            found[resolved] = FoundReport(path=resolved, modified=stat.st_mtime, size=stat.st_size)

    return sorted(found.values(), key=lambda r: r.modified, reverse=True)


def time_ago(timestamp: float, now: float | None = None) -> str:
    """Human-readable age of a timestamp, e.g. '3 hours ago'."""
    now = time.time() if now is None else now
    seconds = max(0, int(now - timestamp))
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} ago"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if minutes > 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    return "just now"
