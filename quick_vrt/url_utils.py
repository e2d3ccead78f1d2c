"""URL pair parsing from command-line arguments and pairs files."""

from __future__ import annotations

import re
from pathlib import Path

from quick_vrt.errors import UsageError
from quick_vrt.models.pair import UrlPair

_PAIR_SEPARATOR = re.compile(r"[\s,]+")


def pairs_from_urls(urls: list[str] | tuple[str, ...]) -> list[UrlPair]:
    """Group a flat URL list into consecutive before/after pairs."""
    urls = [u.strip() for u in urls]
    if len(urls) < 2:
        raise UsageError("At least two URLs are required (one before/after pair)")
    if len(urls) % 2:
        raise UsageError(f"URLs must come in before/after pairs, got an odd count ({len(urls)})")
    pairs = [UrlPair(before=urls[i], after=urls[i + 1]) for i in range(0, len(urls), 2)]
    return require_eligible(pairs)


def parse_pairs_line(line: str) -> UrlPair | None:
    """Parse one pairs-file line. Returns None for blank lines and comments."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    parts = [p for p in _PAIR_SEPARATOR.split(stripped) if p]
    if len(parts) != 2:
        raise ValueError("expected two URLs separated by whitespace or a comma")
    return UrlPair(before=parts[0], after=parts[1])


def load_pairs_file(path: str | Path) -> list[UrlPair]:
    """Read URL pairs from a file with one pair per line."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise UsageError(f"Cannot read pairs file {path}: {e}") from e

    pairs = []
    for lineno, line in enumerate(text.splitlines(), 1):
        try:
            pair = parse_pairs_line(line)
        except ValueError as e:
            raise UsageError(f"{path}:{lineno}: malformed line {line.strip()!r} ({e})") from e
        if pair is not None:
            pairs.append(pair)
    return pairs


def require_eligible(pairs: list[UrlPair]) -> list[UrlPair]:
    """Reject pairs with an empty before or after URL."""
    for i, pair in enumerate(pairs, 1):
        if not pair.is_eligible:
            raise UsageError(f"Pair {i} needs both a before and an after URL")
    return pairs
