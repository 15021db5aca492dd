"""Resolve an approximate text fragment to an exact offset range."""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` range into document text."""

    start: int
    end: int
    resolved: bool = True

    @property
    def length(self) -> int:
        return self.end - self.start


def find_occurrences(text: str, fragment: str) -> list[int]:
    """Return the start offset of every case-insensitive match of ``fragment``.

    Overlapping occurrences are all reported, scanning left to right.
    """
    if not fragment:
        return []
    pattern = re.compile(f"(?={re.escape(fragment)})", re.IGNORECASE)
    return [m.start() for m in pattern.finditer(text)]


def locate(text: str, fragment: str, hint: int | None = None) -> Span:
    """Locate ``fragment`` in ``text``.

    With several matches the one nearest ``hint`` wins (lower offset on a
    tie); without a hint the first match wins. A fragment that does not occur
    yields ``Span(0, len(fragment), resolved=False)``.
    """
    occurrences = find_occurrences(text, fragment)
    if not occurrences:
        return Span(0, len(fragment), resolved=False)

    if len(occurrences) == 1 or hint is None:
        start = occurrences[0]
    else:
        start = min(occurrences, key=lambda offset: abs(offset - hint))

    return Span(start, start + len(fragment))
