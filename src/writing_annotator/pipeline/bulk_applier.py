"""Apply a batch of suggestions to text in one back-to-front pass."""

from __future__ import annotations

import logging

from writing_annotator.models.document import ApplyResult
from writing_annotator.models.suggestion import Suggestion

logger = logging.getLogger(__name__)


def is_applicable(text: str, suggestion: Suggestion) -> bool:
    """True when the suggestion's span still holds its original text."""
    return (
        suggestion.resolved
        and suggestion.end_index <= len(text)
        and text[suggestion.start_index:suggestion.end_index] == suggestion.original_text
    )


def apply_suggestions(text: str, suggestions: list[Suggestion]) -> ApplyResult:
    """Apply ``suggestions`` to ``text`` from the highest offset to the lowest.

    Edits never shift the offsets of suggestions still queued, so a
    non-overlapping input applies in full. A suggestion whose span no longer
    matches its original text is reported in ``stale_ids`` and skipped.
    """
    ordered = sorted(suggestions, key=lambda s: s.start_index, reverse=True)
    applied: list[tuple[Suggestion, int]] = []  # (suggestion, length delta)
    stale: list[str] = []

    for suggestion in ordered:
        if not is_applicable(text, suggestion):
            logger.warning(
                "Skipping stale suggestion %s: %r no longer at [%d, %d)",
                suggestion.id,
                suggestion.original_text,
                suggestion.start_index,
                suggestion.end_index,
            )
            stale.append(suggestion.id)
            continue

        text = text[:suggestion.start_index] + suggestion.suggested_text + text[suggestion.end_index:]
        applied.append((suggestion, len(suggestion.suggested_text) - suggestion.length))
        logger.debug("Applied %r -> %r", suggestion.original_text, suggestion.suggested_text)

    # Edits applied later sit earlier in the text and shift everything after them.
    spans: dict[str, tuple[int, int]] = {}
    shift = 0
    for suggestion, delta in reversed(applied):
        start = suggestion.start_index + shift
        spans[suggestion.id] = (start, start + len(suggestion.suggested_text))
        shift += delta

    result = ApplyResult(
        new_text=text,
        applied_ids=[s.id for s, _ in applied],
        stale_ids=stale,
        applied_spans=spans,
    )
    logger.info("Bulk apply: %s", result.summary)
    return result
