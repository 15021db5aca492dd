"""Remove suggestions that share an identity key."""

from __future__ import annotations

import logging

from writing_annotator.models.suggestion import Suggestion

logger = logging.getLogger(__name__)


def deduplicate(suggestions: list[Suggestion]) -> list[Suggestion]:
    """Keep the first suggestion for each identity key, preserving order."""
    seen: set[str] = set()
    unique: list[Suggestion] = []
    for suggestion in suggestions:
        if suggestion.key in seen:
            logger.debug(
                "Removing duplicate %r -> %r (%s)",
                suggestion.original_text,
                suggestion.suggested_text,
                suggestion.source,
            )
            continue
        seen.add(suggestion.key)
        unique.append(suggestion)
    return unique
