"""Reduce a suggestion list to pairwise non-overlapping spans."""

from __future__ import annotations

import logging

from writing_annotator.models.suggestion import Severity, Suggestion, SuggestionType

logger = logging.getLogger(__name__)

TYPE_RANK: dict[SuggestionType, int] = {
    SuggestionType.SPELLING: 6,
    SuggestionType.GRAMMAR: 5,
    SuggestionType.STYLE: 4,
    SuggestionType.VOCABULARY: 3,
    SuggestionType.CONCISENESS: 2,
    SuggestionType.GOAL_ALIGNMENT: 1,
    SuggestionType.UNKNOWN: 0,
}

SEVERITY_RANK: dict[Severity, int] = {
    Severity.ERROR: 3,
    Severity.WARNING: 2,
    Severity.SUGGESTION: 1,
    Severity.UNKNOWN: 0,
}


def priority(candidate: Suggestion, incumbent: Suggestion) -> bool:
    """Return True when ``candidate`` should replace ``incumbent``.

    Type rank decides first, then severity rank; a full tie keeps the
    incumbent.
    """
    c_type, i_type = TYPE_RANK[candidate.type], TYPE_RANK[incumbent.type]
    if c_type != i_type:
        return c_type > i_type
    return SEVERITY_RANK[candidate.severity] > SEVERITY_RANK[incumbent.severity]


def resolve_conflicts(suggestions: list[Suggestion]) -> list[Suggestion]:
    """Drop overlapping suggestions, keeping the higher-priority one of each clash.

    All suggestions must be located against the same document version. A
    candidate is only compared with the first overlapping incumbent found.
    """
    ordered = sorted(suggestions, key=lambda s: s.start_index)
    resolved: list[Suggestion] = []
    dropped = 0

    for candidate in ordered:
        clash = next(
            (i for i, incumbent in enumerate(resolved) if candidate.overlaps(incumbent)),
            None,
        )
        if clash is None:
            resolved.append(candidate)
            continue

        incumbent = resolved[clash]
        dropped += 1
        if priority(candidate, incumbent):
            logger.debug(
                "Conflict: %s %r replaces %s %r",
                candidate.type.value, candidate.original_text,
                incumbent.type.value, incumbent.original_text,
            )
            resolved[clash] = candidate
        else:
            logger.debug(
                "Conflict: %s %r dropped in favour of %s %r",
                candidate.type.value, candidate.original_text,
                incumbent.type.value, incumbent.original_text,
            )

    if dropped:
        logger.info("Conflict resolution: %d -> %d suggestions", len(suggestions), len(resolved))

    return sorted(resolved, key=lambda s: s.start_index)
