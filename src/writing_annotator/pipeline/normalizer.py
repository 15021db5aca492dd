"""Suggestion normalizer - turns raw analyzer payloads into canonical suggestions."""

from __future__ import annotations

import itertools
import logging
import uuid

from writing_annotator.models.suggestion import (
    RawSuggestion,
    Severity,
    Suggestion,
    SuggestionType,
)
from writing_annotator.pipeline.span_locator import Span, locate

logger = logging.getLogger(__name__)


def _tag(value: str | None) -> str:
    return (value or "").strip().lower().replace("_", "-").replace(" ", "-")


def coerce_type(value: str | None) -> SuggestionType:
    """Map a free-form analyzer type to the closed set, falling back to ``unknown``."""
    try:
        return SuggestionType(_tag(value))
    except ValueError:
        return SuggestionType.UNKNOWN


def coerce_severity(value: str | None) -> Severity:
    try:
        return Severity(_tag(value))
    except ValueError:
        return Severity.UNKNOWN


class SuggestionNormalizer:
    """Builds canonical Suggestion records with session-unique ids.

    One normalizer is owned by one editing session; ids are
    ``{source}-{session token}-{counter}`` and never repeat within it.
    """

    def __init__(self, session_token: str | None = None):
        self.session_token = session_token or uuid.uuid4().hex[:8]
        self._counter = itertools.count(1)

    def next_id(self, source: str) -> str:
        return f"{source}-{self.session_token}-{next(self._counter)}"

    def normalize(
        self,
        raw: RawSuggestion,
        span: Span,
        *,
        version: int,
        source: str = "analyzer",
        default_type: SuggestionType | None = None,
    ) -> Suggestion | None:
        """Build one Suggestion, or None when it can never be rendered or applied."""
        if not raw.original_text.strip():
            return None
        if span.length <= 0:
            return None

        kind = coerce_type(raw.type)
        if kind is SuggestionType.UNKNOWN and not raw.type and default_type is not None:
            kind = default_type

        confidence = raw.confidence
        if confidence is not None:
            confidence = min(1.0, max(0.0, confidence))

        alternatives = [a for a in (raw.alternatives or []) if isinstance(a, str) and a.strip()]

        return Suggestion(
            id=self.next_id(source),
            type=kind,
            severity=coerce_severity(raw.severity),
            message=raw.message,
            explanation=raw.explanation,
            original_text=raw.original_text,
            suggested_text=raw.suggested_text,
            start_index=span.start,
            end_index=span.end,
            confidence=confidence,
            alternatives=alternatives,
            words_saved=raw.words_saved,
            source=source,
            resolved=span.resolved,
            document_version=version,
        )

    def normalize_batch(
        self,
        text: str,
        raws: list[RawSuggestion],
        *,
        version: int,
        source: str = "analyzer",
        default_type: SuggestionType | None = None,
    ) -> list[Suggestion]:
        """Locate and normalize every raw suggestion, keeping arrival order.

        A located suggestion carries the fragment as written in ``text``.
        """
        result: list[Suggestion] = []
        dropped = 0
        for raw in raws:
            span = locate(text, raw.original_text, raw.position_hint)
            if span.resolved and text[span.start:span.end] != raw.original_text:
                # Matching is case-insensitive; keep the document's own casing
                raw = raw.model_copy(update={"original_text": text[span.start:span.end]})
            suggestion = self.normalize(
                raw, span, version=version, source=source, default_type=default_type
            )
            if suggestion is None:
                dropped += 1
                continue
            if not suggestion.resolved:
                logger.debug("Fragment not found for %s: %r", source, raw.original_text[:40])
            result.append(suggestion)
        if dropped:
            logger.debug("Dropped %d empty suggestions from %s", dropped, source)
        return result
