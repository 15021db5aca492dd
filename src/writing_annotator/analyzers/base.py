"""Analyzer contract shared by model-backed and rule-based analyzers."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from writing_annotator.models.suggestion import RawSuggestion, SuggestionType

logger = logging.getLogger(__name__)


class BaseAnalyzer:
    """Produces raw suggestions for a text.

    Subclasses set ``name``, ``kind`` and ``min_length`` and implement
    ``analyze``. ``kind`` is stamped on payloads that omit a type.
    """

    name: str = "analyzer"
    kind: SuggestionType = SuggestionType.UNKNOWN
    min_length: int = 1
    requires_goal: bool = False
    # Raw output may be cached by content hash when True
    cacheable: bool = False

    def applies_to(self, text: str, writing_goal: str | None = None) -> bool:
        if self.requires_goal and not writing_goal:
            return False
        return len(text.strip()) >= self.min_length

    async def analyze(self, text: str, writing_goal: str | None = None) -> list[RawSuggestion]:
        raise NotImplementedError

    @staticmethod
    def parse_payload(data) -> list[RawSuggestion]:
        """Turn a decoded model reply into RawSuggestion records.

        Accepts a bare list or a dict wrapping the list under a known key.
        Items that are not objects or fail validation are skipped.
        """
        if isinstance(data, dict):
            for key in ("suggestions", "issues", "corrections", "items"):
                if key in data and isinstance(data[key], list):
                    data = data[key]
                    break
            else:
                return []

        if not isinstance(data, list):
            return []

        result = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                result.append(RawSuggestion.model_validate(item))
            except ValidationError as exc:
                logger.debug("Skipping malformed suggestion: %s", exc.errors()[:1])
        return result
