"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from writing_annotator.analyzers.base import BaseAnalyzer
from writing_annotator.clients.llm_client import LLMClient, LLMResponse
from writing_annotator.models.suggestion import (
    RawSuggestion,
    Severity,
    Suggestion,
    SuggestionType,
)


@pytest.fixture
def sample_essay() -> str:
    return (
        "I decided too volunteer at the hospital because I wanted to help people. "
        "Teh experience was very rewarding and it prepared me good for my future career. "
        "I beleive that helping others is important."
    )


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={"suggestions": []})
    client.get_token_summary = lambda: {"input": 0, "output": 0, "calls": [], "by_label": {}}
    return client


def make_suggestion(
    start: int,
    end: int,
    original: str = "x",
    suggested: str = "y",
    *,
    type: SuggestionType | str = SuggestionType.GRAMMAR,
    severity: Severity | str = Severity.WARNING,
    id: str | None = None,
    resolved: bool = True,
    version: int = 0,
    **extra,
) -> Suggestion:
    """Build a located suggestion without going through the normalizer."""
    return Suggestion(
        id=id or f"s-{start}-{end}-{original}-{suggested}",
        type=SuggestionType(type),
        severity=Severity(severity),
        message="",
        original_text=original,
        suggested_text=suggested,
        start_index=start,
        end_index=end,
        resolved=resolved,
        document_version=version,
        **extra,
    )


class StubAnalyzer(BaseAnalyzer):
    """Returns canned raw suggestions, optionally after a delay or with an error."""

    def __init__(
        self,
        name: str,
        suggestions: list[RawSuggestion] | None = None,
        *,
        kind: SuggestionType = SuggestionType.GRAMMAR,
        error: Exception | None = None,
        before_return=None,
    ):
        self.name = name
        self.kind = kind
        self.suggestions = suggestions or []
        self.error = error
        self.before_return = before_return
        self.calls = 0

    async def analyze(self, text, writing_goal=None):
        self.calls += 1
        if self.before_return is not None:
            await self.before_return()
        if self.error is not None:
            raise self.error
        return list(self.suggestions)


@pytest.fixture
def make() -> callable:
    """Factory for located suggestions."""
    return make_suggestion


@pytest.fixture
def stub_analyzer() -> type[StubAnalyzer]:
    return StubAnalyzer
