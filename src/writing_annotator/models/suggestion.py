"""Pydantic models for analyzer payloads and canonical suggestions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class SuggestionType(str, Enum):
    GRAMMAR = "grammar"
    SPELLING = "spelling"
    STYLE = "style"
    VOCABULARY = "vocabulary"
    CONCISENESS = "conciseness"
    GOAL_ALIGNMENT = "goal-alignment"
    UNKNOWN = "unknown"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"
    UNKNOWN = "unknown"


class SuggestionState(str, Enum):
    PROPOSED = "proposed"
    RENDERED = "rendered"
    APPLIED = "applied"
    DISMISSED = "dismissed"
    STALE = "stale"

    @property
    def is_terminal(self) -> bool:
        return self in (SuggestionState.APPLIED, SuggestionState.DISMISSED, SuggestionState.STALE)


class RawSuggestion(BaseModel):
    """One suggestion as emitted by an analyzer.

    Field names follow the analyzer wire format (camelCase aliases). Any
    offsets the analyzer reports are kept only as ``position_hint``.
    """

    type: str | None = None
    severity: str | None = None
    message: str = ""
    original_text: str = Field(default="", alias="originalText")
    suggested_text: str = Field(default="", alias="suggestedText")
    explanation: str = ""
    confidence: float | None = None
    alternatives: list | None = None
    words_saved: int | None = Field(default=None, alias="wordsSaved")
    position_hint: int | None = Field(default=None, alias="startIndex")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class Suggestion(BaseModel):
    """A canonical, located suggestion tied to one document version."""

    id: str
    type: SuggestionType
    severity: Severity
    message: str
    explanation: str = ""
    original_text: str
    suggested_text: str
    start_index: int = Field(ge=0)
    end_index: int
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    alternatives: list[str] = []
    words_saved: int | None = None
    source: str = "unknown"
    resolved: bool = True
    document_version: int = 0

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_span(self) -> Suggestion:
        if self.end_index <= self.start_index:
            raise ValueError(
                f"end_index ({self.end_index}) must be greater than start_index ({self.start_index})"
            )
        return self

    @property
    def key(self) -> str:
        """Identity key used for deduplication."""
        return f"{self.start_index}-{self.end_index}-{self.original_text}-{self.suggested_text}"

    @property
    def span(self) -> tuple[int, int]:
        return (self.start_index, self.end_index)

    @property
    def length(self) -> int:
        return self.end_index - self.start_index

    def overlaps(self, other: Suggestion) -> bool:
        return not (self.end_index <= other.start_index or other.end_index <= self.start_index)
