"""Data models for the annotation pipeline."""

from writing_annotator.models.document import ApplyResult, Document, SuggestionSet
from writing_annotator.models.stats import TextStats, compute_text_stats
from writing_annotator.models.suggestion import (
    RawSuggestion,
    Severity,
    Suggestion,
    SuggestionState,
    SuggestionType,
)
from writing_annotator.models.tone import ToneAnalysis, analyze_tone

__all__ = [
    "ApplyResult",
    "Document",
    "RawSuggestion",
    "Severity",
    "Suggestion",
    "SuggestionSet",
    "SuggestionState",
    "SuggestionType",
    "TextStats",
    "ToneAnalysis",
    "analyze_tone",
    "compute_text_stats",
]
