"""Build analyzers by name."""

from __future__ import annotations

from writing_annotator.analyzers.base import BaseAnalyzer
from writing_annotator.analyzers.llm_analyzers import LLM_ANALYZERS
from writing_annotator.analyzers.rule_based import (
    SpellChecker,
    SpellingAnalyzer,
    StyleAnalyzer,
    WordUsageAnalyzer,
)
from writing_annotator.clients.llm_client import DEFAULT_MODEL, LLMClient

RULE_ANALYZERS = ("spelling", "word-usage", "style")
ANALYZER_NAMES = RULE_ANALYZERS + tuple(LLM_ANALYZERS)


def build_analyzers(
    names: list[str] | tuple[str, ...],
    *,
    llm: LLMClient | None = None,
    spell_checker: SpellChecker | None = None,
    model: str = DEFAULT_MODEL,
) -> list[BaseAnalyzer]:
    """Instantiate analyzers in the given order.

    Model-backed analyzers are skipped when no ``llm`` is given. The spelling
    analyzer needs ``spell_checker``; the caller owns and closes it.
    """
    analyzers: list[BaseAnalyzer] = []
    for name in names:
        if name == "spelling":
            if spell_checker is None:
                raise ValueError("spelling analyzer requires a SpellChecker")
            analyzers.append(SpellingAnalyzer(spell_checker))
        elif name == "word-usage":
            analyzers.append(WordUsageAnalyzer())
        elif name == "style":
            analyzers.append(StyleAnalyzer())
        elif name in LLM_ANALYZERS:
            if llm is not None:
                analyzers.append(LLM_ANALYZERS[name](llm, model=model))
        else:
            raise ValueError(f"Unknown analyzer: {name} (choose from {', '.join(ANALYZER_NAMES)})")
    return analyzers
