"""Claude-backed analyzers: grammar, conciseness, vocabulary and goal alignment."""

from __future__ import annotations

import logging

from writing_annotator.analyzers.base import BaseAnalyzer
from writing_annotator.clients.llm_client import DEFAULT_MODEL, LLMClient
from writing_annotator.models.suggestion import RawSuggestion, SuggestionType

logger = logging.getLogger(__name__)

RESPONSE_FORMAT = """\
Respond with JSON only, in this shape:
{{"suggestions": [
  {{"type": "{kind}",
    "severity": "error|warning|suggestion",
    "message": "short description of the issue",
    "originalText": "exact text copied from the document",
    "suggestedText": "replacement text",
    "explanation": "one or two sentences a student can learn from",
    "startIndex": 0,
    "confidence": 0.9{extra}}}
]}}
"originalText" must be copied verbatim from the document so it can be found again.
"startIndex" is your best guess of where it starts. Return {{"suggestions": []}} when nothing needs changing."""

GRAMMAR_SYSTEM = """\
You are an expert writing tutor. Find grammar, spelling and punctuation errors
in the student's text. Only flag real errors; keep each originalText as short
as possible (a word or phrase, not a whole sentence). Use type "spelling" for
misspelled words and "grammar" for everything else.
""" + RESPONSE_FORMAT.format(kind="grammar|spelling", extra="")

CONCISENESS_SYSTEM = """\
You are an editor who removes wordiness. Find redundant or wordy phrases and
propose tighter wording with the same meaning. Report how many words each
change saves in "wordsSaved".
""" + RESPONSE_FORMAT.format(kind="conciseness", extra=',\n    "wordsSaved": 2')

VOCABULARY_SYSTEM = """\
You are a vocabulary coach. Find vague, weak or repeated words and propose a
more precise word that keeps the writer's voice. List up to three other
options in "alternatives".
""" + RESPONSE_FORMAT.format(kind="vocabulary", extra=',\n    "alternatives": ["option", "option"]')

GOAL_SYSTEM = """\
You are a coach for {goal} writing. Find sentences that work against the
goal of the piece and propose a rewrite that serves it better. Use severity
"suggestion".
""" + RESPONSE_FORMAT.format(kind="goal-alignment", extra="")


class LLMAnalyzer(BaseAnalyzer):
    """Sends the document to Claude with an analyzer-specific system prompt."""

    system_prompt: str = ""
    max_tokens: int = 4096
    cacheable = True

    def __init__(self, llm: LLMClient, model: str = DEFAULT_MODEL):
        self.llm = llm
        self.model = model

    def build_system(self, writing_goal: str | None) -> str:
        return self.system_prompt

    def build_prompt(self, text: str, writing_goal: str | None) -> str:
        goal_line = f"Writing goal: {writing_goal}\n\n" if writing_goal else ""
        return f"""{goal_line}Document:
---
{text}
---

Return the JSON object described above."""

    async def analyze(self, text: str, writing_goal: str | None = None) -> list[RawSuggestion]:
        data = await self.llm.generate_json(
            prompt=self.build_prompt(text, writing_goal),
            system=self.build_system(writing_goal),
            model=self.model,
            max_tokens=self.max_tokens,
            label=self.name,
        )
        suggestions = self.parse_payload(data)
        logger.debug("%s returned %d suggestions", self.name, len(suggestions))
        return suggestions


class GrammarAnalyzer(LLMAnalyzer):
    name = "ai-grammar"
    kind = SuggestionType.GRAMMAR
    min_length = 20
    system_prompt = GRAMMAR_SYSTEM


class ConcisenessAnalyzer(LLMAnalyzer):
    name = "ai-conciseness"
    kind = SuggestionType.CONCISENESS
    min_length = 30
    system_prompt = CONCISENESS_SYSTEM


class VocabularyAnalyzer(LLMAnalyzer):
    name = "ai-vocabulary"
    kind = SuggestionType.VOCABULARY
    min_length = 50
    system_prompt = VOCABULARY_SYSTEM


class GoalAlignmentAnalyzer(LLMAnalyzer):
    name = "ai-goal"
    kind = SuggestionType.GOAL_ALIGNMENT
    min_length = 100
    requires_goal = True

    def build_system(self, writing_goal: str | None) -> str:
        return GOAL_SYSTEM.replace("{goal}", writing_goal or "general")


LLM_ANALYZERS: dict[str, type[LLMAnalyzer]] = {
    "grammar": GrammarAnalyzer,
    "conciseness": ConcisenessAnalyzer,
    "vocabulary": VocabularyAnalyzer,
    "goal-alignment": GoalAlignmentAnalyzer,
}
