"""Instant, offline analyzers built on word lists and patterns."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from writing_annotator.analyzers.base import BaseAnalyzer
from writing_annotator.models.suggestion import RawSuggestion, SuggestionType

logger = logging.getLogger(__name__)

COMMON_MISSPELLINGS: dict[str, str] = {
    "teh": "the",
    "hte": "the",
    "adn": "and",
    "nad": "and",
    "taht": "that",
    "thier": "their",
    "recieve": "receive",
    "recieved": "received",
    "seperate": "separate",
    "definately": "definitely",
    "occured": "occurred",
    "neccessary": "necessary",
    "accomodate": "accommodate",
    "embarass": "embarrass",
    "existance": "existence",
    "maintainance": "maintenance",
    "persistance": "persistence",
    "occurance": "occurrence",
    "referance": "reference",
    "appearence": "appearance",
    "independance": "independence",
    "performence": "performance",
    "experiance": "experience",
    "importence": "importance",
    "differance": "difference",
    "preferance": "preference",
    "occassion": "occasion",
    "begining": "beginning",
    "sucessful": "successful",
    "beleive": "believe",
    "acheive": "achieve",
    "acheived": "achieved",
    "wierd": "weird",
    "freind": "friend",
    "freinds": "friends",
    "untill": "until",
    "alot": "a lot",
    "aswell": "as well",
    "inorder": "in order",
    "eachother": "each other",
    "everytime": "every time",
    "infact": "in fact",
    "atleast": "at least",
    "intrested": "interested",
    "comunicate": "communicate",
    "familys": "families",
    "prestegious": "prestigious",
    "resons": "reasons",
    "mistaks": "mistakes",
    "previus": "previous",
    "sucess": "success",
    "succes": "success",
    "suceed": "succeed",
    "shouldnt": "shouldn't",
    "couldnt": "couldn't",
    "wouldnt": "wouldn't",
    "didnt": "didn't",
    "dont": "don't",
    "doesnt": "doesn't",
    "isnt": "isn't",
    "wasnt": "wasn't",
    "arent": "aren't",
    "havent": "haven't",
    "youre": "you're",
    "theyre": "they're",
}

_WORD_RE = re.compile(r"\b[A-Za-z]+\b")


class SpellChecker:
    """Offline misspelling lookup.

    Built explicitly and handed to the analyzers that need it; ``close()``
    releases the table and any further lookup raises RuntimeError.
    """

    def __init__(
        self,
        corrections: dict[str, str] | None = None,
        dictionary_path: str | Path | None = None,
    ):
        self._table: dict[str, str] | None = dict(COMMON_MISSPELLINGS)
        if corrections:
            self.add_corrections(corrections)
        if dictionary_path is not None:
            self.load_dictionary_file(dictionary_path)

    def __enter__(self) -> SpellChecker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._table is None

    def _require_open(self) -> dict[str, str]:
        if self._table is None:
            raise RuntimeError("SpellChecker is closed")
        return self._table

    def add_corrections(self, corrections: dict[str, str]) -> None:
        table = self._require_open()
        for wrong, right in corrections.items():
            table[wrong.strip().lower()] = right.strip()

    def load_dictionary_file(self, path: str | Path) -> int:
        """Load ``wrong=right`` (or ``wrong right``) lines. Returns entries added."""
        added = 0
        for line in Path(path).read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            wrong, sep, right = line.partition("=")
            if not sep:
                parts = line.split(None, 1)
                if len(parts) != 2:
                    continue
                wrong, right = parts
            self.add_corrections({wrong: right})
            added += 1
        logger.debug("Loaded %d corrections from %s", added, path)
        return added

    def suggest(self, word: str) -> str | None:
        """Return the correction for ``word``, matching its capitalization."""
        correction = self._require_open().get(word.lower())
        if correction is None:
            return None
        if word.isupper() and len(word) > 1:
            return correction.upper()
        if word[:1].isupper():
            return correction[:1].upper() + correction[1:]
        return correction

    def close(self) -> None:
        self._table = None


class SpellingAnalyzer(BaseAnalyzer):
    name = "rule-spelling"
    kind = SuggestionType.SPELLING

    def __init__(self, checker: SpellChecker):
        self.checker = checker

    async def analyze(self, text: str, writing_goal: str | None = None) -> list[RawSuggestion]:
        suggestions = []
        for match in _WORD_RE.finditer(text):
            word = match.group(0)
            correction = self.checker.suggest(word)
            if correction is None:
                continue
            suggestions.append(RawSuggestion(
                type=self.kind.value,
                severity="error",
                message=f'"{word}" may be misspelled',
                original_text=word,
                suggested_text=correction,
                explanation=f'Did you mean "{correction}"?',
                position_hint=match.start(),
            ))
        return suggestions


# (pattern, replacement, message)
WORD_USAGE_RULES: list[tuple[str, str, str]] = [
    (r"\bdecided\s+too\s+(\w+)", r"decided to \1", 'Use "to" instead of "too" before a verb'),
    (r"\bhow\s+too\s+(\w+)", r"how to \1", 'Use "to" instead of "too" before a verb'),
    (r"\bdue\s+too\b", "due to", 'Use "to" instead of "too"'),
    (r"\bdeserve\s+too\s+be\b", "deserve to be", 'Use "to" instead of "too" before a verb'),
    (r"\bprepared\s+me\s+good\b", "prepared me well", 'Use "well" instead of "good" as an adverb'),
    (r"\bcould\s+of\b", "could have", 'Use "could have" instead of "could of"'),
    (r"\bshould\s+of\b", "should have", 'Use "should have" instead of "should of"'),
    (r"\bwould\s+of\b", "would have", 'Use "would have" instead of "would of"'),
    (r"\bTheir\s+(are|is|was|were)\b", r"There \1", 'Use "There" to introduce existence'),
]


class WordUsageAnalyzer(BaseAnalyzer):
    name = "rule-usage"
    kind = SuggestionType.GRAMMAR

    def __init__(self, rules: list[tuple[str, str, str]] | None = None):
        self.rules = [(re.compile(p), r, m) for p, r, m in (rules or WORD_USAGE_RULES)]

    async def analyze(self, text: str, writing_goal: str | None = None) -> list[RawSuggestion]:
        suggestions = []
        for pattern, replacement, message in self.rules:
            for match in pattern.finditer(text):
                suggestions.append(RawSuggestion(
                    type=self.kind.value,
                    severity="warning",
                    message=message,
                    original_text=match.group(0),
                    suggested_text=match.expand(replacement),
                    explanation=message + ".",
                    position_hint=match.start(),
                ))
        return suggestions


WEAK_QUALIFIERS = ["very", "really", "quite", "rather", "somewhat", "kind of", "sort of"]


class StyleAnalyzer(BaseAnalyzer):
    """Flags weak qualifiers; the suggestion removes the word and its trailing space."""

    name = "rule-style"
    kind = SuggestionType.STYLE

    def __init__(self, qualifiers: list[str] | None = None):
        words = "|".join(re.escape(w) for w in (qualifiers or WEAK_QUALIFIERS))
        self.pattern = re.compile(rf"\b(?:{words})\b\s+", re.IGNORECASE)

    async def analyze(self, text: str, writing_goal: str | None = None) -> list[RawSuggestion]:
        suggestions = []
        for match in self.pattern.finditer(text):
            word = match.group(0).strip()
            suggestions.append(RawSuggestion(
                type=self.kind.value,
                severity="suggestion",
                message=f'Consider removing "{word}"',
                original_text=match.group(0),
                suggested_text="",
                explanation="Removing weak qualifiers makes writing more direct.",
                position_hint=match.start(),
            ))
        return suggestions
