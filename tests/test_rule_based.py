"""Tests for rule-based analyzers and the spell checker service."""

import pytest

from writing_annotator.analyzers.rule_based import (
    SpellChecker,
    SpellingAnalyzer,
    StyleAnalyzer,
    WordUsageAnalyzer,
)
from writing_annotator.pipeline.normalizer import SuggestionNormalizer


class TestSpellChecker:
    def test_builtin_corrections(self):
        checker = SpellChecker()
        assert checker.suggest("recieve") == "receive"
        assert checker.suggest("alot") == "a lot"
        assert checker.suggest("friend") is None

    def test_preserves_capitalization(self):
        checker = SpellChecker()
        assert checker.suggest("Teh") == "The"
        assert checker.suggest("TEH") == "THE"

    def test_custom_corrections(self):
        checker = SpellChecker(corrections={"Wrting": "writing"})
        assert checker.suggest("wrting") == "writing"

    def test_load_dictionary_file(self, tmp_path):
        path = tmp_path / "corrections.txt"
        path.write_text("# custom\nrecieveing=receiving\nthru through\n\nbroken-line\n", encoding="utf-8")
        checker = SpellChecker(dictionary_path=path)
        assert checker.suggest("recieveing") == "receiving"
        assert checker.suggest("thru") == "through"
        assert SpellChecker().load_dictionary_file(path) == 2

    def test_closed_checker_raises(self):
        with SpellChecker() as checker:
            assert not checker.closed
        assert checker.closed
        with pytest.raises(RuntimeError):
            checker.suggest("teh")


class TestSpellingAnalyzer:
    async def test_finds_misspellings_with_offsets(self, sample_essay):
        result = await SpellingAnalyzer(SpellChecker()).analyze(sample_essay)
        found = {r.original_text: r for r in result}
        assert found["Teh"].suggested_text == "The"
        assert found["beleive"].suggested_text == "believe"
        assert sample_essay[found["beleive"].position_hint:].startswith("beleive")
        assert all(r.severity == "error" and r.type == "spelling" for r in result)

    async def test_repeated_word_located_by_hint(self):
        text = "teh cat saw teh dog"
        raws = await SpellingAnalyzer(SpellChecker()).analyze(text)
        located = SuggestionNormalizer().normalize_batch(text, raws, version=0, source="rule-spelling")
        assert [s.start_index for s in located] == [0, 12]


class TestWordUsageAnalyzer:
    async def test_to_too(self, sample_essay):
        result = await WordUsageAnalyzer().analyze(sample_essay)
        by_original = {r.original_text: r.suggested_text for r in result}
        assert by_original["decided too volunteer"] == "decided to volunteer"
        assert by_original["prepared me good"] == "prepared me well"

    async def test_could_of(self):
        [r] = await WordUsageAnalyzer().analyze("I could of won.")
        assert r.suggested_text == "could have"
        assert r.severity == "warning"

    async def test_clean_text(self):
        assert await WordUsageAnalyzer().analyze("I decided to volunteer.") == []


class TestStyleAnalyzer:
    async def test_weak_qualifiers_removed_with_space(self):
        text = "It was very good and Really kind of fun."
        result = await StyleAnalyzer().analyze(text)
        assert [r.original_text for r in result] == ["very ", "Really ", "kind of "]
        assert all(r.suggested_text == "" for r in result)

    async def test_word_boundaries(self):
        assert await StyleAnalyzer().analyze("Everyone quietly left.") == []
