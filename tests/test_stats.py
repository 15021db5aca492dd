"""Tests for text statistics."""

import pytest

from writing_annotator.models.stats import compute_text_stats, count_syllables, grade_label


class TestTextStats:
    def test_counts(self):
        stats = compute_text_stats("The cat sat. The dog ran away!")
        assert stats.word_count == 7
        assert stats.sentence_count == 2
        assert stats.average_words_per_sentence == 3.5

    def test_empty_text(self):
        stats = compute_text_stats("")
        assert stats.word_count == 0
        assert stats.grade == "Unknown"

    def test_simple_text_is_easy(self):
        stats = compute_text_stats("I see a cat. The cat is red. It can run.")
        assert stats.reading_ease > 90
        assert stats.grade == "Elementary"

    def test_complex_words(self):
        stats = compute_text_stats("Extraordinary communication is beautiful.")
        assert stats.complex_words == 3

    @pytest.mark.parametrize("word,expected", [("cat", 1), ("water", 2), ("beautiful", 3)])
    def test_count_syllables(self, word, expected):
        assert count_syllables(word) == expected

    @pytest.mark.parametrize("grade,label", [
        (3, "Elementary"), (7, "Middle School"), (10, "High School"), (14, "College"), (18, "Graduate"),
    ])
    def test_grade_label(self, grade, label):
        assert grade_label(grade) == label

    def test_whitespace_only_text(self):
        stats = compute_text_stats("  \n ")
        assert stats.word_count == 0
        assert stats.sentence_count == 0
        assert stats.character_count == 4

    def test_hard_text_scores_below_simple_text(self):
        simple = compute_text_stats("I see a cat. The cat is red. It can run.")
        hard = compute_text_stats(
            "Institutional accountability necessitates comprehensive organizational "
            "transparency regarding administrative decision-making procedures."
        )
        assert hard.reading_ease < simple.reading_ease
        assert hard.grade_level > simple.grade_level
