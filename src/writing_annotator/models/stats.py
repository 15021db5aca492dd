"""Readability and size statistics for a document."""

from __future__ import annotations

from dataclasses import dataclass

import textstat


@dataclass
class TextStats:
    """Statistics shown alongside the suggestion list."""
    word_count: int
    sentence_count: int
    character_count: int
    average_words_per_sentence: float
    complex_words: int
    reading_ease: float  # Flesch reading ease, higher is easier
    grade_level: float   # Flesch-Kincaid grade
    grade: str


def count_syllables(word: str) -> int:
    return max(1, textstat.syllable_count(word))


def grade_label(grade_level: float) -> str:
    if grade_level <= 6:
        return "Elementary"
    if grade_level <= 8:
        return "Middle School"
    if grade_level <= 12:
        return "High School"
    if grade_level <= 16:
        return "College"
    return "Graduate"


def compute_text_stats(text: str) -> TextStats:
    """Compute word/sentence counts and Flesch readability for ``text``.

    Complex words are those of three or more syllables. Empty text yields
    zero counts and an "Unknown" grade.
    """
    word_count = textstat.lexicon_count(text, removepunct=True) if text.strip() else 0
    if word_count == 0:
        return TextStats(
            word_count=0,
            sentence_count=0,
            character_count=len(text),
            average_words_per_sentence=0.0,
            complex_words=0,
            reading_ease=0.0,
            grade_level=0.0,
            grade="Unknown",
        )

    sentence_count = textstat.sentence_count(text)
    grade_level = textstat.flesch_kincaid_grade(text)

    return TextStats(
        word_count=word_count,
        sentence_count=sentence_count,
        character_count=len(text),
        average_words_per_sentence=round(word_count / max(1, sentence_count), 1),
        complex_words=textstat.polysyllabcount(text),
        reading_ease=round(textstat.flesch_reading_ease(text), 1),
        grade_level=round(grade_level, 1),
        grade=grade_label(grade_level),
    )
