"""Tests for the bulk applier and the end-to-end example scenarios."""

from writing_annotator.models.suggestion import RawSuggestion
from writing_annotator.pipeline.bulk_applier import apply_suggestions, is_applicable
from writing_annotator.pipeline.conflict_resolver import resolve_conflicts
from writing_annotator.pipeline.deduplicator import deduplicate
from writing_annotator.pipeline.normalizer import SuggestionNormalizer
from writing_annotator.pipeline.span_locator import locate


class TestIsApplicable:
    def test_matching_span(self, make):
        assert is_applicable("I has it", make(2, 5, "has", "have"))

    def test_text_changed(self, make):
        assert not is_applicable("I had it", make(2, 5, "has", "have"))

    def test_span_past_end(self, make):
        assert not is_applicable("I", make(2, 5, "has", "have"))

    def test_unresolved(self, make):
        assert not is_applicable("I has it", make(2, 5, "has", "have", resolved=False))


class TestApplySuggestions:
    def test_applies_back_to_front(self, make):
        text = "a bb ccc"
        result = apply_suggestions(text, [
            make(0, 1, "a", "AAAA", id="1"),
            make(2, 4, "bb", "B", id="2"),
            make(5, 8, "ccc", "", id="3"),
        ])
        assert result.new_text == "AAAA B "
        assert sorted(result.applied_ids) == ["1", "2", "3"]
        assert result.stale_ids == []

    def test_applied_spans_locate_replacements(self, make):
        text = "one two three four"
        suggestions = [
            make(0, 3, "one", "1", id="a"),
            make(8, 13, "three", "THREE!", id="b"),
            make(14, 18, "four", "quatre", id="c"),
        ]
        result = apply_suggestions(text, suggestions)
        assert result.new_text == "1 two THREE! quatre"
        for s in suggestions:
            start, end = result.applied_spans[s.id]
            assert result.new_text[start:end] == s.suggested_text

    def test_stale_suggestion_skipped(self, make):
        result = apply_suggestions("hello world", [
            make(0, 5, "HELLO", "hi", id="case"),
            make(6, 11, "world", "there", id="ok"),
        ])
        assert result.new_text == "hello there"
        assert result.applied_ids == ["ok"]
        assert result.stale_ids == ["case"]

    def test_empty_input(self):
        result = apply_suggestions("text", [])
        assert result.new_text == "text"
        assert not result.changed
        assert result.summary == "applied 0 of 0"

    def test_resolver_output_applies_without_stale(self, make):
        text = "the quick brown fox jumps over the lazy dog"
        candidates = []
        for i, word in enumerate(text.split()):
            span = locate(text, word, hint=text.find(word))
            candidates.append(make(span.start, span.end, word, word.upper(), id=f"w{i}"))
        candidates.append(make(4, 15, "quick brown", "fast", type="goal-alignment", id="goal"))
        result = apply_suggestions(text, resolve_conflicts(candidates))
        assert result.stale_ids == []
        assert "QUICK BROWN" in result.new_text


class TestScenarios:
    def test_disjoint_grammar_and_spelling(self, make):
        text = "Their are many resons."
        grammar = make(0, 5, "Their", "There", type="grammar", id="g")
        spelling = make(15, 21, "resons", "reasons", type="spelling", id="s")
        resolved = resolve_conflicts([grammar, spelling])
        assert len(resolved) == 2

        result = apply_suggestions(text, resolved)
        assert result.new_text == "There are many reasons."
        assert len(result.applied_ids) == 2
        assert result.stale_ids == []

    def test_grammar_wins_over_goal_alignment(self, make):
        text = "I think I am ready."
        goal = make(0, 18, "I think I am ready", "I am ready", type="goal-alignment", severity="suggestion", id="goal")
        grammar = make(8, 12, "I am", "I'm", type="grammar", severity="warning", id="grammar")
        assert [s.id for s in resolve_conflicts([goal, grammar])] == ["grammar"]

    def test_first_occurrence_without_hint(self):
        span = locate("good work, good job", "good")
        assert (span.start, span.end) == (0, 4)

    def test_overlapping_out_of_order_apply(self, make):
        text = "I has went home."
        first = make(2, 10, "has went", "have gone", id="first")
        second = make(6, 15, "went home", "go home", id="second")
        result = apply_suggestions(text, [first, second])
        assert result.applied_ids == ["second"]
        assert result.stale_ids == ["first"]
        assert result.new_text == "I has go home."

    def test_duplicates_from_two_analyzers_collapse(self):
        text = "i went home."
        normalizer = SuggestionNormalizer(session_token="t")
        raw = RawSuggestion(type="grammar", severity="error", originalText="i", suggestedText="I", startIndex=0)
        batch = (
            normalizer.normalize_batch(text, [raw], version=0, source="ai-grammar")
            + normalizer.normalize_batch(text, [raw], version=0, source="rule-usage")
        )
        assert len(batch) == 2
        unique = deduplicate(batch)
        assert len(unique) == 1
        assert (unique[0].start_index, unique[0].end_index) == (0, 1)


class TestAnalyzerOutputEndToEnd:
    def test_case_differing_fragments_apply_without_stale(self):
        text = "Their are many resons. THE END is near."
        raws = [
            RawSuggestion(type="grammar", severity="error", originalText="their are", suggestedText="There are"),
            RawSuggestion(type="spelling", severity="error", originalText="Resons", suggestedText="reasons"),
            RawSuggestion(type="style", severity="suggestion", originalText="the end", suggestedText="The end"),
        ]
        located = SuggestionNormalizer().normalize_batch(text, raws, version=0, source="ai-grammar")
        resolved = resolve_conflicts(deduplicate(located))
        assert len(resolved) == 3

        result = apply_suggestions(text, resolved)
        assert result.stale_ids == []
        assert result.new_text == "There are many reasons. The end is near."
