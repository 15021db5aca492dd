"""Tests for conflict resolution."""

import itertools

from writing_annotator.pipeline.conflict_resolver import priority, resolve_conflicts


def _no_overlaps(suggestions):
    return all(not a.overlaps(b) for a, b in itertools.combinations(suggestions, 2))


class TestPriority:
    def test_type_rank_decides_first(self, make):
        spelling = make(0, 3, type="spelling", severity="suggestion")
        grammar = make(0, 3, type="grammar", severity="error")
        assert priority(spelling, grammar)
        assert not priority(grammar, spelling)

    def test_severity_breaks_type_tie(self, make):
        error = make(0, 3, type="style", severity="error")
        warning = make(0, 3, type="style", severity="warning")
        assert priority(error, warning)
        assert not priority(warning, error)

    def test_full_tie_keeps_incumbent(self, make):
        a = make(0, 3, type="vocabulary", severity="warning")
        b = make(1, 4, type="vocabulary", severity="warning")
        assert not priority(b, a)

    def test_unknown_ranks_lowest(self, make):
        unknown = make(0, 3, type="unknown", severity="error")
        goal = make(0, 3, type="goal-alignment", severity="suggestion")
        assert priority(goal, unknown)


class TestResolveConflicts:
    def test_disjoint_kept_in_order(self, make):
        items = [make(10, 12, id="b"), make(0, 4, id="a")]
        assert [s.id for s in resolve_conflicts(items)] == ["a", "b"]

    def test_adjacent_spans_do_not_overlap(self, make):
        items = [make(0, 4, id="a"), make(4, 8, id="b")]
        assert len(resolve_conflicts(items)) == 2

    def test_grammar_beats_goal_alignment(self, make):
        goal = make(0, 40, "a whole sentence", "rewrite", type="goal-alignment", severity="suggestion", id="goal")
        grammar = make(10, 15, "their", "there", type="grammar", severity="error", id="grammar")
        result = resolve_conflicts([goal, grammar])
        assert [s.id for s in result] == ["grammar"]

    def test_spelling_beats_goal_alignment_in_either_order(self, make):
        spelling = make(5, 8, type="spelling", severity="error", id="spelling")
        goal = make(0, 20, type="goal-alignment", severity="suggestion", id="goal")
        assert [s.id for s in resolve_conflicts([spelling, goal])] == ["spelling"]
        assert [s.id for s in resolve_conflicts([goal, spelling])] == ["spelling"]

    def test_tie_keeps_earlier_start(self, make):
        a = make(0, 6, type="style", severity="warning", id="a")
        b = make(3, 9, type="style", severity="warning", id="b")
        assert [s.id for s in resolve_conflicts([b, a])] == ["a"]

    def test_output_has_no_overlaps(self, make):
        kinds = ["spelling", "grammar", "style", "vocabulary", "conciseness", "goal-alignment"]
        items = [
            make(start, start + length, type=kinds[(start + length) % len(kinds)], id=f"{start}-{length}")
            for start in range(0, 30, 3)
            for length in (2, 5, 9)
        ]
        result = resolve_conflicts(items)
        assert result
        assert _no_overlaps(result)
        assert [s.start_index for s in result] == sorted(s.start_index for s in result)

    def test_does_not_mutate_input(self, make):
        items = [make(5, 8, id="b"), make(0, 6, id="a")]
        snapshot = list(items)
        resolve_conflicts(items)
        assert items == snapshot
