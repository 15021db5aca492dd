"""Document snapshots, suggestion sets and apply results."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from writing_annotator.models.suggestion import Severity, Suggestion, SuggestionType


@dataclass(frozen=True)
class Document:
    """Document text at one version of the editing session."""

    text: str
    version: int = 0


@dataclass(frozen=True)
class SuggestionSet:
    """Conflict-free suggestions computed against one document version.

    ``suggestions`` holds located, renderable entries in text order.
    ``unresolved`` holds entries whose fragment could not be found; they are
    shown for their message only and never highlighted or applied.
    """

    version: int
    suggestions: tuple[Suggestion, ...] = ()
    unresolved: tuple[Suggestion, ...] = ()

    def __len__(self) -> int:
        return len(self.suggestions)

    def __iter__(self):
        return iter(self.suggestions)

    @property
    def ids(self) -> list[str]:
        return [s.id for s in self.suggestions]

    def get(self, suggestion_id: str) -> Suggestion | None:
        for s in self.suggestions:
            if s.id == suggestion_id:
                return s
        for s in self.unresolved:
            if s.id == suggestion_id:
                return s
        return None

    def of_type(self, kind: SuggestionType | str) -> list[Suggestion]:
        kind = SuggestionType(kind)
        return [s for s in self.suggestions if s.type == kind]

    def errors(self) -> list[Suggestion]:
        return [s for s in self.suggestions if s.severity == Severity.ERROR]

    def without(self, suggestion_id: str) -> SuggestionSet:
        """Return a copy of the set with one suggestion removed."""
        return replace(
            self,
            suggestions=tuple(s for s in self.suggestions if s.id != suggestion_id),
            unresolved=tuple(s for s in self.unresolved if s.id != suggestion_id),
        )


@dataclass
class ApplyResult:
    """Outcome of applying a batch of suggestions to a text."""

    new_text: str
    applied_ids: list[str] = field(default_factory=list)
    stale_ids: list[str] = field(default_factory=list)
    # id -> (start, end) of the inserted suggested_text within new_text
    applied_spans: dict[str, tuple[int, int]] = field(default_factory=dict)

    @property
    def requested(self) -> int:
        return len(self.applied_ids) + len(self.stale_ids)

    @property
    def changed(self) -> bool:
        return bool(self.applied_ids)

    @property
    def summary(self) -> str:
        return f"applied {len(self.applied_ids)} of {self.requested}"
