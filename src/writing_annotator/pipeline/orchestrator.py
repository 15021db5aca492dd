"""Annotation session - runs analyzers, merges their output and applies edits."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable

from writing_annotator.analyzers.base import BaseAnalyzer
from writing_annotator.cache.analysis_cache import AnalysisCache
from writing_annotator.clients.llm_client import LLMClient
from writing_annotator.logging.cost_calculator import calculate_cost
from writing_annotator.logging.models import AnalysisLog
from writing_annotator.logging.usage_store import UsageStore
from writing_annotator.models.document import ApplyResult, Document, SuggestionSet
from writing_annotator.models.suggestion import (
    RawSuggestion,
    Suggestion,
    SuggestionState,
    SuggestionType,
)
from writing_annotator.pipeline.bulk_applier import apply_suggestions
from writing_annotator.pipeline.conflict_resolver import resolve_conflicts
from writing_annotator.pipeline.deduplicator import deduplicate
from writing_annotator.pipeline.normalizer import SuggestionNormalizer
from writing_annotator.stores.document_store import DocumentStore

logger = logging.getLogger(__name__)


class AnalysisFailedError(RuntimeError):
    """Every analyzer of a batch failed or timed out."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        detail = "; ".join(f"{name}: {err}" for name, err in errors.items())
        super().__init__(f"All analyzers failed ({detail})")


@dataclass
class AnalyzerOutcome:
    name: str
    suggestions: list[RawSuggestion] | None = None
    error: str | None = None
    cached: bool = False
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AnalysisBatch:
    """Result of one ``AnnotationSession.analyze`` call.

    ``suggestion_set`` is None when the document changed while the analyzers
    were running; such a batch is ``superseded`` and was not installed.
    """

    version: int
    outcomes: list[AnalyzerOutcome] = field(default_factory=list)
    suggestion_set: SuggestionSet | None = None
    superseded: bool = False
    elapsed_seconds: float = 0.0

    @property
    def failed(self) -> list[str]:
        return [o.name for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> list[str]:
        return [o.name for o in self.outcomes if o.ok]


class AnnotationSession:
    """One editing session over a single document.

    The session owns the document version counter and the current
    SuggestionSet. Any text change bumps the version and discards the set
    before the store is touched, so suggestions computed against old text
    are never rendered or applied. Lifecycle states are remembered for the
    last ``state_history`` installed sets only.
    """

    def __init__(
        self,
        store: DocumentStore,
        analyzers: list[BaseAnalyzer],
        *,
        llm: LLMClient | None = None,
        normalizer: SuggestionNormalizer | None = None,
        cache: AnalysisCache | None = None,
        usage_store: UsageStore | None = None,
        analyzer_timeout: float = 60.0,
        session_id: str | None = None,
        state_history: int = 10,
    ):
        self.store = store
        self.analyzers = list(analyzers)
        self.llm = llm
        self.normalizer = normalizer or SuggestionNormalizer()
        self.cache = cache
        self.usage_store = usage_store
        self.analyzer_timeout = analyzer_timeout
        self.session_id = session_id or str(uuid.uuid4())
        self._version = 0
        self._current: SuggestionSet | None = None
        self._states: dict[str, SuggestionState] = {}
        # Ids issued by each installed set, oldest first
        self.state_history = state_history
        self._issued: deque[list[str]] = deque()

    @property
    def version(self) -> int:
        return self._version

    @property
    def document(self) -> Document:
        return Document(text=self.store.get_text(), version=self._version)

    @property
    def suggestion_set(self) -> SuggestionSet | None:
        """The installed set, or None when it belongs to an older version."""
        if self._current is None or self._current.version != self._version:
            return None
        return self._current

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def analyze(self, writing_goal: str | None = None) -> AnalysisBatch:
        """Run every applicable analyzer concurrently and install the merged set.

        Raises:
            AnalysisFailedError: every applicable analyzer failed.
        """
        start = time.monotonic()
        snapshot = self.document
        applicable = [a for a in self.analyzers if a.applies_to(snapshot.text, writing_goal)]
        logger.info(
            "Analyzing version %d with %d analyzer(s): %s",
            snapshot.version, len(applicable), ", ".join(a.name for a in applicable) or "-",
        )

        outcomes = list(await asyncio.gather(
            *(self._run_analyzer(a, snapshot.text, writing_goal) for a in applicable)
        ))
        batch = AnalysisBatch(version=snapshot.version, outcomes=outcomes)

        if applicable and not batch.succeeded:
            batch.elapsed_seconds = time.monotonic() - start
            errors = {o.name: o.error or "" for o in outcomes}
            self._log_analysis(batch, writing_goal, error=str(AnalysisFailedError(errors)))
            raise AnalysisFailedError(errors)

        if snapshot.version != self._version:
            logger.info(
                "Discarding batch for version %d; document is now at version %d",
                snapshot.version, self._version,
            )
            batch.superseded = True
        else:
            batch.suggestion_set = self._merge(snapshot, applicable, outcomes)
            self._install(batch.suggestion_set)

        batch.elapsed_seconds = time.monotonic() - start
        self._log_analysis(batch, writing_goal)
        return batch

    async def _run_analyzer(
        self, analyzer: BaseAnalyzer, text: str, writing_goal: str | None
    ) -> AnalyzerOutcome:
        start = time.monotonic()
        if analyzer.cacheable and self.cache is not None:
            cached = await asyncio.to_thread(self.cache.get, analyzer.name, text, writing_goal)
            if cached is not None:
                logger.debug("Cache hit for %s", analyzer.name)
                return AnalyzerOutcome(name=analyzer.name, suggestions=cached, cached=True)

        try:
            suggestions = await asyncio.wait_for(
                analyzer.analyze(text, writing_goal), timeout=self.analyzer_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Analyzer %s timed out after %.0fs", analyzer.name, self.analyzer_timeout)
            return AnalyzerOutcome(
                name=analyzer.name,
                error="timed out",
                elapsed_seconds=time.monotonic() - start,
            )
        except Exception as exc:
            logger.warning("Analyzer %s failed: %s", analyzer.name, exc)
            return AnalyzerOutcome(
                name=analyzer.name,
                error=str(exc) or type(exc).__name__,
                elapsed_seconds=time.monotonic() - start,
            )

        if analyzer.cacheable and self.cache is not None:
            await asyncio.to_thread(self.cache.put, analyzer.name, text, suggestions, writing_goal)
        return AnalyzerOutcome(
            name=analyzer.name,
            suggestions=suggestions,
            elapsed_seconds=time.monotonic() - start,
        )

    def _merge(
        self,
        snapshot: Document,
        analyzers: list[BaseAnalyzer],
        outcomes: list[AnalyzerOutcome],
    ) -> SuggestionSet:
        located: list[Suggestion] = []
        for analyzer, outcome in zip(analyzers, outcomes):
            if not outcome.ok:
                continue
            located.extend(self.normalizer.normalize_batch(
                snapshot.text,
                outcome.suggestions or [],
                version=snapshot.version,
                source=analyzer.name,
                default_type=analyzer.kind,
            ))

        resolved = resolve_conflicts(deduplicate([s for s in located if s.resolved]))
        unresolved = deduplicate([s for s in located if not s.resolved])
        logger.info(
            "Merged %d located suggestions into %d (%d unresolved)",
            len(located), len(resolved), len(unresolved),
        )
        return SuggestionSet(
            version=snapshot.version,
            suggestions=tuple(resolved),
            unresolved=tuple(unresolved),
        )

    def _install(self, suggestion_set: SuggestionSet | None) -> None:
        self._forget_outstanding()
        self._current = suggestion_set
        if suggestion_set is not None:
            ids = [s.id for s in (*suggestion_set.suggestions, *suggestion_set.unresolved)]
            for sid in ids:
                self._states[sid] = SuggestionState.PROPOSED
            self._issued.append(ids)
            while len(self._issued) > self.state_history:
                for sid in self._issued.popleft():
                    self._states.pop(sid, None)

    def _forget_outstanding(self) -> None:
        for sid in [sid for sid, state in self._states.items() if not state.is_terminal]:
            del self._states[sid]

    # ------------------------------------------------------------------
    # Rendering and lifecycle
    # ------------------------------------------------------------------

    def rendered(self) -> list[Suggestion]:
        """Suggestions to highlight over the current text."""
        current = self.suggestion_set
        if current is None:
            return []
        visible = [
            s for s in current.suggestions
            if not self._states.get(s.id, SuggestionState.PROPOSED).is_terminal
        ]
        for s in visible:
            self._states[s.id] = SuggestionState.RENDERED
        return visible

    def state_of(self, suggestion_id: str) -> SuggestionState:
        """Lifecycle state of a suggestion (KeyError if never issued or discarded)."""
        return self._states[suggestion_id]

    def dismiss(self, suggestion_id: str) -> SuggestionSet:
        """Remove one suggestion from the current set and return the new set."""
        current = self.suggestion_set
        if current is None or current.get(suggestion_id) is None:
            raise KeyError(suggestion_id)
        self._current = current.without(suggestion_id)
        self._states[suggestion_id] = SuggestionState.DISMISSED
        return self._current

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    async def edit(self, new_text: str) -> int:
        """Replace the document text. Returns the new version."""
        self._forget_outstanding()
        self._current = None
        self._version += 1
        await self.store.apply_edit(new_text)
        logger.debug("Document now at version %d (%d chars)", self._version, len(new_text))
        return self._version

    async def apply(self, suggestion_ids: Iterable[str]) -> ApplyResult:
        """Apply the given suggestions to the current text in one edit."""
        return await self._apply(list(suggestion_ids))

    async def apply_all(self) -> ApplyResult:
        return await self._apply(self._pending_ids(lambda s: True))

    async def apply_type(self, kind: SuggestionType | str) -> ApplyResult:
        kind = SuggestionType(kind)
        return await self._apply(self._pending_ids(lambda s: s.type == kind))

    async def apply_errors(self) -> ApplyResult:
        current = self._current
        error_ids = {s.id for s in current.errors()} if current is not None else set()
        return await self._apply(self._pending_ids(lambda s: s.id in error_ids))

    async def apply_one(self, suggestion_id: str, alternative: str | None = None) -> ApplyResult:
        """Apply one suggestion, optionally substituting one of its alternatives."""
        replacement = None
        if alternative is not None:
            current = self._current
            suggestion = current.get(suggestion_id) if current is not None else None
            if suggestion is not None:
                if alternative not in suggestion.alternatives:
                    raise ValueError(
                        f"{alternative!r} is not an alternative of suggestion {suggestion_id}"
                    )
                replacement = suggestion.model_copy(update={"suggested_text": alternative})
        return await self._apply([suggestion_id], replacement=replacement)

    def _pending_ids(self, predicate) -> list[str]:
        current = self._current
        if current is None:
            return []
        return [
            s.id for s in current.suggestions
            if predicate(s) and not self._states.get(s.id, SuggestionState.PROPOSED).is_terminal
        ]

    async def _apply(
        self, suggestion_ids: list[str], *, replacement: Suggestion | None = None
    ) -> ApplyResult:
        start = time.monotonic()
        text = self.store.get_text()
        current = self.suggestion_set

        if current is None:
            # Set is missing or was computed for an older version
            for sid in suggestion_ids:
                if sid in self._states:
                    self._states[sid] = SuggestionState.STALE
            result = ApplyResult(new_text=text, stale_ids=list(suggestion_ids))
            logger.warning("Apply against outdated suggestions: %s", result.summary)
            self._log_apply(result, start)
            return result

        chosen: list[Suggestion] = []
        rejected: list[str] = []
        for sid in suggestion_ids:
            suggestion = current.get(sid)
            if suggestion is None or self._states.get(sid, SuggestionState.PROPOSED).is_terminal:
                rejected.append(sid)
                continue
            if replacement is not None and replacement.id == sid:
                suggestion = replacement
            chosen.append(suggestion)

        result = apply_suggestions(text, chosen)
        result.stale_ids = rejected + result.stale_ids

        for sid in result.applied_ids:
            self._states[sid] = SuggestionState.APPLIED
        for sid in result.stale_ids:
            if sid in self._states and not self._states[sid].is_terminal:
                self._states[sid] = SuggestionState.STALE

        if result.changed:
            await self.edit(result.new_text)
        else:
            for sid in result.stale_ids:
                current = current.without(sid)
            self._current = current

        self._log_apply(result, start)
        return result

    # ------------------------------------------------------------------
    # Usage logging
    # ------------------------------------------------------------------

    def _token_usage(self) -> tuple[int, int, float]:
        if self.llm is None:
            return 0, 0, 0.0
        tokens = self.llm.get_token_summary()
        return tokens["input"], tokens["output"], calculate_cost(tokens["calls"])

    def _log_analysis(
        self, batch: AnalysisBatch, writing_goal: str | None, error: str | None = None
    ) -> None:
        if self.usage_store is None:
            return
        input_tokens, output_tokens, cost = self._token_usage()
        suggestion_set = batch.suggestion_set
        self.usage_store.save_log(AnalysisLog(
            session_id=self.session_id,
            action="analyze",
            document_version=batch.version,
            writing_goal=writing_goal,
            analyzers_run=len(batch.outcomes),
            analyzers_failed=len(batch.failed),
            suggestion_count=len(suggestion_set) if suggestion_set is not None else 0,
            elapsed_seconds=round(batch.elapsed_seconds, 2),
            total_input_tokens=input_tokens,
            total_output_tokens=output_tokens,
            estimated_cost_usd=cost,
            superseded=batch.superseded,
            success=error is None,
            error_message=error,
        ))

    def _log_apply(self, result: ApplyResult, start: float) -> None:
        if self.usage_store is None:
            return
        self.usage_store.save_log(AnalysisLog(
            session_id=self.session_id,
            action="apply",
            document_version=self._version,
            applied_count=len(result.applied_ids),
            stale_count=len(result.stale_ids),
            elapsed_seconds=round(time.monotonic() - start, 2),
        ))
