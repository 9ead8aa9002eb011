"""Analysis passes and suggestion lifecycle for a session.

The orchestrator owns all per-file session state: suggestion store,
baselines, debounce timers and the daily model-call budget. Nothing
else holds references to those collections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from pathlib import PurePath
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Union

from .analyzers import (
    Analyzer,
    DailyUsage,
    HeuristicAnalyzer,
    LLMAnalyzer,
    create_analyzer,
    parse_candidates,
    resolve_output_language,
)
from .baseline import BaselineTracker, ReferenceDiffFn
from .config import WhyConfig
from .diff import added_lines, parse_unified_diff
from .exceptions import AnalyzerError, ReferenceUnavailableError
from .logging_config import get_logger
from .reference import GitReference
from .scanning import detect_boundaries, detect_language, extract_change_context
from .scanning.languages import line_comment_token
from .scheduler import DebounceScheduler
from .suggestions import (
    DocumentChange,
    LiveEditTracker,
    Suggestion,
    SuggestionStore,
    apply_suggestion,
    has_nearby_comment,
    resolve,
)

logger = get_logger(__name__)

Notify = Callable[[str, str], None]
LiveText = Union[str, Callable[[], str], None]


class PassStatus(Enum):
    ANALYZED = "analyzed"
    NO_CHANGES = "no_changes"
    EXCLUDED = "excluded"
    DISABLED = "disabled"
    TOO_MANY_CHANGES = "too_many_changes"
    REFERENCE_UNAVAILABLE = "reference_unavailable"
    ANALYZER_FAILED = "analyzer_failed"
    SUPERSEDED = "superseded"


@dataclass
class AnalysisResult:
    """Outcome of one pass: the suggestions it merged and how many it dropped."""

    file_ref: str
    status: PassStatus
    suggestions: List[Suggestion] = field(default_factory=list)
    dropped: int = 0

    @property
    def analyzed(self) -> bool:
        return self.status is PassStatus.ANALYZED


_NOTIFY_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _log_notification(level: str, message: str) -> None:
    logger.log(_NOTIFY_LEVELS.get(level.lower(), logging.WARNING), message)


def is_excluded(file_ref: str, patterns: Iterable[str]) -> bool:
    """Glob match on the POSIX path; ``**/`` also matches at the top level."""
    path = PurePath(file_ref).as_posix()
    name = PurePath(file_ref).name
    for pattern in patterns:
        if fnmatch(path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch(name, pattern[3:]):
            return True
    return False


class AnalysisOrchestrator:
    """Runs analysis passes and applies user actions to suggestions."""

    def __init__(
        self,
        config: Optional[WhyConfig] = None,
        analyzer: Optional[Analyzer] = None,
        reference_diff: Optional[ReferenceDiffFn] = None,
        notify: Optional[Notify] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Settings; defaults when omitted
            analyzer: Analyzer; chosen from ``config`` when omitted
            reference_diff: ``(file_ref, context_lines) -> diff text``; git when omitted
            notify: ``(level, message)`` sink for user-visible notices
        """
        self.config = config or WhyConfig()
        self.analyzer = analyzer or create_analyzer(self.config)
        self.fallback_analyzer = HeuristicAnalyzer(output_language=self.config.output_language)
        self.reference_diff = reference_diff or GitReference()
        self.notify = notify or _log_notification

        self.store = SuggestionStore()
        self.baselines = BaselineTracker()
        self.live_edits = LiveEditTracker(self.store)
        self.scheduler = DebounceScheduler(self.config.debounce_seconds)
        self.usage = DailyUsage(self.config.daily_limit)

    # ── Analysis ────────────────────────────────────────────────────

    async def analyze(
        self,
        file_ref: str,
        text: str,
        live_text: LiveText = None,
        language: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Run one pass over ``text``, the content being analyzed.

        Args:
            file_ref: File identity (a path for the git reference)
            text: Content the diff is computed for
            live_text: Current document, or a callable read after the
                analyzer returns; defaults to ``text``
            language: Language id; detected from ``file_ref`` when omitted

        Raises:
            DiffComputationError: The reference exists but could not be diffed
        """
        language = language or detect_language(file_ref)
        if not self.config.enabled:
            return AnalysisResult(file_ref, PassStatus.DISABLED)
        if is_excluded(file_ref, self.config.exclude_patterns):
            logger.debug("Skipping excluded file %s", file_ref)
            return AnalysisResult(file_ref, PassStatus.EXCLUDED)

        generation = self.baselines.begin(file_ref)
        try:
            diff_text = await self.baselines.aget_diff_for_analysis(
                file_ref, text, self.reference_diff, self.config.context_lines, advance=False
            )
        except ReferenceUnavailableError as e:
            self.notify("warning", f"WhyComment: {e}")
            return AnalysisResult(file_ref, PassStatus.REFERENCE_UNAVAILABLE)

        if not diff_text.strip():
            if not self.baselines.commit(file_ref, text, generation):
                return AnalysisResult(file_ref, PassStatus.SUPERSEDED)
            cleared = self.store.clear_active(file_ref)
            logger.debug("No changes in %s, cleared %d suggestions", file_ref, cleared)
            return AnalysisResult(file_ref, PassStatus.NO_CHANGES)

        added = added_lines(parse_unified_diff(diff_text))
        if not added:
            if not self.baselines.commit(file_ref, text, generation):
                return AnalysisResult(file_ref, PassStatus.SUPERSEDED)
            return AnalysisResult(file_ref, PassStatus.NO_CHANGES)
        if len(added) > self.config.max_changed_lines:
            self.notify(
                "warning",
                f"WhyComment: {len(added)} changed lines in {file_ref} exceed "
                f"max_changed_lines={self.config.max_changed_lines}; skipped",
            )
            return AnalysisResult(file_ref, PassStatus.TOO_MANY_CHANGES)

        annotated = "\n".join(a.render() for a in added)
        analyzer = self._select_analyzer()
        try:
            raw = await analyzer.analyze(annotated, language)
        except AnalyzerError as e:
            self.notify("warning", f"WhyComment analyzer failed: {e}")
            return AnalysisResult(file_ref, PassStatus.ANALYZER_FAILED)
        except Exception as e:
            logger.exception("Analyzer %s failed on %s", analyzer.name, file_ref)
            self.notify("warning", f"WhyComment analyzer failed: {e}")
            return AnalysisResult(file_ref, PassStatus.ANALYZER_FAILED)

        if self.baselines.superseded(file_ref, generation):
            logger.debug("Discarding results for %s, a newer pass already finished", file_ref)
            return AnalysisResult(file_ref, PassStatus.SUPERSEDED)

        candidates = parse_candidates(raw, resolve_output_language(self.config.output_language))
        current = live_text() if callable(live_text) else live_text
        lines = (text if current is None else current).splitlines()
        added_set = frozenset(a.index for a in added)
        spans = detect_boundaries(lines, language)

        accepted: List[Suggestion] = []
        dropped = 0
        for candidate in candidates:
            suggestion = resolve(
                Suggestion.create(
                    file_ref,
                    candidate.line,
                    candidate.message,
                    candidate.suggested_comment,
                    anchor=candidate.anchor,
                    source=analyzer.name,
                ),
                lines,
            )
            if suggestion.line not in added_set:
                dropped += 1
                continue
            if has_nearby_comment(lines, suggestion.line, language, self.config.comment_lookback_lines):
                dropped += 1
                continue
            existing = self.store.get(file_ref, suggestion.id)
            if existing is not None and not existing.active:
                dropped += 1
                continue
            context = extract_change_context(
                lines,
                suggestion.line,
                language,
                window=self.config.context_window_lines,
                exclude_comments=self.config.exclude_comments,
                spans=spans,
            )
            suggestion.function_name = context.function_name
            suggestion.class_name = context.class_name
            accepted.append(suggestion)

        self.store.merge(file_ref, accepted)
        self.baselines.commit(file_ref, text, generation)
        logger.info(
            "Analyzed %s with %s: %d suggestions, %d dropped",
            file_ref,
            analyzer.name,
            len(accepted),
            dropped,
        )
        return AnalysisResult(file_ref, PassStatus.ANALYZED, accepted, dropped)

    def _select_analyzer(self) -> Analyzer:
        if not isinstance(self.analyzer, LLMAnalyzer):
            return self.analyzer
        if self.usage.try_consume():
            return self.analyzer
        logger.info("Daily limit of %d model calls reached, using heuristics", self.usage.limit)
        return self.fallback_analyzer

    def schedule(
        self,
        file_ref: str,
        read_text: Callable[[], str],
        on_result: Optional[Callable[[AnalysisResult], Awaitable[None] | None]] = None,
    ) -> bool:
        """Debounce a save of ``file_ref``; returns False when auto-analysis is off."""
        if not self.config.auto_analyze:
            return False

        async def run() -> None:
            result = await self.analyze(file_ref, read_text(), live_text=read_text)
            if on_result is not None:
                outcome = on_result(result)
                if outcome is not None:
                    await outcome

        self.scheduler.schedule(file_ref, run)
        return True

    # ── Live edits and user actions ─────────────────────────────────

    def on_document_change(self, file_ref: str, changes: Iterable[DocumentChange]) -> int:
        return self.live_edits.apply_changes(file_ref, changes)

    def suggestions(self, file_ref: str) -> List[Suggestion]:
        return self.store.active(file_ref)

    def apply(
        self, file_ref: str, suggestion_id: str, lines: Sequence[str], language: Optional[str] = None
    ) -> Optional[List[str]]:
        """Insert the suggestion's comment into ``lines``.

        Returns:
            The new lines, or None when the suggestion is unknown or no longer active.
        """
        suggestion = self.store.get(file_ref, suggestion_id)
        if suggestion is None or not suggestion.active:
            return None
        suggestion.line = resolve(suggestion, lines).line
        token = line_comment_token(language or detect_language(file_ref))
        new_lines = apply_suggestion(lines, suggestion, token)
        self.live_edits.on_change(file_ref, suggestion.line, suggestion.line, 1)
        return new_lines

    def ignore(self, file_ref: str, suggestion_id: str) -> bool:
        return self.store.mark_ignored(file_ref, suggestion_id) is not None

    def clear(self, file_ref: Optional[str] = None) -> None:
        if file_ref is None:
            self.store.clear_all()
        else:
            self.store.clear_for_file(file_ref)

    def reset(self) -> None:
        """Drop all session state."""
        self.scheduler.cancel_all()
        self.store.clear_all()
        self.baselines.clear()
        self.usage.reset()

    async def aclose(self) -> None:
        self.scheduler.cancel_all()
        await self.analyzer.aclose()
