"""Baseline management for incremental analysis.

A baseline is the full text of a file as of its last analyzed pass.
When one exists, the next pass diffs the current text against it so only
what changed since then is surfaced; otherwise the pass falls back to the
repository reference.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, Optional

from .diff.textdiff import diff_texts
from .logging_config import get_logger

logger = get_logger(__name__)

ReferenceDiffFn = Callable[[str, int], str]


class BaselineTracker:
    """Per-file snapshots of the last analyzed text."""

    def __init__(self) -> None:
        self._snapshots: Dict[str, str] = {}
        # Per file: last generation handed out by begin(), and the one committed.
        self._started: Dict[str, int] = {}
        self._committed: Dict[str, int] = {}

    def has_baseline(self, file_ref: str) -> bool:
        return file_ref in self._snapshots

    def snapshot(self, file_ref: str) -> Optional[str]:
        return self._snapshots.get(file_ref)

    def begin(self, file_ref: str) -> int:
        """Start a pass on ``file_ref`` and return its generation for ``commit``."""
        generation = self._started.get(file_ref, 0) + 1
        self._started[file_ref] = generation
        return generation

    def commit(self, file_ref: str, text: str, generation: Optional[int] = None) -> bool:
        """Advance the baseline for ``file_ref`` to ``text``.

        A pass that began before the last committed one is stale; its
        commit is skipped so the baseline never moves back.

        Returns:
            Whether the baseline was replaced.
        """
        if generation is not None:
            if self.superseded(file_ref, generation):
                logger.debug("Skipping stale baseline commit for %s (pass %d)", file_ref, generation)
                return False
            self._committed[file_ref] = generation
        self._snapshots[file_ref] = text
        return True

    def superseded(self, file_ref: str, generation: int) -> bool:
        """True when a pass that began after ``generation`` has already committed."""
        return generation < self._committed.get(file_ref, 0)

    def forget(self, file_ref: str) -> None:
        self._snapshots.pop(file_ref, None)
        self._committed.pop(file_ref, None)

    def clear(self) -> None:
        self._snapshots.clear()
        self._committed.clear()

    def get_diff_for_analysis(
        self,
        file_ref: str,
        current_text: str,
        reference_diff_fn: ReferenceDiffFn,
        context_lines: int,
        advance: bool = True,
    ) -> str:
        """Diff ``current_text`` against the baseline, or the reference when there is none.

        Args:
            file_ref: File identity
            current_text: Text about to be analyzed
            reference_diff_fn: ``(file_ref, context_lines) -> diff text`` collaborator
            context_lines: Unified-diff context
            advance: Replace the baseline with ``current_text`` on success

        Raises:
            Whatever ``reference_diff_fn`` raises when the reference branch is taken.
        """
        diff_text = self._diff_against_snapshot(file_ref, current_text, context_lines)
        if diff_text is None:
            diff_text = reference_diff_fn(file_ref, context_lines)
            logger.debug("Diffed %s against reference (%d chars)", file_ref, len(diff_text))

        if advance:
            self.commit(file_ref, current_text)
        return diff_text

    async def aget_diff_for_analysis(
        self,
        file_ref: str,
        current_text: str,
        reference_diff_fn: ReferenceDiffFn,
        context_lines: int,
        advance: bool = True,
    ) -> str:
        """Async variant: the reference collaborator runs in a worker thread.

        Snapshot reads and writes stay on the calling event loop.
        """
        diff_text = self._diff_against_snapshot(file_ref, current_text, context_lines)
        if diff_text is None:
            diff_text = await asyncio.to_thread(reference_diff_fn, file_ref, context_lines)
            logger.debug("Diffed %s against reference (%d chars)", file_ref, len(diff_text))

        if advance:
            self.commit(file_ref, current_text)
        return diff_text

    def _diff_against_snapshot(
        self, file_ref: str, current_text: str, context_lines: int
    ) -> Optional[str]:
        """Diff against the stored snapshot; None means use the reference instead."""
        snapshot = self._snapshots.get(file_ref)
        if snapshot is None:
            return None
        try:
            diff_text = diff_texts(
                snapshot, current_text, file_path=file_ref, context_lines=context_lines
            )
        except Exception as e:
            logger.warning("Baseline diff failed for %s, using reference: %s", file_ref, e)
            return None
        logger.debug("Diffed %s against baseline (%d chars)", file_ref, len(diff_text))
        return diff_text
