"""Shifting suggestion lines as the live document is edited."""

from __future__ import annotations

from typing import Iterable

from ..logging_config import get_logger
from .models import DocumentChange
from .store import SuggestionStore

logger = get_logger(__name__)


class LiveEditTracker:
    """Keeps active suggestions on their lines without re-running analysis.

    Runs synchronously within the edit event so the next read, such as
    an apply right after a keystroke, sees corrected lines.
    """

    def __init__(self, store: SuggestionStore) -> None:
        self._store = store

    def on_change(self, file_ref: str, start_line: int, end_line: int, inserted_line_count: int) -> int:
        """Apply one edit replacing ``start_line``..``end_line``.

        Returns:
            Number of suggestions whose line changed.
        """
        delta = inserted_line_count - (end_line - start_line)
        moved = 0
        for suggestion in self._store.active(file_ref):
            line = suggestion.line
            if line > end_line:
                new_line = line + delta
            elif line >= start_line:
                new_line = max(0, start_line + inserted_line_count)
            else:
                continue
            if new_line != line:
                suggestion.line = new_line
                moved += 1
        if moved:
            logger.debug("Shifted %d suggestions in %s (delta %+d)", moved, file_ref, delta)
        return moved

    def apply_changes(self, file_ref: str, changes: Iterable[DocumentChange]) -> int:
        """Apply edit events in the order they were reported."""
        return sum(
            self.on_change(file_ref, c.start_line, c.end_line, c.inserted_line_count)
            for c in changes
        )
