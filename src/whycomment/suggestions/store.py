"""Per-file suggestion collections with merge-by-id semantics."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from ..logging_config import get_logger
from .models import Suggestion

logger = get_logger(__name__)


class SuggestionStore:
    """Owns every suggestion, keyed by file.

    Holds at most one record per id per file. Callers receive copies of
    the collections, never the internal lists.
    """

    def __init__(self) -> None:
        self._by_file: Dict[str, List[Suggestion]] = {}

    def get_for_file(self, file_ref: str) -> List[Suggestion]:
        return list(self._by_file.get(file_ref, ()))

    def active(self, file_ref: str) -> List[Suggestion]:
        return [s for s in self._by_file.get(file_ref, ()) if s.active]

    def get(self, file_ref: str, suggestion_id: str) -> Optional[Suggestion]:
        for suggestion in self._by_file.get(file_ref, ()):
            if suggestion.id == suggestion_id:
                return suggestion
        return None

    def set_for_file(self, file_ref: str, suggestions: Iterable[Suggestion]) -> None:
        """Replace the file's collection, keeping the last record per id."""
        self._by_file[file_ref] = []
        self.merge(file_ref, suggestions)

    def update(self, suggestion: Suggestion) -> Suggestion:
        """Insert or replace in place by id; the collection never grows on a known id."""
        items = self._by_file.setdefault(suggestion.file_ref, [])
        for index, existing in enumerate(items):
            if existing.id == suggestion.id:
                items[index] = suggestion
                return suggestion
        items.append(suggestion)
        return suggestion

    def merge(self, file_ref: str, suggestions: Iterable[Suggestion]) -> int:
        """Merge by id into ``file_ref``; returns how many ids were new."""
        known = {s.id for s in self._by_file.get(file_ref, ())}
        added = 0
        for suggestion in suggestions:
            if suggestion.file_ref != file_ref:
                suggestion = replace(suggestion, file_ref=file_ref)
            if suggestion.id not in known:
                known.add(suggestion.id)
                added += 1
            self.update(suggestion)
        logger.debug("Merged into %s: %d new, %d total", file_ref, added, len(known))
        return added

    def set_line(self, file_ref: str, suggestion_id: str, line: int) -> None:
        suggestion = self.get(file_ref, suggestion_id)
        if suggestion is not None:
            suggestion.line = line

    def mark_applied(self, file_ref: str, suggestion_id: str) -> Optional[Suggestion]:
        suggestion = self.get(file_ref, suggestion_id)
        if suggestion is not None:
            suggestion.applied = True
        return suggestion

    def mark_ignored(self, file_ref: str, suggestion_id: str) -> Optional[Suggestion]:
        suggestion = self.get(file_ref, suggestion_id)
        if suggestion is not None:
            suggestion.ignored = True
        return suggestion

    def clear_active(self, file_ref: str) -> int:
        """Drop the file's active suggestions, keeping applied/ignored history."""
        items = self._by_file.get(file_ref)
        if not items:
            return 0
        kept = [s for s in items if not s.active]
        removed = len(items) - len(kept)
        self._by_file[file_ref] = kept
        return removed

    def clear_for_file(self, file_ref: str) -> None:
        self._by_file.pop(file_ref, None)

    def clear_all(self) -> None:
        self._by_file.clear()

    def files(self) -> List[str]:
        return [f for f, items in self._by_file.items() if items]

    def all(self) -> List[Suggestion]:
        return [s for items in self._by_file.values() for s in items]

    def __len__(self) -> int:
        return sum(len(items) for items in self._by_file.values())
