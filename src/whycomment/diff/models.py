"""Data models for parsed unified diffs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class LineKind(Enum):
    """Which side(s) of the diff a hunk line belongs to."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


_PREFIX = {LineKind.CONTEXT: " ", LineKind.ADDED: "+", LineKind.REMOVED: "-"}


@dataclass(frozen=True)
class DiffLine:
    """One line of a hunk, without its leading marker."""

    kind: LineKind
    text: str

    @property
    def in_new(self) -> bool:
        return self.kind is not LineKind.REMOVED

    @property
    def in_old(self) -> bool:
        return self.kind is not LineKind.ADDED

    def render(self) -> str:
        return f"{_PREFIX[self.kind]}{self.text}"


@dataclass
class Hunk:
    """A contiguous region of change.

    ``old_start`` and ``new_start`` are the 1-based numbers from the
    ``@@`` header; ``lines`` keeps the order they appeared in.
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[DiffLine] = field(default_factory=list)

    def numbered(self) -> Iterator[tuple[Optional[int], Optional[int], DiffLine]]:
        """Yield ``(old_number, new_number, line)`` with 1-based file numbers.

        The number for the side a line does not exist on is None.
        """
        old_no = self.old_start
        new_no = self.new_start
        for line in self.lines:
            if line.kind is LineKind.CONTEXT:
                yield old_no, new_no, line
                old_no += 1
                new_no += 1
            elif line.kind is LineKind.ADDED:
                yield None, new_no, line
                new_no += 1
            else:
                yield old_no, None, line
                old_no += 1

    @property
    def added(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.ADDED)

    @property
    def removed(self) -> int:
        return sum(1 for line in self.lines if line.kind is LineKind.REMOVED)

    @property
    def new_span(self) -> int:
        """Lines walked on the new side (context + added)."""
        return sum(1 for line in self.lines if line.in_new)

    @property
    def old_span(self) -> int:
        """Lines walked on the old side (context + removed)."""
        return sum(1 for line in self.lines if line.in_old)

    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"


@dataclass
class UnifiedDiff:
    """Ordered hunks of a single-file diff."""

    hunks: list[Hunk] = field(default_factory=list)

    def __iter__(self) -> Iterator[Hunk]:
        return iter(self.hunks)

    def __len__(self) -> int:
        return len(self.hunks)

    @property
    def is_empty(self) -> bool:
        return not self.hunks

    @property
    def added_count(self) -> int:
        return sum(h.added for h in self.hunks)

    @property
    def removed_count(self) -> int:
        return sum(h.removed for h in self.hunks)
