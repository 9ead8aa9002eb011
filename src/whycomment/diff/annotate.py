"""Absolute-line view of the lines a diff adds.

The annotated text is the only thing sent to an analyzer, and it is used
as a cache key upstream, so it must stay byte-for-byte deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import LineKind, UnifiedDiff
from .parser import parse_unified_diff


@dataclass(frozen=True)
class AddedLine:
    """An added line and its position in the new file.

    ``number`` is the 1-based new-file number as diffs report it;
    ``index`` is the 0-based position used by suggestions and spans.
    This property is the one place the two numberings meet.
    """

    number: int
    text: str

    @property
    def index(self) -> int:
        return self.number - 1

    def render(self) -> str:
        return f"[{self.number}] +{self.text}"


def added_lines(diff: UnifiedDiff) -> list[AddedLine]:
    """Every added line of ``diff`` in file order. Removed lines are skipped."""
    out: list[AddedLine] = []
    for hunk in diff:
        for _old, new_no, line in hunk.numbered():
            if line.kind is LineKind.ADDED and new_no is not None:
                out.append(AddedLine(number=new_no, text=line.text))
    return out


def added_line_set(diff: UnifiedDiff) -> frozenset[int]:
    """0-based indexes of the added lines."""
    return frozenset(a.index for a in added_lines(diff))


def annotate_added_lines(diff: UnifiedDiff | str) -> str:
    """Render added lines as ``[<new line>] +<text>``, one per line."""
    if isinstance(diff, str):
        diff = parse_unified_diff(diff)
    return "\n".join(a.render() for a in added_lines(diff))
