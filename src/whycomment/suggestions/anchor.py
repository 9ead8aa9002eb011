"""Re-locating suggestions inside the current document by anchor text.

Matching is best-effort: a trimmed line equal to the anchor, or one
containing it, is a candidate, and the candidate nearest the last known
line wins. Duplicate anchor text can therefore resolve to the wrong
occurrence when the suggestion has drifted far.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..logging_config import get_logger
from .models import Suggestion

logger = get_logger(__name__)

_DIFF_MARKERS = "+- "


def normalize_anchor(anchor: Optional[str]) -> str:
    """Anchor text without a leading diff marker or surrounding whitespace."""
    if not anchor:
        return ""
    text = anchor.strip()
    if text[:1] in _DIFF_MARKERS:
        text = text[1:]
    return text.strip()


def clamp_line(line: int, line_count: int) -> int:
    if line_count <= 0:
        return 0
    return min(max(line, 0), line_count - 1)


def find_anchor_line(anchor: str, lines: Sequence[str], near: int) -> Optional[int]:
    """Index of the line matching ``anchor`` closest to ``near``, lowest index on ties."""
    best: Optional[int] = None
    for index, line in enumerate(lines):
        trimmed = line.strip()
        if trimmed != anchor and anchor not in trimmed:
            continue
        if best is None or abs(index - near) < abs(best - near):
            best = index
    return best


def resolve(suggestion: Suggestion, current_lines: Sequence[str]) -> Suggestion:
    """Return ``suggestion`` placed on its line in ``current_lines``.

    Without an anchor, or when nothing matches, the last known line is
    clamped into the document. The suggestion is never dropped.
    """
    anchor = normalize_anchor(suggestion.anchor)
    line = None
    if anchor:
        line = find_anchor_line(anchor, current_lines, suggestion.line)
        if line is None:
            logger.debug("Anchor not found for %s, clamping line %d", suggestion.id[:8], suggestion.line)
    if line is None:
        line = clamp_line(suggestion.line, len(current_lines))
    if line == suggestion.line:
        return suggestion
    return replace(suggestion, line=line)
