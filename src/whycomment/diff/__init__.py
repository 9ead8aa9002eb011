"""Unified-diff model, parser and added-line annotation."""

from .annotate import AddedLine, added_line_set, added_lines, annotate_added_lines
from .models import DiffLine, Hunk, LineKind, UnifiedDiff
from .parser import parse_unified_diff
from .textdiff import diff_texts

__all__ = [
    "AddedLine",
    "DiffLine",
    "Hunk",
    "LineKind",
    "UnifiedDiff",
    "added_line_set",
    "added_lines",
    "annotate_added_lines",
    "diff_texts",
    "parse_unified_diff",
]
