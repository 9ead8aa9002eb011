"""Lenient unified-diff parser.

Diff text handed to this module is machine generated (git or difflib), so
anything that does not look like a hunk is dropped instead of raising.
"""

from __future__ import annotations

import re

from ..logging_config import get_logger
from .models import DiffLine, Hunk, LineKind, UnifiedDiff

logger = get_logger(__name__)

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_KINDS = {" ": LineKind.CONTEXT, "+": LineKind.ADDED, "-": LineKind.REMOVED}


def parse_unified_diff(diff_text: str) -> UnifiedDiff:
    """Parse unified diff text into hunks.

    Lines after a ``@@ -a[,b] +c[,d] @@`` header are classified by their
    first character until the header's old and new counts are used up
    or a line with any other leading character appears. File headers,
    ``index`` lines and anything outside a hunk are discarded. Omitted
    counts default to 1.

    Never raises: text without a valid header yields an empty diff.
    """
    hunks: list[Hunk] = []
    current: Hunk | None = None
    old_left = new_left = 0

    for raw in diff_text.splitlines():
        match = _HUNK_HEADER_RE.match(raw)
        if match:
            current = Hunk(
                old_start=int(match.group(1)),
                old_count=int(match.group(2)) if match.group(2) is not None else 1,
                new_start=int(match.group(3)),
                new_count=int(match.group(4)) if match.group(4) is not None else 1,
            )
            hunks.append(current)
            old_left, new_left = current.old_count, current.new_count
            continue

        if current is None:
            continue

        if old_left <= 0 and new_left <= 0:
            current = None
            continue

        if raw.startswith("\\"):
            # "\ No newline at end of file"
            continue

        if raw == "":
            # Some tools strip the single space of an empty context line.
            kind = LineKind.CONTEXT
            text = ""
        else:
            kind = _KINDS.get(raw[0])
            if kind is None:
                current = None
                continue
            text = raw[1:]

        current.lines.append(DiffLine(kind, text))
        if kind is not LineKind.ADDED:
            old_left -= 1
        if kind is not LineKind.REMOVED:
            new_left -= 1

    hunks.sort(key=lambda h: h.new_start)
    logger.debug("Parsed %d hunk(s)", len(hunks))
    return UnifiedDiff(hunks=hunks)
