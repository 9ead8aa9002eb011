"""Unified diff between two in-memory texts."""

import difflib


def diff_texts(old_text: str, new_text: str, *, file_path: str, context_lines: int) -> str:
    """Return a git-style unified diff of ``old_text`` -> ``new_text``.

    Empty string when the texts have identical lines.
    """
    old_lines = old_text.splitlines()
    new_lines = new_text.splitlines()

    fromfile = f"a/{file_path}" if old_text else "/dev/null"
    tofile = f"b/{file_path}"

    diff = difflib.unified_diff(
        old_lines,
        new_lines,
        fromfile=fromfile,
        tofile=tofile,
        lineterm="",
        n=context_lines,
    )
    return "\n".join(diff)
