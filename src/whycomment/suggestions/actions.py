"""Suggestion lifecycle actions on document text."""

from __future__ import annotations

import re
from typing import List, Sequence, Union

from ..scanning.languages import LanguageFamily, line_comment_token, resolve_family
from .models import Suggestion

_STRING_RE = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`(?:\\.|[^`\\])*`')
_INDENT_RE = re.compile(r"^\s*")


def render_comment(suggestion: Suggestion, comment_token: str, indent: str = "") -> str:
    return f"{indent}{comment_token} {suggestion.suggested_comment}"


def apply_suggestion(lines: Sequence[str], suggestion: Suggestion, comment_token: str) -> List[str]:
    """Insert the suggested comment above the target line.

    The comment copies the target line's indentation. The suggestion is
    marked applied.

    Returns:
        A new list of lines.
    """
    result = list(lines)
    line = min(max(suggestion.line, 0), len(result))
    target = result[line] if line < len(result) else ""
    indent = _INDENT_RE.match(target).group(0)
    result.insert(line, render_comment(suggestion, comment_token, indent))
    suggestion.applied = True
    return result


def _comment_flags(lines: Sequence[str], family: Union[LanguageFamily, None], token: str) -> List[bool]:
    if family is not None:
        return family.comment_lines(lines)
    return [text.strip().startswith(token) for text in lines]


def has_nearby_comment(
    lines: Sequence[str],
    line: int,
    language: Union[str, LanguageFamily, None],
    lookback: int = 3,
) -> bool:
    """Whether ``line`` or the lines just above it already carry a comment.

    Blank lines above are skipped; the first code line above stops the
    search.
    """
    if not 0 <= line < len(lines):
        return False
    family = resolve_family(language)
    token = family.line_comment if family is not None else line_comment_token(language)

    flags = _comment_flags(lines, family, token)
    if token in _STRING_RE.sub('""', lines[line]) or flags[line]:
        return True

    for index in range(line - 1, max(-1, line - 1 - lookback), -1):
        if not lines[index].strip():
            continue
        return flags[index]
    return False
