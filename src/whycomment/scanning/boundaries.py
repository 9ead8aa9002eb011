"""Heuristic declaration boundary detection.

Not a parser: each language family selects a scanning strategy from
``_STRATEGIES`` and the result is a best-effort list of spans. Lines are
0-based and span ends are inclusive.

Strategies:
    brace     -- header regex, then a ``{``/``}`` counter started at the
                 first opening brace; ``;`` before any brace means the
                 declaration has no body
    indent    -- header regex, then the block runs until the next code
                 line indented no deeper than the header
    receiver  -- brace counting with Go's receiver methods; type aliases
                 end at their header
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Callable, Optional, Sequence, Union

from ..logging_config import get_logger
from .languages import DeclarationPattern, LanguageFamily, resolve_family
from .models import BoundarySpan, SpanKind

logger = get_logger(__name__)

# Lines scanned past a header for its opening brace before giving up.
_MAX_SIGNATURE_LINES = 8

TAB_WIDTH = 4

_STRING_RE = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`(?:\\.|[^`\\])*`')
_INLINE_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/")
_FIRST_WORD_RE = re.compile(r"[\w$@]+")

# Leading words that belong to a declaration even though they are also
# statement keywords.
_DECLARATION_LEADS = frozenset({"function"})


def detect_boundaries(
    lines: Sequence[str], language: Union[str, LanguageFamily, None]
) -> list[BoundarySpan]:
    """Detect function, method, class and interface spans in ``lines``.

    Args:
        lines: Source lines without line terminators
        language: Language id (``"python"``), family name or family

    Returns:
        Spans ordered by start line (outer before inner on the same line).
        Unsupported languages yield an empty list.
    """
    family = resolve_family(language)
    if family is None:
        return []

    strategy = _STRATEGIES[family.strategy]
    if family.block_comment is not None:
        # Continuation lines of block comments never hold code.
        mask = family.block_comment_mask(lines)
        lines = ["" if masked else line for line, masked in zip(lines, mask)]
    spans = strategy(lines, family)
    result = _promote_methods(spans)
    logger.debug("Detected %d boundaries (%s)", len(result), family.name)
    return result


# ── Header matching ─────────────────────────────────────────────────


def _match_declaration(
    line: str, family: LanguageFamily
) -> Optional[tuple[str, SpanKind, DeclarationPattern]]:
    """First type or function pattern matching ``line``, filtered for statements."""
    stripped = line.strip()
    if not stripped or family.is_comment_line(line):
        return None
    if family.skip_prefixes and stripped.startswith(family.skip_prefixes):
        return None

    for pattern in (*family.type_patterns, *family.function_patterns):
        match = pattern.regex.match(line)
        if match is None:
            continue
        name = match.group("name")
        if _is_statement(stripped, name, family):
            return None
        return name, pattern.resolve_kind(match), pattern
    return None


def _is_statement(stripped: str, name: str, family: LanguageFamily) -> bool:
    if name in family.statement_keywords:
        return True
    first = _FIRST_WORD_RE.match(stripped)
    if first is None:
        return False
    word = first.group(0)
    return word in family.statement_keywords and word not in _DECLARATION_LEADS


def _code_only(line: str, family: LanguageFamily) -> str:
    """``line`` with string literals and comments removed."""
    code = _STRING_RE.sub('""', line)
    code = _INLINE_BLOCK_COMMENT_RE.sub("", code)
    cut = code.find(family.line_comment)
    if cut >= 0:
        code = code[:cut]
    return code


# ── Brace strategy ──────────────────────────────────────────────────


def _brace_block_end(
    lines: Sequence[str], start: int, family: LanguageFamily, semicolon_ends: bool = True
) -> int:
    """Line where the block opened at or after ``start`` closes.

    Braces inside the parameter list are ignored. Without an opening
    brace the declaration ends at its header; an unclosed block ends at
    the last line.
    """
    depth = 0
    parens = 0
    opened = False

    for i in range(start, len(lines)):
        line = lines[i]
        if i > start and family.is_comment_line(line):
            continue
        if i > start and not opened:
            if i - start > _MAX_SIGNATURE_LINES or _match_declaration(line, family):
                return start

        code = _code_only(line, family)
        arrow = -1
        for pos, ch in enumerate(code):
            if opened:
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    depth -= 1
                    if depth == 0:
                        return i
            elif ch in "([":
                parens += 1
            elif ch in ")]":
                parens = max(0, parens - 1)
            elif parens == 0 and ch == "{":
                opened = True
                depth = 1
            elif parens == 0 and ch == ";" and semicolon_ends:
                return i
            elif parens == 0 and code.startswith("=>", pos):
                arrow = pos

        # Arrow function with an expression body.
        if not opened and arrow >= 0 and code[arrow + 2 :].strip():
            return i

    return len(lines) - 1 if opened else start


def _detect_brace(lines: Sequence[str], family: LanguageFamily) -> list[BoundarySpan]:
    spans = []
    for i, line in enumerate(lines):
        found = _match_declaration(line, family)
        if found is None:
            continue
        name, kind, pattern = found
        end = i if pattern.ends_at_header else _brace_block_end(lines, i, family)
        spans.append(BoundarySpan(name=name, kind=kind, start_line=i, end_line=end))
    return spans


# ── Receiver strategy ───────────────────────────────────────────────


def _detect_receiver(lines: Sequence[str], family: LanguageFamily) -> list[BoundarySpan]:
    """Go: funcs with or without a receiver; only struct/interface types own a body."""
    spans = []
    for i, line in enumerate(lines):
        found = _match_declaration(line, family)
        if found is None:
            continue
        name, kind, pattern = found
        if pattern.ends_at_header:
            end = i
        else:
            end = _brace_block_end(lines, i, family, semicolon_ends=False)
        spans.append(BoundarySpan(name=name, kind=kind, start_line=i, end_line=end))
    return spans


# ── Indentation strategy ────────────────────────────────────────────


def indent_width(line: str) -> int:
    """Leading indentation in columns, tabs counted as ``TAB_WIDTH``."""
    width = 0
    for ch in line:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += TAB_WIDTH
        else:
            break
    return width


def _string_mask(lines: Sequence[str]) -> list[bool]:
    """True for lines that sit inside a multi-line triple-quoted string.

    The opening line is left unmasked; it may carry code.
    """
    mask = [False] * len(lines)
    open_quote: Optional[str] = None
    for i, line in enumerate(lines):
        if open_quote is not None:
            mask[i] = True
            if line.count(open_quote) % 2 == 1:
                open_quote = None
            continue
        for quote in ('"""', "'''"):
            if line.count(quote) % 2 == 1:
                open_quote = quote
                break
    return mask


def _header_end(lines: Sequence[str], start: int, family: LanguageFamily) -> int:
    """Last line of a header whose parameter list spans several lines."""
    balance = 0
    for i in range(start, len(lines)):
        code = _code_only(lines[i], family)
        balance += sum(code.count(c) for c in "([{") - sum(code.count(c) for c in ")]}")
        if balance <= 0:
            return i
    return len(lines) - 1


def _detect_indent(lines: Sequence[str], family: LanguageFamily) -> list[BoundarySpan]:
    mask = _string_mask(lines)
    spans = []
    for i, line in enumerate(lines):
        if mask[i]:
            continue
        found = _match_declaration(line, family)
        if found is None:
            continue
        name, kind, _ = found
        indent = indent_width(line)

        end = len(lines) - 1
        for j in range(_header_end(lines, i, family) + 1, len(lines)):
            text = lines[j]
            if mask[j] or not text.strip() or family.is_comment_line(text):
                continue
            if indent_width(text) <= indent:
                end = j - 1
                break
        spans.append(BoundarySpan(name=name, kind=kind, start_line=i, end_line=end))
    return spans


_STRATEGIES: dict[str, Callable[[Sequence[str], LanguageFamily], list[BoundarySpan]]] = {
    "brace": _detect_brace,
    "indent": _detect_indent,
    "receiver": _detect_receiver,
}


def _promote_methods(spans: list[BoundarySpan]) -> list[BoundarySpan]:
    """Functions nested inside a class or interface span become methods."""
    types = [s for s in spans if s.kind.is_type]
    result = []
    for span in spans:
        if span.kind is SpanKind.FUNCTION and any(
            t.start_line < span.start_line and span.end_line <= t.end_line for t in types
        ):
            span = replace(span, kind=SpanKind.METHOD)
        result.append(span)
    result.sort(key=lambda s: (s.start_line, -s.end_line))
    return result
