"""Containing-span lookup and change context extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from .boundaries import detect_boundaries
from .languages import LanguageFamily, line_comment_token, resolve_family
from .models import BoundarySpan, SpanKind

_CALLABLE_KINDS = frozenset({SpanKind.FUNCTION, SpanKind.METHOD})
_TYPE_KINDS = frozenset({SpanKind.CLASS, SpanKind.INTERFACE})


def find_containing_span(
    spans: Iterable[BoundarySpan],
    line: int,
    kinds: Optional[Iterable[SpanKind]] = None,
) -> Optional[BoundarySpan]:
    """Narrowest span covering ``line``.

    Equal-sized spans prefer a function or method over a class or
    interface. ``kinds`` restricts the candidates.
    """
    allowed = frozenset(kinds) if kinds is not None else None
    best: Optional[BoundarySpan] = None
    for span in spans:
        if allowed is not None and span.kind not in allowed:
            continue
        if not span.contains(line):
            continue
        if best is None or _rank(span) < _rank(best):
            best = span
    return best


def _rank(span: BoundarySpan) -> tuple[int, int]:
    return span.size, 0 if span.kind.is_callable else 1


def containing_function(spans: Iterable[BoundarySpan], line: int) -> Optional[str]:
    span = find_containing_span(spans, line, _CALLABLE_KINDS)
    return span.name if span else None


def containing_class(spans: Iterable[BoundarySpan], line: int) -> Optional[str]:
    span = find_containing_span(spans, line, _TYPE_KINDS)
    return span.name if span else None


@dataclass(frozen=True)
class ChangeContext:
    """A changed line with its surroundings and enclosing declarations."""

    line: int
    content: str
    before: tuple[str, ...]
    after: tuple[str, ...]
    function_name: Optional[str] = None
    class_name: Optional[str] = None
    is_comment: bool = False

    @property
    def scope(self) -> Optional[str]:
        if self.class_name and self.function_name:
            return f"{self.class_name}.{self.function_name}"
        return self.function_name or self.class_name


def extract_change_context(
    lines: Sequence[str],
    line: int,
    language: Union[str, LanguageFamily, None],
    window: int = 10,
    exclude_comments: bool = False,
    spans: Optional[Sequence[BoundarySpan]] = None,
) -> ChangeContext:
    """Build the context of ``line`` (0-based) within ``lines``.

    Args:
        lines: Current document lines
        line: Target line
        language: Language id or family
        window: Lines kept before and after the target
        exclude_comments: Drop comment lines from ``before``/``after``
        spans: Precomputed boundaries; detected from ``lines`` when omitted
    """
    family = resolve_family(language)
    content = lines[line] if 0 <= line < len(lines) else ""
    before = list(lines[max(0, line - window) : max(0, line)])
    after = list(lines[line + 1 : line + 1 + window])

    if family is not None:
        flags = family.comment_lines(lines)
        is_comment = 0 <= line < len(lines) and flags[line]
        if exclude_comments:
            lo = max(0, line - window)
            before = [text for i, text in enumerate(before, lo) if not flags[i]]
            after = [text for i, text in enumerate(after, line + 1) if not flags[i]]
    else:
        token = line_comment_token(language)
        is_comment = content.strip().startswith(token)
        if exclude_comments:
            before = [text for text in before if not text.strip().startswith(token)]
            after = [text for text in after if not text.strip().startswith(token)]

    if spans is None:
        spans = detect_boundaries(lines, family)

    return ChangeContext(
        line=line,
        content=content,
        before=tuple(before),
        after=tuple(after),
        function_name=containing_function(spans, line),
        class_name=containing_class(spans, line),
        is_comment=is_comment,
    )
