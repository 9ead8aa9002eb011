"""Heuristic structural scanning: declaration boundaries and change context.

Regex and indentation heuristics only; results are approximate by nature.
"""

from .boundaries import detect_boundaries
from .context import (
    ChangeContext,
    containing_class,
    containing_function,
    extract_change_context,
    find_containing_span,
)
from .languages import (
    FAMILIES,
    LanguageFamily,
    detect_language,
    line_comment_token,
    resolve_family,
    supported_languages,
)
from .models import BoundarySpan, SpanKind

__all__ = [
    "BoundarySpan",
    "ChangeContext",
    "FAMILIES",
    "LanguageFamily",
    "SpanKind",
    "containing_class",
    "containing_function",
    "detect_boundaries",
    "detect_language",
    "extract_change_context",
    "find_containing_span",
    "line_comment_token",
    "resolve_family",
    "supported_languages",
]
