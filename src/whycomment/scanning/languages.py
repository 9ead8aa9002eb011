"""Language families: the single source of truth for comment syntax and
declaration patterns used by the boundary detector.

A family groups languages that share a block-delimiting convention. Each
family names the strategy that finds where a declaration ends:

  brace     -- count ``{``/``}`` from the first opening brace
  indent    -- block ends at the next line indented no deeper than the header
  receiver  -- brace counting plus Go's receiver methods and type kinds

Adding a language to an existing family:
  1. Add its extension(s) to EXTENSION_LANGUAGES.
  2. Add the language id to the family's ``languages`` tuple.
"""

from __future__ import annotations

import re as _re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Optional, Sequence, Union

from .models import SpanKind


@dataclass(frozen=True)
class DeclarationPattern:
    """A header regex with a ``name`` group.

    An optional ``kind`` group overrides ``kind`` through ``kind_words``
    (e.g. ``interface`` -> INTERFACE). ``ends_at_header`` marks
    declarations that never own a body (Go type aliases).
    """

    regex: _re.Pattern[str]
    kind: SpanKind
    kind_words: tuple[tuple[str, SpanKind], ...] = ()
    ends_at_header: bool = False

    def resolve_kind(self, match: _re.Match[str]) -> SpanKind:
        word = match.groupdict().get("kind")
        if word:
            for key, kind in self.kind_words:
                if word == key:
                    return kind
        return self.kind


@dataclass(frozen=True)
class LanguageFamily:
    """Everything the boundary detector needs to know about a family."""

    name: str
    strategy: str
    languages: tuple[str, ...]

    line_comment: str
    # A line starting with one of these is (part of) a block comment.
    block_comment_starts: tuple[str, ...] = ()
    # A line ending with one of these closes a block comment.
    block_comment_ends: tuple[str, ...] = ()
    # Delimiters of a block comment that may span lines.
    block_comment: Optional[tuple[str, str]] = None

    type_patterns: list[DeclarationPattern] = field(default_factory=list)
    function_patterns: list[DeclarationPattern] = field(default_factory=list)

    # Lines starting with these prefixes are never declaration headers
    # (annotations, decorators).
    skip_prefixes: tuple[str, ...] = ()

    # First words that turn a pattern match into a statement, not a declaration.
    statement_keywords: frozenset[str] = frozenset()

    def is_comment_line(self, line: str) -> bool:
        trimmed = line.strip()
        if not trimmed:
            return False
        if trimmed.startswith(self.line_comment):
            return True
        if self.block_comment_starts and trimmed.startswith(self.block_comment_starts):
            return True
        if self.block_comment_ends and trimmed.endswith(self.block_comment_ends):
            return True
        return False

    def is_executable_line(self, line: str) -> bool:
        return bool(line.strip()) and not self.is_comment_line(line)

    def block_comment_mask(self, lines: Sequence[str]) -> list[bool]:
        """True for lines inside a multi-line block comment, its closing line included.

        The opening line is left unmasked; it may carry code.
        """
        mask = [False] * len(lines)
        if self.block_comment is None:
            return mask
        inside = False
        for i, line in enumerate(lines):
            mask[i] = inside
            inside = self._still_open(line, inside)
        return mask

    def comment_lines(self, lines: Sequence[str]) -> list[bool]:
        """Per-line comment flags; ``*`` continuation lines count only inside a block."""
        mask = self.block_comment_mask(lines)
        return [inside or self.is_comment_line(line) for inside, line in zip(mask, lines)]

    def _still_open(self, line: str, inside: bool) -> bool:
        opener, closer = self.block_comment
        code = _QUOTED_RE.sub('""', line) if not inside else line
        pos = 0
        while True:
            if inside:
                end = code.find(closer, pos)
                if end < 0:
                    return True
                inside = False
                pos = end + len(closer)
                continue
            start = code.find(opener, pos)
            if start < 0:
                return False
            cut = code.find(self.line_comment, pos)
            if 0 <= cut < start:
                return False
            inside = True
            pos = start + len(opener)


def _p(pattern: str, kind: SpanKind, **kwargs) -> DeclarationPattern:
    return DeclarationPattern(regex=_re.compile(pattern), kind=kind, **kwargs)


_IDENT = r"[A-Za-z_$][\w$]*"

_CONTROL_KEYWORDS = frozenset(
    {
        "if", "else", "for", "foreach", "while", "do", "switch", "case", "catch",
        "try", "finally", "return", "throw", "new", "delete", "await", "yield",
        "typeof", "instanceof", "with", "sizeof", "goto", "using", "lock",
        "super", "this", "function", "echo", "print",
    }
)

_CLASS_KIND_WORDS = (
    ("class", SpanKind.CLASS),
    ("struct", SpanKind.CLASS),
    ("union", SpanKind.CLASS),
    ("record", SpanKind.CLASS),
    ("enum", SpanKind.CLASS),
    ("object", SpanKind.CLASS),
    ("interface", SpanKind.INTERFACE),
    ("@interface", SpanKind.INTERFACE),
)

_C_BLOCK_STARTS = ("/*",)
_C_BLOCK_ENDS = ("*/",)
_C_BLOCK = ("/*", "*/")

_QUOTED_RE = _re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])*\'|`(?:\\.|[^`\\])*`')


# ── Family definitions ─────────────────────────────────────────────

C_LIKE = LanguageFamily(
    name="c_like",
    strategy="brace",
    languages=("typescript", "typescriptreact", "javascript", "javascriptreact", "c", "cpp", "csharp"),
    line_comment="//",
    block_comment_starts=_C_BLOCK_STARTS,
    block_comment_ends=_C_BLOCK_ENDS,
    block_comment=_C_BLOCK,
    type_patterns=[
        _p(
            rf"^\s*(?:(?:export|default|declare|abstract|public|private|protected|internal|"
            rf"static|sealed|partial|readonly)\s+)*(?P<kind>class|interface|enum|struct|union|record)"
            rf"\s+(?P<name>{_IDENT})",
            SpanKind.CLASS,
            kind_words=_CLASS_KIND_WORDS,
        ),
        _p(r"^\s*typedef\s+(?P<kind>struct|union|enum)\s+(?P<name>\w+)", SpanKind.CLASS, kind_words=_CLASS_KIND_WORDS),
    ],
    function_patterns=[
        _p(
            rf"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>{_IDENT})\s*[<(]",
            SpanKind.FUNCTION,
        ),
        _p(
            rf"^\s*(?:export\s+)?(?:const|let|var)\s+(?P<name>{_IDENT})\s*(?::[^=]+)?=\s*(?:async\s+)?"
            rf"(?:function\b|\([^)]*\)\s*(?::\s*[^=]+)?=>|{_IDENT}\s*=>)",
            SpanKind.FUNCTION,
        ),
        # Class/object method shorthand: ``name(args) {``
        _p(
            rf"^\s*(?:(?:public|private|protected|internal|static|async|readonly|override|abstract|"
            rf"virtual|sealed|get|set)\s+)*\*?\s*(?P<name>{_IDENT})\s*(?:<[^>(]*>)?\s*\([^)]*\)"
            rf"\s*(?::\s*[^{{;=]+)?\s*\{{",
            SpanKind.FUNCTION,
        ),
        # C/C++/C#: ``type name(args)`` with the body on this or a following line
        _p(
            r"^\s*(?:[A-Za-z_][\w:<>,\*&\[\]]*\s+[\*&]*)+(?P<name>[A-Za-z_~][\w:~]*)\s*\([^;{]*\)"
            r"\s*(?:const\s*)?(?:noexcept\s*)?(?:override\s*)?\{?\s*$",
            SpanKind.FUNCTION,
        ),
    ],
    skip_prefixes=("@", "#"),
    statement_keywords=_CONTROL_KEYWORDS,
)

JAVA_LIKE = LanguageFamily(
    name="java_like",
    strategy="brace",
    languages=("java", "kotlin"),
    line_comment="//",
    block_comment_starts=_C_BLOCK_STARTS,
    block_comment_ends=_C_BLOCK_ENDS,
    block_comment=_C_BLOCK,
    type_patterns=[
        _p(
            rf"^\s*(?:(?:public|private|protected|abstract|final|static|sealed|non-sealed|strictfp|"
            rf"data|open|inner|internal|enum|annotation)\s+)*(?P<kind>class|interface|enum|record|"
            rf"@interface|object)\s+(?P<name>{_IDENT})",
            SpanKind.CLASS,
            kind_words=_CLASS_KIND_WORDS,
        ),
    ],
    function_patterns=[
        _p(
            rf"^\s*(?:(?:public|private|protected|internal|open|override|suspend|inline|"
            rf"abstract|final)\s+)*fun\s+(?:<[^>]+>\s+)?(?:[\w.]+\.)?(?P<name>{_IDENT})\s*\(",
            SpanKind.FUNCTION,
        ),
        _p(
            rf"^\s*(?:(?:public|private|protected|static|final|abstract|synchronized|native|default|"
            rf"strictfp)\s+)*(?:<[^>]+>\s+)?[\w$.\[\]?]+(?:<[^()]*>)?(?:\[\])*\s+(?P<name>{_IDENT})\s*\(",
            SpanKind.METHOD,
        ),
        # Constructors: ``public Name(``
        _p(rf"^\s*(?:public|private|protected)\s+(?P<name>[A-Z][\w$]*)\s*\(", SpanKind.METHOD),
    ],
    skip_prefixes=("@",),
    statement_keywords=_CONTROL_KEYWORDS | {"package", "import", "val", "var"},
)

PYTHON = LanguageFamily(
    name="python",
    strategy="indent",
    languages=("python",),
    line_comment="#",
    block_comment_starts=('"""', "'''"),
    type_patterns=[_p(r"^\s*class\s+(?P<name>[A-Za-z_]\w*)", SpanKind.CLASS)],
    function_patterns=[_p(r"^\s*(?:async\s+)?def\s+(?P<name>[A-Za-z_]\w*)", SpanKind.FUNCTION)],
    skip_prefixes=("@",),
)

GO = LanguageFamily(
    name="go",
    strategy="receiver",
    languages=("go",),
    line_comment="//",
    block_comment_starts=_C_BLOCK_STARTS,
    block_comment_ends=_C_BLOCK_ENDS,
    block_comment=_C_BLOCK,
    type_patterns=[
        _p(
            r"^\s*type\s+(?P<name>[A-Za-z_]\w*)(?:\[[^\]]*\])?\s+(?P<kind>struct|interface)\b",
            SpanKind.CLASS,
            kind_words=(("struct", SpanKind.CLASS), ("interface", SpanKind.INTERFACE)),
        ),
        _p(
            r"^\s*type\s+(?P<name>[A-Za-z_]\w*)(?:\[[^\]]*\])?\s*=?\s*\S",
            SpanKind.CLASS,
            ends_at_header=True,
        ),
    ],
    function_patterns=[
        _p(r"^\s*func\s+(?P<name>[A-Za-z_]\w*)\s*[\[(]", SpanKind.FUNCTION),
        _p(r"^\s*func\s*\([^)]*\)\s*(?P<name>[A-Za-z_]\w*)\s*[\[(]", SpanKind.METHOD),
    ],
)

FAMILIES: dict[str, LanguageFamily] = {f.name: f for f in (C_LIKE, JAVA_LIKE, PYTHON, GO)}

EXTENSION_LANGUAGES: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".java": "java",
    ".kt": "kotlin",
    ".py": "python",
    ".pyw": "python",
    ".go": "go",
    ".rb": "ruby",
    ".rs": "rust",
    ".sh": "shellscript",
    ".bash": "shellscript",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".toml": "toml",
    ".lua": "lua",
    ".hs": "haskell",
    ".sql": "sql",
}

# Line comment tokens for languages without a family.
_LINE_COMMENT_TOKENS: dict[str, str] = {
    "ruby": "#",
    "shellscript": "#",
    "yaml": "#",
    "toml": "#",
    "makefile": "#",
    "haskell": "--",
    "lua": "--",
    "sql": "--",
}

_LANGUAGE_FAMILIES: dict[str, LanguageFamily] = {
    language: family for family in FAMILIES.values() for language in family.languages
}


def detect_language(path: Union[str, PurePath]) -> str:
    """Language id for a file path, ``"unknown"`` when the extension is not mapped."""
    p = PurePath(path)
    if p.name == "Makefile":
        return "makefile"
    return EXTENSION_LANGUAGES.get(p.suffix.lower(), "unknown")


def resolve_family(language: Union[str, LanguageFamily, None]) -> Optional[LanguageFamily]:
    """Family for a language id or family name; None for unsupported languages."""
    if language is None:
        return None
    if isinstance(language, LanguageFamily):
        return language
    return FAMILIES.get(language) or _LANGUAGE_FAMILIES.get(language)


def line_comment_token(language: Union[str, LanguageFamily, None]) -> str:
    """Line comment token for a language, ``//`` when unknown."""
    family = resolve_family(language)
    if family is not None:
        return family.line_comment
    if isinstance(language, str):
        return _LINE_COMMENT_TOKENS.get(language, "//")
    return "//"


def supported_languages() -> list[str]:
    return sorted(_LANGUAGE_FAMILIES)
