"""Offline analyzer flagging added lines that carry a rationale cue.

Each cue is a regex over the added code. The first cue that matches a
line produces its candidate; a line yields at most one.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from ..logging_config import get_logger
from ..scanning.languages import line_comment_token, resolve_family
from .base import Analyzer, resolve_output_language

logger = get_logger(__name__)

_ANNOTATED_RE = re.compile(r"^\[(\d+)\] \+(.*)$")
_IMPORT_RE = re.compile(r"^\s*(?:import|from\s+\S+\s+import|#include|using|package|require)\b")

MAX_MESSAGE_LENGTH = 80


@dataclass(frozen=True)
class Cue:
    name: str
    pattern: re.Pattern
    message: dict
    comment: dict
    # Optional extra test on the whole line after the pattern matched.
    accept: Optional[Callable[[str, re.Match], bool]] = None


def _three_boolean_ops(code: str, match: re.Match) -> bool:
    return len(re.findall(r"&&|\|\||\band\b|\bor\b", code)) >= 3


_CUES = [
    Cue(
        name="compound_condition",
        pattern=re.compile(r"&&|\|\||\band\b|\bor\b"),
        message={"en": "Why does this condition combine so many checks?", "ja": "なぜこの条件はこれほど多くの判定を組み合わせるのですか？"},
        comment={"en": "Explain which cases each part of this condition guards against.", "ja": "この条件の各部分がどのケースを防ぐのか説明してください。"},
        accept=_three_boolean_ops,
    ),
    Cue(
        name="regex",
        pattern=re.compile(
            r"new RegExp\s*\(|\bre\.(?:compile|match|search|sub|findall|fullmatch|split)\s*\("
            r"|regexp\.(?:MustCompile|Compile)\s*\(|Pattern\.compile\s*\("
            r"|(?<![\w)\]\s])\s*/(?:\\.|[^/\n\\*])(?:\\.|[^/\n\\])*/[gimsuy]*\s*[.;,)]"
        ),
        message={"en": "Why this regular expression?", "ja": "なぜこの正規表現なのですか？"},
        comment={"en": "Describe what this pattern must match and why.", "ja": "このパターンが何にマッチすべきか、その理由を説明してください。"},
    ),
    Cue(
        name="bitwise",
        pattern=re.compile(r"(?:<<|>>>?)\s*\w|[&|^]\s*0[xXbB][0-9a-fA-F]+|~\w"),
        message={"en": "Why this bitwise operation?", "ja": "なぜこのビット演算なのですか？"},
        comment={"en": "Explain the bit layout this operation relies on.", "ja": "この演算が前提とするビット配置を説明してください。"},
    ),
    Cue(
        name="timing",
        pattern=re.compile(r"(?i)sleep|settimeout|setinterval|timeout|retr(?:y|ies)|backoff|heartbeat|delay"),
        message={"en": "Why this delay or retry behavior?", "ja": "なぜこの待機・リトライ動作なのですか？"},
        comment={"en": "Explain how this timing was chosen and what it protects.", "ja": "このタイミングを選んだ理由と、何を守るためかを説明してください。"},
    ),
    Cue(
        name="truncation",
        pattern=re.compile(
            r"(?i)\b(?:slice|substring|substr|truncate|limit|clamp)\w*\s*\("
            r"|\[\s*-?\d*\s*:\s*-?\d+\s*\]"
        ),
        message={"en": "Why truncate or limit here?", "ja": "なぜここで切り詰め・制限するのですか？"},
        comment={"en": "Explain where this limit comes from.", "ja": "この制限がどこから来ているのか説明してください。"},
    ),
    Cue(
        name="early_exit",
        pattern=re.compile(r"\b(?:continue|break)\b\s*;?\s*$"),
        message={"en": "Why skip the rest of the loop here?", "ja": "なぜここでループの残りを飛ばすのですか？"},
        comment={"en": "Explain which items are skipped and why.", "ja": "どの要素をなぜ飛ばすのか説明してください。"},
    ),
    Cue(
        name="magic_number",
        pattern=re.compile(r"(?<![\w.$])(?:0[xX][0-9a-fA-F]+|\d+\.\d+|\d{2,}|[2-9])(?![\w.])"),
        message={"en": "Why {value}?", "ja": "なぜ {value} なのですか？"},
        comment={"en": "Explain where the value {value} comes from.", "ja": "値 {value} の根拠を説明してください。"},
    ),
]


def _shorten(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 2].rstrip() + "…?"


def parse_annotated(annotated_diff: str) -> list[tuple[int, str]]:
    """Read ``[N] +code`` lines back as (0-based line, code) pairs."""
    pairs = []
    for raw in annotated_diff.splitlines():
        match = _ANNOTATED_RE.match(raw)
        if match:
            pairs.append((int(match.group(1)) - 1, match.group(2)))
    return pairs


class HeuristicAnalyzer(Analyzer):
    """Regex cues over added lines; no network access."""

    name = "heuristic"

    def __init__(self, output_language: str = "auto"):
        self.output_language = resolve_output_language(output_language)

    async def analyze(self, annotated_diff: str, language_hint: str) -> list:
        return self.analyze_sync(annotated_diff, language_hint)

    def analyze_sync(self, annotated_diff: str, language_hint: str) -> list:
        family = resolve_family(language_hint)
        token = line_comment_token(language_hint)
        items = []
        added = parse_annotated(annotated_diff)
        codes = [code for _, code in added]
        comments = family.comment_lines(codes) if family else [c.strip().startswith(token) for c in codes]
        for (line, code), is_comment in zip(added, comments):
            stripped = code.strip()
            if not stripped or is_comment or _IMPORT_RE.match(code):
                continue
            cue, match = self._first_cue(_strip_trailing_comment(code, token))
            if cue is None:
                continue
            value = match.group(0).strip()
            lang = self.output_language
            items.append(
                {
                    "line": line,
                    "message": _shorten(cue.message[lang].format(value=value)),
                    "suggestedComment": cue.comment[lang].format(value=value),
                    "anchor": stripped,
                }
            )
        logger.debug("Heuristic analyzer flagged %d lines", len(items))
        return items

    @staticmethod
    def _first_cue(code: str):
        for cue in _CUES:
            match = cue.pattern.search(code)
            if match is None:
                continue
            if cue.accept is not None and not cue.accept(code, match):
                continue
            return cue, match
        return None, None


def _strip_trailing_comment(code: str, token: str) -> str:
    cut = code.find(f" {token}")
    return code[:cut] if cut >= 0 else code
