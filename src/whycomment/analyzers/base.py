"""Analyzer contract and validation of untrusted analyzer output."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)

_FALLBACK_MESSAGES = {"en": "Why?", "ja": "なぜ？"}
_FALLBACK_COMMENTS = {
    "en": "Explain the intent and constraints.",
    "ja": "この意図・前提・制約を簡潔に説明してください。",
}


@dataclass(frozen=True)
class Candidate:
    """A validated analyzer result. ``line`` is 0-based in the new file."""

    line: int
    message: str
    suggested_comment: str
    anchor: Optional[str] = None


class Analyzer(ABC):
    """Turns annotated added lines into raw candidate mappings.

    Output is untrusted: callers pass it through ``parse_candidates``.
    """

    name = "analyzer"

    @abstractmethod
    async def analyze(self, annotated_diff: str, language_hint: str) -> list:
        """
        Analyze annotated added lines.

        Args:
            annotated_diff: ``[N] +code`` lines, N 1-based in the new file
            language_hint: Language id of the file

        Returns:
            Raw candidate mappings with ``line`` (0-based), ``message``,
            ``suggestedComment`` and optionally ``anchor``

        Raises:
            AnalyzerError: If the analysis backend fails
        """

    async def aclose(self) -> None:
        """Release resources held by the analyzer."""


def resolve_output_language(setting: str) -> str:
    """Resolve "auto" from the LANG environment variable."""
    if setting in ("en", "ja"):
        return setting
    lang = os.environ.get("LANG", "") or os.environ.get("LC_ALL", "")
    return "ja" if lang.lower().startswith("ja") else "en"


def _text_field(item: dict, *keys: str) -> Optional[str]:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        if value is not None and not isinstance(value, (str, dict, list)):
            return str(value)
    return None


def parse_candidates(raw: Iterable[Any], language: str = "en") -> list[Candidate]:
    """Validate raw analyzer output with per-field fallbacks. Never raises.

    Args:
        raw: Analyzer output; non-mapping entries are skipped
        language: Output language for fallback texts ("en" or "ja")
    """
    lang = language if language in _FALLBACK_MESSAGES else "en"
    candidates = []
    skipped = 0
    for item in raw or ():
        if not isinstance(item, dict):
            skipped += 1
            continue
        line = item.get("line")
        anchor = item.get("anchor")
        if isinstance(line, bool) or not isinstance(line, int):
            line = 0
        candidates.append(
            Candidate(
                line=max(0, line),
                message=_text_field(item, "message") or _FALLBACK_MESSAGES[lang],
                suggested_comment=_text_field(item, "suggestedComment", "suggested_comment")
                or _FALLBACK_COMMENTS[lang],
                anchor=anchor if isinstance(anchor, str) and anchor.strip() else None,
            )
        )
    if skipped:
        logger.debug("Skipped %d malformed analyzer entries", skipped)
    return candidates
