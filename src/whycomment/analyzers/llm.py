"""Model-backed analyzer over the OpenAI or Anthropic HTTP APIs.

Uses an ``httpx.AsyncClient``; pass ``client`` (or ``transport``) to
inject a preconfigured or mocked one.
"""

import json
import re
from typing import Any, Optional

import httpx

from ..exceptions import AnalyzerError
from ..logging_config import get_logger
from .base import Analyzer, resolve_output_language

logger = get_logger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
CLAUDE_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

TEMPERATURE = 0.2
MAX_TOKENS = 1500

_OBJECT_RE = re.compile(r"\{[\s\S]*?\}")


def build_system_prompt(lang: str) -> str:
    return "\n".join(
        [
            'Role: Reviewer for contextual "why" (rationale/assumptions).',
            "No style/refactor advice. Keep questions short and context-first.",
            "Skip if same line or <= 3 lines above already has a comment.",
            "Focus: comment where a reader would pause and need rationale - non-obvious "
            "ordering/early-continue/special-cases, unexplained constants/thresholds, "
            "truncation/limits, init/sleep/heartbeat, complex conditions/regex/bitwise. "
            "Treat these as cues, not a checklist.",
            'Style for message: start with "Why" (en) or "なぜ" (ja), end with "?", keep <= 80 '
            "chars, and make it specific to the line and its surrounding context.",
            "Style for suggestedComment: a concise explanatory comment to insert above the "
            "line (one sentence). No code fences, no markdown, no leading comment token.",
            "Language: Japanese." if lang == "ja" else "Language: English.",
        ]
    )


def build_user_prompt(annotated_diff: str, lang: str, language_hint: str = "") -> str:
    return "\n".join(
        [
            "Given an annotated unified git diff for a single file"
            + (f" ({language_hint}):" if language_hint else ":"),
            "- Each added line is prefixed with its absolute NEW FILE line number in square "
            'brackets, e.g. "[42] +const x = 1".',
            'Task: Identify added lines that feel contextually surprising and would prompt a "why" '
            "explanation. Only consider added lines (+).",
            "Output language: Japanese." if lang == "ja" else "Output language: English.",
            'Strict format: Return exactly one JSON object { "items": [ { "line": <0-based '
            'absolute new-file line>, "message": <Why-question>, "suggestedComment": <best '
            'explanatory comment to insert>, "anchor": <exact code text> } ] }. No extra '
            'keys/markdown/code fences. If none, return { "items": [] }.',
            "",
            '- Derive "line" from the bracketed line numbers (absolute NEW FILE lines). '
            "Convert to 0-based. Only output JSON.",
            "",
            annotated_diff,
        ]
    )


def _try_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        start = text.find("[")
        end = text.rfind("]")
        if start >= 0 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except ValueError:
                return None
        return None


def parse_completion(text: str) -> list:
    """Extract raw candidate items from a model completion. Never raises.

    Accepts ``{"items": [...]}``, a bare list, a list embedded in prose,
    or loose ``{...}`` objects that mention ``line`` or ``suggestedComment``.
    """
    if not text:
        return []
    data = _try_json(text)
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return data["items"]
    if isinstance(data, list):
        return data

    items = []
    for chunk in _OBJECT_RE.findall(text):
        obj = _try_json(chunk)
        if isinstance(obj, dict) and ("line" in obj or "suggestedComment" in obj):
            items.append(obj)
    return items


class LLMAnalyzer(Analyzer):
    """Asks a chat model which added lines need a rationale comment."""

    name = "llm"

    def __init__(
        self,
        api_key: str,
        provider: str = "openai",
        model: Optional[str] = None,
        output_language: str = "auto",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            api_key: Provider API key
            provider: "openai" or "claude"
            model: Model name; provider default when omitted
            output_language: "auto", "en" or "ja"
            timeout: Request timeout in seconds
            client: Preconfigured client (not closed by ``aclose``)
            transport: Transport for an internally created client
        """
        if provider not in ("openai", "claude"):
            raise ValueError(f"Unknown provider: {provider}")
        self.api_key = api_key
        self.provider = provider
        self.model = model or ("claude-3-5-sonnet-latest" if provider == "claude" else "gpt-4o-mini")
        self.output_language = resolve_output_language(output_language)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def analyze(self, annotated_diff: str, language_hint: str) -> list:
        if not annotated_diff.strip():
            return []
        lang = self.output_language
        system = build_system_prompt(lang)
        user = build_user_prompt(annotated_diff, lang, language_hint)
        if self.provider == "claude":
            completion = await self._call_claude(system, user)
        else:
            completion = await self._call_openai(system, user)
        items = parse_completion(completion)
        logger.debug("%s returned %d items", self.provider, len(items))
        return items

    async def _post(self, url: str, headers: dict, body: dict) -> dict:
        try:
            response = await self.client.post(url, headers=headers, json=body)
        except httpx.HTTPError as e:
            raise AnalyzerError(self.provider, f"request failed: {e}")
        if response.status_code // 100 != 2:
            raise AnalyzerError(
                self.provider, f"HTTP {response.status_code}", status_code=response.status_code
            )
        try:
            return response.json()
        except ValueError as e:
            raise AnalyzerError(self.provider, f"invalid JSON response: {e}")

    async def _call_openai(self, system: str, user: str) -> str:
        data = await self._post(
            OPENAI_URL,
            {"Authorization": f"Bearer {self.api_key}"},
            {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                "temperature": TEMPERATURE,
                "max_tokens": MAX_TOKENS,
                "response_format": {"type": "json_object"},
            },
        )
        try:
            return data["choices"][0]["message"]["content"] or "[]"
        except (KeyError, IndexError, TypeError):
            return "[]"

    async def _call_claude(self, system: str, user: str) -> str:
        data = await self._post(
            CLAUDE_URL,
            {"x-api-key": self.api_key, "anthropic-version": ANTHROPIC_VERSION},
            {
                "model": self.model,
                "max_tokens": MAX_TOKENS,
                "temperature": TEMPERATURE,
                "system": system,
                "messages": [{"role": "user", "content": user}],
            },
        )
        try:
            return data["content"][0]["text"] or "[]"
        except (KeyError, IndexError, TypeError):
            return "[]"
