"""Analyzers turning annotated added lines into comment candidates."""

from typing import Optional

from ..config import WhyConfig
from .base import Analyzer, Candidate, parse_candidates, resolve_output_language
from .heuristic import HeuristicAnalyzer
from .llm import LLMAnalyzer, parse_completion
from .usage import DailyUsage


def create_analyzer(config: WhyConfig, transport: Optional[object] = None) -> Analyzer:
    """Model analyzer when ``prefer_llm`` and an API key are set, heuristic otherwise."""
    if config.use_llm:
        return LLMAnalyzer(
            api_key=config.api_key,
            provider=config.api_provider,
            model=config.model,
            output_language=config.output_language,
            timeout=config.request_timeout_seconds,
            transport=transport,
        )
    return HeuristicAnalyzer(output_language=config.output_language)


__all__ = [
    "Analyzer",
    "Candidate",
    "DailyUsage",
    "HeuristicAnalyzer",
    "LLMAnalyzer",
    "create_analyzer",
    "parse_candidates",
    "parse_completion",
    "resolve_output_language",
]
