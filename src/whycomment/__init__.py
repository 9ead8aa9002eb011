"""
WhyComment - finds changed lines that deserve a "why" comment.

Diffs a file against its last analyzed state (or the git reference),
asks an analyzer which added lines need a rationale, and keeps the
resulting suggestions on the right lines while the document is edited.
"""

__version__ = "0.3.0"

from .config import WhyConfig, load_config
from .diff import annotate_added_lines, parse_unified_diff
from .orchestrator import AnalysisOrchestrator, AnalysisResult, PassStatus
from .scanning import detect_boundaries
from .suggestions import DocumentChange, Suggestion, SuggestionStore

__all__ = [
    "AnalysisOrchestrator",  # Main entry point
    "AnalysisResult",
    "PassStatus",
    "WhyConfig",
    "load_config",
    "parse_unified_diff",
    "annotate_added_lines",
    "detect_boundaries",
    "Suggestion",
    "SuggestionStore",
    "DocumentChange",
]
