"""Suggestion records, storage, relocation and lifecycle actions."""

from .actions import apply_suggestion, has_nearby_comment, render_comment
from .anchor import clamp_line, find_anchor_line, normalize_anchor, resolve
from .live_edit import LiveEditTracker
from .models import DocumentChange, Suggestion, make_suggestion_id
from .store import SuggestionStore

__all__ = [
    "DocumentChange",
    "LiveEditTracker",
    "Suggestion",
    "SuggestionStore",
    "apply_suggestion",
    "clamp_line",
    "find_anchor_line",
    "has_nearby_comment",
    "make_suggestion_id",
    "normalize_anchor",
    "render_comment",
    "resolve",
]
