"""Suggestion records and document change events."""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, field
from typing import Optional


def make_suggestion_id(file_ref: str, line: int, message: str, suggested_comment: str) -> str:
    """Stable identity computed once, from the line the analyzer reported."""
    key = f"{file_ref}:{line}:{message}:{suggested_comment}"
    return hashlib.sha1(key.encode("utf-8")).hexdigest()


@dataclass
class Suggestion:
    """A proposed "why" comment for one line of a file.

    ``line`` is 0-based against the live document and is the only field
    updated over the suggestion's lifetime, apart from the
    ``applied``/``ignored`` flags.
    """

    id: str
    file_ref: str
    line: int
    message: str
    suggested_comment: str
    anchor: Optional[str] = None
    source: str = "heuristic"
    applied: bool = False
    ignored: bool = False
    created_at: float = field(default_factory=time.time)
    function_name: Optional[str] = None
    class_name: Optional[str] = None

    @classmethod
    def create(
        cls,
        file_ref: str,
        line: int,
        message: str,
        suggested_comment: str,
        anchor: Optional[str] = None,
        source: str = "heuristic",
    ) -> "Suggestion":
        return cls(
            id=make_suggestion_id(file_ref, line, message, suggested_comment),
            file_ref=file_ref,
            line=line,
            message=message,
            suggested_comment=suggested_comment,
            anchor=anchor,
            source=source,
        )

    @property
    def active(self) -> bool:
        return not (self.applied or self.ignored)

    @property
    def scope(self) -> Optional[str]:
        """``Class.method``, the bare function or class name, or None."""
        if self.class_name and self.function_name:
            return f"{self.class_name}.{self.function_name}"
        return self.function_name or self.class_name

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "file": self.file_ref,
            "line": self.line,
            "message": self.message,
            "suggestedComment": self.suggested_comment,
            "anchor": self.anchor,
            "source": self.source,
            "applied": self.applied,
            "ignored": self.ignored,
            "scope": self.scope,
        }


@dataclass(frozen=True)
class DocumentChange:
    """A live edit replacing lines ``start_line``..``end_line`` with ``inserted_text``."""

    start_line: int
    end_line: int
    inserted_text: str = ""

    @property
    def inserted_line_count(self) -> int:
        """Line breaks introduced by the edit."""
        return self.inserted_text.count("\n")
