"""Data models for structural boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SpanKind(Enum):
    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    INTERFACE = "interface"

    @property
    def is_callable(self) -> bool:
        return self in (SpanKind.FUNCTION, SpanKind.METHOD)

    @property
    def is_type(self) -> bool:
        return self in (SpanKind.CLASS, SpanKind.INTERFACE)


@dataclass(frozen=True)
class BoundarySpan:
    """A detected declaration covering ``start_line``..``end_line`` (0-based, inclusive)."""

    name: str
    kind: SpanKind
    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line {self.end_line} precedes start_line {self.start_line} for {self.name}"
            )

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    @property
    def size(self) -> int:
        return self.end_line - self.start_line
