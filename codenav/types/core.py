"""
Core value types for code navigation.

These are the owned results of language server queries: reference
locations and call hierarchy items, plus the protocol's SymbolKind codes.
Positions are zero-indexed, matching the wire protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class SymbolKind(IntEnum):
    """LSP SymbolKind with the protocol's integer codes."""

    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26

    @classmethod
    def from_int(cls, value: Any) -> SymbolKind | None:
        """Map a protocol integer to a kind; out-of-range values give None."""
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.name.lower()


def _check_position(line: int, column: int) -> None:
    if line < 0:
        raise ValueError("line must be non-negative")
    if column < 0:
        raise ValueError("column must be non-negative")


@dataclass(frozen=True)
class SymbolReference:
    """One location returned by a references query."""

    file_path: str
    line: int
    column: int
    snippet: str = ""
    context_before: str = ""
    context_after: str = ""

    def __post_init__(self) -> None:
        _check_position(self.line, self.column)

    @property
    def location(self) -> str:
        """Get location string for display (1-indexed, editor style)."""
        return f"{self.file_path}:{self.line + 1}:{self.column + 1}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "file_path": self.file_path,
            "line": self.line,
            "column": self.column,
            "snippet": self.snippet,
            "context_before": self.context_before,
            "context_after": self.context_after,
        }


@dataclass(frozen=True)
class CallHierarchyItem:
    """A symbol taking part in a call hierarchy.

    ``raw`` keeps the protocol object the item was parsed from so it can be
    passed back unchanged to callHierarchy/incomingCalls or outgoingCalls.
    """

    name: str
    kind: SymbolKind
    file_path: str
    line: int
    column: int
    snippet: str = ""
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        _check_position(self.line, self.column)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.label,
            "file_path": self.file_path,
            "line": self.line,
            "column": self.column,
            "snippet": self.snippet,
        }
