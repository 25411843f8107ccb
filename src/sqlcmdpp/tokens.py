"""Token types, data structures, and source position helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Inert text, copied through verbatim
    LINE_COMMENT = auto()  # -- ... end of line
    BLOCK_COMMENT = auto()  # /* ... */
    STRING = auto()  # '...' with '' escape
    IDENTIFIER = auto()  # [...] with ]] escape

    # Substitution
    VARIABLE = auto()  # $(name), value is the name

    # Line-anchored
    SEPARATOR = auto()  # GO
    INCLUDE = auto()  # :r, value is the raw argument text
    SETVAR = auto()  # :setvar, value is the raw argument text


COMMENTS = frozenset({TokenType.LINE_COMMENT, TokenType.BLOCK_COMMENT})
QUOTED = frozenset({TokenType.STRING, TokenType.IDENTIFIER})


@dataclass(frozen=True, slots=True)
class Token:
    """A significant text element found by the matcher, spanning [start, end)."""

    type: TokenType
    start: int
    end: int
    value: str = ""


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


def position_at(source: str, offset: int) -> Position:
    """Map a character offset in *source* to a line/column Position."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line, offset - line_start + 1, offset)


def span_at(source: str, start: int, end: int) -> Span:
    """Build a Span covering [start, end) of *source*."""
    return Span(position_at(source, start), position_at(source, end))
