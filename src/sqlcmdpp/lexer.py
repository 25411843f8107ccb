"""SQLCMD token matcher: finds the next significant element in script text."""

from __future__ import annotations

import re
from collections.abc import Iterator

from sqlcmdpp.tokens import Token, TokenType

# Alternative order is significant: at the same position, the earlier
# alternative wins.
_TOKEN_RE = re.compile(
    r"""
      (?P<string>        ' [^']* (?: '' [^']* )* (?: ' | \Z ) )
    | (?P<identifier>    \[ [^\]]* (?: \]\] [^\]]* )* (?: \] | \Z ) )
    | (?P<line_comment>  -- [^\r\n]* (?: \r?\n | \Z ) )
    | (?P<block_comment> /\* (?s: .*? ) (?: \*/ | \Z ) )
    | (?P<variable>      \$\( (?P<name> \w+ ) \) )
    | (?P<separator>     ^ [ \t]* GO [ \t]* (?: \r?\n | \Z ) )
    | (?P<include>       ^ [ \t]* :r (?= [ \t\r\n] | \Z )
                         (?P<include_args> [^\r\n]* ) (?: \r?\n | \Z ) )
    | (?P<setvar>        ^ [ \t]* :setvar (?= [ \t\r\n] | \Z )
                         (?P<setvar_args> [^\r\n]* ) (?: \r?\n | \Z ) )
    """,
    re.VERBOSE | re.MULTILINE | re.IGNORECASE,
)

VARIABLE_RE = re.compile(r"\$\((?P<name>\w+)\)")

_GROUP_TYPES: dict[str, TokenType] = {
    "string": TokenType.STRING,
    "identifier": TokenType.IDENTIFIER,
    "line_comment": TokenType.LINE_COMMENT,
    "block_comment": TokenType.BLOCK_COMMENT,
    "variable": TokenType.VARIABLE,
    "separator": TokenType.SEPARATOR,
    "include": TokenType.INCLUDE,
    "setvar": TokenType.SETVAR,
}

_VALUE_GROUPS: dict[TokenType, str] = {
    TokenType.VARIABLE: "name",
    TokenType.INCLUDE: "include_args",
    TokenType.SETVAR: "setvar_args",
}


def match_token(text: str, pos: int = 0) -> Token | None:
    """Return the leftmost significant token at or after *pos*, or None."""
    m = _TOKEN_RE.search(text, pos)
    if m is None:
        return None
    # lastgroup is the outermost alternative, nested groups close before it
    tt = _GROUP_TYPES[m.lastgroup]  # type: ignore[index]
    group = _VALUE_GROUPS.get(tt)
    value = m.group(group) if group else ""
    return Token(tt, m.start(), m.end(), value)


def find_variables(text: str, start: int = 0, end: int | None = None) -> Iterator[re.Match[str]]:
    """Iterate the $(name) references within text[start:end]."""
    if end is None:
        end = len(text)
    return VARIABLE_RE.finditer(text, start, end)


def has_variable(text: str, start: int = 0, end: int | None = None) -> bool:
    """Return True if text[start:end] contains at least one $(name) reference."""
    if end is None:
        end = len(text)
    return VARIABLE_RE.search(text, start, end) is not None


def tokenize(text: str) -> list[Token]:
    """Convenience function: return every significant token in *text*, in order."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        tok = match_token(text, pos)
        if tok is None:
            break
        tokens.append(tok)
        pos = tok.end
    return tokens
