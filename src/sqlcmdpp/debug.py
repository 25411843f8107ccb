"""--debug token and batch dumps to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from sqlcmdpp.lexer import tokenize
from sqlcmdpp.tokens import position_at


def dump_tokens(source: str, *, file: TextIO = sys.stderr) -> None:
    """Print each significant token of *source* with its line:column."""
    tokens = tokenize(source)
    file.write(f"Tokens ({len(tokens)})\n")
    for tok in tokens:
        pos = position_at(source, tok.start)
        file.write(f"  {pos.line}:{pos.column} {tok.type.name} {source[tok.start : tok.end]!r}\n")


def dump_batches(batches: list[str], *, file: TextIO = sys.stderr) -> None:
    """Print a one-line summary of each batch."""
    file.write(f"Batches ({len(batches)})\n")
    for i, batch in enumerate(batches, 1):
        lines = batch.splitlines()
        first = next((line.strip() for line in lines if line.strip()), "")
        file.write(f"  #{i} {len(lines)} lines, {len(batch)} chars: {first!r}\n")
