"""Text loading for :r includes and script files."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

Loader = Callable[[str], str]


def read_source(path: Path, encoding: str = "utf-8", errors: str = "strict") -> str:
    """Read a script file exactly as stored: line endings kept, leading BOM dropped."""
    text = path.read_bytes().decode(encoding, errors)
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


@dataclass(frozen=True, slots=True)
class FileLoader:
    """Read an include target from disk, relative paths resolved against base_dir.

    Decoding is strict by default, so invalid byte sequences raise
    UnicodeDecodeError rather than being replaced.
    """

    base_dir: Path = field(default_factory=lambda: Path("."))
    encoding: str = "utf-8"
    errors: str = "strict"

    def __call__(self, path: str) -> str:
        return read_source(Path(self.base_dir) / path, self.encoding, self.errors)
