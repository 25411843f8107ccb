"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from sqlcmdpp.preprocessor import SqlCmdPreprocessor
from sqlcmdpp.tokens import Token, TokenType

EOL = "\r\n"


class MemoryLoader:
    """Serve :r targets from a dict, recording every requested path."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files = dict(files or {})
        self.requests: list[str] = []

    def __call__(self, path: str) -> str:
        self.requests.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(2, "No such file or directory", path) from None


@pytest.fixture
def loader() -> MemoryLoader:
    return MemoryLoader()


@pytest.fixture
def preprocessor(loader: MemoryLoader) -> SqlCmdPreprocessor:
    return SqlCmdPreprocessor(loader=loader)


@pytest.fixture
def batches(preprocessor: SqlCmdPreprocessor):
    """Return a helper that runs the shared preprocessor and lists the batches."""

    def _batches(script: str, **variables: str) -> list[str]:
        preprocessor.variables.update(variables)
        return list(preprocessor.process(script))

    return _batches


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"
