"""SQLCMD script preprocessor: GO batch splitting, $(var) substitution, :r and :setvar."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlcmdpp.errors import (
    DirectiveSyntaxError,
    IncludeError,
    SqlCmdError,
    UndefinedVariableError,
)
from sqlcmdpp.preprocessor import SqlCmdPreprocessor

__version__ = "0.1.0"

__all__ = [
    "DirectiveSyntaxError",
    "IncludeError",
    "SqlCmdError",
    "SqlCmdPreprocessor",
    "UndefinedVariableError",
    "process",
]


def process(
    script: str,
    variables: Mapping[str, str] | None = None,
    **options: Any,
) -> list[str]:
    """Preprocess *script* and return all of its batches."""
    preprocessor = SqlCmdPreprocessor(**options)
    if variables:
        preprocessor.variables.update(variables)
    return list(preprocessor.process(script))
