"""SQLCMD preprocessor: variables, options, and the shared scratch buffer."""

from __future__ import annotations

from pathlib import Path

from sqlcmdpp.buffer import ScratchBuffer
from sqlcmdpp.loader import FileLoader, Loader
from sqlcmdpp.scanner import BatchScanner
from sqlcmdpp.variables import VariableTable


class SqlCmdPreprocessor:
    """A preprocessor for a subset of SQLCMD: GO, $(name), :r, and :setvar.

    Variables persist across process() calls on the same instance. An instance
    is not safe for use from multiple threads, and a loader must not drive
    another batch sequence of the same instance while a batch is being built.
    """

    def __init__(
        self,
        *,
        enable_variable_replacement_in_setvar: bool = False,
        loader: Loader | None = None,
        base_dir: Path | str = ".",
        encoding: str = "utf-8",
        max_include_depth: int = 16,
    ) -> None:
        self._variables = VariableTable()
        self._buffer = ScratchBuffer()
        self._buffer_lent = False
        self.enable_variable_replacement_in_setvar = enable_variable_replacement_in_setvar
        self.loader: Loader = (
            loader if loader is not None else FileLoader(Path(base_dir), encoding)
        )
        self.max_include_depth = max_include_depth

    @property
    def variables(self) -> VariableTable:
        return self._variables

    def process(self, script: str, filename: str = "input.sql") -> BatchScanner:
        """Return an iterator over the batches of *script*.

        Argument checks happen here, before any batch is requested.
        """
        if script is None:
            raise TypeError("script must not be None")
        if not isinstance(script, str):
            raise TypeError(f"script must be str, not {type(script).__name__}")
        return BatchScanner(self, script, filename)

    def _lend_buffer(self) -> ScratchBuffer:
        if self._buffer_lent:
            raise RuntimeError("preprocessor is already building a batch")
        self._buffer_lent = True
        return self._buffer

    def _return_buffer(self) -> None:
        self._buffer_lent = False
