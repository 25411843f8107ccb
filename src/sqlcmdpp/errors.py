"""Error types with formatted source context."""

from __future__ import annotations

from sqlcmdpp.tokens import Span


class SqlCmdError(Exception):
    """Base class for preprocessing errors, with optional span and source context.

    Errors raised away from the scanner (directive parsing, variable lookup)
    start out unlocated; the scanner fills in the location of the token being
    processed via :meth:`locate` before the error leaves the batch sequence.
    """

    def __init__(
        self,
        message: str,
        span: Span | None = None,
        source: str = "",
        filename: str = "input.sql",
    ) -> None:
        self.message = message
        self.span = span
        self.source = source
        self.filename = filename
        self.include_chain: list[str] = []
        self.origin: Span | None = None
        super().__init__(message)

    def locate(
        self,
        span: Span,
        source: str,
        filename: str,
        include_chain: list[str] | None = None,
        origin: Span | None = None,
    ) -> SqlCmdError:
        """Attach source context, unless the error already carries some."""
        if self.span is None:
            self.span = span
            self.source = source
            self.filename = filename
            self.include_chain = list(include_chain or [])
            self.origin = origin
        return self

    def __str__(self) -> str:
        return self.format()

    def format(self, filename: str | None = None) -> str:
        if filename is None:
            filename = self.filename
        if self.span is None:
            return f"error: {self.message}"

        lines = self.source.splitlines(keepends=True)
        line_idx = self.span.start.line - 1
        col = self.span.start.column

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx].rstrip("\n").rstrip("\r")
        else:
            source_line = ""

        # Underline the full span when on one line, otherwise to end of line
        if self.span.end.line == self.span.start.line:
            underline_len = max(1, self.span.end.column - col)
        else:
            underline_len = max(1, len(source_line) - col + 1)

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(self.span.start.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        result = (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.span.start.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )
        if len(self.include_chain) > 1:
            chain = " -> ".join(self.include_chain)
            result += f"\n  in include chain: {chain}"
        return result


class UndefinedVariableError(SqlCmdError):
    """Raised when a $(name) reference names a variable that is not defined."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"variable {name} is not defined")


class DirectiveSyntaxError(SqlCmdError):
    """Raised on a malformed :r or :setvar directive."""

    def __init__(self, directive: str, message: str) -> None:
        self.directive = directive
        super().__init__(f":{directive}: {message}")


class IncludeError(SqlCmdError):
    """Raised when an :r target cannot be loaded."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(message)
