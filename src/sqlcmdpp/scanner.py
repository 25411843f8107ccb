"""Single-pass batch scanner: splits a script on GO and applies directives inline.

Each batch starts in substring mode, where the batch is a slice of the input
text. The first variable reference, directive, or quoted span containing a
reference switches the batch to builder mode: everything scanned so far is
copied into the preprocessor's scratch buffer and the rest of the batch is
assembled there. Text pulled in by :r is scanned as a nested frame, so its
separators and directives behave as if it appeared at the directive's place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlcmdpp.buffer import ScratchBuffer
from sqlcmdpp.directives import load_include, parse_include_args, perform_setvar
from sqlcmdpp.errors import IncludeError, SqlCmdError
from sqlcmdpp.lexer import find_variables, has_variable, match_token
from sqlcmdpp.tokens import COMMENTS, QUOTED, Token, TokenType, span_at

if TYPE_CHECKING:
    from sqlcmdpp.preprocessor import SqlCmdPreprocessor


@dataclass
class _Frame:
    """One input text being scanned: the root script or an included file."""

    text: str
    filename: str
    pos: int = 0
    # Offsets of the :r directive in the parent frame
    site: tuple[int, int] = (0, 0)

    @property
    def exhausted(self) -> bool:
        return self.pos >= len(self.text)


class BatchScanner:
    """Iterator producing the expanded batches of one script, one per next() call."""

    def __init__(self, preprocessor: SqlCmdPreprocessor, script: str, filename: str) -> None:
        self._preprocessor = preprocessor
        self._frames = [_Frame(script, filename)]
        self._site = (0, 0)

    def __iter__(self) -> BatchScanner:
        return self

    def __next__(self) -> str:
        if self._current_frame() is None:
            raise StopIteration
        scratch = self._preprocessor._lend_buffer()
        try:
            return self._scan_batch(scratch)
        except SqlCmdError as exc:
            self._locate(exc)
            self._frames.clear()
            raise
        except Exception:
            self._frames.clear()
            raise
        finally:
            self._preprocessor._return_buffer()

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def _current_frame(self) -> _Frame | None:
        frames = self._frames
        while len(frames) > 1 and frames[-1].exhausted:
            frames.pop()
        if not frames or frames[-1].exhausted:
            return None
        return frames[-1]

    def _locate(self, exc: SqlCmdError) -> None:
        frame = self._frames[-1]
        origin = None
        if len(self._frames) > 1:
            origin = span_at(self._frames[0].text, *self._frames[1].site)
        exc.locate(
            span_at(frame.text, *self._site),
            frame.text,
            frame.filename,
            [f.filename for f in self._frames],
            origin,
        )

    # ------------------------------------------------------------------
    # Batch discovery
    # ------------------------------------------------------------------

    def _scan_batch(self, scratch: ScratchBuffer) -> str:
        start = self._frames[-1].pos
        builder: ScratchBuffer | None = None  # None while in substring mode

        while True:
            frame = self._frames[-1]
            text = frame.text
            token = match_token(text, frame.pos)

            if token is None:
                nested = len(self._frames) > 1
                if builder is None:
                    if not nested:
                        frame.pos = len(text)
                        return text[start:]
                    # Included text ran out mid-batch; the batch continues in
                    # the parent frame, which only builder mode can express
                    builder = self._begin_builder(scratch, text, start, len(text))
                else:
                    builder.append(text, frame.pos)
                frame.pos = len(text)
                if not nested:
                    return builder.getvalue()
                self._frames.pop()
                continue

            if builder is not None:
                builder.append(text, frame.pos, token.start)
            frame.pos = token.end
            self._site = (token.start, token.end)
            tt = token.type

            if tt is TokenType.SEPARATOR:
                if builder is None:
                    return text[start : token.start]
                return builder.getvalue()

            if tt in COMMENTS or (
                tt in QUOTED and not has_variable(text, token.start + 1, token.end)
            ):
                if builder is not None:
                    builder.append(text, token.start, token.end)
                continue

            if builder is None:
                builder = self._begin_builder(scratch, text, start, token.start)

            if tt in QUOTED:
                self._substitute(builder, text, token.start, token.end)
            elif tt is TokenType.VARIABLE:
                builder.append(self._preprocessor.variables.resolve(token.value))
            elif tt is TokenType.SETVAR:
                perform_setvar(
                    token.value,
                    self._preprocessor.variables,
                    expand=self._preprocessor.enable_variable_replacement_in_setvar,
                )
            elif tt is TokenType.INCLUDE:
                self._include(token)

    def _begin_builder(self, scratch: ScratchBuffer, text: str, start: int, end: int) -> ScratchBuffer:
        scratch.reset(text, start, end)
        return scratch

    def _substitute(self, builder: ScratchBuffer, text: str, start: int, end: int) -> None:
        """Append text[start:end], replacing each $(name) with its value."""
        pos = start
        for m in find_variables(text, start + 1, end):
            builder.append(text, pos, m.start())
            self._site = (m.start(), m.end())
            builder.append(self._preprocessor.variables.resolve(m.group("name")))
            pos = m.end()
        builder.append(text, pos, end)

    def _include(self, token: Token) -> None:
        preprocessor = self._preprocessor
        path = parse_include_args(token.value)
        if len(self._frames) > preprocessor.max_include_depth:
            raise IncludeError(
                path, f"include depth limit ({preprocessor.max_include_depth}) exceeded"
            )
        text = load_include(path, preprocessor.loader)
        self._frames.append(_Frame(text, path, 0, (token.start, token.end)))
