"""Case-insensitive SQLCMD variable table."""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping

from sqlcmdpp.errors import UndefinedVariableError
from sqlcmdpp.lexer import VARIABLE_RE


class VariableTable(MutableMapping[str, str]):
    """Mapping of variable name to replacement text, with case-insensitive keys.

    Iteration yields the spelling used by the most recent assignment.
    """

    def __init__(self, *args: object, **kwargs: str) -> None:
        self._entries: dict[str, tuple[str, str]] = {}
        self.update(*args, **kwargs)

    def __getitem__(self, name: str) -> str:
        return self._entries[name.casefold()][1]

    def __setitem__(self, name: str, value: str) -> None:
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError(
                f"variable names and values must be str, got "
                f"{type(name).__name__}={type(value).__name__}"
            )
        self._entries[name.casefold()] = (name, value)

    def __delitem__(self, name: str) -> None:
        del self._entries[name.casefold()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._entries

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"

    def copy(self) -> VariableTable:
        return VariableTable(self)

    def resolve(self, name: str) -> str:
        """Return the value of *name*, raising UndefinedVariableError if absent."""
        try:
            return self[name]
        except KeyError:
            raise UndefinedVariableError(name) from None

    def expand(self, text: str) -> str:
        """Replace every $(name) reference in *text* with its value."""
        return VARIABLE_RE.sub(lambda m: self.resolve(m.group("name")), text)
