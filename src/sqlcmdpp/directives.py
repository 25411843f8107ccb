"""Argument parsing and execution of the :r and :setvar directives."""

from __future__ import annotations

import re

from sqlcmdpp.errors import DirectiveSyntaxError, IncludeError
from sqlcmdpp.loader import Loader
from sqlcmdpp.variables import VariableTable

# A directive argument: "quoted, with "" escape" (closing quote optional at
# end of line) or a bare run of non-blank characters.
_ARG = r"""(?: " (?P<quoted> (?: [^"] | "" )*? ) (?: " | \Z ) | (?P<bare> [^\s"]+ ) )"""

_INCLUDE_ARGS_RE = re.compile(rf"\s* {_ARG} \s* \Z", re.VERBOSE)
_SETVAR_NAME_RE = re.compile(r"\s* (?P<name> [^\W\d] \w* ) (?= \s | \Z )", re.VERBOSE)
_SETVAR_VALUE_RE = re.compile(rf"\s+ {_ARG} \s* \Z", re.VERBOSE)


def _arg_value(m: re.Match[str]) -> str:
    quoted = m.group("quoted")
    if quoted is not None:
        return quoted.replace('""', '"')
    return m.group("bare")


def parse_include_args(args: str) -> str:
    """Return the file path named by :r arguments."""
    if not args.strip():
        raise DirectiveSyntaxError("r", "missing file path")
    m = _INCLUDE_ARGS_RE.match(args)
    if m is None:
        raise DirectiveSyntaxError("r", f"invalid file path: {args.strip()}")
    path = _arg_value(m)
    if not path:
        raise DirectiveSyntaxError("r", "missing file path")
    return path


def parse_setvar_args(args: str) -> tuple[str, str]:
    """Return (name, value) from :setvar arguments."""
    name_match = _SETVAR_NAME_RE.match(args)
    if name_match is None:
        if not args.strip():
            raise DirectiveSyntaxError("setvar", "missing variable name")
        raise DirectiveSyntaxError("setvar", f"invalid variable name: {args.split()[0]}")
    rest = args[name_match.end() :]
    if not rest.strip():
        raise DirectiveSyntaxError("setvar", f"missing value for variable {name_match['name']}")
    value_match = _SETVAR_VALUE_RE.match(rest)
    if value_match is None:
        raise DirectiveSyntaxError("setvar", f"invalid value: {rest.strip()}")
    return name_match["name"], _arg_value(value_match)


def perform_setvar(args: str, variables: VariableTable, *, expand: bool = False) -> str:
    """Define or overwrite a variable from :setvar arguments; return its name."""
    name, value = parse_setvar_args(args)
    if expand:
        value = variables.expand(value)
    variables[name] = value
    return name


def load_include(path: str, loader: Loader) -> str:
    """Return the text of the :r target *path* via *loader*."""
    try:
        text = loader(path)
    except FileNotFoundError as exc:
        raise IncludeError(path, f"included file not found: {path}") from exc
    except OSError as exc:
        raise IncludeError(path, f"cannot read included file {path}: {exc.strerror or exc}") from exc
    except UnicodeError as exc:
        raise IncludeError(path, f"cannot decode included file {path}: {exc}") from exc
    return text
