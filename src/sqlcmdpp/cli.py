"""Command-line interface for sqlcmdpp."""

from __future__ import annotations

import argparse
import codecs
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlcmdpp.errors import DirectiveSyntaxError, SqlCmdError


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    variables: dict[str, str]
    setvar_replacement: bool
    encoding: str
    max_include_depth: int
    separator: str
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="sqlcmdpp",
        description="Expand a SQLCMD script into GO-separated batches",
    )
    p.add_argument("input", help="Input .sql script")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-v",
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Define a scripting variable (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover sqlcmdpp.toml)",
    )
    p.add_argument(
        "--setvar-replacement",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Replace $(name) references inside :setvar values",
    )
    p.add_argument(
        "--encoding",
        default=None,
        metavar="ENC",
        help="Encoding of the input and :r files (default: utf-8)",
    )
    p.add_argument(
        "--max-include-depth",
        type=int,
        default=None,
        metavar="N",
        help="Maximum :r nesting depth (default: 16)",
    )
    p.add_argument(
        "--separator",
        default=None,
        metavar="TEXT",
        help="Line written after each batch (default: GO)",
    )
    p.add_argument("--debug", action="store_true", help="Dump tokens and batches to stderr")
    return p


def parse_var_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE string into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid variable format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    if not name:
        raise argparse.ArgumentTypeError(f"missing variable name: {s}")
    return name, value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "sqlcmdpp.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def config_variables(config: dict[str, Any]) -> dict[str, str]:
    """Return the [variables] table of a loaded config as strings."""
    variables: dict[str, str] = {}
    cfg_vars = config.get("variables")
    if isinstance(cfg_vars, dict):
        for k, v in cfg_vars.items():
            variables[str(k)] = str(v)
    return variables


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Variables: config < CLI
    variables = config_variables(config)
    for raw in args.var:
        name, value = parse_var_arg(raw)
        variables[name] = value

    setvar_replacement = False
    encoding = "utf-8"
    max_include_depth = 16
    cfg_pre = config.get("preprocessor")
    if isinstance(cfg_pre, dict):
        if isinstance(cfg_pre.get("setvar_replacement"), bool):
            setvar_replacement = cfg_pre["setvar_replacement"]
        if isinstance(cfg_pre.get("encoding"), str):
            encoding = cfg_pre["encoding"]
        cfg_depth = cfg_pre.get("max_include_depth")
        if isinstance(cfg_depth, int) and not isinstance(cfg_depth, bool):
            max_include_depth = cfg_depth
    if args.setvar_replacement is not None:
        setvar_replacement = args.setvar_replacement
    if args.encoding is not None:
        encoding = args.encoding
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise argparse.ArgumentTypeError(f"unknown encoding: {encoding}") from None
    if args.max_include_depth is not None:
        max_include_depth = args.max_include_depth

    separator = "GO"
    cfg_out = config.get("output")
    if isinstance(cfg_out, dict) and isinstance(cfg_out.get("separator"), str):
        separator = cfg_out["separator"]
    if args.separator is not None:
        separator = args.separator

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        variables=variables,
        setvar_replacement=setvar_replacement,
        encoding=encoding,
        max_include_depth=max_include_depth,
        separator=separator,
        debug=args.debug,
    )


def preprocess_file(options: CliOptions) -> list[str]:
    """Read and preprocess a script file, returning its batches."""
    from sqlcmdpp.debug import dump_batches, dump_tokens
    from sqlcmdpp.loader import read_source
    from sqlcmdpp.preprocessor import SqlCmdPreprocessor

    source = read_source(options.input_file, options.encoding)

    base_dir = options.input_file.parent
    if not base_dir.parts:
        base_dir = Path(".")

    preprocessor = SqlCmdPreprocessor(
        enable_variable_replacement_in_setvar=options.setvar_replacement,
        base_dir=base_dir,
        encoding=options.encoding,
        max_include_depth=options.max_include_depth,
    )
    preprocessor.variables.update(options.variables)

    if options.debug:
        dump_tokens(source, file=sys.stderr)

    batches = list(preprocessor.process(source, str(options.input_file)))

    if options.debug:
        dump_batches(batches, file=sys.stderr)

    return batches


def render_batches(batches: list[str], separator: str = "GO") -> str:
    """Join batches, each followed by *separator* on a line of its own."""
    parts: list[str] = []
    for batch in batches:
        parts.append(batch)
        if batch and not batch.endswith("\n"):
            parts.append("\n")
        parts.append(f"{separator}\n")
    return "".join(parts)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except tomllib.TOMLDecodeError as exc:
        print(f"error: invalid config file: {exc}", file=sys.stderr)
        return 2

    try:
        batches = preprocess_file(options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {options.input_file}: {exc}", file=sys.stderr)
        return 1
    except DirectiveSyntaxError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except SqlCmdError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    output = render_batches(batches, options.separator)
    if options.output_file:
        with options.output_file.open("w", encoding=options.encoding, newline="") as f:
            f.write(output)
    else:
        sys.stdout.write(output)

    return 0
