"""Command-line interface for the Lox interpreter."""

from __future__ import annotations

import argparse
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lox.errors import LoxError
from lox.interpreter import DEFAULT_MAX_CALL_DEPTH

# sysexits.h
EX_OK = 0
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66

CONFIG_NAME = "lox.toml"

# Each permitted call reserves host stack; beyond this the process runs out of memory first
MAX_CALL_DEPTH_CEILING = 20_000


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    script: Path | None
    max_call_depth: int
    prompt: str
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="lox",
        description="Tree-walking interpreter for the Lox language",
    )
    p.add_argument("script", nargs="?", help="Script to run (default: start the REPL)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--max-call-depth",
        type=int,
        default=None,
        metavar="N",
        help=f"Maximum nesting of function calls (default: {DEFAULT_MAX_CALL_DEPTH})",
    )
    p.add_argument("--debug", action="store_true", help="Dump AST to stderr")
    return p


def load_config(config_path: Path | None, search_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else search_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _checked_call_depth(value: object, what: str) -> int:
    # bool is an int subclass; `max_call_depth = true` is a mistake, not 1
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise argparse.ArgumentTypeError(f"{what} must be a positive integer, got {value!r}")
    if value > MAX_CALL_DEPTH_CEILING:
        raise argparse.ArgumentTypeError(
            f"{what} must be at most {MAX_CALL_DEPTH_CEILING}, got {value}"
        )
    return value


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    script = Path(args.script) if args.script else None
    search_dir = script.parent if script is not None else Path(".")
    if not search_dir.parts:
        search_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, search_dir)

    max_call_depth = DEFAULT_MAX_CALL_DEPTH
    cfg_interp = config.get("interpreter")
    if isinstance(cfg_interp, dict) and "max_call_depth" in cfg_interp:
        max_call_depth = _checked_call_depth(
            cfg_interp["max_call_depth"], "interpreter.max_call_depth"
        )
    if args.max_call_depth is not None:
        max_call_depth = _checked_call_depth(args.max_call_depth, "--max-call-depth")

    prompt = "> "
    cfg_repl = config.get("repl")
    if isinstance(cfg_repl, dict):
        cfg_prompt = cfg_repl.get("prompt")
        if isinstance(cfg_prompt, str):
            prompt = cfg_prompt

    debug = bool(config.get("debug", False)) or args.debug

    return CliOptions(
        script=script,
        max_call_depth=max_call_depth,
        prompt=prompt,
        debug=debug,
    )


def run_file(options: CliOptions) -> int:
    """Run a script file, returning its exit code."""
    from lox.session import Session

    assert options.script is not None
    try:
        source = options.script.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {options.script}: {exc}", file=sys.stderr)
        return EX_NOINPUT

    session = Session(max_call_depth=options.max_call_depth, debug=options.debug)
    try:
        session.run(source)
    except LoxError as exc:
        print(exc.format(str(options.script)), file=sys.stderr)
        return EX_DATAERR
    return EX_OK


def run_prompt(options: CliOptions) -> int:
    """Start the interactive REPL; returns when input ends."""
    from lox.session import Session
    from lox.shell import Shell

    shell = Shell(Session(max_call_depth=options.max_call_depth, debug=options.debug))
    shell.prompt = options.prompt
    try:
        shell.cmdloop()
    except KeyboardInterrupt:
        print()
    return EX_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/64/65/66). Does not call sys.exit()."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # --help exits 0; any usage problem maps to EX_USAGE
        return EX_OK if exc.code in (0, None) else EX_USAGE

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EX_USAGE

    if options.script is None:
        return run_prompt(options)
    return run_file(options)
