"""Run Lox source text through the whole pipeline."""

from __future__ import annotations

import sys
from typing import TextIO

from lox.errors import EvalError, ParseError, ResolveError
from lox.interpreter import DEFAULT_MAX_CALL_DEPTH, Interpreter
from lox.parser import Parser
from lox.resolver import Resolver
from lox.scanner import tokenize


class Session:
    """One interpreter plus the names it has declared at top level.

    Every call to `run` sees the globals left behind by earlier calls, which is
    what lets the REPL refer to a variable declared on a previous line.
    """

    def __init__(
        self,
        out: TextIO | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
        debug: bool = False,
    ) -> None:
        self.interpreter = Interpreter(out=out, max_call_depth=max_call_depth)
        self.debug = debug
        self._globals: set[str] = set(self.interpreter.globals.values)

    def run(self, source: str) -> None:
        """Scan, parse, resolve and execute *source*.

        Raises the failing stage's LoxError (ScanError, ParseError,
        ResolveError or EvalError) carrying *source* for formatting.
        """
        tokens = tokenize(source)

        statements, issues = Parser(tokens).parse()
        if issues:
            raise ParseError(issues, source)

        if self.debug:
            from lox.debug import dump_ast

            dump_ast(statements, file=sys.stderr)

        resolver = Resolver(self._globals)
        issues = resolver.resolve(statements)
        if issues:
            raise ResolveError(issues, source)
        self._globals = resolver.globals
        self.interpreter.resolve(resolver.references)

        try:
            self.interpreter.run(statements)
        except EvalError as exc:
            exc.source = source
            raise
