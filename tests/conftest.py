"""Shared test fixtures and helpers."""

from __future__ import annotations

import io

import pytest

from lox.ast import Stmt
from lox.errors import Issue, LoxError
from lox.interpreter import DEFAULT_MAX_CALL_DEPTH
from lox.parser import parse
from lox.scanner import tokenize
from lox.session import Session
from lox.tokens import Token, TokenType


@pytest.fixture
def scan():
    """Return a helper that tokenizes source and returns tokens (excluding EOF)."""

    def _scan(source: str) -> list[Token]:
        tokens = tokenize(source)
        # Strip trailing EOF for convenience
        return [t for t in tokens if t.type != TokenType.EOF]

    return _scan


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns its statements."""

    def _parse(source: str) -> list[Stmt]:
        return parse(source)

    return _parse


@pytest.fixture
def run_source():
    """Return a helper that runs source in a fresh session and returns printed lines."""

    def _run(source: str, max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> list[str]:
        out = io.StringIO()
        Session(out=out, max_call_depth=max_call_depth).run(source)
        return out.getvalue().splitlines()

    return _run


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def issue_types(exc: LoxError) -> list[type[Issue]]:
    """Return the issue classes carried by a LoxError, in report order."""
    return [type(issue) for issue in exc.issues]
