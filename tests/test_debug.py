"""Tests for the --debug AST dump and prefix expression formatting."""

from __future__ import annotations

import io

import pytest

from lox.ast import Expr, Literal
from lox.debug import dump_ast, format_expr
from lox.parser import parse


def dump(source: str) -> list[str]:
    buf = io.StringIO()
    dump_ast(parse(source), file=buf)
    return buf.getvalue().splitlines()


class TestFormatExpr:
    def test_literals(self):
        assert format_expr(Literal(None)) == "nil"
        assert format_expr(Literal(True)) == "true"
        assert format_expr(Literal(4.0)) == "4"
        assert format_expr(Literal("s")) == '"s"'

    def test_assignment(self):
        [stmt] = parse("x = y or 1;")
        assert format_expr(stmt.expression) == "(= x (or y 1))"

    def test_unknown_node(self):
        with pytest.raises(TypeError):
            format_expr(Expr())


class TestDumpAst:
    def test_root(self):
        assert dump("") == ["Program"]

    def test_nested_statements(self):
        source = """
        var a;
        while (a < 3) {
          if (a) print a; else a = 1;
        }
        """
        assert dump(source) == [
            "Program",
            "  Var a",
            "  While (< a 3)",
            "    Block",
            "      If a",
            "        Print a",
            "      Else",
            "        Expression (= a 1)",
        ]

    def test_function(self):
        assert dump("fun f(a, b) { return; }\nassert f(1, 2) == nil;") == [
            "Program",
            "  Function f(a, b)",
            "    Return",
            "  Assert (== (call f 1 2) nil)",
        ]
