"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from lox.ast import (
    Assert,
    Assign,
    Binary,
    Block,
    Call,
    Expr,
    Expression,
    Function,
    Grouping,
    If,
    Literal,
    Logical,
    Print,
    Return,
    Stmt,
    Unary,
    Var,
    Variable,
    While,
)
from lox.values import stringify


def dump_ast(statements: Iterable[Stmt], *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    file.write("Program\n")
    for stmt in statements:
        _dump_stmt(stmt, 1, file)


def format_expr(expr: Expr) -> str:
    """Render an expression in parenthesized prefix form, e.g. ``(+ 1 (group 2))``."""
    if isinstance(expr, Literal):
        if isinstance(expr.value, str):
            return f'"{expr.value}"'
        return stringify(expr.value)
    if isinstance(expr, Variable):
        return expr.name.lexeme
    if isinstance(expr, Grouping):
        return _parenthesize("group", expr.expression)
    if isinstance(expr, Unary):
        return _parenthesize(expr.operator.lexeme, expr.right)
    if isinstance(expr, (Binary, Logical)):
        return _parenthesize(expr.operator.lexeme, expr.left, expr.right)
    if isinstance(expr, Assign):
        return _parenthesize(f"= {expr.name.lexeme}", expr.value)
    if isinstance(expr, Call):
        return _parenthesize("call", expr.callee, *expr.arguments)
    raise TypeError(f"unknown expression: {type(expr).__name__}")


def _parenthesize(name: str, *exprs: Expr) -> str:
    return "(" + " ".join([name, *(format_expr(e) for e in exprs)]) + ")"


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_stmt(stmt: Stmt, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    if isinstance(stmt, Expression):
        f.write(f"{pad}Expression {format_expr(stmt.expression)}\n")
    elif isinstance(stmt, Print):
        f.write(f"{pad}Print {format_expr(stmt.expression)}\n")
    elif isinstance(stmt, Var):
        init = "" if stmt.initializer is None else f" = {format_expr(stmt.initializer)}"
        f.write(f"{pad}Var {stmt.name.lexeme}{init}\n")
    elif isinstance(stmt, Block):
        f.write(f"{pad}Block\n")
        for inner in stmt.statements:
            _dump_stmt(inner, depth + 1, f)
    elif isinstance(stmt, If):
        f.write(f"{pad}If {format_expr(stmt.condition)}\n")
        _dump_stmt(stmt.then_branch, depth + 1, f)
        if stmt.else_branch is not None:
            f.write(f"{pad}Else\n")
            _dump_stmt(stmt.else_branch, depth + 1, f)
    elif isinstance(stmt, While):
        f.write(f"{pad}While {format_expr(stmt.condition)}\n")
        _dump_stmt(stmt.body, depth + 1, f)
    elif isinstance(stmt, Function):
        params = ", ".join(p.lexeme for p in stmt.params)
        f.write(f"{pad}Function {stmt.name.lexeme}({params})\n")
        for inner in stmt.body.statements:
            _dump_stmt(inner, depth + 1, f)
    elif isinstance(stmt, Return):
        value = "" if stmt.value is None else f" {format_expr(stmt.value)}"
        f.write(f"{pad}Return{value}\n")
    elif isinstance(stmt, Assert):
        f.write(f"{pad}Assert {format_expr(stmt.condition)}\n")
