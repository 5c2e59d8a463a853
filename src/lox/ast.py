"""AST node types for parsed Lox programs."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

from lox.tokens import Token

_node_ids = itertools.count(1)


def _next_id() -> int:
    return next(_node_ids)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, weakref_slot=True)
class Expr:
    """Base expression node.

    `node_id` is unique per constructed node and excluded from equality, so the
    resolver can tell apart two structurally identical references. Nodes are
    weakly referenceable so per-node interpreter state can follow their lifetime.
    """

    node_id: int = field(default_factory=_next_id, compare=False, repr=False, kw_only=True)


@dataclass(frozen=True, slots=True)
class Literal(Expr):
    """Decoded literal value: float, str, bool or None."""

    value: object


@dataclass(frozen=True, slots=True)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True, slots=True)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(frozen=True, slots=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, slots=True)
class Logical(Expr):
    """Short-circuiting `and` / `or`."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, slots=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True, slots=True)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True, slots=True)
class Call(Expr):
    """Function call; `paren` is the closing parenthesis, kept for error lines."""

    callee: Expr
    paren: Token
    arguments: tuple[Expr, ...]


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Stmt:
    """Base statement node."""


@dataclass(frozen=True, slots=True)
class Expression(Stmt):
    expression: Expr


@dataclass(frozen=True, slots=True)
class Print(Stmt):
    expression: Expr


@dataclass(frozen=True, slots=True)
class Var(Stmt):
    """Variable declaration; a missing initializer binds nil."""

    name: Token
    initializer: Expr | None


@dataclass(frozen=True, slots=True)
class Block(Stmt):
    statements: tuple[Stmt, ...]


@dataclass(frozen=True, slots=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(frozen=True, slots=True)
class While(Stmt):
    """Loop; `for` statements are desugared into this by the parser."""

    condition: Expr
    body: Stmt


@dataclass(frozen=True, slots=True)
class Function(Stmt):
    name: Token
    params: tuple[Token, ...]
    body: Block


@dataclass(frozen=True, slots=True)
class Return(Stmt):
    keyword: Token
    value: Expr | None


@dataclass(frozen=True, slots=True)
class Assert(Stmt):
    keyword: Token
    condition: Expr
