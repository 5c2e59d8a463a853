"""Static variable resolution: computes how many scopes each reference walks out."""

from __future__ import annotations

from collections.abc import Iterable

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
from lox.errors import (
    Issue,
    ResolveError,
    ReturnOutsideFunction,
    VariableAlreadyDefined,
    VariableNotDefined,
)
from lox.tokens import Token


class Resolver:
    """Walk the AST once, recording a hop count for every local variable access.

    Each local scope maps a name to whether its declaration has finished
    (False while its initializer is being resolved). Globals are never pushed
    on the scope stack; references with no recorded distance are looked up by
    name in the global frame at runtime. The scopes pushed here mirror exactly
    the frames the interpreter creates: one per block, and one per function
    call holding both the parameters and the body's declarations.

    `locals` maps node ids to distances; `references` pairs the same distances
    with the nodes themselves for consumers that track node lifetime.
    """

    def __init__(self, globals: Iterable[str] = ()) -> None:
        self.locals: dict[int, int] = {}
        self.references: list[tuple[Expr, int]] = []
        self.globals: set[str] = set(globals)
        self._scopes: list[dict[str, bool]] = []
        self._function_depth = 0
        self._issues: list[Issue] = []

    def resolve(self, statements: Iterable[Stmt]) -> list[Issue]:
        """Resolve a program, returning every static issue found."""
        self._issues = []
        for statement in statements:
            self._resolve_stmt(statement)
        return self._issues

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _begin_scope(self) -> None:
        self._scopes.append({})

    def _end_scope(self) -> None:
        self._scopes.pop()

    def _declare(self, name: Token) -> None:
        if not self._scopes:
            self.globals.add(name.lexeme)
            return
        scope = self._scopes[-1]
        if name.lexeme in scope:
            self._issues.append(VariableAlreadyDefined(name.lexeme, name.line))
        scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        if self._scopes:
            self._scopes[-1][name.lexeme] = True

    def _find(self, name: str, skip: int = 0) -> int | None:
        """Distance to the innermost scope declaring name, ignoring the `skip` innermost."""
        for i in range(len(self._scopes) - 1 - skip, -1, -1):
            if name in self._scopes[i]:
                return len(self._scopes) - 1 - i
        return None

    def _resolve_local(self, expr: Expr, name: Token) -> None:
        if self._scopes and self._scopes[-1].get(name.lexeme) is False:
            # Used inside its own initializer: only an outer binding can satisfy it
            distance = self._find(name.lexeme, skip=1)
            if distance is not None:
                self._record(expr, distance)
            elif name.lexeme not in self.globals:
                self._issues.append(VariableNotDefined(name.lexeme, name.line))
            return

        distance = self._find(name.lexeme)
        if distance is not None:
            self._record(expr, distance)

    def _record(self, expr: Expr, distance: int) -> None:
        self.locals[expr.node_id] = distance
        self.references.append((expr, distance))

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _resolve_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Block):
            self._begin_scope()
            for inner in stmt.statements:
                self._resolve_stmt(inner)
            self._end_scope()
        elif isinstance(stmt, Var):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name)
        elif isinstance(stmt, Function):
            self._declare(stmt.name)
            self._define(stmt.name)
            self._resolve_function(stmt)
        elif isinstance(stmt, (Expression, Print)):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, If):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, While):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
        elif isinstance(stmt, Return):
            if self._function_depth == 0:
                self._issues.append(ReturnOutsideFunction(stmt.keyword))
            if stmt.value is not None:
                self._resolve_expr(stmt.value)
        elif isinstance(stmt, Assert):
            self._resolve_expr(stmt.condition)
        else:
            raise TypeError(f"unknown statement: {type(stmt).__name__}")

    def _resolve_function(self, function: Function) -> None:
        self._function_depth += 1
        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        # The body shares the parameter scope: a call runs it in a single frame
        for inner in function.body.statements:
            self._resolve_stmt(inner)
        self._end_scope()
        self._function_depth -= 1

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _resolve_expr(self, expr: Expr) -> None:
        if isinstance(expr, Variable):
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, Assign):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, (Binary, Logical)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, Unary):
            self._resolve_expr(expr.right)
        elif isinstance(expr, Grouping):
            self._resolve_expr(expr.expression)
        elif isinstance(expr, Call):
            self._resolve_expr(expr.callee)
            for argument in expr.arguments:
                self._resolve_expr(argument)
        elif isinstance(expr, Literal):
            pass
        else:
            raise TypeError(f"unknown expression: {type(expr).__name__}")


def resolve(statements: Iterable[Stmt], globals: Iterable[str] = ()) -> dict[int, int]:
    """Convenience function: resolve statements, raising ResolveError on any issue."""
    resolver = Resolver(globals)
    issues = resolver.resolve(statements)
    if issues:
        raise ResolveError(issues)
    return resolver.locals
