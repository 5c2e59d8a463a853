"""Tree-walking evaluator for resolved Lox programs."""

from __future__ import annotations

import sys
import time
import weakref
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
from lox.callables import LoxCallable, LoxFunction, NativeFunction, ReturnValue
from lox.environment import Environment
from lox.errors import (
    AssertionFailure,
    CallDepthExceeded,
    EvalError,
    InvalidNumberOfArguments,
    ReturnOutsideFunction,
    ValueNotCallable,
)
from lox.tokens import Token, TokenType
from lox.values import is_truthy, stringify

DEFAULT_MAX_CALL_DEPTH = 1000

# Host frames budgeted for one Lox call, including the statements and
# expressions nested inside its body
FRAMES_PER_CALL = 50


def ensure_recursion_limit(max_call_depth: int) -> None:
    """Raise the host recursion limit so *max_call_depth* nested calls fit."""
    needed = max_call_depth * FRAMES_PER_CALL + 1000
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


class Interpreter:
    """Execute statements against a chain of Environment frames.

    The global frame lives as long as the interpreter, so a REPL reusing one
    instance keeps its variables from line to line. Variable access uses the
    distances recorded by the resolver; a reference without one is looked up
    by name in the global frame.
    """

    def __init__(self, out: TextIO | None = None, max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> None:
        self.globals = Environment()
        self.max_call_depth = max_call_depth
        self._environment = self.globals
        self._locals: dict[int, int] = {}
        self._out = out
        self._call_depth = 0
        self._overflow_depth: int | None = None

        ensure_recursion_limit(max_call_depth)
        self.globals.define("clock", NativeFunction("clock", 0, lambda args: time.time()))

    def resolve(self, references: Iterable[tuple[Expr, int]]) -> None:
        """Record the scope distance of each resolved reference.

        An entry is dropped once its node is garbage collected, so a long REPL
        session only keeps distances for code that can still run (function
        bodies reachable from live closures).
        """
        for expr, distance in references:
            self._locals[expr.node_id] = distance
            weakref.finalize(expr, self._locals.pop, expr.node_id, None)

    def run(self, statements: Iterable[Stmt]) -> None:
        """Execute a program's top-level statements in order."""
        for statement in statements:
            outcome = self.execute(statement)
            if outcome is not None:
                raise EvalError(ReturnOutsideFunction(outcome.keyword))

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def execute(self, stmt: Stmt) -> ReturnValue | None:
        """Execute one statement; a ReturnValue means a `return` is unwinding."""
        if isinstance(stmt, Expression):
            self.evaluate(stmt.expression)
        elif isinstance(stmt, Print):
            print(stringify(self.evaluate(stmt.expression)), file=self._out)
        elif isinstance(stmt, Var):
            value = None if stmt.initializer is None else self.evaluate(stmt.initializer)
            self._environment.declare(stmt.name, value)
        elif isinstance(stmt, Block):
            return self.execute_block(stmt.statements, Environment(self._environment))
        elif isinstance(stmt, If):
            if is_truthy(self.evaluate(stmt.condition)):
                return self.execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self.execute(stmt.else_branch)
        elif isinstance(stmt, While):
            while is_truthy(self.evaluate(stmt.condition)):
                outcome = self.execute(stmt.body)
                if outcome is not None:
                    return outcome
        elif isinstance(stmt, Function):
            self._environment.declare(stmt.name, LoxFunction(stmt, self._environment))
        elif isinstance(stmt, Return):
            value = None if stmt.value is None else self.evaluate(stmt.value)
            return ReturnValue(value, stmt.keyword)
        elif isinstance(stmt, Assert):
            if not is_truthy(self.evaluate(stmt.condition)):
                raise EvalError(AssertionFailure(stmt.keyword, stmt.condition))
        else:
            raise TypeError(f"unknown statement: {type(stmt).__name__}")
        return None

    def execute_block(self, statements: Iterable[Stmt], environment: Environment) -> ReturnValue | None:
        previous = self._environment
        try:
            self._environment = environment
            for statement in statements:
                outcome = self.execute(statement)
                if outcome is not None:
                    return outcome
        finally:
            self._environment = previous
        return None

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def evaluate(self, expr: Expr) -> object:
        if isinstance(expr, Literal):
            return expr.value
        if isinstance(expr, Grouping):
            return self.evaluate(expr.expression)
        if isinstance(expr, Unary):
            return expr.operator.evaluate_unary(self.evaluate(expr.right))
        if isinstance(expr, Binary):
            left = self.evaluate(expr.left)
            right = self.evaluate(expr.right)
            return expr.operator.evaluate_binary(left, right)
        if isinstance(expr, Logical):
            left = self.evaluate(expr.left)
            if expr.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(expr.right)
        if isinstance(expr, Variable):
            return self._look_up(expr.name, expr)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            distance = self._locals.get(expr.node_id)
            if distance is not None:
                self._environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        if isinstance(expr, Call):
            return self._call(expr)
        raise TypeError(f"unknown expression: {type(expr).__name__}")

    def _look_up(self, name: Token, expr: Expr) -> object:
        distance = self._locals.get(expr.node_id)
        if distance is not None:
            return self._environment.get_at(distance, name)
        return self.globals.retrieve(name)

    def _call(self, expr: Call) -> object:
        callee = self.evaluate(expr.callee)
        if not isinstance(callee, LoxCallable):
            raise EvalError(ValueNotCallable(stringify(callee), expr.paren))

        arguments = [self.evaluate(argument) for argument in expr.arguments]
        if len(arguments) != callee.arity():
            raise EvalError(InvalidNumberOfArguments(len(arguments), callee.arity(), expr.paren))

        if self._call_depth >= self.max_call_depth:
            raise EvalError(CallDepthExceeded(self.max_call_depth, expr.paren))

        self._call_depth += 1
        try:
            return callee.call(self, arguments)
        except RecursionError:
            # Host stack ran out before max_call_depth; report from the outermost call
            if self._overflow_depth is None:
                self._overflow_depth = self._call_depth
            if self._call_depth > 1:
                raise
            depth, self._overflow_depth = self._overflow_depth, None
            raise EvalError(CallDepthExceeded(depth, expr.paren)) from None
        finally:
            self._call_depth -= 1
