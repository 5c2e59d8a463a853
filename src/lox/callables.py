"""Callable values (user functions and natives) and the return outcome."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lox.ast import Function
from lox.environment import Environment
from lox.tokens import Token

if TYPE_CHECKING:
    from lox.interpreter import Interpreter


@dataclass(frozen=True, slots=True)
class ReturnValue:
    """Outcome of executing a `return`; carried up to the enclosing call."""

    value: object
    keyword: Token


class LoxCallable(ABC):
    """Anything a call expression can invoke."""

    @abstractmethod
    def arity(self) -> int: ...

    @abstractmethod
    def call(self, interpreter: Interpreter, arguments: list[object]) -> object: ...


class LoxFunction(LoxCallable):
    """A user-defined function closed over the frame it was declared in."""

    def __init__(self, declaration: Function, closure: Environment) -> None:
        self.declaration = declaration
        self.closure = closure

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[object]) -> object:
        # Parent is the closure, not the caller's frame: lexical scoping
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.declare(param, argument)

        outcome = interpreter.execute_block(self.declaration.body.statements, environment)
        if outcome is None:
            return None
        return outcome.value

    def __str__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"


class NativeFunction(LoxCallable):
    """A function implemented by the host."""

    def __init__(self, name: str, arity: int, fn: Callable[[list[object]], object]) -> None:
        self.name = name
        self._arity = arity
        self._fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: Interpreter, arguments: list[object]) -> object:
        return self._fn(arguments)

    def __str__(self) -> str:
        return f"<native fn {self.name}>"
