"""Scope frames mapping names to runtime values."""

from __future__ import annotations

from lox.errors import EvalError, VariableAlreadyDefined, VariableNotDefined
from lox.tokens import Token


class Environment:
    """One scope frame plus a reference to its enclosing frame (None for globals).

    Frames are shared, never copied: closures hold the frame they were declared
    in, so later writes through any holder are visible to all of them.
    """

    def __init__(self, enclosing: Environment | None = None) -> None:
        self.enclosing = enclosing
        self.values: dict[str, object] = {}

    def declare(self, name: Token, value: object) -> None:
        if name.lexeme in self.values:
            raise EvalError(VariableAlreadyDefined(name.lexeme, name.line))
        self.values[name.lexeme] = value

    def define(self, name: str, value: object) -> None:
        """Bind a host-provided value (natives) without a source token."""
        self.values[name] = value

    def assign(self, name: Token, value: object) -> None:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise EvalError(VariableNotDefined(name.lexeme, name.line))

    def retrieve(self, name: Token) -> object:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise EvalError(VariableNotDefined(name.lexeme, name.line))

    # ------------------------------------------------------------------
    # Resolver-directed access
    # ------------------------------------------------------------------

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            if env.enclosing is None:
                raise LookupError(f"internal error: no frame at distance {distance}")
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: Token) -> object:
        frame = self.ancestor(distance)
        if name.lexeme not in frame.values:
            raise LookupError(
                f"internal error: '{name.lexeme}' is not bound at distance {distance}"
            )
        return frame.values[name.lexeme]

    def assign_at(self, distance: int, name: Token, value: object) -> None:
        frame = self.ancestor(distance)
        if name.lexeme not in frame.values:
            raise LookupError(
                f"internal error: '{name.lexeme}' is not bound at distance {distance}"
            )
        frame.values[name.lexeme] = value
