"""Token types, the token record, and the evaluation rules owned by operator tokens."""

from __future__ import annotations

import math
import operator
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from lox.errors import EvalError, InvalidTypesForOperation
from lox.values import is_truthy, is_equal, stringify


class TokenType(Enum):
    # Single-character punctuation
    LEFT_PAREN = auto()  # (
    RIGHT_PAREN = auto()  # )
    LEFT_BRACE = auto()  # {
    RIGHT_BRACE = auto()  # }
    COMMA = auto()  # ,
    DOT = auto()  # .
    MINUS = auto()  # -
    PLUS = auto()  # +
    SEMICOLON = auto()  # ;
    SLASH = auto()  # /
    STAR = auto()  # *

    # One or two character operators
    BANG = auto()  # !
    BANG_EQUAL = auto()  # !=
    EQUAL = auto()  # =
    EQUAL_EQUAL = auto()  # ==
    GREATER = auto()  # >
    GREATER_EQUAL = auto()  # >=
    LESS = auto()  # <
    LESS_EQUAL = auto()  # <=

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    ASSERT = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()


KEYWORDS: dict[str, TokenType] = {
    "and": TokenType.AND,
    "assert": TokenType.ASSERT,
    "class": TokenType.CLASS,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "nil": TokenType.NIL,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "super": TokenType.SUPER,
    "this": TokenType.THIS,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}


@dataclass(frozen=True, slots=True)
class Token:
    """A single scanned token: its type, source text, 1-based line and decoded value."""

    type: TokenType
    lexeme: str
    line: int
    literal: object = None

    @property
    def is_unary_operator(self) -> bool:
        return self.type in _UNARY_OPERATORS

    def evaluate_unary(self, operand: object) -> object:
        """Apply this token's prefix operator to an already-evaluated operand."""
        rule = _UNARY_OPERATORS.get(self.type)
        if rule is None:
            raise TypeError(f"{self.type.name} is not a unary operator")
        return rule(operand, self.line)

    def evaluate_binary(self, left: object, right: object) -> object:
        """Apply this token's infix operator to already-evaluated operands."""
        rule = _BINARY_OPERATORS.get(self.type)
        if rule is None:
            raise TypeError(f"{self.type.name} is not a binary operator")
        return rule(left, right, self.line)


# ---------------------------------------------------------------------------
# Operator semantics
# ---------------------------------------------------------------------------

_UnaryRule = Callable[[object, int], object]
_BinaryRule = Callable[[object, object, int], object]


def _is_number(value: object) -> bool:
    # bool is an int subclass, never a float, so true/false are rejected here
    return isinstance(value, float)


def _type_error(operation: str, expected: tuple[str, ...], *operands: object, line: int) -> EvalError:
    return EvalError(
        InvalidTypesForOperation(
            operation,
            expected,
            tuple(stringify(v) for v in operands),
            line,
        )
    )


def _numeric(operation: str, fn: Callable[[float, float], object]) -> _BinaryRule:
    def rule(left: object, right: object, line: int) -> object:
        if _is_number(left) and _is_number(right):
            return fn(left, right)  # type: ignore[arg-type]
        raise _type_error(operation, ("numbers",), left, right, line=line)

    return rule


def _add(left: object, right: object, line: int) -> object:
    if _is_number(left) and _is_number(right):
        return left + right  # type: ignore[operator]
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    raise _type_error("Plus operator (+)", ("numbers", "strings"), left, right, line=line)


def _divide(left: float, right: float) -> float:
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _negate(operand: object, line: int) -> object:
    if _is_number(operand):
        return -operand  # type: ignore[operator]
    raise _type_error("Minus operator (-)", ("numbers",), operand, line=line)


def _not(operand: object, line: int) -> object:
    return not is_truthy(operand)


_UNARY_OPERATORS: dict[TokenType, _UnaryRule] = {
    TokenType.MINUS: _negate,
    TokenType.BANG: _not,
}

_BINARY_OPERATORS: dict[TokenType, _BinaryRule] = {
    TokenType.PLUS: _add,
    TokenType.MINUS: _numeric("Minus operator (-)", operator.sub),
    TokenType.STAR: _numeric("Multiplication operator (*)", operator.mul),
    TokenType.SLASH: _numeric("Division operator (/)", _divide),
    TokenType.GREATER: _numeric("Greater Than operator (>)", operator.gt),
    TokenType.GREATER_EQUAL: _numeric("Greater Than Or Equal To operator (>=)", operator.ge),
    TokenType.LESS: _numeric("Less Than operator (<)", operator.lt),
    TokenType.LESS_EQUAL: _numeric("Less Than Or Equal To operator (<=)", operator.le),
    TokenType.EQUAL_EQUAL: lambda left, right, line: is_equal(left, right),
    TokenType.BANG_EQUAL: lambda left, right, line: not is_equal(left, right),
}
