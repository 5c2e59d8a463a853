"""Issue taxonomy and the aggregated exceptions raised by each pipeline stage."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lox.ast import Expr
    from lox.tokens import Token


class Issue:
    """A diagnosable problem. Subclasses carry structured fields plus `line` and `message`."""

    __slots__ = ()

    line: int

    @property
    def message(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return f"Line {self.line}: {self.message}"


def _describe(token: Token) -> str:
    if not token.lexeme:
        return "end of input"
    return f"'{token.lexeme}'"


def _join(items: Iterable[str]) -> str:
    parts = list(items)
    if len(parts) <= 2:
        return " and ".join(parts)
    return ", ".join(parts[:-1]) + f", and {parts[-1]}"


_CLOSERS = {"(": ")", "{": "}"}


# ---------------------------------------------------------------------------
# Lexical
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InvalidCharacter(Issue):
    char: str
    line: int

    @property
    def message(self) -> str:
        return f"unexpected character {self.char!r}"


@dataclass(frozen=True, slots=True)
class UnterminatedString(Issue):
    line: int

    @property
    def message(self) -> str:
        return "unterminated string"


# ---------------------------------------------------------------------------
# Syntactic
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnterminatedGrouping(Issue):
    opening: Token

    @property
    def line(self) -> int:
        return self.opening.line

    @property
    def message(self) -> str:
        closer = _CLOSERS.get(self.opening.lexeme, ")")
        return f"expected '{closer}' to close '{self.opening.lexeme}'"


@dataclass(frozen=True, slots=True)
class UnterminatedStatement(Issue):
    line: int
    token: Token

    @property
    def message(self) -> str:
        return f"expected ';' after statement starting with {_describe(self.token)}"


@dataclass(frozen=True, slots=True)
class UnexpectedToken(Issue):
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return f"unexpected {_describe(self.token)}"


@dataclass(frozen=True, slots=True)
class DanglingComma(Issue):
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return "trailing ',' is not allowed before ')'"


@dataclass(frozen=True, slots=True)
class ExceededMaximumFunctionArguments(Issue):
    count: int
    maximum: int
    line: int

    @property
    def message(self) -> str:
        return f"can't have more than {self.maximum} arguments or parameters (got {self.count})"


@dataclass(frozen=True, slots=True)
class InvalidAssignmentTarget(Issue):
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return "invalid assignment target"


@dataclass(frozen=True, slots=True)
class NestingTooDeep(Issue):
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return f"code is nested too deeply at {_describe(self.token)}"


@dataclass(frozen=True, slots=True)
class UnsupportedFeature(Issue):
    feature: str
    line: int

    @property
    def message(self) -> str:
        return f"{self.feature} are not supported"


# ---------------------------------------------------------------------------
# Static / semantic
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VariableAlreadyDefined(Issue):
    name: str
    line: int

    @property
    def message(self) -> str:
        return f"variable '{self.name}' is already defined in this scope"


@dataclass(frozen=True, slots=True)
class VariableNotDefined(Issue):
    name: str
    line: int

    @property
    def message(self) -> str:
        return f"undefined variable '{self.name}'"


@dataclass(frozen=True, slots=True)
class ValueNotCallable(Issue):
    value: str
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return f"can only call functions, got {self.value}"


@dataclass(frozen=True, slots=True)
class InvalidNumberOfArguments(Issue):
    given: int
    expected: int
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return f"expected {self.expected} arguments but got {self.given}"


@dataclass(frozen=True, slots=True)
class ReturnOutsideFunction(Issue):
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return "can't return from outside a function"


@dataclass(frozen=True, slots=True)
class CallDepthExceeded(Issue):
    limit: int
    token: Token

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        return f"call depth limit ({self.limit}) exceeded"


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InvalidTypesForOperation(Issue):
    operation: str
    expected_types: tuple[str, ...]
    received_values: tuple[str, ...]
    line: int

    @property
    def message(self) -> str:
        if not self.expected_types and not self.received_values:
            return f"{self.operation} was not called with the correct types"
        noun = "type" if len(self.expected_types) == 1 else "types"
        return (
            f"{self.operation} expected {noun} {_join(self.expected_types)}, "
            f"instead got {_join(self.received_values)}"
        )


@dataclass(frozen=True, slots=True)
class AssertionFailure(Issue):
    token: Token
    expression: Expr

    @property
    def line(self) -> int:
        return self.token.line

    @property
    def message(self) -> str:
        from lox.debug import format_expr

        return f"assertion failed: {format_expr(self.expression)}"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LoxError(Exception):
    """One or more issues reported by a pipeline stage, with optional source context."""

    def __init__(self, issues: Issue | Iterable[Issue], source: str = "") -> None:
        if isinstance(issues, Issue):
            issues = [issues]
        self.issues: list[Issue] = list(issues)
        self.source = source
        super().__init__("\n".join(str(issue) for issue in self.issues))

    def format(self, filename: str = "<script>") -> str:
        return "\n".join(self._format_issue(issue, filename) for issue in self.issues)

    def _format_issue(self, issue: Issue, filename: str) -> str:
        line_num = str(issue.line)
        gutter_width = len(line_num) + 1
        header = f"error: {issue.message}\n{' ' * gutter_width}--> {filename}:{issue.line}"

        lines = self.source.splitlines()
        line_idx = issue.line - 1
        if not 0 <= line_idx < len(lines):
            return header

        source_line = lines[line_idx].rstrip("\r")
        stripped = source_line.lstrip()
        pad = " " * (len(source_line) - len(stripped))
        carets = "^" * max(1, len(stripped.rstrip()))

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"
        return (
            f"{header}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


class ScanError(LoxError):
    """Lexical issues collected over a whole source text."""


class ParseError(LoxError):
    """Syntax issues collected over a whole token stream."""


class ResolveError(LoxError):
    """Static issues found by the variable resolver."""


class EvalError(LoxError):
    """A runtime failure; stops the statement being executed."""
