"""Lox parser: converts a token stream into a list of statements."""

from __future__ import annotations

from collections.abc import Callable

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
    DanglingComma,
    ExceededMaximumFunctionArguments,
    InvalidAssignmentTarget,
    Issue,
    NestingTooDeep,
    ParseError,
    UnexpectedToken,
    UnsupportedFeature,
    UnterminatedGrouping,
    UnterminatedStatement,
)
from lox.scanner import tokenize
from lox.tokens import Token, TokenType

MAX_ARGUMENTS = 255


class _SyntaxFailure(Exception):
    """Unwinds to the declaration loop; never escapes Parser.parse."""

    def __init__(self, issue: Issue) -> None:
        super().__init__(str(issue))
        self.issue = issue


class Parser:
    """Recursive descent parser with panic-mode recovery.

    A fatal syntax error abandons the current declaration, records the issue and
    skips ahead to the next statement boundary, so one pass reports as many
    independent errors as possible.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._issues: list[Issue] = []

    def parse(self) -> tuple[list[Stmt], list[Issue]]:
        statements: list[Stmt] = []
        while not self._at_eof():
            try:
                statements.append(self._declaration())
            except _SyntaxFailure as failure:
                self._issues.append(failure.issue)
                self._synchronize()
            except RecursionError:
                # Nesting exhausted the host stack; abandon this declaration
                self._issues.append(NestingTooDeep(self._peek()))
                self._synchronize()
        return statements, self._issues

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _previous(self) -> Token:
        return self._tokens[self._pos - 1]

    def _at(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _at_eof(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if tok.type != TokenType.EOF:
            self._pos += 1
        return tok

    def _match(self, tt: TokenType) -> bool:
        if self._at(tt):
            self._advance()
            return True
        return False

    def _expect(self, tt: TokenType, issue: Issue | None = None) -> Token:
        if not self._at(tt):
            raise self._fail(issue or UnexpectedToken(self._peek()))
        return self._advance()

    def _end_statement(self, start: Token) -> None:
        if not self._at(TokenType.SEMICOLON):
            raise self._fail(UnterminatedStatement(self._previous().line, start))
        self._advance()

    def _fail(self, issue: Issue) -> _SyntaxFailure:
        return _SyntaxFailure(issue)

    def _synchronize(self) -> None:
        self._advance()
        while not self._at_eof():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self._peek().type in _STATEMENT_STARTS:
                return
            self._advance()

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _declaration(self) -> Stmt:
        if self._match(TokenType.VAR):
            return self._var_declaration()
        if self._match(TokenType.FUN):
            return self._function()
        if self._at(TokenType.CLASS):
            raise self._fail(UnsupportedFeature("classes", self._peek().line))
        return self._statement()

    def _var_declaration(self) -> Var:
        keyword = self._previous()
        name = self._expect(TokenType.IDENTIFIER)
        initializer = self._expression() if self._match(TokenType.EQUAL) else None
        self._end_statement(keyword)
        return Var(name, initializer)

    def _function(self) -> Function:
        name = self._expect(TokenType.IDENTIFIER)
        lparen = self._expect(TokenType.LEFT_PAREN)

        params: list[Token] = []
        if not self._at(TokenType.RIGHT_PAREN):
            while True:
                params.append(self._expect(TokenType.IDENTIFIER))
                if not self._at(TokenType.COMMA):
                    break
                comma = self._advance()
                if self._at(TokenType.RIGHT_PAREN):
                    raise self._fail(DanglingComma(comma))
        self._expect(TokenType.RIGHT_PAREN, UnterminatedGrouping(lparen))

        if len(params) > MAX_ARGUMENTS:
            self._issues.append(
                ExceededMaximumFunctionArguments(len(params), MAX_ARGUMENTS, name.line)
            )

        lbrace = self._expect(TokenType.LEFT_BRACE)
        body = self._block(lbrace)
        return Function(name, tuple(params), Block(tuple(body)))

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _statement(self) -> Stmt:
        if self._match(TokenType.PRINT):
            keyword = self._previous()
            value = self._expression()
            self._end_statement(keyword)
            return Print(value)
        if self._match(TokenType.LEFT_BRACE):
            return Block(tuple(self._block(self._previous())))
        if self._match(TokenType.IF):
            return self._if_statement()
        if self._match(TokenType.WHILE):
            return self._while_statement()
        if self._match(TokenType.FOR):
            return self._for_statement()
        if self._match(TokenType.RETURN):
            return self._return_statement()
        if self._match(TokenType.ASSERT):
            keyword = self._previous()
            condition = self._expression()
            self._end_statement(keyword)
            return Assert(keyword, condition)
        return self._expression_statement()

    def _block(self, opening: Token) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self._at(TokenType.RIGHT_BRACE) and not self._at_eof():
            statements.append(self._declaration())
        self._expect(TokenType.RIGHT_BRACE, UnterminatedGrouping(opening))
        return statements

    def _if_statement(self) -> If:
        lparen = self._expect(TokenType.LEFT_PAREN)
        condition = self._expression()
        self._expect(TokenType.RIGHT_PAREN, UnterminatedGrouping(lparen))
        then_branch = self._statement()
        # A dangling else binds to the nearest if
        else_branch = self._statement() if self._match(TokenType.ELSE) else None
        return If(condition, then_branch, else_branch)

    def _while_statement(self) -> While:
        lparen = self._expect(TokenType.LEFT_PAREN)
        condition = self._expression()
        self._expect(TokenType.RIGHT_PAREN, UnterminatedGrouping(lparen))
        return While(condition, self._statement())

    def _for_statement(self) -> Block:
        """Desugar `for (init; cond; incr) body` into `{ init; while (cond) { body; incr; } }`."""
        keyword = self._previous()
        lparen = self._expect(TokenType.LEFT_PAREN)

        initializer: Stmt | None
        if self._match(TokenType.SEMICOLON):
            initializer = None
        elif self._match(TokenType.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = Literal(True) if self._at(TokenType.SEMICOLON) else self._expression()
        self._expect(TokenType.SEMICOLON, UnterminatedStatement(self._previous().line, keyword))

        increment = None if self._at(TokenType.RIGHT_PAREN) else self._expression()
        self._expect(TokenType.RIGHT_PAREN, UnterminatedGrouping(lparen))

        body = self._statement()
        if increment is not None:
            body = Block((body, Expression(increment)))
        loop = While(condition, body)

        if initializer is None:
            return Block((loop,))
        return Block((initializer, loop))

    def _return_statement(self) -> Return:
        keyword = self._previous()
        value = None if self._at(TokenType.SEMICOLON) else self._expression()
        self._end_statement(keyword)
        return Return(keyword, value)

    def _expression_statement(self) -> Expression:
        first = self._peek()
        expr = self._expression()
        self._end_statement(first)
        return Expression(expr)

    # ------------------------------------------------------------------
    # Expressions, lowest precedence first
    # ------------------------------------------------------------------

    def _expression(self) -> Expr:
        return self._assignment()

    def _assignment(self) -> Expr:
        expr = self._or()
        if self._at(TokenType.EQUAL):
            equals = self._advance()
            value = self._assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            # Syntactically fine, semantically wrong: report and keep going
            self._issues.append(InvalidAssignmentTarget(equals))
        return expr

    def _or(self) -> Expr:
        expr = self._and()
        while self._at(TokenType.OR):
            op = self._advance()
            expr = Logical(expr, op, self._and())
        return expr

    def _and(self) -> Expr:
        expr = self._equality()
        while self._at(TokenType.AND):
            op = self._advance()
            expr = Logical(expr, op, self._equality())
        return expr

    def _left_assoc(self, operand: Callable[[], Expr], operators: frozenset[TokenType]) -> Expr:
        expr = operand()
        while self._peek().type in operators:
            op = self._advance()
            expr = Binary(expr, op, operand())
        return expr

    def _equality(self) -> Expr:
        return self._left_assoc(self._comparison, _EQUALITY)

    def _comparison(self) -> Expr:
        return self._left_assoc(self._term, _COMPARISON)

    def _term(self) -> Expr:
        return self._left_assoc(self._factor, _TERM)

    def _factor(self) -> Expr:
        return self._left_assoc(self._unary, _FACTOR)

    def _unary(self) -> Expr:
        if self._peek().is_unary_operator:
            op = self._advance()
            return Unary(op, self._unary())
        return self._call()

    def _call(self) -> Expr:
        expr = self._primary()
        while self._at(TokenType.LEFT_PAREN):
            lparen = self._advance()
            expr = self._finish_call(expr, lparen)
        return expr

    def _finish_call(self, callee: Expr, lparen: Token) -> Call:
        arguments: list[Expr] = []
        if not self._at(TokenType.RIGHT_PAREN):
            while True:
                arguments.append(self._expression())
                if not self._at(TokenType.COMMA):
                    break
                comma = self._advance()
                if self._at(TokenType.RIGHT_PAREN):
                    raise self._fail(DanglingComma(comma))
        paren = self._expect(TokenType.RIGHT_PAREN, UnterminatedGrouping(lparen))

        if len(arguments) > MAX_ARGUMENTS:
            self._issues.append(
                ExceededMaximumFunctionArguments(len(arguments), MAX_ARGUMENTS, paren.line)
            )
        return Call(callee, paren, tuple(arguments))

    def _primary(self) -> Expr:
        tok = self._peek()

        if tok.type in _LITERALS:
            self._advance()
            return Literal(tok.literal)

        if tok.type == TokenType.IDENTIFIER:
            self._advance()
            return Variable(tok)

        if tok.type == TokenType.LEFT_PAREN:
            self._advance()
            inner = self._expression()
            self._expect(TokenType.RIGHT_PAREN, UnterminatedGrouping(tok))
            return Grouping(inner)

        if tok.type in (TokenType.THIS, TokenType.SUPER):
            raise self._fail(UnsupportedFeature(f"'{tok.lexeme}' expressions", tok.line))

        raise self._fail(UnexpectedToken(tok))


# Module-level constants
_EQUALITY: frozenset[TokenType] = frozenset({TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL})
_COMPARISON: frozenset[TokenType] = frozenset(
    {TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL}
)
_TERM: frozenset[TokenType] = frozenset({TokenType.MINUS, TokenType.PLUS})
_FACTOR: frozenset[TokenType] = frozenset({TokenType.SLASH, TokenType.STAR})
_LITERALS: frozenset[TokenType] = frozenset(
    {TokenType.NUMBER, TokenType.STRING, TokenType.TRUE, TokenType.FALSE, TokenType.NIL}
)
_STATEMENT_STARTS: frozenset[TokenType] = frozenset(
    {
        TokenType.ASSERT,
        TokenType.CLASS,
        TokenType.FOR,
        TokenType.FUN,
        TokenType.IF,
        TokenType.PRINT,
        TokenType.RETURN,
        TokenType.VAR,
        TokenType.WHILE,
    }
)


def parse_tokens(tokens: list[Token]) -> list[Stmt]:
    """Parse a token stream, raising ParseError with every syntax issue found."""
    statements, issues = Parser(tokens).parse()
    if issues:
        raise ParseError(issues)
    return statements


def parse(source: str) -> list[Stmt]:
    """Convenience function: scan and parse source text into statements."""
    try:
        return parse_tokens(tokenize(source))
    except ParseError as exc:
        exc.source = source
        raise
