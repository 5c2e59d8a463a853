"""Lox scanner: converts source text into a flat token stream."""

from __future__ import annotations

from lox.errors import InvalidCharacter, Issue, ScanError, UnterminatedString
from lox.tokens import KEYWORDS, Token, TokenType

_SINGLE_CHAR: dict[str, TokenType] = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
}

# first char -> (type when followed by '=', type otherwise)
_ONE_OR_TWO_CHAR: dict[str, tuple[TokenType, TokenType]] = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_alpha(ch: str) -> bool:
    return "a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_"


def _is_alphanumeric(ch: str) -> bool:
    return _is_alpha(ch) or _is_digit(ch)


class Scanner:
    """Tokenize Lox source text, collecting every lexical issue instead of stopping."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._tokens: list[Token] = []
        self._issues: list[Issue] = []
        self._start = 0
        self._current = 0
        self._line = 1

    def scan(self) -> tuple[list[Token], list[Issue]]:
        """Scan the full source and return (tokens, issues). Tokens always end with EOF."""
        while not self._at_end():
            self._start = self._current
            self._scan_token()

        self._tokens.append(Token(TokenType.EOF, "", self._line))
        return self._tokens, self._issues

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._current >= len(self._source)

    def _peek(self, offset: int = 0) -> str:
        idx = self._current + offset
        if idx < len(self._source):
            return self._source[idx]
        return "\0"

    def _advance(self) -> str:
        ch = self._source[self._current]
        self._current += 1
        return ch

    def _match(self, expected: str) -> bool:
        if self._at_end() or self._source[self._current] != expected:
            return False
        self._current += 1
        return True

    def _emit(self, tt: TokenType, literal: object = None) -> None:
        lexeme = self._source[self._start : self._current]
        self._tokens.append(Token(tt, lexeme, self._line, literal))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _scan_token(self) -> None:
        ch = self._advance()

        if ch in _SINGLE_CHAR:
            self._emit(_SINGLE_CHAR[ch])
            return

        if ch in _ONE_OR_TWO_CHAR:
            two, one = _ONE_OR_TWO_CHAR[ch]
            self._emit(two if self._match("=") else one)
            return

        if ch == "/":
            if self._match("/"):
                # Line comment runs to end of line; the newline itself is scanned next
                while self._peek() != "\n" and not self._at_end():
                    self._advance()
            else:
                self._emit(TokenType.SLASH)
            return

        if ch in " \r\t":
            return

        if ch == "\n":
            self._line += 1
            return

        if ch == '"':
            self._string()
            return

        if _is_digit(ch):
            self._number()
            return

        if _is_alpha(ch):
            self._identifier()
            return

        self._issues.append(InvalidCharacter(ch, self._line))

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def _string(self) -> None:
        while self._peek() != '"' and not self._at_end():
            if self._peek() == "\n":
                self._line += 1
            self._advance()

        if self._at_end():
            self._issues.append(UnterminatedString(self._line))
            return

        self._advance()  # closing quote
        value = self._source[self._start + 1 : self._current - 1]
        self._emit(TokenType.STRING, value)

    def _number(self) -> None:
        while _is_digit(self._peek()):
            self._advance()

        # A fractional part needs at least one digit after the dot
        if self._peek() == "." and _is_digit(self._peek(1)):
            self._advance()
            while _is_digit(self._peek()):
                self._advance()

        self._emit(TokenType.NUMBER, float(self._source[self._start : self._current]))

    def _identifier(self) -> None:
        while _is_alphanumeric(self._peek()):
            self._advance()

        text = self._source[self._start : self._current]
        tt = KEYWORDS.get(text, TokenType.IDENTIFIER)
        if tt == TokenType.IDENTIFIER:
            self._emit(tt, text)
        elif tt == TokenType.TRUE:
            self._emit(tt, True)
        elif tt == TokenType.FALSE:
            self._emit(tt, False)
        else:
            self._emit(tt)


def scan(source: str) -> tuple[list[Token], list[Issue]]:
    """Scan source text, returning (tokens, issues) without raising."""
    return Scanner(source).scan()


def tokenize(source: str) -> list[Token]:
    """Convenience function: scan source text, raising ScanError on any lexical issue."""
    tokens, issues = Scanner(source).scan()
    if issues:
        raise ScanError(issues, source)
    return tokens
