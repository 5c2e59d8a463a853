"""Parser tests: statement shapes, precedence, desugaring and error recovery."""

from __future__ import annotations

import pytest

from lox.ast import (
    Assert,
    Block,
    Expression,
    Function,
    If,
    Literal,
    Print,
    Return,
    Var,
    While,
)
from lox.debug import format_expr
from lox.errors import (
    DanglingComma,
    ExceededMaximumFunctionArguments,
    InvalidAssignmentTarget,
    NestingTooDeep,
    ParseError,
    UnexpectedToken,
    UnsupportedFeature,
    UnterminatedGrouping,
    UnterminatedStatement,
)
from lox.parser import Parser, parse, parse_tokens
from lox.scanner import tokenize

from conftest import issue_types


def parse_with_issues(source: str):
    return Parser(tokenize(source)).parse()


def expr_of(source: str) -> str:
    """Parse a single expression statement and render it in prefix form."""
    statements = parse(source)
    assert len(statements) == 1
    assert isinstance(statements[0], Expression)
    return format_expr(statements[0].expression)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class TestPrecedence:
    def test_factor_binds_tighter_than_term(self):
        assert expr_of("1 + 2 * 3;") == "(+ 1 (* 2 3))"

    def test_grouping_overrides_precedence(self):
        assert expr_of("(1 + 2) * 3;") == "(* (group (+ 1 2)) 3)"

    def test_term_is_left_associative(self):
        assert expr_of("1 - 2 - 3;") == "(- (- 1 2) 3)"

    def test_comparison_below_term(self):
        assert expr_of("1 + 2 < 4;") == "(< (+ 1 2) 4)"

    def test_equality_below_comparison(self):
        assert expr_of("1 < 2 == true;") == "(== (< 1 2) true)"

    def test_and_binds_tighter_than_or(self):
        assert expr_of("a or b and c;") == "(or a (and b c))"

    def test_unary_nests(self):
        assert expr_of("!!true;") == "(! (! true))"
        assert expr_of("-x * 2;") == "(* (- x) 2)"

    def test_assignment_is_right_associative(self):
        assert expr_of("a = b = 1;") == "(= a (= b 1))"

    def test_call_chains(self):
        assert expr_of("f(1)(2, 3);") == "(call (call f 1) 2 3)"

    def test_call_without_arguments(self):
        assert expr_of("clock();") == "(call clock)"

    def test_literals(self):
        assert expr_of('"hi";') == '"hi"'
        assert expr_of("nil;") == "nil"
        assert expr_of("2.5;") == "2.5"


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class TestStatements:
    def test_print(self, parse_source):
        [stmt] = parse_source("print 1;")
        assert isinstance(stmt, Print)
        assert stmt.expression == Literal(1.0)

    def test_var_without_initializer(self, parse_source):
        [stmt] = parse_source("var x;")
        assert isinstance(stmt, Var)
        assert stmt.name.lexeme == "x"
        assert stmt.initializer is None

    def test_block(self, parse_source):
        [stmt] = parse_source("{ var a = 1; print a; }")
        assert isinstance(stmt, Block)
        assert [type(s) for s in stmt.statements] == [Var, Print]

    def test_if_else(self, parse_source):
        [stmt] = parse_source("if (x) print 1; else print 2;")
        assert isinstance(stmt, If)
        assert isinstance(stmt.else_branch, Print)

    def test_dangling_else_binds_to_nearest_if(self, parse_source):
        [stmt] = parse_source("if (a) if (b) print 1; else print 2;")
        assert stmt.else_branch is None
        assert isinstance(stmt.then_branch, If)
        assert stmt.then_branch.else_branch is not None

    def test_while(self, parse_source):
        [stmt] = parse_source("while (i < 3) i = i + 1;")
        assert isinstance(stmt, While)
        assert isinstance(stmt.body, Expression)

    def test_function(self, parse_source):
        [stmt] = parse_source("fun add(a, b) { return a + b; }")
        assert isinstance(stmt, Function)
        assert [p.lexeme for p in stmt.params] == ["a", "b"]
        assert isinstance(stmt.body.statements[0], Return)

    def test_bare_return(self, parse_source):
        [stmt] = parse_source("fun f() { return; }")
        assert stmt.body.statements[0].value is None

    def test_assert(self, parse_source):
        [stmt] = parse_source("assert 1 < 2;")
        assert isinstance(stmt, Assert)
        assert format_expr(stmt.condition) == "(< 1 2)"


class TestForDesugaring:
    def test_for_equals_hand_written_while(self, parse_source):
        desugared = parse_source("for (var i = 0; i < 3; i = i + 1) print i;")
        hand_written = parse_source("{ var i = 0; while (i < 3) { print i; i = i + 1; } }")
        assert desugared == hand_written

    def test_for_without_clauses(self, parse_source):
        [stmt] = parse_source("for (;;) print 1;")
        assert isinstance(stmt, Block)
        [loop] = stmt.statements
        assert isinstance(loop, While)
        assert loop.condition == Literal(True)
        assert isinstance(loop.body, Print)

    def test_for_with_expression_initializer(self, parse_source):
        [stmt] = parse_source("for (i = 0; i < 1;) print i;")
        init, loop = stmt.statements
        assert isinstance(init, Expression)
        assert isinstance(loop.body, Print)


# ---------------------------------------------------------------------------
# Errors and recovery
# ---------------------------------------------------------------------------


class TestParseIssues:
    def test_missing_semicolon(self):
        _, issues = parse_with_issues("print 1\n")
        assert len(issues) == 1
        issue = issues[0]
        assert isinstance(issue, UnterminatedStatement)
        assert issue.line == 1
        assert issue.token.lexeme == "print"

    def test_unterminated_grouping(self):
        _, issues = parse_with_issues("print (1 + 2;")
        assert issue_types_of(issues) == [UnterminatedGrouping]
        assert issues[0].opening.lexeme == "("

    def test_unterminated_block(self):
        _, issues = parse_with_issues("{ print 1;")
        assert issue_types_of(issues) == [UnterminatedGrouping]
        assert "'}'" in issues[0].message

    def test_unexpected_token(self):
        _, issues = parse_with_issues("print );")
        assert issues == [UnexpectedToken(issues[0].token)]
        assert issues[0].token.lexeme == ")"

    def test_unexpected_end_of_input(self):
        _, issues = parse_with_issues("print")
        assert issue_types_of(issues) == [UnexpectedToken]
        assert "end of input" in issues[0].message

    def test_dangling_comma_in_call(self):
        _, issues = parse_with_issues("f(1, 2,);")
        assert issue_types_of(issues) == [DanglingComma]

    def test_dangling_comma_in_parameters(self):
        _, issues = parse_with_issues("fun f(a,) {}")
        assert issue_types_of(issues) == [DanglingComma]

    def test_invalid_assignment_target_keeps_parsing(self):
        statements, issues = parse_with_issues("1 = 2; print 3;")
        assert issue_types_of(issues) == [InvalidAssignmentTarget]
        assert len(statements) == 2

    def test_too_many_arguments_reported_once(self):
        args = ", ".join(["1"] * 256)
        statements, issues = parse_with_issues(f"f({args});")
        assert issues == [ExceededMaximumFunctionArguments(256, 255, 1)]
        assert len(statements) == 1

    def test_too_many_parameters(self):
        params = ", ".join(f"p{i}" for i in range(256))
        _, issues = parse_with_issues(f"fun f({params}) {{}}")
        assert issues == [ExceededMaximumFunctionArguments(256, 255, 1)]

    def test_max_arguments_allowed(self):
        args = ", ".join(["1"] * 255)
        _, issues = parse_with_issues(f"f({args});")
        assert issues == []

    def test_classes_unsupported(self):
        _, issues = parse_with_issues("class Foo {}")
        assert issues == [UnsupportedFeature("classes", 1)]

    def test_this_unsupported(self):
        _, issues = parse_with_issues("print this;")
        assert issue_types_of(issues) == [UnsupportedFeature]


class TestRecovery:
    def test_multiple_errors_reported_in_one_pass(self):
        source = "var = 1;\nprint 2 + ;\nprint 3;"
        statements, issues = parse_with_issues(source)
        assert issue_types_of(issues) == [UnexpectedToken, UnexpectedToken]
        assert [issue.line for issue in issues] == [1, 2]
        # The valid statement after the errors still parses
        assert len(statements) == 1
        assert isinstance(statements[0], Print)

    def test_synchronizes_at_statement_keyword(self):
        statements, issues = parse_with_issues("var x = ) if (true) print 1;")
        assert len(issues) == 1
        assert isinstance(statements[0], If)

    def test_parse_raises_with_every_issue(self):
        with pytest.raises(ParseError) as exc_info:
            parse("print ;\nprint ;")
        assert issue_types(exc_info.value) == [UnexpectedToken, UnexpectedToken]
        assert exc_info.value.source == "print ;\nprint ;"

    def test_parse_error_message_lists_lines(self):
        with pytest.raises(ParseError, match="Line 2: unexpected ';'"):
            parse("print 1;\nprint ;")

    def test_nesting_too_deep_abandons_only_its_declaration(self):
        depth = 50000
        source = "print " + "(" * depth + "1" + ")" * depth + ";\nprint 2;"
        statements, issues = parse_with_issues(source)
        assert issue_types_of(issues) == [NestingTooDeep]
        assert issues[0].line == 1
        assert len(statements) == 1
        assert statements[0] == Print(Literal(2.0))


class TestParseTokens:
    def test_returns_statements(self):
        assert parse_tokens(tokenize("print 1;")) == [Print(Literal(1.0))]

    def test_raises_without_source(self):
        with pytest.raises(ParseError) as exc_info:
            parse_tokens(tokenize("print ;"))
        assert issue_types(exc_info.value) == [UnexpectedToken]
        assert exc_info.value.source == ""


def issue_types_of(issues):
    return [type(issue) for issue in issues]
