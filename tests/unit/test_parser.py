#!/usr/bin/env python3
"""
Tests for the parser: top-level dispatch, declarations, expressions.
"""

import pytest
from structura.frontend.lexer import tokenize
from structura.frontend.parser import Parser, parse, type_from_text
from structura.shared.builtins import RESERVED_BUILTINS
from structura.shared.errors import ParseError, ReservedNameViolation
from structura.shared.nodes import (
    BinaryExpr, CallExpr, ExpressionStatement, FunctionDecl, Identifier,
    MemberExpr, NumberLiteral, Parameter, ReturnStatement, StringLiteral,
    TypeAliasDecl,
)
from structura.shared.types import (
    ANY, NUMBER, STRING, AliasType, ArrayType, BinaryOp, UnionType,
)
from tests.test_utils import parse_source


def parse_expr(text):
    """Parse `text` as the single return expression of a function body."""
    program = parse_source(f"f(): any {{ return {text}; }}")
    return program.statements[0].body[0].expr


class TestTopLevel:
    def test_type_alias(self):
        program = parse_source("MixedArr = string|number[];")
        assert program.statements == (
            TypeAliasDecl("MixedArr", UnionType((STRING, ArrayType(NUMBER)))),
        )

    def test_alias_of_alias(self):
        program = parse_source("A = B;")
        assert program.statements[0].type == AliasType("B")

    def test_bodiless_declaration(self):
        stmt = parse_source("abs(a: number): number;").statements[0]
        assert stmt == FunctionDecl("abs", (Parameter("a", NUMBER),), NUMBER, None)
        assert not stmt.has_body

    def test_declaration_with_body(self):
        stmt = parse_source("add(a: number, b: number): number { return a + b; }").statements[0]
        assert isinstance(stmt, FunctionDecl)
        assert stmt.has_body
        assert stmt.body == (
            ReturnStatement(BinaryExpr(BinaryOp.ADD, Identifier("a"), Identifier("b"))),
        )

    def test_empty_parameter_list_is_declaration(self):
        stmt = parse_source("answer(): number { return 42; }").statements[0]
        assert isinstance(stmt, FunctionDecl)
        assert stmt.params == ()

    def test_call_statement(self):
        stmt = parse_source("print(abs(-5)): number;").statements[0]
        assert stmt == ExpressionStatement(
            CallExpr(Identifier("print"), (
                CallExpr(Identifier("abs"), (NumberLiteral("-5"),)),
            )),
            NUMBER,
        )

    def test_call_statement_without_ascription(self):
        stmt = parse_source("print(1);").statements[0]
        assert isinstance(stmt, ExpressionStatement)
        assert stmt.return_type is None

    def test_call_with_identifier_argument_is_call(self):
        stmt = parse_source("f(x): number;").statements[0]
        assert isinstance(stmt, ExpressionStatement)

    def test_alias_return_type(self):
        stmt = parse_source("f(a: number): Score;").statements[0]
        assert stmt.return_type == AliasType("Score")

    def test_alias_parameter_type(self):
        stmt = parse_source("f(a: MixedArr): any;").statements[0]
        assert stmt.params[0].type == AliasType("MixedArr")

    def test_stray_semicolons(self):
        program = parse_source(";; A = number; ;")
        assert len(program.statements) == 1

    def test_statements_in_source_order(self):
        program = parse_source("A = number;\nf(a: A): A;\nf(1): A;")
        assert [type(s).__name__ for s in program.statements] == [
            "TypeAliasDecl", "FunctionDecl", "ExpressionStatement",
        ]

    def test_locations(self):
        program = parse_source("A = number;\n  f(a: A): A;")
        assert program.statements[1].location.line == 2
        assert program.statements[1].location.column == 3

    def test_module_level_parse(self):
        program = parse(tokenize("A = number;"))
        assert len(program.statements) == 1

    def test_parser_is_reusable(self):
        parser = Parser()
        first = parser.parse(tokenize("A = number;"))
        second = parser.parse(tokenize("B = string;"))
        assert first.statements[0].name == "A"
        assert second.statements[0].name == "B"


class TestExpressions:
    def test_precedence(self):
        expr = parse_expr("1 + 2 * 3")
        assert expr == BinaryExpr(
            BinaryOp.ADD, NumberLiteral("1"),
            BinaryExpr(BinaryOp.MUL, NumberLiteral("2"), NumberLiteral("3")),
        )

    def test_left_associativity(self):
        expr = parse_expr("a - b - c")
        assert expr == BinaryExpr(
            BinaryOp.SUB,
            BinaryExpr(BinaryOp.SUB, Identifier("a"), Identifier("b")),
            Identifier("c"),
        )

    def test_full_precedence_table(self):
        expr = parse_expr("a || b && c == d < e + f * g")
        assert expr.op is BinaryOp.OR
        assert expr.right.op is BinaryOp.AND
        assert expr.right.right.op is BinaryOp.EQ
        assert expr.right.right.right.op is BinaryOp.LT
        assert expr.right.right.right.right.op is BinaryOp.ADD
        assert expr.right.right.right.right.right.op is BinaryOp.MUL

    def test_parentheses(self):
        expr = parse_expr("(a + b) * c")
        assert expr.op is BinaryOp.MUL
        assert expr.left == BinaryExpr(BinaryOp.ADD, Identifier("a"), Identifier("b"))

    def test_member_and_call_chain(self):
        expr = parse_expr("a.b(c).d")
        assert expr == MemberExpr(
            CallExpr(MemberExpr(Identifier("a"), "b"), (Identifier("c"),)),
            "d",
        )

    def test_keyword_member_name(self):
        expr = parse_expr("s.toUpperCase()")
        assert expr == CallExpr(MemberExpr(Identifier("s"), "toUpperCase"), ())

    def test_string_literal(self):
        expr = parse_expr("'hi'")
        assert expr == StringLiteral("'hi'")
        assert expr.value == "hi"

    def test_keyword_call_in_body(self):
        expr = parse_expr("capitalize(x)")
        assert expr == CallExpr(Identifier("capitalize"), (Identifier("x"),))

    def test_expression_statement_in_body(self):
        stmt = parse_source("f(): any { print(1); return 2; }").statements[0]
        assert isinstance(stmt.body[0], ExpressionStatement)
        assert isinstance(stmt.body[1], ReturnStatement)


class TestTypes:
    def test_type_from_text(self):
        assert type_from_text("number") == NUMBER
        assert type_from_text("any") == ANY
        assert type_from_text("string|number[]") == UnionType((STRING, ArrayType(NUMBER)))
        assert type_from_text("Score") == AliasType("Score")


class TestReservedNames:
    @pytest.mark.parametrize("name", sorted(RESERVED_BUILTINS))
    def test_reserved_declaration_with_body(self, name):
        with pytest.raises(ReservedNameViolation) as exc_info:
            parse_source(f"{name}(a: number): number {{ return a; }}")
        assert exc_info.value.name == name

    @pytest.mark.parametrize("name", sorted(RESERVED_BUILTINS))
    def test_reserved_declaration_with_empty_body(self, name):
        with pytest.raises(ReservedNameViolation):
            parse_source(f"{name}(): any {{ }}")

    def test_bodiless_reserved_declaration_parses(self):
        program = parse_source("abs(a: number): number;")
        assert program.statements[0].name == "abs"


class TestParseErrors:
    def test_missing_semicolon_after_alias(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source("A = number")
        assert exc_info.value.expected == "';'"
        assert exc_info.value.found == "end of input"

    def test_missing_return_type(self):
        with pytest.raises(ParseError):
            parse_source("f(a: number);")

    def test_parameter_without_type(self):
        with pytest.raises(ParseError):
            parse_source("f(a: number, b): number;")

    def test_unexpected_top_level_token(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source("42;")
        assert "NUMBER_LITERAL '42'" in exc_info.value.found

    def test_name_without_paren_or_equals(self):
        with pytest.raises(ParseError):
            parse_source("abs;")

    def test_unclosed_body(self):
        with pytest.raises(ParseError):
            parse_source("f(): number { return 1;")

    def test_error_line(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source("A = number;\nB = ;")
        assert exc_info.value.line == 2

    def test_zero_argument_call_is_a_declaration(self):
        with pytest.raises(ParseError):
            parse_source("answer();")

    def test_alias_name_must_be_identifier(self):
        with pytest.raises(ParseError):
            parse_source("print = number;")
