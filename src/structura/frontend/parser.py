"""
Parser

Recursive descent over the lexer's token list with one token of lookahead,
plus a bounded scan past `name(` to tell a function declaration from a
top-level call statement. Binary expressions use precedence climbing over
BINARY_PRECEDENCE. The first unexpected token aborts the whole parse.
"""

import logging
from typing import List, Optional, Tuple

from ..shared.builtins import is_reserved
from ..shared.errors import ParseError, ReservedNameViolation
from ..shared.nodes import (
    Program, Statement, Expression, TypeAliasDecl, FunctionDecl,
    ExpressionStatement, ReturnStatement, Parameter, NumberLiteral,
    StringLiteral, Identifier, BinaryExpr, CallExpr, MemberExpr,
)
from ..shared.source_location import SourceLocation
from ..shared.types import Type, AliasType, BinaryOp, BINARY_PRECEDENCE, parse_type_literal
from ..utils.config import DEFAULT_SOURCE_FILE
from .lexer import Token, TokenKind, TYPE_LITERAL_PATTERN, tokenize

logger = logging.getLogger("structura.frontend.parser")

_NAME_KINDS = (TokenKind.IDENTIFIER, TokenKind.KEYWORD)


def describe(token: Token) -> str:
    """Human-readable token description for 'found ...' messages."""
    if token.kind is TokenKind.EOF:
        return "end of input"
    return f"{token.kind.value} '{token.text}'"


def type_from_text(text: str) -> Type:
    """Type-literal text becomes a type; any other name is an alias reference."""
    if TYPE_LITERAL_PATTERN.fullmatch(text):
        return parse_type_literal(text)
    return AliasType(text)


class Parser:
    """
    Parser: token list → Program.

    Stateless; each parse() call runs on its own cursor so one instance can
    be shared between compilations.
    """

    def parse(self, tokens: List[Token], source_file: str = DEFAULT_SOURCE_FILE) -> Program:
        program = _ParseRun(tokens, source_file).parse_program()
        logger.debug(f"Parsed {source_file}: {len(program.statements)} top-level statements")
        return program

    def parse_source(self, source: str, source_file: str = DEFAULT_SOURCE_FILE) -> Program:
        """Tokenize and parse in one step."""
        return self.parse(tokenize(source, source_file), source_file)


class _ParseRun:
    """Cursor state for a single parse."""

    def __init__(self, tokens: List[Token], source_file: str):
        if not tokens or tokens[-1].kind is not TokenKind.EOF:
            last_line = tokens[-1].line if tokens else 1
            tokens = list(tokens) + [Token(TokenKind.EOF, "", last_line)]
        self.tokens = tokens
        self.source_file = source_file
        self.position = 0

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        index = self.position + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return self.tokens[-1]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind is not TokenKind.EOF:
            self.position += 1
        return token

    def location(self, token: Token) -> SourceLocation:
        return SourceLocation(
            self.source_file, token.line, token.column,
            end_line=token.line, end_column=token.column + max(len(token.text), 1),
        )

    def error(self, expected: str, token: Optional[Token] = None) -> ParseError:
        token = token or self.peek()
        return ParseError(expected, describe(token), self.location(token))

    def expect(self, kind: TokenKind, text: Optional[str] = None) -> Token:
        token = self.peek()
        if token.kind is kind and (text is None or token.text == text):
            return self.advance()
        expected = f"'{text}'" if text is not None else kind.value
        raise self.error(expected, token)

    def expect_symbol(self, text: str) -> Token:
        return self.expect(TokenKind.SYMBOL, text)

    def expect_name(self) -> Token:
        token = self.peek()
        if token.kind in _NAME_KINDS:
            return self.advance()
        raise self.error("identifier", token)

    # ------------------------------------------------------------------
    # Top level
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        statements: List[Statement] = []
        while self.peek().kind is not TokenKind.EOF:
            current = self.peek()
            if current.kind in _NAME_KINDS:
                following = self.peek(1)
                if following.is_symbol("="):
                    statements.append(self.parse_type_alias())
                elif following.is_symbol("("):
                    if self.is_declaration():
                        statements.append(self.parse_function_decl())
                    else:
                        statements.append(self.parse_call_statement())
                else:
                    raise self.error("'=' or '('", following)
            elif current.is_symbol(";"):
                self.advance()
            else:
                raise self.error("declaration or call statement", current)
        return Program(tuple(statements), self.source_file, self.location(self.tokens[0]))

    def is_declaration(self) -> bool:
        """
        Cursor is on `name` and the next token is `(`: a declaration has an
        empty parameter list or starts with `identifier :`.
        """
        first = self.peek(2)
        if first.is_symbol(")"):
            return True
        return first.kind is TokenKind.IDENTIFIER and self.peek(3).is_symbol(":")

    def parse_type_alias(self) -> TypeAliasDecl:
        name = self.expect(TokenKind.IDENTIFIER)
        self.expect_symbol("=")
        alias_type = self.parse_type_annotation()
        self.expect_symbol(";")
        return TypeAliasDecl(name.text, alias_type, self.location(name))

    def parse_type_annotation(self) -> Type:
        token = self.peek()
        if token.kind is TokenKind.TYPE:
            return parse_type_literal(self.advance().text)
        if token.kind is TokenKind.IDENTIFIER:
            return AliasType(self.advance().text)
        raise self.error("type annotation", token)

    def parse_return_type(self) -> Type:
        return type_from_text(self.expect(TokenKind.RETURN_TYPE).text)

    def parse_function_decl(self) -> FunctionDecl:
        name = self.expect_name()
        self.expect_symbol("(")
        params = self.parse_parameters()
        self.expect_symbol(")")
        return_type = self.parse_return_type()

        body: Optional[Tuple[Statement, ...]] = None
        if self.peek().is_symbol("{"):
            if is_reserved(name.text):
                raise ReservedNameViolation(name.text, self.location(name))
            body = self.parse_function_body()
        else:
            self.expect_symbol(";")
        return FunctionDecl(name.text, params, return_type, body, self.location(name))

    def parse_parameters(self) -> Tuple[Parameter, ...]:
        params: List[Parameter] = []
        if self.peek().is_symbol(")"):
            return ()
        params.append(self.parse_parameter())
        while self.peek().is_symbol(","):
            self.advance()
            params.append(self.parse_parameter())
        return tuple(params)

    def parse_parameter(self) -> Parameter:
        name = self.peek()
        if name.kind is not TokenKind.IDENTIFIER or not self.peek(1).is_symbol(":"):
            raise self.error("parameter 'name: type'", name)
        self.advance()
        self.expect_symbol(":")
        return Parameter(name.text, self.parse_type_annotation(), self.location(name))

    def parse_call_statement(self) -> ExpressionStatement:
        name = self.expect_name()
        callee = Identifier(name.text, self.location(name))
        self.expect_symbol("(")
        args = self.parse_arguments()
        self.expect_symbol(")")
        return_type = None
        if self.peek().kind is TokenKind.RETURN_TYPE:
            return_type = self.parse_return_type()
        self.expect_symbol(";")
        call = CallExpr(callee, args, self.location(name))
        return ExpressionStatement(call, return_type, self.location(name))

    # ------------------------------------------------------------------
    # Function bodies
    # ------------------------------------------------------------------

    def parse_function_body(self) -> Tuple[Statement, ...]:
        self.expect_symbol("{")
        statements: List[Statement] = []
        while not self.peek().is_symbol("}"):
            if self.peek().kind is TokenKind.EOF:
                raise self.error("'}'")
            statements.append(self.parse_statement())
        self.expect_symbol("}")
        return tuple(statements)

    def parse_statement(self) -> Statement:
        token = self.peek()
        if token.kind is TokenKind.KEYWORD and token.text == "return":
            self.advance()
            expr = self.parse_expression()
            self.expect_symbol(";")
            return ReturnStatement(expr, self.location(token))
        expr = self.parse_expression()
        self.expect_symbol(";")
        return ExpressionStatement(expr, None, self.location(token))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def parse_arguments(self) -> Tuple[Expression, ...]:
        if self.peek().is_symbol(")"):
            return ()
        args = [self.parse_expression()]
        while self.peek().is_symbol(","):
            self.advance()
            args.append(self.parse_expression())
        return tuple(args)

    def parse_expression(self) -> Expression:
        return self.parse_binary(0)

    def parse_binary(self, min_precedence: int) -> Expression:
        left = self.parse_postfix()
        while True:
            token = self.peek()
            if token.kind is not TokenKind.OPERATOR:
                break
            precedence = BINARY_PRECEDENCE.get(token.text)
            if precedence is None or precedence < min_precedence:
                break
            self.advance()
            right = self.parse_binary(precedence + 1)
            left = BinaryExpr(BinaryOp.from_symbol(token.text), left, right, self.location(token))
        return left

    def parse_postfix(self) -> Expression:
        """Primary expression followed by any chain of `.name` and `(args)`."""
        expr = self.parse_primary()
        while True:
            token = self.peek()
            if token.is_symbol("."):
                self.advance()
                prop = self.expect_name()
                expr = MemberExpr(expr, prop.text, self.location(prop))
            elif token.is_symbol("("):
                self.advance()
                args = self.parse_arguments()
                self.expect_symbol(")")
                expr = CallExpr(expr, args, expr.location)
            else:
                return expr

    def parse_primary(self) -> Expression:
        token = self.peek()
        if token.kind is TokenKind.NUMBER_LITERAL:
            self.advance()
            return NumberLiteral(token.text, self.location(token))
        if token.kind is TokenKind.STRING_LITERAL:
            self.advance()
            return StringLiteral(token.text, self.location(token))
        if token.kind is TokenKind.IDENTIFIER or (token.kind is TokenKind.KEYWORD and token.text != "return"):
            self.advance()
            return Identifier(token.text, self.location(token))
        if token.is_symbol("("):
            self.advance()
            expr = self.parse_expression()
            self.expect_symbol(")")
            return expr
        raise self.error("expression", token)


def parse(tokens: List[Token], source_file: str = DEFAULT_SOURCE_FILE) -> Program:
    """Parse a token list; raises ParseError at the first unexpected token."""
    return Parser().parse(tokens, source_file)
