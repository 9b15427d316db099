"""
AST Visitor Pattern

Abstract visitors over the AST node families in nodes.py. Every visit_*
method is abstract, so a visitor that forgets a node kind cannot be
instantiated.

- ExpressionVisitor: expression nodes (and Parameter, which only appears in
  declaration parameter lists)
- ASTVisitor: ExpressionVisitor plus declarations, statements and Program
"""

from typing import TypeVar, Generic, TYPE_CHECKING
from abc import ABC, abstractmethod

if TYPE_CHECKING:
    from .nodes import (
        NumberLiteral, StringLiteral, Identifier, BinaryExpr, CallExpr,
        MemberExpr, Parameter, TypeAliasDecl, FunctionDecl,
        ExpressionStatement, ReturnStatement, Program,
    )

T = TypeVar('T')


class ExpressionVisitor(ABC, Generic[T]):
    """Visitor over expression nodes."""

    @abstractmethod
    def visit_number_literal(self, node: "NumberLiteral") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_string_literal(self, node: "StringLiteral") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_identifier(self, node: "Identifier") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_binary_expr(self, node: "BinaryExpr") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_call_expr(self, node: "CallExpr") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_member_expr(self, node: "MemberExpr") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_parameter(self, node: "Parameter") -> T:
        raise NotImplementedError


class ASTVisitor(ExpressionVisitor[T]):
    """Visitor over the whole AST."""

    @abstractmethod
    def visit_program(self, node: "Program") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_type_alias_decl(self, node: "TypeAliasDecl") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_function_decl(self, node: "FunctionDecl") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_expression_statement(self, node: "ExpressionStatement") -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_return_statement(self, node: "ReturnStatement") -> T:
        raise NotImplementedError
