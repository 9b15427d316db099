"""
Structura AST (Abstract Syntax Tree) Definitions

Every node is a frozen dataclass with tuple children; the tree is built once
by the parser and never mutated. Source locations are carried for
diagnostics but excluded from equality.

Visitor Pattern Support:
- All AST nodes have accept() methods for polymorphic dispatch
- Declarations and statements dispatch to ASTVisitor, expressions to
  ExpressionVisitor (see ast_visitor.py)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, TypeVar, TYPE_CHECKING

from .source_location import SourceLocation
from .types import Type, BinaryOp

if TYPE_CHECKING:
    from .ast_visitor import ASTVisitor, ExpressionVisitor

T = TypeVar('T')


def _location():
    return field(default=None, compare=False, repr=False)


class ASTNode:
    """
    Base class for all AST nodes.

    Subclasses implement accept() to call the matching visit_* method.
    """
    __slots__ = ()
    location: Optional[SourceLocation]

    def accept(self, visitor):
        raise NotImplementedError(f"accept() not implemented for {self.__class__.__name__}")


class Statement(ASTNode):
    """Top-level declaration or statement inside a function body."""
    __slots__ = ()


class Expression(ASTNode):
    """Base class for expressions."""
    __slots__ = ()


# ============================================
# EXPRESSIONS
# ============================================

@dataclass(frozen=True)
class NumberLiteral(Expression):
    """Numeric literal; `text` is the source spelling (may carry a leading '-')."""
    text: str
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ExpressionVisitor[T]) -> T:
        return visitor.visit_number_literal(self)


@dataclass(frozen=True)
class StringLiteral(Expression):
    """String literal; `text` keeps its surrounding quotes."""
    text: str
    location: Optional[SourceLocation] = _location()

    @property
    def value(self) -> str:
        return self.text[1:-1]

    def accept(self, visitor: ExpressionVisitor[T]) -> T:
        return visitor.visit_string_literal(self)


@dataclass(frozen=True)
class Identifier(Expression):
    name: str
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ExpressionVisitor[T]) -> T:
        return visitor.visit_identifier(self)


@dataclass(frozen=True)
class BinaryExpr(Expression):
    op: BinaryOp
    left: Expression
    right: Expression
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ExpressionVisitor[T]) -> T:
        return visitor.visit_binary_expr(self)


@dataclass(frozen=True)
class CallExpr(Expression):
    callee: Expression
    args: Tuple[Expression, ...]
    location: Optional[SourceLocation] = _location()

    @property
    def callee_name(self) -> Optional[str]:
        """Name of the called function when the callee is a bare identifier."""
        return self.callee.name if isinstance(self.callee, Identifier) else None

    def accept(self, visitor: ExpressionVisitor[T]) -> T:
        return visitor.visit_call_expr(self)


@dataclass(frozen=True)
class MemberExpr(Expression):
    object: Expression
    property: str
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ExpressionVisitor[T]) -> T:
        return visitor.visit_member_expr(self)


@dataclass(frozen=True)
class Parameter(Expression):
    """`name: type` entry; only valid inside a declaration's parameter list."""
    name: str
    type: Type
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ExpressionVisitor[T]) -> T:
        return visitor.visit_parameter(self)


# ============================================
# STATEMENTS AND DECLARATIONS
# ============================================

@dataclass(frozen=True)
class TypeAliasDecl(Statement):
    """`Name = type;`"""
    name: str
    type: Type
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_type_alias_decl(self)


@dataclass(frozen=True)
class ReturnStatement(Statement):
    expr: Expression
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_return_statement(self)


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """
    `expr;` inside a body, or a top-level call statement `f(args): type;`
    whose trailing return-type ascription is kept in `return_type`.
    """
    expr: Expression
    return_type: Optional[Type] = None
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_expression_statement(self)


@dataclass(frozen=True)
class FunctionDecl(Statement):
    """
    `name(params): returnType { ... }` or the bodiless forward declaration
    `name(params): returnType;` (body is None).
    """
    name: str
    params: Tuple[Parameter, ...]
    return_type: Type
    body: Optional[Tuple[Statement, ...]] = None
    location: Optional[SourceLocation] = _location()

    @property
    def has_body(self) -> bool:
        return self.body is not None

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_function_decl(self)


@dataclass(frozen=True)
class Program(ASTNode):
    """Whole compilation unit, statements in source order."""
    statements: Tuple[Statement, ...]
    source_file: str = ""
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: ASTVisitor[T]) -> T:
        return visitor.visit_program(self)
