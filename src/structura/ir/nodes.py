"""
IR Nodes

Flattened, validated form of the program produced after type checking and
consumed by the optimizer, the emitters and the dumpers.

Design:
- Frozen dataclasses with tuple children; passes build new nodes instead of
  mutating shared ones, so a folded literal may be referenced from several
  parents safely.
- Source locations ride along for diagnostics but are excluded from
  equality, which keeps optimize(optimize(ir)) == optimize(ir) structural.
- Every node dispatches through accept() to an IRVisitor whose methods are
  all abstract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, Optional, Tuple, TypeVar, Union

from ..shared.source_location import SourceLocation
from ..shared.types import Type, BinaryOp

T = TypeVar('T')

LiteralValue = Union[int, float, str]


def _location():
    return field(default=None, compare=False, repr=False)


class IRNode:
    """Base class for all IR nodes."""
    __slots__ = ()
    location: Optional[SourceLocation]

    def accept(self, visitor: IRVisitor[T]) -> T:
        raise NotImplementedError(f"accept() not implemented for {self.__class__.__name__}")


class ExpressionIR(IRNode):
    """Expression in IR."""
    __slots__ = ()


class StatementIR(IRNode):
    """Top-level or body statement in IR."""
    __slots__ = ()


# ============================================
# EXPRESSIONS
# ============================================

@dataclass(frozen=True)
class LiteralIR(ExpressionIR):
    """Literal value; strings are stored without their quotes."""
    value: LiteralValue
    type: Type
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_literal(self)


@dataclass(frozen=True)
class VariableIR(ExpressionIR):
    name: str
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_variable(self)


@dataclass(frozen=True)
class BinaryIR(ExpressionIR):
    op: BinaryOp
    left: ExpressionIR
    right: ExpressionIR
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_binary(self)


@dataclass(frozen=True)
class CallIR(ExpressionIR):
    """Call; `builtin` is set when the callee names a reserved function."""
    callee: ExpressionIR
    args: Tuple[ExpressionIR, ...]
    builtin: bool = False
    location: Optional[SourceLocation] = _location()

    @property
    def callee_name(self) -> Optional[str]:
        return self.callee.name if isinstance(self.callee, VariableIR) else None

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_call(self)


@dataclass(frozen=True)
class MemberIR(ExpressionIR):
    object: ExpressionIR
    property: str
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_member(self)


# ============================================
# DECLARATIONS AND STATEMENTS
# ============================================

@dataclass(frozen=True)
class ParameterIR(IRNode):
    name: str
    type: Type
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_parameter(self)


@dataclass(frozen=True)
class ExpressionStatementIR(StatementIR):
    expr: ExpressionIR
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_expression_statement(self)


@dataclass(frozen=True)
class ReturnStatementIR(StatementIR):
    expr: ExpressionIR
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_return_statement(self)


@dataclass(frozen=True)
class TypeAliasIR(StatementIR):
    """Documentation only; never executed."""
    alias: str
    type_annotation: Type
    location: Optional[SourceLocation] = _location()

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_type_alias(self)


@dataclass(frozen=True)
class FunctionDeclIR(StatementIR):
    """
    Function declaration. A None or empty body means the function is
    supplied by the runtime library and `builtin` is set by the optimizer.
    """
    name: str
    params: Tuple[ParameterIR, ...]
    return_type: Type
    body: Optional[Tuple[StatementIR, ...]] = None
    builtin: bool = False
    location: Optional[SourceLocation] = _location()

    @property
    def has_body(self) -> bool:
        return bool(self.body)

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_function_decl(self)


@dataclass(frozen=True)
class ProgramIR(IRNode):
    """Top-level IR list in source order."""
    statements: Tuple[StatementIR, ...]
    source_file: str = ""
    location: Optional[SourceLocation] = _location()

    @property
    def functions(self) -> Tuple[FunctionDeclIR, ...]:
        return tuple(s for s in self.statements if isinstance(s, FunctionDeclIR))

    @property
    def aliases(self) -> Tuple[TypeAliasIR, ...]:
        return tuple(s for s in self.statements if isinstance(s, TypeAliasIR))

    @property
    def top_level_statements(self) -> Tuple[ExpressionStatementIR, ...]:
        return tuple(s for s in self.statements if isinstance(s, ExpressionStatementIR))

    def accept(self, visitor: IRVisitor[T]) -> T:
        return visitor.visit_program(self)


class IRVisitor(ABC, Generic[T]):
    """
    Visitor for IR nodes (no isinstance needed).
    """

    @abstractmethod
    def visit_program(self, node: ProgramIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_function_decl(self, node: FunctionDeclIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_parameter(self, node: ParameterIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_type_alias(self, node: TypeAliasIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_expression_statement(self, node: ExpressionStatementIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_return_statement(self, node: ReturnStatementIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_literal(self, node: LiteralIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_variable(self, node: VariableIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_binary(self, node: BinaryIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_call(self, node: CallIR) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_member(self, node: MemberIR) -> T:
        raise NotImplementedError
