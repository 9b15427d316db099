"""
AST to IR Lowering

Pure structural lowering, one IR node per AST node. Runs after type
checking, so it validates nothing; an AST node without a lowering rule is
reported as UnsupportedNode.
"""

import logging
from typing import Optional, Tuple

from ..ir.nodes import (
    BinaryIR, CallIR, ExpressionIR, ExpressionStatementIR, FunctionDeclIR,
    IRNode, LiteralIR, MemberIR, ParameterIR, ProgramIR, ReturnStatementIR,
    StatementIR, TypeAliasIR, VariableIR,
)
from ..shared.ast_visitor import ASTVisitor
from ..shared.builtins import is_reserved
from ..shared.errors import UnsupportedNode
from ..shared.nodes import (
    ASTNode, BinaryExpr, CallExpr, ExpressionStatement, FunctionDecl,
    Identifier, MemberExpr, NumberLiteral, Parameter, Program,
    ReturnStatement, StringLiteral, TypeAliasDecl,
)
from ..shared.types import NUMBER, STRING

logger = logging.getLogger("structura.passes.ast_to_ir")


def parse_number(text: str):
    """Integral spellings become int, everything else float."""
    if "." in text:
        return float(text)
    return int(text)


class ASTToIRLowerer(ASTVisitor[IRNode]):
    """
    Visitor that returns the IR node for each AST node.
    """

    def lower_program(self, program: Program) -> ProgramIR:
        return program.accept(self)

    def lower(self, node: ASTNode) -> IRNode:
        if not isinstance(node, ASTNode) or type(node).accept is ASTNode.accept:
            raise UnsupportedNode(type(node).__name__, getattr(node, "location", None))
        return node.accept(self)

    def _lower_body(self, body: Optional[Tuple]) -> Optional[Tuple[StatementIR, ...]]:
        if body is None:
            return None
        return tuple(self.lower(stmt) for stmt in body)

    # Declarations and statements

    def visit_program(self, node: Program) -> ProgramIR:
        statements = tuple(self.lower(stmt) for stmt in node.statements)
        logger.debug(f"Lowered {len(statements)} top-level statements from {node.source_file}")
        return ProgramIR(statements, node.source_file, node.location)

    def visit_type_alias_decl(self, node: TypeAliasDecl) -> TypeAliasIR:
        return TypeAliasIR(node.name, node.type, node.location)

    def visit_function_decl(self, node: FunctionDecl) -> FunctionDeclIR:
        params = tuple(self.lower(p) for p in node.params)
        return FunctionDeclIR(
            node.name, params, node.return_type,
            body=self._lower_body(node.body),
            location=node.location,
        )

    def visit_parameter(self, node: Parameter) -> ParameterIR:
        return ParameterIR(node.name, node.type, node.location)

    def visit_expression_statement(self, node: ExpressionStatement) -> ExpressionStatementIR:
        return ExpressionStatementIR(self.lower(node.expr), node.location)

    def visit_return_statement(self, node: ReturnStatement) -> ReturnStatementIR:
        return ReturnStatementIR(self.lower(node.expr), node.location)

    # Expressions

    def visit_number_literal(self, node: NumberLiteral) -> LiteralIR:
        return LiteralIR(parse_number(node.text), NUMBER, node.location)

    def visit_string_literal(self, node: StringLiteral) -> LiteralIR:
        return LiteralIR(node.value, STRING, node.location)

    def visit_identifier(self, node: Identifier) -> VariableIR:
        return VariableIR(node.name, node.location)

    def visit_binary_expr(self, node: BinaryExpr) -> BinaryIR:
        return BinaryIR(node.op, self.lower(node.left), self.lower(node.right), node.location)

    def visit_call_expr(self, node: CallExpr) -> CallIR:
        callee: ExpressionIR = self.lower(node.callee)
        args = tuple(self.lower(arg) for arg in node.args)
        builtin = node.callee_name is not None and is_reserved(node.callee_name)
        return CallIR(callee, args, builtin, node.location)

    def visit_member_expr(self, node: MemberExpr) -> MemberIR:
        return MemberIR(self.lower(node.object), node.property, node.location)


def generate(program: Program) -> ProgramIR:
    """Lower a type-checked program to IR."""
    return ASTToIRLowerer().lower_program(program)
