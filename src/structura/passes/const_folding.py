"""
Const Folding Pass

IR optimizer: folds `+` over two literals of the same type and tags bodiless
functions as runtime-library builtins. Every rewrite builds new nodes, and
running the pass on its own output changes nothing.
"""

import logging
from dataclasses import replace

from ..ir.nodes import (
    BinaryIR, CallIR, ExpressionIR, ExpressionStatementIR, FunctionDeclIR,
    IRNode, IRVisitor, LiteralIR, MemberIR, ParameterIR, ProgramIR,
    ReturnStatementIR, TypeAliasIR, VariableIR,
)
from ..shared.types import BinaryOp, NUMBER, STRING
from .base import BasePass, CompilationContext

logger = logging.getLogger("structura.passes.const_folding")

_FOLDABLE_TYPES = (NUMBER, STRING)


class IROptimizer(BasePass):
    """
    Constant folding and builtin tagging over the whole program.
    """

    def run(self, ir: ProgramIR, ctx: CompilationContext) -> ProgramIR:
        folder = ConstantFolder()
        optimized = ir.accept(folder)
        logger.debug(f"Constant folding: {folder.fold_count} folds, {folder.builtin_count} builtin declarations")
        return optimized


class ConstantFolder(IRVisitor[IRNode]):
    """
    Returns the optimized replacement for each node it visits.
    """

    def __init__(self):
        self.fold_count = 0
        self.builtin_count = 0

    def fold_expression(self, expr: ExpressionIR) -> ExpressionIR:
        return expr.accept(self)

    def visit_program(self, node: ProgramIR) -> ProgramIR:
        return replace(node, statements=tuple(stmt.accept(self) for stmt in node.statements))

    def visit_function_decl(self, node: FunctionDeclIR) -> FunctionDeclIR:
        if node.has_body:
            return replace(node, body=tuple(stmt.accept(self) for stmt in node.body))
        self.builtin_count += 1
        return replace(node, builtin=True)

    def visit_parameter(self, node: ParameterIR) -> ParameterIR:
        return node

    def visit_type_alias(self, node: TypeAliasIR) -> TypeAliasIR:
        return node

    def visit_expression_statement(self, node: ExpressionStatementIR) -> ExpressionStatementIR:
        return replace(node, expr=self.fold_expression(node.expr))

    def visit_return_statement(self, node: ReturnStatementIR) -> ReturnStatementIR:
        return replace(node, expr=self.fold_expression(node.expr))

    def visit_literal(self, node: LiteralIR) -> LiteralIR:
        return node

    def visit_variable(self, node: VariableIR) -> VariableIR:
        return node

    def visit_member(self, node: MemberIR) -> MemberIR:
        return node

    def visit_binary(self, node: BinaryIR) -> ExpressionIR:
        left = self.fold_expression(node.left)
        right = self.fold_expression(node.right)
        if (
            node.op is BinaryOp.ADD
            and isinstance(left, LiteralIR)
            and isinstance(right, LiteralIR)
            and left.type == right.type
            and left.type in _FOLDABLE_TYPES
        ):
            self.fold_count += 1
            logger.debug(f"Folded {left.value!r} + {right.value!r}")
            return LiteralIR(left.value + right.value, left.type, node.location)
        return replace(node, left=left, right=right)

    def visit_call(self, node: CallIR) -> CallIR:
        # Builtin calls are never rewritten.
        if node.builtin:
            return node
        return replace(
            node,
            callee=self.fold_expression(node.callee),
            args=tuple(self.fold_expression(arg) for arg in node.args),
        )


def optimize(ir: ProgramIR) -> ProgramIR:
    """Run constant folding on `ir` outside a pass manager."""
    return IROptimizer().run(ir, CompilationContext())
