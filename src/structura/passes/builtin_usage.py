"""
Builtin Usage Pass: finds which reserved functions the program calls.

Walks the whole optimized IR, function bodies included, and records every
reserved callee name in first-call order. The emitter synthesizes
forwarding stubs for exactly these names and no others.
"""

import logging
from typing import List

from ..ir.nodes import (
    BinaryIR, CallIR, ExpressionStatementIR, FunctionDeclIR, MemberIR,
    ProgramIR, ReturnStatementIR,
)
from ..shared.builtins import is_reserved
from .base import BasePass, CompilationContext
from .const_folding import IROptimizer

logger = logging.getLogger("structura.passes.builtin_usage")


def _collect_builtin_calls(node, found: List[str]) -> None:
    """Recursively collect reserved callee names reachable from an IR node."""
    if node is None:
        return

    if isinstance(node, CallIR):
        name = node.callee_name
        if name is not None and is_reserved(name) and name not in found:
            found.append(name)
        _collect_builtin_calls(node.callee, found)
        for arg in node.args:
            _collect_builtin_calls(arg, found)
        return

    if isinstance(node, BinaryIR):
        _collect_builtin_calls(node.left, found)
        _collect_builtin_calls(node.right, found)
        return

    if isinstance(node, MemberIR):
        _collect_builtin_calls(node.object, found)
        return

    if isinstance(node, (ExpressionStatementIR, ReturnStatementIR)):
        _collect_builtin_calls(node.expr, found)
        return

    if isinstance(node, FunctionDeclIR):
        for stmt in node.body or ():
            _collect_builtin_calls(stmt, found)
        return

    if isinstance(node, ProgramIR):
        for stmt in node.statements:
            _collect_builtin_calls(stmt, found)
        return


def collect_called_builtins(ir: ProgramIR) -> List[str]:
    """Reserved function names called anywhere in `ir`, in first-call order."""
    found: List[str] = []
    _collect_builtin_calls(ir, found)
    return found


class BuiltinUsagePass(BasePass):
    """
    Analysis pass; stores the called builtin names on the context and
    returns the IR unchanged.
    """
    requires = [IROptimizer]

    def run(self, ir: ProgramIR, ctx: CompilationContext) -> ProgramIR:
        called = collect_called_builtins(ir)
        ctx.set_analysis(BuiltinUsagePass, called)
        logger.debug(f"Builtins called: {called}")
        return ir
