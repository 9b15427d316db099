#!/usr/bin/env python3
"""
Tests for constant folding and builtin tagging.
"""

from structura.ir.nodes import (
    BinaryIR, CallIR, ExpressionStatementIR, FunctionDeclIR, LiteralIR,
    ParameterIR, ProgramIR, ReturnStatementIR, VariableIR,
)
from structura.passes.base import CompilationContext
from structura.passes.const_folding import ConstantFolder, IROptimizer, optimize
from structura.shared.types import NUMBER, STRING, BinaryOp
from tests.test_utils import lower_source


def fold(expr):
    return expr.accept(ConstantFolder())


def lit(value):
    return LiteralIR(value, STRING if isinstance(value, str) else NUMBER)


class TestFolding:
    def test_numbers(self):
        assert fold(BinaryIR(BinaryOp.ADD, lit(2), lit(3))) == lit(5)

    def test_strings(self):
        assert fold(BinaryIR(BinaryOp.ADD, lit("a"), lit("b"))) == lit("ab")

    def test_mismatched_types_unchanged(self):
        node = BinaryIR(BinaryOp.ADD, lit(2), lit("b"))
        assert fold(node) == node

    def test_only_addition_folds(self):
        node = BinaryIR(BinaryOp.MUL, lit(2), lit(3))
        assert fold(node) == node

    def test_variable_operand_unchanged(self):
        node = BinaryIR(BinaryOp.ADD, VariableIR("a"), lit(1))
        assert fold(node) == node

    def test_nested_folds_bottom_up(self):
        node = BinaryIR(BinaryOp.ADD, BinaryIR(BinaryOp.ADD, lit(1), lit(2)), lit(3))
        assert fold(node) == lit(6)

    def test_partial_fold(self):
        node = BinaryIR(BinaryOp.MUL, VariableIR("a"), BinaryIR(BinaryOp.ADD, lit(1), lit(2)))
        assert fold(node) == BinaryIR(BinaryOp.MUL, VariableIR("a"), lit(3))

    def test_float_fold(self):
        assert fold(BinaryIR(BinaryOp.ADD, lit(1.5), lit(2))) == lit(3.5)

    def test_input_not_mutated(self):
        node = BinaryIR(BinaryOp.ADD, lit(2), lit(3))
        fold(node)
        assert node.left == lit(2)

    def test_fold_count(self):
        folder = ConstantFolder()
        BinaryIR(BinaryOp.ADD, BinaryIR(BinaryOp.ADD, lit(1), lit(2)), lit(3)).accept(folder)
        assert folder.fold_count == 2


class TestCalls:
    def test_builtin_call_untouched(self):
        call = CallIR(VariableIR("print"), (BinaryIR(BinaryOp.ADD, lit(1), lit(2)),), builtin=True)
        assert fold(call) is call

    def test_user_call_arguments_folded(self):
        call = CallIR(VariableIR("f"), (BinaryIR(BinaryOp.ADD, lit(1), lit(2)),))
        assert fold(call) == CallIR(VariableIR("f"), (lit(3),))


class TestProgram:
    def test_body_and_top_level_folded(self):
        ir = optimize(lower_source(
            'greet(): string { return "a" + "b"; }\n'
            "twice(a: number): number;\n"
            "twice(2 + 3): number;"
        ))
        assert ir.statements[0].body == (ReturnStatementIR(lit("ab")),)
        assert ir.statements[2].expr.args == (lit(5),)

    def test_bodiless_functions_tagged_builtin(self):
        ir = optimize(lower_source("abs(a: number): number;\nhelper(a: number): number;"))
        assert all(func.builtin for func in ir.functions)

    def test_bodied_functions_not_tagged(self):
        ir = optimize(lower_source("f(a: number): number { return a; }"))
        assert not ir.functions[0].builtin

    def test_empty_ir_body_tagged_builtin(self):
        func = FunctionDeclIR("f", (ParameterIR("a", NUMBER),), NUMBER, body=())
        program = ProgramIR((func,))
        assert optimize(program).functions[0].builtin

    def test_idempotent(self):
        ir = lower_source(
            "abs(a: number): number;\n"
            'label(s: string): string { return "x" + "y" + s; }\n'
            "print(abs(-5)): number;"
        )
        once = optimize(ir)
        assert optimize(once) == once

    def test_pass_returns_new_program(self):
        ir = ProgramIR((ExpressionStatementIR(BinaryIR(BinaryOp.ADD, lit(1), lit(1))),))
        result = IROptimizer().run(ir, CompilationContext())
        assert result is not ir
        assert result.statements[0].expr == lit(2)
        assert isinstance(ir.statements[0].expr, BinaryIR)
