#!/usr/bin/env python3
"""
End-to-end compilations through the driver, source text to JavaScript.
"""

import pytest
from structura.ir.nodes import BinaryIR, ExpressionStatementIR, LiteralIR, ProgramIR
from structura.passes.const_folding import optimize
from structura.shared.builtins import RESERVED_BUILTINS
from structura.shared.errors import (
    InvalidLiteralArgument, ReservedNameViolation, TypeMismatch, UnknownAlias,
)
from structura.shared.types import NUMBER, STRING, BinaryOp
from tests.test_utils import compile_error, compile_js, compile_ok


def fold_top_level(expr):
    program = optimize(ProgramIR((ExpressionStatementIR(expr),)))
    return program.statements[0].expr


@pytest.mark.integration
class TestScenarios:
    def test_builtin_forward_declaration(self, compiler):
        output = compile_js("abs(a: number): number;\nprint(abs(-5)): number;", compiler)
        assert "function abs(a) {\n  return stdlib.abs(a);\n}" in output
        assert output.endswith("// Top-level statements:\nprint(abs(-5));\n})();\n")

    def test_constant_folding(self):
        two, three = LiteralIR(2, NUMBER), LiteralIR(3, NUMBER)
        assert fold_top_level(BinaryIR(BinaryOp.ADD, two, three)) == LiteralIR(5, NUMBER)
        strings = BinaryIR(BinaryOp.ADD, LiteralIR("a", STRING), LiteralIR("b", STRING))
        assert fold_top_level(strings) == LiteralIR("ab", STRING)
        mixed = BinaryIR(BinaryOp.ADD, two, LiteralIR("b", STRING))
        assert fold_top_level(mixed) == mixed

    def test_constant_folding_in_output(self, compiler):
        output = compile_js('f(): string { return "a" + "b"; }\nprint(f());', compiler)
        assert 'return "ab";' in output

    def test_union_alias_parameter(self, compiler):
        declarations = "MixedArr = string|number[];\nshow(x: MixedArr): string;\n"
        compile_ok(declarations + 'show("plain"): string;', compiler)
        compile_error(declarations + "show(1 < 2): string;", TypeMismatch, compiler)

    def test_literal_url_validation(self, compiler):
        err = compile_error('isURL("not a url"): boolean;', InvalidLiteralArgument, compiler)
        assert err.name == "isURL"

    def test_first_return_decides(self, compiler):
        source = 'f(a: number): string { return a; return "unreached"; }'
        compile_error(source, TypeMismatch, compiler)


@pytest.mark.integration
class TestProperties:
    @pytest.mark.parametrize("name", sorted(RESERVED_BUILTINS))
    def test_reserved_names_cannot_be_defined(self, compiler, name):
        compile_error(f"{name}(a: number): number {{ return a; }}", ReservedNameViolation, compiler)

    def test_wildcard_is_not_transitive(self, compiler):
        compile_ok("print(1): string;", compiler)
        compile_ok("print(1): number;", compiler)
        compile_error("abs(1): string;", TypeMismatch, compiler)

    def test_declarations_usable_before_definition(self, compiler):
        source = 'show("x"): Label;\nshow(s: string): Label;\nLabel = string;'
        compile_ok(source, compiler)

    def test_stable_output(self, compiler):
        source = "max(1, 2): number;\nabs(-3): number;"
        assert compile_js(source, compiler) == compile_js(source, compiler)

    def test_compilations_are_independent(self, compiler):
        compile_ok("Score = number;\nf(a: Score): Score;", compiler)
        compile_error("g(a: Score): number;", UnknownAlias, compiler)
