#!/usr/bin/env python3
"""
Tests for the three-address code printer.
"""

from structura.ir.tac import TACPrinter, format_literal, generate_tac
from structura.passes.const_folding import optimize
from tests.test_utils import lower_source


def tac(source, optimized=True):
    ir = lower_source(source)
    return generate_tac(optimize(ir) if optimized else ir).splitlines()


class TestTAC:
    def test_function_and_call(self):
        lines = tac(
            "add(a: number, b: number): number { return a + b; }\n"
            "print(add(2, 3)): number;"
        )
        assert lines == [
            "--- Function add ---",
            "t1 := a + b",
            "return t1",
            "t2 := add(2, 3)",
            "t3 := print(t2)",
            "(result: t3)",
        ]

    def test_builtin_declaration(self):
        lines = tac("abs(a: number): number;")
        assert lines == [
            "--- Function abs ---",
            "(builtin function: abs forwarding to stdlib)",
        ]

    def test_unoptimized_bodiless_declaration(self):
        lines = tac("abs(a: number): number;", optimized=False)
        assert lines[1] == "(no body)"

    def test_folded_constants_inline(self):
        lines = tac('greet(): string { return "a" + "b"; }')
        assert lines == ["--- Function greet ---", 'return "ab"']

    def test_member_call(self):
        lines = tac("f(s: string): any { return s.trim(); }")
        assert lines[1:] == ["t1 := s.trim()", "return t1"]

    def test_aliases_print_nothing(self):
        assert tac("A = number;") == []

    def test_temporaries_restart_per_printer(self):
        ir = optimize(lower_source("print(1 < 2): any;"))
        assert TACPrinter().generate(ir) == TACPrinter().generate(ir)


class TestLiterals:
    def test_formats(self):
        assert format_literal("hi") == '"hi"'
        assert format_literal(3) == "3"
        assert format_literal(2.0) == "2"
        assert format_literal(2.5) == "2.5"
