"""
Three-address code printer.

Renders IR as TAC for inspection: every binary operation and every call
gets a fresh temporary, literals and variables are used inline.

    --- Function add ---
    t1 := a + b
    return t1
    t2 := print(5)
    (result: t2)
"""

import json
from typing import List

from .nodes import (
    BinaryIR, CallIR, ExpressionStatementIR, FunctionDeclIR, IRVisitor,
    LiteralIR, MemberIR, ParameterIR, ProgramIR, ReturnStatementIR,
    TypeAliasIR, VariableIR,
)
from ..utils.config import RUNTIME_BINDING_NAME


def format_literal(value) -> str:
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


class TACPrinter(IRVisitor[str]):
    """
    Expression visits return the operand naming their result; statement
    visits append lines and return "".
    """

    def __init__(self):
        self.temp_count = 0
        self.lines: List[str] = []

    def new_temp(self) -> str:
        self.temp_count += 1
        return f"t{self.temp_count}"

    def generate(self, program: ProgramIR) -> str:
        program.accept(self)
        return "\n".join(self.lines)

    def visit_program(self, node: ProgramIR) -> str:
        for stmt in node.statements:
            stmt.accept(self)
        return ""

    def visit_function_decl(self, node: FunctionDeclIR) -> str:
        self.lines.append(f"--- Function {node.name} ---")
        if node.has_body:
            for stmt in node.body:
                stmt.accept(self)
        elif node.builtin:
            self.lines.append(f"(builtin function: {node.name} forwarding to {RUNTIME_BINDING_NAME})")
        else:
            self.lines.append("(no body)")
        return ""

    def visit_parameter(self, node: ParameterIR) -> str:
        return node.name

    def visit_type_alias(self, node: TypeAliasIR) -> str:
        return ""

    def visit_expression_statement(self, node: ExpressionStatementIR) -> str:
        result = node.expr.accept(self)
        self.lines.append(f"(result: {result})")
        return ""

    def visit_return_statement(self, node: ReturnStatementIR) -> str:
        self.lines.append(f"return {node.expr.accept(self)}")
        return ""

    def visit_literal(self, node: LiteralIR) -> str:
        return format_literal(node.value)

    def visit_variable(self, node: VariableIR) -> str:
        return node.name

    def visit_binary(self, node: BinaryIR) -> str:
        left = node.left.accept(self)
        right = node.right.accept(self)
        temp = self.new_temp()
        self.lines.append(f"{temp} := {left} {node.op.value} {right}")
        return temp

    def visit_call(self, node: CallIR) -> str:
        callee = node.callee.accept(self)
        args = ", ".join(arg.accept(self) for arg in node.args)
        temp = self.new_temp()
        self.lines.append(f"{temp} := {callee}({args})")
        return temp

    def visit_member(self, node: MemberIR) -> str:
        return f"{node.object.accept(self)}.{node.property}"


def generate_tac(program: ProgramIR) -> str:
    return TACPrinter().generate(program)
