"""
JavaScript Backend

Emits a CommonJS module from optimized IR:

    (function() {
    const stdlib = require("./runtime/stdlib");

    // Type alias: Name = string|number[]

    function abs(a) {
      return stdlib.abs(a);
    }

    // Top-level statements:
    print(abs(-5));
    })();

Functions are deduplicated by name (a bodied declaration replaces a
bodiless one, otherwise the first wins). Bodiless functions forward to the
runtime library. Builtins that are called but never declared get stubs
synthesized from the registry; builtins that are never called get nothing.
"""

import json
import logging
from typing import Dict, List, Optional, Sequence

from ..ir.nodes import (
    BinaryIR, CallIR, ExpressionIR, ExpressionStatementIR, FunctionDeclIR,
    IRVisitor, LiteralIR, MemberIR, ParameterIR, ProgramIR,
    ReturnStatementIR, StatementIR, TypeAliasIR, VariableIR,
)
from ..passes.builtin_usage import collect_called_builtins
from ..shared.builtins import is_reserved, lookup_builtin
from ..shared.errors import StructuraImplementationError
from ..utils.config import (
    EMIT_INDENT, OUTPUT_FILE_EXTENSION, RUNTIME_BINDING_NAME, RUNTIME_MODULE_PATH,
)
from .base import Backend

logger = logging.getLogger("structura.backends.javascript")

TOP_LEVEL_HEADER = "// Top-level statements:"


def format_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


class _ExpressionEmitter(IRVisitor[str]):
    """Renders expressions and statements as JavaScript source."""

    def emit(self, node) -> str:
        return node.accept(self)

    def visit_literal(self, node: LiteralIR) -> str:
        if isinstance(node.value, str):
            return json.dumps(node.value)
        return format_number(node.value)

    def visit_variable(self, node: VariableIR) -> str:
        return node.name

    def visit_binary(self, node: BinaryIR) -> str:
        precedence = node.op.precedence
        left = self.emit(node.left)
        if isinstance(node.left, BinaryIR) and node.left.op.precedence < precedence:
            left = f"({left})"
        right = self.emit(node.right)
        if isinstance(node.right, BinaryIR) and node.right.op.precedence <= precedence:
            right = f"({right})"
        return f"{left} {node.op.value} {right}"

    def visit_call(self, node: CallIR) -> str:
        args = ", ".join(self.emit(arg) for arg in node.args)
        return f"{self._operand(node.callee)}({args})"

    def visit_member(self, node: MemberIR) -> str:
        return f"{self._operand(node.object)}.{node.property}"

    def _operand(self, expr: ExpressionIR) -> str:
        text = self.emit(expr)
        return f"({text})" if isinstance(expr, BinaryIR) else text

    def visit_expression_statement(self, node: ExpressionStatementIR) -> str:
        return f"{self.emit(node.expr)};"

    def visit_return_statement(self, node: ReturnStatementIR) -> str:
        return f"return {self.emit(node.expr)};"

    def visit_parameter(self, node: ParameterIR) -> str:
        return node.name

    def visit_type_alias(self, node: TypeAliasIR) -> str:
        return f"// Type alias: {node.alias} = {node.type_annotation}"

    def visit_function_decl(self, node: FunctionDeclIR) -> str:
        raise StructuraImplementationError("function declarations are emitted by JavaScriptBackend")

    def visit_program(self, node: ProgramIR) -> str:
        raise StructuraImplementationError("programs are emitted by JavaScriptBackend")


class JavaScriptBackend(Backend):
    """
    Code emitter for the JavaScript target.
    """

    name = "javascript"
    file_extension = OUTPUT_FILE_EXTENSION

    def __init__(self, runtime_module: str = RUNTIME_MODULE_PATH, wrap: bool = True,
                 binding: str = RUNTIME_BINDING_NAME):
        self.runtime_module = runtime_module
        self.wrap = wrap
        self.binding = binding
        self._expressions = _ExpressionEmitter()

    def codegen(self, program: ProgramIR, called_builtins: Optional[Sequence[str]] = None) -> str:
        if called_builtins is None:
            called_builtins = collect_called_builtins(program)
        called = set(called_builtins)
        binding = self._binding_name(program)

        functions = self._deduplicate(program.functions)
        emitted: List[str] = []
        for name, func in functions.items():
            if is_reserved(name) and name not in called:
                logger.debug(f"Skipping uncalled builtin declaration '{name}'")
                continue
            emitted.append(self.emit_function(func, binding))

        synthesized = [name for name in called_builtins if name not in functions]
        for name in synthesized:
            emitted.append(self.emit_builtin_stub(name, binding))
        if synthesized:
            logger.debug(f"Synthesized builtin stubs: {synthesized}")

        lines: List[str] = []
        if self.wrap:
            lines.append("(function() {")
        lines.append(f"const {binding} = require({json.dumps(self.runtime_module)});")
        lines.append("")

        aliases = program.aliases
        for alias in aliases:
            lines.append(self._expressions.emit(alias))
        if aliases:
            lines.append("")

        for func in emitted:
            lines.append(func)
            lines.append("")

        statements = program.top_level_statements
        if statements:
            lines.append(TOP_LEVEL_HEADER)
            for stmt in statements:
                lines.append(self._expressions.emit(stmt))

        if self.wrap:
            lines.append("})();")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _deduplicate(functions: Sequence[FunctionDeclIR]) -> Dict[str, FunctionDeclIR]:
        """First declaration of each name wins unless a later one has the body it lacks."""
        chosen: Dict[str, FunctionDeclIR] = {}
        for func in functions:
            existing = chosen.get(func.name)
            if existing is None or (func.has_body and not existing.has_body):
                chosen[func.name] = func
        return chosen

    def emit_function(self, func: FunctionDeclIR, binding: Optional[str] = None) -> str:
        binding = binding or self.binding
        params = [p.name for p in func.params]
        if func.has_body:
            body = [self._expressions.emit(stmt) for stmt in func.body]
            return self._function_text(func.name, params, body)

        signature = lookup_builtin(func.name)
        if signature is not None and signature.variadic:
            rest = self._rest_name(params)
            return self._forwarder(func.name, params + [f"...{rest}"], binding)
        return self._forwarder(func.name, params, binding)

    def emit_builtin_stub(self, name: str, binding: Optional[str] = None) -> str:
        """Forwarding stub for a builtin the program calls without declaring."""
        binding = binding or self.binding
        signature = lookup_builtin(name)
        if signature is None:
            raise StructuraImplementationError(f"'{name}' is not a builtin")
        if signature.variadic:
            return self._forwarder(name, ["...args"], binding)
        return self._forwarder(name, [f"arg{i}" for i in range(signature.arity)], binding)

    @staticmethod
    def _forwarder(name: str, params: List[str], binding: str) -> str:
        args = ", ".join(params)
        return JavaScriptBackend._function_text(name, params, [f"return {binding}.{name}({args});"])

    @staticmethod
    def _function_text(name: str, params: List[str], body: List[str]) -> str:
        lines = [f"function {name}({', '.join(params)}) {{"]
        lines.extend(EMIT_INDENT + line for line in body)
        lines.append("}")
        return "\n".join(lines)

    def _binding_name(self, program: ProgramIR) -> str:
        """The runtime binding, suffixed until no function or parameter name shadows it."""
        taken = set()
        for func in program.functions:
            taken.add(func.name)
            taken.update(p.name for p in func.params)
        binding = self.binding
        while binding in taken:
            binding += "_"
        if binding != self.binding:
            logger.debug(f"Runtime binding renamed to '{binding}'")
        return binding

    @staticmethod
    def _rest_name(params: List[str]) -> str:
        rest = "rest"
        while rest in params:
            rest += "_"
        return rest


def emit(program: ProgramIR, called_builtins: Optional[Sequence[str]] = None, **options) -> str:
    """Emit JavaScript for optimized IR."""
    return JavaScriptBackend(**options).codegen(program, called_builtins)
