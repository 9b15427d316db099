"""
IR Serialization to S-Expressions
=================================

Converts IR to a canonical S-expression form for dumps, the CLI `ir` mode
and tests. Keywords are sexpdata Symbols (printed bare); names and string
values are Python strings (printed quoted).

    (program
      "main.struct"
      (function-decl "abs" (params (param "a" (type number))) (type number) :builtin true)
      (expression-statement (call (variable "print") ((literal 5 number)) :builtin true))
    )
"""

from typing import Any, List

import sexpdata

from ..shared.errors import StructuraImplementationError
from ..shared.types import AliasType, ArrayType, PrimitiveType, Type, UnionType
from .nodes import IRNode


def _pretty_dumps(sexpr: Any, indent: int = 0, indent_str: str = "  ", max_line: int = 100) -> str:
    """
    Pretty-print structured sexpr. Keeps short forms on one line; breaks only when needed.
    """
    if sexpr is None:
        return "()"
    if isinstance(sexpr, bool):
        return "true" if sexpr else "false"
    if isinstance(sexpr, (int, float)):
        return repr(sexpr)
    if isinstance(sexpr, sexpdata.Symbol):
        return sexpr.value()
    if isinstance(sexpr, str):
        return sexpdata.dumps(sexpr)
    if isinstance(sexpr, list):
        if not sexpr:
            return "()"
        parts = [_pretty_dumps(e, indent + 1, indent_str, max_line) for e in sexpr]
        one_line = "(" + " ".join(parts) + ")"
        if len(one_line) <= max_line and "\n" not in one_line:
            return one_line
        prefix = indent_str * indent
        next_prefix = indent_str * (indent + 1)
        rest = "\n".join(next_prefix + p for p in parts[1:])
        inner = parts[0] + ("\n" + rest if rest else "")
        return f"({inner}\n{prefix})"
    return str(sexpr)


def serialize_ir(node: IRNode, include_location: bool = False, pretty: bool = True) -> str:
    """
    Serialize an IR node (usually a ProgramIR) to S-expression text.

    pretty=False gives sexpdata's compact single-line form.
    """
    sexpr = IRSerializer(include_location=include_location).serialize_to_sexpr(node)
    if pretty:
        return _pretty_dumps(sexpr)
    return sexpdata.dumps(sexpr)


class IRSerializer:
    """
    IR to structured S-expression (nested lists of Symbol/str/int/float).
    """

    def __init__(self, include_location: bool = False):
        self.include_location = include_location

    def _sym(self, s: str) -> sexpdata.Symbol:
        return sexpdata.Symbol(s)

    def serialize_to_sexpr(self, node: Any) -> Any:
        if node is None:
            return [self._sym("nil")]
        method = getattr(self, f"_serialize_{type(node).__name__}", None)
        if method is None:
            raise StructuraImplementationError(f"no serializer for {type(node).__name__}")
        return self._add_metadata(node, method(node))

    def serialize(self, node: Any) -> str:
        return _pretty_dumps(self.serialize_to_sexpr(node))

    def _add_metadata(self, node: Any, core: list) -> list:
        loc = getattr(node, "location", None)
        if self.include_location and loc is not None:
            return core + [self._sym(":loc"), [loc.file, loc.line, loc.column]]
        return core

    def _flag(self, core: list, name: str, value: bool) -> list:
        if value:
            core.extend([self._sym(f":{name}"), self._sym("true")])
        return core

    def _serialize_type(self, ty: Type) -> list:
        if isinstance(ty, PrimitiveType):
            return [self._sym("type"), self._sym(ty.name)]
        if isinstance(ty, ArrayType):
            return [self._sym("array-type"), self._serialize_type(ty.element)]
        if isinstance(ty, UnionType):
            return [self._sym("union-type")] + [self._serialize_type(m) for m in ty.members]
        if isinstance(ty, AliasType):
            return [self._sym("alias"), ty.name]
        return [self._sym("type"), str(ty)]

    def _serialize_all(self, nodes) -> List[Any]:
        return [self.serialize_to_sexpr(n) for n in nodes]

    # === Program and declarations ===

    def _serialize_ProgramIR(self, node) -> list:
        return [self._sym("program"), node.source_file] + self._serialize_all(node.statements)

    def _serialize_FunctionDeclIR(self, node) -> list:
        core = [
            self._sym("function-decl"), node.name,
            [self._sym("params")] + self._serialize_all(node.params),
            self._serialize_type(node.return_type),
        ]
        if node.body is not None:
            core.append([self._sym("body")] + self._serialize_all(node.body))
        return self._flag(core, "builtin", node.builtin)

    def _serialize_ParameterIR(self, node) -> list:
        return [self._sym("param"), node.name, self._serialize_type(node.type)]

    def _serialize_TypeAliasIR(self, node) -> list:
        return [self._sym("type-alias"), node.alias, self._serialize_type(node.type_annotation)]

    # === Statements ===

    def _serialize_ExpressionStatementIR(self, node) -> list:
        return [self._sym("expression-statement"), self.serialize_to_sexpr(node.expr)]

    def _serialize_ReturnStatementIR(self, node) -> list:
        return [self._sym("return"), self.serialize_to_sexpr(node.expr)]

    # === Expressions ===

    def _serialize_LiteralIR(self, node) -> list:
        return [self._sym("literal"), node.value, self._sym(str(node.type))]

    def _serialize_VariableIR(self, node) -> list:
        return [self._sym("variable"), node.name]

    def _serialize_BinaryIR(self, node) -> list:
        return [
            self._sym("binary-op"), self._sym(node.op.value),
            self.serialize_to_sexpr(node.left), self.serialize_to_sexpr(node.right),
        ]

    def _serialize_CallIR(self, node) -> list:
        core = [self._sym("call"), self.serialize_to_sexpr(node.callee), self._serialize_all(node.args)]
        return self._flag(core, "builtin", node.builtin)

    def _serialize_MemberIR(self, node) -> list:
        return [self._sym("member"), self.serialize_to_sexpr(node.object), node.property]


def to_sexpr(node: IRNode, include_location: bool = False) -> str:
    """Compact single-line serialization."""
    return serialize_ir(node, include_location=include_location, pretty=False)
