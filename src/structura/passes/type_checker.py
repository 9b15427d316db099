"""
Type Checker

Proves a parsed program well typed or raises the first TypeCheckError.

Two phases:
1. Collection: every alias and every user function signature is recorded
   before anything is checked, so declarations may be used before they
   appear.
2. Checking: alias definitions are resolved eagerly, then each function
   declaration and each top-level call statement is validated in source
   order.

Call sites consult the builtin registry before user declarations, so a user
declaration can never change a reserved function's signature. The AST is
never modified.
"""

import logging
from typing import Dict, List, Mapping, Optional

from ..shared.ast_visitor import ASTVisitor
from ..shared.builtins import FunctionSignature, URL_PATTERN, is_reserved, lookup_builtin
from ..shared.errors import (
    ArityMismatch, InvalidLiteralArgument, MissingReturnStatement,
    ReservedNameViolation, StructuraImplementationError, TypeMismatch,
    UndeclaredFunction, UnknownAlias,
)
from ..shared.nodes import (
    BinaryExpr, CallExpr, Expression, ExpressionStatement, FunctionDecl,
    Identifier, MemberExpr, NumberLiteral, Parameter, Program,
    ReturnStatement, StringLiteral, TypeAliasDecl,
)
from ..shared.source_location import SourceLocation
from ..shared.types import (
    ANY, BOOLEAN, NUMBER, STRING, ARITHMETIC_OPS, EQUALITY_OPS, LOGICAL_OPS,
    ORDERING_OPS, BinaryOp, Type, is_any, is_assignable, resolve_type,
    type_equals,
)
from .base import CompilationContext

logger = logging.getLogger("structura.passes.type_checker")

# Builtins whose literal string argument is validated at compile time.
_LITERAL_VALIDATORS = {
    "isURL": URL_PATTERN,
}


def _signature_text(signature: FunctionSignature) -> str:
    params = ", ".join(str(p) for p in signature.params)
    if signature.variadic:
        params += "..."
    return f"({params}) -> {signature.return_type}"


class TypeChecker(ASTVisitor[Optional[Type]]):
    """
    Statement visits return None; expression visits return the inferred,
    alias-free type of the expression.
    """

    def __init__(self, ctx: Optional[CompilationContext] = None):
        self.ctx = ctx if ctx is not None else CompilationContext()
        self.declarations: Dict[str, FunctionDecl] = {}
        # parameter name -> resolved type, for the body being checked
        self._scope: Dict[str, Type] = {}

    @property
    def aliases(self) -> Mapping[str, Type]:
        return self.ctx.alias_table

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def check(self, program: Program) -> None:
        """Raise the first TypeCheckError found in `program`."""
        self._collect(program)
        program.accept(self)
        logger.debug(
            f"Type check passed: {len(self.aliases)} aliases, "
            f"{len(self.declarations)} user functions"
        )

    def _collect(self, program: Program) -> None:
        for stmt in program.statements:
            if isinstance(stmt, TypeAliasDecl):
                self.ctx.alias_table[stmt.name] = stmt.type
            elif isinstance(stmt, FunctionDecl):
                previous = self.declarations.get(stmt.name)
                if previous is None or (stmt.has_body and not previous.has_body):
                    self.declarations[stmt.name] = stmt
        for name, decl in self.declarations.items():
            self.ctx.user_signatures[name] = FunctionSignature(
                tuple(p.type for p in decl.params), decl.return_type
            )
        logger.debug(f"Collected aliases {sorted(self.aliases)} and functions {sorted(self.declarations)}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def resolve(self, ty: Type, location: Optional[SourceLocation]) -> Type:
        """resolve_type() against this compilation's aliases, tagging errors with `location`."""
        try:
            return resolve_type(ty, self.aliases)
        except UnknownAlias as exc:
            if exc.location is None:
                exc.location = location
            raise

    def lookup_signature(self, name: str, location: Optional[SourceLocation]) -> FunctionSignature:
        signature = lookup_builtin(name)
        if signature is None:
            signature = self.ctx.user_signatures.get(name)
        if signature is None:
            raise UndeclaredFunction(name, location)
        return signature

    def infer(self, expr: Expression) -> Type:
        result = expr.accept(self)
        if result is None:
            raise StructuraImplementationError(f"no type inferred for {type(expr).__name__}")
        return result

    # ------------------------------------------------------------------
    # Declarations and statements
    # ------------------------------------------------------------------

    def visit_program(self, node: Program) -> None:
        for name, definition in self.aliases.items():
            decl = next(
                (s for s in node.statements if isinstance(s, TypeAliasDecl) and s.name == name),
                None,
            )
            self.resolve(definition, decl.location if decl else None)
        for stmt in node.statements:
            stmt.accept(self)

    def visit_type_alias_decl(self, node: TypeAliasDecl) -> None:
        self.resolve(node.type, node.location)

    def visit_function_decl(self, node: FunctionDecl) -> None:
        param_types = [param.accept(self) for param in node.params]
        return_type = self.resolve(node.return_type, node.location)

        if is_reserved(node.name):
            if node.has_body:
                raise ReservedNameViolation(node.name, node.location)
            self._check_builtin_forward_declaration(node, param_types, return_type)
            return

        if not node.has_body:
            return

        first_return = next((s for s in node.body if isinstance(s, ReturnStatement)), None)
        if first_return is None:
            raise MissingReturnStatement(node.name, node.location)

        self._scope = {param.name: ty for param, ty in zip(node.params, param_types)}
        try:
            inferred = self.infer(first_return.expr)
        finally:
            self._scope = {}
        if not type_equals(inferred, return_type, self.aliases):
            raise TypeMismatch(
                f"function '{node.name}' should return '{node.return_type}' but returns '{inferred}'",
                first_return.location or node.location,
                expected=str(node.return_type),
                found=str(inferred),
            )

    def _check_builtin_forward_declaration(self, node: FunctionDecl,
                                           param_types: List[Type], return_type: Type) -> None:
        signature = lookup_builtin(node.name)
        matches = type_equals(return_type, signature.return_type, self.aliases)
        if matches and not signature.variadic:
            matches = len(param_types) == signature.arity and all(
                type_equals(declared, expected, self.aliases)
                for declared, expected in zip(param_types, signature.params)
            )
        if not matches:
            raise ReservedNameViolation(
                node.name, node.location,
                reason=f"declared signature does not match built-in {_signature_text(signature)}",
            )

    def visit_expression_statement(self, node: ExpressionStatement) -> None:
        result = self.infer(node.expr)
        if node.return_type is None:
            return
        ascribed = self.resolve(node.return_type, node.location)
        if not type_equals(result, ascribed, self.aliases):
            name = node.expr.callee_name if isinstance(node.expr, CallExpr) else None
            raise TypeMismatch(
                f"call to '{name}' is annotated '{node.return_type}' but returns '{result}'",
                node.location,
                expected=str(result),
                found=str(node.return_type),
            )

    def visit_return_statement(self, node: ReturnStatement) -> None:
        self.infer(node.expr)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def visit_number_literal(self, node: NumberLiteral) -> Type:
        return NUMBER

    def visit_string_literal(self, node: StringLiteral) -> Type:
        return STRING

    def visit_identifier(self, node: Identifier) -> Type:
        return self._scope.get(node.name, ANY)

    def visit_parameter(self, node: Parameter) -> Type:
        return self.resolve(node.type, node.location)

    def visit_member_expr(self, node: MemberExpr) -> Type:
        self.infer(node.object)
        return ANY

    def visit_binary_expr(self, node: BinaryExpr) -> Type:
        left = self.infer(node.left)
        right = self.infer(node.right)
        op = node.op

        if op is BinaryOp.ADD:
            if is_any(left) or is_any(right):
                return ANY
            if left == NUMBER and right == NUMBER:
                return NUMBER
            if left == STRING and right == STRING:
                return STRING
            raise TypeMismatch(
                f"cannot add '{left}' and '{right}'", node.location,
                expected=str(left), found=str(right),
            )
        if op in ARITHMETIC_OPS:
            self._require_operands(node, left, right, NUMBER)
            return NUMBER
        if op in ORDERING_OPS:
            self._require_operands(node, left, right, NUMBER)
            return BOOLEAN
        if op in EQUALITY_OPS:
            if not type_equals(left, right, self.aliases):
                raise TypeMismatch(
                    f"cannot compare '{left}' with '{right}' using '{op.value}'", node.location,
                    expected=str(left), found=str(right),
                )
            return BOOLEAN
        if op in LOGICAL_OPS:
            self._require_operands(node, left, right, BOOLEAN)
            return BOOLEAN
        raise StructuraImplementationError(f"unhandled binary operator {op}")

    def _require_operands(self, node: BinaryExpr, left: Type, right: Type, expected: Type) -> None:
        for operand in (left, right):
            if not type_equals(operand, expected, self.aliases):
                raise TypeMismatch(
                    f"operator '{node.op.value}' expects '{expected}' operands, found '{operand}'",
                    node.location, expected=str(expected), found=str(operand),
                )

    def visit_call_expr(self, node: CallExpr) -> Type:
        name = node.callee_name
        if name is None:
            self.infer(node.callee)
            for arg in node.args:
                self.infer(arg)
            return ANY

        signature = self.lookup_signature(name, node.location)
        if not signature.variadic and len(node.args) != signature.arity:
            raise ArityMismatch(name, signature.arity, len(node.args), node.location)

        for index, arg in enumerate(node.args):
            expected = self.resolve(signature.params[min(index, signature.arity - 1)], node.location)
            found = self.infer(arg)
            if not is_assignable(found, expected, self.aliases):
                raise TypeMismatch(
                    f"argument {index + 1} of '{name}' has type '{found}', expected '{expected}'",
                    arg.location or node.location,
                    expected=str(expected),
                    found=str(found),
                )

        pattern = _LITERAL_VALIDATORS.get(name)
        if pattern is not None and len(node.args) == 1 and isinstance(node.args[0], StringLiteral):
            literal = node.args[0]
            if not pattern.fullmatch(literal.value):
                raise InvalidLiteralArgument(name, literal.value, literal.location or node.location)

        return self.resolve(signature.return_type, node.location)


def check(program: Program, ctx: Optional[CompilationContext] = None) -> CompilationContext:
    """Type check `program`; returns the context holding the collected tables."""
    checker = TypeChecker(ctx)
    checker.check(program)
    return checker.ctx
