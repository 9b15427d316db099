"""
Shared components: locations, diagnostics, types, AST and builtin registry.
"""

from .source_location import SourceLocation
from .errors import (
    Error, ErrorReporter,
    StructuraError, StructuraImplementationError,
    LexError, ParseError,
    TypeCheckError, UnknownAlias, CyclicAlias, ArityMismatch, TypeMismatch,
    UndeclaredFunction, ReservedNameViolation, MissingReturnStatement,
    InvalidLiteralArgument,
    IRGenerationError, UnsupportedNode,
)
from .types import (
    Type, TypeKind, PrimitiveType, ArrayType, UnionType, AliasType,
    NUMBER, STRING, BOOLEAN, VOID, ANY, PRIMITIVE_NAMES,
    BinaryOp, BINARY_PRECEDENCE,
    parse_type_literal, resolve_type, type_equals, is_assignable,
)
from .nodes import (
    ASTNode, Statement, Expression, Program,
    TypeAliasDecl, FunctionDecl, ExpressionStatement, ReturnStatement,
    NumberLiteral, StringLiteral, Identifier, BinaryExpr, CallExpr,
    MemberExpr, Parameter,
)
from .ast_visitor import ASTVisitor, ExpressionVisitor
from .builtins import (
    FunctionSignature, BUILTIN_SIGNATURES, RESERVED_BUILTINS, URL_PATTERN,
    is_reserved, lookup_builtin,
)
