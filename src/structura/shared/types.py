"""
Type System

Structural types for Structura: primitives, arrays, unions and alias
references. Alias references are resolved against a per-compilation alias
table; `any` is a wildcard that compares equal to every type, so type
equality is deliberately not transitive.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Tuple

from .errors import UnknownAlias, CyclicAlias, StructuraImplementationError


class TypeKind(Enum):
    PRIMITIVE = "primitive"
    ARRAY = "array"
    UNION = "union"
    ALIAS = "alias"


class Type:
    """Base of the closed type family below."""
    __slots__ = ()
    kind: TypeKind


@dataclass(frozen=True)
class PrimitiveType(Type):
    """Primitive type (number, string, boolean, void, any)"""
    name: str
    kind = TypeKind.PRIMITIVE

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayType(Type):
    """Homogeneous array: element[]"""
    element: Type
    kind = TypeKind.ARRAY

    def __str__(self) -> str:
        return f"{self.element}[]"


@dataclass(frozen=True)
class UnionType(Type):
    """Ordered union; equality ignores member order."""
    members: Tuple[Type, ...]
    kind = TypeKind.UNION

    def __str__(self) -> str:
        return "|".join(str(m) for m in self.members)


@dataclass(frozen=True)
class AliasType(Type):
    """Unresolved reference to a `Name = type;` declaration."""
    name: str
    kind = TypeKind.ALIAS

    def __str__(self) -> str:
        return self.name


PRIMITIVE_NAMES = ("number", "string", "boolean", "void", "any")

NUMBER = PrimitiveType("number")
STRING = PrimitiveType("string")
BOOLEAN = PrimitiveType("boolean")
VOID = PrimitiveType("void")
ANY = PrimitiveType("any")


class BinaryOp(Enum):
    """Binary operators, lowest precedence first."""
    OR = "||"
    AND = "&&"
    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def precedence(self) -> int:
        return BINARY_PRECEDENCE[self.value]

    @classmethod
    def from_symbol(cls, symbol: str) -> "BinaryOp":
        return cls(symbol)


BINARY_PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3,
    "<": 4, ">": 4, "<=": 4, ">=": 4,
    "+": 5, "-": 5,
    "*": 6, "/": 6,
}

ARITHMETIC_OPS = frozenset({BinaryOp.SUB, BinaryOp.MUL, BinaryOp.DIV})
ORDERING_OPS = frozenset({BinaryOp.LT, BinaryOp.GT, BinaryOp.LE, BinaryOp.GE})
EQUALITY_OPS = frozenset({BinaryOp.EQ, BinaryOp.NE})
LOGICAL_OPS = frozenset({BinaryOp.AND, BinaryOp.OR})


def parse_type_literal(text: str) -> Type:
    """
    Build a type from type-literal text such as `string|number[]`.

    Each `|`-separated member ending in `[]` is an array of the primitive
    named by its prefix; a single member is returned without a union.
    """
    members = []
    for part in text.split("|"):
        part = part.strip()
        if part.endswith("[]"):
            members.append(ArrayType(PrimitiveType(part[:-2])))
        else:
            members.append(PrimitiveType(part))
    if len(members) == 1:
        return members[0]
    return UnionType(tuple(members))


def resolve_type(ty: Type, aliases: Mapping[str, Type], _visiting: Tuple[str, ...] = ()) -> Type:
    """
    Replace every alias reference with its definition.

    Visited alias names are tracked so a cycle fails fast with CyclicAlias.
    """
    if isinstance(ty, PrimitiveType):
        return ty
    if isinstance(ty, AliasType):
        if ty.name in _visiting:
            start = _visiting.index(ty.name)
            raise CyclicAlias(list(_visiting[start:]) + [ty.name])
        if ty.name not in aliases:
            raise UnknownAlias(ty.name)
        return resolve_type(aliases[ty.name], aliases, _visiting + (ty.name,))
    if isinstance(ty, ArrayType):
        return ArrayType(resolve_type(ty.element, aliases, _visiting))
    if isinstance(ty, UnionType):
        return UnionType(tuple(resolve_type(m, aliases, _visiting) for m in ty.members))
    raise StructuraImplementationError(f"unknown type node {type(ty).__name__}")


def is_any(ty: Type) -> bool:
    return isinstance(ty, PrimitiveType) and ty.name == ANY.name


def type_equals(a: Type, b: Type, aliases: Mapping[str, Type]) -> bool:
    """
    Structural equality after alias resolution.

    `any` equals everything. Unions need equal arity and every member of
    each side matched by some member of the other, in any order.
    """
    a = resolve_type(a, aliases)
    b = resolve_type(b, aliases)
    if is_any(a) or is_any(b):
        return True
    if isinstance(a, PrimitiveType):
        return isinstance(b, PrimitiveType) and a.name == b.name
    if isinstance(a, ArrayType):
        return isinstance(b, ArrayType) and type_equals(a.element, b.element, aliases)
    if isinstance(a, UnionType):
        if not isinstance(b, UnionType) or len(a.members) != len(b.members):
            return False
        return (all(any(type_equals(ma, mb, aliases) for mb in b.members) for ma in a.members)
                and all(any(type_equals(mb, ma, aliases) for ma in a.members) for mb in b.members))
    return False


def is_assignable(value: Type, target: Type, aliases: Mapping[str, Type]) -> bool:
    """
    True if a value of type `value` may be passed where `target` is expected.

    Equal types are assignable; a non-union value is assignable to a union
    containing an equal member; a union value needs every member assignable.
    """
    value = resolve_type(value, aliases)
    target = resolve_type(target, aliases)
    if type_equals(value, target, aliases):
        return True
    if isinstance(target, UnionType):
        if isinstance(value, UnionType):
            return all(is_assignable(m, target, aliases) for m in value.members)
        return any(type_equals(value, m, aliases) for m in target.members)
    return False
