"""
Builtin function registry.

Signatures of the reserved functions implemented by the runtime library.
The registry is built once at import time and exposed read-only; it is the
only table shared between compilations.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from .types import Type, ArrayType, NUMBER, STRING, BOOLEAN, ANY


@dataclass(frozen=True)
class FunctionSignature:
    """Parameter types and return type of a callable."""
    params: Tuple[Type, ...]
    return_type: Type
    variadic: bool = False

    @property
    def arity(self) -> int:
        return len(self.params)


def _sig(params, return_type, variadic=False) -> FunctionSignature:
    return FunctionSignature(tuple(params), return_type, variadic)


BUILTIN_SIGNATURES: Mapping[str, FunctionSignature] = MappingProxyType({
    "abs": _sig([NUMBER], NUMBER),
    "min": _sig([NUMBER, NUMBER], NUMBER),
    "max": _sig([NUMBER, NUMBER], NUMBER),
    "print": _sig([ANY], ANY, variadic=True),
    "sumNumbers": _sig([ArrayType(NUMBER)], NUMBER),
    "concatStrings": _sig([ArrayType(STRING)], STRING),
    "hcf": _sig([NUMBER, NUMBER], NUMBER),
    "lcm": _sig([NUMBER, NUMBER], NUMBER),
    "capitalize": _sig([STRING], STRING),
    "isURL": _sig([STRING], BOOLEAN),
    "coalesce": _sig([ANY], ANY, variadic=True),
    "slugify": _sig([STRING], STRING),
})

RESERVED_BUILTINS = frozenset(BUILTIN_SIGNATURES)

# Same shape the runtime library's isURL() accepts.
URL_PATTERN = re.compile(
    r"^(https?://)?[\w.-]+\.[a-z]{2,6}(/[\w\-._~:/?#\[\]@!$&'()*+,;=]*)?$",
    re.IGNORECASE,
)


def is_reserved(name: str) -> bool:
    return name in RESERVED_BUILTINS


def lookup_builtin(name: str):
    """Return the builtin signature for `name`, or None."""
    return BUILTIN_SIGNATURES.get(name)
