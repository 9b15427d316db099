#!/usr/bin/env python3
"""
Tests for the type system: literals, resolution, equality, assignability.
"""

import pytest
from structura.shared.errors import CyclicAlias, UnknownAlias
from structura.shared.types import (
    ANY, BOOLEAN, NUMBER, STRING, AliasType, ArrayType, BinaryOp,
    PrimitiveType, UnionType, is_assignable, parse_type_literal,
    resolve_type, type_equals,
)


class TestTypeLiterals:
    def test_primitive(self):
        assert parse_type_literal("number") == PrimitiveType("number")

    def test_array(self):
        assert parse_type_literal("string[]") == ArrayType(STRING)

    def test_union_with_array_member(self):
        ty = parse_type_literal("string|number[]")
        assert ty == UnionType((STRING, ArrayType(NUMBER)))
        assert str(ty) == "string|number[]"


class TestResolution:
    def test_alias_chain(self):
        aliases = {"A": AliasType("B"), "B": NUMBER}
        assert resolve_type(AliasType("A"), aliases) == NUMBER

    def test_resolves_inside_arrays_and_unions(self):
        aliases = {"Id": NUMBER}
        ty = UnionType((ArrayType(AliasType("Id")), STRING))
        assert resolve_type(ty, aliases) == UnionType((ArrayType(NUMBER), STRING))

    def test_unknown_alias(self):
        with pytest.raises(UnknownAlias) as exc_info:
            resolve_type(AliasType("Missing"), {})
        assert exc_info.value.name == "Missing"

    def test_cycle_fails_fast(self):
        aliases = {"A": AliasType("B"), "B": AliasType("A")}
        with pytest.raises(CyclicAlias) as exc_info:
            resolve_type(AliasType("A"), aliases)
        assert exc_info.value.chain == ["A", "B", "A"]

    def test_self_cycle_through_array(self):
        aliases = {"Nested": ArrayType(AliasType("Nested"))}
        with pytest.raises(CyclicAlias):
            resolve_type(AliasType("Nested"), aliases)

    def test_cycle_is_an_unknown_alias(self):
        assert issubclass(CyclicAlias, UnknownAlias)


class TestEquality:
    def test_wildcard_is_not_transitive(self):
        assert type_equals(ANY, NUMBER, {})
        assert type_equals(ANY, STRING, {})
        assert not type_equals(NUMBER, STRING, {})

    def test_primitives_by_name(self):
        assert type_equals(NUMBER, PrimitiveType("number"), {})
        assert not type_equals(NUMBER, BOOLEAN, {})

    def test_arrays(self):
        assert type_equals(ArrayType(NUMBER), ArrayType(NUMBER), {})
        assert not type_equals(ArrayType(NUMBER), ArrayType(STRING), {})
        assert not type_equals(ArrayType(NUMBER), NUMBER, {})

    def test_union_order_independent(self):
        a = UnionType((STRING, NUMBER))
        b = UnionType((NUMBER, STRING))
        assert type_equals(a, b, {})

    def test_union_arity_must_match(self):
        a = UnionType((STRING, NUMBER))
        b = UnionType((STRING, NUMBER, BOOLEAN))
        assert not type_equals(a, b, {})
        assert not type_equals(a, STRING, {})

    def test_union_repeated_members_symmetric(self):
        a = parse_type_literal("string|string")
        b = parse_type_literal("string|number")
        assert not type_equals(a, b, {})
        assert not type_equals(b, a, {})

    def test_aliases_resolved_before_comparison(self):
        aliases = {"Score": NUMBER}
        assert type_equals(AliasType("Score"), NUMBER, aliases)


class TestAssignability:
    def test_member_of_union(self):
        target = UnionType((STRING, ArrayType(NUMBER)))
        assert is_assignable(STRING, target, {})
        assert is_assignable(ArrayType(NUMBER), target, {})
        assert not is_assignable(BOOLEAN, target, {})
        assert not is_assignable(NUMBER, target, {})

    def test_union_value_needs_every_member(self):
        target = UnionType((STRING, NUMBER, BOOLEAN))
        assert is_assignable(UnionType((STRING, NUMBER)), target, {})
        assert not is_assignable(UnionType((STRING, ArrayType(STRING))), target, {})

    def test_through_alias(self):
        aliases = {"MixedArr": UnionType((STRING, ArrayType(NUMBER)))}
        assert is_assignable(STRING, AliasType("MixedArr"), aliases)

    def test_any(self):
        assert is_assignable(ANY, NUMBER, {})
        assert is_assignable(BOOLEAN, ANY, {})


class TestBinaryOp:
    def test_precedence_table(self):
        assert BinaryOp.OR.precedence == 1
        assert BinaryOp.AND.precedence == 2
        assert BinaryOp.EQ.precedence == BinaryOp.NE.precedence == 3
        assert BinaryOp.LE.precedence == 4
        assert BinaryOp.SUB.precedence == 5
        assert BinaryOp.DIV.precedence == 6

    def test_from_symbol(self):
        assert BinaryOp.from_symbol("&&") is BinaryOp.AND
