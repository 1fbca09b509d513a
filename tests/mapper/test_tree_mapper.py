# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for mapping raw trees through the tree mapper."""

import sys

import mapping_fixtures
import pytest

from treemapper import MapperBuilder, MappingFailed, TreeMapper
from treemapper.errors import (
    ClassNotFound,
    InterfaceNotRegistered,
    TreeMapperError,
    TypeGraphTooDeep,
    TypeParsingError,
)
from treemapper.library.settings import DEFAULT_MAX_DEPTH
from treemapper.mapper.node import MappingResult, Node
from treemapper.types.nodes import ListType

# ###############
# Test Helpers
# ###############


@pytest.fixture
def mapper() -> TreeMapper:
    return MapperBuilder().mapper()


def _errors(result: MappingResult) -> list[tuple[str, str]]:
    """Return the (path, code) pairs of a result, in report order."""
    return [(error.path, error.code) for error in result.errors]


def _link_chain(levels: int) -> dict:
    """Return nested link mappings, *levels* deep."""
    chain: dict = {"value": levels - 1}
    for value in range(levels - 2, -1, -1):
        chain = {"value": value, "next": chain}
    return chain


# ###############
# Scalars
# ###############


class TestScalars:
    def test_numeric_string_to_int(self, mapper: TreeMapper) -> None:
        result = mapper.map("int", "42")
        assert result.is_ok
        assert result.value == 42

    def test_invalid_int(self, mapper: TreeMapper) -> None:
        result = mapper.map("int", "abc")
        assert not result.is_ok
        assert result.value is None
        assert _errors(result) == [("*root*", "invalid_scalar_value")]

    def test_strict_coercion_rejects_numeric_strings(self) -> None:
        result = MapperBuilder().with_coercion("strict").mapper().map("int", "42")
        assert _errors(result) == [("*root*", "invalid_scalar_value")]

    def test_result_carries_parsed_type(self, mapper: TreeMapper) -> None:
        assert str(mapper.map("integer", 1).type) == "int"


# ###############
# Lists
# ###############


class TestLists:
    def test_elements_are_mapped(self, mapper: TreeMapper) -> None:
        assert mapper.map("list<int>", [1, "2", 3]).value == [1, 2, 3]

    def test_tuple_input_is_accepted(self, mapper: TreeMapper) -> None:
        assert mapper.map("list<string>", ("a", "b")).value == ["a", "b"]

    def test_empty_non_empty_list(self, mapper: TreeMapper) -> None:
        result = mapper.map("non-empty-list<int>", [])
        assert _errors(result) == [("*root*", "empty_sequence")]

    def test_element_errors_are_indexed(self, mapper: TreeMapper) -> None:
        result = mapper.map("list<int>", [1, "x", 3, "y"])
        assert _errors(result) == [("1", "invalid_scalar_value"), ("3", "invalid_scalar_value")]

    def test_mapping_is_not_a_list(self, mapper: TreeMapper) -> None:
        result = mapper.map("list<int>", {"a": 1})
        assert _errors(result) == [("*root*", "invalid_source_value")]


# ###############
# Arrays
# ###############


class TestArrays:
    def test_keys_and_values_are_mapped(self, mapper: TreeMapper) -> None:
        assert mapper.map("array<int, string>", {"1": "a", 2: 3}).value == {1: "a", 2: "3"}

    def test_invalid_key_is_reported_at_its_path(self, mapper: TreeMapper) -> None:
        result = mapper.map("array<int, string>", {"x": "a", "2": "b"})
        assert _errors(result) == [("x", "invalid_scalar_value")]

    def test_list_input_uses_indexes_as_keys(self, mapper: TreeMapper) -> None:
        assert mapper.map("int[]", ["5", 6]).value == {0: 5, 1: 6}

    def test_empty_non_empty_array(self, mapper: TreeMapper) -> None:
        assert _errors(mapper.map("non-empty-array<int>", {})) == [("*root*", "empty_sequence")]

    def test_scalar_is_not_an_array(self, mapper: TreeMapper) -> None:
        assert _errors(mapper.map("array<int>", 5)) == [("*root*", "invalid_source_value")]


# ###############
# Shaped Arrays
# ###############


class TestShapedArrays:
    def test_numeric_string_keys_match_integer_keys(self, mapper: TreeMapper) -> None:
        result = mapper.map("array{0: int, 1?: string}", {"0": "5", "1": "x"})
        assert result.is_ok
        assert result.value == {0: 5, 1: "x"}

    def test_numeric_string_key_without_element_is_unexpected(self, mapper: TreeMapper) -> None:
        result = mapper.map("array{0: int}", {"0": 5, "7": 1})
        assert _errors(result) == [("7", "unexpected_key")]

    def test_optional_key_may_be_absent(self, mapper: TreeMapper) -> None:
        assert mapper.map("array{a: int, b?: int}", {"a": 1}).value == {"a": 1}

    def test_unexpected_key_is_reported(self, mapper: TreeMapper) -> None:
        result = mapper.map("array{a: int, b?: int}", {"a": 1, "c": 2})
        assert _errors(result) == [("c", "unexpected_key")]

    def test_unexpected_key_is_dropped_when_allowed(self) -> None:
        mapper = MapperBuilder().allow_superfluous_keys().mapper()
        assert mapper.map("array{a: int, b?: int}", {"a": 1, "c": 2}).value == {"a": 1}

    def test_missing_required_key(self, mapper: TreeMapper) -> None:
        result = mapper.map("array{a: int, b: string}", {"b": "x"})
        assert _errors(result) == [("a", "missing_shaped_field")]

    def test_positional_shape_from_list(self, mapper: TreeMapper) -> None:
        assert mapper.map("array{int, string}", ["1", 2]).value == {0: 1, 1: "2"}


# ###############
# Unions
# ###############


class TestUnions:
    def test_null_arm_is_tried_first(self) -> None:
        seen: list[object] = []

        def spy(value: object) -> object:
            seen.append(value)
            return value

        mapper = MapperBuilder().alter("int", spy).alter("string", spy).mapper()
        result = mapper.map("null|int|string", None)
        assert result.is_ok
        assert result.value is None
        assert seen == []

    def test_first_compatible_scalar_wins(self, mapper: TreeMapper) -> None:
        result = mapper.map("null|int|string", "5")
        assert result.value == 5
        assert isinstance(result.value, int)

    def test_later_scalar_when_earlier_rejects(self, mapper: TreeMapper) -> None:
        assert mapper.map("null|int|string", "abc").value == "abc"

    def test_no_member_matches(self, mapper: TreeMapper) -> None:
        result = mapper.map("null|int|string", True)
        assert _errors(result) == [("*root*", "union_resolution_error")]
        assert "does not match any of `null|int|string`" in result.errors[0].message

    def test_class_member_is_tried_before_scalars(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Envelope", {"payload": {"x": 1, "y": "2"}})
        assert result.value == mapping_fixtures.Envelope(payload=mapping_fixtures.Point(x=1, y=2))

    def test_scalar_member_after_failed_class(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Envelope", {"payload": "7"})
        assert result.value == mapping_fixtures.Envelope(payload=7)

    def test_nullable_shorthand(self, mapper: TreeMapper) -> None:
        assert mapper.map("?list<int>", None).value is None
        assert mapper.map("?list<int>", ["1"]).value == [1]


# ###############
# Classes
# ###############


class TestClasses:
    def test_builds_instance(self, mapper: TreeMapper) -> None:
        assert mapper.map("mapping_fixtures.Point", {"x": 1, "y": "2"}).value == mapping_fixtures.Point(x=1, y=2)

    def test_every_field_error_is_reported(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Point", {"x": "bad", "y": "bad"})
        assert _errors(result) == [("x", "invalid_scalar_value"), ("y", "invalid_scalar_value")]

    def test_nested_error_paths(self, mapper: TreeMapper) -> None:
        result = mapper.map(
            "list<mapping_fixtures.Customer>",
            [
                {"name": "Ann", "address": {"street": "Main", "city": "Oslo"}},
                {"name": "Bob", "address": {"street": "High", "city": ["x"]}},
            ],
        )
        assert _errors(result) == [("1.address.city", "invalid_scalar_value")]

    def test_absent_nullable_parameter_maps_to_none(self, mapper: TreeMapper) -> None:
        customer = mapper.map(
            "mapping_fixtures.Customer", {"name": "Ann", "address": {"street": "Main", "city": "Oslo"}}
        ).unwrap()
        assert customer.nickname is None
        assert customer.vip is False

    def test_absent_required_parameter(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Point", {"x": 1})
        assert _errors(result) == [("y", "missing_value")]

    def test_superfluous_key(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Point", {"x": 1, "y": 2, "z": 3})
        assert _errors(result) == [("z", "unexpected_key")]

    def test_superfluous_key_allowed(self) -> None:
        mapper = MapperBuilder().allow_superfluous_keys().mapper()
        assert mapper.map("mapping_fixtures.Point", {"x": 1, "y": 2, "z": 3}).is_ok

    def test_scalar_is_not_a_class_source(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Point", "1,2")
        assert _errors(result) == [("*root*", "invalid_source_value")]

    def test_single_parameter_accepts_flattened_value(self, mapper: TreeMapper) -> None:
        assert mapper.map("mapping_fixtures.Money", "12").value == mapping_fixtures.Money(amount=12)
        assert mapper.map("mapping_fixtures.Money", {"amount": 3}).value == mapping_fixtures.Money(amount=3)

    def test_defaults_are_applied(self, mapper: TreeMapper) -> None:
        assert mapper.map("mapping_fixtures.Counter", {}).value == mapping_fixtures.Counter(count=0)

    def test_recursive_class(self, mapper: TreeMapper) -> None:
        tree = mapper.map("mapping_fixtures.Tree", {"label": "a", "children": [{"label": "b"}]}).unwrap()
        assert tree.children[0].label == "b"
        assert tree.children[0].children == []

    def test_generic_class(self, mapper: TreeMapper) -> None:
        assert mapper.map("mapping_fixtures.Box<int>", "5").value == mapping_fixtures.Box(item=5)
        pair = mapper.map("mapping_fixtures.Pair<int>", {"left": "1", "right": ["2", 3]}).unwrap()
        assert pair == mapping_fixtures.Pair(left=1, right=[2, 3])

    def test_generic_class_without_arguments_is_mixed(self, mapper: TreeMapper) -> None:
        marker = object()
        assert mapper.map("mapping_fixtures.Box", {"item": marker}).value.item is marker

    def test_factory_method(self, mapper: TreeMapper) -> None:
        assert mapper.map("mapping_fixtures.Duration", {"minutes": 2}).value == mapping_fixtures.Duration(seconds=120)

    def test_properties_class(self, mapper: TreeMapper) -> None:
        options = mapper.map("mapping_fixtures.Options", {"level": "3"}).unwrap()
        assert options.level == 3
        assert options.verbose is False

    def test_user_message_from_constructor_is_recorded(self, mapper: TreeMapper) -> None:
        result = mapper.map("list<mapping_fixtures.Temperature>", [{"celsius": 20}, {"celsius": -300}])
        assert _errors(result) == [("1", "invalid_temperature")]
        assert result.errors[0].message == "-300.0 is below absolute zero"

    def test_other_constructor_exceptions_propagate(self, mapper: TreeMapper) -> None:
        with pytest.raises(RuntimeError, match="constructor failure"):
            mapper.map("mapping_fixtures.Unstable", {"value": 1})


# ###############
# Enums
# ###############


class TestEnums:
    def test_backing_value(self, mapper: TreeMapper) -> None:
        ticket = mapper.map("mapping_fixtures.Ticket", {"color": "red", "priority": 2}).unwrap()
        assert ticket.color is mapping_fixtures.Color.RED
        assert ticket.priority is mapping_fixtures.Priority.HIGH

    def test_member_name(self, mapper: TreeMapper) -> None:
        assert mapper.map("mapping_fixtures.Priority", "HIGH").value is mapping_fixtures.Priority.HIGH

    def test_bool_does_not_match_int_value(self, mapper: TreeMapper) -> None:
        assert _errors(mapper.map("mapping_fixtures.Priority", True)) == [("*root*", "invalid_enum_value")]

    def test_unknown_value_lists_accepted_values(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Ticket", {"color": "blue"})
        assert _errors(result) == [("color", "invalid_enum_value")]
        assert "'red', 'green'" in result.errors[0].message


# ###############
# Attributes
# ###############


class TestAttributes:
    def test_type_override_applies(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Tagged", {"tags": [], "name": "x"})
        assert _errors(result) == [("tags", "empty_sequence")]

    def test_pre_transform_applies(self, mapper: TreeMapper) -> None:
        tagged = mapper.map("mapping_fixtures.Tagged", {"tags": ["a"], "name": "  bob "}).unwrap()
        assert tagged.name == "bob"


# ###############
# Interfaces and Bindings
# ###############


class TestInterfaces:
    def test_unregistered_interface_is_fatal(self, mapper: TreeMapper) -> None:
        with pytest.raises(InterfaceNotRegistered, match="mapping_fixtures.Shape"):
            mapper.map("mapping_fixtures.Drawing", {"shapes": [{"radius": 1}]})

    def test_inferred_implementation(self) -> None:
        mapper = MapperBuilder().infer(mapping_fixtures.Shape, mapping_fixtures.Circle).mapper()
        drawing = mapper.map("mapping_fixtures.Drawing", {"shapes": [{"radius": 1}, 2]}).unwrap()
        assert drawing.shapes == [mapping_fixtures.Circle(radius=1.0), mapping_fixtures.Circle(radius=2.0)]

    def test_protocol_implementation(self) -> None:
        mapper = MapperBuilder().infer("mapping_fixtures.Clock", "mapping_fixtures.FixedClock").mapper()
        scheduler = mapper.map("mapping_fixtures.Scheduler", {"clock": {}, "name": "jobs"}).unwrap()
        assert scheduler.clock.now() == 42

    def test_implementation_must_implement_interface(self) -> None:
        mapper = MapperBuilder().infer(mapping_fixtures.Shape, mapping_fixtures.Point).mapper()
        with pytest.raises(TreeMapperError, match="does not implement"):
            mapper.map("mapping_fixtures.Shape", {"x": 1, "y": 2})

    def test_bound_instance_short_circuits(self) -> None:
        address = mapping_fixtures.Address(street="Fixed", city="Bound")
        mapper = MapperBuilder().bind(mapping_fixtures.Address, address).mapper()
        customer = mapper.map("mapping_fixtures.Customer", {"name": "Ann", "address": "ignored"}).unwrap()
        assert customer.address is address


# ###############
# Hooks
# ###############


class TestHooks:
    def test_value_modifier_sees_raw_value(self) -> None:
        mapper = MapperBuilder().alter("string", lambda value: value.upper()).mapper()
        assert mapper.map("list<string>", ["a", "b"]).value == ["A", "B"]

    def test_modifier_registered_under_alias(self) -> None:
        mapper = MapperBuilder().alter("integer", lambda value: value * 2).mapper()
        assert mapper.map("int", 4).value == 8

    def test_node_visitors_see_every_node(self) -> None:
        paths: list[str] = []

        def record(node: Node) -> Node:
            paths.append(node.path)
            return node

        mapper = MapperBuilder().visit(record).mapper()
        mapper.map("mapping_fixtures.Point", {"x": 1, "y": 2})
        assert paths == ["x", "y", "*root*"]


# ###############
# Signatures and Fatal Errors
# ###############


class TestSignatures:
    def test_python_annotation(self, mapper: TreeMapper) -> None:
        result = mapper.map(list[mapping_fixtures.Point], [{"x": 1, "y": 2}])
        assert result.type == ListType(value_type=mapper.parse("mapping_fixtures.Point"))
        assert result.value == [mapping_fixtures.Point(x=1, y=2)]

    def test_unsupported_annotation(self, mapper: TreeMapper) -> None:
        with pytest.raises(TypeParsingError, match="Fixed-size tuples"):
            mapper.map(tuple[int, str], [1, "a"])

    def test_invalid_description(self, mapper: TreeMapper) -> None:
        with pytest.raises(TypeParsingError):
            mapper.map("list<int", [])

    def test_unknown_class(self, mapper: TreeMapper) -> None:
        with pytest.raises(ClassNotFound):
            mapper.map("mapping_fixtures.Nope", {})

    def test_too_deep(self) -> None:
        mapper = MapperBuilder().with_max_depth(2).mapper()
        with pytest.raises(TypeGraphTooDeep):
            mapper.map("mapping_fixtures.Tree", {"label": "a", "children": [{"label": "b"}]})

    def test_nullable_chain_within_limits(self, mapper: TreeMapper) -> None:
        link = mapper.map("mapping_fixtures.Link", _link_chain(5)).unwrap()
        assert link.next.next.next.next.value == 4
        assert link.next.next.next.next.next is None

    def test_nullable_chain_past_default_depth(self, mapper: TreeMapper) -> None:
        with pytest.raises(TypeGraphTooDeep):
            mapper.map("mapping_fixtures.Link", _link_chain(DEFAULT_MAX_DEPTH + 10))

    def test_recursion_limit_is_reported_as_too_deep(self) -> None:
        mapper = MapperBuilder().with_max_depth(100_000).mapper()
        with pytest.raises(TypeGraphTooDeep, match="Recursion limit"):
            mapper.map("mapping_fixtures.Link", _link_chain(sys.getrecursionlimit()))


# ###############
# Results
# ###############


class TestResults:
    def test_unwrap_success(self, mapper: TreeMapper) -> None:
        assert mapper.map("int", 1).unwrap() == 1

    def test_unwrap_failure_raises_with_every_error(self, mapper: TreeMapper) -> None:
        result = mapper.map("mapping_fixtures.Point", {"x": "bad", "y": "bad"})
        with pytest.raises(MappingFailed) as info:
            result.unwrap()
        assert info.value.errors == result.errors
        assert "x: Value 'bad'" in str(info.value)

    def test_mapper_is_reusable(self, mapper: TreeMapper) -> None:
        assert mapper.map("int", "1").value == 1
        assert mapper.map("int", "2").value == 2
