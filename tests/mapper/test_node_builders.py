# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the node builder chain and its middlewares."""

import pytest

from treemapper.errors import TreeMapperError, TypeGraphTooDeep
from treemapper.mapper.builders import (
    DepthGuard,
    ErrorCatcher,
    ListNodeBuilder,
    NodeBuilderChain,
    NodeVisiting,
    ScalarNodeBuilder,
    TypeDispatch,
    ValueAltering,
)
from treemapper.mapper.messages import InvalidScalarValue
from treemapper.mapper.node import Node
from treemapper.mapper.scalars import PERMISSIVE_COERCION
from treemapper.mapper.shell import Shell
from treemapper.types.nodes import NULL, ListType, ScalarKind, ScalarType, scalar

INT = scalar(ScalarKind.INT)

# ###############
# Test Helpers
# ###############


def _dispatch() -> TypeDispatch:
    return TypeDispatch({ScalarType: ScalarNodeBuilder(PERMISSIVE_COERCION), ListType: ListNodeBuilder()})


class Recorder:
    """Middleware recording the order in which layers run."""

    def __init__(self, name: str, log: list[str]) -> None:
        self._name = name
        self._log = log

    def __call__(self, shell, next_build, build) -> Node:
        self._log.append(f"{self._name}:{shell.path_string}")
        return next_build(shell)


# ###############
# Chain
# ###############


class TestNodeBuilderChain:
    def test_middlewares_run_outermost_first(self) -> None:
        log: list[str] = []
        chain = NodeBuilderChain([Recorder("outer", log), Recorder("inner", log)], _dispatch())
        assert chain.build(Shell.root(INT, "1")).value == 1
        assert log == ["outer:*root*", "inner:*root*"]

    def test_children_reenter_the_whole_chain(self) -> None:
        log: list[str] = []
        chain = NodeBuilderChain([Recorder("outer", log)], _dispatch())
        node = chain.build(Shell.root(ListType(value_type=INT), [1, 2]))
        assert node.value == [1, 2]
        assert log == ["outer:*root*", "outer:0", "outer:1"]

    def test_without_middlewares(self) -> None:
        assert NodeBuilderChain([], _dispatch()).build(Shell.root(INT, 3)).value == 3


class TestErrorCatcher:
    def test_message_becomes_node_error(self) -> None:
        chain = NodeBuilderChain([ErrorCatcher()], _dispatch())
        node = chain.build(Shell.root(ListType(value_type=INT), [1, "x"]))
        assert not node.is_valid
        assert node.value is None
        assert [(e.path, e.code) for e in node.errors] == [("1", "invalid_scalar_value")]

    def test_message_escapes_without_catcher(self) -> None:
        with pytest.raises(InvalidScalarValue):
            NodeBuilderChain([], _dispatch()).build(Shell.root(INT, "x"))

    def test_other_exceptions_propagate(self) -> None:
        def failing(shell, next_build, build) -> Node:
            raise ValueError("boom")

        chain = NodeBuilderChain([ErrorCatcher(), failing], _dispatch())
        with pytest.raises(ValueError, match="boom"):
            chain.build(Shell.root(INT, 1))


class TestDepthGuard:
    def test_allows_paths_up_to_the_limit(self) -> None:
        chain = NodeBuilderChain([DepthGuard(1)], _dispatch())
        assert chain.build(Shell.root(ListType(value_type=INT), [1])).value == [1]

    def test_rejects_deeper_paths(self) -> None:
        chain = NodeBuilderChain([DepthGuard(1), ErrorCatcher()], _dispatch())
        nested = ListType(value_type=ListType(value_type=INT))
        with pytest.raises(TypeGraphTooDeep):
            chain.build(Shell.root(nested, [[1]]))

    def test_recursion_error_becomes_too_deep(self) -> None:
        def exhausted(shell, next_build, build) -> Node:
            raise RecursionError("maximum recursion depth exceeded")

        chain = NodeBuilderChain([DepthGuard(10), ErrorCatcher(), exhausted], _dispatch())
        with pytest.raises(TypeGraphTooDeep, match=r"Recursion limit reached at path `\*root\*`") as info:
            chain.build(Shell.root(INT, 1))
        assert isinstance(info.value.__cause__, RecursionError)


class TestValueAltering:
    def test_modifiers_apply_in_order(self) -> None:
        altering = ValueAltering({"int": [lambda v: v + 1, lambda v: v * 10]})
        chain = NodeBuilderChain([altering], _dispatch())
        assert chain.build(Shell.root(INT, 1)).value == 20

    def test_other_types_are_untouched(self) -> None:
        altering = ValueAltering({"string": [str.upper]})
        assert NodeBuilderChain([altering], _dispatch()).build(Shell.root(INT, 1)).value == 1

    def test_absent_values_are_not_altered(self) -> None:
        calls: list[object] = []
        altering = ValueAltering({"null": [calls.append]})
        shell = Shell.root(INT, None).absent_child("field", NULL)
        assert NodeBuilderChain([altering], _dispatch()).build(shell).value is None
        assert calls == []


class TestNodeVisiting:
    def test_visitors_may_replace_nodes(self) -> None:
        def double(node: Node) -> Node:
            return Node(path=node.path, type=node.type, value=node.value * 2)

        chain = NodeBuilderChain([NodeVisiting([double])], _dispatch())
        assert chain.build(Shell.root(INT, 2)).value == 4


class TestTypeDispatch:
    def test_unknown_kind_is_fatal(self) -> None:
        with pytest.raises(TreeMapperError, match="No node builder"):
            TypeDispatch({}).build(Shell.root(INT, 1), lambda shell: Node.leaf(shell, None))

    def test_absent_value_is_missing(self) -> None:
        chain = NodeBuilderChain([ErrorCatcher()], _dispatch())
        node = chain.build(Shell.root(INT, None).absent_child("field", INT))
        assert [(e.path, e.code) for e in node.errors] == [("field", "missing_value")]

    def test_absent_null_maps_to_none(self) -> None:
        node = _dispatch().build(Shell.root(INT, None).absent_child("field", NULL), lambda shell: shell)
        assert node.is_valid
        assert node.value is None
