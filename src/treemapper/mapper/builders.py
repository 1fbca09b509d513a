# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""The node builder chain.

Building a node runs the shell through an ordered list of middlewares and
finally through the type dispatch, which picks the node builder of the shell's
type kind. Every middleware receives the next step explicitly, and every type
builder receives the entry point of the whole chain to build child shells.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import partial
from typing import Any, Protocol

from treemapper.definition.repository import ClassDefinitionRepository
from treemapper.errors import TreeMapperError, TypeGraphTooDeep
from treemapper.mapper.messages import (
    EmptySequence,
    InvalidEnumValue,
    InvalidScalarValue,
    InvalidSourceValue,
    Message,
    MissingShapedField,
    MissingValue,
    UnexpectedKey,
)
from treemapper.mapper.node import Node
from treemapper.mapper.object_builder import ObjectBuilder, ObjectBuilderFactory
from treemapper.mapper.scalars import CoercionRules, cast_scalar
from treemapper.mapper.shell import Shell
from treemapper.mapper.visitors import NodeBuild, ShellVisitor
from treemapper.types.classes import import_class
from treemapper.types.nodes import (
    MIXED,
    NULL,
    ArrayType,
    ClassType,
    EnumType,
    IterableType,
    ListType,
    NonEmptyArrayType,
    NonEmptyListType,
    ScalarType,
    ShapedArrayType,
    Type,
    UnionType,
)

logger = logging.getLogger(__name__)

ValueModifier = Callable[[Any], Any]
NodeVisitor = Callable[[Node], Node]

# ###############
# Public Interface
# ###############


class TypeNodeBuilder(Protocol):
    """Builds the node of one type kind."""

    def build(self, shell: Shell, build: NodeBuild) -> Node: ...


class NodeMiddleware(Protocol):
    """One layer of the chain; calls *next_build* to continue with the inner layers."""

    def __call__(self, shell: Shell, next_build: NodeBuild, build: NodeBuild) -> Node: ...


class NodeBuilderChain:
    """Runs middlewares outermost first, then dispatches on the type kind.

    Args:
        middlewares: Layers in outermost to innermost order.
        dispatch: Builds the node once every middleware has run.
    """

    def __init__(self, middlewares: Sequence[NodeMiddleware], dispatch: TypeNodeBuilder) -> None:
        self._middlewares = tuple(middlewares)
        self._dispatch = dispatch

    def build(self, shell: Shell) -> Node:
        return self._run(0, shell)

    def _run(self, index: int, shell: Shell) -> Node:
        if index == len(self._middlewares):
            return self._dispatch.build(shell, self.build)
        return self._middlewares[index](shell, partial(self._run, index + 1), self.build)


class DepthGuard:
    """Aborts the mapping when a path grows deeper than *max_depth*.

    Union attempts re-enter the chain without extending the path, so the
    interpreter recursion limit can be reached first; it is reported the same way.

    Raises:
        TypeGraphTooDeep: Always fatal, never recorded as a node error.
    """

    def __init__(self, max_depth: int) -> None:
        self._max_depth = max_depth

    def __call__(self, shell: Shell, next_build: NodeBuild, build: NodeBuild) -> Node:
        if shell.depth > self._max_depth:
            raise TypeGraphTooDeep(shell.path_string, self._max_depth)
        try:
            return next_build(shell)
        except RecursionError as exc:
            raise TypeGraphTooDeep(shell.path_string, self._max_depth, recursion_limit=True) from exc


class ErrorCatcher:
    """Records a :class:`Message` raised below as an error of the current node."""

    def __call__(self, shell: Shell, next_build: NodeBuild, build: NodeBuild) -> Node:
        try:
            return next_build(shell)
        except Message as message:
            logger.debug("Mapping error at %s: %s", shell.path_string, message)
            return Node.error(shell, message)


class ShellVisiting:
    """Runs a shell visitor; a resolved shell skips the inner layers."""

    def __init__(self, visitor: ShellVisitor) -> None:
        self._visitor = visitor

    def __call__(self, shell: Shell, next_build: NodeBuild, build: NodeBuild) -> Node:
        shell = self._visitor.visit(shell, build)
        if shell.resolved is not None:
            return shell.resolved
        return next_build(shell)


class ValueAltering:
    """Applies the value modifiers registered for the canonical type of the shell.

    Args:
        modifiers: Canonical type descriptions to modifiers, applied in order.
    """

    def __init__(self, modifiers: Mapping[str, Sequence[ValueModifier]]) -> None:
        self._modifiers = modifiers

    def __call__(self, shell: Shell, next_build: NodeBuild, build: NodeBuild) -> Node:
        if shell.has_value:
            for modifier in self._modifiers.get(str(shell.type), ()):
                shell = shell.with_value(modifier(shell.value))
        return next_build(shell)


class NodeVisiting:
    """Passes every built node through the node visitors, in order."""

    def __init__(self, visitors: Iterable[NodeVisitor]) -> None:
        self._visitors = tuple(visitors)

    def __call__(self, shell: Shell, next_build: NodeBuild, build: NodeBuild) -> Node:
        node = next_build(shell)
        for visitor in self._visitors:
            node = visitor(node)
        return node


class TypeDispatch:
    """Picks the node builder registered for the kind of the shell type.

    Raises:
        MissingValue: If the value is absent and the type is not null.
    """

    def __init__(self, builders: Mapping[type, TypeNodeBuilder]) -> None:
        self._builders = builders

    def build(self, shell: Shell, build: NodeBuild) -> Node:
        builder = self._builders.get(type(shell.type))
        if builder is None:
            raise TreeMapperError(f"No node builder for type `{shell.type}`")
        if not shell.has_value:
            if shell.type != NULL:
                raise MissingValue(shell.type)
            return Node.leaf(shell, None)
        return builder.build(shell, build)


class ScalarNodeBuilder:
    def __init__(self, rules: CoercionRules) -> None:
        self._rules = rules

    def build(self, shell: Shell, build: NodeBuild) -> Node:
        return Node.leaf(shell, cast_scalar(shell.type, shell.value, self._rules))


class ListNodeBuilder:
    """Builds ``list<V>`` and ``non-empty-list<V>`` from a list or tuple."""

    def build(self, shell: Shell, build: NodeBuild) -> Node:
        type_ = shell.type
        value = shell.value
        if not isinstance(value, (list, tuple)):
            raise InvalidSourceValue(f"a list matching `{type_}`", value)
        if isinstance(type_, NonEmptyListType) and not value:
            raise EmptySequence(type_)

        children = [build(shell.child(index, type_.value_type, item)) for index, item in enumerate(value)]
        return Node.branch(shell, [child.value for child in children], children)


class ArrayNodeBuilder:
    """Builds keyed arrays (``array``, ``non-empty-array``, ``iterable``) into dicts.

    Lists are accepted with their indexes as keys.
    """

    def __init__(self, rules: CoercionRules) -> None:
        self._rules = rules

    def build(self, shell: Shell, build: NodeBuild) -> Node:
        type_ = shell.type
        items = _items_of(shell.value)
        if items is None:
            raise InvalidSourceValue(f"an array matching `{type_}`", shell.value)
        if isinstance(type_, NonEmptyArrayType) and not items:
            raise EmptySequence(type_)

        children: list[Node] = []
        result: dict[Any, Any] = {}
        for key, item in items:
            try:
                mapped_key = _cast_key(type_.key_type, key, self._rules)
            except Message as message:
                children.append(Node.error(shell.child(key, type_.key_type, key), message))
                continue
            child = build(shell.child(key, type_.value_type, item))
            children.append(child)
            result[mapped_key] = child.value
        return Node.branch(shell, result, children)


class ShapedArrayNodeBuilder:
    """Builds ``array{...}`` shapes into dicts keyed by the declared keys."""

    def __init__(self, allow_superfluous_keys: bool) -> None:
        self._allow_superfluous_keys = allow_superfluous_keys

    def build(self, shell: Shell, build: NodeBuild) -> Node:
        type_ = shell.type
        items = _items_of(shell.value)
        if items is None:
            raise InvalidSourceValue(f"an array matching `{type_}`", shell.value)
        source = _shape_source(type_, items)

        children: list[Node] = []
        result: dict[Any, Any] = {}
        for element in type_.elements:
            if element.key in source:
                child = build(shell.child(element.key, element.type, source[element.key]))
                children.append(child)
                result[element.key] = child.value
            elif not element.optional:
                children.append(
                    Node.error(shell.child(element.key, element.type, None), MissingShapedField(element.key, element.type))
                )

        if not self._allow_superfluous_keys:
            for key, item in source.items():
                if type_.element(key) is None:
                    children.append(Node.error(shell.child(key, MIXED, item), UnexpectedKey(key)))
        return Node.branch(shell, result, children)


class EnumNodeBuilder:
    """Maps a value (or a member name) onto an :class:`enum.Enum` member."""

    def build(self, shell: Shell, build: NodeBuild) -> Node:
        enum_cls = import_class(shell.type.name)
        value = shell.value
        if isinstance(value, enum_cls):
            return Node.leaf(shell, value)
        for member in enum_cls:
            if member.value == value and isinstance(member.value, bool) == isinstance(value, bool):
                return Node.leaf(shell, member)
        if isinstance(value, str) and value in enum_cls.__members__:
            return Node.leaf(shell, enum_cls.__members__[value])
        raise InvalidEnumValue(shell.type, value, [member.value for member in enum_cls])


class ClassNodeBuilder:
    """Maps a source mapping onto the parameters of a class, then builds it.

    A class with a single parameter also accepts that parameter's value
    directly in place of the mapping. Parameters absent from the source keep
    their default; absent parameters without default are still built, so that
    a nullable type maps them to null and any other type reports them missing.
    """

    def __init__(
        self,
        repository: ClassDefinitionRepository,
        factory: ObjectBuilderFactory,
        allow_superfluous_keys: bool,
    ) -> None:
        self._repository = repository
        self._factory = factory
        self._allow_superfluous_keys = allow_superfluous_keys
        self._builders: dict[ClassType, ObjectBuilder] = {}

    def build(self, shell: Shell, build: NodeBuild) -> Node:
        type_ = shell.type
        builder = self._builder_for(type_)
        parameters = builder.parameters_needed()

        source = shell.value
        if len(parameters) == 1 and not isinstance(source, Mapping):
            source = {next(iter(parameters)).name: source}
        if not isinstance(source, Mapping):
            raise InvalidSourceValue(f"a mapping of the parameters of `{type_}`", source)

        children: list[Node] = []
        values: dict[str, Any] = {}
        for parameter in parameters:
            if parameter.name in source:
                child_shell = shell.child(parameter.name, parameter.type, source[parameter.name], parameter.attributes)
            elif parameter.has_default:
                continue
            else:
                child_shell = shell.absent_child(parameter.name, parameter.type, parameter.attributes)
            child = build(child_shell)
            children.append(child)
            values[parameter.name] = child.value

        if not self._allow_superfluous_keys:
            for key, item in source.items():
                if not (isinstance(key, str) and parameters.has(key)):
                    children.append(Node.error(shell.child(key, MIXED, item), UnexpectedKey(key)))

        node = Node.branch(shell, None, children)
        if not node.is_valid:
            return node
        return Node.leaf(shell, builder.build(values))

    def _builder_for(self, type_: ClassType) -> ObjectBuilder:
        builder = self._builders.get(type_)
        if builder is None:
            builder = self._factory.builder_for(self._repository.definition_for(type_))
            self._builders[type_] = builder
        return builder


def default_type_builders(
    repository: ClassDefinitionRepository,
    factory: ObjectBuilderFactory,
    rules: CoercionRules,
    allow_superfluous_keys: bool,
) -> dict[type, TypeNodeBuilder]:
    """Return the node builder of every type kind except unions and interfaces."""
    array = ArrayNodeBuilder(rules)
    lists = ListNodeBuilder()
    return {
        ScalarType: ScalarNodeBuilder(rules),
        ArrayType: array,
        NonEmptyArrayType: array,
        IterableType: array,
        ListType: lists,
        NonEmptyListType: lists,
        ShapedArrayType: ShapedArrayNodeBuilder(allow_superfluous_keys),
        EnumType: EnumNodeBuilder(),
        ClassType: ClassNodeBuilder(repository, factory, allow_superfluous_keys),
    }


# ################
# Implementation
# ################

_INTEGER_KEY = re.compile(r"-?[0-9]+")


def _items_of(value: Any) -> list[tuple[Any, Any]] | None:
    if isinstance(value, Mapping):
        return list(value.items())
    if isinstance(value, (list, tuple)):
        return list(enumerate(value))
    return None


def _shape_source(type_: ShapedArrayType, items: list[tuple[Any, Any]]) -> dict[Any, Any]:
    """Key *items* for lookup in *type_*; numeric string keys match integer shape keys."""
    source = dict(items)
    for key, item in items:
        if isinstance(key, str) and _INTEGER_KEY.fullmatch(key) and int(key) not in source:
            if type_.element(int(key)) is not None:
                del source[key]
                source[int(key)] = item
    return source


def _cast_key(key_type: Type, key: Any, rules: CoercionRules) -> Any:
    members = key_type.members if isinstance(key_type, UnionType) else (key_type,)
    for member in members:
        if not isinstance(member, ScalarType):
            continue
        try:
            return cast_scalar(member, key, rules)
        except InvalidScalarValue:
            continue
    raise InvalidScalarValue(key_type, key)

