# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shell visitors.

A shell visitor runs before a node is built. It may refine the shell (narrow
its type, transform its value) or resolve it to a finished node, which
short-circuits the node builders.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from treemapper.errors import InterfaceNotRegistered, InvalidClass
from treemapper.mapper.messages import MissingValue, UnionResolutionError
from treemapper.mapper.node import MappingError, Node
from treemapper.mapper.shell import Shell
from treemapper.types.classes import import_class, is_interface_class
from treemapper.types.nodes import NULL, ClassType, EnumType, InterfaceType, Type, UnionType, is_scalar
from treemapper.types.parser import CachedParser, TypeParser

logger = logging.getLogger(__name__)

NodeBuild = Callable[[Shell], Node]
"""Builds a shell through the whole node builder chain."""

# ###############
# Public Interface
# ###############


class ShellVisitor(Protocol):
    def visit(self, shell: Shell, build: NodeBuild) -> Shell: ...


class AggregateShellVisitor:
    """Runs visitors in order until one of them resolves the shell."""

    def __init__(self, *visitors: ShellVisitor) -> None:
        self._visitors = visitors

    def visit(self, shell: Shell, build: NodeBuild) -> Shell:
        for visitor in self._visitors:
            shell = visitor.visit(shell, build)
            if shell.resolved is not None:
                return shell
        return shell


class UnionNarrower(Protocol):
    """One stage of union narrowing.

    Returns the node of the first member that accepts the value, or None after
    recording every failed member in *attempts*.
    """

    def narrow(
        self, shell: Shell, union: UnionType, build: NodeBuild, attempts: list[tuple[Type, Sequence[MappingError]]]
    ) -> Node | None: ...


class UnionNullNarrower:
    """Resolves a null or absent value to null when the union admits it."""

    def narrow(
        self, shell: Shell, union: UnionType, build: NodeBuild, attempts: list[tuple[Type, Sequence[MappingError]]]
    ) -> Node | None:
        if NULL in union.members and (not shell.has_value or shell.value is None):
            return Node.leaf(shell.with_type(NULL), None)
        return None


class UnionObjectNarrower:
    """Tries every non-scalar member with a full recursive build; the first valid one wins."""

    def narrow(
        self, shell: Shell, union: UnionType, build: NodeBuild, attempts: list[tuple[Type, Sequence[MappingError]]]
    ) -> Node | None:
        return _first_valid(shell, [m for m in union.members if not is_scalar(m)], build, attempts)


class UnionScalarNarrower:
    """Tries the scalar members in declaration order, with coercion."""

    def narrow(
        self, shell: Shell, union: UnionType, build: NodeBuild, attempts: list[tuple[Type, Sequence[MappingError]]]
    ) -> Node | None:
        members = [m for m in union.members if is_scalar(m) and m != NULL]
        return _first_valid(shell, members, build, attempts)


class UnionShellVisitor:
    """Narrows a union-typed shell to the node of one member.

    Raises:
        MissingValue: If the value is absent and the union does not admit null.
        UnionResolutionError: If no member accepts the value.
    """

    def __init__(self, *narrowers: UnionNarrower) -> None:
        self._narrowers = narrowers or (UnionNullNarrower(), UnionObjectNarrower(), UnionScalarNarrower())

    def visit(self, shell: Shell, build: NodeBuild) -> Shell:
        union = shell.type
        if not isinstance(union, UnionType):
            return shell
        if not shell.has_value and NULL not in union.members:
            raise MissingValue(union)

        attempts: list[tuple[Type, Sequence[MappingError]]] = []
        for narrower in self._narrowers:
            node = narrower.narrow(shell, union, build, attempts)
            if node is not None:
                return shell.resolve(node)
        raise UnionResolutionError(union, shell.value, attempts)


class InterfaceShellVisitor:
    """Replaces an interface type with its registered implementation.

    Args:
        mapping: Interface class paths to implementation type descriptions.
        parser: Parser for the implementation descriptions.
    """

    def __init__(self, mapping: Mapping[str, str], parser: TypeParser | CachedParser) -> None:
        self._mapping = mapping
        self._parser = parser

    def visit(self, shell: Shell, build: NodeBuild) -> Shell:
        interface = shell.type
        if not isinstance(interface, InterfaceType):
            return shell
        target = self._mapping.get(interface.name)
        if target is None:
            raise InterfaceNotRegistered(interface.name)

        implementation = self._parser.parse(target)
        if not isinstance(implementation, (ClassType, EnumType)):
            raise InvalidClass(f"Implementation `{target}` of interface `{interface.name}` is not a concrete class")
        _check_implements(interface.name, implementation.name)
        logger.debug("Inferred %s for interface %s at %s", implementation, interface.name, shell.path_string)
        return shell.with_type(implementation)


class AttributeShellVisitor:
    """Applies every declaration-site attribute that defines ``visit_shell``."""

    def visit(self, shell: Shell, build: NodeBuild) -> Shell:
        for attribute in shell.attributes:
            visit_shell = getattr(attribute, "visit_shell", None)
            if callable(visit_shell):
                shell = visit_shell(shell)
        return shell


class ObjectBindingShellVisitor:
    """Resolves shells whose type is bound to a fixed instance.

    Args:
        bindings: Canonical type descriptions to the instance standing for them.
    """

    def __init__(self, bindings: Mapping[str, Any]) -> None:
        self._bindings = bindings

    def visit(self, shell: Shell, build: NodeBuild) -> Shell:
        key = str(shell.type)
        if key not in self._bindings:
            return shell
        return shell.resolve(Node.leaf(shell, self._bindings[key]))


# ################
# Implementation
# ################


def _first_valid(
    shell: Shell,
    members: Sequence[Type],
    build: NodeBuild,
    attempts: list[tuple[Type, Sequence[MappingError]]],
) -> Node | None:
    for member in members:
        node = build(shell.with_type(member))
        if node.is_valid:
            return node
        attempts.append((member, node.errors))
    return None


def _check_implements(interface: str, implementation: str) -> None:
    interface_cls = import_class(interface)
    if getattr(interface_cls, "_is_protocol", False) or not is_interface_class(interface_cls):
        return
    if not issubclass(import_class(implementation), interface_cls):
        raise InvalidClass(f"`{implementation}` does not implement interface `{interface}`")
