# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Per-node traversal context."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from treemapper.definition.attributes import EMPTY_ATTRIBUTES, Attributes
from treemapper.types.nodes import Type

if TYPE_CHECKING:
    from treemapper.mapper.node import Node

ROOT_PATH = "*root*"

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class Shell:
    """The type, raw value, path and attributes of one node being mapped.

    Attributes:
        type: Type the value must be mapped to.
        value: Raw input for this node.
        has_value: False when the key was absent from the source.
        path: Property names and indexes leading from the root to this node.
        attributes: Attributes of the declaration site (parameter) of this node.
        resolved: A node that short-circuits the node builders, set by shell visitors.
    """

    type: Type
    value: Any = None
    has_value: bool = True
    path: tuple[int | str, ...] = ()
    attributes: Attributes = EMPTY_ATTRIBUTES
    resolved: Node | None = None

    @classmethod
    def root(cls, type_: Type, value: Any) -> Shell:
        return cls(type=type_, value=value)

    def child(self, segment: int | str, type_: Type, value: Any, attributes: Attributes = EMPTY_ATTRIBUTES) -> Shell:
        return Shell(type=type_, value=value, path=self.path + (segment,), attributes=attributes)

    def absent_child(self, segment: int | str, type_: Type, attributes: Attributes = EMPTY_ATTRIBUTES) -> Shell:
        return Shell(type=type_, has_value=False, path=self.path + (segment,), attributes=attributes)

    def with_type(self, type_: Type) -> Shell:
        return replace(self, type=type_)

    def with_value(self, value: Any) -> Shell:
        return replace(self, value=value, has_value=True)

    def resolve(self, node: Node) -> Shell:
        return replace(self, resolved=node)

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def path_string(self) -> str:
        return render_path(self.path)


def render_path(path: tuple[int | str, ...]) -> str:
    """Render a path as dotted segments, or ``*root*`` for the root node."""
    if not path:
        return ROOT_PATH
    return ".".join(str(segment) for segment in path)
