# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapped nodes, path-tagged errors and the mapping result."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import chain
from typing import Any

from treemapper.errors import TreeMapperError
from treemapper.mapper.messages import Message
from treemapper.mapper.shell import Shell
from treemapper.types.nodes import Type

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class MappingError:
    """A failure recorded against a node.

    Attributes:
        path: Dotted path of the node (``*root*`` for the root).
        code: Stable error code of the message.
        message: Human-readable description of the failure.
    """

    path: str
    code: str
    message: str


@dataclass(frozen=True)
class Node:
    """The outcome of mapping one shell: a value, or the errors of its subtree."""

    path: str
    type: Type
    value: Any = None
    errors: tuple[MappingError, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def leaf(cls, shell: Shell, value: Any) -> Node:
        return cls(path=shell.path_string, type=shell.type, value=value)

    @classmethod
    def error(cls, shell: Shell, message: Message) -> Node:
        error = MappingError(path=shell.path_string, code=message.code, message=str(message))
        return cls(path=shell.path_string, type=shell.type, errors=(error,))

    @classmethod
    def branch(cls, shell: Shell, value: Any, children: Sequence[Node]) -> Node:
        """Combine children; the branch is invalid as soon as one child is."""
        errors = tuple(chain.from_iterable(child.errors for child in children))
        return cls(path=shell.path_string, type=shell.type, value=None if errors else value, errors=errors)


class MappingFailed(TreeMapperError):
    """Raised by :meth:`MappingResult.unwrap` with every error of a failed mapping."""

    def __init__(self, type_: Type, errors: Sequence[MappingError]) -> None:
        lines = "\n".join(f"  {e.path}: {e.message}" for e in errors)
        super().__init__(f"Could not map type `{type_}`:\n{lines}")
        self.errors = tuple(errors)


@dataclass(frozen=True)
class MappingResult:
    """Result of :meth:`TreeMapper.map`: the built value, or every collected error.

    Attributes:
        type: The parsed target type.
        value: The built value; None when the mapping failed.
        errors: Path-tagged errors, empty on success.
    """

    type: Type
    value: Any = None
    errors: tuple[MappingError, ...] = ()

    @property
    def is_ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> Any:
        """Return the built value.

        Raises:
            MappingFailed: If the mapping failed.
        """
        if self.errors:
            raise MappingFailed(self.type, self.errors)
        return self.value
