# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Built-in attributes for classes and parameters.

Class attributes are attached with :func:`attributes`::

    @attributes(StaticMethodConstructor("from_minutes"))
    @dataclass
    class Duration:
        seconds: int

        @classmethod
        def from_minutes(cls, minutes: int) -> "Duration":
            return cls(minutes * 60)

Parameter attributes are ``typing.Annotated`` metadata::

    @dataclass
    class Tagged:
        tags: Annotated[list[str], TypeOverride("non-empty-list<string>")]
        name: Annotated[str, PreTransform(str.strip)]
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from treemapper.mapper.shell import Shell

_ClassT = TypeVar("_ClassT", bound=type)

CLASS_ATTRIBUTES = "__treemapper_attributes__"

# ###############
# Public Interface
# ###############


def attributes(*items: object) -> Callable[[_ClassT], _ClassT]:
    """Attach attribute instances to a class, keeping source order across stacked decorators."""

    def decorate(cls: _ClassT) -> _ClassT:
        existing = tuple(cls.__dict__.get(CLASS_ATTRIBUTES, ()))
        setattr(cls, CLASS_ATTRIBUTES, tuple(items) + existing)
        return cls

    return decorate


@dataclass(frozen=True)
class StaticMethodConstructor:
    """Build the class through the named static or class method instead of ``__init__``."""

    method: str


@dataclass(frozen=True)
class TypeOverride:
    """Declare the parameter type with a type description instead of its annotation."""

    type: str


@dataclass(frozen=True)
class PreTransform:
    """Transform the raw input of a parameter before it is mapped."""

    transform: Callable[[Any], Any]

    def visit_shell(self, shell: Shell) -> Shell:
        if not shell.has_value:
            return shell
        return shell.with_value(self.transform(shell.value))
