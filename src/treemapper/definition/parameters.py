# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Structural class definitions: parameters and construction strategy."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from treemapper.definition.attributes import EMPTY_ATTRIBUTES, Attributes
from treemapper.definition.reflection import DEFAULT_FACTORY
from treemapper.errors import ParameterNotFound
from treemapper.types.nodes import ClassType, Type

__all__ = [
    "DEFAULT_FACTORY",
    "Construction",
    "ParameterDefinition",
    "Parameters",
    "ClassDefinition",
]

# ###############
# Public Interface
# ###############


class Construction(Enum):
    """How instances of a class are built."""

    CONSTRUCTOR = "constructor"
    FACTORY_METHOD = "factory-method"
    PROPERTIES = "properties"


@dataclass(frozen=True)
class ParameterDefinition:
    """A constructor (or factory method, or property) parameter.

    Attributes:
        name: Parameter name, also the key expected in the source mapping.
        type: Declared type.
        has_default: Whether the parameter can be omitted.
        default: The default value; :data:`DEFAULT_FACTORY` for factory defaults.
        attributes: Attributes declared on the parameter.
    """

    name: str
    type: Type
    has_default: bool = False
    default: Any = None
    attributes: Attributes = EMPTY_ATTRIBUTES


class Parameters:
    """Parameters keyed by name, in declaration order."""

    def __init__(self, *parameters: ParameterDefinition) -> None:
        self._parameters: dict[str, ParameterDefinition] = {p.name: p for p in parameters}

    def has(self, name: str) -> bool:
        return name in self._parameters

    def get(self, name: str) -> ParameterDefinition:
        """Return the parameter called *name*.

        Raises:
            ParameterNotFound: If no such parameter exists.
        """
        try:
            return self._parameters[name]
        except KeyError:
            raise ParameterNotFound(name) from None

    def names(self) -> list[str]:
        return list(self._parameters)

    def __iter__(self) -> Iterator[ParameterDefinition]:
        return iter(self._parameters.values())

    def __len__(self) -> int:
        return len(self._parameters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parameters):
            return NotImplemented
        return list(self._parameters.values()) == list(other._parameters.values())

    def __repr__(self) -> str:
        return f"Parameters({', '.join(self._parameters)})"


@dataclass(frozen=True)
class ClassDefinition:
    """The introspected structure of a constructible class.

    Attributes:
        type: The class type, including its generic bindings.
        parameters: Parameters needed to build an instance.
        attributes: Attributes declared on the class.
        construction: The construction strategy.
        factory_method: Name of the factory method for :attr:`Construction.FACTORY_METHOD`.
    """

    type: ClassType
    parameters: Parameters = field(default_factory=Parameters)
    attributes: Attributes = EMPTY_ATTRIBUTES
    construction: Construction = Construction.CONSTRUCTOR
    factory_method: str | None = None

    @property
    def name(self) -> str:
        return self.type.name
