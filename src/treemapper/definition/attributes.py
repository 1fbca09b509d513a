# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Attribute containers and the default attributes source.

Attributes are opaque objects attached to a declaration site: a class, or a
parameter of its constructor (or of its factory method). Class attributes are
attached with the :func:`treemapper.attributes.attributes` decorator; parameter
attributes are the metadata of a ``typing.Annotated`` annotation.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Annotated, Protocol, TypeVar, get_args, get_origin

from treemapper.attributes import CLASS_ATTRIBUTES
from treemapper.definition.reflection import resolved_hints

# ###############
# Public Interface
# ###############

_AttributeT = TypeVar("_AttributeT")


class Attributes:
    """An ordered, possibly duplicated, sequence of attribute instances."""

    def __init__(self, *attributes: object) -> None:
        self._attributes = attributes

    def has(self, cls: type) -> bool:
        """Return True if at least one attribute is an instance of *cls*."""
        return any(isinstance(attribute, cls) for attribute in self._attributes)

    def of_type(self, cls: type[_AttributeT]) -> list[_AttributeT]:
        """Return the attributes that are instances of *cls*, in source order."""
        return [attribute for attribute in self._attributes if isinstance(attribute, cls)]

    def __iter__(self) -> Iterator[object]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attributes):
            return NotImplemented
        return self._attributes == other._attributes

    def __hash__(self) -> int:
        return hash(self._attributes)

    def __repr__(self) -> str:
        return f"Attributes{self._attributes!r}"


EMPTY_ATTRIBUTES = Attributes()


@dataclass(frozen=True)
class DeclarationSite:
    """Where attributes are declared.

    Attributes:
        owner: The class owning the declaration.
        method: Name of the factory method, or None for the constructor.
        parameter: Parameter name, or None for the class itself.
    """

    owner: type
    method: str | None = None
    parameter: str | None = None


class AttributesSource(Protocol):
    """Supplies the attributes declared at a site, in declaration order."""

    def attributes_for(self, site: DeclarationSite) -> Sequence[object]: ...


class AnnotatedAttributesSource:
    """Reads class attributes from the class itself and parameter attributes from ``Annotated`` metadata."""

    def attributes_for(self, site: DeclarationSite) -> Sequence[object]:
        if site.parameter is None:
            return tuple(site.owner.__dict__.get(CLASS_ATTRIBUTES, ()))
        annotation = resolved_hints(site.owner, site.method).get(site.parameter)
        if get_origin(annotation) is Annotated:
            return tuple(get_args(annotation)[1:])
        return ()
