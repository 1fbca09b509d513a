# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Immutable type tree produced by the type parser."""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class ScalarKind(Enum):
    """Scalar kinds known to the type language."""

    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    NULL = "null"
    MIXED = "mixed"
    NON_EMPTY_STRING = "non-empty-string"
    POSITIVE_INT = "positive-int"
    NEGATIVE_INT = "negative-int"
    ARRAY_KEY = "array-key"


class _TypeNode(BaseModel):
    model_config = ConfigDict(frozen=True)


class ScalarType(_TypeNode):
    """A scalar such as ``int`` or ``non-empty-string``."""

    kind: Literal["scalar"] = "scalar"
    scalar: ScalarKind

    def __str__(self) -> str:
        return self.scalar.value


class ArrayType(_TypeNode):
    """``array<K, V>``: a mapping of keys to values."""

    kind: Literal["array"] = "array"
    key_type: Type
    value_type: Type

    def __str__(self) -> str:
        return f"array<{self.key_type}, {self.value_type}>"


class NonEmptyArrayType(_TypeNode):
    """``non-empty-array<K, V>``: a mapping holding at least one entry."""

    kind: Literal["non-empty-array"] = "non-empty-array"
    key_type: Type
    value_type: Type

    def __str__(self) -> str:
        return f"non-empty-array<{self.key_type}, {self.value_type}>"


class IterableType(_TypeNode):
    """``iterable<K, V>``."""

    kind: Literal["iterable"] = "iterable"
    key_type: Type
    value_type: Type

    def __str__(self) -> str:
        return f"iterable<{self.key_type}, {self.value_type}>"


class ListType(_TypeNode):
    """``list<V>``: a sequence indexed from zero."""

    kind: Literal["list"] = "list"
    value_type: Type

    def __str__(self) -> str:
        return f"list<{self.value_type}>"


class NonEmptyListType(_TypeNode):
    """``non-empty-list<V>``."""

    kind: Literal["non-empty-list"] = "non-empty-list"
    value_type: Type

    def __str__(self) -> str:
        return f"non-empty-list<{self.value_type}>"


class ShapedArrayElement(_TypeNode):
    """One named (or positional) field of a shaped array."""

    key: int | str
    type: Type
    optional: bool = False

    def __str__(self) -> str:
        key = self.key
        if isinstance(key, str) and not _BARE_KEY.match(key):
            key = "'" + key.replace("'", "\\'") + "'"
        marker = "?" if self.optional else ""
        return f"{key}{marker}: {self.type}"


class ShapedArrayType(_TypeNode):
    """``array{a: int, b?: string}``: a fixed-shape record."""

    kind: Literal["shaped-array"] = "shaped-array"
    elements: tuple[ShapedArrayElement, ...]

    @model_validator(mode="after")
    def _check_unique_keys(self) -> ShapedArrayType:
        keys = [element.key for element in self.elements]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Duplicate keys in shaped array: {keys}")
        return self

    def element(self, key: int | str) -> ShapedArrayElement | None:
        """Return the element declared for *key*, if any."""
        for element in self.elements:
            if element.key == key:
                return element
        return None

    def __str__(self) -> str:
        return "array{" + ", ".join(str(e) for e in self.elements) + "}"


class ClassType(_TypeNode):
    """A concrete class, with its generic bindings in declaration order."""

    kind: Literal["class"] = "class"
    name: str
    generics: tuple[tuple[str, Type], ...] = ()

    def __str__(self) -> str:
        if not self.generics:
            return self.name
        return f"{self.name}<" + ", ".join(str(t) for _, t in self.generics) + ">"


class EnumType(_TypeNode):
    """A subclass of :class:`enum.Enum`."""

    kind: Literal["enum"] = "enum"
    name: str

    def __str__(self) -> str:
        return self.name


class InterfaceType(_TypeNode):
    """An abstract class or protocol that must be bound to an implementation."""

    kind: Literal["interface"] = "interface"
    name: str

    def __str__(self) -> str:
        return self.name


class UnionType(_TypeNode):
    """``A|B|C``. Members are distinct, flat, and keep declaration order."""

    kind: Literal["union"] = "union"
    members: tuple[Type, ...]

    @model_validator(mode="after")
    def _check_members(self) -> UnionType:
        if len(self.members) < 2:
            raise ValueError("A union needs at least two members")
        if len(set(self.members)) != len(self.members):
            raise ValueError("Union members must be distinct")
        if any(isinstance(m, UnionType) for m in self.members):
            raise ValueError("Union members cannot be unions")
        return self

    def __str__(self) -> str:
        return "|".join(str(m) for m in self.members)


# A node of the type tree. The `kind` discriminator keeps (de)serialization unambiguous.
Type = Annotated[
    ScalarType
    | ArrayType
    | NonEmptyArrayType
    | IterableType
    | ListType
    | NonEmptyListType
    | ShapedArrayType
    | ClassType
    | EnumType
    | InterfaceType
    | UnionType,
    _Field(discriminator="kind"),
]

# Resolve forward references for models that use Type.
ArrayType.model_rebuild()
NonEmptyArrayType.model_rebuild()
IterableType.model_rebuild()
ListType.model_rebuild()
NonEmptyListType.model_rebuild()
ShapedArrayElement.model_rebuild()
ShapedArrayType.model_rebuild()
ClassType.model_rebuild()
UnionType.model_rebuild()


def scalar(kind: ScalarKind) -> ScalarType:
    """Return the scalar type of *kind*."""
    return _SCALARS[kind]


MIXED = ScalarType(scalar=ScalarKind.MIXED)
NULL = ScalarType(scalar=ScalarKind.NULL)
ARRAY_KEY = ScalarType(scalar=ScalarKind.ARRAY_KEY)


def union_of(*members: Type) -> Type:
    """Build a union, flattening nested unions and dropping duplicates.

    A single surviving member is returned as is.
    """
    flat: list[Type] = []
    for member in members:
        for candidate in member.members if isinstance(member, UnionType) else (member,):
            if candidate not in flat:
                flat.append(candidate)
    if not flat:
        raise ValueError("A union needs at least one member")
    if len(flat) == 1:
        return flat[0]
    return UnionType(members=tuple(flat))


def is_scalar(type_: Type, *kinds: ScalarKind) -> bool:
    """Return True if *type_* is a scalar of one of *kinds* (any scalar when none given)."""
    return isinstance(type_, ScalarType) and (not kinds or type_.scalar in kinds)


# ################
# Implementation
# ################

_BARE_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_SCALARS: dict[ScalarKind, ScalarType] = {kind: ScalarType(scalar=kind) for kind in ScalarKind}
