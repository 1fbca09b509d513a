# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compilation of class definitions into persisted cache entries.

Entries are stored as compact JSON documents. The format is versioned so a
schema change is detected and the entry recomputed. Each entry also records
the modification time of the source files defining the class and its bases;
an entry whose sources changed since is outdated. Attributes are not
serialized: they are read again from the attributes source by declaration
site when an entry is loaded.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any

from treemapper.definition.attributes import Attributes, AttributesSource, DeclarationSite
from treemapper.definition.parameters import (
    DEFAULT_FACTORY,
    ClassDefinition,
    Construction,
    ParameterDefinition,
    Parameters,
)
from treemapper.errors import ClassNotFound, CompilationError
from treemapper.types.classes import class_path, import_class
from treemapper.types.nodes import (
    ArrayType,
    ClassType,
    EnumType,
    InterfaceType,
    IterableType,
    ListType,
    NonEmptyArrayType,
    NonEmptyListType,
    ScalarKind,
    ScalarType,
    ShapedArrayElement,
    ShapedArrayType,
    Type,
    UnionType,
)

# ###############
# Public Interface
# ###############

COMPILED_FORMAT_VERSION = "2"


class OutdatedDefinition(ValueError):
    """Raised when the sources of a compiled class changed after compilation."""


class ClassDefinitionCompiler:
    """Round-trips class definitions through a compact JSON representation."""

    def __init__(self, attributes_source: AttributesSource) -> None:
        self._attributes = attributes_source

    def compile(self, definition: ClassDefinition) -> bytes:
        """Serialize *definition*.

        Raises:
            CompilationError: If a default value has no JSON representation or the
                class cannot be imported.
        """
        try:
            sources = _source_stamps(import_class(definition.name))
        except ClassNotFound as exc:
            raise CompilationError(str(exc)) from exc
        obj = {
            "v": COMPILED_FORMAT_VERSION,
            "type": _type_to_dict(definition.type),
            "src": sources,
            "construction": definition.construction.value,
            "method": definition.factory_method,
            "params": [_parameter_to_dict(p, definition.name) for p in definition.parameters],
        }
        return json.dumps(obj, separators=(",", ":")).encode("utf-8")

    def load(self, data: bytes) -> ClassDefinition:
        """Deserialize a definition produced by :meth:`compile`.

        Raises:
            ValueError: If the format version is not recognised or the data is malformed.
            OutdatedDefinition: If a source file of the class changed since compilation.
            ClassNotFound: If the compiled class no longer exists.
        """
        obj = json.loads(data.decode("utf-8"))
        version = obj.get("v")
        if version != COMPILED_FORMAT_VERSION:
            raise ValueError(f"Unsupported compiled definition format version: {version!r}")

        type_ = _type_from_dict(obj["type"])
        if not isinstance(type_, ClassType):
            raise ValueError(f"Compiled definition is not a class type: {type_}")
        cls = import_class(type_.name)
        if obj.get("src") != _source_stamps(cls):
            raise OutdatedDefinition(f"Sources of `{type_.name}` changed since compilation")
        method = obj.get("method")

        parameters = [
            ParameterDefinition(
                name=p["n"],
                type=_type_from_dict(p["t"]),
                has_default="d" in p,
                default=_default_from_dict(p["d"]) if "d" in p else None,
                attributes=Attributes(*self._attributes.attributes_for(DeclarationSite(cls, method, p["n"]))),
            )
            for p in obj["params"]
        ]
        return ClassDefinition(
            type=type_,
            parameters=Parameters(*parameters),
            attributes=Attributes(*self._attributes.attributes_for(DeclarationSite(cls))),
            construction=Construction(obj["construction"]),
            factory_method=method,
        )


# ################
# Implementation
# ################


def _source_stamps(cls: type) -> list[list[Any]]:
    """Return [path, mtime_ns] of the module files defining *cls* and its bases."""
    stamps: dict[str, int | None] = {}
    for klass in cls.__mro__:
        path = getattr(sys.modules.get(klass.__module__), "__file__", None)
        if path is None or path in stamps:
            continue
        try:
            stamps[path] = os.stat(path).st_mtime_ns
        except OSError:
            stamps[path] = None
    return [[path, mtime] for path, mtime in sorted(stamps.items())]


def _parameter_to_dict(parameter: ParameterDefinition, owner: str) -> dict[str, Any]:
    d: dict[str, Any] = {"n": parameter.name, "t": _type_to_dict(parameter.type)}
    if parameter.has_default:
        try:
            d["d"] = _default_to_dict(parameter.default)
        except CompilationError as exc:
            raise CompilationError(f"Parameter `{parameter.name}` of `{owner}`: {exc}") from exc
    return d


def _default_to_dict(value: Any) -> dict[str, Any]:
    if value is DEFAULT_FACTORY:
        return {"f": 1}
    if isinstance(value, Enum):
        return {"e": class_path(type(value)), "m": value.name}
    if not _is_json_native(value):
        raise CompilationError(f"Default value {value!r} cannot be compiled")
    return {"j": value}


def _default_from_dict(obj: dict[str, Any]) -> Any:
    if "f" in obj:
        return DEFAULT_FACTORY
    if "e" in obj:
        return import_class(obj["e"])[obj["m"]]
    return obj["j"]


def _is_json_native(value: Any) -> bool:
    if value is None or isinstance(value, (bool, int, str)):
        return True
    if isinstance(value, float):
        return value == value and value not in (float("inf"), float("-inf"))
    if type(value) is list:
        return all(_is_json_native(item) for item in value)
    if type(value) is dict:
        return all(isinstance(k, str) and _is_json_native(v) for k, v in value.items())
    return False


def _type_to_dict(type_: Type) -> dict[str, Any]:
    """Encode a type as a tagged dict with compact keys."""
    if isinstance(type_, ScalarType):
        return {"k": "scalar", "t": type_.scalar.value}
    if isinstance(type_, (ArrayType, NonEmptyArrayType, IterableType)):
        return {"k": type_.kind, "key": _type_to_dict(type_.key_type), "val": _type_to_dict(type_.value_type)}
    if isinstance(type_, (ListType, NonEmptyListType)):
        return {"k": type_.kind, "e": _type_to_dict(type_.value_type)}
    if isinstance(type_, ShapedArrayType):
        return {
            "k": "shaped-array",
            "el": [{"key": e.key, "t": _type_to_dict(e.type), "o": e.optional} for e in type_.elements],
        }
    if isinstance(type_, ClassType):
        return {"k": "class", "n": type_.name, "g": [[name, _type_to_dict(t)] for name, t in type_.generics]}
    if isinstance(type_, (EnumType, InterfaceType)):
        return {"k": type_.kind, "n": type_.name}
    # UnionType is the only remaining variant.
    assert isinstance(type_, UnionType)
    return {"k": "union", "m": [_type_to_dict(m) for m in type_.members]}


_KEYED: dict[str, type[ArrayType] | type[NonEmptyArrayType] | type[IterableType]] = {
    "array": ArrayType,
    "non-empty-array": NonEmptyArrayType,
    "iterable": IterableType,
}

_LISTS: dict[str, type[ListType] | type[NonEmptyListType]] = {
    "list": ListType,
    "non-empty-list": NonEmptyListType,
}


def _type_from_dict(obj: dict[str, Any]) -> Type:
    """Decode a type from a tagged dict."""
    kind = obj["k"]
    if kind == "scalar":
        return ScalarType(scalar=ScalarKind(obj["t"]))
    if kind in _KEYED:
        return _KEYED[kind](key_type=_type_from_dict(obj["key"]), value_type=_type_from_dict(obj["val"]))
    if kind in _LISTS:
        return _LISTS[kind](value_type=_type_from_dict(obj["e"]))
    if kind == "shaped-array":
        return ShapedArrayType(
            elements=tuple(
                ShapedArrayElement(key=e["key"], type=_type_from_dict(e["t"]), optional=e["o"]) for e in obj["el"]
            )
        )
    if kind == "class":
        return ClassType(name=obj["n"], generics=tuple((name, _type_from_dict(t)) for name, t in obj["g"]))
    if kind == "enum":
        return EnumType(name=obj["n"])
    if kind == "interface":
        return InterfaceType(name=obj["n"])
    if kind == "union":
        return UnionType(members=tuple(_type_from_dict(m) for m in obj["m"]))
    raise ValueError(f"Unknown type kind: {kind!r}")
