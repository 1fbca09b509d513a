# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Introspection of Python classes into raw parameter descriptions.

Annotations are rendered into the type language so that the class definition
repository can run them through the same parser as user-supplied type
descriptions.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import types
import typing
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, ClassVar, Literal, Protocol, TypeVar, Union, get_args, get_origin

from treemapper.errors import InvalidClass
from treemapper.types.classes import class_path

# ###############
# Public Interface
# ###############


class _DefaultFactory:
    """Marks a default computed by a dataclass ``default_factory``."""

    def __repr__(self) -> str:
        return "<factory>"


DEFAULT_FACTORY: Any = _DefaultFactory()


@dataclass(frozen=True)
class RawParameter:
    """A parameter as reported by a reflection source.

    Attributes:
        name: Parameter name.
        type: Declared type, as a type description string.
        has_default: Whether a default value exists.
        default: The default value (meaningless when ``has_default`` is False).
    """

    name: str
    type: str
    has_default: bool = False
    default: Any = None


class ReflectionSource(Protocol):
    """Reports the parameters of a class constructor or factory method."""

    def parameters_of(self, cls: type, method: str | None = None) -> Sequence[RawParameter]: ...

    def is_instantiable(self, cls: type) -> bool: ...


class InspectReflectionSource:
    """Reflection source built on :mod:`inspect` and :func:`typing.get_type_hints`.

    Without a factory method, the parameters are those of ``__init__``; a class
    that does not define ``__init__`` exposes its public annotated properties
    instead.
    """

    def parameters_of(self, cls: type, method: str | None = None) -> Sequence[RawParameter]:
        if method is None and not has_constructor(cls):
            return self._properties_of(cls)

        target: Any = cls
        if method is not None:
            target = getattr(cls, method, None)
            if not callable(target):
                raise InvalidClass(f"Class `{class_path(cls)}` has no callable factory method `{method}`")
        try:
            signature = inspect.signature(target)
        except (TypeError, ValueError) as exc:
            raise InvalidClass(f"Cannot read the signature of `{class_path(cls)}`: {exc}") from exc

        hints = resolved_hints(cls, method)
        factories: set[str] = set()
        if method is None and dataclasses.is_dataclass(cls):
            factories = {f.name for f in dataclasses.fields(cls) if f.default_factory is not dataclasses.MISSING}

        parameters: list[RawParameter] = []
        for parameter in signature.parameters.values():
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                raise InvalidClass(f"Parameter `{parameter.name}` of `{class_path(cls)}` is positional-only")
            annotation = hints.get(parameter.name, parameter.annotation)
            if parameter.name in factories:
                has_default, default = True, DEFAULT_FACTORY
            elif parameter.default is not inspect.Parameter.empty:
                has_default, default = True, parameter.default
            else:
                has_default, default = False, None
            parameters.append(
                RawParameter(
                    name=parameter.name,
                    type=_render_or_fail(cls, parameter.name, annotation),
                    has_default=has_default,
                    default=default,
                )
            )
        return parameters

    def is_instantiable(self, cls: type) -> bool:
        return (
            isinstance(cls, type) and not inspect.isabstract(cls) and not bool(getattr(cls, "_is_protocol", False))
        )

    def _properties_of(self, cls: type) -> list[RawParameter]:
        parameters: list[RawParameter] = []
        for name, annotation in resolved_hints(cls, None).items():
            if name.startswith("_") or get_origin(annotation) is ClassVar:
                continue
            has_default = hasattr(cls, name)
            parameters.append(
                RawParameter(
                    name=name,
                    type=_render_or_fail(cls, name, annotation),
                    has_default=has_default,
                    default=getattr(cls, name, None),
                )
            )
        return parameters


def has_constructor(cls: type) -> bool:
    """Return True if *cls* (or a base other than ``object``) defines ``__init__``."""
    return cls.__init__ is not object.__init__


@lru_cache(maxsize=512)
def resolved_hints(cls: type, method: str | None) -> dict[str, Any]:
    """Return the resolved annotations (with ``Annotated`` extras) of a declaration.

    Raises:
        InvalidClass: If an annotation refers to a name that cannot be resolved.
    """
    try:
        if method is not None:
            target = getattr(cls, method)
            return typing.get_type_hints(inspect.unwrap(getattr(target, "__func__", target)), include_extras=True)
        if dataclasses.is_dataclass(cls) or not has_constructor(cls):
            return typing.get_type_hints(cls, include_extras=True)
        return typing.get_type_hints(cls.__init__, include_extras=True)
    except NameError as exc:
        raise InvalidClass(f"Cannot resolve annotations of `{class_path(cls)}`: {exc}") from exc


def render_annotation(annotation: Any) -> str:
    """Render a Python annotation as a type description.

    Raises:
        ValueError: If the annotation has no counterpart in the type language.
    """
    if annotation is Any or annotation is object or annotation is inspect.Parameter.empty:
        return "mixed"
    if annotation is None or annotation is type(None):
        return "null"
    if isinstance(annotation, TypeVar):
        return annotation.__name__

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is None and isinstance(annotation, type) and annotation in _BUILTINS:
        return _BUILTINS[annotation]
    if origin is Annotated:
        return render_annotation(args[0])
    if origin is Union or origin is types.UnionType:
        return "|".join(render_annotation(arg) for arg in args)
    if origin is Literal:
        raise ValueError(f"Literal types are not supported: {annotation!r}")
    if origin in _SEQUENCE_ORIGINS:
        return f"list<{render_annotation(args[0])}>" if args else "list"
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return f"list<{render_annotation(args[0])}>"
        raise ValueError(f"Fixed-size tuples are not supported: {annotation!r}")
    if origin in _MAPPING_ORIGINS:
        if not args:
            return "array"
        return f"array<{render_annotation(args[0])}, {render_annotation(args[1])}>"
    if origin is collections.abc.Iterable:
        return f"iterable<{render_annotation(args[0])}>" if args else "iterable"
    if origin is not None and isinstance(origin, type):
        return f"{class_path(origin)}<" + ", ".join(render_annotation(arg) for arg in args) + ">"

    if typing.is_typeddict(annotation):
        return _render_typed_dict(annotation)
    if isinstance(annotation, type):
        return class_path(annotation)
    raise ValueError(f"Unsupported annotation: {annotation!r}")


# ################
# Implementation
# ################

_BUILTINS: dict[Any, str] = {
    int: "int",
    float: "float",
    str: "string",
    bool: "bool",
    list: "list",
    dict: "array",
}

_SEQUENCE_ORIGINS = frozenset({list, collections.abc.Sequence, collections.abc.MutableSequence})
_MAPPING_ORIGINS = frozenset({dict, collections.abc.Mapping, collections.abc.MutableMapping})


def _render_typed_dict(annotation: Any) -> str:
    required = annotation.__required_keys__
    elements = []
    for key, value in typing.get_type_hints(annotation).items():
        marker = "" if key in required else "?"
        quoted = "'" + key.replace("'", "\\'") + "'"
        elements.append(f"{quoted}{marker}: {render_annotation(value)}")
    return "array{" + ", ".join(elements) + "}"


def _render_or_fail(cls: type, name: str, annotation: Any) -> str:
    try:
        return render_annotation(annotation)
    except ValueError as exc:
        raise InvalidClass(f"Parameter `{name}` of `{class_path(cls)}`: {exc}") from exc
