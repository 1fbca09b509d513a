# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Pluggable resolution rules for the type parser.

A specification is consulted by the parser when it meets a name it does not
know as a keyword, or a class reference carrying generic arguments.
Specifications are frozen and hashable so parsers can be memoised per
specification set.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass

from treemapper.errors import TypeParsingError
from treemapper.types.nodes import MIXED, Type

# ###############
# Public Interface
# ###############


class TypeParserSpecification:
    """Base class for parser specifications; both hooks default to "not handled"."""

    def resolve_name(self, name: str) -> Type | type | None:
        """Return a type or a class for *name*, or None to let the parser continue."""
        return None

    def bind_generics(self, cls: type, generics: list[Type]) -> tuple[tuple[str, Type], ...] | None:
        """Return the generic bindings of *cls*, or None when not handled."""
        return None


@dataclass(frozen=True)
class TemplateSpecification(TypeParserSpecification):
    """Substitute template names (type variables) with their bound types."""

    bindings: tuple[tuple[str, Type], ...]

    def resolve_name(self, name: str) -> Type | type | None:
        for template, bound in self.bindings:
            if template == name:
                return bound
        return None


@dataclass(frozen=True)
class ClassContextSpecification(TypeParserSpecification):
    """Resolve short class names against the namespace of a module."""

    module: str

    def resolve_name(self, name: str) -> Type | type | None:
        module = sys.modules.get(self.module)
        if module is None:
            return None
        target: object = module
        for attribute in name.split("."):
            target = getattr(target, attribute, None)
            if target is None:
                return None
        return target if isinstance(target, type) else None


@dataclass(frozen=True)
class HandleClassGenericSpecification(TypeParserSpecification):
    """Bind generic arguments to the type variables a class declares.

    A class reference without arguments binds every type variable to
    ``mixed``; a partial or excessive argument list is an error.
    """

    def bind_generics(self, cls: type, generics: list[Type]) -> tuple[tuple[str, Type], ...] | None:
        templates = [getattr(t, "__name__", str(t)) for t in getattr(cls, "__parameters__", ())]
        if not generics:
            return tuple((template, MIXED) for template in templates)
        if not templates:
            raise TypeParsingError(f"Class `{cls.__qualname__}` does not accept generic arguments")
        if len(generics) != len(templates):
            raise TypeParsingError(
                f"Class `{cls.__qualname__}` expects {len(templates)} generic argument(s) "
                f"({', '.join(templates)}), got {len(generics)}"
            )
        return tuple(zip(templates, generics))
