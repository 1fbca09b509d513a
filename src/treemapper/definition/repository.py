# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Introspection of classes into immutable class definitions."""

from __future__ import annotations

import logging
from typing import Protocol

from treemapper.attributes import StaticMethodConstructor, TypeOverride
from treemapper.definition.attributes import Attributes, AttributesSource, DeclarationSite
from treemapper.definition.parameters import ClassDefinition, Construction, ParameterDefinition, Parameters
from treemapper.definition.reflection import ReflectionSource, has_constructor
from treemapper.errors import InvalidClass, TypeParsingError
from treemapper.types.classes import import_class
from treemapper.types.nodes import ClassType
from treemapper.types.parser import TypeParserFactory
from treemapper.types.specifications import (
    ClassContextSpecification,
    HandleClassGenericSpecification,
    TemplateSpecification,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ClassDefinitionRepository(Protocol):
    """Provides the definition of a class type."""

    def definition_for(self, type_: ClassType) -> ClassDefinition: ...


class ReflectionClassDefinitionRepository:
    """Builds class definitions from a reflection source and an attributes source.

    Parameter types are parsed in the context of the declaring class: short
    names resolve against its module, and type variables resolve against the
    generic bindings carried by the class type.
    """

    def __init__(
        self,
        parser_factory: TypeParserFactory,
        attributes_source: AttributesSource,
        reflection_source: ReflectionSource,
    ) -> None:
        self._parser_factory = parser_factory
        self._attributes = attributes_source
        self._reflection = reflection_source

    def definition_for(self, type_: ClassType) -> ClassDefinition:
        """Introspect the class designated by *type_*.

        Raises:
            ClassNotFound: If the class cannot be imported.
            InvalidClass: If the class is abstract, or a parameter type is invalid.
        """
        cls = import_class(type_.name)
        if not self._reflection.is_instantiable(cls):
            raise InvalidClass(f"Class `{type_.name}` is abstract and cannot be introspected without a binding")

        class_attributes = Attributes(*self._attributes.attributes_for(DeclarationSite(cls)))
        factory_method = _factory_method(class_attributes)
        if factory_method is not None:
            construction = Construction.FACTORY_METHOD
        elif has_constructor(cls):
            construction = Construction.CONSTRUCTOR
        else:
            construction = Construction.PROPERTIES

        parser = self._parser_factory.get(
            TemplateSpecification(type_.generics),
            ClassContextSpecification(cls.__module__),
            HandleClassGenericSpecification(),
        )

        parameters: list[ParameterDefinition] = []
        for raw in self._reflection.parameters_of(cls, factory_method):
            attributes = Attributes(*self._attributes.attributes_for(DeclarationSite(cls, factory_method, raw.name)))
            type_string = raw.type
            for override in attributes.of_type(TypeOverride):
                type_string = override.type
            try:
                parameter_type = parser.parse(type_string)
            except TypeParsingError as exc:
                raise InvalidClass(
                    f"Parameter `{raw.name}` of `{type_.name}` has an invalid type `{type_string}`: {exc}"
                ) from exc
            parameters.append(
                ParameterDefinition(
                    name=raw.name,
                    type=parameter_type,
                    has_default=raw.has_default,
                    default=raw.default,
                    attributes=attributes,
                )
            )

        logger.debug("Introspected %s (%s, %d parameters)", type_, construction.value, len(parameters))
        return ClassDefinition(
            type=type_,
            parameters=Parameters(*parameters),
            attributes=class_attributes,
            construction=construction,
            factory_method=factory_method,
        )


# ################
# Implementation
# ################


def _factory_method(attributes: Attributes) -> str | None:
    constructors = attributes.of_type(StaticMethodConstructor)
    if not constructors:
        return None
    return constructors[0].method
