# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for object builders and their factories."""

import mapping_fixtures
import pytest

from treemapper.attributes import StaticMethodConstructor
from treemapper.definition import (
    AnnotatedAttributesSource,
    Attributes,
    ClassDefinition,
    Construction,
    InspectReflectionSource,
    ReflectionClassDefinitionRepository,
)
from treemapper.errors import ClassNotInstantiable, InvalidConstructorArguments
from treemapper.mapper.object_builder import (
    AttributeObjectBuilderFactory,
    BasicObjectBuilderFactory,
    CallableObjectBuilder,
    PropertiesObjectBuilder,
)
from treemapper.types import ClassType, TypeParserFactory

# ###############
# Test Helpers
# ###############


def _definition(name: str) -> ClassDefinition:
    repository = ReflectionClassDefinitionRepository(
        TypeParserFactory(), AnnotatedAttributesSource(), InspectReflectionSource()
    )
    return repository.definition_for(ClassType(name=f"mapping_fixtures.{name}"))


def _factory() -> AttributeObjectBuilderFactory:
    return AttributeObjectBuilderFactory(BasicObjectBuilderFactory())


# ###############
# Constructor Builders
# ###############


class TestConstructorBuilder:
    def test_builds_with_named_arguments(self) -> None:
        builder = _factory().builder_for(_definition("Point"))
        assert isinstance(builder, CallableObjectBuilder)
        assert builder.build({"y": 2, "x": 1}) == mapping_fixtures.Point(x=1, y=2)

    def test_omitted_defaults_are_applied_by_the_constructor(self) -> None:
        builder = _factory().builder_for(_definition("Tree"))
        tree = builder.build({"label": "root"})
        assert tree.children == []

    def test_parameters_needed(self) -> None:
        builder = _factory().builder_for(_definition("Customer"))
        assert builder.parameters_needed().names() == ["name", "address", "nickname", "vip"]

    def test_missing_required_argument(self) -> None:
        builder = _factory().builder_for(_definition("Point"))
        with pytest.raises(InvalidConstructorArguments, match="Missing argument.*y"):
            builder.build({"x": 1})

    def test_unknown_argument(self) -> None:
        builder = _factory().builder_for(_definition("Point"))
        with pytest.raises(InvalidConstructorArguments, match="Unknown argument.*z"):
            builder.build({"x": 1, "y": 2, "z": 3})


# ###############
# Factory Method Builders
# ###############


class TestFactoryMethodBuilder:
    def test_static_method_constructor_is_used(self) -> None:
        builder = _factory().builder_for(_definition("Duration"))
        assert builder.build({"minutes": 2}) == mapping_fixtures.Duration(seconds=120)

    def test_basic_factory_cannot_use_factory_methods(self) -> None:
        with pytest.raises(ClassNotInstantiable, match="from_minutes"):
            BasicObjectBuilderFactory().builder_for(_definition("Duration"))


# ###############
# Properties Builders
# ###############


class TestPropertiesBuilder:
    def test_assigns_properties_after_instantiation(self) -> None:
        builder = _factory().builder_for(_definition("Options"))
        assert isinstance(builder, PropertiesObjectBuilder)
        options = builder.build({"level": 3})
        assert options.level == 3
        assert options.verbose is False

    def test_missing_property_without_default(self) -> None:
        builder = _factory().builder_for(_definition("Options"))
        with pytest.raises(InvalidConstructorArguments, match="level"):
            builder.build({"verbose": True})


# ###############
# Non-Instantiable Classes
# ###############


class TestNonInstantiable:
    def test_abstract_class(self) -> None:
        definition = ClassDefinition(type=ClassType(name="mapping_fixtures.Shape"))
        with pytest.raises(ClassNotInstantiable, match="abstract"):
            _factory().builder_for(definition)

    def test_factory_method_that_is_not_callable(self) -> None:
        definition = _definition("Duration")
        broken = ClassDefinition(
            type=definition.type,
            parameters=definition.parameters,
            attributes=Attributes(StaticMethodConstructor("seconds")),
            construction=Construction.FACTORY_METHOD,
            factory_method="seconds",
        )
        with pytest.raises(ClassNotInstantiable, match="not callable"):
            _factory().builder_for(broken)
