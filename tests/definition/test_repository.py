# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the reflection-based class definition repository."""

import pytest

from treemapper.attributes import StaticMethodConstructor, TypeOverride
from treemapper.definition import (
    AnnotatedAttributesSource,
    Construction,
    InspectReflectionSource,
    ReflectionClassDefinitionRepository,
)
from treemapper.errors import ClassNotFound, InvalidClass, ParameterNotFound
from treemapper.types import ClassType, TypeParserFactory, parse

# ###############
# Test Helpers
# ###############


@pytest.fixture
def repository() -> ReflectionClassDefinitionRepository:
    return ReflectionClassDefinitionRepository(
        TypeParserFactory(),
        AnnotatedAttributesSource(),
        InspectReflectionSource(),
    )


def _class(name: str, *generics: tuple[str, str]) -> ClassType:
    return ClassType(name=f"mapping_fixtures.{name}", generics=tuple((t, parse(g)) for t, g in generics))


# ###############
# Constructor Classes
# ###############


class TestConstructorClasses:
    def test_parameters_in_declaration_order(self, repository: ReflectionClassDefinitionRepository) -> None:
        definition = repository.definition_for(_class("Point"))
        assert definition.name == "mapping_fixtures.Point"
        assert definition.construction is Construction.CONSTRUCTOR
        assert definition.parameters.names() == ["x", "y"]
        assert str(definition.parameters.get("x").type) == "int"

    def test_nested_class_and_nullable_parameters(self, repository: ReflectionClassDefinitionRepository) -> None:
        parameters = repository.definition_for(_class("Customer")).parameters
        assert parameters.get("address").type == ClassType(name="mapping_fixtures.Address")
        assert str(parameters.get("nickname").type) == "string|null"
        assert parameters.get("vip").has_default
        assert parameters.get("vip").default is False

    def test_unknown_parameter(self, repository: ReflectionClassDefinitionRepository) -> None:
        with pytest.raises(ParameterNotFound):
            repository.definition_for(_class("Point")).parameters.get("z")

    def test_missing_class(self, repository: ReflectionClassDefinitionRepository) -> None:
        with pytest.raises(ClassNotFound):
            repository.definition_for(_class("Missing"))

    def test_abstract_class_is_invalid(self, repository: ReflectionClassDefinitionRepository) -> None:
        with pytest.raises(InvalidClass, match="abstract"):
            repository.definition_for(_class("Shape"))


# ###############
# Construction Strategies
# ###############


class TestConstructionStrategies:
    def test_factory_method(self, repository: ReflectionClassDefinitionRepository) -> None:
        definition = repository.definition_for(_class("Duration"))
        assert definition.construction is Construction.FACTORY_METHOD
        assert definition.factory_method == "from_minutes"
        assert definition.parameters.names() == ["minutes"]
        assert definition.attributes.of_type(StaticMethodConstructor) == [StaticMethodConstructor("from_minutes")]

    def test_properties(self, repository: ReflectionClassDefinitionRepository) -> None:
        definition = repository.definition_for(_class("Options"))
        assert definition.construction is Construction.PROPERTIES
        assert definition.parameters.names() == ["level", "verbose"]


# ###############
# Generics
# ###############


class TestGenerics:
    def test_type_variable_resolves_to_bound_type(self, repository: ReflectionClassDefinitionRepository) -> None:
        definition = repository.definition_for(_class("Pair", ("T", "string")))
        assert [str(p.type) for p in definition.parameters] == ["string", "list<string>"]

    def test_unbound_type_variable_is_mixed(self, repository: ReflectionClassDefinitionRepository) -> None:
        definition = repository.definition_for(_class("Box", ("T", "mixed")))
        assert str(definition.parameters.get("item").type) == "mixed"


# ###############
# Type Overrides
# ###############


class TestTypeOverrides:
    def test_override_replaces_the_annotation(self, repository: ReflectionClassDefinitionRepository) -> None:
        tags = repository.definition_for(_class("Tagged")).parameters.get("tags")
        assert str(tags.type) == "non-empty-list<string>"
        assert tags.attributes.has(TypeOverride)

    def test_invalid_override_is_an_invalid_class(self, repository: ReflectionClassDefinitionRepository) -> None:
        with pytest.raises(InvalidClass, match="invalid type `list<`"):
            repository.definition_for(_class("BrokenOverride"))
