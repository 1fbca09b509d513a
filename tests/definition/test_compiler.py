# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the compiled (JSON) form of class definitions."""

import json

import mapping_fixtures
import pytest

from treemapper.definition import (
    COMPILED_FORMAT_VERSION,
    DEFAULT_FACTORY,
    AnnotatedAttributesSource,
    ClassDefinition,
    ClassDefinitionCompiler,
    InspectReflectionSource,
    OutdatedDefinition,
    ParameterDefinition,
    Parameters,
    ReflectionClassDefinitionRepository,
)
from treemapper.errors import CompilationError
from treemapper.types import ClassType, TypeParserFactory, parse

# ###############
# Test Helpers
# ###############


def _definition(name: str, *generics: tuple[str, str]) -> ClassDefinition:
    repository = ReflectionClassDefinitionRepository(
        TypeParserFactory(), AnnotatedAttributesSource(), InspectReflectionSource()
    )
    type_ = ClassType(name=f"mapping_fixtures.{name}", generics=tuple((t, parse(g)) for t, g in generics))
    return repository.definition_for(type_)


def _compiler() -> ClassDefinitionCompiler:
    return ClassDefinitionCompiler(AnnotatedAttributesSource())


# ###############
# Round Trips
# ###############


class TestRoundTrip:
    @pytest.mark.parametrize(
        "name",
        ["Point", "Customer", "Tree", "Ticket", "Tagged", "Duration", "Options", "Envelope", "Article"],
    )
    def test_load_restores_an_equal_definition(self, name: str) -> None:
        definition = _definition(name)
        compiler = _compiler()
        assert compiler.load(compiler.compile(definition)) == definition

    def test_generic_bindings_survive(self) -> None:
        definition = _definition("Pair", ("T", "array{a: int, 'b c'?: string}"))
        compiler = _compiler()
        loaded = compiler.load(compiler.compile(definition))
        assert loaded.type == definition.type
        assert str(loaded.parameters.get("right").type) == "list<array{a: int, 'b c'?: string}>"

    def test_factory_default_is_restored_as_marker(self) -> None:
        compiler = _compiler()
        loaded = compiler.load(compiler.compile(_definition("Tree")))
        assert loaded.parameters.get("children").default is DEFAULT_FACTORY

    def test_enum_default_is_restored_as_member(self) -> None:
        compiler = _compiler()
        loaded = compiler.load(compiler.compile(_definition("Ticket")))
        assert loaded.parameters.get("priority").default.name == "LOW"


# ###############
# Format
# ###############


class TestFormat:
    def test_document_carries_format_version(self) -> None:
        document = json.loads(_compiler().compile(_definition("Point")))
        assert document["v"] == COMPILED_FORMAT_VERSION
        assert document["construction"] == "constructor"
        assert [p["n"] for p in document["params"]] == ["x", "y"]

    def test_document_records_source_modification_times(self) -> None:
        document = json.loads(_compiler().compile(_definition("Point")))
        assert [path for path, _ in document["src"]] == [mapping_fixtures.__file__]

    def test_changed_source_is_outdated(self) -> None:
        document = json.loads(_compiler().compile(_definition("Point")))
        document["src"][0][1] -= 1
        with pytest.raises(OutdatedDefinition, match="mapping_fixtures.Point"):
            _compiler().load(json.dumps(document).encode())

    def test_unknown_version_is_rejected(self) -> None:
        data = json.dumps({"v": "0", "type": {}, "params": []}).encode()
        with pytest.raises(ValueError, match="format version"):
            _compiler().load(data)

    def test_unknown_type_kind_is_rejected(self) -> None:
        data = json.dumps({"v": COMPILED_FORMAT_VERSION, "type": {"k": "tuple"}, "params": []}).encode()
        with pytest.raises(ValueError, match="Unknown type kind"):
            _compiler().load(data)


# ###############
# Non-Compilable Definitions
# ###############


class TestNonCompilable:
    def test_object_default_cannot_be_compiled(self) -> None:
        with pytest.raises(CompilationError, match="marker"):
            _compiler().compile(_definition("WithSentinel"))

    def test_float_nan_default_cannot_be_compiled(self) -> None:
        definition = ClassDefinition(
            type=ClassType(name="mapping_fixtures.Point"),
            parameters=Parameters(
                ParameterDefinition(name="x", type=parse("float"), has_default=True, default=float("nan"))
            ),
        )
        with pytest.raises(CompilationError):
            _compiler().compile(definition)
