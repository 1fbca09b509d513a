# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Class definitions: introspection, attributes, and the versioned definition cache."""

from treemapper.definition.attributes import (
    EMPTY_ATTRIBUTES,
    AnnotatedAttributesSource,
    Attributes,
    AttributesSource,
    DeclarationSite,
)
from treemapper.definition.cache import (
    CacheClassDefinitionRepository,
    CacheStorage,
    ChainCache,
    CompiledCache,
    FileCacheStorage,
    InMemoryCacheStorage,
    RuntimeCache,
    VersionedCache,
)
from treemapper.definition.compiler import COMPILED_FORMAT_VERSION, ClassDefinitionCompiler, OutdatedDefinition
from treemapper.definition.parameters import (
    DEFAULT_FACTORY,
    ClassDefinition,
    Construction,
    ParameterDefinition,
    Parameters,
)
from treemapper.definition.reflection import InspectReflectionSource, RawParameter, ReflectionSource, render_annotation
from treemapper.definition.repository import ClassDefinitionRepository, ReflectionClassDefinitionRepository

__all__ = [
    # Attributes
    "Attributes",
    "EMPTY_ATTRIBUTES",
    "AttributesSource",
    "AnnotatedAttributesSource",
    "DeclarationSite",
    # Definitions
    "ClassDefinition",
    "Construction",
    "ParameterDefinition",
    "Parameters",
    "DEFAULT_FACTORY",
    # Introspection
    "ReflectionSource",
    "InspectReflectionSource",
    "RawParameter",
    "render_annotation",
    "ClassDefinitionRepository",
    "ReflectionClassDefinitionRepository",
    # Cache
    "CacheStorage",
    "InMemoryCacheStorage",
    "FileCacheStorage",
    "RuntimeCache",
    "CompiledCache",
    "ChainCache",
    "VersionedCache",
    "CacheClassDefinitionRepository",
    "ClassDefinitionCompiler",
    "COMPILED_FORMAT_VERSION",
    "OutdatedDefinition",
]
