# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Composition root wiring the mapper services from settings."""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Any

from treemapper.definition.attributes import AnnotatedAttributesSource, AttributesSource
from treemapper.definition.cache import (
    CacheClassDefinitionRepository,
    CacheStorage,
    ChainCache,
    CompiledCache,
    DefinitionCache,
    FileCacheStorage,
    RuntimeCache,
    VersionedCache,
)
from treemapper.definition.compiler import ClassDefinitionCompiler
from treemapper.definition.reflection import InspectReflectionSource, ReflectionSource
from treemapper.definition.repository import ClassDefinitionRepository, ReflectionClassDefinitionRepository
from treemapper.library.settings import MapperSettings
from treemapper.mapper.builders import (
    DepthGuard,
    ErrorCatcher,
    NodeBuilderChain,
    NodeVisiting,
    ShellVisiting,
    TypeDispatch,
    ValueAltering,
    default_type_builders,
)
from treemapper.mapper.object_builder import (
    AttributeObjectBuilderFactory,
    BasicObjectBuilderFactory,
    ObjectBuilderFactory,
)
from treemapper.mapper.tree_mapper import TreeMapper
from treemapper.mapper.visitors import (
    AggregateShellVisitor,
    AttributeShellVisitor,
    InterfaceShellVisitor,
    ObjectBindingShellVisitor,
    UnionNullNarrower,
    UnionObjectNarrower,
    UnionScalarNarrower,
    UnionShellVisitor,
)
from treemapper.types.parser import CachedParser, TypeParserFactory
from treemapper.types.specifications import HandleClassGenericSpecification

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class Container:
    """Builds every service of a mapper once, from one set of settings.

    Args:
        settings: The mapper settings.
        attributes_source: Replaces the ``Annotated``-based attributes source.
        reflection_source: Replaces the :mod:`inspect`-based reflection source.
        cache_storage: Storage of the persisted definition tier; defaults to a
            :class:`FileCacheStorage` when ``cache_dir`` is set.
    """

    def __init__(
        self,
        settings: MapperSettings,
        *,
        attributes_source: AttributesSource | None = None,
        reflection_source: ReflectionSource | None = None,
        cache_storage: CacheStorage | None = None,
    ) -> None:
        self._settings = settings
        self._attributes_source = attributes_source or AnnotatedAttributesSource()
        self._reflection_source = reflection_source or InspectReflectionSource()
        self._cache_storage = cache_storage

    @cached_property
    def tree_mapper(self) -> TreeMapper:
        return TreeMapper(self.type_parser, self.node_builder)

    @cached_property
    def type_parser_factory(self) -> TypeParserFactory:
        return TypeParserFactory()

    @cached_property
    def type_parser(self) -> CachedParser:
        return self.type_parser_factory.get(HandleClassGenericSpecification())

    @cached_property
    def definition_cache(self) -> DefinitionCache:
        storage = self._cache_storage
        if storage is None and self._settings.cache_dir is not None:
            storage = FileCacheStorage(self._settings.cache_dir)
        cache: DefinitionCache = RuntimeCache()
        if storage is not None:
            cache = ChainCache(cache, CompiledCache(storage, ClassDefinitionCompiler(self._attributes_source)))
        return VersionedCache(cache, self._settings.cache_version)

    @cached_property
    def class_definition_repository(self) -> ClassDefinitionRepository:
        return CacheClassDefinitionRepository(
            ReflectionClassDefinitionRepository(
                self.type_parser_factory,
                self._attributes_source,
                self._reflection_source,
            ),
            self.definition_cache,
        )

    @cached_property
    def object_builder_factory(self) -> ObjectBuilderFactory:
        return AttributeObjectBuilderFactory(BasicObjectBuilderFactory())

    @cached_property
    def shell_visitor(self) -> AggregateShellVisitor:
        return AggregateShellVisitor(
            UnionShellVisitor(UnionNullNarrower(), UnionObjectNarrower(), UnionScalarNarrower()),
            InterfaceShellVisitor(self._settings.interface_mapping, self.type_parser),
            AttributeShellVisitor(),
            ObjectBindingShellVisitor(self._canonical_keys(self._settings.object_bindings)),
        )

    @cached_property
    def node_builder(self) -> NodeBuilderChain:
        settings = self._settings
        dispatch = TypeDispatch(
            default_type_builders(
                self.class_definition_repository,
                self.object_builder_factory,
                settings.scalar_coercion,
                settings.allow_superfluous_keys,
            )
        )
        return NodeBuilderChain(
            [
                DepthGuard(settings.max_depth),
                ErrorCatcher(),
                ShellVisiting(self.shell_visitor),
                ValueAltering(self._canonical_keys(settings.value_modifiers)),
                NodeVisiting(settings.node_visitors),
            ],
            dispatch,
        )

    def _canonical_keys(self, entries: dict[str, Any]) -> dict[str, Any]:
        """Re-key *entries* by canonical type description, so aliases like ``integer`` match ``int``."""
        return {str(self.type_parser.parse(key)): value for key, value in entries.items()}
