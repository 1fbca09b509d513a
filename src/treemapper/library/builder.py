# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Fluent, immutable configuration of a tree mapper."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from treemapper.definition.attributes import AttributesSource
from treemapper.definition.cache import CacheStorage
from treemapper.definition.reflection import ReflectionSource, render_annotation
from treemapper.library.container import Container
from treemapper.library.settings import MapperSettings, load_settings
from treemapper.mapper.node import Node
from treemapper.mapper.scalars import CoercionRules
from treemapper.mapper.tree_mapper import TreeMapper
from treemapper.types.classes import class_path
from treemapper.types.parser import parse
from treemapper.types.specifications import HandleClassGenericSpecification

# ###############
# Public Interface
# ###############


class MapperBuilder:
    """Configures and creates :class:`TreeMapper` instances.

    Every configuration method returns a new builder; the receiver is left
    unchanged, so a partially configured builder can be shared::

        base = MapperBuilder().infer(Shape, Circle)
        strict = base.with_coercion("strict").mapper()
        lenient = base.allow_superfluous_keys().mapper()
    """

    def __init__(
        self,
        settings: MapperSettings | None = None,
        *,
        attributes_source: AttributesSource | None = None,
        reflection_source: ReflectionSource | None = None,
        cache_storage: CacheStorage | None = None,
    ) -> None:
        self._settings = settings if settings is not None else MapperSettings()
        self._attributes_source = attributes_source
        self._reflection_source = reflection_source
        self._cache_storage = cache_storage

    @classmethod
    def from_file(cls, path: Path) -> MapperBuilder:
        """Start from the settings of a YAML file (see :func:`load_settings`)."""
        return cls(load_settings(path))

    @property
    def settings(self) -> MapperSettings:
        return self._settings

    def infer(self, interface: type | str, implementation: type | str) -> MapperBuilder:
        """Map every occurrence of *interface* onto *implementation*."""
        mapping = {**self._settings.interface_mapping, _class_key(interface): _type_key(implementation)}
        return self._with(interface_mapping=mapping)

    def bind(self, type_: Any, instance: Any) -> MapperBuilder:
        """Map every occurrence of *type_* to *instance*, whatever the input."""
        return self._with(object_bindings={**self._settings.object_bindings, _type_key(type_): instance})

    def alter(self, type_: Any, modifier: Callable[[Any], Any]) -> MapperBuilder:
        """Pass raw values of *type_* through *modifier* before they are mapped."""
        key = _type_key(type_)
        modifiers = {name: list(values) for name, values in self._settings.value_modifiers.items()}
        modifiers.setdefault(key, []).append(modifier)
        return self._with(value_modifiers=modifiers)

    def visit(self, visitor: Callable[[Node], Node]) -> MapperBuilder:
        """Pass every built node through *visitor*."""
        return self._with(node_visitors=[*self._settings.node_visitors, visitor])

    def allow_superfluous_keys(self, allow: bool = True) -> MapperBuilder:
        return self._with(allow_superfluous_keys=allow)

    def with_coercion(self, rules: CoercionRules | str) -> MapperBuilder:
        """Use a coercion preset (``"strict"``, ``"permissive"``) or explicit rules."""
        return self._with(scalar_coercion=rules)

    def with_cache_dir(self, directory: Path | str | None) -> MapperBuilder:
        return self._with(cache_dir=None if directory is None else Path(directory))

    def with_cache_version(self, version: str) -> MapperBuilder:
        return self._with(cache_version=version)

    def with_max_depth(self, max_depth: int) -> MapperBuilder:
        return self._with(max_depth=max_depth)

    def with_cache_storage(self, storage: CacheStorage) -> MapperBuilder:
        return self._copy(cache_storage=storage)

    def with_attributes_source(self, source: AttributesSource) -> MapperBuilder:
        return self._copy(attributes_source=source)

    def with_reflection_source(self, source: ReflectionSource) -> MapperBuilder:
        return self._copy(reflection_source=source)

    def mapper(self) -> TreeMapper:
        """Create a mapper from the current configuration."""
        return self.container().tree_mapper

    def container(self) -> Container:
        return Container(
            self._settings,
            attributes_source=self._attributes_source,
            reflection_source=self._reflection_source,
            cache_storage=self._cache_storage,
        )

    def _with(self, **changes: Any) -> MapperBuilder:
        data = {name: getattr(self._settings, name) for name in MapperSettings.model_fields}
        data.update(changes)
        return self._copy(settings=MapperSettings.model_validate(data))

    def _copy(self, **changes: Any) -> MapperBuilder:
        arguments: dict[str, Any] = {
            "settings": self._settings,
            "attributes_source": self._attributes_source,
            "reflection_source": self._reflection_source,
            "cache_storage": self._cache_storage,
        }
        arguments.update(changes)
        settings = arguments.pop("settings")
        return MapperBuilder(settings, **arguments)


# ################
# Implementation
# ################


def _class_key(cls: type | str) -> str:
    return cls if isinstance(cls, str) else class_path(cls)


def _type_key(type_: Any) -> str:
    description = type_ if isinstance(type_, str) else render_annotation(type_)
    return str(parse(description, HandleClassGenericSpecification()))
