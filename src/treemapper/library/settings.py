# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapper settings and their YAML representation."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from treemapper.definition.compiler import COMPILED_FORMAT_VERSION
from treemapper.errors import SettingsError
from treemapper.mapper.scalars import COERCION_PRESETS, PERMISSIVE_COERCION, CoercionRules

# ###############
# Public Interface
# ###############

ENGINE_VERSION = "0.4.0"
DEFAULT_CACHE_VERSION = f"{ENGINE_VERSION}+{COMPILED_FORMAT_VERSION}"
DEFAULT_MAX_DEPTH = 64


class MapperSettings(BaseModel):
    """Settings of a tree mapper.

    The kebab-case fields can be read from YAML with :func:`load_settings`;
    object bindings, value modifiers and node visitors hold Python objects and
    are only set from code, usually through :class:`MapperBuilder`.

    Attributes:
        interface_mapping: Interface class paths to implementation type descriptions.
        allow_superfluous_keys: Ignore source keys that match no parameter or shape key.
        scalar_coercion: Coercion rules, or the name of a preset.
        cache_dir: Directory of the persisted definition cache; None keeps definitions in memory only.
        cache_version: Cache key prefix; changing it invalidates every cached definition.
        max_depth: Maximum path depth before the mapping is aborted.
        object_bindings: Type descriptions to the instance mapped for them.
        value_modifiers: Type descriptions to callables altering raw values.
        node_visitors: Callables receiving (and returning) every built node.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    interface_mapping: dict[str, str] = Field(alias="interface-mapping", default_factory=dict)
    allow_superfluous_keys: bool = Field(alias="allow-superfluous-keys", default=False)
    scalar_coercion: CoercionRules = Field(alias="scalar-coercion", default=PERMISSIVE_COERCION)
    cache_dir: Path | None = Field(alias="cache-dir", default=None)
    cache_version: str = Field(alias="cache-version", default=DEFAULT_CACHE_VERSION)
    max_depth: int = Field(alias="max-depth", default=DEFAULT_MAX_DEPTH, ge=1)

    object_bindings: dict[str, Any] = Field(default_factory=dict, exclude=True)
    value_modifiers: dict[str, list[Callable[[Any], Any]]] = Field(default_factory=dict, exclude=True)
    node_visitors: list[Callable[[Any], Any]] = Field(default_factory=list, exclude=True)

    @field_validator("scalar_coercion", mode="before")
    @classmethod
    def _coercion_preset(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return COERCION_PRESETS[value]
            except KeyError:
                raise ValueError(f"unknown coercion preset '{value}', expected one of {sorted(COERCION_PRESETS)}")
        return value


def load_settings(path: Path) -> MapperSettings:
    """Load and validate mapper settings from a YAML file.

    An empty file yields the default settings. A relative ``cache-dir`` is
    resolved against the directory of the settings file.

    Args:
        path: Path to the settings file.

    Returns:
        The validated settings.

    Raises:
        SettingsError: If the file cannot be read, contains invalid YAML,
            or does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"Cannot read settings '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in settings '{path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError(f"Invalid settings '{path}': must be a YAML mapping")

    try:
        settings = MapperSettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings '{path}': {exc}") from exc

    if settings.cache_dir is not None and not settings.cache_dir.is_absolute():
        settings = settings.model_copy(update={"cache_dir": path.parent / settings.cache_dir})
    return settings
