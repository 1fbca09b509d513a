# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapper configuration: settings, the composition root and the fluent builder."""

from treemapper.library.builder import MapperBuilder
from treemapper.library.container import Container
from treemapper.library.settings import DEFAULT_CACHE_VERSION, ENGINE_VERSION, MapperSettings, load_settings

__all__ = [
    "MapperBuilder",
    "MapperSettings",
    "load_settings",
    "Container",
    "DEFAULT_CACHE_VERSION",
    "ENGINE_VERSION",
]
