# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Map untyped hierarchical input onto typed Python object graphs."""

from treemapper.attributes import PreTransform, StaticMethodConstructor, TypeOverride, attributes
from treemapper.errors import TreeMapperError
from treemapper.library import ENGINE_VERSION, MapperBuilder, MapperSettings, load_settings
from treemapper.mapper import MappingError, MappingFailed, MappingResult, Message, TreeMapper

__version__ = ENGINE_VERSION

__all__ = [
    "MapperBuilder",
    "MapperSettings",
    "load_settings",
    "TreeMapper",
    "MappingResult",
    "MappingError",
    "MappingFailed",
    "Message",
    "TreeMapperError",
    "attributes",
    "StaticMethodConstructor",
    "TypeOverride",
    "PreTransform",
]
