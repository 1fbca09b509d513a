# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Two-tier, versioned cache of class definitions.

A per-process runtime tier sits in front of a persisted tier holding compiled
definitions. Every key is namespaced by a version token, so changing the
token makes earlier entries unreachable without deleting them.

No locking is performed: concurrent misses on one key compute the same
definition and overwrite each other. Persisted writes go through a temporary
file and an atomic rename so readers never see a partial entry.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from treemapper.definition.compiler import ClassDefinitionCompiler, OutdatedDefinition
from treemapper.definition.parameters import ClassDefinition
from treemapper.definition.repository import ClassDefinitionRepository
from treemapper.errors import CompilationError, TreeMapperError
from treemapper.types.nodes import ClassType

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

CACHE_FILE_SUFFIX = ".treemapper.json"


class CacheStorage(Protocol):
    """Byte storage behind the persisted tier; keys are opaque strings."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, data: bytes) -> None: ...


class DefinitionCache(Protocol):
    """A cache of class definitions."""

    def get(self, key: str) -> ClassDefinition | None: ...

    def set(self, key: str, definition: ClassDefinition) -> None: ...


class InMemoryCacheStorage:
    """Storage kept in a dictionary; useful for tests and short-lived processes."""

    def __init__(self) -> None:
        self.entries: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.entries.get(key)

    def set(self, key: str, data: bytes) -> None:
        self.entries[key] = data


class FileCacheStorage:
    """One file per key under *directory*, named after the SHA-256 of the key."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._directory / (digest + CACHE_FILE_SUFFIX)

    def get(self, key: str) -> bytes | None:
        try:
            return self.path_for(key).read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, data: bytes) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(temp_name, self.path_for(key))
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise


class RuntimeCache:
    """Process-lifetime tier: an unbounded dictionary."""

    def __init__(self) -> None:
        self._entries: dict[str, ClassDefinition] = {}

    def get(self, key: str) -> ClassDefinition | None:
        return self._entries.get(key)

    def set(self, key: str, definition: ClassDefinition) -> None:
        self._entries[key] = definition


class CompiledCache:
    """Persisted tier: compiles definitions into a storage backend.

    Read and decode failures are logged and reported as misses, as are entries
    whose class sources changed after they were written. Write failures are
    logged and dropped.
    """

    def __init__(self, storage: CacheStorage, compiler: ClassDefinitionCompiler) -> None:
        self._storage = storage
        self._compiler = compiler

    def get(self, key: str) -> ClassDefinition | None:
        try:
            data = self._storage.get(key)
        except OSError as exc:
            logger.warning("Cannot read compiled definition %r: %s", key, exc)
            return None
        if data is None:
            return None
        try:
            return self._compiler.load(data)
        except OutdatedDefinition as exc:
            logger.debug("Recompiling outdated definition %r: %s", key, exc)
            return None
        except (ValueError, KeyError, TypeError, TreeMapperError) as exc:
            logger.warning("Discarding unreadable compiled definition %r: %s", key, exc)
            return None

    def set(self, key: str, definition: ClassDefinition) -> None:
        try:
            data = self._compiler.compile(definition)
        except CompilationError as exc:
            logger.debug("Keeping %s out of the persisted cache: %s", definition.name, exc)
            return
        try:
            self._storage.set(key, data)
        except OSError as exc:
            logger.warning("Cannot write compiled definition %r: %s", key, exc)


class ChainCache:
    """Looks caches up in order, back-filling faster tiers on a slower hit."""

    def __init__(self, *caches: DefinitionCache) -> None:
        self._caches = caches

    def get(self, key: str) -> ClassDefinition | None:
        for index, cache in enumerate(self._caches):
            definition = cache.get(key)
            if definition is not None:
                for faster in self._caches[:index]:
                    faster.set(key, definition)
                return definition
        return None

    def set(self, key: str, definition: ClassDefinition) -> None:
        for cache in self._caches:
            cache.set(key, definition)


class VersionedCache:
    """Namespaces every key with a version token."""

    def __init__(self, delegate: DefinitionCache, version: str) -> None:
        self._delegate = delegate
        self._version = version

    @property
    def version(self) -> str:
        return self._version

    def get(self, key: str) -> ClassDefinition | None:
        return self._delegate.get(self._key(key))

    def set(self, key: str, definition: ClassDefinition) -> None:
        self._delegate.set(self._key(key), definition)

    def _key(self, key: str) -> str:
        return f"{self._version}.{key}"


class CacheClassDefinitionRepository:
    """Serves definitions from a cache, introspecting only on a miss."""

    def __init__(self, delegate: ClassDefinitionRepository, cache: DefinitionCache) -> None:
        self._delegate = delegate
        self._cache = cache

    def definition_for(self, type_: ClassType) -> ClassDefinition:
        key = f"class-definition.{type_}"
        definition = self._cache.get(key)
        if definition is not None:
            return definition
        logger.debug("Class definition cache miss for %s", type_)
        definition = self._delegate.definition_for(type_)
        self._cache.set(key, definition)
        return definition
