# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution between dotted class paths and Python classes."""

from __future__ import annotations

import importlib
import inspect
from enum import Enum
from functools import lru_cache

from treemapper.errors import ClassNotFound

# ###############
# Public Interface
# ###############


def class_path(cls: type) -> str:
    """Return the dotted path under which *cls* can be imported again."""
    return f"{cls.__module__}.{cls.__qualname__}"


@lru_cache(maxsize=None)
def import_class(path: str) -> type:
    """Import the class designated by a dotted *path*.

    The longest importable module prefix wins, the remaining segments are
    looked up as attributes (so nested classes resolve as well).

    Raises:
        ClassNotFound: If no module prefix is importable or an attribute is missing.
    """
    parts = path.split(".")
    for index in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:index])
        try:
            target: object = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            if exc.name is not None and not module_name.startswith(exc.name):
                raise
            continue
        for attribute in parts[index:]:
            target = getattr(target, attribute, None)
            if target is None:
                raise ClassNotFound(path)
        if not isinstance(target, type):
            raise ClassNotFound(path)
        return target
    raise ClassNotFound(path)


def is_enum_class(cls: type) -> bool:
    """Return True if *cls* is an :class:`enum.Enum` subclass."""
    return issubclass(cls, Enum)


def is_interface_class(cls: type) -> bool:
    """Return True if *cls* is abstract or a :class:`typing.Protocol`."""
    return inspect.isabstract(cls) or bool(getattr(cls, "_is_protocol", False))
