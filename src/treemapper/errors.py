# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Fatal errors raised by treemapper.

These abort a whole mapping call. Per-node mapping failures are modelled by
:class:`treemapper.mapper.messages.Message` instead and never escape
:meth:`TreeMapper.map`.
"""

# ###############
# Public Interface
# ###############


class TreeMapperError(Exception):
    """Base class for every unrecoverable treemapper error."""


class TypeParsingError(TreeMapperError):
    """Raised when a type description is syntactically invalid.

    Attributes:
        column: 1-based column of the offending token, or 0 when unknown.
    """

    def __init__(self, message: str, column: int = 0) -> None:
        if column:
            super().__init__(f"Column {column}: {message}")
        else:
            super().__init__(message)
        self.column = column


class ClassNotFound(TreeMapperError):
    """Raised when a dotted class path cannot be imported."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot find class `{name}`")
        self.name = name


class InvalidClass(TreeMapperError):
    """Raised when a class cannot be introspected into a definition."""


class ClassNotInstantiable(TreeMapperError):
    """Raised when no constructor or factory method can build a class."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Class `{name}` cannot be instantiated: {reason}")
        self.name = name


class InvalidConstructorArguments(TreeMapperError):
    """Raised when an object builder is called without its required arguments."""


class InterfaceNotRegistered(TreeMapperError):
    """Raised when an interface has no implementation in the interface mapping."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Interface `{name}` has no registered implementation; "
            "add it to the interface mapping of the mapper settings"
        )
        self.name = name


class TypeGraphTooDeep(TreeMapperError):
    """Raised when a traversal exceeds the configured maximum depth."""

    def __init__(self, path: str, max_depth: int, recursion_limit: bool = False) -> None:
        if recursion_limit:
            super().__init__(f"Recursion limit reached at path `{path}` before the maximum mapping depth of {max_depth}")
        else:
            super().__init__(f"Maximum mapping depth of {max_depth} exceeded at path `{path}`")
        self.path = path
        self.max_depth = max_depth


class ParameterNotFound(TreeMapperError):
    """Raised when a parameters container is asked for an unknown name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Parameter `{name}` not found")
        self.name = name


class CompilationError(TreeMapperError):
    """Raised when a class definition cannot be compiled for the persisted cache."""


class SettingsError(TreeMapperError):
    """Raised when mapper settings cannot be read or are invalid."""
