# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mapping-time failures.

A :class:`Message` raised anywhere below a node is caught by the error
catching layer and recorded against the node's path; siblings keep mapping.
User constructors may raise :class:`Message` subclasses to report their own
validation failures the same way.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from treemapper.mapper.node import MappingError
    from treemapper.types.nodes import Type

# ###############
# Public Interface
# ###############


class Message(Exception):
    """A user-facing mapping failure with a stable error code."""

    code = "mapping_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidScalarValue(Message):
    code = "invalid_scalar_value"

    def __init__(self, expected: Type, value: Any) -> None:
        super().__init__(f"Value {describe_value(value)} is not a valid `{expected}`.")
        self.expected = expected
        self.value = value


class InvalidSourceValue(Message):
    code = "invalid_source_value"

    def __init__(self, expected: str, value: Any) -> None:
        super().__init__(f"Value {describe_value(value)} is not {expected}.")
        self.value = value


class EmptySequence(Message):
    code = "empty_sequence"

    def __init__(self, expected: Type) -> None:
        super().__init__(f"Value must not be empty, expected `{expected}`.")


class MissingValue(Message):
    code = "missing_value"

    def __init__(self, expected: Type) -> None:
        super().__init__(f"Cannot be empty and must be filled with a value matching `{expected}`.")


class MissingShapedField(Message):
    code = "missing_shaped_field"

    def __init__(self, key: int | str, expected: Type) -> None:
        super().__init__(f"Missing required key `{key}` of type `{expected}`.")
        self.key = key


class UnexpectedKey(Message):
    code = "unexpected_key"

    def __init__(self, key: Any) -> None:
        super().__init__(f"Unexpected key `{key}`.")
        self.key = key


class InvalidEnumValue(Message):
    code = "invalid_enum_value"

    def __init__(self, expected: Type, value: Any, accepted: Sequence[Any]) -> None:
        choices = ", ".join(describe_value(v) for v in accepted)
        super().__init__(f"Value {describe_value(value)} does not match any of {choices}.")
        self.accepted = tuple(accepted)


class UnionResolutionError(Message):
    """No member of a union accepted the value.

    Attributes:
        attempts: Each attempted member with the errors it produced.
    """

    code = "union_resolution_error"

    def __init__(self, expected: Type, value: Any, attempts: Sequence[tuple[Type, Sequence[MappingError]]]) -> None:
        super().__init__(f"Value {describe_value(value)} does not match any of `{expected}`.")
        self.attempts = tuple((member, tuple(errors)) for member, errors in attempts)


def describe_value(value: Any) -> str:
    """Return a short human-readable summary of a raw input value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        text = value if len(value) <= 40 else value[:37] + "..."
        return repr(text)
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, Mapping):
        return f"array (size {len(value)})"
    if isinstance(value, (list, tuple)):
        return f"list (size {len(value)})"
    return f"object `{type(value).__qualname__}`"
