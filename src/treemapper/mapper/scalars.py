# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Scalar casting and the coercion rules applied to raw scalar input."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from treemapper.mapper.messages import InvalidScalarValue
from treemapper.types.nodes import ScalarKind, ScalarType

# ###############
# Public Interface
# ###############


class CoercionRules(BaseModel):
    """Which non-exact inputs a scalar accepts.

    Without any coercion a scalar only accepts values of its own Python type.
    ``bool`` is never accepted where an integer or a float is expected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    numeric_strings: bool = Field(default=True, alias="numeric-strings")
    """Accept ``"42"`` for ``int`` and ``"1.5"`` for ``float``."""
    integral_floats: bool = Field(default=True, alias="integral-floats")
    """Accept ``3.0`` for ``int``."""
    int_to_float: bool = Field(default=True, alias="int-to-float")
    numbers_to_string: bool = Field(default=True, alias="numbers-to-string")
    stringable_objects: bool = Field(default=True, alias="stringable-objects")
    """Accept objects that define their own ``__str__`` for ``string``."""
    numeric_bools: bool = Field(default=True, alias="numeric-bools")
    """Accept ``0`` and ``1`` for ``bool``."""
    true_strings: frozenset[str] = Field(default=frozenset({"true", "1"}), alias="true-strings")
    false_strings: frozenset[str] = Field(default=frozenset({"false", "0"}), alias="false-strings")


STRICT_COERCION = CoercionRules(
    numeric_strings=False,
    integral_floats=False,
    int_to_float=False,
    numbers_to_string=False,
    stringable_objects=False,
    numeric_bools=False,
    true_strings=frozenset(),
    false_strings=frozenset(),
)
PERMISSIVE_COERCION = CoercionRules()

COERCION_PRESETS: dict[str, CoercionRules] = {
    "strict": STRICT_COERCION,
    "permissive": PERMISSIVE_COERCION,
}


def cast_scalar(type_: ScalarType, value: Any, rules: CoercionRules) -> Any:
    """Cast *value* to the scalar *type_*.

    Raises:
        InvalidScalarValue: If the value is not accepted under *rules*.
    """
    result = _CASTERS[type_.scalar](value, rules)
    if result is _REJECTED:
        raise InvalidScalarValue(type_, value)
    return result


# ################
# Implementation
# ################

_REJECTED = object()

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def _to_int(value: Any, rules: CoercionRules) -> Any:
    if isinstance(value, bool):
        return _REJECTED
    if isinstance(value, int):
        return value
    if isinstance(value, float) and rules.integral_floats and value.is_integer():
        return int(value)
    if isinstance(value, str) and rules.numeric_strings and _INT_PATTERN.fullmatch(value):
        return int(value)
    return _REJECTED


def _to_positive_int(value: Any, rules: CoercionRules) -> Any:
    result = _to_int(value, rules)
    if result is _REJECTED or result <= 0:
        return _REJECTED
    return result


def _to_negative_int(value: Any, rules: CoercionRules) -> Any:
    result = _to_int(value, rules)
    if result is _REJECTED or result >= 0:
        return _REJECTED
    return result


def _to_float(value: Any, rules: CoercionRules) -> Any:
    if isinstance(value, bool):
        return _REJECTED
    if isinstance(value, float):
        return value
    if isinstance(value, int) and rules.int_to_float:
        return float(value)
    if isinstance(value, str) and rules.numeric_strings and _FLOAT_PATTERN.fullmatch(value):
        return float(value)
    return _REJECTED


def _to_string(value: Any, rules: CoercionRules) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return _REJECTED
    if isinstance(value, (int, float)):
        return str(value) if rules.numbers_to_string else _REJECTED
    if rules.stringable_objects and _is_stringable(value):
        return str(value)
    return _REJECTED


def _to_non_empty_string(value: Any, rules: CoercionRules) -> Any:
    result = _to_string(value, rules)
    if result == "":
        return _REJECTED
    return result


def _to_bool(value: Any, rules: CoercionRules) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and rules.numeric_bools and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in rules.true_strings:
            return True
        if lowered in rules.false_strings:
            return False
    return _REJECTED


def _to_null(value: Any, rules: CoercionRules) -> Any:
    return None if value is None else _REJECTED


def _to_mixed(value: Any, rules: CoercionRules) -> Any:
    return value


def _to_array_key(value: Any, rules: CoercionRules) -> Any:
    if isinstance(value, str) or (isinstance(value, int) and not isinstance(value, bool)):
        return value
    return _REJECTED


def _is_stringable(value: Any) -> bool:
    if value is None or isinstance(value, (Mapping, list, tuple, set, frozenset, bytes, Enum)):
        return False
    return type(value).__str__ is not object.__str__


_CASTERS: dict[ScalarKind, Callable[[Any, CoercionRules], Any]] = {
    ScalarKind.INT: _to_int,
    ScalarKind.POSITIVE_INT: _to_positive_int,
    ScalarKind.NEGATIVE_INT: _to_negative_int,
    ScalarKind.FLOAT: _to_float,
    ScalarKind.STRING: _to_string,
    ScalarKind.NON_EMPTY_STRING: _to_non_empty_string,
    ScalarKind.BOOL: _to_bool,
    ScalarKind.NULL: _to_null,
    ScalarKind.MIXED: _to_mixed,
    ScalarKind.ARRAY_KEY: _to_array_key,
}
