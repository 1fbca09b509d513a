# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type language: AST, lexer, parser and parser specifications."""

from treemapper.types.classes import class_path, import_class
from treemapper.types.nodes import (
    ArrayType,
    ClassType,
    EnumType,
    InterfaceType,
    IterableType,
    ListType,
    NonEmptyArrayType,
    NonEmptyListType,
    ScalarKind,
    ScalarType,
    ShapedArrayElement,
    ShapedArrayType,
    Type,
    UnionType,
    union_of,
)
from treemapper.types.parser import CachedParser, TypeParser, TypeParserFactory, parse
from treemapper.types.specifications import (
    ClassContextSpecification,
    HandleClassGenericSpecification,
    TemplateSpecification,
    TypeParserSpecification,
)

__all__ = [
    # Type tree
    "ScalarKind",
    "ScalarType",
    "ArrayType",
    "NonEmptyArrayType",
    "IterableType",
    "ListType",
    "NonEmptyListType",
    "ShapedArrayElement",
    "ShapedArrayType",
    "ClassType",
    "EnumType",
    "InterfaceType",
    "UnionType",
    "Type",
    "union_of",
    # Parsing
    "parse",
    "TypeParser",
    "CachedParser",
    "TypeParserFactory",
    "TypeParserSpecification",
    "TemplateSpecification",
    "ClassContextSpecification",
    "HandleClassGenericSpecification",
    # Classes
    "class_path",
    "import_class",
]
