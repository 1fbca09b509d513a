# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tree mapping: shells, shell visitors, node builders and the tree mapper."""

from treemapper.mapper.builders import (
    ArrayNodeBuilder,
    ClassNodeBuilder,
    DepthGuard,
    EnumNodeBuilder,
    ErrorCatcher,
    ListNodeBuilder,
    NodeBuilderChain,
    NodeMiddleware,
    NodeVisiting,
    ScalarNodeBuilder,
    ShapedArrayNodeBuilder,
    ShellVisiting,
    TypeDispatch,
    TypeNodeBuilder,
    ValueAltering,
    default_type_builders,
)
from treemapper.mapper.messages import (
    EmptySequence,
    InvalidEnumValue,
    InvalidScalarValue,
    InvalidSourceValue,
    Message,
    MissingShapedField,
    MissingValue,
    UnexpectedKey,
    UnionResolutionError,
)
from treemapper.mapper.node import MappingError, MappingFailed, MappingResult, Node
from treemapper.mapper.object_builder import (
    AttributeObjectBuilderFactory,
    BasicObjectBuilderFactory,
    CallableObjectBuilder,
    ObjectBuilder,
    ObjectBuilderFactory,
    PropertiesObjectBuilder,
)
from treemapper.mapper.scalars import COERCION_PRESETS, PERMISSIVE_COERCION, STRICT_COERCION, CoercionRules, cast_scalar
from treemapper.mapper.shell import Shell
from treemapper.mapper.tree_mapper import TreeMapper
from treemapper.mapper.visitors import (
    AggregateShellVisitor,
    AttributeShellVisitor,
    InterfaceShellVisitor,
    ObjectBindingShellVisitor,
    ShellVisitor,
    UnionNullNarrower,
    UnionObjectNarrower,
    UnionScalarNarrower,
    UnionShellVisitor,
)

__all__ = [
    # Entry point and results
    "TreeMapper",
    "MappingResult",
    "MappingError",
    "MappingFailed",
    "Node",
    "Shell",
    # Messages
    "Message",
    "InvalidScalarValue",
    "InvalidSourceValue",
    "EmptySequence",
    "MissingValue",
    "MissingShapedField",
    "UnexpectedKey",
    "InvalidEnumValue",
    "UnionResolutionError",
    # Scalars
    "CoercionRules",
    "STRICT_COERCION",
    "PERMISSIVE_COERCION",
    "COERCION_PRESETS",
    "cast_scalar",
    # Object builders
    "ObjectBuilder",
    "ObjectBuilderFactory",
    "CallableObjectBuilder",
    "PropertiesObjectBuilder",
    "BasicObjectBuilderFactory",
    "AttributeObjectBuilderFactory",
    # Shell visitors
    "ShellVisitor",
    "AggregateShellVisitor",
    "UnionShellVisitor",
    "UnionNullNarrower",
    "UnionObjectNarrower",
    "UnionScalarNarrower",
    "InterfaceShellVisitor",
    "AttributeShellVisitor",
    "ObjectBindingShellVisitor",
    # Node builders
    "NodeBuilderChain",
    "NodeMiddleware",
    "TypeNodeBuilder",
    "DepthGuard",
    "ErrorCatcher",
    "ShellVisiting",
    "ValueAltering",
    "NodeVisiting",
    "TypeDispatch",
    "ScalarNodeBuilder",
    "ListNodeBuilder",
    "ArrayNodeBuilder",
    "ShapedArrayNodeBuilder",
    "EnumNodeBuilder",
    "ClassNodeBuilder",
    "default_type_builders",
]
