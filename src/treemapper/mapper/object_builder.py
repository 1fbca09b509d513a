# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Object builders: turn mapped argument values into instances."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from treemapper.attributes import StaticMethodConstructor
from treemapper.definition.parameters import ClassDefinition, Construction, Parameters
from treemapper.errors import ClassNotInstantiable, InvalidConstructorArguments
from treemapper.types.classes import import_class

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ObjectBuilder(Protocol):
    """Builds instances of one class from named argument values."""

    def parameters_needed(self) -> Parameters: ...

    def build(self, values: Mapping[str, Any]) -> Any: ...


class ObjectBuilderFactory(Protocol):
    """Selects the object builder of a class definition."""

    def builder_for(self, definition: ClassDefinition) -> ObjectBuilder: ...


class CallableObjectBuilder:
    """Calls a constructor or factory method with keyword arguments.

    Parameters missing from the values are left to their defaults; arguments
    are passed in parameter declaration order.
    """

    def __init__(self, target: Callable[..., Any], parameters: Parameters, description: str) -> None:
        self._target = target
        self._parameters = parameters
        self._description = description

    def parameters_needed(self) -> Parameters:
        return self._parameters

    def build(self, values: Mapping[str, Any]) -> Any:
        """Call the target.

        Raises:
            InvalidConstructorArguments: If a parameter without default is missing
                or a value does not match any parameter.
        """
        _check_arguments(self._parameters, values, self._description)
        arguments = {p.name: values[p.name] for p in self._parameters if p.name in values}
        return self._target(**arguments)


class PropertiesObjectBuilder:
    """Instantiates a class without arguments, then assigns its public properties."""

    def __init__(self, cls: type, parameters: Parameters) -> None:
        self._cls = cls
        self._parameters = parameters

    def parameters_needed(self) -> Parameters:
        return self._parameters

    def build(self, values: Mapping[str, Any]) -> Any:
        _check_arguments(self._parameters, values, self._cls.__qualname__)
        instance = self._cls()
        for parameter in self._parameters:
            if parameter.name in values:
                setattr(instance, parameter.name, values[parameter.name])
        return instance


class BasicObjectBuilderFactory:
    """Builds through ``__init__``, or through property assignment for classes without one."""

    def builder_for(self, definition: ClassDefinition) -> ObjectBuilder:
        """Return the builder of *definition*.

        Raises:
            ClassNotInstantiable: If the class is abstract or relies on a factory method.
        """
        cls = import_class(definition.name)
        if inspect.isabstract(cls):
            raise ClassNotInstantiable(definition.name, "the class is abstract")
        if definition.construction is Construction.PROPERTIES:
            return PropertiesObjectBuilder(cls, definition.parameters)
        if definition.construction is Construction.FACTORY_METHOD:
            raise ClassNotInstantiable(definition.name, f"factory method `{definition.factory_method}` is not supported")
        return CallableObjectBuilder(cls, definition.parameters, definition.name)


class AttributeObjectBuilderFactory:
    """Honours :class:`StaticMethodConstructor` class attributes, delegating otherwise."""

    def __init__(self, delegate: ObjectBuilderFactory) -> None:
        self._delegate = delegate

    def builder_for(self, definition: ClassDefinition) -> ObjectBuilder:
        constructors = definition.attributes.of_type(StaticMethodConstructor)
        if not constructors:
            return self._delegate.builder_for(definition)

        method = constructors[0].method
        target = getattr(import_class(definition.name), method, None)
        if not callable(target):
            raise ClassNotInstantiable(definition.name, f"factory method `{method}` is not callable")
        logger.debug("Building %s through factory method %s", definition.name, method)
        return CallableObjectBuilder(target, definition.parameters, f"{definition.name}.{method}")


# ################
# Implementation
# ################


def _check_arguments(parameters: Parameters, values: Mapping[str, Any], description: str) -> None:
    missing = [p.name for p in parameters if not p.has_default and p.name not in values]
    if missing:
        raise InvalidConstructorArguments(f"Missing argument(s) {', '.join(missing)} to build `{description}`")
    unknown = [name for name in values if not parameters.has(name)]
    if unknown:
        raise InvalidConstructorArguments(f"Unknown argument(s) {', '.join(unknown)} to build `{description}`")
