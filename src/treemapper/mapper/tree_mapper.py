# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point mapping raw trees onto typed Python values."""

from __future__ import annotations

import logging
from typing import Any

from treemapper.definition.reflection import render_annotation
from treemapper.errors import TypeParsingError
from treemapper.mapper.builders import NodeBuilderChain
from treemapper.mapper.node import MappingResult
from treemapper.mapper.shell import Shell
from treemapper.types.nodes import Type
from treemapper.types.parser import CachedParser, TypeParser

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class TreeMapper:
    """Maps a raw tree (mappings, lists and scalars) onto a target type.

    Build instances with :class:`treemapper.MapperBuilder`. A mapper is
    immutable and may be reused for any number of calls.
    """

    def __init__(self, parser: TypeParser | CachedParser, chain: NodeBuilderChain) -> None:
        self._parser = parser
        self._chain = chain

    def map(self, signature: str | Any, source: Any) -> MappingResult:
        """Map *source* onto the type designated by *signature*.

        Args:
            signature: A type description such as ``"list<my_app.Point>"``, or a
                Python annotation such as ``list[Point]``.
            source: The raw input tree.

        Returns:
            The built value, or every path-tagged error of the mapping.

        Raises:
            TypeParsingError: If the signature is invalid.
            TreeMapperError: On a fatal configuration problem (unknown or invalid
                class, unregistered interface, too deep a type graph).
        """
        type_ = self.parse(signature)
        node = self._chain.build(Shell.root(type_, source))
        if node.is_valid:
            logger.debug("Mapped %s", type_)
            return MappingResult(type=type_, value=node.value)
        logger.debug("Mapping %s failed with %d error(s)", type_, len(node.errors))
        return MappingResult(type=type_, errors=node.errors)

    def parse(self, signature: str | Any) -> Type:
        """Parse a type description or a Python annotation into a type."""
        if isinstance(signature, str):
            return self._parser.parse(signature)
        try:
            description = render_annotation(signature)
        except ValueError as exc:
            raise TypeParsingError(str(exc)) from exc
        return self._parser.parse(description)
