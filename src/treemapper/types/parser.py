# Copyright 2026 TreeMapper Contributors
# SPDX-License-Identifier: Apache-2.0

"""Recursive-descent parser for type descriptions.

Converts a token stream produced by the lexer into an immutable
:data:`~treemapper.types.nodes.Type` tree.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import ValidationError

from treemapper.errors import TypeParsingError
from treemapper.types.classes import class_path, import_class, is_enum_class, is_interface_class
from treemapper.types.lexer import Token, TokenType, tokenize
from treemapper.types.nodes import (
    ARRAY_KEY,
    MIXED,
    NULL,
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
    scalar,
    union_of,
)
from treemapper.types.specifications import TypeParserSpecification

# ###############
# Public Interface
# ###############


class TypeParser:
    """Parses type descriptions under a fixed set of specifications."""

    def __init__(self, *specifications: TypeParserSpecification) -> None:
        self._specifications = specifications

    @property
    def specifications(self) -> tuple[TypeParserSpecification, ...]:
        return self._specifications

    def parse(self, description: str) -> Type:
        """Parse *description* into a type tree.

        Raises:
            TypeParsingError: If the description is syntactically invalid or
                names an unknown type.
            ClassNotFound: If a dotted class path cannot be imported.
        """
        tokens = tokenize(description)
        return _Parser(tokens, self._specifications).parse()


class CachedParser:
    """Memoises a parser per raw type description."""

    def __init__(self, delegate: TypeParser) -> None:
        self._delegate = delegate
        self._cache: dict[str, Type] = {}

    @property
    def specifications(self) -> tuple[TypeParserSpecification, ...]:
        return self._delegate.specifications

    def parse(self, description: str) -> Type:
        try:
            return self._cache[description]
        except KeyError:
            pass
        type_ = self._delegate.parse(description)
        self._cache[description] = type_
        return type_


class TypeParserFactory:
    """Hands out one cached parser per distinct specification tuple."""

    def __init__(self) -> None:
        self._parsers: dict[tuple[TypeParserSpecification, ...], CachedParser] = {}

    def get(self, *specifications: TypeParserSpecification) -> CachedParser:
        parser = self._parsers.get(specifications)
        if parser is None:
            parser = CachedParser(TypeParser(*specifications))
            self._parsers[specifications] = parser
        return parser


def parse(description: str, *specifications: TypeParserSpecification) -> Type:
    """Parse a type description without memoisation."""
    return TypeParser(*specifications).parse(description)


# ################
# Implementation
# ################

_SCALAR_KEYWORDS: dict[str, ScalarKind] = {
    "int": ScalarKind.INT,
    "integer": ScalarKind.INT,
    "float": ScalarKind.FLOAT,
    "double": ScalarKind.FLOAT,
    "string": ScalarKind.STRING,
    "str": ScalarKind.STRING,
    "bool": ScalarKind.BOOL,
    "boolean": ScalarKind.BOOL,
    "null": ScalarKind.NULL,
    "None": ScalarKind.NULL,
    "mixed": ScalarKind.MIXED,
    "non-empty-string": ScalarKind.NON_EMPTY_STRING,
    "positive-int": ScalarKind.POSITIVE_INT,
    "negative-int": ScalarKind.NEGATIVE_INT,
    "array-key": ScalarKind.ARRAY_KEY,
}

_KEYED_KEYWORDS: dict[str, type[ArrayType] | type[NonEmptyArrayType] | type[IterableType]] = {
    "array": ArrayType,
    "non-empty-array": NonEmptyArrayType,
    "iterable": IterableType,
}

_LIST_KEYWORDS: dict[str, type[ListType] | type[NonEmptyListType]] = {
    "list": ListType,
    "non-empty-list": NonEmptyListType,
}

_KEY_KINDS: frozenset[ScalarKind] = frozenset(
    {
        ScalarKind.INT,
        ScalarKind.STRING,
        ScalarKind.ARRAY_KEY,
        ScalarKind.POSITIVE_INT,
        ScalarKind.NEGATIVE_INT,
        ScalarKind.NON_EMPTY_STRING,
    }
)


class _Parser:
    """Recursive-descent parser for type description token streams."""

    def __init__(self, tokens: list[Token], specifications: Sequence[TypeParserSpecification]) -> None:
        self._tokens = tokens
        self._pos = 0
        self._specifications = specifications

    def parse(self) -> Type:
        """Parse the full token stream and return its type."""
        if self._at_end():
            raise TypeParsingError("Empty type description", self._current().column)
        type_ = self._parse_union()
        if not self._at_end():
            tok = self._current()
            raise TypeParsingError(f"Unexpected {_describe(tok)} after type", tok.column)
        return type_

    # ------------------------------------------------------------------
    # Token access helpers
    # ------------------------------------------------------------------

    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _peek(self, offset: int) -> Token:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _check(self, *types: TokenType) -> bool:
        return self._current().type in types

    def _expect(self, token_type: TokenType, context: str) -> Token:
        tok = self._current()
        if tok.type != token_type:
            raise TypeParsingError(f"Expected {token_type.value!r} {context}, got {_describe(tok)}", tok.column)
        return self._advance()

    # ------------------------------------------------------------------
    # Grammar
    # ------------------------------------------------------------------

    def _parse_union(self) -> Type:
        members = [self._parse_postfix()]
        while self._check(TokenType.PIPE):
            self._advance()
            members.append(self._parse_postfix())
        return union_of(*members)

    def _parse_postfix(self) -> Type:
        type_ = self._parse_primary()
        while self._check(TokenType.LBRACKET):
            self._advance()
            self._expect(TokenType.RBRACKET, "to close array shorthand")
            type_ = ArrayType(key_type=ARRAY_KEY, value_type=type_)
        return type_

    def _parse_primary(self) -> Type:
        tok = self._current()
        if tok.type == TokenType.QUESTION:
            self._advance()
            return union_of(NULL, self._parse_postfix())
        if tok.type != TokenType.IDENTIFIER:
            raise TypeParsingError(f"Expected a type, got {_describe(tok)}", tok.column)
        self._advance()

        generics: list[Type] = []
        if self._check(TokenType.LANGLE):
            generics = self._parse_generics()

        if self._check(TokenType.LBRACE):
            if tok.value != "array" or generics:
                raise TypeParsingError(
                    f"Shaped array syntax is only allowed on `array`, not `{tok.value}`",
                    self._current().column,
                )
            return self._parse_shape()

        return self._resolve(tok, generics)

    def _parse_generics(self) -> list[Type]:
        self._expect(TokenType.LANGLE, "to open generics")
        generics = [self._parse_union()]
        while self._check(TokenType.COMMA):
            self._advance()
            generics.append(self._parse_union())
        self._expect(TokenType.RANGLE, "to close generics")
        return generics

    def _parse_shape(self) -> Type:
        start = self._expect(TokenType.LBRACE, "to open shaped array")
        elements: list[ShapedArrayElement] = []
        index = 0
        while not self._check(TokenType.RBRACE):
            tok = self._current()
            follower = self._peek(1).type
            is_named = tok.type in (TokenType.IDENTIFIER, TokenType.INTEGER, TokenType.STRING) and (
                follower == TokenType.COLON or (follower == TokenType.QUESTION and self._peek(2).type == TokenType.COLON)
            )
            if is_named:
                self._advance()
                key: int | str = int(tok.value) if tok.type == TokenType.INTEGER else tok.value
                optional = False
                if self._check(TokenType.QUESTION):
                    self._advance()
                    optional = True
                self._expect(TokenType.COLON, "after shaped array key")
                elements.append(ShapedArrayElement(key=key, type=self._parse_union(), optional=optional))
            else:
                elements.append(ShapedArrayElement(key=index, type=self._parse_union()))
                index += 1
            if not self._check(TokenType.COMMA):
                break
            self._advance()
        self._expect(TokenType.RBRACE, "to close shaped array")
        try:
            return ShapedArrayType(elements=tuple(elements))
        except ValidationError as exc:
            raise TypeParsingError(f"Invalid shaped array: {exc.errors()[0]['msg']}", start.column) from exc

    # ------------------------------------------------------------------
    # Name resolution
    # ------------------------------------------------------------------

    def _resolve(self, tok: Token, generics: list[Type]) -> Type:
        name = tok.value

        if name in _SCALAR_KEYWORDS:
            if generics:
                raise TypeParsingError(f"Scalar `{name}` does not accept generic arguments", tok.column)
            return scalar(_SCALAR_KEYWORDS[name])

        if name in _KEYED_KEYWORDS:
            return self._keyed(_KEYED_KEYWORDS[name], tok, generics)

        if name in _LIST_KEYWORDS:
            if len(generics) > 1:
                raise TypeParsingError(f"`{name}` accepts a single generic argument", tok.column)
            return _LIST_KEYWORDS[name](value_type=generics[0] if generics else MIXED)

        resolved: Type | type | None = None
        for specification in self._specifications:
            resolved = specification.resolve_name(name)
            if resolved is not None:
                break

        if resolved is not None and not isinstance(resolved, type):
            if generics:
                raise TypeParsingError(f"Template `{name}` does not accept generic arguments", tok.column)
            return resolved

        if resolved is None:
            if "." not in name:
                raise TypeParsingError(f"Unknown type `{name}`", tok.column)
            resolved = import_class(name)

        return self._class_type(resolved, tok, generics)

    def _keyed(
        self,
        factory: type[ArrayType] | type[NonEmptyArrayType] | type[IterableType],
        tok: Token,
        generics: list[Type],
    ) -> Type:
        if len(generics) > 2:
            raise TypeParsingError(f"`{tok.value}` accepts at most two generic arguments", tok.column)
        if len(generics) == 2:
            key_type, value_type = generics
        else:
            key_type, value_type = ARRAY_KEY, generics[0] if generics else MIXED
        if not _is_valid_key(key_type):
            raise TypeParsingError(f"Invalid array key type `{key_type}`", tok.column)
        return factory(key_type=key_type, value_type=value_type)

    def _class_type(self, cls: type, tok: Token, generics: list[Type]) -> Type:
        path = class_path(cls)
        if is_enum_class(cls) or is_interface_class(cls):
            if generics:
                raise TypeParsingError(f"`{path}` does not accept generic arguments", tok.column)
            if is_enum_class(cls):
                return EnumType(name=path)
            return InterfaceType(name=path)

        bindings: tuple[tuple[str, Type], ...] | None = None
        for specification in self._specifications:
            bindings = specification.bind_generics(cls, generics)
            if bindings is not None:
                break
        if bindings is None:
            if generics:
                raise TypeParsingError(f"Generic arguments are not supported for `{path}`", tok.column)
            bindings = ()
        return ClassType(name=path, generics=bindings)


def _is_valid_key(type_: Type) -> bool:
    if isinstance(type_, UnionType):
        return all(_is_valid_key(member) for member in type_.members)
    return isinstance(type_, ScalarType) and type_.scalar in _KEY_KINDS


def _describe(tok: Token) -> str:
    if tok.type == TokenType.EOF:
        return "end of input"
    return repr(tok.value)
