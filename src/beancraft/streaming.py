"""
Streaming JSON source and sink consumed by the marshalling engines.

The engines only depend on the `JsonSink` and `JsonSource` protocols;
`JsonWriter` and `JsonReader` are the provided implementations over text
streams and `ijson` events respectively.
"""

from __future__ import annotations

import io
import json
import math
from collections.abc import Iterator
from decimal import Decimal
from enum import Enum, auto
from numbers import Real
from typing import IO, Any, Protocol, runtime_checkable

import ijson

from .exceptions import JsonFormatError

__all__ = [
    "TokenKind",
    "JsonSink",
    "JsonSource",
    "JsonWriter",
    "JsonReader",
]


class TokenKind(Enum):
    """
    Kind of the next token offered by a source.
    """

    BEGIN_OBJECT = auto()
    END_OBJECT = auto()
    BEGIN_ARRAY = auto()
    END_ARRAY = auto()
    NAME = auto()
    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    NULL = auto()
    END_DOCUMENT = auto()


@runtime_checkable
class JsonSink(Protocol):
    """
    Receives JSON events in document order.
    """

    def begin_object(self): ...
    def end_object(self): ...
    def begin_array(self): ...
    def end_array(self): ...
    def name(self, name: str, /): ...
    def string_value(self, value: str, /): ...
    def bool_value(self, value: bool, /): ...
    def number_value(self, value: Real, /): ...
    def null_value(self): ...


@runtime_checkable
class JsonSource(Protocol):
    """
    Offers JSON tokens one at a time with single-token lookahead.
    """

    def peek(self) -> TokenKind: ...
    def has_next(self) -> bool: ...
    def begin_object(self): ...
    def end_object(self): ...
    def begin_array(self): ...
    def end_array(self): ...
    def next_name(self) -> str: ...
    def next_string(self) -> str: ...
    def next_boolean(self) -> bool: ...
    def next_null(self): ...
    def skip_value(self): ...


class _Scope(Enum):
    EMPTY_DOCUMENT = auto()
    NONEMPTY_DOCUMENT = auto()
    EMPTY_OBJECT = auto()
    DANGLING_NAME = auto()
    NONEMPTY_OBJECT = auto()
    EMPTY_ARRAY = auto()
    NONEMPTY_ARRAY = auto()


class JsonWriter:
    """
    Writes JSON events to a text stream, one top-level value per writer.
    """

    __out: IO[str]
    __indent: int | None
    __stack: list[_Scope]

    def __init__(self, out: IO[str], *, indent: int | None = None):
        self.__out = out
        self.__indent = indent
        self.__stack = [_Scope.EMPTY_DOCUMENT]

    def __repr__(self) -> str:
        return f"JsonWriter(depth={len(self.__stack) - 1})"

    def begin_object(self):
        self.__open(_Scope.EMPTY_OBJECT, "{")

    def end_object(self):
        self.__close(_Scope.EMPTY_OBJECT, _Scope.NONEMPTY_OBJECT, "}")

    def begin_array(self):
        self.__open(_Scope.EMPTY_ARRAY, "[")

    def end_array(self):
        self.__close(_Scope.EMPTY_ARRAY, _Scope.NONEMPTY_ARRAY, "]")

    def name(self, name: str, /):
        scope = self.__stack[-1]
        if scope not in (_Scope.EMPTY_OBJECT, _Scope.NONEMPTY_OBJECT):
            raise JsonFormatError(f"Name '{name}' written outside of an object")
        if scope is _Scope.NONEMPTY_OBJECT:
            self.__out.write(",")
        self.__newline()
        self.__out.write(json.dumps(name))
        self.__out.write(": " if self.__indent is not None else ":")
        self.__stack[-1] = _Scope.DANGLING_NAME

    def string_value(self, value: str, /):
        self.__scalar(json.dumps(str(value)))

    def bool_value(self, value: bool, /):
        self.__scalar("true" if value else "false")

    def number_value(self, value: Real, /):
        """
        Write a real number. Values other than `int` and `Decimal` are written as
        the nearest float, so a `Fraction` like `1/3` loses precision.
        """
        if isinstance(value, bool) or not isinstance(value, Real):
            raise JsonFormatError(f"Not a real number: {value!r}")
        if isinstance(value, int):
            text = str(value)
        elif isinstance(value, Decimal):
            if not value.is_finite():
                raise JsonFormatError(f"Numeric values must be finite: {value}")
            text = str(value)
        else:
            number = float(value)  # type: ignore[arg-type]
            if not math.isfinite(number):
                raise JsonFormatError(f"Numeric values must be finite: {value}")
            text = repr(number)
        self.__scalar(text)

    def null_value(self):
        self.__scalar("null")

    def __open(self, scope: _Scope, token: str):
        self.__before_value()
        self.__out.write(token)
        self.__stack.append(scope)

    def __close(self, empty: _Scope, nonempty: _Scope, token: str):
        scope = self.__stack[-1]
        if scope not in (empty, nonempty):
            raise JsonFormatError(f"Nesting problem: cannot write '{token}' in {scope}")
        self.__stack.pop()
        if scope is nonempty:
            self.__newline()
        self.__out.write(token)

    def __scalar(self, text: str):
        self.__before_value()
        self.__out.write(text)

    def __before_value(self):
        scope = self.__stack[-1]
        match scope:
            case _Scope.EMPTY_DOCUMENT:
                self.__stack[-1] = _Scope.NONEMPTY_DOCUMENT
            case _Scope.NONEMPTY_DOCUMENT:
                raise JsonFormatError("JSON must have only one top-level value")
            case _Scope.DANGLING_NAME:
                self.__stack[-1] = _Scope.NONEMPTY_OBJECT
            case _Scope.EMPTY_ARRAY:
                self.__stack[-1] = _Scope.NONEMPTY_ARRAY
                self.__newline()
            case _Scope.NONEMPTY_ARRAY:
                self.__out.write(",")
                self.__newline()
            case _:
                raise JsonFormatError(f"Value written without a name in {scope}")

    def __newline(self):
        if self.__indent is None:
            return
        self.__out.write("\n" + " " * (self.__indent * (len(self.__stack) - 1)))


_EVENT_KINDS = {
    "start_map": TokenKind.BEGIN_OBJECT,
    "end_map": TokenKind.END_OBJECT,
    "start_array": TokenKind.BEGIN_ARRAY,
    "end_array": TokenKind.END_ARRAY,
    "map_key": TokenKind.NAME,
    "string": TokenKind.STRING,
    "number": TokenKind.NUMBER,
    "boolean": TokenKind.BOOLEAN,
    "null": TokenKind.NULL,
}


class JsonReader:
    """
    Reads JSON tokens from a binary or text stream using `ijson`.

    Consecutive top-level values are allowed; each call consuming a value leaves
    the following ones in the stream.
    """

    __events: Iterator[tuple[str, Any]]
    __lookahead: tuple[TokenKind, Any] | None

    def __init__(self, stream: IO[bytes] | IO[str]):
        self.__events = iter(ijson.basic_parse(stream, multiple_values=True))
        self.__lookahead = None

    @classmethod
    def from_string(cls, text: str | bytes, /) -> JsonReader:
        """
        Create a reader over an in-memory document.
        """
        data = text.encode("utf-8") if isinstance(text, str) else text
        return cls(io.BytesIO(data))

    def __repr__(self) -> str:
        if self.__lookahead is None:
            return "JsonReader()"
        return f"JsonReader(next={self.__lookahead[0].name})"

    def peek(self) -> TokenKind:
        return self.__fill()[0]

    def has_next(self) -> bool:
        return self.peek() not in (
            TokenKind.END_OBJECT,
            TokenKind.END_ARRAY,
            TokenKind.END_DOCUMENT,
        )

    def begin_object(self):
        self.__expect(TokenKind.BEGIN_OBJECT)

    def end_object(self):
        self.__expect(TokenKind.END_OBJECT)

    def begin_array(self):
        self.__expect(TokenKind.BEGIN_ARRAY)

    def end_array(self):
        self.__expect(TokenKind.END_ARRAY)

    def next_name(self) -> str:
        return self.__expect(TokenKind.NAME)

    def next_string(self) -> str:
        """
        Consume a string, or a number in its textual form.
        """
        kind, value = self.__fill()
        if kind is TokenKind.NUMBER:
            self.__lookahead = None
            return str(value)
        return self.__expect(TokenKind.STRING)

    def next_boolean(self) -> bool:
        return self.__expect(TokenKind.BOOLEAN)

    def next_null(self):
        self.__expect(TokenKind.NULL)

    def skip_value(self):
        """
        Consume the next value including everything nested in it.
        """
        kind = self.peek()
        if kind in (TokenKind.END_OBJECT, TokenKind.END_ARRAY, TokenKind.END_DOCUMENT):
            raise JsonFormatError(f"Expected a value but was {kind.name}")

        depth = 0
        while True:
            kind, _ = self.__fill()
            self.__lookahead = None
            if kind in (TokenKind.BEGIN_OBJECT, TokenKind.BEGIN_ARRAY):
                depth += 1
            elif kind in (TokenKind.END_OBJECT, TokenKind.END_ARRAY):
                depth -= 1
            elif kind is TokenKind.END_DOCUMENT:
                raise JsonFormatError("Unexpected end of document while skipping")
            if depth == 0 and kind is not TokenKind.NAME:
                return

    def __expect(self, expected: TokenKind) -> Any:
        kind, value = self.__fill()
        if kind is not expected:
            raise JsonFormatError(f"Expected {expected.name} but was {kind.name}")
        self.__lookahead = None
        return value

    def __fill(self) -> tuple[TokenKind, Any]:
        if self.__lookahead is None:
            try:
                event, value = next(self.__events)
            except StopIteration:
                self.__lookahead = (TokenKind.END_DOCUMENT, None)
            except ijson.JSONError as e:
                raise JsonFormatError(f"Malformed JSON: {e}") from e
            else:
                self.__lookahead = (_EVENT_KINDS[event], value)
        return self.__lookahead
