"""
Convenience layer to map a bean type to/from JSON text.
"""

from __future__ import annotations

import io
from typing import IO

from .marshalling import Marshaller, MarshallParams
from .registry import IntrospectionRegistry
from .streaming import JsonReader, JsonWriter
from .unmarshalling import Unmarshaller, UnmarshallParams

__all__ = [
    "BeanAdapter",
]


class BeanAdapter[T]:
    """
    Bidirectional mapping between a bean type and JSON text.

    Wraps the marshalling engines with readers and writers over strings and
    files, similar to the `json` module's `dumps()`/`loads()`.
    """

    __cls: type[T]
    __marshaller: Marshaller
    __unmarshaller: Unmarshaller

    def __init__(
        self,
        cls: type[T],
        /,
        *,
        registry: IntrospectionRegistry | None = None,
        marshall_params: MarshallParams | None = None,
        unmarshall_params: UnmarshallParams | None = None,
    ):
        self.__cls = cls
        self.__marshaller = Marshaller(registry=registry, params=marshall_params)
        self.__unmarshaller = Unmarshaller(registry=registry, params=unmarshall_params)

    def __repr__(self) -> str:
        return f"BeanAdapter({self.__cls.__qualname__})"

    @property
    def cls(self) -> type[T]:
        return self.__cls

    def dumps(self, obj: T | None, /, *, indent: int | None = None) -> str:
        """
        Marshall a bean to a JSON string; `None` yields an empty string.

        :param obj: Bean to marshall
        :param indent: Indentation per nesting level, compact output if `None`
        :return: JSON text
        """
        out = io.StringIO()
        self.dump(obj, out, indent=indent)
        return out.getvalue()

    def dump(self, obj: T | None, fp: IO[str], /, *, indent: int | None = None):
        """
        Marshall a bean to a text stream.
        """
        self.__marshaller.marshall(JsonWriter(fp, indent=indent), obj)

    def dumps_array(self, beans: list[T], /, *, indent: int | None = None) -> str:
        """
        Marshall a list of beans to a JSON array string.
        """
        out = io.StringIO()
        self.__marshaller.marshall_array(JsonWriter(out, indent=indent), beans)
        return out.getvalue()

    def loads(self, text: str | bytes, /) -> T:
        """
        Unmarshall a bean from a JSON string.

        :param text: JSON text starting with an object
        :return: Populated bean
        """
        return self.__unmarshaller.unmarshall(JsonReader.from_string(text), self.__cls)

    def load(self, fp: IO[bytes] | IO[str], /) -> T:
        """
        Unmarshall a bean from a stream.
        """
        return self.__unmarshaller.unmarshall(JsonReader(fp), self.__cls)

    def loads_array(self, text: str | bytes, /) -> list[T]:
        """
        Unmarshall a list of beans from a JSON array string.
        """
        return self.__unmarshaller.unmarshall_array(
            JsonReader.from_string(text), self.__cls
        )
