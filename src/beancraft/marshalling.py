"""
Marshalling capability: walk a live object graph and emit JSON events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .exceptions import MarshallError
from .registry import IntrospectionRegistry, get_default_registry
from .streaming import JsonSink
from .typedefs import ARRAY_TYPES, ValueCategory, classify

__all__ = [
    "MarshallParams",
    "Marshaller",
    "marshall",
    "marshall_array",
]

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class MarshallParams:
    """
    Marshalling params passed by user.
    """

    strict: bool = False
    """
    Whether to raise `MarshallError` for a value which is not a bean, rather than
    emitting null in its place.
    """


class Marshaller:
    """
    Emits beans as JSON objects by invoking their accessors.

    Values are classified by their runtime type, not the declared return type of
    the accessor. Cyclic object graphs are not detected.
    """

    registry: IntrospectionRegistry
    params: MarshallParams

    def __init__(
        self,
        *,
        registry: IntrospectionRegistry | None = None,
        params: MarshallParams | None = None,
    ):
        self.registry = registry or get_default_registry()
        self.params = params or MarshallParams()

    def __repr__(self) -> str:
        return f"Marshaller(registry={self.registry}, params={self.params})"

    def marshall(self, sink: JsonSink, obj: Any, /):
        """
        Write the object to the sink as a JSON object. Nothing is written if the
        object is `None`.

        :raises InvocationError: If an accessor raised
        """
        if obj is None:
            return
        self.__marshall_bean(sink, obj)

    def marshall_array(self, sink: JsonSink, array: list | tuple, /):
        """
        Write the array to the sink, classifying each element individually so
        nested arrays of any dimension recurse naturally.
        """
        assert isinstance(array, ARRAY_TYPES), f"Not an array: {array!r}"

        sink.begin_array()
        for element in array:
            self.__marshall_value(sink, element)
        sink.end_array()

    def __marshall_bean(self, sink: JsonSink, obj: Any):
        sink.begin_object()
        for accessor in self.registry.accessors(type(obj)):
            sink.name(accessor.property_name)
            self.__marshall_value(sink, accessor.invoke(obj))
        sink.end_object()

    def __marshall_value(self, sink: JsonSink, value: Any):
        match classify(value, self.registry.is_bean):
            case ValueCategory.NULL:
                sink.null_value()
            case ValueCategory.STRING:
                sink.string_value(str(value))
            case ValueCategory.BOOLEAN:
                sink.bool_value(value)
            case ValueCategory.NUMBER:
                sink.number_value(value)
            case ValueCategory.ARRAY:
                self.marshall_array(sink, value)
            case ValueCategory.BEAN:
                self.__marshall_bean(sink, value)
            case ValueCategory.UNSUPPORTED:
                if self.params.strict:
                    raise MarshallError(
                        f"Value of type {type(value).__qualname__} is not a bean: "
                        f"{value!r}"
                    )
                logger.debug(
                    "Marshalling %s as null: not a bean", type(value).__qualname__
                )
                sink.null_value()


def marshall(
    sink: JsonSink,
    obj: Any,
    /,
    *,
    registry: IntrospectionRegistry | None = None,
    params: MarshallParams | None = None,
):
    """
    Write the object to the sink as a JSON object.

    :param sink: Receiver of JSON events
    :param obj: Bean to marshall; nothing is written if `None`
    :param registry: Registry of introspected metadata, process-wide if not passed
    :param params: Marshalling params
    """
    Marshaller(registry=registry, params=params).marshall(sink, obj)


def marshall_array(
    sink: JsonSink,
    array: list | tuple,
    /,
    *,
    registry: IntrospectionRegistry | None = None,
    params: MarshallParams | None = None,
):
    """
    Write the array to the sink as a JSON array.
    """
    Marshaller(registry=registry, params=params).marshall_array(sink, array)
