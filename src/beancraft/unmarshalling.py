"""
Unmarshalling capability: reconstruct typed object graphs from JSON tokens.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .coercion import Dropped, convert_to_object
from .exceptions import (
    CoercionError,
    DropDetail,
    StrictUnmarshallError,
    format_path,
)
from .inspecting.annotations import Annotation
from .inspecting.utils import safe_issubclass
from .registry import IntrospectionRegistry, get_default_registry
from .streaming import JsonSource, TokenKind

__all__ = [
    "UnmarshallParams",
    "UnmarshallFrame",
    "Unmarshaller",
    "unmarshall",
    "unmarshall_array",
]

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class UnmarshallParams:
    """
    Unmarshalling params passed by user.
    """

    strict: bool = False
    """
    Whether to collect every skipped key and dropped value and raise
    `StrictUnmarshallError` once the top-level call completes.
    """

    on_drop: Callable[[DropDetail], Any] | None = None
    """
    Diagnostic hook invoked with each skipped key or dropped value.
    """


class UnmarshallFrame:
    """
    Internal recursion state per nesting level.
    """

    __path: tuple[str | int, ...]
    """
    Key path at this level in recursion.
    """

    __drops: list[DropDetail]
    """
    Shared list for collecting drops.
    """

    def __init__(
        self,
        *,
        path: tuple[str | int, ...] | None = None,
        drops: list[DropDetail] | None = None,
    ):
        self.__path = path or ()
        self.__drops = drops if drops is not None else []

    def __repr__(self) -> str:
        return f"UnmarshallFrame(path={self.path})"

    @property
    def path(self) -> tuple[str | int, ...]:
        return self.__path

    @property
    def drops(self) -> list[DropDetail]:
        """
        The shared drop list for this unmarshall invocation.
        """
        return self.__drops

    def child(self, segment: str | int, /) -> UnmarshallFrame:
        """
        Create the frame for a key or array index nested in this one.
        """
        return UnmarshallFrame(path=(*self.__path, segment), drops=self.__drops)


class Unmarshaller:
    """
    Creates beans via their zero-argument constructor and populates them via
    single-argument mutators named after the JSON keys.

    Keys without a mutator and values which can't be coerced are skipped silently
    unless `strict` is set.
    """

    registry: IntrospectionRegistry
    params: UnmarshallParams

    def __init__(
        self,
        *,
        registry: IntrospectionRegistry | None = None,
        params: UnmarshallParams | None = None,
    ):
        self.registry = registry or get_default_registry()
        self.params = params or UnmarshallParams()

    def __repr__(self) -> str:
        return f"Unmarshaller(registry={self.registry}, params={self.params})"

    def unmarshall[T](self, source: JsonSource, cls: type[T], /) -> T:
        """
        Read exactly one JSON object from the source and create an instance of
        `cls` from it. Anything following the object is left in the source.

        :raises JsonFormatError: If the source is empty or malformed
        :raises ConstructionError: If `cls` or a nested bean type has no usable \
        zero-argument constructor
        :raises CoercionError: If text can't be parsed as a required numeric type
        :raises StrictUnmarshallError: If strict and anything was dropped
        """
        frame = UnmarshallFrame()
        obj = self.__unmarshall_bean(source, cls, frame)
        self.__check_drops(frame)
        return obj

    def unmarshall_array[T](self, source: JsonSource, cls: type[T], /) -> list[T]:
        """
        Read a JSON array of objects, creating an instance of `cls` from each.

        The sequence ends at the first element which is not an object; remaining
        elements are skipped.
        """
        frame = UnmarshallFrame()
        beans: list[T] = []

        source.begin_array()
        while source.peek() is TokenKind.BEGIN_OBJECT:
            beans.append(self.__unmarshall_bean(source, cls, frame.child(len(beans))))

        index = len(beans)
        while source.has_next():
            source.skip_value()
            self.__drop(frame.child(index), None, "array element is not an object")
            index += 1
        source.end_array()

        self.__check_drops(frame)
        return beans

    def populate_array(
        self, source: JsonSource, annotation: Annotation | Any, /
    ) -> list | tuple | None:
        """
        Read a JSON array into an array of the given annotation, e.g.
        `list[list[int]]`. Returns `None` if the annotation is not an array.
        """
        frame = UnmarshallFrame()
        array = self.__populate_array(
            source, Annotation._normalize(annotation), frame
        )
        self.__check_drops(frame)
        return array

    def __unmarshall_bean[T](
        self, source: JsonSource, cls: type[T], frame: UnmarshallFrame
    ) -> T:
        source.begin_object()
        obj = self.registry.construct(cls)

        while source.has_next():
            key = source.next_name()
            key_frame = frame.child(key)

            mutator = self.registry.mutator(cls, key)
            if mutator is None:
                source.skip_value()
                self.__drop(
                    key_frame,
                    None,
                    f"no mutator {self.registry.naming.mutator_name(key)}() on "
                    f"{cls.__qualname__}",
                )
                continue

            value = self.__unmarshall_value(source, mutator.annotation, key_frame)
            if isinstance(value, Dropped):
                self.__drop(key_frame, None, value.reason)
                continue

            if not mutator.annotation.check_instance(value):
                value = self.__convert(value, mutator.annotation, key_frame)
                if isinstance(value, Dropped):
                    continue

            mutator.invoke(obj, value)

        source.end_object()
        return obj

    def __unmarshall_value(
        self, source: JsonSource, annotation: Annotation, frame: UnmarshallFrame
    ) -> Any | Dropped:
        """
        Read the next value, branching on the token rather than the expected type
        except for arrays and objects.
        """
        match source.peek():
            case TokenKind.STRING | TokenKind.NUMBER:
                return source.next_string()
            case TokenKind.BOOLEAN:
                return source.next_boolean()
            case TokenKind.BEGIN_ARRAY:
                required = annotation.unbox()
                if not required.is_array:
                    source.skip_value()
                    return Dropped(f"array can't be assigned to {required.raw}")
                array = self.__populate_array(source, required, frame)
                assert array is not None
                return array
            case TokenKind.BEGIN_OBJECT:
                bean_type = self.__bean_type(annotation)
                if bean_type is None:
                    source.skip_value()
                    return Dropped(f"object can't be assigned to {annotation.raw}")
                return self.__unmarshall_bean(source, bean_type, frame)
            case kind:
                source.skip_value()
                return Dropped(f"{kind.name.lower()} value")

    def __populate_array(
        self, source: JsonSource, annotation: Annotation, frame: UnmarshallFrame
    ) -> list | tuple | None:
        if not annotation.is_array:
            return None

        component = annotation.component
        nested = component.unbox()
        buffer: list[Any] = []

        source.begin_array()
        index = 0
        while source.has_next():
            element_frame = frame.child(index)
            index += 1

            if nested.is_array:
                if source.peek() is not TokenKind.BEGIN_ARRAY:
                    source.skip_value()
                    self.__drop(element_frame, None, "expected a nested array")
                    continue
                element = self.__populate_array(source, nested, element_frame)
                if element is not None:
                    buffer.append(element)
                continue

            value = self.__unmarshall_value(source, component, element_frame)
            if isinstance(value, Dropped):
                self.__drop(element_frame, None, value.reason)
                continue

            value = self.__convert(value, component, element_frame)
            if not isinstance(value, Dropped):
                buffer.append(value)
        source.end_array()

        array_type = annotation.concrete_type
        if safe_issubclass(array_type, tuple):
            return tuple(buffer)
        return array_type(buffer)

    def __convert(
        self, value: Any, annotation: Annotation, frame: UnmarshallFrame
    ) -> Any | Dropped:
        try:
            converted = convert_to_object(value, annotation, self.registry)
        except CoercionError as e:
            raise CoercionError(f"{format_path(frame.path)}: {e}") from e

        if isinstance(converted, Dropped):
            self.__drop(frame, value, converted.reason)
        return converted

    def __bean_type(self, annotation: Annotation) -> type | None:
        """
        Get the type to create for a nested object: the annotated type, or the first
        bean type of a union. Returns `None` if there is no type to create, i.e. the
        annotation is `Any` or a union without bean members.

        A concrete annotated type which is not a bean is returned as-is so that
        constructing it fails.
        """
        required = annotation.unbox()
        if required.is_any:
            return None
        if required.is_union:
            for member in required.arg_annotations:
                if self.registry.is_bean(member.concrete_type):
                    return member.concrete_type
            return None
        return required.concrete_type

    def __drop(self, frame: UnmarshallFrame, value: Any, reason: str):
        detail = DropDetail(frame.path, value, reason)
        logger.debug("Dropped %s: %s", detail.path_str, reason)
        if self.params.on_drop is not None:
            self.params.on_drop(detail)
        if self.params.strict:
            frame.drops.append(detail)

    def __check_drops(self, frame: UnmarshallFrame):
        if frame.drops:
            raise StrictUnmarshallError(frame.drops)


def unmarshall[T](
    source: JsonSource,
    cls: type[T],
    /,
    *,
    registry: IntrospectionRegistry | None = None,
    params: UnmarshallParams | None = None,
) -> T:
    """
    Read one JSON object from the source and create an instance of `cls` from it.

    :param source: Source of JSON tokens, positioned at the start of an object
    :param cls: Bean type to create
    :param registry: Registry of introspected metadata, process-wide if not passed
    :param params: Unmarshalling params
    """
    return Unmarshaller(registry=registry, params=params).unmarshall(source, cls)


def unmarshall_array[T](
    source: JsonSource,
    cls: type[T],
    /,
    *,
    registry: IntrospectionRegistry | None = None,
    params: UnmarshallParams | None = None,
) -> list[T]:
    """
    Read a JSON array of objects and create an instance of `cls` from each.
    """
    return Unmarshaller(registry=registry, params=params).unmarshall_array(
        source, cls
    )
