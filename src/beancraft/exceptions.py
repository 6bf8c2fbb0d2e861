"""
Exception classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generator

__all__ = [
    "BeanError",
    "ConstructionError",
    "JsonFormatError",
    "InvocationError",
    "CoercionError",
    "MarshallError",
    "DropDetail",
    "StrictUnmarshallError",
    "format_path",
]


def format_path(path: tuple[str | int, ...], /) -> str:
    """
    Format a key path as Pydantic-style dot notation.

    Examples:

    - `("WithInt", "Primitive") -> "WithInt.Primitive"`
    - `("IntegerArray", 1) -> "IntegerArray[1]"`
    - `() -> "<root>"`
    """
    if not path:
        return "<root>"
    parts: list[str] = []
    for i, segment in enumerate(path):
        if isinstance(segment, int):
            # index: append as [n]
            parts.append(f"[{segment}]")
        else:
            # key: prefix with dot
            prefix = "." if i != 0 else ""
            parts.append(f"{prefix}{segment}")
    return "".join(parts)


class BeanError(Exception):
    """
    Base class for errors raised while mapping beans to/from JSON.
    """


class ConstructionError(BeanError):
    """
    Target type has no accessible zero-argument constructor, or invoking it raised.
    """

    cls: type

    def __init__(self, cls: type, reason: str):
        self.cls = cls
        super().__init__(f"Cannot construct {cls.__qualname__}: {reason}")


class JsonFormatError(BeanError):
    """
    Stream is empty or malformed, or a token was requested that the stream cannot
    produce.
    """


class InvocationError(BeanError):
    """
    An accessor or mutator raised during invocation; the original exception is
    chained.
    """

    member: str

    def __init__(self, cls: type, member: str, exc: Exception):
        self.member = member
        super().__init__(
            f"{cls.__qualname__}.{member}() raised {type(exc).__name__}: {exc}"
        )


class CoercionError(BeanError, ValueError):
    """
    Text could not be parsed as the numeric type a mutator requires.
    """


class MarshallError(BeanError):
    """
    Value could not be marshalled in strict mode.
    """


@dataclass
class DropDetail:
    """
    Details about a single key or value which was skipped during unmarshalling.
    """

    path: tuple[str | int, ...]
    """
    Location of the dropped value, relative to the root object.
    """

    value: Any
    """
    The value which was dropped, or `None` if it was skipped unread.
    """

    reason: str
    """
    Why the value was dropped.
    """

    @property
    def path_str(self) -> str:
        return format_path(self.path)

    def format_error(self) -> Generator[str, None, None]:
        """
        Format this drop for display.
        """
        if self.value is None:
            yield f"{self.path_str}: {self.reason}"
        else:
            yield f"{self.path_str}: {self.value!r}: {self.reason}"


class StrictUnmarshallError(BeanError):
    """
    Aggregated drops encountered during a strict unmarshall.
    """

    drops: list[DropDetail]

    def __init__(self, drops: list[DropDetail]):
        assert drops
        self.drops = drops
        super().__init__(self.__format_drops())

    def __format_drops(self) -> str:
        plural = "s" if len(self.drops) > 1 else ""
        lines = [f"Value{plural} dropped during strict unmarshalling:"]
        for drop in self.drops:
            lines += list(drop.format_error())
        return "\n".join(lines)
