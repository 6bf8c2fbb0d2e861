"""
Basic definitions for bean mapping.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum, auto
from fractions import Fraction
from numbers import Real
from typing import Any, Self

__all__ = [
    "Char",
    "ValueCategory",
    "ARRAY_TYPES",
    "NUMERIC_PARSERS",
    "classify",
]


class Char(str):
    """
    A single character, the analogue of a `char` property.

    Constructing from a longer string keeps only the first character; an empty
    string is rejected.
    """

    def __new__(cls, value: Any = "\0") -> Self:
        text = str(value)
        if not text:
            raise ValueError("Char requires at least one character")
        return super().__new__(cls, text[0])


class ValueCategory(Enum):
    """
    Closed set of runtime categories a value is classified into when marshalling.
    """

    NULL = auto()
    STRING = auto()
    BOOLEAN = auto()
    NUMBER = auto()
    ARRAY = auto()
    BEAN = auto()
    UNSUPPORTED = auto()


ARRAY_TYPES: tuple[type, ...] = (list, tuple)
"""
Container types treated as arrays; other collections are not supported.
"""


def _parse_bool(text: str) -> bool:
    return text.strip().lower() == "true"


NUMERIC_PARSERS: dict[type, Any] = {
    int: int,
    float: float,
    Decimal: Decimal,
    Fraction: Fraction,
    bool: _parse_bool,
}
"""
Canonical text parsers for the standard numeric kinds.

A `Fraction` is written as the nearest float, so only fractions with an exact
binary representation (e.g. `1/4`) survive a round trip.
"""


def classify(value: Any, is_bean: Any) -> ValueCategory:
    """
    Classify a value by its runtime type.

    :param value: Value to classify
    :param is_bean: Predicate taking a type and returning whether it has a usable \
    zero-argument constructor
    """
    if value is None:
        return ValueCategory.NULL
    if isinstance(value, str):
        return ValueCategory.STRING
    # bool is a subclass of int, so must be checked first
    if isinstance(value, bool):
        return ValueCategory.BOOLEAN
    if isinstance(value, Real):
        return ValueCategory.NUMBER
    if isinstance(value, ARRAY_TYPES):
        return ValueCategory.ARRAY
    if is_bean(type(value)):
        return ValueCategory.BEAN
    return ValueCategory.UNSUPPORTED
