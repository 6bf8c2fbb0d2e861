"""
Coercion of values read from JSON into the types mutators require.
"""

from __future__ import annotations

import logging
from typing import Any

from .exceptions import CoercionError
from .inspecting.annotations import Annotation
from .inspecting.utils import safe_issubclass
from .registry import IntrospectionRegistry
from .typedefs import NUMERIC_PARSERS, Char

__all__ = [
    "Dropped",
    "convert_to_object",
]

logger = logging.getLogger(__name__)


class Dropped:
    """
    Result of a conversion which yielded nothing usable.
    """

    reason: str

    def __init__(self, reason: str):
        self.reason = reason

    def __repr__(self) -> str:
        return f"Dropped({self.reason!r})"


def convert_to_object(
    value: Any, annotation: Annotation, registry: IntrospectionRegistry, /
) -> Any | Dropped:
    """
    Coerce a value read from JSON (string, bool, bean or array) to the required
    type.

    - Optional annotations are unboxed first; other unions are attempted member by
    member
    - Assignable values are returned unchanged
    - `Char` takes the first character of the value's string form
    - Strings are parsed to the standard numeric kinds by their canonical parser
    - Otherwise a constructor taking the value as its only argument is used

    :raises CoercionError: If a string is not valid text for a required numeric type
    :return: Converted value, or `Dropped` if no conversion applies
    """
    required = annotation.unbox()

    if required.is_union:
        return _convert_to_union(value, required, registry)

    if required.check_instance(value):
        return value

    target_type = required.concrete_type

    if safe_issubclass(target_type, Char):
        text = str(value)
        if not text:
            return Dropped("empty string for character")
        return target_type(text)

    if isinstance(value, str) and (parser := NUMERIC_PARSERS.get(target_type)):
        try:
            return parser(value)
        except (ValueError, ArithmeticError) as e:
            raise CoercionError(
                f"Invalid text for {target_type.__name__}: {value!r}"
            ) from e

    param = registry.single_arg_constructor(target_type)
    if param is None:
        return Dropped(f"no conversion to {target_type.__qualname__}")
    if not param.check_instance(value):
        return Dropped(
            f"{target_type.__qualname__} can't be constructed from "
            f"{type(value).__qualname__}"
        )

    try:
        return target_type(value)
    except Exception as e:
        logger.debug("Constructing %s from %r failed: %r", target_type, value, e)
        return Dropped(f"{target_type.__qualname__}({value!r}) raised {e!r}")


def _convert_to_union(
    value: Any, annotation: Annotation, registry: IntrospectionRegistry
) -> Any | Dropped:
    """
    Attempt each member of the union in order; the first usable result wins.
    """
    if annotation.check_instance(value):
        return value

    reasons: list[str] = []
    error: CoercionError | None = None
    for member in annotation.arg_annotations:
        try:
            converted = convert_to_object(value, member, registry)
        except CoercionError as e:
            error = error or e
            continue
        if not isinstance(converted, Dropped):
            return converted
        reasons.append(converted.reason)

    if error is not None and not reasons:
        raise error
    return Dropped("; ".join(reasons) or str(error))
