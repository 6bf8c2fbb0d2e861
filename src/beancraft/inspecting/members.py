"""
Utilities to enumerate accessor and mutator members of bean classes.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Generator
from dataclasses import dataclass
from inspect import Parameter
from types import FunctionType, NoneType
from typing import Any, get_type_hints

from ..exceptions import InvocationError
from .annotations import ANY, Annotation

__all__ = [
    "AccessorInfo",
    "MutatorInfo",
    "iter_public_functions",
    "is_accessor_candidate",
    "is_mutator_candidate",
    "get_mutator_annotation",
]

_POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class AccessorInfo:
    """
    Encapsulates an eligible accessor of a bean class.
    """

    name: str
    """
    Member name, e.g. `getFoo`.
    """

    property_name: str
    """
    Property name derived from the member name, e.g. `Foo`.
    """

    func: Callable[[Any], Any]
    """
    Unbound function.
    """

    def invoke(self, obj: Any, /) -> Any:
        try:
            return self.func(obj)
        except Exception as e:
            raise InvocationError(type(obj), self.name, e) from e


@dataclass(frozen=True)
class MutatorInfo:
    """
    Encapsulates a single-argument mutator of a bean class.
    """

    name: str
    """
    Member name, e.g. `setFoo`.
    """

    func: Callable[[Any, Any], Any]
    """
    Unbound function.
    """

    annotation: Annotation
    """
    Declared parameter type, `Any` if the parameter is not annotated.
    """

    def invoke(self, obj: Any, value: Any, /):
        try:
            self.func(obj, value)
        except Exception as e:
            raise InvocationError(type(obj), self.name, e) from e


def iter_public_functions(
    cls: type, /
) -> Generator[tuple[str, FunctionType], None, None]:
    """
    Yield public plain functions of a class including inherited ones, base classes
    first and each class in declaration order. Overridden functions keep the
    position of the first declaration but resolve to the most derived definition.

    Builtin bases like `object` contribute nothing.
    """
    names: dict[str, None] = {}
    for base in reversed(cls.__mro__):
        if base.__module__ == "builtins":
            continue
        for name in vars(base):
            names.setdefault(name, None)

    for name in names:
        if name.startswith("_"):
            continue
        member = inspect.getattr_static(cls, name)
        # staticmethod, classmethod and property objects are not plain functions
        if isinstance(member, FunctionType):
            yield name, member


def is_accessor_candidate(func: FunctionType, /) -> bool:
    """
    Whether the function takes no arguments besides `self` and is not annotated as
    returning `None`.
    """
    params = _get_params(func)
    if params is None or len(params) != 1 or params[0].kind not in _POSITIONAL:
        return False
    return not _returns_none(func)


def is_mutator_candidate(func: FunctionType, /) -> bool:
    """
    Whether the function takes exactly one positional argument besides `self`.
    """
    params = _get_params(func)
    if params is None or len(params) != 2:
        return False
    return all(p.kind in _POSITIONAL for p in params)


def get_mutator_annotation(func: FunctionType, /) -> Annotation:
    """
    Get the annotation of the mutator's parameter, resolving any stringized
    annotations.
    """
    params = _get_params(func)
    assert params is not None and len(params) == 2
    param_name = params[1].name

    try:
        type_hints = get_type_hints(func)
    except (NameError, AttributeError) as e:
        raise ValueError(
            f"Failed to resolve type hints for {func.__qualname__}: {e}. "
            "Ensure all types are imported or defined."
        ) from e

    if param_name not in type_hints:
        return ANY
    return Annotation(type_hints[param_name])


def _get_params(func: FunctionType) -> list[Parameter] | None:
    try:
        return list(inspect.signature(func).parameters.values())
    except (ValueError, TypeError):
        return None


def _returns_none(func: FunctionType) -> bool:
    annotation = func.__annotations__.get("return", Parameter.empty)
    return annotation is None or annotation is NoneType or annotation == "None"
