"""
Process-wide memoization of introspected bean metadata.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from functools import cache
from typing import Any, get_type_hints

from .exceptions import ConstructionError
from .inspecting.annotations import ANY, Annotation
from .inspecting.members import (
    AccessorInfo,
    MutatorInfo,
    get_mutator_annotation,
    is_accessor_candidate,
    is_mutator_candidate,
    iter_public_functions,
)
from .naming import BEAN_CONVENTION, NamingConvention

__all__ = [
    "IntrospectionRegistry",
    "get_default_registry",
]

logger = logging.getLogger(__name__)


class IntrospectionRegistry:
    """
    Caches accessors, mutators and constructors per type.

    Caches are append-only and never evicted. Lookups are safe to perform from
    multiple threads: concurrent first lookups of the same type may both compute
    the entry, which is harmless as entries only depend on the type.
    """

    naming: NamingConvention
    """
    Naming convention used to recognize accessors and synthesize mutator names.
    """

    __accessors: dict[type, tuple[AccessorInfo, ...]]
    __mutators: dict[type, dict[str, MutatorInfo | None]]
    __constructors: dict[type, Callable[[], Any] | str]
    __single_arg_constructors: dict[type, Annotation | None]

    def __init__(self, naming: NamingConvention | None = None):
        self.naming = naming or BEAN_CONVENTION
        self.__accessors = {}
        self.__mutators = {}
        self.__constructors = {}
        self.__single_arg_constructors = {}

    def __repr__(self) -> str:
        return (
            f"IntrospectionRegistry(naming={self.naming}, "
            f"types={len(self.__accessors)})"
        )

    def accessors(self, cls: type, /) -> tuple[AccessorInfo, ...]:
        """
        Get the eligible accessors of a type in discovery order.
        """
        if (accessors := self.__accessors.get(cls)) is not None:
            return accessors

        accessors = tuple(
            AccessorInfo(name, self.naming.propertize(name), func)
            for name, func in iter_public_functions(cls)
            if self.naming.is_eligible(name) and is_accessor_candidate(func)
        )
        logger.debug(
            "Discovered %d accessor(s) on %s: %s",
            len(accessors),
            cls.__qualname__,
            [a.name for a in accessors],
        )
        self.__accessors[cls] = accessors
        return accessors

    def mutator(self, cls: type, property_name: str, /) -> MutatorInfo | None:
        """
        Get the single-argument mutator for a property name as found in JSON, or
        `None` if the type has no such mutator.
        """
        name = self.naming.mutator_name(property_name)

        table = self.__mutators.get(cls)
        if table is None:
            table = self.__mutators.setdefault(cls, {})

        if name in table:
            return table[name]

        mutator: MutatorInfo | None = None
        for func_name, func in iter_public_functions(cls):
            if func_name == name and is_mutator_candidate(func):
                mutator = MutatorInfo(name, func, get_mutator_annotation(func))
                break

        table[name] = mutator
        return mutator

    def is_bean(self, cls: type, /) -> bool:
        """
        Whether the type has a usable zero-argument constructor.
        """
        return callable(self.__lookup_constructor(cls))

    def default_constructor(self, cls: type, /) -> Callable[[], Any]:
        """
        Get the zero-argument constructor of a type.

        :raises ConstructionError: If the type has no usable zero-argument constructor
        """
        constructor = self.__lookup_constructor(cls)
        if isinstance(constructor, str):
            raise ConstructionError(cls, constructor)
        return constructor

    def construct(self, cls: type, /) -> Any:
        """
        Create an instance of the type via its zero-argument constructor.

        :raises ConstructionError: If there is no such constructor or it raised
        """
        constructor = self.default_constructor(cls)
        try:
            return constructor()
        except Exception as e:
            raise ConstructionError(cls, f"constructor raised {e!r}") from e

    def single_arg_constructor(self, cls: type, /) -> Annotation | None:
        """
        Get the parameter annotation of a constructor taking exactly one argument, or
        `None` if the type can't be constructed from a single argument.
        """
        if cls in self.__single_arg_constructors:
            return self.__single_arg_constructors[cls]

        annotation = _find_single_arg_constructor(cls)
        self.__single_arg_constructors[cls] = annotation
        return annotation

    def __lookup_constructor(self, cls: type) -> Callable[[], Any] | str:
        if (constructor := self.__constructors.get(cls)) is not None:
            return constructor

        constructor = _find_default_constructor(cls)
        if isinstance(constructor, str):
            logger.debug("%s is not a bean: %s", cls.__qualname__, constructor)
        self.__constructors[cls] = constructor
        return constructor


@cache
def get_default_registry() -> IntrospectionRegistry:
    """
    Get the process-wide registry used when none is passed explicitly.
    """
    return IntrospectionRegistry()


def _find_default_constructor(cls: type) -> Callable[[], Any] | str:
    """
    Get the type itself if it can be called without arguments, otherwise the reason
    it can't.
    """
    if not isinstance(cls, type):
        return "not a class"
    if cls.__module__ == "builtins":
        return "builtin type"
    if inspect.isabstract(cls):
        return "abstract class"

    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return "constructor signature not inspectable"

    try:
        sig.bind()
    except TypeError:
        return "no zero-argument constructor"

    return cls


def _find_single_arg_constructor(cls: type) -> Annotation | None:
    if not isinstance(cls, type) or inspect.isabstract(cls):
        return None

    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return None

    params = list(sig.parameters.values())
    if not params:
        return None

    try:
        sig.bind(None)
    except TypeError:
        return None

    # all other parameters must be optional
    first = params[0]
    if first.kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
        inspect.Parameter.VAR_POSITIONAL,
    ):
        return None

    try:
        type_hints = get_type_hints(cls.__init__)
    except (NameError, AttributeError, TypeError):
        type_hints = {}

    if first.name in type_hints and first.kind is not inspect.Parameter.VAR_POSITIONAL:
        return Annotation(type_hints[first.name])
    return ANY
