"""
Utilities to inspect type annotations of mutator parameters.
"""

from __future__ import annotations

from types import EllipsisType, GenericAlias, NoneType, UnionType
from typing import (
    Annotated,
    Any,
    Literal,
    TypeAliasType,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
)

from ..typedefs import ARRAY_TYPES
from .utils import safe_issubclass

__all__ = [
    "ANY",
    "Annotation",
    "unwrap_alias",
    "split_annotated",
    "normalize_annotation",
    "get_concrete_type",
]


class Annotation:
    """
    Representation of an annotation with interfaces to determine whether a value is
    directly assignable to it and how arrays nest.

    Unwraps `TypeAlias` and `Annotated` if applicable.
    """

    raw: Any
    """
    Original annotation after stripping `Annotated[]` and aliases. May be a generic
    type.
    """

    origin: Any
    """
    Origin, non-`None` if annotation is a generic type.
    """

    args: tuple[Any, ...]
    """
    Generic type parameters.
    """

    arg_annotations: tuple[Annotation, ...]
    """
    Annotation info for generic type parameters, empty for `Literal[]`.
    """

    concrete_type: type
    """
    Concrete (non-generic) type, determined based on annotation:

    - `Any` or `Literal`: `object`
    - `None`: `NoneType`
    - `Union`: `UnionType`
    - Generic type: `get_origin(annotation)`
    - Otherwise: annotation itself, ensuring it's a type
    """

    def __init__(self, annotation: Any, /):
        raw = normalize_annotation(annotation)
        self.raw = raw
        self.origin = get_origin(raw)
        self.args = get_args(raw)
        self.arg_annotations = (
            tuple(Annotation(a) for a in self.args if a is not ...)
            if self.origin is not Literal
            else ()
        )
        self.concrete_type = get_concrete_type(raw)

    def __repr__(self) -> str:
        return f"Annotation({self.raw})"

    @classmethod
    def _normalize(cls, obj: Annotation | Any) -> Annotation:
        return obj if isinstance(obj, Annotation) else Annotation(obj)

    @property
    def is_any(self) -> bool:
        return self.raw is Any

    @property
    def is_union(self) -> bool:
        return self.concrete_type is UnionType

    @property
    def is_array(self) -> bool:
        """
        Whether this is an array annotation: `list[T]` or `tuple[T, ...]`, or a
        bare `list`/`tuple`.
        """
        if self.is_union or not safe_issubclass(self.concrete_type, ARRAY_TYPES):
            return False
        if safe_issubclass(self.concrete_type, tuple) and self.args:
            # only variadic tuples are arrays
            return len(self.args) == 2 and self.args[1] is ...
        return True

    @property
    def component(self) -> Annotation:
        """
        Annotation of array elements, `Any` if not parameterized.
        """
        assert self.is_array, f"Not an array annotation: {self.raw}"
        return self.arg_annotations[0] if self.arg_annotations else ANY

    def unbox(self) -> Annotation:
        """
        Strip `None` from an optional annotation, e.g. `int | None -> int`; other
        annotations are returned as-is.
        """
        if not self.is_union:
            return self
        members = tuple(a for a in self.arg_annotations if a.raw is not NoneType)
        if len(members) == len(self.arg_annotations):
            return self
        if len(members) == 1:
            return members[0]
        return Annotation(Union[tuple(a.raw for a in members)])

    def check_instance(self, obj: Any, /, *, recurse: bool = True) -> bool:
        """
        Check if object is directly assignable to this annotation; roughly
        equivalent to `isinstance(obj, annotation)`.

        Examples:

        - `Annotation(Any).check_instance(1)` returns `True`
        - `Annotation(list[int]).check_instance([1, 2, 3])` returns `True`
        - `Annotation(list[int]).check_instance([1, 2, "3"])` returns `False`
        """
        if self.is_any:
            return True

        if self.origin is Literal:
            return any(obj == value for value in self.args)

        if self.is_union:
            return any(
                a.check_instance(obj, recurse=recurse) for a in self.arg_annotations
            )

        if not isinstance(obj, self.concrete_type):
            return False

        if recurse and self.is_array and self.arg_annotations:
            component = self.component
            return all(component.check_instance(o) for o in obj)

        return True


def unwrap_alias(annotation: Any, /) -> Any:
    """
    If annotation is a `TypeAlias`, extract the corresponding definition.
    """
    if isinstance(annotation, TypeAliasType):
        return annotation.__value__
    elif isinstance(annotation, GenericAlias):
        origin = get_origin(annotation)
        if isinstance(origin, TypeAliasType):
            return origin.__value__
    return annotation


def split_annotated(annotation: Any, /) -> tuple[Any, tuple[Any, ...]]:
    """
    If annotation is an `Annotated`, split it into the wrapped annotation and extras.
    """
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        assert len(args)
        return args[0], tuple(args[1:])
    return annotation, ()


def normalize_annotation(annotation: Any, /) -> Any:
    """
    Unwrap aliases and `Annotated`, discarding extras.
    """
    annotation_ = unwrap_alias(annotation)
    if get_origin(annotation_) is Annotated:
        annotation_, _ = split_annotated(annotation_)
        annotation_ = unwrap_alias(annotation_)
    return annotation_


def get_concrete_type(annotation: Any, /) -> type:
    """
    Get concrete type of parameterized annotation, or `object` if the annotation is
    a `Literal` or `Any`.
    """
    annotation_ = normalize_annotation(annotation)
    concrete_type = get_origin(annotation_) or annotation_

    if concrete_type is Literal or concrete_type is Any:
        return object

    if isinstance(concrete_type, TypeVar):
        concrete_type = concrete_type.__bound__ or object

    # convert singletons to respective type so isinstance() works as expected
    singleton_map = {None: NoneType, Ellipsis: EllipsisType, Union: UnionType}
    concrete_type = singleton_map.get(concrete_type, concrete_type)

    assert isinstance(
        concrete_type, type
    ), f"Not a type: '{concrete_type}' (from annotation '{annotation}')"

    return cast(type, concrete_type)


ANY = Annotation(Any)
"""
Annotation encapsulating `Any`.
"""
