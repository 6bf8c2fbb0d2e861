"""
Naming conventions mapping accessor and mutator names to property names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

__all__ = [
    "NamingConvention",
    "BeanNamingConvention",
    "SnakeCaseNamingConvention",
    "BEAN_CONVENTION",
    "propertize",
    "mutator_name",
]


class NamingConvention(ABC):
    """
    Rules deciding which members are accessors and how their names relate to
    property names and mutator names.
    """

    excluded_names: frozenset[str] = frozenset()
    """
    Accessor-like names which are never treated as accessors.
    """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    @abstractmethod
    def is_accessor_name(self, name: str, /) -> bool:
        """
        Whether the name has an accessor prefix followed by at least one character.
        Exclusions are not considered.
        """

    @abstractmethod
    def propertize(self, name: str, /) -> str:
        """
        Strip the accessor prefix from an eligible accessor name.

        The caller is responsible for checking eligibility first.
        """

    @abstractmethod
    def mutator_name(self, property_name: str, /) -> str:
        """
        Synthesize the mutator name for a property name as found in JSON.
        """

    def is_eligible(self, name: str, /) -> bool:
        """
        Whether the name denotes an accessor, taking exclusions into account.
        """
        return self.is_accessor_name(name) and name not in self.excluded_names


class BeanNamingConvention(NamingConvention):
    """
    Classic bean convention: `getFoo`/`isFoo` are read as property `Foo` and
    property `foo` or `Foo` is written via `setFoo`.

    The case of the first letter of a property name is preserved as-is.
    """

    get_prefix = "get"
    is_prefix = "is"
    set_prefix = "set"

    excluded_names = frozenset({"getClass"})

    def is_accessor_name(self, name: str, /) -> bool:
        return (
            name.startswith(self.get_prefix) and len(name) > len(self.get_prefix)
        ) or (name.startswith(self.is_prefix) and len(name) > len(self.is_prefix))

    def propertize(self, name: str, /) -> str:
        if name.startswith(self.is_prefix) and len(name) > len(self.is_prefix):
            return name[len(self.is_prefix) :]
        return name[len(self.get_prefix) :]

    def mutator_name(self, property_name: str, /) -> str:
        return f"{self.set_prefix}{property_name[:1].upper()}{property_name[1:]}"


class SnakeCaseNamingConvention(BeanNamingConvention):
    """
    Pythonic convention: `get_foo`/`is_foo` are read as property `foo` and property
    `foo` is written via `set_foo`.
    """

    get_prefix = "get_"
    is_prefix = "is_"
    set_prefix = "set_"

    excluded_names = frozenset({"get_class"})

    def mutator_name(self, property_name: str, /) -> str:
        return f"{self.set_prefix}{property_name}"


BEAN_CONVENTION = BeanNamingConvention()
"""
Default naming convention.
"""


def propertize(name: str, /) -> str:
    """
    Convert an accessor name to its property name using the bean convention.

    Examples:

    - `"getFoo" -> "Foo"`
    - `"getfooBar" -> "fooBar"`
    - `"isFoo" -> "Foo"`
    """
    return BEAN_CONVENTION.propertize(name)


def mutator_name(property_name: str, /) -> str:
    """
    Synthesize the mutator name for a property using the bean convention, e.g.
    `"primitive" -> "setPrimitive"`.
    """
    return BEAN_CONVENTION.mutator_name(property_name)
