"""
Test marshalling beans to JSON.
"""

import io
from decimal import Decimal
from fractions import Fraction
from typing import Any

from pytest import fail, raises

from beancraft.exceptions import InvocationError, MarshallError
from beancraft.marshalling import MarshallParams, marshall, marshall_array
from beancraft.naming import SnakeCaseNamingConvention
from beancraft.registry import IntrospectionRegistry
from beancraft.streaming import JsonWriter
from beancraft.typedefs import Char


class RecordingSink:
    """
    Sink recording events as tuples.
    """

    def __init__(self):
        self.events: list[tuple[Any, ...]] = []

    def begin_object(self):
        self.events.append(("begin_object",))

    def end_object(self):
        self.events.append(("end_object",))

    def begin_array(self):
        self.events.append(("begin_array",))

    def end_array(self):
        self.events.append(("end_array",))

    def name(self, name: str, /):
        self.events.append(("name", name))

    def string_value(self, value: str, /):
        self.events.append(("string", value))

    def bool_value(self, value: bool, /):
        self.events.append(("bool", value))

    def number_value(self, value: Any, /):
        self.events.append(("number", value))

    def null_value(self):
        self.events.append(("null",))


class NotABean:
    def __init__(self, token: object):
        self.token = token


class GoodPrimitiveGetter:
    def getFoo(self) -> str:
        return "foo"


class BadGetters:
    def get(self) -> str:
        fail("called get()")

    def getBlam(self, glum: str) -> str:
        fail("called method with parameters")

    def getVrum(self) -> None:
        fail("called void method")

    def _getGrumps(self) -> str:
        fail("called non-public getter")

    def getClass(self) -> type:
        fail("called self-descriptor")

    def fetchFoo(self) -> str:
        fail("called method without accessor prefix")

    @staticmethod
    def getStatic() -> str:
        fail("called static method")


class WithNotABean:
    def getNotABean(self) -> NotABean:
        return NotABean(1)


class WithNull:
    def getNothing(self) -> str | None:
        return None


class WithBean:
    def getPrimitives(self) -> GoodPrimitiveGetter:
        return GoodPrimitiveGetter()


class WithArray:
    def getIntArray(self) -> list[int]:
        return [1, 2, 3]


class WithMultiDimensionalArray:
    def getMatrix(self) -> list[list[int]]:
        return [[1, 2, 3], [4, 5, 6]]


class WithBeanArray:
    def getBeans(self) -> tuple[GoodPrimitiveGetter, ...]:
        return (GoodPrimitiveGetter(), GoodPrimitiveGetter())


class WithMixedArray:
    def getMixed(self) -> list[object]:
        return [1, "a", None, True, NotABean(1), [Char("c")]]


class WithPrimitiveBoolean:
    def isBool(self) -> bool:
        return True


class WithPrimitiveGetBoolean:
    def getBool(self) -> bool:
        return True


class Derived(WithPrimitiveGetBoolean):
    pass


class WithBothPrefixes:
    def getFlag(self) -> bool:
        return True

    def isFlag(self) -> bool:
        return False


class WithNumbers:
    def getCount(self) -> int:
        return 3

    def getRatio(self) -> float:
        return 0.5

    def getPrice(self) -> Decimal:
        return Decimal("1.25")

    def getInitial(self) -> Char:
        return Char("x")


class WithComplex:
    def getZ(self) -> complex:
        return 1 + 2j


class WithFractions:
    def getQuarter(self) -> Fraction:
        return Fraction(1, 4)

    def getThird(self) -> Fraction:
        return Fraction(1, 3)


class WithCollections:
    def getMapping(self) -> dict[str, int]:
        return {"a": 1}


class WithDynamicValue:
    def __init__(self, value: object = None):
        self._value = value

    def getValue(self) -> object:
        return self._value


class RaisingGetter:
    def getBroken(self) -> int:
        raise KeyError("broken")


class OrderBase:
    def getB(self) -> int:
        return 1

    def getA(self) -> int:
        return 2


class OrderDerived(OrderBase):
    def getC(self) -> int:
        return 3

    def getB(self) -> int:
        return 4


class SnakeBean:
    def get_name(self) -> str:
        return "snake"

    def is_active(self) -> bool:
        return True

    def getIgnored(self) -> str:
        fail("called accessor of another convention")


def _events(obj: Any) -> list[tuple[Any, ...]]:
    sink = RecordingSink()
    marshall(sink, obj, registry=IntrospectionRegistry())
    return sink.events


def _dumps(
    obj: Any,
    *,
    params: MarshallParams | None = None,
    registry: IntrospectionRegistry | None = None,
) -> str:
    out = io.StringIO()
    marshall(
        JsonWriter(out),
        obj,
        registry=registry or IntrospectionRegistry(),
        params=params,
    )
    return out.getvalue()


def test_good_getter():
    """
    Test that a string getter is emitted as a string property.
    """
    assert _events(GoodPrimitiveGetter()) == [
        ("begin_object",),
        ("name", "Foo"),
        ("string", "foo"),
        ("end_object",),
    ]


def test_bad_getters_not_called():
    """
    Test that ineligible members are never invoked.
    """
    assert _dumps(BadGetters()) == "{}"


def test_empty_bean():
    """
    Test that a bean without accessors is an empty object.
    """
    assert _events(object()) == [("begin_object",), ("end_object",)]


def test_null_root():
    """
    Test that marshalling `None` writes nothing.
    """
    assert _events(None) == []
    assert _dumps(None) == ""


def test_not_a_bean():
    """
    Test that a value without zero-argument constructor is emitted as null.
    """
    assert _dumps(WithNotABean()) == '{"NotABean":null}'


def test_not_a_bean_strict():
    """
    Test that a value without zero-argument constructor is rejected when strict.
    """
    with raises(MarshallError, match="NotABean"):
        _dumps(WithNotABean(), params=MarshallParams(strict=True))


def test_null_property():
    """
    Test that a `None` value is emitted as null.
    """
    assert _dumps(WithNull()) == '{"Nothing":null}'


def test_nested_bean():
    """
    Test that a bean value is emitted as a nested object.
    """
    assert _dumps(WithBean()) == '{"Primitives":{"Foo":"foo"}}'


def test_arrays():
    """
    Test single-dimensional, multi-dimensional and bean arrays.
    """
    assert _dumps(WithArray()) == '{"IntArray":[1,2,3]}'
    assert _dumps(WithMultiDimensionalArray()) == '{"Matrix":[[1,2,3],[4,5,6]]}'
    assert _dumps(WithBeanArray()) == '{"Beans":[{"Foo":"foo"},{"Foo":"foo"}]}'


def test_array_elements_classified_individually():
    """
    Test that each array element is classified by its own runtime type.
    """
    assert _dumps(WithMixedArray()) == '{"Mixed":[1,"a",null,true,null,["c"]]}'


def test_marshall_array():
    """
    Test marshalling a top-level array.
    """
    sink = RecordingSink()
    marshall_array(sink, [[1], []], registry=IntrospectionRegistry())
    assert sink.events == [
        ("begin_array",),
        ("begin_array",),
        ("number", 1),
        ("end_array",),
        ("begin_array",),
        ("end_array",),
        ("end_array",),
    ]


def test_booleans():
    """
    Test boolean accessors with either prefix.
    """
    assert _dumps(WithPrimitiveBoolean()) == '{"Bool":true}'
    assert _dumps(WithPrimitiveGetBoolean()) == '{"Bool":true}'


def test_inherited():
    """
    Test that inherited accessors are used.
    """
    assert _dumps(Derived()) == '{"Bool":true}'


def test_both_prefixes_visited():
    """
    Test that accessors normalizing to the same property are each visited.
    """
    assert _events(WithBothPrefixes()) == [
        ("begin_object",),
        ("name", "Flag"),
        ("bool", True),
        ("name", "Flag"),
        ("bool", False),
        ("end_object",),
    ]


def test_numbers_and_characters():
    """
    Test numeric kinds and characters.
    """
    assert (
        _dumps(WithNumbers())
        == '{"Count":3,"Ratio":0.5,"Price":1.25,"Initial":"x"}'
    )


def test_complex_unsupported():
    """
    Test that a complex number is emitted as null, or rejected when strict.
    """
    assert _dumps(WithComplex()) == '{"Z":null}'
    with raises(MarshallError, match="complex"):
        _dumps(WithComplex(), params=MarshallParams(strict=True))


def test_fractions_written_as_float():
    """
    Test that fractions are written as the nearest float.
    """
    assert _dumps(WithFractions()) == '{"Quarter":0.25,"Third":' + repr(1 / 3) + "}"


def test_collections_unsupported():
    """
    Test that collections other than arrays are emitted as null.
    """
    assert _dumps(WithCollections()) == '{"Mapping":null}'


def test_runtime_type_dispatch():
    """
    Test that the value's runtime type rather than declared type is used.
    """
    assert _dumps(WithDynamicValue("a")) == '{"Value":"a"}'
    assert _dumps(WithDynamicValue(1)) == '{"Value":1}'
    assert _dumps(WithDynamicValue(GoodPrimitiveGetter())) == '{"Value":{"Foo":"foo"}}'
    assert (
        _dumps(WithDynamicValue(WithDynamicValue(None)))
        == '{"Value":{"Value":null}}'
    )


def test_raising_getter():
    """
    Test that an exception raised by an accessor is propagated.
    """
    with raises(InvocationError, match="getBroken") as exc_info:
        _dumps(RaisingGetter())
    assert isinstance(exc_info.value.__cause__, KeyError)


def test_order():
    """
    Test that properties are emitted base class first in declaration order.
    """
    assert _dumps(OrderDerived()) == '{"B":4,"A":2,"C":3}'


def test_snake_case():
    """
    Test marshalling with Pythonic naming convention.
    """
    registry = IntrospectionRegistry(SnakeCaseNamingConvention())
    assert _dumps(SnakeBean(), registry=registry) == '{"name":"snake","active":true}'
