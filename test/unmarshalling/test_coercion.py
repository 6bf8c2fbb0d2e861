"""
Test coercion of values read from JSON.
"""

from decimal import Decimal
from fractions import Fraction

from pytest import raises

from beancraft.coercion import Dropped, convert_to_object
from beancraft.exceptions import CoercionError
from beancraft.inspecting.annotations import Annotation
from beancraft.registry import IntrospectionRegistry
from beancraft.typedefs import Char


class Money:
    def __init__(self, text: str):
        self.amount = Decimal(text)


class Picky:
    def __init__(self, text: str):
        if text != "ok":
            raise ValueError(text)
        self.text = text


class Loose:
    def __init__(self, value):
        self.value = value


class Nothing:
    pass


def _convert(value, annotation):
    return convert_to_object(value, Annotation(annotation), IntrospectionRegistry())


def test_assignable():
    """
    Test that assignable values are returned unchanged.
    """
    assert _convert("abc", str) == "abc"
    assert _convert(True, bool) is True

    values = [1, 2]
    assert _convert(values, list[int]) is values


def test_numeric():
    """
    Test parsing of standard numeric kinds.
    """
    assert _convert("42", int) == 42
    assert _convert("-7", int | None) == -7
    assert _convert("2.5", float) == 2.5
    assert _convert("0.10", Decimal) == Decimal("0.10")
    assert _convert("1/3", Fraction) == Fraction(1, 3)
    assert _convert("True", bool) is True
    assert _convert("yes", bool) is False


def test_numeric_invalid():
    """
    Test that invalid numeric text is an error rather than a drop.
    """
    with raises(CoercionError, match="int"):
        _convert("abc", int)
    with raises(CoercionError):
        _convert("1e5", int)
    with raises(CoercionError):
        _convert("x", Decimal)
    with raises(CoercionError):
        _convert("1/0", Fraction)


def test_char():
    """
    Test conversion to a single character.
    """
    c = _convert("xyz", Char)
    assert c == "x"
    assert isinstance(c, Char)

    assert _convert("7", Char | None) == "7"
    assert isinstance(_convert("", Char), Dropped)


def test_single_arg_constructor():
    """
    Test conversion via a constructor taking the value.
    """
    money = _convert("12.30", Money)
    assert isinstance(money, Money)
    assert money.amount == Decimal("12.30")

    loose = _convert(True, Loose)
    assert isinstance(loose, Loose)
    assert loose.value is True


def test_single_arg_constructor_mismatch():
    """
    Test that a value not matching the constructor's parameter is dropped.
    """
    assert isinstance(_convert(True, Money), Dropped)


def test_single_arg_constructor_raises():
    """
    Test that an exception raised by the constructor yields a drop.
    """
    result = _convert("bad", Picky)
    assert isinstance(result, Dropped)
    assert "ValueError" in result.reason

    assert _convert("ok", Picky).text == "ok"


def test_no_conversion():
    """
    Test that a type without applicable constructor yields a drop.
    """
    assert isinstance(_convert("abc", Nothing), Dropped)
    assert isinstance(_convert([1], int), Dropped)


def test_union():
    """
    Test that union members are attempted in order.
    """
    assert _convert("12", int | str) == "12"
    assert _convert("12", int | Money) == 12

    # int fails with an error, Money constructor raises
    assert isinstance(_convert("x1", int | Money), Dropped)

    with raises(CoercionError):
        _convert("x1", int | float)
