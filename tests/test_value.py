"""
Test building values
"""

import enum
from collections import namedtuple
from dataclasses import dataclass
from typing import List, Optional

import pytest

from urlform import (
    Boolean,
    Bytes,
    Char,
    CustomError,
    Float,
    Map,
    Newtype,
    NamedVariant,
    Option,
    Record,
    Sequence,
    SignedInteger,
    String,
    TupleStruct,
    TupleValue,
    UnsignedInteger,
    to_value,
)


class Side(enum.Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass
class Close:
    price: float
    side: Side


@dataclass
class Order:
    ordertype: str
    volume: float
    tags: List[str]
    close: Optional[Close] = None


def test_scalars() -> None:
    assert to_value(None) == Option()
    assert to_value(True) == Boolean(True)
    assert to_value(1) == SignedInteger(1, 64)
    assert to_value(1.5) == Float(1.5)
    assert to_value("x") == String("x")
    assert to_value(b"x") == Bytes(b"x")
    assert to_value(bytearray(b"x")) == Bytes(b"x")
    assert to_value(Side.BUY) == NamedVariant("BUY", "Side")


def test_values_pass_through() -> None:
    value = Char("x")
    assert to_value(value) is value


def test_integer_widths() -> None:
    assert to_value(-(1 << 63)) == SignedInteger(-(1 << 63), 64)
    assert to_value(1 << 63) == UnsignedInteger(1 << 63, 64)
    assert to_value(1 << 64) == SignedInteger(1 << 64, 128)
    assert to_value((1 << 128) - 1) == UnsignedInteger((1 << 128) - 1, 128)
    with pytest.raises(CustomError):
        to_value(1 << 128)


def test_containers() -> None:
    assert to_value([1, "a"]) == Sequence((SignedInteger(1), String("a")))
    assert to_value((1, 2)) == TupleValue((SignedInteger(1), SignedInteger(2)))
    Point = namedtuple("Point", "x y")
    assert to_value(Point(1, 2)) == TupleStruct(
        (SignedInteger(1), SignedInteger(2)), "Point"
    )
    assert to_value({"a": 1}) == Map(((String("a"), SignedInteger(1)),))


def test_dataclass() -> None:
    order = Order("limit", 1234.5, ["a"])
    assert to_value(order) == Record(
        (
            ("ordertype", String("limit")),
            ("volume", Float(1234.5)),
            ("tags", Sequence((String("a"),))),
            ("close", Option()),
        ),
        name="Order",
    )
    nested = to_value(Order("limit", 1.0, [], Close(12.56, Side.SELL)))
    assert dict(nested.fields)["close"].kind == "struct"


def test_unhandled_type() -> None:
    with pytest.raises(TypeError):
        to_value({1, 2})


def test_record_helpers() -> None:
    assert Record.of(a=1, b=None) == Record(
        (("a", SignedInteger(1)), ("b", Option()))
    )
    assert Record.from_mapping({"a": "x"}, name="Params").name == "Params"
    record = Record([("a", String("x"))])
    assert record.fields == (("a", String("x")),)
    with pytest.raises(TypeError):
        Record(((1, String("x")),))


@pytest.mark.parametrize(
    "build",
    [
        lambda: SignedInteger(128, 8),
        lambda: SignedInteger(-129, 8),
        lambda: UnsignedInteger(-1, 64),
        lambda: UnsignedInteger(256, 8),
        lambda: SignedInteger(1, 24),
        lambda: Float(1.0, 16),
        lambda: Float(1e300, 32),
        lambda: Char("ab"),
        lambda: Char(""),
    ],
)
def test_invalid_construction(build) -> None:
    with pytest.raises(ValueError):
        build()


def test_single_precision_rounding() -> None:
    assert Float(0.1, 32).value == 0.10000000149011612
    assert Float(float("inf"), 32).value == float("inf")
    assert Float(127, 32).value == 127.0


@pytest.mark.parametrize(
    "build",
    [
        lambda: Record((("a", SignedInteger(1)), ("b", 2))),
        lambda: Sequence((String("a"), "b")),
        lambda: Option(2),
        lambda: Newtype([1]),
        lambda: Map(((String("a"), 1),)),
        lambda: TupleValue((None,)),
    ],
)
def test_members_must_be_values(build) -> None:
    with pytest.raises(TypeError):
        build()
