"""
Values that can be handed to the form encoder.

Every shape the encoder knows about is one of the frozen dataclasses below.
Shapes such as maps, tuples and variants carrying data can be built, but the
encoder rejects them. Use ``to_value`` to turn plain Python objects into a
value tree.
"""

import dataclasses
import enum
import struct
from collections.abc import Mapping
from typing import Any, ClassVar, Iterable, Optional, Tuple, Union

from .errors import CustomError

INTEGER_WIDTHS = (8, 16, 32, 64, 128)
FLOAT_WIDTHS = (32, 64)


def _check(val: Any) -> Any:
    if not isinstance(val, VALUE_TYPES):
        raise TypeError(f"not a form value: {val!r} ({type(val)})")
    return val


def _freeze(items: Iterable[Any]) -> Tuple[Any, ...]:
    return tuple(_check(item) for item in items)


def _freeze_fields(fields: Iterable[Tuple[str, Any]]) -> Tuple[Tuple[str, Any], ...]:
    frozen = []
    for name, val in fields:
        if not isinstance(name, str):
            raise TypeError(f"field name must be a str, not {type(name)}")
        frozen.append((name, _check(val)))
    return tuple(frozen)


@dataclasses.dataclass(frozen=True)
class Boolean:
    kind: ClassVar[str] = "bool"
    value: bool


@dataclasses.dataclass(frozen=True)
class SignedInteger:
    kind: ClassVar[str] = "signed integer"
    value: int
    width: int = 64

    def __post_init__(self):
        if self.width not in INTEGER_WIDTHS:
            raise ValueError(f"unsupported integer width: {self.width}")
        bound = 1 << (self.width - 1)
        if not -bound <= self.value < bound:
            raise ValueError(f"{self.value} does not fit in i{self.width}")


@dataclasses.dataclass(frozen=True)
class UnsignedInteger:
    kind: ClassVar[str] = "unsigned integer"
    value: int
    width: int = 64

    def __post_init__(self):
        if self.width not in INTEGER_WIDTHS:
            raise ValueError(f"unsupported integer width: {self.width}")
        if not 0 <= self.value < (1 << self.width):
            raise ValueError(f"{self.value} does not fit in u{self.width}")


@dataclasses.dataclass(frozen=True)
class Float:
    """
    A binary floating point number. Single precision values are rounded to
    single precision on construction.
    """

    kind: ClassVar[str] = "float"
    value: float
    width: int = 64

    def __post_init__(self):
        if self.width not in FLOAT_WIDTHS:
            raise ValueError(f"unsupported float width: {self.width}")
        value = float(self.value)
        if self.width == 32:
            try:
                value = struct.unpack("<f", struct.pack("<f", value))[0]
            except OverflowError:
                raise ValueError(f"{self.value} does not fit in f32") from None
        object.__setattr__(self, "value", value)


@dataclasses.dataclass(frozen=True)
class Char:
    kind: ClassVar[str] = "char"
    value: str

    def __post_init__(self):
        if len(self.value) != 1:
            raise ValueError(f"a char holds exactly one code point: {self.value!r}")


@dataclasses.dataclass(frozen=True)
class String:
    kind: ClassVar[str] = "str"
    value: str


@dataclasses.dataclass(frozen=True)
class Bytes:
    kind: ClassVar[str] = "bytes"
    value: bytes


@dataclasses.dataclass(frozen=True)
class Unit:
    kind: ClassVar[str] = "unit"


@dataclasses.dataclass(frozen=True)
class NamedUnit:
    kind: ClassVar[str] = "unit struct"
    name: str


@dataclasses.dataclass(frozen=True)
class NamedVariant:
    kind: ClassVar[str] = "unit variant"
    variant: str
    enum: str = ""


@dataclasses.dataclass(frozen=True)
class Newtype:
    kind: ClassVar[str] = "newtype struct"
    inner: "Value"
    name: str = ""

    def __post_init__(self):
        _check(self.inner)


@dataclasses.dataclass(frozen=True)
class Option:
    """An optional value. ``Option()`` is absent."""

    kind: ClassVar[str] = "option"
    inner: Optional["Value"] = None

    def __post_init__(self):
        if self.inner is not None:
            _check(self.inner)

    @property
    def is_absent(self) -> bool:
        return self.inner is None


@dataclasses.dataclass(frozen=True)
class Sequence:
    kind: ClassVar[str] = "sequence"
    elements: Tuple["Value", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", _freeze(self.elements))


@dataclasses.dataclass(frozen=True)
class Record:
    """
    A named, ordered collection of fields. Field order is the order the
    encoder writes pairs in.
    """

    kind: ClassVar[str] = "struct"
    fields: Tuple[Tuple[str, "Value"], ...] = ()
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "fields", _freeze_fields(self.fields))

    @classmethod
    def of(cls, **fields: Any) -> "Record":
        """
        Build a record from keyword arguments, converting each argument with
        ``to_value``.
        """
        return cls.from_mapping(fields)

    @classmethod
    def from_mapping(cls, mapping: Mapping, name: str = "") -> "Record":
        return Record(
            tuple((key, to_value(val)) for key, val in mapping.items()),
            name=name,
        )


@dataclasses.dataclass(frozen=True)
class Map:
    kind: ClassVar[str] = "map"
    entries: Tuple[Tuple["Value", "Value"], ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self,
            "entries",
            tuple((_check(key), _check(val)) for key, val in self.entries),
        )


@dataclasses.dataclass(frozen=True)
class TupleValue:
    kind: ClassVar[str] = "tuple"
    elements: Tuple["Value", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", _freeze(self.elements))


@dataclasses.dataclass(frozen=True)
class TupleStruct:
    kind: ClassVar[str] = "tuple struct"
    elements: Tuple["Value", ...] = ()
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "elements", _freeze(self.elements))


@dataclasses.dataclass(frozen=True)
class NewtypeVariant:
    kind: ClassVar[str] = "newtype variant"
    variant: str
    inner: "Value"
    enum: str = ""

    def __post_init__(self):
        _check(self.inner)


@dataclasses.dataclass(frozen=True)
class TupleVariant:
    kind: ClassVar[str] = "tuple variant"
    variant: str
    elements: Tuple["Value", ...] = ()
    enum: str = ""

    def __post_init__(self):
        object.__setattr__(self, "elements", _freeze(self.elements))


@dataclasses.dataclass(frozen=True)
class StructVariant:
    kind: ClassVar[str] = "struct variant"
    variant: str
    fields: Tuple[Tuple[str, "Value"], ...] = ()
    enum: str = ""

    def __post_init__(self):
        object.__setattr__(self, "fields", _freeze_fields(self.fields))


Value = Union[
    Boolean,
    SignedInteger,
    UnsignedInteger,
    Float,
    Char,
    String,
    Bytes,
    Unit,
    NamedUnit,
    NamedVariant,
    Newtype,
    Option,
    Sequence,
    Record,
    Map,
    TupleValue,
    TupleStruct,
    NewtypeVariant,
    TupleVariant,
    StructVariant,
]

VALUE_TYPES = (
    Boolean,
    SignedInteger,
    UnsignedInteger,
    Float,
    Char,
    String,
    Bytes,
    Unit,
    NamedUnit,
    NamedVariant,
    Newtype,
    Option,
    Sequence,
    Record,
    Map,
    TupleValue,
    TupleStruct,
    NewtypeVariant,
    TupleVariant,
    StructVariant,
)


def _integer(val: int) -> Union[SignedInteger, UnsignedInteger]:
    if -(1 << 63) <= val < (1 << 63):
        return SignedInteger(val, 64)
    if 0 <= val < (1 << 64):
        return UnsignedInteger(val, 64)
    if -(1 << 127) <= val < (1 << 127):
        return SignedInteger(val, 128)
    if 0 <= val < (1 << 128):
        return UnsignedInteger(val, 128)
    raise CustomError(f"integer does not fit in 128 bits: {val}")


def to_value(obj: Any) -> Value:
    """
    Convert a plain Python object into a value tree.

    Dataclass instances become records, enum members become unit variants,
    ``None`` becomes an absent option and lists become sequences. Objects can
    take control of their own conversion by defining ``__form_value__``,
    which may raise ``CustomError``.
    """
    if isinstance(obj, VALUE_TYPES):
        return obj
    hook = getattr(type(obj), "__form_value__", None)
    if hook is not None:
        return to_value(hook(obj))
    if obj is None:
        return Option()
    if isinstance(obj, enum.Enum):
        return NamedVariant(obj.name, type(obj).__name__)
    if isinstance(obj, bool):
        return Boolean(obj)
    if isinstance(obj, int):
        return _integer(obj)
    if isinstance(obj, float):
        return Float(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Bytes(bytes(obj))
    if isinstance(obj, list):
        return Sequence(tuple(to_value(item) for item in obj))
    if isinstance(obj, tuple):
        elements = tuple(to_value(item) for item in obj)
        if hasattr(obj, "_fields"):
            return TupleStruct(elements, type(obj).__name__)
        return TupleValue(elements)
    if isinstance(obj, Mapping):
        return Map(
            tuple((to_value(key), to_value(val)) for key, val in obj.items())
        )
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return Record(
            tuple(
                (field.name, to_value(getattr(obj, field.name)))
                for field in dataclasses.fields(obj)
            ),
            name=type(obj).__name__,
        )
    raise TypeError(f"Unhandled data type: {obj!r} ({type(obj)})")
