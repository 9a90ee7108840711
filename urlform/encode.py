import decimal
import logging
import math
import struct
from typing import Any, Iterable, Tuple

from .errors import (
    EncodeError,
    InvalidUtf8Error,
    TopLevelShapeError,
    UnsupportedValueKindError,
)
from .sink import FormSink
from .value import (
    VALUE_TYPES,
    Boolean,
    Bytes,
    Char,
    Float,
    Map,
    NamedUnit,
    NamedVariant,
    Newtype,
    NewtypeVariant,
    Option,
    Record,
    Sequence,
    SignedInteger,
    String,
    StructVariant,
    TupleStruct,
    TupleValue,
    TupleVariant,
    Unit,
    UnsignedInteger,
    Value,
    to_value,
)

logger = logging.getLogger("urlform")

# Shapes that have no key=value representation.
UNSUPPORTED = (
    Record,
    Map,
    TupleValue,
    TupleStruct,
    NewtypeVariant,
    TupleVariant,
    StructVariant,
)


def encode(obj: Any) -> str:
    """
    Encode a Python object, typically a dataclass instance, as
    application/x-www-form-urlencoded text.
    """
    return encode_to_string(to_value(obj))


def encode_to_string(value: Value) -> str:
    """
    Encode a record (or a unit) as application/x-www-form-urlencoded text.

    >>> encode_to_string(Record.of(bread="baguette", cheese="comté"))
    'bread=baguette&cheese=comt%C3%A9'
    """
    sink = FormSink()
    encode_into(value, sink)
    return sink.finish()


def encode_into(value: Value, sink: FormSink) -> FormSink:
    """
    Append the pairs for ``value`` to an existing sink.

    On failure the sink keeps whatever pairs were appended before the
    offending field; it is not rolled back.
    """
    try:
        _encode_top_level(value, sink)
    except EncodeError as err:
        logger.debug(
            "Encoding stopped after %d pairs: %s", sink.pair_count, err
        )
        raise
    return sink


def format_integer(val: int) -> str:
    return "%d" % val


def _to_f32(val: float) -> float:
    return struct.unpack("<f", struct.pack("<f", val))[0]


def _shortest_digits(magnitude: float, width: int) -> Tuple[str, int]:
    """
    Return ``(digits, exponent)`` such that ``int(digits) * 10 ** exponent``
    is the shortest decimal that reads back as ``magnitude`` at ``width``
    bits. ``digits`` has no trailing zeros.
    """
    text = repr(magnitude)
    if width == 32:
        for precision in range(1, 10):
            candidate = "%.*g" % (precision, magnitude)
            try:
                if _to_f32(float(candidate)) == magnitude:
                    text = candidate
                    break
            except OverflowError:
                continue
    _, digits, exponent = decimal.Decimal(text).normalize().as_tuple()
    return "".join(str(digit) for digit in digits), exponent


def format_float(val: Float) -> str:
    """
    Return the shortest decimal text that reads back as the same binary
    value at the value's own width.

    Plain notation is used while the decimal point falls within the first
    16 digits (13 for single precision) or at most 5 places after the
    point, scientific notation otherwise: ``1e16``, ``0.00005``, ``1e-7``.
    """
    num = val.value
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "inf" if num > 0 else "-inf"
    sign = "-" if math.copysign(1.0, num) < 0 else ""
    if num == 0:
        return sign + "0.0"

    max_plain = 16 if val.width == 64 else 13
    digits, exponent = _shortest_digits(abs(num), val.width)
    length = len(digits)
    # 10 ** (point - 1) <= abs(num) < 10 ** point
    point = length + exponent
    if exponent >= 0 and point <= max_plain:
        text = digits + "0" * exponent + ".0"
    elif 0 < point <= max_plain:
        text = digits[:point] + "." + digits[point:]
    elif -5 < point <= 0:
        text = "0." + "0" * -point + digits
    elif length == 1:
        text = f"{digits}e{point - 1}"
    else:
        text = f"{digits[0]}.{digits[1:]}e{point - 1}"
    return sign + text


def _encode_top_level(value: Value, sink: FormSink) -> None:
    if not isinstance(value, VALUE_TYPES):
        raise TypeError(f"Unhandled data type: {value!r} ({type(value)})")
    # newtype names carry no meaning, look through them
    while isinstance(value, Newtype):
        value = value.inner
    if isinstance(value, Record):
        _encode_fields(value.fields, sink)
    elif isinstance(value, (Unit, NamedUnit)):
        return
    else:
        raise TopLevelShapeError()


def _encode_fields(
    fields: Iterable[Tuple[str, Value]], sink: FormSink
) -> None:
    for key, val in fields:
        _encode_value(key, val, sink)


def _encode_value(
    key: str, val: Value, sink: FormSink, allow_seq: bool = True
) -> None:
    if isinstance(val, Boolean):
        sink.append_pair(key, "true" if val.value else "false")
    elif isinstance(val, (SignedInteger, UnsignedInteger)):
        sink.append_pair(key, format_integer(val.value))
    elif isinstance(val, Float):
        sink.append_pair(key, format_float(val))
    elif isinstance(val, (Char, String)):
        sink.append_pair(key, val.value)
    elif isinstance(val, Bytes):
        try:
            text = val.value.decode("utf-8")
        except UnicodeDecodeError as err:
            raise InvalidUtf8Error(err) from err
        sink.append_pair(key, text)
    elif isinstance(val, Unit):
        pass
    elif isinstance(val, NamedUnit):
        sink.append_pair(key, val.name)
    elif isinstance(val, NamedVariant):
        sink.append_pair(key, val.variant)
    elif isinstance(val, Newtype):
        _encode_value(key, val.inner, sink, allow_seq)
    elif isinstance(val, Option):
        if not val.is_absent:
            _encode_value(key, val.inner, sink, allow_seq)
    elif isinstance(val, Sequence):
        if not allow_seq:
            raise UnsupportedValueKindError(val.kind)
        _encode_sequence(key, val.elements, sink)
    elif isinstance(val, UNSUPPORTED):
        raise UnsupportedValueKindError(val.kind)
    else:
        raise TypeError(f"Unhandled data type: key={key} val={val!r} ({type(val)})")


def _encode_sequence(
    key: str, elements: Iterable[Value], sink: FormSink
) -> None:
    # one pair per element, all sharing the field's key
    for element in elements:
        _encode_value(key, element, sink, allow_seq=False)
