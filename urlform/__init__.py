"""
urlform: encode records as application/x-www-form-urlencoded text.
"""

from .client import FormClient
from .encode import encode, encode_into, encode_to_string
from .errors import (
    CustomError,
    EncodeError,
    InvalidUtf8Error,
    SinkFinishedError,
    TopLevelShapeError,
    UnsupportedValueKindError,
)
from .sink import FormSink
from .value import (
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
from .version import __version__
