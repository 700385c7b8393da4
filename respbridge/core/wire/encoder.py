import math

from respbridge.core.models import wire
from respbridge.core.models.errors import (
    IntegerOverflow,
    InvalidSimpleString,
    NestingTooDeep,
    UnsupportedType,
)
from respbridge.core.models.wire import CRLF, I64_MAX, I64_MIN, Kind, WireValue


def encode(value: WireValue) -> bytes:
    """
    Serialize a wire value tree to RESP bytes.

    The output is fully determined by the tree: aggregates are written in
    their own item order and nothing is reordered.
    """
    out = bytearray()
    try:
        _write(value, out)
    except RecursionError:
        raise NestingTooDeep("Nesting exceeds the interpreter recursion limit") from None
    return bytes(out)


def _line(out: bytearray, kind: Kind, payload: bytes) -> None:
    out += kind.prefix
    out += payload
    out += CRLF


def _bulk(out: bytearray, kind: Kind, payload: bytes) -> None:
    _line(out, kind, str(len(payload)).encode("ascii"))
    out += payload
    out += CRLF


def _format_double(number: float) -> bytes:
    if math.isnan(number):
        return b"nan"
    if math.isinf(number):
        return b"inf" if number > 0 else b"-inf"
    return repr(float(number)).encode("ascii")


def _write(value: WireValue, out: bytearray) -> None:
    match value:
        case wire.SimpleString(payload) | wire.SimpleError(payload):
            if CRLF in payload:
                raise InvalidSimpleString(f"Simple string cannot contain CRLF: {payload!r}")
            _line(out, value.kind, payload)

        case wire.Integer(number):
            if not I64_MIN <= number <= I64_MAX:
                raise IntegerOverflow(f"Integer {number} does not fit in 64 bits")
            _line(out, value.kind, str(number).encode("ascii"))

        case wire.BulkString(_, null=True):
            _line(out, value.kind, b"-1")

        case wire.BulkString(payload) | wire.BulkError(payload):
            _bulk(out, value.kind, payload)

        case wire.Null():
            _line(out, value.kind, b"")

        case wire.Boolean(flag):
            _line(out, value.kind, b"t" if flag else b"f")

        case wire.Double(number):
            _line(out, value.kind, _format_double(number))

        case wire.BigNumber(text):
            _line(out, value.kind, text.encode("ascii"))

        case wire.VerbatimString(tag, payload):
            _bulk(out, value.kind, tag + b":" + payload)

        case wire.Array(_, null=True) | wire.Set(_, null=True) | wire.Push(_, null=True):
            _line(out, value.kind, b"-1")

        case wire.Array(items) | wire.Set(items) | wire.Push(items):
            _line(out, value.kind, str(len(items)).encode("ascii"))
            for item in items:
                _write(item, out)

        case wire.Map(pairs) | wire.Attribute(pairs):
            _line(out, value.kind, str(len(pairs)).encode("ascii"))
            for key, item in pairs:
                _write(key, out)
                _write(item, out)

        case _:
            raise UnsupportedType(f"Not a wire value: {type(value).__name__}")
