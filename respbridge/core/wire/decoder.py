import math
import re

from respbridge.core.models import wire
from respbridge.core.models.errors import (
    FramingError,
    IntegerOverflow,
    MalformedFloat,
    MalformedInteger,
    MalformedLength,
    MalformedNumber,
    NestingTooDeep,
    UnexpectedEof,
    UnknownTypePrefix,
)
from respbridge.core.models.wire import CRLF, I64_MAX, I64_MIN, Kind, WireValue

_INTEGER = re.compile(rb"[+-]?[0-9]+")
_LENGTH = re.compile(rb"-1|[0-9]+")
_DOUBLE = re.compile(rb"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_DOUBLE_TOKENS = {
    b"inf": math.inf,
    b"+inf": math.inf,
    b"-inf": -math.inf,
    b"nan": math.nan,
}

_SEQUENCES = {
    Kind.ARRAY: wire.Array,
    Kind.SET: wire.Set,
    Kind.PUSH: wire.Push,
}

_PAIRS = {
    Kind.MAP: wire.Map,
    Kind.ATTRIBUTE: wire.Attribute,
}


class Decoder:
    """
    Single-pass recursive descent parser turning a complete RESP buffer
    into a tree of wire values.

    The decoder works on one in-memory buffer holding exactly one
    top-level value. It keeps a cursor and the current aggregate nesting
    depth; nothing is shared between instances, so a Decoder is cheap and
    meant to be used once.

    Parsing never backtracks and never recovers: the first problem raises
    a DecodeError subclass carrying the byte offset where it was detected.
    A buffer that ends before a terminator or a declared payload length
    raises UnexpectedEof; bytes left over after the top-level value raise
    FramingError.
    """
    def __init__(self, data: bytes | bytearray | memoryview, max_depth: int = 128) -> None:
        self._data = bytes(data)
        self._pos = 0
        self._depth = 0
        self._max_depth = max_depth

    def decode(self) -> WireValue:
        try:
            value = self._read_value()
        except RecursionError:
            raise NestingTooDeep(
                "Nesting exceeds the interpreter recursion limit", offset=self._pos
            ) from None
        if self._pos != len(self._data):
            raise FramingError(
                f"{len(self._data) - self._pos} trailing byte(s) after value",
                offset=self._pos
            )
        return value

    def _read_value(self) -> WireValue:
        start = self._pos
        if start >= len(self._data):
            raise UnexpectedEof("Expected a type prefix", offset=start)

        prefix = self._data[start]
        try:
            kind = Kind(prefix)
        except ValueError:
            raise UnknownTypePrefix(
                f"Unknown type prefix {bytes((prefix,))!r}", offset=start
            ) from None
        self._pos += 1

        match kind:
            case Kind.SIMPLE_STRING:
                return wire.SimpleString(self._read_line())
            case Kind.SIMPLE_ERROR:
                return wire.SimpleError(self._read_line())
            case Kind.INTEGER:
                return wire.Integer(self._read_integer())
            case Kind.BULK_STRING | Kind.BULK_ERROR:
                payload = self._read_bulk()
                if payload is None:
                    return wire.BulkString(b"", null=True)
                if kind is Kind.BULK_ERROR:
                    return wire.BulkError(payload)
                return wire.BulkString(payload)
            case Kind.ARRAY | Kind.SET | Kind.PUSH:
                return self._read_sequence(kind, start)
            case Kind.NULL:
                if self._read_line():
                    raise FramingError("Null carries no payload", offset=start)
                return wire.Null()
            case Kind.BOOLEAN:
                return wire.Boolean(self._read_boolean(start))
            case Kind.DOUBLE:
                return wire.Double(self._read_double(start))
            case Kind.BIG_NUMBER:
                return self._read_big_number(start)
            case Kind.VERBATIM_STRING:
                return self._read_verbatim(start)
            case Kind.MAP | Kind.ATTRIBUTE:
                return self._read_pairs(kind, start)

    def _read_line(self) -> bytes:
        end = self._data.find(CRLF, self._pos)
        if end < 0:
            raise UnexpectedEof("Missing CRLF terminator", offset=self._pos)
        line = self._data[self._pos:end]
        self._pos = end + len(CRLF)
        return line

    def _expect_crlf(self) -> None:
        tail = self._data[self._pos:self._pos + len(CRLF)]
        if tail == CRLF:
            self._pos += len(CRLF)
            return
        if len(tail) < len(CRLF) and CRLF.startswith(tail):
            raise UnexpectedEof("Missing CRLF after payload", offset=self._pos)
        raise FramingError("Payload is not followed by CRLF", offset=self._pos)

    def _read_integer(self) -> int:
        start = self._pos
        line = self._read_line()
        if not _INTEGER.fullmatch(line):
            raise MalformedInteger(f"Invalid integer {line!r}", offset=start)

        value = int(line)
        if not I64_MIN <= value <= I64_MAX:
            raise IntegerOverflow(f"Integer {value} does not fit in 64 bits", offset=start)
        return value

    def _read_length(self, allow_null: bool = True) -> int:
        start = self._pos
        line = self._read_line()
        if not _LENGTH.fullmatch(line):
            raise MalformedLength(f"Invalid length {line!r}", offset=start)

        length = int(line)
        if length < 0 and not allow_null:
            raise MalformedLength("Length -1 is not allowed here", offset=start)
        return length

    def _read_bulk(self, allow_null: bool = True) -> bytes | None:
        length = self._read_length(allow_null)
        if length < 0:
            return None

        end = self._pos + length
        if end > len(self._data):
            raise UnexpectedEof(f"Expected {length} bytes of payload", offset=self._pos)

        payload = self._data[self._pos:end]
        self._pos = end
        self._expect_crlf()
        return payload

    def _read_boolean(self, start: int) -> bool:
        line = self._read_line()
        if line == b"t":
            return True
        if line == b"f":
            return False
        raise FramingError(f"Invalid boolean {line!r}", offset=start)

    def _read_double(self, start: int) -> float:
        line = self._read_line()
        token = _DOUBLE_TOKENS.get(line.lower())
        if token is not None:
            return token
        if not _DOUBLE.fullmatch(line):
            raise MalformedFloat(f"Invalid double {line!r}", offset=start)
        return float(line.decode("ascii"))

    def _read_big_number(self, start: int) -> wire.BigNumber:
        line = self._read_line()
        if not line.isascii():
            raise MalformedNumber(f"Invalid big number {line!r}", offset=start)
        try:
            return wire.BigNumber(line.decode("ascii"))
        except MalformedNumber as exc:
            exc.offset = start
            raise

    def _read_verbatim(self, start: int) -> wire.VerbatimString:
        payload = self._read_bulk(allow_null=False)
        tag = payload[:3]
        if len(payload) < 4 or payload[3:4] != b":" or not tag.isascii():
            raise FramingError("Verbatim string is missing its format tag", offset=start)
        return wire.VerbatimString(tag, payload[4:])

    def _enter(self, start: int) -> None:
        self._depth += 1
        if self._depth > self._max_depth:
            raise NestingTooDeep(
                f"Nesting exceeds the limit of {self._max_depth}", offset=start
            )

    def _read_sequence(self, kind: Kind, start: int) -> wire.Sequence:
        cls = _SEQUENCES[kind]
        count = self._read_length()
        if count < 0:
            return cls((), null=True)

        self._enter(start)
        items = [self._read_value() for _ in range(count)]
        self._depth -= 1
        return cls(items)

    def _read_pairs(self, kind: Kind, start: int) -> wire.Pairs:
        cls = _PAIRS[kind]
        count = self._read_length(allow_null=False)

        self._enter(start)
        pairs = [(self._read_value(), self._read_value()) for _ in range(count)]
        self._depth -= 1
        return cls(pairs)


def decode(data: bytes | bytearray | memoryview, max_depth: int = 128) -> WireValue:
    """Parse exactly one RESP value from a complete buffer."""
    return Decoder(data, max_depth=max_depth).decode()
