import re
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from respbridge.core.models.errors import InvalidFormatTag, MalformedNumber

CRLF = b"\r\n"

I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1

_BIG_NUMBER = re.compile(r"-?[0-9]+")


class Kind(IntEnum):
    """
    Type prefix byte of every RESP2/RESP3 value.

    See:
    - RESP protocol spec: https://redis.io/docs/latest/develop/reference/protocol-spec/
    - RESP3 specification: https://github.com/antirez/RESP3/blob/master/spec.md
    """
    SIMPLE_STRING   = ord("+")
    SIMPLE_ERROR    = ord("-")
    INTEGER         = ord(":")
    BULK_STRING     = ord("$")
    BULK_ERROR      = ord("!")
    ARRAY           = ord("*")
    NULL            = ord("_")
    BOOLEAN         = ord("#")
    DOUBLE          = ord(",")
    BIG_NUMBER      = ord("(")
    VERBATIM_STRING = ord("=")
    MAP             = ord("%")
    ATTRIBUTE       = ord("|")
    SET             = ord("~")
    PUSH            = ord(">")

    @property
    def prefix(self) -> bytes:
        return bytes((self.value,))


@dataclass(frozen=True, slots=True)
class SimpleString:
    value: bytes
    kind: ClassVar[Kind] = Kind.SIMPLE_STRING


@dataclass(frozen=True, slots=True)
class SimpleError:
    value: bytes
    kind: ClassVar[Kind] = Kind.SIMPLE_ERROR


@dataclass(frozen=True, slots=True)
class Integer:
    value: int
    kind: ClassVar[Kind] = Kind.INTEGER


@dataclass(frozen=True, slots=True)
class BulkString:
    """
    Length-prefixed byte string.
    `null` marks the RESP2 null bulk string (``$-1``); a null value always
    carries an empty payload and is distinct from a present empty string.
    """
    value: bytes
    null: bool = False
    kind: ClassVar[Kind] = Kind.BULK_STRING


@dataclass(frozen=True, slots=True)
class BulkError:
    value: bytes
    kind: ClassVar[Kind] = Kind.BULK_ERROR


@dataclass(frozen=True, slots=True)
class Null:
    kind: ClassVar[Kind] = Kind.NULL


@dataclass(frozen=True, slots=True)
class Boolean:
    value: bool
    kind: ClassVar[Kind] = Kind.BOOLEAN


@dataclass(frozen=True, slots=True)
class Double:
    value: float
    kind: ClassVar[Kind] = Kind.DOUBLE


@dataclass(frozen=True, slots=True)
class BigNumber:
    """
    Arbitrary precision integer, kept as its base-10 literal.
    """
    value: str
    kind: ClassVar[Kind] = Kind.BIG_NUMBER

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _BIG_NUMBER.fullmatch(self.value):
            raise MalformedNumber(f"Invalid big number literal: {self.value!r}")

    def __int__(self) -> int:
        return int(self.value)


@dataclass(frozen=True, slots=True)
class VerbatimString:
    """
    Bulk string carrying a 3-byte format tag, e.g. ``txt`` or ``mkd``.
    """
    format: bytes
    value: bytes
    kind: ClassVar[Kind] = Kind.VERBATIM_STRING

    def __post_init__(self) -> None:
        if (
            not isinstance(self.format, bytes)
            or len(self.format) != 3
            or not self.format.isascii()
        ):
            raise InvalidFormatTag(
                f"Verbatim format tag must be exactly 3 ASCII bytes, got {self.format!r}"
            )


@dataclass(frozen=True, slots=True)
class Array:
    items: tuple["WireValue", ...]
    null: bool = False
    kind: ClassVar[Kind] = Kind.ARRAY

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True, slots=True)
class Set:
    items: tuple["WireValue", ...]
    null: bool = False
    kind: ClassVar[Kind] = Kind.SET

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True, slots=True)
class Push:
    items: tuple["WireValue", ...]
    null: bool = False
    kind: ClassVar[Kind] = Kind.PUSH

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True, slots=True)
class Map:
    items: tuple[tuple["WireValue", "WireValue"], ...]
    kind: ClassVar[Kind] = Kind.MAP

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple((k, v) for k, v in self.items))


@dataclass(frozen=True, slots=True)
class Attribute:
    """
    Map-shaped sidecar annotation. Handled exactly like Map.
    """
    items: tuple[tuple["WireValue", "WireValue"], ...]
    kind: ClassVar[Kind] = Kind.ATTRIBUTE

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple((k, v) for k, v in self.items))


WireValue = (
    SimpleString | SimpleError | Integer | BulkString | BulkError | Null
    | Boolean | Double | BigNumber | VerbatimString
    | Array | Set | Push | Map | Attribute
)

StringLike = SimpleString | SimpleError | BulkString | BulkError | VerbatimString
"""Variants that carry a byte payload usable as text or bytes."""

Sequence = Array | Set | Push

Pairs = Map | Attribute


def is_null(value: WireValue) -> bool:
    """
    True for ``_`` and for the null-marked legacy forms (``$-1``, ``*-1``).
    """
    if isinstance(value, Null):
        return True
    if isinstance(value, (BulkString, Array, Set, Push)):
        return value.null
    return False
