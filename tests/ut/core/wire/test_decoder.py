import math

import pytest

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
from respbridge.core.wire.decoder import decode
from tests.helpers import nested_arrays


@pytest.mark.ut
@pytest.mark.parametrize(
    "data, expected",
    [
        (b"+OK\r\n", wire.SimpleString(b"OK")),
        (b"+\r\n", wire.SimpleString(b"")),
        (b"-ERR unknown command\r\n", wire.SimpleError(b"ERR unknown command")),
        (b":1000\r\n", wire.Integer(1000)),
        (b":-42\r\n", wire.Integer(-42)),
        (b":+42\r\n", wire.Integer(42)),
        (b"$5\r\nhello\r\n", wire.BulkString(b"hello")),
        (b"$0\r\n\r\n", wire.BulkString(b"")),
        (b"$4\r\na\r\nb\r\n", wire.BulkString(b"a\r\nb")),
        (b"$-1\r\n", wire.BulkString(b"", null=True)),
        (b"!21\r\nSYNTAX invalid syntax\r\n", wire.BulkError(b"SYNTAX invalid syntax")),
        (b"_\r\n", wire.Null()),
        (b"#t\r\n", wire.Boolean(True)),
        (b"#f\r\n", wire.Boolean(False)),
        (b",1.5\r\n", wire.Double(1.5)),
        (b",-3\r\n", wire.Double(-3.0)),
        (b",1e3\r\n", wire.Double(1000.0)),
        (b",.5\r\n", wire.Double(0.5)),
        (b"(3492890328409238509324850943850943825024385\r\n",
         wire.BigNumber("3492890328409238509324850943850943825024385")),
        (b"=15\r\ntxt:Some string\r\n", wire.VerbatimString(b"txt", b"Some string")),
        (b"*0\r\n", wire.Array(())),
        (b"*-1\r\n", wire.Array((), null=True)),
        (b"~2\r\n:1\r\n:2\r\n", wire.Set((wire.Integer(1), wire.Integer(2)))),
        (b">2\r\n+pubsub\r\n+message\r\n",
         wire.Push((wire.SimpleString(b"pubsub"), wire.SimpleString(b"message")))),
    ]
)
def test_decode_single_values(data, expected):
    assert decode(data) == expected


@pytest.mark.ut
@pytest.mark.parametrize(
    "data, expected",
    [
        (b",inf\r\n", math.inf),
        (b",+inf\r\n", math.inf),
        (b",-inf\r\n", -math.inf),
        (b",INF\r\n", math.inf),
    ]
)
def test_decode_infinite_doubles(data, expected):
    assert decode(data).value == expected


@pytest.mark.ut
def test_decode_nan():
    assert math.isnan(decode(b",nan\r\n").value)


@pytest.mark.ut
def test_decode_nested_aggregates():
    data = b"*2\r\n*3\r\n:1\r\n:2\r\n:3\r\n*2\r\n+Hello\r\n-World\r\n"
    assert decode(data) == wire.Array((
        wire.Array((wire.Integer(1), wire.Integer(2), wire.Integer(3))),
        wire.Array((wire.SimpleString(b"Hello"), wire.SimpleError(b"World"))),
    ))


@pytest.mark.ut
def test_decode_map_keeps_order_and_duplicates():
    data = b"%3\r\n+b\r\n:1\r\n+a\r\n:2\r\n+b\r\n:3\r\n"
    value = decode(data)
    assert isinstance(value, wire.Map)
    assert [(k.value, v.value) for k, v in value.items] == [(b"b", 1), (b"a", 2), (b"b", 3)]


@pytest.mark.ut
def test_decode_attribute():
    assert decode(b"|1\r\n+ttl\r\n:3600\r\n") == wire.Attribute(
        ((wire.SimpleString(b"ttl"), wire.Integer(3600)),)
    )


@pytest.mark.ut
def test_decode_accepts_buffer_types():
    assert decode(bytearray(b":1\r\n")) == wire.Integer(1)
    assert decode(memoryview(b":1\r\n")) == wire.Integer(1)


@pytest.mark.ut
@pytest.mark.parametrize(
    "data, error, offset",
    [
        (b"", UnexpectedEof, 0),
        (b"+OK", UnexpectedEof, 1),
        (b"$5\r\nhel", UnexpectedEof, 4),
        (b"$3\r\nhel\r", UnexpectedEof, 7),
        (b"*2\r\n:1\r\n", UnexpectedEof, 8),
        (b"?x\r\n", UnknownTypePrefix, 0),
        (b"$abc\r\n", MalformedLength, 1),
        (b"$-2\r\n", MalformedLength, 1),
        (b"*1.5\r\n", MalformedLength, 1),
        (b"%-1\r\n", MalformedLength, 1),
        (b":12a\r\n", MalformedInteger, 1),
        (b":\r\n", MalformedInteger, 1),
        (b"*2\r\n:1\r\n:x\r\n", MalformedInteger, 9),
        (b":9999999999999999999\r\n", IntegerOverflow, 1),
        (b",abc\r\n", MalformedFloat, 0),
        (b",1.2.3\r\n", MalformedFloat, 0),
        (b"(12x\r\n", MalformedNumber, 0),
        (b"(\r\n", MalformedNumber, 0),
        (b"$3\r\nhelXX", FramingError, 7),
        (b"#x\r\n", FramingError, 0),
        (b"_x\r\n", FramingError, 0),
        (b"=3\r\ntxt\r\n", FramingError, 0),
        (b"=8\r\ntxt-body\r\n", FramingError, 0),
        (b":1\r\n:2\r\n", FramingError, 4),
    ]
)
def test_decode_failures_report_offset(data, error, offset):
    with pytest.raises(error) as exc:
        decode(data)
    assert exc.value.offset == offset


@pytest.mark.ut
def test_decode_depth_at_limit():
    assert decode(nested_arrays(3), max_depth=3) == wire.Array(
        (wire.Array((wire.Array((wire.Integer(1),)),)),)
    )


@pytest.mark.ut
def test_decode_depth_over_limit():
    with pytest.raises(NestingTooDeep):
        decode(nested_arrays(4), max_depth=3)


@pytest.mark.ut
def test_decode_deep_input_with_default_limit():
    with pytest.raises(NestingTooDeep):
        decode(nested_arrays(10_000))


@pytest.mark.ut
def test_decode_map_counts_toward_depth():
    with pytest.raises(NestingTooDeep):
        decode(b"%1\r\n+k\r\n%1\r\n+k\r\n:1\r\n", max_depth=1)


@pytest.mark.ut
def test_decode_deep_input_beyond_interpreter_limit():
    with pytest.raises(NestingTooDeep):
        decode(nested_arrays(5000), max_depth=100_000)
