import logging

import pytest

from respbridge.core.facade import RespCodec
from respbridge.core.models import wire
from respbridge.core.models.config import MAX_DEPTH, CodecConfig
from respbridge.core.models.errors import EncodeError, FramingError, NestingTooDeep
from tests.helpers import SimplePerson, nested_arrays, nested_lists


@pytest.mark.ut
def test_serialize_struct_to_text(codec):
    text = codec.serialize_to_text(SimplePerson("Alice", 30))
    assert text == "%2\r\n$4\r\nname\r\n$5\r\nAlice\r\n$3\r\nage\r\n:30\r\n"


@pytest.mark.ut
def test_deserialize_struct_from_text(codec):
    raw = "%2\r\n+name\r\n+Alice\r\n+age\r\n:30\r\n"
    assert codec.deserialize_from_text(raw, SimplePerson) == SimplePerson("Alice", 30)


@pytest.mark.ut
def test_text_payload_length_counts_bytes(codec):
    assert codec.serialize_to_text("é") == "$2\r\né\r\n"
    assert codec.deserialize_from_text("$2\r\né\r\n", str) == "é"


@pytest.mark.ut
def test_serialize_to_text_requires_utf8_output(codec):
    assert codec.serialize_to_bytes(b"\xff") == b"$1\r\n\xff\r\n"
    with pytest.raises(EncodeError):
        codec.serialize_to_text(b"\xff")


@pytest.mark.ut
def test_parse_returns_wire_tree(codec):
    assert codec.parse(b"*1\r\n#t\r\n") == wire.Array((wire.Boolean(True),))
    assert codec.to_wire([True]) == wire.Array((wire.Boolean(True),))


@pytest.mark.ut
def test_trailing_bytes_are_rejected(codec):
    with pytest.raises(FramingError):
        codec.deserialize_from_bytes(b":1\r\n:2\r\n", int)


@pytest.mark.ut
def test_configured_depth_applies_both_ways(shallow_codec):
    assert shallow_codec.deserialize_from_bytes(nested_arrays(2)) == [[1]]
    assert shallow_codec.serialize_to_bytes(nested_lists(2)) == b"*1\r\n*1\r\n:1\r\n"

    with pytest.raises(NestingTooDeep):
        shallow_codec.deserialize_from_bytes(nested_arrays(3))
    with pytest.raises(NestingTooDeep):
        shallow_codec.serialize_to_bytes(nested_lists(3))


@pytest.mark.ut
def test_default_config():
    assert RespCodec().config == CodecConfig(max_depth=128)


@pytest.mark.ut
def test_invalid_config():
    with pytest.raises(ValueError):
        CodecConfig(max_depth=0)
    with pytest.raises(ValueError):
        CodecConfig(max_depth=100_000)


@pytest.mark.ut
def test_deepest_config_fails_cleanly_on_deep_input():
    codec = RespCodec(CodecConfig(max_depth=MAX_DEPTH))

    with pytest.raises(NestingTooDeep):
        codec.deserialize_from_bytes(nested_arrays(5000))
    with pytest.raises(NestingTooDeep):
        codec.serialize_to_bytes(nested_lists(5000))


@pytest.mark.ut
def test_failures_are_logged_and_raised(codec, caplog):
    caplog.set_level(logging.DEBUG, logger="core.facade")

    with pytest.raises(FramingError):
        codec.deserialize_from_bytes(b"#x\r\n")

    records = [r for r in caplog.records if r.name == "core.facade"]
    assert records
    assert "Failed to deserialize" in records[-1].getMessage()


@pytest.mark.ut
def test_success_is_logged(codec, caplog):
    caplog.set_level(logging.DEBUG, logger="core.facade")
    codec.serialize_to_bytes([1, 2])
    assert any("Serialized list" in r.getMessage() for r in caplog.records)
