import pytest

from respbridge.core.models.errors import (
    DecodeError,
    EncodeError,
    FramingError,
    IntegerOverflow,
    NestingTooDeep,
    RespError,
    UnknownField,
    UnsupportedKeyType,
)


@pytest.mark.ut
@pytest.mark.parametrize("kind", [IntegerOverflow, UnsupportedKeyType, NestingTooDeep])
def test_shared_kinds_belong_to_both_directions(kind):
    assert issubclass(kind, EncodeError)
    assert issubclass(kind, DecodeError)


@pytest.mark.ut
def test_message_includes_offset():
    err = FramingError("trailing bytes", offset=7)
    assert str(err) == "trailing bytes (at byte 7)"
    assert err.message == "trailing bytes"


@pytest.mark.ut
def test_message_includes_path():
    err = UnknownField("Unknown field 'x'", path="$.people[2].x")
    assert str(err) == "Unknown field 'x' (at $.people[2].x)"
    assert isinstance(err, RespError)


@pytest.mark.ut
def test_message_without_context():
    assert str(DecodeError("boom")) == "boom"
