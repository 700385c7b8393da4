"""
Module level entry points.

Each function uses the process-wide codec built from the environment and
the optional ``respbridge.yaml`` file unless an explicit CodecConfig is
given.
"""
from typing import Any

from respbridge.bootstrap.deps import get_codec
from respbridge.core.facade import RespCodec
from respbridge.core.models.config import CodecConfig


def _codec(config: CodecConfig | None) -> RespCodec:
    if config is None:
        return get_codec()
    return RespCodec(config)


def serialize_to_bytes(value: Any, hint: Any = Any, config: CodecConfig | None = None) -> bytes:
    return _codec(config).serialize_to_bytes(value, hint)


def serialize_to_text(value: Any, hint: Any = Any, config: CodecConfig | None = None) -> str:
    return _codec(config).serialize_to_text(value, hint)


def deserialize_from_bytes(data: bytes, target: Any = Any, config: CodecConfig | None = None) -> Any:
    return _codec(config).deserialize_from_bytes(data, target)


def deserialize_from_text(text: str, target: Any = Any, config: CodecConfig | None = None) -> Any:
    return _codec(config).deserialize_from_text(text, target)
