from typing import Any

from respbridge.core.facade import RespCodec
from respbridge.core.ports.serializer import Serializer


class RespSerializer(Serializer):
    """
    RESP-based implementation of the Serializer interface.

    - deterministic byte output
    - one target type for every deserialized message
    - malformed input fails with a DecodeError instead of partial data
    """
    def __init__(self, target: Any = Any, codec: RespCodec | None = None) -> None:
        self._target = target
        self._codec = codec or RespCodec()

    def serialize(self, message: Any) -> bytes:
        return self._codec.serialize_to_bytes(message, self._target)

    def deserialize(self, data: bytes) -> Any:
        return self._codec.deserialize_from_bytes(data, self._target)
