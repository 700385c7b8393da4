import logging
from typing import Any

from respbridge.core.bridge.de import from_wire
from respbridge.core.bridge.ser import WireBuilder
from respbridge.core.helpers.utils import describe
from respbridge.core.models.config import CodecConfig
from respbridge.core.models.errors import EncodeError, RespError
from respbridge.core.models.wire import WireValue
from respbridge.core.wire.decoder import Decoder
from respbridge.core.wire.encoder import encode


class RespCodec:
    """
    Entry point tying the wire codec and the type bridge together.

    Serialization walks the value into a wire tree and encodes it;
    deserialization decodes one complete buffer and rebuilds the target
    from the resulting tree. Both directions honour the configured
    nesting limit. A codec holds no per-call state and can be shared.
    """
    def __init__(self, config: CodecConfig | None = None) -> None:
        self._config = config or CodecConfig()
        self._logger = logging.getLogger("core.facade")

    @property
    def config(self) -> CodecConfig:
        return self._config

    def to_wire(self, value: Any, hint: Any = Any) -> WireValue:
        return WireBuilder(max_depth=self._config.max_depth).build(value, hint)

    def parse(self, data: bytes) -> WireValue:
        return Decoder(data, max_depth=self._config.max_depth).decode()

    def serialize_to_bytes(self, value: Any, hint: Any = Any) -> bytes:
        try:
            data = encode(self.to_wire(value, hint))
        except RespError as exc:
            self._logger.debug(f"Failed to serialize {type(value).__name__}: {exc}")
            raise

        self._logger.debug(f"Serialized {type(value).__name__} into {len(data)} bytes")
        return data

    def serialize_to_text(self, value: Any, hint: Any = Any) -> str:
        data = self.serialize_to_bytes(value, hint)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            self._logger.debug(f"Serialized output is not valid UTF-8: {describe(data)}")
            raise EncodeError(
                f"Output is not valid UTF-8 text at byte {exc.start}, use serialize_to_bytes"
            ) from None

    def deserialize_from_bytes(self, data: bytes, target: Any = Any) -> Any:
        try:
            value = from_wire(self.parse(data), target)
        except RespError as exc:
            self._logger.debug(f"Failed to deserialize {describe(data)}: {exc}")
            raise

        self._logger.debug(f"Deserialized {len(data)} bytes into {type(value).__name__}")
        return value

    def deserialize_from_text(self, text: str, target: Any = Any) -> Any:
        return self.deserialize_from_bytes(text.encode("utf-8"), target)
