from typing import Any, Protocol


class Serializer(Protocol):
    """
    Converts whole messages to and from bytes for one target type.

    Implementations must:
    - produce identical bytes for equal messages
    - reject malformed or truncated input with an exception instead of
      returning partial data
    """

    def serialize(self, message: Any) -> bytes:
        """Encode one message."""

    def deserialize(self, data: bytes) -> Any:
        """Decode exactly one message from a complete buffer."""
