from typing import Any, Protocol


class Renderer(Protocol):
    """Turns decoded data or a wire tree into printable text."""

    def render(self, data: Any) -> str:
        """`data` may contain bytes; implementations make them printable."""
