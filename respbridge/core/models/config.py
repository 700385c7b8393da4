from dataclasses import dataclass

MAX_DEPTH = 128
"""Largest accepted nesting limit; each level costs several interpreter frames."""


@dataclass(frozen=True)
class CodecConfig:
    """
    Static configuration shared by the decoder and the type bridge.
    """
    max_depth: int = 128
    """
    Maximum nesting of aggregates (Array, Set, Push, Map, Attribute).
    Protects the recursive decoder and the value walker against
    adversarial input and self-referencing containers. Exceeding it
    fails with NestingTooDeep. Must be between 1 and MAX_DEPTH.
    """

    def __post_init__(self) -> None:
        if not 1 <= self.max_depth <= MAX_DEPTH:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH}")
