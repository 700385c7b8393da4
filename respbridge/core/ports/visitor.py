from typing import Any, Iterable, Protocol, Self, TypeVar, runtime_checkable

from respbridge.core.models.wire import WireValue

T = TypeVar("T", covariant=True)


class ValueVisitor(Protocol[T]):
    """
    Contract between a value being serialized and the format writing it.

    One method per category of the data model. A value announces what it
    is by calling exactly one of these methods and returning its result;
    nested values (elements, map values, struct fields) are handed over
    together with their declared type hint so the visitor can walk them
    in turn.

    Hints refine how a value is written (integer or float width, tagged
    unions) and never change its category.
    """

    def visit_none(self) -> T:
        """An absent option or a unit value."""

    def visit_bool(self, value: bool) -> T:
        ...

    def visit_int(self, value: int, bits: int = 64, signed: bool = True) -> T:
        """An integer of the given width. Unsigned 64-bit integers are written as big numbers."""

    def visit_float(self, value: float, bits: int = 64) -> T:
        ...

    def visit_str(self, value: str) -> T:
        ...

    def visit_bytes(self, value: bytes) -> T:
        ...

    def visit_seq(self, items: Iterable[Any], hint: Any = Any) -> T:
        """An ordered collection; `hint` is the element type."""

    def visit_tuple(self, items: Iterable[Any], hints: tuple[Any, ...]) -> T:
        """A fixed-arity collection with one hint per position."""

    def visit_map(self, items: Iterable[tuple[str, Any]], hint: Any = Any) -> T:
        """A string-keyed mapping; `hint` is the value type."""

    def visit_struct(self, fields: Iterable[tuple[str, Any, Any]]) -> T:
        """A record given as (key, value, hint) triples in declaration order."""

    def visit_unit_variant(self, name: str) -> T:
        """An enumeration member without payload."""

    def visit_variant(self, name: str, value: Any, hint: Any = Any) -> T:
        """A tagged variant carrying a payload."""


class ValueSource(Protocol):
    """
    Handed to ``__resp_deserialize__`` to rebuild a value from primitives.
    """

    @property
    def path(self) -> str:
        """Location of the value being rebuilt, for error messages."""

    @property
    def wire(self) -> WireValue:
        """The wire value itself, for types whose layout depends on its kind."""

    def read(self, hint: Any) -> Any:
        """Decode the current wire value as an instance of `hint`."""


@runtime_checkable
class RespSerializable(Protocol):
    """A type that writes itself through the visitor."""

    def __resp_serialize__(self, visitor: ValueVisitor[T]) -> T:
        ...


@runtime_checkable
class RespDeserializable(Protocol):
    """A type that rebuilds itself from a ValueSource."""

    @classmethod
    def __resp_deserialize__(cls, source: ValueSource) -> Self:
        ...
