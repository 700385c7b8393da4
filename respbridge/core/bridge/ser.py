import collections.abc
import contextlib
import enum
from typing import Any, Generator, Iterable

from respbridge.core.models import wire
from respbridge.core.models.errors import (
    EncodeError,
    IntegerOverflow,
    NestingTooDeep,
    RespError,
    UnsupportedKeyType,
    UnsupportedType,
)
from respbridge.core.models.shape import (
    ANY,
    DEFAULT_INT,
    FloatShape,
    IntShape,
    IntWidth,
    MapShape,
    OptionShape,
    SeqShape,
    Shape,
    TupleShape,
    VariantShape,
    is_struct_value,
    shape_of,
    struct_fields,
)
from respbridge.core.models.wire import WireValue
from respbridge.core.ports.visitor import RespSerializable, ValueVisitor


def _refinement(hint: Any) -> Shape:
    """
    Shape used to refine how a value is written. Annotations that cannot
    be decoded into (scalar unions, Literal, NewType, ...) refine nothing.
    """
    if isinstance(hint, Shape):
        return hint
    try:
        return shape_of(hint)
    except TypeError:
        return ANY


def _ordered(items: collections.abc.Set) -> list[Any]:
    """Set elements sorted when comparable, so equal sets give equal bytes."""
    try:
        return sorted(items)
    except TypeError:
        return list(items)


class WireBuilder(ValueVisitor[WireValue]):
    """
    Walks a Python value and produces the wire value tree that represents it.

    WireBuilder is the format side of the visitor contract: `walk()`
    classifies a value by its runtime type (refined by the declared hint)
    and calls the matching ``visit_*`` method, which returns exactly one
    wire value. Types implementing ``__resp_serialize__`` pick the visitor
    method themselves.

    Selection of wire types is fixed:
    - integers become Integer, except unsigned 64-bit ones which always
      become BigNumber
    - floats become Double, booleans Boolean, None becomes Null
    - text and bytes become BulkString
    - sequences become Array, mappings and structs become Map with
      BulkString keys in insertion / declaration order
    - enum members become a BulkString of the member name, and a struct
      declared through a union of structs becomes a one-entry Map keyed
      by its class name

    A builder tracks the current path and nesting depth, so one instance
    serves one call.
    """
    def __init__(self, max_depth: int = 128) -> None:
        self._max_depth = max_depth
        self._depth = 0
        self._path: list[str] = ["$"]

    def build(self, value: Any, hint: Any = Any) -> WireValue:
        try:
            return self.walk(value, hint)
        except RespError as exc:
            if exc.path is None:
                exc.path = "$"
            raise
        except RecursionError:
            raise NestingTooDeep(
                "Nesting exceeds the interpreter recursion limit", path="$"
            ) from None

    def walk(self, value: Any, hint: Any = Any) -> WireValue:
        shape = _refinement(hint)
        if isinstance(shape, OptionShape):
            shape = shape.inner

        if isinstance(value, RespSerializable) and not isinstance(value, type):
            return value.__resp_serialize__(self)

        if value is None:
            return self.visit_none()
        if isinstance(value, enum.Enum):
            return self.visit_unit_variant(value.name)
        if isinstance(value, bool):
            return self.visit_bool(value)
        if isinstance(value, int):
            width = shape.width if isinstance(shape, IntShape) else DEFAULT_INT.width
            return self.visit_int(value, width.bits, width.signed)
        if isinstance(value, float):
            bits = shape.bits if isinstance(shape, FloatShape) else 64
            return self.visit_float(value, bits)
        if isinstance(value, str):
            return self.visit_str(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return self.visit_bytes(bytes(value))

        if is_struct_value(value):
            if isinstance(shape, VariantShape):
                return self.visit_variant(type(value).__name__, value, type(value))
            return self.visit_struct(
                (f.key, getattr(value, f.name), f.hint)
                for f in struct_fields(type(value))
            )

        if isinstance(value, collections.abc.Mapping):
            inner = shape.value if isinstance(shape, MapShape) else ANY
            return self.visit_map(value.items(), inner)

        if isinstance(value, (collections.abc.Sequence, collections.abc.Set)):
            if isinstance(shape, TupleShape):
                return self.visit_tuple(value, shape.items)
            inner = shape.inner if isinstance(shape, SeqShape) else ANY
            if isinstance(value, collections.abc.Set):
                value = _ordered(value)
            return self.visit_seq(value, inner)

        raise UnsupportedType(f"Cannot serialize value of type {type(value).__name__}")

    def visit_none(self) -> WireValue:
        return wire.Null()

    def visit_bool(self, value: bool) -> WireValue:
        return wire.Boolean(value)

    def visit_int(self, value: int, bits: int = 64, signed: bool = True) -> WireValue:
        width = IntWidth(bits, signed)
        if not width.min <= value <= width.max:
            kind = "i" if signed else "u"
            raise IntegerOverflow(f"{value} does not fit in {kind}{bits}")

        # RESP integers are signed 64-bit; u64 always goes out as a big number
        if bits == 64 and not signed:
            return wire.BigNumber(str(value))
        return wire.Integer(value)

    def visit_float(self, value: float, bits: int = 64) -> WireValue:
        return wire.Double(float(value))

    def visit_str(self, value: str) -> WireValue:
        try:
            return wire.BulkString(value.encode("utf-8"))
        except UnicodeEncodeError as exc:
            raise EncodeError(f"Text is not encodable as UTF-8: {exc.reason}") from exc

    def visit_bytes(self, value: bytes) -> WireValue:
        return wire.BulkString(value)

    def visit_seq(self, items: Iterable[Any], hint: Any = Any) -> WireValue:
        with self._nested():
            return wire.Array(
                self._child(f"[{index}]", item, hint)
                for index, item in enumerate(items)
            )

    def visit_tuple(self, items: Iterable[Any], hints: tuple[Any, ...]) -> WireValue:
        items = list(items)
        if len(items) != len(hints):
            raise UnsupportedType(
                f"Expected a tuple of {len(hints)} items, got {len(items)}"
            )
        with self._nested():
            return wire.Array(
                self._child(f"[{index}]", item, hint)
                for index, (item, hint) in enumerate(zip(items, hints))
            )

    def visit_map(self, items: Iterable[tuple[str, Any]], hint: Any = Any) -> WireValue:
        with self._nested():
            pairs = []
            for key, item in items:
                if not isinstance(key, str):
                    raise UnsupportedKeyType(
                        f"Map keys must be str, got {type(key).__name__}",
                        path="".join(self._path)
                    )
                pairs.append((self.visit_str(key), self._child(f".{key}", item, hint)))
            return wire.Map(pairs)

    def visit_struct(self, fields: Iterable[tuple[str, Any, Any]]) -> WireValue:
        with self._nested():
            return wire.Map(
                (self.visit_str(key), self._child(f".{key}", item, hint))
                for key, item, hint in fields
            )

    def visit_unit_variant(self, name: str) -> WireValue:
        return self.visit_str(name)

    def visit_variant(self, name: str, value: Any, hint: Any = Any) -> WireValue:
        with self._nested():
            return wire.Map(((self.visit_str(name), self._child(f".{name}", value, hint)),))

    def _child(self, segment: str, value: Any, hint: Any) -> WireValue:
        self._path.append(segment)
        try:
            return self.walk(value, hint)
        except RespError as exc:
            if exc.path is None:
                exc.path = "".join(self._path)
            raise
        finally:
            self._path.pop()

    @contextlib.contextmanager
    def _nested(self) -> Generator[None, None, None]:
        self._depth += 1
        try:
            if self._depth > self._max_depth:
                raise NestingTooDeep(
                    f"Nesting exceeds the limit of {self._max_depth}",
                    path="".join(self._path)
                )
            yield
        finally:
            self._depth -= 1


def to_wire(value: Any, hint: Any = Any, max_depth: int = 128) -> WireValue:
    """Build the wire value tree for `value`."""
    return WireBuilder(max_depth=max_depth).build(value, hint)
