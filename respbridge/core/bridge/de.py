import struct
from typing import Any

from respbridge.core.models import wire
from respbridge.core.models.errors import (
    InvalidUtf8,
    InvalidValue,
    MissingField,
    MixedTypeSequence,
    NestingTooDeep,
    OutOfRange,
    UnexpectedType,
    UnknownField,
    UnknownVariant,
    UnsupportedKeyType,
)
from respbridge.core.models.shape import (
    ANY,
    AnyShape,
    BoolShape,
    BytesShape,
    CustomShape,
    EnumShape,
    FloatShape,
    IntShape,
    IntWidth,
    MapShape,
    NoneShape,
    OptionShape,
    SeqShape,
    Shape,
    StrShape,
    StructShape,
    TupleShape,
    VariantShape,
    shape_of,
)
from respbridge.core.models.wire import WireValue, is_null
from respbridge.core.ports.visitor import ValueSource

_KIND_NAMES = {
    wire.SimpleString: "simple string",
    wire.SimpleError: "simple error",
    wire.Integer: "integer",
    wire.BulkString: "bulk string",
    wire.BulkError: "bulk error",
    wire.Null: "null",
    wire.Boolean: "boolean",
    wire.Double: "double",
    wire.BigNumber: "big number",
    wire.VerbatimString: "verbatim string",
    wire.Array: "array",
    wire.Set: "set",
    wire.Push: "push",
    wire.Map: "map",
    wire.Attribute: "attribute",
}


def _category(value: WireValue) -> str | None:
    """Coarse type of a wire value, None for null values."""
    if is_null(value):
        return None
    match value:
        case wire.Integer() | wire.BigNumber():
            return "integer"
        case wire.Double():
            return "double"
        case wire.Boolean():
            return "boolean"
        case wire.Array() | wire.Set() | wire.Push():
            return "sequence"
        case wire.Map() | wire.Attribute():
            return "map"
        case _:
            return "string"


class WireReader:
    """
    Rebuilds a Python value of a requested shape from a wire value tree.

    Each target shape accepts a fixed set of wire variants:
    - int targets: Integer or BigNumber within the declared width,
      otherwise OutOfRange
    - float targets: Double; f32 fails OutOfRange when the value does
      not survive the conversion
    - str targets: any string-bearing variant (simple/bulk strings and
      errors, verbatim text), validated as UTF-8; bytes targets take the
      same variants as-is
    - bool targets: Boolean only
    - optional targets: Null and the null-marked legacy forms are absent,
      everything else is decoded as the inner shape
    - sequences: Array, Set or Push, all elements of one shape
    - maps and structs: Map or Attribute with string keys

    Any other combination raises UnexpectedType. Every error carries the
    path of the value that failed, e.g. ``$.jobs[1].company``.
    """
    def __init__(self) -> None:
        self._path: list[str] = ["$"]

    def read(self, value: WireValue, hint: Any = Any) -> Any:
        shape = hint if isinstance(hint, Shape) else shape_of(hint)

        match shape:
            case AnyShape():
                return self._read_any(value)
            case NoneShape():
                if is_null(value):
                    return None
                raise self._mismatch("null", value)
            case OptionShape(inner):
                if is_null(value):
                    return None
                return self.read(value, inner)
            case BoolShape():
                if isinstance(value, wire.Boolean):
                    return value.value
                raise self._mismatch("boolean", value)
            case IntShape(width):
                return self._read_int(value, width)
            case FloatShape(bits):
                return self._read_float(value, bits)
            case StrShape():
                return self._read_text(value)
            case BytesShape(container):
                return container(self._read_payload(value))
            case SeqShape(inner, container):
                return container(self._read_seq(value, inner))
            case TupleShape(items):
                return self._read_tuple(value, items)
            case MapShape(item_shape):
                return self._read_map(value, item_shape)
            case StructShape():
                return self._read_struct(value, shape)
            case EnumShape(cls):
                name = self._read_text(value)
                try:
                    return cls[name]
                except KeyError:
                    raise UnknownVariant(
                        f"{name!r} is not a member of {cls.__name__}", path=self._here()
                    ) from None
            case VariantShape():
                return self._read_variant(value, shape)
            case CustomShape(cls):
                try:
                    return cls.__resp_deserialize__(_Source(self, value))
                except (TypeError, ValueError) as exc:
                    raise InvalidValue(str(exc), path=self._here()) from exc

    def _here(self) -> str:
        return "".join(self._path)

    def _child(self, segment: str, value: WireValue, shape: Shape) -> Any:
        self._path.append(segment)
        try:
            return self.read(value, shape)
        finally:
            self._path.pop()

    def _mismatch(self, expected: str, value: WireValue) -> UnexpectedType:
        found = _KIND_NAMES.get(type(value), type(value).__name__)
        return UnexpectedType(f"Expected {expected}, found {found}", path=self._here())

    def _read_payload(self, value: WireValue) -> bytes:
        match value:
            case (
                wire.SimpleString(payload)
                | wire.SimpleError(payload)
                | wire.BulkString(payload)
                | wire.BulkError(payload)
                | wire.VerbatimString(_, payload)
            ):
                return payload
        raise self._mismatch("string", value)

    def _read_text(self, value: WireValue) -> str:
        payload = self._read_payload(value)
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidUtf8(
                f"Invalid UTF-8 at position {exc.start} of the string", path=self._here()
            ) from None

    def _read_key(self, key: WireValue) -> str:
        if not isinstance(key, wire.StringLike):
            found = _KIND_NAMES.get(type(key), type(key).__name__)
            raise UnsupportedKeyType(f"Map keys must be strings, found {found}", path=self._here())
        return self._read_text(key)

    def _read_int(self, value: WireValue, width: IntWidth) -> int:
        match value:
            case wire.Integer(number):
                pass
            case wire.BigNumber():
                number = int(value)
            case _:
                raise self._mismatch("integer", value)

        if not width.min <= number <= width.max:
            kind = "i" if width.signed else "u"
            raise OutOfRange(f"{number} does not fit in {kind}{width.bits}", path=self._here())
        return number

    def _read_float(self, value: WireValue, bits: int) -> float:
        if not isinstance(value, wire.Double):
            raise self._mismatch("double", value)

        number = value.value
        if bits != 32:
            return number
        try:
            narrowed = struct.unpack("<f", struct.pack("<f", number))[0]
        except OverflowError:
            raise OutOfRange(f"{number} does not fit in f32", path=self._here()) from None
        if number != 0.0 and narrowed == 0.0:
            raise OutOfRange(f"{number} underflows f32", path=self._here())
        return narrowed

    def _read_seq(self, value: WireValue, inner: Shape) -> list[Any]:
        if not isinstance(value, wire.Sequence):
            raise self._mismatch("array", value)

        expected = None
        items = []
        for index, item in enumerate(value.items):
            segment = f"[{index}]"
            if isinstance(inner, AnyShape):
                category = _category(item)
                if expected is None:
                    expected = category
                elif category is not None and category != expected:
                    raise MixedTypeSequence(
                        f"Element {index} is a {category}, previous elements are {expected}",
                        path=self._here() + segment
                    )

            try:
                items.append(self._child(segment, item, inner))
            except UnexpectedType as exc:
                if exc.path != self._here() + segment:
                    raise
                raise MixedTypeSequence(
                    f"Element {index} does not match the element type: {exc.message}",
                    path=exc.path
                ) from exc
        return items

    def _read_tuple(self, value: WireValue, shapes: tuple[Shape, ...]) -> tuple[Any, ...]:
        if not isinstance(value, wire.Sequence):
            raise self._mismatch("array", value)
        if len(value.items) != len(shapes):
            raise UnexpectedType(
                f"Expected {len(shapes)} elements, found {len(value.items)}",
                path=self._here()
            )
        return tuple(
            self._child(f"[{index}]", item, shape)
            for index, (item, shape) in enumerate(zip(value.items, shapes))
        )

    def _read_map(self, value: WireValue, item_shape: Shape) -> dict[str, Any]:
        if not isinstance(value, wire.Pairs):
            raise self._mismatch("map", value)

        result = {}
        for key, item in value.items:
            name = self._read_key(key)
            result[name] = self._child(f".{name}", item, item_shape)
        return result

    def _read_struct(self, value: WireValue, shape: StructShape) -> Any:
        if not isinstance(value, wire.Pairs):
            raise self._mismatch(f"map for {shape.cls.__name__}", value)

        fields = {f.key: f for f in shape.fields}
        values = {}
        for key, item in value.items:
            name = self._read_key(key)
            field = fields.get(name)
            if field is None:
                if shape.ignore_unknown:
                    continue
                raise UnknownField(
                    f"Unknown field {name!r} for {shape.cls.__name__}",
                    path=f"{self._here()}.{name}"
                )
            values[field.name] = self._child(f".{name}", item, field.shape)

        for field in shape.fields:
            if field.name in values or not field.required:
                continue
            # absent optional fields read as None, as an explicit null would
            if isinstance(field.shape, OptionShape):
                values[field.name] = None
                continue
            raise MissingField(
                f"Missing field {field.key!r} for {shape.cls.__name__}", path=self._here()
            )

        try:
            return shape.build(values)
        except (TypeError, ValueError) as exc:
            raise InvalidValue(str(exc), path=self._here()) from exc

    def _read_variant(self, value: WireValue, shape: VariantShape) -> Any:
        if not isinstance(value, wire.Pairs) or len(value.items) != 1:
            raise self._mismatch("single-entry map", value)

        key, item = value.items[0]
        name = self._read_key(key)
        cls = shape.lookup(name)
        if cls is None:
            choices = ", ".join(c.__name__ for c in shape.variants)
            raise UnknownVariant(
                f"{name!r} is not one of {choices}", path=self._here()
            )
        return self._child(f".{name}", item, shape_of(cls))

    def _read_any(self, value: WireValue) -> Any:
        if is_null(value):
            return None

        match value:
            case wire.Integer(number):
                return number
            case wire.BigNumber():
                return int(value)
            case wire.Double(number) | wire.Boolean(number):
                return number
            case wire.Array() | wire.Set() | wire.Push():
                return self._read_seq(value, ANY)
            case wire.Map() | wire.Attribute():
                return self._read_map(value, ANY)

        payload = self._read_payload(value)
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError:
            return payload


class _Source(ValueSource):
    """ValueSource handed to ``__resp_deserialize__`` implementations."""
    def __init__(self, reader: WireReader, value: WireValue) -> None:
        self._reader = reader
        self._value = value

    @property
    def path(self) -> str:
        return self._reader._here()

    @property
    def wire(self) -> WireValue:
        return self._value

    def read(self, hint: Any) -> Any:
        return self._reader.read(self._value, hint)


def from_wire(value: WireValue, hint: Any = Any) -> Any:
    """Rebuild a value of type `hint` from a wire value tree."""
    try:
        return WireReader().read(value, hint)
    except RecursionError:
        raise NestingTooDeep(
            "Nesting exceeds the interpreter recursion limit", path="$"
        ) from None
