import collections.abc
import dataclasses
import enum
import types
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, Union

from pydantic import BaseModel

from respbridge.core.ports.visitor import RespDeserializable


@dataclass(frozen=True, slots=True)
class IntWidth:
    bits: int
    signed: bool

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1


@dataclass(frozen=True, slots=True)
class FloatWidth:
    bits: int


i8 = Annotated[int, IntWidth(8, True)]
i16 = Annotated[int, IntWidth(16, True)]
i32 = Annotated[int, IntWidth(32, True)]
i64 = Annotated[int, IntWidth(64, True)]
u8 = Annotated[int, IntWidth(8, False)]
u16 = Annotated[int, IntWidth(16, False)]
u32 = Annotated[int, IntWidth(32, False)]
u64 = Annotated[int, IntWidth(64, False)]
f32 = Annotated[float, FloatWidth(32)]
f64 = Annotated[float, FloatWidth(64)]


@dataclass(frozen=True, slots=True)
class AnyShape:
    pass


@dataclass(frozen=True, slots=True)
class NoneShape:
    pass


@dataclass(frozen=True, slots=True)
class BoolShape:
    pass


@dataclass(frozen=True, slots=True)
class IntShape:
    width: IntWidth


@dataclass(frozen=True, slots=True)
class FloatShape:
    bits: int


@dataclass(frozen=True, slots=True)
class StrShape:
    pass


@dataclass(frozen=True, slots=True)
class BytesShape:
    container: type = bytes


@dataclass(frozen=True, slots=True)
class OptionShape:
    inner: "Shape"


@dataclass(frozen=True, slots=True)
class SeqShape:
    inner: "Shape"
    container: type = list


@dataclass(frozen=True, slots=True)
class TupleShape:
    items: tuple["Shape", ...]


@dataclass(frozen=True, slots=True)
class MapShape:
    value: "Shape"


@dataclass(frozen=True, slots=True)
class FieldShape:
    name: str
    """Python attribute name."""

    key: str
    """Key used on the wire (pydantic alias when declared)."""

    hint: Any
    required: bool

    @property
    def shape(self) -> "Shape":
        return shape_of(self.hint)


@dataclass(frozen=True, slots=True)
class StructShape:
    """
    A dataclass or a pydantic model.
    Fields are resolved lazily so self-referencing types terminate.
    """
    cls: type

    @property
    def fields(self) -> tuple[FieldShape, ...]:
        return struct_fields(self.cls)

    @property
    def ignore_unknown(self) -> bool:
        if issubclass(self.cls, BaseModel):
            return self.cls.model_config.get("extra") in ("ignore", "allow")
        return bool(getattr(self.cls, "__resp_ignore_unknown__", False))

    def build(self, values: dict[str, Any]) -> Any:
        """Instantiate the struct from decoded values keyed by attribute name."""
        if issubclass(self.cls, BaseModel):
            by_key = {f.key: values[f.name] for f in self.fields if f.name in values}
            return self.cls.model_validate(by_key)
        return self.cls(**values)


@dataclass(frozen=True, slots=True)
class EnumShape:
    cls: type[enum.Enum]


@dataclass(frozen=True, slots=True)
class VariantShape:
    """Externally tagged union of struct classes, keyed by class name."""
    variants: tuple[type, ...]

    def lookup(self, name: str) -> type | None:
        for cls in self.variants:
            if cls.__name__ == name:
                return cls
        return None


@dataclass(frozen=True, slots=True)
class CustomShape:
    """A type implementing ``__resp_deserialize__``."""
    cls: type


Shape = (
    AnyShape | NoneShape | BoolShape | IntShape | FloatShape | StrShape
    | BytesShape | OptionShape | SeqShape | TupleShape | MapShape
    | StructShape | EnumShape | VariantShape | CustomShape
)

ANY = AnyShape()
DEFAULT_INT = IntShape(IntWidth(64, True))
DEFAULT_FLOAT = FloatShape(64)

_SEQUENCE_ORIGINS = {
    list: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    set: set,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
    frozenset: frozenset,
}

_MAPPING_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def is_struct_type(tp: Any) -> bool:
    return isinstance(tp, type) and (
        dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)
    )


def is_struct_value(value: Any) -> bool:
    return not isinstance(value, type) and is_struct_type(type(value))


@lru_cache(maxsize=None)
def shape_of(tp: Any) -> Shape:
    """
    Resolve a type annotation into the shape the type bridge decodes into.

    Raises TypeError for annotations outside the supported data model,
    including mappings whose key type is not ``str``.
    """
    if tp is Any or tp is object:
        return ANY
    if tp is None or tp is types.NoneType:
        return NoneShape()

    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    if origin is Annotated:
        base, *metadata = args
        for meta in metadata:
            if isinstance(meta, IntWidth):
                if base is not int:
                    raise TypeError(f"IntWidth applies to int, not {base!r}")
                return IntShape(meta)
            if isinstance(meta, FloatWidth):
                if base is not float:
                    raise TypeError(f"FloatWidth applies to float, not {base!r}")
                return FloatShape(meta.bits)
        return shape_of(base)

    if origin is Union or origin is types.UnionType:
        members = [a for a in args if a is not types.NoneType]
        if len(members) == 1:
            inner = shape_of(members[0])
        elif all(is_struct_type(m) for m in members):
            inner = VariantShape(tuple(members))
        else:
            raise TypeError(f"Unsupported union {tp!r}: only structs can be combined")
        return OptionShape(inner) if len(members) < len(args) else inner

    if origin is tuple:
        if not args:
            return SeqShape(ANY, tuple)
        if len(args) == 2 and args[1] is Ellipsis:
            return SeqShape(shape_of(args[0]), tuple)
        return TupleShape(tuple(shape_of(a) for a in args))

    if origin in _SEQUENCE_ORIGINS:
        inner = shape_of(args[0]) if args else ANY
        return SeqShape(inner, _SEQUENCE_ORIGINS[origin])

    if origin in _MAPPING_ORIGINS:
        key, value = args if args else (str, Any)
        if key is not str:
            raise TypeError(f"Unsupported map key type {key!r}: keys must be str")
        return MapShape(shape_of(value))

    if not isinstance(tp, type):
        raise TypeError(f"Unsupported target type {tp!r}")

    if issubclass(tp, RespDeserializable):
        return CustomShape(tp)
    if issubclass(tp, enum.Enum):
        return EnumShape(tp)
    if issubclass(tp, bool):
        return BoolShape()
    if issubclass(tp, int):
        return DEFAULT_INT
    if issubclass(tp, float):
        return DEFAULT_FLOAT
    if issubclass(tp, str):
        return StrShape()
    if issubclass(tp, (bytes, bytearray)):
        return BytesShape(tp)
    if is_struct_type(tp):
        return StructShape(tp)
    if tp is tuple:
        return SeqShape(ANY, tuple)
    if tp in _SEQUENCE_ORIGINS:
        return SeqShape(ANY, _SEQUENCE_ORIGINS[tp])
    if tp in _MAPPING_ORIGINS:
        return MapShape(ANY)

    raise TypeError(f"Unsupported target type {tp!r}")


@lru_cache(maxsize=None)
def struct_fields(cls: type) -> tuple[FieldShape, ...]:
    """Fields of a struct type in declaration order."""
    if issubclass(cls, BaseModel):
        result = []
        for name, info in cls.model_fields.items():
            hint = info.annotation
            widths = [m for m in info.metadata if isinstance(m, (IntWidth, FloatWidth))]
            if widths:
                hint = Annotated[(hint, *widths)]
            result.append(
                FieldShape(
                    name=name,
                    key=info.alias or name,
                    hint=hint,
                    required=info.is_required()
                )
            )
        return tuple(result)

    hints = typing.get_type_hints(cls, include_extras=True)
    return tuple(
        FieldShape(
            name=f.name,
            key=f.name,
            hint=hints.get(f.name, Any),
            required=(
                f.default is dataclasses.MISSING
                and f.default_factory is dataclasses.MISSING
            )
        )
        for f in dataclasses.fields(cls)
        if f.init
    )
