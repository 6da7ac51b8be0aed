"""Translation between native data types and host type objects.

Host data types come in two shapes: the bare class (`pl.Datetime`) and a
parameterized instance (`pl.Datetime("ms", "UTC")`). The shape is decided
once, up front, by classify_host_type(); dispatch afterwards is an exact
match on the identifier.

Bare classes decode to conservative defaults, so decode(encode(x)) == x only
holds for instances:

    pl.List      -> List(Null())
    pl.Datetime  -> Datetime("us", None)
    pl.Decimal   -> Decimal(None, None)
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any, NamedTuple

from .codec import HostCodec
from .datatypes import (
    PRIMITIVES,
    VARIANTS,
    Array,
    BinaryOffset,
    Categorical,
    CategoricalOrdering,
    DataType,
    Datetime,
    Decimal,
    Duration,
    Enum,
    Field,
    List,
    Null,
    Object,
    RevMapping,
    Schema,
    String,
    Struct,
    TimeUnit,
    Unknown,
    UnknownKind,
)
from .errors import ConversionError, InternalTypeError, InvalidParameterError, UnsupportedTypeError


class BareTypeRef(NamedTuple):
    """A host type class used without parameters."""

    name: str


class TypeInstanceRef(NamedTuple):
    """A constructed host type object carrying its parameters."""

    name: str
    obj: Any


def classify_host_type(obj: Any) -> BareTypeRef | TypeInstanceRef:
    if inspect.isclass(obj):
        return BareTypeRef(obj.__name__)
    return TypeInstanceRef(type(obj).__name__, obj)


# Defaults used when a host type class arrives without parameters.
_BARE_DEFAULTS: dict[str, Callable[[], DataType]] = {
    **PRIMITIVES,
    "Datetime": lambda: Datetime(TimeUnit.MICROSECONDS, None),
    "Duration": lambda: Duration(TimeUnit.MICROSECONDS),
    "Decimal": lambda: Decimal(None, None),
    "List": lambda: List(Null()),
    "Array": lambda: Array(Null(), 0),
    "Struct": lambda: Struct(()),
    "Categorical": lambda: Categorical(None, CategoricalOrdering.PHYSICAL),
    "Enum": lambda: Enum(None, CategoricalOrdering.PHYSICAL),
    "Object": Object,
    "Unknown": Unknown,
}


class DataTypeCodec(HostCodec[DataType], native_type=DataType):
    """Recursive DataType <-> host type object conversion."""

    def encode(self, item: DataType) -> Any:
        if isinstance(item, BinaryOffset):
            raise InternalTypeError("BinaryOffset is an internal type and is never exposed to the host")
        if isinstance(item, Unknown):
            concrete = item.materialize()
            if concrete is not item:
                return self.encode(concrete)
        if not self.ctx.enabled(item.capability):
            raise InternalTypeError(
                f"data type '{item.identifier()}' needs the '{item.capability}' capability, "
                f"which is not enabled"
            )

        name = item.identifier()
        cls = self.ctx.cls(name)

        if type(item) in PRIMITIVES.values() or isinstance(item, (Object, Unknown)):
            return cls()
        if isinstance(item, Decimal):
            return cls(item.precision, item.scale)
        if isinstance(item, Array):
            return cls(self.encode(item.inner), item.size)
        if isinstance(item, List):
            return cls(self.encode(item.inner))
        if isinstance(item, Struct):
            return cls([self.encode_field(f) for f in item.fields])
        if isinstance(item, Datetime):
            return cls(item.time_unit.value, item.time_zone)
        if isinstance(item, Duration):
            return cls(item.time_unit.value)
        if isinstance(item, Categorical):
            return cls(item.ordering.value)
        if isinstance(item, Enum):
            return cls(self._encode_categories(item))
        raise InternalTypeError(f"no host encoding for data type {item!r}")

    def decode(self, obj: Any) -> DataType:
        ref = classify_host_type(obj)
        variant = VARIANTS.get(ref.name)
        if variant is None or not self.ctx.enabled(variant.capability):
            raise UnsupportedTypeError(ref.name)
        if isinstance(ref, BareTypeRef):
            return _BARE_DEFAULTS[ref.name]()
        return self._decode_instance(ref)

    def _decode_instance(self, ref: TypeInstanceRef) -> DataType:
        name, obj = ref
        if name in PRIMITIVES:
            return PRIMITIVES[name]()
        if name == "Datetime":
            return Datetime(TimeUnit.parse(obj.time_unit), obj.time_zone)
        if name == "Duration":
            return Duration(TimeUnit.parse(obj.time_unit))
        if name == "Decimal":
            return Decimal(obj.precision, obj.scale)
        if name == "List":
            return List(self.decode(obj.inner))
        if name == "Array":
            return Array(self.decode(obj.inner), int(obj.size))
        if name == "Struct":
            return Struct(tuple(self.decode_field(f) for f in obj.fields))
        if name == "Categorical":
            ordering = getattr(obj, "ordering", None) or CategoricalOrdering.PHYSICAL
            return Categorical(None, CategoricalOrdering.parse(ordering))
        if name == "Enum":
            return Enum(self._decode_categories(obj.categories))
        if name == "Object":
            return Object()
        return Unknown(UnknownKind.ANY)

    # -- enum categories ----------------------------------------------------

    def _encode_categories(self, dtype: Enum) -> Any:
        from .series import Series, SeriesCodec

        if dtype.rev_map is None:
            raise InvalidParameterError("Enum data type has no categories to send to the host")
        categories = Series.from_pylist("category", list(dtype.rev_map.get_categories()), String())
        return SeriesCodec(self.ctx).encode(categories)

    def _decode_categories(self, host_series: Any) -> RevMapping:
        from .series import SeriesCodec

        series = SeriesCodec(self.ctx).decode(host_series)
        if not isinstance(series.dtype, String):
            raise ConversionError(f"Enum categories must be strings, got {series.dtype!r}")
        return RevMapping(tuple(series.to_pylist()))

    # -- fields and schemas -------------------------------------------------

    def encode_field(self, field: Field) -> Any:
        return self.ctx.cls("Field")(field.name, self.encode(field.dtype))

    def decode_field(self, obj: Any) -> Field:
        return Field(str(obj.name), self.decode(obj.dtype))

    def encode_schema(self, schema: Schema) -> dict[str, Any]:
        """Host schemas are keyed by column name, so names must be unique."""
        encoded: dict[str, Any] = {}
        for name, dtype in schema.items():
            if name in encoded:
                raise ConversionError(f"cannot send schema to the host: duplicate column name '{name}'")
            encoded[name] = self.encode(dtype)
        return encoded

    def decode_schema(self, obj: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> Schema:
        pairs = obj.items() if isinstance(obj, Mapping) or hasattr(obj, "items") else obj
        return Schema([(str(name), self.decode(dtype)) for name, dtype in pairs])
