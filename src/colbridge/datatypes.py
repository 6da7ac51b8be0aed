"""Native data type tree.

DataType is a closed set of frozen dataclasses. Every variant is always
defined; variants tied to an optional capability carry it in `capability`
and the codecs refuse them when the capability is off.

Each variant also knows its Arrow representation, which is what actually
crosses the boundary for series data. The representation of string-like
data depends on the negotiated compatibility level:

    level 0 (oldest): large_string / large_binary
    level 1 (newest): string_view / binary_view
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar

import pyarrow as pa

from . import config
from .errors import ConversionError, InvalidParameterError

OLDEST_COMPAT_LEVEL = 0
NEWEST_COMPAT_LEVEL = 1


class TimeUnit(StrEnum):
    NANOSECONDS = "ns"
    MICROSECONDS = "us"
    MILLISECONDS = "ms"

    @classmethod
    def parse(cls, value: str | TimeUnit) -> TimeUnit:
        try:
            return cls(value)
        except ValueError:
            raise InvalidParameterError(
                f"`time_unit` must be one of {{'ns', 'us', 'ms'}}, got {value}"
            ) from None


class CategoricalOrdering(StrEnum):
    PHYSICAL = "physical"
    LEXICAL = "lexical"

    @classmethod
    def parse(cls, value: str | CategoricalOrdering) -> CategoricalOrdering:
        try:
            return cls(value)
        except ValueError:
            raise InvalidParameterError(f"invalid ordering argument: {value}") from None


class UnknownKind(StrEnum):
    ANY = "any"
    INT = "int"
    FLOAT = "float"
    STR = "str"


class DataType:
    """Base class of all native data types."""

    capability: ClassVar[str | None] = None

    @classmethod
    def identifier(cls) -> str:
        """Name shared with the host's type class."""
        return cls.__name__

    def is_nested(self) -> bool:
        return False

    def __str__(self) -> str:
        return repr(self)


@dataclass(frozen=True)
class Int8(DataType):
    pass


@dataclass(frozen=True)
class Int16(DataType):
    pass


@dataclass(frozen=True)
class Int32(DataType):
    pass


@dataclass(frozen=True)
class Int64(DataType):
    pass


@dataclass(frozen=True)
class UInt8(DataType):
    pass


@dataclass(frozen=True)
class UInt16(DataType):
    pass


@dataclass(frozen=True)
class UInt32(DataType):
    pass


@dataclass(frozen=True)
class UInt64(DataType):
    pass


@dataclass(frozen=True)
class Float32(DataType):
    pass


@dataclass(frozen=True)
class Float64(DataType):
    pass


@dataclass(frozen=True)
class Boolean(DataType):
    pass


@dataclass(frozen=True)
class String(DataType):
    pass


@dataclass(frozen=True)
class Binary(DataType):
    pass


@dataclass(frozen=True)
class BinaryOffset(DataType):
    """Binary data with 64-bit offsets. Internal only, never exposed to a host."""


@dataclass(frozen=True)
class Null(DataType):
    pass


@dataclass(frozen=True)
class Date(DataType):
    pass


@dataclass(frozen=True)
class Time(DataType):
    pass


@dataclass(frozen=True)
class Datetime(DataType):
    time_unit: TimeUnit = TimeUnit.MICROSECONDS
    time_zone: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "time_unit", TimeUnit.parse(self.time_unit))


@dataclass(frozen=True)
class Duration(DataType):
    time_unit: TimeUnit = TimeUnit.MICROSECONDS

    def __post_init__(self):
        object.__setattr__(self, "time_unit", TimeUnit.parse(self.time_unit))


@dataclass(frozen=True)
class Decimal(DataType):
    capability: ClassVar[str | None] = config.DECIMAL

    precision: int | None = None
    scale: int | None = None


@dataclass(frozen=True)
class List(DataType):
    inner: DataType = field(default_factory=Null)

    def is_nested(self) -> bool:
        return True


@dataclass(frozen=True)
class Array(DataType):
    """Fixed-size list."""

    capability: ClassVar[str | None] = config.ARRAY

    inner: DataType = field(default_factory=Null)
    size: int = 0

    def __post_init__(self):
        if self.size < 0:
            raise InvalidParameterError(f"Array size must be non-negative, got {self.size}")

    def is_nested(self) -> bool:
        return True


@dataclass(frozen=True)
class Field:
    """A named data type, the element of structs and schemas."""

    name: str
    dtype: DataType


@dataclass(frozen=True)
class Struct(DataType):
    capability: ClassVar[str | None] = config.STRUCT

    fields: tuple[Field, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))

    def is_nested(self) -> bool:
        return True


@dataclass(frozen=True)
class RevMapping:
    """Reverse mapping of a categorical: physical code -> category string."""

    categories: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "categories", tuple(self.categories))

    def __len__(self) -> int:
        return len(self.categories)

    def get_categories(self) -> tuple[str, ...]:
        return self.categories

    def code(self, category: str) -> int:
        return self.categories.index(category)


@dataclass(frozen=True)
class Categorical(DataType):
    capability: ClassVar[str | None] = config.CATEGORICAL

    rev_map: RevMapping | None = None
    ordering: CategoricalOrdering = CategoricalOrdering.PHYSICAL

    def __post_init__(self):
        object.__setattr__(self, "ordering", CategoricalOrdering.parse(self.ordering))


@dataclass(frozen=True)
class Enum(DataType):
    capability: ClassVar[str | None] = config.CATEGORICAL

    rev_map: RevMapping | None = None
    ordering: CategoricalOrdering = CategoricalOrdering.PHYSICAL

    def __post_init__(self):
        object.__setattr__(self, "ordering", CategoricalOrdering.parse(self.ordering))

    @classmethod
    def from_categories(cls, categories: Iterable[str]) -> Enum:
        return cls(RevMapping(tuple(categories)))


@dataclass(frozen=True)
class Object(DataType):
    """Opaque host objects. Data never crosses the boundary, only the type."""

    capability: ClassVar[str | None] = config.OBJECT


@dataclass(frozen=True)
class Unknown(DataType):
    """Placeholder for a type not yet decided, e.g. a dynamic literal."""

    kind: UnknownKind = UnknownKind.ANY
    value: int | float | str | None = None

    def materialize(self) -> DataType:
        """Pick the concrete type this placeholder stands for."""
        if self.kind == UnknownKind.INT:
            return _smallest_int_type(int(self.value or 0))
        if self.kind == UnknownKind.FLOAT:
            return Float64()
        if self.kind == UnknownKind.STR:
            return String()
        return self


def _smallest_int_type(value: int) -> DataType:
    if -(2**31) <= value < 2**31:
        return Int32()
    if -(2**63) <= value < 2**63:
        return Int64()
    if 0 <= value < 2**64:
        return UInt64()
    return Null()


# Variants without parameters, by identifier.
PRIMITIVES: dict[str, type[DataType]] = {
    cls.__name__: cls
    for cls in (
        Int8, Int16, Int32, Int64, UInt8, UInt16, UInt32, UInt64,
        Float32, Float64, Boolean, String, Binary, Null, Date, Time,
    )
}

# Every variant that may appear at the boundary.
VARIANTS: dict[str, type[DataType]] = {
    **PRIMITIVES,
    **{
        cls.__name__: cls
        for cls in (
            Datetime, Duration, Decimal, List, Array, Struct,
            Categorical, Enum, Object, Unknown,
        )
    },
}


class Schema:
    """Ordered column name -> data type mapping.

    Names are not required to be unique; lookup returns the first match.
    """

    def __init__(self, fields: Mapping[str, DataType] | Iterable[Field | tuple[str, DataType]] = ()):
        if isinstance(fields, Mapping):
            fields = fields.items()
        self._fields: tuple[Field, ...] = tuple(
            f if isinstance(f, Field) else Field(f[0], f[1]) for f in fields
        )

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[str]:
        return (f.name for f in self._fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self._fields)

    def __getitem__(self, name: str) -> DataType:
        for f in self._fields:
            if f.name == name:
                return f.dtype
        raise KeyError(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        inner = ", ".join(f"{f.name!r}: {f.dtype!r}" for f in self._fields)
        return f"Schema({{{inner}}})"

    def names(self) -> list[str]:
        return [f.name for f in self._fields]

    def dtypes(self) -> list[DataType]:
        return [f.dtype for f in self._fields]

    def items(self) -> list[tuple[str, DataType]]:
        return [(f.name, f.dtype) for f in self._fields]

    def fields(self) -> tuple[Field, ...]:
        return self._fields


# -- Arrow representation ---------------------------------------------------

_ARROW_PRIMITIVES: dict[type[DataType], pa.DataType] = {
    Int8: pa.int8(),
    Int16: pa.int16(),
    Int32: pa.int32(),
    Int64: pa.int64(),
    UInt8: pa.uint8(),
    UInt16: pa.uint16(),
    UInt32: pa.uint32(),
    UInt64: pa.uint64(),
    Float32: pa.float32(),
    Float64: pa.float64(),
    Boolean: pa.bool_(),
    Null: pa.null(),
    Date: pa.date32(),
    Time: pa.time64("ns"),
}


def _string_type(compat_level: int) -> pa.DataType:
    return pa.large_string() if compat_level <= OLDEST_COMPAT_LEVEL else pa.string_view()


def _binary_type(compat_level: int) -> pa.DataType:
    return pa.large_binary() if compat_level <= OLDEST_COMPAT_LEVEL else pa.binary_view()


def to_arrow_type(dtype: DataType, compat_level: int = NEWEST_COMPAT_LEVEL) -> pa.DataType:
    """Arrow type used to carry `dtype` at the given compatibility level."""
    if type(dtype) in _ARROW_PRIMITIVES:
        return _ARROW_PRIMITIVES[type(dtype)]
    if isinstance(dtype, String):
        return _string_type(compat_level)
    if isinstance(dtype, (Binary, BinaryOffset)):
        return _binary_type(compat_level)
    if isinstance(dtype, Datetime):
        return pa.timestamp(dtype.time_unit.value, tz=dtype.time_zone)
    if isinstance(dtype, Duration):
        return pa.duration(dtype.time_unit.value)
    if isinstance(dtype, Decimal):
        precision = 38 if dtype.precision is None else dtype.precision
        return pa.decimal128(precision, dtype.scale or 0)
    if isinstance(dtype, List):
        return pa.large_list(to_arrow_type(dtype.inner, compat_level))
    if isinstance(dtype, Array):
        return pa.list_(to_arrow_type(dtype.inner, compat_level), dtype.size)
    if isinstance(dtype, Struct):
        return pa.struct(
            [pa.field(f.name, to_arrow_type(f.dtype, compat_level)) for f in dtype.fields]
        )
    if isinstance(dtype, (Categorical, Enum)):
        return pa.dictionary(pa.uint32(), _string_type(compat_level))
    if isinstance(dtype, Unknown) and dtype.kind != UnknownKind.ANY:
        return to_arrow_type(dtype.materialize(), compat_level)
    raise ConversionError(f"data type {dtype!r} has no arrow representation")


def _is_string_like(arrow_type: pa.DataType) -> bool:
    return (
        pa.types.is_string(arrow_type)
        or pa.types.is_large_string(arrow_type)
        or pa.types.is_string_view(arrow_type)
    )


def from_arrow_type(arrow_type: pa.DataType) -> DataType:
    """Native data type for an Arrow type, accepting every layout flavour."""
    for cls, candidate in _ARROW_PRIMITIVES.items():
        if arrow_type == candidate:
            return cls()
    if _is_string_like(arrow_type):
        return String()
    if (
        pa.types.is_binary(arrow_type)
        or pa.types.is_large_binary(arrow_type)
        or pa.types.is_binary_view(arrow_type)
    ):
        return Binary()
    if pa.types.is_time(arrow_type):
        return Time()
    if pa.types.is_date64(arrow_type):
        return Datetime(TimeUnit.MILLISECONDS)
    if pa.types.is_timestamp(arrow_type) and arrow_type.unit != "s":
        return Datetime(TimeUnit(arrow_type.unit), arrow_type.tz)
    if pa.types.is_duration(arrow_type) and arrow_type.unit != "s":
        return Duration(TimeUnit(arrow_type.unit))
    if pa.types.is_decimal(arrow_type):
        return Decimal(arrow_type.precision, arrow_type.scale)
    if (
        pa.types.is_list(arrow_type)
        or pa.types.is_large_list(arrow_type)
        or pa.types.is_list_view(arrow_type)
        or pa.types.is_large_list_view(arrow_type)
    ):
        return List(from_arrow_type(arrow_type.value_type))
    if pa.types.is_fixed_size_list(arrow_type):
        return Array(from_arrow_type(arrow_type.value_type), arrow_type.list_size)
    if pa.types.is_struct(arrow_type):
        return Struct(
            tuple(
                Field(arrow_type.field(i).name, from_arrow_type(arrow_type.field(i).type))
                for i in range(arrow_type.num_fields)
            )
        )
    if pa.types.is_dictionary(arrow_type) and _is_string_like(arrow_type.value_type):
        return Categorical()
    raise ConversionError(f"cannot interpret arrow dtype '{arrow_type}' as a native data type")
