"""Tests for the native data type tree and its Arrow representation."""

import pyarrow as pa
import pytest

from colbridge import (
    Array,
    Binary,
    Categorical,
    CategoricalOrdering,
    ConversionError,
    Datetime,
    Decimal,
    Duration,
    Enum,
    Field,
    Float64,
    Int32,
    Int64,
    InvalidParameterError,
    List,
    Null,
    Object,
    Schema,
    String,
    Struct,
    TimeUnit,
    UInt64,
    Unknown,
    UnknownKind,
)
from colbridge.datatypes import from_arrow_type, to_arrow_type


class TestParameters:
    def test_time_unit_parsed_from_string(self):
        assert Datetime("ms").time_unit is TimeUnit.MILLISECONDS
        assert Duration("ns").time_unit is TimeUnit.NANOSECONDS

    def test_invalid_time_unit(self):
        with pytest.raises(InvalidParameterError, match="`time_unit` must be one of"):
            Datetime("s")

    def test_invalid_ordering(self):
        with pytest.raises(InvalidParameterError, match="invalid ordering argument: random"):
            Categorical(None, "random")

    def test_negative_array_size(self):
        with pytest.raises(InvalidParameterError):
            Array(Int64(), -1)

    def test_invalid_parameter_is_value_error(self):
        with pytest.raises(ValueError):
            TimeUnit.parse("weeks")

    def test_defaults(self):
        assert Datetime() == Datetime(TimeUnit.MICROSECONDS, None)
        assert List() == List(Null())
        assert Categorical().ordering is CategoricalOrdering.PHYSICAL

    def test_enum_from_categories(self):
        dtype = Enum.from_categories(["lo", "mid", "hi"])
        assert dtype.rev_map.get_categories() == ("lo", "mid", "hi")
        assert dtype.rev_map.code("mid") == 1
        assert len(dtype.rev_map) == 3

    def test_nested(self):
        assert List(Int64()).is_nested()
        assert Struct((Field("a", Int64()),)).is_nested()
        assert not Int64().is_nested()


class TestUnknown:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (5, Int32()),
            (2**40, Int64()),
            (2**63 + 1, UInt64()),
            (2**70, Null()),
        ],
    )
    def test_int_literal_materializes_to_smallest_fit(self, value, expected):
        assert Unknown(UnknownKind.INT, value).materialize() == expected

    def test_float_and_str(self):
        assert Unknown(UnknownKind.FLOAT).materialize() == Float64()
        assert Unknown(UnknownKind.STR).materialize() == String()

    def test_literal_values_of_every_kind(self):
        assert Unknown(UnknownKind.FLOAT, 2.5).value == 2.5
        assert Unknown(UnknownKind.STR, "x").materialize() == String()

    def test_any_stays_unknown(self):
        dtype = Unknown()
        assert dtype.materialize() is dtype


class TestSchema:
    def test_order_and_lookup(self):
        schema = Schema({"b": Int64(), "a": String()})
        assert schema.names() == ["b", "a"]
        assert schema["a"] == String()
        assert "b" in schema
        assert len(schema) == 2

    def test_duplicate_names_first_wins(self):
        schema = Schema([("x", Int64()), ("x", String())])
        assert len(schema) == 2
        assert schema["x"] == Int64()

    def test_missing_name(self):
        with pytest.raises(KeyError):
            Schema({"a": Int64()})["b"]

    def test_equality_is_ordered(self):
        assert Schema({"a": Int64(), "b": String()}) == Schema([Field("a", Int64()), Field("b", String())])
        assert Schema({"a": Int64(), "b": String()}) != Schema({"b": String(), "a": Int64()})


class TestArrowTypes:
    def test_string_layout_depends_on_compat_level(self):
        assert to_arrow_type(String(), 0) == pa.large_string()
        assert to_arrow_type(String(), 1) == pa.string_view()
        assert to_arrow_type(Binary(), 0) == pa.large_binary()
        assert to_arrow_type(Binary(), 1) == pa.binary_view()

    def test_categorical_is_dictionary(self):
        assert to_arrow_type(Categorical(), 0) == pa.dictionary(pa.uint32(), pa.large_string())
        assert to_arrow_type(Enum.from_categories(["a"]), 1) == pa.dictionary(pa.uint32(), pa.string_view())

    def test_nested_layouts(self):
        assert to_arrow_type(List(String()), 0) == pa.large_list(pa.large_string())
        assert to_arrow_type(Array(Int32(), 3)) == pa.list_(pa.int32(), 3)
        assert to_arrow_type(Struct((Field("a", Int64()),))) == pa.struct([pa.field("a", pa.int64())])

    def test_temporal_and_decimal(self):
        assert to_arrow_type(Datetime("ns", "UTC")) == pa.timestamp("ns", tz="UTC")
        assert to_arrow_type(Duration("ms")) == pa.duration("ms")
        assert to_arrow_type(Decimal(10, 2)) == pa.decimal128(10, 2)

    def test_object_has_no_arrow_layout(self):
        with pytest.raises(ConversionError):
            to_arrow_type(Object())

    @pytest.mark.parametrize(
        "arrow_type, expected",
        [
            (pa.string(), String()),
            (pa.large_string(), String()),
            (pa.string_view(), String()),
            (pa.binary_view(), Binary()),
            (pa.list_(pa.int64()), List(Int64())),
            (pa.large_list(pa.string_view()), List(String())),
            (pa.date64(), Datetime("ms")),
            (pa.timestamp("us", tz="Europe/Amsterdam"), Datetime("us", "Europe/Amsterdam")),
            (pa.dictionary(pa.int32(), pa.string()), Categorical()),
        ],
    )
    def test_every_layout_flavour_is_accepted(self, arrow_type, expected):
        assert from_arrow_type(arrow_type) == expected

    def test_second_resolution_rejected(self):
        with pytest.raises(ConversionError, match="cannot interpret arrow dtype"):
            from_arrow_type(pa.timestamp("s"))

    def test_fixed_size_binary_rejected(self):
        """Host object pointers travel as fixed-width binary and must not pass as Binary."""
        with pytest.raises(ConversionError, match="cannot interpret arrow dtype"):
            from_arrow_type(pa.binary(8))
