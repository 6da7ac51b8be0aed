"""Tests for HostContext, compat level negotiation and codec dispatch."""

import logging

import polars as pl
import pytest

from colbridge import (
    BridgeConfig,
    DataTypeCodec,
    HostContext,
    Int64,
    List,
    Series,
    SeriesCodec,
    Table,
    TableCodec,
    UnsupportedTypeError,
    from_host,
    to_host,
)
from colbridge.codec import codec_for_host, codec_for_native
from colbridge.host import negotiate_compat_level, find_hook
import test_utils as fake


class TestHostContext:
    def test_class_lookup_is_memoized(self, fake_ctx):
        assert fake_ctx.cls("Series") is fake.Series
        fake_ctx.module.Series = object
        assert fake_ctx.cls("Series") is fake.Series

    def test_missing_name(self, fake_ctx):
        with pytest.raises(AttributeError, match="has no attribute 'Nope'"):
            fake_ctx.cls("Nope")

    def test_load(self):
        ctx = HostContext.load(BridgeConfig())
        assert ctx.module is pl
        assert repr(ctx) == "HostContext('polars')"

    def test_load_missing_module(self):
        with pytest.raises(ModuleNotFoundError, match="no_such_host_module"):
            HostContext.load(BridgeConfig(host_module="no_such_host_module"))

    def test_load_from_environment(self, monkeypatch):
        monkeypatch.setenv("COLBRIDGE_HOST_MODULE", "polars")
        monkeypatch.setenv("COLBRIDGE_CAPABILITIES", "lazy")
        ctx = HostContext.load()
        assert ctx.enabled("lazy")
        assert not ctx.enabled("object")


class TestCompatLevel:
    def test_missing_hook(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="colbridge.host"):
            assert negotiate_compat_level(fake.Series) == 0
        assert "no _newest_compat_level hook" in caplog.text

    @pytest.mark.parametrize("reported, expected", [(0, 0), (1, 1), (2, 1), (-1, 1)])
    def test_clamped(self, reported, expected):
        hooked, _ = fake.make_hooked_series(reported)
        assert negotiate_compat_level(hooked) == expected

    def test_find_hook_order(self):
        class Both:
            _import_arrow_from_c = "new"
            _import_from_c = "old"

        class OldOnly:
            _import_from_c = "old"

        assert find_hook(Both, "_import_arrow_from_c", "_import_from_c") == "new"
        assert find_hook(OldOnly, "_import_arrow_from_c", "_import_from_c") == "old"
        assert find_hook(object, "_import_arrow_from_c") is None


class TestDispatch:
    def test_codec_for_native(self, ctx):
        assert isinstance(codec_for_native(ctx, Series.from_pylist("a", [1])), SeriesCodec)
        assert isinstance(codec_for_native(ctx, Table()), TableCodec)
        assert isinstance(codec_for_native(ctx, List(Int64())), DataTypeCodec)

    def test_codec_for_host(self, ctx):
        assert isinstance(codec_for_host(ctx, pl.Series([1])), SeriesCodec)
        assert isinstance(codec_for_host(ctx, pl.DataFrame()), TableCodec)

    def test_to_host_and_back(self, ctx):
        native = Table.from_pydict({"a": [1, 2]})
        host = to_host(ctx, native)
        assert isinstance(host, pl.DataFrame)
        assert from_host(ctx, host).equals(native)

    def test_data_types_fall_through(self, ctx):
        assert from_host(ctx, pl.List(pl.Int64)) == List(Int64())
        assert to_host(ctx, Int64()) == pl.Int64

    def test_unregistered_native(self, ctx):
        with pytest.raises(UnsupportedTypeError):
            to_host(ctx, 3.14)

    def test_unregistered_host(self, ctx):
        with pytest.raises(UnsupportedTypeError, match="'dict' is not a known data type"):
            from_host(ctx, {})
