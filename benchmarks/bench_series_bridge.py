"""Benchmarks for the zero-copy chunk bridge against the pyarrow fallback.

Run with: pytest benchmarks/ --benchmark-group-by=group
"""

from types import SimpleNamespace

import numpy as np
import polars as pl
import pytest

from colbridge import BridgeConfig, HostContext, Series, SeriesCodec, Table, TableCodec

ROWS = 1_000_000


def _fallback_ctx() -> HostContext:
    """polars with its C import hooks hidden, forcing the pyarrow path."""

    class Series:
        pass

    host = SimpleNamespace(Series=Series, from_arrow=pl.from_arrow, DataFrame=pl.DataFrame)
    return HostContext(host, BridgeConfig())


@pytest.fixture(scope="module")
def numeric() -> Series:
    return Series.from_numpy("x", np.random.rand(ROWS))


@pytest.fixture(scope="module")
def strings() -> Series:
    return Series.from_pylist("s", [f"value-{i % 1000}" for i in range(ROWS)])


@pytest.mark.benchmark(group="encode-numeric")
def test_encode_numeric_zero_copy(benchmark, numeric):
    codec = SeriesCodec(HostContext(pl))
    benchmark(codec.encode, numeric)


@pytest.mark.benchmark(group="encode-numeric")
def test_encode_numeric_fallback(benchmark, numeric):
    codec = SeriesCodec(_fallback_ctx())
    benchmark(codec.encode, numeric)


@pytest.mark.benchmark(group="encode-strings")
def test_encode_strings_zero_copy(benchmark, strings):
    codec = SeriesCodec(HostContext(pl))
    benchmark(codec.encode, strings)


@pytest.mark.benchmark(group="encode-strings")
def test_encode_strings_fallback(benchmark, strings):
    codec = SeriesCodec(_fallback_ctx())
    benchmark(codec.encode, strings)


@pytest.mark.benchmark(group="decode")
def test_decode_numeric(benchmark):
    codec = SeriesCodec(HostContext(pl))
    host = pl.Series("x", np.random.rand(ROWS))
    benchmark(codec.decode, host)


@pytest.mark.benchmark(group="decode")
def test_decode_strings(benchmark):
    codec = SeriesCodec(HostContext(pl))
    host = pl.Series("s", [f"value-{i % 1000}" for i in range(ROWS)])
    benchmark(codec.decode, host)


@pytest.mark.benchmark(group="table")
def test_table_round_trip_wide(benchmark):
    """100 narrow columns: per-column overhead dominates."""
    table = Table(Series.from_numpy(f"c{i}", np.arange(1000, dtype=np.int64)) for i in range(100))
    codec = TableCodec(HostContext(pl))

    benchmark(lambda: codec.decode(codec.encode(table)))
