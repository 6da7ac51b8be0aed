"""Example: moving data between colbridge and polars.

Builds a native table, hands it to polars without copying, lets polars do
some work, and takes the result back.

Run with: python examples/roundtrip_polars.py
"""

import logging

import polars as pl

from colbridge import (
    Enum,
    HostContext,
    Series,
    Table,
    from_host,
    to_host,
)


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    ctx = HostContext.load()

    side = Enum.from_categories(["buy", "sell"])
    trades = Table(
        [
            Series.from_pylist("sym", ["AAPL", "MSFT", "AAPL", "NVDA"]),
            Series.from_pylist("side", ["buy", "sell", "sell", "buy"], side),
            Series.from_pylist("qty", [100, 50, None, 10]),
            Series.from_pylist("px", [189.5, 411.2, 190.1, 875.0]),
        ]
    )
    print(trades)

    df: pl.DataFrame = to_host(ctx, trades)
    print(df)

    summary = (
        df.with_columns((pl.col("qty") * pl.col("px")).alias("notional"))
        .group_by("sym", maintain_order=True)
        .agg(pl.col("notional").sum(), pl.col("side").first())
    )

    back: Table = from_host(ctx, summary)
    print(back)
    for column in back.get_columns():
        print(f"  {column.name:10} {column.dtype!r:40} {column.to_pylist()}")


if __name__ == "__main__":
    main()
