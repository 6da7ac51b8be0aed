"""Example: building a deferred plan and writing it to disk.

The blob can be inspected with:

    colbridge plan plan.msgpack

Run with: python examples/lazy_plan.py
"""

from pathlib import Path

from colbridge import LazyPlan, PlanSerializer, col, lit


def build_plan() -> LazyPlan:
    trades = LazyPlan.scan("trades.parquet", columns=["sym", "qty", "px"])
    symbols = LazyPlan.scan("symbols.ipc", format="ipc")
    return (
        trades.filter((col("qty") > 0) & (col("px") < lit(1000.0)))
        .with_columns((col("qty") * col("px")).alias("notional"))
        .join(symbols, left_on=["sym"], how="left")
        .group_by(["sym", "sector"], col("notional").sum().alias("total"))
        .sort("total", descending=True)
        .head(20)
    )


def main() -> None:
    serializer = PlanSerializer()
    plan = build_plan()
    blob = serializer.serialize(plan.node)

    path = Path("plan.msgpack")
    path.write_bytes(blob)
    print(f"Wrote {len(blob)} bytes to {path}")

    assert serializer.deserialize_plan(blob) == plan.node


if __name__ == "__main__":
    main()
