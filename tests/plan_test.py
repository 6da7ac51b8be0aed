"""Tests for the plan IR, its MessagePack form and the lazy codecs."""

import msgspec
import pytest

from colbridge import (
    BridgeConfig,
    ExprCodec,
    HostContext,
    LazyFrameCodec,
    LazyPlan,
    PlanDeserializeError,
    PlanSerializer,
    UnsupportedTypeError,
    col,
    from_host,
    lit,
    to_host,
)
from colbridge.config import LAZY
from colbridge.plan import Agg, Alias, BinaryOp, Column, Filter, Lit, Scan, Select
import test_utils as fake


def sample_plan() -> LazyPlan:
    trades = LazyPlan.scan("trades.parquet", columns=["sym", "qty", "px"])
    symbols = LazyPlan.scan("symbols.ipc", format="ipc")
    return (
        trades.filter((col("qty") > 0) & (col("px") < 100.5))
        .with_columns((col("qty") * col("px")).alias("notional"))
        .join(symbols, left_on=["sym"], how="left")
        .group_by(["sym"], col("notional").sum().alias("total"), col("qty").count())
        .sort("total", descending=True)
        .head(10)
    )


class TestBuilders:
    def test_operators_build_nodes(self):
        expr = (col("a") + 1).alias("b")
        assert expr.node == Alias(BinaryOp(Column("a"), "+", Lit(1)), "b")

    def test_comparison_builds_node_not_bool(self):
        expr = col("a") == lit("x")
        assert expr.node == BinaryOp(Column("a"), "==", Lit("x"))

    def test_aggregation(self):
        assert col("v").mean().node == Agg(Column("v"), "mean")

    def test_strings_select_columns(self):
        plan = LazyPlan.scan("f.parquet").select("a", col("b"))
        assert plan.node == Select(Scan("f.parquet"), [Column("a"), Column("b")])


class TestSerializer:
    def test_plan_round_trip(self):
        serializer = PlanSerializer()
        plan = sample_plan()
        assert serializer.deserialize_plan(serializer.serialize(plan.node)) == plan.node

    def test_expr_round_trip(self):
        serializer = PlanSerializer()
        expr = (col("a").cast("Float64", strict=False) / lit(2)).first()
        assert serializer.deserialize_expr(serializer.serialize(expr.node)) == expr.node

    def test_literal_types_survive(self):
        serializer = PlanSerializer()
        for value in (1, 1.5, "s", True, None):
            assert serializer.deserialize_expr(serializer.serialize(Lit(value))) == Lit(value)

    def test_corrupted_blob(self):
        with pytest.raises(PlanDeserializeError, match="mismatched colbridge versions") as info:
            PlanSerializer().deserialize_plan(b"\xc1\x00\x01")
        assert info.value.kind == "LazyFrame"

    def test_wrong_shape(self):
        blob = msgspec.msgpack.encode({"node": "Scan", "path": 3})
        with pytest.raises(PlanDeserializeError):
            PlanSerializer().deserialize_plan(blob)

    def test_unknown_node(self):
        blob = msgspec.msgpack.encode({"node": "Pivot"})
        with pytest.raises(PlanDeserializeError, match="Error when deserializing LazyFrame"):
            PlanSerializer().deserialize_plan(blob)

    def test_expression_blob_is_not_a_plan(self):
        serializer = PlanSerializer()
        blob = serializer.serialize(Column("a"))
        with pytest.raises(PlanDeserializeError):
            serializer.deserialize_plan(blob)
        with pytest.raises(PlanDeserializeError) as info:
            serializer.deserialize_expr(serializer.serialize(Scan("x")))
        assert info.value.kind == "Expr"

    def test_deserialize_error_is_value_error(self):
        with pytest.raises(ValueError):
            PlanSerializer().deserialize_expr(b"")


class TestLazyCodecs:
    @pytest.fixture
    def lazy_ctx(self):
        return HostContext(fake.fake_host(), BridgeConfig(host_module="fake"))

    def test_lazy_frame_restored_from_state(self, lazy_ctx):
        plan = sample_plan()
        host = LazyFrameCodec(lazy_ctx).encode(plan)
        assert isinstance(host, fake.LazyFrame)
        assert host.state == PlanSerializer().serialize(plan.node)
        assert LazyFrameCodec(lazy_ctx).decode(host).node == plan.node

    def test_expr_restored_from_state(self, lazy_ctx):
        expr = col("x").max()
        host = ExprCodec(lazy_ctx).encode(expr)
        assert isinstance(host, fake.Expr)
        assert ExprCodec(lazy_ctx).decode(host).node == expr.node

    def test_registry_dispatch(self, lazy_ctx):
        plan = LazyPlan.scan("a.parquet").filter(col("a") > 1)
        host = to_host(lazy_ctx, plan)
        assert isinstance(host, fake.LazyFrame)
        back = from_host(lazy_ctx, host)
        assert isinstance(back, LazyPlan)
        assert isinstance(back.node, Filter)

    def test_corrupted_host_state(self, lazy_ctx):
        host = fake.LazyFrame.__new__(fake.LazyFrame)
        host.__setstate__(b"\xc1")
        with pytest.raises(PlanDeserializeError):
            LazyFrameCodec(lazy_ctx).decode(host)

    def test_requires_lazy_capability(self):
        ctx = HostContext(fake.fake_host(), BridgeConfig(host_module="fake").without(LAZY))
        with pytest.raises(UnsupportedTypeError):
            LazyFrameCodec(ctx).encode(LazyPlan.scan("a.parquet"))
        with pytest.raises(UnsupportedTypeError):
            ExprCodec(ctx).encode(col("a"))
