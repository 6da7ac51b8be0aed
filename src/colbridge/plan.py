"""Deferred query plans and expressions, and their binary form.

Plans and expressions are not columnar data, so they cross the boundary as
a single MessagePack blob. Nodes are tagged msgspec structs; the tag is the
class name:

    >>> plan = LazyPlan.scan("trades.parquet").filter(col("qty") > 0).select(col("px"))
    >>> blob = PlanSerializer().serialize(plan.node)
    >>> PlanSerializer().deserialize_plan(blob) == plan.node
    True

The blob has no version field. A blob written by a different colbridge
version either decodes to the same tree or fails with PlanDeserializeError.
"""

from __future__ import annotations

from typing import Any, Literal, Union

import msgspec

from .codec import HostCodec
from .config import LAZY
from .errors import PlanDeserializeError, UnsupportedTypeError


class Node(msgspec.Struct, frozen=True, tag=True, tag_field="node"):
    """Base of every plan and expression node."""


# -- expressions ------------------------------------------------------------

BinaryOperator = Literal["+", "-", "*", "/", "==", "!=", "<", "<=", ">", ">=", "&", "|"]
AggFunction = Literal["sum", "mean", "min", "max", "count", "first", "last"]


class Column(Node, frozen=True):
    name: str


class Lit(Node, frozen=True):
    value: int | float | str | bool | None


class BinaryOp(Node, frozen=True):
    left: Expr
    op: BinaryOperator
    right: Expr


class Alias(Node, frozen=True):
    expr: Expr
    name: str


class Cast(Node, frozen=True):
    expr: Expr
    dtype: str
    strict: bool = True


class Agg(Node, frozen=True):
    expr: Expr
    func: AggFunction


Expr = Union[Column, Lit, BinaryOp, Alias, Cast, Agg]


# -- plans ------------------------------------------------------------------

JoinHow = Literal["inner", "left", "full", "semi", "anti", "cross"]
ScanFormat = Literal["parquet", "ipc", "csv"]


class Scan(Node, frozen=True):
    path: str
    format: ScanFormat = "parquet"
    columns: list[str] | None = None


class Select(Node, frozen=True):
    input: Plan
    exprs: list[Expr]


class WithColumns(Node, frozen=True):
    input: Plan
    exprs: list[Expr]


class Filter(Node, frozen=True):
    input: Plan
    predicate: Expr


class Sort(Node, frozen=True):
    input: Plan
    by: list[str]
    descending: bool = False


class Slice(Node, frozen=True):
    input: Plan
    offset: int
    length: int | None = None


class GroupBy(Node, frozen=True):
    input: Plan
    keys: list[str]
    aggs: list[Expr]


class Join(Node, frozen=True):
    left: Plan
    right: Plan
    left_on: list[str]
    right_on: list[str]
    how: JoinHow = "inner"


Plan = Union[Scan, Select, WithColumns, Filter, Sort, Slice, GroupBy, Join]


# -- builders ---------------------------------------------------------------


class Expression:
    """Fluent wrapper around an expression node."""

    __slots__ = ("node",)

    def __init__(self, node: Expr):
        self.node = node

    def _binary(self, op: str, other: Any) -> Expression:
        return Expression(BinaryOp(self.node, op, _to_node(other)))

    def __add__(self, other):
        return self._binary("+", other)

    def __sub__(self, other):
        return self._binary("-", other)

    def __mul__(self, other):
        return self._binary("*", other)

    def __truediv__(self, other):
        return self._binary("/", other)

    def __eq__(self, other):  # type: ignore[override]
        return self._binary("==", other)

    def __ne__(self, other):  # type: ignore[override]
        return self._binary("!=", other)

    def __lt__(self, other):
        return self._binary("<", other)

    def __le__(self, other):
        return self._binary("<=", other)

    def __gt__(self, other):
        return self._binary(">", other)

    def __ge__(self, other):
        return self._binary(">=", other)

    def __and__(self, other):
        return self._binary("&", other)

    def __or__(self, other):
        return self._binary("|", other)

    __hash__ = None  # type: ignore[assignment]

    def alias(self, name: str) -> Expression:
        return Expression(Alias(self.node, name))

    def cast(self, dtype: str, *, strict: bool = True) -> Expression:
        return Expression(Cast(self.node, dtype, strict))

    def sum(self) -> Expression:
        return Expression(Agg(self.node, "sum"))

    def mean(self) -> Expression:
        return Expression(Agg(self.node, "mean"))

    def min(self) -> Expression:
        return Expression(Agg(self.node, "min"))

    def max(self) -> Expression:
        return Expression(Agg(self.node, "max"))

    def count(self) -> Expression:
        return Expression(Agg(self.node, "count"))

    def first(self) -> Expression:
        return Expression(Agg(self.node, "first"))

    def last(self) -> Expression:
        return Expression(Agg(self.node, "last"))

    def __repr__(self) -> str:
        return f"Expression({self.node!r})"


def col(name: str) -> Expression:
    return Expression(Column(name))


def lit(value: int | float | str | bool | None) -> Expression:
    return Expression(Lit(value))


def _to_node(value: Any) -> Expr:
    if isinstance(value, Expression):
        return value.node
    return Lit(value)


def _to_nodes(exprs: tuple[Expression | str, ...]) -> list[Expr]:
    return [Column(e) if isinstance(e, str) else e.node for e in exprs]


class LazyPlan:
    """Fluent wrapper around a plan node. Nothing is executed."""

    __slots__ = ("node",)

    def __init__(self, node: Plan):
        self.node = node

    @classmethod
    def scan(cls, path: str, *, format: str = "parquet", columns: list[str] | None = None) -> LazyPlan:
        return cls(Scan(path, format, columns))

    def select(self, *exprs: Expression | str) -> LazyPlan:
        return LazyPlan(Select(self.node, _to_nodes(exprs)))

    def with_columns(self, *exprs: Expression | str) -> LazyPlan:
        return LazyPlan(WithColumns(self.node, _to_nodes(exprs)))

    def filter(self, predicate: Expression) -> LazyPlan:
        return LazyPlan(Filter(self.node, predicate.node))

    def sort(self, *by: str, descending: bool = False) -> LazyPlan:
        return LazyPlan(Sort(self.node, list(by), descending))

    def slice(self, offset: int, length: int | None = None) -> LazyPlan:
        return LazyPlan(Slice(self.node, offset, length))

    def head(self, n: int = 5) -> LazyPlan:
        return self.slice(0, n)

    def group_by(self, keys: list[str], *aggs: Expression) -> LazyPlan:
        return LazyPlan(GroupBy(self.node, list(keys), [a.node for a in aggs]))

    def join(
        self,
        other: LazyPlan,
        *,
        left_on: list[str],
        right_on: list[str] | None = None,
        how: str = "inner",
    ) -> LazyPlan:
        return LazyPlan(Join(self.node, other.node, list(left_on), list(right_on or left_on), how))

    def __repr__(self) -> str:
        return f"LazyPlan({self.node!r})"


# -- serialization ----------------------------------------------------------


class PlanSerializer:
    """MessagePack encoding of plan and expression trees."""

    def __init__(self):
        self._encoder = msgspec.msgpack.Encoder()
        self._plan_decoder = msgspec.msgpack.Decoder(Plan)
        self._expr_decoder = msgspec.msgpack.Decoder(Expr)

    def serialize(self, node: Node) -> bytes:
        return self._encoder.encode(node)

    def deserialize_plan(self, blob: bytes) -> Plan:
        try:
            return self._plan_decoder.decode(blob)
        except msgspec.DecodeError as e:
            raise PlanDeserializeError("LazyFrame", str(e)) from e

    def deserialize_expr(self, blob: bytes) -> Expr:
        try:
            return self._expr_decoder.decode(blob)
        except msgspec.DecodeError as e:
            raise PlanDeserializeError("Expr", str(e)) from e


def _restore_host_object(cls: Any, blob: bytes) -> Any:
    """Empty host placeholder with its state restored from `blob`."""
    instance = cls.__new__(cls)
    instance.__setstate__(blob)
    return instance


class _LazyCodec:
    host_name: str

    def _check_enabled(self) -> None:
        if not self.ctx.enabled(LAZY):
            raise UnsupportedTypeError(self.host_name)


class LazyFrameCodec(_LazyCodec, HostCodec[LazyPlan], host_class="LazyFrame", native_type=LazyPlan):
    """LazyPlan <-> host lazy frame through the host's pickling hooks."""

    host_name = "LazyFrame"
    serializer = PlanSerializer()

    def encode(self, item: LazyPlan) -> Any:
        self._check_enabled()
        return _restore_host_object(self.ctx.cls(self.host_name), self.serializer.serialize(item.node))

    def decode(self, obj: Any) -> LazyPlan:
        self._check_enabled()
        return LazyPlan(self.serializer.deserialize_plan(bytes(obj.__getstate__())))


class ExprCodec(_LazyCodec, HostCodec[Expression], host_class="Expr", native_type=Expression):
    """Expression <-> host expression through the host's pickling hooks."""

    host_name = "Expr"
    serializer = PlanSerializer()

    def encode(self, item: Expression) -> Any:
        self._check_enabled()
        return _restore_host_object(self.ctx.cls(self.host_name), self.serializer.serialize(item.node))

    def decode(self, obj: Any) -> Expression:
        self._check_enabled()
        return Expression(self.serializer.deserialize_expr(bytes(obj.__getstate__())))
