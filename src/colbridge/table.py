"""Native table of equal-length series and its host codec."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pyarrow as pa

from .codec import HostCodec
from .datatypes import OLDEST_COMPAT_LEVEL, Schema
from .errors import ConversionError, ShapeError
from .series import Series, SeriesCodec


class Table:
    """Ordered columns sharing one height.

    The first column defines the height; every other column must match it.
    Column names are not required to be unique.
    """

    def __init__(self, columns: Iterable[Series] = ()):
        columns = tuple(columns)
        height = len(columns[0]) if columns else 0
        for column in columns[1:]:
            if len(column) != height:
                raise ShapeError(
                    f"could not create a new Table: series '{column.name}' has length "
                    f"{len(column)} while series '{columns[0].name}' has length {height}"
                )
        self._columns = columns
        self._height = height

    @classmethod
    def from_pydict(cls, data: Mapping[str, Sequence[Any]]) -> Table:
        return cls(Series.from_pylist(name, values) for name, values in data.items())

    @classmethod
    def from_arrow(cls, table: pa.Table) -> Table:
        return cls(
            Series(name, table.column(i).chunks)
            if table.column(i).num_chunks
            else Series(name, [pa.array([], type=table.column(i).type)])
            for i, name in enumerate(table.column_names)
        )

    @property
    def height(self) -> int:
        return self._height

    @property
    def width(self) -> int:
        return len(self._columns)

    @property
    def columns(self) -> list[str]:
        return [column.name for column in self._columns]

    @property
    def schema(self) -> Schema:
        return Schema((column.name, column.dtype) for column in self._columns)

    def get_columns(self) -> list[Series]:
        return list(self._columns)

    def __getitem__(self, name: str) -> Series:
        for column in self._columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def __len__(self) -> int:
        return self._height

    def __repr__(self) -> str:
        return f"Table(height={self._height}, schema={self.schema!r})"

    def to_arrow(self) -> pa.Table:
        return pa.table(
            [column.rechunk().to_arrow(0, OLDEST_COMPAT_LEVEL) for column in self._columns],
            names=self.columns,
        )

    def equals(self, other: Table) -> bool:
        return self.width == other.width and all(
            a.equals(b) for a, b in zip(self._columns, other._columns)
        )


class TableCodec(HostCodec[Table], host_class="DataFrame", native_type=Table):
    """Table <-> host data frame, one SeriesCodec call per column."""

    def __init__(self, ctx):
        super().__init__(ctx)
        self.series_codec = SeriesCodec(ctx)

    def encode(self, item: Table | Sequence[Series]) -> Any:
        # Validate the shape before anything is handed to the host.
        table = item if isinstance(item, Table) else Table(item)
        columns = [self.series_codec.encode(column) for column in table.get_columns()]
        return self.ctx.cls("DataFrame")(columns)

    def decode(self, obj: Any) -> Table:
        width = int(obj.width)
        columns = [self.series_codec.decode(column) for column in obj.get_columns()]
        if len(columns) != width:
            raise ConversionError(f"data frame reports width {width} but has {len(columns)} columns")
        return Table(columns)
