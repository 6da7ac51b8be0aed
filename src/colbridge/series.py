"""Native chunked series and its host codec."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np
import pyarrow as pa

from .codec import HostCodec
from .datatypes import (
    OLDEST_COMPAT_LEVEL,
    Categorical,
    DataType,
    Enum,
    Object,
    from_arrow_type,
    to_arrow_type,
)
from .errors import ConversionError, InvalidParameterError
from .ffi import array_from_host, send_chunks, to_pyarrow
from .host import negotiate_compat_level, find_hook

logger = logging.getLogger(__name__)


class Series:
    """A name, a data type and an ordered list of Arrow chunks.

    Example:
        >>> s = Series.from_pylist("x", [1, 2, None, 4])
        >>> len(s), s.dtype, s[2]
        (4, Int64(), None)
    """

    def __init__(
        self,
        name: str,
        chunks: pa.Array | pa.ChunkedArray | Sequence[pa.Array],
        dtype: DataType | None = None,
    ):
        if isinstance(chunks, pa.ChunkedArray):
            chunks = chunks.chunks
        elif isinstance(chunks, pa.Array):
            chunks = [chunks]
        chunks = list(chunks)

        if dtype is None:
            if not chunks:
                raise ValueError(f"Series '{name}' has no chunks, pass dtype explicitly")
            dtype = from_arrow_type(chunks[0].type)
            for chunk in chunks[1:]:
                other = from_arrow_type(chunk.type)
                if other != dtype:
                    raise ConversionError(
                        f"Series '{name}' mixes chunk types {dtype!r} and {other!r}"
                    )

        self.name = name
        self.dtype = dtype
        self._chunks: tuple[pa.Array, ...] = tuple(chunks)

    @classmethod
    def from_pylist(cls, name: str, values: Iterable[Any], dtype: DataType | None = None) -> Series:
        if dtype is None:
            return cls(name, pa.array(list(values)))
        target = to_arrow_type(dtype, OLDEST_COMPAT_LEVEL)
        if isinstance(dtype, Enum):
            return cls(name, _enum_chunk(list(values), dtype, target), dtype)
        if pa.types.is_dictionary(target):
            return cls(name, _cast_chunk(pa.array(list(values), type=target.value_type), target), dtype)
        return cls(name, pa.array(list(values), type=target), dtype)

    @classmethod
    def from_numpy(cls, name: str, values: np.ndarray) -> Series:
        """Wrap a 1D numpy array. Numeric arrays are not copied."""
        if values.ndim != 1:
            raise ValueError(f"Expected a 1D array, got shape {values.shape}")
        return cls(name, pa.array(values))

    @property
    def chunks(self) -> tuple[pa.Array, ...]:
        return self._chunks

    @property
    def n_chunks(self) -> int:
        return len(self._chunks)

    @property
    def null_count(self) -> int:
        return sum(chunk.null_count for chunk in self._chunks)

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)

    def __getitem__(self, index: int) -> Any:
        length = len(self)
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError(f"index {index} out of bounds for series of length {length}")
        for chunk in self._chunks:
            if index < len(chunk):
                return chunk[index].as_py()
            index -= len(chunk)
        raise AssertionError("unreachable")

    def __repr__(self) -> str:
        return f"Series({self.name!r}, dtype={self.dtype!r}, len={len(self)}, chunks={self.n_chunks})"

    def rename(self, name: str) -> Series:
        return Series(name, self._chunks, self.dtype)

    def rechunk(self) -> Series:
        """Same values in exactly one contiguous chunk."""
        if self.n_chunks == 1:
            return self
        if not self._chunks:
            empty = pa.array([], type=to_arrow_type(self.dtype, OLDEST_COMPAT_LEVEL))
            return Series(self.name, [empty], self.dtype)
        return Series(self.name, [pa.concat_arrays(list(self._chunks))], self.dtype)

    def to_arrow(self, index: int = 0, compat_level: int = OLDEST_COMPAT_LEVEL) -> pa.Array:
        """Chunk `index` in the Arrow layout of the given compatibility level."""
        chunk = self._chunks[index]
        target = to_arrow_type(self.dtype, compat_level)
        if chunk.type == target:
            return chunk
        return _cast_chunk(chunk, target)

    def to_pylist(self) -> list[Any]:
        return [value for chunk in self._chunks for value in chunk.to_pylist()]

    def to_numpy(self) -> np.ndarray:
        return self.rechunk()._chunks[0].to_numpy(zero_copy_only=False)

    def equals(self, other: Series) -> bool:
        return (
            self.name == other.name
            and self.dtype == other.dtype
            and self.to_pylist() == other.to_pylist()
        )


def _enum_chunk(values: list[Any], dtype: Enum, target: pa.DataType) -> pa.Array:
    """Dictionary array whose codes index the Enum categories."""
    if dtype.rev_map is None:
        raise InvalidParameterError("Enum data type has no categories to encode values against")
    categories = dtype.rev_map.get_categories()
    codes = {category: code for code, category in enumerate(categories)}
    indices = []
    for value in values:
        if value is not None and value not in codes:
            raise ConversionError(f"value {value!r} is not one of the Enum categories {list(categories)}")
        indices.append(None if value is None else codes[value])
    return pa.DictionaryArray.from_arrays(
        pa.array(indices, type=target.index_type),
        pa.array(categories, type=target.value_type),
    )


def _cast_chunk(chunk: pa.Array, target: pa.DataType) -> pa.Array:
    if pa.types.is_dictionary(target):
        if not pa.types.is_dictionary(chunk.type):
            chunk = chunk.dictionary_encode()
        return pa.DictionaryArray.from_arrays(
            chunk.indices.cast(target.index_type),
            chunk.dictionary.cast(target.value_type),
        )
    try:
        return chunk.cast(target)
    except (pa.ArrowInvalid, pa.ArrowNotImplementedError) as e:
        raise ConversionError(f"cannot convert chunk of type '{chunk.type}' to '{target}': {e}") from e


class SeriesCodec(HostCodec[Series], host_class="Series", native_type=Series):
    """Series <-> host series over the zero-copy chunk bridge."""

    IMPORT_HOOKS = ("_import_arrow_from_c", "_import_from_c")

    def encode(self, item: Series) -> Any:
        series = item.rechunk()
        host_series = self.ctx.cls("Series")
        import_hook = find_hook(host_series, *self.IMPORT_HOOKS)
        if import_hook is None:
            logger.debug("Host series has no C import hook, sending '%s' via pyarrow", series.name)
            return self._encode_via_pyarrow(series)

        compat_level = negotiate_compat_level(host_series)
        chunks = [series.to_arrow(i, compat_level) for i in range(series.n_chunks)]
        result = send_chunks(import_hook, series.name, chunks)
        if isinstance(series.dtype, Enum):
            # Dictionary arrays arrive as plain categoricals.
            from .dtype_codec import DataTypeCodec

            result = result.cast(DataTypeCodec(self.ctx).encode(series.dtype))
        return result

    def _encode_via_pyarrow(self, series: Series) -> Any:
        array = to_pyarrow(series.to_arrow(0, OLDEST_COMPAT_LEVEL))
        return self.ctx.cls("from_arrow")(array).rename(series.name)

    def decode(self, obj: Any) -> Series:
        obj = obj.rechunk()
        name = str(obj.name)

        host_type = self._host_type_name(obj)
        if host_type == Object.identifier():
            raise ConversionError(
                f"cannot convert series '{name}': dtype 'Object' has no arrow representation"
            )

        kwargs = {}
        if find_hook(obj, "_newest_compat_level") is not None:
            kwargs["compat_level"] = negotiate_compat_level(obj)
        array = obj.to_arrow(**kwargs)
        if isinstance(array, pa.ChunkedArray):
            array = array.chunk(0)

        chunk = array_from_host(array)
        if host_type in (Categorical.identifier(), Enum.identifier()):
            # Categorical and Enum types carry more than their Arrow layout.
            from .dtype_codec import DataTypeCodec

            dtype = DataTypeCodec(self.ctx).decode(obj.dtype)
        else:
            dtype = from_arrow_type(chunk.type)
        return Series(name, [chunk], dtype)

    def _host_type_name(self, obj: Any) -> str | None:
        host_dtype = getattr(obj, "dtype", None)
        if host_dtype is None:
            return None
        from .dtype_codec import classify_host_type

        return classify_host_type(host_dtype).name
