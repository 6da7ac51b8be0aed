"""Zero-copy chunk transfer over the Arrow C Data Interface.

One chunk crosses the boundary as a pair of C structs:

    struct ArrowSchema   logical type (format string, children, flags)
    struct ArrowArray    length, null count, offset, buffers, children,
                         dictionary, release callback

Both are allocated here and handed to the other side as pointer-sized
integers. Ownership rules:

    schema  copied by the receiver; the sender releases it afterwards
    array   moved to the receiver; the sender never releases it again

An ExportedChunk is the capability token for one such pair. It is borrowed
until complete() (receiver succeeded) or abort() (receiver failed) is
called, and cannot be used after that. Use exported() to get this right
for a batch of chunks:

    with exported(chunks) as tokens:
        hook(name, [t.handles for t in tokens])
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from enum import StrEnum
from typing import Any

import pyarrow as pa
from pyarrow.cffi import ffi

from .errors import ConversionError, OwnershipError

logger = logging.getLogger(__name__)


class TransferState(StrEnum):
    BORROWED = "borrowed"
    COMPLETED = "completed"
    ABORTED = "aborted"


def _address(c_struct: Any) -> int:
    return int(ffi.cast("uintptr_t", c_struct))


def _release_if_live(c_struct: Any) -> bool:
    """Call the struct's release callback unless somebody already did.

    Per the C Data Interface, release() marks the struct released by setting
    its release pointer to NULL, and a consumer that moves the struct does
    the same to the source.
    """
    if c_struct.release == ffi.NULL:
        return False
    c_struct.release(c_struct)
    return True


class ExportedChunk:
    """Borrowed (schema, array) descriptor pair for one exported chunk."""

    __slots__ = ("_c_schema", "_c_array", "_state", "length")

    def __init__(self, array: pa.Array):
        self._c_schema = ffi.new("struct ArrowSchema*")
        self._c_array = ffi.new("struct ArrowArray*")
        array._export_to_c(_address(self._c_array), _address(self._c_schema))
        self._state = TransferState.BORROWED
        self.length = len(array)

    @property
    def state(self) -> TransferState:
        return self._state

    @property
    def handles(self) -> tuple[int, int]:
        """(schema pointer, array pointer) to pass to the receiver."""
        self._check_borrowed()
        return _address(self._c_schema), _address(self._c_array)

    def complete(self) -> None:
        """The receiver imported the chunk; finish the handoff."""
        self._check_borrowed()
        _release_if_live(self._c_schema)
        # The payload belongs to the receiver now. A receiver that copied the
        # struct without nulling ours still owns the release callback, so it
        # must not be called from here.
        self._state = TransferState.COMPLETED

    def abort(self) -> None:
        """The receiver failed; release whatever it did not take."""
        self._check_borrowed()
        released_schema = _release_if_live(self._c_schema)
        released_array = _release_if_live(self._c_array)
        logger.debug(
            "Aborted chunk transfer (schema released: %s, array released: %s)",
            released_schema,
            released_array,
        )
        self._state = TransferState.ABORTED

    def _check_borrowed(self) -> None:
        if self._state is not TransferState.BORROWED:
            raise OwnershipError(f"exported chunk already {self._state.value}")

    def __repr__(self) -> str:
        return f"<ExportedChunk length={self.length} state={self._state.value}>"


@contextmanager
def exported(chunks: Iterable[pa.Array]) -> Iterator[list[ExportedChunk]]:
    """Export chunks for the duration of one receiver call.

    On normal exit every still-borrowed token is completed; if the body
    raises, every still-borrowed token is aborted.
    """
    tokens: list[ExportedChunk] = []
    try:
        for chunk in chunks:
            tokens.append(ExportedChunk(chunk))
        yield tokens
    except BaseException:
        for token in tokens:
            if token.state is TransferState.BORROWED:
                token.abort()
        raise
    for token in tokens:
        if token.state is TransferState.BORROWED:
            token.complete()


def send_chunks(import_hook: Any, name: str, chunks: Sequence[pa.Array]) -> Any:
    """Hand chunks to a host import hook taking (name, [(schema, array), ...])."""
    with exported(chunks) as tokens:
        return import_hook(name, [token.handles for token in tokens])


def import_chunk(schema_ptr: int, array_ptr: int) -> pa.Array:
    """Build an owned array from a descriptor pair.

    The array payload is moved into the result; no reference to the raw
    descriptors is kept.
    """
    try:
        return pa.Array._import_from_c(array_ptr, schema_ptr)
    except (pa.ArrowInvalid, pa.ArrowNotImplementedError, pa.ArrowTypeError) as e:
        raise ConversionError(f"could not interpret exported chunk: {e}") from e


def import_chunks(pairs: Iterable[tuple[int, int]]) -> list[pa.Array]:
    return [import_chunk(schema_ptr, array_ptr) for schema_ptr, array_ptr in pairs]


def array_from_host(obj: Any) -> pa.Array:
    """Take ownership of a host Arrow array through freshly allocated descriptors."""
    export = getattr(obj, "_export_to_c", None)
    if export is None:
        if hasattr(obj, "__arrow_c_array__"):
            # Arrow PyCapsule protocol; the capsules own their release.
            return pa.array(obj)
        raise ConversionError(
            f"cannot interpret '{type(obj).__name__}' as an arrow array: "
            f"it exposes neither _export_to_c nor __arrow_c_array__"
        )

    c_schema = ffi.new("struct ArrowSchema*")
    c_array = ffi.new("struct ArrowArray*")
    try:
        export(_address(c_array), _address(c_schema))
        return import_chunk(_address(c_schema), _address(c_array))
    finally:
        # Both are already released after a successful import; this only
        # catches a failure between export and import.
        _release_if_live(c_schema)
        _release_if_live(c_array)


def to_pyarrow(chunk: pa.Array) -> pa.Array:
    """Materialize a chunk as an independent pyarrow array (fallback path)."""
    with exported([chunk]) as (token,):
        result = import_chunk(*token.handles)
    return result
