"""Exceptions raised at the native/host boundary.

Every error derives from BridgeError and from the builtin exception a caller
would expect (TypeError for unknown types, ValueError for bad values), so
glue code can surface them to the host unchanged.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for all colbridge errors."""


class UnsupportedTypeError(BridgeError, TypeError):
    """A host type identifier does not match any enabled data type."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f"'{identifier}' is not a known data type, or colbridge was configured "
            f"without the capability that enables it (see COLBRIDGE_CAPABILITIES)"
        )


class InvalidParameterError(BridgeError, ValueError):
    """A recognized type parameter has a value outside its accepted set."""


class ConversionError(BridgeError, ValueError):
    """A chunk could not be interpreted as a native array."""


class ShapeError(BridgeError, ValueError):
    """Columns of a table do not share the same length."""


class PlanDeserializeError(BridgeError, ValueError):
    """A plan or expression blob could not be decoded.

    The blob format carries no version tag, so a failure here most often
    means the producer and consumer were built from different versions.
    """

    def __init__(self, kind: str, detail: str):
        self.kind = kind
        super().__init__(
            f"Error when deserializing {kind}. "
            f"This may be due to mismatched colbridge versions. {detail}"
        )


class InternalTypeError(BridgeError, RuntimeError):
    """An internal-only or not activated variant reached the boundary.

    This is a programming error, not a data error. Callers should not try to
    recover from it.
    """


class OwnershipError(BridgeError, RuntimeError):
    """An exported chunk token was used after its transfer finished."""
