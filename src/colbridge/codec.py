"""Codec base class and registry for host conversions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .errors import UnsupportedTypeError
from .host import HostContext

# Populated automatically when HostCodec subclasses are defined
_HOST_REGISTRY: dict[str, type[HostCodec]] = {}
_NATIVE_REGISTRY: dict[type, type[HostCodec]] = {}


class HostCodec[T](ABC):
    """Converts one kind of native object to and from its host counterpart.

    Subclasses register themselves by passing `host_class` (the host class
    name they decode) and `native_type` (the native type they encode) in the
    class definition:

        class SeriesCodec(HostCodec[Series], host_class="Series", native_type=Series):
            ...
    """

    def __init_subclass__(
        cls,
        host_class: str | None = None,
        native_type: type | None = None,
        **kwargs,
    ):
        super().__init_subclass__(**kwargs)
        if host_class is not None:
            _HOST_REGISTRY[host_class] = cls
        if native_type is not None:
            _NATIVE_REGISTRY[native_type] = cls

    def __init__(self, ctx: HostContext):
        self.ctx = ctx

    @abstractmethod
    def encode(self, item: T) -> Any: ...

    @abstractmethod
    def decode(self, obj: Any) -> T: ...


def codec_for_native(ctx: HostContext, item: object) -> HostCodec:
    for klass in type(item).__mro__:
        if klass in _NATIVE_REGISTRY:
            return _NATIVE_REGISTRY[klass](ctx)
    raise UnsupportedTypeError(type(item).__name__)


def codec_for_host(ctx: HostContext, obj: object) -> HostCodec:
    for klass in type(obj).__mro__:
        if klass.__name__ in _HOST_REGISTRY:
            return _HOST_REGISTRY[klass.__name__](ctx)
    raise UnsupportedTypeError(type(obj).__name__)


def to_host(ctx: HostContext, item: object) -> Any:
    """Encode any registered native object (series, table, plan, data type)."""
    return codec_for_native(ctx, item).encode(item)


def from_host(ctx: HostContext, obj: object) -> Any:
    """Decode any registered host object.

    Host data types are classes or instances of many different classes, so
    anything not matched by class name is tried as a data type.
    """
    try:
        codec = codec_for_host(ctx, obj)
    except UnsupportedTypeError:
        from .dtype_codec import DataTypeCodec

        return DataTypeCodec(ctx).decode(obj)
    return codec.decode(obj)
