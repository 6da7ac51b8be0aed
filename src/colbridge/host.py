"""Access to the host dataframe library.

The host is only ever touched through attribute lookups and calls, so any
module exposing the expected names works. A HostContext is built once and
passed explicitly to every codec.
"""

from __future__ import annotations

import importlib
import logging
from types import ModuleType
from typing import Any

from .config import BridgeConfig
from .datatypes import NEWEST_COMPAT_LEVEL, OLDEST_COMPAT_LEVEL

logger = logging.getLogger(__name__)


class HostContext:
    """Resolved handles into the host module.

    Class lookups are memoized. Resolving the same name twice returns the same
    object, so the memo never needs to be invalidated.
    """

    def __init__(self, module: ModuleType | Any, config: BridgeConfig | None = None):
        self.module = module
        self.config = config if config is not None else BridgeConfig()
        self._classes: dict[str, Any] = {}

    @classmethod
    def load(cls, config: BridgeConfig | None = None) -> HostContext:
        """Import the configured host module and wrap it."""
        config = config if config is not None else BridgeConfig.from_env()
        try:
            module = importlib.import_module(config.host_module)
        except ModuleNotFoundError as e:
            raise ModuleNotFoundError(
                f"Could not import host module '{config.host_module}': {e}"
            ) from e
        logger.debug("Loaded host module %s", config.host_module)
        return cls(module, config)

    def cls(self, name: str) -> Any:
        """Host attribute (usually a class) by its fixed identifier."""
        try:
            return self._classes[name]
        except KeyError:
            pass
        try:
            handle = getattr(self.module, name)
        except AttributeError as e:
            module_name = getattr(self.module, "__name__", type(self.module).__name__)
            raise AttributeError(f"Host module '{module_name}' has no attribute '{name}'") from e
        self._classes[name] = handle
        return handle

    def enabled(self, capability: str | None) -> bool:
        return self.config.enabled(capability)

    def __repr__(self) -> str:
        module_name = getattr(self.module, "__name__", type(self.module).__name__)
        return f"HostContext({module_name!r})"


def find_hook(obj: Any, *names: str) -> Any | None:
    """First attribute of `obj` among `names` that exists, else None."""
    for name in names:
        attr = getattr(obj, name, None)
        if attr is not None:
            return attr
    return None


def negotiate_compat_level(obj: Any) -> int:
    """Compatibility level to export at, given a host series class or instance.

    Hosts without a `_newest_compat_level` hook get the oldest level. A host
    newer than us is clamped to the newest level we understand.
    """
    hook = find_hook(obj, "_newest_compat_level")
    if hook is None:
        logger.debug("Host has no _newest_compat_level hook, using level %d", OLDEST_COMPAT_LEVEL)
        return OLDEST_COMPAT_LEVEL
    level = int(hook())
    if level < OLDEST_COMPAT_LEVEL or level > NEWEST_COMPAT_LEVEL:
        logger.debug("Host compat level %d out of range, using %d", level, NEWEST_COMPAT_LEVEL)
        return NEWEST_COMPAT_LEVEL
    return level
