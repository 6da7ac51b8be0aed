"""Bridge configuration.

Optional data types are switched on and off as capabilities of a
BridgeConfig, usually read from the environment:

    COLBRIDGE_HOST_MODULE=polars
    COLBRIDGE_CAPABILITIES=dtype-decimal,dtype-struct,lazy   # or "all", or ""
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

DECIMAL = "dtype-decimal"
ARRAY = "dtype-array"
STRUCT = "dtype-struct"
CATEGORICAL = "dtype-categorical"
OBJECT = "object"
LAZY = "lazy"

CAPABILITIES: frozenset[str] = frozenset({DECIMAL, ARRAY, STRUCT, CATEGORICAL, OBJECT, LAZY})

DEFAULT_HOST_MODULE = "polars"
ENV_HOST_MODULE = "COLBRIDGE_HOST_MODULE"
ENV_CAPABILITIES = "COLBRIDGE_CAPABILITIES"


def parse_capabilities(value: str) -> frozenset[str]:
    """Parse a comma separated capability list ("all" enables everything)."""
    value = value.strip()
    if value.lower() == "all":
        return CAPABILITIES
    return frozenset(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class BridgeConfig:
    """Which host module to talk to and which optional types are enabled."""

    host_module: str = DEFAULT_HOST_MODULE
    capabilities: frozenset[str] = field(default=CAPABILITIES)

    def __post_init__(self):
        if not isinstance(self.capabilities, frozenset):
            object.__setattr__(self, "capabilities", frozenset(self.capabilities))
        unknown = self.capabilities - CAPABILITIES
        if unknown:
            raise ValueError(
                f"Unknown capabilities: {sorted(unknown)}. "
                f"Available: {sorted(CAPABILITIES)}"
            )

    def enabled(self, capability: str | None) -> bool:
        """Whether a capability is on. None means "always available"."""
        return capability is None or capability in self.capabilities

    def without(self, *capabilities: str) -> BridgeConfig:
        """Return a copy with the given capabilities switched off."""
        return BridgeConfig(self.host_module, self.capabilities - set(capabilities))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BridgeConfig:
        """Build a config from COLBRIDGE_* environment variables."""
        env = os.environ if environ is None else environ
        host_module = env.get(ENV_HOST_MODULE, DEFAULT_HOST_MODULE)
        raw = env.get(ENV_CAPABILITIES)
        capabilities: Iterable[str] = CAPABILITIES if raw is None else parse_capabilities(raw)
        return cls(host_module=host_module, capabilities=frozenset(capabilities))
