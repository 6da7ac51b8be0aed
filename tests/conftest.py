import polars as pl
import pytest

from colbridge import BridgeConfig, HostContext
from test_utils import fake_host


@pytest.fixture
def ctx() -> HostContext:
    """Context bound to the real polars module with every capability on."""
    return HostContext(pl, BridgeConfig())


@pytest.fixture
def fake_ctx() -> HostContext:
    return HostContext(fake_host(), BridgeConfig(host_module="fake"))
