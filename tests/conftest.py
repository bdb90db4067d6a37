from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from coinm.core.config import ClientConfig
from coinm.exchanges.coinm_futures import CoinMClient
from coinm.utils.identifiers import reset_order_id_prefixes
from tests.fakes.transport import RecordingTransport

_CREDENTIAL_ENV_VARS = (
    "BINANCE_COINM_API_KEY",
    "BINANCE_COINM_API_SECRET",
    "BINANCE_COINM_API_KEY_TESTNET",
    "BINANCE_COINM_API_SECRET_TESTNET",
)

TEST_API_KEY = "pytest-key"
TEST_API_SECRET = "pytest-secret"


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch):
    for name in _CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("COINM_CONFIG", raising=False)
    reset_order_id_prefixes()
    yield
    reset_order_id_prefixes()


@pytest.fixture
def make_client() -> Callable[..., tuple[CoinMClient, RecordingTransport]]:
    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        **overrides: Any,
    ) -> tuple[CoinMClient, RecordingTransport]:
        settings: dict[str, Any] = {"api_key": TEST_API_KEY, "api_secret": TEST_API_SECRET}
        settings.update(overrides)
        transport = RecordingTransport(handler)
        client = CoinMClient(ClientConfig(**settings), transport=transport)
        return client, transport

    return factory
