from __future__ import annotations

import json
from pathlib import Path

import pytest

from coinm.cli import main as cli_main
from coinm.exchanges.base_rest import BinanceAPIError
from coinm.exchanges.coinm_futures import CoinMClient


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_main, "setup_logging", lambda level=None: None)


def test_new_order_id_prints_prefixed_id(capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli_main.main(["new-order-id"])

    assert rc == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["clientOrderId"].startswith("x-15PC4ZJy")
    assert len(payload["clientOrderId"]) == 36


def test_new_order_id_uses_configured_testnet_prefix(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = tmp_path / "coinm.yaml"
    config.write_text("coinm:\n  order_ids:\n    prefixes:\n      coinmtest: DESK42\n", encoding="utf-8")

    rc = cli_main.main(["--config", str(config), "--testnet", "new-order-id"])

    assert rc == 0
    assert json.loads(capsys.readouterr().out)["clientOrderId"].startswith("x-DESK42")


def test_time_prints_server_time(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    async def fake_server_time(self: CoinMClient) -> int:
        return 1_700_000_000_000

    monkeypatch.setattr(CoinMClient, "get_server_time", fake_server_time)

    rc = cli_main.main(["time"])

    assert rc == 0
    assert json.loads(capsys.readouterr().out) == 1_700_000_000_000


def test_exchange_info_filters_symbol(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    async def fake_exchange_info(self: CoinMClient) -> dict:
        return {"symbols": [{"symbol": "BTCUSD_PERP"}, {"symbol": "ETHUSD_PERP"}]}

    monkeypatch.setattr(CoinMClient, "get_exchange_info", fake_exchange_info)

    rc = cli_main.main(["exchange-info", "--symbol", "ethusd_perp"])

    assert rc == 0
    assert json.loads(capsys.readouterr().out) == [{"symbol": "ETHUSD_PERP"}]


def test_positions_without_credentials_exits_2(capsys: pytest.CaptureFixture[str]) -> None:
    rc = cli_main.main(["positions"])

    assert rc == 2
    assert capsys.readouterr().out == ""


def test_rejected_call_exits_1(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    async def rejected(self: CoinMClient) -> dict:
        raise BinanceAPIError("rejected", code=-1003, msg="Too many requests")

    monkeypatch.setattr(CoinMClient, "test_connectivity", rejected)

    rc = cli_main.main(["ping"])

    assert rc == 1
    assert capsys.readouterr().out == ""


def test_config_path_from_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    config = tmp_path / "coinm.yaml"
    config.write_text("coinm:\n  testnet: true\n  order_ids:\n    prefixes:\n      coinmtest: ENVCFG\n")
    monkeypatch.setenv("COINM_CONFIG", str(config))

    rc = cli_main.main(["new-order-id"])

    assert rc == 0
    assert json.loads(capsys.readouterr().out)["clientOrderId"].startswith("x-ENVCFG")
