from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Awaitable, Callable, Dict, Sequence

from ..core.config import ClientConfig, load_client_config
from ..exchanges.base_rest import BinanceAPIError, CredentialsMissingError
from ..exchanges.coinm_futures import CoinMClient
from ..util.logging import setup_logging

LOGGER = logging.getLogger(__name__)

_Command = Callable[[CoinMClient, argparse.Namespace], Awaitable[Any]]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Binance COIN-M futures REST client")
    parser.add_argument(
        "--config",
        default=os.getenv("COINM_CONFIG"),
        help="YAML config file (defaults to $COINM_CONFIG)",
    )
    parser.add_argument("--testnet", action="store_true", help="route calls to the testnet")
    parser.add_argument("--log-level", default=None, help="logging level (default INFO)")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("time", help="print the exchange server time")
    sub.add_parser("ping", help="test connectivity")
    info = sub.add_parser("exchange-info", help="print exchange info")
    info.add_argument("--symbol", help="only print the entry for this symbol")
    sub.add_parser("new-order-id", help="mint a prefixed client order id")
    open_orders = sub.add_parser("open-orders", help="list open orders")
    open_orders.add_argument("--symbol", help="limit to one symbol")
    sub.add_parser("positions", help="list position risk")
    return parser


def _load_config(args: argparse.Namespace) -> ClientConfig:
    config = load_client_config(args.config) if args.config else ClientConfig()
    if args.testnet:
        config = config.model_copy(update={"testnet": True})
    return config


async def _exchange_info(client: CoinMClient, args: argparse.Namespace) -> Any:
    payload = await client.get_exchange_info()
    if not args.symbol:
        return payload
    symbol = args.symbol.upper()
    return [row for row in payload.get("symbols", []) if str(row.get("symbol")).upper() == symbol]


async def _open_orders(client: CoinMClient, args: argparse.Namespace) -> Any:
    params: Dict[str, Any] = {}
    if args.symbol:
        params["symbol"] = args.symbol.upper()
    return await client.get_all_open_orders(params)


async def _new_order_id(client: CoinMClient, args: argparse.Namespace) -> Any:
    return {"clientOrderId": client.generate_new_order_id()}


_COMMANDS: Dict[str, _Command] = {
    "time": lambda client, args: client.get_server_time(),
    "ping": lambda client, args: client.test_connectivity(),
    "exchange-info": _exchange_info,
    "new-order-id": _new_order_id,
    "open-orders": _open_orders,
    "positions": lambda client, args: client.get_positions(),
}


async def _run(config: ClientConfig, args: argparse.Namespace) -> Any:
    async with CoinMClient(config) as client:
        return await _COMMANDS[args.command](client, args)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    config = _load_config(args)
    try:
        result = asyncio.run(_run(config, args))
    except CredentialsMissingError as exc:
        LOGGER.error("%s", exc)
        return 2
    except BinanceAPIError as exc:
        LOGGER.error("request rejected: code=%s msg=%s", exc.code, exc.msg or exc)
        return 1
    sys.stdout.write(json.dumps(result, indent=2, sort_keys=True) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
