"""Binance COIN-M futures REST bindings."""

from .base_rest import BaseRestClient, BinanceAPIError, CredentialsMissingError
from .batch import decode_batch_orders, encode_batch_orders, encode_id_list, parse_batch_response
from .coinm_futures import CoinMClient
from .results import BatchOutcome, OrderAccepted, OrderRejected

__all__ = [
    "BaseRestClient",
    "BatchOutcome",
    "BinanceAPIError",
    "CoinMClient",
    "CredentialsMissingError",
    "OrderAccepted",
    "OrderRejected",
    "decode_batch_orders",
    "encode_batch_orders",
    "encode_id_list",
    "parse_batch_response",
]
