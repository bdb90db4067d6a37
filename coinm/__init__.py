from __future__ import annotations

from .util.env import load_env_file

# Load `.env` once package is imported. Existing variables are preserved.
load_env_file()

from .exchanges.base_rest import BinanceAPIError, CredentialsMissingError  # noqa: E402
from .exchanges.batch import encode_batch_orders, parse_batch_response  # noqa: E402
from .exchanges.coinm_futures import CoinMClient  # noqa: E402
from .utils.identifiers import (  # noqa: E402
    generate_new_order_id,
    get_order_id_prefix,
    validate_order_id,
)

__all__ = [
    "BinanceAPIError",
    "CoinMClient",
    "CredentialsMissingError",
    "encode_batch_orders",
    "generate_new_order_id",
    "get_order_id_prefix",
    "parse_batch_response",
    "validate_order_id",
]
