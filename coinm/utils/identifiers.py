"""Client order id generation and validation.

Binance attributes order flow to a client category through a fixed
``x-<code>`` prefix on ``newClientOrderId``. Ids minted here always carry the
prefix; ids supplied by callers are checked and merely warned about when the
prefix is missing, the exchange remains the authority on what it accepts.
"""

from __future__ import annotations

import json
import logging
import random
import re
import secrets
import threading
import time
from typing import Any, Callable, Dict, Mapping, MutableMapping

from ..metrics.observability import record_invalid_order_id, record_order_id_generated
from .redact import redact_sensitive_data

LOGGER = logging.getLogger(__name__)

MAX_ORDER_ID_LENGTH = 36
MAX_PREFIX_CODE_LENGTH = 12

CLIENT_CATEGORIES = ("coinm", "coinmtest", "usdm", "usdmtest")

_DEFAULT_PREFIX_CODES: Dict[str, str] = {
    "coinm": "15PC4ZJy",
    "coinmtest": "15PC4ZJy",
    "usdm": "15PC4ZJy",
    "usdmtest": "15PC4ZJy",
}

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_COUNTER_WIDTH = 4
_COUNTER_SPAN = 36**_COUNTER_WIDTH
_TIMESTAMP_WIDTH = 8
_PREFIX_CODE_PATTERN = re.compile(rf"[.A-Z:/a-z0-9_-]{{1,{MAX_PREFIX_CODE_LENGTH}}}")

_PREFIX_LOCK = threading.Lock()
_PREFIX_CODES: Dict[str, str] = dict(_DEFAULT_PREFIX_CODES)


def _base36(value: int, width: int) -> str:
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)).rjust(width, "0")


class OrderIdSource:
    """Process-wide source of collision-free order id suffixes.

    A suffix is ``<ms timestamp><counter><entropy>``. The counter is bumped
    under a lock on every call, so two ids minted in the same millisecond
    still differ; the entropy keeps separate processes apart. The module owns
    a single instance created at import time, see :func:`reset_order_id_source`.
    """

    def __init__(self, *, seed: int | None = None, clock: Callable[[], float] | None = None) -> None:
        self._seed = seed if seed is not None else secrets.randbits(64)
        self._clock = clock or time.time
        self._rng = random.Random(self._seed)
        self._counter = self._seed % _COUNTER_SPAN
        self._lock = threading.Lock()

    @property
    def seed(self) -> int:
        return self._seed

    def next_suffix(self, length: int) -> str:
        if length <= _TIMESTAMP_WIDTH + _COUNTER_WIDTH:
            raise ValueError("order id suffix too short to stay unique")
        with self._lock:
            self._counter = (self._counter + 1) % _COUNTER_SPAN
            counter = self._counter
            entropy = self._rng.getrandbits(64)
        ts_ms = int(self._clock() * 1000)
        suffix = _base36(ts_ms, _TIMESTAMP_WIDTH)[-_TIMESTAMP_WIDTH:]
        suffix += _base36(counter, _COUNTER_WIDTH)
        suffix += f"{entropy:016x}"
        return suffix[:length]


_SOURCE = OrderIdSource()


def reset_order_id_source(
    *, seed: int | None = None, clock: Callable[[], float] | None = None
) -> OrderIdSource:
    """Replace the process-wide id source; intended for tests."""

    global _SOURCE
    _SOURCE = OrderIdSource(seed=seed, clock=clock)
    return _SOURCE


def check_prefix_code(category: str, code: str) -> str:
    """Return ``code`` stripped, or raise ``ValueError`` if it cannot prefix an id."""

    if category not in CLIENT_CATEGORIES:
        raise ValueError(f"unknown client category: {category!r}")
    code = str(code or "").strip()
    if not _PREFIX_CODE_PATTERN.fullmatch(code):
        raise ValueError(
            f"prefix code must be 1-{MAX_PREFIX_CODE_LENGTH} characters from [.A-Z:/a-z0-9_-], got {code!r}"
        )
    return code


def register_order_id_prefix(category: str, code: str) -> None:
    """Override the process-wide prefix code assigned to ``category``."""

    code = check_prefix_code(category, code)
    with _PREFIX_LOCK:
        _PREFIX_CODES[category] = code


def reset_order_id_prefixes() -> None:
    with _PREFIX_LOCK:
        _PREFIX_CODES.clear()
        _PREFIX_CODES.update(_DEFAULT_PREFIX_CODES)


def get_order_id_prefix(category: str, prefixes: Mapping[str, str] | None = None) -> str:
    """Prefix code for ``category``; ``prefixes`` overrides the process-wide table."""

    if category not in CLIENT_CATEGORIES:
        raise ValueError(f"unknown client category: {category!r}")
    if prefixes and category in prefixes:
        return prefixes[category]
    return _PREFIX_CODES[category]


def expected_order_id_prefix(category: str, prefixes: Mapping[str, str] | None = None) -> str:
    return f"x-{get_order_id_prefix(category, prefixes)}"


def generate_new_order_id(category: str, prefixes: Mapping[str, str] | None = None) -> str:
    """Mint a fresh, prefixed client order id for ``category``."""

    prefix = expected_order_id_prefix(category, prefixes)
    order_id = prefix + _SOURCE.next_suffix(MAX_ORDER_ID_LENGTH - len(prefix))
    record_order_id_generated(category)
    return order_id


def log_invalid_order_id(
    order_id_property: str,
    expected_prefix: str,
    params: Mapping[str, Any],
) -> None:
    payload = redact_sensitive_data(dict(params))
    LOGGER.warning(
        "'%s' invalid - it should be prefixed with %s. Use generate_new_order_id() "
        "to mint a valid id on demand. Original request: %s",
        order_id_property,
        expected_prefix,
        json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str),
        extra={"order_id_property": order_id_property, "expected_prefix": expected_prefix},
    )


def validate_order_id(
    params: MutableMapping[str, Any],
    order_id_property: str,
    category: str,
    prefixes: Mapping[str, str] | None = None,
) -> None:
    """Fill in a missing client order id or warn about a foreign one.

    ``params`` is mutated only when the id is absent or empty. A present id
    without the category prefix is left untouched and reported through
    :func:`log_invalid_order_id`. ``prefixes`` carries per-client overrides
    and is consulted before the process-wide table.
    """

    current = params.get(order_id_property)
    if not current:
        params[order_id_property] = generate_new_order_id(category, prefixes)
        return

    expected_prefix = expected_order_id_prefix(category, prefixes)
    if not str(current).startswith(expected_prefix):
        record_invalid_order_id(category, order_id_property)
        log_invalid_order_id(order_id_property, expected_prefix, params)


__all__ = [
    "CLIENT_CATEGORIES",
    "MAX_ORDER_ID_LENGTH",
    "OrderIdSource",
    "check_prefix_code",
    "expected_order_id_prefix",
    "generate_new_order_id",
    "get_order_id_prefix",
    "log_invalid_order_id",
    "register_order_id_prefix",
    "reset_order_id_prefixes",
    "reset_order_id_source",
    "validate_order_id",
]
