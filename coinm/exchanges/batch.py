"""Encoding of ``batchOrders`` payloads and decoding of batch responses.

The exchange expects the orders as a JSON array rendered into a single string
field, not as a native array: ``batchOrders=[{...},{...}]`` with compact
separators. At most five orders are accepted per call; that limit is left to
the exchange to enforce.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..utils.identifiers import validate_order_id
from .results import BatchOutcome, parse_batch_element

BATCH_ORDERS_FIELD = "batchOrders"
MAX_BATCH_ORDERS = 5


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def encode_batch_orders(
    orders: Iterable[Mapping[str, Any]],
    *,
    order_id_property: str | None = None,
    category: str | None = None,
    prefixes: Mapping[str, str] | None = None,
) -> Dict[str, str]:
    """Render ``orders`` into the ``batchOrders`` request field.

    When ``order_id_property`` is given, a copy of every order passes through
    :func:`validate_order_id` before it is serialised, so missing ids get
    minted and foreign ones get reported. ``prefixes`` carries per-client
    prefix overrides. The caller's mappings are never mutated. Non-ASCII
    text is kept as is, not escaped.
    """

    if order_id_property is not None and category is None:
        raise ValueError("category is required when order ids are validated")
    encoded: List[str] = []
    for order in orders:
        payload = dict(order)
        if order_id_property is not None:
            validate_order_id(payload, order_id_property, category, prefixes)
        encoded.append(_compact(payload))
    return {BATCH_ORDERS_FIELD: "[" + ",".join(encoded) + "]"}


def decode_batch_orders(value: str) -> List[Dict[str, Any]]:
    """Inverse of :func:`encode_batch_orders` for a ``batchOrders`` value."""

    orders = json.loads(value)
    if not isinstance(orders, list):
        raise ValueError("batchOrders must encode a JSON array")
    return orders


def encode_id_list(values: Iterable[Any]) -> str:
    """Render an id list for ``orderIdList``/``origClientOrderIdList``."""

    return _compact(list(values))


def parse_batch_response(raw: Sequence[Any]) -> BatchOutcome:
    """Tag each element of a batch response as accepted or rejected.

    Element ``i`` corresponds to the ``i``-th submitted order; nothing is
    reordered or dropped.
    """

    if not isinstance(raw, list):
        raise TypeError(f"batch response must be a list, got {type(raw).__name__}")
    return BatchOutcome(tuple(parse_batch_element(index, item) for index, item in enumerate(raw)))


__all__ = [
    "BATCH_ORDERS_FIELD",
    "MAX_BATCH_ORDERS",
    "decode_batch_orders",
    "encode_batch_orders",
    "encode_id_list",
    "parse_batch_response",
]
