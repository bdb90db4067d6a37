"""Prometheus instrumentation for the COIN-M client."""

from .observability import (
    record_batch_rejection,
    record_invalid_order_id,
    record_order_id_generated,
    record_request_error,
    register_client_metrics,
)

__all__ = [
    "record_batch_rejection",
    "record_invalid_order_id",
    "record_order_id_generated",
    "record_request_error",
    "register_client_metrics",
]
