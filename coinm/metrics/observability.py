"""Prometheus counters describing order id hygiene and request outcomes."""

from __future__ import annotations

import os
import threading

from prometheus_client import Counter

__all__ = [
    "METRICS_ENABLED",
    "ORDER_IDS_GENERATED",
    "INVALID_ORDER_IDS",
    "BATCH_REJECTIONS",
    "REQUEST_ERRORS",
    "register_client_metrics",
    "record_order_id_generated",
    "record_invalid_order_id",
    "record_batch_rejection",
    "record_request_error",
]


def _env_flag(raw: str | None, default: bool = False) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


METRICS_ENABLED: bool = _env_flag(os.getenv("COINM_METRICS_ENABLED"), True)

ORDER_IDS_GENERATED: Counter | None = None
INVALID_ORDER_IDS: Counter | None = None
BATCH_REJECTIONS: Counter | None = None
REQUEST_ERRORS: Counter | None = None

_REGISTRATION_LOCK = threading.Lock()


def register_client_metrics() -> bool:
    """Register the client counters once; return ``False`` when disabled."""

    global ORDER_IDS_GENERATED
    global INVALID_ORDER_IDS
    global BATCH_REJECTIONS
    global REQUEST_ERRORS

    if not METRICS_ENABLED:
        return False
    if (
        ORDER_IDS_GENERATED is not None
        and INVALID_ORDER_IDS is not None
        and BATCH_REJECTIONS is not None
        and REQUEST_ERRORS is not None
    ):
        return True

    with _REGISTRATION_LOCK:
        if ORDER_IDS_GENERATED is None:
            ORDER_IDS_GENERATED = Counter(
                "coinm_client_order_ids_generated_total",
                "Client order ids minted locally by category.",
                ("category",),
            )
        if INVALID_ORDER_IDS is None:
            INVALID_ORDER_IDS = Counter(
                "coinm_client_order_ids_invalid_total",
                "Caller supplied order ids without the expected prefix.",
                ("category", "field"),
            )
        if BATCH_REJECTIONS is None:
            BATCH_REJECTIONS = Counter(
                "coinm_batch_order_rejections_total",
                "Batch elements rejected by the exchange by endpoint and error code.",
                ("endpoint", "code"),
            )
        if REQUEST_ERRORS is None:
            REQUEST_ERRORS = Counter(
                "coinm_request_errors_total",
                "Failed REST calls by endpoint and reason.",
                ("endpoint", "reason"),
            )
    return True


def _label(value: object) -> str:
    text = str(value if value is not None else "").strip()
    return text or "unknown"


def record_order_id_generated(category: str) -> None:
    if not register_client_metrics():
        return
    assert ORDER_IDS_GENERATED is not None
    ORDER_IDS_GENERATED.labels(category=_label(category)).inc()


def record_invalid_order_id(category: str, field: str) -> None:
    if not register_client_metrics():
        return
    assert INVALID_ORDER_IDS is not None
    INVALID_ORDER_IDS.labels(category=_label(category), field=_label(field)).inc()


def record_batch_rejection(endpoint: str, code: int | None) -> None:
    """Count one rejected element of an otherwise successful batch call."""

    if not register_client_metrics():
        return
    assert BATCH_REJECTIONS is not None
    BATCH_REJECTIONS.labels(endpoint=_label(endpoint), code=_label(code)).inc()


def record_request_error(endpoint: str, reason: str | None) -> None:
    if not register_client_metrics():
        return
    assert REQUEST_ERRORS is not None
    reason_text = (reason or "").strip().lower() or "generic"
    REQUEST_ERRORS.labels(endpoint=_label(endpoint), reason=reason_text).inc()
