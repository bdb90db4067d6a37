"""Scrub credentials out of request payloads before they reach log records."""

from __future__ import annotations

import os
from typing import Any, Iterable, Mapping, Sequence

REDACTED = "***redacted***"

# Environment variables that may carry API credentials.
_SECRET_ENV_VARS = (
    "BINANCE_COINM_API_KEY",
    "BINANCE_COINM_API_SECRET",
    "BINANCE_COINM_API_KEY_TESTNET",
    "BINANCE_COINM_API_SECRET_TESTNET",
)

# Request fields that are never logged verbatim.
_SECRET_KEYS = frozenset({"signature", "apiKey", "api_key", "api_secret", "secret"})


def _gather_secret_values(extra: Iterable[str] | None = None) -> tuple[str, ...]:
    values: list[str] = []
    for name in _SECRET_ENV_VARS:
        value = os.environ.get(name)
        if value:
            values.append(str(value))
    if extra:
        values.extend(str(item) for item in extra if item)
    return tuple(values)


def _redact_string(value: str, secrets: Sequence[str]) -> str:
    for secret in secrets:
        if secret and secret in value:
            return REDACTED
    return value


def _redact_payload(payload: Any, secrets: Sequence[str]) -> Any:
    if isinstance(payload, str):
        return _redact_string(payload, secrets)
    if isinstance(payload, Mapping):
        return {
            key: REDACTED if key in _SECRET_KEYS else _redact_payload(val, secrets)
            for key, val in payload.items()
        }
    if isinstance(payload, tuple):
        return tuple(_redact_payload(item, secrets) for item in payload)
    if isinstance(payload, list):
        return [_redact_payload(item, secrets) for item in payload]
    return payload


def redact_sensitive_data(payload: Any, *, extra_secrets: Iterable[str] | None = None) -> Any:
    """Return a copy of *payload* with secrets replaced by ``***redacted***``.

    Values of well-known secret keys (``signature``, ``apiKey``...) are always
    replaced; any other string that contains a configured credential is
    replaced as a whole.
    """

    return _redact_payload(payload, _gather_secret_values(extra_secrets))


__all__ = ["REDACTED", "redact_sensitive_data"]
