from .identifiers import (
    CLIENT_CATEGORIES,
    generate_new_order_id,
    get_order_id_prefix,
    log_invalid_order_id,
    validate_order_id,
)
from .redact import REDACTED, redact_sensitive_data

__all__ = [
    "CLIENT_CATEGORIES",
    "REDACTED",
    "generate_new_order_id",
    "get_order_id_prefix",
    "log_invalid_order_id",
    "redact_sensitive_data",
    "validate_order_id",
]
