"""Typed views over order and batch responses.

Batch endpoints answer with one element per submitted order, each either an
order record or a ``{"code", "msg"}`` error record. The call itself succeeded
in both cases, so rejections are data here, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Tuple, Union


@dataclass(frozen=True)
class OrderAccepted:
    index: int
    payload: Mapping[str, Any]

    @property
    def order_id(self) -> int | None:
        value = self.payload.get("orderId")
        return int(value) if value is not None else None

    @property
    def client_order_id(self) -> str | None:
        value = self.payload.get("clientOrderId")
        return str(value) if value is not None else None

    @property
    def status(self) -> str | None:
        value = self.payload.get("status")
        return str(value) if value is not None else None


@dataclass(frozen=True)
class OrderRejected:
    index: int
    code: int
    msg: str
    payload: Mapping[str, Any]


BatchElement = Union[OrderAccepted, OrderRejected]


def is_error_record(element: Any) -> bool:
    return isinstance(element, Mapping) and "code" in element


def parse_batch_element(index: int, element: Any) -> BatchElement:
    if not isinstance(element, Mapping):
        # Anything that is not an object cannot be an order record.
        return OrderRejected(index=index, code=0, msg=f"unexpected element: {element!r}", payload={})
    if is_error_record(element):
        try:
            code = int(element.get("code"))
        except (TypeError, ValueError):
            code = 0
        return OrderRejected(index=index, code=code, msg=str(element.get("msg") or ""), payload=element)
    return OrderAccepted(index=index, payload=element)


@dataclass(frozen=True)
class BatchOutcome:
    """Result of a batch call that reached the exchange and was parsed."""

    elements: Tuple[BatchElement, ...] = ()

    def __len__(self) -> int:
        return len(self.elements)

    @property
    def accepted(self) -> List[OrderAccepted]:
        return [item for item in self.elements if isinstance(item, OrderAccepted)]

    @property
    def rejected(self) -> List[OrderRejected]:
        return [item for item in self.elements if isinstance(item, OrderRejected)]

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    @property
    def all_accepted(self) -> bool:
        return self.rejected_count == 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "total": len(self.elements),
            "accepted": [dict(item.payload) for item in self.accepted],
            "rejected": [
                {"index": item.index, "code": item.code, "msg": item.msg} for item in self.rejected
            ],
        }


__all__ = [
    "BatchElement",
    "BatchOutcome",
    "OrderAccepted",
    "OrderRejected",
    "is_error_record",
    "parse_batch_element",
]
