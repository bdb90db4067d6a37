from __future__ import annotations

import logging
from decimal import Decimal

import pytest

from coinm.exchanges.batch import (
    BATCH_ORDERS_FIELD,
    decode_batch_orders,
    encode_batch_orders,
    encode_id_list,
    parse_batch_response,
)
from coinm.exchanges.results import OrderAccepted, OrderRejected
from coinm.utils.identifiers import expected_order_id_prefix


def _order(symbol: str, client_id: str | None = None) -> dict:
    order = {"symbol": symbol, "side": "BUY", "type": "LIMIT", "quantity": "1", "price": "25000.1"}
    if client_id is not None:
        order["newClientOrderId"] = client_id
    return order


def test_framing_is_compact_and_comma_joined() -> None:
    own_id = f"{expected_order_id_prefix('coinm')}a"
    orders = [_order("BTCUSD_PERP", own_id), _order("ETHUSD_PERP", own_id)]

    request = encode_batch_orders(orders, order_id_property="newClientOrderId", category="coinm")

    body = (
        '{"symbol":"BTCUSD_PERP","side":"BUY","type":"LIMIT","quantity":"1","price":"25000.1",'
        f'"newClientOrderId":"{own_id}"}}'
    )
    other = body.replace("BTCUSD_PERP", "ETHUSD_PERP")
    assert request == {BATCH_ORDERS_FIELD: f"[{body},{other}]"}
    assert " " not in request[BATCH_ORDERS_FIELD]


def test_missing_ids_are_minted_on_copies() -> None:
    orders = [_order("BTCUSD_PERP"), _order("ETHUSD_PERP")]

    request = encode_batch_orders(orders, order_id_property="newClientOrderId", category="coinm")

    decoded = decode_batch_orders(request[BATCH_ORDERS_FIELD])
    ids = [item["newClientOrderId"] for item in decoded]
    assert all(order_id.startswith(expected_order_id_prefix("coinm")) for order_id in ids)
    assert len(set(ids)) == 2
    assert all("newClientOrderId" not in order for order in orders)


def test_foreign_id_is_serialised_unchanged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)

    request = encode_batch_orders(
        [_order("BTCUSD_PERP", "foo123")], order_id_property="newClientOrderId", category="coinm"
    )

    assert '"newClientOrderId":"foo123"' in request[BATCH_ORDERS_FIELD]
    warnings = [r for r in caplog.records if r.name == "coinm.utils.identifiers"]
    assert len(warnings) == 1
    assert expected_order_id_prefix("coinm") in warnings[0].getMessage()


def test_modification_batch_never_mints_ids() -> None:
    orders = [{"symbol": "BTCUSD_PERP", "orderId": 11, "side": "BUY", "quantity": "2", "price": "1"}]

    request = encode_batch_orders(orders)

    assert decode_batch_orders(request[BATCH_ORDERS_FIELD]) == orders
    assert "newClientOrderId" not in request[BATCH_ORDERS_FIELD]


def test_oversized_batch_is_passed_through() -> None:
    orders = [_order("BTCUSD_PERP", f"x-15PC4ZJy{index}") for index in range(7)]

    request = encode_batch_orders(orders, order_id_property="newClientOrderId", category="coinm")

    assert len(decode_batch_orders(request[BATCH_ORDERS_FIELD])) == 7


def test_decimal_values_are_rendered_as_strings() -> None:
    request = encode_batch_orders([{"symbol": "BTCUSD_PERP", "price": Decimal("0.10")}])

    assert request[BATCH_ORDERS_FIELD] == '[{"symbol":"BTCUSD_PERP","price":"0.10"}]'


def test_validation_requires_category() -> None:
    with pytest.raises(ValueError):
        encode_batch_orders([_order("BTCUSD_PERP")], order_id_property="newClientOrderId")


def test_id_lists_are_compact_json() -> None:
    assert encode_id_list([1, 2, 3]) == "[1,2,3]"
    assert encode_id_list(("x-a", "x-b")) == '["x-a","x-b"]'


def test_decode_rejects_non_array() -> None:
    with pytest.raises(ValueError):
        decode_batch_orders('{"symbol":"BTCUSD_PERP"}')


def test_mixed_response_is_tagged_in_submission_order() -> None:
    raw = [
        {"orderId": 101, "clientOrderId": "x-15PC4ZJyabc", "status": "NEW"},
        {"code": -2010, "msg": "insufficient balance"},
        {"orderId": 103, "status": "NEW"},
    ]

    outcome = parse_batch_response(raw)

    assert len(outcome) == 3
    assert isinstance(outcome.elements[0], OrderAccepted)
    assert outcome.elements[0].order_id == 101
    assert outcome.elements[0].client_order_id == "x-15PC4ZJyabc"
    assert isinstance(outcome.elements[1], OrderRejected)
    assert outcome.elements[1].code == -2010
    assert outcome.elements[1].index == 1
    assert outcome.rejected_count == 1
    assert not outcome.all_accepted
    assert [item.index for item in outcome.accepted] == [0, 2]
    assert outcome.as_dict()["rejected"] == [{"index": 1, "code": -2010, "msg": "insufficient balance"}]


def test_all_accepted_response() -> None:
    outcome = parse_batch_response([{"orderId": 1}, {"orderId": 2}])

    assert outcome.all_accepted
    assert outcome.rejected == []


def test_non_object_element_is_treated_as_rejection() -> None:
    outcome = parse_batch_response([None])

    assert isinstance(outcome.elements[0], OrderRejected)
    assert outcome.elements[0].code == 0


def test_parse_requires_list() -> None:
    with pytest.raises(TypeError):
        parse_batch_response({"code": -1102, "msg": "bad batch"})  # type: ignore[arg-type]


def test_non_ascii_text_is_not_escaped() -> None:
    request = encode_batch_orders([{"symbol": "BTCUSD_PERP", "note": "größe"}])

    assert request[BATCH_ORDERS_FIELD] == '[{"symbol":"BTCUSD_PERP","note":"größe"}]'


def test_prefix_overrides_are_used_for_minting() -> None:
    request = encode_batch_orders(
        [_order("BTCUSD_PERP")],
        order_id_property="newClientOrderId",
        category="coinm",
        prefixes={"coinm": "DESK3"},
    )

    minted = decode_batch_orders(request[BATCH_ORDERS_FIELD])[0]["newClientOrderId"]
    assert minted.startswith("x-DESK3")
    assert expected_order_id_prefix("coinm") == "x-15PC4ZJy"
