"""Binance COIN-M futures (``dapi``) REST client."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping

import httpx

from ..core.config import ClientConfig
from ..metrics.observability import record_batch_rejection
from ..utils.identifiers import generate_new_order_id, validate_order_id
from . import endpoints as ep
from .base_rest import BaseRestClient
from .batch import encode_batch_orders, encode_id_list
from .endpoints import Endpoint
from .results import is_error_record


LOGGER = logging.getLogger(__name__)


def _as_list(payload: Any) -> List[Any]:
    return payload if isinstance(payload, list) else [payload]


def _without_none(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


class CoinMClient(BaseRestClient):
    """REST client for Binance COIN-margined futures.

    Calls that place orders run the client order id through
    :func:`~coinm.utils.identifiers.validate_order_id` first. Batch calls never
    raise for rejected elements: the response list is returned as-is, see
    :func:`~coinm.exchanges.batch.parse_batch_response`.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        testnet: bool | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config = config or ClientConfig()
        if testnet is not None and testnet != config.testnet:
            config = config.model_copy(update={"testnet": testnet})
        self.config = config
        self.category = config.category
        self.order_id_prefixes: Dict[str, str] = dict(config.order_ids.prefixes)
        api_key, api_secret = config.resolved_credentials()
        super().__init__(
            base_url=config.resolved_base_url(),
            api_key=api_key,
            api_secret=api_secret,
            recv_window=config.recv_window,
            timeout=config.timeout,
            sync_time=config.sync_time,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    async def _call(self, endpoint: Endpoint, params: MutableMapping[str, Any] | None = None) -> Any:
        if params is None:
            params = {}
        if endpoint.mints_order_id and not endpoint.batch:
            validate_order_id(params, endpoint.mints_order_id, self.category, self.order_id_prefixes)
        return await self._request(endpoint.method, endpoint.path, params=params, signed=endpoint.signed)

    async def _call_batch(self, endpoint: Endpoint, params: MutableMapping[str, Any]) -> List[Any]:
        response = await self._call(endpoint, params)
        if isinstance(response, list):
            rejected = [item for item in response if is_error_record(item)]
            for item in rejected:
                record_batch_rejection(endpoint.name, item.get("code"))
            if rejected:
                LOGGER.info(
                    "batch call partially rejected",
                    extra={
                        "endpoint": endpoint.name,
                        "total": len(response),
                        "rejected": len(rejected),
                    },
                )
        return response

    def generate_new_order_id(self) -> str:
        return generate_new_order_id(self.category, self.order_id_prefixes)

    async def get_server_time(self) -> int:
        payload = await self._call(ep.SERVER_TIME)
        return int(payload["serverTime"])

    # ------------------------------------------------------------------
    # Market data
    # ------------------------------------------------------------------
    async def test_connectivity(self) -> Dict[str, Any]:
        return await self._call(ep.PING)

    async def get_exchange_info(self) -> Dict[str, Any]:
        return await self._call(ep.EXCHANGE_INFO)

    async def get_order_book(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.ORDER_BOOK, params)

    async def get_recent_trades(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.RECENT_TRADES, params)

    async def get_historical_trades(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.HISTORICAL_TRADES, params)

    async def get_aggregate_trades(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.AGGREGATE_TRADES, params)

    async def get_mark_price(self, params: MutableMapping[str, Any] | None = None) -> Any:
        """Index and mark price; a list unless ``symbol`` is given."""

        return await self._call(ep.MARK_PRICE, params)

    async def get_funding_rate_history(
        self, params: MutableMapping[str, Any] | None = None
    ) -> List[Dict[str, Any]]:
        return await self._call(ep.FUNDING_RATE_HISTORY, params)

    async def get_klines(self, params: MutableMapping[str, Any]) -> List[List[Any]]:
        return await self._call(ep.KLINES, params)

    async def get_continuous_contract_klines(self, params: MutableMapping[str, Any]) -> List[List[Any]]:
        return await self._call(ep.CONTINUOUS_KLINES, params)

    async def get_index_price_klines(self, params: MutableMapping[str, Any]) -> List[List[Any]]:
        return await self._call(ep.INDEX_PRICE_KLINES, params)

    async def get_mark_price_klines(self, params: MutableMapping[str, Any]) -> List[List[Any]]:
        return await self._call(ep.MARK_PRICE_KLINES, params)

    async def get_24hr_change_statistics(self, params: MutableMapping[str, Any] | None = None) -> Any:
        return await self._call(ep.TICKER_24HR, params)

    async def get_symbol_price_ticker(self, params: MutableMapping[str, Any] | None = None) -> Any:
        return await self._call(ep.TICKER_PRICE, params)

    async def get_symbol_order_book_ticker(
        self, params: MutableMapping[str, Any] | None = None
    ) -> List[Dict[str, Any]]:
        return _as_list(await self._call(ep.BOOK_TICKER, params))

    async def get_open_interest(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.OPEN_INTEREST, params)

    async def get_open_interest_statistics(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.OPEN_INTEREST_HIST, params)

    async def get_top_traders_long_short_account_ratio(
        self, params: MutableMapping[str, Any]
    ) -> List[Dict[str, Any]]:
        return await self._call(ep.TOP_LONG_SHORT_ACCOUNT_RATIO, params)

    async def get_top_traders_long_short_position_ratio(
        self, params: MutableMapping[str, Any]
    ) -> List[Dict[str, Any]]:
        return await self._call(ep.TOP_LONG_SHORT_POSITION_RATIO, params)

    async def get_global_long_short_account_ratio(
        self, params: MutableMapping[str, Any]
    ) -> List[Dict[str, Any]]:
        return await self._call(ep.GLOBAL_LONG_SHORT_ACCOUNT_RATIO, params)

    async def get_taker_buy_sell_volume(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.TAKER_BUY_SELL_VOLUME, params)

    async def get_composite_symbol_index(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.BASIS, params)

    # ------------------------------------------------------------------
    # Account / trade
    # ------------------------------------------------------------------
    async def set_position_mode(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.POSITION_MODE_SET, params)

    async def get_current_position_mode(self) -> Dict[str, Any]:
        return await self._call(ep.POSITION_MODE_GET)

    async def submit_new_order(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        """Place one order.

        ``params`` is updated in place with a generated ``newClientOrderId``
        when it carries none.
        """

        return await self._call(ep.NEW_ORDER, params)

    async def modify_order(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        """Modify a LIMIT order; modified orders are requeued by the matcher."""

        return await self._call(ep.MODIFY_ORDER, params)

    async def submit_multiple_orders(self, orders: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Place up to five orders in one call.

        Prices and quantities are best passed as strings. Rejected orders come
        back as ``{"code", "msg"}`` elements at their submission index.
        """

        request = encode_batch_orders(
            orders,
            order_id_property=ep.BATCH_NEW_ORDERS.mints_order_id,
            category=self.category,
            prefixes=self.order_id_prefixes,
        )
        return await self._call_batch(ep.BATCH_NEW_ORDERS, request)

    async def modify_multiple_orders(self, orders: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        return await self._call_batch(ep.BATCH_MODIFY_ORDERS, encode_batch_orders(orders))

    async def get_order_modify_history(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.ORDER_AMENDMENT, params)

    async def get_order(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.GET_ORDER, params)

    async def cancel_order(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.CANCEL_ORDER, params)

    async def cancel_all_open_orders(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.CANCEL_ALL_OPEN_ORDERS, params)

    async def cancel_multiple_orders(self, params: Mapping[str, Any]) -> List[Dict[str, Any]]:
        request = dict(params)
        for key in ("orderIdList", "origClientOrderIdList"):
            value = request.get(key)
            if value is not None and not isinstance(value, str):
                request[key] = encode_id_list(value)
        return await self._call_batch(ep.BATCH_CANCEL_ORDERS, request)

    async def set_cancel_orders_on_timeout(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.COUNTDOWN_CANCEL_ALL, params)

    async def get_current_open_order(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.OPEN_ORDER, params)

    async def get_all_open_orders(self, params: MutableMapping[str, Any] | None = None) -> List[Dict[str, Any]]:
        return await self._call(ep.OPEN_ORDERS, params)

    async def get_all_orders(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.ALL_ORDERS, params)

    async def get_balance(self) -> List[Dict[str, Any]]:
        return await self._call(ep.BALANCE)

    async def get_account_information(self) -> Dict[str, Any]:
        return await self._call(ep.ACCOUNT)

    async def set_leverage(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.LEVERAGE, params)

    async def set_margin_type(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.MARGIN_TYPE, params)

    async def set_isolated_position_margin(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.POSITION_MARGIN, params)

    async def get_position_margin_change_history(
        self, params: MutableMapping[str, Any]
    ) -> List[Dict[str, Any]]:
        return await self._call(ep.POSITION_MARGIN_HISTORY, params)

    async def get_positions(self) -> List[Dict[str, Any]]:
        return await self._call(ep.POSITION_RISK)

    async def get_account_trades(self, params: MutableMapping[str, Any]) -> List[Dict[str, Any]]:
        return await self._call(ep.USER_TRADES, params)

    async def get_income_history(self, params: MutableMapping[str, Any] | None = None) -> List[Dict[str, Any]]:
        return await self._call(ep.INCOME, params)

    async def get_notional_and_leverage_brackets(self, params: MutableMapping[str, Any] | None = None) -> Any:
        """Brackets per symbol (not per pair)."""

        return await self._call(ep.LEVERAGE_BRACKET, params)

    async def get_force_orders(self, params: MutableMapping[str, Any] | None = None) -> List[Dict[str, Any]]:
        return await self._call(ep.FORCE_ORDERS, params)

    async def get_adl_quantile_estimation(self, params: MutableMapping[str, Any] | None = None) -> Any:
        return await self._call(ep.ADL_QUANTILE, params)

    async def get_account_commission_rate(self, params: MutableMapping[str, Any]) -> Dict[str, Any]:
        return await self._call(ep.COMMISSION_RATE, params)

    # ------------------------------------------------------------------
    # Broker referral (type 1 = USDT-margined, 2 = coin-margined)
    # ------------------------------------------------------------------
    async def get_broker_if_new_futures_user(self, broker_id: str, type: int = 1) -> Dict[str, Any]:
        return await self._call(ep.REFERRAL_IF_NEW_USER, {"brokerId": broker_id, "type": type})

    async def set_broker_custom_id_for_client(self, customer_id: str, email: str) -> Dict[str, Any]:
        return await self._call(
            ep.REFERRAL_CUSTOMIZATION_SET, {"customerId": customer_id, "email": email}
        )

    async def get_broker_client_custom_ids(
        self,
        customer_id: str,
        email: str,
        page: int | None = None,
        limit: int | None = None,
    ) -> Any:
        params = {"customerId": customer_id, "email": email, "page": page, "limit": limit}
        return await self._call(ep.REFERRAL_CUSTOMIZATION_GET, _without_none(params))

    async def get_broker_user_custom_id(self, broker_id: str) -> Any:
        return await self._call(ep.REFERRAL_USER_CUSTOMIZATION, {"brokerId": broker_id})

    async def get_broker_rebate_data_overview(self, type: int = 1) -> Dict[str, Any]:
        return await self._call(ep.REFERRAL_OVERVIEW, {"type": type})

    async def get_broker_user_trade_volume(
        self,
        type: int = 1,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int | None = None,
    ) -> Any:
        params = {"type": type, "startTime": start_time, "endTime": end_time, "limit": limit}
        return await self._call(ep.REFERRAL_TRADE_VOLUME, _without_none(params))

    async def get_broker_rebate_volume(
        self,
        type: int = 1,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int | None = None,
    ) -> Any:
        params = {"type": type, "startTime": start_time, "endTime": end_time, "limit": limit}
        return await self._call(ep.REFERRAL_REBATE_VOLUME, _without_none(params))

    async def get_broker_trade_detail(
        self,
        type: int = 1,
        start_time: int | None = None,
        end_time: int | None = None,
        limit: int | None = None,
    ) -> Any:
        params = {"type": type, "startTime": start_time, "endTime": end_time, "limit": limit}
        return await self._call(ep.REFERRAL_TRADER_SUMMARY, _without_none(params))

    # ------------------------------------------------------------------
    # User data stream
    # ------------------------------------------------------------------
    async def get_futures_user_data_listen_key(self) -> Dict[str, Any]:
        return await self._call(ep.LISTEN_KEY_CREATE)

    async def keep_alive_futures_user_data_listen_key(self) -> Dict[str, Any]:
        return await self._call(ep.LISTEN_KEY_KEEPALIVE)

    async def close_futures_user_data_listen_key(self) -> Dict[str, Any]:
        return await self._call(ep.LISTEN_KEY_CLOSE)


__all__ = ["CoinMClient"]
