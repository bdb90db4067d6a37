"""Declarative table of COIN-M REST endpoints.

Each endpoint is fixed at authorship time as public or signed. Only endpoints
that place new orders name an order id field in ``mints_order_id``; the
client runs id generation/validation for those and for nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Endpoint:
    method: str
    path: str
    signed: bool = False
    mints_order_id: str | None = None
    batch: bool = False

    def __post_init__(self) -> None:
        if self.mints_order_id and not self.signed:
            raise ValueError(f"{self.path}: only signed endpoints may mint order ids")

    @property
    def name(self) -> str:
        return f"{self.method} {self.path}"


def _public(method: str, path: str) -> Endpoint:
    return Endpoint(method, path)


def _signed(
    method: str, path: str, *, mints_order_id: str | None = None, batch: bool = False
) -> Endpoint:
    return Endpoint(method, path, signed=True, mints_order_id=mints_order_id, batch=batch)


# Market data
SERVER_TIME = _public("GET", "/dapi/v1/time")
PING = _public("GET", "/dapi/v1/ping")
EXCHANGE_INFO = _public("GET", "/dapi/v1/exchangeInfo")
ORDER_BOOK = _public("GET", "/dapi/v1/depth")
RECENT_TRADES = _public("GET", "/dapi/v1/trades")
HISTORICAL_TRADES = _public("GET", "/dapi/v1/historicalTrades")
AGGREGATE_TRADES = _public("GET", "/dapi/v1/aggTrades")
MARK_PRICE = _public("GET", "/dapi/v1/premiumIndex")
FUNDING_RATE_HISTORY = _public("GET", "/dapi/v1/fundingRate")
KLINES = _public("GET", "/dapi/v1/klines")
CONTINUOUS_KLINES = _public("GET", "/dapi/v1/continuousKlines")
INDEX_PRICE_KLINES = _public("GET", "/dapi/v1/indexPriceKlines")
MARK_PRICE_KLINES = _public("GET", "/dapi/v1/markPriceKlines")
TICKER_24HR = _public("GET", "/dapi/v1/ticker/24hr")
TICKER_PRICE = _public("GET", "/dapi/v1/ticker/price")
BOOK_TICKER = _public("GET", "/dapi/v1/ticker/bookTicker")
OPEN_INTEREST = _public("GET", "/dapi/v1/openInterest")
OPEN_INTEREST_HIST = _public("GET", "/futures/data/openInterestHist")
TOP_LONG_SHORT_ACCOUNT_RATIO = _public("GET", "/futures/data/topLongShortAccountRatio")
TOP_LONG_SHORT_POSITION_RATIO = _public("GET", "/futures/data/topLongShortPositionRatio")
GLOBAL_LONG_SHORT_ACCOUNT_RATIO = _public("GET", "/futures/data/globalLongShortAccountRatio")
TAKER_BUY_SELL_VOLUME = _public("GET", "/futures/data/takerBuySellVol")
BASIS = _public("GET", "/futures/data/basis")

# Account / trade
POSITION_MODE_SET = _signed("POST", "/dapi/v1/positionSide/dual")
POSITION_MODE_GET = _signed("GET", "/dapi/v1/positionSide/dual")
NEW_ORDER = _signed("POST", "/dapi/v1/order", mints_order_id="newClientOrderId")
MODIFY_ORDER = _signed("PUT", "/dapi/v1/order")
BATCH_NEW_ORDERS = _signed(
    "POST", "/dapi/v1/batchOrders", mints_order_id="newClientOrderId", batch=True
)
BATCH_MODIFY_ORDERS = _signed("PUT", "/dapi/v1/batchOrders", batch=True)
BATCH_CANCEL_ORDERS = _signed("DELETE", "/dapi/v1/batchOrders", batch=True)
ORDER_AMENDMENT = _signed("GET", "/dapi/v1/orderAmendment")
GET_ORDER = _signed("GET", "/dapi/v1/order")
CANCEL_ORDER = _signed("DELETE", "/dapi/v1/order")
CANCEL_ALL_OPEN_ORDERS = _signed("DELETE", "/dapi/v1/allOpenOrders")
COUNTDOWN_CANCEL_ALL = _signed("POST", "/dapi/v1/countdownCancelAll")
OPEN_ORDER = _signed("GET", "/dapi/v1/openOrder")
OPEN_ORDERS = _signed("GET", "/dapi/v1/openOrders")
ALL_ORDERS = _signed("GET", "/dapi/v1/allOrders")
BALANCE = _signed("GET", "/dapi/v1/balance")
ACCOUNT = _signed("GET", "/dapi/v1/account")
LEVERAGE = _signed("POST", "/dapi/v1/leverage")
MARGIN_TYPE = _signed("POST", "/dapi/v1/marginType")
POSITION_MARGIN = _signed("POST", "/dapi/v1/positionMargin")
POSITION_MARGIN_HISTORY = _signed("GET", "/dapi/v1/positionMargin/history")
POSITION_RISK = _signed("GET", "/dapi/v1/positionRisk")
USER_TRADES = _signed("GET", "/dapi/v1/userTrades")
INCOME = _signed("GET", "/dapi/v1/income")
LEVERAGE_BRACKET = _signed("GET", "/dapi/v2/leverageBracket")
FORCE_ORDERS = _signed("GET", "/dapi/v1/forceOrders")
ADL_QUANTILE = _signed("GET", "/dapi/v1/adlQuantile")
COMMISSION_RATE = _signed("GET", "/dapi/v1/commissionRate")

# Broker referral
REFERRAL_IF_NEW_USER = _signed("GET", "/dapi/v1/apiReferral/ifNewUser")
REFERRAL_CUSTOMIZATION_SET = _signed("POST", "/dapi/v1/apiReferral/customization")
REFERRAL_CUSTOMIZATION_GET = _signed("GET", "/dapi/v1/apiReferral/customization")
REFERRAL_USER_CUSTOMIZATION = _signed("GET", "/dapi/v1/apiReferral/userCustomization")
REFERRAL_OVERVIEW = _signed("GET", "/dapi/v1/apiReferral/overview")
REFERRAL_TRADE_VOLUME = _signed("GET", "/dapi/v1/apiReferral/tradeVol")
REFERRAL_REBATE_VOLUME = _signed("GET", "/dapi/v1/apiReferral/rebateVol")
REFERRAL_TRADER_SUMMARY = _signed("GET", "/dapi/v1/apiReferral/traderSummary")

# User data stream (API key header only, no signature)
LISTEN_KEY_CREATE = _public("POST", "/dapi/v1/listenKey")
LISTEN_KEY_KEEPALIVE = _public("PUT", "/dapi/v1/listenKey")
LISTEN_KEY_CLOSE = _public("DELETE", "/dapi/v1/listenKey")
