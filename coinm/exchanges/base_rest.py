from __future__ import annotations

import hashlib
import hmac
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, TypeVar
from urllib.parse import urlencode

import httpx

from ..metrics.observability import record_request_error
from ..utils.redact import redact_sensitive_data


LOGGER = logging.getLogger(__name__)

_DEFAULT_RECV_WINDOW = 5_000
_HTTP_TIMEOUT = 10.0
_LIMIT_HEADER_PREFIXES = ("x-mbx-used-weight", "x-mbx-order-count")

_ClientT = TypeVar("_ClientT", bound="BaseRestClient")


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


def _normalise_params(params: Mapping[str, Any] | None) -> List[tuple[str, str]]:
    items: List[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            items.append((key, "true" if value else "false"))
        else:
            items.append((key, str(value)))
    return items


class BinanceAPIError(RuntimeError):
    """Raised when the exchange answers a call with a non-2xx status.

    ``code`` and ``msg`` carry the exchange's ``{"code", "msg"}`` body when
    one was returned.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        msg: str | None = None,
        status_code: int | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.msg = msg
        self.status_code = status_code
        self.method = method
        self.path = path


class CredentialsMissingError(RuntimeError):
    """Raised before any I/O when a signed call has no key/secret."""


class BaseRestClient(ABC):
    """Async transport shared by the Binance REST clients.

    Public calls go out unsigned; ``*_private`` calls add ``recvWindow``,
    ``timestamp`` and an HMAC-SHA256 ``signature`` computed over the exact
    query string that is sent. Every call issues one request and nothing is
    retried here.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str | None = None,
        api_secret: str | None = None,
        recv_window: int = _DEFAULT_RECV_WINDOW,
        timeout: float = _HTTP_TIMEOUT,
        sync_time: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.api_secret = api_secret
        self.recv_window = int(recv_window)
        self.time_offset_ms = 0
        self.api_limit_state: Dict[str, int] = {}
        self._sync_time = sync_time
        self._time_synced = False
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self: _ClientT) -> _ClientT:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Time sync
    # ------------------------------------------------------------------
    @abstractmethod
    async def get_server_time(self) -> int:
        """Return the exchange clock in milliseconds."""

    async def sync_time(self) -> int:
        """Measure the offset between the local and the exchange clock."""

        started = _timestamp_ms()
        server_time = await self.get_server_time()
        finished = _timestamp_ms()
        self.time_offset_ms = int(server_time - (started + finished) / 2)
        self._time_synced = True
        LOGGER.debug("clock offset updated", extra={"time_offset_ms": self.time_offset_ms})
        return self.time_offset_ms

    # ------------------------------------------------------------------
    # HTTP verbs
    # ------------------------------------------------------------------
    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("POST", path, params=params)

    async def put(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("PUT", path, params=params)

    async def delete(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("DELETE", path, params=params)

    async def get_private(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params, signed=True)

    async def post_private(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("POST", path, params=params, signed=True)

    async def put_private(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("PUT", path, params=params, signed=True)

    async def delete_private(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("DELETE", path, params=params, signed=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            return {}
        return {"X-MBX-APIKEY": self.api_key}

    def _sign(self, query: str) -> str:
        assert self.api_secret is not None
        return hmac.new(
            self.api_secret.encode("utf-8"),
            query.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    async def _signed_query(self, params: Mapping[str, Any] | None) -> str:
        if not self.api_key or not self.api_secret:
            raise CredentialsMissingError("Binance COIN-M credentials are not configured")
        if self._sync_time and not self._time_synced:
            await self.sync_time()
        items = _normalise_params(params)
        if not any(key == "recvWindow" for key, _ in items):
            items.append(("recvWindow", str(self.recv_window)))
        items.append(("timestamp", str(_timestamp_ms() + self.time_offset_ms)))
        query = urlencode(items)
        return f"{query}&signature={self._sign(query)}"

    def _update_limit_state(self, headers: httpx.Headers) -> None:
        for name, value in headers.items():
            lowered = name.lower()
            if not lowered.startswith(_LIMIT_HEADER_PREFIXES):
                continue
            try:
                self.api_limit_state[lowered] = int(value)
            except ValueError:
                LOGGER.debug("ignoring non-numeric limit header", extra={"header": lowered})

    def _api_error(self, method: str, path: str, response: httpx.Response) -> BinanceAPIError:
        status = response.status_code
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, Mapping) and "code" in payload:
            code = payload.get("code")
            msg = payload.get("msg")
            return BinanceAPIError(
                f"Binance HTTP {status} {method} {path}: code={code} msg={msg}",
                code=int(code) if code is not None else None,
                msg=str(msg) if msg is not None else None,
                status_code=status,
                method=method,
                path=path,
            )
        return BinanceAPIError(
            f"Binance HTTP {status} {method} {path}: {response.text[:500]}",
            status_code=status,
            method=method,
            path=path,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        signed: bool = False,
    ) -> Any:
        endpoint = f"{method} {path}"
        if signed:
            query = await self._signed_query(params)
        else:
            query = urlencode(_normalise_params(params))
        url = f"{path}?{query}" if query else path

        try:
            response = await self._client.request(method, url, headers=self._headers())
        except httpx.HTTPError as exc:
            record_request_error(endpoint, exc.__class__.__name__)
            LOGGER.warning(
                "binance coinm request failed",
                extra={"endpoint": endpoint, "error": str(exc)},
            )
            raise

        self._update_limit_state(response.headers)
        if response.status_code >= 400:
            error = self._api_error(method, path, response)
            record_request_error(endpoint, f"http_{response.status_code}")
            LOGGER.warning(
                "binance coinm request rejected",
                extra={
                    "endpoint": endpoint,
                    "error_code": error.code,
                    "error_msg": error.msg,
                    "params": redact_sensitive_data(dict(params or {})),
                },
            )
            raise error

        if not response.content:
            return {}
        return response.json()
