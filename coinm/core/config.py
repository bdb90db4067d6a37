from __future__ import annotations

from pathlib import Path
from typing import Dict

import yaml
from pydantic import BaseModel, Field, field_validator

from ..util.env import env_first
from ..utils.identifiers import check_prefix_code

BASE_URLS: Dict[str, str] = {
    "coinm": "https://dapi.binance.com",
    "coinmtest": "https://testnet.binancefuture.com",
}

_CREDENTIAL_ENV = {
    "coinm": ("BINANCE_COINM_API_KEY", "BINANCE_COINM_API_SECRET"),
    "coinmtest": ("BINANCE_COINM_API_KEY_TESTNET", "BINANCE_COINM_API_SECRET_TESTNET"),
}


class OrderIdConfig(BaseModel):
    prefixes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("prefixes")
    def validate_prefixes(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {category: check_prefix_code(category, code) for category, code in v.items()}


class ClientConfig(BaseModel):
    testnet: bool = False
    api_key: str | None = None
    api_secret: str | None = None
    base_url: str | None = None
    recv_window: int = Field(5000, ge=1, le=60000)
    timeout: float = Field(10.0, gt=0)
    sync_time: bool = False
    order_ids: OrderIdConfig = Field(default_factory=OrderIdConfig)

    @field_validator("base_url")
    def validate_base_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return v.rstrip("/")

    @property
    def category(self) -> str:
        return "coinmtest" if self.testnet else "coinm"

    def resolved_base_url(self) -> str:
        return self.base_url or BASE_URLS[self.category]

    def resolved_credentials(self) -> tuple[str | None, str | None]:
        """Explicit config values win; otherwise fall back to the environment."""

        key_env, secret_env = _CREDENTIAL_ENV[self.category]
        api_key = self.api_key or env_first(key_env)
        api_secret = self.api_secret or env_first(secret_env)
        return api_key, api_secret


def load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_client_config(path: str | Path) -> ClientConfig:
    """Read a :class:`ClientConfig` from the ``coinm`` section of a YAML file.

    A file without a ``coinm`` section is treated as the section itself.
    """

    payload = load_yaml(Path(path))
    section = payload.get("coinm", payload)
    return ClientConfig.model_validate(section)
