"""
Binance endpoint configuration.

This module contains:
- REST and WebSocket hosts per product (production and testnet)
- Signed request defaults (recv window)
- HTTP client defaults (request timeout)
- API credentials
"""

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from .products import Product

DEFAULT_RECV_WINDOW = 5000  # ms
DEFAULT_TIMEOUT = 10.0      # seconds

API_KEY_ENV = "BINANCE_API_KEY"
SECRET_KEY_ENV = "BINANCE_API_SECRET_KEY"


@dataclass(frozen=True)
class BinanceConfig:
    """
    Resolved endpoint configuration.

    Built once before any gateway or WebSocket session; override single
    fields with `dataclasses.replace` or the `with_*` helpers.
    """
    # Spot (margin shares these hosts)
    rest_api_endpoint: str
    ws_endpoint: str

    # USD-M futures
    futures_rest_api_endpoint: str
    futures_ws_endpoint: str

    # COIN-M delivery
    delivery_rest_api_endpoint: str
    delivery_ws_endpoint: str

    recv_window: int = DEFAULT_RECV_WINDOW
    timeout: float = DEFAULT_TIMEOUT
    testnet: bool = False

    @classmethod
    def production(cls) -> "BinanceConfig":
        """Default production endpoints."""
        return cls(
            rest_api_endpoint="https://api.binance.com",
            ws_endpoint="wss://stream.binance.com:9443",
            futures_rest_api_endpoint="https://fapi.binance.com",
            futures_ws_endpoint="wss://fstream.binance.com",
            delivery_rest_api_endpoint="https://dapi.binance.com",
            delivery_ws_endpoint="wss://dstream.binance.com",
        )

    @classmethod
    def testnet_config(cls) -> "BinanceConfig":
        """Sandbox endpoints for every product."""
        return cls(
            rest_api_endpoint="https://testnet.binance.vision",
            ws_endpoint="wss://testnet.binance.vision",
            futures_rest_api_endpoint="https://testnet.binancefuture.com",
            futures_ws_endpoint="wss://stream.binancefuture.com",
            delivery_rest_api_endpoint="https://testnet.binancefuture.com",
            delivery_ws_endpoint="wss://dstream.binancefuture.com",
            testnet=True,
        )

    def rest_host(self, product: Product) -> str:
        """REST base URL for a product."""
        if product in (Product.SPOT, Product.MARGIN):
            return self.rest_api_endpoint
        if product == Product.FUTURES:
            return self.futures_rest_api_endpoint
        if product == Product.DELIVERY:
            return self.delivery_rest_api_endpoint
        raise ValueError(f"Unsupported product: {product}")

    def ws_host(self, product: Product) -> str:
        """WebSocket base URL for a product."""
        if product in (Product.SPOT, Product.MARGIN):
            return self.ws_endpoint
        if product == Product.FUTURES:
            return self.futures_ws_endpoint
        if product == Product.DELIVERY:
            return self.delivery_ws_endpoint
        raise ValueError(f"Unsupported product: {product}")

    def with_recv_window(self, recv_window: int) -> "BinanceConfig":
        if recv_window < 0:
            raise ValueError(f"recv_window must be >= 0, got {recv_window}")
        return replace(self, recv_window=recv_window)

    def with_timeout(self, timeout: float) -> "BinanceConfig":
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")
        return replace(self, timeout=timeout)


PRODUCTION_CONFIG = BinanceConfig.production()
TESTNET_CONFIG = BinanceConfig.testnet_config()


def get_config(testnet: bool = False) -> BinanceConfig:
    """
    Get endpoint configuration.

    Args:
        testnet: Use sandbox endpoints if True

    Returns:
        BinanceConfig instance
    """
    return TESTNET_CONFIG if testnet else PRODUCTION_CONFIG


@dataclass(frozen=True)
class Credentials:
    """
    API credentials.

    Both values may be empty for public endpoints. The secret is only used as
    the HMAC key and is never part of repr or logs.
    """
    api_key: str = ""
    secret_key: str = field(default="", repr=False)

    @classmethod
    def from_env(cls, api_key_var: str = API_KEY_ENV, secret_key_var: str = SECRET_KEY_ENV) -> "Credentials":
        """Read credentials from BINANCE_API_KEY / BINANCE_API_SECRET_KEY."""
        return cls(
            api_key=os.environ.get(api_key_var, ""),
            secret_key=os.environ.get(secret_key_var, ""),
        )

    @classmethod
    def of(cls, api_key: Optional[str] = None, secret_key: Optional[str] = None) -> "Credentials":
        return cls(api_key=api_key or "", secret_key=secret_key or "")

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)
