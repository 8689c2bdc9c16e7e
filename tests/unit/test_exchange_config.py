"""
Unit tests for endpoint configuration and product layout.
"""

import pytest
from dataclasses import FrozenInstanceError, replace

from binance_client.exchange.exchange_config import (
    API_KEY_ENV,
    SECRET_KEY_ENV,
    BinanceConfig,
    Credentials,
    PRODUCTION_CONFIG,
    TESTNET_CONFIG,
    get_config
)
from binance_client.exchange.products import Product, get_product_spec


# ============================================================================
# HOSTS
# ============================================================================

@pytest.mark.unit
def test_production_hosts():
    config = BinanceConfig.production()

    assert config.rest_host(Product.SPOT) == "https://api.binance.com"
    assert config.rest_host(Product.MARGIN) == "https://api.binance.com"
    assert config.rest_host(Product.FUTURES) == "https://fapi.binance.com"
    assert config.rest_host(Product.DELIVERY) == "https://dapi.binance.com"
    assert config.ws_host(Product.SPOT) == "wss://stream.binance.com:9443"
    assert config.ws_host(Product.FUTURES) == "wss://fstream.binance.com"
    assert config.ws_host(Product.DELIVERY) == "wss://dstream.binance.com"
    assert config.recv_window == 5000
    assert config.testnet is False


@pytest.mark.unit
def test_testnet_hosts():
    config = get_config(testnet=True)

    assert config is TESTNET_CONFIG
    assert config.rest_host(Product.SPOT) == "https://testnet.binance.vision"
    assert config.ws_host(Product.SPOT) == "wss://testnet.binance.vision"
    assert config.rest_host(Product.FUTURES) == "https://testnet.binancefuture.com"
    assert config.ws_host(Product.FUTURES) == "wss://stream.binancefuture.com"
    assert config.ws_host(Product.DELIVERY) == "wss://dstream.binancefuture.com"
    assert config.testnet is True


@pytest.mark.unit
def test_get_config_defaults_to_production():
    assert get_config() is PRODUCTION_CONFIG


@pytest.mark.unit
def test_config_is_immutable():
    with pytest.raises(FrozenInstanceError):
        PRODUCTION_CONFIG.recv_window = 1


@pytest.mark.unit
def test_overrides():
    local = replace(PRODUCTION_CONFIG, rest_api_endpoint="http://127.0.0.1:8080")

    assert local.rest_host(Product.SPOT) == "http://127.0.0.1:8080"
    assert local.rest_host(Product.FUTURES) == "https://fapi.binance.com"
    assert PRODUCTION_CONFIG.with_recv_window(0).recv_window == 0
    assert PRODUCTION_CONFIG.with_timeout(2.5).timeout == 2.5


@pytest.mark.unit
def test_invalid_overrides():
    with pytest.raises(ValueError):
        PRODUCTION_CONFIG.with_recv_window(-1)
    with pytest.raises(ValueError):
        PRODUCTION_CONFIG.with_timeout(0)


# ============================================================================
# CREDENTIALS
# ============================================================================

@pytest.mark.unit
def test_credentials_from_env(monkeypatch):
    monkeypatch.setenv(API_KEY_ENV, "env_key")
    monkeypatch.setenv(SECRET_KEY_ENV, "env_secret")

    credentials = Credentials.from_env()

    assert credentials.api_key == "env_key"
    assert credentials.secret_key == "env_secret"
    assert "env_secret" not in repr(credentials)


@pytest.mark.unit
def test_missing_credentials_are_empty(monkeypatch):
    monkeypatch.delenv(API_KEY_ENV, raising=False)
    monkeypatch.delenv(SECRET_KEY_ENV, raising=False)

    credentials = Credentials.from_env()

    assert credentials == Credentials()
    assert credentials.has_api_key is False
    assert Credentials.of(None, None) == Credentials()


# ============================================================================
# PRODUCTS
# ============================================================================

@pytest.mark.unit
def test_product_paths():
    assert get_product_spec(Product.SPOT).order_path == "/api/v3/order"
    assert get_product_spec(Product.MARGIN).order_path == "/sapi/v1/margin/order"
    assert get_product_spec(Product.MARGIN).depth_path == "/api/v3/depth"
    assert get_product_spec(Product.FUTURES).account_path == "/fapi/v2/account"
    assert get_product_spec(Product.DELIVERY).klines_path == "/dapi/v1/klines"


@pytest.mark.unit
def test_user_stream_paths():
    assert get_product_spec(Product.SPOT).user_stream_path == "/api/v3/userDataStream"
    assert get_product_spec(Product.MARGIN).user_stream_path == "/sapi/v1/userDataStream"
    assert get_product_spec(Product.FUTURES).user_stream_path == "/fapi/v1/listenKey"
    assert get_product_spec(Product.DELIVERY).user_stream_path == "/dapi/v1/listenKey"


@pytest.mark.unit
def test_product_quirks():
    assert get_product_spec(Product.FUTURES).supports_position_side is True
    assert get_product_spec(Product.SPOT).supports_position_side is False
    assert get_product_spec(Product.MARGIN).supports_isolated_margin is True
    assert get_product_spec(Product.FUTURES).supports_isolated_margin is False
