"""
Unit tests for endpoint facades.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from decimal import Decimal
from typing import List

from binance_client.exchange.exceptions import InvalidOrderError
from binance_client.exchange.exchange_config import Credentials, PRODUCTION_CONFIG
from binance_client.exchange.facades import AccountApi, GeneralApi, MarketApi, UserStreamApi
from binance_client.exchange.models import (
    BookTicker,
    Kline,
    Order,
    OrderBook,
    OrderRequest,
    OrderSide,
    OrderType,
    FuturesOrderType,
    PositionSide,
    ServerTime,
    Success,
    TimeInForce,
    UserDataStream
)
from binance_client.exchange.products import Product


def make_gateway():
    gateway = MagicMock()
    for name in ("get", "get_signed", "post", "post_signed", "put", "delete", "delete_signed", "close"):
        setattr(gateway, name, AsyncMock(return_value={}))
    return gateway


@pytest.fixture
def gateway():
    return make_gateway()


# ============================================================================
# CONSTRUCTION
# ============================================================================

@pytest.mark.unit
def test_from_config_uses_product_host():
    api = MarketApi.from_config(PRODUCTION_CONFIG, Credentials(), Product.DELIVERY)

    assert api.gateway.host == "https://dapi.binance.com"
    assert api.spec.depth_path == "/dapi/v1/depth"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_close_session(gateway):
    await GeneralApi(gateway).close_session()

    gateway.close.assert_awaited_once()


# ============================================================================
# GENERAL / MARKET
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("product,path", [
    (Product.SPOT, "/api/v3/ping"),
    (Product.FUTURES, "/fapi/v1/ping"),
    (Product.DELIVERY, "/dapi/v1/ping"),
])
async def test_ping_per_product(gateway, product, path):
    await GeneralApi(gateway, product).ping()

    gateway.get.assert_awaited_once_with(path, response_type=Success)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_server_time(gateway):
    await GeneralApi(gateway).server_time()

    gateway.get.assert_awaited_once_with("/api/v3/time", response_type=ServerTime)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_order_book(gateway):
    await MarketApi(gateway, Product.FUTURES).order_book("BTCUSDT", limit=10)

    gateway.get.assert_awaited_once_with(
        "/fapi/v1/depth",
        {"symbol": "BTCUSDT", "limit": 10},
        response_type=OrderBook
    )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_klines(gateway):
    await MarketApi(gateway).klines("BTCUSDT", "1h", limit=2)

    path, query = gateway.get.call_args[0]
    assert path == "/api/v3/klines"
    assert query["interval"] == "1h"
    assert query["limit"] == 2
    assert gateway.get.call_args[1]["response_type"] == List[Kline]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_book_tickers(gateway):
    await MarketApi(gateway).book_tickers()

    gateway.get.assert_awaited_once_with("/api/v3/ticker/bookTicker", response_type=List[BookTicker])


# ============================================================================
# ACCOUNT
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_place_spot_order(gateway):
    order = OrderRequest(
        symbol="BTCUSDT",
        side=OrderSide.BUY,
        order_type=OrderType.LIMIT,
        time_in_force=TimeInForce.GTC,
        quantity="0.001",
        price="50000"
    )

    await AccountApi(gateway).place_order(order)

    gateway.post_signed.assert_awaited_once_with("/api/v3/order", order, response_type=Order)
    assert order.quantity == Decimal("0.001")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_place_order_ack_returns_raw(gateway):
    order = OrderRequest(
        symbol="BTCUSDT",
        side=OrderSide.BUY,
        order_type=OrderType.MARKET,
        quantity=Decimal("1"),
        new_order_resp_type="ACK"
    )

    await AccountApi(gateway).place_order(order)

    assert gateway.post_signed.call_args[1]["response_type"] is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_place_futures_order_with_position_side(gateway):
    order = OrderRequest(
        symbol="BTCUSDT",
        side=OrderSide.SELL,
        order_type=FuturesOrderType.STOP_MARKET,
        quantity=Decimal("0.01"),
        stop_price=Decimal("49000"),
        position_side=PositionSide.SHORT
    )

    await AccountApi(gateway, Product.FUTURES).place_order(order)

    assert gateway.post_signed.call_args[0][0] == "/fapi/v1/order"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_position_side_rejected_on_spot(gateway):
    order = OrderRequest(
        symbol="BTCUSDT",
        side=OrderSide.BUY,
        order_type=OrderType.MARKET,
        quantity=Decimal("1"),
        position_side=PositionSide.LONG
    )

    with pytest.raises(InvalidOrderError):
        await AccountApi(gateway, Product.SPOT).place_order(order)

    gateway.post_signed.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_isolated_flag_only_on_margin(gateway):
    order = OrderRequest(
        symbol="BTCUSDT",
        side=OrderSide.BUY,
        order_type=OrderType.MARKET,
        quantity=Decimal("1"),
        is_isolated=True
    )

    with pytest.raises(InvalidOrderError):
        await AccountApi(gateway, Product.FUTURES).place_order(order)

    await AccountApi(gateway, Product.MARGIN).place_order(order)

    path, payload = gateway.post_signed.call_args[0]
    assert path == "/sapi/v1/margin/order"
    assert payload.to_params()["isIsolated"] == "TRUE"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancel_margin_order_encodes_flag(gateway):
    await AccountApi(gateway, Product.MARGIN).cancel_order("BTCUSDT", order_id=42, is_isolated=False)

    path, payload = gateway.delete_signed.call_args[0]
    assert path == "/sapi/v1/margin/order"
    assert payload == {
        "symbol": "BTCUSDT",
        "orderId": 42,
        "origClientOrderId": None,
        "isIsolated": "FALSE"
    }


@pytest.mark.asyncio
@pytest.mark.unit
async def test_order_lookup_requires_an_id(gateway):
    with pytest.raises(InvalidOrderError):
        await AccountApi(gateway).order_status("BTCUSDT")

    gateway.get_signed.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_open_orders_and_account(gateway):
    api = AccountApi(gateway, Product.FUTURES)

    await api.open_orders("BTCUSDT")
    await api.account_information()

    assert gateway.get_signed.await_args_list[0][0] == ("/fapi/v1/openOrders", {"symbol": "BTCUSDT"})
    assert gateway.get_signed.await_args_list[1][0] == ("/fapi/v2/account",)
    assert gateway.get_signed.await_args_list[0][1]["response_type"] == List[Order]


# ============================================================================
# USER STREAM
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.unit
async def test_user_stream_lifecycle(gateway):
    gateway.post.return_value = UserDataStream(listen_key="abc123")
    api = UserStreamApi(gateway, Product.FUTURES)

    stream = await api.start()
    await api.keep_alive(stream.listen_key)
    await api.close(stream.listen_key)

    gateway.post.assert_awaited_once_with("/fapi/v1/listenKey", response_type=UserDataStream)
    gateway.put.assert_awaited_once_with("/fapi/v1/listenKey", "abc123", response_type=Success)
    gateway.delete.assert_awaited_once_with("/fapi/v1/listenKey", "abc123", response_type=Success)
