"""
Unit tests for REST models, wire adapters and error translation.
"""

import pytest
from decimal import Decimal

from binance_client.exchange.exceptions import (
    BinanceAPIError,
    BusinessError,
    InvalidListenKeyError,
    InvalidPriceError,
    UnknownSymbolError,
    register_error,
    registered_errors,
    translate_error
)
from binance_client.exchange.models import (
    ErrorResponse,
    Kline,
    MarginType,
    Order,
    OrderRequest,
    OrderSide,
    OrderStatus,
    OrderType,
    PositionSide,
    TimeInForce
)
from binance_client.exchange.serialization import (
    encode_flag,
    encode_value,
    format_decimal,
    parse_bool,
    to_decimal,
    to_optional_decimal
)


# ============================================================================
# WIRE ADAPTERS
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [
    ("0.00100000", Decimal("0.00100000")),
    (12, Decimal("12")),
    (0.5, Decimal("0.5")),
])
def test_to_decimal_accepts_string_or_number(value, expected):
    assert to_decimal(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value", ["abc", True, None])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises((ValueError, TypeError)):
        to_decimal(value)


@pytest.mark.unit
def test_to_optional_decimal():
    assert to_optional_decimal(None) is None
    assert to_optional_decimal("") is None
    assert to_optional_decimal("1.5") == Decimal("1.5")


@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [
    (True, True), ("true", True), ("TRUE", True), (False, False), ("false", False), ("FALSE", False),
])
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


@pytest.mark.unit
def test_parse_bool_rejects_other_values():
    with pytest.raises(ValueError):
        parse_bool("yes")


@pytest.mark.unit
def test_flags_and_values():
    assert encode_flag(True) == "TRUE"
    assert encode_flag(False) == "FALSE"
    assert encode_value(True) == "true"
    assert encode_value(OrderSide.SELL) == "SELL"
    assert encode_value(Decimal("1E-7")) == "0.0000001"
    assert encode_value(1e-7) == "0.0000001"
    assert format_decimal(Decimal("100.000")) == "100"


# ============================================================================
# ENUMS
# ============================================================================

@pytest.mark.unit
def test_unknown_enum_value_maps_to_other():
    assert OrderType("SOMETHING_NEW") is OrderType.OTHER
    assert OrderStatus("PENDING_NEW") is OrderStatus.OTHER
    assert PositionSide("HEDGE") is PositionSide.OTHER


@pytest.mark.unit
def test_margin_type_is_case_insensitive():
    assert MarginType("ISOLATED") is MarginType.ISOLATED
    assert MarginType("cross") is MarginType.CROSS
    assert MarginType("portfolio") is MarginType.OTHER


# ============================================================================
# REST MODELS
# ============================================================================

@pytest.mark.unit
def test_kline_from_positional_array():
    kline = Kline.parse([
        1499040000000, "0.01634790", "0.80000000", "0.01575800", "0.01577100",
        "148976.11427815", 1499644799999, "2434.19055334", 308,
        "1756.87402397", "28.46694368", "0"
    ])

    assert kline.open == Decimal("0.01634790")
    assert kline.number_of_trades == 308
    assert kline.close_time == 1499644799999


@pytest.mark.unit
def test_order_parse():
    order = Order.parse({
        "symbol": "BTCUSDT", "orderId": 28, "clientOrderId": "6gCrw2kRUAF9CvJDGP16IP",
        "transactTime": 1507725176595, "price": "50000.00", "origQty": "10.00000000",
        "executedQty": "4.00000000", "status": "PARTIALLY_FILLED", "timeInForce": "GTC",
        "type": "LIMIT", "side": "SELL"
    })

    assert order.side == OrderSide.SELL
    assert order.time_in_force == TimeInForce.GTC
    assert order.update_time == 1507725176595
    assert order.remaining_qty == Decimal("6.00000000")
    assert order.is_filled is False


@pytest.mark.unit
def test_order_request_params_order_and_coercion():
    order = OrderRequest(
        symbol="BTCUSDT",
        side=OrderSide.BUY,
        order_type=OrderType.LIMIT,
        time_in_force=TimeInForce.GTC,
        quantity=0.5,
        price="100",
        new_client_order_id="abc"
    )

    assert list(order.to_params()) == ["symbol", "side", "type", "timeInForce", "quantity", "price", "newClientOrderId"]
    assert order.quantity == Decimal("0.5")


@pytest.mark.unit
@pytest.mark.parametrize("body", [
    {"code": "-1013", "msg": "x"},
    {"code": True, "msg": "x"},
    {"code": -1013, "msg": 5},
])
def test_error_response_type_checks(body):
    with pytest.raises(TypeError):
        ErrorResponse.parse(body)


# ============================================================================
# ERROR TRANSLATION
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize("code,msg,expected", [
    (-1013, "Invalid price.", InvalidPriceError),
    (-1013, "Filter failure: LOT_SIZE", BinanceAPIError),
    (-1125, "This listenKey does not exist.", InvalidListenKeyError),
    (-1121, "Invalid symbol.", UnknownSymbolError),
    (-1000, "An unknown error occurred.", BinanceAPIError),
])
def test_translate_error(code, msg, expected):
    error = translate_error(ErrorResponse(code=code, msg=msg))

    assert type(error) is expected
    assert error.code == code
    assert error.msg == msg


@pytest.mark.unit
def test_register_custom_error():
    @register_error(-2015)
    class BadApiKeyError(BusinessError):
        pass

    try:
        error = translate_error(ErrorResponse(code=-2015, msg="Invalid API-key, IP, or permissions for action."))
        assert isinstance(error, BadApiKeyError)
    finally:
        # Keep the shared table unchanged for other tests
        from binance_client.exchange import exceptions
        del exceptions._ERROR_TABLE[(-2015, None)]

    assert (-2015, None) not in registered_errors()
