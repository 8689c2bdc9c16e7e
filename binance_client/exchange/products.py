"""
Per-product endpoint layout.

Spot, margin, USD-M futures and COIN-M delivery expose the same operations
under different hosts and path prefixes, plus a few product quirks. The
facades are written once against ProductSpec instead of once per product.
"""

from dataclasses import dataclass
from enum import Enum


class Product(Enum):
    """Binance trading products."""
    SPOT = "spot"
    MARGIN = "margin"
    FUTURES = "futures"    # USD-M perpetual/quarterly
    DELIVERY = "delivery"  # COIN-M


@dataclass(frozen=True)
class ProductSpec:
    """
    Endpoint paths and quirks of one product.

    Host selection lives in BinanceConfig; margin shares the spot hosts.
    """
    product: Product

    # Public market data
    ping_path: str
    time_path: str
    exchange_info_path: str
    depth_path: str
    trades_path: str
    agg_trades_path: str
    klines_path: str
    ticker_price_path: str
    book_ticker_path: str
    day_ticker_path: str

    # Signed trading / account
    order_path: str
    open_orders_path: str
    account_path: str

    # Listen key management
    user_stream_path: str

    # Quirks
    supports_position_side: bool = False
    supports_isolated_margin: bool = False


def _market_paths(prefix: str) -> dict:
    return dict(
        ping_path=f"{prefix}/ping",
        time_path=f"{prefix}/time",
        exchange_info_path=f"{prefix}/exchangeInfo",
        depth_path=f"{prefix}/depth",
        trades_path=f"{prefix}/trades",
        agg_trades_path=f"{prefix}/aggTrades",
        klines_path=f"{prefix}/klines",
        ticker_price_path=f"{prefix}/ticker/price",
        book_ticker_path=f"{prefix}/ticker/bookTicker",
        day_ticker_path=f"{prefix}/ticker/24hr",
    )


SPOT_SPEC = ProductSpec(
    product=Product.SPOT,
    order_path="/api/v3/order",
    open_orders_path="/api/v3/openOrders",
    account_path="/api/v3/account",
    user_stream_path="/api/v3/userDataStream",
    **_market_paths("/api/v3")
)

MARGIN_SPEC = ProductSpec(
    product=Product.MARGIN,
    order_path="/sapi/v1/margin/order",
    open_orders_path="/sapi/v1/margin/openOrders",
    account_path="/sapi/v1/margin/account",
    user_stream_path="/sapi/v1/userDataStream",
    supports_isolated_margin=True,
    **_market_paths("/api/v3")
)

FUTURES_SPEC = ProductSpec(
    product=Product.FUTURES,
    order_path="/fapi/v1/order",
    open_orders_path="/fapi/v1/openOrders",
    account_path="/fapi/v2/account",
    user_stream_path="/fapi/v1/listenKey",
    supports_position_side=True,
    **_market_paths("/fapi/v1")
)

DELIVERY_SPEC = ProductSpec(
    product=Product.DELIVERY,
    order_path="/dapi/v1/order",
    open_orders_path="/dapi/v1/openOrders",
    account_path="/dapi/v1/account",
    user_stream_path="/dapi/v1/listenKey",
    supports_position_side=True,
    **_market_paths("/dapi/v1")
)


PRODUCT_SPECS = {
    Product.SPOT: SPOT_SPEC,
    Product.MARGIN: MARGIN_SPEC,
    Product.FUTURES: FUTURES_SPEC,
    Product.DELIVERY: DELIVERY_SPEC,
}


def get_product_spec(product: Product) -> ProductSpec:
    """
    Get endpoint layout for a product.

    Raises:
        ValueError: If product is not supported
    """
    if product not in PRODUCT_SPECS:
        raise ValueError(f"Unsupported product: {product}")

    return PRODUCT_SPECS[product]
