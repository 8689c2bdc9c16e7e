"""
Endpoint facades.

Thin typed wrappers over BinanceGateway, written once and parameterised by
Product. Each facade only knows paths (from ProductSpec) and response types;
signing, transport and error mapping stay in the gateway.
"""

from typing import Any, Dict, List, Optional

import aiohttp

from .binance_gateway import BinanceGateway
from .exceptions import InvalidOrderError
from .exchange_config import BinanceConfig, Credentials
from .models import (
    BookTicker,
    Kline,
    Order,
    OrderBook,
    OrderRequest,
    ServerTime,
    Success,
    SymbolPrice,
    UserDataStream,
)
from .products import Product, ProductSpec, get_product_spec
from .serialization import encode_flag
from ..utils.logger import EventType, get_logger, mask_listen_key


logger = get_logger(__name__)


class _Facade:
    """Shared construction for all facades."""

    def __init__(self, gateway: BinanceGateway, product: Product = Product.SPOT):
        self.gateway = gateway
        self.product = product
        self.spec: ProductSpec = get_product_spec(product)

    @classmethod
    def from_config(
        cls,
        config: BinanceConfig,
        credentials: Optional[Credentials] = None,
        product: Product = Product.SPOT,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """Build the facade with its own gateway for the product's host."""
        gateway = BinanceGateway.from_config(config, credentials, product, session=session)
        return cls(gateway, product)

    async def close_session(self) -> None:
        """Close the underlying HTTP session."""
        await self.gateway.close()


class GeneralApi(_Facade):
    """Connectivity and exchange metadata."""

    async def ping(self) -> Success:
        return await self.gateway.get(self.spec.ping_path, response_type=Success)

    async def server_time(self) -> ServerTime:
        return await self.gateway.get(self.spec.time_path, response_type=ServerTime)

    async def exchange_info(self, symbol: Optional[str] = None) -> Dict[str, Any]:
        """Trading rules and symbol filters (raw JSON)."""
        return await self.gateway.get(self.spec.exchange_info_path, {"symbol": symbol})


class MarketApi(_Facade):
    """Public market data."""

    async def order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        return await self.gateway.get(
            self.spec.depth_path,
            {"symbol": symbol, "limit": limit},
            response_type=OrderBook
        )

    async def recent_trades(self, symbol: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self.gateway.get(self.spec.trades_path, {"symbol": symbol, "limit": limit})

    async def agg_trades(
        self,
        symbol: str,
        from_id: Optional[int] = None,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        query = {
            "symbol": symbol,
            "fromId": from_id,
            "startTime": start_time,
            "endTime": end_time,
            "limit": limit,
        }
        return await self.gateway.get(self.spec.agg_trades_path, query)

    async def klines(
        self,
        symbol: str,
        interval: str,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Kline]:
        """
        Get historical candlesticks.

        Args:
            symbol: Trading symbol (e.g., "BTCUSDT")
            interval: Kline interval (e.g., "1m", "1h", "1d")
            start_time: Start time in epoch millis
            end_time: End time in epoch millis
            limit: Number of candles (default 500, max 1000)
        """
        query = {
            "symbol": symbol,
            "interval": interval,
            "startTime": start_time,
            "endTime": end_time,
            "limit": limit,
        }
        return await self.gateway.get(self.spec.klines_path, query, response_type=List[Kline])

    async def price(self, symbol: str) -> SymbolPrice:
        return await self.gateway.get(
            self.spec.ticker_price_path,
            {"symbol": symbol},
            response_type=SymbolPrice
        )

    async def prices(self) -> List[SymbolPrice]:
        return await self.gateway.get(self.spec.ticker_price_path, response_type=List[SymbolPrice])

    async def book_ticker(self, symbol: str) -> BookTicker:
        return await self.gateway.get(
            self.spec.book_ticker_path,
            {"symbol": symbol},
            response_type=BookTicker
        )

    async def book_tickers(self) -> List[BookTicker]:
        return await self.gateway.get(self.spec.book_ticker_path, response_type=List[BookTicker])

    async def day_ticker(self, symbol: str) -> Dict[str, Any]:
        """24h rolling statistics (raw JSON)."""
        return await self.gateway.get(self.spec.day_ticker_path, {"symbol": symbol})


class AccountApi(_Facade):
    """Signed trading and account endpoints."""

    def _check_order(self, order: OrderRequest) -> None:
        """
        Reject fields the product does not accept.

        Raises:
            InvalidOrderError: If the order uses a field of another product
        """
        if order.position_side is not None and not self.spec.supports_position_side:
            raise InvalidOrderError(f"positionSide is not supported on {self.product.value}")
        if order.reduce_only is not None and not self.spec.supports_position_side:
            raise InvalidOrderError(f"reduceOnly is not supported on {self.product.value}")
        if order.is_isolated is not None and not self.spec.supports_isolated_margin:
            raise InvalidOrderError(f"isIsolated is not supported on {self.product.value}")

    async def place_order(self, order: OrderRequest) -> Any:
        """
        Place a new order.

        Returns:
            Order, or the raw acknowledgement when new_order_resp_type is "ACK"
        """
        self._check_order(order)

        response_type = None if order.new_order_resp_type == "ACK" else Order
        result = await self.gateway.post_signed(self.spec.order_path, order, response_type=response_type)

        logger.info(
            "Order placed",
            product=self.product.value,
            symbol=order.symbol,
            side=order.side,
            client_order_id=order.new_client_order_id
        )

        return result

    def _order_query(
        self,
        symbol: str,
        order_id: Optional[int],
        orig_client_order_id: Optional[str],
        is_isolated: Optional[bool]
    ) -> Dict[str, Any]:
        if order_id is None and orig_client_order_id is None:
            raise InvalidOrderError("Either order_id or orig_client_order_id is required")
        if is_isolated is not None and not self.spec.supports_isolated_margin:
            raise InvalidOrderError(f"isIsolated is not supported on {self.product.value}")

        return {
            "symbol": symbol,
            "orderId": order_id,
            "origClientOrderId": orig_client_order_id,
            "isIsolated": encode_flag(is_isolated) if is_isolated is not None else None,
        }

    async def cancel_order(
        self,
        symbol: str,
        order_id: Optional[int] = None,
        orig_client_order_id: Optional[str] = None,
        is_isolated: Optional[bool] = None
    ) -> Order:
        payload = self._order_query(symbol, order_id, orig_client_order_id, is_isolated)
        result = await self.gateway.delete_signed(self.spec.order_path, payload, response_type=Order)

        logger.info("Order canceled", product=self.product.value, symbol=symbol, order_id=order_id)

        return result

    async def order_status(
        self,
        symbol: str,
        order_id: Optional[int] = None,
        orig_client_order_id: Optional[str] = None,
        is_isolated: Optional[bool] = None
    ) -> Order:
        payload = self._order_query(symbol, order_id, orig_client_order_id, is_isolated)
        return await self.gateway.get_signed(self.spec.order_path, payload, response_type=Order)

    async def open_orders(self, symbol: Optional[str] = None) -> List[Order]:
        return await self.gateway.get_signed(
            self.spec.open_orders_path,
            {"symbol": symbol},
            response_type=List[Order]
        )

    async def account_information(self) -> Dict[str, Any]:
        """Balances and permissions (raw JSON, layout differs per product)."""
        return await self.gateway.get_signed(self.spec.account_path)


class UserStreamApi(_Facade):
    """
    Listen key management for user data streams.

    Keys expire after 60 minutes without a keep-alive.
    """

    async def start(self) -> UserDataStream:
        stream = await self.gateway.post(self.spec.user_stream_path, response_type=UserDataStream)
        logger.info(
            EventType.LISTEN_KEY_CREATED,
            product=self.product.value,
            listen_key=mask_listen_key(stream.listen_key)
        )
        return stream

    async def keep_alive(self, listen_key: str) -> Success:
        result = await self.gateway.put(self.spec.user_stream_path, listen_key, response_type=Success)
        logger.debug(EventType.LISTEN_KEY_KEPT_ALIVE, listen_key=mask_listen_key(listen_key))
        return result

    async def close(self, listen_key: str) -> Success:
        result = await self.gateway.delete(self.spec.user_stream_path, listen_key, response_type=Success)
        logger.info(EventType.LISTEN_KEY_CLOSED, listen_key=mask_listen_key(listen_key))
        return result
