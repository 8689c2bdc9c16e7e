"""
Binance REST and WebSocket client module.
"""

from .binance_gateway import BinanceGateway
from .exceptions import (
    ExchangeError,
    LocalPreconditionError,
    ClockError,
    InvalidHeaderError,
    InvalidUrlError,
    InvalidOrderError,
    TransportError,
    RequestTimeoutError,
    DecodeError,
    ExchangeAPIError,
    UnauthorizedError,
    InternalServerError,
    ServiceUnavailableError,
    UnexpectedStatusError,
    BusinessError,
    BinanceAPIError,
    InvalidPriceError,
    InvalidListenKeyError,
    UnknownSymbolError,
    WebSocketError,
    HandshakeError,
    NotConnectedError,
    WebSocketDisconnectedError,
    register_error,
    translate_error
)
from .models import (
    OrderSide,
    OrderType,
    FuturesOrderType,
    TimeInForce,
    OrderStatus,
    ExecutionType,
    PositionSide,
    WorkingType,
    MarginType,
    ContingencyType,
    ErrorResponse,
    Success,
    ServerTime,
    UserDataStream,
    PriceLevel,
    OrderBook,
    SymbolPrice,
    BookTicker,
    Kline,
    Order,
    OrderRequest
)
from .ws_models import (
    ReasonType,
    SelfTradePreventionMode,
    PriceMatch,
    TradeEvent,
    AggTradeEvent,
    KlineEvent,
    DayTickerEvent,
    MiniDayTickerEvent,
    DepthOrderBookEvent,
    BookTickerEvent,
    MarkPriceEvent,
    AccountPositionUpdate,
    BalanceUpdate,
    OrderUpdate,
    OrderListUpdate,
    FuturesAccountUpdate,
    OrderTradeUpdate,
    CombinedStreamEvent
)
from .exchange_config import (
    BinanceConfig,
    Credentials,
    PRODUCTION_CONFIG,
    TESTNET_CONFIG,
    get_config
)
from .products import Product, ProductSpec, get_product_spec
from .facades import GeneralApi, MarketApi, AccountApi, UserStreamApi
from .signer import build_query, build_signed_query, sign, append_signature, verify_signature
from .websocket_parser import WebSocketParser, SPOT_EVENT_TYPES, FUTURES_EVENT_TYPES
from .websocket_session import WebSocketSession
from . import streams

__all__ = [
    # Gateway and facades
    "BinanceGateway",
    "GeneralApi",
    "MarketApi",
    "AccountApi",
    "UserStreamApi",

    # Signing
    "build_query",
    "build_signed_query",
    "sign",
    "append_signature",
    "verify_signature",

    # Exceptions
    "ExchangeError",
    "LocalPreconditionError",
    "ClockError",
    "InvalidHeaderError",
    "InvalidUrlError",
    "InvalidOrderError",
    "TransportError",
    "RequestTimeoutError",
    "DecodeError",
    "ExchangeAPIError",
    "UnauthorizedError",
    "InternalServerError",
    "ServiceUnavailableError",
    "UnexpectedStatusError",
    "BusinessError",
    "BinanceAPIError",
    "InvalidPriceError",
    "InvalidListenKeyError",
    "UnknownSymbolError",
    "WebSocketError",
    "HandshakeError",
    "NotConnectedError",
    "WebSocketDisconnectedError",
    "register_error",
    "translate_error",

    # Data models
    "OrderSide",
    "OrderType",
    "FuturesOrderType",
    "TimeInForce",
    "OrderStatus",
    "ExecutionType",
    "PositionSide",
    "WorkingType",
    "MarginType",
    "ContingencyType",
    "ErrorResponse",
    "Success",
    "ServerTime",
    "UserDataStream",
    "PriceLevel",
    "OrderBook",
    "SymbolPrice",
    "BookTicker",
    "Kline",
    "Order",
    "OrderRequest",

    # WebSocket events
    "ReasonType",
    "SelfTradePreventionMode",
    "PriceMatch",
    "TradeEvent",
    "AggTradeEvent",
    "KlineEvent",
    "DayTickerEvent",
    "MiniDayTickerEvent",
    "DepthOrderBookEvent",
    "BookTickerEvent",
    "MarkPriceEvent",
    "AccountPositionUpdate",
    "BalanceUpdate",
    "OrderUpdate",
    "OrderListUpdate",
    "FuturesAccountUpdate",
    "OrderTradeUpdate",
    "CombinedStreamEvent",

    # Config
    "BinanceConfig",
    "Credentials",
    "PRODUCTION_CONFIG",
    "TESTNET_CONFIG",
    "get_config",
    "Product",
    "ProductSpec",
    "get_product_spec",

    # WebSocket
    "WebSocketParser",
    "WebSocketSession",
    "SPOT_EVENT_TYPES",
    "FUTURES_EVENT_TYPES",
    "streams"
]
