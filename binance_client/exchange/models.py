"""
Typed REST data models and shared enumerations.

Every model exposes a ``parse`` classmethod that builds it from decoded JSON.
``parse`` raises KeyError/ValueError/TypeError on shape mismatch; the gateway
turns those into DecodeError.

Enumerations decode unknown wire values to their OTHER member so that the
exchange adding a value never breaks decoding of the surrounding payload.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .serialization import encode_flag, to_decimal


class FallbackEnum(str, Enum):
    """String enum whose unknown values map to OTHER."""

    @classmethod
    def _missing_(cls, value):
        return cls.__members__.get("OTHER")


class OrderSide(FallbackEnum):
    BUY = "BUY"
    SELL = "SELL"
    OTHER = "OTHER"


class OrderType(FallbackEnum):
    """Spot and margin order types."""
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"
    OTHER = "OTHER"


class FuturesOrderType(FallbackEnum):
    """USD-M and COIN-M futures order types."""
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP = "STOP"
    STOP_MARKET = "STOP_MARKET"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_MARKET = "TAKE_PROFIT_MARKET"
    TRAILING_STOP_MARKET = "TRAILING_STOP_MARKET"
    LIQUIDATION = "LIQUIDATION"
    OTHER = "OTHER"


class TimeInForce(FallbackEnum):
    GTC = "GTC"  # Good Till Cancel
    IOC = "IOC"  # Immediate or Cancel
    FOK = "FOK"  # Fill or Kill
    GTX = "GTX"  # Good Till Crossing (post only)
    GTD = "GTD"  # Good Till Date
    OTHER = "OTHER"


class OrderStatus(FallbackEnum):
    NEW = "NEW"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELED = "CANCELED"
    PENDING_CANCEL = "PENDING_CANCEL"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    EXPIRED_IN_MATCH = "EXPIRED_IN_MATCH"
    TRADE = "TRADE"
    OTHER = "OTHER"


class ExecutionType(FallbackEnum):
    NEW = "NEW"
    CANCELED = "CANCELED"
    REPLACED = "REPLACED"
    REJECTED = "REJECTED"
    TRADE = "TRADE"
    EXPIRED = "EXPIRED"
    TRADE_PREVENTION = "TRADE_PREVENTION"
    AMENDMENT = "AMENDMENT"
    CALCULATED = "CALCULATED"  # Liquidation execution
    OTHER = "OTHER"


class PositionSide(FallbackEnum):
    """Position side for futures trading."""
    BOTH = "BOTH"  # One-way mode
    LONG = "LONG"
    SHORT = "SHORT"
    OTHER = "OTHER"


class WorkingType(FallbackEnum):
    MARK_PRICE = "MARK_PRICE"
    CONTRACT_PRICE = "CONTRACT_PRICE"
    OTHER = "OTHER"


class MarginType(FallbackEnum):
    ISOLATED = "isolated"
    CROSS = "cross"
    OTHER = "OTHER"

    @classmethod
    def _missing_(cls, value):
        # REST answers "ISOLATED", streams answer "isolated"
        if isinstance(value, str) and value.lower() != value:
            return cls(value.lower())
        return cls.OTHER


class ContingencyType(FallbackEnum):
    OCO = "OCO"
    OTO = "OTO"
    OTHER = "OTHER"


# ============================================================================
# ERROR BODY
# ============================================================================

@dataclass
class ErrorResponse:
    """Shared error body: {"code": -1013, "msg": "...", ...extra}."""
    code: int
    msg: str
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "ErrorResponse":
        code = data["code"]
        if isinstance(code, bool) or not isinstance(code, int):
            raise TypeError(f"Error code must be an integer, got {code!r}")
        msg = data["msg"]
        if not isinstance(msg, str):
            raise TypeError(f"Error message must be a string, got {msg!r}")
        extra = {k: v for k, v in data.items() if k not in ("code", "msg")}
        return cls(code=code, msg=msg, extra=extra)


# ============================================================================
# GENERAL
# ============================================================================

@dataclass
class Success:
    """Empty `{}` acknowledgement (ping, listen key keep-alive/close)."""

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "Success":
        if not isinstance(data, dict):
            raise TypeError(f"Expected object, got {type(data).__name__}")
        return cls()


@dataclass
class ServerTime:
    server_time: int  # epoch millis

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "ServerTime":
        return cls(server_time=int(data["serverTime"]))


@dataclass
class UserDataStream:
    listen_key: str

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "UserDataStream":
        return cls(listen_key=data["listenKey"])


# ============================================================================
# MARKET DATA
# ============================================================================

@dataclass
class PriceLevel:
    price: Decimal
    qty: Decimal

    @classmethod
    def parse(cls, data: List[Any]) -> "PriceLevel":
        return cls(price=to_decimal(data[0]), qty=to_decimal(data[1]))


@dataclass
class OrderBook:
    """Order book snapshot (REST depth or partial depth stream)."""
    last_update_id: int
    bids: List[PriceLevel]
    asks: List[PriceLevel]

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "OrderBook":
        return cls(
            last_update_id=int(data["lastUpdateId"]),
            bids=[PriceLevel.parse(level) for level in data["bids"]],
            asks=[PriceLevel.parse(level) for level in data["asks"]]
        )

    @property
    def best_bid(self) -> Optional[Decimal]:
        """Get best bid price."""
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Optional[Decimal]:
        """Get best ask price."""
        return self.asks[0].price if self.asks else None

    @property
    def spread(self) -> Optional[Decimal]:
        """Calculate bid-ask spread."""
        if self.best_bid is not None and self.best_ask is not None:
            return self.best_ask - self.best_bid
        return None


@dataclass
class SymbolPrice:
    symbol: str
    price: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "SymbolPrice":
        return cls(symbol=data["symbol"], price=to_decimal(data["price"]))


@dataclass
class BookTicker:
    symbol: str
    bid_price: Decimal
    bid_qty: Decimal
    ask_price: Decimal
    ask_qty: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "BookTicker":
        return cls(
            symbol=data["symbol"],
            bid_price=to_decimal(data["bidPrice"]),
            bid_qty=to_decimal(data["bidQty"]),
            ask_price=to_decimal(data["askPrice"]),
            ask_qty=to_decimal(data["askQty"])
        )


@dataclass
class Kline:
    """
    REST kline (candlestick).

    Binance returns klines as positional arrays:
    [open_time, open, high, low, close, volume, close_time, quote_volume,
     trades, taker_buy_base, taker_buy_quote, ignore]
    """
    open_time: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal
    close_time: int
    quote_asset_volume: Decimal
    number_of_trades: int
    taker_buy_base_asset_volume: Decimal
    taker_buy_quote_asset_volume: Decimal

    @classmethod
    def parse(cls, data: List[Any]) -> "Kline":
        return cls(
            open_time=int(data[0]),
            open=to_decimal(data[1]),
            high=to_decimal(data[2]),
            low=to_decimal(data[3]),
            close=to_decimal(data[4]),
            volume=to_decimal(data[5]),
            close_time=int(data[6]),
            quote_asset_volume=to_decimal(data[7]),
            number_of_trades=int(data[8]),
            taker_buy_base_asset_volume=to_decimal(data[9]),
            taker_buy_quote_asset_volume=to_decimal(data[10])
        )


# ============================================================================
# ORDERS
# ============================================================================

@dataclass
class Order:
    """
    Order as returned by place/cancel/query endpoints.

    Spot, margin and futures answers share these fields; product specific
    fields stay available in `raw_data`.
    """
    symbol: str
    order_id: int
    client_order_id: str
    side: OrderSide
    order_type: str
    status: OrderStatus
    price: Decimal
    orig_qty: Decimal
    executed_qty: Decimal
    time_in_force: Optional[TimeInForce] = None
    position_side: Optional[PositionSide] = None
    update_time: Optional[int] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "Order":
        time_in_force = data.get("timeInForce")
        position_side = data.get("positionSide")
        update_time = data.get("updateTime", data.get("transactTime"))

        return cls(
            symbol=data["symbol"],
            order_id=int(data["orderId"]),
            client_order_id=data["clientOrderId"],
            side=OrderSide(data["side"]),
            order_type=data["type"],
            status=OrderStatus(data["status"]),
            price=to_decimal(data.get("price", "0")),
            orig_qty=to_decimal(data.get("origQty", "0")),
            executed_qty=to_decimal(data.get("executedQty", "0")),
            time_in_force=TimeInForce(time_in_force) if time_in_force else None,
            position_side=PositionSide(position_side) if position_side else None,
            update_time=int(update_time) if update_time is not None else None,
            raw_data=data
        )

    @property
    def is_filled(self) -> bool:
        """Check if order is fully filled."""
        return self.status == OrderStatus.FILLED

    @property
    def remaining_qty(self) -> Decimal:
        return self.orig_qty - self.executed_qty


@dataclass
class OrderRequest:
    """
    New order payload.

    Field declaration order is the order parameters are sent (and signed) in.
    `position_side` is only accepted by futures products, `is_isolated` only
    by margin.
    """
    symbol: str
    side: OrderSide
    order_type: Any  # OrderType or FuturesOrderType
    time_in_force: Optional[TimeInForce] = None
    quantity: Optional[Decimal] = None
    quote_order_qty: Optional[Decimal] = None
    price: Optional[Decimal] = None
    stop_price: Optional[Decimal] = None
    new_client_order_id: Optional[str] = None
    position_side: Optional[PositionSide] = None
    reduce_only: Optional[bool] = None
    is_isolated: Optional[bool] = None
    new_order_resp_type: Optional[str] = None

    def __post_init__(self):
        """Ensure Decimal types for precision."""
        for field_name in ["quantity", "quote_order_qty", "price", "stop_price"]:
            value = getattr(self, field_name)
            if value is not None and not isinstance(value, Decimal):
                setattr(self, field_name, Decimal(str(value)))

    def to_params(self) -> Dict[str, Any]:
        params = {
            "symbol": self.symbol,
            "side": self.side,
            "type": self.order_type,
            "timeInForce": self.time_in_force,
            "quantity": self.quantity,
            "quoteOrderQty": self.quote_order_qty,
            "price": self.price,
            "stopPrice": self.stop_price,
            "newClientOrderId": self.new_client_order_id,
            "positionSide": self.position_side,
            "reduceOnly": self.reduce_only,
            "isIsolated": encode_flag(self.is_isolated) if self.is_isolated is not None else None,
            "newOrderRespType": self.new_order_resp_type,
        }
        return {key: value for key, value in params.items() if value is not None}

