"""
WebSocket event models.

Tagged events carry their wire tag (the ``"e"`` field) in ``EVENT_TYPE``; the
parser dispatches on it. Field names follow Binance's single-letter keys:
https://binance-docs.github.io/apidocs/spot/en/#websocket-market-streams
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from .models import (
    ContingencyType,
    ExecutionType,
    FallbackEnum,
    FuturesOrderType,
    MarginType,
    OrderSide,
    OrderStatus,
    OrderType,
    PositionSide,
    PriceLevel,
    TimeInForce,
    WorkingType,
)
from .serialization import parse_bool, to_decimal, to_optional_decimal


class ReasonType(FallbackEnum):
    """Why a futures ACCOUNT_UPDATE was pushed."""
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    ORDER = "ORDER"
    FUNDING_FEE = "FUNDING_FEE"
    WITHDRAW_REJECT = "WITHDRAW_REJECT"
    ADJUSTMENT = "ADJUSTMENT"
    INSURANCE_CLEAR = "INSURANCE_CLEAR"
    ADMIN_DEPOSIT = "ADMIN_DEPOSIT"
    ADMIN_WITHDRAW = "ADMIN_WITHDRAW"
    MARGIN_TRANSFER = "MARGIN_TRANSFER"
    MARGIN_TYPE_CHANGE = "MARGIN_TYPE_CHANGE"
    ASSET_TRANSFER = "ASSET_TRANSFER"
    OPTIONS_PREMIUM_FEE = "OPTIONS_PREMIUM_FEE"
    OPTIONS_SETTLE_PROFIT = "OPTIONS_SETTLE_PROFIT"
    AUTO_EXCHANGE = "AUTO_EXCHANGE"
    COIN_SWAP_DEPOSIT = "COIN_SWAP_DEPOSIT"
    COIN_SWAP_WITHDRAW = "COIN_SWAP_WITHDRAW"
    OTHER = "OTHER"


class SelfTradePreventionMode(FallbackEnum):
    NONE = "NONE"
    EXPIRE_TAKER = "EXPIRE_TAKER"
    EXPIRE_BOTH = "EXPIRE_BOTH"
    EXPIRE_MAKER = "EXPIRE_MAKER"
    OTHER = "OTHER"


class PriceMatch(FallbackEnum):
    NONE = "NONE"
    OPPONENT = "OPPONENT"
    OPPONENT_5 = "OPPONENT_5"
    OPPONENT_10 = "OPPONENT_10"
    OPPONENT_20 = "OPPONENT_20"
    QUEUE = "QUEUE"
    QUEUE_5 = "QUEUE_5"
    QUEUE_10 = "QUEUE_10"
    QUEUE_20 = "QUEUE_20"
    OTHER = "OTHER"


def _levels(raw: List[Any]) -> List[PriceLevel]:
    return [PriceLevel.parse(level) for level in raw]


# ============================================================================
# MARKET STREAMS
# ============================================================================

@dataclass
class TradeEvent:
    EVENT_TYPE = "trade"

    event_time: int
    symbol: str
    trade_id: int
    price: Decimal
    qty: Decimal
    buyer_order_id: Optional[int]
    seller_order_id: Optional[int]
    trade_order_time: int
    is_buyer_maker: bool

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "TradeEvent":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            trade_id=int(data["t"]),
            price=to_decimal(data["p"]),
            qty=to_decimal(data["q"]),
            buyer_order_id=data.get("b"),
            seller_order_id=data.get("a"),
            trade_order_time=int(data["T"]),
            is_buyer_maker=parse_bool(data["m"])
        )


@dataclass
class AggTradeEvent:
    EVENT_TYPE = "aggTrade"

    event_time: int
    symbol: str
    aggregated_trade_id: int
    price: Decimal
    qty: Decimal
    first_break_trade_id: int
    last_break_trade_id: int
    trade_order_time: int
    is_buyer_maker: bool

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "AggTradeEvent":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            aggregated_trade_id=int(data["a"]),
            price=to_decimal(data["p"]),
            qty=to_decimal(data["q"]),
            first_break_trade_id=int(data["f"]),
            last_break_trade_id=int(data["l"]),
            trade_order_time=int(data["T"]),
            is_buyer_maker=parse_bool(data["m"])
        )


@dataclass
class KlineData:
    """Candle payload nested under ``"k"``."""
    start_time: int
    end_time: int
    symbol: str
    interval: str
    first_trade_id: int
    last_trade_id: int
    open: Decimal
    close: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal
    number_of_trades: int
    is_final_bar: bool
    quote_volume: Decimal
    active_buy_volume: Decimal
    active_volume_buy_quote: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "KlineData":
        return cls(
            start_time=int(data["t"]),
            end_time=int(data["T"]),
            symbol=data["s"],
            interval=data["i"],
            first_trade_id=int(data["f"]),
            last_trade_id=int(data["L"]),
            open=to_decimal(data["o"]),
            close=to_decimal(data["c"]),
            high=to_decimal(data["h"]),
            low=to_decimal(data["l"]),
            volume=to_decimal(data["v"]),
            number_of_trades=int(data["n"]),
            is_final_bar=parse_bool(data["x"]),
            quote_volume=to_decimal(data["q"]),
            active_buy_volume=to_decimal(data["V"]),
            active_volume_buy_quote=to_decimal(data["Q"])
        )


@dataclass
class KlineEvent:
    EVENT_TYPE = "kline"

    event_time: int
    symbol: str
    kline: KlineData

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "KlineEvent":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            kline=KlineData.parse(data["k"])
        )


@dataclass
class DayTickerEvent:
    """
    Rolling 24h statistics.

    Futures tickers omit the previous close and best bid/ask fields.
    """
    EVENT_TYPE = "24hrTicker"

    event_time: int
    symbol: str
    price_change: Decimal
    price_change_percent: Decimal
    average_price: Decimal
    current_close: Decimal
    current_close_qty: Decimal
    open: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal
    quote_volume: Decimal
    open_time: int
    close_time: int
    first_trade_id: int
    last_trade_id: int
    num_trades: int
    prev_close: Optional[Decimal] = None
    best_bid: Optional[Decimal] = None
    best_bid_qty: Optional[Decimal] = None
    best_ask: Optional[Decimal] = None
    best_ask_qty: Optional[Decimal] = None

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "DayTickerEvent":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            price_change=to_decimal(data["p"]),
            price_change_percent=to_decimal(data["P"]),
            average_price=to_decimal(data["w"]),
            current_close=to_decimal(data["c"]),
            current_close_qty=to_decimal(data["Q"]),
            open=to_decimal(data["o"]),
            high=to_decimal(data["h"]),
            low=to_decimal(data["l"]),
            volume=to_decimal(data["v"]),
            quote_volume=to_decimal(data["q"]),
            open_time=int(data["O"]),
            close_time=int(data["C"]),
            first_trade_id=int(data["F"]),
            last_trade_id=int(data["L"]),
            num_trades=int(data["n"]),
            prev_close=to_optional_decimal(data.get("x")),
            best_bid=to_optional_decimal(data.get("b")),
            best_bid_qty=to_optional_decimal(data.get("B")),
            best_ask=to_optional_decimal(data.get("a")),
            best_ask_qty=to_optional_decimal(data.get("A"))
        )


@dataclass
class MiniDayTickerEvent:
    EVENT_TYPE = "24hrMiniTicker"

    event_time: int
    symbol: str
    close: Decimal
    open: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal
    quote_volume: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "MiniDayTickerEvent":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            close=to_decimal(data["c"]),
            open=to_decimal(data["o"]),
            high=to_decimal(data["h"]),
            low=to_decimal(data["l"]),
            volume=to_decimal(data["v"]),
            quote_volume=to_decimal(data["q"])
        )


@dataclass
class DepthOrderBookEvent:
    """Diff depth update. Futures frames also carry ``pu``."""
    EVENT_TYPE = "depthUpdate"

    event_time: int
    symbol: str
    first_update_id: int
    final_update_id: int
    bids: List[PriceLevel]
    asks: List[PriceLevel]
    previous_final_update_id: Optional[int] = None

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "DepthOrderBookEvent":
        previous = data.get("pu")
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            first_update_id=int(data["U"]),
            final_update_id=int(data["u"]),
            bids=_levels(data["b"]),
            asks=_levels(data["a"]),
            previous_final_update_id=int(previous) if previous is not None else None
        )


@dataclass
class BookTickerEvent:
    """
    Best bid/ask update.

    Spot frames carry no tag and are decoded through the untagged fallback;
    futures frames carry ``"e": "bookTicker"``.
    """
    EVENT_TYPE = "bookTicker"

    update_id: int
    symbol: str
    best_bid: Decimal
    best_bid_qty: Decimal
    best_ask: Decimal
    best_ask_qty: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "BookTickerEvent":
        return cls(
            update_id=int(data["u"]),
            symbol=data["s"],
            best_bid=to_decimal(data["b"]),
            best_bid_qty=to_decimal(data["B"]),
            best_ask=to_decimal(data["a"]),
            best_ask_qty=to_decimal(data["A"])
        )


@dataclass
class MarkPriceEvent:
    EVENT_TYPE = "markPriceUpdate"

    event_time: int
    symbol: str
    mark_price: Decimal
    index_price: Optional[Decimal]
    estimated_settle_price: Optional[Decimal]
    funding_rate: Optional[Decimal]
    next_funding_time: int

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "MarkPriceEvent":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            mark_price=to_decimal(data["p"]),
            index_price=to_optional_decimal(data.get("i")),
            estimated_settle_price=to_optional_decimal(data.get("P")),
            funding_rate=to_optional_decimal(data.get("r")),
            next_funding_time=int(data["T"])
        )


# ============================================================================
# SPOT USER DATA STREAM
# ============================================================================

@dataclass
class EventBalance:
    asset: str
    free: Decimal
    locked: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "EventBalance":
        return cls(
            asset=data["a"],
            free=to_decimal(data["f"]),
            locked=to_decimal(data["l"])
        )


@dataclass
class AccountPositionUpdate:
    EVENT_TYPE = "outboundAccountPosition"

    event_time: int
    last_update_time: int
    balances: List[EventBalance]

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "AccountPositionUpdate":
        return cls(
            event_time=int(data["E"]),
            last_update_time=int(data["u"]),
            balances=[EventBalance.parse(b) for b in data["B"]]
        )


@dataclass
class BalanceUpdate:
    EVENT_TYPE = "balanceUpdate"

    event_time: int
    asset: str
    delta: Decimal
    clear_time: int

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "BalanceUpdate":
        return cls(
            event_time=int(data["E"]),
            asset=data["a"],
            delta=to_decimal(data["d"]),
            clear_time=int(data["T"])
        )


@dataclass
class OrderUpdate:
    """Spot/margin ``executionReport``."""
    EVENT_TYPE = "executionReport"

    event_time: int
    symbol: str
    client_order_id: str
    side: OrderSide
    order_type: OrderType
    time_in_force: TimeInForce
    qty: Decimal
    price: Decimal
    stop_price: Decimal
    iceberg_qty: Decimal
    order_list_id: int
    origin_client_id: Optional[str]
    execution_type: ExecutionType
    current_order_status: OrderStatus
    order_reject_reason: str
    order_id: int
    qty_last_executed: Decimal
    cumulative_filled_qty: Decimal
    last_executed_price: Decimal
    commission: Decimal
    commission_asset: Optional[str]
    trade_order_time: int
    trade_id: int
    is_order_on_the_book: bool
    is_buyer_maker: bool
    order_creation_time: int
    cumulative_quote_asset_transacted_qty: Decimal
    last_quote_asset_transacted_qty: Decimal
    quote_order_qty: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "OrderUpdate":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            client_order_id=data["c"],
            side=OrderSide(data["S"]),
            order_type=OrderType(data["o"]),
            time_in_force=TimeInForce(data["f"]),
            qty=to_decimal(data["q"]),
            price=to_decimal(data["p"]),
            stop_price=to_decimal(data["P"]),
            iceberg_qty=to_decimal(data["F"]),
            order_list_id=int(data["g"]),
            origin_client_id=data.get("C") or None,
            execution_type=ExecutionType(data["x"]),
            current_order_status=OrderStatus(data["X"]),
            order_reject_reason=data["r"],
            order_id=int(data["i"]),
            qty_last_executed=to_decimal(data["l"]),
            cumulative_filled_qty=to_decimal(data["z"]),
            last_executed_price=to_decimal(data["L"]),
            commission=to_decimal(data["n"]),
            commission_asset=data.get("N"),
            trade_order_time=int(data["T"]),
            trade_id=int(data["t"]),
            is_order_on_the_book=parse_bool(data["w"]),
            is_buyer_maker=parse_bool(data["m"]),
            order_creation_time=int(data["O"]),
            cumulative_quote_asset_transacted_qty=to_decimal(data["Z"]),
            last_quote_asset_transacted_qty=to_decimal(data["Y"]),
            quote_order_qty=to_decimal(data["Q"])
        )


@dataclass
class OrderListOrder:
    symbol: str
    order_id: int
    client_order_id: str

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "OrderListOrder":
        return cls(symbol=data["s"], order_id=int(data["i"]), client_order_id=data["c"])


@dataclass
class OrderListUpdate:
    """OCO/OTO ``listStatus``."""
    EVENT_TYPE = "listStatus"

    event_time: int
    symbol: str
    order_list_id: int
    contingency_type: ContingencyType
    list_status_type: str
    list_order_status: str
    list_reject_reason: str
    list_client_order_id: str
    transaction_time: int
    orders: List[OrderListOrder] = field(default_factory=list)

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "OrderListUpdate":
        return cls(
            event_time=int(data["E"]),
            symbol=data["s"],
            order_list_id=int(data["g"]),
            contingency_type=ContingencyType(data["c"]),
            list_status_type=data["l"],
            list_order_status=data["L"],
            list_reject_reason=data["r"],
            list_client_order_id=data["C"],
            transaction_time=int(data["T"]),
            orders=[OrderListOrder.parse(o) for o in data["O"]]
        )


# ============================================================================
# FUTURES USER DATA STREAM
# ============================================================================

@dataclass
class FuturesBalance:
    asset: str
    wallet_balance: Decimal
    cross_wallet_balance: Decimal
    balance_change: Decimal

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "FuturesBalance":
        return cls(
            asset=data["a"],
            wallet_balance=to_decimal(data["wb"]),
            cross_wallet_balance=to_decimal(data["cw"]),
            balance_change=to_decimal(data["bc"])
        )


@dataclass
class FuturesPosition:
    symbol: str
    position_amount: Decimal
    entry_price: Decimal
    breakeven_price: Optional[Decimal]
    accumulated_realized: Decimal
    unrealized_pnl: Decimal
    margin_type: MarginType
    isolated_wallet: Decimal
    position_side: PositionSide

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "FuturesPosition":
        return cls(
            symbol=data["s"],
            position_amount=to_decimal(data["pa"]),
            entry_price=to_decimal(data["ep"]),
            breakeven_price=to_optional_decimal(data.get("bep")),
            accumulated_realized=to_decimal(data["cr"]),
            unrealized_pnl=to_decimal(data["up"]),
            margin_type=MarginType(data["mt"]),
            isolated_wallet=to_decimal(data["iw"]),
            position_side=PositionSide(data["ps"])
        )


@dataclass
class FuturesAccount:
    reason_type: ReasonType
    balances: List[FuturesBalance]
    positions: List[FuturesPosition]

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "FuturesAccount":
        return cls(
            reason_type=ReasonType(data["m"]),
            balances=[FuturesBalance.parse(b) for b in data["B"]],
            positions=[FuturesPosition.parse(p) for p in data["P"]]
        )


@dataclass
class FuturesAccountUpdate:
    EVENT_TYPE = "ACCOUNT_UPDATE"

    event_time: int
    transaction_time: int
    account: FuturesAccount

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "FuturesAccountUpdate":
        return cls(
            event_time=int(data["E"]),
            transaction_time=int(data["T"]),
            account=FuturesAccount.parse(data["a"])
        )


@dataclass
class FuturesOrder:
    """Order payload nested under ``"o"`` in ORDER_TRADE_UPDATE."""
    symbol: str
    client_order_id: str
    side: OrderSide
    order_type: FuturesOrderType
    time_in_force: TimeInForce
    quantity: Decimal
    price: Decimal
    average_price: Decimal
    stop_price: Decimal
    execution_type: ExecutionType
    order_status: OrderStatus
    order_id: int
    order_last_filled_quantity: Decimal
    order_filled_accumulated_quantity: Decimal
    last_filled_price: Decimal
    trade_time: int
    trade_id: int
    bids_notional: Decimal
    ask_notional: Decimal
    is_buyer_maker: bool
    is_reduce_only: bool
    stop_price_working_type: WorkingType
    original_order_type: FuturesOrderType
    position_side: PositionSide
    close_all: bool
    price_protect: bool
    realized_profit: Decimal
    self_trade_prevention_mode: SelfTradePreventionMode
    price_match: PriceMatch
    good_till_date: int
    commission_asset: Optional[str] = None
    commission: Optional[Decimal] = None
    activation_price: Optional[Decimal] = None
    callback_rate: Optional[Decimal] = None

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "FuturesOrder":
        return cls(
            symbol=data["s"],
            client_order_id=data["c"],
            side=OrderSide(data["S"]),
            order_type=FuturesOrderType(data["o"]),
            time_in_force=TimeInForce(data["f"]),
            quantity=to_decimal(data["q"]),
            price=to_decimal(data["p"]),
            average_price=to_decimal(data["ap"]),
            stop_price=to_decimal(data["sp"]),
            execution_type=ExecutionType(data["x"]),
            order_status=OrderStatus(data["X"]),
            order_id=int(data["i"]),
            order_last_filled_quantity=to_decimal(data["l"]),
            order_filled_accumulated_quantity=to_decimal(data["z"]),
            last_filled_price=to_decimal(data["L"]),
            trade_time=int(data["T"]),
            trade_id=int(data["t"]),
            bids_notional=to_decimal(data["b"]),
            ask_notional=to_decimal(data["a"]),
            is_buyer_maker=parse_bool(data["m"]),
            is_reduce_only=parse_bool(data["R"]),
            stop_price_working_type=WorkingType(data["wt"]),
            original_order_type=FuturesOrderType(data["ot"]),
            position_side=PositionSide(data["ps"]),
            close_all=parse_bool(data["cp"]),
            price_protect=parse_bool(data["pP"]),
            realized_profit=to_decimal(data["rp"]),
            self_trade_prevention_mode=SelfTradePreventionMode(data["V"]),
            price_match=PriceMatch(data["pm"]),
            good_till_date=int(data["gtd"]),
            commission_asset=data.get("N"),
            commission=to_optional_decimal(data.get("n")),
            activation_price=to_optional_decimal(data.get("AP")),
            callback_rate=to_optional_decimal(data.get("cr"))
        )


@dataclass
class OrderTradeUpdate:
    EVENT_TYPE = "ORDER_TRADE_UPDATE"

    event_time: int
    transaction_time: int
    order: FuturesOrder

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "OrderTradeUpdate":
        return cls(
            event_time=int(data["E"]),
            transaction_time=int(data["T"]),
            order=FuturesOrder.parse(data["o"])
        )


# ============================================================================
# COMBINED STREAM ENVELOPE
# ============================================================================

@dataclass
class CombinedStreamEvent:
    """``{"stream": "<name>", "data": <event>}`` from /stream?streams=..."""
    stream: str
    data: Any

    def parse_stream(self) -> Tuple[str, str]:
        """
        Split the stream name into (name, channel).

        "btcusdt@depth5@1000ms" -> ("btcusdt", "depth5@1000ms")
        "!ticker@arr" -> ("ticker", "arr")
        """
        stream = self.stream[1:] if self.stream.startswith("!") else self.stream
        name, _, channel = stream.partition("@")
        return name, channel
