"""
Stream name builders.

Names are passed to WebSocketSession.connect / connect_multiple. Symbols are
lowercased as Binance requires.
"""

from typing import Union


def _symbol(symbol: str) -> str:
    return symbol.lower()


def agg_trade_stream(symbol: str) -> str:
    return f"{_symbol(symbol)}@aggTrade"


def trade_stream(symbol: str) -> str:
    return f"{_symbol(symbol)}@trade"


def kline_stream(symbol: str, interval: str) -> str:
    """
    Candlestick stream.

    Args:
        symbol: Trading symbol (e.g., "BTCUSDT")
        interval: Kline interval (e.g., "1m", "15m", "1h", "1d")
    """
    return f"{_symbol(symbol)}@kline_{interval}"


def book_ticker_stream(symbol: str) -> str:
    return f"{_symbol(symbol)}@bookTicker"


def all_book_ticker_stream() -> str:
    return "!bookTicker"


def ticker_stream(symbol: str) -> str:
    return f"{_symbol(symbol)}@ticker"


def all_ticker_stream() -> str:
    return "!ticker@arr"


def mini_ticker_stream(symbol: str) -> str:
    return f"{_symbol(symbol)}@miniTicker"


def all_mini_ticker_stream() -> str:
    return "!miniTicker@arr"


def partial_book_depth_stream(symbol: str, levels: int, update_speed: int) -> str:
    """
    Top-of-book snapshot stream.

    Args:
        symbol: Trading symbol
        levels: 5, 10 or 20
        update_speed: Update interval in ms (100 or 1000)
    """
    return f"{_symbol(symbol)}@depth{levels}@{update_speed}ms"


def diff_book_depth_stream(symbol: str, update_speed: int) -> str:
    """Order book diff stream; update_speed in ms."""
    return f"{_symbol(symbol)}@depth@{update_speed}ms"


def mark_price_stream(symbol: str, update_speed: Union[int, str]) -> str:
    """Futures mark price stream; update_speed in seconds (1 or 3)."""
    return f"{_symbol(symbol)}@markPrice@{update_speed}s"


def all_mark_price_stream(update_speed: Union[int, str]) -> str:
    return f"!markPrice@arr@{update_speed}s"
