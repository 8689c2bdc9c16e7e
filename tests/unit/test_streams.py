"""
Unit tests for stream name builders.
"""

import pytest

from binance_client.exchange import streams


@pytest.mark.unit
@pytest.mark.parametrize("name,expected", [
    (streams.agg_trade_stream("BTCUSDT"), "btcusdt@aggTrade"),
    (streams.trade_stream("BTCUSDT"), "btcusdt@trade"),
    (streams.kline_stream("BTCUSDT", "1m"), "btcusdt@kline_1m"),
    (streams.book_ticker_stream("BTCUSDT"), "btcusdt@bookTicker"),
    (streams.all_book_ticker_stream(), "!bookTicker"),
    (streams.ticker_stream("BTCUSDT"), "btcusdt@ticker"),
    (streams.all_ticker_stream(), "!ticker@arr"),
    (streams.mini_ticker_stream("BTCUSDT"), "btcusdt@miniTicker"),
    (streams.all_mini_ticker_stream(), "!miniTicker@arr"),
    (streams.partial_book_depth_stream("BTCUSDT", 5, 1000), "btcusdt@depth5@1000ms"),
    (streams.diff_book_depth_stream("BTCUSDT", 100), "btcusdt@depth@100ms"),
    (streams.mark_price_stream("BTCUSDT", 1), "btcusdt@markPrice@1s"),
    (streams.all_mark_price_stream(3), "!markPrice@arr@3s"),
])
def test_stream_names(name, expected):
    assert name == expected


@pytest.mark.unit
def test_symbols_are_lowercased():
    assert streams.trade_stream("EthBtc") == "ethbtc@trade"
