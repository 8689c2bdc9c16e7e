"""
Integration tests for WebSocketSession against a local websockets server.

Run with: pytest tests/integration/test_websocket_integration.py -m integration
"""

import asyncio
import json
import pytest
from dataclasses import replace
from decimal import Decimal

import websockets

from binance_client.exchange.exceptions import HandshakeError, WebSocketDisconnectedError
from binance_client.exchange.exchange_config import PRODUCTION_CONFIG
from binance_client.exchange.websocket_session import WebSocketSession
from binance_client.exchange.ws_models import BookTickerEvent, CombinedStreamEvent, TradeEvent


TRADE = {
    "e": "trade", "E": 1672515782136, "s": "BNBBTC", "t": 12345, "p": "0.001",
    "q": "100", "T": 1672515782136, "m": True, "M": True
}

BOOK_TICKER = {
    "u": 400900217, "s": "BNBUSDT", "b": "25.35190000", "B": "31.21000000",
    "a": "25.36520000", "A": "40.66000000"
}


async def start_server(frames):
    """Serve `frames` to every client, then close with 1000."""
    paths = []

    async def handler(websocket):
        request = getattr(websocket, "request", None)
        paths.append(request.path if request is not None else websocket.path)
        for frame in frames:
            await websocket.send(frame)
        await websocket.close(1000, "done")

    server = await websockets.serve(handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    config = replace(PRODUCTION_CONFIG, ws_endpoint=f"ws://127.0.0.1:{port}")
    return server, config, paths


async def stop_server(server):
    server.close()
    await server.wait_closed()


@pytest.mark.integration
async def test_stream_until_server_close():
    server, config, paths = await start_server([
        json.dumps(TRADE),
        "",
        json.dumps(BOOK_TICKER),
    ])
    events = []
    session = WebSocketSession(events.append, config=config)

    try:
        await session.connect("bnbbtc@trade")

        with pytest.raises(WebSocketDisconnectedError) as exc_info:
            await session.event_loop()
    finally:
        await stop_server(server)

    assert paths == ["/ws/bnbbtc@trade"]
    assert isinstance(events[0], TradeEvent)
    assert events[0].price == Decimal("0.001")
    assert isinstance(events[1], BookTickerEvent)
    assert len(events) == 2
    assert session.stats["heartbeats"] == 1
    assert exc_info.value.code == 1000
    assert exc_info.value.reason == "done"
    assert session.is_connected is False


@pytest.mark.integration
async def test_combined_stream_with_queue():
    envelope = {"stream": "bnbbtc@trade", "data": TRADE}
    server, config, paths = await start_server([json.dumps(envelope)])
    queue = asyncio.Queue()
    session = WebSocketSession.with_queue(queue, config=config)

    try:
        await session.connect_multiple(["bnbbtc@trade", "bnbusdt@bookTicker"])

        with pytest.raises(WebSocketDisconnectedError):
            await session.event_loop()
    finally:
        await stop_server(server)

    assert paths == ["/stream?streams=bnbbtc@trade/bnbusdt@bookTicker"]

    event = queue.get_nowait()
    assert isinstance(event, CombinedStreamEvent)
    assert event.parse_stream() == ("bnbbtc", "trade")
    assert isinstance(event.data, TradeEvent)


@pytest.mark.integration
async def test_handshake_failure_against_closed_port():
    server, config, _ = await start_server([])
    await stop_server(server)

    session = WebSocketSession(lambda event: None, config=config, open_timeout=2)

    with pytest.raises(HandshakeError):
        await session.connect("bnbbtc@trade")

    assert session.is_connected is False
