"""
WebSocket session for Binance market and user data streams.

One session owns at most one socket. The caller drives it:

    session = WebSocketSession(handler)
    await session.connect(kline_stream("BTCUSDT", "1m"))
    await session.event_loop(keep_running)
    await session.disconnect()

Frames are read one at a time; each decoded event is handed to the handler
before the next frame is read. Ping/pong is answered by the websockets
library. The session never reconnects on its own.
"""

import asyncio
import inspect
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .exceptions import (
    DecodeError,
    HandshakeError,
    InvalidUrlError,
    NotConnectedError,
    WebSocketDisconnectedError,
)
from .exchange_config import PRODUCTION_CONFIG, BinanceConfig
from .products import Product
from .websocket_parser import WebSocketParser
from ..utils.logger import EventType, get_logger, log_connection_event, mask_listen_key


logger = get_logger(__name__)

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]

# Close code reported when the socket drops without a close frame
ABNORMAL_CLOSURE = 1006


def _redact_url(url: str) -> str:
    """Mask listen keys (path segments that are not stream names)."""
    base, sep, tail = url.rpartition("/ws/")
    if not sep or "@" in tail or tail.startswith("!"):
        return url
    return f"{base}/ws/{mask_listen_key(tail)}"


class WebSocketSession:
    """
    Single WebSocket connection relaying decoded events to a handler.

    States: Unconnected -> Connected -> Unconnected.
    """

    def __init__(
        self,
        handler: EventHandler,
        config: BinanceConfig = PRODUCTION_CONFIG,
        parser: Optional[WebSocketParser] = None,
        open_timeout: Optional[float] = None
    ):
        """
        Initialize session.

        Args:
            handler: Called with every decoded event; may be sync or async
            config: Endpoint configuration (WebSocket hosts)
            parser: Frame parser (defaults to spot + futures events)
            open_timeout: Handshake timeout in seconds (defaults to config.timeout)
        """
        self.handler = handler
        self.config = config
        self.parser = parser or WebSocketParser()
        self.open_timeout = open_timeout if open_timeout is not None else config.timeout

        self._socket = None
        self._url: Optional[str] = None
        self._combined = False

        # Statistics
        self._stats = {
            'messages_received': 0,
            'heartbeats': 0,
            'last_message_time': None,
            'connected_at': None
        }

    @classmethod
    def with_queue(
        cls,
        queue: asyncio.Queue,
        config: BinanceConfig = PRODUCTION_CONFIG,
        parser: Optional[WebSocketParser] = None
    ) -> "WebSocketSession":
        """
        Build a session that pushes every decoded event onto a queue.

        The loop waits on a full bounded queue before reading the next frame.
        """
        async def enqueue(event: Any) -> None:
            await queue.put(event)

        return cls(enqueue, config=config, parser=parser)

    @property
    def is_connected(self) -> bool:
        return self._socket is not None

    @property
    def url(self) -> Optional[str]:
        """URL of the open socket, None when unconnected."""
        return self._url if self._socket is not None else None

    @property
    def combined(self) -> bool:
        return self._combined

    @property
    def stats(self) -> Dict[str, Any]:
        """Get connection statistics."""
        return self._stats.copy()

    # ========================================================================
    # CONNECTION
    # ========================================================================

    async def connect(self, stream_name: str) -> str:
        """
        Connect to a single spot stream (or a listen key).

        Returns:
            The URL connected to
        """
        url = f"{self.config.ws_host(Product.SPOT)}/ws/{stream_name}"
        await self._connect(url, combined=False)
        return url

    async def connect_multiple(self, stream_names: Iterable[str]) -> str:
        """
        Connect to several spot streams over one combined connection.

        Events are delivered as CombinedStreamEvent.
        """
        names = list(stream_names)
        if not names:
            raise InvalidUrlError("At least one stream name is required")

        url = f"{self.config.ws_host(Product.SPOT)}/stream?streams={'/'.join(names)}"
        await self._connect(url, combined=True)
        return url

    async def connect_futures(self, stream_name: str) -> str:
        """Connect to a single USD-M futures stream (or listen key)."""
        url = f"{self.config.ws_host(Product.FUTURES)}/ws/{stream_name}"
        await self._connect(url, combined=False)
        return url

    async def connect_delivery(self, stream_name: str) -> str:
        """Connect to a single COIN-M delivery stream (or listen key)."""
        url = f"{self.config.ws_host(Product.DELIVERY)}/ws/{stream_name}"
        await self._connect(url, combined=False)
        return url

    async def _connect(self, url: str, combined: bool) -> None:
        """
        Open a new socket, then replace the current one.

        If the handshake fails the current socket (if any) stays open.

        Raises:
            HandshakeError: If the connection cannot be established
        """
        try:
            socket = await websockets.connect(url, open_timeout=self.open_timeout)
        except (WebSocketException, OSError, asyncio.TimeoutError) as e:
            log_connection_event(
                logger,
                EventType.WEBSOCKET_HANDSHAKE_FAILED,
                _redact_url(url),
                error=str(e)
            )
            raise HandshakeError(f"Failed to connect to {_redact_url(url)}: {e}") from e

        previous = self._socket

        self._socket = socket
        self._url = url
        self._combined = combined
        self._stats['connected_at'] = datetime.now(timezone.utc)

        if previous is not None:
            await self._close_socket(previous)

        log_connection_event(
            logger,
            EventType.WEBSOCKET_CONNECTED,
            _redact_url(url),
            combined=combined,
            replaced=previous is not None
        )

    async def disconnect(self) -> None:
        """
        Close the socket.

        Raises:
            NotConnectedError: If no socket is open
        """
        if self._socket is None:
            raise NotConnectedError("Not connected")

        socket, self._socket = self._socket, None
        await socket.close()

        log_connection_event(logger, EventType.WEBSOCKET_DISCONNECTED, _redact_url(self._url))

    async def _release(self) -> None:
        """Drop the socket after a fatal loop exit."""
        socket, self._socket = self._socket, None
        if socket is not None:
            await self._close_socket(socket)

    @staticmethod
    async def _close_socket(socket) -> None:
        try:
            await socket.close()
        except (WebSocketException, OSError) as e:
            logger.debug("Error closing WebSocket", error=str(e))

    async def __aenter__(self) -> "WebSocketSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._socket is not None:
            await self.disconnect()

    # ========================================================================
    # EVENT LOOP
    # ========================================================================

    async def event_loop(self, keep_running: Any = None) -> None:
        """
        Read frames and relay decoded events to the handler.

        The flag is checked between frames. Clearing it ends the loop and
        leaves the socket open for disconnect(). Any other exit is fatal and
        leaves the session unconnected.

        Args:
            keep_running: Object with `is_set()` (asyncio.Event,
                threading.Event); None runs until an error

        Raises:
            NotConnectedError: If called without an open socket
            WebSocketDisconnectedError: If the server closes the stream
            DecodeError: If a text frame does not decode
            Exception: Whatever the handler raises, unchanged
        """
        if self._socket is None:
            raise NotConnectedError("Not connected")

        while keep_running is None or keep_running.is_set():
            socket = self._socket
            if socket is None:
                # Handler disconnected the session
                return

            try:
                message = await socket.recv()
            except ConnectionClosed as e:
                code, reason = self._close_details(e)
                self._socket = None
                log_connection_event(
                    logger,
                    EventType.WEBSOCKET_CLOSED_BY_SERVER,
                    _redact_url(self._url),
                    code=code,
                    reason=reason
                )
                raise WebSocketDisconnectedError(code, reason) from e

            if isinstance(message, (bytes, bytearray)):
                continue

            if message == "":
                self._stats['heartbeats'] += 1
                continue

            self._stats['messages_received'] += 1
            self._stats['last_message_time'] = datetime.now(timezone.utc)

            try:
                event = self.parser.parse_message(message, combined=self._combined)
            except DecodeError:
                await self._release()
                raise

            try:
                await self._dispatch(event)
            except Exception:
                await self._release()
                raise

    async def _dispatch(self, event: Any) -> None:
        result = self.handler(event)
        if inspect.isawaitable(result):
            await result

    @staticmethod
    def _close_details(error: ConnectionClosed):
        received = getattr(error, "rcvd", None)
        if received is None:
            return ABNORMAL_CLOSURE, ""
        return received.code, received.reason
