"""
WebSocket data parser for converting raw Binance frames to typed events.

Decoding rules:
- Objects carrying an ``"e"`` tag dispatch on the tag registry.
- Anything else falls back, in order, to tagged event -> order book
  snapshot -> book ticker. The first shape that decodes wins.
- Arrays (``!ticker@arr`` and friends) decode element by element.
- Combined streams wrap each payload as ``{"stream": ..., "data": ...}``.

Every failure raises DecodeError carrying the offending body.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Type

import structlog

from .exceptions import DecodeError
from .models import OrderBook
from .ws_models import (
    AccountPositionUpdate,
    AggTradeEvent,
    BalanceUpdate,
    BookTickerEvent,
    CombinedStreamEvent,
    DayTickerEvent,
    DepthOrderBookEvent,
    FuturesAccountUpdate,
    KlineEvent,
    MarkPriceEvent,
    MiniDayTickerEvent,
    OrderListUpdate,
    OrderTradeUpdate,
    OrderUpdate,
    TradeEvent,
)

logger = structlog.get_logger(__name__)

_SHAPE_ERRORS = (KeyError, ValueError, TypeError, IndexError, AttributeError)


def _registry(*event_classes: Type) -> Dict[str, Type]:
    return {cls.EVENT_TYPE: cls for cls in event_classes}


SPOT_EVENT_TYPES: Dict[str, Type] = _registry(
    AggTradeEvent,
    TradeEvent,
    KlineEvent,
    DayTickerEvent,
    MiniDayTickerEvent,
    DepthOrderBookEvent,
    AccountPositionUpdate,
    BalanceUpdate,
    OrderUpdate,
    OrderListUpdate,
    MarkPriceEvent,
)

FUTURES_EVENT_TYPES: Dict[str, Type] = {
    **SPOT_EVENT_TYPES,
    **_registry(BookTickerEvent, FuturesAccountUpdate, OrderTradeUpdate),
}

# Shapes tried, in order, for frames without a type tag
UNTAGGED_FALLBACKS = (OrderBook, BookTickerEvent)


class WebSocketParser:
    """Parser for Binance WebSocket frames."""

    def __init__(self, event_types: Optional[Mapping[str, Type]] = None):
        """
        Initialize parser.

        Args:
            event_types: Tag -> event class registry (defaults to spot and
                futures user-data tags)
        """
        self.event_types = dict(event_types) if event_types is not None else dict(FUTURES_EVENT_TYPES)

    def register(self, event_type: str, event_class: Type) -> None:
        """Register an additional tagged event class."""
        self.event_types[event_type] = event_class

    def decode(self, text: str) -> Any:
        """
        Decode frame text into JSON.

        Raises:
            DecodeError: If the text is not valid JSON
        """
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Failed to decode frame: {e}", body=text)

    def parse_event(self, data: Dict[str, Any]) -> Any:
        """
        Parse a tagged event.

        Args:
            data: Decoded JSON object with an ``"e"`` field

        Returns:
            Event instance for the tag

        Raises:
            DecodeError: If the tag is missing or unknown, or fields do not match
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Expected event object, got {type(data).__name__}", body=_dump(data))

        tag = data.get("e")
        if tag is None:
            raise DecodeError("Event has no type tag", body=_dump(data))

        event_class = self.event_types.get(tag)
        if event_class is None:
            raise DecodeError(f"Unknown event type: {tag}", body=_dump(data))

        try:
            return event_class.parse(data)
        except _SHAPE_ERRORS as e:
            raise DecodeError(f"Failed to parse {tag} event: {e!r}", body=_dump(data))

    def parse_untagged(self, data: Dict[str, Any]) -> Any:
        """
        Parse a frame that may or may not carry a type tag.

        Tagged frames go through the tag registry only. Frames without a tag
        are tried against each fallback shape in order.

        Raises:
            DecodeError: If the tag is unknown or no shape matches
        """
        if not isinstance(data, dict) or "e" in data:
            return self.parse_event(data)

        for shape in UNTAGGED_FALLBACKS:
            try:
                return shape.parse(data)
            except _SHAPE_ERRORS:
                continue

        logger.debug("Frame matched no event shape", keys=sorted(data))
        raise DecodeError("Frame matched no event shape", body=_dump(data))

    def parse_events(self, data: List[Any]) -> List[Any]:
        """Parse an array stream (e.g. ``!ticker@arr``) element by element."""
        if not isinstance(data, list):
            raise DecodeError(f"Expected array, got {type(data).__name__}", body=_dump(data))
        return [self.parse_untagged(item) for item in data]

    def parse_payload(self, data: Any) -> Any:
        """Parse a single event or an array of events."""
        if isinstance(data, list):
            return self.parse_events(data)
        return self.parse_untagged(data)

    def parse_combined(self, data: Dict[str, Any]) -> CombinedStreamEvent:
        """
        Parse a combined-stream envelope.

        Raises:
            DecodeError: If the envelope or its payload does not decode
        """
        if not isinstance(data, dict) or "stream" not in data or "data" not in data:
            raise DecodeError("Expected combined stream envelope", body=_dump(data))

        return CombinedStreamEvent(
            stream=data["stream"],
            data=self.parse_payload(data["data"])
        )

    def parse_message(self, text: str, combined: bool = False) -> Any:
        """
        Decode and parse one text frame.

        Args:
            text: Raw frame text
            combined: True for /stream?streams=... connections

        Returns:
            Event, list of events, or CombinedStreamEvent
        """
        data = self.decode(text)
        try:
            if combined:
                return self.parse_combined(data)
            return self.parse_payload(data)
        except DecodeError as e:
            # Report the raw frame rather than the re-serialized fragment
            raise DecodeError(e.message, body=text)


def _dump(data: Any) -> str:
    try:
        return json.dumps(data)
    except (TypeError, ValueError):
        return repr(data)
