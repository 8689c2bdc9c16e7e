"""
Request signing for Binance SIGNED (TRADE / USER_DATA) endpoints.

A signed request is the canonical query string of the payload, followed by
`recvWindow` (when > 0) and `timestamp`, followed by `signature`, the
HMAC-SHA256 of everything before it keyed by the API secret. The signature is
order sensitive, so the query is built once and sent verbatim.
"""

import hashlib
import hmac
import math
import time
from typing import Any, Callable, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from .exceptions import ClockError
from .serialization import encode_value


def payload_items(payload: Any) -> List[Tuple[str, str]]:
    """
    Flatten a payload into ordered (key, value) pairs.

    Args:
        payload: None, a mapping, or an object exposing `to_params()`

    Returns:
        Pairs in payload order, skipping None values
    """
    if payload is None:
        return []
    if hasattr(payload, "to_params"):
        payload = payload.to_params()
    if not isinstance(payload, Mapping):
        raise TypeError(f"Unsupported payload type: {type(payload).__name__}")

    return [
        (str(key), encode_value(value))
        for key, value in payload.items()
        if value is not None
    ]


def build_query(payload: Any) -> str:
    """
    Serialize a payload into a `k=v&k=v` query string.

    Deterministic for a given payload value.
    """
    return urlencode(payload_items(payload))


def current_timestamp(clock: Callable[[], float] = time.time) -> int:
    """
    Current wall clock in epoch milliseconds.

    Raises:
        ClockError: If the clock cannot be read or is out of range
    """
    try:
        now = clock()
    except (OSError, OverflowError, ValueError) as e:
        raise ClockError(f"Failed to get timestamp: {e}")

    try:
        valid = math.isfinite(now) and now >= 0
    except TypeError:
        valid = False
    if not valid:
        raise ClockError(f"Failed to get timestamp: clock returned {now!r}")

    return int(now * 1000)


def build_signed_query(
    payload: Any,
    recv_window: int,
    clock: Callable[[], float] = time.time
) -> str:
    """
    Build the canonical (unsigned) query for a SIGNED endpoint.

    Args:
        payload: Request parameters
        recv_window: Staleness tolerance in ms; 0 leaves it to the server default
        clock: Wall clock returning epoch seconds

    Returns:
        Query string ending with `timestamp=<ms>`
    """
    items = payload_items(payload)

    if recv_window > 0:
        items.append(("recvWindow", str(int(recv_window))))

    items.append(("timestamp", str(current_timestamp(clock))))

    return urlencode(items)


def sign(secret_key: str, canonical: str) -> str:
    """Lowercase hex HMAC-SHA256 of `canonical` keyed by `secret_key`."""
    return hmac.new(
        secret_key.encode("utf-8"),
        canonical.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def append_signature(canonical: str, secret_key: str) -> str:
    """Return `canonical&signature=<hex>`."""
    signature = sign(secret_key, canonical)
    if not canonical:
        return f"signature={signature}"
    return f"{canonical}&signature={signature}"


def split_signature(signed_query: str) -> Tuple[str, Optional[str]]:
    """
    Split a signed query into (canonical, signature).

    Used to verify a signed query against the secret.
    """
    canonical, sep, signature = signed_query.rpartition("&signature=")
    if sep:
        return canonical, signature
    if signed_query.startswith("signature="):
        return "", signed_query[len("signature="):]
    return signed_query, None


def verify_signature(secret_key: str, signed_query: str) -> bool:
    canonical, signature = split_signature(signed_query)
    if signature is None:
        return False
    return hmac.compare_digest(sign(secret_key, canonical), signature)

