"""
Wire-format adapters.

Binance sends most numbers as JSON strings, some booleans as "true"/"TRUE"
strings, and expects a few request flags as "TRUE"/"FALSE". These quirks are
confined to the helpers below; models and request payloads only ever hold
Decimal, bool and Enum values.
"""

import json
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

TRUE_FLAG = "TRUE"
FALSE_FLAG = "FALSE"


def to_decimal(value: Any) -> Decimal:
    """
    Decode a number sent either as a JSON string or a JSON number.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected number, got bool: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Expected number, got {value!r}")


def to_optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return to_decimal(value)


def parse_bool(value: Any) -> bool:
    """Decode a bool sent as a JSON bool or as "true"/"TRUE"/"false"/"FALSE"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ValueError(f"Expected bool, got {value!r}")


def encode_flag(value: bool) -> str:
    """Encode a bool the way margin endpoints expect it ("TRUE"/"FALSE")."""
    return TRUE_FLAG if value else FALSE_FLAG


def format_decimal(value: Decimal) -> str:
    # Never scientific notation on the wire
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def encode_value(value: Any) -> str:
    """
    Encode a single query parameter value.

    Args:
        value: bool, Enum, Decimal, float, int, str or list

    Returns:
        String form sent to the exchange (before url-encoding)
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format_decimal(value)
    if isinstance(value, float):
        return format_decimal(Decimal(repr(value)))
    if isinstance(value, (list, tuple)):
        return json.dumps([encode_value(v) for v in value], separators=(",", ":"))
    return str(value)
