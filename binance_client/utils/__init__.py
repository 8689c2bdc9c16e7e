"""
Logging utilities.
"""

from .logger import setup_logger, get_logger, EventType

__all__ = [
    "setup_logger",
    "get_logger",
    "EventType",
]
