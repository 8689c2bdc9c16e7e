"""
Binance Client

Async Python binding for Binance spot, margin, USD-M futures and COIN-M
delivery: HMAC-signed REST requests decoded into typed models, and WebSocket
market and user data streams relayed as typed events.
"""

__version__ = "0.1.0"
__author__ = "Binance Client Team"
