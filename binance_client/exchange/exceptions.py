"""
Exchange-related exception classes.

Every failure surfaced by the client is an ExchangeError subclass, grouped so
callers can tell apart:
- local precondition failures (clock, header, URL construction)
- transport failures (the request never reached the server)
- decode failures (the server answered with something unparseable)
- API errors (the server answered and rejected the request)
- WebSocket session failures
"""

from typing import Callable, Dict, Optional, Tuple, Type

from .models import ErrorResponse


class ExchangeError(Exception):
    """Base exception for all exchange-related errors."""
    pass


# ============================================================================
# LOCAL PRECONDITIONS
# ============================================================================

class LocalPreconditionError(ExchangeError):
    """Exception raised before any I/O when a request cannot be built."""
    pass


class ClockError(LocalPreconditionError):
    """Exception raised when the local wall clock cannot be read."""
    pass


class InvalidHeaderError(LocalPreconditionError):
    """Exception raised when a header value (e.g. API key) is not valid HTTP."""
    pass


class InvalidUrlError(LocalPreconditionError):
    """Exception raised when an endpoint URL cannot be constructed."""
    pass


class InvalidOrderError(LocalPreconditionError):
    """Exception raised when an order uses a field its product does not accept."""
    pass


# ============================================================================
# TRANSPORT / DECODE
# ============================================================================

class TransportError(ExchangeError):
    """Exception raised when the request could not reach the exchange."""
    pass


class RequestTimeoutError(TransportError):
    """Exception raised when a request exceeds the client timeout."""
    pass


class DecodeError(ExchangeError):
    """Exception raised when a response or frame does not match the expected shape."""

    def __init__(self, message: str, body: Optional[str] = None):
        self.message = message
        self.body = body
        super().__init__(self.message)


# ============================================================================
# API ERRORS
# ============================================================================

class ExchangeAPIError(ExchangeError):
    """Exception raised when the exchange answered with a non-success status."""

    def __init__(self, message: str, status_code: int = None, error_code: int = None):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class UnauthorizedError(ExchangeAPIError):
    """HTTP 401: missing or rejected API key."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


class InternalServerError(ExchangeAPIError):
    """HTTP 500."""

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message, status_code=500)


class ServiceUnavailableError(ExchangeAPIError):
    """HTTP 503."""

    def __init__(self, message: str = "Service Unavailable"):
        super().__init__(message, status_code=503)


class UnexpectedStatusError(ExchangeAPIError):
    """Any status the client has no dedicated mapping for."""

    def __init__(self, status_code: int):
        super().__init__(f"Received response: {status_code}", status_code=status_code)


class BusinessError(ExchangeAPIError):
    """HTTP 400 with a structured {code, msg} body."""

    def __init__(self, response: ErrorResponse, message: Optional[str] = None):
        self.response = response
        super().__init__(
            message or f"Binance API error: {response.msg} (code: {response.code})",
            status_code=400,
            error_code=response.code
        )

    @property
    def code(self) -> int:
        return self.response.code

    @property
    def msg(self) -> str:
        return self.response.msg


class BinanceAPIError(BusinessError):
    """Generic carrier for any business error without a dedicated type."""
    pass


class InvalidPriceError(BusinessError):
    """Order price rejected by the PRICE_FILTER."""

    def __init__(self, response: ErrorResponse):
        super().__init__(response, "Invalid price")


class InvalidListenKeyError(BusinessError):
    """Listen key does not exist or has expired."""

    def __init__(self, response: ErrorResponse):
        super().__init__(response, f"Invalid listen key: {response.msg}")


class UnknownSymbolError(BusinessError):
    """Symbol is not listed on the product."""

    def __init__(self, response: ErrorResponse):
        super().__init__(response, f"Unknown symbol: {response.msg}")


# ============================================================================
# WEBSOCKET
# ============================================================================

class WebSocketError(ExchangeError):
    """Exception raised for WebSocket-related errors."""
    pass


class HandshakeError(WebSocketError):
    """Exception raised when the WebSocket handshake fails."""
    pass


class NotConnectedError(WebSocketError):
    """Exception raised when a session operation needs an open socket."""
    pass


class WebSocketDisconnectedError(WebSocketError):
    """Exception raised when the server closes the stream."""

    def __init__(self, code: Optional[int] = None, reason: str = ""):
        self.code = code
        self.reason = reason
        super().__init__(f"Disconnected (code={code}, reason={reason!r})")


# ============================================================================
# BUSINESS ERROR TRANSLATION
# ============================================================================

INVALID_PRICE_MESSAGE = "Invalid price."

ErrorFactory = Callable[[ErrorResponse], BusinessError]

# (code, msg) -> factory; msg None matches any message for that code
_ERROR_TABLE: Dict[Tuple[int, Optional[str]], ErrorFactory] = {}


def register_error(code: int, msg: Optional[str] = None):
    """
    Register a business error type for a Binance error code.

    Exact (code, msg) registrations take precedence over code-only ones.

    Example:
        @register_error(-2015)
        class BadApiKeyError(BusinessError):
            pass
    """
    def decorator(factory: ErrorFactory) -> ErrorFactory:
        _ERROR_TABLE[(code, msg)] = factory
        return factory
    return decorator


register_error(-1013, INVALID_PRICE_MESSAGE)(InvalidPriceError)
register_error(-1125)(InvalidListenKeyError)
register_error(-1121)(UnknownSymbolError)


def translate_error(response: ErrorResponse) -> BusinessError:
    """
    Map a decoded 400 body onto the most specific business error.

    Args:
        response: Decoded error body

    Returns:
        Registered error for (code, msg), else for code, else BinanceAPIError
    """
    factory = _ERROR_TABLE.get((response.code, response.msg))
    if factory is None:
        factory = _ERROR_TABLE.get((response.code, None), BinanceAPIError)
    return factory(response)


def registered_errors() -> Dict[Tuple[int, Optional[str]], Type[BusinessError]]:
    """Snapshot of the translation table."""
    return dict(_ERROR_TABLE)
