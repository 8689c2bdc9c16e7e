"""
Binance HTTP gateway.

Builds signed and unsigned requests, sends them over a shared aiohttp session
and maps every response onto either a typed result or an ExchangeError:

    200 -> decoded into response_type (DecodeError on shape mismatch)
    400 -> ErrorResponse, translated through the business error table
    401 -> UnauthorizedError
    500 -> InternalServerError
    503 -> ServiceUnavailableError
    any other status -> UnexpectedStatusError

Nothing is retried.
"""

import asyncio
import json
import time
from typing import Any, Callable, Dict, Optional

import aiohttp
from yarl import URL

from .exceptions import (
    DecodeError,
    InternalServerError,
    InvalidHeaderError,
    InvalidUrlError,
    RequestTimeoutError,
    ServiceUnavailableError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
    translate_error,
)
from .exchange_config import (
    DEFAULT_RECV_WINDOW,
    DEFAULT_TIMEOUT,
    PRODUCTION_CONFIG,
    BinanceConfig,
    Credentials,
)
from .models import ErrorResponse
from .products import Product
from .signer import append_signature, build_query, build_signed_query
from ..utils.logger import EventType, get_logger, log_request_event


logger = get_logger(__name__)

API_KEY_HEADER = "X-MBX-APIKEY"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
USER_AGENT = "binance-client/0.1.0"

_SHAPE_ERRORS = (KeyError, ValueError, TypeError, IndexError, AttributeError)


class _SessionHolder:
    """aiohttp session shared by a gateway and the gateways cloned from it."""

    def __init__(self, session: Optional[aiohttp.ClientSession], timeout: float):
        self.session = session
        self.owned = session is None
        self.timeout = timeout

    def get(self) -> aiohttp.ClientSession:
        # Created lazily so the gateway can be built outside a running loop
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self.owned = True
        return self.session

    async def close(self) -> None:
        if self.session is not None and self.owned and not self.session.closed:
            await self.session.close()
        self.session = None


class BinanceGateway:
    """
    Typed HTTP client for one Binance REST host.

    Safe to share between tasks on one event loop. Use as an async context
    manager, or call close() when done.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        host: str = PRODUCTION_CONFIG.rest_api_endpoint,
        timeout: float = DEFAULT_TIMEOUT,
        recv_window: int = DEFAULT_RECV_WINDOW,
        session: Optional[aiohttp.ClientSession] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize gateway.

        Args:
            api_key: Binance API key (None for public endpoints only)
            secret_key: Binance API secret (None for public endpoints only)
            host: REST base URL, e.g. "https://api.binance.com"
            timeout: Per-request timeout in seconds
            recv_window: Default recvWindow for signed requests in ms
            session: Existing aiohttp session to use instead of a private one
            clock: Wall clock in epoch seconds, used for request timestamps
        """
        self.credentials = Credentials.of(api_key, secret_key)
        self.host = host.rstrip("/")
        self.timeout = timeout
        self.recv_window = recv_window
        self._clock = clock
        self._holder = _SessionHolder(session, timeout)

    @classmethod
    def from_config(
        cls,
        config: BinanceConfig,
        credentials: Optional[Credentials] = None,
        product: Product = Product.SPOT,
        session: Optional[aiohttp.ClientSession] = None
    ) -> "BinanceGateway":
        """Build a gateway for a product's REST host."""
        credentials = credentials or Credentials()
        return cls(
            api_key=credentials.api_key,
            secret_key=credentials.secret_key,
            host=config.rest_host(product),
            timeout=config.timeout,
            recv_window=config.recv_window,
            session=session
        )

    def with_host(self, host: str) -> "BinanceGateway":
        """
        Return a gateway for another host sharing credentials and session.

        Closing either gateway closes the shared session.
        """
        clone = BinanceGateway(
            api_key=self.credentials.api_key,
            secret_key=self.credentials.secret_key,
            host=host,
            timeout=self.timeout,
            recv_window=self.recv_window,
            clock=self._clock
        )
        clone._holder = self._holder
        return clone

    async def close(self) -> None:
        """Close the HTTP session if the gateway created it."""
        await self._holder.close()

    async def __aenter__(self) -> "BinanceGateway":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"BinanceGateway(host={self.host!r}, has_api_key={self.credentials.has_api_key})"

    # ========================================================================
    # PUBLIC OPERATIONS
    # ========================================================================

    async def get(self, path: str, query: Any = None, response_type: Any = None) -> Any:
        """
        Unsigned GET.

        Args:
            path: Endpoint path, e.g. "/api/v3/depth"
            query: Mapping/payload or a prebuilt query string
            response_type: Model with `parse`, List[Model] for array answers,
                a callable, or None for raw JSON
        """
        query_string = query if isinstance(query, str) else build_query(query)
        return await self._request("GET", path, query_string, response_type=response_type)

    async def get_signed(
        self,
        path: str,
        payload: Any = None,
        recv_window: Optional[int] = None,
        response_type: Any = None
    ) -> Any:
        """Signed GET (USER_DATA endpoints)."""
        query = self._signed_query(payload, recv_window)
        return await self._request("GET", path, query, response_type=response_type)

    async def post(self, path: str, payload: Any = None, response_type: Any = None) -> Any:
        """Unsigned POST with API key (e.g. starting a user data stream)."""
        return await self._request("POST", path, build_query(payload), response_type=response_type)

    async def post_signed(
        self,
        path: str,
        payload: Any = None,
        recv_window: Optional[int] = None,
        response_type: Any = None
    ) -> Any:
        """Signed POST (TRADE endpoints)."""
        query = self._signed_query(payload, recv_window)
        return await self._request("POST", path, query, response_type=response_type)

    async def put_signed(
        self,
        path: str,
        payload: Any = None,
        recv_window: Optional[int] = None,
        response_type: Any = None
    ) -> Any:
        query = self._signed_query(payload, recv_window)
        return await self._request("PUT", path, query, response_type=response_type)

    async def delete_signed(
        self,
        path: str,
        payload: Any = None,
        recv_window: Optional[int] = None,
        response_type: Any = None
    ) -> Any:
        query = self._signed_query(payload, recv_window)
        return await self._request("DELETE", path, query, response_type=response_type)

    async def put(self, path: str, listen_key: str, response_type: Any = None) -> Any:
        """Keep a listen key alive; the key travels in the form body."""
        body = build_query({"listenKey": listen_key})
        return await self._request("PUT", path, "", body=body, response_type=response_type)

    async def delete(self, path: str, listen_key: str, response_type: Any = None) -> Any:
        """Close a listen key; the key travels in the form body."""
        body = build_query({"listenKey": listen_key})
        return await self._request("DELETE", path, "", body=body, response_type=response_type)

    # ========================================================================
    # REQUEST BUILDING
    # ========================================================================

    def _signed_query(self, payload: Any, recv_window: Optional[int]) -> str:
        if recv_window is None:
            recv_window = self.recv_window
        canonical = build_signed_query(payload, recv_window, self._clock)
        return append_signature(canonical, self.credentials.secret_key)

    def _headers(self, method: str) -> Dict[str, str]:
        """
        Build request headers.

        Raises:
            InvalidHeaderError: If the API key cannot be sent as a header value
        """
        headers = {"User-Agent": USER_AGENT}

        api_key = self.credentials.api_key
        if api_key:
            if any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in api_key):
                raise InvalidHeaderError("API key contains control characters")
            try:
                api_key.encode("latin-1")
            except UnicodeEncodeError:
                raise InvalidHeaderError("API key is not a valid header value")
            headers[API_KEY_HEADER] = api_key

        if method != "GET":
            headers["Content-Type"] = FORM_CONTENT_TYPE

        return headers

    def _url(self, path: str, query: str) -> URL:
        """
        Join host, path and query; the query is sent verbatim.

        Raises:
            InvalidUrlError: If the result is not an absolute URL
        """
        if not path.startswith("/"):
            raise InvalidUrlError(f"Endpoint path must start with '/': {path!r}")

        raw = f"{self.host}{path}"
        if query:
            raw = f"{raw}?{query}"

        try:
            url = URL(raw, encoded=True)
        except (ValueError, TypeError) as e:
            raise InvalidUrlError(f"Invalid URL {self.host}{path}: {e}")

        if not url.is_absolute() or url.scheme not in ("http", "https"):
            raise InvalidUrlError(f"Invalid URL {self.host}{path}")

        return url

    # ========================================================================
    # TRANSPORT
    # ========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        query: str,
        body: Optional[str] = None,
        response_type: Any = None
    ) -> Any:
        headers = self._headers(method)
        url = self._url(path, query)
        session = self._holder.get()

        log_request_event(logger, EventType.REQUEST_SENT, method, path)

        try:
            async with session.request(
                method,
                url,
                headers=headers,
                data=body,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                status = response.status
                text = await response.text()

        except asyncio.TimeoutError as e:
            log_request_event(logger, EventType.REQUEST_FAILED, method, path, error="timeout")
            raise RequestTimeoutError(f"{method} {path} timed out after {self.timeout}s") from e

        except aiohttp.ClientError as e:
            log_request_event(logger, EventType.REQUEST_FAILED, method, path, error=str(e))
            raise TransportError(f"{method} {path} failed: {e}") from e

        except UnicodeDecodeError as e:
            raise DecodeError(f"Response body is not valid text: {e}") from e

        if status != 200:
            log_request_event(logger, EventType.API_ERROR, method, path, status=status)

        return self._handle_response(status, text, response_type)

    def _handle_response(self, status: int, text: str, response_type: Any = None) -> Any:
        """
        Map an HTTP status and body onto a result or an exception.

        Raises:
            UnauthorizedError, InternalServerError, ServiceUnavailableError,
            BusinessError subclasses, UnexpectedStatusError, DecodeError
        """
        if status == 200:
            return self._decode(text, response_type)
        if status == 401:
            raise UnauthorizedError()
        if status == 500:
            raise InternalServerError()
        if status == 503:
            raise ServiceUnavailableError()
        if status == 400:
            try:
                error = ErrorResponse.parse(json.loads(text))
            except _SHAPE_ERRORS as e:
                raise DecodeError(f"Failed to decode error response: {e}", body=text)
            raise translate_error(error)

        raise UnexpectedStatusError(status)

    def _decode(self, text: str, response_type: Any) -> Any:
        try:
            data = json.loads(text)
        except ValueError as e:
            raise DecodeError(f"Failed to decode response: {e}", body=text)

        if response_type is None:
            return data

        item_type = _list_item_type(response_type)
        name = getattr(item_type or response_type, "__name__", repr(response_type))

        if item_type is not None and not isinstance(data, list):
            raise DecodeError(f"Expected array of {name}, got {type(data).__name__}", body=text)
        if item_type is None and isinstance(data, list) and hasattr(response_type, "parse"):
            raise DecodeError(f"Expected {name} object, got array", body=text)

        try:
            if item_type is not None:
                return [_parse_one(item_type, item) for item in data]
            return _parse_one(response_type, data)
        except _SHAPE_ERRORS as e:
            raise DecodeError(f"Failed to decode {name}: {e!r}", body=text)


def _list_item_type(response_type: Any) -> Any:
    """Item type of List[X] / list[X], else None."""
    if getattr(response_type, "__origin__", None) is list:
        args = getattr(response_type, "__args__", ())
        if len(args) == 1:
            return args[0]
    return None


def _parse_one(response_type: Any, data: Any) -> Any:
    parse = getattr(response_type, "parse", None)
    if parse is None:
        return response_type(data)
    return parse(data)
