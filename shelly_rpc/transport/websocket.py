"""WebSocket transport: one persistent connection shared by all calls."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import uuid
from typing import Any

import aiohttp

from ..const import (
    DEFAULT_TIMEOUT,
    SOURCE_PREFIX,
    WS_HEARTBEAT,
    WS_MAX_RECONNECT_ATTEMPTS,
    WS_RECONNECT,
    WS_RECONNECT_BACKOFF,
    WS_RECONNECT_DELAY,
    JsonVal,
)
from ..envelope import Request, RequestIdAllocator, Response, parse_message, serialize_params
from ..errors import (
    CallEffect,
    CallTimeoutError,
    InvalidResponseError,
    TransportClosedError,
    TransportConnectionError,
    TransportError,
)
from .base import ConnectionState, NotificationHandler, StateCallback

_LOGGER = logging.getLogger(__name__)


class WebSocketTransport:
    """JSON-RPC over a persistent WebSocket.

    Calls are multiplexed on one connection. Each call parks a future in the
    pending map under its request ID; a single reader task resolves futures
    as responses arrive, in whatever order the device sends them. Frames
    without an ID are device notifications and go to the subscribed handler.
    """

    def __init__(
        self,
        url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        heartbeat: float | None = WS_HEARTBEAT,
        reconnect: bool = WS_RECONNECT,
        max_reconnect_attempts: int = WS_MAX_RECONNECT_ATTEMPTS,
        reconnect_delay: float = WS_RECONNECT_DELAY,
    ) -> None:
        """Initialize the transport.

        Args:
            url: WebSocket endpoint (e.g. "ws://192.168.1.100/rpc")
            session: aiohttp client session; one is created (and owned) if omitted
            timeout: Connect timeout and per-call response timeout in seconds
            heartbeat: Ping interval in seconds, None to disable
            reconnect: Reconnect in the background after the connection drops
            max_reconnect_attempts: Attempts per reconnect cycle
            reconnect_delay: Delay before the second attempt, doubled afterwards
        """
        self._url = url
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self._heartbeat = heartbeat
        self._reconnect = reconnect
        self._max_reconnect_attempts = max_reconnect_attempts
        self._reconnect_delay = reconnect_delay

        self._src = f"{SOURCE_PREFIX}-{uuid.uuid4().hex[:12]}"
        self._ids = RequestIdAllocator()
        self._pending: dict[int, asyncio.Future[Response]] = {}

        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._connect_lock = asyncio.Lock()

        self._notify_handler: NotificationHandler | None = None
        self._state = ConnectionState.DISCONNECTED
        self._state_callbacks: list[StateCallback] = []
        self._closed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def src(self) -> str:
        """Source identifier sent with every request."""
        return self._src

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def pending_count(self) -> int:
        """Number of calls waiting for a response."""
        return len(self._pending)

    def on_state_change(self, callback: StateCallback) -> None:
        """Register a callback for connection state changes."""
        self._state_callbacks.append(callback)

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        _LOGGER.debug("WebSocket %s: %s -> %s", self._url, self._state.value, state.value)
        self._state = state
        for callback in list(self._state_callbacks):
            callback(state)

    def subscribe(self, handler: NotificationHandler) -> None:
        """Register the handler for incoming notifications.

        Raises:
            RuntimeError: If a handler is already registered
        """
        if self._notify_handler is not None:
            raise RuntimeError("Notification handler already registered")
        self._notify_handler = handler

    def unsubscribe(self) -> None:
        self._notify_handler = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def connect(self) -> aiohttp.ClientWebSocketResponse:
        """Open the connection if it is not open yet and return it.

        Raises:
            TransportClosedError: If the transport was closed
            TransportConnectionError: If the connection could not be opened
        """
        async with self._connect_lock:
            if self._closed:
                raise TransportClosedError()
            if self._ws is not None and not self._ws.closed:
                return self._ws

            if self._state is not ConnectionState.RECONNECTING:
                self._set_state(ConnectionState.CONNECTING)
            session = self._get_session()
            try:
                async with asyncio.timeout(self._timeout):
                    ws = await session.ws_connect(self._url, heartbeat=self._heartbeat)
            except TimeoutError as err:
                self._set_state(ConnectionState.DISCONNECTED)
                raise TransportConnectionError(
                    f"Timeout connecting to {self._url}", effect=CallEffect.NOT_APPLIED
                ) from err
            except aiohttp.ClientError as err:
                self._set_state(ConnectionState.DISCONNECTED)
                raise TransportConnectionError(
                    f"Error connecting to {self._url}: {err}", effect=CallEffect.NOT_APPLIED
                ) from err

            if self._closed:
                # close() ran while the handshake was in flight
                await ws.close()
                raise TransportClosedError()

            self._ws = ws
            self._set_state(ConnectionState.CONNECTED)
            self._reader_task = asyncio.create_task(self._read_loop(ws))
            _LOGGER.info("WebSocket connected to %s (src=%s)", self._url, self._src)
            return ws

    async def call(self, method: str, params: Any | None = None) -> JsonVal:
        """Send a request over the shared connection and wait for its response.

        Connects first when needed. Cancelling the calling task releases the
        pending entry; a response arriving later is discarded.

        Raises:
            TransportClosedError: If the transport was closed
            TransportConnectionError: If the connection failed or dropped
            CallTimeoutError: If no response arrived in time
            ApplicationError: If the device reported an error
        """
        if self._closed:
            raise TransportClosedError(method=method)

        ws = self._ws
        if ws is None or ws.closed:
            try:
                ws = await self.connect()
            except TransportError as err:
                err.method = method
                raise

        # No await between allocating the ID and registering the future
        request_id = self._ids.next_id()
        request = Request(method=method, id=request_id, params=serialize_params(params), src=self._src)
        future: asyncio.Future[Response] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future

        try:
            try:
                await ws.send_str(request.to_json())
            except (aiohttp.ClientError, ConnectionResetError) as err:
                raise TransportConnectionError(
                    f"Error sending {method}: {err}", effect=CallEffect.NOT_APPLIED, method=method
                ) from err
            _LOGGER.debug("Sent id=%s method=%s params=%s", request_id, method, request.params)

            try:
                async with asyncio.timeout(self._timeout):
                    response = await future
            except TimeoutError as err:
                raise CallTimeoutError(f"Timeout waiting for {method} (id={request_id})", method=method) from err
            except TransportError as err:
                err.method = method
                raise
        finally:
            self._pending.pop(request_id, None)

        return response.unwrap(method)

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    self._dispatch(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    _LOGGER.warning("WebSocket %s error: %s", self._url, ws.exception())
                    break
        except aiohttp.ClientError as err:
            _LOGGER.warning("WebSocket %s read failed: %s", self._url, err)
        finally:
            if not self._closed:
                self._handle_disconnect(ws)

    def _dispatch(self, raw: str | bytes) -> None:
        """Route one incoming frame to its waiting call or the notification handler."""
        try:
            message = parse_message(raw)
        except InvalidResponseError as err:
            future = self._pending_for(raw)
            if future is not None and not future.done():
                _LOGGER.warning("Malformed response from %s: %s", self._url, err)
                future.set_exception(err)
                return
            _LOGGER.warning("Dropping unparseable frame from %s: %s", self._url, err)
            return

        if isinstance(message, Response):
            future = self._pending.get(message.id)  # type: ignore[arg-type]
            if future is None or future.done():
                _LOGGER.debug("Discarding response for unknown or finished request id=%s", message.id)
                return
            future.set_result(message)
            return

        handler = self._notify_handler
        if handler is None:
            return
        try:
            handler(message)
        except Exception:
            _LOGGER.exception("Notification handler failed for %s", message.method)

    def _pending_for(self, raw: str | bytes) -> asyncio.Future[Response] | None:
        """Return the waiting future a malformed frame is addressed to, if any."""
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        request_id = data.get("id")
        if not isinstance(request_id, int) or isinstance(request_id, bool):
            return None
        return self._pending.get(request_id)

    def _fail_pending(self, message: str) -> None:
        for request_id, future in list(self._pending.items()):
            if not future.done():
                future.set_exception(TransportConnectionError(f"{message} (id={request_id})"))

    def _handle_disconnect(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        if self._ws is ws:
            self._ws = None
        _LOGGER.info("WebSocket %s disconnected", self._url)
        self._fail_pending("Connection lost before response")
        self._set_state(ConnectionState.DISCONNECTED)

        if self._reconnect and not self._closed:
            self._reconnect_task = asyncio.create_task(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        delay = self._reconnect_delay
        for attempt in range(1, self._max_reconnect_attempts + 1):
            if self._closed:
                return
            self._set_state(ConnectionState.RECONNECTING)
            try:
                await self.connect()
            except TransportError as err:
                _LOGGER.warning(
                    "Reconnect attempt %d/%d to %s failed: %s",
                    attempt,
                    self._max_reconnect_attempts,
                    self._url,
                    err,
                )
                if attempt < self._max_reconnect_attempts:
                    await asyncio.sleep(delay)
                    delay *= WS_RECONNECT_BACKOFF
                continue
            return

        self._set_state(ConnectionState.DISCONNECTED)

    async def close(self) -> None:
        """Close the connection and fail every call still waiting."""
        if self._closed:
            return
        self._closed = True

        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconnect_task

        self._fail_pending("Transport closed before response")

        if self._ws is not None:
            await self._ws.close()
            self._ws = None

        if self._reader_task is not None:
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task

        self._set_state(ConnectionState.CLOSED)

        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
