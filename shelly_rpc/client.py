"""RPC client: the single entry point every component accessor calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any, TypeVar

import aiohttp

from .component import decode_result
from .const import DEFAULT_TIMEOUT, JsonVal
from .errors import CallEffect, CallTimeoutError, DecodeError, ShellyRpcError, TransportConnectionError
from .notify import GlobalHandler, MethodHandler, NotificationRouter
from .transport.base import NotificationSource, Transport
from .transport.http import HttpTransport
from .transport.websocket import WebSocketTransport

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class RpcClient:
    """JSON-RPC client on top of one transport.

    The client applies a deadline to every call and classifies every failure
    as TransportError, ApplicationError or DecodeError. It never retries:
    several device actions are not idempotent, so retry decisions belong to
    the caller (see TransportError.safe_to_retry).

    Safe for concurrent use by many tasks of one event loop.
    """

    def __init__(self, transport: Transport, *, timeout: float | None = DEFAULT_TIMEOUT) -> None:
        """Initialize the client.

        Args:
            transport: Transport performing the calls
            timeout: Default per-call deadline in seconds, None for no deadline
        """
        self._transport = transport
        self._timeout = timeout
        self._router = NotificationRouter()

        if isinstance(transport, NotificationSource):
            transport.subscribe(self._router.route)

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def timeout(self) -> float | None:
        return self._timeout

    @property
    def notifications(self) -> NotificationRouter:
        return self._router

    async def call(self, method: str, params: Any | None = None, *, timeout: float | None = None) -> JsonVal:
        """Execute one RPC call and return its raw result.

        Args:
            method: RPC method, e.g. "Switch.Set"
            params: None, a mapping or an RpcModel
            timeout: Deadline for this call in seconds (defaults to the client's)

        Returns:
            The result payload as produced by the device

        Raises:
            TransportError: If the call could not be completed over the wire
            ApplicationError: If the device reported a failure
            asyncio.CancelledError: If the calling task is cancelled
        """
        if not method:
            raise ValueError("method must not be empty")

        deadline = self._timeout if timeout is None else timeout
        _LOGGER.debug("Call %s params=%s", method, params)

        try:
            async with asyncio.timeout(deadline):
                return await self._transport.call(method, params)

        except ShellyRpcError as err:
            if err.method is None:
                err.method = method
            _LOGGER.debug("Call %s failed: %s", method, err)
            raise
        except TimeoutError as err:
            raise CallTimeoutError(f"Call {method} timed out after {deadline}s", method=method) from err
        except (aiohttp.ClientError, OSError) as err:
            raise TransportConnectionError(
                f"Call {method} failed: {err}", effect=CallEffect.UNKNOWN, method=method
            ) from err

    async def call_result(
        self,
        method: str,
        params: Any | None,
        result_type: type[_T],
        *,
        timeout: float | None = None,
    ) -> _T:
        """Execute a call and decode its result into result_type.

        Raises:
            DecodeError: If the result does not fit result_type
        """
        raw = await self.call(method, params, timeout=timeout)
        try:
            return decode_result(raw, result_type)
        except DecodeError as err:
            err.method = method
            raise

    def batch(self) -> Batch:
        """Start a batch of calls executed together."""
        return Batch(self)

    def on_notification(self, handler: GlobalHandler) -> None:
        """Register a handler for every notification (stateful transports only)."""
        self._router.on_notification(handler)

    def on_notification_method(self, method: str, handler: MethodHandler) -> None:
        """Register a handler for notifications of one method."""
        self._router.on_notification_method(method, handler)

    def remove_notification_handlers(self) -> None:
        self._router.remove_notification_handlers()

    def remove_method_handlers(self, method: str) -> None:
        self._router.remove_method_handlers(method)

    def remove_all_handlers(self) -> None:
        self._router.remove_all_handlers()

    async def close(self) -> None:
        """Close the underlying transport."""
        if isinstance(self._transport, NotificationSource):
            self._transport.unsubscribe()
        await self._transport.close()

    async def __aenter__(self) -> RpcClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()


@dataclass(frozen=True)
class BatchRequest:
    """One call of a batch."""

    method: str
    params: Any = None


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one batch call: either result or error is meaningful."""

    request: BatchRequest
    result: JsonVal = None
    error: ShellyRpcError | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def decode(self, result_type: type[_T]) -> _T:
        """Decode the result, or raise the call's error."""
        if self.error is not None:
            raise self.error
        return decode_result(self.result, result_type)


class Batch:
    """Calls issued together; results come back in insertion order.

    The calls run concurrently on the client's transport. A failing call
    does not fail the batch; its error is kept in its BatchResult.
    """

    def __init__(self, client: RpcClient) -> None:
        self._client = client
        self._requests: list[BatchRequest] = []

    def add(self, method: str, params: Any | None = None) -> Batch:
        self._requests.append(BatchRequest(method, params))
        return self

    def clear(self) -> Batch:
        self._requests.clear()
        return self

    def __len__(self) -> int:
        return len(self._requests)

    async def execute(self) -> list[BatchResult]:
        if not self._requests:
            return []

        requests = list(self._requests)
        outcomes = await asyncio.gather(
            *(self._client.call(req.method, req.params) for req in requests),
            return_exceptions=True,
        )

        results: list[BatchResult] = []
        for req, outcome in zip(requests, outcomes):
            if isinstance(outcome, ShellyRpcError):
                results.append(BatchResult(req, error=outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(BatchResult(req, result=outcome))
        return results


def create_http_client(
    host: str,
    *,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> RpcClient:
    """Create a client talking HTTP to the device at host."""
    transport = HttpTransport(host, session=session, timeout=timeout, headers=headers)
    return RpcClient(transport, timeout=timeout)


async def create_websocket_client(
    url: str,
    *,
    session: aiohttp.ClientSession | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    reconnect: bool = True,
) -> RpcClient:
    """Connect a WebSocket transport and return a client using it.

    Raises:
        TransportConnectionError: If the connection could not be opened
    """
    transport = WebSocketTransport(url, session=session, timeout=timeout, reconnect=reconnect)
    await transport.connect()
    return RpcClient(transport, timeout=timeout)
