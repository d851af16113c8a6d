"""In-process transport for tests of code built on the RPC client."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .const import JsonVal
from .envelope import serialize_params
from .errors import ERR_CODE_METHOD_NOT_FOUND, ApplicationError, TransportClosedError

_LOGGER = logging.getLogger(__name__)

CallHandler = Callable[[JsonVal], Any]


@dataclass(frozen=True)
class RecordedCall:
    """One call seen by MockTransport, with params as serialized."""

    method: str
    params: JsonVal = None


class MockTransport:
    """Transport that answers calls from per-method handlers.

    A handler is a callable taking the serialized params; it may be a
    coroutine function, return a value (returned as the call result) or raise
    (the exception propagates as if the device or the wire had failed).
    Calls to methods without a handler fail with a method-not-found
    ApplicationError.

    Example:
        transport = MockTransport()
        transport.on_call_return("Cover.Open", {"was_on": False})
        client = RpcClient(transport)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, CallHandler] = {}
        self._calls: list[RecordedCall] = []
        self._closed = False

    def on_call(self, method: str, handler: CallHandler) -> MockTransport:
        """Register a handler for method, replacing any previous one."""
        self._handlers[method] = handler
        return self

    def on_call_return(self, method: str, result: JsonVal) -> MockTransport:
        """Answer method with a fixed result (bytes are returned as raw JSON)."""
        return self.on_call(method, lambda _params: result)

    def on_call_error(self, method: str, error: BaseException) -> MockTransport:
        """Fail every call to method with error."""

        def _raise(_params: JsonVal) -> Any:
            raise error

        return self.on_call(method, _raise)

    async def call(self, method: str, params: Any | None = None) -> JsonVal:
        if self._closed:
            raise TransportClosedError(method=method)

        payload = serialize_params(params)
        self._calls.append(RecordedCall(method, payload))
        _LOGGER.debug("Mock call %s params=%s", method, payload)

        # Yield once so cancellation and deadlines behave as with a real transport
        await asyncio.sleep(0)

        handler = self._handlers.get(method)
        if handler is None:
            raise ApplicationError(
                ERR_CODE_METHOD_NOT_FOUND, f"No handler registered for method: {method}", method=method
            )

        result = handler(payload)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def calls(self) -> list[RecordedCall]:
        return list(self._calls)

    @property
    def call_count(self) -> int:
        return len(self._calls)

    @property
    def last_call(self) -> RecordedCall | None:
        return self._calls[-1] if self._calls else None

    def was_called(self, method: str) -> bool:
        return any(call.method == method for call in self._calls)

    def calls_for(self, method: str) -> list[RecordedCall]:
        return [call for call in self._calls if call.method == method]

    def reset(self) -> None:
        """Forget recorded calls, keep handlers."""
        self._calls.clear()

    def clear_handlers(self) -> None:
        self._handlers.clear()
