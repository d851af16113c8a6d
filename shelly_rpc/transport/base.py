"""Transport protocol and connection state enum."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from ..const import JsonVal
from ..envelope import Notification

NotificationHandler = Callable[[Notification], None]
StateCallback = Callable[["ConnectionState"], None]


class ConnectionState(str, Enum):
    """Connection states of a stateful transport."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


@runtime_checkable
class Transport(Protocol):
    """Performs one logical RPC call against a device.

    Implementations must be safe for concurrent use from many tasks of one
    event loop and must never retry a call on their own.
    """

    async def call(self, method: str, params: Any | None = None) -> JsonVal:
        """Perform a call and return the result payload.

        Args:
            method: RPC method name (e.g. "Cover.Open").
            params: None, a mapping or an RpcModel; serialized by the transport.

        Returns:
            The result member exactly as sent by the device.

        Raises:
            TransportError: If the call could not be completed.
            ApplicationError: If the device answered with an error object.
        """
        ...

    async def close(self) -> None:
        """Release the transport's resources."""
        ...


@runtime_checkable
class NotificationSource(Protocol):
    """Optional capability of transports that receive device notifications."""

    def subscribe(self, handler: NotificationHandler) -> None:
        ...

    def unsubscribe(self) -> None:
        ...
