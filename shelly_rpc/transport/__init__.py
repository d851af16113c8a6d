"""Transports that carry RPC calls to a device."""

from __future__ import annotations

from .base import ConnectionState, NotificationHandler, NotificationSource, Transport
from .http import HttpTransport
from .websocket import WebSocketTransport

__all__ = [
    "ConnectionState",
    "HttpTransport",
    "NotificationHandler",
    "NotificationSource",
    "Transport",
    "WebSocketTransport",
]
