"""Asyncio JSON-RPC client for Shelly-style smart devices.

The client sends ``Component.Action`` calls over a pluggable transport
(HTTP, WebSocket, or an in-process test double), correlates concurrent
calls with their responses and reports every failure as a transport,
application or decode error.

Example:
    async with create_http_client("192.168.1.50") as client:
        cover = Cover(client, 0)
        await cover.open()
        status = await cover.get_status()
"""

from __future__ import annotations

from .client import Batch, BatchRequest, BatchResult, RpcClient, create_http_client, create_websocket_client
from .component import (
    Component,
    ComponentType,
    annotate_error,
    component_key,
    decode_result,
    inject_id,
    parse_component_key,
    rpc_namespace,
)
from .components import Cover, CoverConfig, CoverStatus, Switch, SwitchConfig, SwitchStatus, Sys, WiFi
from .errors import (
    ApplicationError,
    CallEffect,
    CallTimeoutError,
    DecodeError,
    ErrorCategory,
    HttpStatusError,
    InvalidResponseError,
    ShellyRpcError,
    TransportClosedError,
    TransportConnectionError,
    TransportError,
)
from .models import RpcModel, rpc_field
from .notify import NotificationRouter
from .transport import ConnectionState, HttpTransport, Transport, WebSocketTransport

__version__ = "1.0.0"

__all__ = [
    "ApplicationError",
    "Batch",
    "BatchRequest",
    "BatchResult",
    "CallEffect",
    "CallTimeoutError",
    "Component",
    "ComponentType",
    "ConnectionState",
    "Cover",
    "CoverConfig",
    "CoverStatus",
    "DecodeError",
    "ErrorCategory",
    "HttpStatusError",
    "HttpTransport",
    "InvalidResponseError",
    "NotificationRouter",
    "RpcClient",
    "RpcModel",
    "ShellyRpcError",
    "Switch",
    "SwitchConfig",
    "SwitchStatus",
    "Sys",
    "Transport",
    "TransportClosedError",
    "TransportConnectionError",
    "TransportError",
    "WebSocketTransport",
    "WiFi",
    "annotate_error",
    "component_key",
    "create_http_client",
    "create_websocket_client",
    "decode_result",
    "inject_id",
    "parse_component_key",
    "rpc_field",
    "rpc_namespace",
]
