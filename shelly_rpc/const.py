"""Constants for the Shelly RPC client."""

from typing import Any, Final

# JSON value as produced by json.loads
JsonVal = Any

JSONRPC_VERSION: Final = "2.0"

# Conventional parameter key carrying a component instance ID
ID_KEY: Final = "id"

# HTTP
RPC_PATH: Final = "/rpc"
DEFAULT_SCHEME: Final = "http://"
DEFAULT_TIMEOUT: Final = 10  # seconds, per call

# WebSocket
SOURCE_PREFIX: Final = "shelly-rpc"
WS_HEARTBEAT: Final = 30  # seconds
WS_RECONNECT: Final = True
WS_MAX_RECONNECT_ATTEMPTS: Final = 3
WS_RECONNECT_DELAY: Final = 1.0  # seconds, doubled after each failed attempt
WS_RECONNECT_BACKOFF: Final = 2.0
