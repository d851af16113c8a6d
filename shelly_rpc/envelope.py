"""JSON-RPC envelope types shared by the transports."""

from __future__ import annotations

import itertools
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .const import JSONRPC_VERSION, JsonVal
from .errors import ApplicationError, InvalidResponseError
from .models import RpcModel


def serialize_params(params: Any) -> JsonVal:
    """Convert call params to a JSON-serializable value."""
    if params is None:
        return None
    if isinstance(params, RpcModel):
        return params.to_dict()
    if isinstance(params, Mapping):
        return dict(params)
    return params


class RequestIdAllocator:
    """Hands out request IDs, unique among in-flight calls of one transport.

    IDs start at 1 and are only ever handed out from the event loop thread,
    so allocation needs no lock.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._current = 0

    def next_id(self) -> int:
        """Return the next request ID."""
        self._current = next(self._counter)
        return self._current

    @property
    def current(self) -> int:
        """Return the last ID handed out (0 if none)."""
        return self._current


@dataclass(frozen=True)
class Request:
    """A JSON-RPC request.

    Attributes:
        id: Request identifier, None for notifications.
        method: Method name (e.g. "Switch.Set").
        params: Method parameters.
        src: Source identifier, required by stateful transports.
    """

    method: str
    id: int | None = None
    params: JsonVal = None
    src: str | None = None

    def to_dict(self) -> dict[str, JsonVal]:
        """Convert to JSON-serializable dict."""
        result: dict[str, JsonVal] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.id is not None:
            result["id"] = self.id
        if self.src is not None:
            result["src"] = self.src
        if self.params is not None:
            result["params"] = self.params
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass(frozen=True)
class RpcErrorObject:
    """Error member of a response envelope."""

    code: int
    message: str
    data: JsonVal = None

    def to_exception(self, method: str | None = None) -> ApplicationError:
        return ApplicationError(self.code, self.message, self.data, method=method)


@dataclass(frozen=True)
class Response:
    """A JSON-RPC response: exactly one of result or error is set."""

    id: int | str | None
    result: JsonVal = None
    error: RpcErrorObject | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def unwrap(self, method: str | None = None) -> JsonVal:
        """Return the result, or raise the device error as ApplicationError."""
        if self.error is not None:
            raise self.error.to_exception(method)
        return self.result

    @classmethod
    def from_dict(cls, data: Mapping[str, JsonVal]) -> Response:
        """Create response from a decoded envelope.

        Raises:
            InvalidResponseError: If the envelope is malformed
        """
        version = data.get("jsonrpc")
        # Devices may omit the jsonrpc member; only validate it when present
        if version not in (None, "", JSONRPC_VERSION):
            raise InvalidResponseError(f"Invalid jsonrpc version: {version}")

        has_result = "result" in data
        error_data = data.get("error")
        if error_data is None and not has_result:
            raise InvalidResponseError("Response has neither result nor error")
        if error_data is not None and has_result:
            raise InvalidResponseError("Response has both result and error")

        error: RpcErrorObject | None = None
        if error_data is not None:
            if not isinstance(error_data, Mapping):
                raise InvalidResponseError(f"Malformed error object: {error_data!r}")
            code = error_data.get("code")
            if not isinstance(code, int) or isinstance(code, bool):
                raise InvalidResponseError(f"Malformed error code: {code!r}")
            error = RpcErrorObject(
                code=code,
                message=str(error_data.get("message", "Unknown error")),
                data=error_data.get("data"),
            )
        return cls(id=data.get("id"), result=data.get("result"), error=error)


@dataclass(frozen=True)
class Notification:
    """A server-initiated message without an ID."""

    method: str
    params: JsonVal = None
    src: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, JsonVal]) -> Notification:
        method = data.get("method")
        if not isinstance(method, str) or not method:
            raise InvalidResponseError("Notification has no method")
        return cls(method=method, params=data.get("params"), src=data.get("src"))


def parse_message(raw: str | bytes) -> Response | Notification:
    """Parse one incoming frame as a response or a notification.

    Raises:
        InvalidResponseError: If the frame is not a valid envelope
    """
    try:
        data = json.loads(raw)
    except ValueError as err:
        raise InvalidResponseError(f"Failed to parse message: {err}") from err

    if not isinstance(data, dict):
        raise InvalidResponseError(f"Unexpected message shape: {type(data).__name__}")

    if data.get("id") is not None and ("result" in data or "error" in data):
        return Response.from_dict(data)
    if data.get("method") and data.get("id") is None:
        return Notification.from_dict(data)
    raise InvalidResponseError("Unknown message type")


def parse_response(raw: str | bytes) -> Response:
    """Parse a single response envelope.

    Raises:
        InvalidResponseError: If the payload is not a response envelope
    """
    try:
        data = json.loads(raw)
    except ValueError as err:
        raise InvalidResponseError(f"Failed to parse response: {err}") from err
    if not isinstance(data, dict):
        raise InvalidResponseError(f"Unexpected response shape: {type(data).__name__}")
    return Response.from_dict(data)
