"""Error taxonomy for Shelly RPC calls.

Every failure surfaced by the client is one of three kinds:

- TransportError: the call could not be completed over the wire.
- ApplicationError: the device processed the call and reported a failure.
- DecodeError: the call succeeded but its payload does not fit the
  requested type.
"""

from __future__ import annotations

from enum import Enum

from .const import JsonVal


class CallEffect(str, Enum):
    """What is known about a failed call's effect on the device."""

    NOT_APPLIED = "not_applied"  # request never reached the device
    UNKNOWN = "unknown"  # request may have been applied


class ErrorCategory(str, Enum):
    """Coarse classification of device-reported error codes."""

    NOT_FOUND = "not_found"
    AUTH = "auth"
    TIMEOUT = "timeout"
    NOT_SUPPORTED = "not_supported"
    INVALID_PARAM = "invalid_param"
    UNAVAILABLE = "unavailable"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    FAILED_PRECONDITION = "failed_precondition"
    RPC_METHOD = "rpc_method"


# Device error codes
ERR_CODE_COMPONENT_NOT_FOUND = -101
ERR_CODE_COMPONENT_CONFIG_NOT_SET = -102
ERR_CODE_INVALID_ARGUMENT = -103
ERR_CODE_DEADLINE_EXCEEDED = -104
ERR_CODE_NOT_FOUND = -105
ERR_CODE_METHOD_NOT_FOUND = -106
ERR_CODE_INVALID_METHOD_PARAM = -107
ERR_CODE_RESOURCE_EXHAUSTED = -108
ERR_CODE_FAILED_PRECONDITION = -109
ERR_CODE_UNAVAILABLE = -114
ERR_CODE_UNAUTHORIZED = -115

_CATEGORIES: dict[int, ErrorCategory] = {
    ERR_CODE_COMPONENT_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ERR_CODE_NOT_FOUND: ErrorCategory.NOT_FOUND,
    ERR_CODE_UNAUTHORIZED: ErrorCategory.AUTH,
    ERR_CODE_DEADLINE_EXCEEDED: ErrorCategory.TIMEOUT,
    ERR_CODE_METHOD_NOT_FOUND: ErrorCategory.NOT_SUPPORTED,
    ERR_CODE_COMPONENT_CONFIG_NOT_SET: ErrorCategory.NOT_SUPPORTED,
    ERR_CODE_INVALID_ARGUMENT: ErrorCategory.INVALID_PARAM,
    ERR_CODE_INVALID_METHOD_PARAM: ErrorCategory.INVALID_PARAM,
    ERR_CODE_UNAVAILABLE: ErrorCategory.UNAVAILABLE,
    ERR_CODE_RESOURCE_EXHAUSTED: ErrorCategory.RESOURCE_EXHAUSTED,
    ERR_CODE_FAILED_PRECONDITION: ErrorCategory.FAILED_PRECONDITION,
    # JSON-RPC 2.0 standard codes
    -32600: ErrorCategory.INVALID_PARAM,
    -32601: ErrorCategory.NOT_SUPPORTED,
    -32602: ErrorCategory.INVALID_PARAM,
    -32603: ErrorCategory.RPC_METHOD,
    # HTTP status codes reported without an RPC envelope
    401: ErrorCategory.AUTH,
    403: ErrorCategory.AUTH,
    404: ErrorCategory.NOT_FOUND,
}


def categorize(code: int) -> ErrorCategory:
    """Map a device error code to its category."""
    return _CATEGORIES.get(code, ErrorCategory.RPC_METHOD)


class ShellyRpcError(Exception):
    """Base exception for all RPC failures.

    ``method``, ``component_key`` and ``action`` are filled in as the error
    propagates through the client and the component helpers.
    """

    def __init__(self, message: str, *, method: str | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.component_key: str | None = None
        self.action: str | None = None


class TransportError(ShellyRpcError):
    """The call could not be completed over the wire."""

    def __init__(
        self,
        message: str,
        *,
        effect: CallEffect = CallEffect.UNKNOWN,
        method: str | None = None,
    ) -> None:
        super().__init__(message, method=method)
        self.effect = effect

    @property
    def safe_to_retry(self) -> bool:
        """Return True if the device is known not to have applied the call."""
        return self.effect is CallEffect.NOT_APPLIED


class TransportConnectionError(TransportError):
    """Connection could not be established or was lost."""


class CallTimeoutError(TransportError):
    """No response arrived before the call deadline."""

    def __init__(self, message: str, *, method: str | None = None) -> None:
        super().__init__(message, effect=CallEffect.UNKNOWN, method=method)


class InvalidResponseError(TransportError):
    """Received bytes are not a valid RPC envelope."""

    def __init__(self, message: str, *, method: str | None = None) -> None:
        super().__init__(message, effect=CallEffect.UNKNOWN, method=method)


class TransportClosedError(TransportError):
    """The transport was closed before the call was sent."""

    def __init__(self, message: str = "Transport is closed", *, method: str | None = None) -> None:
        super().__init__(message, effect=CallEffect.NOT_APPLIED, method=method)


class HttpStatusError(TransportError):
    """HTTP error status without an RPC envelope in the body."""

    def __init__(self, status: int, body: str, *, method: str | None = None) -> None:
        super().__init__(f"HTTP error {status}: {body}", effect=CallEffect.UNKNOWN, method=method)
        self.status = status
        self.body = body


class ApplicationError(ShellyRpcError):
    """The device received the call and reported a failure."""

    def __init__(
        self,
        code: int,
        message: str,
        data: JsonVal = None,
        *,
        method: str | None = None,
    ) -> None:
        text = f"RPC error {code}: {message}"
        if data is not None:
            text = f"{text} (data: {data})"
        super().__init__(text, method=method)
        self.code = code
        self.message = message
        self.data = data

    @property
    def category(self) -> ErrorCategory:
        """Return the category for this error's code."""
        return categorize(self.code)


class DecodeError(ShellyRpcError):
    """A result payload could not be decoded into the requested type."""

    def __init__(
        self,
        message: str,
        *,
        payload: JsonVal = None,
        target: type | None = None,
        method: str | None = None,
    ) -> None:
        super().__init__(message, method=method)
        self.payload = payload
        self.target = target
