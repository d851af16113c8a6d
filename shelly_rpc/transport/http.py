"""HTTP transport: one POST to /rpc per call."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import aiohttp

from ..const import DEFAULT_SCHEME, DEFAULT_TIMEOUT, RPC_PATH, JsonVal
from ..envelope import Request, RequestIdAllocator, Response, serialize_params
from ..errors import (
    ApplicationError,
    CallEffect,
    CallTimeoutError,
    HttpStatusError,
    InvalidResponseError,
    TransportClosedError,
    TransportConnectionError,
)

_LOGGER = logging.getLogger(__name__)

# Statuses the device answers without an RPC envelope when it refuses a call
_DEVICE_STATUSES = (401, 403, 404)


def normalize_base_url(host: str) -> str:
    """Add a scheme when missing and strip the trailing slash."""
    url = host.strip()
    if not url.startswith(("http://", "https://")):
        url = f"{DEFAULT_SCHEME}{url}"
    return url.rstrip("/")


class HttpTransport:
    """Stateless JSON-RPC over HTTP.

    Each call is a single request/response exchange, so calls never share
    state beyond the aiohttp session's connection pool.
    """

    def __init__(
        self,
        host: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            host: Device address, with or without scheme (e.g. "192.168.1.100")
            session: aiohttp client session; one is created (and owned) if omitted
            timeout: Per-request timeout in seconds
            headers: Extra headers sent with every request
        """
        self._base_url = normalize_base_url(host)
        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._ids = RequestIdAllocator()
        self._closed = False

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def url(self) -> str:
        return f"{self._base_url}{RPC_PATH}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def call(self, method: str, params: Any | None = None) -> JsonVal:
        """Send one RPC request and return its result.

        Raises:
            TransportClosedError: If the transport was closed
            TransportConnectionError: If the device could not be reached
            CallTimeoutError: If no response arrived in time
            InvalidResponseError: If the body is not an RPC envelope
            HttpStatusError: If the device answered an HTTP error without envelope
            ApplicationError: If the device reported an error
        """
        if self._closed:
            raise TransportClosedError(method=method)

        request = Request(method=method, id=self._ids.next_id(), params=serialize_params(params))
        _LOGGER.debug("POST %s id=%s method=%s params=%s", self.url, request.id, method, request.params)

        session = self._get_session()
        try:
            async with asyncio.timeout(self._timeout):
                async with session.post(self.url, json=request.to_dict(), headers=self._headers) as response:
                    return await self._handle_response(response, request)

        except TimeoutError as err:
            raise CallTimeoutError(f"Timeout calling {method} on {self._base_url}", method=method) from err
        except aiohttp.ClientConnectorError as err:
            raise TransportConnectionError(
                f"Error connecting to {self._base_url}: {err}",
                effect=CallEffect.NOT_APPLIED,
                method=method,
            ) from err
        except aiohttp.ClientError as err:
            raise TransportConnectionError(
                f"Error calling {method} on {self._base_url}: {err}",
                effect=CallEffect.UNKNOWN,
                method=method,
            ) from err

    async def _handle_response(self, response: aiohttp.ClientResponse, request: Request) -> JsonVal:
        """Handle the HTTP response.

        Args:
            response: aiohttp response object
            request: Request the response answers

        Returns:
            The result member of the envelope
        """
        text = await response.text()

        try:
            data = json.loads(text)
        except ValueError:
            data = None

        if isinstance(data, dict) and ("result" in data or "error" in data):
            envelope = Response.from_dict(data)
            if envelope.id is not None and envelope.id != request.id:
                raise InvalidResponseError(
                    f"Response ID {envelope.id} does not match request ID {request.id}",
                    method=request.method,
                )
            _LOGGER.debug("Response id=%s method=%s error=%s", envelope.id, request.method, envelope.error)
            return envelope.unwrap(request.method)

        if response.status in _DEVICE_STATUSES:
            raise ApplicationError(response.status, text or f"HTTP {response.status}", method=request.method)

        if response.status >= 400:
            raise HttpStatusError(response.status, text, method=request.method)

        raise InvalidResponseError(f"Failed to parse RPC response: {text[:200]!r}", method=request.method)

    async def close(self) -> None:
        """Close the transport and its session if it owns one."""
        self._closed = True
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
