"""WiFi component (singleton)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..component import Component, ComponentType
from ..models import RpcModel, rpc_field

if TYPE_CHECKING:
    from ..client import RpcClient


@dataclass
class WiFiConfig(RpcModel):
    """WiFi configuration: access point, two station slots and roaming."""

    ap: dict[str, Any] | None = None
    sta: dict[str, Any] | None = None
    sta1: dict[str, Any] | None = None
    roam: dict[str, Any] | None = None


@dataclass
class WiFiStatus(RpcModel):
    """WiFi status."""

    status: str
    sta_ip: str | None = None
    ssid: str | None = None
    rssi: int | None = None
    ap_client_count: int | None = None


@dataclass
class WiFiNetwork(RpcModel):
    """One network found by a scan."""

    ssid: str | None = None
    bssid: str | None = None
    auth: int | None = None
    channel: int | None = None
    rssi: int | None = None


@dataclass
class WiFiScanResult(RpcModel):
    """Result of WiFi.Scan."""

    results: list[WiFiNetwork] | None = rpc_field(model=WiFiNetwork)


class WiFi(Component):
    """Accessor for the WiFi singleton."""

    def __init__(self, client: RpcClient) -> None:
        super().__init__(client, ComponentType.WIFI)

    async def get_config(self) -> WiFiConfig:  # type: ignore[override]
        return await self._call_decode("GetConfig", None, WiFiConfig)

    async def get_status(self) -> WiFiStatus:  # type: ignore[override]
        return await self._call_decode("GetStatus", None, WiFiStatus)

    async def scan(self) -> list[WiFiNetwork]:
        """Scan for networks; the device may take several seconds to answer."""
        result = await self._call_decode("Scan", None, WiFiScanResult)
        return result.results or []
