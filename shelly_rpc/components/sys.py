"""Sys component: device-wide settings and runtime information (singleton)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..component import Component, ComponentType
from ..models import RpcModel

if TYPE_CHECKING:
    from ..client import RpcClient


@dataclass
class SysConfig(RpcModel):
    """Sys configuration.

    The device groups settings in nested objects (device, location, debug,
    ui_data, rpc_udp, sntp); they are kept as plain dicts.
    """

    device: dict[str, Any] | None = None
    location: dict[str, Any] | None = None
    debug: dict[str, Any] | None = None
    ui_data: dict[str, Any] | None = None
    rpc_udp: dict[str, Any] | None = None
    sntp: dict[str, Any] | None = None
    cfg_rev: int | None = None


@dataclass
class SysStatus(RpcModel):
    """Sys status."""

    mac: str | None = None
    restart_required: bool | None = None
    time: str | None = None
    unixtime: int | None = None
    uptime: int | None = None
    ram_size: int | None = None
    ram_free: int | None = None
    fs_size: int | None = None
    fs_free: int | None = None
    cfg_rev: int | None = None
    kvs_rev: int | None = None
    schedule_rev: int | None = None
    webhook_rev: int | None = None
    available_updates: dict[str, Any] | None = None
    reset_reason: int | None = None


class Sys(Component):
    """Accessor for the Sys singleton."""

    def __init__(self, client: RpcClient) -> None:
        super().__init__(client, ComponentType.SYS)

    async def get_config(self) -> SysConfig:  # type: ignore[override]
        return await self._call_decode("GetConfig", None, SysConfig)

    async def get_status(self) -> SysStatus:  # type: ignore[override]
        return await self._call_decode("GetStatus", None, SysStatus)
