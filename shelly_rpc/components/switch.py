"""Switch component (relay outputs)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..component import Component, ComponentType
from ..models import RpcModel, rpc_field
from .common import EnergyCounter, Temperature

if TYPE_CHECKING:
    from ..client import RpcClient


@dataclass
class SwitchConfig(RpcModel):
    """Switch configuration. Fields left as None are not sent on SetConfig."""

    id: int | None = None
    name: str | None = None
    in_mode: str | None = None
    initial_state: str | None = None
    auto_on: bool | None = None
    auto_on_delay: float | None = None
    auto_off: bool | None = None
    auto_off_delay: float | None = None
    power_limit: float | None = None
    voltage_limit: float | None = None
    current_limit: float | None = None


@dataclass
class SwitchStatus(RpcModel):
    """Switch status."""

    id: int
    output: bool
    source: str | None = None
    apower: float | None = None
    voltage: float | None = None
    current: float | None = None
    pf: float | None = None
    freq: float | None = None
    aenergy: EnergyCounter | None = rpc_field(model=EnergyCounter)
    ret_aenergy: EnergyCounter | None = rpc_field(model=EnergyCounter)
    temperature: Temperature | None = rpc_field(model=Temperature)
    timer_started_at: float | None = None
    timer_duration: float | None = None
    errors: list[str] | None = None


@dataclass
class SwitchSetResult(RpcModel):
    """Result of Switch.Set and Switch.Toggle."""

    was_on: bool


class Switch(Component):
    """Accessor for one switch instance."""

    def __init__(self, client: RpcClient, component_id: int) -> None:
        super().__init__(client, ComponentType.SWITCH, component_id)

    async def get_config(self) -> SwitchConfig:  # type: ignore[override]
        return await self._call_decode("GetConfig", None, SwitchConfig)

    async def get_status(self) -> SwitchStatus:  # type: ignore[override]
        return await self._call_decode("GetStatus", None, SwitchStatus)

    async def set(self, on: bool, *, toggle_after: float | None = None) -> SwitchSetResult:
        """Turn the output on or off.

        Args:
            on: Desired output state
            toggle_after: Flip back after this many seconds
        """
        params: dict[str, bool | float] = {"on": on}
        if toggle_after is not None:
            params["toggle_after"] = toggle_after
        return await self._call_decode("Set", params, SwitchSetResult)

    async def toggle(self) -> SwitchSetResult:
        return await self._call_decode("Toggle", None, SwitchSetResult)

    async def reset_counters(self, counter_types: list[str] | None = None) -> None:
        params = {"type": counter_types} if counter_types else None
        await self._call("ResetCounters", params)
