"""Cover component (roller shutters, blinds)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..component import Component, ComponentType
from ..models import RpcModel, rpc_field
from .common import EnergyCounter, Temperature

if TYPE_CHECKING:
    from ..client import RpcClient

# Cover states reported in CoverStatus.state
COVER_STATE_OPEN = "open"
COVER_STATE_CLOSED = "closed"
COVER_STATE_OPENING = "opening"
COVER_STATE_CLOSING = "closing"
COVER_STATE_STOPPED = "stopped"
COVER_STATE_CALIBRATING = "calibrating"


@dataclass
class CoverConfig(RpcModel):
    """Cover configuration. Fields left as None are not sent on SetConfig."""

    id: int | None = None
    name: str | None = None
    initial_state: str | None = None
    invert_directions: bool | None = None
    swap_inputs: bool | None = None
    maxtime_open: float | None = None
    maxtime_close: float | None = None
    power_limit: float | None = None
    voltage_limit: float | None = None
    undervoltage_limit: float | None = None
    current_limit: float | None = None
    motor_idle_confirm_timeout: float | None = None
    motor_move_timeout: float | None = None
    obstruction_detection_level: int | None = None


@dataclass
class CoverStatus(RpcModel):
    """Cover status."""

    id: int
    state: str
    source: str | None = None
    apower: float | None = None
    voltage: float | None = None
    current: float | None = None
    pf: float | None = None
    freq: float | None = None
    aenergy: EnergyCounter | None = rpc_field(model=EnergyCounter)
    temperature: Temperature | None = rpc_field(model=Temperature)
    pos_control: bool | None = None
    current_pos: int | None = None
    target_pos: int | None = None
    move_timeout: float | None = None
    move_started_at: float | None = None
    last_direction: str | None = None
    errors: list[str] | None = None


class Cover(Component):
    """Accessor for one cover instance."""

    def __init__(self, client: RpcClient, component_id: int) -> None:
        super().__init__(client, ComponentType.COVER, component_id)

    async def get_config(self) -> CoverConfig:  # type: ignore[override]
        return await self._call_decode("GetConfig", None, CoverConfig)

    async def get_status(self) -> CoverStatus:  # type: ignore[override]
        return await self._call_decode("GetStatus", None, CoverStatus)

    async def open(self, duration: float | None = None) -> Any:
        """Open the cover, optionally for duration seconds only."""
        return await self._call("Open", _duration_params(duration))

    async def close(self, duration: float | None = None) -> Any:
        """Close the cover, optionally for duration seconds only."""
        return await self._call("Close", _duration_params(duration))

    async def stop(self) -> Any:
        return await self._call("Stop")

    async def go_to_position(self, pos: int | None = None, *, rel: int | None = None) -> Any:
        """Move to an absolute position (0-100) or by a relative offset.

        Raises:
            ValueError: If neither or both of pos and rel are given
        """
        if (pos is None) == (rel is None):
            raise ValueError("Exactly one of pos and rel must be given")
        params = {"pos": pos} if pos is not None else {"rel": rel}
        return await self._call("GoToPosition", params)

    async def calibrate(self) -> Any:
        return await self._call("Calibrate")

    async def reset_counters(self, counter_types: list[str] | None = None) -> Any:
        params = {"type": counter_types} if counter_types else None
        return await self._call("ResetCounters", params)


def _duration_params(duration: float | None) -> dict[str, float] | None:
    if duration is None:
        return None
    return {"duration": duration}
