"""Status sub-objects shared by several component types."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import RpcModel


@dataclass
class EnergyCounter(RpcModel):
    """Energy counter of a metered output (aenergy / ret_aenergy)."""

    total: float | None = None  # Wh
    by_minute: list[float] | None = None  # mWh for the last three minutes
    minute_ts: int | None = None


@dataclass
class Temperature(RpcModel):
    """Internal temperature reading."""

    tC: float | None = None
    tF: float | None = None
