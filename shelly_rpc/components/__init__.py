"""Representative component accessors built on the addressing helpers."""

from .common import EnergyCounter, Temperature
from .cover import Cover, CoverConfig, CoverStatus
from .switch import Switch, SwitchConfig, SwitchSetResult, SwitchStatus
from .sys import Sys, SysConfig, SysStatus
from .wifi import WiFi, WiFiConfig, WiFiNetwork, WiFiScanResult, WiFiStatus

__all__ = [
    "Cover",
    "CoverConfig",
    "CoverStatus",
    "EnergyCounter",
    "Switch",
    "SwitchConfig",
    "SwitchSetResult",
    "SwitchStatus",
    "Sys",
    "SysConfig",
    "SysStatus",
    "Temperature",
    "WiFi",
    "WiFiConfig",
    "WiFiNetwork",
    "WiFiScanResult",
    "WiFiStatus",
]
