"""Component addressing helpers.

Every accessor runs the same pipeline per call: inject the component ID into
the params (instance components only), call the client, decode the result
into a typed model, and annotate any failure with the component key and the
action that failed. Nothing is kept between calls.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from .const import ID_KEY, JsonVal
from .envelope import serialize_params
from .errors import DecodeError, ShellyRpcError
from .models import RpcModel

if TYPE_CHECKING:
    from .client import RpcClient

_T = TypeVar("_T")

_SCALAR_RESULTS: tuple[type, ...] = (list, str, int, float, bool)


class ComponentType(str, Enum):
    """Known component types (logical, lowercase form)."""

    SWITCH = "switch"
    COVER = "cover"
    LIGHT = "light"
    RGB = "rgb"
    RGBW = "rgbw"
    INPUT = "input"
    PM = "pm"
    PM1 = "pm1"
    EM = "em"
    EM1 = "em1"
    EMDATA = "emdata"
    EM1DATA = "em1data"
    VOLTMETER = "voltmeter"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    ILLUMINANCE = "illuminance"
    DEVICEPOWER = "devicepower"
    SMOKE = "smoke"
    FLOOD = "flood"
    THERMOSTAT = "thermostat"
    WIFI = "wifi"
    ETH = "eth"
    BLE = "ble"
    CLOUD = "cloud"
    MQTT = "mqtt"
    WEBHOOK = "webhook"
    WS = "ws"
    SYS = "sys"
    SCRIPT = "script"
    SCHEDULE = "schedule"
    KVS = "kvs"
    UI = "ui"
    HT_UI = "ht_ui"
    PLUGS_UI = "plugs_ui"
    BTHOME = "bthome"
    BTHOMEDEVICE = "bthomedevice"
    BTHOMESENSOR = "bthomesensor"
    MODBUS = "modbus"
    SENSORADDON = "sensoraddon"
    SHELLY = "shelly"


# Logical type -> RPC namespace used in method names
_NAMESPACES: dict[ComponentType, str] = {
    ComponentType.SWITCH: "Switch",
    ComponentType.COVER: "Cover",
    ComponentType.LIGHT: "Light",
    ComponentType.RGB: "RGB",
    ComponentType.RGBW: "RGBW",
    ComponentType.INPUT: "Input",
    ComponentType.PM: "PM",
    ComponentType.PM1: "PM1",
    ComponentType.EM: "EM",
    ComponentType.EM1: "EM1",
    ComponentType.EMDATA: "EMData",
    ComponentType.EM1DATA: "EM1Data",
    ComponentType.VOLTMETER: "Voltmeter",
    ComponentType.TEMPERATURE: "Temperature",
    ComponentType.HUMIDITY: "Humidity",
    ComponentType.ILLUMINANCE: "Illuminance",
    ComponentType.DEVICEPOWER: "DevicePower",
    ComponentType.SMOKE: "Smoke",
    ComponentType.FLOOD: "Flood",
    ComponentType.THERMOSTAT: "Thermostat",
    ComponentType.WIFI: "WiFi",
    ComponentType.ETH: "Eth",
    ComponentType.BLE: "BLE",
    ComponentType.CLOUD: "Cloud",
    ComponentType.MQTT: "Mqtt",
    ComponentType.WEBHOOK: "Webhook",
    ComponentType.WS: "Ws",
    ComponentType.SYS: "Sys",
    ComponentType.SCRIPT: "Script",
    ComponentType.SCHEDULE: "Schedule",
    ComponentType.KVS: "KVS",
    ComponentType.UI: "UI",
    ComponentType.HT_UI: "HT_UI",
    ComponentType.PLUGS_UI: "Plugs_UI",
    ComponentType.BTHOME: "BTHome",
    ComponentType.BTHOMEDEVICE: "BTHomeDevice",
    ComponentType.BTHOMESENSOR: "BTHomeSensor",
    ComponentType.MODBUS: "Modbus",
    ComponentType.SENSORADDON: "SensorAddon",
    ComponentType.SHELLY: "Shelly",
}


def rpc_namespace(component_type: str | ComponentType) -> str:
    """Return the RPC namespace for a component type ("wifi" -> "WiFi").

    Raises:
        KeyError: If the type is unknown
    """
    try:
        return _NAMESPACES[ComponentType(component_type)]
    except ValueError as err:
        raise KeyError(f"Unknown component type: {component_type}") from err


def component_key(component_type: str | ComponentType, component_id: int | None = None) -> str:
    """Return the display key: "type" for singletons, "type:id" otherwise."""
    type_name = ComponentType(component_type).value if isinstance(component_type, ComponentType) else component_type
    if component_id is None:
        return type_name
    return f"{type_name}:{component_id}"


def parse_component_key(key: str) -> tuple[str, int | None]:
    """Split a display key into type and ID.

    Example: "switch:0" -> ("switch", 0), "sys" -> ("sys", None)

    Raises:
        ValueError: If the key is malformed
    """
    component_type, sep, raw_id = key.partition(":")
    if not component_type:
        raise ValueError(f"Invalid component key format: {key!r}")
    if not sep:
        return component_type, None
    try:
        component_id = int(raw_id)
    except ValueError as err:
        raise ValueError(f"Invalid component ID in key {key!r}") from err
    if component_id < 0:
        raise ValueError(f"Invalid component ID in key {key!r}")
    return component_type, component_id


def inject_id(component_id: int | None, params: Any | None = None) -> JsonVal:
    """Build the params payload the device expects for a component.

    Singletons (component_id None) get their params serialized unchanged and
    never gain an ID key. Instance components get the ID merged in under the
    conventional key, overriding any ID already in params.

    Raises:
        TypeError: If params cannot carry an ID (not a mapping or model)
    """
    payload = serialize_params(params)
    if component_id is None:
        return payload
    if payload is None:
        return {ID_KEY: component_id}
    if not isinstance(payload, dict):
        raise TypeError(f"Params of type {type(params).__name__} cannot carry a component ID")
    return {ID_KEY: component_id, **{k: v for k, v in payload.items() if k != ID_KEY}}


def decode_result(raw: JsonVal, result_type: type[_T] | None) -> _T:
    """Decode a raw call result into result_type.

    Raw bytes are parsed as JSON first; anything else is taken as an already
    decoded JSON value. RpcModel subclasses keep unknown members in ``extra``.
    A result_type of None returns the (parsed) value as is.

    Raises:
        DecodeError: If the payload does not fit result_type
        TypeError: If result_type is not a supported target
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as err:
            raise DecodeError(f"Invalid JSON payload: {err}", payload=bytes(raw), target=result_type) from err

    if result_type is None:
        return raw  # type: ignore[return-value]

    if isinstance(result_type, type) and issubclass(result_type, RpcModel):
        return result_type.from_dict(raw)  # type: ignore[return-value]

    if result_type is dict:
        if not isinstance(raw, dict):
            raise DecodeError(
                f"Expected JSON object, got {type(raw).__name__}", payload=raw, target=result_type
            )
        return dict(raw)  # type: ignore[return-value]

    if result_type in _SCALAR_RESULTS:
        valid = isinstance(raw, result_type) and not (isinstance(raw, bool) and result_type in (int, float))
        if result_type is float and isinstance(raw, int) and not isinstance(raw, bool):
            valid = True
        if not valid:
            raise DecodeError(
                f"Expected {result_type.__name__}, got {type(raw).__name__}", payload=raw, target=result_type
            )
        return raw  # type: ignore[return-value]

    raise TypeError(f"Unsupported result type: {result_type!r}")


def annotate_error(err: ShellyRpcError, key: str, action: str) -> ShellyRpcError:
    """Attach the component key and action to an error without changing its kind."""
    if err.component_key is None:
        err.component_key = key
        err.action = action
        err.add_note(f"{action} failed for {key}")
    return err


class Component:
    """Accessor base for one component on a device.

    Holds only the immutable (client, type, id) triple; id is None for
    singleton components such as sys or wifi.
    """

    __slots__ = ("_client", "_id", "_namespace", "_type")

    def __init__(
        self,
        client: RpcClient,
        component_type: str | ComponentType,
        component_id: int | None = None,
    ) -> None:
        if component_id is not None and component_id < 0:
            raise ValueError(f"Component ID must be non-negative, got {component_id}")
        self._client = client
        self._type = ComponentType(component_type)
        self._id = component_id
        self._namespace = rpc_namespace(self._type)

    @property
    def client(self) -> RpcClient:
        return self._client

    @property
    def type(self) -> str:
        return self._type.value

    @property
    def id(self) -> int | None:
        return self._id

    @property
    def key(self) -> str:
        return component_key(self._type, self._id)

    def method(self, action: str) -> str:
        """Return the full RPC method name for an action ("Open" -> "Cover.Open")."""
        return f"{self._namespace}.{action}"

    async def _call(self, action: str, params: Any | None = None) -> JsonVal:
        try:
            return await self._client.call(self.method(action), inject_id(self._id, params))
        except ShellyRpcError as err:
            annotate_error(err, self.key, action)
            raise

    async def _call_decode(self, action: str, params: Any | None, result_type: type[_T]) -> _T:
        raw = await self._call(action, params)
        try:
            return decode_result(raw, result_type)
        except DecodeError as err:
            err.method = self.method(action)
            annotate_error(err, self.key, action)
            raise

    async def get_config(self, result_type: type[_T] = dict) -> _T:  # type: ignore[assignment]
        """Fetch the component configuration decoded into result_type."""
        return await self._call_decode("GetConfig", None, result_type)

    async def set_config(self, config: Any) -> JsonVal:
        """Update the component configuration.

        Only the members present in config are changed on the device.
        """
        return await self._call("SetConfig", {"config": serialize_params(config)})

    async def get_status(self, result_type: type[_T] = dict) -> _T:  # type: ignore[assignment]
        """Fetch the component status decoded into result_type."""
        return await self._call_decode("GetStatus", None, result_type)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.key!r})"
