"""Tests for component addressing helpers."""

from __future__ import annotations

import pytest

from shelly_rpc.component import (
    Component,
    ComponentType,
    annotate_error,
    component_key,
    decode_result,
    inject_id,
    parse_component_key,
    rpc_namespace,
)
from shelly_rpc.components import CoverConfig, CoverStatus
from shelly_rpc.errors import ApplicationError, DecodeError, TransportConnectionError


class TestNamespace:
    """Test the type to namespace table."""

    @pytest.mark.parametrize(
        ("component_type", "namespace"),
        [
            ("switch", "Switch"),
            ("cover", "Cover"),
            ("wifi", "WiFi"),
            ("em", "EM"),
            ("em1", "EM1"),
            ("emdata", "EMData"),
            ("mqtt", "Mqtt"),
            ("ble", "BLE"),
            ("ws", "Ws"),
            ("sys", "Sys"),
            ("bthomesensor", "BTHomeSensor"),
            ("ht_ui", "HT_UI"),
            ("plugs_ui", "Plugs_UI"),
            ("devicepower", "DevicePower"),
            ("kvs", "KVS"),
            ("pm1", "PM1"),
        ],
    )
    def test_known_types(self, component_type, namespace):
        assert rpc_namespace(component_type) == namespace

    def test_enum_accepted(self):
        assert rpc_namespace(ComponentType.RGBW) == "RGBW"

    def test_every_type_has_a_namespace(self):
        for component_type in ComponentType:
            assert rpc_namespace(component_type)

    def test_unknown_type(self):
        with pytest.raises(KeyError):
            rpc_namespace("toaster")


class TestComponentKey:
    """Test display keys."""

    def test_instance(self):
        assert component_key("switch", 0) == "switch:0"
        assert component_key(ComponentType.COVER, 2) == "cover:2"

    def test_singleton(self):
        assert component_key("sys") == "sys"
        assert component_key(ComponentType.WIFI, None) == "wifi"

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("switch:0", ("switch", 0)),
            ("cover:12", ("cover", 12)),
            ("sys", ("sys", None)),
            ("bthomesensor:200", ("bthomesensor", 200)),
        ],
    )
    def test_parse(self, key, expected):
        assert parse_component_key(key) == expected

    @pytest.mark.parametrize("key", ["", ":0", "switch:", "switch:abc", "switch:-1", "switch:1:2"])
    def test_parse_malformed(self, key):
        with pytest.raises(ValueError):
            parse_component_key(key)


class TestInjectId:
    """Test component ID injection."""

    def test_instance_without_params(self):
        assert inject_id(0, None) == {"id": 0}

    def test_instance_merges_params(self):
        assert inject_id(2, {"pos": 50}) == {"id": 2, "pos": 50}

    def test_component_id_wins(self):
        assert inject_id(1, {"id": 9, "on": True}) == {"id": 1, "on": True}

    def test_does_not_mutate_params(self):
        params = {"on": True}
        inject_id(3, params)
        assert params == {"on": True}

    def test_model_params(self):
        assert inject_id(0, CoverConfig(name="Bedroom")) == {"id": 0, "name": "Bedroom"}

    def test_singleton_never_gets_id(self):
        assert inject_id(None, None) is None
        assert inject_id(None, {"config": {"name": "x"}}) == {"config": {"name": "x"}}
        assert "id" not in inject_id(None, {"config": {}})

    def test_non_mapping_params(self):
        with pytest.raises(TypeError):
            inject_id(0, [1, 2])


class TestDecodeResult:
    """Test decoding raw results."""

    def test_model_from_dict(self):
        status = decode_result({"id": 0, "state": "open", "current_pos": 100}, CoverStatus)
        assert status.state == "open"
        assert status.current_pos == 100

    def test_model_from_bytes(self):
        status = decode_result(b'{"id":0,"state":"closed","current_pos":0,"future":1}', CoverStatus)
        assert status.state == "closed"
        assert status.extra == {"future": 1}

    def test_invalid_bytes(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_result(b"{garbage", CoverStatus)
        assert exc_info.value.payload == b"{garbage"
        assert exc_info.value.target is CoverStatus

    def test_missing_required_field(self):
        with pytest.raises(DecodeError):
            decode_result({"state": "open"}, CoverStatus)

    def test_dict(self):
        raw = {"was_on": False}
        result = decode_result(raw, dict)
        assert result == raw
        assert result is not raw

    def test_dict_expected(self):
        with pytest.raises(DecodeError):
            decode_result([1], dict)

    def test_scalars(self):
        assert decode_result(5, int) == 5
        assert decode_result(5, float) == 5
        assert decode_result("ok", str) == "ok"
        assert decode_result(b"[1,2]", list) == [1, 2]

    def test_bool_is_not_int(self):
        with pytest.raises(DecodeError):
            decode_result(True, int)

    def test_none_returns_raw(self):
        assert decode_result({"a": 1}, None) == {"a": 1}
        assert decode_result(b'{"a":1}', None) == {"a": 1}

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            decode_result({}, set)


class TestAnnotateError:
    """Test error annotation."""

    def test_kind_and_identity_unchanged(self):
        err = ApplicationError(-109, "Cover not calibrated", method="Cover.GoToPosition")
        annotated = annotate_error(err, "cover:0", "GoToPosition")
        assert annotated is err
        assert type(annotated) is ApplicationError
        assert err.code == -109
        assert err.component_key == "cover:0"
        assert err.action == "GoToPosition"
        assert "GoToPosition failed for cover:0" in err.__notes__

    def test_first_annotation_wins(self):
        err = TransportConnectionError("refused")
        annotate_error(err, "switch:0", "Set")
        annotate_error(err, "switch:1", "Toggle")
        assert err.component_key == "switch:0"
        assert len(err.__notes__) == 1


class TestComponent:
    """Test the accessor base."""

    def test_key_and_method(self, client):
        cover = Component(client, "cover", 1)
        assert cover.key == "cover:1"
        assert cover.type == "cover"
        assert cover.id == 1
        assert cover.client is client
        assert cover.method("GoToPosition") == "Cover.GoToPosition"
        assert repr(cover) == "Component('cover:1')"

    def test_singleton(self, client):
        wifi = Component(client, ComponentType.WIFI)
        assert wifi.key == "wifi"
        assert wifi.method("GetStatus") == "WiFi.GetStatus"

    def test_negative_id_rejected(self, client):
        with pytest.raises(ValueError):
            Component(client, "switch", -1)

    def test_unknown_type_rejected(self, client):
        with pytest.raises(ValueError):
            Component(client, "toaster", 0)

    async def test_generic_get_status(self, client, mock_transport):
        mock_transport.on_call_return("Cover.GetStatus", {"id": 4, "state": "stopped"})
        status = await Component(client, "cover", 4).get_status(CoverStatus)
        assert status.id == 4
        assert mock_transport.last_call.params == {"id": 4}

    async def test_generic_get_config_defaults_to_dict(self, client, mock_transport):
        mock_transport.on_call_return("Input.GetConfig", {"id": 0, "type": "switch"})
        config = await Component(client, "input", 0).get_config()
        assert config == {"id": 0, "type": "switch"}

    async def test_set_config_instance(self, client, mock_transport):
        mock_transport.on_call_return("Cover.SetConfig", {"restart_required": False})
        await Component(client, "cover", 0).set_config(CoverConfig(name="Kitchen", maxtime_open=30))
        assert mock_transport.last_call.params == {"id": 0, "config": {"name": "Kitchen", "maxtime_open": 30}}

    async def test_set_config_singleton(self, client, mock_transport):
        mock_transport.on_call_return("Sys.SetConfig", {"restart_required": True})
        result = await Component(client, "sys").set_config({"device": {"name": "Hall"}})
        assert result == {"restart_required": True}
        assert mock_transport.last_call.params == {"config": {"device": {"name": "Hall"}}}

    async def test_decode_failure_annotated(self, client, mock_transport):
        mock_transport.on_call_return("Cover.GetStatus", {"state": "open"})
        with pytest.raises(DecodeError) as exc_info:
            await Component(client, "cover", 0).get_status(CoverStatus)
        assert exc_info.value.method == "Cover.GetStatus"
        assert exc_info.value.component_key == "cover:0"
        assert exc_info.value.action == "GetStatus"
