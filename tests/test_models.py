"""Tests for models with unknown-field capture."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from shelly_rpc.components import CoverStatus, EnergyCounter, SwitchStatus
from shelly_rpc.errors import DecodeError
from shelly_rpc.models import RpcModel, rpc_field


@dataclass
class _Renamed(RpcModel):
    """Model whose attribute differs from its wire name."""

    total: float = rpc_field(json_name="total_act_energy", default=0.0)


class TestDecode:
    """Test RpcModel.from_dict."""

    def test_known_fields(self):
        status = CoverStatus.from_dict({"id": 0, "state": "open", "current_pos": 100})
        assert status.id == 0
        assert status.state == "open"
        assert status.current_pos == 100
        assert status.apower is None
        assert status.extra == {}

    def test_unknown_fields_captured(self):
        status = CoverStatus.from_dict({"id": 0, "state": "open", "slat_pos": 30, "new_fw_field": {"a": 1}})
        assert status.extra == {"slat_pos": 30, "new_fw_field": {"a": 1}}

    def test_nested_model(self):
        status = SwitchStatus.from_dict(
            {
                "id": 0,
                "output": True,
                "aenergy": {"total": 1234.5, "by_minute": [0.0, 1.5, 2.0], "minute_ts": 1700000000},
                "temperature": {"tC": 41.2, "tF": 106.2},
            }
        )
        assert isinstance(status.aenergy, EnergyCounter)
        assert status.aenergy.total == 1234.5
        assert status.temperature.tC == 41.2

    def test_int_accepted_for_float(self):
        status = CoverStatus.from_dict({"id": 0, "state": "stopped", "apower": 0})
        assert status.apower == 0

    def test_json_name(self):
        model = _Renamed.from_dict({"total_act_energy": 12.5})
        assert model.total == 12.5
        assert model.to_dict() == {"total_act_energy": 12.5}

    def test_not_an_object(self):
        with pytest.raises(DecodeError) as exc_info:
            CoverStatus.from_dict([1, 2])
        assert exc_info.value.target is CoverStatus
        assert exc_info.value.payload == [1, 2]

    def test_missing_required_field(self):
        with pytest.raises(DecodeError, match="state"):
            CoverStatus.from_dict({"id": 0})

    def test_wrong_scalar_type(self):
        with pytest.raises(DecodeError, match="current_pos"):
            CoverStatus.from_dict({"id": 0, "state": "open", "current_pos": "high"})

    def test_bool_is_not_an_int(self):
        with pytest.raises(DecodeError):
            CoverStatus.from_dict({"id": True, "state": "open"})

    def test_nested_not_an_object(self):
        with pytest.raises(DecodeError, match="aenergy"):
            SwitchStatus.from_dict({"id": 0, "output": False, "aenergy": 5})


class TestRoundTrip:
    """Test that decode then encode keeps every member exactly once."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"id": 0, "state": "open", "current_pos": 100},
            {"id": 1, "state": "closing", "source": None, "target_pos": 0, "unknown_flag": True},
            {
                "id": 2,
                "state": "stopped",
                "aenergy": {"total": 3.0, "by_minute": [0.0], "minute_ts": 1, "extra_counter": 9},
                "errors": ["overtemp"],
            },
        ],
    )
    def test_round_trip(self, payload):
        assert CoverStatus.from_dict(payload).to_dict() == payload

    def test_extra_does_not_duplicate_known_field(self):
        status = CoverStatus(id=0, state="open", extra={"state": "stale", "slat_pos": 5})
        assert status.to_dict() == {"id": 0, "state": "open", "slat_pos": 5}

    def test_absent_optional_fields_not_emitted(self):
        assert CoverStatus(id=3, state="open").to_dict() == {"id": 3, "state": "open"}

    def test_models_compare_by_value(self):
        assert CoverStatus.from_dict({"id": 0, "state": "open"}) == CoverStatus(id=0, state="open")
