"""Tests for JSON-RPC envelope types."""

from __future__ import annotations

import json

import pytest

from shelly_rpc.components import CoverConfig
from shelly_rpc.envelope import (
    Notification,
    Request,
    RequestIdAllocator,
    Response,
    parse_message,
    parse_response,
    serialize_params,
)
from shelly_rpc.errors import ApplicationError, InvalidResponseError


class TestRequest:
    """Test request serialization."""

    def test_full_request(self):
        request = Request("Switch.Set", id=4, params={"id": 0, "on": True}, src="client-1")
        assert request.to_dict() == {
            "jsonrpc": "2.0",
            "method": "Switch.Set",
            "id": 4,
            "src": "client-1",
            "params": {"id": 0, "on": True},
        }

    def test_optional_members_omitted(self):
        assert Request("Sys.GetStatus", id=1).to_dict() == {"jsonrpc": "2.0", "method": "Sys.GetStatus", "id": 1}

    def test_notification(self):
        request = Request("Sys.Reboot")
        assert request.is_notification
        assert "id" not in request.to_dict()

    def test_to_json_compact(self):
        assert json.loads(Request("Cover.Stop", id=2, params={"id": 0}).to_json())["params"] == {"id": 0}
        assert " " not in Request("Cover.Stop", id=2, params={"id": 0}).to_json()


class TestSerializeParams:
    """Test params serialization."""

    def test_none(self):
        assert serialize_params(None) is None

    def test_mapping_copied(self):
        params = {"id": 1}
        result = serialize_params(params)
        assert result == params
        assert result is not params

    def test_model(self):
        assert serialize_params(CoverConfig(name="Kitchen")) == {"name": "Kitchen"}


class TestRequestIdAllocator:
    """Test request ID allocation."""

    def test_starts_at_one_and_increments(self):
        ids = RequestIdAllocator()
        assert ids.current == 0
        assert [ids.next_id() for _ in range(3)] == [1, 2, 3]
        assert ids.current == 3


class TestResponse:
    """Test response envelope validation."""

    def test_result(self):
        response = Response.from_dict({"id": 1, "src": "shellyplus1", "result": {"was_on": True}})
        assert not response.is_error
        assert response.unwrap() == {"was_on": True}

    def test_null_result_is_valid(self):
        assert Response.from_dict({"id": 1, "result": None}).unwrap() is None

    def test_error(self):
        response = Response.from_dict({"id": 1, "error": {"code": -114, "message": "Device unavailable"}})
        assert response.is_error
        with pytest.raises(ApplicationError) as exc_info:
            response.unwrap("Sys.GetStatus")
        assert exc_info.value.code == -114
        assert exc_info.value.message == "Device unavailable"
        assert exc_info.value.method == "Sys.GetStatus"

    def test_error_data_kept(self):
        response = Response.from_dict({"id": 1, "error": {"code": -103, "message": "bad", "data": {"field": "pos"}}})
        assert response.error.data == {"field": "pos"}

    def test_neither_result_nor_error(self):
        with pytest.raises(InvalidResponseError, match="neither"):
            Response.from_dict({"id": 1})

    def test_both_result_and_error(self):
        with pytest.raises(InvalidResponseError, match="both"):
            Response.from_dict({"id": 1, "result": {}, "error": {"code": 1, "message": "x"}})

    def test_wrong_version(self):
        with pytest.raises(InvalidResponseError, match="version"):
            Response.from_dict({"jsonrpc": "1.0", "id": 1, "result": {}})

    def test_malformed_error_code(self):
        with pytest.raises(InvalidResponseError, match="error code"):
            Response.from_dict({"id": 1, "error": {"code": "bad", "message": "x"}})

    def test_malformed_error_object(self):
        with pytest.raises(InvalidResponseError):
            Response.from_dict({"id": 1, "error": "boom"})


class TestParseMessage:
    """Test classification of incoming frames."""

    def test_response(self):
        message = parse_message('{"id":7,"src":"dev","dst":"me","result":{}}')
        assert isinstance(message, Response)
        assert message.id == 7

    def test_notification(self):
        message = parse_message(b'{"src":"dev","dst":"me","method":"NotifyFullStatus","params":{"ts":1.5}}')
        assert isinstance(message, Notification)
        assert message.method == "NotifyFullStatus"
        assert message.params == {"ts": 1.5}
        assert message.src == "dev"

    def test_invalid_json(self):
        with pytest.raises(InvalidResponseError, match="parse"):
            parse_message("{")

    def test_not_an_object(self):
        with pytest.raises(InvalidResponseError):
            parse_message("[1, 2]")

    def test_unknown_shape(self):
        with pytest.raises(InvalidResponseError, match="Unknown"):
            parse_message('{"foo": 1}')

    def test_parse_response(self):
        assert parse_response('{"id":1,"result":5}').unwrap() == 5
        with pytest.raises(InvalidResponseError):
            parse_response("not json")
