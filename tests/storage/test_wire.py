"""
Tests for the two wire protocols.

Checks request routing and encoding, and the classification of responses
into values, RemoteError and DecodeError, without any transport involved.
"""
from __future__ import annotations

import json

import httpx
import pytest

from kloset_http.storage.base import ResourceClass
from kloset_http.storage.errors import DecodeError, RemoteError
from kloset_http.storage.wire import (
    Call,
    EnvelopeWire,
    Operation,
    ResourcePathWire,
    wire_for,
)
from tests.helpers.macs import make_mac

MAC_1 = make_mac(1)


def _json_response(status: int, body) -> httpx.Response:
    return httpx.Response(status, content=json.dumps(body).encode("utf-8"))


class TestEnvelopeWireBuild:
    """Test EnvelopeWire request construction."""

    @pytest.mark.parametrize(
        "call, method, subpath",
        [
            (Call(Operation.OPEN), "GET", "/"),
            (Call(Operation.LIST, resource=ResourceClass.STATE), "GET", "/states"),
            (Call(Operation.LIST, resource=ResourceClass.PACKFILE), "GET", "/packfiles"),
            (Call(Operation.LIST, resource=ResourceClass.LOCK), "GET", "/locks"),
            (Call(Operation.GET, resource=ResourceClass.STATE, mac=MAC_1), "GET", "/state"),
            (Call(Operation.PUT, resource=ResourceClass.PACKFILE, mac=MAC_1, data=b"x"), "PUT", "/packfile"),
            (Call(Operation.DELETE, resource=ResourceClass.LOCK, mac=MAC_1), "DELETE", "/lock"),
            (
                Call(Operation.GET_RANGE, resource=ResourceClass.PACKFILE, mac=MAC_1, offset=0, length=4),
                "GET",
                "/packfile/blob",
            ),
        ],
    )
    def test_routes(self, call, method, subpath):
        """Test the fixed method and path for every operation."""
        request = EnvelopeWire().build(call)
        assert request.method == method
        assert request.subpath == subpath
        assert request.headers["Content-Type"] == "application/json"

    def test_input_less_operations_send_empty_object(self):
        """Test that open and list carry a literal {} body."""
        wire = EnvelopeWire()
        assert wire.build(Call(Operation.OPEN)).body == b"{}"
        assert wire.build(Call(Operation.LIST, resource=ResourceClass.LOCK)).body == b"{}"

    def test_get_and_delete_carry_mac_body(self):
        """Test that GET and DELETE requests carry the MAC in a JSON body."""
        wire = EnvelopeWire()
        for op in (Operation.GET, Operation.DELETE):
            request = wire.build(Call(op, resource=ResourceClass.STATE, mac=MAC_1))
            assert json.loads(request.body) == {"mac": MAC_1.hex()}

    def test_put_body(self):
        """Test the put envelope."""
        request = EnvelopeWire().build(Call(Operation.PUT, resource=ResourceClass.STATE, mac=MAC_1, data=b"abc"))
        assert json.loads(request.body) == {"mac": MAC_1.hex(), "data": "YWJj"}

    def test_range_body(self):
        """Test the range envelope."""
        call = Call(Operation.GET_RANGE, resource=ResourceClass.PACKFILE, mac=MAC_1, offset=100, length=200)
        assert json.loads(EnvelopeWire().build(call).body) == {"mac": MAC_1.hex(), "offset": 100, "length": 200}

    def test_array_mac_encoding(self):
        """Test that the array encoding is used for request MACs."""
        request = EnvelopeWire(mac_encoding="array").build(
            Call(Operation.GET, resource=ResourceClass.LOCK, mac=MAC_1)
        )
        assert json.loads(request.body)["mac"] == list(MAC_1.digest)

    def test_list_without_resource_rejected(self):
        """Test that a list call must name its class."""
        with pytest.raises(ValueError, match="requires a resource class"):
            EnvelopeWire().build(Call(Operation.LIST))


class TestEnvelopeWireParse:
    """Test EnvelopeWire response classification."""

    def test_open_success(self):
        """Test that open returns the decoded configuration."""
        response = _json_response(200, {"configuration": "eyJ2IjoxfQ==", "error": ""})
        assert EnvelopeWire().parse(Call(Operation.OPEN), response) == b'{"v":1}'

    def test_status_code_is_not_load_bearing(self):
        """Test that a non-2xx status with an empty error is still success."""
        response = _json_response(500, {"data": "YWJj", "error": ""})
        call = Call(Operation.GET, resource=ResourceClass.STATE, mac=MAC_1)
        assert EnvelopeWire().parse(call, response) == b"abc"

    def test_error_on_200_is_remote_error(self):
        """Test that a non-empty error fails even with HTTP 200."""
        response = _json_response(200, {"data": None, "error": "state not found"})
        call = Call(Operation.GET, resource=ResourceClass.STATE, mac=MAC_1)
        with pytest.raises(RemoteError) as exc_info:
            EnvelopeWire().parse(call, response)
        assert exc_info.value.message == "state not found"
        assert exc_info.value.status_code == 200
        assert str(exc_info.value) == "state not found"

    def test_list_uses_class_field(self):
        """Test that states and packfiles read 'macs' and locks read 'locks'."""
        wire = EnvelopeWire()
        macs = _json_response(200, {"macs": [MAC_1.hex()], "error": ""})
        locks = _json_response(200, {"locks": [MAC_1.hex()], "error": ""})
        assert wire.parse(Call(Operation.LIST, resource=ResourceClass.PACKFILE), macs) == [MAC_1]
        assert wire.parse(Call(Operation.LIST, resource=ResourceClass.LOCK), locks) == [MAC_1]

    def test_null_list_is_empty(self):
        """Test that a null list on success is an empty list."""
        response = _json_response(200, {"macs": None, "error": ""})
        assert EnvelopeWire().parse(Call(Operation.LIST, resource=ResourceClass.STATE), response) == []

    def test_failed_list_raises(self):
        """Test that a failed list is an error, not an empty list."""
        response = _json_response(200, {"macs": None, "error": "permission denied"})
        with pytest.raises(RemoteError, match="permission denied"):
            EnvelopeWire().parse(Call(Operation.LIST, resource=ResourceClass.STATE), response)

    def test_ack_success_returns_none(self):
        """Test that put and delete return nothing on success."""
        response = _json_response(200, {"error": ""})
        call = Call(Operation.DELETE, resource=ResourceClass.STATE, mac=MAC_1)
        assert EnvelopeWire().parse(call, response) is None

    def test_non_json_body_is_decode_error(self):
        """Test that an HTML error page becomes DecodeError."""
        response = httpx.Response(502, content=b"<html>Bad Gateway</html>")
        with pytest.raises(DecodeError) as exc_info:
            EnvelopeWire().parse(Call(Operation.OPEN), response)
        assert "OpenResponse" in str(exc_info.value)
        assert "HTTP 502" in str(exc_info.value)
        assert exc_info.value.__cause__ is not None

    def test_error_and_payload_is_decode_error(self):
        """Test that an envelope carrying both error and data is rejected."""
        response = _json_response(200, {"data": "YWJj", "error": "boom"})
        call = Call(Operation.GET, resource=ResourceClass.STATE, mac=MAC_1)
        with pytest.raises(DecodeError):
            EnvelopeWire().parse(call, response)

    def test_missing_payload_is_decode_error(self):
        """Test that a success envelope without data is rejected."""
        response = _json_response(200, {"error": ""})
        call = Call(Operation.GET, resource=ResourceClass.LOCK, mac=MAC_1)
        with pytest.raises(DecodeError, match="missing 'data'"):
            EnvelopeWire().parse(call, response)


class TestResourcePathWire:
    """Test the resource-path protocol."""

    def test_routes(self):
        """Test path construction per operation."""
        wire = ResourcePathWire()
        assert wire.build(Call(Operation.OPEN)).subpath == "/"
        assert wire.build(Call(Operation.LIST, resource=ResourceClass.LOCK)).subpath == "/resources/lock"
        get = wire.build(Call(Operation.GET, resource=ResourceClass.STATE, mac=MAC_1))
        assert (get.method, get.subpath) == ("GET", f"/resources/state/{MAC_1.hex()}")
        delete = wire.build(Call(Operation.DELETE, resource=ResourceClass.PACKFILE, mac=MAC_1))
        assert (delete.method, delete.subpath) == ("DELETE", f"/resources/packfile/{MAC_1.hex()}")

    def test_put_sends_raw_bytes(self):
        """Test that put bodies are raw octets."""
        request = ResourcePathWire().build(Call(Operation.PUT, resource=ResourceClass.STATE, mac=MAC_1, data=b"\x00\x01"))
        assert request.method == "PUT"
        assert request.body == b"\x00\x01"
        assert request.headers["Content-Type"] == "application/octet-stream"

    def test_range_header(self):
        """Test that a range read sends an inclusive Range header."""
        call = Call(Operation.GET_RANGE, resource=ResourceClass.PACKFILE, mac=MAC_1, offset=10, length=5)
        request = ResourcePathWire().build(call)
        assert request.subpath == f"/resources/packfile/{MAC_1.hex()}"
        assert request.headers["Range"] == "bytes=10-14"

    def test_zero_length_range_sends_no_header(self):
        """Test that an empty range omits the Range header."""
        call = Call(Operation.GET_RANGE, resource=ResourceClass.PACKFILE, mac=MAC_1, offset=10, length=0)
        assert "Range" not in ResourcePathWire().build(call).headers

    def test_partial_content_returned_as_is(self):
        """Test that a 206 body is the requested range."""
        call = Call(Operation.GET_RANGE, resource=ResourceClass.PACKFILE, mac=MAC_1, offset=2, length=3)
        assert ResourcePathWire().parse(call, httpx.Response(206, content=b"cde")) == b"cde"

    def test_full_content_sliced_locally(self):
        """Test that a 200 reply to a range request is sliced."""
        call = Call(Operation.GET_RANGE, resource=ResourceClass.PACKFILE, mac=MAC_1, offset=2, length=3)
        assert ResourcePathWire().parse(call, httpx.Response(200, content=b"abcdefg")) == b"cde"

    def test_error_body_passed_through(self):
        """Test that non-200 bodies become RemoteError verbatim."""
        call = Call(Operation.GET, resource=ResourceClass.STATE, mac=MAC_1)
        with pytest.raises(RemoteError) as exc_info:
            ResourcePathWire().parse(call, httpx.Response(404, text="state not found\n"))
        assert exc_info.value.message == "state not found\n"
        assert exc_info.value.status_code == 404

    def test_206_outside_range_reads_is_error(self):
        """Test that only range reads accept 206."""
        call = Call(Operation.GET, resource=ResourceClass.STATE, mac=MAC_1)
        with pytest.raises(RemoteError):
            ResourcePathWire().parse(call, httpx.Response(206, content=b"abc"))

    def test_list_decoding(self):
        """Test that list bodies are JSON arrays of MACs."""
        call = Call(Operation.LIST, resource=ResourceClass.STATE)
        response = httpx.Response(200, content=json.dumps([MAC_1.hex()]).encode())
        assert ResourcePathWire().parse(call, response) == [MAC_1]

    def test_null_list_body_is_empty(self):
        """Test that a null list body decodes as an empty list."""
        call = Call(Operation.LIST, resource=ResourceClass.LOCK)
        assert ResourcePathWire().parse(call, httpx.Response(200, content=b"null")) == []

    def test_bad_list_is_decode_error(self):
        """Test that a malformed list body is DecodeError."""
        call = Call(Operation.LIST, resource=ResourceClass.STATE)
        with pytest.raises(DecodeError, match="invalid identifier list"):
            ResourcePathWire().parse(call, httpx.Response(200, content=b'["nope"]'))


class TestWireFor:
    """Test wire protocol selection."""

    def test_selects_by_name(self):
        """Test that each protocol name maps to its implementation."""
        assert isinstance(wire_for("rpc"), EnvelopeWire)
        assert isinstance(wire_for("resource"), ResourcePathWire)
        assert wire_for("rpc", mac_encoding="array").mac_encoding == "array"

    def test_unknown_protocol(self):
        """Test that unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown protocol: soap"):
            wire_for("soap")
