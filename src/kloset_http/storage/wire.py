"""
Wire protocols for the HTTP storage adapter.

A wire protocol turns a repository call into a transport-neutral request
description and turns the server's response back into a value or an error.
Two incompatible protocols exist:

- EnvelopeWire ("rpc"): JSON request envelope on a fixed per-operation path,
  JSON response envelope whose error field decides success. HTTP status is
  not load-bearing.
- ResourcePathWire ("resource"): raw bytes on /resources/<class>/<hex-mac>,
  success is HTTP 200 (206 for ranges), errors are plain-text bodies.

A store picks one at construction and never switches per call. Both stores
(blocking and asyncio) share these implementations, so every operation is
classified by exactly the same rules.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple, Type

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from .base import ResourceClass
from .envelopes import (
    AckResponse,
    DataResponse,
    EmptyRequest,
    LockListResponse,
    MacListResponse,
    MacRequest,
    OpenResponse,
    PutRequest,
    RangeRequest,
    ResponseEnvelope,
)
from .errors import DecodeError, RemoteError
from .mac import MAC

__all__ = [
    "Operation",
    "Call",
    "WireRequest",
    "WireProtocol",
    "EnvelopeWire",
    "ResourcePathWire",
    "wire_for",
]

JSON_CONTENT_TYPE = "application/json"
OCTET_CONTENT_TYPE = "application/octet-stream"


class Operation(str, enum.Enum):
    OPEN = "open"
    LIST = "list"
    GET = "get"
    GET_RANGE = "get_range"
    PUT = "put"
    DELETE = "delete"


@dataclass(frozen=True)
class Call:
    """
    One repository operation and exactly the inputs it needs.

    Built fresh per call and never mutated.
    """
    op: Operation
    resource: Optional[ResourceClass] = None
    mac: Optional[MAC] = None
    data: Optional[bytes] = None
    offset: Optional[int] = None
    length: Optional[int] = None

    def describe(self) -> str:
        parts = [self.op.value]
        if self.resource is not None:
            parts.append(self.resource.value)
        if self.mac is not None:
            parts.append(self.mac.hex()[:16])
        return " ".join(parts)


@dataclass(frozen=True)
class WireRequest:
    """Transport-neutral request: the store adds URL, auth and user agent."""
    method: str
    subpath: str
    body: Optional[bytes] = None
    headers: Dict[str, str] = field(default_factory=dict)


class WireProtocol(Protocol):
    """Encoding and classification rules for one protocol variant."""

    name: str

    def build(self, call: Call) -> WireRequest:
        """
        Describe the HTTP request for a call.

        Raises:
            ValueError: If the call's inputs cannot be encoded
        """
        ...

    def parse(self, call: Call, response: httpx.Response) -> Any:
        """
        Decode the response for a call.

        Raises:
            RemoteError: If the server reported a failure
            DecodeError: If the body does not match the expected shape
        """
        ...


# (method, subpath, response model) per operation and resource class
_Route = Tuple[str, str, Type[ResponseEnvelope]]


def _envelope_route(call: Call) -> _Route:
    if call.op is Operation.OPEN:
        return "GET", "/", OpenResponse
    if call.op is Operation.GET_RANGE:
        return "GET", "/packfile/blob", DataResponse

    resource = call.resource
    if resource is None:
        raise ValueError(f"{call.op.value} requires a resource class")
    if call.op is Operation.LIST:
        model = LockListResponse if resource is ResourceClass.LOCK else MacListResponse
        return "GET", resource.list_path, model
    if call.op is Operation.GET:
        return "GET", resource.item_path, DataResponse
    if call.op is Operation.PUT:
        return "PUT", resource.item_path, AckResponse
    if call.op is Operation.DELETE:
        return "DELETE", resource.item_path, AckResponse
    raise ValueError(f"unsupported operation: {call.op}")


def _request_envelope(call: Call) -> BaseModel:
    if call.op in (Operation.OPEN, Operation.LIST):
        return EmptyRequest()
    if call.op is Operation.GET_RANGE:
        return RangeRequest(mac=call.mac, offset=call.offset, length=call.length)
    if call.op is Operation.PUT:
        return PutRequest(mac=call.mac, data=call.data)
    return MacRequest(mac=call.mac)


class EnvelopeWire:
    """
    RPC-style protocol: JSON envelopes on fixed paths.

    Every request carries a JSON body, GET and DELETE included; operations
    without inputs send ``{}``.
    """

    name = "rpc"

    def __init__(self, mac_encoding: str = "hex"):
        self.mac_encoding = mac_encoding

    def build(self, call: Call) -> WireRequest:
        method, subpath, _ = _envelope_route(call)
        envelope = _request_envelope(call)
        body = envelope.model_dump_json(context={"mac_encoding": self.mac_encoding})
        return WireRequest(
            method=method,
            subpath=subpath,
            body=body.encode("utf-8"),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )

    def parse(self, call: Call, response: httpx.Response) -> Any:
        _, subpath, model = _envelope_route(call)
        try:
            envelope = model.model_validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(
                f"invalid {model.__name__} for {call.describe()} "
                f"(HTTP {response.status_code} from {subpath}): {e}"
            ) from e

        if envelope.error:
            raise RemoteError(envelope.error, status_code=response.status_code)

        if call.op is Operation.OPEN:
            return envelope.configuration
        if call.op is Operation.LIST:
            return list(getattr(envelope, call.resource.list_field) or [])
        if call.op in (Operation.GET, Operation.GET_RANGE):
            return envelope.data
        return None


# Go servers marshal an empty slice as null
_MAC_LIST = TypeAdapter(Optional[List[MAC]])


class ResourcePathWire:
    """
    Resource-path protocol: raw bytes addressed by class and hex MAC.

    Range reads use a standard Range header. A server that ignores the
    header and answers 200 with the whole object is still served correctly
    by slicing locally.
    """

    name = "resource"

    def build(self, call: Call) -> WireRequest:
        if call.op is Operation.OPEN:
            return WireRequest("GET", "/")

        if call.op is Operation.GET_RANGE:
            if call.length == 0:
                # "bytes=N-(N-1)" is not a valid range
                return WireRequest("GET", self._item_path(ResourceClass.PACKFILE, call.mac))
            last = call.offset + call.length - 1
            return WireRequest(
                "GET",
                self._item_path(ResourceClass.PACKFILE, call.mac),
                headers={"Range": f"bytes={call.offset}-{last}"},
            )

        if call.resource is None:
            raise ValueError(f"{call.op.value} requires a resource class")
        if call.op is Operation.LIST:
            return WireRequest("GET", f"/resources/{call.resource.value}")
        if call.op is Operation.GET:
            return WireRequest("GET", self._item_path(call.resource, call.mac))
        if call.op is Operation.PUT:
            return WireRequest(
                "PUT",
                self._item_path(call.resource, call.mac),
                body=call.data,
                headers={"Content-Type": OCTET_CONTENT_TYPE},
            )
        if call.op is Operation.DELETE:
            return WireRequest("DELETE", self._item_path(call.resource, call.mac))
        raise ValueError(f"unsupported operation: {call.op}")

    def parse(self, call: Call, response: httpx.Response) -> Any:
        ok = (200, 206) if call.op is Operation.GET_RANGE else (200,)
        if response.status_code not in ok:
            raise RemoteError(response.text, status_code=response.status_code)

        if call.op is Operation.LIST:
            try:
                return _MAC_LIST.validate_json(response.content) or []
            except ValidationError as e:
                raise DecodeError(
                    f"invalid identifier list for {call.describe()} (HTTP {response.status_code}): {e}"
                ) from e
        if call.op is Operation.GET_RANGE:
            if response.status_code == 206:
                return response.content
            return response.content[call.offset:call.offset + call.length]
        if call.op in (Operation.OPEN, Operation.GET):
            return response.content
        return None

    @staticmethod
    def _item_path(resource: ResourceClass, mac: Optional[MAC]) -> str:
        if mac is None:
            raise ValueError(f"{resource.value} request requires a MAC")
        return f"/resources/{resource.value}/{mac.hex()}"


def wire_for(protocol: str, *, mac_encoding: str = "hex") -> WireProtocol:
    """
    Create the wire protocol named by a settings value.

    Raises:
        ValueError: If the protocol name is unknown
    """
    if protocol == "rpc":
        return EnvelopeWire(mac_encoding=mac_encoding)
    elif protocol == "resource":
        return ResourcePathWire()
    else:
        raise ValueError(
            f"Unknown protocol: {protocol}. "
            f"Supported values: rpc, resource"
        )
