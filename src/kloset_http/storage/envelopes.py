"""
JSON envelopes for the RPC-style wire protocol.

Every operation sends one request envelope and receives one response
envelope. Responses carry either a payload or a non-empty error string;
the validators here enforce that the two never coexist and that a
successful response actually carries its payload.
"""
from __future__ import annotations

import base64
import binascii
from typing import Annotated, Any, ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator, model_validator

from .mac import MAC

__all__ = [
    "Base64Bytes",
    "EmptyRequest",
    "MacRequest",
    "PutRequest",
    "RangeRequest",
    "ResponseEnvelope",
    "OpenResponse",
    "MacListResponse",
    "LockListResponse",
    "DataResponse",
    "AckResponse",
    "MAX_OFFSET",
    "MAX_LENGTH",
]

MAX_OFFSET = 2**64 - 1
MAX_LENGTH = 2**32 - 1


def _decode_base64(value: Any) -> Optional[bytes]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError(f"expected base64 string, got {type(value).__name__}")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64: {e}") from e


def _encode_base64(value: Optional[bytes]) -> Optional[str]:
    if value is None:
        return None
    return base64.b64encode(value).decode("ascii")


# Standard padded base64 in JSON, raw bytes in Python.
Base64Bytes = Annotated[
    Optional[bytes],
    PlainValidator(_decode_base64),
    PlainSerializer(_encode_base64, return_type=Optional[str]),
]


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class EmptyRequest(_Request):
    """Request for operations that need no input (open, list)."""
    pass


class MacRequest(_Request):
    """Request addressing a single object (get, delete)."""
    mac: MAC


class PutRequest(_Request):
    mac: MAC
    data: Base64Bytes


class RangeRequest(_Request):
    """Request for a byte range of a packfile."""
    mac: MAC
    offset: int = Field(ge=0, le=MAX_OFFSET)
    length: int = Field(ge=0, le=MAX_LENGTH)


class ResponseEnvelope(BaseModel):
    """
    Base for all response envelopes.

    Subclasses name their payload fields in ``payload_fields``. Fields listed
    in ``required_on_success`` must be present when ``error`` is empty; list
    payloads may be null on success and decode as empty.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    payload_fields: ClassVar[Tuple[str, ...]] = ()
    required_on_success: ClassVar[Tuple[str, ...]] = ()

    error: str = ""

    @model_validator(mode="after")
    def _check_exclusive(self):
        if self.error:
            for name in self.payload_fields:
                if getattr(self, name):
                    raise ValueError(f"response carries both an error and a {name!r} payload")
        else:
            for name in self.required_on_success:
                if getattr(self, name) is None:
                    raise ValueError(f"successful response is missing {name!r}")
        return self


class OpenResponse(ResponseEnvelope):
    payload_fields: ClassVar[Tuple[str, ...]] = ("configuration",)
    required_on_success: ClassVar[Tuple[str, ...]] = ("configuration",)

    configuration: Base64Bytes = None


class MacListResponse(ResponseEnvelope):
    payload_fields: ClassVar[Tuple[str, ...]] = ("macs",)

    macs: Optional[List[MAC]] = None


class LockListResponse(ResponseEnvelope):
    payload_fields: ClassVar[Tuple[str, ...]] = ("locks",)

    locks: Optional[List[MAC]] = None


class DataResponse(ResponseEnvelope):
    payload_fields: ClassVar[Tuple[str, ...]] = ("data",)
    required_on_success: ClassVar[Tuple[str, ...]] = ("data",)

    data: Base64Bytes = None


class AckResponse(ResponseEnvelope):
    """Response to put and delete; success is an empty error."""
    pass
