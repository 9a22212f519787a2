"""
Content identifiers (MACs).

A MAC is the fixed-width 256-bit key the repository core uses to name an
object inside a resource class. The adapter never computes MACs; it only
renders them into URLs and JSON envelopes and parses them back.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Union

from pydantic import GetCoreSchemaHandler, SerializationInfo
from pydantic_core import core_schema

__all__ = ["MAC", "MAC_SIZE", "MAC_ENCODINGS"]

MAC_SIZE = 32

# Wire renderings: lowercase hex string, or a 32-element int array
# (the JSON shape of a fixed-size byte array in Go encoders).
MAC_ENCODINGS = ("hex", "array")

_HEX_RE = re.compile(r"^[0-9a-fA-F]{64}$")


@dataclass(frozen=True, slots=True)
class MAC:
    """
    Opaque 32-byte content identifier.

    Hashable and comparable, so MACs can be used in sets and as dict keys.
    """
    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.digest, bytes):
            raise ValueError(f"MAC digest must be bytes, got {type(self.digest).__name__}")
        if len(self.digest) != MAC_SIZE:
            raise ValueError(f"MAC must be {MAC_SIZE} bytes, got {len(self.digest)}")

    @classmethod
    def from_hex(cls, value: str) -> MAC:
        """Parse a 64-character hex string (case-insensitive)."""
        if not _HEX_RE.match(value):
            raise ValueError(f"invalid MAC hex: {value!r}")
        return cls(bytes.fromhex(value))

    @classmethod
    def parse(cls, value: Union[MAC, bytes, str, Iterable[int]]) -> MAC:
        """
        Coerce any accepted wire or in-memory form into a MAC.

        Accepts a MAC, 32 raw bytes, a 64-char hex string, or a list of
        32 integers in 0..255.

        Raises:
            ValueError: If the value cannot represent a MAC
        """
        if isinstance(value, MAC):
            return value
        if isinstance(value, (bytes, bytearray)):
            return cls(bytes(value))
        if isinstance(value, str):
            return cls.from_hex(value)
        if isinstance(value, (list, tuple)):
            if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value):
                raise ValueError("MAC array must contain integers in 0..255")
            return cls(bytes(value))
        raise ValueError(f"cannot interpret {type(value).__name__} as a MAC")

    def hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return self.digest.hex()

    def __repr__(self) -> str:
        return f"MAC({self.digest.hex()})"

    def to_wire(self, encoding: str = "hex") -> Any:
        """Render for a JSON envelope using the given encoding."""
        if encoding == "array":
            return list(self.digest)
        return self.digest.hex()

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.parse,
            serialization=core_schema.plain_serializer_function_ser_schema(
                _serialize_mac, info_arg=True
            ),
        )


def _serialize_mac(value: MAC, info: SerializationInfo) -> Any:
    context = info.context or {}
    return value.to_wire(context.get("mac_encoding", "hex"))
