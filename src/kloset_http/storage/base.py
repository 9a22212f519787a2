"""
Storage interfaces for the Kloset HTTP adapter.

These protocols define the boundary between the repository core and storage
backends, enabling clean dependency injection and testing with fakes.
"""
from __future__ import annotations

import enum
from typing import BinaryIO, List, Protocol, Union, runtime_checkable

from .mac import MAC

__all__ = ["ResourceClass", "Mode", "SIZE_UNKNOWN", "Payload", "Store"]

# Reported by size() when the backend cannot tell the total store size.
SIZE_UNKNOWN = -1

Payload = Union[bytes, BinaryIO]


class ResourceClass(str, enum.Enum):
    """
    Kinds of objects held by a Kloset store.

    A packfile blob is a byte-range view into a PACKFILE, not a class of its own.
    """
    STATE = "state"
    PACKFILE = "packfile"
    LOCK = "lock"

    @property
    def item_path(self) -> str:
        return f"/{self.value}"

    @property
    def list_path(self) -> str:
        return f"/{self.value}s"

    @property
    def list_field(self) -> str:
        """Envelope field that carries the identifiers of a list response."""
        return "locks" if self is ResourceClass.LOCK else "macs"

    @classmethod
    def from_name(cls, name: str) -> ResourceClass:
        """
        Accept singular or plural names ("state", "states", "packfiles", ...).

        Raises:
            ValueError: If the name matches no resource class
        """
        key = name.strip().lower()
        if key.endswith("s"):
            key = key[:-1]
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"unknown resource class {name!r}, expected one of: {valid}") from None


class Mode(enum.Flag):
    """Access modes a backend reports to the repository core."""
    READ = enum.auto()
    WRITE = enum.auto()


@runtime_checkable
class Store(Protocol):
    """
    Storage-backend contract expected by the repository core.

    Every networked method issues exactly one request and raises one of the
    errors from ``kloset_http.storage.errors``; none of them retries.
    """

    def location(self) -> str:
        """Return the configured location URL."""
        ...

    def create(self, config: bytes) -> None:
        """Initialise a new store with the given configuration blob."""
        ...

    def open(self) -> bytes:
        """
        Fetch the store's root configuration blob.

        Raises:
            RemoteError: If the store does not exist or access is denied
            TransportError: For network failures
            DecodeError: If the response cannot be decoded
        """
        ...

    def mode(self) -> Mode:
        ...

    def size(self) -> int:
        ...

    def ping(self) -> None:
        ...

    def close(self) -> None:
        ...

    def list(self, resource: ResourceClass) -> List[MAC]:
        """
        List identifiers stored under a resource class.

        Order is not guaranteed. A failure is raised, never reported as an
        empty list.
        """
        ...

    def get(self, resource: ResourceClass, mac: MAC) -> BinaryIO:
        """
        Retrieve one object.

        Raises:
            RemoteError: If no object with that MAC exists in the class
        """
        ...

    def get_range(self, mac: MAC, offset: int, length: int) -> BinaryIO:
        """
        Retrieve ``length`` bytes of a packfile starting at ``offset``.

        The server decides what happens past the end of the object.
        """
        ...

    def put(self, resource: ResourceClass, mac: MAC, data: Payload) -> int:
        """Store an object and return the number of bytes sent."""
        ...

    def delete(self, resource: ResourceClass, mac: MAC) -> None:
        ...
