"""Storage layer: contracts, identifiers, errors and endpoint parsing."""
from .base import SIZE_UNKNOWN, Mode, ResourceClass, Store
from .errors import ConfigError, DecodeError, RemoteError, StoreError, TransportError
from .mac import MAC
from .uri import Endpoint, parse_endpoint

__all__ = [
    "SIZE_UNKNOWN",
    "Mode",
    "ResourceClass",
    "Store",
    "StoreError",
    "ConfigError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "MAC",
    "Endpoint",
    "parse_endpoint",
]
