"""
Kloset HTTP storage adapter.

Lets a Kloset repository persist and retrieve its objects through a plain
HTTP(S) endpoint.
"""
__version__ = "0.1.0"

from .settings import Settings, create_settings_from_env, settings_from_config
from .storage import (
    MAC,
    SIZE_UNKNOWN,
    ConfigError,
    DecodeError,
    Mode,
    RemoteError,
    ResourceClass,
    Store,
    StoreError,
    TransportError,
)
from .storage.async_store import AsyncHTTPStore
from .storage.http_store import HTTPStore
from .storage.registry_factory import BackendRegistry, default_registry, open_store

__all__ = [
    "__version__",
    "Settings",
    "settings_from_config",
    "create_settings_from_env",
    "MAC",
    "SIZE_UNKNOWN",
    "Mode",
    "ResourceClass",
    "Store",
    "StoreError",
    "ConfigError",
    "TransportError",
    "DecodeError",
    "RemoteError",
    "HTTPStore",
    "AsyncHTTPStore",
    "BackendRegistry",
    "default_registry",
    "open_store",
]
