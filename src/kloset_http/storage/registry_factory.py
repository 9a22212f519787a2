"""
Backend registry with explicit scheme-to-constructor wiring.

A host process builds one registry during startup, registers the backends
it wants under their URL schemes, and passes the registry to whatever
resolves store configurations. Importing this module registers nothing.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterator, Mapping
from urllib.parse import urlsplit

from .base import Store
from .errors import ConfigError
from .http_store import HTTPStore

__all__ = ["BackendRegistry", "StoreConstructor", "default_registry", "open_store"]

StoreConstructor = Callable[[Mapping[str, str]], Store]


class BackendRegistry:
    """Mapping from URL scheme to store constructor."""

    def __init__(self) -> None:
        self._constructors: Dict[str, StoreConstructor] = {}

    def register(self, scheme: str, constructor: StoreConstructor) -> None:
        """
        Bind a scheme to a constructor.

        Raises:
            ValueError: If the scheme is empty or already registered
        """
        key = scheme.lower()
        if not key:
            raise ValueError("scheme cannot be empty")
        if key in self._constructors:
            raise ValueError(f"backend already registered for scheme: {scheme}")
        self._constructors[key] = constructor

    def schemes(self) -> Iterator[str]:
        return iter(sorted(self._constructors))

    def __contains__(self, scheme: str) -> bool:
        return scheme.lower() in self._constructors

    def resolve(self, config: Mapping[str, str]) -> Store:
        """
        Construct the store for a configuration's location.

        Raises:
            ConfigError: If location is missing or no backend handles its scheme
        """
        location = config.get("location")
        if not location:
            raise ConfigError("location is required")

        scheme = urlsplit(location).scheme.lower()
        constructor = self._constructors.get(scheme)
        if constructor is None:
            supported = ", ".join(self.schemes()) or "none"
            raise ConfigError(f"no backend registered for scheme {scheme!r} (supported: {supported})")
        return constructor(config)


def default_registry() -> BackendRegistry:
    """
    Create a registry with the HTTP store bound to http and https.

    Returns a fresh registry on every call (no module-level state).
    """
    registry = BackendRegistry()
    registry.register("http", HTTPStore.from_config)
    registry.register("https", HTTPStore.from_config)
    return registry


def open_store(config: Mapping[str, str], registry: BackendRegistry) -> Store:
    """Resolve a configuration into a store using the given registry."""
    return registry.resolve(config)
