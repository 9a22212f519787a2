"""
CLI Context for managing application dependencies.

Holds the settings resolved from command-line options and environment, and
builds the store lazily so commands that fail validation never open a client.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from .settings import Settings, settings_from_config
from .storage.errors import ConfigError
from .storage.http_store import HTTPStore


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    ``client`` lets tests inject an httpx.Client with a mock transport;
    production use leaves it unset and the store owns its client.
    """
    settings: Settings
    client: Optional[httpx.Client] = None
    _store: Optional[HTTPStore] = None

    @classmethod
    def from_options(
        cls,
        location: Optional[str],
        token: Optional[str] = None,
        protocol: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> CLIContext:
        """
        Create CLI context from global command-line options.

        Raises:
            ConfigError: If no location was given or options are invalid
        """
        if not location:
            raise ConfigError("--location or KLOSET_HTTP_LOCATION is required")
        settings = settings_from_config({
            "location": location,
            "auth_token": token or "",
            "protocol": protocol or "",
            "timeout": str(timeout) if timeout is not None else "",
        })
        return cls(settings=settings)

    @property
    def store(self) -> HTTPStore:
        """Get or create the store (lazy initialization)."""
        if self._store is None:
            self._store = HTTPStore(self.settings, client=self.client)
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
