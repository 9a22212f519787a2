"""
Settings and configuration for the Kloset HTTP adapter.

Centralizes configuration values and provides validation with fail-fast behavior.
Settings come either from the configuration mapping a host process hands to a
backend constructor, or from environment variables (CLI use).
"""
from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from . import __version__
from .storage.errors import ConfigError
from .storage.mac import MAC_ENCODINGS
from .storage.uri import Endpoint, parse_endpoint

__all__ = ["Settings", "PROTOCOLS", "settings_from_config", "create_settings_from_env"]

# "rpc": JSON request/response envelopes on fixed per-operation paths.
# "resource": raw bytes on /resources/<class>/<hex-mac> paths.
PROTOCOLS = ("rpc", "resource")


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for an HTTP store.

    Attributes:
        location: Absolute http:// or https:// URL of the store (required)
        auth_token: Bearer credential sent on every request
        protocol: Wire protocol variant, "rpc" (default) or "resource"
        timeout_s: Per-request timeout in seconds
        mac_encoding: MAC rendering in JSON envelopes, "hex" or "array"
        verify_tls: Verify server certificates for https locations
        user_agent: User-Agent header value
    """
    location: str
    auth_token: Optional[str] = None
    protocol: str = "rpc"
    timeout_s: float = 30.0
    mac_encoding: str = "hex"
    verify_tls: bool = True
    user_agent: str = f"kloset-http/{__version__}"
    endpoint: Endpoint = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate settings on construction."""
        object.__setattr__(self, "endpoint", parse_endpoint(self.location))

        if self.protocol not in PROTOCOLS:
            raise ConfigError(
                f"Invalid protocol: {self.protocol}. Supported values: {', '.join(PROTOCOLS)}"
            )

        if self.mac_encoding not in MAC_ENCODINGS:
            raise ConfigError(
                f"Invalid mac_encoding: {self.mac_encoding}. Supported values: {', '.join(MAC_ENCODINGS)}"
            )

        if not math.isfinite(self.timeout_s) or self.timeout_s <= 0:
            raise ConfigError(f"timeout_s must be positive and finite, got {self.timeout_s}")

        if self.auth_token is not None and not self.auth_token.strip():
            raise ConfigError("auth_token must not be blank when set")


def _str_to_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off", ""):
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _to_float(key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {value!r}") from None


def settings_from_config(config: Mapping[str, str]) -> Settings:
    """
    Build settings from a backend configuration mapping.

    Keys:
        - location (required)
        - auth_token (optional)
        - protocol (default: rpc)
        - timeout (default: 30.0)
        - mac_encoding (default: hex)
        - tls_insecure_skip_verify (default: false)

    Unknown keys are ignored so hosts can pass their whole store configuration.

    Raises:
        ConfigError: If configuration is invalid or location is missing
    """
    location = config.get("location")
    if not location:
        raise ConfigError("location is required")

    timeout = config.get("timeout")
    insecure = config.get("tls_insecure_skip_verify")

    return Settings(
        location=location,
        auth_token=config.get("auth_token") or None,
        protocol=config.get("protocol") or "rpc",
        timeout_s=_to_float("timeout", timeout) if timeout else 30.0,
        mac_encoding=config.get("mac_encoding") or "hex",
        verify_tls=not _str_to_bool("tls_insecure_skip_verify", insecure) if insecure else True,
    )


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - KLOSET_HTTP_LOCATION (required)
        - KLOSET_HTTP_TOKEN (optional)
        - KLOSET_HTTP_PROTOCOL (default: rpc)
        - KLOSET_HTTP_TIMEOUT (default: 30.0)
        - KLOSET_HTTP_MAC_ENCODING (default: hex)
        - KLOSET_HTTP_INSECURE (default: false)

    Returns:
        Settings object with validated configuration

    Raises:
        ConfigError: If configuration is invalid or required values missing

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    location = os.getenv("KLOSET_HTTP_LOCATION")
    if not location:
        raise ConfigError("KLOSET_HTTP_LOCATION environment variable is required")

    return settings_from_config({
        "location": location,
        "auth_token": os.getenv("KLOSET_HTTP_TOKEN", ""),
        "protocol": os.getenv("KLOSET_HTTP_PROTOCOL", ""),
        "timeout": os.getenv("KLOSET_HTTP_TIMEOUT", ""),
        "mac_encoding": os.getenv("KLOSET_HTTP_MAC_ENCODING", ""),
        "tls_insecure_skip_verify": os.getenv("KLOSET_HTTP_INSECURE", ""),
    })
