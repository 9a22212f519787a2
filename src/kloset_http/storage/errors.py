"""
Storage adapter error classes.

Provides the taxonomy that every HTTP store operation maps its failures onto.
Callers decide whether to retry, abort or surface an error; the adapter
itself never recovers locally.
"""
from __future__ import annotations

from typing import Optional


class StoreError(Exception):
    """Base class for all errors raised by the HTTP storage adapter."""
    pass


class ConfigError(StoreError, ValueError):
    """
    Malformed or missing endpoint configuration.

    Raised when:
    - location is missing, not absolute, or not http/https
    - an option such as protocol, timeout or mac_encoding has an invalid value
    - no backend is registered for the location's scheme
    """
    pass


class TransportError(StoreError):
    """
    Network-level failure before a response was obtained.

    Raised for DNS errors, refused connections, TLS failures and timeouts.
    The underlying httpx exception is chained as ``__cause__``.
    """
    pass


class DecodeError(StoreError):
    """
    Response body could not be decoded.

    Raised when:
    - the body is not valid JSON
    - the JSON does not match the operation's response envelope
    - an envelope carries both an error and a payload, or neither

    Indicates a protocol mismatch between client and server versions.
    """
    pass


class RemoteError(StoreError):
    """
    The server explicitly reported a failure.

    ``message`` is the server-supplied text, passed through unmodified.
    ``status_code`` is the HTTP status of the response that carried it.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


__all__ = [
    "StoreError",
    "ConfigError",
    "TransportError",
    "DecodeError",
    "RemoteError",
]
