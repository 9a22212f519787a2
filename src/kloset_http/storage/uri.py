"""
Endpoint parsing for the HTTP storage adapter.

The adapter is configured with a single absolute URL. It is parsed once,
validated fail-fast, and then only read for the lifetime of a store.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlsplit, urlunsplit

from ..path_safety import join_url_path, split_segments
from .errors import ConfigError

__all__ = ["Endpoint", "parse_endpoint"]


@dataclass(frozen=True)
class Endpoint:
    """
    Parsed components of a store location.

    Attributes:
        scheme: "http" or "https"
        host: Network location, including port and userinfo if given
        prefix: Normalized path prefix, "" for the server root
        query: Query string carried over to every request URL
        original: Original location string for error messages
    """
    scheme: Literal["http", "https"]
    host: str
    prefix: str
    query: str
    original: str

    def url_for(self, subpath: str) -> str:
        """
        Build the absolute URL for an operation subpath.

        Raises:
            ValueError: If ``subpath`` tries to traverse above the prefix
        """
        path = join_url_path(self.prefix, subpath)
        return urlunsplit((self.scheme, self.host, path, self.query, ""))

    def __str__(self) -> str:
        return self.original


def parse_endpoint(location: str) -> Endpoint:
    """
    Parse and validate a store location URL.

    Accepts URLs of the form {http|https}://host[:port][/prefix]

    Validation:
    - Rejects empty locations and relative URLs
    - Rejects schemes other than http and https
    - Rejects fragments
    - Rejects ".." path segments

    Raises:
        ConfigError: If the location is invalid

    Examples:
        >>> parse_endpoint("https://store.example.com/repo")
        Endpoint(scheme='https', host='store.example.com', prefix='/repo', query='', original='...')
    """
    if not location:
        raise ConfigError("location is required")

    try:
        parts = urlsplit(location.strip())
        # Accessing port validates it
        parts.port
    except ValueError as e:
        raise ConfigError(f"invalid URL {location!r}: {e}") from e

    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        raise ConfigError(f"invalid URL {location!r}: scheme must be http or https")
    if not parts.netloc or not parts.hostname:
        raise ConfigError(f"invalid URL {location!r}: missing host")
    if parts.fragment:
        raise ConfigError(f"invalid URL {location!r}: fragments are not allowed")

    try:
        segments = split_segments(parts.path)
    except ValueError as e:
        raise ConfigError(f"invalid URL {location!r}: {e}") from e

    prefix = "/" + "/".join(segments) if segments else ""

    return Endpoint(
        scheme=scheme,  # type: ignore  # We validated it's one of the literals
        host=parts.netloc,
        prefix=prefix,
        query=parts.query,
        original=location,
    )
