"""
Path safety utilities for the Kloset HTTP adapter.

Request paths are built by appending operation-specific subpaths to the
configured endpoint prefix. This module makes sure no segment can climb
above that prefix.
"""
from __future__ import annotations

from typing import List


def split_segments(path: str) -> List[str]:
    """
    Split a URL path into normalized segments.

    Empty segments and "." are dropped; ".." is rejected outright rather
    than resolved, so nothing can traverse above the configured root.

    Raises:
        ValueError: If the path contains a ".." segment or a backslash

    Examples:
        >>> split_segments("/repo//v1/./states")
        ['repo', 'v1', 'states']

        >>> split_segments("/repo/../etc")
        ValueError: unsafe path: /repo/../etc
    """
    if "\\" in path:
        raise ValueError(f"unsafe path: {path}")
    segments = []
    for part in path.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            raise ValueError(f"unsafe path: {path}")
        segments.append(part)
    return segments


def join_url_path(prefix: str, subpath: str) -> str:
    """
    Join an endpoint prefix and an operation subpath.

    The result always starts with "/". A trailing slash on ``subpath`` is
    preserved, so joining "/repo" and "/" gives "/repo/".

    Examples:
        >>> join_url_path("/repo", "/packfile/blob")
        '/repo/packfile/blob'

        >>> join_url_path("", "/")
        '/'
    """
    segments = split_segments(prefix) + split_segments(subpath)
    joined = "/" + "/".join(segments)
    if subpath.endswith("/") and not joined.endswith("/"):
        joined += "/"
    return joined
