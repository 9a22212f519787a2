"""
Blocking HTTP store.

Exposes the repository's storage-backend contract over HTTP(S). Each
networked method performs exactly one request through httpx and one
response decode through the configured wire protocol. No retries.
"""
from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, List, Mapping, Optional, Union

import httpx

from ..settings import Settings, settings_from_config
from .base import SIZE_UNKNOWN, Mode, Payload, ResourceClass, Store
from .envelopes import MAX_LENGTH, MAX_OFFSET
from .errors import TransportError
from .mac import MAC
from .wire import Call, Operation, WireProtocol, WireRequest, wire_for

__all__ = ["HTTPStore", "StoreCore", "MacLike"]

logger = logging.getLogger(__name__)

MacLike = Union[MAC, bytes, str]


def _read_payload(data: Payload) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return data.read()


class StoreCore:
    """
    State and request plumbing shared by the blocking and asyncio stores.

    Holds only read-only values after construction: settings, the parsed
    endpoint and the wire protocol. Nothing here is mutated by operations,
    so a single store can be used from many threads or tasks at once.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._endpoint = settings.endpoint
        self._wire: WireProtocol = wire_for(settings.protocol, mac_encoding=settings.mac_encoding)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def protocol(self) -> str:
        return self._wire.name

    def _client_options(self) -> dict:
        return dict(
            timeout=httpx.Timeout(self._settings.timeout_s),
            follow_redirects=True,
            verify=self._settings.verify_tls,
        )

    def _headers(self, wire_request: WireRequest) -> dict:
        headers = {"User-Agent": self._settings.user_agent}
        headers.update(wire_request.headers)
        if self._settings.auth_token:
            headers["Authorization"] = f"Bearer {self._settings.auth_token}"
        return headers

    def _build_request(self, client: Union[httpx.Client, httpx.AsyncClient], call: Call) -> httpx.Request:
        wire_request = self._wire.build(call)
        url = self._endpoint.url_for(wire_request.subpath)
        return client.build_request(
            wire_request.method,
            url,
            content=wire_request.body,
            headers=self._headers(wire_request),
        )

    @staticmethod
    def _display_url(request: httpx.Request) -> httpx.URL:
        """Request URL without userinfo, for logs and error messages."""
        return request.url.copy_with(username=None, password=None)

    def _finish(self, call: Call, request: httpx.Request, response: httpx.Response) -> Any:
        logger.debug(
            f"{request.method} {self._display_url(request)} -> {response.status_code} ({call.describe()})"
        )
        return self._wire.parse(call, response)

    @classmethod
    def _transport_error(cls, call: Call, request: httpx.Request, exc: Exception) -> TransportError:
        target = f"{request.method} {cls._display_url(request)}"
        if isinstance(exc, httpx.TimeoutException):
            return TransportError(f"Timeout during {call.describe()} ({target}): {exc}")
        return TransportError(f"Network error during {call.describe()} ({target}): {exc}")

    # Call constructors: validate inputs before anything touches the network

    @staticmethod
    def _list_call(resource: ResourceClass) -> Call:
        return Call(Operation.LIST, resource=ResourceClass(resource))

    @staticmethod
    def _get_call(resource: ResourceClass, mac: MacLike) -> Call:
        return Call(Operation.GET, resource=ResourceClass(resource), mac=MAC.parse(mac))

    @staticmethod
    def _range_call(mac: MacLike, offset: int, length: int) -> Call:
        if not 0 <= offset <= MAX_OFFSET:
            raise ValueError(f"offset out of range: {offset}")
        if not 0 <= length <= MAX_LENGTH:
            raise ValueError(f"length out of range: {length}")
        return Call(
            Operation.GET_RANGE,
            resource=ResourceClass.PACKFILE,
            mac=MAC.parse(mac),
            offset=offset,
            length=length,
        )

    @staticmethod
    def _put_call(resource: ResourceClass, mac: MacLike, data: bytes) -> Call:
        return Call(Operation.PUT, resource=ResourceClass(resource), mac=MAC.parse(mac), data=data)

    @staticmethod
    def _delete_call(resource: ResourceClass, mac: MacLike) -> Call:
        return Call(Operation.DELETE, resource=ResourceClass(resource), mac=MAC.parse(mac))

    # Capability reporting (no network)

    def location(self) -> str:
        return self._endpoint.original

    def create(self, config: bytes) -> None:
        """Stores are provisioned server-side; nothing to do here."""
        return None

    def mode(self) -> Mode:
        return Mode.READ | Mode.WRITE

    def size(self) -> int:
        return SIZE_UNKNOWN


class HTTPStore(StoreCore, Store):
    """
    Store implementation backed by a blocking httpx client.

    Examples:
        >>> store = HTTPStore(Settings(location="https://store.example.com/repo"))
        >>> config = store.open()
        >>> for mac in store.get_packfiles():
        ...     print(mac)
    """

    def __init__(self, settings: Settings, *, client: Optional[httpx.Client] = None):
        """
        Initialize the store. Performs no network activity.

        Args:
            settings: Validated store settings
            client: Optional httpx.Client for dependency injection (testing).
                    If not provided, the store creates and owns one.
        """
        super().__init__(settings)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(**self._client_options())

    @classmethod
    def from_config(cls, config: Mapping[str, str], *, client: Optional[httpx.Client] = None) -> HTTPStore:
        """
        Construct from a backend configuration mapping.

        Raises:
            ConfigError: If the configuration is invalid
        """
        return cls(settings_from_config(config), client=client)

    def _execute(self, call: Call) -> Any:
        request = self._build_request(self._client, call)
        try:
            response = self._client.send(request)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise self._transport_error(call, request, e) from e
        return self._finish(call, request, response)

    # Generic operations

    def open(self) -> bytes:
        return self._execute(Call(Operation.OPEN))

    def list(self, resource: ResourceClass) -> List[MAC]:
        return self._execute(self._list_call(resource))

    def get(self, resource: ResourceClass, mac: MacLike) -> BinaryIO:
        return io.BytesIO(self._execute(self._get_call(resource, mac)))

    def get_range(self, mac: MacLike, offset: int, length: int) -> BinaryIO:
        return io.BytesIO(self._execute(self._range_call(mac, offset, length)))

    def put(self, resource: ResourceClass, mac: MacLike, data: Payload) -> int:
        payload = _read_payload(data)
        self._execute(self._put_call(resource, mac, payload))
        return len(payload)

    def delete(self, resource: ResourceClass, mac: MacLike) -> None:
        self._execute(self._delete_call(resource, mac))

    # States

    def get_states(self) -> List[MAC]:
        return self.list(ResourceClass.STATE)

    def put_state(self, mac: MacLike, data: Payload) -> int:
        return self.put(ResourceClass.STATE, mac, data)

    def get_state(self, mac: MacLike) -> BinaryIO:
        return self.get(ResourceClass.STATE, mac)

    def delete_state(self, mac: MacLike) -> None:
        self.delete(ResourceClass.STATE, mac)

    # Packfiles

    def get_packfiles(self) -> List[MAC]:
        return self.list(ResourceClass.PACKFILE)

    def put_packfile(self, mac: MacLike, data: Payload) -> int:
        return self.put(ResourceClass.PACKFILE, mac, data)

    def get_packfile(self, mac: MacLike) -> BinaryIO:
        return self.get(ResourceClass.PACKFILE, mac)

    def get_packfile_blob(self, mac: MacLike, offset: int, length: int) -> BinaryIO:
        return self.get_range(mac, offset, length)

    def delete_packfile(self, mac: MacLike) -> None:
        self.delete(ResourceClass.PACKFILE, mac)

    # Locks

    def get_locks(self) -> List[MAC]:
        return self.list(ResourceClass.LOCK)

    def put_lock(self, mac: MacLike, data: Payload) -> int:
        return self.put(ResourceClass.LOCK, mac, data)

    def get_lock(self, mac: MacLike) -> BinaryIO:
        return self.get(ResourceClass.LOCK, mac)

    def delete_lock(self, mac: MacLike) -> None:
        self.delete(ResourceClass.LOCK, mac)

    def ping(self) -> None:
        return None

    def close(self) -> None:
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
