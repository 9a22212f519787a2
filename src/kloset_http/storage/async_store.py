"""
Asyncio HTTP store.

Same contract and wire handling as HTTPStore, awaited instead of blocking.
Cancelling the task that awaits an operation aborts the in-flight request;
asyncio.CancelledError propagates unchanged and httpx releases the
connection.
"""
from __future__ import annotations

import io
from typing import Any, BinaryIO, List, Mapping, Optional

import httpx

from ..settings import Settings, settings_from_config
from .base import Payload, ResourceClass
from .http_store import MacLike, StoreCore, _read_payload
from .mac import MAC
from .wire import Call, Operation

__all__ = ["AsyncHTTPStore"]


class AsyncHTTPStore(StoreCore):
    """Store implementation backed by an httpx.AsyncClient."""

    def __init__(self, settings: Settings, *, client: Optional[httpx.AsyncClient] = None):
        super().__init__(settings)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(**self._client_options())

    @classmethod
    def from_config(cls, config: Mapping[str, str], *, client: Optional[httpx.AsyncClient] = None) -> AsyncHTTPStore:
        return cls(settings_from_config(config), client=client)

    async def _execute(self, call: Call) -> Any:
        request = self._build_request(self._client, call)
        try:
            response = await self._client.send(request)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise self._transport_error(call, request, e) from e
        return self._finish(call, request, response)

    async def open(self) -> bytes:
        return await self._execute(Call(Operation.OPEN))

    async def list(self, resource: ResourceClass) -> List[MAC]:
        return await self._execute(self._list_call(resource))

    async def get(self, resource: ResourceClass, mac: MacLike) -> BinaryIO:
        return io.BytesIO(await self._execute(self._get_call(resource, mac)))

    async def get_range(self, mac: MacLike, offset: int, length: int) -> BinaryIO:
        return io.BytesIO(await self._execute(self._range_call(mac, offset, length)))

    async def put(self, resource: ResourceClass, mac: MacLike, data: Payload) -> int:
        payload = _read_payload(data)
        await self._execute(self._put_call(resource, mac, payload))
        return len(payload)

    async def delete(self, resource: ResourceClass, mac: MacLike) -> None:
        await self._execute(self._delete_call(resource, mac))

    async def get_states(self) -> List[MAC]:
        return await self.list(ResourceClass.STATE)

    async def put_state(self, mac: MacLike, data: Payload) -> int:
        return await self.put(ResourceClass.STATE, mac, data)

    async def get_state(self, mac: MacLike) -> BinaryIO:
        return await self.get(ResourceClass.STATE, mac)

    async def delete_state(self, mac: MacLike) -> None:
        await self.delete(ResourceClass.STATE, mac)

    async def get_packfiles(self) -> List[MAC]:
        return await self.list(ResourceClass.PACKFILE)

    async def put_packfile(self, mac: MacLike, data: Payload) -> int:
        return await self.put(ResourceClass.PACKFILE, mac, data)

    async def get_packfile(self, mac: MacLike) -> BinaryIO:
        return await self.get(ResourceClass.PACKFILE, mac)

    async def get_packfile_blob(self, mac: MacLike, offset: int, length: int) -> BinaryIO:
        return await self.get_range(mac, offset, length)

    async def delete_packfile(self, mac: MacLike) -> None:
        await self.delete(ResourceClass.PACKFILE, mac)

    async def get_locks(self) -> List[MAC]:
        return await self.list(ResourceClass.LOCK)

    async def put_lock(self, mac: MacLike, data: Payload) -> int:
        return await self.put(ResourceClass.LOCK, mac, data)

    async def get_lock(self, mac: MacLike) -> BinaryIO:
        return await self.get(ResourceClass.LOCK, mac)

    async def delete_lock(self, mac: MacLike) -> None:
        await self.delete(ResourceClass.LOCK, mac)

    async def ping(self) -> None:
        return None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
