from typing import Any, AsyncIterator, Dict, Optional, Union
from urllib.parse import quote

from httpx import Response

from .api_resource import APIResource
from .types import BulkWriteItem, ListKeysResponse, MetadataResponse, ValueType


async def _iter_body(response: Response) -> AsyncIterator[bytes]:
    """
    Yields the body of a streamed response once, closing the response when the
    body is exhausted or the iterator is closed.
    """
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    finally:
        await response.aclose()


class KVAPI(APIResource):
    """
    Wire level operations on the namespace the client is bound to. Inputs are
    expected to have been validated already, see remotekv.api.validation.
    """

    def _key_path(self, kind: str, key: str) -> str:
        # Keys may hold characters such as ":", "/" or "%", so they are always
        # percent encoded into a single path segment.
        return f"/{kind}/{quote(key, safe='')}"

    async def get(
        self, key: str, value_type: ValueType = ValueType.TEXT
    ) -> Union[str, bytes, Any, AsyncIterator[bytes], None]:
        """
        Get the value of a key, decoded as value_type. Returns None if the key does
        not exist. Other error statuses are raised as httpx.HTTPStatusError.
        """
        path = self._key_path("values", key)
        if value_type == ValueType.STREAM:
            response = await self._stream("GET", path)
            if response.status_code == 404 or response.is_error:
                await response.aclose()
                if response.status_code == 404:
                    return None
                response.raise_for_status()
            return _iter_body(response)

        response = await self._get(path)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        if value_type == ValueType.JSON:
            return response.json()
        elif value_type == ValueType.BYTES:
            return response.content
        else:
            # undecodable bytes become U+FFFD rather than failing the read
            return response.content.decode("utf-8", errors="replace")

    async def get_metadata(self, key: str) -> Optional[Any]:
        """
        Get the metadata of a key, unwrapped from the {"result": ...} envelope.
        """
        response = await self._get(self._key_path("metadata", key))
        return self.ensure_type("GET", response, MetadataResponse).result

    async def put(self, item: BulkWriteItem) -> bool:
        """
        Write a single key-value pair through the bulk endpoint.
        """
        entry: Dict[str, Any] = item.model_dump(exclude={"metadata"}, exclude_none=True)
        # metadata is passed through as is, so that None values inside it survive.
        if item.metadata is not None:
            entry["metadata"] = item.metadata
        response = await self._put("/bulk", json=[entry])
        return self.ensure_ok("PUT", response)

    async def delete(self, key: str) -> bool:
        """
        Delete a key. Deleting a key that does not exist is not an error.
        """
        response = await self._delete(self._key_path("values", key))
        if response.status_code == 404:
            return True
        return self.ensure_ok("DELETE", response)

    async def list_keys(
        self,
        limit: int,
        prefix: Optional[str] = None,
        cursor: Optional[str] = None,
    ) -> ListKeysResponse:
        """
        List one page of keys.
        """
        params: Dict[str, Union[str, int]] = {}
        if prefix:
            params["prefix"] = prefix
        params["limit"] = limit
        if cursor:
            params["cursor"] = cursor
        response = await self._get("/keys", params=params)
        return self.ensure_type("GET", response, ListKeysResponse)
