"""
remotekv's KV gives local code the interface of a Workers KV namespace binding, and
runs each call against the Cloudflare REST API instead. Code written against the
binding (get, get_with_metadata, put, delete, list) can therefore read and write the
same data from outside of the edge.
"""

from typing import Any, AsyncIterator, Mapping, Optional, Union

from loguru import logger

from .api.client import APIClient
from .api.types import (
    GetOptions,
    ListOptions,
    ListResult,
    PutOptions,
    StoredKey,
    ValueType,
    ValueWithMetadata,
)
from .api.validation import (
    validate_get_options,
    validate_key,
    validate_list_options,
    validate_put,
)
from .config import MAX_LIST_KEYS

GetOptionsLike = Union[str, ValueType, GetOptions, Mapping[str, Any], None]


class KV(object):
    """
    A KV namespace, accessed remotely. Every operation validates its inputs locally,
    then makes exactly one round trip to the API (get_with_metadata makes two), so
    nothing is cached and nothing is retried.

    To use a namespace:
    ```
    kv = KV(account_id="...", namespace_id="...", api_token="...")
    await kv.put("user:42", {"name": "a"}, {"expiration_ttl": 3600})
    user = await kv.get("user:42", "json")
    await kv.aclose()
    ```

    Arguments that are not given are read from the environment, see
    remotekv.api.client.APIClient. `KV` is also an async context manager that
    closes its connections on exit:
    ```
    async with KV() as kv:
        page = await kv.list({"prefix": "user:", "limit": 10})
    ```

    Values are read as "text" (default), "json", "bytes" or "stream". Writes only
    accept strings, or objects that serialize to JSON.
    """

    def __init__(
        self,
        account_id: Optional[str] = None,
        namespace_id: Optional[str] = None,
        api_token: Optional[str] = None,
        api_email: Optional[str] = None,
        api_key: Optional[str] = None,
        api_client: Optional[APIClient] = None,
    ):
        """
        Initializes a KV.

        :param str account_id: the account the namespace belongs to
        :param str namespace_id: the id of the namespace
        :param str api_token: an API token, sent as a bearer token
        :param str api_email: the account email, used with api_key if there is no token
        :param str api_key: the global API key, used with api_email
        :param APIClient api_client: the client to use. If given, the other
            arguments are ignored.
        """
        self._api_client = api_client or APIClient(
            account_id=account_id,
            namespace_id=namespace_id,
            api_token=api_token,
            api_email=api_email,
            api_key=api_key,
        )

    async def get(self, key: str, options: GetOptionsLike = None) -> Any:
        """
        Get the value of a key, decoded according to the requested type: str for
        "text", the parsed object for "json", bytes for "bytes", and a single-pass
        async iterator of bytes for "stream". Returns None if the key does not exist.

        `options` is either a type or a GetOptions (or mapping) with `type` and
        `cache_ttl`. cache_ttl is validated but has no effect, as nothing is cached.
        """
        validate_key("GET", key)
        value_type = validate_get_options(options)
        return await self._api_client.kv.get(key, value_type)

    async def get_with_metadata(
        self, key: str, options: GetOptionsLike = None
    ) -> ValueWithMetadata:
        """
        Get the value of a key together with its metadata. If the key does not
        exist, both are None and the metadata is not fetched.
        """
        value = await self.get(key, options)
        if value is None:
            return ValueWithMetadata(value=None, metadata=None)
        metadata = await self._api_client.kv.get_metadata(key)
        return ValueWithMetadata(value=value, metadata=metadata)

    async def put(
        self,
        key: str,
        value: Any,
        options: Union[PutOptions, Mapping[str, Any], None] = None,
    ) -> None:
        """
        Put a key-value pair. `value` is a string, or a dict / list / pydantic model
        that is stored as its JSON serialization.

        `options` is a PutOptions (or mapping) with `expiration` (absolute, unix
        seconds), `expiration_ttl` (relative, seconds, takes precedence over
        expiration) and `metadata` (any JSON serializable object).
        """
        validate_key("PUT", key)
        item = validate_put(key, value, options)
        logger.trace(
            f"Putting key {key} with expiration {item.expiration}"
            f" and ttl {item.expiration_ttl}"
        )
        await self._api_client.kv.put(item)

    async def delete(self, key: str) -> None:
        """
        Delete a key-value pair.

        Note that if a key does not exist, this function will not raise an error.
        """
        validate_key("DELETE", key)
        await self._api_client.kv.delete(key)

    async def list(
        self, options: Union[ListOptions, Mapping[str, Any], None] = None
    ) -> ListResult:
        """
        List one page of keys. `options` is a ListOptions (or mapping) with `prefix`,
        `limit` (1 to 1000, default 1000) and `cursor` from a previous page.

        list_complete is True only if the page holds fewer keys than limit. A full
        page always means that more keys may follow, and the next page must be
        fetched with the returned cursor.
        """
        opts = validate_list_options(options)
        response = await self._api_client.kv.list_keys(
            limit=opts.limit, prefix=opts.prefix, cursor=opts.cursor
        )
        keys = response.result
        cursor = (response.result_info.cursor if response.result_info else None) or ""
        return ListResult(
            keys=keys, cursor=cursor, list_complete=len(keys) < opts.limit
        )

    async def iter_keys(
        self, prefix: str = "", limit: int = MAX_LIST_KEYS
    ) -> AsyncIterator[StoredKey]:
        """
        Iterates over all keys with the given prefix, fetching pages of `limit`
        keys until a page reports list_complete.
        """
        cursor = None
        pages = 0
        while True:
            page = await self.list(
                {"prefix": prefix, "limit": limit, "cursor": cursor}
            )
            pages += 1
            logger.debug(
                f"Fetched page {pages} with {len(page.keys)} keys"
                f" (list_complete={page.list_complete})"
            )
            for key in page.keys:
                yield key
            if page.list_complete or not page.cursor:
                return
            cursor = page.cursor

    async def aclose(self) -> None:
        """
        Closes the underlying http connections.
        """
        await self._api_client.aclose()

    async def __aenter__(self) -> "KV":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
