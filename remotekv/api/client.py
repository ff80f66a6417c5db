"""
The api/client module serves as the single entry point of all remote calls, holding
the account and namespace the client is bound to, the authentication headers, and
the http session.
"""

import os
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import httpx
from loguru import logger

from .. import config
from .._internal.logging import log as internal_log
from .kv import KVAPI


class APIClient(object):
    """
    A client bound to one KV namespace of one account. The base url and the header
    set are computed once here and reused, unchanged, by every request.
    """

    def __init__(
        self,
        account_id: Optional[str] = None,
        namespace_id: Optional[str] = None,
        api_token: Optional[str] = None,
        api_email: Optional[str] = None,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Creates a namespace api client. Every argument that is not given is read from
        the environment:
        - account_id from CLOUDFLARE_ACCOUNT_ID
        - namespace_id from CLOUDFLARE_KV_NAMESPACE_ID
        - api_token from CLOUDFLARE_API_TOKEN
        - api_email and api_key from CLOUDFLARE_EMAIL and CLOUDFLARE_API_KEY
        - url from REMOTEKV_API_URL, defaulting to the public Cloudflare API.

        Authentication uses the bearer token if there is one, and otherwise the
        email and key pair. At least one of the two is required.
        """
        account_id = account_id or os.environ.get(config.ACCOUNT_ID_ENV)
        namespace_id = namespace_id or os.environ.get(config.NAMESPACE_ID_ENV)
        if not account_id or not namespace_id:
            raise ValueError("Missing account_id or namespace_id")
        api_token = api_token or os.environ.get(config.API_TOKEN_ENV)
        api_email = api_email or os.environ.get(config.API_EMAIL_ENV)
        api_key = api_key or os.environ.get(config.API_KEY_ENV)
        if not api_token and not (api_email and api_key):
            raise ValueError("Missing api_email, api_key or api_token")

        self.account_id: str = account_id
        self.namespace_id: str = namespace_id
        namespace_path = config.NAMESPACE_PATH.format(
            account_identifier=account_id, namespace_identifier=namespace_id
        )
        self.url: str = (url or config.API_URL).rstrip("/") + namespace_path

        header: Dict[str, str] = {"content-type": "application/json"}
        if api_token:
            header["authorization"] = f"Bearer {api_token}"
        else:
            header["x-api-email"] = api_email  # type: ignore
            header["x-auth-key"] = api_key  # type: ignore
        if os.environ.get("REMOTEKV_DEBUG_HEADERS"):
            # REMOTEKV_DEBUG_HEADERS should be in the format of comma separated
            # header_key=header_value pairs.
            try:
                header_pairs = os.environ["REMOTEKV_DEBUG_HEADERS"].split(",")
                for pair in header_pairs:
                    key, value = pair.split("=")
                    header.setdefault(key.strip().lower(), value.strip())
            except ValueError:
                raise ValueError(
                    "REMOTEKV_DEBUG_HEADERS should be in the format of comma separated"
                    " header_key=header_value pairs. Got"
                    f" {os.environ['REMOTEKV_DEBUG_HEADERS']}"
                )
        self._header: Mapping[str, str] = MappingProxyType(header)

        # No timeout: a hung call hangs the operation, and callers who need a
        # deadline wrap the call themselves.
        self._session = httpx.AsyncClient(
            headers=dict(self._header),
            timeout=httpx.Timeout(None),
            transport=transport,
        )

        self.kv = KVAPI(self)

    @property
    def headers(self) -> Mapping[str, str]:
        """
        The read-only header set sent with every request.
        """
        return self._header

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = self.url + path
        logger.trace(f"{method} {path}")
        response = await self._session.request(method, url, **kwargs)
        internal_log(f"{method} {url} -> {response.status_code}")
        return response

    async def _stream(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Sends the request and returns as soon as the headers are in. The caller
        owns the response and must close it.
        """
        url = self.url + path
        logger.trace(f"{method} {path} (streaming)")
        request = self._session.build_request(method, url, **kwargs)
        response = await self._session.send(request, stream=True)
        internal_log(f"{method} {url} -> {response.status_code}")
        return response

    async def _get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self._request("GET", path, **kwargs)

    async def _put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self._request("PUT", path, **kwargs)

    async def _delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self._request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._session.aclose()
