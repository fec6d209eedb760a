"""HTTP adapter for repository API operations."""
from __future__ import annotations

from typing import Any, AsyncIterable, Dict, Optional, Union

import httpx

from ..errors import TransportError

DEPLOY_USER = "deploy"


class HTTPAPIClient:
    """
    HTTP client adapter for API calls.

    Implements IAPIClient protocol. Uploads are sent once: a failed PUT
    may still have created the artifact, so nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        key: str,
        timeout: float = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._key = key
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            auth=(DEPLOY_USER, self._key),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def put(
        self,
        endpoint: str,
        content: Union[bytes, AsyncIterable[bytes]],
        params: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        if not self._client:
            raise RuntimeError("HTTPAPIClient not initialized. Use 'async with' context.")

        try:
            response = await self._client.put(
                endpoint, content=content, params=params, headers=headers
            )
        except httpx.TimeoutException as exc:
            raise TransportError(f"timeout on PUT {endpoint}: {exc}") from exc
        except httpx.RequestError as exc:
            raise TransportError(f"request failed on PUT {endpoint}: {exc}") from exc

        if response.status_code >= 400:
            try:
                error_detail = response.json()
            except Exception:
                error_detail = response.text
            raise TransportError(
                f"API error {response.status_code} on PUT {endpoint}: {error_detail}",
                status_code=response.status_code,
            )

        return response
