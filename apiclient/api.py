from __future__ import annotations

from typing import Any

import httpx

from auth.errors import TransportFailure

from .http import raise_for_api_error


class ApiClient:
    """Thin JSON facade over an ``httpx.AsyncClient``.

    Non-2xx responses raise ``ApiError`` subclasses, network failures raise
    ``TransportFailure``. Errors from the refresh coordinator (``AuthExpired``
    and subclasses) propagate unchanged.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.TimeoutException as error:
            raise TransportFailure(
                f"Request timed out: {method} {path}",
                request=error.request,
                timeout=True,
            ) from error
        except httpx.TransportError as error:
            raise TransportFailure(
                f"Network error: {method} {path}: {error}",
                request=error.request,
            ) from error

        raise_for_api_error(response)
        if not response.content:
            return None
        return response.json()

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, *, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", path, json=json, params=params)

    async def put(self, path: str, *, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("PUT", path, json=json, params=params)

    async def patch(self, path: str, *, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("PATCH", path, json=json, params=params)

    async def delete(self, path: str, *, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("DELETE", path, json=json, params=params)

    async def aclose(self) -> None:
        await self._client.aclose()
