from __future__ import annotations

import asyncio
import logging
from collections import deque

import httpx

from apiclient.constants import ACCESS_TOKEN_KEY, LOGGER, REFRESH_PATH, REFRESH_TOKEN_KEY
from auth.endpoints import PUBLIC_ENDPOINTS, extract_bearer_token, is_public_endpoint
from auth.errors import AuthExpired, QueuedRequestAborted, RefreshFailed, TokenRefreshError
from auth.models import PendingRequest, RefreshState
from auth.refresh import request_token_refresh
from auth.token_store import TokenStore


class TokenRefreshCoordinator:
    """Attach bearer tokens and recover from 401s with a single in-flight refresh.

    While a refresh runs, every other request that fails with 401 is parked in
    a FIFO queue. When the refresh succeeds the queue is replayed in arrival
    order and the request that triggered the refresh is retried last. Replays
    are sent one at a time so completion order matches arrival order. When it
    fails, both tokens are purged and everything waiting fails together.

    The coordinator belongs to one event loop. The IDLE -> REFRESHING
    transition never awaits between the check and the set.
    """

    def __init__(
        self,
        token_store: TokenStore,
        transport: httpx.AsyncBaseTransport,
        refresh_client: httpx.AsyncClient,
        *,
        public_paths: frozenset[str] = PUBLIC_ENDPOINTS,
        refresh_path: str = REFRESH_PATH,
        logger: logging.Logger | None = None,
    ) -> None:
        self._token_store = token_store
        self._transport = transport
        self._refresh_client = refresh_client
        self._public_paths = public_paths
        self._refresh_path = refresh_path
        self._logger = logger or LOGGER
        self._state = RefreshState.IDLE
        self._queue: deque[PendingRequest] = deque()

    @property
    def is_refreshing(self) -> bool:
        return self._state is RefreshState.REFRESHING

    async def decorate_request(self, request: httpx.Request) -> httpx.Request:
        if is_public_endpoint(request.url.path, self._public_paths):
            return request

        access_token = await self._token_store.read(ACCESS_TOKEN_KEY)
        if access_token:
            request.headers["Authorization"] = f"Bearer {access_token}"
        return request

    async def handle_response_error(
        self,
        request: httpx.Request,
        error: httpx.Response | BaseException,
    ) -> httpx.Response:
        if isinstance(error, BaseException):
            raise error

        response = error
        if response.status_code != 401 or is_public_endpoint(
            request.url.path, self._public_paths
        ):
            return response

        if self._state is RefreshState.REFRESHING:
            return await self._wait_for_refresh(request)

        current_token = await self._token_store.read(ACCESS_TOKEN_KEY)

        # Another caller may have started a refresh while the store was read.
        if self._state is RefreshState.REFRESHING:
            return await self._wait_for_refresh(request)

        sent_token = extract_bearer_token(request.headers.get("authorization"))
        if current_token and sent_token != current_token:
            self._logger.info(
                "Retrying %s %s with rotated credentials",
                request.method,
                request.url,
            )
            return await self._retry(request)

        self._state = RefreshState.REFRESHING
        return await self._refresh_and_retry(request, response)

    async def _wait_for_refresh(self, request: httpx.Request) -> httpx.Response:
        future: asyncio.Future[httpx.Response] = asyncio.get_running_loop().create_future()
        self._queue.append(PendingRequest(request=request, future=future))
        self._logger.info(
            "Queued %s %s until token refresh completes (%s waiting)",
            request.method,
            request.url,
            len(self._queue),
        )
        return await future

    async def _refresh_and_retry(
        self, request: httpx.Request, response: httpx.Response
    ) -> httpx.Response:
        try:
            await self._refresh_tokens()
        except TokenRefreshError as error:
            self._logger.warning("Token refresh failed: %s", error)
            await self._clear_tokens()
            self._abort_pending()
            raise RefreshFailed(request, response) from error
        else:
            pending = self._take_pending()
        finally:
            if self._state is RefreshState.REFRESHING:
                self._abort_pending()

        try:
            for item in pending:
                await self._replay(item)
        finally:
            for item in pending:
                item.reject(QueuedRequestAborted(item.request))

        return await self._retry(request)

    async def _refresh_tokens(self) -> None:
        self._logger.info("Refreshing access token")
        refresh_token = await self._token_store.read(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise TokenRefreshError("No refresh token stored.")

        tokens = await request_token_refresh(
            self._refresh_client, refresh_token, path=self._refresh_path
        )

        await self._token_store.write(ACCESS_TOKEN_KEY, tokens.access_token)
        # Servers that do not rotate refresh tokens omit the field.
        if tokens.refresh_token is not None:
            await self._token_store.write(REFRESH_TOKEN_KEY, tokens.refresh_token)
        self._logger.info("Access token refreshed")

    def _take_pending(self) -> list[PendingRequest]:
        self._state = RefreshState.IDLE
        pending = list(self._queue)
        self._queue.clear()
        return pending

    def _abort_pending(self) -> None:
        for item in self._take_pending():
            item.reject(QueuedRequestAborted(item.request))

    async def _replay(self, item: PendingRequest) -> None:
        if item.done:
            return
        try:
            response = await self._retry(item.request)
        except Exception as error:
            self._logger.warning(
                "Replay of %s %s failed: %s", item.request.method, item.request.url, error
            )
            item.reject(error)
        else:
            item.resolve(response)

    async def _retry(self, request: httpx.Request) -> httpx.Response:
        retry_request = _copy_without_authorization(request)
        await self.decorate_request(retry_request)
        response = await self._transport.handle_async_request(retry_request)
        if response.status_code == 401:
            await response.aread()
            await response.aclose()
            response.request = retry_request
            raise AuthExpired(request=retry_request, response=response)
        return response

    async def _clear_tokens(self) -> None:
        await self._token_store.clear()
        self._logger.info("Stored tokens cleared")


def _copy_without_authorization(request: httpx.Request) -> httpx.Request:
    headers = request.headers.copy()
    headers.pop("Authorization", None)
    return httpx.Request(
        method=request.method,
        url=request.url,
        headers=headers,
        content=request.content,
        extensions=request.extensions,
    )
