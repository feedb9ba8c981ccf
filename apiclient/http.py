from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from .constants import LOGGER

if TYPE_CHECKING:
    from auth.coordinator import TokenRefreshCoordinator

MAX_LOGGED_BODY_CHARS = 1000
SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie"}


class AuthTransport(httpx.AsyncBaseTransport):
    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        coordinator: "TokenRefreshCoordinator",
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._coordinator = coordinator
        self._logger = logger or LOGGER

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        # The body is replayed if the request has to be retried after a refresh.
        await request.aread()
        await self._coordinator.decorate_request(request)

        response = await self._transport.handle_async_request(request)
        if response.status_code != 401:
            return response

        await response.aread()
        await response.aclose()
        response.request = request
        self._logger.info("Got 401 for %s %s", request.method, request.url)
        return await self._coordinator.handle_response_error(request, response)

    async def aclose(self) -> None:
        await self._transport.aclose()


class ApiError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ValidationError(ApiError):
    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message, status_code=400, payload=payload)
        errors = payload.get("errors") if isinstance(payload, dict) else None
        self.errors: dict | None = errors if isinstance(errors, dict) else None


class UnauthorizedError(ApiError):
    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message, status_code=401, payload=payload)


class ForbiddenError(ApiError):
    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message, status_code=403, payload=payload)


class NotFoundError(ApiError):
    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message, status_code=404, payload=payload)


class ServerError(ApiError):
    pass


def _friendly_error_message(status_code: int) -> str:
    if status_code == 400:
        return "Validation failed."
    if status_code == 401:
        return "Unauthorized. Please login again."
    if status_code == 403:
        return "You don't have permission to perform this action."
    if status_code == 404:
        return "The requested resource was not found."
    if status_code >= 500:
        return "The server is experiencing issues. Please try again later."
    return f"Request failed with status {status_code}."


def _decode_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"raw": response.text}


def api_error_from_response(response: httpx.Response) -> ApiError:
    status_code = response.status_code
    payload = _decode_payload(response)

    message = _friendly_error_message(status_code)
    if isinstance(payload, dict):
        server_message = payload.get("message") or payload.get("error")
        if isinstance(server_message, str) and server_message:
            message = server_message

    if status_code == 400:
        return ValidationError(message, payload=payload)
    if status_code == 401:
        return UnauthorizedError(message, payload=payload)
    if status_code == 403:
        return ForbiddenError(message, payload=payload)
    if status_code == 404:
        return NotFoundError(message, payload=payload)
    return ServerError(message, status_code=status_code, payload=payload)


def raise_for_api_error(response: httpx.Response) -> None:
    if response.status_code < 400:
        return
    raise api_error_from_response(response)


def mask_headers(headers: httpx.Headers) -> dict[str, str]:
    return {
        key: "***" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


async def log_request(request: httpx.Request) -> None:
    LOGGER.info("API request %s %s", request.method, request.url)
    LOGGER.debug("API request headers: %s", mask_headers(request.headers))


async def log_response(response: httpx.Response) -> None:
    LOGGER.info(
        "API response %s %s -> %s",
        response.request.method,
        response.request.url,
        response.status_code,
    )
    if response.status_code >= 400:
        body = await response.aread()
        text = body.decode("utf-8", errors="replace")
        if len(text) > MAX_LOGGED_BODY_CHARS:
            text = text[:MAX_LOGGED_BODY_CHARS] + "...<truncated>"
        LOGGER.warning("API error body: %s", text)
