import httpx
import pytest

from auth.errors import TokenRefreshError
from auth.models import RefreshResponse
from auth.refresh import request_token_refresh

BASE_URL = "https://api.example.com"
REFRESH_URL = f"{BASE_URL}/api/v1/auth/refresh"


@pytest.mark.asyncio
async def test_refresh_posts_refresh_token(httpx_mock) -> None:
    httpx_mock.add_response(
        url=REFRESH_URL,
        method="POST",
        match_json={"refresh_token": "R1"},
        json={"access_token": "A2", "refresh_token": "R2"},
    )

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        tokens = await request_token_refresh(client, "R1")

    assert tokens == RefreshResponse(access_token="A2", refresh_token="R2")


@pytest.mark.asyncio
async def test_refresh_without_rotation(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="POST", json={"access_token": "A2"})

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        tokens = await request_token_refresh(client, "R1")

    assert tokens.access_token == "A2"
    assert tokens.refresh_token is None


@pytest.mark.asyncio
async def test_refresh_error_status(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="POST", status_code=403, json={"message": "no"})

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(TokenRefreshError, match="status 403"):
            await request_token_refresh(client, "R1")


@pytest.mark.asyncio
async def test_refresh_missing_access_token(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="POST", json={"token": "A2"})

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(TokenRefreshError, match="missing access_token"):
            await request_token_refresh(client, "R1")


@pytest.mark.asyncio
async def test_refresh_non_json_body(httpx_mock) -> None:
    httpx_mock.add_response(url=REFRESH_URL, method="POST", text="<html>oops</html>")

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(TokenRefreshError, match="Invalid token refresh response"):
            await request_token_refresh(client, "R1")


@pytest.mark.asyncio
async def test_refresh_network_error(httpx_mock) -> None:
    httpx_mock.add_exception(httpx.ConnectError("connection refused"))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(TokenRefreshError, match="request failed"):
            await request_token_refresh(client, "R1")


@pytest.mark.asyncio
async def test_refresh_timeout(httpx_mock) -> None:
    httpx_mock.add_exception(httpx.ReadTimeout("too slow"))

    async with httpx.AsyncClient(base_url=BASE_URL) as client:
        with pytest.raises(TokenRefreshError, match="timed out"):
            await request_token_refresh(client, "R1")


def test_refresh_response_ignores_empty_refresh_token() -> None:
    tokens = RefreshResponse.from_payload({"access_token": "A2", "refresh_token": ""})

    assert tokens.refresh_token is None


def test_refresh_response_rejects_list_payload() -> None:
    with pytest.raises(ValueError, match="JSON object"):
        RefreshResponse.from_payload([{"access_token": "A2"}])
