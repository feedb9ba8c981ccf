from __future__ import annotations

import httpx

from apiclient.constants import REFRESH_PATH
from auth.errors import TokenRefreshError
from auth.models import RefreshResponse


async def request_token_refresh(
    client: httpx.AsyncClient,
    refresh_token: str,
    *,
    path: str = REFRESH_PATH,
) -> RefreshResponse:
    """Exchange ``refresh_token`` for a new access token.

    ``client`` must be a plain client that does not route through the
    refresh coordinator, otherwise a 401 from this endpoint would recurse.
    """
    try:
        response = await client.post(path, json={"refresh_token": refresh_token})
        response.raise_for_status()
    except httpx.HTTPStatusError as error:
        raise TokenRefreshError(
            f"Token refresh failed with status {error.response.status_code}."
        ) from error
    except httpx.TimeoutException as error:
        raise TokenRefreshError("Token refresh timed out.") from error
    except httpx.HTTPError as error:
        raise TokenRefreshError(f"Token refresh request failed: {error}") from error

    try:
        return RefreshResponse.from_payload(response.json())
    except ValueError as error:
        raise TokenRefreshError(f"Invalid token refresh response: {error}") from error
