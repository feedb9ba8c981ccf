from __future__ import annotations

import logging

from apiclient.api import ApiClient
from apiclient.constants import (
    ACCESS_TOKEN_KEY,
    LOGGER,
    LOGIN_PATH,
    LOGOUT_PATH,
    ME_PATH,
    REGISTER_PATH,
)
from apiclient.http import ApiError
from auth.errors import AuthExpired, TransportFailure
from auth.models import Credentials, User
from auth.token_store import TokenStore


class AuthSession:
    """Login, registration and logout flows that own writes to the token store."""

    def __init__(
        self,
        api: ApiClient,
        token_store: TokenStore,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api = api
        self._token_store = token_store
        self._logger = logger or LOGGER

    async def login(self, email: str, password: str) -> User:
        payload = await self._api.post(
            LOGIN_PATH,
            json={"email": email, "password": password},
        )
        return await self._store_session(payload)

    async def register(self, email: str, password: str, name: str) -> User:
        payload = await self._api.post(
            REGISTER_PATH,
            json={"email": email, "password": password, "name": name},
        )
        return await self._store_session(payload)

    async def logout(self) -> None:
        try:
            await self._api.post(LOGOUT_PATH)
        except (ApiError, AuthExpired, TransportFailure) as error:
            self._logger.warning("Logout request failed, clearing tokens anyway: %s", error)
        finally:
            await self._token_store.clear()

    async def current_user(self) -> User:
        payload = await self._api.get(ME_PATH)
        try:
            return User.from_payload(payload)
        except ValueError as error:
            raise ApiError(f"Invalid user response: {error}", payload=payload) from error

    async def is_authenticated(self) -> bool:
        token = await self._token_store.read(ACCESS_TOKEN_KEY)
        return bool(token)

    async def _store_session(self, payload: object) -> User:
        if not isinstance(payload, dict):
            raise ApiError("Authentication response must be a JSON object.", payload=payload)

        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        if not isinstance(access_token, str) or not access_token:
            raise ApiError("Authentication response missing access_token.", payload=payload)
        if not isinstance(refresh_token, str) or not refresh_token:
            raise ApiError("Authentication response missing refresh_token.", payload=payload)

        try:
            user = User.from_payload(payload.get("user"))
        except ValueError as error:
            raise ApiError(f"Invalid user in authentication response: {error}", payload=payload) from error

        await self._token_store.save_credentials(
            Credentials(access_token=access_token, refresh_token=refresh_token)
        )
        self._logger.info("Signed in as %s", user.email)
        return user
