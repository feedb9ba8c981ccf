from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum

import httpx


@dataclass
class Credentials:
    access_token: str
    refresh_token: str


class RefreshState(Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class PendingRequest:
    """A request that hit a 401 while a refresh was already in flight."""

    request: httpx.Request
    future: asyncio.Future[httpx.Response]

    @property
    def done(self) -> bool:
        return self.future.done()

    def resolve(self, response: httpx.Response) -> None:
        # The waiting caller may have been cancelled in the meantime.
        if not self.future.done():
            self.future.set_result(response)

    def reject(self, error: BaseException) -> None:
        if not self.future.done():
            self.future.set_exception(error)


@dataclass
class RefreshResponse:
    access_token: str
    refresh_token: str | None = None

    @classmethod
    def from_payload(cls, payload: object) -> "RefreshResponse":
        if not isinstance(payload, dict):
            raise ValueError("Refresh response must be a JSON object.")

        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")

        if not isinstance(access_token, str) or not access_token:
            raise ValueError("Refresh response missing access_token.")
        if not isinstance(refresh_token, str) or not refresh_token:
            refresh_token = None

        return cls(access_token=access_token, refresh_token=refresh_token)


@dataclass
class User:
    id: str
    email: str
    name: str
    avatar: str | None = None

    @classmethod
    def from_payload(cls, payload: object) -> "User":
        if not isinstance(payload, dict):
            raise ValueError("User payload must be a JSON object.")

        user_id = payload.get("id")
        email = payload.get("email")
        name = payload.get("name")
        avatar = payload.get("avatar")

        if isinstance(user_id, int) and not isinstance(user_id, bool):
            user_id = str(user_id)
        if not isinstance(user_id, str) or not user_id:
            raise ValueError("User payload missing id.")
        if not isinstance(email, str):
            raise ValueError("User payload missing email.")
        if not isinstance(name, str):
            raise ValueError("User payload missing name.")
        if avatar is not None and not isinstance(avatar, str):
            raise ValueError("User avatar must be a string.")

        return cls(id=user_id, email=email, name=name, avatar=avatar)
