from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import dataclass

import httpx

from apiclient.api import ApiClient
from apiclient.constants import DEFAULT_HEADERS, LOGGER
from apiclient.env import Settings, load_env, load_settings, setup_logging
from apiclient.http import AuthTransport, log_request, log_response
from auth.coordinator import TokenRefreshCoordinator
from auth.session import AuthSession
from auth.token_store import FileTokenStore, TokenStore


@dataclass
class Client:
    api: ApiClient
    session: AuthSession
    coordinator: TokenRefreshCoordinator
    refresh_client: httpx.AsyncClient

    async def aclose(self) -> None:
        await self.api.aclose()
        await self.refresh_client.aclose()


def create_client(
    settings: Settings | None = None,
    *,
    token_store: TokenStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    refresh_transport: httpx.AsyncBaseTransport | None = None,
) -> Client:
    if settings is None:
        load_env()
        settings = load_settings()
    debug_enabled = setup_logging(settings.debug)

    if token_store is None:
        token_store = FileTokenStore(settings.token_store_path)

    base_transport = transport or httpx.AsyncHTTPTransport()

    # Separate client without hooks or AuthTransport so refresh never recurses.
    refresh_client = httpx.AsyncClient(
        base_url=settings.base_url,
        headers=DEFAULT_HEADERS,
        timeout=settings.timeout,
        transport=refresh_transport or httpx.AsyncHTTPTransport(),
    )
    coordinator = TokenRefreshCoordinator(
        token_store,
        base_transport,
        refresh_client,
        logger=LOGGER,
    )

    event_hooks: dict[str, list] = {"request": [], "response": []}
    if debug_enabled:
        event_hooks = {"request": [log_request], "response": [log_response]}

    http_client = httpx.AsyncClient(
        base_url=settings.base_url,
        headers=DEFAULT_HEADERS,
        timeout=settings.timeout,
        transport=AuthTransport(base_transport, coordinator, logger=LOGGER),
        event_hooks=event_hooks,
    )
    api = ApiClient(http_client)
    session = AuthSession(api, token_store, logger=LOGGER)
    return Client(
        api=api,
        session=session,
        coordinator=coordinator,
        refresh_client=refresh_client,
    )


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Call the API with stored credentials.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    login = subcommands.add_parser("login", help="Sign in and store tokens.")
    login.add_argument("email")
    login.add_argument("password")

    subcommands.add_parser("logout", help="Sign out and clear stored tokens.")
    subcommands.add_parser("me", help="Show the signed-in user.")

    request = subcommands.add_parser("request", help="Send an authenticated request.")
    request.add_argument("method", type=str.upper)
    request.add_argument("path")
    request.add_argument("--json", dest="body", help="JSON request body.")

    return parser.parse_args(argv)


async def run(args: argparse.Namespace, client: Client) -> object:
    try:
        if args.command == "login":
            user = await client.session.login(args.email, args.password)
            return {"id": user.id, "email": user.email, "name": user.name}
        if args.command == "logout":
            await client.session.logout()
            return {"status": "logged_out"}
        if args.command == "me":
            user = await client.session.current_user()
            return {"id": user.id, "email": user.email, "name": user.name, "avatar": user.avatar}

        body = json.loads(args.body) if args.body else None
        return await client.api.request(args.method, args.path, json=body)
    finally:
        await client.aclose()


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    client = create_client()
    result = asyncio.run(run(args, client))
    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
