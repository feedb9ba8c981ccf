from __future__ import annotations

from apiclient.constants import LOGIN_PATH, REFRESH_PATH, REGISTER_PATH

PUBLIC_ENDPOINTS = frozenset({LOGIN_PATH, REGISTER_PATH, REFRESH_PATH})


def is_public_endpoint(path: str, public_paths: frozenset[str] = PUBLIC_ENDPOINTS) -> bool:
    """Return True when ``path`` needs no Authorization header.

    Matching is on the path suffix so a base URL prefix does not matter.
    """
    normalized = path.rstrip("/") or "/"
    return any(normalized.endswith(endpoint.rstrip("/")) for endpoint in public_paths)


def extract_bearer_token(authorization_header: str | None) -> str | None:
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
