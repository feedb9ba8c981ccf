from __future__ import annotations

import logging

LOGGER = logging.getLogger("apiclient.http")
APP_VERSION = "0.1.0"

DEFAULT_BASE_URL = "https://api-dev.yourapp.com"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_TOKEN_STORE_PATH = ".tokens.json"

API_VERSION = "/api/v1"
LOGIN_PATH = f"{API_VERSION}/auth/login"
REGISTER_PATH = f"{API_VERSION}/auth/register"
LOGOUT_PATH = f"{API_VERSION}/auth/logout"
REFRESH_PATH = f"{API_VERSION}/auth/refresh"
ME_PATH = f"{API_VERSION}/auth/me"

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"

DEFAULT_HEADERS = {
    "User-Agent": f"apiclient-refresh/{APP_VERSION}",
    "Content-Type": "application/json",
    "Accept": "application/json",
}
