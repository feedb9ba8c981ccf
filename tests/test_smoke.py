import client
from apiclient.env import Settings
from auth.token_store import MemoryTokenStore


def test_create_client_wires_components() -> None:
    settings = Settings(
        base_url="https://api.example.com",
        timeout=5.0,
        debug=False,
        token_store_path="unused.json",
    )

    created = client.create_client(settings, token_store=MemoryTokenStore())

    assert created.api.http_client.base_url.host == "api.example.com"
    assert created.refresh_client.base_url.host == "api.example.com"
    assert created.coordinator.is_refreshing is False


def test_user_agent_carries_version() -> None:
    from apiclient.constants import APP_VERSION, DEFAULT_HEADERS

    assert DEFAULT_HEADERS["User-Agent"] == f"apiclient-refresh/{APP_VERSION}"
