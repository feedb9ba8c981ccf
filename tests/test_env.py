import pytest

from apiclient.env import is_truthy, load_settings, validate_base_url


def _clear_env(monkeypatch) -> None:
    for key in ("API_BASE_URL", "API_TIMEOUT", "API_DEBUG", "TOKEN_STORE_PATH"):
        monkeypatch.delenv(key, raising=False)


def test_defaults(monkeypatch) -> None:
    _clear_env(monkeypatch)

    settings = load_settings()

    assert settings.base_url == "https://api-dev.yourapp.com"
    assert settings.timeout == 30.0
    assert settings.debug is True
    assert settings.token_store_path == ".tokens.json"


def test_reads_environment(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("API_BASE_URL", "https://api.yourapp.com/")
    monkeypatch.setenv("API_TIMEOUT", "12.5")
    monkeypatch.setenv("API_DEBUG", "off")
    monkeypatch.setenv("TOKEN_STORE_PATH", "/tmp/tokens.json")

    settings = load_settings()

    assert settings.base_url == "https://api.yourapp.com"
    assert settings.timeout == 12.5
    assert settings.debug is False
    assert settings.token_store_path == "/tmp/tokens.json"


@pytest.mark.parametrize("raw", ["not a url", "ftp://files.example.com", ""])
def test_invalid_base_url(raw) -> None:
    with pytest.raises(RuntimeError, match="API_BASE_URL"):
        validate_base_url(raw)


@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_invalid_timeout(monkeypatch, raw) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("API_TIMEOUT", raw)

    with pytest.raises(RuntimeError, match="API_TIMEOUT"):
        load_settings()


def test_is_truthy() -> None:
    assert is_truthy(" YES ")
    assert not is_truthy("0")
    assert not is_truthy(None)
