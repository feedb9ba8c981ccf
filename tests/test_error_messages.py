import httpx

from apiclient.http import (
    ForbiddenError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    ValidationError,
    api_error_from_response,
    mask_headers,
)


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(
        status,
        request=httpx.Request("GET", "https://api.example.com/orders"),
        **kwargs,
    )


def test_400_carries_field_errors() -> None:
    error = api_error_from_response(
        _response(400, json={"message": "Invalid order", "errors": {"quantity": ["must be positive"]}})
    )

    assert isinstance(error, ValidationError)
    assert str(error) == "Invalid order"
    assert error.errors == {"quantity": ["must be positive"]}


def test_401_message() -> None:
    error = api_error_from_response(_response(401, json={"detail": "unauthorized"}))

    assert isinstance(error, UnauthorizedError)
    assert str(error) == "Unauthorized. Please login again."


def test_403_prefers_error_field() -> None:
    error = api_error_from_response(_response(403, json={"error": "Admins only"}))

    assert isinstance(error, ForbiddenError)
    assert str(error) == "Admins only"


def test_404_message() -> None:
    error = api_error_from_response(_response(404, json={}))

    assert isinstance(error, NotFoundError)
    assert str(error) == "The requested resource was not found."


def test_5xx_message() -> None:
    error = api_error_from_response(_response(502, text="bad gateway"))

    assert isinstance(error, ServerError)
    assert error.status_code == 502
    assert str(error) == "The server is experiencing issues. Please try again later."
    assert error.payload == {"raw": "bad gateway"}


def test_other_4xx_message() -> None:
    error = api_error_from_response(_response(409, json=["conflict"]))

    assert isinstance(error, ServerError)
    assert str(error) == "Request failed with status 409."


def test_authorization_header_is_masked() -> None:
    headers = httpx.Headers({"Authorization": "Bearer A1", "Accept": "application/json"})

    masked = mask_headers(headers)

    assert masked["authorization"] == "***"
    assert masked["accept"] == "application/json"
