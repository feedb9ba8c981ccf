from __future__ import annotations

import httpx


class TransportFailure(RuntimeError):
    """Network-level failure (DNS, connect, timeout). Never retried."""

    def __init__(
        self,
        message: str,
        *,
        request: httpx.Request | None = None,
        timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.request = request
        self.timeout = timeout
        self.status_code = None


class AuthExpired(RuntimeError):
    def __init__(
        self,
        message: str = "Authentication expired. Please login again.",
        *,
        request: httpx.Request | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message)
        self.request = request
        self.response = response
        self.status_code = 401


class RefreshFailed(AuthExpired):
    """The token refresh failed and the stored credentials were purged.

    ``response`` is the 401 that triggered the refresh, not the refresh reply.
    """

    def __init__(
        self,
        request: httpx.Request,
        response: httpx.Response,
        message: str = "Token refresh failed; login required.",
    ) -> None:
        super().__init__(message, request=request, response=response)


class QueuedRequestAborted(AuthExpired):
    def __init__(
        self,
        request: httpx.Request,
        message: str = "Token refresh failed; queued request aborted.",
    ) -> None:
        super().__init__(message, request=request)


class TokenRefreshError(RuntimeError):
    pass
