"""
Outbound HTTP for nodes.

Thin layer over ``requests.request``: every call carries a timeout, and
transport failures surface as the two exception types below instead of
raw ``requests`` exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.exceptions import RequestException, Timeout


logger = logging.getLogger(__name__)

# Seconds; used when neither the client nor the call sets one
DEFAULT_TIMEOUT = 30

# Response text kept on errors is cut to this many characters
MAX_ERROR_BODY = 1000


class HttpApiError(Exception):
    """The request failed, either on the wire or with an error status."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        url: Optional[str] = None,
        method: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.url = url
        self.method = method


class NodeTimeoutError(HttpApiError):
    """No response arrived within the timeout."""

    def __init__(self, message: str, timeout: float, url: str):
        super().__init__(message, url=url)
        self.timeout = timeout


class HttpResponse:
    """Read-only view of a ``requests.Response``."""

    def __init__(self, response: requests.Response):
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason(self) -> str:
        return self._response.reason or ""

    @property
    def text(self) -> str:
        return self._response.text

    @property
    def ok(self) -> bool:
        """Any 2xx status."""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decoded body; no content at all (204 and friends) reads as {}."""
        if not self._response.content:
            return {}
        return self._response.json()

    def raise_for_status(self) -> None:
        if self.ok:
            return
        request = self._response.request
        raise HttpApiError(
            f"HTTP {self.status_code}: {self.reason}",
            status_code=self.status_code,
            response_body=self.text[:MAX_ERROR_BODY] or None,
            url=str(self._response.url),
            method=request.method if request is not None else None,
        )


class HttpClient:
    """
    Timeout-bounded client with optional base URL and bearer auth.

    Usage:
        client = HttpClient(base_url="https://api.clerk.com/v1", bearer_token="sk_test_...")
        users = client.get("/users", params={"limit": 10}).json()

    Without a base URL, endpoints are taken as absolute URLs.
    """

    def __init__(
        self,
        base_url: str = "",
        default_headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        bearer_token: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers: Dict[str, str] = {**(default_headers or {})}
        if bearer_token:
            self.headers["Authorization"] = f"Bearer {bearer_token}"

    def build_url(self, endpoint: str) -> str:
        if not self.base_url:
            return endpoint
        return self.base_url + endpoint

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """
        Send one request. Error statuses are returned, not raised.

        Raises:
            NodeTimeoutError: No response within the timeout
            HttpApiError: Connection or protocol failure
        """
        url = self.build_url(endpoint)
        effective_timeout = timeout or self.timeout

        try:
            response = requests.request(
                method=method,
                url=url,
                params=params,
                json=json,
                data=data,
                headers={**self.headers, **(headers or {})},
                timeout=effective_timeout,
            )
        except Timeout as e:
            raise NodeTimeoutError(
                f"Request timed out after {effective_timeout}s",
                timeout=effective_timeout,
                url=url,
            ) from e
        except RequestException as e:
            raise HttpApiError(f"Request failed: {e}", url=url, method=method) from e

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return HttpResponse(response)

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> HttpResponse:
        return self.request("GET", endpoint, params=params, **kwargs)
