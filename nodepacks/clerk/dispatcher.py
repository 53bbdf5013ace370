"""
Request dispatch for the Clerk Backend API.

One generic routine serves every operation: look the pair up in the
operation registry, resolve the item's parameters, build the request and
send it exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

from src.node_sdk.basenode import NodeApiError
from src.node_sdk.http import MAX_ERROR_BODY, HttpApiError, HttpClient, HttpResponse, NodeTimeoutError

from .operations import OperationDescriptor, lookup
from .resolver import ParameterSource, ResolvedParameters, resolve


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRequest:
    method: str
    path: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def build_request(
    descriptor: OperationDescriptor,
    resolved: ResolvedParameters,
    base_url: str,
    secret_key: str,
) -> ResolvedRequest:
    """Substitute path placeholders, encode the query and attach auth headers."""
    path = descriptor.path
    for key, value in resolved.path.items():
        path = path.replace("{%s}" % key, quote(str(value), safe=""))

    if resolved.query:
        query = urlencode(
            [(key, _query_value(value)) for key, value in resolved.query.items()],
            doseq=True,
        )
        path = f"{path}?{query}"

    return ResolvedRequest(
        method=descriptor.method,
        path=path,
        url=f"{base_url.rstrip('/')}{path}",
        headers={
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        },
        body=resolved.body,
    )


def error_message(response: HttpResponse) -> str:
    """Best human-readable message from a Clerk error response."""
    detail = None
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        errors = payload.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            detail = errors[0].get("long_message") or errors[0].get("message")
        if not detail:
            detail = payload.get("message")

    if not detail:
        detail = response.reason or "Request failed"
    return f"Clerk API error ({response.status_code}): {detail}"


def decode_body(response: HttpResponse) -> Any:
    """Decode a successful response, keeping lists and objects as they are."""
    try:
        return response.json()
    except ValueError:
        return {"text": response.text}


class ClerkDispatcher:
    """
    Sends Clerk operations for one node execution.

    Usage:
        dispatcher = ClerkDispatcher("https://api.clerk.com/v1", "sk_test_...", timeout=30)
        user = dispatcher.dispatch("users", "getUser", 0, source)
    """

    def __init__(
        self,
        base_url: str,
        secret_key: str,
        timeout: float,
        http_client: Optional[HttpClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.secret_key = secret_key
        self.timeout = timeout
        self.http_client = http_client or HttpClient(timeout=timeout)

    def prepare(self, resource: str, operation: str, item_index: int,
                source: ParameterSource) -> ResolvedRequest:
        """Build the request for one item without sending it."""
        descriptor = lookup(resource, operation)
        resolved = resolve(descriptor, item_index, source)
        return build_request(descriptor, resolved, self.base_url, self.secret_key)

    def send(self, request: ResolvedRequest, item_index: Optional[int] = None) -> Any:
        """
        Send a prepared request once.

        Returns:
            The decoded response body, unchanged

        Raises:
            NodeApiError: On a non-2xx status or a transport failure
        """
        logger.debug(
            "Clerk request %s %s",
            request.method,
            request.path,
            extra={"item_index": item_index},
        )

        try:
            response = self.http_client.request(
                request.method,
                request.url,
                json=request.body,
                headers=request.headers,
                timeout=self.timeout,
            )
        except NodeTimeoutError as e:
            raise NodeApiError(
                f"Clerk API request timed out after {e.timeout}s",
                item_index=item_index,
            ) from e
        except HttpApiError as e:
            raise NodeApiError(str(e), item_index=item_index) from e

        if not response.ok:
            raise NodeApiError(
                error_message(response),
                status_code=response.status_code,
                response_body=response.text[:MAX_ERROR_BODY] if response.text else None,
                item_index=item_index,
            )

        return decode_body(response)

    def dispatch(self, resource: str, operation: str, item_index: int,
                 source: ParameterSource) -> Any:
        """Resolve, build and send one operation for one item."""
        request = self.prepare(resource, operation, item_index, source)
        return self.send(request, item_index)
