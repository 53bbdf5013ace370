"""Pytest configuration and fixtures."""
import json
import os

import pytest
import requests

# Set test environment variables
os.environ["CLERK_NODE_ENV"] = "test"
os.environ["CLERK_NODE_LOG_LEVEL"] = "INFO"

from src.config import reset_settings  # noqa: E402
from src.node_sdk.basenode import ABSENT, NodeExecutionContext, RawParameter  # noqa: E402


BASE_URL = "https://api.clerk.com/v1"
SECRET_KEY = "sk_test_123"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Each test sees settings built from its own environment."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def make_response():
    """Build real requests.Response objects for mocked requests.request calls."""

    def _make(status_code=200, body=None, reason=None, url=BASE_URL):
        response = requests.Response()
        response.status_code = status_code
        response.reason = reason or ("OK" if status_code < 400 else "Error")
        response.url = url
        response.encoding = "utf-8"
        if body is None:
            response._content = b""
        elif isinstance(body, (bytes, str)):
            response._content = body.encode() if isinstance(body, str) else body
        else:
            response._content = json.dumps(body).encode()
        return response

    return _make


@pytest.fixture
def make_source():
    """Parameter source backed by a plain dict (same values for every item)."""

    def _make(params):
        def source(name, item_index):
            if name in params and params[name] is not None:
                return RawParameter(True, params[name])
            return ABSENT

        return source

    return _make


@pytest.fixture
def make_context():
    """Create a Clerk node execution context."""

    def _make(
        resource,
        operation,
        items=1,
        parameters=None,
        item_parameters=None,
        credentials=None,
        continue_on_fail=False,
        timeout=None,
    ):
        shared = {"resource": resource, "operation": operation}
        shared.update(parameters or {})
        return NodeExecutionContext(
            parameters=shared,
            credentials=credentials if credentials is not None else {
                "clerkAuthApi": {"secretKey": SECRET_KEY},
            },
            input_data=[{"json": {"index": i}} for i in range(items)],
            item_parameters=item_parameters,
            continue_on_fail=continue_on_fail,
            timeout=timeout,
            workflow_id="wf-test",
            node_name="Clerk Auth",
        )

    return _make
