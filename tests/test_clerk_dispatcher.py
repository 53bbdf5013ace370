"""Tests for Clerk request building and dispatch."""
from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from nodepacks.clerk.dispatcher import ClerkDispatcher, build_request
from nodepacks.clerk.errors import InvalidJsonParameterError, UnsupportedOperationError
from nodepacks.clerk.operations import OPERATIONS, lookup
from nodepacks.clerk.resolver import ResolvedParameters
from src.node_sdk.basenode import NodeApiError

BASE_URL = "https://api.clerk.com/v1"
SECRET_KEY = "sk_test_123"


def _required_params(descriptor):
    """A value for every required field of a descriptor."""
    values = {"string": "val", "options": "val", "number": 1, "boolean": True,
              "json": '{"k": "v"}', "dateTime": "2024-01-01T00:00:00Z"}
    return {f.param: values[f.type] for f in descriptor.fields if f.required}


@pytest.fixture
def dispatcher():
    return ClerkDispatcher(BASE_URL, SECRET_KEY, timeout=30)


class TestBuildRequest:
    """Path substitution, query encoding and headers."""

    def test_path_segments_are_quoted(self):
        request = build_request(
            lookup("users", "getUser"),
            ResolvedParameters(path={"user_id": "user/1 x"}, query={}, body=None),
            BASE_URL,
            SECRET_KEY,
        )

        assert request.path == "/users/user%2F1%20x"
        assert request.url == f"{BASE_URL}/users/user%2F1%20x"

    def test_query_booleans_are_lowercase(self):
        request = build_request(
            lookup("organizations", "getOrganizations"),
            ResolvedParameters(path={}, query={"limit": 10, "include_members_count": True}, body=None),
            BASE_URL,
            SECRET_KEY,
        )

        assert request.path == "/organizations?limit=10&include_members_count=true"

    def test_no_query_string_when_empty(self):
        request = build_request(
            lookup("allowlistIdentifiers", "getAllowlistIdentifiers"),
            ResolvedParameters(path={}, query={}, body=None),
            BASE_URL + "/",
            SECRET_KEY,
        )

        assert request.url == f"{BASE_URL}/allowlist_identifiers"

    def test_headers(self):
        request = build_request(
            lookup("users", "getUsers"),
            ResolvedParameters(path={}, query={}, body=None),
            BASE_URL,
            SECRET_KEY,
        )

        assert request.headers == {
            "Authorization": "Bearer sk_test_123",
            "Content-Type": "application/json",
        }


class TestEveryOperation:
    """Each registered pair sends exactly one request with its method and path."""

    @pytest.mark.parametrize(
        "descriptor", OPERATIONS, ids=lambda d: f"{d.resource.value}.{d.operation}"
    )
    @patch("requests.request")
    def test_single_request(self, mock_request, descriptor, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(200, {"object": "ok"})

        params = _required_params(descriptor)
        result = dispatcher.dispatch(
            descriptor.resource.value, descriptor.operation, 0, make_source(params)
        )

        assert result == {"object": "ok"}
        assert mock_request.call_count == 1

        kwargs = mock_request.call_args[1]
        expected_path = descriptor.path.format(**{k: "val" for k in descriptor.placeholders})
        assert kwargs["method"] == descriptor.method
        assert urlsplit(kwargs["url"]).path == "/v1" + expected_path
        assert kwargs["headers"]["Authorization"] == "Bearer sk_test_123"
        assert kwargs["timeout"] == 30
        if descriptor.has_body:
            assert isinstance(kwargs["json"], dict)
        else:
            assert kwargs["json"] is None


class TestScenarios:
    """End-to-end request shapes."""

    @patch("requests.request")
    def test_get_user(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(200, {"id": "user_123"})

        result = dispatcher.dispatch("users", "getUser", 0, make_source({"userId": "user_123"}))

        kwargs = mock_request.call_args[1]
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == "https://api.clerk.com/v1/users/user_123"
        assert kwargs["headers"]["Authorization"] == "Bearer sk_test_123"
        assert kwargs["json"] is None
        assert result == {"id": "user_123"}

    @patch("requests.request")
    def test_create_organization(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(200, {"id": "org_1", "name": "Acme"})

        dispatcher.dispatch("organizations", "createOrganization", 0, make_source({"name": "Acme"}))

        kwargs = mock_request.call_args[1]
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "https://api.clerk.com/v1/organizations"
        assert kwargs["json"] == {"name": "Acme"}

    @patch("requests.request")
    def test_revoke_organization_invitation(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(200, {"id": "inv_1", "status": "revoked"})

        dispatcher.dispatch(
            "organizations",
            "revokeOrganizationInvitation",
            0,
            make_source({"organization_id": "org_1", "invitation_id": "inv_1"}),
        )

        kwargs = mock_request.call_args[1]
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "https://api.clerk.com/v1/organizations/org_1/invitations/inv_1/revoke"
        assert kwargs["json"] is None

    @patch("requests.request")
    def test_create_phone_number_keeps_false(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(200, {"id": "idn_1"})

        dispatcher.dispatch("phoneNumbers", "createPhoneNumber", 0, make_source({
            "userId": "user_1",
            "phoneNumber": "+15555550100",
            "verified": False,
        }))

        assert mock_request.call_args[1]["json"]["verified"] is False

    @patch("requests.request")
    def test_get_users_query_string(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(200, [{"id": "user_1"}])

        result = dispatcher.dispatch("users", "getUsers", 0, make_source({
            "emailAddress": "a@example.com",
            "lastActiveAtSince": "2024-01-01T00:00:00Z",
        }))

        query = parse_qs(urlsplit(mock_request.call_args[1]["url"]).query)
        assert query == {
            "limit": ["10"],
            "offset": ["0"],
            "email_address": ["a@example.com"],
            "last_active_at_since": ["1704067200000"],
        }
        # list payloads are returned as-is
        assert result == [{"id": "user_1"}]

    @patch("requests.request")
    def test_base_url_override(self, mock_request, make_source, make_response):
        mock_request.return_value = make_response(200, {"id": "sess_1"})
        dispatcher = ClerkDispatcher("http://localhost:8080/v1/", SECRET_KEY, timeout=5)

        dispatcher.dispatch("sessions", "getSession", 0, make_source({"sessionId": "sess_1"}))

        assert mock_request.call_args[1]["url"] == "http://localhost:8080/v1/sessions/sess_1"
        assert mock_request.call_args[1]["timeout"] == 5


class TestResponses:
    """Response decoding and error mapping."""

    @patch("requests.request")
    def test_empty_body_decodes_to_empty_dict(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(204, None)

        result = dispatcher.dispatch("users", "deleteUser", 0, make_source({"userId": "user_1"}))

        assert result == {}

    @patch("requests.request")
    def test_clerk_error_message(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(404, {
            "errors": [{
                "message": "not found",
                "long_message": "User not found",
                "code": "resource_not_found",
            }],
        }, reason="Not Found")

        with pytest.raises(NodeApiError) as exc_info:
            dispatcher.dispatch("users", "getUser", 3, make_source({"userId": "user_x"}))

        error = exc_info.value
        assert error.status_code == 404
        assert error.item_index == 3
        assert error.message == "Clerk API error (404): User not found"
        assert "resource_not_found" in error.response_body

    @patch("requests.request")
    def test_non_json_error_body(self, mock_request, dispatcher, make_source, make_response):
        mock_request.return_value = make_response(502, "<html>Bad Gateway</html>", reason="Bad Gateway")

        with pytest.raises(NodeApiError) as exc_info:
            dispatcher.dispatch("users", "getUser", 0, make_source({"userId": "user_1"}))

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Clerk API error (502): Bad Gateway"
        assert exc_info.value.response_body == "<html>Bad Gateway</html>"

    @patch("requests.request")
    def test_transport_error(self, mock_request, dispatcher, make_source):
        mock_request.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(NodeApiError) as exc_info:
            dispatcher.dispatch("users", "getUser", 0, make_source({"userId": "user_1"}))

        assert exc_info.value.status_code is None
        assert "connection refused" in exc_info.value.message

    @patch("requests.request")
    def test_timeout(self, mock_request, dispatcher, make_source):
        mock_request.side_effect = requests.exceptions.ReadTimeout("slow")

        with pytest.raises(NodeApiError) as exc_info:
            dispatcher.dispatch("users", "getUser", 0, make_source({"userId": "user_1"}))

        assert exc_info.value.status_code is None
        assert "timed out after 30s" in exc_info.value.message


class TestNothingSent:
    """Configuration and parameter errors never reach the network."""

    @patch("requests.request")
    def test_unknown_pair(self, mock_request, dispatcher, make_source):
        with pytest.raises(UnsupportedOperationError):
            dispatcher.dispatch("users", "mergeUsers", 0, make_source({}))

        mock_request.assert_not_called()

    @patch("requests.request")
    def test_malformed_json(self, mock_request, dispatcher, make_source):
        with pytest.raises(InvalidJsonParameterError):
            dispatcher.dispatch("users", "createUser", 0, make_source({"privateMetadata": "not json"}))

        mock_request.assert_not_called()

    def test_prepare_does_not_send(self, dispatcher, make_source):
        with patch("requests.request") as mock_request:
            request = dispatcher.prepare("users", "lockUser", 0, make_source({"userId": "user_1"}))

        mock_request.assert_not_called()
        assert request.method == "POST"
        assert request.url == f"{BASE_URL}/users/user_1/lock"
