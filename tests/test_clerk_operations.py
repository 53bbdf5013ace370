"""Tests for the Clerk operation registry."""
import pytest

from nodepacks.clerk.errors import UnsupportedOperationError
from nodepacks.clerk.operations import (
    OPERATIONS,
    RESOURCES,
    Location,
    Resource,
    _build_index,
    all_operations,
    lookup,
    operations_for,
)


EXPECTED_COUNTS = {
    "users": 10,
    "organizations": 12,
    "sessions": 5,
    "emailAddresses": 4,
    "phoneNumbers": 4,
    "invitations": 3,
    "allowlistIdentifiers": 3,
    "blocklistIdentifiers": 3,
    "jwtTemplates": 5,
}


class TestRegistryContents:
    """The table covers every resource exactly once per operation."""

    def test_nine_resources(self):
        assert len(RESOURCES) == 9
        assert {r.value for r in RESOURCES} == set(EXPECTED_COUNTS)

    def test_operation_counts_per_resource(self):
        for resource, count in EXPECTED_COUNTS.items():
            assert len(operations_for(resource)) == count, resource

    def test_total_operations(self):
        assert len(all_operations()) == 49

    def test_pairs_are_unique(self):
        pairs = [(d.resource.value, d.operation) for d in OPERATIONS]
        assert len(pairs) == len(set(pairs))

    def test_methods_are_known(self):
        assert {d.method for d in OPERATIONS} <= {"GET", "POST", "PATCH", "DELETE"}

    def test_placeholders_match_path_fields(self):
        for descriptor in OPERATIONS:
            keys = [f.key for f in descriptor.path_fields]
            assert sorted(keys) == sorted(descriptor.placeholders), descriptor.operation
            assert all(f.required for f in descriptor.path_fields)

    def test_every_operation_has_display_name(self):
        for descriptor in OPERATIONS:
            assert descriptor.name
            assert descriptor.description


class TestLookup:
    """lookup() resolves pairs or names the unsupported one."""

    @pytest.mark.parametrize("resource,operation,method,path", [
        ("users", "getUser", "GET", "/users/{user_id}"),
        ("users", "banUser", "POST", "/users/{user_id}/ban"),
        ("users", "getUserOAuthAccessToken", "GET", "/users/{user_id}/oauth_access_tokens/{provider}"),
        ("organizations", "updateOrganizationMembership", "PATCH",
         "/organizations/{organization_id}/memberships/{user_id}"),
        ("organizations", "revokeOrganizationInvitation", "POST",
         "/organizations/{organization_id}/invitations/{invitation_id}/revoke"),
        ("sessions", "getSessionToken", "GET", "/sessions/{session_id}/tokens/{template_name}"),
        ("emailAddresses", "updateEmailAddress", "PATCH", "/email_addresses/{email_address_id}"),
        ("phoneNumbers", "createPhoneNumber", "POST", "/phone_numbers"),
        ("invitations", "revokeInvitation", "POST", "/invitations/{invitation_id}/revoke"),
        ("allowlistIdentifiers", "deleteAllowlistIdentifier", "DELETE", "/allowlist_identifiers/{identifier_id}"),
        ("blocklistIdentifiers", "createBlocklistIdentifier", "POST", "/blocklist_identifiers"),
        ("jwtTemplates", "updateJwtTemplate", "PATCH", "/jwt_templates/{template_id}"),
    ])
    def test_known_pairs(self, resource, operation, method, path):
        descriptor = lookup(resource, operation)
        assert descriptor.method == method
        assert descriptor.path == path

    def test_accepts_resource_enum(self):
        assert lookup(Resource.SESSIONS, "getSession").path == "/sessions/{session_id}"

    def test_unknown_operation(self):
        with pytest.raises(UnsupportedOperationError) as exc_info:
            lookup("users", "promoteUser")

        assert exc_info.value.resource == "users"
        assert exc_info.value.operation == "promoteUser"
        assert 'The operation "promoteUser" is not supported for resource "users"' in str(exc_info.value)

    def test_operation_under_wrong_resource(self):
        with pytest.raises(UnsupportedOperationError):
            lookup("sessions", "getUser")

    def test_unknown_resource(self):
        with pytest.raises(UnsupportedOperationError):
            lookup("webhooks", "getWebhooks")


class TestDescriptors:
    """Field layout of individual descriptors."""

    def test_get_user_has_no_body(self):
        descriptor = lookup("users", "getUser")
        assert not descriptor.has_body
        assert [f.param for f in descriptor.path_fields] == ["userId"]

    def test_revoke_organization_invitation_has_no_body(self):
        assert not lookup("organizations", "revokeOrganizationInvitation").has_body

    def test_create_user_body_keys(self):
        descriptor = lookup("users", "createUser")
        keys = [f.key for f in descriptor.body_fields]
        assert keys[:2] == ["email_address", "phone_number"]
        assert {"private_metadata", "public_metadata", "unsafe_metadata"} <= set(keys)

    def test_get_users_query_keys(self):
        descriptor = lookup("users", "getUsers")
        assert all(f.location is Location.QUERY for f in descriptor.fields)
        assert "last_active_at_since" in [f.key for f in descriptor.query_fields]

    def test_jwt_template_defaults(self):
        fields = {f.param: f for f in lookup("jwtTemplates", "createJwtTemplate").fields}
        assert fields["lifetime"].default == 3600
        assert fields["allowedClockSkew"].default == 5
        assert fields["signingAlgorithm"].default == "RS256"
        assert fields["claims"].always_send
        assert fields["signingKey"].only_if == "customSigningKey"


class TestBuildIndex:
    """Registry construction rejects inconsistent tables."""

    def test_duplicate_pair_rejected(self):
        descriptor = lookup("users", "getUser")
        with pytest.raises(ValueError, match="Duplicate operation"):
            _build_index((descriptor, descriptor))

    def test_placeholder_without_field_rejected(self):
        from dataclasses import replace

        broken = replace(lookup("users", "getUser"), fields=())
        with pytest.raises(ValueError, match="do not match"):
            _build_index((broken,))
