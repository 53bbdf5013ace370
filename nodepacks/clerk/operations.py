"""
Operation registry for the Clerk Backend API.

Every (resource, operation) pair the node exposes is described once here:
HTTP method, path template and the ordered list of parameters that feed the
path, the query string and the JSON body. The dispatcher and the node's
parameter schema are both driven from this table.

API reference: https://clerk.com/docs/reference/backend-api
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import UnsupportedOperationError


class Resource(str, Enum):
    USERS = "users"
    ORGANIZATIONS = "organizations"
    SESSIONS = "sessions"
    EMAIL_ADDRESSES = "emailAddresses"
    PHONE_NUMBERS = "phoneNumbers"
    INVITATIONS = "invitations"
    ALLOWLIST_IDENTIFIERS = "allowlistIdentifiers"
    BLOCKLIST_IDENTIFIERS = "blocklistIdentifiers"
    JWT_TEMPLATES = "jwtTemplates"


RESOURCE_DISPLAY_NAMES: Dict[Resource, str] = {
    Resource.USERS: "User",
    Resource.ORGANIZATIONS: "Organization",
    Resource.SESSIONS: "Session",
    Resource.EMAIL_ADDRESSES: "Email Address",
    Resource.PHONE_NUMBERS: "Phone Number",
    Resource.INVITATIONS: "Invitation",
    Resource.ALLOWLIST_IDENTIFIERS: "Allowlist Identifier",
    Resource.BLOCKLIST_IDENTIFIERS: "Blocklist Identifier",
    Resource.JWT_TEMPLATES: "JWT Template",
}


class Location(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"


class Transform(str, Enum):
    IDENTITY = "identity"
    JSON = "json"                  # JSON text -> object
    LIST = "list"                  # scalar -> one-element list
    TIMESTAMP_MS = "timestamp_ms"  # ISO-8601 date-time -> epoch milliseconds


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class FieldSpec:
    """
    One host parameter and where it lands in the request.

    ``default`` is applied when the host did not supply the parameter;
    fields without a default are simply left out of the request.
    """
    param: str
    key: str
    location: Location
    type: str = "string"
    transform: Transform = Transform.IDENTITY
    required: bool = False
    default: Any = NO_DEFAULT
    always_send: bool = False
    only_if: Optional[str] = None
    options: Tuple[Tuple[str, str], ...] = ()
    description: str = ""

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


@dataclass(frozen=True)
class OperationDescriptor:
    """Static HTTP shape of one operation."""
    resource: Resource
    operation: str
    method: str
    path: str
    fields: Tuple[FieldSpec, ...] = ()
    name: str = ""
    description: str = ""

    @property
    def path_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.location is Location.PATH)

    @property
    def query_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.location is Location.QUERY)

    @property
    def body_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.location is Location.BODY)

    @property
    def has_body(self) -> bool:
        return bool(self.body_fields)

    @property
    def placeholders(self) -> List[str]:
        return re.findall(r"{(\w+)}", self.path)


# ==============================================================================
# Field helpers
# ==============================================================================

def path(param: str, key: str, description: str = "") -> FieldSpec:
    """Path placeholder; always required."""
    return FieldSpec(param, key, Location.PATH, required=True, description=description)


def query(param: str, key: Optional[str] = None, **kwargs: Any) -> FieldSpec:
    return FieldSpec(param, key or param, Location.QUERY, **kwargs)


def body(param: str, key: Optional[str] = None, **kwargs: Any) -> FieldSpec:
    return FieldSpec(param, key or param, Location.BODY, **kwargs)


def metadata(param: str, key: Optional[str] = None, **kwargs: Any) -> FieldSpec:
    """JSON object body field, supplied as text. "{}" means no value."""
    kwargs.setdefault("default", "{}")
    return body(param, key, type="json", transform=Transform.JSON, **kwargs)


def limit(default: Any = 10) -> FieldSpec:
    return query("limit", type="number", default=default,
                 description="Maximum number of results to return")


def offset(default: Any = 0) -> FieldSpec:
    return query("offset", type="number", default=default,
                 description="Number of results to skip")


ORDER_BY = (("Created At", "created_at"), ("Name", "name"))
PROVIDERS = (
    ("Google", "google"), ("Facebook", "facebook"), ("Twitter", "twitter"),
    ("GitHub", "github"), ("LinkedIn", "linkedin"),
)
SESSION_STATUSES = (("All", ""), ("Active", "active"), ("Expired", "expired"), ("Revoked", "revoked"))
INVITATION_STATUSES = (("All", ""), ("Pending", "pending"), ("Accepted", "accepted"), ("Revoked", "revoked"))
SIGNING_ALGORITHMS = tuple((alg, alg) for alg in ("RS256", "RS384", "RS512", "ES256", "ES384", "ES512"))

USER_ID = path("userId", "user_id", "The ID of the user")
ORGANIZATION_ID = path("organization_id", "organization_id", "The ID or slug of the organization")
MEMBER_USER_ID = path("user_id", "user_id", "The ID of the member user")
SESSION_ID = path("sessionId", "session_id", "The ID of the session")
EMAIL_ADDRESS_ID = path("emailAddressId", "email_address_id", "The ID of the email address")
PHONE_NUMBER_ID = path("phoneNumberId", "phone_number_id", "The ID of the phone number")
INVITATION_ID = path("invitation_id", "invitation_id", "The ID of the invitation")
IDENTIFIER_ID = path("identifierId", "identifier_id", "The ID of the identifier")
TEMPLATE_ID = path("templateId", "template_id", "The ID of the JWT template")

USER_METADATA = (
    metadata("privateMetadata", "private_metadata"),
    metadata("publicMetadata", "public_metadata"),
    metadata("unsafeMetadata", "unsafe_metadata"),
)
ORG_METADATA = (
    metadata("private_metadata"),
    metadata("public_metadata"),
)


def _op(resource: Resource, operation: str, method: str, path_template: str,
        name: str, description: str, *fields: FieldSpec) -> OperationDescriptor:
    return OperationDescriptor(
        resource=resource,
        operation=operation,
        method=method,
        path=path_template,
        fields=tuple(fields),
        name=name,
        description=description,
    )


U, O, S = Resource.USERS, Resource.ORGANIZATIONS, Resource.SESSIONS
E, P, I = Resource.EMAIL_ADDRESSES, Resource.PHONE_NUMBERS, Resource.INVITATIONS
A, B, J = Resource.ALLOWLIST_IDENTIFIERS, Resource.BLOCKLIST_IDENTIFIERS, Resource.JWT_TEMPLATES


OPERATIONS: Tuple[OperationDescriptor, ...] = (
    # ==== Users ====
    _op(U, "getUsers", "GET", "/users", "Get Users", "Retrieve all users with pagination",
        limit(), offset(),
        query("emailAddress", "email_address"),
        query("phoneNumber", "phone_number"),
        query("username"),
        query("organizationId", "organization_id"),
        query("query", description="Search across email, phone, username, name and ID"),
        query("lastActiveAtSince", "last_active_at_since", type="dateTime",
              transform=Transform.TIMESTAMP_MS)),
    _op(U, "getUser", "GET", "/users/{user_id}", "Get User", "Get a specific user by ID",
        USER_ID),
    _op(U, "createUser", "POST", "/users", "Create User", "Create a new user account",
        body("emailAddress", "email_address", transform=Transform.LIST),
        body("phoneNumber", "phone_number", transform=Transform.LIST),
        body("username"),
        body("password"),
        body("firstName", "first_name"),
        body("lastName", "last_name"),
        body("externalId", "external_id"),
        *USER_METADATA),
    _op(U, "updateUser", "PATCH", "/users/{user_id}", "Update User", "Update user information",
        USER_ID,
        body("firstName", "first_name"),
        body("lastName", "last_name"),
        body("primaryEmailAddressId", "primary_email_address_id"),
        body("primaryPhoneNumberId", "primary_phone_number_id"),
        body("primaryWeb3WalletId", "primary_web3_wallet_id"),
        body("username"),
        body("profileImageId", "profile_image_id"),
        body("password"),
        body("skipPasswordChecks", "skip_password_checks", type="boolean"),
        body("signOutOfOtherSessions", "sign_out_of_other_sessions", type="boolean"),
        *USER_METADATA),
    _op(U, "deleteUser", "DELETE", "/users/{user_id}", "Delete User", "Delete a user account",
        USER_ID),
    _op(U, "getUserOAuthAccessToken", "GET", "/users/{user_id}/oauth_access_tokens/{provider}",
        "Get OAuth Access Token", "Get the user's OAuth access token",
        USER_ID,
        FieldSpec("provider", "provider", Location.PATH, type="options", required=True,
                  default="google", options=PROVIDERS, description="The OAuth provider")),
    _op(U, "banUser", "POST", "/users/{user_id}/ban", "Ban User", "Ban a user account",
        USER_ID),
    _op(U, "unbanUser", "POST", "/users/{user_id}/unban", "Unban User", "Unban a user account",
        USER_ID),
    _op(U, "lockUser", "POST", "/users/{user_id}/lock", "Lock User", "Lock a user account",
        USER_ID),
    _op(U, "unlockUser", "POST", "/users/{user_id}/unlock", "Unlock User", "Unlock a user account",
        USER_ID),

    # ==== Organizations ====
    _op(O, "getOrganizations", "GET", "/organizations", "Get Organizations", "List all organizations",
        limit(), offset(),
        query("include_members_count", type="boolean"),
        query("query"),
        query("order_by", type="options", default="created_at", options=ORDER_BY)),
    _op(O, "getOrganization", "GET", "/organizations/{organization_id}", "Get Organization",
        "Get a specific organization",
        ORGANIZATION_ID,
        query("include_members_count", type="boolean")),
    _op(O, "createOrganization", "POST", "/organizations", "Create Organization",
        "Create a new organization",
        body("name", required=True),
        body("slug"),
        body("created_by", description="ID of the user who becomes the organization admin"),
        *ORG_METADATA,
        body("max_allowed_memberships", type="number")),
    _op(O, "updateOrganization", "PATCH", "/organizations/{organization_id}", "Update Organization",
        "Update an organization",
        ORGANIZATION_ID,
        body("name"),
        body("slug"),
        *ORG_METADATA,
        body("max_allowed_memberships", type="number")),
    _op(O, "deleteOrganization", "DELETE", "/organizations/{organization_id}", "Delete Organization",
        "Delete an organization",
        ORGANIZATION_ID),
    _op(O, "getOrganizationMemberships", "GET", "/organizations/{organization_id}/memberships",
        "Get Memberships", "List the memberships of an organization",
        ORGANIZATION_ID,
        query("limit", type="number"),
        query("offset", type="number"),
        query("email_address"),
        query("phone_number"),
        query("username"),
        query("user_id"),
        query("role"),
        query("order_by", type="options", default="created_at", options=ORDER_BY)),
    _op(O, "createOrganizationMembership", "POST", "/organizations/{organization_id}/memberships",
        "Create Membership", "Add a user to an organization",
        ORGANIZATION_ID,
        body("user_id", required=True),
        body("role", required=True, default="basic_member")),
    _op(O, "updateOrganizationMembership", "PATCH",
        "/organizations/{organization_id}/memberships/{user_id}",
        "Update Membership", "Update a member's role and metadata",
        ORGANIZATION_ID, MEMBER_USER_ID,
        body("role", required=True, default="basic_member"),
        *ORG_METADATA),
    _op(O, "deleteOrganizationMembership", "DELETE",
        "/organizations/{organization_id}/memberships/{user_id}",
        "Delete Membership", "Remove a user from an organization",
        ORGANIZATION_ID, MEMBER_USER_ID),
    _op(O, "getOrganizationInvitations", "GET", "/organizations/{organization_id}/invitations",
        "Get Invitations", "List the invitations of an organization",
        ORGANIZATION_ID,
        query("limit", type="number"),
        query("offset", type="number"),
        query("status", type="options", default="pending", options=INVITATION_STATUSES[1:])),
    _op(O, "createOrganizationInvitation", "POST", "/organizations/{organization_id}/invitations",
        "Create Invitation", "Invite an email address to an organization",
        ORGANIZATION_ID,
        body("email_address", required=True),
        body("inviter_user_id"),
        body("role", required=True, default="basic_member"),
        *ORG_METADATA,
        body("redirect_url")),
    _op(O, "revokeOrganizationInvitation", "POST",
        "/organizations/{organization_id}/invitations/{invitation_id}/revoke",
        "Revoke Invitation", "Revoke a pending organization invitation",
        ORGANIZATION_ID, INVITATION_ID),

    # ==== Sessions ====
    _op(S, "getSessions", "GET", "/sessions", "Get Sessions", "List sessions",
        query("clientId", "client_id"),
        query("userId", "user_id"),
        query("status", type="options", default="", options=SESSION_STATUSES),
        limit(), offset()),
    _op(S, "getSession", "GET", "/sessions/{session_id}", "Get Session", "Get a specific session",
        SESSION_ID),
    _op(S, "revokeSession", "POST", "/sessions/{session_id}/revoke", "Revoke Session",
        "Revoke a session",
        SESSION_ID),
    _op(S, "verifySession", "POST", "/sessions/{session_id}/verify", "Verify Session",
        "Verify a session with a token",
        SESSION_ID,
        body("token", required=True, description="The JWT of the session")),
    _op(S, "getSessionToken", "GET", "/sessions/{session_id}/tokens/{template_name}",
        "Get Session Token", "Create a session JWT from a JWT template",
        SESSION_ID,
        path("templateName", "template_name", "The name of the JWT template")),

    # ==== Email addresses ====
    _op(E, "getEmailAddress", "GET", "/email_addresses/{email_address_id}", "Get Email Address",
        "Get an email address",
        EMAIL_ADDRESS_ID),
    _op(E, "createEmailAddress", "POST", "/email_addresses", "Create Email Address",
        "Add an email address to a user",
        body("userId", "user_id", required=True),
        body("emailAddress", "email_address", required=True),
        body("verified", type="boolean", default=False),
        body("primary", type="boolean", default=False)),
    _op(E, "updateEmailAddress", "PATCH", "/email_addresses/{email_address_id}",
        "Update Email Address", "Update an email address",
        EMAIL_ADDRESS_ID,
        body("verified", type="boolean"),
        body("primary", type="boolean")),
    _op(E, "deleteEmailAddress", "DELETE", "/email_addresses/{email_address_id}",
        "Delete Email Address", "Delete an email address",
        EMAIL_ADDRESS_ID),

    # ==== Phone numbers ====
    _op(P, "getPhoneNumber", "GET", "/phone_numbers/{phone_number_id}", "Get Phone Number",
        "Get a phone number",
        PHONE_NUMBER_ID),
    _op(P, "createPhoneNumber", "POST", "/phone_numbers", "Create Phone Number",
        "Add a phone number to a user",
        body("userId", "user_id", required=True),
        body("phoneNumber", "phone_number", required=True),
        body("verified", type="boolean"),
        body("primary", type="boolean")),
    _op(P, "updatePhoneNumber", "PATCH", "/phone_numbers/{phone_number_id}", "Update Phone Number",
        "Update a phone number",
        PHONE_NUMBER_ID,
        body("verified", type="boolean"),
        body("primary", type="boolean")),
    _op(P, "deletePhoneNumber", "DELETE", "/phone_numbers/{phone_number_id}", "Delete Phone Number",
        "Delete a phone number",
        PHONE_NUMBER_ID),

    # ==== Invitations ====
    _op(I, "getInvitations", "GET", "/invitations", "Get Invitations", "List all invitations",
        limit(20), offset(),
        query("status", type="options", default="", options=INVITATION_STATUSES)),
    _op(I, "createInvitation", "POST", "/invitations", "Create Invitation",
        "Invite an email address to sign up",
        body("email_address", required=True),
        *ORG_METADATA,
        body("redirect_url"),
        body("notify", type="boolean", default=True),
        body("ignore_existing", type="boolean", default=False)),
    _op(I, "revokeInvitation", "POST", "/invitations/{invitation_id}/revoke", "Revoke Invitation",
        "Revoke a pending invitation",
        INVITATION_ID),

    # ==== Allowlist identifiers ====
    _op(A, "getAllowlistIdentifiers", "GET", "/allowlist_identifiers", "Get Allowlist Identifiers",
        "List all allowlist identifiers"),
    _op(A, "createAllowlistIdentifier", "POST", "/allowlist_identifiers",
        "Create Allowlist Identifier", "Add an identifier to the allowlist",
        body("identifier", required=True,
             description="Email address, phone number, domain or web3 wallet"),
        body("notify", type="boolean", default=True)),
    _op(A, "deleteAllowlistIdentifier", "DELETE", "/allowlist_identifiers/{identifier_id}",
        "Delete Allowlist Identifier", "Remove an identifier from the allowlist",
        IDENTIFIER_ID),

    # ==== Blocklist identifiers ====
    _op(B, "getBlocklistIdentifiers", "GET", "/blocklist_identifiers", "Get Blocklist Identifiers",
        "List all blocklist identifiers"),
    _op(B, "createBlocklistIdentifier", "POST", "/blocklist_identifiers",
        "Create Blocklist Identifier", "Add an identifier to the blocklist",
        body("identifier", required=True,
             description="Email address, phone number, domain or web3 wallet")),
    _op(B, "deleteBlocklistIdentifier", "DELETE", "/blocklist_identifiers/{identifier_id}",
        "Delete Blocklist Identifier", "Remove an identifier from the blocklist",
        IDENTIFIER_ID),

    # ==== JWT templates ====
    _op(J, "getJwtTemplates", "GET", "/jwt_templates", "Get JWT Templates", "List all JWT templates"),
    _op(J, "getJwtTemplate", "GET", "/jwt_templates/{template_id}", "Get JWT Template",
        "Get a specific JWT template",
        TEMPLATE_ID),
    _op(J, "createJwtTemplate", "POST", "/jwt_templates", "Create JWT Template",
        "Create a new JWT template",
        body("name", required=True),
        metadata("claims", always_send=True, description="JSON object of template claims"),
        body("lifetime", type="number", default=3600),
        body("allowedClockSkew", "allowed_clock_skew", type="number", default=5),
        body("customSigningKey", "custom_signing_key", type="boolean", default=False),
        body("signingAlgorithm", "signing_algorithm", type="options", default="RS256",
             options=SIGNING_ALGORITHMS),
        body("signingKey", "signing_key", only_if="customSigningKey")),
    _op(J, "updateJwtTemplate", "PATCH", "/jwt_templates/{template_id}", "Update JWT Template",
        "Update a JWT template",
        TEMPLATE_ID,
        body("name"),
        metadata("claims", description="JSON object of template claims"),
        body("lifetime", type="number"),
        body("allowedClockSkew", "allowed_clock_skew", type="number"),
        body("customSigningKey", "custom_signing_key", type="boolean"),
        body("signingAlgorithm", "signing_algorithm", type="options", options=SIGNING_ALGORITHMS),
        body("signingKey", "signing_key", only_if="customSigningKey")),
    _op(J, "deleteJwtTemplate", "DELETE", "/jwt_templates/{template_id}", "Delete JWT Template",
        "Delete a JWT template",
        TEMPLATE_ID),
)


def _build_index(operations: Tuple[OperationDescriptor, ...]) -> Dict[Tuple[str, str], OperationDescriptor]:
    index: Dict[Tuple[str, str], OperationDescriptor] = {}
    for descriptor in operations:
        key = (descriptor.resource.value, descriptor.operation)
        if key in index:
            raise ValueError(f"Duplicate operation registered: {key}")
        declared = {f.key for f in descriptor.path_fields}
        if set(descriptor.placeholders) != declared:
            raise ValueError(
                f"Path fields of {key} do not match template {descriptor.path}"
            )
        index[key] = descriptor
    return index


_INDEX = _build_index(OPERATIONS)

RESOURCES: Tuple[Resource, ...] = tuple(Resource)


def lookup(resource: str, operation: str) -> OperationDescriptor:
    """
    Find the descriptor for a (resource, operation) pair.

    Raises:
        UnsupportedOperationError: If the pair is not registered
    """
    try:
        return _INDEX[(str(getattr(resource, "value", resource)), operation)]
    except KeyError:
        raise UnsupportedOperationError(str(getattr(resource, "value", resource)), operation) from None


def operations_for(resource: str) -> List[OperationDescriptor]:
    """Descriptors of one resource, in declaration order."""
    value = getattr(resource, "value", resource)
    return [d for d in OPERATIONS if d.resource.value == value]


def all_operations() -> List[OperationDescriptor]:
    return list(OPERATIONS)
