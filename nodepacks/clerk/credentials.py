"""
Clerk API credential: secret key bearer auth against the Clerk Backend API.
"""

from typing import Any, Dict

from src.config import get_settings
from src.config.settings import DEFAULT_CLERK_API_BASE_URL
from src.node_sdk.credentials import BaseCredential
from src.node_sdk.http import HttpApiError, HttpClient, NodeTimeoutError


class ClerkAuthApiCredential(BaseCredential):
    """Clerk Backend API credential using a secret key"""

    name = "clerkAuthApi"
    display_name = "Clerk Auth API"
    documentation_url = "https://clerk.com/docs/reference/backend-api"
    properties = [
        {
            "name": "secretKey",
            "displayName": "Secret Key",
            "type": "password",
            "required": True,
            "default": "",
            "description": "Your Clerk secret key (starts with sk_test_ or sk_live_)",
        },
        {
            "name": "baseUrl",
            "displayName": "Base URL",
            "type": "string",
            "required": False,
            "default": DEFAULT_CLERK_API_BASE_URL,
            "description": "The base URL for the Clerk Backend API",
        },
    ]

    def get_secret_key(self) -> str:
        return str(self.data.get("secretKey") or "")

    def get_base_url(self) -> str:
        """Credential override when set, otherwise the configured default."""
        base_url = self.data.get("baseUrl") or get_settings().clerk_api_base_url
        return str(base_url).rstrip("/")

    def get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.get_secret_key()}",
            "Content-Type": "application/json",
        }

    def test(self) -> Dict[str, Any]:
        """
        Test the credential by listing a single user.
        """
        validation = self.validate()
        if not validation["valid"]:
            return {
                "success": False,
                "message": validation["message"]
            }

        client = HttpClient(
            base_url=self.get_base_url(),
            default_headers=self.get_headers(),
            timeout=get_settings().http_timeout_s,
        )
        try:
            response = client.get("/users", params={"limit": 1})
        except NodeTimeoutError as e:
            return {
                "success": False,
                "message": f"Connection timed out after {e.timeout}s"
            }
        except HttpApiError as e:
            return {
                "success": False,
                "message": f"Connection error: {e}"
            }

        if response.status_code == 401:
            return {
                "success": False,
                "message": "Authentication failed. Check your secret key."
            }
        if response.status_code == 403:
            return {
                "success": False,
                "message": "Forbidden. Your secret key does not have permission."
            }
        if not response.ok:
            return {
                "success": False,
                "message": f"Connection failed. Status: {response.status_code}"
            }

        return {
            "success": True,
            "message": "Successfully connected to Clerk"
        }
