"""
Credential types - definition and validation of node credentials.

A credential type declares its properties (n8n style) and wraps the
decrypted values handed over by the host's credential store. Storage and
encryption are the host's job.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class BaseCredential:
    """Base class for credential types."""

    name: str = "base"
    display_name: str = "Base Credential"
    documentation_url: Optional[str] = None
    properties: List[Dict[str, Any]] = []

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        """Get a property value, falling back to its declared default."""
        value = self.data.get(key)
        if value is None or value == "":
            for prop in self.properties:
                if prop["name"] == key and "default" in prop:
                    return prop["default"]
            return default
        return value

    def validate(self) -> Dict[str, Any]:
        """
        Check that every required property has a value.

        Returns:
            {"valid": bool, "message": str}
        """
        missing = [
            prop.get("displayName", prop["name"])
            for prop in self.properties
            if prop.get("required") and not self.get(prop["name"])
        ]
        if missing:
            return {
                "valid": False,
                "message": f"Missing required fields: {', '.join(missing)}",
            }
        return {"valid": True, "message": "Credential is valid"}

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        return {
            "name": cls.name,
            "displayName": cls.display_name,
            "documentationUrl": cls.documentation_url,
            "properties": cls.properties,
        }
