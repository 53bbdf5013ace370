"""
Registry records: what the host knows about a node type, a credential
type and the pack that shipped them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


def _qualified_name(cls: Type) -> str:
    return f"{cls.__module__}.{cls.__name__}"


class NodeDefinition(BaseModel):
    """Node type as read off a BaseNode subclass's class attributes."""
    model_config = ConfigDict(extra="allow")

    node_type: str = Field(..., description="Key the host stores in workflows")
    version: int = Field(1)
    display_name: str = Field(..., description="Label in the node picker")
    description: str = Field("")
    icon: Optional[str] = Field(None, description="Icon reference, e.g. 'file:clerk.svg'")
    group: List[str] = Field(default_factory=list)

    node_class: Optional[str] = Field(None, description="Import path of the implementing class")
    node_pack: Optional[str] = Field(None, description="Name of the pack it came from, if any")

    inputs: List[Any] = Field(default_factory=lambda: ["main"])
    outputs: List[Any] = Field(default_factory=lambda: ["main"])
    credentials: List[Dict[str, Any]] = Field(default_factory=list)
    parameters: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def credential_types(self) -> List[str]:
        """Names of the credential types the node asks for."""
        return [c["name"] for c in self.credentials if "name" in c]

    @classmethod
    def from_node_class(cls, node_class: Type) -> "NodeDefinition":
        node_type = getattr(node_class, "type", node_class.__name__.lower())
        meta = getattr(node_class, "description", None) or {}
        props = getattr(node_class, "properties", None) or {}

        return cls(
            node_type=node_type,
            version=getattr(node_class, "version", 1),
            display_name=meta.get("displayName", node_type),
            description=meta.get("description", ""),
            icon=meta.get("icon"),
            group=list(meta.get("group", [])),
            node_class=_qualified_name(node_class),
            inputs=list(meta.get("inputs", ["main"])),
            outputs=list(meta.get("outputs", ["main"])),
            credentials=list(props.get("credentials", [])),
            parameters=list(props.get("parameters", [])),
        )


class CredentialDefinition(BaseModel):
    """Credential type as read off a BaseCredential subclass."""
    model_config = ConfigDict(extra="allow")

    name: str
    display_name: str
    documentation_url: Optional[str] = None
    credential_class: Optional[str] = Field(None, description="Import path of the implementing class")
    properties: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Form fields, in the same shape as node parameters"
    )

    @property
    def required_fields(self) -> List[str]:
        return [p["name"] for p in self.properties if p.get("required")]

    @classmethod
    def from_credential_class(cls, credential_class: Type) -> "CredentialDefinition":
        return cls(
            name=credential_class.name,
            display_name=credential_class.display_name,
            documentation_url=getattr(credential_class, "documentation_url", None),
            credential_class=_qualified_name(credential_class),
            properties=list(credential_class.properties),
        )


class NodePackManifest(BaseModel):
    """
    Identity and contents of a node pack.

    ``entry_point`` is the pack's import path; the registry reads the
    pack's ``CREDENTIAL_CLASSES`` from it.
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Pack name, e.g. 'clerk'")
    version: str = Field("1.0.0")
    description: str = Field("")
    author: str = Field("")
    license: str = Field("MIT")
    nodes: List[str] = Field(default_factory=list, description="Node types shipped")
    credentials: List[str] = Field(default_factory=list, description="Credential types shipped")
    entry_point: str = Field("", description="Import path, e.g. 'nodepacks.clerk'")


__all__ = [
    "CredentialDefinition",
    "NodeDefinition",
    "NodePackManifest",
]
