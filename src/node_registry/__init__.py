"""
Node Registry - catalog of node packs, node types and credential types.

Packs are discovered through the ``clerk_node.nodepacks`` entry-point group.
"""

from .models import CredentialDefinition, NodeDefinition, NodePackManifest
from .registry import NODE_PACK_ENTRY_POINT, NodeRegistry

__all__ = [
    "CredentialDefinition",
    "NodeDefinition",
    "NodePackManifest",
    "NodeRegistry",
    "NODE_PACK_ENTRY_POINT",
]
