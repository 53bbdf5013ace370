"""
Clerk Node Pack Manifest - Registration function for entry-points.
"""

from src.node_registry.models import NodePackManifest
from .credentials import ClerkAuthApiCredential
from .node import ClerkAuthNode


MANIFEST = NodePackManifest(
    name="clerk",
    version="1.0.0",
    description="Clerk Backend API: users, organizations, sessions and identifiers",
    author="clerk-node",
    license="MIT",
    nodes=[ClerkAuthNode.type],
    credentials=[ClerkAuthApiCredential.name],
    entry_point="nodepacks.clerk",
)


# Node classes by type
NODE_CLASSES = {
    ClerkAuthNode.type: ClerkAuthNode,
}

# Credential classes by type name
CREDENTIAL_CLASSES = {
    ClerkAuthApiCredential.name: ClerkAuthApiCredential,
}


def register_nodes():
    """
    Entry point function for node pack discovery.

    Returns tuple of (manifest, node_classes).
    """
    return MANIFEST, NODE_CLASSES


__all__ = [
    "MANIFEST",
    "NODE_CLASSES",
    "CREDENTIAL_CLASSES",
    "register_nodes",
]
