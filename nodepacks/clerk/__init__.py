"""
Clerk Node Pack - Clerk Backend API connector.

- ClerkAuthNode: one request per input item for 49 resource/operations
- ClerkAuthApiCredential: secret key credential type

The operation table in ``operations`` drives request building and the
node's parameter schema alike.
"""

from .credentials import ClerkAuthApiCredential
from .node import ClerkAuthNode
from .manifest import CREDENTIAL_CLASSES, MANIFEST, NODE_CLASSES, register_nodes

__all__ = [
    "ClerkAuthNode",
    "ClerkAuthApiCredential",
    "CREDENTIAL_CLASSES",
    "MANIFEST",
    "NODE_CLASSES",
    "register_nodes",
]
