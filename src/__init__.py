"""
Clerk node runtime

Python node SDK and the Clerk Backend API node pack for n8n-style workflow
hosts.

Architecture:
- node_sdk/: Node execution semantics (BaseNode, context, items, HTTP)
- node_registry/: Plugin discovery for node packs and credential types
- config/: Settings loaded from CLERK_NODE_* environment variables
- observability/: Structured JSON logging
"""

__version__ = "1.0.0"
