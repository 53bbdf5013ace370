"""
NodeRegistry - the catalog of node and credential types a host can run.

Types arrive three ways: registered by hand, announced by an installed
distribution through the ``clerk_node.nodepacks`` entry-point group, or
found by scanning a module.
"""

from __future__ import annotations

import importlib
import logging
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from .models import CredentialDefinition, NodeDefinition, NodePackManifest


if TYPE_CHECKING:
    from src.node_sdk.basenode import BaseNode
    from src.node_sdk.credentials import BaseCredential


logger = logging.getLogger(__name__)

NODE_PACK_ENTRY_POINT = "clerk_node.nodepacks"


class NodeRegistry:
    """
    Usage:
        registry = NodeRegistry()
        registry.discover_entry_points()

        node = registry.create_node("clerkAuth")
        credential = registry.create_credential("clerkAuthApi", {"secretKey": "sk_test_..."})
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, NodeDefinition] = {}
        self._node_classes: Dict[str, Type["BaseNode"]] = {}
        self._credentials: Dict[str, CredentialDefinition] = {}
        self._credential_classes: Dict[str, Type["BaseCredential"]] = {}
        self._packs: Dict[str, NodePackManifest] = {}
        self._entry_points_loaded = False

    # ==== Registration ====

    def register_node(self, node_class: Type["BaseNode"], node_type: Optional[str] = None) -> NodeDefinition:
        """Add a node class under ``node_type`` (its ``type`` attribute by default)."""
        definition = NodeDefinition.from_node_class(node_class)
        if node_type is not None:
            definition.node_type = node_type

        self._nodes[definition.node_type] = definition
        self._node_classes[definition.node_type] = node_class
        logger.debug("Registered node: %s", definition.node_type)
        return definition

    def register_credential(self, credential_class: Type["BaseCredential"]) -> CredentialDefinition:
        definition = CredentialDefinition.from_credential_class(credential_class)
        self._credentials[definition.name] = definition
        self._credential_classes[definition.name] = credential_class
        logger.debug("Registered credential type: %s", definition.name)
        return definition

    def register_pack(
        self,
        manifest: NodePackManifest,
        node_classes: Dict[str, Type["BaseNode"]],
        credential_classes: Optional[Dict[str, Type["BaseCredential"]]] = None,
    ) -> None:
        """
        Add every node and credential type of a pack.

        Without explicit ``credential_classes`` the pack module named by
        ``manifest.entry_point`` supplies them through ``CREDENTIAL_CLASSES``.
        """
        if credential_classes is None and manifest.entry_point:
            pack_module = importlib.import_module(manifest.entry_point)
            credential_classes = getattr(pack_module, "CREDENTIAL_CLASSES", {})

        for node_type, node_class in node_classes.items():
            self.register_node(node_class, node_type).node_pack = manifest.name
        for credential_class in (credential_classes or {}).values():
            self.register_credential(credential_class)

        self._packs[manifest.name] = manifest
        logger.info(
            "Registered pack '%s': %d node(s), %d credential type(s)",
            manifest.name, len(node_classes), len(credential_classes or {}),
        )

    # ==== Discovery ====

    def discover_entry_points(self, force: bool = False) -> int:
        """
        Load the packs installed under the entry-point group.

        Each entry point is a ``register_nodes()`` function returning
        ``(manifest, node_classes)``, declared as:

            [project.entry-points."clerk_node.nodepacks"]
            clerk = "nodepacks.clerk:register_nodes"

        A pack that fails to load is logged and skipped.

        Returns:
            Number of packs loaded by this call
        """
        if self._entry_points_loaded and not force:
            return len(self._packs)

        loaded = 0
        for ep in entry_points(group=NODE_PACK_ENTRY_POINT):
            try:
                manifest, node_classes = ep.load()()
                self.register_pack(manifest, node_classes)
            except Exception:
                logger.exception("Failed to load node pack '%s'", ep.name)
                continue
            loaded += 1

        self._entry_points_loaded = True
        return loaded

    def discover_module(self, module_path: str) -> int:
        """Register the node and credential classes a module exposes."""
        from src.node_sdk.basenode import BaseNode
        from src.node_sdk.credentials import BaseCredential

        module = importlib.import_module(module_path)
        found = 0
        for obj in vars(module).values():
            if not isinstance(obj, type):
                continue
            if issubclass(obj, BaseNode) and obj is not BaseNode:
                self.register_node(obj)
            elif issubclass(obj, BaseCredential) and obj is not BaseCredential:
                self.register_credential(obj)
            else:
                continue
            found += 1
        return found

    # ==== Lookup ====

    def get_node(self, node_type: str) -> Optional[NodeDefinition]:
        return self._nodes.get(node_type)

    def get_credential(self, name: str) -> Optional[CredentialDefinition]:
        return self._credentials.get(name)

    def create_node(self, node_type: str) -> Optional["BaseNode"]:
        """Fresh node instance, or None for an unknown type."""
        node_class = self._node_classes.get(node_type)
        return node_class() if node_class else None

    def create_credential(self, name: str, data: Dict[str, Any]) -> Optional["BaseCredential"]:
        """Stored credential values wrapped in their type, or None for an unknown type."""
        credential_class = self._credential_classes.get(name)
        return credential_class(data) if credential_class else None

    @property
    def node_types(self) -> List[str]:
        return list(self._nodes)

    @property
    def credential_types(self) -> List[str]:
        return list(self._credentials)

    @property
    def packs(self) -> List[NodePackManifest]:
        return list(self._packs.values())

    def __contains__(self, node_type: str) -> bool:
        return node_type in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


__all__ = [
    "NodeRegistry",
    "NODE_PACK_ENTRY_POINT",
]
