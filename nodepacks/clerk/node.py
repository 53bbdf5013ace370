"""
Clerk Auth node: users, organizations, sessions, identifiers and JWT templates
through the Clerk Backend API.

- https://clerk.com/docs/reference/backend-api
"""

from typing import Any, Dict, List, Optional

from src.config import get_settings
from src.node_sdk.basenode import BaseNode, NodeExecutionData, NodeOperationError
from src.node_sdk.items import NodeItem
from src.observability import with_node_context

from .credentials import ClerkAuthApiCredential
from .description import build_parameters, default_operation
from .dispatcher import ClerkDispatcher
from .operations import Resource, lookup


class ClerkAuthNode(BaseNode):
    """
    Clerk Auth node.

    Every input item produces exactly one output item at the same position.
    A failing item halts the run unless continue-on-fail is enabled, in which
    case it is reported as {"error": message}.
    """

    type = "clerkAuth"
    version = 1

    description = {
        "displayName": "Clerk Auth",
        "name": "clerkAuth",
        "icon": "file:clerk.svg",
        "group": ["transform"],
        "description": "Manage users, organizations and sessions with Clerk",
        "subtitle": '={{$parameter["operation"] + ": " + $parameter["resource"]}}',
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties = {
        "credentials": [
            {
                "name": ClerkAuthApiCredential.name,
                "required": True,
                "displayName": ClerkAuthApiCredential.display_name,
            }
        ],
        "parameters": build_parameters(),
    }

    def __init__(self) -> None:
        super().__init__()
        self._dispatcher: Optional[ClerkDispatcher] = None

    def _log_extra(self, resource: str, operation: str,
                   item_index: Optional[int] = None) -> Dict[str, Any]:
        context = self._context
        return with_node_context(
            workflow_id=context.workflow_id if context else None,
            node_name=context.node_name if context else None,
            resource=resource,
            operation=operation,
            item_index=item_index,
        )

    def build_dispatcher(self) -> ClerkDispatcher:
        """Dispatcher bound to this execution's credential and timeout."""
        credential = ClerkAuthApiCredential(self.get_credentials(ClerkAuthApiCredential.name))
        validation = credential.validate()
        if not validation["valid"]:
            raise NodeOperationError(validation["message"], node=self)

        timeout = self.context.timeout or get_settings().http_timeout_s
        return ClerkDispatcher(
            base_url=credential.get_base_url(),
            secret_key=credential.get_secret_key(),
            timeout=timeout,
            http_client=self.helpers_http_client(timeout=timeout),
        )

    def execute(self) -> List[List[NodeExecutionData]]:
        items = self.get_input_data() or []

        resource = self.get_node_parameter("resource", 0, Resource.USERS.value)
        operation = self.get_node_parameter("operation", 0, default_operation(resource))

        # Unknown pairs fail the whole run before anything is sent
        lookup(resource, operation)
        if not items:
            return [[]]

        self._dispatcher = self.build_dispatcher()
        try:
            results = self.process(items, resource, operation)
        finally:
            self._dispatcher = None

        return [NodeItem.to_branch(results)]

    def process(self, items: List[Dict[str, Any]], resource: str,
                operation: str) -> List[NodeItem]:
        """
        Run the operation once per item, strictly in order.

        Raises:
            NodeOperationError: The first failing item, with item_index set,
                unless continue-on-fail is enabled
        """
        dispatcher = self._dispatcher or self.build_dispatcher()
        results: List[NodeItem] = []

        for i in range(len(items)):
            try:
                payload = dispatcher.dispatch(resource, operation, i, self.get_raw_parameter)
            except NodeOperationError as e:
                if e.item_index is None:
                    e.item_index = i
                if e.node is None:
                    e.node = self

                if self.should_continue_on_fail():
                    self.logger.warning(
                        "Item failed, continuing: %s", e.message,
                        extra=self._log_extra(resource, operation, i),
                    )
                    results.append(NodeItem.failure(e.message, i))
                    continue

                self.logger.error(
                    "Item failed: %s", e.message,
                    extra=self._log_extra(resource, operation, i),
                )
                raise

            results.append(NodeItem.success(payload, i))

        self.logger.info(
            "Processed %d item(s)", len(results),
            extra=self._log_extra(resource, operation),
        )
        return results
