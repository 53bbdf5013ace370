"""Error conditions raised by the Clerk node before or around a request."""

from __future__ import annotations

from typing import Optional

from src.node_sdk.basenode import NodeOperationError


class UnsupportedOperationError(NodeOperationError):
    """The (resource, operation) pair is not in the operation registry."""

    def __init__(self, resource: str, operation: str) -> None:
        self.resource = resource
        self.operation = operation
        super().__init__(
            f'The operation "{operation}" is not supported for resource "{resource}"'
        )


class MissingParameterError(NodeOperationError):
    """A required parameter has no value for the item."""

    def __init__(self, field: str, item_index: Optional[int] = None) -> None:
        self.field = field
        super().__init__(
            f'Missing required parameter "{field}"',
            item_index=item_index,
        )


class InvalidJsonParameterError(NodeOperationError):
    """A JSON-valued parameter could not be parsed."""

    def __init__(self, field: str, detail: str, item_index: Optional[int] = None) -> None:
        self.field = field
        self.detail = detail
        super().__init__(
            f'Invalid JSON in parameter "{field}": {detail}',
            item_index=item_index,
        )


class InvalidParameterError(NodeOperationError):
    """A parameter value has the wrong shape for its field."""

    def __init__(self, field: str, detail: str, item_index: Optional[int] = None) -> None:
        self.field = field
        self.detail = detail
        super().__init__(
            f'Invalid value for parameter "{field}": {detail}',
            item_index=item_index,
        )
