"""
Output items.

Every item a node emits points back at the input item it came from, so the
host can line results up with their sources.
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from .basenode import NodeExecutionData


class PairedItem(BaseModel):
    """Position of the source item in the node's input."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    item: int = Field(..., ge=0)
    input: int = Field(0, ge=0, description="Input branch index")


class NodeItem(BaseModel):
    """
    One result: an API payload, or {"error": message} for a failed item.

    Example:
        NodeItem.success({"id": "user_123"}, 0)
        NodeItem.failure("Clerk API error (404): User not found", 1)
    """
    model_config = ConfigDict(extra="forbid")

    json_data: Any = Field(default_factory=dict)
    paired_item: PairedItem

    @property
    def json(self) -> Any:
        return self.json_data

    @property
    def source_index(self) -> int:
        return self.paired_item.item

    @property
    def is_error(self) -> bool:
        return isinstance(self.json_data, dict) and list(self.json_data) == ["error"]

    @classmethod
    def success(cls, payload: Any, index: int) -> "NodeItem":
        return cls(json_data=payload, paired_item=PairedItem(item=index))

    @classmethod
    def failure(cls, message: str, index: int) -> "NodeItem":
        return cls(json_data={"error": message}, paired_item=PairedItem(item=index))

    def to_execution_data(self) -> NodeExecutionData:
        return {"json": self.json_data, "pairedItem": {"item": self.source_index}}

    @staticmethod
    def to_branch(items: List["NodeItem"]) -> List[NodeExecutionData]:
        return [item.to_execution_data() for item in items]
