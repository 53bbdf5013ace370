"""
BaseNode and the execution context handed to it by the workflow host.

A node reads parameters, credentials and input items from its
NodeExecutionContext and returns List[List[NodeExecutionData]]: one list
per output branch. execute() is synchronous.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, NamedTuple, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from .http import HttpClient


logger = logging.getLogger(__name__)


NodeParameterType = Literal[
    "string", "number", "boolean", "options", "multiOptions",
    "json", "collection", "dateTime", "notice",
]


class NodeParameter(BaseModel):
    """
    One entry of a node's ``properties["parameters"]``.

    Dump with ``by_alias=True`` to get the host's camelCase keys.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Parameter key")
    display_name: str = Field(..., alias="displayName", description="Label shown to users")
    type: NodeParameterType = Field(..., description="Widget type")
    default: Any = Field(None, description="Value used when the user sets nothing")
    required: bool = Field(False)
    description: Optional[str] = Field(None, description="Help text")
    options: Optional[List[Dict[str, Any]]] = Field(
        None,
        description="Choices for options/multiOptions parameters"
    )
    display_options: Optional[Dict[str, Any]] = Field(
        None,
        alias="displayOptions",
        description="When to show the parameter, keyed on other parameters"
    )


class NodeExecutionData(TypedDict, total=False):
    """
    One output item: {"json": payload, "pairedItem": {"item": source_index}}.
    """
    json: Any
    pairedItem: Dict[str, int]


class RawParameter(NamedTuple):
    """
    A parameter value as supplied by the host for one item.

    ``present`` is False when the host did not supply the parameter at all,
    so a supplied ``False`` or ``0`` can be told apart from a missing value.
    """
    present: bool
    value: Any = None


ABSENT = RawParameter(present=False)


class BaseNode(ABC):
    """
    Base class for node implementations.

    Subclasses set ``type``, ``version``, ``description`` and
    ``properties`` (parameters and credentials) and implement execute().
    """

    type: str = "base"
    version: int = 1

    description: Dict[str, Any] = {
        "displayName": "Base Node",
        "name": "base",
        "group": [],
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties: Dict[str, Any] = {
        "parameters": [],
        "credentials": [],
    }

    # Report per-item failures as data instead of raising
    continue_on_fail: bool = False

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"node.{self.type}")
        self._context: Optional[NodeExecutionContext] = None

    @abstractmethod
    def execute(self) -> List[List[NodeExecutionData]]:
        """
        Run the node over its input items.

        Raises:
            NodeOperationError: The run failed
        """
        raise NotImplementedError

    def set_context(self, context: "NodeExecutionContext") -> None:
        self._context = context

    @property
    def context(self) -> "NodeExecutionContext":
        if self._context is None:
            raise NodeOperationError("No execution context set", node=self)
        return self._context

    def get_node_parameter(self, name: str, item_index: int = 0, default: Any = None) -> Any:
        return self.context.get_node_parameter(name, item_index, default)

    def get_raw_parameter(self, name: str, item_index: int = 0) -> RawParameter:
        """Parameter value together with whether the host supplied it."""
        return self.context.get_raw_parameter(name, item_index)

    def get_credentials(self, name: str) -> Dict[str, Any]:
        return self.context.get_credentials(name)

    def get_input_data(self) -> List[Dict[str, Any]]:
        return self.context.get_input_data()

    def should_continue_on_fail(self) -> bool:
        if self.continue_on_fail:
            return True
        return self._context is not None and self._context.continue_on_fail

    def helpers_http_client(self, **kwargs: Any) -> HttpClient:
        """HttpClient bounded by the execution's timeout."""
        return self.context.http_client(**kwargs)


class NodeExecutionContext:
    """
    What the host hands a node for one execution.

    ``parameters`` apply to every item; ``item_parameters[i]`` holds values
    the host evaluated separately for item ``i`` and takes precedence.
    """

    def __init__(
        self,
        parameters: Dict[str, Any],
        credentials: Dict[str, Dict[str, Any]],
        input_data: List[Dict[str, Any]],
        item_parameters: Optional[List[Dict[str, Any]]] = None,
        continue_on_fail: bool = False,
        timeout: Optional[float] = None,
        workflow_id: Optional[str] = None,
        node_name: Optional[str] = None,
    ) -> None:
        self._parameters = parameters
        self._item_parameters = item_parameters or []
        self._credentials = credentials
        self._input_data = input_data
        self.continue_on_fail = continue_on_fail
        self.timeout = timeout
        self.workflow_id = workflow_id
        self.node_name = node_name

    def get_raw_parameter(self, name: str, item_index: int = 0) -> RawParameter:
        """A value of None counts as not supplied."""
        if 0 <= item_index < len(self._item_parameters):
            value = (self._item_parameters[item_index] or {}).get(name)
            if value is not None:
                return RawParameter(True, value)
        value = self._parameters.get(name)
        if value is not None:
            return RawParameter(True, value)
        return ABSENT

    def get_node_parameter(self, name: str, item_index: int = 0, default: Any = None) -> Any:
        present, value = self.get_raw_parameter(name, item_index)
        return value if present else default

    def get_credentials(self, name: str) -> Dict[str, Any]:
        try:
            return self._credentials[name]
        except KeyError:
            raise NodeOperationError(f"Credentials '{name}' not found") from None

    def get_input_data(self) -> List[Dict[str, Any]]:
        return self._input_data

    def http_client(self, **kwargs: Any) -> HttpClient:
        if self.timeout is not None:
            kwargs.setdefault("timeout", self.timeout)
        return HttpClient(**kwargs)


class NodeOperationError(Exception):
    """A node run failed; ``item_index`` names the input item when known."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        item_index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.node = node
        self.item_index = item_index


class NodeApiError(NodeOperationError):
    """An external API call failed; ``status_code`` is None without a response."""

    def __init__(
        self,
        message: str,
        node: Optional[BaseNode] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        item_index: Optional[int] = None,
    ) -> None:
        super().__init__(message, node, item_index)
        self.status_code = status_code
        self.response_body = response_body


__all__ = [
    "ABSENT",
    "BaseNode",
    "NodeExecutionContext",
    "NodeExecutionData",
    "NodeParameter",
    "NodeParameterType",
    "NodeOperationError",
    "NodeApiError",
    "RawParameter",
]
