"""
Node SDK - what a workflow host needs to run a Python node.

- BaseNode / NodeExecutionContext: node contract and per-run context
- RawParameter: parameter values with an explicit "supplied" flag
- NodeItem: output items paired with their source item
- BaseCredential: credential type definitions
- HttpClient: timeout-bounded HTTP over requests
"""

from .basenode import (
    ABSENT,
    BaseNode,
    NodeApiError,
    NodeExecutionContext,
    NodeExecutionData,
    NodeOperationError,
    NodeParameter,
    NodeParameterType,
    RawParameter,
)
from .credentials import BaseCredential
from .http import HttpApiError, HttpClient, HttpResponse, NodeTimeoutError
from .items import NodeItem, PairedItem

__all__ = [
    "ABSENT",
    "BaseCredential",
    "BaseNode",
    "HttpApiError",
    "HttpClient",
    "HttpResponse",
    "NodeApiError",
    "NodeExecutionContext",
    "NodeExecutionData",
    "NodeItem",
    "NodeOperationError",
    "NodeParameter",
    "NodeParameterType",
    "NodeTimeoutError",
    "PairedItem",
    "RawParameter",
]
