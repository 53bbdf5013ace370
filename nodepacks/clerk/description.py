"""
Node parameter schema for the Clerk node, generated from the operation registry.

Each field appears once per distinct definition; the operations sharing that
definition are listed in its ``displayOptions``.
"""

import re
from typing import Any, Dict, List, Tuple

from src.node_sdk.basenode import NodeParameter

from .operations import (
    RESOURCE_DISPLAY_NAMES,
    RESOURCES,
    FieldSpec,
    Resource,
    operations_for,
)


_ACRONYMS = {"Id": "ID", "Url": "URL", "Jwt": "JWT", "Oauth": "OAuth", "Web3": "Web3"}

_EMPTY_DEFAULTS = {
    "string": "",
    "dateTime": "",
    "options": "",
    "boolean": False,
    "json": "{}",
    "number": None,
}


def display_name(param: str) -> str:
    """``primaryEmailAddressId`` / ``organization_id`` -> "Primary Email Address ID"."""
    words = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", param).replace("_", " ").split()
    return " ".join(_ACRONYMS.get(w.capitalize(), w.capitalize()) for w in words)


def default_operation(resource: str) -> str:
    operations = operations_for(resource)
    return operations[0].operation if operations else ""


def _ui_default(spec: FieldSpec) -> Any:
    return spec.default if spec.has_default else _EMPTY_DEFAULTS.get(spec.type, "")


def _field_signature(spec: FieldSpec) -> Tuple[Any, ...]:
    return (spec.param, spec.type, spec.required, repr(_ui_default(spec)),
            spec.options, spec.description)


def resource_parameter() -> Dict[str, Any]:
    return NodeParameter(
        name="resource",
        displayName="Resource",
        type="options",
        default=Resource.USERS.value,
        options=[
            {"name": RESOURCE_DISPLAY_NAMES[r], "value": r.value} for r in RESOURCES
        ],
        description="The resource to operate on",
    ).model_dump(by_alias=True, exclude_none=True)


def operation_parameter(resource: Resource) -> Dict[str, Any]:
    return NodeParameter(
        name="operation",
        displayName="Operation",
        type="options",
        default=default_operation(resource.value),
        options=[
            {"name": d.name, "value": d.operation, "description": d.description}
            for d in operations_for(resource.value)
        ],
        displayOptions={"show": {"resource": [resource.value]}},
    ).model_dump(by_alias=True, exclude_none=True)


def field_parameters(resource: Resource) -> List[Dict[str, Any]]:
    """One parameter per distinct field definition of a resource."""
    groups: Dict[Tuple[Any, ...], Tuple[FieldSpec, List[str]]] = {}
    for descriptor in operations_for(resource.value):
        for spec in descriptor.fields:
            signature = _field_signature(spec)
            if signature not in groups:
                groups[signature] = (spec, [])
            groups[signature][1].append(descriptor.operation)

    parameters = []
    for spec, operations in groups.values():
        parameter = NodeParameter(
            name=spec.param,
            displayName=display_name(spec.param),
            type=spec.type,
            default=_ui_default(spec),
            required=spec.required,
            description=spec.description or None,
            options=[{"name": n, "value": v} for n, v in spec.options] or None,
            displayOptions={
                "show": {"resource": [resource.value], "operation": operations}
            },
        )
        parameters.append(parameter.model_dump(by_alias=True, exclude_none=True))
    return parameters


def build_parameters() -> List[Dict[str, Any]]:
    """Full parameter list: resource, then operation and fields per resource."""
    parameters = [resource_parameter()]
    for resource in RESOURCES:
        parameters.append(operation_parameter(resource))
    for resource in RESOURCES:
        parameters.extend(field_parameters(resource))
    return parameters
