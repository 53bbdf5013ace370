"""
Parameter resolution for Clerk operations.

Turns the host's raw parameter values for one item into the path, query and
body parts of a request, following the field list of an OperationDescriptor.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from src.node_sdk.basenode import RawParameter

from .errors import InvalidJsonParameterError, InvalidParameterError, MissingParameterError
from .operations import FieldSpec, Location, OperationDescriptor, Transform


# (parameter name, item index) -> RawParameter
ParameterSource = Callable[[str, int], RawParameter]

_UNSET = object()


@dataclass(frozen=True)
class ResolvedParameters:
    path: Dict[str, Any]
    query: Dict[str, Any]
    body: Optional[Dict[str, Any]]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _parse_json(spec: FieldSpec, value: Any, item_index: int) -> Any:
    if not isinstance(value, str):
        parsed = value
    elif value.strip() == "":
        parsed = {}
    else:
        try:
            parsed = json.loads(value)
        except ValueError as e:
            raise InvalidJsonParameterError(spec.param, str(e), item_index=item_index) from e

    if parsed == {} and not spec.always_send:
        return _UNSET
    return parsed


def _to_timestamp_ms(spec: FieldSpec, value: Any, item_index: int) -> int:
    if isinstance(value, bool):
        raise InvalidParameterError(spec.param, "expected a date-time", item_index=item_index)
    if isinstance(value, (int, float)):
        try:
            return int(value)
        except (ValueError, OverflowError) as e:
            raise InvalidParameterError(spec.param, str(e), item_index=item_index) from e
    if isinstance(value, datetime):
        moment = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidParameterError(spec.param, str(e), item_index=item_index) from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def _apply_transform(spec: FieldSpec, value: Any, item_index: int) -> Any:
    if spec.transform is Transform.JSON:
        return _parse_json(spec, value, item_index)
    if spec.transform is Transform.LIST:
        return list(value) if isinstance(value, (list, tuple)) else [value]
    if spec.transform is Transform.TIMESTAMP_MS:
        return _to_timestamp_ms(spec, value, item_index)
    return value


def _raw_value(spec: FieldSpec, item_index: int, source: ParameterSource) -> Any:
    """Supplied value, else declared default, else _UNSET."""
    raw = source(spec.param, item_index)
    if raw.present:
        return raw.value
    if spec.has_default:
        return spec.default
    return _UNSET


def _resolve_field(spec: FieldSpec, item_index: int, source: ParameterSource) -> Any:
    value = _raw_value(spec, item_index, source)

    if spec.transform is Transform.JSON:
        if value is _UNSET or value is None:
            return {} if spec.always_send else _UNSET
        return _apply_transform(spec, value, item_index)

    if value is _UNSET or _is_blank(value):
        if spec.required:
            raise MissingParameterError(spec.param, item_index=item_index)
        return _UNSET

    return _apply_transform(spec, value, item_index)


def _gate_open(descriptor: OperationDescriptor, gate: str, item_index: int,
               source: ParameterSource) -> bool:
    for spec in descriptor.fields:
        if spec.param == gate:
            value = _raw_value(spec, item_index, source)
            return value is not _UNSET and bool(value)
    raw = source(gate, item_index)
    return raw.present and bool(raw.value)


def resolve(
    descriptor: OperationDescriptor,
    item_index: int,
    source: ParameterSource,
) -> ResolvedParameters:
    """
    Resolve the parameters of one item against a descriptor.

    A value supplied by the host is always used, including ``False`` and
    ``0``. Optional fields with no value are left out entirely.

    Raises:
        MissingParameterError: A required field has no value
        InvalidJsonParameterError: A JSON field holds malformed text
        InvalidParameterError: A date-time field cannot be parsed
    """
    parts: Dict[Location, Dict[str, Any]] = {
        Location.PATH: {},
        Location.QUERY: {},
        Location.BODY: {},
    }

    for spec in descriptor.fields:
        if spec.only_if and not _gate_open(descriptor, spec.only_if, item_index, source):
            continue
        value = _resolve_field(spec, item_index, source)
        if value is _UNSET:
            continue
        parts[spec.location][spec.key] = value

    return ResolvedParameters(
        path=parts[Location.PATH],
        query=parts[Location.QUERY],
        body=parts[Location.BODY] if descriptor.has_body else None,
    )
