#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Projection of row model instances into osquery rows.

A row maps column names to strings. Leaves without a meaningful value (None,
empty strings, empty containers, zero instants) are left out of the row, the
host reports them as NULL.
"""

import base64
import datetime
import enum
import json
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from dateutil import parser as date_parser
from kubernetes.utils import parse_quantity
from pydantic import BaseModel

from kubequery.exceptions import ProjectionError
from kubequery.k8s.schema import EmbeddedNode, LeafKind, LeafNode, Node, projection_plan

Row = dict[str, str]


def _rfc3339(value: datetime.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _is_client_model(value: object) -> bool:
    cls = type(value)
    return isinstance(getattr(cls, "openapi_types", None), dict) and isinstance(
        getattr(cls, "attribute_map", None), dict
    )


def _prune(value: Any) -> Any:
    """Convert to plain JSON data, dropping nulls and empty containers

    Returns None if nothing is left.
    """
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return _prune(value.value)
    if isinstance(value, bool | int | str):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, datetime.datetime):
        return _rfc3339(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    if _is_client_model(value):
        # empty strings are unset fields of the API object
        return _prune(
            {
                wire_name: field
                for attr, wire_name in type(value).attribute_map.items()
                if (field := getattr(value, attr)) != ""
            }
        )
    if isinstance(value, BaseModel):
        return _prune(value.model_dump(by_alias=True))
    if isinstance(value, Mapping):
        pruned = {str(k): p for k, v in value.items() if (p := _prune(v)) is not None}
        return pruned or None
    if isinstance(value, Sequence | set | frozenset):
        items = [p for v in value if (p := _prune(v)) is not None]
        return items or None
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_json(value: Any) -> str | None:
    """Serialize a container into its canonical JSON text

    >>> canonical_json({"b": [1, None], "a": {}, "c": 2.0})
    '{"b":[1],"c":2}'
    >>> canonical_json({"a": None}) is None
    True
    """
    pruned = _prune(value)
    if pruned is None:
        return None
    return json.dumps(
        pruned,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def _render_string(value: Any) -> str | None:
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value) or None


def _render_integer(value: Any) -> str:
    return str(int(value))


def _render_bool(value: Any) -> str:
    return "1" if value else "0"


def _render_time(value: Any) -> str | None:
    if isinstance(value, str):
        if not value:
            return None
        value = date_parser.isoparse(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    seconds = int(value.timestamp())
    return str(seconds) if seconds else None


def _render_duration(value: Any) -> str | None:
    if isinstance(value, datetime.timedelta):
        value = value.total_seconds()
    seconds = int(value)
    return str(seconds) if seconds else None


def _render_quantity(value: Any) -> str | None:
    text = "".join(str(value).split())
    if not text or parse_quantity(text) == 0:
        return None
    return text


def _render_bytes(value: Any) -> str | None:
    return base64.b64encode(value).decode("ascii") or None


_RENDERERS: Mapping[LeafKind, Callable[[Any], str | None]] = {
    LeafKind.STRING: _render_string,
    LeafKind.INTEGER: _render_integer,
    LeafKind.BOOL: _render_bool,
    LeafKind.TIME: _render_time,
    LeafKind.DURATION: _render_duration,
    LeafKind.QUANTITY: _render_quantity,
    LeafKind.BYTES: _render_bytes,
    LeafKind.LIST: canonical_json,
    LeafKind.MAPPING: canonical_json,
    LeafKind.COMPOSITE: canonical_json,
}


def _render(node: LeafNode, value: Any) -> str | None:
    if value is None:
        return None
    try:
        return _RENDERERS[node.kind](value)
    except (TypeError, ValueError) as e:
        raise ProjectionError(node.column.name, str(e)) from e


def _project(nodes: Sequence[Node], obj: object, row: Row) -> None:
    for node in nodes:
        value = getattr(obj, node.attr, None)
        if isinstance(node, LeafNode):
            if (text := _render(node, value)) is not None:
                row[node.column.name] = text
        elif isinstance(node, EmbeddedNode):
            if value is not None:
                _project(node.nodes, value, row)
        elif value is not None and (variant := node.variants.get(type(value))) is not None:
            tag, variant_nodes = variant
            row[node.column.name] = tag
            _project(variant_nodes, value, row)


def to_row(record: BaseModel) -> Row:
    row: Row = {}
    _project(projection_plan(type(record)), record, row)
    return row
