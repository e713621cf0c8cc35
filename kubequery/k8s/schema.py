#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Column schemas derived from row models.

A table is declared by a row model: a pydantic model whose fields are the
leaves of the table. The type of each field decides how it becomes a column:

    * ``str``, ``int``, ``bool``, ``datetime`` and ``timedelta`` fields are
      scalar leaves, one column each. ``X | None`` marks the leaf optional.
    * lists, mappings and any other class (usually a Kubernetes client model
      like ``V1LabelSelector``) are serialized to JSON into one TEXT column.
    * a field typed as another :class:`RowModel` is *embedded*: its columns are
      inlined in place, without prefix.
    * a field annotated with :class:`TaggedUnion` holds exactly one of several
      row models. It contributes a discriminator column plus the columns of
      every variant, prefixed with the variant's ``TAG``.

The walk is compiled once per row model into a projection plan. Both the
schema (here) and the row projector (``kubequery.k8s.rows``) read the plan,
so they can never disagree about column names or order.
"""

from __future__ import annotations

import datetime
import enum
import functools
import re
import types
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, NamedTuple, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict

from kubequery.exceptions import SchemaError


class RowModel(BaseModel):
    """Base of all row models and bundles

    Only subclasses are embedded by the reflector. Any other class, pydantic
    or not, is a composite.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, from_attributes=True)


class ColumnType(enum.Enum):
    TEXT = "TEXT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"


class Column(NamedTuple):
    name: str
    type: ColumnType


class LeafKind(enum.Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOL = "bool"
    TIME = "time"
    DURATION = "duration"
    QUANTITY = "quantity"
    BYTES = "bytes"
    LIST = "list"
    MAPPING = "mapping"
    COMPOSITE = "composite"


class Hint(enum.Enum):
    """Annotation metadata refining a scalar leaf"""

    INT64 = "int64"
    QUANTITY = "quantity"


@dataclass(frozen=True)
class TaggedUnion:
    """Annotation metadata marking a field as a closed set of variants.

    Every variant is a row model with a ``TAG`` class variable. ``discriminator``
    names the column holding the tag of the variant present in a row.
    """

    discriminator: str


@dataclass(frozen=True)
class LeafNode:
    attr: str
    column: Column
    kind: LeafKind
    optional: bool


@dataclass(frozen=True)
class EmbeddedNode:
    attr: str
    nodes: tuple[Node, ...]


@dataclass(frozen=True)
class UnionNode:
    attr: str
    column: Column
    variants: Mapping[type[BaseModel], tuple[str, tuple[Node, ...]]]


Node = Union[LeafNode, EmbeddedNode, UnionNode]

_UNION_TYPES = (Union, types.UnionType)
_SEQUENCE_TYPES = (list, tuple, set, frozenset, Sequence)
_MAPPING_TYPES = (dict, Mapping)


def snake_case(name: str) -> str:
    """
    >>> snake_case("hostPath")
    'host_path'
    >>> snake_case("ScaleIO")
    'scale_io'
    >>> snake_case("daemon_set_name")
    'daemon_set_name'
    """
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def is_row_model(annotation: object) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, RowModel)


def _split_optional(annotation: Any) -> tuple[Any, bool]:
    if get_origin(annotation) not in _UNION_TYPES:
        return annotation, False
    args = get_args(annotation)
    members = tuple(arg for arg in args if arg is not type(None))
    optional = len(members) < len(args)
    if len(members) == 1:
        return members[0], optional
    return Union[members], optional


def _split_annotated(annotation: Any, metadata: Sequence[Any]) -> tuple[Any, list[Any]]:
    if get_origin(annotation) is Annotated:
        base, *extra = get_args(annotation)
        return base, [*metadata, *extra]
    return annotation, list(metadata)


def _leaf_kind(annotation: Any, metadata: Sequence[Any]) -> tuple[LeafKind, ColumnType]:
    if Hint.QUANTITY in metadata:
        return LeafKind.QUANTITY, ColumnType.TEXT
    # bool before int: bool is an int subclass
    if annotation is bool:
        return LeafKind.BOOL, ColumnType.INTEGER
    if annotation is int:
        if Hint.INT64 in metadata:
            return LeafKind.INTEGER, ColumnType.BIGINT
        return LeafKind.INTEGER, ColumnType.INTEGER
    if annotation is str or (isinstance(annotation, type) and issubclass(annotation, enum.Enum)):
        return LeafKind.STRING, ColumnType.TEXT
    if annotation is datetime.datetime:
        return LeafKind.TIME, ColumnType.BIGINT
    if annotation is datetime.timedelta:
        return LeafKind.DURATION, ColumnType.TEXT
    if annotation is bytes:
        return LeafKind.BYTES, ColumnType.TEXT

    origin = get_origin(annotation) or annotation
    if origin in _MAPPING_TYPES:
        return LeafKind.MAPPING, ColumnType.TEXT
    if origin in _SEQUENCE_TYPES:
        return LeafKind.LIST, ColumnType.TEXT
    if annotation is Any or isinstance(annotation, type):
        return LeafKind.COMPOSITE, ColumnType.TEXT
    raise SchemaError(f"Unsupported field type: {annotation!r}")


def _union_node(attr: str, annotation: Any, union: TaggedUnion, prefix: str) -> UnionNode:
    members = get_args(annotation) if get_origin(annotation) in _UNION_TYPES else (annotation,)
    variants: dict[type[BaseModel], tuple[str, tuple[Node, ...]]] = {}
    for variant in members:
        tag = getattr(variant, "TAG", None)
        if not is_row_model(variant) or not isinstance(tag, str):
            raise SchemaError(f"Union variant {variant!r} of '{attr}' is not a tagged row model")
        variants[variant] = (tag, _plan(variant, f"{prefix}{tag}_"))
    return UnionNode(
        attr=attr,
        column=Column(prefix + union.discriminator, ColumnType.TEXT),
        variants=types.MappingProxyType(variants),
    )


def _node(attr: str, annotation: Any, metadata: Sequence[Any], prefix: str) -> Node:
    annotation, markers = _split_annotated(annotation, metadata)
    annotation, optional = _split_optional(annotation)
    annotation, markers = _split_annotated(annotation, markers)

    for marker in markers:
        if isinstance(marker, TaggedUnion):
            return _union_node(attr, annotation, marker, prefix)

    if is_row_model(annotation):
        return EmbeddedNode(attr=attr, nodes=_plan(annotation, prefix))

    kind, column_type = _leaf_kind(annotation, markers)
    return LeafNode(
        attr=attr,
        column=Column(prefix + snake_case(attr), column_type),
        kind=kind,
        optional=optional,
    )


def _plan(model: type[BaseModel], prefix: str) -> tuple[Node, ...]:
    return tuple(
        _node(attr, info.annotation, info.metadata, prefix)
        for attr, info in model.model_fields.items()
    )


def iter_columns(nodes: Sequence[Node]) -> Iterator[Column]:
    for node in nodes:
        if isinstance(node, LeafNode):
            yield node.column
        elif isinstance(node, EmbeddedNode):
            yield from iter_columns(node.nodes)
        else:
            yield node.column
            for _tag, variant_nodes in node.variants.values():
                yield from iter_columns(variant_nodes)


@functools.cache
def projection_plan(row_type: type[BaseModel]) -> tuple[Node, ...]:
    if not is_row_model(row_type):
        raise SchemaError(f"{row_type!r} is not a row model")

    plan = _plan(row_type, "")

    seen: set[str] = set()
    for column in iter_columns(plan):
        if column.name in seen:
            raise SchemaError(f"Duplicate column '{column.name}' in {row_type.__name__}")
        seen.add(column.name)
    return plan


def get_schema(row_type: type[BaseModel]) -> Sequence[Column]:
    return tuple(iter_columns(projection_plan(row_type)))
