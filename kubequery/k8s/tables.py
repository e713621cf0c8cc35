#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables, their registry and the paginated lister feeding them"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import urllib3
from kubernetes.client.rest import ApiException
from pydantic import create_model

from kubequery.exceptions import QueryCancelled, SchemaError, TransportError
from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import container_rows, namespaced_fields, volume_rows
from kubequery.k8s.fields import CommonContainerFields, CommonNamespacedFields, CommonVolumeFields
from kubequery.k8s.fields import RowModel, Text
from kubequery.k8s.rows import Row, to_row
from kubequery.k8s.schema import Column, get_schema
from kubequery.log import VERBOSE

LOGGER = logging.getLogger("kubequery.k8s.tables")


class HostContext:
    """Cancellation handle of a single query, owned by the host"""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise QueryCancelled("Query was cancelled by the host")


RowsFunction = Callable[[Cluster, HostContext], Iterable[RowModel]]


def list_items(cluster: Cluster, host_context: HostContext, api: type, method: str) -> Iterator[Any]:
    """Yield all items of a list call, following the continue token

    The only parameter passed to the API is the continue token: no label or
    field selector, no limit.
    """
    list_call = getattr(cluster.api(api), method)
    kwargs: dict[str, Any] = {}
    if cluster.request_timeout is not None:
        kwargs["_request_timeout"] = cluster.request_timeout

    token = None
    page_count = 0
    while True:
        host_context.raise_if_cancelled()
        try:
            if token:
                page = list_call(_continue=token, **kwargs)
            else:
                page = list_call(**kwargs)
        except ApiException as e:
            raise TransportError(f"{method} failed: ({e.status}) {e.reason}") from e
        except urllib3.exceptions.HTTPError as e:
            raise TransportError(f"{method} failed: {e}") from e

        page_count += 1
        items = page.items or []
        LOGGER.log(VERBOSE, "%s: page %d with %d items", method, page_count, len(items))
        yield from items

        token = page.metadata._continue if page.metadata is not None else None
        if not token:
            return


@dataclass(frozen=True)
class Table:
    name: str
    row_type: type[RowModel]
    rows: RowsFunction

    def columns(self) -> Sequence[Column]:
        return get_schema(self.row_type)

    def generate(
        self, cluster: Cluster, host_context: HostContext, query_context: object = None
    ) -> list[Row]:
        """All rows of the table, or an exception; never a partial result

        The query context of the host (constraints of the WHERE clause) is
        accepted but not used, the host filters the rows itself.
        """
        LOGGER.info("Generating table %s", self.name)
        rows = []
        for record in self.rows(cluster, host_context):
            if not isinstance(record, self.row_type):
                raise TypeError(
                    f"Table {self.name} produced {type(record).__name__}, "
                    f"expected {self.row_type.__name__}"
                )
            rows.append(to_row(record))
        LOGGER.info("Table %s: %d rows", self.name, len(rows))
        return rows


class TableRegistry(Mapping[str, Table]):
    """Tables by name, in registration order"""

    def __init__(self) -> None:
        self._entries: dict[str, Table] = {}

    def register(self, table: Table) -> Table:
        if table.name in self._entries:
            raise SchemaError(f"Table {table.name} is already registered")
        # Fails here, at startup, for row types that cannot be mapped
        table.columns()
        self._entries[table.name] = table
        return table

    def __getitem__(self, key: str) -> Table:
        return self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


#   .--pod templates-------------------------------------------------------.
# Every kind embedding a pod template has two auxiliary tables next to its
# own: <kind>_containers and <kind>_volumes. Their rows carry the meta of the
# parent (with the container or volume name) and the parent's name in
# <kind>_name.


def _model_name(kind: str, suffix: str) -> str:
    return "".join(part.capitalize() for part in kind.split("_")) + suffix


def pod_template_tables(
    kind: str,
    api: type,
    method: str,
    pod_spec: Callable[[Any], Any],
) -> tuple[Table, Table]:
    parent_field = f"{kind}_name"

    container_type = create_model(
        _model_name(kind, "Container"),
        __base__=RowModel,
        common=(CommonNamespacedFields, CommonNamespacedFields()),
        container=(CommonContainerFields, CommonContainerFields()),
        **{parent_field: (Text, "")},
        container_type=(Text, ""),
    )
    volume_type = create_model(
        _model_name(kind, "Volume"),
        __base__=RowModel,
        common=(CommonNamespacedFields, CommonNamespacedFields()),
        volume=(CommonVolumeFields, CommonVolumeFields()),
        **{parent_field: (Text, "")},
    )

    def _containers(cluster: Cluster, host_context: HostContext) -> Iterator[RowModel]:
        for item in list_items(cluster, host_context, api, method):
            meta = namespaced_fields(cluster.uid, item.metadata)
            for container_meta, container, ctype in container_rows(meta, pod_spec(item)):
                yield container_type(
                    common=container_meta,
                    container=container,
                    container_type=ctype,
                    **{parent_field: meta.name},
                )

    def _volumes(cluster: Cluster, host_context: HostContext) -> Iterator[RowModel]:
        for item in list_items(cluster, host_context, api, method):
            meta = namespaced_fields(cluster.uid, item.metadata)
            for volume_meta, volume in volume_rows(meta, pod_spec(item)):
                yield volume_type(common=volume_meta, volume=volume, **{parent_field: meta.name})

    return (
        Table(name=f"{kind}_containers", row_type=container_type, rows=_containers),
        Table(name=f"{kind}_volumes", row_type=volume_type, rows=_volumes),
    )


def template_spec(item: Any) -> Any:
    """Pod spec of kinds with ``spec.template``"""
    template = item.spec.template if item.spec is not None else None
    return template.spec if template is not None else None
