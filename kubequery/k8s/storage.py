#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the storage.k8s.io/v1 API group"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from kubernetes import client

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import common_fields, from_attributes
from kubequery.k8s.fields import Bool, CommonFields, RowModel, Text
from kubequery.k8s.tables import HostContext, list_items, Table


class StorageClass(RowModel):
    common: CommonFields
    provisioner: Text = ""
    parameters: dict[str, str] | None = None
    reclaim_policy: Text = ""
    mount_options: list[str] | None = None
    allow_volume_expansion: bool | None = None
    volume_binding_mode: Text = ""
    allowed_topologies: list[client.V1TopologySelectorTerm] | None = None


def storage_classes(cluster: Cluster, host_context: HostContext) -> Iterator[StorageClass]:
    for item in list_items(cluster, host_context, client.StorageV1Api, "list_storage_class"):
        yield StorageClass(
            common=common_fields(cluster.uid, item.metadata),
            provisioner=item.provisioner,
            parameters=item.parameters,
            reclaim_policy=item.reclaim_policy,
            mount_options=item.mount_options,
            allow_volume_expansion=item.allow_volume_expansion,
            volume_binding_mode=item.volume_binding_mode,
            allowed_topologies=item.allowed_topologies,
        )


class CSIDriverSpecFields(RowModel):
    attach_required: bool | None = None
    pod_info_on_mount: bool | None = None
    volume_lifecycle_modes: list[str] | None = None
    storage_capacity: bool | None = None
    fs_group_policy: Text = ""
    token_requests: list[Any] | None = None
    requires_republish: bool | None = None
    se_linux_mount: bool | None = None


class CSIDriver(RowModel):
    common: CommonFields
    spec: CSIDriverSpecFields


def csi_drivers(cluster: Cluster, host_context: HostContext) -> Iterator[CSIDriver]:
    for item in list_items(cluster, host_context, client.StorageV1Api, "list_csi_driver"):
        yield CSIDriver(
            common=common_fields(cluster.uid, item.metadata),
            spec=from_attributes(CSIDriverSpecFields, item.spec),
        )


class VolumeAttachment(RowModel):
    common: CommonFields
    attacher: Text = ""
    node_name: Text = ""
    persistent_volume_name: Text = ""
    attached: Bool = False
    attachment_metadata: dict[str, str] | None = None
    attach_error: client.V1VolumeError | None = None
    detach_error: client.V1VolumeError | None = None


def volume_attachments(cluster: Cluster, host_context: HostContext) -> Iterator[VolumeAttachment]:
    for item in list_items(cluster, host_context, client.StorageV1Api, "list_volume_attachment"):
        spec = item.spec
        status = item.status or client.V1VolumeAttachmentStatus(attached=False)
        yield VolumeAttachment(
            common=common_fields(cluster.uid, item.metadata),
            attacher=spec.attacher,
            node_name=spec.node_name,
            persistent_volume_name=spec.source.persistent_volume_name if spec.source else None,
            attached=status.attached,
            attachment_metadata=status.attachment_metadata,
            attach_error=status.attach_error,
            detach_error=status.detach_error,
        )


TABLES: tuple[Table, ...] = (
    Table("storage_classes", StorageClass, storage_classes),
    Table("csi_drivers", CSIDriver, csi_drivers),
    Table("volume_attachments", VolumeAttachment, volume_attachments),
)
