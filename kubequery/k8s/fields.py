#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Field types and the bundles shared by many tables.

The client models report unset fields as None. The aliases below map None to
the zero value of non-optional leaves, so that bundles can be validated
directly from client objects (``from_attributes``).
"""

from __future__ import annotations

import datetime
from typing import Annotated, Any, ClassVar, Union

from kubernetes import client
from pydantic import BeforeValidator

from kubequery.k8s.schema import Hint, RowModel, TaggedUnion


def _none_as(default: object) -> BeforeValidator:
    return BeforeValidator(lambda value: default if value is None else value)


def _as_text(value: object) -> object:
    return "" if value is None else str(value)


Int32 = Annotated[int, _none_as(0)]
Int64 = Annotated[int, _none_as(0), Hint.INT64]
Bool = Annotated[bool, _none_as(False)]
Text = Annotated[str, _none_as("")]
# e.g. maxUnavailable: 1 or "25%"
IntOrString = Annotated[str, BeforeValidator(_as_text)]
Quantity = Annotated[str, BeforeValidator(_as_text), Hint.QUANTITY]


#   .--meta----------------------------------------------------------------.


class CommonFields(RowModel):
    """Object meta of cluster scoped kinds"""

    cluster_uid: Text = ""
    uid: Text = ""
    name: Text = ""
    creation_timestamp: datetime.datetime | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None


class CommonNamespacedFields(RowModel):
    """Object meta of namespaced kinds"""

    cluster_uid: Text = ""
    uid: Text = ""
    name: Text = ""
    namespace: Text = ""
    creation_timestamp: datetime.datetime | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None


#   .--pod spec------------------------------------------------------------.


class CommonPodFields(RowModel):
    dns_policy: Text = ""
    host_ipc: Bool = False
    host_network: Bool = False
    host_pid: Bool = False
    node_selector: dict[str, str] | None = None
    priority_class_name: Text = ""
    restart_policy: Text = ""
    scheduler_name: Text = ""
    service_account_name: Text = ""
    termination_grace_period_seconds: Int64 | None = None
    tolerations: list[client.V1Toleration] | None = None
    active_deadline_seconds: Int64 | None = None
    automount_service_account_token: bool | None = None
    enable_service_links: bool | None = None
    hostname: Text = ""
    node_name: Text = ""
    preemption_policy: Text = ""
    priority: Int32 | None = None
    runtime_class_name: Text = ""
    share_process_namespace: bool | None = None
    subdomain: Text = ""
    affinity: client.V1Affinity | None = None
    security_context: client.V1PodSecurityContext | None = None
    image_pull_secrets: list[client.V1LocalObjectReference] | None = None


#   .--containers----------------------------------------------------------.


class ContainerSecurityFields(RowModel):
    privileged: bool | None = None
    capabilities_add: list[str] | None = None
    capabilities_drop: list[str] | None = None
    run_as_user: Int64 | None = None
    run_as_group: Int64 | None = None
    run_as_non_root: bool | None = None
    read_only_root_filesystem: bool | None = None
    allow_privilege_escalation: bool | None = None
    proc_mount: Text = ""


class CommonContainerFields(RowModel):
    """Summary of a container, init container or ephemeral container

    The container name is not part of the bundle. Container rows carry it in
    the ``name`` column of the object meta.
    """

    image: Text = ""
    image_pull_policy: Text = ""
    command: list[str] | None = None
    args: list[str] | None = None
    working_dir: Text = ""
    env: list[client.V1EnvVar] | None = None
    env_from: list[client.V1EnvFromSource] | None = None
    ports: list[client.V1ContainerPort] | None = None
    resources: client.V1ResourceRequirements | None = None
    volume_mounts: list[client.V1VolumeMount] | None = None
    volume_devices: list[client.V1VolumeDevice] | None = None
    liveness_probe: client.V1Probe | None = None
    readiness_probe: client.V1Probe | None = None
    startup_probe: client.V1Probe | None = None
    lifecycle: client.V1Lifecycle | None = None
    stdin: Bool = False
    stdin_once: Bool = False
    tty: Bool = False
    termination_message_path: Text = ""
    termination_message_policy: Text = ""
    security: ContainerSecurityFields = ContainerSecurityFields()


#   .--volumes-------------------------------------------------------------.
# One model per volume source. TAG is the attribute name of the source on
# V1Volume (and V1PersistentVolumeSpec), field names follow the client models.


class HostPathVolume(RowModel):
    TAG: ClassVar[str] = "host_path"
    path: Text = ""
    type: Text = ""


class EmptyDirVolume(RowModel):
    TAG: ClassVar[str] = "empty_dir"
    medium: Text = ""
    size_limit: Quantity | None = None


class GCEPersistentDiskVolume(RowModel):
    TAG: ClassVar[str] = "gce_persistent_disk"
    pd_name: Text = ""
    fs_type: Text = ""
    partition: Int32 = 0
    read_only: Bool = False


class AWSElasticBlockStoreVolume(RowModel):
    TAG: ClassVar[str] = "aws_elastic_block_store"
    volume_id: Text = ""
    fs_type: Text = ""
    partition: Int32 = 0
    read_only: Bool = False


class GitRepoVolume(RowModel):
    TAG: ClassVar[str] = "git_repo"
    repository: Text = ""
    revision: Text = ""
    directory: Text = ""


class SecretVolume(RowModel):
    TAG: ClassVar[str] = "secret"
    secret_name: Text = ""
    items: list[Any] | None = None
    default_mode: Int32 | None = None
    optional: bool | None = None


class NFSVolume(RowModel):
    TAG: ClassVar[str] = "nfs"
    server: Text = ""
    path: Text = ""
    read_only: Bool = False


class ISCSIVolume(RowModel):
    TAG: ClassVar[str] = "iscsi"
    target_portal: Text = ""
    iqn: Text = ""
    lun: Int32 = 0
    iscsi_interface: Text = ""
    fs_type: Text = ""
    read_only: Bool = False
    portals: list[str] | None = None
    chap_auth_discovery: Bool = False
    chap_auth_session: Bool = False
    secret_ref: Any = None
    initiator_name: Text = ""


class GlusterfsVolume(RowModel):
    TAG: ClassVar[str] = "glusterfs"
    endpoints: Text = ""
    path: Text = ""
    read_only: Bool = False


class PersistentVolumeClaimVolume(RowModel):
    TAG: ClassVar[str] = "persistent_volume_claim"
    claim_name: Text = ""
    read_only: Bool = False


class RBDVolume(RowModel):
    TAG: ClassVar[str] = "rbd"
    monitors: list[str] | None = None
    image: Text = ""
    fs_type: Text = ""
    pool: Text = ""
    user: Text = ""
    keyring: Text = ""
    secret_ref: Any = None
    read_only: Bool = False


class FlexVolume(RowModel):
    TAG: ClassVar[str] = "flex_volume"
    driver: Text = ""
    fs_type: Text = ""
    secret_ref: Any = None
    read_only: Bool = False
    options: dict[str, str] | None = None


class CinderVolume(RowModel):
    TAG: ClassVar[str] = "cinder"
    volume_id: Text = ""
    fs_type: Text = ""
    read_only: Bool = False
    secret_ref: Any = None


class CephFSVolume(RowModel):
    TAG: ClassVar[str] = "cephfs"
    monitors: list[str] | None = None
    path: Text = ""
    user: Text = ""
    secret_file: Text = ""
    secret_ref: Any = None
    read_only: Bool = False


class FlockerVolume(RowModel):
    TAG: ClassVar[str] = "flocker"
    dataset_name: Text = ""
    dataset_uuid: Text = ""


class DownwardAPIVolume(RowModel):
    TAG: ClassVar[str] = "downward_api"
    items: list[Any] | None = None
    default_mode: Int32 | None = None


class FCVolume(RowModel):
    TAG: ClassVar[str] = "fc"
    target_ww_ns: list[str] | None = None
    lun: Int32 | None = None
    fs_type: Text = ""
    read_only: Bool = False
    wwids: list[str] | None = None


class AzureFileVolume(RowModel):
    TAG: ClassVar[str] = "azure_file"
    secret_name: Text = ""
    share_name: Text = ""
    read_only: Bool = False


class ConfigMapVolume(RowModel):
    TAG: ClassVar[str] = "config_map"
    name: Text = ""
    items: list[Any] | None = None
    default_mode: Int32 | None = None
    optional: bool | None = None


class VsphereVirtualDiskVolume(RowModel):
    TAG: ClassVar[str] = "vsphere_volume"
    volume_path: Text = ""
    fs_type: Text = ""
    storage_policy_name: Text = ""
    storage_policy_id: Text = ""


class QuobyteVolume(RowModel):
    TAG: ClassVar[str] = "quobyte"
    registry: Text = ""
    volume: Text = ""
    read_only: Bool = False
    user: Text = ""
    group: Text = ""
    tenant: Text = ""


class AzureDiskVolume(RowModel):
    TAG: ClassVar[str] = "azure_disk"
    disk_name: Text = ""
    disk_uri: Text = ""
    caching_mode: Text = ""
    fs_type: Text = ""
    read_only: Bool = False
    kind: Text = ""


class PhotonPersistentDiskVolume(RowModel):
    TAG: ClassVar[str] = "photon_persistent_disk"
    pd_id: Text = ""
    fs_type: Text = ""


class ProjectedVolume(RowModel):
    TAG: ClassVar[str] = "projected"
    sources: list[Any] | None = None
    default_mode: Int32 | None = None


class PortworxVolume(RowModel):
    TAG: ClassVar[str] = "portworx_volume"
    volume_id: Text = ""
    fs_type: Text = ""
    read_only: Bool = False


class ScaleIOVolume(RowModel):
    TAG: ClassVar[str] = "scale_io"
    gateway: Text = ""
    system: Text = ""
    secret_ref: Any = None
    ssl_enabled: Bool = False
    protection_domain: Text = ""
    storage_pool: Text = ""
    storage_mode: Text = ""
    volume_name: Text = ""
    fs_type: Text = ""
    read_only: Bool = False


class StorageOSVolume(RowModel):
    TAG: ClassVar[str] = "storageos"
    volume_name: Text = ""
    volume_namespace: Text = ""
    fs_type: Text = ""
    read_only: Bool = False
    secret_ref: Any = None


class CSIVolume(RowModel):
    TAG: ClassVar[str] = "csi"
    driver: Text = ""
    read_only: Bool = False
    fs_type: Text = ""
    volume_attributes: dict[str, str] | None = None
    node_publish_secret_ref: Any = None


class EphemeralVolume(RowModel):
    TAG: ClassVar[str] = "ephemeral"
    volume_claim_template: Any = None


class ImageVolume(RowModel):
    TAG: ClassVar[str] = "image"
    reference: Text = ""
    pull_policy: Text = ""


class LocalVolume(RowModel):
    TAG: ClassVar[str] = "local"
    path: Text = ""
    fs_type: Text = ""


VOLUME_SOURCES: tuple[type[RowModel], ...] = (
    HostPathVolume,
    EmptyDirVolume,
    GCEPersistentDiskVolume,
    AWSElasticBlockStoreVolume,
    GitRepoVolume,
    SecretVolume,
    NFSVolume,
    ISCSIVolume,
    GlusterfsVolume,
    PersistentVolumeClaimVolume,
    RBDVolume,
    FlexVolume,
    CinderVolume,
    CephFSVolume,
    FlockerVolume,
    DownwardAPIVolume,
    FCVolume,
    AzureFileVolume,
    ConfigMapVolume,
    VsphereVirtualDiskVolume,
    QuobyteVolume,
    AzureDiskVolume,
    PhotonPersistentDiskVolume,
    ProjectedVolume,
    PortworxVolume,
    ScaleIOVolume,
    StorageOSVolume,
    CSIVolume,
    EphemeralVolume,
    ImageVolume,
    LocalVolume,
)

VolumeSource = Union[VOLUME_SOURCES]  # type: ignore[valid-type]


class CommonVolumeFields(RowModel):
    source: Annotated[VolumeSource | None, TaggedUnion("volume_type")] = None
