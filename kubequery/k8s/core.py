#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the core (v1) API group"""

from __future__ import annotations

import datetime
from collections.abc import Iterator
from typing import Any

from kubernetes import client
from pydantic import Field

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import (
    common_fields,
    from_attributes,
    namespaced_fields,
    pod_fields,
    volume_fields,
)
from kubequery.k8s.fields import (
    Bool,
    CommonFields,
    CommonNamespacedFields,
    CommonPodFields,
    CommonVolumeFields,
    Int32,
    RowModel,
    Text,
)
from kubequery.k8s.tables import HostContext, list_items, pod_template_tables, Table

#   .--pods----------------------------------------------------------------.


class PodStatusFields(RowModel):
    phase: Text = ""
    message: Text = ""
    reason: Text = ""
    host_ip: Text = ""
    pod_ip: Text = ""
    pod_ips: list[client.V1PodIP] | None = Field(default=None, validation_alias="pod_i_ps")
    start_time: datetime.datetime | None = None
    qos_class: Text = ""
    nominated_node_name: Text = ""
    conditions: list[client.V1PodCondition] | None = None
    init_container_statuses: list[client.V1ContainerStatus] | None = None
    container_statuses: list[client.V1ContainerStatus] | None = None
    ephemeral_container_statuses: list[client.V1ContainerStatus] | None = None


class Pod(RowModel):
    common: CommonNamespacedFields
    pod: CommonPodFields
    status: PodStatusFields


def pod_spec(item: Any) -> Any:
    return item.spec


def pods(cluster: Cluster, host_context: HostContext) -> Iterator[Pod]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_pod_for_all_namespaces"):
        yield Pod(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod=pod_fields(item.spec),
            status=from_attributes(PodStatusFields, item.status),
        )


#   .--nodes---------------------------------------------------------------.


class NodeSystemInfoFields(RowModel):
    machine_id: Text = ""
    system_uuid: Text = ""
    boot_id: Text = ""
    kernel_version: Text = ""
    os_image: Text = ""
    container_runtime_version: Text = ""
    kubelet_version: Text = ""
    kube_proxy_version: Text = ""
    operating_system: Text = ""
    architecture: Text = ""


class Node(RowModel):
    common: CommonFields
    pod_cidr: Text = ""
    pod_cidrs: list[str] | None = None
    provider_id: Text = ""
    unschedulable: Bool = False
    taints: list[client.V1Taint] | None = None
    capacity: dict[str, str] | None = None
    allocatable: dict[str, str] | None = None
    phase: Text = ""
    conditions: list[client.V1NodeCondition] | None = None
    addresses: list[client.V1NodeAddress] | None = None
    daemon_endpoints: client.V1NodeDaemonEndpoints | None = None
    node_info: NodeSystemInfoFields
    images: list[client.V1ContainerImage] | None = None
    volumes_in_use: list[str] | None = None
    volumes_attached: list[client.V1AttachedVolume] | None = None


def nodes(cluster: Cluster, host_context: HostContext) -> Iterator[Node]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_node"):
        spec = item.spec or client.V1NodeSpec()
        status = item.status or client.V1NodeStatus()
        yield Node(
            common=common_fields(cluster.uid, item.metadata),
            pod_cidr=spec.pod_cidr,
            pod_cidrs=spec.pod_cid_rs,
            provider_id=spec.provider_id,
            unschedulable=spec.unschedulable,
            taints=spec.taints,
            capacity=status.capacity,
            allocatable=status.allocatable,
            phase=status.phase,
            conditions=status.conditions,
            addresses=status.addresses,
            daemon_endpoints=status.daemon_endpoints,
            node_info=from_attributes(NodeSystemInfoFields, status.node_info),
            images=status.images,
            volumes_in_use=status.volumes_in_use,
            volumes_attached=status.volumes_attached,
        )


#   .--namespaces----------------------------------------------------------.


class Namespace(RowModel):
    common: CommonFields
    phase: Text = ""
    conditions: list[client.V1NamespaceCondition] | None = None


def namespaces(cluster: Cluster, host_context: HostContext) -> Iterator[Namespace]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_namespace"):
        yield Namespace(
            common=common_fields(cluster.uid, item.metadata),
            phase=item.status.phase if item.status else None,
            conditions=item.status.conditions if item.status else None,
        )


#   .--services------------------------------------------------------------.


class Service(RowModel):
    common: CommonNamespacedFields
    type: Text = ""
    cluster_ip: Text = ""
    cluster_ips: list[str] | None = None
    external_ips: list[str] | None = None
    external_name: Text = ""
    external_traffic_policy: Text = ""
    internal_traffic_policy: Text = ""
    health_check_node_port: Int32 = 0
    ip_families: list[str] | None = None
    ip_family_policy: Text = ""
    load_balancer_ip: Text = ""
    load_balancer_source_ranges: list[str] | None = None
    load_balancer_class: Text = ""
    ports: list[client.V1ServicePort] | None = None
    publish_not_ready_addresses: Bool = False
    selector: dict[str, str] | None = None
    session_affinity: Text = ""
    session_affinity_config: client.V1SessionAffinityConfig | None = None
    load_balancer_ingress: list[Any] | None = None


def services(cluster: Cluster, host_context: HostContext) -> Iterator[Service]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_service_for_all_namespaces"):
        spec = item.spec or client.V1ServiceSpec()
        load_balancer = item.status.load_balancer if item.status else None
        yield Service(
            common=namespaced_fields(cluster.uid, item.metadata),
            type=spec.type,
            cluster_ip=spec.cluster_ip,
            cluster_ips=spec.cluster_i_ps,
            external_ips=spec.external_i_ps,
            external_name=spec.external_name,
            external_traffic_policy=spec.external_traffic_policy,
            internal_traffic_policy=spec.internal_traffic_policy,
            health_check_node_port=spec.health_check_node_port,
            ip_families=spec.ip_families,
            ip_family_policy=spec.ip_family_policy,
            load_balancer_ip=spec.load_balancer_ip,
            load_balancer_source_ranges=spec.load_balancer_source_ranges,
            load_balancer_class=spec.load_balancer_class,
            ports=spec.ports,
            publish_not_ready_addresses=spec.publish_not_ready_addresses,
            selector=spec.selector,
            session_affinity=spec.session_affinity,
            session_affinity_config=spec.session_affinity_config,
            load_balancer_ingress=load_balancer.ingress if load_balancer else None,
        )


#   .--config maps---------------------------------------------------------.


class ConfigMap(RowModel):
    common: CommonNamespacedFields
    data: dict[str, str] | None = None
    binary_data: dict[str, str] | None = None
    immutable: bool | None = None


def config_maps(cluster: Cluster, host_context: HostContext) -> Iterator[ConfigMap]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_config_map_for_all_namespaces"):
        yield ConfigMap(
            common=namespaced_fields(cluster.uid, item.metadata),
            data=item.data,
            binary_data=item.binary_data,
            immutable=item.immutable,
        )


#   .--endpoints-----------------------------------------------------------.


class EndpointSubset(RowModel):
    """One row per subset of an Endpoints object, ``name`` is the one of the
    Endpoints object"""

    common: CommonNamespacedFields
    addresses: list[Any] | None = None
    not_ready_addresses: list[Any] | None = None
    ports: list[Any] | None = None


def endpoint_subsets(cluster: Cluster, host_context: HostContext) -> Iterator[EndpointSubset]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_endpoints_for_all_namespaces"):
        meta = namespaced_fields(cluster.uid, item.metadata)
        for subset in item.subsets or ():
            yield EndpointSubset(
                common=meta,
                addresses=subset.addresses,
                not_ready_addresses=subset.not_ready_addresses,
                ports=subset.ports,
            )


#   .--persistent volumes--------------------------------------------------.


class PersistentVolume(RowModel):
    common: CommonFields
    capacity: dict[str, str] | None = None
    access_modes: list[str] | None = None
    claim_ref: client.V1ObjectReference | None = None
    persistent_volume_reclaim_policy: Text = ""
    storage_class_name: Text = ""
    mount_options: list[str] | None = None
    volume_mode: Text = ""
    node_affinity: client.V1VolumeNodeAffinity | None = None
    phase: Text = ""
    message: Text = ""
    reason: Text = ""
    volume: CommonVolumeFields


def persistent_volumes(cluster: Cluster, host_context: HostContext) -> Iterator[PersistentVolume]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_persistent_volume"):
        spec = item.spec or client.V1PersistentVolumeSpec()
        status = item.status or client.V1PersistentVolumeStatus()
        yield PersistentVolume(
            common=common_fields(cluster.uid, item.metadata),
            capacity=spec.capacity,
            access_modes=spec.access_modes,
            claim_ref=spec.claim_ref,
            persistent_volume_reclaim_policy=spec.persistent_volume_reclaim_policy,
            storage_class_name=spec.storage_class_name,
            mount_options=spec.mount_options,
            volume_mode=spec.volume_mode,
            node_affinity=spec.node_affinity,
            phase=status.phase,
            message=status.message,
            reason=status.reason,
            volume=volume_fields(item.spec),
        )


class PersistentVolumeClaim(RowModel):
    common: CommonNamespacedFields
    access_modes: list[str] | None = None
    selector: client.V1LabelSelector | None = None
    resources: Any = None
    volume_name: Text = ""
    storage_class_name: Text = ""
    volume_mode: Text = ""
    data_source: client.V1TypedLocalObjectReference | None = None
    phase: Text = ""
    capacity: dict[str, str] | None = None
    conditions: list[Any] | None = None


def persistent_volume_claims(
    cluster: Cluster, host_context: HostContext
) -> Iterator[PersistentVolumeClaim]:
    for item in list_items(
        cluster, host_context, client.CoreV1Api, "list_persistent_volume_claim_for_all_namespaces"
    ):
        spec = item.spec or client.V1PersistentVolumeClaimSpec()
        status = item.status or client.V1PersistentVolumeClaimStatus()
        yield PersistentVolumeClaim(
            common=namespaced_fields(cluster.uid, item.metadata),
            access_modes=spec.access_modes,
            selector=spec.selector,
            resources=spec.resources,
            volume_name=spec.volume_name,
            storage_class_name=spec.storage_class_name,
            volume_mode=spec.volume_mode,
            data_source=spec.data_source,
            phase=status.phase,
            capacity=status.capacity,
            conditions=status.conditions,
        )


#   .--service accounts----------------------------------------------------.


class ServiceAccount(RowModel):
    common: CommonNamespacedFields
    secrets: list[client.V1ObjectReference] | None = None
    image_pull_secrets: list[client.V1LocalObjectReference] | None = None
    automount_service_account_token: bool | None = None


def service_accounts(cluster: Cluster, host_context: HostContext) -> Iterator[ServiceAccount]:
    for item in list_items(
        cluster, host_context, client.CoreV1Api, "list_service_account_for_all_namespaces"
    ):
        yield ServiceAccount(
            common=namespaced_fields(cluster.uid, item.metadata),
            secrets=item.secrets,
            image_pull_secrets=item.image_pull_secrets,
            automount_service_account_token=item.automount_service_account_token,
        )


#   .--quotas--------------------------------------------------------------.


class LimitRange(RowModel):
    common: CommonNamespacedFields
    limits: list[client.V1LimitRangeItem] | None = None


def limit_ranges(cluster: Cluster, host_context: HostContext) -> Iterator[LimitRange]:
    for item in list_items(cluster, host_context, client.CoreV1Api, "list_limit_range_for_all_namespaces"):
        yield LimitRange(
            common=namespaced_fields(cluster.uid, item.metadata),
            limits=item.spec.limits if item.spec else None,
        )


class ResourceQuota(RowModel):
    common: CommonNamespacedFields
    hard: dict[str, str] | None = None
    scopes: list[str] | None = None
    scope_selector: client.V1ScopeSelector | None = None
    status_hard: dict[str, str] | None = None
    used: dict[str, str] | None = None


def resource_quotas(cluster: Cluster, host_context: HostContext) -> Iterator[ResourceQuota]:
    for item in list_items(
        cluster, host_context, client.CoreV1Api, "list_resource_quota_for_all_namespaces"
    ):
        spec = item.spec or client.V1ResourceQuotaSpec()
        status = item.status or client.V1ResourceQuotaStatus()
        yield ResourceQuota(
            common=namespaced_fields(cluster.uid, item.metadata),
            hard=spec.hard,
            scopes=spec.scopes,
            scope_selector=spec.scope_selector,
            status_hard=status.hard,
            used=status.used,
        )


TABLES: tuple[Table, ...] = (
    Table("pods", Pod, pods),
    *pod_template_tables("pod", client.CoreV1Api, "list_pod_for_all_namespaces", pod_spec),
    Table("nodes", Node, nodes),
    Table("namespaces", Namespace, namespaces),
    Table("services", Service, services),
    Table("config_maps", ConfigMap, config_maps),
    Table("endpoint_subsets", EndpointSubset, endpoint_subsets),
    Table("persistent_volumes", PersistentVolume, persistent_volumes),
    Table("persistent_volume_claims", PersistentVolumeClaim, persistent_volume_claims),
    Table("service_accounts", ServiceAccount, service_accounts),
    Table("limit_ranges", LimitRange, limit_ranges),
    Table("resource_quotas", ResourceQuota, resource_quotas),
)
