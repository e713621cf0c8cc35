#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the apps/v1 API group"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from kubernetes import client

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import from_attributes, namespaced_fields, pod_fields, spec_of
from kubequery.k8s.fields import (
    Bool,
    CommonNamespacedFields,
    CommonPodFields,
    Int32,
    Int64,
    RowModel,
    Text,
)
from kubequery.k8s.tables import HostContext, list_items, pod_template_tables, Table, template_spec

#   .--daemon sets---------------------------------------------------------.


class DaemonSetStatusFields(RowModel):
    current_number_scheduled: Int32 = 0
    number_misscheduled: Int32 = 0
    desired_number_scheduled: Int32 = 0
    number_ready: Int32 = 0
    observed_generation: Int64 = 0
    updated_number_scheduled: Int32 = 0
    number_available: Int32 = 0
    number_unavailable: Int32 = 0
    collision_count: Int32 | None = None
    conditions: list[client.V1DaemonSetCondition] | None = None


class DaemonSet(RowModel):
    common: CommonNamespacedFields
    pod: CommonPodFields
    status: DaemonSetStatusFields
    selector: client.V1LabelSelector | None = None
    update_strategy: client.V1DaemonSetUpdateStrategy | None = None
    min_ready_seconds: Int32 = 0
    revision_history_limit: Int32 | None = None


def daemon_sets(cluster: Cluster, host_context: HostContext) -> Iterator[DaemonSet]:
    for item in list_items(cluster, host_context, client.AppsV1Api, "list_daemon_set_for_all_namespaces"):
        spec = spec_of(item, client.V1DaemonSetSpec)
        yield DaemonSet(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod=pod_fields(template_spec(item)),
            status=from_attributes(DaemonSetStatusFields, item.status),
            selector=spec.selector,
            update_strategy=spec.update_strategy,
            min_ready_seconds=spec.min_ready_seconds,
            revision_history_limit=spec.revision_history_limit,
        )


#   .--deployments---------------------------------------------------------.


class DeploymentStatusFields(RowModel):
    replicas: Int32 = 0
    updated_replicas: Int32 = 0
    ready_replicas: Int32 = 0
    available_replicas: Int32 = 0
    unavailable_replicas: Int32 = 0
    observed_generation: Int64 = 0
    collision_count: Int32 | None = None
    conditions: list[client.V1DeploymentCondition] | None = None


class Deployment(RowModel):
    common: CommonNamespacedFields
    pod: CommonPodFields
    status: DeploymentStatusFields
    # spec.replicas, status.replicas is in the status bundle
    deployment_replicas: Int32 | None = None
    selector: client.V1LabelSelector | None = None
    strategy: client.V1DeploymentStrategy | None = None
    min_ready_seconds: Int32 = 0
    revision_history_limit: Int32 | None = None
    paused: Bool = False
    progress_deadline_seconds: Int32 | None = None


def deployments(cluster: Cluster, host_context: HostContext) -> Iterator[Deployment]:
    for item in list_items(cluster, host_context, client.AppsV1Api, "list_deployment_for_all_namespaces"):
        spec = spec_of(item, client.V1DeploymentSpec)
        yield Deployment(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod=pod_fields(template_spec(item)),
            status=from_attributes(DeploymentStatusFields, item.status),
            deployment_replicas=spec.replicas,
            selector=spec.selector,
            strategy=spec.strategy,
            min_ready_seconds=spec.min_ready_seconds,
            revision_history_limit=spec.revision_history_limit,
            paused=spec.paused,
            progress_deadline_seconds=spec.progress_deadline_seconds,
        )


#   .--replica sets--------------------------------------------------------.


class ReplicaSetStatusFields(RowModel):
    replicas: Int32 = 0
    fully_labeled_replicas: Int32 = 0
    ready_replicas: Int32 = 0
    available_replicas: Int32 = 0
    observed_generation: Int64 = 0
    conditions: list[client.V1ReplicaSetCondition] | None = None


class ReplicaSet(RowModel):
    common: CommonNamespacedFields
    pod: CommonPodFields
    status: ReplicaSetStatusFields
    replica_set_replicas: Int32 | None = None
    min_ready_seconds: Int32 = 0
    selector: client.V1LabelSelector | None = None


def replica_sets(cluster: Cluster, host_context: HostContext) -> Iterator[ReplicaSet]:
    for item in list_items(cluster, host_context, client.AppsV1Api, "list_replica_set_for_all_namespaces"):
        spec = spec_of(item, client.V1ReplicaSetSpec)
        yield ReplicaSet(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod=pod_fields(template_spec(item)),
            status=from_attributes(ReplicaSetStatusFields, item.status),
            replica_set_replicas=spec.replicas,
            min_ready_seconds=spec.min_ready_seconds,
            selector=spec.selector,
        )


#   .--stateful sets-------------------------------------------------------.


class StatefulSetStatusFields(RowModel):
    observed_generation: Int64 = 0
    replicas: Int32 = 0
    ready_replicas: Int32 = 0
    current_replicas: Int32 = 0
    updated_replicas: Int32 = 0
    available_replicas: Int32 = 0
    current_revision: Text = ""
    update_revision: Text = ""
    collision_count: Int32 | None = None
    conditions: list[client.V1StatefulSetCondition] | None = None


class StatefulSet(RowModel):
    common: CommonNamespacedFields
    pod: CommonPodFields
    status: StatefulSetStatusFields
    stateful_set_replicas: Int32 | None = None
    selector: client.V1LabelSelector | None = None
    service_name: Text = ""
    pod_management_policy: Text = ""
    update_strategy: client.V1StatefulSetUpdateStrategy | None = None
    revision_history_limit: Int32 | None = None
    min_ready_seconds: Int32 = 0
    volume_claim_templates: list[client.V1PersistentVolumeClaim] | None = None
    persistent_volume_claim_retention_policy: Any = None


def stateful_sets(cluster: Cluster, host_context: HostContext) -> Iterator[StatefulSet]:
    for item in list_items(cluster, host_context, client.AppsV1Api, "list_stateful_set_for_all_namespaces"):
        spec = spec_of(item, client.V1StatefulSetSpec)
        yield StatefulSet(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod=pod_fields(template_spec(item)),
            status=from_attributes(StatefulSetStatusFields, item.status),
            stateful_set_replicas=spec.replicas,
            selector=spec.selector,
            service_name=spec.service_name,
            pod_management_policy=spec.pod_management_policy,
            update_strategy=spec.update_strategy,
            revision_history_limit=spec.revision_history_limit,
            min_ready_seconds=spec.min_ready_seconds,
            volume_claim_templates=spec.volume_claim_templates,
            persistent_volume_claim_retention_policy=getattr(
                spec, "persistent_volume_claim_retention_policy", None
            ),
        )


TABLES: tuple[Table, ...] = (
    Table("daemon_sets", DaemonSet, daemon_sets),
    *pod_template_tables(
        "daemon_set", client.AppsV1Api, "list_daemon_set_for_all_namespaces", template_spec
    ),
    Table("deployments", Deployment, deployments),
    *pod_template_tables(
        "deployment", client.AppsV1Api, "list_deployment_for_all_namespaces", template_spec
    ),
    Table("replica_sets", ReplicaSet, replica_sets),
    *pod_template_tables(
        "replica_set", client.AppsV1Api, "list_replica_set_for_all_namespaces", template_spec
    ),
    Table("stateful_sets", StatefulSet, stateful_sets),
    *pod_template_tables(
        "stateful_set", client.AppsV1Api, "list_stateful_set_for_all_namespaces", template_spec
    ),
)
