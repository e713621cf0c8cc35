#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the networking.k8s.io/v1 API group"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from kubernetes import client

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import common_fields, namespaced_fields
from kubequery.k8s.fields import CommonFields, CommonNamespacedFields, RowModel, Text
from kubequery.k8s.tables import HostContext, list_items, Table


class Ingress(RowModel):
    common: CommonNamespacedFields
    ingress_class_name: Text = ""
    default_backend: client.V1IngressBackend | None = None
    tls: list[client.V1IngressTLS] | None = None
    rules: list[client.V1IngressRule] | None = None
    load_balancer_ingress: list[Any] | None = None


def ingresses(cluster: Cluster, host_context: HostContext) -> Iterator[Ingress]:
    for item in list_items(cluster, host_context, client.NetworkingV1Api, "list_ingress_for_all_namespaces"):
        spec = item.spec or client.V1IngressSpec()
        load_balancer = item.status.load_balancer if item.status else None
        yield Ingress(
            common=namespaced_fields(cluster.uid, item.metadata),
            ingress_class_name=spec.ingress_class_name,
            default_backend=spec.default_backend,
            tls=spec.tls,
            rules=spec.rules,
            load_balancer_ingress=load_balancer.ingress if load_balancer else None,
        )


class IngressClass(RowModel):
    common: CommonFields
    controller: Text = ""
    parameters: Any = None


def ingress_classes(cluster: Cluster, host_context: HostContext) -> Iterator[IngressClass]:
    for item in list_items(cluster, host_context, client.NetworkingV1Api, "list_ingress_class"):
        yield IngressClass(
            common=common_fields(cluster.uid, item.metadata),
            controller=item.spec.controller if item.spec else None,
            parameters=item.spec.parameters if item.spec else None,
        )


class NetworkPolicy(RowModel):
    common: CommonNamespacedFields
    pod_selector: client.V1LabelSelector | None = None
    ingress: list[client.V1NetworkPolicyIngressRule] | None = None
    egress: list[client.V1NetworkPolicyEgressRule] | None = None
    policy_types: list[str] | None = None


def network_policies(cluster: Cluster, host_context: HostContext) -> Iterator[NetworkPolicy]:
    for item in list_items(
        cluster, host_context, client.NetworkingV1Api, "list_network_policy_for_all_namespaces"
    ):
        spec = item.spec
        yield NetworkPolicy(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod_selector=spec.pod_selector if spec else None,
            ingress=spec.ingress if spec else None,
            egress=spec.egress if spec else None,
            policy_types=spec.policy_types if spec else None,
        )


TABLES: tuple[Table, ...] = (
    Table("ingresses", Ingress, ingresses),
    Table("ingress_classes", IngressClass, ingress_classes),
    Table("network_policies", NetworkPolicy, network_policies),
)
