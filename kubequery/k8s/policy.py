#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the policy/v1 API group"""

from __future__ import annotations

import datetime
from collections.abc import Iterator

from kubernetes import client

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import from_attributes, namespaced_fields
from kubequery.k8s.fields import CommonNamespacedFields, Int32, Int64, IntOrString, RowModel, Text
from kubequery.k8s.tables import HostContext, list_items, Table


class PodDisruptionBudgetStatusFields(RowModel):
    current_healthy: Int32 = 0
    desired_healthy: Int32 = 0
    disruptions_allowed: Int32 = 0
    expected_pods: Int32 = 0
    observed_generation: Int64 = 0
    disrupted_pods: dict[str, datetime.datetime] | None = None
    conditions: list[client.V1Condition] | None = None


class PodDisruptionBudget(RowModel):
    common: CommonNamespacedFields
    min_available: IntOrString = ""
    max_unavailable: IntOrString = ""
    selector: client.V1LabelSelector | None = None
    unhealthy_pod_eviction_policy: Text = ""
    status: PodDisruptionBudgetStatusFields


def pod_disruption_budgets(
    cluster: Cluster, host_context: HostContext
) -> Iterator[PodDisruptionBudget]:
    for item in list_items(
        cluster, host_context, client.PolicyV1Api, "list_pod_disruption_budget_for_all_namespaces"
    ):
        spec = item.spec or client.V1PodDisruptionBudgetSpec()
        yield PodDisruptionBudget(
            common=namespaced_fields(cluster.uid, item.metadata),
            min_available=spec.min_available,
            max_unavailable=spec.max_unavailable,
            selector=spec.selector,
            unhealthy_pod_eviction_policy=getattr(spec, "unhealthy_pod_eviction_policy", None),
            status=from_attributes(PodDisruptionBudgetStatusFields, item.status),
        )


TABLES: tuple[Table, ...] = (
    Table("pod_disruption_budgets", PodDisruptionBudget, pod_disruption_budgets),
)
