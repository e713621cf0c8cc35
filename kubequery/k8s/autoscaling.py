#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the autoscaling/v2 API group"""

from __future__ import annotations

import datetime
from collections.abc import Iterator
from typing import Any

from kubernetes import client

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import namespaced_fields
from kubequery.k8s.fields import CommonNamespacedFields, Int32, Int64, RowModel
from kubequery.k8s.tables import HostContext, list_items, Table


class HorizontalPodAutoscaler(RowModel):
    common: CommonNamespacedFields
    scale_target_ref: Any = None
    min_replicas: Int32 | None = None
    max_replicas: Int32 = 0
    metrics: list[Any] | None = None
    behavior: Any = None
    current_replicas: Int32 = 0
    desired_replicas: Int32 = 0
    last_scale_time: datetime.datetime | None = None
    observed_generation: Int64 | None = None
    current_metrics: list[Any] | None = None
    conditions: list[Any] | None = None


def horizontal_pod_autoscalers(
    cluster: Cluster, host_context: HostContext
) -> Iterator[HorizontalPodAutoscaler]:
    for item in list_items(
        cluster,
        host_context,
        client.AutoscalingV2Api,
        "list_horizontal_pod_autoscaler_for_all_namespaces",
    ):
        spec = item.spec
        status = item.status
        yield HorizontalPodAutoscaler(
            common=namespaced_fields(cluster.uid, item.metadata),
            scale_target_ref=spec.scale_target_ref if spec else None,
            min_replicas=spec.min_replicas if spec else None,
            max_replicas=spec.max_replicas if spec else None,
            metrics=spec.metrics if spec else None,
            behavior=spec.behavior if spec else None,
            current_replicas=status.current_replicas if status else None,
            desired_replicas=status.desired_replicas if status else None,
            last_scale_time=status.last_scale_time if status else None,
            observed_generation=status.observed_generation if status else None,
            current_metrics=status.current_metrics if status else None,
            conditions=status.conditions if status else None,
        )


TABLES: tuple[Table, ...] = (
    Table("horizontal_pod_autoscalers", HorizontalPodAutoscaler, horizontal_pod_autoscalers),
)
