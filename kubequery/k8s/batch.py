#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the batch/v1 API group"""

from __future__ import annotations

import datetime
from collections.abc import Iterator
from typing import Any

from kubernetes import client

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import from_attributes, namespaced_fields, pod_fields, spec_of
from kubequery.k8s.fields import CommonNamespacedFields, CommonPodFields, Int32, Int64, RowModel, Text
from kubequery.k8s.tables import HostContext, list_items, pod_template_tables, Table, template_spec


class JobStatusFields(RowModel):
    active: Int32 = 0
    succeeded: Int32 = 0
    failed: Int32 = 0
    ready: Int32 | None = None
    start_time: datetime.datetime | None = None
    completion_time: datetime.datetime | None = None
    conditions: list[client.V1JobCondition] | None = None


class Job(RowModel):
    common: CommonNamespacedFields
    pod: CommonPodFields
    status: JobStatusFields
    parallelism: Int32 | None = None
    completions: Int32 | None = None
    # spec.activeDeadlineSeconds of the job, the pod's own is in the pod bundle
    job_active_deadline_seconds: Int64 | None = None
    backoff_limit: Int32 | None = None
    ttl_seconds_after_finished: Int32 | None = None
    completion_mode: Text = ""
    suspend: bool | None = None
    selector: client.V1LabelSelector | None = None


def jobs(cluster: Cluster, host_context: HostContext) -> Iterator[Job]:
    for item in list_items(cluster, host_context, client.BatchV1Api, "list_job_for_all_namespaces"):
        spec = spec_of(item, client.V1JobSpec)
        yield Job(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod=pod_fields(template_spec(item)),
            status=from_attributes(JobStatusFields, item.status),
            parallelism=spec.parallelism,
            completions=spec.completions,
            job_active_deadline_seconds=spec.active_deadline_seconds,
            backoff_limit=spec.backoff_limit,
            ttl_seconds_after_finished=spec.ttl_seconds_after_finished,
            completion_mode=spec.completion_mode,
            suspend=spec.suspend,
            selector=spec.selector,
        )


class CronJob(RowModel):
    common: CommonNamespacedFields
    pod: CommonPodFields
    schedule: Text = ""
    time_zone: Text = ""
    starting_deadline_seconds: Int64 | None = None
    concurrency_policy: Text = ""
    suspend: bool | None = None
    successful_jobs_history_limit: Int32 | None = None
    failed_jobs_history_limit: Int32 | None = None
    last_schedule_time: datetime.datetime | None = None
    last_successful_time: datetime.datetime | None = None
    active: list[client.V1ObjectReference] | None = None


def cron_job_pod_spec(item: Any) -> Any:
    job_template = item.spec.job_template if item.spec is not None else None
    if job_template is None or job_template.spec is None:
        return None
    template = job_template.spec.template
    return template.spec if template is not None else None


def cron_jobs(cluster: Cluster, host_context: HostContext) -> Iterator[CronJob]:
    for item in list_items(cluster, host_context, client.BatchV1Api, "list_cron_job_for_all_namespaces"):
        spec = spec_of(item, client.V1CronJobSpec)
        status = item.status
        yield CronJob(
            common=namespaced_fields(cluster.uid, item.metadata),
            pod=pod_fields(cron_job_pod_spec(item)),
            schedule=spec.schedule,
            time_zone=getattr(spec, "time_zone", None),
            starting_deadline_seconds=spec.starting_deadline_seconds,
            concurrency_policy=spec.concurrency_policy,
            suspend=spec.suspend,
            successful_jobs_history_limit=spec.successful_jobs_history_limit,
            failed_jobs_history_limit=spec.failed_jobs_history_limit,
            last_schedule_time=status.last_schedule_time if status else None,
            last_successful_time=getattr(status, "last_successful_time", None),
            active=status.active if status else None,
        )


TABLES: tuple[Table, ...] = (
    Table("jobs", Job, jobs),
    *pod_template_tables("job", client.BatchV1Api, "list_job_for_all_namespaces", template_spec),
    Table("cron_jobs", CronJob, cron_jobs),
    *pod_template_tables(
        "cron_job", client.BatchV1Api, "list_cron_job_for_all_namespaces", cron_job_pod_spec
    ),
)
