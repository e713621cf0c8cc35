#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Tables of the rbac.authorization.k8s.io/v1 API group

Rules and subjects are tables of their own, one row per rule or subject.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from kubernetes import client

from kubequery.k8s.cluster import Cluster
from kubequery.k8s.common import common_fields, namespaced_fields
from kubequery.k8s.fields import CommonFields, CommonNamespacedFields, RowModel, Text
from kubequery.k8s.tables import HostContext, list_items, Table


class PolicyRuleFields(RowModel):
    verbs: list[str] | None = None
    api_groups: list[str] | None = None
    resources: list[str] | None = None
    resource_names: list[str] | None = None
    non_resource_urls: list[str] | None = None


class SubjectFields(RowModel):
    kind: Text = ""
    api_group: Text = ""
    subject_namespace: Text = ""
    role_ref_kind: Text = ""
    role_ref_name: Text = ""
    role_ref_api_group: Text = ""


def _rule_fields(rule: Any) -> PolicyRuleFields:
    return PolicyRuleFields(
        verbs=rule.verbs,
        api_groups=rule.api_groups,
        resources=rule.resources,
        resource_names=rule.resource_names,
        non_resource_urls=rule.non_resource_ur_ls,
    )


def _subject_fields(subject: Any, role_ref: Any) -> SubjectFields:
    return SubjectFields(
        kind=subject.kind,
        api_group=subject.api_group,
        subject_namespace=subject.namespace,
        role_ref_kind=role_ref.kind if role_ref else None,
        role_ref_name=role_ref.name if role_ref else None,
        role_ref_api_group=role_ref.api_group if role_ref else None,
    )


#   .--roles---------------------------------------------------------------.


class Role(RowModel):
    common: CommonNamespacedFields


class RolePolicyRule(RowModel):
    common: CommonNamespacedFields
    rule: PolicyRuleFields
    role_name: Text = ""


def roles(cluster: Cluster, host_context: HostContext) -> Iterator[Role]:
    for item in list_items(cluster, host_context, client.RbacAuthorizationV1Api, "list_role_for_all_namespaces"):
        yield Role(common=namespaced_fields(cluster.uid, item.metadata))


def role_policy_rules(cluster: Cluster, host_context: HostContext) -> Iterator[RolePolicyRule]:
    for item in list_items(cluster, host_context, client.RbacAuthorizationV1Api, "list_role_for_all_namespaces"):
        meta = namespaced_fields(cluster.uid, item.metadata)
        for rule in item.rules or ():
            yield RolePolicyRule(
                common=meta,
                rule=_rule_fields(rule),
                role_name=meta.name,
            )


class RoleBindingSubject(RowModel):
    """One row per subject, ``name`` is the name of the subject"""

    common: CommonNamespacedFields
    subject: SubjectFields
    role_binding_name: Text = ""


def role_binding_subjects(cluster: Cluster, host_context: HostContext) -> Iterator[RoleBindingSubject]:
    for item in list_items(
        cluster, host_context, client.RbacAuthorizationV1Api, "list_role_binding_for_all_namespaces"
    ):
        meta = namespaced_fields(cluster.uid, item.metadata)
        for subject in item.subjects or ():
            yield RoleBindingSubject(
                common=meta.model_copy(update={"name": subject.name or ""}),
                subject=_subject_fields(subject, item.role_ref),
                role_binding_name=meta.name,
            )


#   .--cluster roles-------------------------------------------------------.


class ClusterRole(RowModel):
    common: CommonFields
    aggregation_rule: client.V1AggregationRule | None = None


class ClusterRolePolicyRule(RowModel):
    common: CommonFields
    rule: PolicyRuleFields
    cluster_role_name: Text = ""


def cluster_roles(cluster: Cluster, host_context: HostContext) -> Iterator[ClusterRole]:
    for item in list_items(cluster, host_context, client.RbacAuthorizationV1Api, "list_cluster_role"):
        yield ClusterRole(
            common=common_fields(cluster.uid, item.metadata),
            aggregation_rule=item.aggregation_rule,
        )


def cluster_role_policy_rules(
    cluster: Cluster, host_context: HostContext
) -> Iterator[ClusterRolePolicyRule]:
    for item in list_items(cluster, host_context, client.RbacAuthorizationV1Api, "list_cluster_role"):
        meta = common_fields(cluster.uid, item.metadata)
        for rule in item.rules or ():
            yield ClusterRolePolicyRule(
                common=meta,
                rule=_rule_fields(rule),
                cluster_role_name=meta.name,
            )


class ClusterRoleBindingSubject(RowModel):
    common: CommonFields
    subject: SubjectFields
    cluster_role_binding_name: Text = ""


def cluster_role_binding_subjects(
    cluster: Cluster, host_context: HostContext
) -> Iterator[ClusterRoleBindingSubject]:
    for item in list_items(
        cluster, host_context, client.RbacAuthorizationV1Api, "list_cluster_role_binding"
    ):
        meta = common_fields(cluster.uid, item.metadata)
        for subject in item.subjects or ():
            yield ClusterRoleBindingSubject(
                common=meta.model_copy(update={"name": subject.name or ""}),
                subject=_subject_fields(subject, item.role_ref),
                cluster_role_binding_name=meta.name,
            )


TABLES: tuple[Table, ...] = (
    Table("roles", Role, roles),
    Table("role_policy_rules", RolePolicyRule, role_policy_rules),
    Table("role_binding_subjects", RoleBindingSubject, role_binding_subjects),
    Table("cluster_roles", ClusterRole, cluster_roles),
    Table("cluster_role_policy_rules", ClusterRolePolicyRule, cluster_role_policy_rules),
    Table("cluster_role_binding_subjects", ClusterRoleBindingSubject, cluster_role_binding_subjects),
)
