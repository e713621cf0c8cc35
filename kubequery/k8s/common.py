#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Extraction of the shared bundles from Kubernetes client objects"""

from collections.abc import Iterator
from typing import Any, TypeVar

from kubernetes import client

from kubequery.k8s.fields import (
    CommonContainerFields,
    CommonFields,
    CommonNamespacedFields,
    CommonPodFields,
    CommonVolumeFields,
    ContainerSecurityFields,
    RowModel,
    VOLUME_SOURCES,
)

_ModelT = TypeVar("_ModelT", bound=RowModel)

ContainerEntry = tuple[CommonNamespacedFields, CommonContainerFields, str]
VolumeEntry = tuple[CommonNamespacedFields, CommonVolumeFields]


def from_attributes(model: type[_ModelT], obj: object) -> _ModelT:
    """Validate a bundle from a client object, None yields the empty bundle"""
    if obj is None:
        return model()
    return model.model_validate(obj, from_attributes=True)


def spec_of(item: Any, spec_type: type) -> Any:
    """Spec of an API object, an empty spec if the object has none

    The empty spec skips client side validation, most workload specs have
    required fields.
    """
    if item.spec is not None:
        return item.spec
    configuration = client.Configuration()
    configuration.client_side_validation = False
    return spec_type(local_vars_configuration=configuration)


def common_fields(cluster_uid: str, metadata: client.V1ObjectMeta | None) -> CommonFields:
    if metadata is None:
        return CommonFields(cluster_uid=cluster_uid)
    return CommonFields(
        cluster_uid=cluster_uid,
        uid=metadata.uid,
        name=metadata.name,
        creation_timestamp=metadata.creation_timestamp,
        labels=metadata.labels,
        annotations=metadata.annotations,
    )


def namespaced_fields(
    cluster_uid: str, metadata: client.V1ObjectMeta | None
) -> CommonNamespacedFields:
    if metadata is None:
        return CommonNamespacedFields(cluster_uid=cluster_uid)
    return CommonNamespacedFields(
        cluster_uid=cluster_uid,
        uid=metadata.uid,
        name=metadata.name,
        namespace=metadata.namespace,
        creation_timestamp=metadata.creation_timestamp,
        labels=metadata.labels,
        annotations=metadata.annotations,
    )


def pod_fields(pod_spec: client.V1PodSpec | None) -> CommonPodFields:
    return from_attributes(CommonPodFields, pod_spec)


def _security_fields(context: client.V1SecurityContext | None) -> ContainerSecurityFields:
    if context is None:
        return ContainerSecurityFields()
    capabilities = context.capabilities
    return ContainerSecurityFields(
        privileged=context.privileged,
        capabilities_add=capabilities.add if capabilities else None,
        capabilities_drop=capabilities.drop if capabilities else None,
        run_as_user=context.run_as_user,
        run_as_group=context.run_as_group,
        run_as_non_root=context.run_as_non_root,
        read_only_root_filesystem=context.read_only_root_filesystem,
        allow_privilege_escalation=context.allow_privilege_escalation,
        proc_mount=context.proc_mount,
    )


def container_fields(container: client.V1Container) -> CommonContainerFields:
    fields = from_attributes(CommonContainerFields, container)
    return fields.model_copy(update={"security": _security_fields(container.security_context)})


def ephemeral_container_fields(container: client.V1EphemeralContainer) -> CommonContainerFields:
    # Ephemeral containers share the field names of regular containers, the
    # lifecycle, ports and health checks are simply never set by the API server.
    fields = from_attributes(CommonContainerFields, container)
    return fields.model_copy(update={"security": _security_fields(container.security_context)})


def volume_fields(volume: Any) -> CommonVolumeFields:
    """Find the one volume source set on a V1Volume (or V1PersistentVolumeSpec)

    A source unknown to this version of kubequery yields an empty bundle.
    """
    if volume is None:
        return CommonVolumeFields()
    for variant in VOLUME_SOURCES:
        source = getattr(volume, variant.TAG, None)
        if source is not None:
            return CommonVolumeFields(source=from_attributes(variant, source))
    return CommonVolumeFields()


def _renamed(meta: CommonNamespacedFields, name: str | None) -> CommonNamespacedFields:
    return meta.model_copy(update={"name": name or ""})


def container_rows(
    meta: CommonNamespacedFields, pod_spec: client.V1PodSpec | None
) -> Iterator[ContainerEntry]:
    """Containers of a pod spec: init containers, containers, ephemeral containers

    The object meta of the parent is passed on with the container name.
    """
    if pod_spec is None:
        return
    for container in pod_spec.init_containers or ():
        yield _renamed(meta, container.name), container_fields(container), "init"
    for container in pod_spec.containers or ():
        yield _renamed(meta, container.name), container_fields(container), "container"
    for container in getattr(pod_spec, "ephemeral_containers", None) or ():
        yield _renamed(meta, container.name), ephemeral_container_fields(container), "ephemeral"


def volume_rows(
    meta: CommonNamespacedFields, pod_spec: client.V1PodSpec | None
) -> Iterator[VolumeEntry]:
    if pod_spec is None:
        return
    for volume in pod_spec.volumes or ():
        yield _renamed(meta, volume.name), volume_fields(volume)
