#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import datetime
from typing import Any

import pytest
from kubernetes import client

from kubequery.k8s.apps import (
    DaemonSetStatusFields,
    DeploymentStatusFields,
    ReplicaSetStatusFields,
    StatefulSetStatusFields,
)
from kubequery.k8s.batch import JobStatusFields
from kubequery.k8s.common import (
    common_fields,
    container_fields,
    container_rows,
    from_attributes,
    namespaced_fields,
    pod_fields,
    volume_fields,
    volume_rows,
)
from kubequery.k8s.core import NodeSystemInfoFields, PodStatusFields
from kubequery.k8s.fields import (
    CommonContainerFields,
    CommonNamespacedFields,
    CommonPodFields,
    CommonVolumeFields,
    ConfigMapVolume,
    CSIVolume,
    EmptyDirVolume,
    HostPathVolume,
    PersistentVolumeClaimVolume,
    RowModel,
    SecretVolume,
    VOLUME_SOURCES,
)
from kubequery.k8s.policy import PodDisruptionBudgetStatusFields
from kubequery.k8s.rows import to_row
from kubequery.k8s.schema import is_row_model
from kubequery.k8s.storage import CSIDriverSpecFields


def test_namespaced_fields(daemon_set: client.V1DaemonSet) -> None:
    meta = namespaced_fields("blah", daemon_set.metadata)
    assert meta.cluster_uid == "blah"
    assert meta.name == "calico-node"
    assert meta.namespace == "kube-system"
    assert meta.uid == "e6fed7f0-f79a-464f-a3d2-b63247a1f590"
    assert meta.creation_timestamp == datetime.datetime(
        2021, 1, 12, 18, 30, 16, tzinfo=datetime.timezone.utc
    )
    assert meta.labels == {"k8s-app": "calico-node"}


def test_common_fields_have_no_namespace(daemon_set: client.V1DaemonSet) -> None:
    assert "namespace" not in to_row(common_fields("blah", daemon_set.metadata))


def test_missing_metadata_keeps_cluster_uid() -> None:
    assert to_row(namespaced_fields("blah", None)) == {"cluster_uid": "blah"}


def test_pod_fields(calico_pod_spec: client.V1PodSpec) -> None:
    fields = pod_fields(calico_pod_spec)
    assert fields.host_network is True
    assert fields.host_pid is False
    assert fields.termination_grace_period_seconds == 0
    assert fields.priority is None
    assert len(fields.tolerations or []) == 3


def test_pod_fields_of_missing_spec() -> None:
    assert pod_fields(None) == CommonPodFields()


def test_container_security_fields() -> None:
    container = client.V1Container(
        name="app",
        image="nginx",
        security_context=client.V1SecurityContext(
            capabilities=client.V1Capabilities(add=["NET_ADMIN"], drop=["ALL"]),
            run_as_user=1000,
            read_only_root_filesystem=True,
        ),
    )
    assert to_row(container_fields(container)) == {
        "image": "nginx",
        "stdin": "0",
        "stdin_once": "0",
        "tty": "0",
        "capabilities_add": '["NET_ADMIN"]',
        "capabilities_drop": '["ALL"]',
        "run_as_user": "1000",
        "read_only_root_filesystem": "1",
    }


def test_container_rows_order() -> None:
    meta = CommonNamespacedFields(cluster_uid="blah", name="web", namespace="default")
    pod_spec = client.V1PodSpec(
        init_containers=[client.V1Container(name="init")],
        containers=[client.V1Container(name="app"), client.V1Container(name="sidecar")],
        ephemeral_containers=[client.V1EphemeralContainer(name="debugger", image="busybox")],
    )
    assert [(m.name, m.namespace, kind) for m, _c, kind in container_rows(meta, pod_spec)] == [
        ("init", "default", "init"),
        ("app", "default", "container"),
        ("sidecar", "default", "container"),
        ("debugger", "default", "ephemeral"),
    ]


def test_container_rows_of_missing_spec() -> None:
    assert not list(container_rows(CommonNamespacedFields(), None))


def test_volume_rows_keep_spec_order(calico_pod_spec: client.V1PodSpec) -> None:
    meta = namespaced_fields("blah", None)
    assert [m.name for m, _v in volume_rows(meta, calico_pod_spec)] == [
        "lib-modules",
        "var-run-calico",
        "var-lib-calico",
        "xtables-lock",
        "cni-bin-dir",
        "cni-net-dir",
        "host-local-net-dir",
        "policysync",
        "flexvol-driver-host",
    ]


@pytest.mark.parametrize(
    "source, variant, expected",
    [
        pytest.param(
            {"host_path": client.V1HostPathVolumeSource(path="/run/xtables.lock", type="FileOrCreate")},
            HostPathVolume,
            {
                "volume_type": "host_path",
                "host_path_path": "/run/xtables.lock",
                "host_path_type": "FileOrCreate",
            },
            id="host_path",
        ),
        pytest.param(
            {"empty_dir": client.V1EmptyDirVolumeSource(size_limit="1Gi")},
            EmptyDirVolume,
            {"volume_type": "empty_dir", "empty_dir_size_limit": "1Gi"},
            id="empty_dir",
        ),
        pytest.param(
            {"secret": client.V1SecretVolumeSource(secret_name="tls", default_mode=420)},
            SecretVolume,
            {"volume_type": "secret", "secret_secret_name": "tls", "secret_default_mode": "420"},
            id="secret",
        ),
        pytest.param(
            {
                "config_map": client.V1ConfigMapVolumeSource(
                    name="calico-config",
                    items=[client.V1KeyToPath(key="cni_network_config", path="10-calico.conflist")],
                )
            },
            ConfigMapVolume,
            {
                "volume_type": "config_map",
                "config_map_name": "calico-config",
                "config_map_items": '[{"key":"cni_network_config","path":"10-calico.conflist"}]',
            },
            id="config_map",
        ),
        pytest.param(
            {
                "persistent_volume_claim": client.V1PersistentVolumeClaimVolumeSource(
                    claim_name="data"
                )
            },
            PersistentVolumeClaimVolume,
            {
                "volume_type": "persistent_volume_claim",
                "persistent_volume_claim_claim_name": "data",
                "persistent_volume_claim_read_only": "0",
            },
            id="persistent_volume_claim",
        ),
        pytest.param(
            {
                "csi": client.V1CSIVolumeSource(
                    driver="secrets-store.csi.k8s.io",
                    read_only=True,
                    volume_attributes={"secretProviderClass": "vault"},
                )
            },
            CSIVolume,
            {
                "volume_type": "csi",
                "csi_driver": "secrets-store.csi.k8s.io",
                "csi_read_only": "1",
                "csi_volume_attributes": '{"secretProviderClass":"vault"}',
            },
            id="csi",
        ),
    ],
)
def test_volume_fields(source: dict[str, Any], variant: type, expected: dict[str, str]) -> None:
    fields = volume_fields(client.V1Volume(name="volume", **source))
    assert isinstance(fields.source, variant)
    assert to_row(fields) == expected


def test_volume_without_known_source() -> None:
    assert volume_fields(client.V1Volume(name="volume")) == CommonVolumeFields()
    assert not to_row(volume_fields(client.V1Volume(name="volume")))


def test_volume_sources_have_unique_tags() -> None:
    tags = [variant.TAG for variant in VOLUME_SOURCES]
    assert len(tags) == len(set(tags))


def _attribute_names(model: type[RowModel]) -> set[str]:
    return {
        field.validation_alias if isinstance(field.validation_alias, str) else name
        for name, field in model.model_fields.items()
        if not is_row_model(field.annotation)
    }


@pytest.mark.parametrize(
    "model, client_type",
    [
        (CommonPodFields, client.V1PodSpec),
        (CommonContainerFields, client.V1Container),
        (CommonContainerFields, client.V1EphemeralContainer),
        (PodStatusFields, client.V1PodStatus),
        (NodeSystemInfoFields, client.V1NodeSystemInfo),
        (DaemonSetStatusFields, client.V1DaemonSetStatus),
        (DeploymentStatusFields, client.V1DeploymentStatus),
        (ReplicaSetStatusFields, client.V1ReplicaSetStatus),
        (StatefulSetStatusFields, client.V1StatefulSetStatus),
        (JobStatusFields, client.V1JobStatus),
        (PodDisruptionBudgetStatusFields, client.V1PodDisruptionBudgetStatus),
        (CSIDriverSpecFields, client.V1CSIDriverSpec),
    ],
)
def test_bundle_fields_are_client_attributes(model: type[RowModel], client_type: type) -> None:
    # from_attributes falls back to the default for a misspelled attribute
    assert _attribute_names(model) <= set(client_type.attribute_map)


@pytest.mark.parametrize("variant", VOLUME_SOURCES, ids=lambda variant: variant.TAG)
def test_volume_variant_fields_are_client_attributes(variant: type[RowModel]) -> None:
    source_type = client.V1Volume.openapi_types.get(
        variant.TAG, client.V1PersistentVolumeSpec.openapi_types.get(variant.TAG)
    )
    if source_type is None:
        pytest.skip(f"volume source {variant.TAG} is newer than the client")
    assert _attribute_names(variant) <= set(getattr(client, source_type).attribute_map)


def test_pod_ips_are_read_from_the_client_attribute() -> None:
    status = client.V1PodStatus(pod_ip="10.1.0.5", pod_i_ps=[client.V1PodIP(ip="10.1.0.5")])
    assert to_row(from_attributes(PodStatusFields, status)) == {
        "pod_ip": "10.1.0.5",
        "pod_ips": '[{"ip":"10.1.0.5"}]',
    }
