#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from typing import Any

import pytest
from kubernetes import client

from tests.unit.mocks_and_helpers import load_object

from kubequery.k8s.tables import HostContext


@pytest.fixture(name="host_context")
def fixture_host_context() -> HostContext:
    return HostContext()


@pytest.fixture(name="daemon_set")
def fixture_daemon_set() -> client.V1DaemonSet:
    return load_object("daemon_set.json", "V1DaemonSet")


@pytest.fixture(name="replica_set")
def fixture_replica_set() -> client.V1ReplicaSet:
    return load_object("replica_set.json", "V1ReplicaSet")


@pytest.fixture(name="calico_pod_spec")
def fixture_calico_pod_spec(daemon_set: Any) -> client.V1PodSpec:
    return daemon_set.spec.template.spec
