#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""The single row table describing the cluster itself"""

from __future__ import annotations

import datetime
from collections.abc import Iterator

import urllib3
from kubernetes import client
from kubernetes.client.rest import ApiException

from kubequery.exceptions import TransportError
from kubequery.k8s.cluster import Cluster
from kubequery.k8s.fields import RowModel, Text
from kubequery.k8s.tables import HostContext, Table


class Info(RowModel):
    cluster_uid: Text = ""
    major: Text = ""
    minor: Text = ""
    git_version: Text = ""
    git_commit: Text = ""
    git_tree_state: Text = ""
    # RFC 3339 string on the wire, parsed by pydantic
    build_date: datetime.datetime | None = None
    go_version: Text = ""
    compiler: Text = ""
    platform: Text = ""


def info(cluster: Cluster, host_context: HostContext) -> Iterator[Info]:
    host_context.raise_if_cancelled()
    try:
        version = cluster.api(client.VersionApi).get_code(_request_timeout=cluster.request_timeout)
    except (ApiException, urllib3.exceptions.HTTPError) as e:
        raise TransportError(f"get_code failed: {e}") from e
    yield Info(
        cluster_uid=cluster.uid,
        major=version.major,
        minor=version.minor,
        git_version=version.git_version,
        git_commit=version.git_commit,
        git_tree_state=version.git_tree_state,
        build_date=version.build_date,
        go_version=version.go_version,
        compiler=version.compiler,
        platform=version.platform,
    )


TABLES: tuple[Table, ...] = (Table("info", Info, info),)
