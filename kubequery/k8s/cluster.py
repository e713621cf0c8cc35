#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Connection to the API server

The :class:`Cluster` is created once at startup and handed to every table.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from kubequery.exceptions import ConfigurationError, TransportError

LOGGER = logging.getLogger("kubequery.k8s.cluster")

_ApiT = TypeVar("_ApiT")

API_TYPES: tuple[type, ...] = (
    client.AppsV1Api,
    client.AutoscalingV2Api,
    client.BatchV1Api,
    client.CoreV1Api,
    client.NetworkingV1Api,
    client.PolicyV1Api,
    client.RbacAuthorizationV1Api,
    client.StorageV1Api,
    client.VersionApi,
)

# The uid of this namespace identifies the cluster. It exists in every cluster
# and is never deleted.
UID_NAMESPACE = "kube-system"


@dataclass(frozen=True)
class Cluster:
    uid: str
    apis: Mapping[type, Any]
    request_timeout: float | None = None

    def api(self, api_type: type[_ApiT]) -> _ApiT:
        try:
            return self.apis[api_type]
        except KeyError:
            raise KeyError(f"{api_type.__name__} is not available") from None

    @classmethod
    def connect(cls, api_client: client.ApiClient, request_timeout: float | None = None) -> Cluster:
        apis = types.MappingProxyType({api_type: api_type(api_client) for api_type in API_TYPES})
        LOGGER.info("Reading cluster uid from namespace %s", UID_NAMESPACE)
        try:
            namespace = apis[client.CoreV1Api].read_namespace(
                UID_NAMESPACE, _request_timeout=request_timeout
            )
        except (ApiException, urllib3.exceptions.HTTPError) as e:
            raise TransportError(f"Cannot read namespace {UID_NAMESPACE}: {e}") from e
        return cls(uid=namespace.metadata.uid, apis=apis, request_timeout=request_timeout)


def _explicit_configuration(
    api_server_endpoint: str, token: str | None, verify_ssl: bool
) -> client.Configuration:
    configuration = client.Configuration()
    configuration.host = api_server_endpoint
    if token:
        configuration.api_key_prefix["authorization"] = "Bearer"
        configuration.api_key["authorization"] = token
    if not verify_ssl:
        LOGGER.info("Disabling SSL certificate verification")
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        configuration.verify_ssl = False
    return configuration


def _discovered_configuration(kubeconfig: str | None, context: str | None) -> client.Configuration:
    configuration = client.Configuration()
    if kubeconfig is None and context is None:
        try:
            config.load_incluster_config(client_configuration=configuration)
            LOGGER.info("Using in-cluster service account")
            return configuration
        except config.ConfigException as e:
            LOGGER.debug("No in-cluster configuration: %s", e)
    try:
        config.load_kube_config(
            config_file=kubeconfig,
            context=context,
            client_configuration=configuration,
            persist_config=False,
        )
    except (config.ConfigException, OSError) as e:
        raise ConfigurationError(f"Cannot load kubeconfig: {e}") from e
    LOGGER.info("Using kubeconfig")
    return configuration


def get_api_client(
    *,
    api_server_endpoint: str | None = None,
    token: str | None = None,
    kubeconfig: str | None = None,
    context: str | None = None,
    verify_ssl: bool = True,
) -> client.ApiClient:
    """Credentials are taken from, in this order: the given endpoint and token,
    the service account of the pod kubequery runs in, the kubeconfig file
    (``--kubeconfig``, ``$KUBECONFIG`` or ``~/.kube/config``)."""
    LOGGER.info("Constructing API client")
    if api_server_endpoint:
        configuration = _explicit_configuration(api_server_endpoint, token, verify_ssl)
    else:
        configuration = _discovered_configuration(kubeconfig, context)
        if not verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            configuration.verify_ssl = False
    return client.ApiClient(configuration)
