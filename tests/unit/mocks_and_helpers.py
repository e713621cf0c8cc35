#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from types import MappingProxyType, SimpleNamespace
from typing import Any

from kubernetes import client

from kubequery.k8s.cluster import Cluster

FIXTURES = Path(__file__).parent / "kubequery" / "k8s" / "fixtures"

CLUSTER_UID = "blah"


class _FakeResponse:
    def __init__(self, data: str) -> None:
        self.data = data


def load_object(fixture: str, response_type: str) -> Any:
    """Deserialize a JSON fixture the way the client deserializes responses"""
    data = (FIXTURES / fixture).read_text()
    return client.ApiClient().deserialize(_FakeResponse(data), response_type)


def list_page(items: Iterable[Any], token: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(items=list(items), metadata=client.V1ListMeta(_continue=token))


class FakeListApi:
    """Answers all list calls with the given pages, one page per call

    A page may be an exception, it is raised instead. ``on_call`` is invoked
    before each call is answered.
    """

    def __init__(
        self,
        pages: Sequence[Any],
        on_call: Callable[[int], None] | None = None,
    ) -> None:
        self.pages = list(pages)
        self.on_call = on_call
        self.calls: list[tuple[str, Mapping[str, Any]]] = []

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if not name.startswith("list_"):
            raise AttributeError(name)

        def _list(**kwargs: Any) -> Any:
            self.calls.append((name, kwargs))
            if self.on_call is not None:
                self.on_call(len(self.calls))
            page = self.pages[len(self.calls) - 1]
            if isinstance(page, Exception):
                raise page
            return page

        return _list


def make_cluster(apis: Mapping[type, Any], request_timeout: float | None = None) -> Cluster:
    return Cluster(uid=CLUSTER_UID, apis=MappingProxyType(dict(apis)), request_timeout=request_timeout)
