#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from kubequery.k8s import apps, autoscaling, batch, core, info, networking, policy, rbac, storage
from kubequery.k8s.tables import TableRegistry

_MODULES = (apps, batch, core, networking, rbac, storage, policy, autoscaling, info)


def build_registry() -> TableRegistry:
    """All tables known to kubequery, schemas computed"""
    registry = TableRegistry()
    for module in _MODULES:
        for table in module.TABLES:
            registry.register(table)
    return registry
