#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Kubernetes API server state exposed as osquery tables.

Every table is declared by a row model (see ``kubequery.k8s.fields``). The
column schema and the row projection are both derived from that model, so a
table is fully described by its row model and the function that lists it."""

__version__ = "1.0.0"
