#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""osquery extension serving all kubequery tables

osqueryd starts the extension with ``--socket``, ``--timeout`` and
``--interval``, which are parsed by osquery-python itself. The cluster is
found through the usual means (service account, ``$KUBECONFIG``).
"""

import logging
import os
import sys

import osquery

import kubequery
from kubequery.k8s.cluster import Cluster, get_api_client
from kubequery.k8s.registry import build_registry
from kubequery.k8s.tables import HostContext, Table
from kubequery.log import logger, setup_logging

LOGGER = logging.getLogger("kubequery.extension")

TABLE_PREFIX = "kubernetes_"

def table_plugin(table: Table, cluster: Cluster) -> type[osquery.TablePlugin]:
    """An osquery table plugin class bound to a table and the cluster"""

    class _TablePlugin(osquery.TablePlugin):
        def name(self):
            return TABLE_PREFIX + table.name

        def columns(self):
            return [
                osquery.TableColumn(name=column.name, type=column.type.value)
                for column in table.columns()
            ]

        def generate(self, context):
            return table.generate(cluster, HostContext(), context)

    _TablePlugin.__name__ = _TablePlugin.__qualname__ = "".join(
        part.capitalize() for part in table.name.split("_")
    ) + "TablePlugin"
    return _TablePlugin


def main() -> int:
    setup_logging(int(os.environ.get("KUBEQUERY_VERBOSITY", "0")))
    try:
        cluster = Cluster.connect(get_api_client())
    except Exception as e:
        logger.error("Cannot connect to the cluster: %s", e)
        return 1

    for table in build_registry().values():
        LOGGER.debug("Registering table %s%s", TABLE_PREFIX, table.name)
        osquery.register_plugin(table_plugin(table, cluster))

    osquery.start_extension(name="kubequery", version=kubequery.__version__)
    return 0


if __name__ == "__main__":
    sys.exit(main())
