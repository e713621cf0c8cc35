#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Query Kubernetes resources as tables

    kubequery tables            list all tables
    kubequery schema TABLE      show the columns of a table
    kubequery query TABLE       print the rows of a table as JSON lines
"""

import argparse
import json
import sys
from collections.abc import Sequence

import urllib3

import kubequery
from kubequery.exceptions import TransportError
from kubequery.k8s.cluster import Cluster, get_api_client
from kubequery.k8s.registry import build_registry
from kubequery.k8s.tables import HostContext, Table, TableRegistry
from kubequery.log import logger, setup_logging
from kubequery.profile import Profile


def parse_arguments(args: Sequence[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="kubequery", description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    p.add_argument("--version", action="version", version=kubequery.__version__)
    p.add_argument("--debug", action="store_true", help="Debug mode: raise Python exceptions")
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose mode (for even more output use -vvv)",
    )
    p.add_argument("--kubeconfig", metavar="FILE", help="kubeconfig file to use")
    p.add_argument("--context", help="kubeconfig context to use")
    p.add_argument(
        "--api-server-endpoint",
        help="API server endpoint for Kubernetes API calls, overrides the kubeconfig",
    )
    p.add_argument("--token", help="Bearer token, used with --api-server-endpoint")
    p.add_argument("--no-cert-check", action="store_true", help="Disable certificate verification")
    p.add_argument(
        "--request-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Timeout of every request to the API server",
    )
    p.add_argument(
        "--profile",
        metavar="FILE",
        help="Profile the performance of kubequery and write the output to a file",
    )

    commands = p.add_subparsers(dest="command", required=True)
    commands.add_parser("tables", help="List all tables")
    schema = commands.add_parser("schema", help="Show the columns of a table")
    schema.add_argument("table")
    query = commands.add_parser("query", help="Print all rows of a table as JSON lines")
    query.add_argument("table")

    return p.parse_args(args)


def connect(arguments: argparse.Namespace) -> Cluster:
    api_client = get_api_client(
        api_server_endpoint=arguments.api_server_endpoint,
        token=arguments.token,
        kubeconfig=arguments.kubeconfig,
        context=arguments.context,
        verify_ssl=not arguments.no_cert_check,
    )
    return Cluster.connect(api_client, request_timeout=arguments.request_timeout)


def _get_table(registry: TableRegistry, name: str) -> Table:
    # The osquery names are accepted as well
    name = name.removeprefix("kubernetes_")
    try:
        return registry[name]
    except KeyError:
        raise LookupError(f"Unknown table: {name}") from None


def _run(arguments: argparse.Namespace) -> None:
    registry = build_registry()

    if arguments.command == "tables":
        for name in sorted(registry):
            sys.stdout.write(f"{name}\n")
        return

    table = _get_table(registry, arguments.table)
    if arguments.command == "schema":
        for column in table.columns():
            sys.stdout.write(f"{column.name} {column.type.value}\n")
        return

    cluster = connect(arguments)
    logger.info("Connected to cluster %s", cluster.uid)
    for row in table.generate(cluster, HostContext()):
        sys.stdout.write(json.dumps(row, sort_keys=True) + "\n")


def main(args: Sequence[str] | None = None) -> int:
    if args is None:
        args = sys.argv[1:]
    arguments = parse_arguments(args)

    try:
        setup_logging(arguments.verbose)
        logger.debug("parsed arguments: %s", arguments)

        with Profile(enabled=bool(arguments.profile), profile_file=arguments.profile):
            _run(arguments)
    except TransportError as e:
        if arguments.debug:
            raise
        cause = e.__cause__
        if isinstance(cause, urllib3.exceptions.MaxRetryError) and isinstance(
            cause.reason, urllib3.exceptions.NewConnectionError
        ):
            sys.stderr.write(
                "Failed to establish a connection to %s:%s at URL %s\n"
                % (cause.pool.host, cause.pool.port, cause.url)
            )
        else:
            sys.stderr.write("%s\n" % e)
        return 1
    except Exception as e:
        if arguments.debug:
            raise
        sys.stderr.write("%s\n" % e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
