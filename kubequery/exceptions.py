#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""User-defined exceptions surfaced to the query host."""

__all__ = [
    "ConfigurationError",
    "KubeQueryError",
    "ProjectionError",
    "QueryCancelled",
    "SchemaError",
    "TransportError",
]


# never used directly in the code. Just some wrapper to make all of our
# exceptions handleable with one call
class KubeQueryError(Exception):
    pass


class TransportError(KubeQueryError):
    """A list call against the API server failed.

    The exception raised by the client library is chained as ``__cause__``.
    Nothing is retried: the host may repeat the query.
    """


class QueryCancelled(KubeQueryError):
    """The host context was cancelled between two list calls."""


class ProjectionError(KubeQueryError):
    """A value could not be rendered into its column."""

    def __init__(self, column: str, reason: str) -> None:
        super().__init__(f"Cannot project column '{column}': {reason}")
        self.column = column


# Raised while a table is registered, i.e. when the module declaring it is
# imported. A row model that cannot be mapped to columns is a programming
# error and must never reach a query.
class SchemaError(KubeQueryError):
    pass


class ConfigurationError(KubeQueryError):
    """No usable credentials for the API server were found."""
