#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import io
import logging

import pytest

from kubequery import log


@pytest.mark.parametrize(
    "verbosity, level",
    [
        (-1, logging.WARNING),
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, log.VERBOSE),
        (3, logging.DEBUG),
        (4, logging.DEBUG),
    ],
)
def test_verbosity_to_log_level(verbosity: int, level: int) -> None:
    assert log.verbosity_to_log_level(verbosity) == level


def test_verbose_level_name() -> None:
    assert logging.getLevelName(log.VERBOSE) == "VERBOSE"


def test_setup_logging_writes_to_stream() -> None:
    stream = io.StringIO()
    try:
        log.setup_logging(1, stream=stream)
        logging.getLogger("kubequery.k8s.tables").info("Generating table %s", "pods")
        logging.getLogger("kubequery.k8s.tables").log(log.VERBOSE, "not shown")
    finally:
        log.clear_console_logging()

    output = stream.getvalue()
    assert "[20] [kubequery.k8s.tables] Generating table pods" in output
    assert "not shown" not in output


def test_setup_logging_silences_client_libraries() -> None:
    try:
        log.setup_logging(2, stream=io.StringIO())
        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("kubernetes").level == logging.WARNING
    finally:
        log.clear_console_logging()
