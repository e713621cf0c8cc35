#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import logging
import sys
from typing import IO

# Just for reference, the predefined logging levels:
#
# Python         added here
# -------------------------
# CRITICAL 50
# ERROR    40
# WARNING  30                 <= default level
# INFO     20
#                VERBOSE  15
# DEBUG    10
#
# One -v on the command line shows what kubequery does (tables, pages),
# a second one adds VERBOSE (per page details), a third one everything.
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

logger = logging.getLogger("kubequery")

# The client libraries log every request on DEBUG and INFO.
_NOISY_LOGGERS = ("urllib3", "kubernetes")


def get_formatter(format_str: str = "%(asctime)s [%(levelno)s] [%(name)s] %(message)s") -> logging.Formatter:
    """Returns a new message formater instance that uses the standard
    kubequery log format by default. You can also set another format
    if you like."""
    return logging.Formatter(format_str)


def clear_console_logging() -> None:
    logger.handlers[:] = []
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.WARNING)


# Set default logging handler to avoid "No handler found" warnings.
clear_console_logging()


def setup_logging_handler(stream: IO[str], formatter: logging.Formatter | None = None) -> None:
    """Write all kubequery log messages to the given stream.

    The osquery extension talks to the host over a socket, stdout is free, but
    the CLI prints rows on stdout. Log output therefore goes to stderr there.
    """
    if formatter is None:
        formatter = get_formatter()

    handler = logging.StreamHandler(stream=stream)
    handler.setFormatter(formatter)

    del logger.handlers[:]  # Remove all previously existing handlers
    logger.addHandler(handler)


def verbosity_to_log_level(verbosity: int) -> int:
    """Values for "verbosity":

      0: enables WARNING and above
      1: enables INFO and above
      2: enables VERBOSE and above
      3: enables DEBUG and above (ALL messages)
    """
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    if verbosity == 2:
        return VERBOSE
    return logging.DEBUG


def setup_logging(verbosity: int, stream: IO[str] = sys.stderr) -> None:
    setup_logging_handler(stream)
    logger.setLevel(verbosity_to_log_level(verbosity))
    if verbosity < 3:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
