#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""A helper module to profile a query. The main part is a contextmanager
wrapping the CLI run, enabled by ``--profile FILE``."""

import cProfile
from pathlib import Path
from types import TracebackType
from typing import Any

from kubequery.log import logger


class Profile:
    def __init__(
        self, enabled: bool = True, profile_file: Path | str | None = None, **kwargs: Any
    ) -> None:
        if profile_file is None or isinstance(profile_file, Path):
            self._profile_file = profile_file
        else:
            self._profile_file = Path(profile_file)

        self._enabled = enabled
        self._kwargs = kwargs
        self._profile: cProfile.Profile | None = None

    def __enter__(self) -> "Profile":
        if self._enabled:
            logger.info("Recording profile")
            self._profile = cProfile.Profile(**self._kwargs)
            self._profile.enable()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if not self._enabled or not self._profile:
            return

        self._profile.disable()

        if not self._profile_file:
            self._profile.print_stats()
            return

        self._profile.dump_stats(str(self._profile_file))
        logger.info("Created profile file: %s", self._profile_file)
