################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""High-level configuration wrapper for the estimation core."""

from __future__ import annotations

from dataclasses import dataclass

from fusion_core.math_utils import random_source

from .filter_params import FilterParams
from .filter_params import FilterParamsError


class FilterConfigError(Exception):
    """Raised when filter configuration validation fails."""


@dataclass(frozen=True)
class FilterConfig:
    """Convenience wrapper around filter parameters.

    Constructing a config with random.seed set reseeds the shared random
    source, so blocks randomized without an explicit generator replay the
    same draws.
    """

    params: FilterParams

    def __init__(self, params: FilterParams) -> None:
        """Initialize the configuration wrapper and validate."""
        object.__setattr__(self, "params", params)
        self.validate()
        self.apply_random_seed()

    def validate(self) -> None:
        """Validate parameter invariants."""
        try:
            self.params.validate()
        except FilterParamsError as exc:
            raise FilterConfigError(str(exc)) from exc

    def max_buffer_size(self) -> int:
        """Return the configured per-timeline capacity."""
        return self.params.timeline.max_buffer_size

    def mergeable(self) -> bool:
        """Return the default mergeable flag for new timelines."""
        return self.params.timeline.mergeable

    def random_seed(self) -> int | None:
        """Return the configured random seed."""
        return self.params.random.seed

    def apply_random_seed(self) -> None:
        """Reseed the shared random source; an unset seed leaves it alone."""
        seed: int | None = self.random_seed()
        if seed is not None:
            random_source.seed(seed)
