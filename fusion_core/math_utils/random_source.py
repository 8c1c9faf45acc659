################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Shared standard-normal random source for state initialization and tests."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


_RNG: np.random.Generator = np.random.default_rng()


def seed(seed_value: int | None) -> None:
    """Reseed the shared generator; None draws fresh OS entropy."""
    global _RNG
    _RNG = np.random.default_rng(seed_value)


def normal_vector(
    dim: int, rng: np.random.Generator | None = None
) -> NDArray[np.float64]:
    """Return a vector of independent standard normal samples."""
    if dim <= 0:
        raise ValueError("dim must be positive")
    generator: np.random.Generator = rng if rng is not None else _RNG
    return np.asarray(generator.standard_normal(dim), dtype=np.float64)
