################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Operations over composite states (ordered sequences of blocks).

Every operation validates all lengths and block variants before writing, so
a failing call raises BlockError without touching its output.
"""

from __future__ import annotations

from typing import Any
from typing import Optional
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from fusion_core.state.block import Block
from fusion_core.state.block import BlockError
from fusion_core.state.state_mapping import StateBlock
from fusion_core.state.state_mapping import StateMapping


def minimal_dimension(state: Sequence[Block]) -> int:
    """Return the stacked tangent dimension of a composite state."""
    return sum(block.minimal_dimension for block in state)


def copy_blocks(state: Sequence[Block]) -> list[Block]:
    """Return a deep copy of a composite state."""
    return [block.clone() for block in state]


def set_random(
    state: Sequence[Block], rng: np.random.Generator | None = None
) -> None:
    """Overwrite every block with a random draw."""
    for block in state:
        block.set_random(rng)


def box_plus(
    state: Sequence[Block],
    dx: Any,
    result: Optional[Sequence[Block]] = None,
) -> list[Block]:
    """Compute result = state ⊞ dx block by block.

    If result is None a clone of state is allocated. The result blocks are
    returned as a list.
    """
    mapping: StateMapping = StateMapping.from_blocks(state)
    delta: NDArray[np.float64] = _as_tangent_vector(dx, mapping.dim())

    out: list[Block]
    if result is None:
        out = copy_blocks(state)
    else:
        out = list(result)
        _require_same_layout(state, out, "result")

    entry: StateBlock
    for entry in mapping.blocks():
        state[entry.index].box_plus(delta[entry.sl()], out[entry.index])
    return out


def box_minus(a: Sequence[Block], b: Sequence[Block]) -> NDArray[np.float64]:
    """Return the stacked tangent vector dx with b ⊞ dx = a."""
    _require_same_layout(a, b, "b")
    mapping: StateMapping = StateMapping.from_blocks(a)
    dx: NDArray[np.float64] = np.zeros(mapping.dim(), dtype=np.float64)
    entry: StateBlock
    for entry in mapping.blocks():
        dx[entry.sl()] = a[entry.index].box_minus(b[entry.index])
    return dx


def _require_same_layout(
    state: Sequence[Block], other: Sequence[Block], name: str
) -> None:
    if len(state) != len(other):
        raise BlockError(
            f"{name} has {len(other)} blocks but the state has {len(state)}"
        )
    for index, (block, other_block) in enumerate(zip(state, other)):
        if type(block) is not type(other_block):
            raise BlockError(f"{name} block {index} does not match the state variant")


def _as_tangent_vector(dx: Any, dim: int) -> NDArray[np.float64]:
    array: NDArray[np.float64] = np.asarray(dx, dtype=np.float64).reshape(-1)
    if array.shape != (dim,):
        raise BlockError(f"dx must have length {dim}, got {array.size}")
    if not np.all(np.isfinite(array)):
        raise BlockError("dx must contain finite values")
    return array
