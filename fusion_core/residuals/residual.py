################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Contract for residual error terms between two state snapshots.

A residual relates the measurements of its bound timelines to two composite
states at times t1 and t2. Residuals are embedded in a vector space, so
Jacobians are taken with respect to the tangent coordinates of each state
block: the Jacobian block for slot i has shape
(residual_dimension, state[i].minimal_dimension).

Calling convention:
    1. input_types_valid(state1, state2) once per configuration
    2. prepare_residual(t1_ns, t2_ns) looks up the bound timelines by exact
       timestamp; False means "skip this evaluation"
    3. evaluate(state1, state2, t1_ns, t2_ns) returns the residual and the
       requested Jacobians, or None when inputs are unavailable
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import Mapping
from typing import Optional
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from fusion_core.state.block import Block
from fusion_core.state.block import BlockTypeId
from fusion_core.timing.timeline import Timeline


_LOG: logging.Logger = logging.getLogger(__name__)


class ResidualError(Exception):
    """Raised when a residual is configured inconsistently."""


@dataclass(frozen=True)
class ResidualEvaluation:
    """Container for a residual vector and its Jacobians.

    Attributes:
        residual: Error vector of length residual_dimension
        jacobian_wrt_state1: One block per state1 slot, or None if not
            requested
        jacobian_wrt_state2: One block per state2 slot, or None if not
            requested
    """

    residual: NDArray[np.float64]
    jacobian_wrt_state1: Optional[tuple[NDArray[np.float64], ...]] = None
    jacobian_wrt_state2: Optional[tuple[NDArray[np.float64], ...]] = None


@dataclass(frozen=True)
class ResidualPrediction:
    """Container for a predicted successor state.

    Attributes:
        state: Predicted state at t2, owned by the caller
        jacobian_wrt_state1: Stacked tangent Jacobian of the prediction with
            respect to state1
    """

    state: list[Block]
    jacobian_wrt_state1: NDArray[np.float64]


class Residual(abc.ABC):
    """Base class of every residual."""

    def __init__(
        self,
        residual_dimension: int,
        *,
        mergeable: bool = True,
        state1_block_types: Optional[Mapping[int, BlockTypeId]] = None,
        state2_block_types: Optional[Mapping[int, BlockTypeId]] = None,
        timelines: Sequence[Timeline] = (),
    ) -> None:
        if residual_dimension <= 0:
            raise ResidualError("residual_dimension must be positive")
        self._residual_dimension: int = residual_dimension
        self._mergeable: bool = mergeable
        self._state1_block_types: dict[int, BlockTypeId] = _slot_types(
            state1_block_types, "state1_block_types"
        )
        self._state2_block_types: dict[int, BlockTypeId] = _slot_types(
            state2_block_types, "state2_block_types"
        )
        self._timelines: tuple[Timeline, ...] = tuple(timelines)

    @property
    def residual_dimension(self) -> int:
        return self._residual_dimension

    @property
    def mergeable(self) -> bool:
        return self._mergeable

    @property
    def state1_block_types(self) -> dict[int, BlockTypeId]:
        """Return the block variant required at each bound state1 slot."""
        return dict(self._state1_block_types)

    @property
    def state2_block_types(self) -> dict[int, BlockTypeId]:
        """Return the block variant required at each bound state2 slot."""
        return dict(self._state2_block_types)

    @property
    def timelines(self) -> tuple[Timeline, ...]:
        return self._timelines

    @abc.abstractmethod
    def prepare_residual(self, t1_ns: int, t2_ns: int) -> bool:
        """Return True if the bound timelines hold the required data."""

    def predict(
        self, state1: Sequence[Block], t1_ns: int, t2_ns: int
    ) -> Optional[ResidualPrediction]:
        """Predict the state at t2_ns; None when prediction is not modeled."""
        return None

    @abc.abstractmethod
    def evaluate(
        self,
        state1: Sequence[Block],
        state2: Sequence[Block],
        t1_ns: int,
        t2_ns: int,
        *,
        jacobian_wrt_state1: bool = True,
        jacobian_wrt_state2: bool = True,
    ) -> Optional[ResidualEvaluation]:
        """Evaluate the residual and the requested Jacobians."""

    @abc.abstractmethod
    def printable_name(self) -> str:
        """Return a diagnostic label."""

    def input_types_valid(
        self, state1: Sequence[Block], state2: Sequence[Block]
    ) -> bool:
        """Return True if every bound slot holds its declared block variant.

        Slots a residual does not bind may hold any block, and states may be
        longer than the highest bound slot.
        """
        all_types_ok: bool = _layout_matches(
            state1, self._state1_block_types
        ) and _layout_matches(state2, self._state2_block_types)
        if not all_types_ok:
            _LOG.error(
                "%s has wrong block types. Check your state indices!",
                self.printable_name(),
            )
        return all_types_ok

    def zero_jacobians(
        self, state: Sequence[Block]
    ) -> tuple[NDArray[np.float64], ...]:
        """Return zero Jacobian blocks shaped for state."""
        return tuple(
            np.zeros(
                (self._residual_dimension, block.minimal_dimension), dtype=np.float64
            )
            for block in state
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.printable_name()!r}>"


def _layout_matches(
    state: Sequence[Block], expected: Mapping[int, BlockTypeId]
) -> bool:
    for slot, type_id in expected.items():
        if slot >= len(state):
            return False
        block: Block = state[slot]
        if not isinstance(block, Block) or block.type_id != type_id:
            return False
    return True


def _slot_types(
    slot_types: Optional[Mapping[int, BlockTypeId]], name: str
) -> dict[int, BlockTypeId]:
    """Validate a slot index to block variant map."""
    if slot_types is None:
        return {}
    result: dict[int, BlockTypeId] = {}
    for slot, type_id in slot_types.items():
        if not isinstance(slot, int) or isinstance(slot, bool) or slot < 0:
            raise ResidualError(f"{name} slots must be non-negative ints")
        try:
            result[slot] = BlockTypeId(type_id)
        except ValueError as exc:
            raise ResidualError(f"{name} has unknown block type {type_id}") from exc
    return result
