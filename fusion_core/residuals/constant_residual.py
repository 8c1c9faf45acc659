################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Residual for a 3-vector that stays constant between snapshots."""

from __future__ import annotations

from typing import Optional
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from fusion_core.residuals.residual import Residual
from fusion_core.residuals.residual import ResidualError
from fusion_core.residuals.residual import ResidualEvaluation
from fusion_core.residuals.residual import ResidualPrediction
from fusion_core.state import block_helpers
from fusion_core.state.block import Block
from fusion_core.state.block import BlockTypeId
from fusion_core.state.block import Vector3Block


# Index of the constant block in both states
_CONSTANT_SLOT: int = 0


class ConstantResidual(Residual):
    """Process residual r = x2 ⊟ x1 on the vector3 in slot 0.

    J1 = -I and J2 = I on the bound slot, zero on every other slot. The
    residual needs no measurements, so prepare_residual always succeeds.
    """

    def __init__(self) -> None:
        super().__init__(
            3,
            state1_block_types={_CONSTANT_SLOT: BlockTypeId.VECTOR3},
            state2_block_types={_CONSTANT_SLOT: BlockTypeId.VECTOR3},
        )

    def prepare_residual(self, t1_ns: int, t2_ns: int) -> bool:
        return True

    def predict(
        self, state1: Sequence[Block], t1_ns: int, t2_ns: int
    ) -> Optional[ResidualPrediction]:
        self._require_vector3(state1, "state1")
        # Identity process model
        dim: int = block_helpers.minimal_dimension(state1)
        return ResidualPrediction(
            state=block_helpers.copy_blocks(state1),
            jacobian_wrt_state1=np.eye(dim, dtype=np.float64),
        )

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
        x1: Vector3Block = self._require_vector3(state1, "state1")
        x2: Vector3Block = self._require_vector3(state2, "state2")
        residual: NDArray[np.float64] = x2.box_minus(x1)

        jacobians1: Optional[tuple[NDArray[np.float64], ...]] = None
        if jacobian_wrt_state1:
            blocks1: list[NDArray[np.float64]] = list(self.zero_jacobians(state1))
            blocks1[_CONSTANT_SLOT] = -np.eye(3, dtype=np.float64)
            jacobians1 = tuple(blocks1)
        jacobians2: Optional[tuple[NDArray[np.float64], ...]] = None
        if jacobian_wrt_state2:
            blocks2: list[NDArray[np.float64]] = list(self.zero_jacobians(state2))
            blocks2[_CONSTANT_SLOT] = np.eye(3, dtype=np.float64)
            jacobians2 = tuple(blocks2)

        return ResidualEvaluation(
            residual=residual,
            jacobian_wrt_state1=jacobians1,
            jacobian_wrt_state2=jacobians2,
        )

    def printable_name(self) -> str:
        return "const residual"

    def _require_vector3(self, state: Sequence[Block], name: str) -> Vector3Block:
        block: Optional[Vector3Block] = None
        if len(state) > _CONSTANT_SLOT:
            block = state[_CONSTANT_SLOT].narrow(Vector3Block)
        if block is None:
            raise ResidualError(
                f"{self.printable_name()} requires vector3 in {name} slot "
                f"{_CONSTANT_SLOT}"
            )
        return block
