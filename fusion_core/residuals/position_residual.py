################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Residual between a measured position and the position block of state2.

Equations:
    covariance = L L^T            (Cholesky)
    S = L^-1                      (square-root information)
    r = S (p_2 - p_meas)
    dr/dp_2 = S
    dr/dstate1 = 0
"""

from __future__ import annotations

import logging
from typing import Any
from typing import Optional
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from fusion_core.measurements.measurement import Measurement
from fusion_core.measurements.position_measurement import PositionMeasurement
from fusion_core.residuals.residual import Residual
from fusion_core.residuals.residual import ResidualError
from fusion_core.residuals.residual import ResidualEvaluation
from fusion_core.state.block import Block
from fusion_core.state.block import BlockTypeId
from fusion_core.state.block import Vector3Block
from fusion_core.timing.timeline import Timeline


_LOG: logging.Logger = logging.getLogger(__name__)

# Position samples must each be applied before integrating further
_IS_MERGEABLE: bool = False

_RESIDUAL_DIMENSION: int = 3

# Index of the position block in state2
_POSITION_SLOT: int = 0

# Covariance symmetry tolerance
_COV_SYMMETRY_ATOL: float = 1e-9


class PositionResidual(Residual):
    """Whitened position error at t2 from a position timeline."""

    def __init__(self, covariance: Any, timeline: Timeline) -> None:
        super().__init__(
            _RESIDUAL_DIMENSION,
            mergeable=_IS_MERGEABLE,
            state2_block_types={_POSITION_SLOT: BlockTypeId.VECTOR3},
            timelines=(timeline,),
        )
        self._sqrt_information: NDArray[np.float64] = _sqrt_information(covariance)
        self._position_measurement: Optional[PositionMeasurement] = None
        self._prepared_t2_ns: Optional[int] = None

    @property
    def sqrt_information(self) -> NDArray[np.float64]:
        """Return a copy of the square-root information matrix."""
        return self._sqrt_information.copy()

    def prepare_residual(self, t1_ns: int, t2_ns: int) -> bool:
        self._position_measurement = None
        self._prepared_t2_ns = None
        measurement: Optional[Measurement] = self.timelines[0].get_exact(t2_ns)
        if measurement is None:
            _LOG.info("No position measurement at %d", t2_ns)
            return False
        if not isinstance(measurement, PositionMeasurement):
            _LOG.info(
                "Measurement at %d is %s, not a position",
                t2_ns,
                measurement.type_name(),
            )
            return False
        # Copied so the sample survives later timeline mutations
        self._position_measurement = measurement.copy()
        self._prepared_t2_ns = t2_ns
        return True

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
        if self._position_measurement is None or self._prepared_t2_ns != t2_ns:
            return None
        if len(state2) <= _POSITION_SLOT:
            raise ResidualError("state2 must hold the position block")
        position_block: Optional[Vector3Block] = state2[_POSITION_SLOT].narrow(
            Vector3Block
        )
        if position_block is None:
            raise ResidualError(
                f"{self.printable_name()} requires vector3 in state2 slot "
                f"{_POSITION_SLOT}"
            )

        error: NDArray[np.float64] = (
            position_block.get_value() - self._position_measurement.position
        )
        residual: NDArray[np.float64] = self._sqrt_information @ error

        jacobians1: Optional[tuple[NDArray[np.float64], ...]] = None
        if jacobian_wrt_state1:
            jacobians1 = self.zero_jacobians(state1)

        jacobians2: Optional[tuple[NDArray[np.float64], ...]] = None
        if jacobian_wrt_state2:
            blocks: list[NDArray[np.float64]] = list(self.zero_jacobians(state2))
            blocks[_POSITION_SLOT] = self._sqrt_information.copy()
            jacobians2 = tuple(blocks)

        return ResidualEvaluation(
            residual=residual,
            jacobian_wrt_state1=jacobians1,
            jacobian_wrt_state2=jacobians2,
        )

    def printable_name(self) -> str:
        return "Position residual"


def _sqrt_information(covariance: Any) -> NDArray[np.float64]:
    """Return L^-1 for the Cholesky factor L of a 3x3 covariance."""
    cov: NDArray[np.float64] = np.asarray(covariance, dtype=np.float64)
    if cov.shape != (3, 3):
        raise ResidualError("covariance must have shape (3, 3)")
    if not np.all(np.isfinite(cov)):
        raise ResidualError("covariance must contain finite values")
    if not np.allclose(cov, cov.T, atol=_COV_SYMMETRY_ATOL):
        raise ResidualError("covariance must be symmetric")
    try:
        L: NDArray[np.float64] = np.linalg.cholesky(cov)
    except np.linalg.LinAlgError as exc:
        raise ResidualError("covariance must be positive definite") from exc
    return np.asarray(
        np.linalg.solve(L, np.eye(3, dtype=np.float64)), dtype=np.float64
    )
