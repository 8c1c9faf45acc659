################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Position sample produced by a position sensor (GNSS, motion capture)."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from fusion_core.measurements.measurement import Measurement
from fusion_core.measurements.measurement import MeasurementError
from fusion_core.timing.time_base import TimeBaseError
from fusion_core.timing.time_base import interpolation_fraction


class PositionMeasurement(Measurement):
    """Measured position of the body in world, in meters.

    Interpolation is linear in time:

        p(t) = p_prev + alpha * (p_next - p_prev)
        alpha = (t - t_prev) / (t_next - t_prev)
    """

    def __init__(self, position: Any) -> None:
        array: NDArray[np.float64] = np.array(position, dtype=np.float64).reshape(-1)
        if array.shape != (3,):
            raise MeasurementError("position must have shape (3,)")
        if not np.all(np.isfinite(array)):
            raise MeasurementError("position must contain finite values")
        self._position: NDArray[np.float64] = array

    @property
    def position(self) -> NDArray[np.float64]:
        """Return a copy of the measured position."""
        return self._position.copy()

    def interpolate(
        self,
        next_measurement: Measurement,
        t_prev_ns: int,
        t_ns: int,
        t_next_ns: int,
    ) -> PositionMeasurement:
        if not isinstance(next_measurement, PositionMeasurement):
            raise MeasurementError(
                f"Cannot interpolate PositionMeasurement with "
                f"{next_measurement.type_name()}"
            )
        try:
            alpha: float = interpolation_fraction(t_prev_ns, t_ns, t_next_ns)
        except TimeBaseError as exc:
            raise MeasurementError(str(exc)) from exc
        position: NDArray[np.float64] = self._position + alpha * (
            next_measurement._position - self._position
        )
        return PositionMeasurement(position)

    def copy(self) -> PositionMeasurement:
        return PositionMeasurement(self._position)

    def __repr__(self) -> str:
        return f"PositionMeasurement({self._position.tolist()})"
