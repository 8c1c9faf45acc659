################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Measurement contract for samples stored in a timeline.

A measurement carries no timestamp of its own; the timeline key is its
time. Interpolation receives all three timestamps explicitly.
"""

from __future__ import annotations

import abc
from typing import TypeVar


MeasurementT = TypeVar("MeasurementT", bound="Measurement")


class MeasurementError(Exception):
    """Raised when measurements are combined inconsistently."""


class Measurement(abc.ABC):
    """Base class of every sensor sample."""

    @abc.abstractmethod
    def interpolate(
        self,
        next_measurement: Measurement,
        t_prev_ns: int,
        t_ns: int,
        t_next_ns: int,
    ) -> Measurement:
        """Return a new sample at t_ns between this one and next_measurement.

        Args:
            next_measurement: The neighbouring sample at t_next_ns
            t_prev_ns: Timestamp of this sample
            t_ns: Target timestamp, t_prev_ns < t_ns < t_next_ns
            t_next_ns: Timestamp of next_measurement

        Raises:
            MeasurementError: next_measurement is not of the same variant
        """

    @abc.abstractmethod
    def copy(self: MeasurementT) -> MeasurementT:
        """Return an independent deep copy."""

    def type_name(self) -> str:
        """Return a diagnostic tag for the measurement variant."""
        return type(self).__name__
