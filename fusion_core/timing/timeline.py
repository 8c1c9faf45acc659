################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""
Bounded, time-ordered measurement buffer for one sensor stream
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from bisect import bisect_right
from dataclasses import dataclass
from typing import Optional

from fusion_core.config.filter_config import FilterConfig
from fusion_core.measurements.measurement import Measurement
from fusion_core.timing.time_base import TimeBaseError
from fusion_core.timing.time_base import validate_timestamp_ns


_LOG: logging.Logger = logging.getLogger(__name__)


class TimelineError(Exception):
    """Raised when timeline operations violate buffer invariants."""


@dataclass(frozen=True)
class TimedMeasurement:
    """A measurement together with its timeline key.

    Attributes:
        t_ns: Timeline key in integer nanoseconds
        measurement: Shared reference into the timeline storage
    """

    t_ns: int
    measurement: Measurement


class Timeline:
    """Bounded buffer of one sensor's measurements keyed by timestamp.

    Purpose:
        Store timestamped samples of one sensor stream and serve them at the
        instants a residual is evaluated, interpolating boundary samples
        where the stream has none.

    Data contract:
        - Keys are non-negative int nanoseconds, strictly unique, ascending.
        - The number of stored measurements never exceeds capacity. When full,
          add() evicts the oldest key first (FIFO by time, not LRU).
        - The timeline owns its measurements. Lookups return shared
          references that stay valid only until the next add(), eviction,
          delete_older_than() or clear(); copy a measurement to keep it.

    Mergeable streams:
        A non-mergeable timeline holds samples that the filter must apply one
        by one before integrating further, like classic Kalman filter
        updates. A mergeable timeline may be batched before consumption.

    Side effects of reads:
        interpolate_and_insert_at() and get_range() insert interpolated
        samples into the buffer so that later exact lookups see them. The
        buffer content is therefore not purely a function of add() calls.
    """

    def __init__(self, *, capacity: int, mergeable: bool = True) -> None:
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise TimelineError("capacity must be an int")
        if capacity <= 0:
            raise TimelineError("capacity must be positive")
        self._capacity: int = capacity
        self._mergeable: bool = mergeable
        self._timestamps: list[int] = []
        self._measurements: list[Measurement] = []

    @classmethod
    def from_config(
        cls, config: FilterConfig, *, mergeable: Optional[bool] = None
    ) -> Timeline:
        """Build a timeline from configuration, optionally overriding mergeable."""
        return cls(
            capacity=config.max_buffer_size(),
            mergeable=config.mergeable() if mergeable is None else mergeable,
        )

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def mergeable(self) -> bool:
        return self._mergeable

    def __len__(self) -> int:
        return len(self._timestamps)

    def num_measurements(self) -> int:
        """Return the number of buffered measurements."""
        return len(self._timestamps)

    def is_empty(self) -> bool:
        """Return True if the buffer is empty."""
        return not self._timestamps

    def timestamps(self) -> list[int]:
        """Return the buffered keys in ascending order."""
        return list(self._timestamps)

    def add(self, t_ns: int, measurement: Measurement) -> None:
        """Insert a measurement, evicting the oldest entries when full."""
        t_ns = self._validate(t_ns)
        if not isinstance(measurement, Measurement):
            raise TimelineError("measurement must be a Measurement")
        index: int = bisect_left(self._timestamps, t_ns)
        if index < len(self._timestamps) and self._timestamps[index] == t_ns:
            raise TimelineError(f"Duplicate timestamp {t_ns}")

        while len(self._timestamps) >= self._capacity:
            _LOG.debug(
                "Timeline full (%d), evicting measurement at %d",
                self._capacity,
                self._timestamps[0],
            )
            del self._timestamps[0]
            del self._measurements[0]

        index = bisect_left(self._timestamps, t_ns)
        self._timestamps.insert(index, t_ns)
        self._measurements.insert(index, measurement)

    def get_exact(self, t_ns: int) -> Optional[Measurement]:
        """Return the measurement stored exactly at t_ns, if any."""
        t_ns = self._validate(t_ns)
        index: int = bisect_left(self._timestamps, t_ns)
        if index < len(self._timestamps) and self._timestamps[index] == t_ns:
            return self._measurements[index]
        return None

    def oldest_timestamp(self) -> int:
        """Return the oldest key; the buffer must not be empty."""
        if not self._timestamps:
            raise TimelineError("Timeline is empty")
        return self._timestamps[0]

    def newest_timestamp(self) -> int:
        """Return the newest key; the buffer must not be empty."""
        if not self._timestamps:
            raise TimelineError("Timeline is empty")
        return self._timestamps[-1]

    def next_timestamp_after(self, t_ns: int) -> Optional[int]:
        """Return the smallest key strictly greater than t_ns, or None."""
        t_ns = self._validate(t_ns)
        index: int = bisect_right(self._timestamps, t_ns)
        if index < len(self._timestamps):
            return self._timestamps[index]
        return None

    def interpolate_and_insert_at(self, t_ns: int) -> bool:
        """Ensure a measurement exists exactly at t_ns.

        When no key equals t_ns, the entry just before t_ns interpolates a
        new sample towards the entry just after it, and the result is added
        to the buffer.

        Returns:
            True if a measurement exists at t_ns afterwards, False if t_ns lies
            outside the span covered by the buffer
        """
        t_ns = self._validate(t_ns)
        index: int = bisect_left(self._timestamps, t_ns)
        if index < len(self._timestamps) and self._timestamps[index] == t_ns:
            return True
        if index == 0 or index == len(self._timestamps):
            return False

        t_prev_ns: int = self._timestamps[index - 1]
        t_next_ns: int = self._timestamps[index]
        previous: Measurement = self._measurements[index - 1]
        interpolated: Measurement = previous.interpolate(
            self._measurements[index], t_prev_ns, t_ns, t_next_ns
        )
        self.add(t_ns, interpolated)
        _LOG.debug("Split measurements at %d and %d at %d", t_prev_ns, t_next_ns, t_ns)
        return True

    def get_range(self, t_min_ns: int, t_max_ns: int) -> list[TimedMeasurement]:
        """Return every measurement with key in [t_min_ns, t_max_ns].

        Boundary samples are interpolated and inserted when missing:

            time      x   x   x   x   x   x   x
            min/max     ^               ^
            return      x x   x   x   x x

        An empty list is returned when the buffer does not cover the whole
        interval.
        """
        t_min_ns = self._validate(t_min_ns)
        t_max_ns = self._validate(t_max_ns)
        if t_min_ns > t_max_ns or not self._timestamps:
            return []
        if self.oldest_timestamp() > t_min_ns or self.newest_timestamp() < t_max_ns:
            return []

        self.interpolate_and_insert_at(t_min_ns)
        self.interpolate_and_insert_at(t_max_ns)

        if self.oldest_timestamp() > t_min_ns:
            # Materializing the upper boundary evicted the lower one
            _LOG.warning(
                "Timeline capacity %d too small to serve range [%d, %d]",
                self._capacity,
                t_min_ns,
                t_max_ns,
            )
            return []

        start: int = bisect_left(self._timestamps, t_min_ns)
        stop: int = bisect_right(self._timestamps, t_max_ns)
        return [
            TimedMeasurement(
                t_ns=self._timestamps[index],
                measurement=self._measurements[index],
            )
            for index in range(start, stop)
        ]

    def delete_older_than(self, t_ns: int) -> int:
        """Drop measurements with keys strictly older than t_ns.

        Returns:
            The number of measurements dropped
        """
        t_ns = self._validate(t_ns)
        count: int = bisect_left(self._timestamps, t_ns)
        if count > 0:
            del self._timestamps[:count]
            del self._measurements[:count]
        return count

    def clear(self) -> None:
        """Release every buffered measurement."""
        self._timestamps = []
        self._measurements = []

    @staticmethod
    def _validate(t_ns: int) -> int:
        try:
            return validate_timestamp_ns(t_ns)
        except TimeBaseError as exc:
            raise TimelineError(str(exc)) from exc
