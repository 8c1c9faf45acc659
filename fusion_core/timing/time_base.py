################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Integer-nanosecond time helpers for measurement timelines.

All timestamps are int nanoseconds since an arbitrary epoch. The epoch is
irrelevant because only differences, ordering and exact equality are used.
Float seconds are never used as keys.
"""

from __future__ import annotations


class TimeBaseError(Exception):
    """Raised when timestamp validation or interpolation fails."""


def is_timestamp_ns(value: object) -> bool:
    """Return True when value is a plain int (bools are rejected)."""
    return isinstance(value, int) and not isinstance(value, bool)


def validate_timestamp_ns(t_ns: object) -> int:
    """Return t_ns after checking it is a non-negative int nanosecond stamp."""
    if not is_timestamp_ns(t_ns):
        raise TimeBaseError("Timestamp must be an int in nanoseconds")
    assert isinstance(t_ns, int)
    if t_ns < 0:
        raise TimeBaseError("Timestamp must be non-negative")
    return t_ns


def interpolation_fraction(t_prev_ns: int, t_ns: int, t_next_ns: int) -> float:
    """Return the fraction of the way t_ns lies from t_prev_ns to t_next_ns.

    Requires t_prev_ns <= t_ns <= t_next_ns and t_prev_ns < t_next_ns.
    """
    if t_next_ns <= t_prev_ns:
        raise TimeBaseError("Interpolation interval must be non-empty")
    if t_ns < t_prev_ns or t_ns > t_next_ns:
        raise TimeBaseError("Interpolation target must lie inside the interval")
    return float(t_ns - t_prev_ns) / float(t_next_ns - t_prev_ns)
