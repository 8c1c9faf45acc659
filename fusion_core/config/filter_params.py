################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Structured configuration schema for the estimation core."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import fields
from dataclasses import replace
from typing import Any


# Maximum number of measurements retained per sensor timeline
MAX_BUFFER_SIZE: int = 100
# Whether timeline samples may be merged before the filter consumes them
TIMELINE_MERGEABLE: bool = True

# Seed applied to the shared random source (None leaves it unseeded)
RANDOM_SEED: int | None = None


class FilterParamsError(Exception):
    """Raised when filter parameter validation fails."""


def _require_positive_int(value: int, name: str) -> None:
    """Require a positive integer value."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise FilterParamsError(f"{name} must be an int")
    if value <= 0:
        raise FilterParamsError(f"{name} must be positive")


def _validate_optional_non_negative_int(value: int | None, name: str) -> None:
    """Validate an optional non-negative integer value."""
    if value is None:
        return
    if not isinstance(value, int) or isinstance(value, bool):
        raise FilterParamsError(f"{name} must be an int")
    if value < 0:
        raise FilterParamsError(f"{name} must be non-negative")


@dataclass(frozen=True)
class TimelineParams:
    """Per-sensor measurement buffer parameters."""

    # Maximum number of measurements retained per timeline
    max_buffer_size: int = MAX_BUFFER_SIZE
    # Whether samples may be merged before consumption
    mergeable: bool = TIMELINE_MERGEABLE


@dataclass(frozen=True)
class RandomParams:
    """Random source parameters for state initialization."""

    # Seed applied to the shared random source
    seed: int | None = RANDOM_SEED


@dataclass(frozen=True)
class FilterParams:
    """Complete configuration tree for the estimation core."""

    timeline: TimelineParams
    random: RandomParams

    @classmethod
    def defaults(cls) -> FilterParams:
        """Return the default parameter tree."""
        return cls(
            timeline=TimelineParams(),
            random=RandomParams(),
        )

    def validate(self) -> None:
        """Validate parameter invariants and constraints."""
        _require_positive_int(
            self.timeline.max_buffer_size, "timeline.max_buffer_size"
        )
        if not isinstance(self.timeline.mergeable, bool):
            raise FilterParamsError("timeline.mergeable must be a bool")
        _validate_optional_non_negative_int(self.random.seed, "random.seed")

    def replace(self, **namespace_overrides: Any) -> FilterParams:
        """Return a modified copy of the parameters."""
        return replace(self, **namespace_overrides)

    def as_nested_dict(self) -> dict[str, Any]:
        """Return a nested dict representation for debugging."""
        return _dataclass_to_dict(self)


def _dataclass_to_dict(value: Any) -> Any:
    """Convert dataclasses into plain Python values."""
    if hasattr(value, "__dataclass_fields__"):
        return {
            field.name: _dataclass_to_dict(getattr(value, field.name))
            for field in fields(value)
        }
    return value
