################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the position residual."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pytest
from numpy.typing import NDArray

from fusion_core.measurements.measurement import Measurement
from fusion_core.measurements.position_measurement import PositionMeasurement
from fusion_core.residuals.position_residual import PositionResidual
from fusion_core.residuals.residual import ResidualError
from fusion_core.residuals.residual import ResidualEvaluation
from fusion_core.state.block import Block
from fusion_core.state.block import Vector1Block
from fusion_core.state.block import Vector2Block
from fusion_core.state.block import Vector3Block
from fusion_core.timing.timeline import Timeline


class _ScalarMeasurement(Measurement):
    def interpolate(
        self,
        next_measurement: Measurement,
        t_prev_ns: int,
        t_ns: int,
        t_next_ns: int,
    ) -> Measurement:
        return _ScalarMeasurement()

    def copy(self) -> _ScalarMeasurement:
        return _ScalarMeasurement()


def _make_residual(
    covariance: NDArray[np.float64],
) -> tuple[PositionResidual, Timeline]:
    timeline: Timeline = Timeline(capacity=8, mergeable=False)
    timeline.add(100, PositionMeasurement([1.0, 2.0, 3.0]))
    return PositionResidual(covariance, timeline), timeline


def test_metadata() -> None:
    """Position residuals are 3-dimensional and not mergeable."""
    residual, timeline = _make_residual(np.eye(3))
    assert residual.residual_dimension == 3
    assert not residual.mergeable
    assert residual.timelines == (timeline,)
    assert residual.printable_name() == "Position residual"
    assert residual.state1_block_types == {}
    assert residual.predict([Vector3Block()], 0, 100) is None


def test_input_types_accept_snapshot_pairs() -> None:
    """Two snapshots of one composite state pass the layout check."""
    residual, _ = _make_residual(np.eye(3))
    assert residual.input_types_valid([Vector3Block()], [Vector3Block()])
    state: list[Block] = [Vector3Block(), Vector2Block(), Vector1Block()]
    assert residual.input_types_valid(state, state)
    assert residual.input_types_valid([], [Vector3Block(), Vector3Block()])


def test_input_types_reject_wrong_position_slot() -> None:
    """Slot 0 of state2 must be the vector3 position."""
    residual, _ = _make_residual(np.eye(3))
    assert not residual.input_types_valid([Vector3Block()], [Vector2Block()])
    assert not residual.input_types_valid(
        [Vector3Block()], [Vector1Block(), Vector3Block()]
    )
    assert not residual.input_types_valid([Vector3Block()], [])


def test_sqrt_information_whitens() -> None:
    """S^T S equals the inverse covariance."""
    covariance: NDArray[np.float64] = np.diag([4.0, 1.0, 0.25])
    residual, _ = _make_residual(covariance)
    sqrt_info: NDArray[np.float64] = residual.sqrt_information
    assert np.allclose(sqrt_info.T @ sqrt_info, np.linalg.inv(covariance))
    assert np.allclose(np.diag(sqrt_info), [0.5, 1.0, 2.0])


def test_prepare_requires_exact_sample() -> None:
    """Only a sample exactly at t2 prepares the residual."""
    residual, _ = _make_residual(np.eye(3))
    assert not residual.prepare_residual(0, 99)
    assert residual.evaluate([Vector3Block()], [Vector3Block()], 0, 99) is None
    assert residual.prepare_residual(0, 100)


def test_prepare_rejects_other_measurements() -> None:
    """Samples of another variant do not prepare the residual."""
    residual, timeline = _make_residual(np.eye(3))
    timeline.add(200, _ScalarMeasurement())
    assert not residual.prepare_residual(100, 200)
    assert residual.evaluate([Vector3Block()], [Vector3Block()], 100, 200) is None


def test_evaluate_residual_and_jacobians() -> None:
    """r = S (p2 - p_meas) with J2 = S on the position slot."""
    covariance: NDArray[np.float64] = np.diag([4.0, 4.0, 4.0])
    residual, _ = _make_residual(covariance)
    assert residual.prepare_residual(0, 100)

    state1: list[Block] = [Vector3Block(), Vector1Block()]
    state2: list[Block] = [Vector3Block([3.0, 2.0, 1.0]), Vector2Block()]
    evaluation: Optional[ResidualEvaluation] = residual.evaluate(
        state1, state2, 0, 100
    )

    assert evaluation is not None
    assert np.allclose(evaluation.residual, [1.0, 0.0, -1.0])
    assert evaluation.jacobian_wrt_state1 is not None
    assert [block.shape for block in evaluation.jacobian_wrt_state1] == [
        (3, 3),
        (3, 1),
    ]
    assert all(not np.any(block) for block in evaluation.jacobian_wrt_state1)
    assert evaluation.jacobian_wrt_state2 is not None
    assert np.allclose(evaluation.jacobian_wrt_state2[0], 0.5 * np.eye(3))
    assert evaluation.jacobian_wrt_state2[1].shape == (3, 2)
    assert not np.any(evaluation.jacobian_wrt_state2[1])


def test_evaluate_multi_block_states() -> None:
    """Longer states evaluate with the position Jacobian on slot 0 only."""
    residual, _ = _make_residual(np.eye(3))
    assert residual.prepare_residual(0, 100)
    state: list[Block] = [
        Vector3Block([1.0, 2.0, 4.0]),
        Vector3Block([9.0, 9.0, 9.0]),
    ]
    assert residual.input_types_valid(state, state)

    evaluation: Optional[ResidualEvaluation] = residual.evaluate(state, state, 0, 100)

    assert evaluation is not None
    assert np.allclose(evaluation.residual, [0.0, 0.0, 1.0])
    assert evaluation.jacobian_wrt_state2 is not None
    assert np.allclose(evaluation.jacobian_wrt_state2[0], np.eye(3))
    assert not np.any(evaluation.jacobian_wrt_state2[1])


def test_evaluate_requires_prepared_time() -> None:
    """Evaluating at a t2 other than the prepared one yields nothing."""
    residual, timeline = _make_residual(np.eye(3))
    timeline.add(200, PositionMeasurement([5.0, 5.0, 5.0]))
    assert residual.prepare_residual(0, 100)
    assert residual.evaluate([Vector3Block()], [Vector3Block()], 100, 200) is None
    assert residual.prepare_residual(100, 200)
    evaluation: Optional[ResidualEvaluation] = residual.evaluate(
        [Vector3Block()], [Vector3Block([5.0, 5.0, 5.0])], 100, 200
    )
    assert evaluation is not None
    assert np.allclose(evaluation.residual, np.zeros(3))


def test_evaluate_skips_unrequested_jacobians() -> None:
    """Unrequested Jacobians are None."""
    residual, _ = _make_residual(np.eye(3))
    residual.prepare_residual(0, 100)
    evaluation: Optional[ResidualEvaluation] = residual.evaluate(
        [Vector3Block()],
        [Vector3Block([1.0, 2.0, 3.0])],
        0,
        100,
        jacobian_wrt_state1=False,
        jacobian_wrt_state2=False,
    )
    assert evaluation is not None
    assert np.allclose(evaluation.residual, np.zeros(3))
    assert evaluation.jacobian_wrt_state1 is None
    assert evaluation.jacobian_wrt_state2 is None


def test_prepared_sample_survives_eviction() -> None:
    """The prepared sample is a copy independent of the timeline."""
    residual, timeline = _make_residual(np.eye(3))
    residual.prepare_residual(0, 100)
    timeline.clear()
    evaluation: Optional[ResidualEvaluation] = residual.evaluate(
        [Vector3Block()], [Vector3Block()], 0, 100
    )
    assert evaluation is not None
    assert np.allclose(evaluation.residual, [-1.0, -2.0, -3.0])


def test_evaluate_rejects_wrong_slot() -> None:
    """A non-position block in slot 0 is a configuration error."""
    residual, _ = _make_residual(np.eye(3))
    residual.prepare_residual(0, 100)
    with pytest.raises(ResidualError):
        residual.evaluate([Vector3Block()], [Vector2Block()], 0, 100)


@pytest.mark.parametrize(
    "covariance",
    [
        np.eye(2),
        np.array([[1.0, 0.5, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]),
        -np.eye(3),
        np.full((3, 3), np.nan),
    ],
)
def test_bad_covariance(covariance: NDArray[np.float64]) -> None:
    """Covariances must be finite symmetric positive definite 3x3."""
    with pytest.raises(ResidualError):
        _make_residual(covariance)
