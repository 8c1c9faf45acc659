################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Residual contract and bundled residuals."""

from fusion_core.residuals.constant_residual import ConstantResidual
from fusion_core.residuals.position_residual import PositionResidual
from fusion_core.residuals.residual import Residual
from fusion_core.residuals.residual import ResidualError
from fusion_core.residuals.residual import ResidualEvaluation
from fusion_core.residuals.residual import ResidualPrediction


__all__ = [
    "ConstantResidual",
    "PositionResidual",
    "Residual",
    "ResidualError",
    "ResidualEvaluation",
    "ResidualPrediction",
]
