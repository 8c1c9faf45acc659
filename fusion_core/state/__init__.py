################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Manifold blocks and composite state operations."""

from fusion_core.state.block import Block
from fusion_core.state.block import BlockError
from fusion_core.state.block import BlockTypeId
from fusion_core.state.block import Vector1Block
from fusion_core.state.block import Vector2Block
from fusion_core.state.block import Vector3Block
from fusion_core.state.block import Vector4Block
from fusion_core.state.block import Vector5Block
from fusion_core.state.block import Vector6Block
from fusion_core.state.block import VectorBlock
from fusion_core.state.block import create_block
from fusion_core.state.state_mapping import StateBlock
from fusion_core.state.state_mapping import StateMapping


__all__ = [
    "Block",
    "BlockError",
    "BlockTypeId",
    "StateBlock",
    "StateMapping",
    "Vector1Block",
    "Vector2Block",
    "Vector3Block",
    "Vector4Block",
    "Vector5Block",
    "Vector6Block",
    "VectorBlock",
    "create_block",
]
