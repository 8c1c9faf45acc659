################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for composite state tangent layout."""

from __future__ import annotations

import pytest

from fusion_core.state.block import BlockTypeId
from fusion_core.state.block import Vector2Block
from fusion_core.state.block import Vector3Block
from fusion_core.state.block import Vector5Block
from fusion_core.state.state_mapping import StateBlock
from fusion_core.state.state_mapping import StateMapping
from fusion_core.state.state_mapping import StateMappingError


def test_blocks_are_contiguous() -> None:
    """Block offsets accumulate left to right."""
    mapping: StateMapping = StateMapping.from_blocks(
        [Vector3Block(), Vector2Block(), Vector5Block()]
    )
    blocks: tuple[StateBlock, ...] = mapping.blocks()
    assert [block.start for block in blocks] == [0, 3, 5]
    assert [block.dim for block in blocks] == [3, 2, 5]
    assert mapping.dim() == 10
    assert len(mapping) == 3
    assert mapping.block(1).sl() == slice(3, 5)


def test_empty_state() -> None:
    """An empty state has an empty layout."""
    mapping: StateMapping = StateMapping.from_blocks([])
    assert mapping.dim() == 0
    assert mapping.blocks() == ()


def test_type_ids_and_compatibility() -> None:
    """Layouts compare by their block variant sequence."""
    a: StateMapping = StateMapping.from_blocks([Vector3Block(), Vector2Block()])
    b: StateMapping = StateMapping.from_blocks([Vector3Block(), Vector2Block()])
    c: StateMapping = StateMapping.from_blocks([Vector2Block(), Vector3Block()])
    assert a.type_ids() == (BlockTypeId.VECTOR3, BlockTypeId.VECTOR2)
    assert a.is_compatible(b)
    assert not a.is_compatible(c)


def test_rejects_non_blocks() -> None:
    """Only blocks may appear in a composite state."""
    with pytest.raises(StateMappingError):
        StateMapping.from_blocks([Vector3Block(), "vector3"])  # type: ignore[list-item]


def test_missing_block_index() -> None:
    """Out-of-range block lookups are rejected."""
    mapping: StateMapping = StateMapping.from_blocks([Vector3Block()])
    with pytest.raises(StateMappingError):
        mapping.block(1)


def test_validate_rejects_gaps() -> None:
    """Non-contiguous layouts are invalid."""
    mapping: StateMapping = StateMapping(
        _blocks=(
            StateBlock(index=0, type_id=BlockTypeId.VECTOR3, start=0, dim=3),
            StateBlock(index=1, type_id=BlockTypeId.VECTOR2, start=4, dim=2),
        )
    )
    with pytest.raises(StateMappingError):
        mapping.validate()
