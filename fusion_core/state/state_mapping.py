################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tangent-space layout of a composite state.

Block i of a composite state occupies the stacked tangent vector starting at
the sum of the minimal dimensions of blocks 0..i-1, with length equal to its
own minimal dimension. Offsets accumulate left to right and the ordering is
the canonical flattening for every Jacobian and perturbation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from fusion_core.state.block import Block
from fusion_core.state.block import BlockTypeId


class StateMappingError(Exception):
    """Raised when a state mapping is invalid."""


@dataclass(frozen=True)
class StateBlock:
    """Position of one block inside the stacked tangent vector.

    Attributes:
        index: Position of the block in the composite state
        type_id: Variant of the block
        start: Starting index in the tangent vector
        dim: Tangent dimension of the block
    """

    index: int
    type_id: BlockTypeId
    start: int
    dim: int

    def stop(self) -> int:
        """Return the exclusive stop index for the block."""
        return self.start + self.dim

    def sl(self) -> slice:
        """Return the slice covering the block indices."""
        return slice(self.start, self.stop())

    def validate(self) -> None:
        """Validate block indices and dimensions."""
        if self.index < 0:
            raise StateMappingError("Block index must be non-negative")
        if self.start < 0:
            raise StateMappingError("Block start must be non-negative")
        if self.dim <= 0:
            raise StateMappingError("Block dim must be positive")


@dataclass(frozen=True)
class StateMapping:
    """Deterministic tangent layout for a sequence of blocks."""

    _blocks: tuple[StateBlock, ...]

    @classmethod
    def from_blocks(cls, state: Sequence[Block]) -> StateMapping:
        """Construct the mapping of a composite state."""
        blocks: list[StateBlock] = []
        offset: int = 0
        for index, block in enumerate(state):
            if not isinstance(block, Block):
                raise StateMappingError(f"State entry {index} is not a Block")
            entry: StateBlock = StateBlock(
                index=index,
                type_id=block.type_id,
                start=offset,
                dim=block.minimal_dimension,
            )
            entry.validate()
            blocks.append(entry)
            offset += block.minimal_dimension
        mapping: StateMapping = cls(_blocks=tuple(blocks))
        mapping.validate()
        return mapping

    def dim(self) -> int:
        """Return the total tangent dimension."""
        if not self._blocks:
            return 0
        return self._blocks[-1].stop()

    def blocks(self) -> tuple[StateBlock, ...]:
        """Return the blocks in deterministic order."""
        return self._blocks

    def block(self, index: int) -> StateBlock:
        """Return the entry for the block at index."""
        if index < 0 or index >= len(self._blocks):
            raise StateMappingError(f"Block {index} not found")
        return self._blocks[index]

    def type_ids(self) -> tuple[BlockTypeId, ...]:
        """Return the block variants in order."""
        return tuple(block.type_id for block in self._blocks)

    def is_compatible(self, other: StateMapping) -> bool:
        """Return True if other has the same block variant sequence."""
        return self.type_ids() == other.type_ids()

    def validate(self) -> None:
        """Validate the layout is contiguous and ordered."""
        offset: int = 0
        for expected_index, block in enumerate(self._blocks):
            block.validate()
            if block.index != expected_index:
                raise StateMappingError("Blocks must be in state order")
            if block.start != offset:
                raise StateMappingError("Blocks must be contiguous")
            offset = block.stop()

    def __len__(self) -> int:
        return len(self._blocks)
