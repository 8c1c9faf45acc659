################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Manifold blocks: the atomic units of filter state.

A block holds one physical quantity with an ambient representation of
``dimension`` values and a tangent space of ``minimal_dimension`` values.
Perturbations are applied with box-plus and recovered with box-minus:

    box_minus(box_plus(x, dx), x) == dx
    box_plus(x, box_minus(y, x)) == y

For vector-space blocks the ambient and tangent representations coincide and
both operators reduce to addition and subtraction. Rotation and unit-vector
blocks have reserved type identifiers but no implementation yet.

Mixing block variants (for example writing a vector2 result into a vector3
block) is a programming error and raises BlockError.
"""

from __future__ import annotations

import abc
import enum
from typing import Any
from typing import Optional
from typing import TypeVar

import numpy as np
from numpy.typing import NDArray

from fusion_core.math_utils.random_source import normal_vector


BlockT = TypeVar("BlockT", bound="Block")


class BlockError(Exception):
    """Raised when a block is constructed or combined inconsistently."""


class BlockTypeId(enum.IntEnum):
    """Enumerated block variants accepted by the block factory."""

    VECTOR1 = 0
    VECTOR2 = 1
    VECTOR3 = 2
    VECTOR4 = 3
    VECTOR5 = 4
    VECTOR6 = 5
    # Reserved, not implemented
    SO1 = 6
    SO2 = 7
    SO3 = 8
    UNIT_VECTOR3 = 9


class Block(abc.ABC):
    """Base class of every manifold block.

    Attributes:
        dimension: Size of the ambient representation
        minimal_dimension: Size of the tangent space, never above dimension
        is_vector_space: True when ambient and tangent spaces coincide
    """

    TYPE_ID: BlockTypeId

    def __init__(
        self, dimension: int, minimal_dimension: int, is_vector_space: bool
    ) -> None:
        if minimal_dimension <= 0:
            raise BlockError("minimal_dimension must be positive")
        if dimension < minimal_dimension:
            raise BlockError("dimension must not be smaller than minimal_dimension")
        self._dimension: int = dimension
        self._minimal_dimension: int = minimal_dimension
        self._is_vector_space: bool = is_vector_space

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def minimal_dimension(self) -> int:
        return self._minimal_dimension

    @property
    def is_vector_space(self) -> bool:
        return self._is_vector_space

    @property
    def type_id(self) -> BlockTypeId:
        return self.TYPE_ID

    @abc.abstractmethod
    def clone(self: BlockT) -> BlockT:
        """Return an independent deep copy of this block."""

    @abc.abstractmethod
    def copy_into(self, target: Block) -> None:
        """Overwrite the value of target with the value of this block."""

    @abc.abstractmethod
    def box_plus(self, dx: NDArray[np.float64], result: Block) -> None:
        """Write this value perturbed by the tangent vector dx into result."""

    @abc.abstractmethod
    def box_minus(self, y: Block) -> NDArray[np.float64]:
        """Return dx such that box_plus(y, dx) equals this block."""

    @abc.abstractmethod
    def get_value_as_vector(self) -> NDArray[np.float64]:
        """Return a copy of the ambient value as a flat vector."""

    @abc.abstractmethod
    def set_value_from_vector(self, value: Any) -> None:
        """Overwrite the ambient value from a flat vector."""

    @abc.abstractmethod
    def set_random(self, rng: np.random.Generator | None = None) -> None:
        """Overwrite the value with a random draw."""

    @abc.abstractmethod
    def type_name(self) -> str:
        """Return a stable diagnostic tag such as "vector3"."""

    def is_of_variant(self, block_cls: type[Block]) -> bool:
        """Return True if this block is an instance of block_cls."""
        return isinstance(self, block_cls)

    def narrow(self, block_cls: type[BlockT]) -> Optional[BlockT]:
        """Return this block typed as block_cls, or None on mismatch."""
        if isinstance(self, block_cls):
            return self
        return None

    def _require_same_variant(self, other: Block, name: str) -> None:
        if type(other) is not type(self):
            raise BlockError(
                f"{name} is {_describe(other)} but {self.type_name()} is required"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_value_as_vector().tolist()})"


class VectorBlock(Block):
    """Fixed-size Euclidean block where box-plus is plain addition.

    Concrete sizes are the Vector1Block ... Vector6Block subclasses.
    """

    DIMENSION: int = 0

    def __init__(self, value: Any = None) -> None:
        if self.DIMENSION <= 0:
            raise BlockError("VectorBlock requires a concrete dimension")
        super().__init__(self.DIMENSION, self.DIMENSION, True)
        self._value: NDArray[np.float64]
        if value is None:
            self._value = np.zeros(self.DIMENSION, dtype=np.float64)
        else:
            self._value = _as_vector(value, self.DIMENSION, "value")

    def clone(self: BlockT) -> BlockT:
        block: BlockT = type(self)()
        self.copy_into(block)
        return block

    def copy_into(self, target: Block) -> None:
        self._require_same_variant(target, "target")
        assert isinstance(target, VectorBlock)
        target._value = self._value.copy()

    def box_plus(self, dx: NDArray[np.float64], result: Block) -> None:
        delta: NDArray[np.float64] = _as_vector(dx, self.minimal_dimension, "dx")
        self._require_same_variant(result, "result")
        assert isinstance(result, VectorBlock)
        result._value = self._value + delta

    def box_minus(self, y: Block) -> NDArray[np.float64]:
        self._require_same_variant(y, "y")
        assert isinstance(y, VectorBlock)
        return np.asarray(self._value - y._value, dtype=np.float64)

    def get_value_as_vector(self) -> NDArray[np.float64]:
        return self._value.copy()

    def set_value_from_vector(self, value: Any) -> None:
        self._value = _as_vector(value, self.dimension, "value")

    def get_value(self) -> NDArray[np.float64]:
        """Return a copy of the stored vector."""
        return self._value.copy()

    def set_value(self, value: Any) -> None:
        """Replace the stored vector."""
        self.set_value_from_vector(value)

    def set_random(self, rng: np.random.Generator | None = None) -> None:
        self._value = normal_vector(self.dimension, rng)

    def type_name(self) -> str:
        return f"vector{self.DIMENSION}"


class Vector1Block(VectorBlock):
    TYPE_ID = BlockTypeId.VECTOR1
    DIMENSION = 1


class Vector2Block(VectorBlock):
    TYPE_ID = BlockTypeId.VECTOR2
    DIMENSION = 2


class Vector3Block(VectorBlock):
    TYPE_ID = BlockTypeId.VECTOR3
    DIMENSION = 3


class Vector4Block(VectorBlock):
    TYPE_ID = BlockTypeId.VECTOR4
    DIMENSION = 4


class Vector5Block(VectorBlock):
    TYPE_ID = BlockTypeId.VECTOR5
    DIMENSION = 5


class Vector6Block(VectorBlock):
    TYPE_ID = BlockTypeId.VECTOR6
    DIMENSION = 6


_BLOCK_CLASSES: dict[BlockTypeId, type[Block]] = {
    BlockTypeId.VECTOR1: Vector1Block,
    BlockTypeId.VECTOR2: Vector2Block,
    BlockTypeId.VECTOR3: Vector3Block,
    BlockTypeId.VECTOR4: Vector4Block,
    BlockTypeId.VECTOR5: Vector5Block,
    BlockTypeId.VECTOR6: Vector6Block,
}


def block_class(type_id: BlockTypeId | int) -> type[Block]:
    """Return the block class registered for type_id."""
    try:
        block_type: BlockTypeId = BlockTypeId(type_id)
    except ValueError as exc:
        raise BlockError(f"Unknown block type id {type_id}") from exc
    cls: type[Block] | None = _BLOCK_CLASSES.get(block_type)
    if cls is None:
        raise BlockError(f"Block type {block_type.name} is not implemented")
    return cls


def create_block(type_id: BlockTypeId | int) -> Block:
    """Create a zero-valued block of the requested variant."""
    return block_class(type_id)()


def _describe(block: object) -> str:
    if isinstance(block, Block):
        return block.type_name()
    return type(block).__name__


def _as_vector(value: Any, dim: int, name: str) -> NDArray[np.float64]:
    """Coerce a value to a finite float64 vector with shape (dim,)."""
    array: NDArray[np.float64] = np.array(value, dtype=np.float64).reshape(-1)
    if array.shape != (dim,):
        raise BlockError(f"{name} must have length {dim}, got {array.size}")
    if not np.all(np.isfinite(array)):
        raise BlockError(f"{name} must contain finite values")
    return array
