# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Static level layout.

A level definition is a rectangular list of rows of integer codes. Parsing one
yields the immutable ``GridModel`` (walls, targets, bounds) together with the
starting player and box positions that seed the puzzle state.
"""

import logging
from typing import FrozenSet, Sequence, Tuple

import numpy as np

from ..models import CellKind, Coordinate


# Level definition codes
EMPTY = 0
WALL = 1
TARGET = 2
BOX = 3
PLAYER = 4

VALID_CODES = (EMPTY, WALL, TARGET, BOX, PLAYER)

LevelDefinition = Sequence[Sequence[int]]

logger = logging.getLogger(__name__)


class InvalidLevelDefinition(ValueError):
    """Raised when a level definition cannot be turned into a playable grid."""


class GridModel:
    """
    Immutable layout of one level.

    The cell kinds are stored as a read-only numpy array indexed ``[z, x]``.
    Anything outside the array counts as wall.
    """

    def __init__(self, cells: np.ndarray):
        self._cells = cells.copy()
        self._cells.setflags(write=False)
        self._walls = _positions_of(self._cells, WALL)
        self._targets = _positions_of(self._cells, TARGET)
        if self._walls & self._targets:
            raise InvalidLevelDefinition("Wall and target cells overlap")

    @property
    def width(self) -> int:
        return int(self._cells.shape[1])

    @property
    def height(self) -> int:
        return int(self._cells.shape[0])

    @property
    def walls(self) -> FrozenSet[Coordinate]:
        return self._walls

    @property
    def targets(self) -> FrozenSet[Coordinate]:
        return self._targets

    @property
    def cells(self) -> np.ndarray:
        return self._cells

    def bounds(self) -> Tuple[int, int]:
        return self.width, self.height

    def in_bounds(self, position: Coordinate) -> bool:
        return 0 <= position.x < self.width and 0 <= position.z < self.height

    def is_wall(self, position: Coordinate) -> bool:
        if not self.in_bounds(position):
            return True
        return position in self._walls

    def is_target(self, position: Coordinate) -> bool:
        return position in self._targets

    def kind_at(self, position: Coordinate) -> CellKind:
        if self.is_wall(position):
            return CellKind.WALL
        if self.is_target(position):
            return CellKind.TARGET
        return CellKind.EMPTY

    def __repr__(self) -> str:
        return (
            f"GridModel(width={self.width}, height={self.height}, "
            f"walls={len(self._walls)}, targets={len(self._targets)})"
        )


def _positions_of(cells: np.ndarray, code: int) -> FrozenSet[Coordinate]:
    return frozenset(Coordinate(int(x), int(z)) for z, x in np.argwhere(cells == code))


def parse_level(definition: LevelDefinition) -> Tuple[GridModel, Coordinate, FrozenSet[Coordinate]]:
    """
    Parse a level definition.

    Box and player start cells are floor in the resulting grid; their positions
    are returned separately.

    Args:
        definition: Rows of level codes (0 empty, 1 wall, 2 target, 3 box, 4 player)

    Returns:
        grid: The static grid model
        player_start: Starting player coordinate
        box_starts: Starting box coordinates

    Raises:
        InvalidLevelDefinition: If the definition is empty, not rectangular,
            contains unknown codes or does not have exactly one player start
    """
    if len(definition) == 0 or len(definition[0]) == 0:
        raise InvalidLevelDefinition("Level definition is empty")

    width = len(definition[0])
    for z, row in enumerate(definition):
        if len(row) != width:
            raise InvalidLevelDefinition(
                f"Level definition is not rectangular: row {z} has {len(row)} cells, expected {width}"
            )
        for x, code in enumerate(row):
            if isinstance(code, bool) or not isinstance(code, (int, np.integer)):
                raise InvalidLevelDefinition(f"Cell ({x}, {z}) is not an integer code: {code!r}")

    codes = np.array(definition, dtype=int)

    unknown = np.setdiff1d(np.unique(codes), VALID_CODES)
    if unknown.size:
        raise InvalidLevelDefinition(f"Unknown cell codes in level definition: {unknown.tolist()}")

    players = np.argwhere(codes == PLAYER)
    if len(players) == 0:
        raise InvalidLevelDefinition("Level definition has no player start")
    if len(players) > 1:
        raise InvalidLevelDefinition(f"Level definition has {len(players)} player starts, expected 1")

    z, x = players[0]
    player_start = Coordinate(int(x), int(z))
    box_starts = _positions_of(codes, BOX)

    cells = codes.copy()
    cells[(cells == BOX) | (cells == PLAYER)] = EMPTY
    grid = GridModel(cells)

    logger.debug(f"Parsed level {grid!r} with player at {player_start} and {len(box_starts)} boxes")
    return grid, player_start, box_starts
