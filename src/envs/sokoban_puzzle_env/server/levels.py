# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Built-in levels and the level sequencer.

Level codes: 0 = empty floor, 1 = wall, 2 = target, 3 = box, 4 = player.
"""

import logging
from typing import List, Optional, Sequence

from .grid import GridModel, LevelDefinition, parse_level
from .puzzle_state import HistoryStack, PuzzleState


DEFAULT_LEVELS: List[List[List[int]]] = [
    # Level 1: introduction
    [
        [1, 1, 1, 1, 1],
        [1, 4, 0, 2, 1],
        [1, 0, 3, 0, 1],
        [1, 0, 0, 0, 1],
        [1, 1, 1, 1, 1],
    ],
    # Level 2: two boxes around a split wall
    [
        [1, 1, 1, 1, 1, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 0, 1],
        [1, 0, 2, 0, 0, 3, 0, 1],
        [1, 0, 0, 1, 1, 0, 0, 1],
        [1, 0, 3, 0, 0, 2, 0, 1],
        [1, 0, 0, 1, 1, 0, 4, 1],
        [1, 0, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 1, 1, 1, 1, 1],
    ],
]

logger = logging.getLogger(__name__)


class LevelSequencer:
    """
    Ordered list of levels and the active level instance.

    Loading a level builds a fresh grid, puzzle state and empty history from
    its definition. The previous instance is discarded wholesale; if parsing
    fails, it is kept as it was.
    """

    def __init__(self, levels: Optional[Sequence[LevelDefinition]] = None, start_index: int = 0):
        """
        Initialize the sequencer and load the starting level.

        Args:
            levels: Level definitions in play order (default: DEFAULT_LEVELS)
            start_index: Index of the level to load first

        Raises:
            ValueError: If the level list is empty or start_index is out of range
            InvalidLevelDefinition: If the starting level is malformed
        """
        self._levels = list(DEFAULT_LEVELS if levels is None else levels)
        if not self._levels:
            raise ValueError("At least one level definition is required")
        if not 0 <= start_index < len(self._levels):
            raise ValueError(f"start_index {start_index} out of range for {len(self._levels)} levels")

        self._current_index = start_index
        self._grid: GridModel
        self._state: PuzzleState
        self._history: HistoryStack
        self._build(start_index)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def total_levels(self) -> int:
        return len(self._levels)

    @property
    def is_last_level(self) -> bool:
        return self._current_index == len(self._levels) - 1

    @property
    def grid(self) -> GridModel:
        return self._grid

    @property
    def state(self) -> PuzzleState:
        return self._state

    @property
    def history(self) -> HistoryStack:
        return self._history

    def load_level(self, index: int) -> bool:
        """
        Load the level at ``index``.

        Returns:
            True if a level was loaded, False if the index was out of range
        """
        if not 0 <= index < len(self._levels):
            logger.debug(f"Ignoring load of level {index}: out of range [0, {len(self._levels)})")
            return False
        self._build(index)
        return True

    def advance(self) -> bool:
        """
        Load the next level, wrapping to the first after the last.

        Returns:
            True if the sequence wrapped around (every level has been played)
        """
        if self.is_last_level:
            self.load_level(0)
            return True
        self.load_level(self._current_index + 1)
        return False

    def retreat(self) -> bool:
        return self.load_level(self._current_index - 1)

    def reset(self) -> None:
        self.load_level(self._current_index)

    def _build(self, index: int) -> None:
        try:
            grid, player_start, box_starts = parse_level(self._levels[index])
        except ValueError as e:
            logger.error(f"Failed to load level {index}: {e}")
            raise

        self._grid = grid
        self._state = PuzzleState(player_start, box_starts)
        self._history = HistoryStack()
        self._current_index = index
        logger.info(f"Loaded level {index + 1}/{len(self._levels)}: {grid!r}")
