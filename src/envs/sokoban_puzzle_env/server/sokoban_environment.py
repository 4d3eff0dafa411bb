# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Sokoban Puzzle Environment Implementation.

A classic puzzle game where the player pushes boxes onto target cells across
an ordered sequence of levels, with undo, reset and level navigation.
"""

import logging
from typing import Callable, FrozenSet, List, Optional, Sequence, Union
from uuid import uuid4

import numpy as np
from openenv_core.env_server.interfaces import Environment

from ..models import (
    Coordinate,
    Direction,
    EventKind,
    GameEvent,
    MoveOutcome,
    SokobanAction,
    SokobanObservation,
    SokobanState,
)
from .grid import LevelDefinition
from .levels import LevelSequencer
from .rules import ResolvedMove, blocks_on_targets, is_solved, resolve


# Observation cell encoding
EMPTY = 0
WALL = 1
BOX = 2
GOAL = 3
PLAYER = 4
BOX_ON_GOAL = 5
PLAYER_ON_GOAL = 6

Listener = Callable[[GameEvent], None]

logger = logging.getLogger(__name__)


class SokobanEnvironment(Environment):
    """
    Sokoban puzzle game environment.

    The goal is to push every box onto a target. The player moves in four
    directions; a box in the way is pushed one cell if the cell behind it is
    free. Illegal moves leave the puzzle untouched.

    Solving a level records a pending transition instead of advancing at once,
    so the presentation layer can show the solved board first. Direction and
    undo intents are ignored until ``complete_pending_transition()`` runs, or
    until the level is reset or changed explicitly.

    Example:
        >>> env = SokobanEnvironment()
        >>> obs = env.reset()
        >>> print(f"Board size: {obs.board_shape}")
        >>> print(f"Number of boxes: {obs.num_boxes}")
        >>>
        >>> obs = env.step(SokobanAction(direction="down"))
        >>> print(f"Boxes on goals: {obs.boxes_on_goals}/{obs.num_boxes}")
    """

    def __init__(self, levels: Optional[Sequence[LevelDefinition]] = None, auto_advance: bool = True):
        """
        Initialize the Sokoban environment.

        Args:
            levels: Level definitions in play order (default: built-in levels)
            auto_advance: Schedule a transition to the next level after a win (default: True)
        """
        super().__init__()
        self.auto_advance = auto_advance
        self._sequencer = LevelSequencer(levels)
        self._state = SokobanState(episode_id=str(uuid4()), step_count=0)
        self._listeners: List[Listener] = []
        self._pending_transition = False
        self._last_outcome: Optional[MoveOutcome] = None
        self._sync_state()

        logger.info(
            f"SokobanEnvironment initialized with {self._sequencer.total_levels} levels, "
            f"auto_advance={auto_advance}"
        )

    # Notifications

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind: EventKind) -> None:
        event = GameEvent(kind=kind, level_index=self._sequencer.current_index, move_count=self.current_move_count())
        for listener in list(self._listeners):
            listener(event)

    # Intents

    def submit_direction(self, direction: Union[Direction, str]) -> MoveOutcome:
        """
        Try to move the player one cell.

        Args:
            direction: A Direction or one of "up", "down", "left", "right"

        Returns:
            MOVED, PUSHED, BLOCKED, or IGNORED while a level transition is pending

        Raises:
            ValueError: If the direction name is unknown
        """
        if not isinstance(direction, Direction):
            direction = Direction.from_name(direction)

        self._state.step_count += 1
        if self._pending_transition:
            logger.warning(f"Ignoring move {direction.label}: level {self.current_level_index()} already solved")
            self._last_outcome = MoveOutcome.IGNORED
            return self._last_outcome

        puzzle = self._sequencer.state
        result = resolve(puzzle, self._sequencer.grid, direction)
        if not isinstance(result, ResolvedMove):
            logger.debug(f"Move {direction.label} blocked at {tuple(puzzle.player_position)}")
            self._last_outcome = MoveOutcome.BLOCKED
            return self._last_outcome

        puzzle.apply_delta(result.delta)
        self._sequencer.history.push(result.delta)
        self._last_outcome = MoveOutcome.PUSHED if result.delta.is_push else MoveOutcome.MOVED
        logger.debug(
            f"Step {self._state.step_count}: {direction.label} -> {self._last_outcome.value}, "
            f"player at {tuple(puzzle.player_position)}, moves={puzzle.move_count}"
        )

        # The win is recorded before any listener runs
        solved = self.is_current_level_solved()
        if solved:
            logger.info(
                f"Level {self.current_level_index() + 1} solved in {puzzle.move_count} moves "
                f"({puzzle.push_count} pushes)"
            )
            if self.auto_advance:
                self._pending_transition = True
                self._sync_state()

        self._emit(EventKind.STATE_CHANGED)
        if solved:
            self._emit(EventKind.LEVEL_SOLVED)

        return self._last_outcome

    def undo(self) -> bool:
        """
        Revert the most recent move.

        Returns:
            True if a move was undone, False if there was nothing to undo or a
            level transition is pending
        """
        if self._pending_transition:
            logger.warning("Ignoring undo: level transition pending")
            return False
        delta = self._sequencer.history.pop_last_or_none()
        if delta is None:
            return False
        self._sequencer.state.reverse_delta(delta)
        logger.debug(f"Undo: player back at {tuple(delta.player_from)}, moves={self.current_move_count()}")
        self._emit(EventKind.STATE_CHANGED)
        return True

    def reset_current_level(self) -> None:
        self._sequencer.reset()
        self._on_level_loaded()

    def advance_level(self) -> None:
        """
        Load the next level. On the last level, GAME_COMPLETED is emitted for the
        finished level first, then the sequence wraps to the first level.
        """
        if self._sequencer.is_last_level:
            logger.info("All levels completed, wrapping to the first level")
            self._emit(EventKind.GAME_COMPLETED)
        self._sequencer.advance()
        self._on_level_loaded()

    def retreat_level(self) -> bool:
        """
        Load the previous level. At the first level nothing happens, and a
        pending transition stays pending.
        """
        if not self._sequencer.retreat():
            return False
        self._on_level_loaded()
        return True

    def load_level(self, index: int) -> bool:
        if not self._sequencer.load_level(index):
            return False
        self._on_level_loaded()
        return True

    def complete_pending_transition(self) -> bool:
        """
        Run the deferred continuation scheduled by a win.

        Returns:
            True if a pending transition was performed
        """
        if not self._pending_transition:
            return False
        self.advance_level()
        return True

    def _on_level_loaded(self) -> None:
        self._pending_transition = False
        self._last_outcome = None
        self._state = SokobanState(episode_id=str(uuid4()), step_count=0)
        self._sync_state()
        logger.info(f"Level {self.current_level_index() + 1} ready. New episode ID: {self._state.episode_id}")
        self._emit(EventKind.LEVEL_LOADED)

    def _sync_state(self) -> None:
        self._state.level_index = self._sequencer.current_index
        self._state.total_levels = self._sequencer.total_levels
        self._state.pending_transition = self._pending_transition

    # Queries

    def current_player_position(self) -> Coordinate:
        return self._sequencer.state.player_position

    def current_block_positions(self) -> FrozenSet[Coordinate]:
        return self._sequencer.state.block_positions

    def current_move_count(self) -> int:
        return self._sequencer.state.move_count

    def current_push_count(self) -> int:
        return self._sequencer.state.push_count

    def current_level_index(self) -> int:
        return self._sequencer.current_index

    def total_level_count(self) -> int:
        return self._sequencer.total_levels

    def is_current_level_solved(self) -> bool:
        return is_solved(self._sequencer.state, self._sequencer.grid)

    def has_pending_transition(self) -> bool:
        return self._pending_transition

    # Environment-server interface

    def reset(self, level_index: Optional[int] = None) -> SokobanObservation:
        """
        Reset the active level, or load another one.

        Args:
            level_index: Level to load; an out-of-range index is ignored and
                leaves any pending transition in place

        Returns:
            SokobanObservation with the initial board state
        """
        if level_index is None:
            self.reset_current_level()
        else:
            self.load_level(level_index)
        return self._get_observation()

    def step(self, action: SokobanAction) -> SokobanObservation:
        """
        Execute a step in the environment by moving the player.

        Args:
            action: SokobanAction containing the direction to move

        Returns:
            SokobanObservation with the updated board state
        """
        self.submit_direction(action.direction)
        return self._get_observation()

    def observe(self) -> SokobanObservation:
        return self._get_observation()

    def _render_board(self) -> np.ndarray:
        grid = self._sequencer.grid
        puzzle = self._sequencer.state

        board = np.full((grid.height, grid.width), EMPTY, dtype=int)
        for x, z in grid.walls:
            board[z, x] = WALL
        for x, z in grid.targets:
            board[z, x] = GOAL
        for x, z in puzzle.block_positions:
            board[z, x] = BOX_ON_GOAL if board[z, x] == GOAL else BOX
        x, z = puzzle.player_position
        board[z, x] = PLAYER_ON_GOAL if board[z, x] == GOAL else PLAYER
        return board

    def _get_observation(self) -> SokobanObservation:
        """Create an observation from the current puzzle state."""
        grid = self._sequencer.grid
        puzzle = self._sequencer.state
        board = self._render_board()
        solved = self.is_current_level_solved()

        return SokobanObservation(
            board=board.flatten().tolist(),
            board_shape=[grid.height, grid.width],
            num_boxes=len(puzzle.block_positions),
            boxes_on_goals=blocks_on_targets(puzzle, grid),
            player_position=list(puzzle.player_position),
            moves_count=puzzle.move_count,
            pushes_count=puzzle.push_count,
            is_solved=solved,
            level_index=self._sequencer.current_index,
            total_levels=self._sequencer.total_levels,
            last_outcome=self._last_outcome.value if self._last_outcome else None,
            done=solved,
            metadata={
                "step": self._state.step_count,
                "episode_id": self._state.episode_id,
                "pending_transition": self._pending_transition,
            },
        )

    @property
    def state(self) -> SokobanState:
        """
        Get the current environment state.

        Returns:
            Current SokobanState with episode_id, step_count and level position
        """
        self._sync_state()
        return self._state
