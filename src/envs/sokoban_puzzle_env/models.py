# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Data models for the Sokoban Puzzle Environment.

Sokoban is a classic puzzle game where the player pushes boxes onto target cells.
The player can move in four directions and push a single box (but not pull it).

All puzzle logic works in grid space: integer ``(x, z)`` coordinates where ``x``
is the column and ``z`` the row of a level definition.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Literal, NamedTuple, Optional

from openenv_core.env_server.types import Action, Observation, State


DirectionName = Literal["up", "down", "left", "right"]


class Coordinate(NamedTuple):
    """Integer grid-space position."""

    x: int
    z: int

    def shifted(self, direction: "Direction") -> "Coordinate":
        return Coordinate(self.x + direction.dx, self.z + direction.dz)


class Direction(Enum):
    """The four unit moves. No diagonals."""

    UP = ("up", 0, -1)
    DOWN = ("down", 0, 1)
    LEFT = ("left", -1, 0)
    RIGHT = ("right", 1, 0)

    def __init__(self, label: str, dx: int, dz: int):
        self.label = label
        self.dx = dx
        self.dz = dz

    @classmethod
    def from_name(cls, name: str) -> "Direction":
        """
        Parse a direction intent.

        Args:
            name: One of "up", "down", "left", "right" (case-insensitive)

        Raises:
            ValueError: If the name is not a known direction
        """
        for direction in cls:
            if direction.label == str(name).lower():
                return direction
        raise ValueError(f"Unknown direction: {name!r}")


class CellKind(Enum):
    """Static kind of a grid cell. Occupancy by a box or the player is runtime state."""

    EMPTY = "empty"
    WALL = "wall"
    TARGET = "target"


class MoveOutcome(str, Enum):
    """What a submitted direction did to the puzzle."""

    MOVED = "moved"
    PUSHED = "pushed"
    BLOCKED = "blocked"
    IGNORED = "ignored"


@dataclass(frozen=True)
class BlockMove:
    """A single box displacement."""

    source: Coordinate
    destination: Coordinate


@dataclass(frozen=True)
class MoveDelta:
    """
    Reversible record of one committed move.

    Attributes:
        player_from: Player position before the move
        player_to: Player position after the move
        block_moved: The pushed box, if the move was a push
    """

    player_from: Coordinate
    player_to: Coordinate
    block_moved: Optional[BlockMove] = None

    @property
    def is_push(self) -> bool:
        return self.block_moved is not None


class EventKind(str, Enum):
    STATE_CHANGED = "state_changed"
    LEVEL_LOADED = "level_loaded"
    LEVEL_SOLVED = "level_solved"
    GAME_COMPLETED = "game_completed"


@dataclass(frozen=True)
class GameEvent:
    """Notification sent to subscribers after the puzzle changes."""

    kind: EventKind
    level_index: int
    move_count: int


@dataclass(kw_only=True)
class SokobanAction(Action):
    """
    Action for the Sokoban environment.

    Attributes:
        direction: The direction to move ("up", "down", "left", "right"), any case

    Raises:
        ValueError: If the direction is not one of the four names
    """

    direction: DirectionName

    def __post_init__(self):
        self.direction = Direction.from_name(self.direction).label


@dataclass(kw_only=True)
class SokobanObservation(Observation):
    """
    Observation from the Sokoban environment.

    Attributes:
        board: Flattened representation of the game board.
                Each cell is encoded as:
                0 = empty floor
                1 = wall
                2 = box
                3 = goal
                4 = player
                5 = box on goal
                6 = player on goal
        board_shape: Shape of the board (height, width)
        num_boxes: Total number of boxes in the puzzle
        boxes_on_goals: Number of boxes currently on goal positions
        player_position: (x, z) grid position of the player
        moves_count: Number of moves taken so far
        pushes_count: Number of box pushes performed
        is_solved: Whether every goal is covered by a box
        level_index: Index of the active level
        total_levels: Number of levels in the sequence
        last_outcome: Outcome of the most recent direction intent, if any
    """

    board: List[int]
    board_shape: List[int]
    num_boxes: int
    boxes_on_goals: int
    player_position: List[int]
    moves_count: int = 0
    pushes_count: int = 0
    is_solved: bool = False
    level_index: int = 0
    total_levels: int = 1
    last_outcome: Optional[str] = None


@dataclass
class SokobanState(State):
    """Episode state extended with the level sequencer position."""

    level_index: int = 0
    total_levels: int = 1
    pending_transition: bool = False

