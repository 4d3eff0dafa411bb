# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Movement rules and the win condition.

Both are pure functions over a ``PuzzleState`` and a ``GridModel``: they never
mutate either. A player move is legal if the next cell is free floor, or holds
a box whose next cell (one further in the same direction) is free floor. Only
a single box is ever pushed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..models import BlockMove, Direction, MoveDelta
from .grid import GridModel
from .puzzle_state import PuzzleState


class RejectReason(str, Enum):
    BLOCKED = "blocked"


@dataclass(frozen=True)
class ResolvedMove:
    delta: MoveDelta


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason = RejectReason.BLOCKED


def resolve(state: PuzzleState, grid: GridModel, direction: Direction) -> Union[ResolvedMove, Rejected]:
    """
    Decide whether the player can move in ``direction``.

    Args:
        state: Current puzzle state
        grid: Static layout of the level
        direction: Requested move

    Returns:
        ResolvedMove with the delta to apply, or Rejected if the way is blocked
    """
    player_from = state.player_position
    player_to = player_from.shifted(direction)

    if grid.is_wall(player_to):
        return Rejected()

    if state.has_block(player_to):
        block_to = player_to.shifted(direction)
        if grid.is_wall(block_to) or state.has_block(block_to):
            return Rejected()
        return ResolvedMove(MoveDelta(player_from, player_to, BlockMove(player_to, block_to)))

    return ResolvedMove(MoveDelta(player_from, player_to))


def is_solved(state: PuzzleState, grid: GridModel) -> bool:
    """True when every target cell holds a box. Extra boxes are ignored."""
    return all(state.has_block(target) for target in grid.targets)


def blocks_on_targets(state: PuzzleState, grid: GridModel) -> int:
    """Count how many boxes currently sit on target cells."""
    return sum(1 for block in state.block_positions if grid.is_target(block))
