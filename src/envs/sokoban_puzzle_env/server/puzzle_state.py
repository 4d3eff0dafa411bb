# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Mutable runtime state of the active level and its undo history."""

from typing import FrozenSet, Iterable, List, Optional

from ..models import Coordinate, MoveDelta


class PuzzleState:
    """
    Player position, box positions and move counters for one level instance.

    The state is only changed through ``apply_delta`` and ``reverse_delta``.
    Neither checks legality: deltas come from the move resolver, which has
    already decided the move is allowed.
    """

    def __init__(self, player_position: Coordinate, block_positions: Iterable[Coordinate]):
        self._player_position = player_position
        self._blocks = set(block_positions)
        self._move_count = 0
        self._push_count = 0

    @property
    def player_position(self) -> Coordinate:
        return self._player_position

    @property
    def block_positions(self) -> FrozenSet[Coordinate]:
        return frozenset(self._blocks)

    @property
    def move_count(self) -> int:
        return self._move_count

    @property
    def push_count(self) -> int:
        return self._push_count

    def has_block(self, position: Coordinate) -> bool:
        return position in self._blocks

    def apply_delta(self, delta: MoveDelta) -> None:
        if delta.block_moved is not None:
            self._blocks.discard(delta.block_moved.source)
            self._blocks.add(delta.block_moved.destination)
            self._push_count += 1
        self._player_position = delta.player_to
        self._move_count += 1

    def reverse_delta(self, delta: MoveDelta) -> None:
        if delta.block_moved is not None:
            self._blocks.discard(delta.block_moved.destination)
            self._blocks.add(delta.block_moved.source)
            self._push_count = max(0, self._push_count - 1)
        self._player_position = delta.player_from
        self._move_count = max(0, self._move_count - 1)

    def __repr__(self) -> str:
        return (
            f"PuzzleState(player={tuple(self._player_position)}, boxes={sorted(self._blocks)}, "
            f"moves={self._move_count}, pushes={self._push_count})"
        )


class HistoryStack:
    """LIFO record of committed moves, used for undo."""

    def __init__(self):
        self._deltas: List[MoveDelta] = []

    def push(self, delta: MoveDelta) -> None:
        self._deltas.append(delta)

    def pop_last_or_none(self) -> Optional[MoveDelta]:
        if not self._deltas:
            return None
        return self._deltas.pop()

    def clear(self) -> None:
        self._deltas.clear()

    def __len__(self) -> int:
        return len(self._deltas)
