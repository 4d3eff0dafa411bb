# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Sokoban Puzzle Environment - A level-based box-pushing puzzle engine."""

from .client import SokobanPuzzleEnv
from .models import Coordinate, Direction, MoveOutcome, SokobanAction, SokobanObservation

__all__ = [
    "Coordinate",
    "Direction",
    "MoveOutcome",
    "SokobanAction",
    "SokobanObservation",
    "SokobanPuzzleEnv",
]
