# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""Sokoban Puzzle environment server components."""

from .grid import GridModel, InvalidLevelDefinition, parse_level
from .levels import DEFAULT_LEVELS, LevelSequencer
from .sokoban_environment import SokobanEnvironment

__all__ = [
    "DEFAULT_LEVELS",
    "GridModel",
    "InvalidLevelDefinition",
    "LevelSequencer",
    "SokobanEnvironment",
    "parse_level",
]
