# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Configuration for the Sokoban Puzzle server.

Values come from environment variables when built with ``from_env()``:

    SOKOBAN_WIN_DELAY      seconds between solving a level and advancing (default: 0.1)
    SOKOBAN_AUTO_ADVANCE   advance automatically after a win (default: true)
    SOKOBAN_LOG_DIR        directory for the server log file (default: <repo>/logs)
    SOKOBAN_LOG_LEVEL      logging level name (default: INFO)
    SOKOBAN_HOST           bind address for uvicorn (default: 0.0.0.0)
    SOKOBAN_PORT           port for uvicorn (default: 8000)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_LOG_DIR = Path(__file__).resolve().parents[4] / "logs"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


@dataclass
class EnvironmentConfig:
    """Runtime settings for the environment and its HTTP server."""

    win_delay: float = 0.1
    auto_advance: bool = True
    log_dir: Path = field(default_factory=lambda: DEFAULT_LOG_DIR)
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    def __post_init__(self):
        if not isinstance(self.win_delay, (float, int)) or self.win_delay < 0:
            raise ValueError("win_delay must be a non-negative number")
        if not isinstance(self.auto_advance, bool):
            raise ValueError("auto_advance must be a boolean")
        self.log_dir = Path(self.log_dir)
        self.log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"log_level must be a logging level name, got {self.log_level!r}")
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ValueError("port must be an integer between 1 and 65535")

    @classmethod
    def from_env(cls) -> "EnvironmentConfig":
        try:
            win_delay = float(os.getenv("SOKOBAN_WIN_DELAY", "0.1"))
            port = int(os.getenv("SOKOBAN_PORT", "8000"))
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}") from e
        return cls(
            win_delay=win_delay,
            auto_advance=_env_flag("SOKOBAN_AUTO_ADVANCE", True),
            log_dir=Path(os.getenv("SOKOBAN_LOG_DIR", str(DEFAULT_LOG_DIR))),
            log_level=os.getenv("SOKOBAN_LOG_LEVEL", "INFO"),
            host=os.getenv("SOKOBAN_HOST", "0.0.0.0"),
            port=port,
        )
