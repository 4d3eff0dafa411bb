import os
import tempfile

import pytest

# The server module configures file logging on import
os.environ.setdefault("SOKOBAN_LOG_DIR", tempfile.mkdtemp(prefix="sokoban-logs-"))

from envs.sokoban_puzzle_env.server.sokoban_environment import SokobanEnvironment

from .levels import ONE_PUSH_LEVEL, WALLED_LEVEL


@pytest.fixture
def one_push_env():
    return SokobanEnvironment(levels=[ONE_PUSH_LEVEL, WALLED_LEVEL], auto_advance=True)


@pytest.fixture
def default_env():
    return SokobanEnvironment(auto_advance=False)
