# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
FastAPI application for the Sokoban Puzzle Environment.

This module creates an HTTP server that exposes the SokobanEnvironment
over HTTP endpoints, making it compatible with HTTPEnvClient. On top of the
standard /reset, /step, /state and /health routes it serves /undo and the
/levels/* navigation routes.

Usage:
    # Development (with auto-reload):
    uvicorn envs.sokoban_puzzle_env.server.app:app --reload --host 0.0.0.0 --port 8000

    # Production (one worker: the puzzle state lives in the process):
    uvicorn envs.sokoban_puzzle_env.server.app:app --host 0.0.0.0 --port 8000

    # Or run directly:
    python -m envs.sokoban_puzzle_env.server.app
"""

import asyncio
import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from openenv_core.env_server.http_server import HTTPEnvServer, create_fastapi_app
from pydantic import BaseModel

from ..models import EventKind, GameEvent, SokobanAction, SokobanObservation
from .config import EnvironmentConfig
from .sokoban_environment import SokobanEnvironment

logger = logging.getLogger(__name__)


def configure_logging(config: EnvironmentConfig) -> None:
    """Log to a file under the configured log directory and to the console."""
    os.makedirs(config.log_dir, exist_ok=True)
    log_file = config.log_dir / "sokoban_server.log"

    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()  # Keep logging to console as well
        ]
    )


class LoadLevelRequest(BaseModel):
    level_index: int


class TransitionScheduler:
    """
    Runs the environment's pending level transition after a delay.

    Driven by environment events: a win with a pending transition schedules
    the callback on the running event loop, and any level load cancels it.
    Intents that load nothing leave the schedule in place.
    """

    def __init__(self, env: SokobanEnvironment, delay: float):
        self.env = env
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        env.subscribe(self._on_event)

    @property
    def scheduled(self) -> bool:
        return self._handle is not None

    def _on_event(self, event: GameEvent) -> None:
        if event.kind is EventKind.LEVEL_SOLVED and self.env.has_pending_transition():
            self._schedule()
        elif event.kind is EventKind.LEVEL_LOADED:
            self.cancel()

    def _schedule(self) -> None:
        if self._handle is not None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self.run)
        logger.debug(f"Level transition scheduled in {self.delay}s")

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def run(self) -> None:
        self._handle = None
        self.env.complete_pending_transition()


def build_app(env: SokobanEnvironment, config: EnvironmentConfig) -> FastAPI:
    """
    Build the HTTP app around a single environment instance.

    Args:
        env: The environment to expose
        config: Server settings; win_delay controls the post-win transition

    Returns:
        FastAPI application
    """
    app = create_fastapi_app(env, SokobanAction, SokobanObservation)
    server = HTTPEnvServer(env, SokobanAction, SokobanObservation)
    scheduler = TransitionScheduler(env, config.win_delay)
    app.state.env = env
    app.state.scheduler = scheduler

    @app.exception_handler(ValueError)
    async def invalid_input(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.post("/undo")
    async def undo() -> Dict[str, Any]:
        env.undo()
        return server._serialize_observation(env.observe())

    @app.post("/levels/next")
    async def next_level() -> Dict[str, Any]:
        env.advance_level()
        return server._serialize_observation(env.observe())

    @app.post("/levels/previous")
    async def previous_level() -> Dict[str, Any]:
        env.retreat_level()
        return server._serialize_observation(env.observe())

    @app.post("/levels/load")
    async def load_level(request: LoadLevelRequest) -> Dict[str, Any]:
        env.load_level(request.level_index)
        return server._serialize_observation(env.observe())

    @app.on_event("startup")
    async def startup_event():
        logger.info("Sokoban server starting up.")

    @app.on_event("shutdown")
    def shutdown_event():
        scheduler.cancel()
        logger.info("Sokoban server shutting down.")

    return app


config = EnvironmentConfig.from_env()
configure_logging(config)

# Create the environment instance
env = SokobanEnvironment(auto_advance=config.auto_advance)

app = build_app(env, config)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.host, port=config.port)
