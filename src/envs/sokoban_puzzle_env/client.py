# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
Sokoban Puzzle Environment HTTP Client.

This module provides the client for connecting to a Sokoban Puzzle server
over HTTP.
"""

from typing import Any, Dict, Optional

from openenv_core.client_types import StepResult
from openenv_core.http_env_client import HTTPEnvClient

from .models import DirectionName, SokobanAction, SokobanObservation, SokobanState


class SokobanPuzzleEnv(HTTPEnvClient[SokobanAction, SokobanObservation]):
    """
    HTTP client for the Sokoban Puzzle Environment.

    This client connects to a Sokoban Puzzle HTTP server and provides
    methods to interact with it: reset(), step(), state access, plus undo
    and level navigation.

    Example:
        >>> # Connect to a running server
        >>> client = SokobanPuzzleEnv(base_url="http://localhost:8000")
        >>> result = client.reset()
        >>> print(f"Board shape: {result.observation.board_shape}")
        >>> print(f"Level: {result.observation.level_index + 1}/{result.observation.total_levels}")
        >>>
        >>> # Make a move, then take it back
        >>> result = client.step(SokobanAction(direction="down"))
        >>> print(f"Boxes on goals: {result.observation.boxes_on_goals}")
        >>> result = client.undo()

    Example with Docker:
        >>> client = SokobanPuzzleEnv.from_docker_image("sokoban-puzzle-env:latest")
        >>> result = client.reset()
        >>> result = client.move("right")
    """

    def move(self, direction: DirectionName) -> StepResult[SokobanObservation]:
        return self.step(SokobanAction(direction=direction))

    def undo(self) -> StepResult[SokobanObservation]:
        return self._post_route("/undo")

    def next_level(self) -> StepResult[SokobanObservation]:
        return self._post_route("/levels/next")

    def previous_level(self) -> StepResult[SokobanObservation]:
        return self._post_route("/levels/previous")

    def load_level(self, level_index: int) -> StepResult[SokobanObservation]:
        return self._post_route("/levels/load", {"level_index": level_index})

    def _post_route(self, path: str, body: Optional[Dict[str, Any]] = None) -> StepResult[SokobanObservation]:
        r = self._http.post(
            f"{self._base}{path}",
            json=body or {},
            headers=self._headers,
            timeout=self._timeout,
        )
        r.raise_for_status()
        return self._parse_result(r.json())

    def _step_payload(self, action: SokobanAction) -> Dict:
        """
        Convert SokobanAction to JSON payload for step request.

        Args:
            action: SokobanAction instance

        Returns:
            Dictionary representation suitable for JSON encoding
        """
        return {
            "direction": action.direction,
        }

    def _parse_result(self, payload: Dict) -> StepResult[SokobanObservation]:
        """
        Parse server response into StepResult[SokobanObservation].

        Args:
            payload: JSON response from server

        Returns:
            StepResult with SokobanObservation
        """
        obs_data = payload.get("observation", {})
        observation = SokobanObservation(
            board=obs_data.get("board", []),
            board_shape=obs_data.get("board_shape", []),
            num_boxes=obs_data.get("num_boxes", 0),
            boxes_on_goals=obs_data.get("boxes_on_goals", 0),
            player_position=obs_data.get("player_position", [0, 0]),
            moves_count=obs_data.get("moves_count", 0),
            pushes_count=obs_data.get("pushes_count", 0),
            is_solved=obs_data.get("is_solved", False),
            level_index=obs_data.get("level_index", 0),
            total_levels=obs_data.get("total_levels", 1),
            last_outcome=obs_data.get("last_outcome"),
            done=payload.get("done", False),
            reward=payload.get("reward"),
        )

        return StepResult(
            observation=observation,
            reward=payload.get("reward"),
            done=payload.get("done", False),
        )

    def _parse_state(self, payload: Dict) -> SokobanState:
        """
        Parse server response into SokobanState.

        Args:
            payload: JSON response from /state endpoint

        Returns:
            SokobanState with episode_id, step_count and level position
        """
        return SokobanState(
            episode_id=payload.get("episode_id"),
            step_count=payload.get("step_count", 0),
            level_index=payload.get("level_index", 0),
            total_levels=payload.get("total_levels", 1),
            pending_transition=payload.get("pending_transition", False),
        )
