import random

import pytest

from envs.sokoban_puzzle_env.models import (
    Coordinate,
    Direction,
    EventKind,
    GameEvent,
    MoveOutcome,
    SokobanAction,
)
from envs.sokoban_puzzle_env.server.grid import InvalidLevelDefinition
from envs.sokoban_puzzle_env.server.sokoban_environment import (
    BOX,
    BOX_ON_GOAL,
    GOAL,
    PLAYER,
    WALL,
    SokobanEnvironment,
)

from .levels import ONE_PUSH_LEVEL, STACKED_LEVEL


LEVEL_ONE_SOLUTION = ["down", "right", "down", "right", "up"]


def snapshot(env):
    return env.current_player_position(), env.current_block_positions(), env.current_move_count()


class TestMoves:
    def test_single_push_solves_level(self, one_push_env):
        env = one_push_env

        assert env.submit_direction(Direction.RIGHT) is MoveOutcome.PUSHED

        assert env.is_current_level_solved()
        assert env.current_move_count() == 1
        assert env.current_block_positions() == {Coordinate(3, 1)}

    def test_undo_after_single_push(self):
        env = SokobanEnvironment(levels=[ONE_PUSH_LEVEL], auto_advance=False)
        env.submit_direction("right")

        assert env.undo()

        assert env.current_player_position() == Coordinate(1, 1)
        assert env.current_block_positions() == {Coordinate(2, 1)}
        assert env.current_move_count() == 0
        assert not env.is_current_level_solved()

    def test_blocked_move_changes_nothing(self, one_push_env):
        before = snapshot(one_push_env)

        assert one_push_env.submit_direction("up") is MoveOutcome.BLOCKED

        assert snapshot(one_push_env) == before

    def test_stacked_boxes_are_not_pushed(self):
        env = SokobanEnvironment(levels=[STACKED_LEVEL])
        before = snapshot(env)

        assert env.submit_direction("right") is MoveOutcome.BLOCKED

        assert snapshot(env) == before
        assert env.current_push_count() == 0

    def test_unknown_direction_raises(self, default_env):
        with pytest.raises(ValueError):
            default_env.submit_direction("north")

    def test_direction_names_are_case_insensitive(self, default_env):
        assert default_env.submit_direction("DOWN") is MoveOutcome.MOVED

    def test_solve_first_builtin_level(self, default_env):
        for direction in LEVEL_ONE_SOLUTION:
            default_env.submit_direction(direction)

        assert default_env.is_current_level_solved()
        assert default_env.current_move_count() == 5
        assert default_env.current_push_count() == 2


class TestUndo:
    def test_undo_on_empty_history_is_noop(self, default_env):
        before = snapshot(default_env)

        assert not default_env.undo()

        assert snapshot(default_env) == before

    def test_undo_is_a_true_inverse(self, default_env):
        default_env.load_level(1)
        before = snapshot(default_env)
        rng = random.Random(7)

        committed = 0
        for _ in range(200):
            outcome = default_env.submit_direction(rng.choice(list(Direction)))
            if outcome in (MoveOutcome.MOVED, MoveOutcome.PUSHED):
                committed += 1

        assert default_env.current_move_count() == committed
        for _ in range(committed):
            assert default_env.undo()

        assert snapshot(default_env) == before
        assert default_env.current_push_count() == 0
        assert not default_env.undo()

    def test_blocked_moves_are_not_recorded(self, one_push_env):
        one_push_env.submit_direction("up")
        one_push_env.submit_direction("left")

        assert not one_push_env.undo()


def test_invariants_hold_on_random_play():
    env = SokobanEnvironment(auto_advance=False)
    rng = random.Random(1234)

    for level_index in range(env.total_level_count()):
        env.load_level(level_index)
        grid = env._sequencer.grid
        initial_box_count = len(env.current_block_positions())
        for _ in range(500):
            if rng.random() < 0.2:
                env.undo()
            else:
                env.submit_direction(rng.choice(list(Direction)))

            player = env.current_player_position()
            blocks = env.current_block_positions()
            assert not grid.is_wall(player)
            assert player not in blocks
            assert len(blocks) == initial_box_count
            assert not any(grid.is_wall(block) for block in blocks)
            assert env.current_move_count() >= 0


class TestLevels:
    def test_reset_is_idempotent(self, default_env):
        initial = snapshot(default_env)
        for direction in ["down", "right", "down"]:
            default_env.submit_direction(direction)
        default_env.undo()

        default_env.reset_current_level()
        first = snapshot(default_env)
        default_env.reset_current_level()

        assert first == initial
        assert snapshot(default_env) == initial
        assert default_env.current_move_count() == 0
        assert not default_env.undo()

    def test_advance_wraps_at_last_level(self, default_env):
        default_env.advance_level()
        assert default_env.current_level_index() == 1
        default_env.submit_direction("left")

        default_env.advance_level()

        assert default_env.current_level_index() == 0
        assert default_env.current_move_count() == 0
        assert default_env.current_player_position() == Coordinate(1, 1)
        assert not default_env.undo()

    def test_retreat_at_first_level_is_noop(self, default_env):
        default_env.submit_direction("down")

        assert not default_env.retreat_level()

        assert default_env.current_level_index() == 0
        assert default_env.current_move_count() == 1

    def test_load_out_of_range_is_noop(self, default_env):
        default_env.submit_direction("down")

        assert not default_env.load_level(5)

        assert default_env.current_move_count() == 1

    def test_total_level_count(self, default_env):
        assert default_env.total_level_count() == 2

    def test_invalid_level_list(self):
        with pytest.raises(InvalidLevelDefinition):
            SokobanEnvironment(levels=[[[1, 1, 1], [1, 9, 4]]])


class TestPendingTransition:
    def test_win_schedules_transition(self, one_push_env):
        events = []
        one_push_env.subscribe(events.append)

        one_push_env.submit_direction("right")

        assert one_push_env.has_pending_transition()
        assert one_push_env.current_level_index() == 0
        assert [e.kind for e in events] == [EventKind.STATE_CHANGED, EventKind.LEVEL_SOLVED]
        assert events[-1].move_count == 1

    def test_input_is_ignored_while_pending(self, one_push_env):
        one_push_env.submit_direction("right")
        before = snapshot(one_push_env)

        assert one_push_env.submit_direction("down") is MoveOutcome.IGNORED
        assert not one_push_env.undo()

        assert snapshot(one_push_env) == before

    def test_complete_pending_transition_advances(self, one_push_env):
        one_push_env.submit_direction("right")

        assert one_push_env.complete_pending_transition()

        assert one_push_env.current_level_index() == 1
        assert not one_push_env.has_pending_transition()
        assert one_push_env.current_move_count() == 0
        assert not one_push_env.complete_pending_transition()

    def test_advancing_past_last_level_signals_game_completed(self, one_push_env):
        events = []
        one_push_env.load_level(1)
        one_push_env.submit_direction("down")
        one_push_env.subscribe(events.append)

        one_push_env.advance_level()

        assert one_push_env.current_level_index() == 0
        assert events == [
            GameEvent(EventKind.GAME_COMPLETED, level_index=1, move_count=1),
            GameEvent(EventKind.LEVEL_LOADED, level_index=0, move_count=0),
        ]

    def test_pending_win_on_last_level_wraps(self):
        env = SokobanEnvironment(levels=[ONE_PUSH_LEVEL])
        events = []
        env.subscribe(events.append)

        env.submit_direction("right")
        env.complete_pending_transition()

        assert env.current_level_index() == 0
        assert not env.is_current_level_solved()
        assert events == [
            GameEvent(EventKind.STATE_CHANGED, level_index=0, move_count=1),
            GameEvent(EventKind.LEVEL_SOLVED, level_index=0, move_count=1),
            GameEvent(EventKind.GAME_COMPLETED, level_index=0, move_count=1),
            GameEvent(EventKind.LEVEL_LOADED, level_index=0, move_count=0),
        ]

    def test_win_is_recorded_before_listeners_run(self, one_push_env):
        seen = []

        def listener(event):
            seen.append((event.kind, one_push_env.has_pending_transition(), one_push_env.state.pending_transition))
            if event.kind is EventKind.STATE_CHANGED:
                raise RuntimeError("listener failed")

        one_push_env.subscribe(listener)

        with pytest.raises(RuntimeError):
            one_push_env.submit_direction("right")

        assert seen == [(EventKind.STATE_CHANGED, True, True)]
        assert one_push_env.has_pending_transition()
        assert one_push_env.is_current_level_solved()
        assert one_push_env.complete_pending_transition()
        assert one_push_env.current_level_index() == 1

    def test_retreat_at_first_level_keeps_pending(self, one_push_env):
        one_push_env.submit_direction("right")
        events = []
        one_push_env.subscribe(events.append)

        assert not one_push_env.retreat_level()

        assert events == []
        assert one_push_env.has_pending_transition()
        assert one_push_env.complete_pending_transition()
        assert one_push_env.current_level_index() == 1

    def test_loading_unknown_level_keeps_pending(self, one_push_env):
        one_push_env.submit_direction("right")

        obs = one_push_env.reset(level_index=9)

        assert obs.level_index == 0
        assert obs.is_solved
        assert one_push_env.has_pending_transition()
        assert one_push_env.complete_pending_transition()
        assert one_push_env.current_level_index() == 1

    def test_explicit_reset_cancels_pending(self, one_push_env):
        one_push_env.submit_direction("right")

        one_push_env.reset_current_level()

        assert not one_push_env.has_pending_transition()
        assert not one_push_env.complete_pending_transition()
        assert one_push_env.current_level_index() == 0
        assert one_push_env.submit_direction("down") is MoveOutcome.MOVED

    def test_without_auto_advance_no_transition_is_pending(self):
        env = SokobanEnvironment(levels=[ONE_PUSH_LEVEL], auto_advance=False)
        events = []
        env.subscribe(events.append)

        env.submit_direction("right")

        assert env.is_current_level_solved()
        assert not env.has_pending_transition()
        assert events[-1].kind is EventKind.LEVEL_SOLVED

    def test_undo_does_not_signal_win(self):
        env = SokobanEnvironment(levels=[ONE_PUSH_LEVEL], auto_advance=False)
        env.submit_direction("right")
        env.submit_direction("down")
        events = []
        env.subscribe(events.append)

        env.undo()

        assert env.is_current_level_solved()
        assert [e.kind for e in events] == [EventKind.STATE_CHANGED]

    def test_unsubscribe(self, one_push_env):
        events = []
        one_push_env.subscribe(events.append)
        one_push_env.unsubscribe(events.append)

        one_push_env.submit_direction("right")

        assert events == []


class TestObservations:
    def test_reset_observation(self, default_env):
        obs = default_env.reset()

        assert obs.board_shape == [5, 5]
        assert obs.num_boxes == 1
        assert obs.boxes_on_goals == 0
        assert obs.player_position == [1, 1]
        assert obs.moves_count == 0
        assert obs.level_index == 0
        assert obs.total_levels == 2
        assert obs.last_outcome is None
        assert not obs.done

        board = obs.board
        assert board[0] == WALL
        assert board[1 * 5 + 1] == PLAYER
        assert board[1 * 5 + 3] == GOAL
        assert board[2 * 5 + 2] == BOX

    def test_step_observation_after_win(self, one_push_env):
        obs = one_push_env.step(SokobanAction(direction="right"))

        assert obs.is_solved
        assert obs.done
        assert obs.boxes_on_goals == 1
        assert obs.pushes_count == 1
        assert obs.last_outcome == "pushed"
        assert obs.board[1 * 5 + 3] == BOX_ON_GOAL
        assert obs.metadata["pending_transition"] is True

    def test_reset_with_level_index(self, default_env):
        obs = default_env.reset(level_index=1)

        assert obs.level_index == 1
        assert obs.board_shape == [8, 8]
        assert obs.num_boxes == 2

    def test_reset_with_out_of_range_index_is_noop(self, default_env):
        default_env.submit_direction("down")

        obs = default_env.reset(level_index=9)

        assert obs.level_index == 0
        assert obs.moves_count == 1

    def test_state_tracks_episode(self, default_env):
        episode = default_env.state.episode_id
        default_env.submit_direction("down")
        default_env.submit_direction("up")

        assert default_env.state.step_count == 2
        default_env.advance_level()
        assert default_env.state.episode_id != episode
        assert default_env.state.step_count == 0
        assert default_env.state.level_index == 1
