"""
Sokoban Puzzle Simple Example

This script demonstrates basic usage of the Sokoban Puzzle environment.
It solves the first built-in level, undoes a move, and moves on to the next level.

Usage:
    python examples/sokoban_simple.py                 # in-process environment
    python examples/sokoban_simple.py --url http://localhost:8000   # running server
"""

import argparse
import sys
from pathlib import Path

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from envs.sokoban_puzzle_env import SokobanAction, SokobanPuzzleEnv
from envs.sokoban_puzzle_env.server import SokobanEnvironment


# Solution of the first built-in level
LEVEL_ONE_SOLUTION = ["down", "right", "down", "right", "up"]


def print_board(observation):
    """Print a visual representation of the Sokoban board."""
    # Reshape the flat board into 2D
    height, width = observation.board_shape
    board = []
    for i in range(height):
        row = observation.board[i * width:(i + 1) * width]
        board.append(row)

    # Symbol mapping for visualization
    symbols = {
        0: '·',  # Empty floor
        1: '█',  # Wall
        2: '□',  # Box
        3: '.',  # Goal
        4: '@',  # Player
        5: '▣',  # Box on goal
        6: '+',  # Player on goal
    }

    print(f"\nLevel {observation.level_index + 1}/{observation.total_levels}")
    print("─" * (width * 2))
    for row in board:
        print(' '.join(symbols[cell] for cell in row))
    print("─" * (width * 2))


class LocalRunner:
    """Drive an in-process environment with the same calls as the HTTP client."""

    def __init__(self):
        # No automatic advance: the example steps through levels explicitly
        self.env = SokobanEnvironment(auto_advance=False)

    def reset(self):
        return self.env.reset()

    def step(self, action):
        return self.env.step(action)

    def undo(self):
        self.env.undo()
        return self.env.observe()

    def next_level(self):
        self.env.advance_level()
        return self.env.observe()

    def close(self):
        pass


def unwrap(result):
    return getattr(result, "observation", result)


def main():
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--url", help="Base URL of a running Sokoban Puzzle server")
    args = parser.parse_args()

    print("Sokoban Puzzle Example")
    print("=" * 50)

    runner = SokobanPuzzleEnv(base_url=args.url) if args.url else LocalRunner()

    try:
        observation = unwrap(runner.reset())
        print(f"\nInitial State:")
        print(f"  Board size: {observation.board_shape}")
        print(f"  Number of boxes: {observation.num_boxes}")
        print(f"  Player position: {observation.player_position}")
        print_board(observation)

        for i, direction in enumerate(LEVEL_ONE_SOLUTION, 1):
            observation = unwrap(runner.step(SokobanAction(direction=direction)))
            print(f"\n--- Move {i}: {direction.upper()} ({observation.last_outcome}) ---")
            print(f"Boxes on goals: {observation.boxes_on_goals}/{observation.num_boxes}")
            print(f"Total moves: {observation.moves_count}, pushes: {observation.pushes_count}")
            print_board(observation)

        if observation.is_solved:
            print("\n" + "=" * 50)
            print("CONGRATULATIONS! Puzzle solved!")
            print(f"Completed in {observation.moves_count} moves")
            print("=" * 50)

        observation = unwrap(runner.undo())
        print(f"\nAfter undo: moves={observation.moves_count}, solved={observation.is_solved}")

        observation = unwrap(runner.next_level())
        print_board(observation)

    finally:
        runner.close()
        print("\n✅ Done!")


if __name__ == "__main__":
    main()
