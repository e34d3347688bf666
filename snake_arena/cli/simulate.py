#!/usr/bin/env python3
"""Headless soak run of the arena with seeded random key presses.

Every requested slot presses a start key on the first frame and then
holds left, right or nothing for random stretches of time. The run stops
when the round ends or the time budget is used up, writes a replay JSON
and prints the final board and scores.

Usage:

    python -m snake_arena.cli.simulate --players 4 --seed 7 --seconds 60
"""

import argparse
import logging
import random
from typing import List, Optional

from snake_arena.config import load_config
from snake_arena.domain.constants import MAX_PLAYERS, ROUND_ENDED
from snake_arena.domain.inputs import InputSnapshot, PlayerInput
from snake_arena.engine import ArenaEngine
from snake_arena.services.replay import DEFAULT_REPLAY_DIR, ReplayRecorder

logger = logging.getLogger(__name__)

# Seconds a random key choice is held, min and max
HOLD_RANGE = (0.1, 1.2)


class KeyMasher:
    """Seeded random key holds for a set of slots."""

    def __init__(self, slots: List[int], rng: random.Random):
        self.slots = slots
        self.rng = rng
        self.held = {slot: PlayerInput() for slot in slots}
        self.remaining = {slot: 0.0 for slot in slots}

    def next_inputs(self, dt: float, first_frame: bool) -> InputSnapshot:
        players = [PlayerInput() for _ in range(MAX_PLAYERS)]
        for slot in self.slots:
            self.remaining[slot] -= dt
            if self.remaining[slot] <= 0:
                choice = self.rng.choice(("left", "right", "none", "none"))
                self.held[slot] = PlayerInput(left=choice == "left", right=choice == "right")
                self.remaining[slot] = self.rng.uniform(*HOLD_RANGE)
            held = self.held[slot]
            players[slot] = PlayerInput(left=held.left, right=held.right, start=first_frame)
        return InputSnapshot(tuple(players))


def run_simulation(
    players: int,
    seconds: float,
    fps: int,
    seed: Optional[int] = None,
    env_file: Optional[str] = None,
    print_every: int = 0,
) -> ArenaEngine:
    """Run one soak round and return the engine with its recorder attached."""
    config = load_config(env_file)
    engine = ArenaEngine(config, seed=seed)
    recorder = ReplayRecorder(engine)
    masher = KeyMasher(list(range(players)), random.Random(engine.seed + 1))

    dt = 1.0 / fps
    total_frames = int(seconds * fps)
    result = None
    for frame in range(total_frames):
        result = engine.tick(masher.next_inputs(dt, frame == 0), dt)
        if print_every and frame % print_every == 0:
            print("\n" + result.render_ascii() + "\n")
        if result.round_state == ROUND_ENDED:
            break

    if result is not None:
        print("\n" + result.render_ascii() + "\n")
    logger.info("Simulated %d frames (seed=%s)", len(recorder.frames), engine.seed)
    return engine


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run a headless Snake Arena round with random key presses and save the replay."
    )
    parser.add_argument("--players", type=int, default=MAX_PLAYERS,
                        help=f"Number of slots to start, 1-{MAX_PLAYERS} (default: {MAX_PLAYERS}).")
    parser.add_argument("--seconds", type=float, default=60.0,
                        help="Maximum simulated seconds (default: 60).")
    parser.add_argument("--fps", type=int, default=60,
                        help="Simulated frames per second (default: 60).")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the arena (default: SNAKE_ARENA_SEED or random).")
    parser.add_argument("--env-file", type=str, default=None,
                        help="Optional .env file with SNAKE_ARENA_* settings.")
    parser.add_argument("--output-dir", type=str, default=DEFAULT_REPLAY_DIR,
                        help=f"Where to write the replay JSON (default: {DEFAULT_REPLAY_DIR}).")
    parser.add_argument("--print-every", type=int, default=0,
                        help="Print the board every N frames (default: only at the end).")
    args = parser.parse_args()

    if not 1 <= args.players <= MAX_PLAYERS:
        parser.error(f"--players must be between 1 and {MAX_PLAYERS}")
    if args.fps <= 0 or args.seconds <= 0:
        parser.error("--fps and --seconds must be positive")

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    engine = run_simulation(
        players=args.players,
        seconds=args.seconds,
        fps=args.fps,
        seed=args.seed,
        env_file=args.env_file,
        print_every=args.print_every,
    )
    path = engine.recorder.save(directory=args.output_dir)
    print(f"Replay saved to {path}")
    print(f"Final scores: {engine.arena_round.scores}")


if __name__ == "__main__":
    main()
