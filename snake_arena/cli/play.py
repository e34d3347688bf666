#!/usr/bin/env python3
"""Play Snake Arena locally in a pygame window.

Up to four players share one keyboard:

    slot 0: q / w    slot 1: f / g    slot 2: u / i    slot 3: k / l

Touch either of your keys to join. Hold them to turn left or right.
After a round ends, a key press starts a fresh round. Esc quits,
F5 forces a reset.

Requires the optional pygame dependency: pip install "snake-arena[play]"
"""

import argparse
import logging
from typing import Set, Tuple

import pygame

from snake_arena.config import load_config
from snake_arena.domain.constants import (
    KEY_BINDINGS, KIND_OBSTACLE, KIND_PICKUP, KIND_SNAKE_BODY, KIND_SNAKE_HEAD, MAX_PLAYERS, ROUND_ENDED,
    ROUND_WAITING,
)
from snake_arena.domain.events import PickupConsumed, SnakeDied
from snake_arena.domain.game_state import FrameResult
from snake_arena.domain.inputs import InputSnapshot
from snake_arena.engine import ArenaEngine
from snake_arena.services.replay import ReplayRecorder
from snake_arena.services.replay_renderer import ColorScheme, darken_color, hex_to_rgb

logger = logging.getLogger(__name__)

HUD_HEIGHT = 40
MAX_DT = 0.05  # clamp long stalls (window drag etc.) so snakes never jump


class PygameHost:
    """The host loop: polls keys, ticks the engine, draws the FrameResult."""

    def __init__(self, engine: ArenaEngine, fps: int = 60):
        self.engine = engine
        self.fps = fps
        self.width = int(engine.config.field_width)
        self.height = int(engine.config.field_height)

        pygame.init()
        self.window = pygame.display.set_mode((self.width, self.height + HUD_HEIGHT))
        pygame.display.set_caption("Snake Arena")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 28)
        self.big_font = pygame.font.Font(None, 64)

        self.key_codes = {
            name: getattr(pygame, f"K_{name}")
            for slot in range(MAX_PLAYERS)
            for name in KEY_BINDINGS[slot]
        }

    def _to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(x + self.width / 2.0), int(HUD_HEIGHT + self.height / 2.0 - y)

    def poll_inputs(self, just_pressed: Set[str]) -> InputSnapshot:
        pressed = pygame.key.get_pressed()
        held = {name for name, code in self.key_codes.items() if pressed[code]}
        return InputSnapshot.from_keys(held, just_pressed)

    def draw(self, result: FrameResult) -> None:
        self.window.fill(hex_to_rgb(ColorScheme.BACKGROUND))
        pygame.draw.rect(self.window, hex_to_rgb(ColorScheme.FIELD),
                         pygame.Rect(0, HUD_HEIGHT, self.width, self.height))

        for entity in result.entities_of(KIND_PICKUP):
            pygame.draw.circle(self.window, hex_to_rgb(ColorScheme.PICKUP),
                               self._to_screen(entity.x, entity.y), int(entity.radius))
        for entity in result.entities_of(KIND_OBSTACLE):
            pygame.draw.circle(self.window, hex_to_rgb(ColorScheme.OBSTACLE),
                               self._to_screen(entity.x, entity.y), int(entity.radius))
        for entity in result.entities_of(KIND_SNAKE_BODY):
            color = ColorScheme.PLAYERS[entity.slot] if entity.alive else ColorScheme.DEAD
            pygame.draw.circle(self.window, darken_color(color, 0.25),
                               self._to_screen(entity.x, entity.y), int(entity.radius))
        for entity in result.entities_of(KIND_SNAKE_HEAD):
            color = ColorScheme.PLAYERS[entity.slot] if entity.alive else ColorScheme.DEAD
            pygame.draw.circle(self.window, hex_to_rgb(color),
                               self._to_screen(entity.x, entity.y), int(entity.radius))

        # HUD
        column = self.width // MAX_PLAYERS
        for slot in range(MAX_PLAYERS):
            state = result.slot_states[slot]
            left_key, right_key = KEY_BINDINGS[slot]
            if state == "idle":
                text = f"P{slot}: press {left_key}/{right_key}"
                color = hex_to_rgb(ColorScheme.DEAD)
            else:
                text = f"P{slot}: {result.scores[slot]} points" + (" (out)" if state == "dead" else "")
                color = hex_to_rgb(ColorScheme.PLAYERS[slot])
            self.window.blit(self.font.render(text, True, color), (10 + column * slot, 10))

        if result.round_state in (ROUND_WAITING, ROUND_ENDED):
            message = "Press your keys to start" if result.round_state == ROUND_WAITING else "Game over"
            label = self.big_font.render(message, True, hex_to_rgb(ColorScheme.SCORE_TEXT))
            self.window.blit(label, label.get_rect(center=(self.width // 2, HUD_HEIGHT + self.height // 2)))

        pygame.display.flip()

    def run(self) -> None:
        running = True
        while running:
            dt = min(self.clock.tick(self.fps) / 1000.0, MAX_DT)

            just_pressed: Set[str] = set()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_F5:
                        self.engine.reset_round()
                    else:
                        just_pressed.add(pygame.key.name(event.key))

            result = self.engine.tick(self.poll_inputs(just_pressed), dt)
            for event in result.events:
                if isinstance(event, SnakeDied):
                    logger.info("Player %d crashed (%s)", event.snake_id, event.cause)
                elif isinstance(event, PickupConsumed):
                    logger.debug("Player %d ate pickup %d", event.snake_id, event.pickup_id)
            self.draw(result)

        pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Snake Arena with up to four players on one keyboard.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for spawns (default: random).")
    parser.add_argument("--fps", type=int, default=60, help="Target frame rate (default: 60).")
    parser.add_argument("--env-file", type=str, default=None, help="Optional .env with SNAKE_ARENA_* settings.")
    parser.add_argument("--growth", type=int, default=8,
                        help="Segments gained per pickup (default: 8, the engine default is 1).")
    parser.add_argument("--record", action="store_true", help="Save a replay JSON when the window closes.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    config = load_config(args.env_file, growth_per_pickup=args.growth)
    engine = ArenaEngine(config, seed=args.seed)
    recorder = ReplayRecorder(engine) if args.record else None

    PygameHost(engine, fps=args.fps).run()

    if recorder is not None:
        print(f"Replay saved to {recorder.save()}")


if __name__ == "__main__":
    main()
