"""
Player lifecycle, scoring and round start/end rules.
"""

import logging
import random
from enum import Enum
from typing import Iterable, Optional

from ..config import ArenaConfig
from ..domain.arena_round import ArenaRound
from ..domain.constants import (
    MAX_PLAYERS, ROUND_ENDED, ROUND_IN_PROGRESS, ROUND_WAITING,
)
from ..domain.events import PickupConsumed, RoundEnded, SnakeDied
from ..domain.geometry import Point, RIGHTWARD
from ..errors import InvalidSlotError

logger = logging.getLogger(__name__)


class StartOutcome(Enum):
    STARTED = "started"
    ALREADY_ALIVE = "already_alive"
    ELIMINATED = "eliminated"
    ROUND_OVER = "round_over"
    INVALID_SLOT = "invalid_slot"


class SessionManager:
    """
    Owns the rules around a round, not its state.

    - A slot joins with a start signal while the round is waiting or in
      progress; it spawns at its own start position heading right.
    - A started snake that dies stays out until the round is reset.
    - The round ends once every started snake is dead, or when
      round_time_limit (if set) runs out.
    """

    def __init__(self, config: ArenaConfig):
        self.config = config

    def new_round(self, rng: random.Random) -> ArenaRound:
        return ArenaRound(rng)

    def start_position(self, slot: int) -> Point:
        """Start points are spread down the left quarter of the field, slot 0 on top."""
        spacing = self.config.field_height / (MAX_PLAYERS + 1)
        return (-self.config.field_width / 4.0, self.config.half_height - spacing * (slot + 1))

    def start_player(self, arena_round: ArenaRound, slot: int) -> StartOutcome:
        """
        Bring an idle slot into play.

        Invalid slots are rejected with a warning and leave the round
        untouched; repeated starts of a live slot are ignored.
        """
        try:
            snake = arena_round.snake(slot)
        except InvalidSlotError as e:
            logger.warning("Ignoring start signal: %s", e)
            return StartOutcome.INVALID_SLOT

        if arena_round.state == ROUND_ENDED:
            return StartOutcome.ROUND_OVER
        if snake.alive:
            return StartOutcome.ALREADY_ALIVE
        if snake.is_dead:
            return StartOutcome.ELIMINATED

        snake.spawn(
            self.start_position(slot),
            RIGHTWARD,
            self.config.initial_length,
            self.config.spawn_segment_spacing,
        )
        if arena_round.state == ROUND_WAITING:
            arena_round.state = ROUND_IN_PROGRESS
            logger.info("Round started by player %d", slot)
        else:
            logger.info("Player %d joined at %.2fs", slot, arena_round.clock)
        return StartOutcome.STARTED

    def apply_events(self, arena_round: ArenaRound, events: Iterable[object]) -> None:
        """Apply buffered collision outcomes: deaths first, then pickups."""
        events = list(events)
        for event in events:
            if isinstance(event, SnakeDied):
                snake = arena_round.snakes[event.snake_id]
                snake.kill(event.cause, arena_round.clock)
                logger.info(
                    "Player %d died (%s) at %.2fs with length %d",
                    event.snake_id, event.cause, arena_round.clock, snake.length
                )

        for event in events:
            if isinstance(event, PickupConsumed):
                pickup = arena_round.pickups.pop(event.pickup_id)
                snake = arena_round.snakes[event.snake_id]
                assert snake.alive, "a dead snake cannot score"
                snake.grow(self.config.growth_per_pickup)
                arena_round.scores[event.snake_id] += pickup.value

    def check_round_end(self, arena_round: ArenaRound) -> Optional[RoundEnded]:
        """Close the round if its terminal condition holds. Returns the event once."""
        if arena_round.state != ROUND_IN_PROGRESS:
            return None

        reason = None
        if arena_round.started_snakes() and not arena_round.alive_snakes():
            reason = "all snakes dead"
        elif self.config.round_time_limit > 0 and arena_round.clock >= self.config.round_time_limit:
            reason = "time limit"

        if reason is None:
            return None

        arena_round.state = ROUND_ENDED
        arena_round.end_reason = reason
        scores = dict(arena_round.scores)
        logger.info("Round ended (%s) after %.2fs. Scores: %s", reason, arena_round.clock, scores)
        return RoundEnded(scores=scores)
