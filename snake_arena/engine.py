"""
Frame driver for Snake Arena.

The host game loop calls ArenaEngine.tick() once per rendered frame with
the elapsed time and a snapshot of the keys, and draws whatever the
returned FrameResult says.
"""

import logging
import random
from typing import List, Optional

from .config import ArenaConfig
from .domain.arena_round import ArenaRound
from .domain.constants import (
    KIND_OBSTACLE, KIND_PICKUP, KIND_SNAKE_BODY, KIND_SNAKE_HEAD,
    MAX_PLAYERS, ROUND_ENDED, ROUND_IN_PROGRESS,
)
from .domain.events import ObstacleSpawned, PickupSpawned, PlayerStarted
from .domain.game_state import FrameResult, RenderEntity
from .domain.geometry import heading_angle
from .domain.inputs import InputSnapshot
from .services.collision_resolver import CollisionResolver
from .services.session_manager import SessionManager, StartOutcome
from .services.spawner import Spawner

logger = logging.getLogger(__name__)


class ArenaEngine:
    """
    Runs one arena: the four player slots, pickups, obstacles and scores.

    Per frame, in order:
      1) start edges from the input (a start after the round ended and
         the restart cooldown passed resets the board first)
      2) headings from turn intents
      3) snake heads and obstacles advance
      4) collisions are resolved against that snapshot
      5) deaths and pickups are applied, then tails settle
      6) the spawner adds what is due
      7) the round-end condition is checked
    """

    def __init__(self, config: Optional[ArenaConfig] = None, seed: Optional[int] = None):
        self.config = (config or ArenaConfig()).validate()

        if seed is None:
            seed = self.config.seed
        if seed is None:
            seed = random.SystemRandom().randrange(2 ** 32)
        self.seed = seed
        self.rng = random.Random(seed)

        self.session = SessionManager(self.config)
        self.resolver = CollisionResolver(self.config)
        self.spawner = Spawner(self.config)
        self.recorder = None

        self.frame_number = 0
        self.ended_for = 0.0
        self._pending_events: List[object] = []

        self.arena_round: ArenaRound = self.session.new_round(self.rng)
        self.spawner.reset(self.arena_round)
        logger.info("Arena ready (seed=%s, field=%sx%s)", seed, self.config.field_width, self.config.field_height)

    @property
    def round_state(self) -> str:
        return self.arena_round.state

    def start_player(self, slot: int) -> StartOutcome:
        """
        Start the given slot. Out-of-range slots and repeated starts are
        rejected without changing anything; see StartOutcome.

        A start made here (rather than through a start key in tick())
        is noted on the attached recorder so replays repeat it.
        """
        outcome = self._start_player(slot)
        if outcome is StartOutcome.STARTED and self.recorder is not None:
            self.recorder.note_call("start", slot)
        return outcome

    def reset_round(self) -> None:
        """Return every slot to idle, clear the board and zero the scores."""
        self._reset_round()
        if self.recorder is not None:
            self.recorder.note_call("reset")

    def _start_player(self, slot: int) -> StartOutcome:
        outcome = self.session.start_player(self.arena_round, slot)
        if outcome is StartOutcome.STARTED:
            self._pending_events.append(PlayerStarted(slot))
        return outcome

    def _reset_round(self) -> None:
        logger.info("Resetting round (previous: %r)", self.arena_round)
        self.arena_round = self.session.new_round(self.rng)
        self.spawner.reset(self.arena_round)
        self.ended_for = 0.0
        self._pending_events = []

    def tick(self, inputs: InputSnapshot, dt: float) -> FrameResult:
        """
        Simulate one frame.

        Args:
            inputs: key state of all four slots for this frame
            dt: seconds since the previous frame, must not be negative

        Returns:
            FrameResult: entities to draw, this frame's events, scores and round state
        """
        if dt < 0:
            raise ValueError(f"dt must not be negative, got {dt}")

        self.frame_number += 1
        arena_round = self.arena_round

        # 1) Start signals
        starts = [slot for slot in range(MAX_PLAYERS) if inputs[slot].start]
        if arena_round.state == ROUND_ENDED:
            self.ended_for += dt
            if starts and self.ended_for >= self.config.restart_cooldown:
                self._reset_round()
                arena_round = self.arena_round
        for slot in starts:
            self._start_player(slot)

        events = self._pending_events
        self._pending_events = []

        if arena_round.state == ROUND_IN_PROGRESS:
            events.extend(self._simulate(arena_round, inputs, dt))

        for snake in arena_round.snakes:
            snake.linger(dt, self.config.dead_linger_seconds)

        result = self._build_result(events)
        if self.recorder is not None:
            self.recorder.record(inputs, dt, result)
        return result

    def _simulate(self, arena_round: ArenaRound, inputs: InputSnapshot, dt: float) -> List[object]:
        events: List[object] = []
        arena_round.clock += dt
        config = self.config

        # 2) Headings
        alive = arena_round.alive_snakes()
        for snake in alive:
            snake.steer(inputs[snake.slot].turn_intent)
            snake.update_heading(config.turn_rate, dt)

        # 3) Motion
        lengths_before = {snake.slot: snake.length for snake in alive}
        for snake in alive:
            snake.advance(config.snake_speed, dt)
        events.extend(self.spawner.move_obstacles(arena_round, dt))

        # 4) Collisions, read-only
        collisions = self.resolver.resolve(
            arena_round.snakes,
            arena_round.pickups.values(),
            arena_round.obstacles.values(),
        )

        # 5) Apply buffered outcomes
        self.session.apply_events(arena_round, collisions)
        for snake in alive:
            snake.settle()
            assert snake.length >= lengths_before[snake.slot], f"snake {snake.slot} shrank"
        events.extend(collisions)

        # 6) Spawns
        new_pickups, new_obstacles = self.spawner.tick(dt, arena_round)
        for pickup in new_pickups:
            arena_round.pickups[pickup.pickup_id] = pickup
            events.append(PickupSpawned(pickup.pickup_id, pickup.position))
        for obstacle in new_obstacles:
            arena_round.obstacles[obstacle.obstacle_id] = obstacle
            events.append(ObstacleSpawned(obstacle.obstacle_id, obstacle.position))
        events.extend(self.spawner.skipped)

        # 7) Round end
        ended = self.session.check_round_end(arena_round)
        if ended is not None:
            self.ended_for = 0.0
            events.append(ended)

        return events

    def _build_result(self, events: List[object]) -> FrameResult:
        arena_round = self.arena_round
        config = self.config
        entities: List[RenderEntity] = []

        for snake in arena_round.snakes:
            if snake.is_idle or snake.cleared:
                continue
            positions = snake.body()
            hx, hy = positions[0]
            entities.append(RenderEntity(
                KIND_SNAKE_HEAD, snake.slot, snake.slot, hx, hy,
                heading_angle(snake.heading), config.head_radius, snake.alive,
            ))
            entities.extend(
                RenderEntity(KIND_SNAKE_BODY, snake.slot, snake.slot, x, y, 0.0, config.body_radius, snake.alive)
                for x, y in positions[1:]
            )

        for pickup in arena_round.pickups.values():
            entities.append(RenderEntity(
                KIND_PICKUP, pickup.pickup_id, None, pickup.position[0], pickup.position[1], 0.0, pickup.radius,
            ))
        for obstacle in arena_round.obstacles.values():
            entities.append(RenderEntity(
                KIND_OBSTACLE, obstacle.obstacle_id, None, obstacle.position[0], obstacle.position[1], 0.0,
                obstacle.radius,
            ))

        return FrameResult(
            frame_number=self.frame_number,
            clock=arena_round.clock,
            round_state=arena_round.state,
            entities=entities,
            events=events,
            scores=dict(arena_round.scores),
            slot_states={s.slot: s.state for s in arena_round.snakes},
            width=config.field_width,
            height=config.field_height,
            lengths={s.slot: s.length for s in arena_round.snakes},
        )
