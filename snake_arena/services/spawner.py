"""
Timed spawning of pickups and obstacles, and obstacle motion.

Every random draw goes through the round's shared random.Random so a
seeded arena replays identically.
"""

import logging
from typing import List, Optional, Tuple

from ..config import ArenaConfig
from ..domain.arena_round import ArenaRound
from ..domain.constants import EDGE_BOUNCE, EDGE_RESPAWN, KIND_OBSTACLE, KIND_PICKUP
from ..domain.entities import Obstacle, Pickup
from ..domain.events import ObstacleSpawned, SpawnSkipped
from ..domain.geometry import (
    Circle, Point, elastic_bounce, in_bounds, reflect_in_bounds, segments_overlap, wrap_position,
)

logger = logging.getLogger(__name__)


class Spawner:
    """
    Creates pickups and obstacles on randomised intervals.

    Pickups arrive every [pickup_interval_min, pickup_interval_max]
    seconds and obstacles every [obstacle_interval_min,
    obstacle_interval_max] seconds, up to the configured caps. A spawn
    position must keep spawn_clearance from every snake segment, pickup
    and obstacle; after spawn_attempts rejected candidates the spawn is
    skipped until the next interval.
    """

    def __init__(self, config: ArenaConfig):
        self.config = config
        self.pickup_timer = 0.0
        self.obstacle_timer = 0.0
        self.skipped: List[SpawnSkipped] = []

    def reset(self, arena_round: ArenaRound) -> None:
        """Draw the first intervals for a fresh round."""
        self.pickup_timer = self._pickup_interval(arena_round)
        self.obstacle_timer = self._obstacle_interval(arena_round)
        self.skipped = []

    def _pickup_interval(self, arena_round: ArenaRound) -> float:
        return arena_round.rng.uniform(self.config.pickup_interval_min, self.config.pickup_interval_max)

    def _obstacle_interval(self, arena_round: ArenaRound) -> float:
        return arena_round.rng.uniform(self.config.obstacle_interval_min, self.config.obstacle_interval_max)

    def tick(self, dt: float, arena_round: ArenaRound) -> Tuple[List[Pickup], List[Obstacle]]:
        """
        Advance the spawn timers and create whatever is due.

        The new entities are returned, not added to the round; the
        caller inserts them. Spawns skipped for lack of room are
        recorded in self.skipped for this tick.

        Returns:
            (new_pickups, new_obstacles)
        """
        self.skipped = []
        new_pickups: List[Pickup] = []
        new_obstacles: List[Obstacle] = []

        self.pickup_timer -= dt
        if self.pickup_timer <= 0:
            self.pickup_timer = self._pickup_interval(arena_round)
            if len(arena_round.pickups) < self.config.max_pickups:
                pickup = self.spawn_pickup(arena_round)
                if pickup is not None:
                    new_pickups.append(pickup)

        self.obstacle_timer -= dt
        if self.obstacle_timer <= 0:
            self.obstacle_timer = self._obstacle_interval(arena_round)
            if len(arena_round.obstacles) < self.config.max_obstacles:
                obstacle = self.spawn_obstacle(arena_round, pending=new_pickups)
                if obstacle is not None:
                    new_obstacles.append(obstacle)

        return new_pickups, new_obstacles

    def spawn_pickup(self, arena_round: ArenaRound) -> Optional[Pickup]:
        position = self.find_clear_position(arena_round, self.config.pickup_radius, KIND_PICKUP)
        if position is None:
            return None
        pickup = Pickup(
            pickup_id=arena_round.next_pickup_id(),
            position=position,
            radius=self.config.pickup_radius,
            value=self.config.pickup_value,
        )
        logger.debug("Spawned pickup %d at (%.1f, %.1f)", pickup.pickup_id, *position)
        return pickup

    def spawn_obstacle(self, arena_round: ArenaRound, pending: Optional[List[Pickup]] = None) -> Optional[Obstacle]:
        rng = arena_round.rng
        scale = rng.uniform(self.config.obstacle_scale_min, self.config.obstacle_scale_max)
        radius = self.config.obstacle_base_radius * scale
        max_speed = self.config.obstacle_speed / scale
        velocity = (rng.uniform(-max_speed, max_speed), rng.uniform(-max_speed, max_speed))

        extra = [p.circle for p in pending or []]
        position = self.find_clear_position(arena_round, radius, KIND_OBSTACLE, extra=extra)
        if position is None:
            return None
        obstacle = Obstacle(
            obstacle_id=arena_round.next_obstacle_id(),
            position=position,
            velocity=velocity,
            radius=radius,
            mass=scale,
        )
        logger.debug(
            "Spawned obstacle %d at (%.1f, %.1f) radius=%.1f",
            obstacle.obstacle_id, position[0], position[1], radius
        )
        return obstacle

    def find_clear_position(
        self,
        arena_round: ArenaRound,
        radius: float,
        kind: str,
        extra: Optional[List[Circle]] = None
    ) -> Optional[Point]:
        """
        Return a random position whose circle keeps clearance from everything
        on the board, or None (recording a SpawnSkipped) if every attempt failed.
        """
        config = self.config
        limit_x = max(config.half_width - config.spawn_margin - radius, 0.0)
        limit_y = max(config.half_height - config.spawn_margin - radius, 0.0)

        occupied = self._occupied(arena_round) + list(extra or [])

        for _ in range(config.spawn_attempts):
            x = arena_round.rng.uniform(-limit_x, limit_x)
            y = arena_round.rng.uniform(-limit_y, limit_y)
            candidate = Circle(x, y, radius)
            if not any(segments_overlap(candidate, other, config.spawn_clearance) for other in occupied):
                return (x, y)

        logger.warning("No clear %s position after %d attempts; skipping spawn", kind, config.spawn_attempts)
        self.skipped.append(SpawnSkipped(kind=kind, attempts=config.spawn_attempts))
        return None

    def _occupied(self, arena_round: ArenaRound) -> List[Circle]:
        body_radius = self.config.body_radius
        circles: List[Circle] = []
        for snake in arena_round.snakes:
            if snake.is_idle or snake.cleared:
                continue
            circles.extend(Circle(x, y, body_radius) for x, y in snake.positions)
        circles.extend(p.circle for p in arena_round.pickups.values())
        circles.extend(o.circle for o in arena_round.obstacles.values())
        return circles

    def move_obstacles(self, arena_round: ArenaRound, dt: float) -> List[object]:
        """
        Integrate obstacle velocities, apply the field-edge policy and
        bounce overlapping obstacles off each other.

        Returns:
            events produced by 'respawn' edge handling
        """
        config = self.config
        half_w, half_h = config.half_width, config.half_height
        events: List[object] = []
        exited: List[int] = []

        for obstacle in arena_round.obstacles.values():
            vx, vy = obstacle.velocity
            position = (obstacle.position[0] + vx * dt, obstacle.position[1] + vy * dt)
            if not in_bounds(position, half_w, half_h):
                if config.obstacle_edge == EDGE_BOUNCE:
                    position, obstacle.velocity = reflect_in_bounds(position, obstacle.velocity, half_w, half_h)
                elif config.obstacle_edge == EDGE_RESPAWN:
                    exited.append(obstacle.obstacle_id)
                else:
                    position = wrap_position(position, half_w, half_h)
            obstacle.position = position

        for obstacle_id in exited:
            del arena_round.obstacles[obstacle_id]
            logger.debug("Obstacle %d left the field", obstacle_id)
            replacement = self.spawn_obstacle(arena_round)
            if replacement is not None:
                arena_round.obstacles[replacement.obstacle_id] = replacement
                events.append(ObstacleSpawned(replacement.obstacle_id, replacement.position))
            events.extend(self.skipped)
            self.skipped = []

        ordered = sorted(arena_round.obstacles.values(), key=lambda o: o.obstacle_id)
        for i, first in enumerate(ordered):
            for second in ordered[i + 1:]:
                if segments_overlap(first.circle, second.circle):
                    first.velocity, second.velocity = elastic_bounce(
                        first.position, first.velocity, first.mass,
                        second.position, second.velocity, second.mass,
                    )

        return events
