"""
Per-frame collision detection between snake heads and everything else.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from ..config import ArenaConfig
from ..domain.constants import CAUSE_COLLISION, CAUSE_OBSTACLE, CAUSE_WALL
from ..domain.entities import Obstacle, Pickup
from ..domain.events import PickupConsumed, SnakeDied
from ..domain.geometry import Circle, Point, distance_squared, in_bounds, segments_overlap
from ..domain.snake import Snake


class CollisionResolver:
    """
    Tests every alive head against walls, obstacles, snake bodies and pickups.

    All tests read one snapshot taken before any mutation, and the
    outcome is returned as events rather than applied, so the order in
    which snakes are visited cannot change the result. The resolver
    never mutates its arguments.
    """

    def __init__(self, config: ArenaConfig):
        self.config = config
        self._head_head_reach2 = (2 * config.head_radius) ** 2
        self._head_body_reach2 = (config.head_radius + config.body_radius) ** 2

    def resolve(
        self,
        snakes: Iterable[Snake],
        pickups: Iterable[Pickup],
        obstacles: Iterable[Obstacle]
    ) -> List[object]:
        """
        Returns:
            SnakeDied events ordered by slot, then PickupConsumed events
            ordered by pickup id. At most one SnakeDied per snake, and a
            snake that dies this frame consumes nothing.
        """
        # Frame-start snapshot
        bodies: Dict[int, Tuple[Point, ...]] = {
            s.slot: tuple(s.positions) for s in sorted(snakes, key=lambda s: s.slot) if s.alive
        }
        pickup_list = sorted(pickups, key=lambda p: p.pickup_id)
        obstacle_list = sorted(obstacles, key=lambda o: o.obstacle_id)

        deaths: Dict[int, SnakeDied] = {}
        for slot, body in bodies.items():
            death = self._fatal_hit(slot, body, bodies, obstacle_list)
            if death is not None:
                deaths[slot] = death

        # Pickups: nearest surviving head wins, ties go to the lower slot
        consumed: List[PickupConsumed] = []
        for pickup in pickup_list:
            reach2 = (self.config.head_radius + pickup.radius) ** 2
            best = None
            for slot, body in bodies.items():
                if slot in deaths:
                    continue
                d2 = distance_squared(body[0], pickup.position)
                if d2 <= reach2 and (best is None or d2 < best[0]):
                    best = (d2, slot)
            if best is not None:
                consumed.append(PickupConsumed(snake_id=best[1], pickup_id=pickup.pickup_id))

        return [deaths[slot] for slot in sorted(deaths)] + consumed

    def _fatal_hit(
        self,
        slot: int,
        body: Sequence[Point],
        bodies: Dict[int, Tuple[Point, ...]],
        obstacles: Sequence[Obstacle]
    ):
        head = body[0]

        # a) walls: snakes never wrap
        if not in_bounds(head, self.config.half_width, self.config.half_height):
            return SnakeDied(snake_id=slot, cause=CAUSE_WALL)

        # b) obstacles
        head_circle = Circle(head[0], head[1], self.config.head_radius)
        for obstacle in obstacles:
            if segments_overlap(head_circle, obstacle.circle):
                return SnakeDied(snake_id=slot, cause=CAUSE_OBSTACLE)

        # c) bodies, own body last
        for other_slot, other_body in bodies.items():
            if other_slot == slot:
                continue
            if distance_squared(head, other_body[0]) <= self._head_head_reach2:
                return SnakeDied(snake_id=slot, cause=CAUSE_COLLISION, other_id=other_slot)
            for segment in other_body[1:]:
                if distance_squared(head, segment) <= self._head_body_reach2:
                    return SnakeDied(snake_id=slot, cause=CAUSE_COLLISION, other_id=other_slot)

        if self._hits_own_body(body):
            return SnakeDied(snake_id=slot, cause=CAUSE_COLLISION, other_id=slot)

        return None

    def _hits_own_body(self, body: Sequence[Point]) -> bool:
        """
        Segments right behind the head always touch it. Skip at least
        self_collision_grace of them, then keep skipping while they still
        touch the head; anything touching after that is a real loop-back.
        """
        head = body[0]
        reach2 = self._head_body_reach2
        i = 1
        while i < len(body) and (i <= self.config.self_collision_grace or distance_squared(head, body[i]) <= reach2):
            i += 1
        return any(distance_squared(head, segment) <= reach2 for segment in body[i:])
