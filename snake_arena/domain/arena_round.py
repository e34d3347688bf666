"""
ArenaRound - the single owner of all per-round mutable state.
"""

import random
from typing import Dict, List, Optional

from .constants import MAX_PLAYERS, ROUND_WAITING
from .entities import Obstacle, Pickup
from .snake import Snake
from ..errors import InvalidSlotError


class ArenaRound:
    """
    Everything one round of play owns.

    Subsystems receive the round explicitly and never keep their own
    copies of entities, so several rounds can exist side by side (e.g.
    in tests) without sharing state.

    Attributes:
        snakes: one Snake per slot, index == slot
        pickups: pickup_id -> Pickup
        obstacles: obstacle_id -> Obstacle
        scores: slot -> score
        clock: seconds simulated in this round
        state: 'waiting', 'in_progress' or 'ended'
        rng: the one random source every spawn draws from
    """

    def __init__(self, rng: random.Random):
        self.rng = rng
        self.snakes: List[Snake] = [Snake(slot) for slot in range(MAX_PLAYERS)]
        self.pickups: Dict[int, Pickup] = {}
        self.obstacles: Dict[int, Obstacle] = {}
        self.scores: Dict[int, int] = {slot: 0 for slot in range(MAX_PLAYERS)}
        self.clock = 0.0
        self.state = ROUND_WAITING
        self.end_reason: Optional[str] = None
        self._next_pickup_id = 0
        self._next_obstacle_id = 0

    def snake(self, slot: int) -> Snake:
        if not isinstance(slot, int) or isinstance(slot, bool) or not 0 <= slot < MAX_PLAYERS:
            raise InvalidSlotError(slot)
        return self.snakes[slot]

    def alive_snakes(self) -> List[Snake]:
        return [s for s in self.snakes if s.alive]

    def started_snakes(self) -> List[Snake]:
        return [s for s in self.snakes if not s.is_idle]

    def next_pickup_id(self) -> int:
        pickup_id = self._next_pickup_id
        self._next_pickup_id += 1
        return pickup_id

    def next_obstacle_id(self) -> int:
        obstacle_id = self._next_obstacle_id
        self._next_obstacle_id += 1
        return obstacle_id

    def __repr__(self):
        return (
            f"<ArenaRound state={self.state} clock={self.clock:.2f} "
            f"alive={[s.slot for s in self.alive_snakes()]} pickups={len(self.pickups)} "
            f"obstacles={len(self.obstacles)} scores={self.scores}>"
        )
