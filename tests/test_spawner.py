"""
Tests for services/spawner.py - timed spawns and obstacle motion.
"""

import os
import random
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snake_arena.config import ArenaConfig  # noqa: E402
from snake_arena.domain.arena_round import ArenaRound  # noqa: E402
from snake_arena.domain.entities import Obstacle, Pickup  # noqa: E402
from snake_arena.domain.events import ObstacleSpawned, SpawnSkipped  # noqa: E402
from snake_arena.domain.geometry import RIGHTWARD, Circle, segments_overlap  # noqa: E402
from snake_arena.services.spawner import Spawner  # noqa: E402


def make(config=None, seed=1):
    config = config or ArenaConfig()
    arena_round = ArenaRound(random.Random(seed))
    spawner = Spawner(config)
    spawner.reset(arena_round)
    return config, arena_round, spawner


def add_obstacle(arena_round, position, velocity=(0.0, 0.0), radius=10.0):
    obstacle = Obstacle(arena_round.next_obstacle_id(), position, velocity, radius)
    arena_round.obstacles[obstacle.obstacle_id] = obstacle
    return obstacle


class TestSpawnTimers:
    """Tests for Spawner.tick()."""

    def test_nothing_before_first_interval(self):
        _, arena_round, spawner = make()
        assert spawner.tick(1.0, arena_round) == ([], [])

    def test_spawns_when_due(self):
        _, arena_round, spawner = make()
        pickups, obstacles = spawner.tick(20.0, arena_round)
        assert len(pickups) == 1
        assert len(obstacles) == 1
        # The caller inserts them
        assert arena_round.pickups == {}

    def test_same_seed_same_spawns(self):
        _, first_round, first = make(seed=9)
        _, second_round, second = make(seed=9)
        assert first.tick(20.0, first_round) == second.tick(20.0, second_round)

    def test_respects_caps(self):
        _, arena_round, spawner = make(ArenaConfig(max_pickups=1, max_obstacles=0))
        existing = Pickup(arena_round.next_pickup_id(), (0.0, 0.0), 10.0, 10)
        arena_round.pickups[existing.pickup_id] = existing
        assert spawner.tick(20.0, arena_round) == ([], [])

    def test_obstacle_size_and_speed_follow_scale(self):
        config, arena_round, spawner = make()
        obstacle = spawner.spawn_obstacle(arena_round)
        scale = obstacle.mass
        assert config.obstacle_scale_min <= scale <= config.obstacle_scale_max
        assert obstacle.radius == pytest.approx(config.obstacle_base_radius * scale)
        max_speed = config.obstacle_speed / scale
        assert abs(obstacle.velocity[0]) <= max_speed
        assert abs(obstacle.velocity[1]) <= max_speed


class TestClearPositions:
    """Tests for spawn clearance."""

    def test_pickups_keep_clear_of_snakes(self):
        config, arena_round, spawner = make(ArenaConfig(max_pickups=100))
        snake = arena_round.snakes[0]
        snake.spawn((-200.0, 0.0), RIGHTWARD, 200, 2.0)

        for _ in range(30):
            pickup = spawner.spawn_pickup(arena_round)
            if pickup is None:
                continue
            for segment in snake.positions:
                assert not segments_overlap(
                    pickup.circle, Circle(segment[0], segment[1], config.body_radius), config.spawn_clearance
                )
            arena_round.pickups[pickup.pickup_id] = pickup

    def test_skips_when_field_is_full(self):
        """When every attempt is blocked the spawn is skipped and recorded."""
        config, arena_round, spawner = make()
        add_obstacle(arena_round, (0.0, 0.0), radius=2000.0)

        assert spawner.spawn_pickup(arena_round) is None
        assert spawner.skipped == [SpawnSkipped(kind="pickup", attempts=config.spawn_attempts)]


class TestObstacleMotion:
    """Tests for Spawner.move_obstacles()."""

    def test_wrap_edge(self):
        _, arena_round, spawner = make(ArenaConfig(obstacle_edge="wrap"))
        obstacle = add_obstacle(arena_round, (639.0, 0.0), velocity=(100.0, 0.0))
        spawner.move_obstacles(arena_round, 0.1)
        assert obstacle.position == (-640.0, 0.0)
        assert obstacle.velocity == (100.0, 0.0)

    def test_bounce_edge(self):
        _, arena_round, spawner = make(ArenaConfig(obstacle_edge="bounce"))
        obstacle = add_obstacle(arena_round, (639.0, 0.0), velocity=(100.0, 0.0))
        spawner.move_obstacles(arena_round, 0.1)
        assert obstacle.position == pytest.approx((631.0, 0.0))
        assert obstacle.velocity == (-100.0, 0.0)

    def test_respawn_edge(self):
        _, arena_round, spawner = make(ArenaConfig(obstacle_edge="respawn"))
        add_obstacle(arena_round, (639.0, 0.0), velocity=(100.0, 0.0))
        events = spawner.move_obstacles(arena_round, 0.1)

        assert 0 not in arena_round.obstacles
        assert list(arena_round.obstacles) == [1]
        assert events == [ObstacleSpawned(1, arena_round.obstacles[1].position)]

    def test_overlapping_obstacles_bounce(self):
        _, arena_round, spawner = make()
        first = add_obstacle(arena_round, (0.0, 0.0), velocity=(5.0, 0.0))
        second = add_obstacle(arena_round, (10.0, 0.0), velocity=(-5.0, 0.0))
        spawner.move_obstacles(arena_round, 0.0)
        assert first.velocity == pytest.approx((-5.0, 0.0))
        assert second.velocity == pytest.approx((5.0, 0.0))

    def test_distant_obstacles_keep_velocity(self):
        _, arena_round, spawner = make()
        first = add_obstacle(arena_round, (-100.0, 0.0), velocity=(5.0, 0.0))
        spawner.move_obstacles(arena_round, 1.0)
        assert first.position == (-95.0, 0.0)
        assert first.velocity == (5.0, 0.0)
