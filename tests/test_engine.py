"""
Tests for engine.py and services/session_manager.py - the per-frame driver.

These tests pin down the frame order (turn, move, resolve, apply, settle,
spawn, round end) and the round lifecycle as seen by a host.
"""

import json
import os
import random
import sys
from collections import Counter

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snake_arena import ArenaConfig, ArenaEngine, InputSnapshot, PlayerInput, StartOutcome  # noqa: E402
from snake_arena.domain.arena_round import ArenaRound  # noqa: E402
from snake_arena.domain.entities import Obstacle, Pickup  # noqa: E402
from snake_arena.domain.events import (  # noqa: E402
    PickupConsumed, PlayerStarted, RoundEnded, SnakeDied,
)
from snake_arena.domain.geometry import angle_between, heading_angle  # noqa: E402
from snake_arena.services.session_manager import SessionManager  # noqa: E402

DT = 0.016
IDLE_INPUT = InputSnapshot.empty()


def quiet_config(**changes):
    """A config whose spawner never fires within a test."""
    values = dict(
        pickup_interval_min=1000.0,
        pickup_interval_max=1000.0,
        obstacle_interval_min=1000.0,
        obstacle_interval_max=1000.0,
        seed=1,
    )
    values.update(changes)
    return ArenaConfig(**values)


def block_head(engine, slot, radius=20.0):
    """Park a still obstacle on a snake's head so it dies next frame."""
    arena_round = engine.arena_round
    obstacle = Obstacle(arena_round.next_obstacle_id(), arena_round.snakes[slot].head, (0.0, 0.0), radius)
    arena_round.obstacles[obstacle.obstacle_id] = obstacle
    return obstacle


class TestStartPlayer:
    """Tests for joining a round."""

    def test_first_start_begins_round(self):
        engine = ArenaEngine(quiet_config())
        assert engine.round_state == "waiting"
        assert engine.start_player(0) is StartOutcome.STARTED
        assert engine.round_state == "in_progress"

        snake = engine.arena_round.snakes[0]
        assert snake.head == (-320.0, 216.0)
        assert snake.heading == (1.0, 0.0)
        assert snake.length == 30

    def test_start_positions_are_distinct(self):
        session = SessionManager(ArenaConfig())
        positions = [session.start_position(slot) for slot in range(4)]
        assert len(set(positions)) == 4
        assert all(x == -320.0 for x, _ in positions)

    @pytest.mark.parametrize("slot", [-1, 4, 99, "1", True, None])
    def test_invalid_slot_is_rejected(self, slot):
        engine = ArenaEngine(quiet_config())
        assert engine.start_player(slot) is StartOutcome.INVALID_SLOT
        assert engine.round_state == "waiting"
        assert all(s.is_idle for s in engine.arena_round.snakes)

    def test_duplicate_start_is_ignored(self):
        engine = ArenaEngine(quiet_config())
        engine.start_player(1)
        head = engine.arena_round.snakes[1].head
        assert engine.start_player(1) is StartOutcome.ALREADY_ALIVE
        assert engine.arena_round.snakes[1].head == head

    def test_eliminated_player_stays_out(self):
        engine = ArenaEngine(quiet_config())
        engine.start_player(0)
        engine.start_player(1)
        block_head(engine, 0)
        engine.tick(IDLE_INPUT, DT)
        assert engine.start_player(0) is StartOutcome.ELIMINATED

    def test_start_signal_from_inputs(self):
        engine = ArenaEngine(quiet_config())
        result = engine.tick(InputSnapshot.from_keys(set(), {"u"}), DT)
        assert result.events_of(PlayerStarted) == [PlayerStarted(2)]
        assert result.slot_states == {0: "idle", 1: "idle", 2: "alive", 3: "idle"}


class TestTick:
    """Tests for ArenaEngine.tick()."""

    def test_negative_dt_raises(self):
        engine = ArenaEngine(quiet_config())
        with pytest.raises(ValueError):
            engine.tick(IDLE_INPUT, -0.01)

    def test_waiting_round_does_not_advance(self):
        engine = ArenaEngine(quiet_config())
        result = engine.tick(IDLE_INPUT, DT)
        assert result.clock == 0.0
        assert result.entities == []

    def test_holding_right_turns_clockwise(self):
        """100 frames of right at 0.016s rotate the heading by -turn_rate * 1.6."""
        engine = ArenaEngine(quiet_config())
        engine.start_player(0)
        snake = engine.arena_round.snakes[0]
        held_right = InputSnapshot.for_slots(p0=PlayerInput(right=True))

        for _ in range(100):
            engine.tick(held_right, DT)
            assert snake.length == 30

        assert snake.alive
        turned = angle_between(0.0, heading_angle(snake.heading))
        assert turned == pytest.approx(angle_between(0.0, -3.0 * 1.6), abs=1e-9)

    def test_zero_dt_keeps_head_in_place(self):
        engine = ArenaEngine(quiet_config())
        engine.start_player(0)
        snake = engine.arena_round.snakes[0]
        head = snake.head
        engine.tick(InputSnapshot.for_slots(p0=PlayerInput(left=True)), 0.0)
        assert snake.head == head
        assert snake.length == 30
        assert snake.heading == (1.0, 0.0)

    def test_pickup_at_next_head_is_consumed(self):
        """The tail is kept on the frame the pickup is eaten."""
        engine = ArenaEngine(quiet_config())
        engine.start_player(0)
        arena_round = engine.arena_round
        pickup = Pickup(arena_round.next_pickup_id(), (-320.0 + 100.0 * DT, 216.0), 10.0, 10)
        arena_round.pickups[pickup.pickup_id] = pickup

        result = engine.tick(IDLE_INPUT, DT)

        assert result.events_of(PickupConsumed) == [PickupConsumed(snake_id=0, pickup_id=pickup.pickup_id)]
        assert result.scores[0] == 10
        assert result.lengths[0] == 31
        assert arena_round.pickups == {}

        result = engine.tick(IDLE_INPUT, DT)
        assert result.lengths[0] == 31

    def test_all_snakes_dead_ends_round(self):
        engine = ArenaEngine(quiet_config())
        for slot in range(4):
            engine.start_player(slot)
            block_head(engine, slot)

        result = engine.tick(IDLE_INPUT, DT)

        deaths = result.events_of(SnakeDied)
        assert sorted(d.snake_id for d in deaths) == [0, 1, 2, 3]
        assert all(count == 1 for count in Counter(d.snake_id for d in deaths).values())
        assert result.events_of(RoundEnded) == [RoundEnded(scores={0: 0, 1: 0, 2: 0, 3: 0})]
        assert result.round_state == "ended"
        assert engine.arena_round.end_reason == "all snakes dead"

    def test_reset_round_clears_everything(self):
        engine = ArenaEngine(quiet_config())
        engine.start_player(0)
        engine.arena_round.scores[0] = 30
        block_head(engine, 0)
        engine.tick(IDLE_INPUT, DT)

        engine.reset_round()
        result = engine.tick(IDLE_INPUT, DT)

        assert result.round_state == "waiting"
        assert result.entities == []
        assert result.scores == {0: 0, 1: 0, 2: 0, 3: 0}
        assert set(result.slot_states.values()) == {"idle"}

    def test_time_limit_ends_round(self):
        engine = ArenaEngine(quiet_config(round_time_limit=1.0))
        engine.start_player(0)
        engine.tick(IDLE_INPUT, 0.5)
        result = engine.tick(IDLE_INPUT, 0.5)
        assert result.round_state == "ended"
        assert engine.arena_round.end_reason == "time limit"
        assert result.slot_states[0] == "alive"

    def test_restart_needs_cooldown(self):
        engine = ArenaEngine(quiet_config())
        engine.start_player(0)
        block_head(engine, 0)
        engine.tick(IDLE_INPUT, DT)
        press = InputSnapshot.from_keys(set(), {"q"})

        result = engine.tick(press, 0.5)
        assert result.round_state == "ended"

        result = engine.tick(press, 0.6)
        assert result.round_state == "in_progress"
        assert result.events_of(PlayerStarted) == [PlayerStarted(0)]
        assert result.slot_states[0] == "alive"

    def test_dead_snake_lingers_then_clears(self):
        engine = ArenaEngine(quiet_config())
        engine.start_player(0)
        engine.start_player(1)
        block_head(engine, 0)

        result = engine.tick(IDLE_INPUT, 0.5)
        heads = {e.slot: e for e in result.entities_of("snake_head")}
        assert heads[0].alive is False
        assert heads[1].alive is True

        for _ in range(9):
            result = engine.tick(IDLE_INPUT, 0.5)
        assert [e.slot for e in result.entities_of("snake_head")] == [1]

    def test_render_entities(self):
        engine = ArenaEngine(quiet_config())
        engine.start_player(3)
        result = engine.tick(IDLE_INPUT, DT)
        heads = result.entities_of("snake_head")
        bodies = result.entities_of("snake_body")
        assert len(heads) == 1
        assert heads[0].radius == 9.0
        assert heads[0].angle == 0.0
        assert len(bodies) == 29
        assert all(b.slot == 3 and b.radius == 6.0 for b in bodies)

    def test_same_seed_same_game(self):
        """Two engines with one seed and one input script produce identical frames."""

        def run(seed):
            engine = ArenaEngine(ArenaConfig(), seed=seed)
            script = random.Random(99)
            frames = []
            for frame in range(900):
                keys = {script.choice(["q", "w", "f", "g", "u", "i", "k", "l"]) for _ in range(3)}
                pressed = {"q", "f", "u", "k"} if frame == 0 else set()
                frames.append(engine.tick(InputSnapshot.from_keys(keys, pressed), DT).to_dict())
            return frames

        first = run(5)
        assert first == run(5)
        assert json.dumps(first)


class TestSessionManager:
    """Tests for SessionManager rules outside the engine."""

    def test_apply_pickup_grows_and_scores(self):
        config = ArenaConfig(growth_per_pickup=2)
        session = SessionManager(config)
        arena_round = ArenaRound(random.Random(0))
        session.start_player(arena_round, 0)
        pickup = Pickup(arena_round.next_pickup_id(), (0.0, 0.0), 10.0, 10)
        arena_round.pickups[pickup.pickup_id] = pickup

        session.apply_events(arena_round, [PickupConsumed(snake_id=0, pickup_id=pickup.pickup_id)])

        assert arena_round.snakes[0].pending_growth == 2
        assert arena_round.scores[0] == 10
        assert arena_round.pickups == {}

    def test_kill_is_applied(self):
        session = SessionManager(ArenaConfig())
        arena_round = ArenaRound(random.Random(0))
        session.start_player(arena_round, 2)
        arena_round.clock = 3.0

        session.apply_events(arena_round, [SnakeDied(snake_id=2, cause="obstacle")])

        snake = arena_round.snakes[2]
        assert snake.is_dead
        assert snake.death_reason == "obstacle"
        assert snake.death_time == 3.0

    def test_round_end_reported_once(self):
        session = SessionManager(ArenaConfig())
        arena_round = ArenaRound(random.Random(0))
        session.start_player(arena_round, 0)
        arena_round.snakes[0].kill("wall", 0.0)

        assert session.check_round_end(arena_round) == RoundEnded(scores={0: 0, 1: 0, 2: 0, 3: 0})
        assert session.check_round_end(arena_round) is None

    def test_waiting_round_never_ends(self):
        session = SessionManager(ArenaConfig())
        assert session.check_round_end(ArenaRound(random.Random(0))) is None

    def test_start_after_end_is_refused(self):
        session = SessionManager(ArenaConfig())
        arena_round = ArenaRound(random.Random(0))
        arena_round.state = "ended"
        assert session.start_player(arena_round, 0) is StartOutcome.ROUND_OVER


class TestArenaRound:
    """Tests for ArenaRound slot lookups."""

    def test_invalid_slot_error(self):
        from snake_arena.errors import ArenaError, InvalidSlotError

        arena_round = ArenaRound(random.Random(0))
        with pytest.raises(InvalidSlotError) as excinfo:
            arena_round.snake(4)
        assert isinstance(excinfo.value, ValueError)
        assert isinstance(excinfo.value, ArenaError)
        assert excinfo.value.slot == 4
        assert str(excinfo.value) == "Invalid player slot: 4"

    def test_ids_are_unique_and_increasing(self):
        arena_round = ArenaRound(random.Random(0))
        assert [arena_round.next_pickup_id() for _ in range(3)] == [0, 1, 2]
        assert arena_round.next_obstacle_id() == 0
