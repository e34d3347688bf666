"""
Snake entity for the arena engine.
"""

from collections import deque
from typing import Deque, List, Optional

from .constants import IDLE, ALIVE, DEAD, TURN_NONE, VALID_TURNS
from .geometry import Heading, Point, RIGHTWARD, advance, turn


class Snake:
    """
    One player's snake.

    Attributes:
        slot: player slot 0..3 this snake belongs to
        positions: deque of (x, y) from head at index 0 to tail at the end
        heading: unit vector the head moves along
        turn_intent: 'left', 'right' or 'none', set from input each frame
        state: 'idle', 'alive' or 'dead'
        pending_growth: segments still to be added by skipping tail pops
        death_reason: e.g. 'wall', 'obstacle', 'collision'
        death_time: round clock value when the snake died
        dead_for: seconds spent dead, drives clearing from the screen
        cleared: a dead snake that is no longer drawn
    """

    def __init__(self, slot: int):
        self.slot = slot
        self.positions: Deque[Point] = deque()
        self.heading: Heading = RIGHTWARD
        self.turn_intent = TURN_NONE
        self.state = IDLE
        self.pending_growth = 0
        self.death_reason: Optional[str] = None
        self.death_time: Optional[float] = None
        self.dead_for = 0.0
        self.cleared = False
        self._advanced = False

    @property
    def head(self) -> Point:
        """Return the head position (first element)."""
        return self.positions[0]

    @property
    def length(self) -> int:
        return len(self.positions)

    @property
    def alive(self) -> bool:
        return self.state == ALIVE

    @property
    def is_idle(self) -> bool:
        return self.state == IDLE

    @property
    def is_dead(self) -> bool:
        return self.state == DEAD

    def spawn(self, position: Point, heading: Heading, length: int, spacing: float) -> None:
        """
        Bring an idle snake to life with its body trailing straight behind the head.
        """
        assert self.state == IDLE, f"snake {self.slot} spawned from state {self.state}"
        assert length >= 1

        self.heading = heading
        self.positions = deque(
            (position[0] - heading[0] * spacing * i, position[1] - heading[1] * spacing * i)
            for i in range(length)
        )
        self.turn_intent = TURN_NONE
        self.pending_growth = 0
        self.state = ALIVE

    def steer(self, intent: str) -> None:
        if intent not in VALID_TURNS:
            raise ValueError(f"Invalid turn intent: {intent!r}")
        if self.alive:
            self.turn_intent = intent

    def update_heading(self, turn_rate: float, dt: float) -> None:
        if self.alive:
            self.heading = turn(self.heading, self.turn_intent, turn_rate, dt)

    def advance(self, speed: float, dt: float) -> Point:
        """Push a new head along the heading. The tail is handled by settle()."""
        assert self.alive and not self._advanced
        new_head = advance(self.head, self.heading, speed, dt)
        self.positions.appendleft(new_head)
        self._advanced = True
        return new_head

    def retract(self) -> None:
        """Undo this frame's advance so a dying snake freezes where it was."""
        if self._advanced:
            self.positions.popleft()
            self._advanced = False

    def grow(self, segments: int) -> None:
        assert segments >= 0
        self.pending_growth += segments

    def settle(self) -> None:
        """Finish the frame's move: keep the tail while growing, otherwise drop it."""
        if not self._advanced:
            return
        self._advanced = False
        if self.pending_growth > 0:
            self.pending_growth -= 1
        else:
            self.positions.pop()
        assert self.positions, f"snake {self.slot} lost its last segment"

    def kill(self, reason: str, clock: float) -> None:
        assert self.alive, f"snake {self.slot} killed from state {self.state}"
        self.retract()
        self.state = DEAD
        self.turn_intent = TURN_NONE
        self.pending_growth = 0
        self.death_reason = reason
        self.death_time = clock
        self.dead_for = 0.0

    def linger(self, dt: float, linger_seconds: float) -> None:
        """Count time spent dead and clear the body from the screen once it has lingered."""
        if self.is_dead and not self.cleared:
            self.dead_for += dt
            if self.dead_for >= linger_seconds:
                self.cleared = True

    def body(self) -> List[Point]:
        return list(self.positions)

    def __repr__(self):
        return (
            f"<Snake slot={self.slot} state={self.state} length={self.length} "
            f"heading=({self.heading[0]:.3f}, {self.heading[1]:.3f})>"
        )
