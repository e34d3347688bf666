"""
FrameResult - what the engine hands back to the host after each frame.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import KIND_SNAKE_HEAD, KIND_SNAKE_BODY, KIND_PICKUP, KIND_OBSTACLE
from .events import event_to_dict


@dataclass(frozen=True)
class RenderEntity:
    """
    One drawable thing.

    Attributes:
        kind: 'snake_head', 'snake_body', 'pickup' or 'obstacle'
        entity_id: slot for snake parts, pickup/obstacle id otherwise
        slot: owning player slot for snake parts, None otherwise
        x, y: centre in field coordinates
        angle: orientation in radians (heading for snake heads, 0 otherwise)
        radius: collision radius, the host scales sprites from it
        alive: False for the frozen body of a dead snake
    """

    kind: str
    entity_id: int
    slot: Optional[int]
    x: float
    y: float
    angle: float = 0.0
    radius: float = 0.0
    alive: bool = True


@dataclass
class FrameResult:
    """
    A snapshot of the arena after one frame.

    Attributes:
        frame_number: frames simulated since the engine was created
        clock: seconds since the current round started
        round_state: 'waiting', 'in_progress' or 'ended'
        entities: everything to draw this frame
        events: events emitted this frame, in emission order
        scores: slot -> score
        slot_states: slot -> 'idle', 'alive' or 'dead'
        width, height: field size
    """

    frame_number: int
    clock: float
    round_state: str
    entities: List[RenderEntity]
    events: List[Any]
    scores: Dict[int, int]
    slot_states: Dict[int, str]
    width: float
    height: float
    lengths: Dict[int, int] = field(default_factory=dict)

    def entities_of(self, kind: str) -> List[RenderEntity]:
        return [e for e in self.entities if e.kind == kind]

    def events_of(self, event_type: type) -> List[Any]:
        return [e for e in self.events if isinstance(e, event_type)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_number": self.frame_number,
            "clock": self.clock,
            "round_state": self.round_state,
            "scores": {str(k): v for k, v in self.scores.items()},
            "slot_states": {str(k): v for k, v in self.slot_states.items()},
            "lengths": {str(k): v for k, v in self.lengths.items()},
            "entities": [
                [e.kind, e.entity_id, e.slot, e.x, e.y, e.angle, e.radius, e.alive]
                for e in self.entities
            ],
            "events": [event_to_dict(e) for e in self.events],
        }

    def render_ascii(self, cols: int = 64, rows: int = 24) -> str:
        """
        Returns a coarse text picture of the field with:
        . = empty space
        * = pickup
        O = obstacle
        b = body of a dead snake
        # = snake body
        0,1,2,3 = snake head (showing slot number)
        Rows are printed top (max y) to bottom.
        """
        board = [['.' for _ in range(cols)] for _ in range(rows)]
        half_w = self.width / 2.0
        half_h = self.height / 2.0

        def cell(x: float, y: float):
            cx = int((x + half_w) / self.width * cols)
            cy = int((y + half_h) / self.height * rows)
            return min(max(cx, 0), cols - 1), min(max(cy, 0), rows - 1)

        # Draw order matters: heads go last so they stay visible
        order = {KIND_PICKUP: 0, KIND_OBSTACLE: 1, KIND_SNAKE_BODY: 2, KIND_SNAKE_HEAD: 3}
        for entity in sorted(self.entities, key=lambda e: order.get(e.kind, 0)):
            cx, cy = cell(entity.x, entity.y)
            if entity.kind == KIND_PICKUP:
                mark = '*'
            elif entity.kind == KIND_OBSTACLE:
                mark = 'O'
            elif entity.kind == KIND_SNAKE_HEAD:
                mark = str(entity.slot)
            else:
                mark = '#' if entity.alive else 'b'
            board[cy][cx] = mark

        result = [''.join(board[y]) for y in range(rows - 1, -1, -1)]
        result.append(
            "  ".join(f"P{slot}: {score}" for slot, score in sorted(self.scores.items()))
            + f"  [{self.round_state}]"
        )
        return "\n".join(result)

    def __repr__(self):
        return (
            f"<FrameResult frame={self.frame_number} state={self.round_state} "
            f"entities={len(self.entities)} events={len(self.events)} scores={self.scores}>"
        )
