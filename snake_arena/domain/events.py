"""
Events emitted by one simulated frame.

The host uses them for sound effects and messages; the engine uses them
to apply buffered mutations after all collision tests of a frame.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .geometry import Point


@dataclass(frozen=True)
class PlayerStarted:
    slot: int


@dataclass(frozen=True)
class PickupSpawned:
    pickup_id: int
    position: Point


@dataclass(frozen=True)
class ObstacleSpawned:
    obstacle_id: int
    position: Point


@dataclass(frozen=True)
class SpawnSkipped:
    """No clear position was found within the retry budget."""

    kind: str
    attempts: int


@dataclass(frozen=True)
class PickupConsumed:
    snake_id: int
    pickup_id: int


@dataclass(frozen=True)
class SnakeDied:
    """
    A snake's head hit something fatal.

    other_id names the snake whose body was hit for 'collision' deaths
    (equal to snake_id for self-collision), otherwise None.
    """

    snake_id: int
    cause: str
    other_id: Optional[int] = None


@dataclass(frozen=True)
class RoundEnded:
    scores: Dict[int, int]


def event_to_dict(event: Any) -> Dict[str, Any]:
    """JSON-friendly form of an event, tagged with its type name."""
    data = asdict(event)
    data["type"] = type(event).__name__
    return data
