"""
Pickup and obstacle entities.
"""

from dataclasses import dataclass

from .constants import PICKUP_GROWTH
from .geometry import Circle, Point, Velocity


@dataclass
class Pickup:
    """
    A consumable that grows the snake that eats it.

    Attributes:
        pickup_id: unique within the round
        position: centre of the pickup
        radius: collision radius
        value: score awarded when eaten
        kind: pickup type, only 'growth' for now
    """

    pickup_id: int
    position: Point
    radius: float
    value: int
    kind: str = PICKUP_GROWTH

    @property
    def circle(self) -> Circle:
        return Circle(self.position[0], self.position[1], self.radius)


@dataclass
class Obstacle:
    """
    A non-consumable hazard that drifts across the field.

    Attributes:
        obstacle_id: unique within the round
        position: centre of the obstacle
        velocity: px per second, may be (0, 0)
        radius: collision radius
        mass: relative weight used when two obstacles bounce off each other
    """

    obstacle_id: int
    position: Point
    velocity: Velocity
    radius: float
    mass: float = 1.0

    @property
    def circle(self) -> Circle:
        return Circle(self.position[0], self.position[1], self.radius)
