"""
Vector math and overlap tests for continuous snake motion.

Coordinates are virtual pixels with the origin at the centre of the field
and y pointing up. Headings are unit vectors; angles are radians measured
counter-clockwise from the +x axis.
"""

import math
from typing import NamedTuple, Tuple, Union

from .constants import TURN_RIGHT, TURN_NONE, VALID_TURNS

Point = Tuple[float, float]
Heading = Tuple[float, float]
Velocity = Tuple[float, float]

RIGHTWARD: Heading = (1.0, 0.0)


class Circle(NamedTuple):
    x: float
    y: float
    radius: float


Shape = Union[Circle, Point]


def heading_angle(heading: Heading) -> float:
    return math.atan2(heading[1], heading[0])


def angle_between(start: float, end: float) -> float:
    """Signed smallest rotation from start to end, in (-pi, pi]."""
    delta = math.fmod(end - start, 2 * math.pi)
    if delta <= -math.pi:
        delta += 2 * math.pi
    elif delta > math.pi:
        delta -= 2 * math.pi
    return delta


def advance(position: Point, heading: Heading, speed: float, dt: float) -> Point:
    """Move position along heading by speed * dt."""
    step = speed * dt
    return (position[0] + heading[0] * step, position[1] + heading[1] * step)


def turn(heading: Heading, direction: str, turn_rate: float, dt: float) -> Heading:
    """
    Rotate heading by turn_rate * dt in the given direction.

    'left' is counter-clockwise, 'right' clockwise. The result is
    renormalised so its magnitude stays 1 however many turns accumulate.
    """
    if direction not in VALID_TURNS:
        raise ValueError(f"Invalid turn direction: {direction!r}")
    if direction == TURN_NONE:
        return heading

    delta = turn_rate * dt
    if direction == TURN_RIGHT:
        delta = -delta

    cos_d = math.cos(delta)
    sin_d = math.sin(delta)
    hx = heading[0] * cos_d - heading[1] * sin_d
    hy = heading[0] * sin_d + heading[1] * cos_d
    norm = math.hypot(hx, hy)
    return (hx / norm, hy / norm)


def _center_and_radius(shape: Shape) -> Tuple[float, float, float]:
    if isinstance(shape, Circle):
        return shape.x, shape.y, shape.radius
    return shape[0], shape[1], 0.0


def segments_overlap(a: Shape, b: Shape, threshold: float = 0.0) -> bool:
    """
    True when a and b are within touching distance.

    Either argument may be a Circle or a bare (x, y) point (radius 0).
    Compares squared distance with (ra + rb + threshold) ** 2.
    """
    ax, ay, ar = _center_and_radius(a)
    bx, by, br = _center_and_radius(b)
    reach = ar + br + threshold
    dx = ax - bx
    dy = ay - by
    return dx * dx + dy * dy <= reach * reach


def distance_squared(a: Point, b: Point) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def in_bounds(position: Point, half_width: float, half_height: float) -> bool:
    return -half_width <= position[0] <= half_width and -half_height <= position[1] <= half_height


def wrap_position(position: Point, half_width: float, half_height: float) -> Point:
    """Jump to the opposite edge when position leaves the field."""
    x, y = position
    if x > half_width:
        x = -half_width
    elif x < -half_width:
        x = half_width
    if y > half_height:
        y = -half_height
    elif y < -half_height:
        y = half_height
    return (x, y)


def reflect_in_bounds(
    position: Point,
    velocity: Velocity,
    half_width: float,
    half_height: float
) -> Tuple[Point, Velocity]:
    """Mirror position and velocity back into the field on the axis that left it."""
    x, y = position
    vx, vy = velocity
    if x > half_width:
        x, vx = 2 * half_width - x, -abs(vx)
    elif x < -half_width:
        x, vx = -2 * half_width - x, abs(vx)
    if y > half_height:
        y, vy = 2 * half_height - y, -abs(vy)
    elif y < -half_height:
        y, vy = -2 * half_height - y, abs(vy)
    return (x, y), (vx, vy)


def elastic_bounce(
    pos_a: Point,
    vel_a: Velocity,
    mass_a: float,
    pos_b: Point,
    vel_b: Velocity,
    mass_b: float
) -> Tuple[Velocity, Velocity]:
    """
    Velocities of two discs after an elastic collision.

    The components along the line of centres are exchanged according to
    the masses; the tangential components are kept. Discs that are
    already separating (or exactly coincident) keep their velocities.
    """
    x = pos_a[0] - pos_b[0]
    y = pos_a[1] - pos_b[1]
    d = x * x + y * y
    if d == 0:
        return vel_a, vel_b

    # Separating already
    if (vel_a[0] - vel_b[0]) * x + (vel_a[1] - vel_b[1]) * y >= 0:
        return vel_a, vel_b

    # Normal (u1, u3) and tangential (u2, u4) components, scaled by 1/d
    u1 = (vel_a[0] * x + vel_a[1] * y) / d
    u2 = (x * vel_a[1] - y * vel_a[0]) / d
    u3 = (vel_b[0] * x + vel_b[1] * y) / d
    u4 = (x * vel_b[1] - y * vel_b[0]) / d

    total = mass_a + mass_b
    new_a = (mass_a - mass_b) / total * u1 + (2.0 * mass_b) / total * u3
    new_b = (mass_b - mass_a) / total * u3 + (2.0 * mass_a) / total * u1

    return (
        (x * new_a - y * u2, y * new_a + x * u2),
        (x * new_b - y * u4, y * new_b + x * u4),
    )
