"""
Configuration for the Snake Arena engine.

Tuning defaults live in code as module constants. A deployment can
override any of them through ``SNAKE_ARENA_*`` environment variables
(or a ``.env`` file), e.g. ``SNAKE_ARENA_SEED=42`` or
``SNAKE_ARENA_OBSTACLE_EDGE=bounce``.
"""

import os
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .domain.constants import EDGE_WRAP, VALID_EDGE_POLICIES
from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SNAKE_ARENA_"

# Field, in virtual pixels, centred on the origin with y pointing up
FIELD_WIDTH = 1280.0
FIELD_HEIGHT = 720.0

# Snakes
SNAKE_SPEED = 100.0          # px per second
TURN_RATE = 3.0              # radians per second while a turn key is held
INITIAL_LENGTH = 30          # segments
SPAWN_SEGMENT_SPACING = SNAKE_SPEED / 60.0
HEAD_RADIUS = 9.0
BODY_RADIUS = 6.0
SELF_COLLISION_GRACE = 3
GROWTH_PER_PICKUP = 1
DEAD_LINGER_SECONDS = 5.0
RESTART_COOLDOWN = 1.0       # seconds after a round ends before a start key resets it

# Pickups
PICKUP_VALUE = 10
PICKUP_RADIUS = 10.0
PICKUP_INTERVAL = (2.0, 4.0)
MAX_PICKUPS = 8

# Obstacles
OBSTACLE_INTERVAL = (2.0, 10.0)
MAX_OBSTACLES = 10
OBSTACLE_BASE_RADIUS = 30.0
OBSTACLE_SCALE = (0.2, 1.2)
OBSTACLE_SPEED = 20.0        # px per second at scale 1.0

# Spawning
SPAWN_ATTEMPTS = 10
SPAWN_CLEARANCE = 20.0
SPAWN_MARGIN = 20.0


@dataclass(frozen=True)
class ArenaConfig:
    """
    All tunables of one arena.

    Attributes:
        field_width, field_height: playable area, centred on (0, 0)
        snake_speed: constant head speed in px/s
        turn_rate: angular speed in rad/s while turning
        initial_length: body segments a snake spawns with
        self_collision_grace: minimum own segments behind the head never tested
        growth_per_pickup: segments added per pickup eaten
        pickup_value: score awarded per pickup
        obstacle_edge: 'wrap', 'bounce' or 'respawn' at the field edge
        round_time_limit: seconds before a round ends regardless (0 disables)
        seed: seed for the shared random source (None picks one at random)
    """

    field_width: float = FIELD_WIDTH
    field_height: float = FIELD_HEIGHT

    snake_speed: float = SNAKE_SPEED
    turn_rate: float = TURN_RATE
    initial_length: int = INITIAL_LENGTH
    spawn_segment_spacing: float = SPAWN_SEGMENT_SPACING
    head_radius: float = HEAD_RADIUS
    body_radius: float = BODY_RADIUS
    self_collision_grace: int = SELF_COLLISION_GRACE
    growth_per_pickup: int = GROWTH_PER_PICKUP
    dead_linger_seconds: float = DEAD_LINGER_SECONDS
    restart_cooldown: float = RESTART_COOLDOWN

    pickup_value: int = PICKUP_VALUE
    pickup_radius: float = PICKUP_RADIUS
    pickup_interval_min: float = PICKUP_INTERVAL[0]
    pickup_interval_max: float = PICKUP_INTERVAL[1]
    max_pickups: int = MAX_PICKUPS

    obstacle_interval_min: float = OBSTACLE_INTERVAL[0]
    obstacle_interval_max: float = OBSTACLE_INTERVAL[1]
    max_obstacles: int = MAX_OBSTACLES
    obstacle_base_radius: float = OBSTACLE_BASE_RADIUS
    obstacle_scale_min: float = OBSTACLE_SCALE[0]
    obstacle_scale_max: float = OBSTACLE_SCALE[1]
    obstacle_speed: float = OBSTACLE_SPEED
    obstacle_edge: str = EDGE_WRAP

    spawn_attempts: int = SPAWN_ATTEMPTS
    spawn_clearance: float = SPAWN_CLEARANCE
    spawn_margin: float = SPAWN_MARGIN

    round_time_limit: float = 0.0
    seed: Optional[int] = None

    @property
    def half_width(self) -> float:
        return self.field_width / 2.0

    @property
    def half_height(self) -> float:
        return self.field_height / 2.0

    def validate(self) -> "ArenaConfig":
        """Raise ConfigError if the values cannot describe a playable arena."""
        if self.field_width <= 2 * self.spawn_margin or self.field_height <= 2 * self.spawn_margin:
            raise ConfigError("Field must be larger than twice the spawn margin")
        for name in ("snake_speed", "head_radius", "body_radius", "pickup_radius", "spawn_segment_spacing"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.max_pickups < 1:
            raise ConfigError("max_pickups must be at least 1")
        if self.max_obstacles < 0:
            raise ConfigError("max_obstacles must not be negative")
        if self.turn_rate < 0:
            raise ConfigError("turn_rate must not be negative")
        if self.initial_length < 1:
            raise ConfigError("initial_length must be at least 1")
        if self.growth_per_pickup < 0 or self.self_collision_grace < 0:
            raise ConfigError("growth_per_pickup and self_collision_grace must not be negative")
        if self.spawn_attempts < 1:
            raise ConfigError("spawn_attempts must be at least 1")
        for low, high, name in (
            (self.pickup_interval_min, self.pickup_interval_max, "pickup_interval"),
            (self.obstacle_interval_min, self.obstacle_interval_max, "obstacle_interval"),
            (self.obstacle_scale_min, self.obstacle_scale_max, "obstacle_scale"),
        ):
            if low <= 0 or low > high:
                raise ConfigError(f"{name} range must satisfy 0 < min <= max, got [{low}, {high}]")
        if self.obstacle_edge not in VALID_EDGE_POLICIES:
            raise ConfigError(
                f"obstacle_edge must be one of {sorted(VALID_EDGE_POLICIES)}, got {self.obstacle_edge!r}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArenaConfig":
        """Build a config from a dict, ignoring unknown keys (e.g. from an older replay)."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known}).validate()


def _coerce(name: str, raw: str, default: Any) -> Any:
    try:
        if name == "seed":
            return None if raw.strip().lower() in ("", "none", "random") else int(raw)
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
        return raw.strip()
    except ValueError as e:
        raise ConfigError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from e


def load_config(env_file: Optional[str] = None, **overrides: Any) -> ArenaConfig:
    """
    Build an ArenaConfig from defaults, the environment and explicit overrides.

    Args:
        env_file: optional path of a .env file to load first
        **overrides: field values that win over the environment

    Returns:
        ArenaConfig: a validated configuration

    Raises:
        ConfigError: if a value cannot be parsed or the result is inconsistent
    """
    load_dotenv(env_file)

    config = ArenaConfig()
    from_env: Dict[str, Any] = {}
    for f in fields(ArenaConfig):
        raw = os.getenv(ENV_PREFIX + f.name.upper())
        if raw is not None:
            from_env[f.name] = _coerce(f.name, raw, getattr(config, f.name))

    if from_env:
        logger.info("Config overrides from environment: %s", sorted(from_env))

    unknown = set(overrides) - {f.name for f in fields(ArenaConfig)}
    if unknown:
        raise ConfigError(f"Unknown config fields: {sorted(unknown)}")

    return replace(config, **{**from_env, **overrides}).validate()
