"""
Snake Arena: a per-frame engine for up to four continuously moving snakes.

The host (a pygame window, a headless simulation, a replay renderer)
calls ArenaEngine.tick() once per frame and draws the FrameResult.
"""

from .config import ArenaConfig, load_config
from .domain.events import (
    ObstacleSpawned, PickupConsumed, PickupSpawned, PlayerStarted, RoundEnded, SnakeDied, SpawnSkipped,
)
from .domain.game_state import FrameResult, RenderEntity
from .domain.inputs import InputSnapshot, PlayerInput
from .engine import ArenaEngine
from .errors import ArenaError, ConfigError, InvalidSlotError
from .services.session_manager import StartOutcome

__version__ = "0.1.0"

__all__ = [
    'ArenaConfig', 'load_config',
    'ArenaEngine',
    'InputSnapshot', 'PlayerInput',
    'FrameResult', 'RenderEntity',
    'StartOutcome',
    'PlayerStarted', 'PickupSpawned', 'ObstacleSpawned', 'SpawnSkipped',
    'PickupConsumed', 'SnakeDied', 'RoundEnded',
    'ArenaError', 'ConfigError', 'InvalidSlotError',
]
