"""
Domain entities for the Snake Arena engine.

This module contains the core game entities and math that are
independent of the host (window, input devices, rendering, audio).
"""

from .constants import (
    MAX_PLAYERS, KEY_BINDINGS,
    TURN_LEFT, TURN_RIGHT, TURN_NONE,
    IDLE, ALIVE, DEAD,
    CAUSE_WALL, CAUSE_OBSTACLE, CAUSE_COLLISION,
    ROUND_WAITING, ROUND_IN_PROGRESS, ROUND_ENDED,
)
from .geometry import Circle, advance, turn, segments_overlap
from .snake import Snake
from .entities import Pickup, Obstacle
from .events import (
    PlayerStarted, PickupSpawned, ObstacleSpawned, SpawnSkipped,
    PickupConsumed, SnakeDied, RoundEnded,
)
from .inputs import PlayerInput, InputSnapshot
from .arena_round import ArenaRound
from .game_state import FrameResult, RenderEntity

__all__ = [
    'MAX_PLAYERS', 'KEY_BINDINGS',
    'TURN_LEFT', 'TURN_RIGHT', 'TURN_NONE',
    'IDLE', 'ALIVE', 'DEAD',
    'CAUSE_WALL', 'CAUSE_OBSTACLE', 'CAUSE_COLLISION',
    'ROUND_WAITING', 'ROUND_IN_PROGRESS', 'ROUND_ENDED',
    'Circle', 'advance', 'turn', 'segments_overlap',
    'Snake',
    'Pickup', 'Obstacle',
    'PlayerStarted', 'PickupSpawned', 'ObstacleSpawned', 'SpawnSkipped',
    'PickupConsumed', 'SnakeDied', 'RoundEnded',
    'PlayerInput', 'InputSnapshot',
    'ArenaRound',
    'FrameResult', 'RenderEntity',
]
