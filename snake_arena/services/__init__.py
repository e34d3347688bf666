"""
Services that run the rules of a round.

Each service receives the ArenaRound it works on explicitly and keeps
no entity state of its own.
"""

from .collision_resolver import CollisionResolver
from .session_manager import SessionManager, StartOutcome
from .spawner import Spawner

__all__ = [
    'CollisionResolver',
    'SessionManager',
    'StartOutcome',
    'Spawner',
]
