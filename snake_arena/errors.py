"""
Exceptions raised by the Snake Arena core.
"""


class ArenaError(Exception):
    """Base class for all Snake Arena errors."""


class InvalidSlotError(ArenaError, ValueError):
    """A player slot outside 0..MAX_PLAYERS-1 was referenced."""

    def __init__(self, slot):
        self.slot = slot
        super().__init__(f"Invalid player slot: {slot!r}")


class ConfigError(ArenaError, ValueError):
    """A configuration value is missing, malformed or inconsistent."""
