"""
Per-frame input snapshot handed to the engine by the host.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .constants import KEY_BINDINGS, MAX_PLAYERS, TURN_LEFT, TURN_RIGHT, TURN_NONE


@dataclass(frozen=True)
class PlayerInput:
    """Key state of one slot: left/right held, and a start edge this frame."""

    left: bool = False
    right: bool = False
    start: bool = False

    @property
    def turn_intent(self) -> str:
        # Both keys held cancel out
        if self.left and not self.right:
            return TURN_LEFT
        if self.right and not self.left:
            return TURN_RIGHT
        return TURN_NONE


@dataclass(frozen=True)
class InputSnapshot:
    players: Tuple[PlayerInput, ...] = tuple(PlayerInput() for _ in range(MAX_PLAYERS))

    def __post_init__(self):
        if len(self.players) != MAX_PLAYERS:
            raise ValueError(f"InputSnapshot needs exactly {MAX_PLAYERS} player inputs")

    def __getitem__(self, slot: int) -> PlayerInput:
        return self.players[slot]

    @classmethod
    def empty(cls) -> "InputSnapshot":
        return cls()

    @classmethod
    def from_keys(cls, held: Iterable[str], just_pressed: Iterable[str] = ()) -> "InputSnapshot":
        """
        Build a snapshot from key names.

        A slot's start edge is a fresh press of either of its two keys,
        mirroring how a waiting player joins by touching their controls.
        """
        held = {k.lower() for k in held}
        pressed = {k.lower() for k in just_pressed}
        players = []
        for slot in range(MAX_PLAYERS):
            left_key, right_key = KEY_BINDINGS[slot]
            players.append(PlayerInput(
                left=left_key in held,
                right=right_key in held,
                start=left_key in pressed or right_key in pressed,
            ))
        return cls(tuple(players))

    @classmethod
    def for_slots(cls, **by_slot: PlayerInput) -> "InputSnapshot":
        """Snapshot with selected slots set, e.g. for_slots(p0=PlayerInput(right=True))."""
        players = [PlayerInput() for _ in range(MAX_PLAYERS)]
        for name, player_input in by_slot.items():
            players[int(name.lstrip("p"))] = player_input
        return cls(tuple(players))

    def to_list(self) -> List[List[int]]:
        return [[int(p.left), int(p.right), int(p.start)] for p in self.players]

    @classmethod
    def from_list(cls, data: List[List[int]]) -> "InputSnapshot":
        return cls(tuple(PlayerInput(bool(l), bool(r), bool(s)) for l, r, s in data))
